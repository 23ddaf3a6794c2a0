# Overview: Service-layer seeding and inspection of the reference (enum) tables.

"""
Reference data

The workflow resolves every status through enumerations/enum_values. This
module creates the rows it depends on. Seeding is idempotent: existing
enumerations and values are left untouched, missing ones are added.
"""

from __future__ import annotations

from flask import current_app

from ..models import Enumeration, EnumValue
from ..repositories import enum_values as enum_value_repo
from .status_catalog import STATUS_DOMAINS, STATUS_LABELS, StatusDomain
from .unit_of_work import UnitOfWork, with_transaction


def _label_of(member: StatusDomain) -> str:
    # "InProgress" -> "In progress"
    chars = []
    for i, ch in enumerate(member.value):
        if ch.isupper() and i:
            chars.append(" " + ch.lower())
        else:
            chars.append(ch)
    return "".join(chars)


def seed_statuses(domains=STATUS_DOMAINS, *, uow: UnitOfWork | None = None) -> int:
    """
    Create the enumerations and values for every status domain.

    Returns:
        Number of enum values created (0 when already seeded)
    """
    def _op(u: UnitOfWork) -> int:
        created = 0
        for domain in domains:
            enumeration = enum_value_repo.find_enum_by_code(u, domain.enum_code())
            if enumeration is None:
                enumeration = enum_value_repo.insert_enum(u, Enumeration(
                    code=domain.enum_code(),
                    label=STATUS_LABELS.get(domain, domain.enum_code()),
                ))
            existing = {value.code for value in enumeration.values}
            for member in domain:
                if member.value in existing:
                    continue
                enum_value_repo.insert(u, EnumValue(
                    enum_id=enumeration.id,
                    code=member.value,
                    label=_label_of(member),
                ))
                created += 1
        if created:
            current_app.logger.info("Seeded %s status value(s)", created)
        return created

    return with_transaction(_op, uow)


def list_statuses(*, uow: UnitOfWork | None = None) -> list[tuple[str, str, int]]:
    """(enum code, value code, id) for every stored enum value."""
    def _op(u: UnitOfWork) -> list[tuple[str, str, int]]:
        return [(value.enum.code, value.code, value.id) for value in enum_value_repo.find_all(u)]

    return with_transaction(_op, uow, write=False)
