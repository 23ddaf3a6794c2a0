"""
Shared store primitives used by the per-entity repository modules.

Every function takes the active UnitOfWork first and checks for
cancellation before touching the session.
"""

from __future__ import annotations

from typing import Any

from ..errors import NotFoundError


def insert(uow, obj):
    uow.checkpoint()
    uow.session.add(obj)
    uow.session.flush()
    return obj


def update(uow, obj):
    uow.checkpoint()
    uow.session.add(obj)
    uow.session.flush()
    return obj


def find_by_id(uow, model, entity_id: int):
    uow.checkpoint()
    return uow.session.get(model, entity_id)


def get_by_id(uow, model, entity_id: int, label: str):
    """find_by_id that raises NotFoundError instead of returning None."""
    obj = find_by_id(uow, model, entity_id)
    if obj is None:
        raise NotFoundError(f"{label} not found", details={"id": entity_id})
    return obj


def find_all(uow, model) -> list:
    uow.checkpoint()
    return uow.session.query(model).order_by(model.id.asc()).all()


def find_where(
    uow,
    model,
    criteria: dict[str, Any],
    *,
    limit: int | None = None,
    offset: int | None = None,
) -> list:
    """
    Equality search over mapped columns, ordered by id.

    A list/tuple/set value matches any of its members.
    """
    uow.checkpoint()
    columns = model.__mapper__.columns
    query = uow.session.query(model)
    for key, value in criteria.items():
        if key not in columns:
            raise ValueError(f"Unknown {model.__tablename__} column: {key}")
        column = getattr(model, key)
        if isinstance(value, (list, tuple, set)):
            query = query.filter(column.in_(list(value)))
        else:
            query = query.filter(column == value)
    query = query.order_by(model.id.asc())
    if offset:
        query = query.offset(offset)
    if limit is not None:
        query = query.limit(limit)
    return query.all()


def delete_by_id(uow, model, entity_id: int, label: str) -> None:
    obj = get_by_id(uow, model, entity_id, label)
    uow.session.delete(obj)
    uow.session.flush()
