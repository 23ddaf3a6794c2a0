# Overview: Service-layer operations for persons (clients and managers).

from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..errors import ConflictError, ValidationError
from ..models import Person
from ..repositories import persons as person_repo
from .unit_of_work import CancelToken, UnitOfWork, with_transaction


def create_person(
    user_login: str,
    *,
    firstname: str | None = None,
    lastname: str | None = None,
    phone: str | None = None,
    uow: UnitOfWork | None = None,
    cancel_token: CancelToken | None = None,
) -> Person:
    """
    Register a person under an identity-provider login.

    Raises:
        ValidationError: Empty login
        ConflictError: Login already registered (including soft-deleted persons)
    """
    user_login = (user_login or "").strip()
    if not user_login:
        raise ValidationError("user_login is required")

    def _op(u: UnitOfWork) -> Person:
        if person_repo.find_where(u, user_login=user_login):
            raise ConflictError("user_login already registered", details={"user_login": user_login})
        try:
            person = person_repo.insert(u, Person(
                user_login=user_login,
                firstname=firstname,
                lastname=lastname,
                phone=phone,
            ))
        except IntegrityError as exc:
            raise ConflictError("user_login already registered", details={"user_login": user_login}) from exc
        current_app.logger.info("Person %s registered as '%s'", person.id, user_login)
        return person

    return with_transaction(_op, uow, cancel_token=cancel_token)


def find_by_login(user_login: str, *, uow: UnitOfWork | None = None) -> Person | None:
    return with_transaction(lambda u: person_repo.find_by_user_login(u, user_login), uow, write=False)


def get_person(person_id: int, *, uow: UnitOfWork | None = None) -> Person:
    return with_transaction(lambda u: person_repo.get_by_id(u, person_id), uow, write=False)
