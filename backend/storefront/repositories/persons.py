from __future__ import annotations

from ..errors import NotFoundError
from ..models import Person
from . import _crud


def insert(uow, person: Person) -> Person:
    return _crud.insert(uow, person)


def find_by_id(uow, person_id: int) -> Person | None:
    return _crud.find_by_id(uow, Person, person_id)


def get_by_id(uow, person_id: int) -> Person:
    """Active (not soft-deleted) person or NotFoundError."""
    person = find_by_id(uow, person_id)
    if person is None or person.deleted_at is not None:
        raise NotFoundError("Person not found", details={"id": person_id})
    return person


def find_by_user_login(uow, user_login: str) -> Person | None:
    uow.checkpoint()
    return (
        uow.session.query(Person)
        .filter(Person.user_login == user_login, Person.deleted_at.is_(None))
        .first()
    )


def find_where(uow, **criteria) -> list[Person]:
    return _crud.find_where(uow, Person, criteria)


def update(uow, person: Person) -> Person:
    return _crud.update(uow, person)


def find_all(uow) -> list[Person]:
    return _crud.find_all(uow, Person)


def delete_by_id(uow, person_id: int) -> None:
    _crud.delete_by_id(uow, Person, person_id, "Person")
