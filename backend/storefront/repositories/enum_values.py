from __future__ import annotations

from ..models import Enumeration, EnumValue
from . import _crud


def find_by_codes(uow, enum_code: str, value_code: str) -> EnumValue | None:
    uow.checkpoint()
    return (
        uow.session.query(EnumValue)
        .join(Enumeration, EnumValue.enum_id == Enumeration.id)
        .filter(Enumeration.code == enum_code, EnumValue.code == value_code)
        .first()
    )


def find_by_id(uow, value_id: int) -> EnumValue | None:
    return _crud.find_by_id(uow, EnumValue, value_id)


def find_enum_by_code(uow, enum_code: str) -> Enumeration | None:
    uow.checkpoint()
    return uow.session.query(Enumeration).filter_by(code=enum_code).first()


def insert_enum(uow, enumeration: Enumeration) -> Enumeration:
    return _crud.insert(uow, enumeration)


def insert(uow, value: EnumValue) -> EnumValue:
    return _crud.insert(uow, value)


def find_all(uow) -> list[EnumValue]:
    return _crud.find_all(uow, EnumValue)
