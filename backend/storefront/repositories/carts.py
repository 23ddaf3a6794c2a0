from __future__ import annotations

from ..models import Cart
from . import _crud


def insert(uow, cart: Cart) -> Cart:
    return _crud.insert(uow, cart)


def find_by_id(uow, cart_id: int) -> Cart | None:
    return _crud.find_by_id(uow, Cart, cart_id)


def get_by_id(uow, cart_id: int) -> Cart:
    return _crud.get_by_id(uow, Cart, cart_id, "Cart")


def find_by_person_id(uow, person_id: int) -> Cart | None:
    uow.checkpoint()
    return uow.session.query(Cart).filter_by(person_id=person_id).first()


def find_all(uow) -> list[Cart]:
    return _crud.find_all(uow, Cart)


def find_where(uow, **criteria) -> list[Cart]:
    return _crud.find_where(uow, Cart, criteria)


def delete_by_id(uow, cart_id: int) -> None:
    _crud.delete_by_id(uow, Cart, cart_id, "Cart")


def update(uow, cart: Cart) -> Cart:
    return _crud.update(uow, cart)
