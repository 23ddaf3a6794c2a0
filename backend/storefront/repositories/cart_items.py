from __future__ import annotations

from ..models import CartItem
from . import _crud


def insert(uow, cart_item: CartItem) -> CartItem:
    return _crud.insert(uow, cart_item)


def update(uow, cart_item: CartItem) -> CartItem:
    return _crud.update(uow, cart_item)


def find_by_id(uow, cart_item_id: int) -> CartItem | None:
    return _crud.find_by_id(uow, CartItem, cart_item_id)


def get_by_id(uow, cart_item_id: int) -> CartItem:
    return _crud.get_by_id(uow, CartItem, cart_item_id, "Cart item")


def find_by_ids(uow, cart_item_ids: list[int]) -> list[CartItem]:
    return _crud.find_where(uow, CartItem, {"id": cart_item_ids})


def find_by_cart_id(uow, cart_id: int) -> list[CartItem]:
    return _crud.find_where(uow, CartItem, {"cart_id": cart_id})


def find_where(uow, **criteria) -> list[CartItem]:
    return _crud.find_where(uow, CartItem, criteria)


def delete_by_id(uow, cart_item_id: int) -> None:
    _crud.delete_by_id(uow, CartItem, cart_item_id, "Cart item")


def find_all(uow) -> list[CartItem]:
    return _crud.find_all(uow, CartItem)
