from __future__ import annotations

from ..models import Order, OrderItem
from . import _crud


def insert(uow, order_item: OrderItem) -> OrderItem:
    return _crud.insert(uow, order_item)


def update(uow, order_item: OrderItem) -> OrderItem:
    return _crud.update(uow, order_item)


def find_by_id(uow, order_item_id: int) -> OrderItem | None:
    return _crud.find_by_id(uow, OrderItem, order_item_id)


def find_by_order_id(uow, order_id: int) -> list[OrderItem]:
    """Order lines in ascending id order (the approval lock order)."""
    return _crud.find_where(uow, OrderItem, {"order_id": order_id})


def find_by_cart_item_in_orders_with_status(uow, cart_item_id: int, order_status_ids: list[int]) -> list[OrderItem]:
    uow.checkpoint()
    return (
        uow.session.query(OrderItem)
        .join(Order, OrderItem.order_id == Order.id)
        .filter(OrderItem.cart_item_id == cart_item_id, Order.status_id.in_(order_status_ids))
        .order_by(OrderItem.id.asc())
        .all()
    )


def find_where(uow, **criteria) -> list[OrderItem]:
    return _crud.find_where(uow, OrderItem, criteria)


def find_all(uow) -> list[OrderItem]:
    return _crud.find_all(uow, OrderItem)


def delete_by_id(uow, order_item_id: int) -> None:
    _crud.delete_by_id(uow, OrderItem, order_item_id, "Order item")
