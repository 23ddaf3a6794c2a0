from __future__ import annotations

from ..models import Order
from ..services.unit_of_work import lock_for_update
from . import _crud


def insert(uow, order: Order) -> Order:
    return _crud.insert(uow, order)


def update(uow, order: Order) -> Order:
    return _crud.update(uow, order)


def find_by_id(uow, order_id: int) -> Order | None:
    return _crud.find_by_id(uow, Order, order_id)


def get_by_id(uow, order_id: int) -> Order:
    return _crud.get_by_id(uow, Order, order_id, "Order")


def find_all(uow) -> list[Order]:
    return _crud.find_all(uow, Order)


def find_where(uow, *, limit: int | None = None, offset: int | None = None, **criteria) -> list[Order]:
    return _crud.find_where(uow, Order, criteria, limit=limit, offset=offset)


def delete_by_id(uow, order_id: int) -> None:
    # Order items go with it (cascade="all, delete-orphan")
    _crud.delete_by_id(uow, Order, order_id, "Order")


def find_for_update(uow, order_id: int) -> Order | None:
    """Load an order under a row lock; serialises concurrent status changes."""
    uow.checkpoint()
    query = uow.session.query(Order).filter(Order.id == order_id).populate_existing()
    return lock_for_update(query).first()
