from __future__ import annotations

from ..models import Product
from ..services.unit_of_work import lock_for_update
from . import _crud


def insert(uow, product: Product) -> Product:
    return _crud.insert(uow, product)


def update(uow, product: Product) -> Product:
    return _crud.update(uow, product)


def find_by_id(uow, product_id: int) -> Product | None:
    return _crud.find_by_id(uow, Product, product_id)


def get_by_id(uow, product_id: int) -> Product:
    return _crud.get_by_id(uow, Product, product_id, "Product")


def find_for_update(uow, product_id: int) -> Product | None:
    """
    Load a product with a row-level write lock held until the transaction ends.

    populate_existing refreshes an instance already in the identity map so
    the stock figure is the one read under the lock.
    """
    uow.checkpoint()
    query = uow.session.query(Product).filter(Product.id == product_id).populate_existing()
    return lock_for_update(query).first()


def find_all(uow) -> list[Product]:
    return _crud.find_all(uow, Product)


def find_where(uow, **criteria) -> list[Product]:
    return _crud.find_where(uow, Product, criteria)


def delete_by_id(uow, product_id: int) -> None:
    _crud.delete_by_id(uow, Product, product_id, "Product")
