from __future__ import annotations

from ..models import Category
from . import _crud


def insert(uow, category: Category) -> Category:
    return _crud.insert(uow, category)


def find_by_id(uow, category_id: int) -> Category | None:
    return _crud.find_by_id(uow, Category, category_id)


def get_by_id(uow, category_id: int) -> Category:
    return _crud.get_by_id(uow, Category, category_id, "Category")


def find_all(uow) -> list[Category]:
    return _crud.find_all(uow, Category)


def find_where(uow, **criteria) -> list[Category]:
    return _crud.find_where(uow, Category, criteria)


def update(uow, category: Category) -> Category:
    return _crud.update(uow, category)


def delete_by_id(uow, category_id: int) -> None:
    _crud.delete_by_id(uow, Category, category_id, "Category")
