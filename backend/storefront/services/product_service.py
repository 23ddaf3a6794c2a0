# Overview: Service-layer operations for categories and products (reference data for the order workflow).

"""
Product Service

Products are master data here: the purchase workflow reads them and only
the stock service changes quantity. This module covers creation and the
availability flag used by the cart's advisory checks.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation

from flask import current_app

from ..errors import ConflictError, ValidationError
from ..models import Category, Product
from ..repositories import categories as category_repo
from ..repositories import products as product_repo
from .status_catalog import ProductStatus, status_catalog
from .unit_of_work import CancelToken, UnitOfWork, with_transaction


def _parse_price(price) -> Decimal:
    if isinstance(price, float):
        raise ValidationError("price must be a decimal string, not a float", details={"price": price})
    try:
        value = Decimal(str(price))
    except (InvalidOperation, ValueError):
        raise ValidationError("price must be a decimal number", details={"price": price}) from None
    if not value.is_finite() or value < 0:
        raise ValidationError("price must be a non-negative decimal", details={"price": str(price)})
    return value.quantize(Decimal("0.01"))


def create_category(
    code: str,
    label: str,
    *,
    parent_id: int | None = None,
    uow: UnitOfWork | None = None,
) -> Category:
    if not code or not label:
        raise ValidationError("code and label are required")

    def _op(u: UnitOfWork) -> Category:
        if category_repo.find_where(u, code=code):
            raise ConflictError("Category code already exists", details={"code": code})
        if parent_id is not None:
            category_repo.get_by_id(u, parent_id)
        return category_repo.insert(u, Category(code=code, label=label, parent_id=parent_id))

    return with_transaction(_op, uow)


def create_product(
    *,
    code: str,
    sku: str,
    label: str,
    category_id: int,
    price="0",
    quantity: int = 0,
    available: bool = True,
    uow: UnitOfWork | None = None,
    cancel_token: CancelToken | None = None,
) -> Product:
    """
    Create a product with its initial stock.

    Raises:
        ValidationError: Empty code/sku/label, negative price or quantity
        ConflictError: Duplicate code or sku
        NotFoundError: Unknown category
    """
    if not code or not sku or not label:
        raise ValidationError("code, sku and label are required")
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
        raise ValidationError("quantity must be a non-negative integer", details={"quantity": quantity})
    price = _parse_price(price)

    def _op(u: UnitOfWork) -> Product:
        category_repo.get_by_id(u, category_id)
        if product_repo.find_where(u, code=code):
            raise ConflictError("Product code already exists", details={"code": code})
        if product_repo.find_where(u, sku=sku):
            raise ConflictError("Product sku already exists", details={"sku": sku})

        status = ProductStatus.AVAILABLE if available else ProductStatus.UNAVAILABLE
        product = product_repo.insert(u, Product(
            code=code,
            sku=sku,
            label=label,
            price=price,
            quantity=quantity,
            category_id=category_id,
            status_id=status_catalog.id_of(u, status),
        ))
        current_app.logger.info("Product %s (%s) created with quantity %s", product.id, code, quantity)
        return product

    return with_transaction(_op, uow, cancel_token=cancel_token)


def set_availability(product_id: int, available: bool, *, uow: UnitOfWork | None = None) -> Product:
    def _op(u: UnitOfWork) -> Product:
        product = product_repo.get_by_id(u, product_id)
        status = ProductStatus.AVAILABLE if available else ProductStatus.UNAVAILABLE
        product.status_id = status_catalog.id_of(u, status)
        return product_repo.update(u, product)

    return with_transaction(_op, uow)


def get_product(product_id: int, *, uow: UnitOfWork | None = None) -> Product:
    return with_transaction(lambda u: product_repo.get_by_id(u, product_id), uow, write=False)
