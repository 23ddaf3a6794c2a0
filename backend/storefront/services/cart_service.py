# Overview: Service-layer operations for carts and cart items; encapsulates business logic and database work.

"""
Cart Service

One cart per client. Cart items start in Created and only leave it through
the lifecycle service (ordering, removal).

The stock check in add_item() is advisory: it stops obviously impossible
lines early, but nothing is reserved. The binding check happens when an
order item is approved, under a row lock (see stock_service).
"""

from __future__ import annotations

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..errors import ConflictError, InsufficientStockError, InvalidStateError, NotFoundError, ValidationError
from ..models import Cart, CartItem, Person, Product
from ..repositories import cart_items as cart_item_repo
from ..repositories import carts as cart_repo
from ..repositories import order_items as order_item_repo
from ..repositories import persons as person_repo
from ..repositories import products as product_repo
from .lifecycle_service import current_status, transition_cart_item
from .status_catalog import CartItemStatus, OrderStatus, ProductStatus, status_catalog
from .unit_of_work import CancelToken, UnitOfWork, with_transaction


def _require_positive_quantity(quantity) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise ValidationError("quantity must be a positive integer", details={"quantity": quantity})


def _check_advisory_stock(uow: UnitOfWork, product: Product, quantity: int) -> None:
    if product.status_id is not None:
        if status_catalog.status_of(uow, ProductStatus, product.status_id) is ProductStatus.UNAVAILABLE:
            raise ConflictError(
                f"Product {product.code} is unavailable",
                details={"product_id": product.id},
            )
    if product.quantity < quantity:
        raise InsufficientStockError(
            f"Cannot add {quantity} x {product.label}: only {product.quantity} available",
            details={
                "product_id": product.id,
                "requested_quantity": quantity,
                "available": product.quantity,
            },
        )


def get_or_none(
    person_id: int,
    *,
    uow: UnitOfWork | None = None,
    cancel_token: CancelToken | None = None,
) -> Cart | None:
    """The person's cart, or None when they have none yet."""
    return with_transaction(
        lambda u: cart_repo.find_by_person_id(u, person_id), uow, cancel_token=cancel_token, write=False
    )


def get_cart_for_person(
    person_id: int,
    *,
    uow: UnitOfWork | None = None,
    cancel_token: CancelToken | None = None,
) -> Cart:
    cart = get_or_none(person_id, uow=uow, cancel_token=cancel_token)
    if cart is None:
        raise NotFoundError("Cart not found for person", details={"person_id": person_id})
    return cart


def create_cart(
    person_id: int,
    *,
    uow: UnitOfWork | None = None,
    cancel_token: CancelToken | None = None,
) -> Cart:
    """
    Create the person's cart.

    Raises:
        NotFoundError: If the person does not exist
        ConflictError: If the person already has a cart
    """
    def _op(u: UnitOfWork) -> Cart:
        person_repo.get_by_id(u, person_id)
        if cart_repo.find_by_person_id(u, person_id) is not None:
            raise ConflictError("Cart already exists for person", details={"person_id": person_id})
        try:
            cart = cart_repo.insert(u, Cart(person_id=person_id))
        except IntegrityError as exc:
            # A concurrent create committed first (uq_carts_person)
            raise ConflictError("Cart already exists for person", details={"person_id": person_id}) from exc
        current_app.logger.info("Cart %s created for person %s", cart.id, person_id)
        return cart

    return with_transaction(_op, uow, cancel_token=cancel_token)


def add_item(uow: UnitOfWork, person: Person, product: Product, quantity: int) -> CartItem:
    """
    Add a Created line to the person's cart inside an existing unit of work.

    Raises:
        ValidationError: quantity < 1
        InsufficientStockError: product.quantity < quantity (advisory)
        ConflictError: product marked Unavailable
        NotFoundError: the person has no cart
    """
    _require_positive_quantity(quantity)
    _check_advisory_stock(uow, product, quantity)

    cart = cart_repo.find_by_person_id(uow, person.id)
    if cart is None:
        raise NotFoundError(
            f"Person {person.user_login} has no cart",
            details={"person_id": person.id},
        )

    cart_item = CartItem(
        cart_id=cart.id,
        product_id=product.id,
        quantity=quantity,
        status_id=status_catalog.id_of(uow, CartItemStatus.CREATED),
    )
    return cart_item_repo.insert(uow, cart_item)


def add_to_cart(
    client_id: int,
    product_id: int,
    quantity: int,
    *,
    uow: UnitOfWork | None = None,
    cancel_token: CancelToken | None = None,
) -> CartItem:
    """AddToCart entry point: resolve client and product, then add_item()."""
    def _op(u: UnitOfWork) -> CartItem:
        person = person_repo.get_by_id(u, client_id)
        product = product_repo.get_by_id(u, product_id)
        cart_item = add_item(u, person, product, quantity)
        current_app.logger.info(
            "Cart item %s added: product %s x %s for person %s",
            cart_item.id, product_id, quantity, client_id,
        )
        return cart_item

    return with_transaction(_op, uow, cancel_token=cancel_token)


def list_cart_items(
    cart_id: int,
    *,
    uow: UnitOfWork | None = None,
    cancel_token: CancelToken | None = None,
) -> list[CartItem]:
    def _op(u: UnitOfWork) -> list[CartItem]:
        cart_repo.get_by_id(u, cart_id)
        return cart_item_repo.find_by_cart_id(u, cart_id)

    return with_transaction(_op, uow, cancel_token=cancel_token, write=False)


def cart_item_status(cart_item: CartItem, *, uow: UnitOfWork | None = None) -> CartItemStatus:
    return with_transaction(lambda u: current_status(u, cart_item, CartItemStatus), uow, write=False)


def _get_owned_item(u: UnitOfWork, cart_item_id: int, person_id: int | None) -> CartItem:
    cart_item = cart_item_repo.get_by_id(u, cart_item_id)
    if person_id is not None and cart_item.cart.person_id != person_id:
        raise ConflictError(
            "Cart item belongs to another client",
            details={"cart_item_id": cart_item_id, "person_id": person_id},
        )
    return cart_item


def update_cart_item_quantity(
    cart_item_id: int,
    quantity: int,
    *,
    person_id: int | None = None,
    uow: UnitOfWork | None = None,
    cancel_token: CancelToken | None = None,
) -> CartItem:
    """Change the quantity of a line that has not been ordered yet."""
    _require_positive_quantity(quantity)

    def _op(u: UnitOfWork) -> CartItem:
        cart_item = _get_owned_item(u, cart_item_id, person_id)
        status = current_status(u, cart_item, CartItemStatus)
        if status is not CartItemStatus.CREATED:
            raise InvalidStateError(
                f"Only Created cart items can be changed (current: {status.value})",
                details={"cart_item_id": cart_item_id, "status": status.value},
            )
        _check_advisory_stock(u, product_repo.get_by_id(u, cart_item.product_id), quantity)
        cart_item.quantity = quantity
        return cart_item_repo.update(u, cart_item)

    return with_transaction(_op, uow, cancel_token=cancel_token)


def remove_cart_item(
    cart_item_id: int,
    *,
    person_id: int | None = None,
    uow: UnitOfWork | None = None,
    cancel_token: CancelToken | None = None,
) -> CartItem:
    """
    Remove a line from the cart before ordering (Created -> Cancelled).

    Pending lines leave Pending only through their order item, so removing
    one here is refused.

    Raises:
        InvalidStateError: If the line is not Created
    """
    def _op(u: UnitOfWork) -> CartItem:
        cart_item = _get_owned_item(u, cart_item_id, person_id)
        status = current_status(u, cart_item, CartItemStatus)
        if status is not CartItemStatus.CREATED:
            raise InvalidStateError(
                f"Only Created cart items can be removed (current: {status.value})",
                details={"cart_item_id": cart_item_id, "status": status.value},
            )
        transition_cart_item(u, cart_item, CartItemStatus.CANCELLED)
        return cart_item_repo.update(u, cart_item)

    return with_transaction(_op, uow, cancel_token=cancel_token)


def delete_cart_item(
    cart_item_id: int,
    *,
    person_id: int | None = None,
    uow: UnitOfWork | None = None,
    cancel_token: CancelToken | None = None,
) -> None:
    """
    Delete a cart line.

    Raises:
        InvalidStateError: If any order item references the line; lines of
            an in-progress order are still stock-relevant and lines of
            finished orders are their audit trail.
    """
    def _op(u: UnitOfWork) -> None:
        cart_item = _get_owned_item(u, cart_item_id, person_id)
        open_order_ids = [status_catalog.id_of(u, OrderStatus.IN_PROGRESS)]
        if order_item_repo.find_by_cart_item_in_orders_with_status(u, cart_item.id, open_order_ids):
            raise InvalidStateError(
                "Cart item is part of an order in progress",
                details={"cart_item_id": cart_item_id},
            )
        if order_item_repo.find_where(u, cart_item_id=cart_item.id):
            raise InvalidStateError(
                "Cart item is referenced by a finished order",
                details={"cart_item_id": cart_item_id},
            )
        cart_item_repo.delete_by_id(u, cart_item.id)
        current_app.logger.info("Cart item %s deleted", cart_item_id)

    with_transaction(_op, uow, cancel_token=cancel_token)


def cart_item_to_dict(cart_item: CartItem, *, uow: UnitOfWork | None = None) -> dict:
    def _op(u: UnitOfWork) -> dict:
        data = cart_item.to_dict()
        data["status"] = status_catalog.code_of(u, cart_item.status_id)
        return data

    return with_transaction(_op, uow, write=False)


def cart_to_dict(cart: Cart, *, uow: UnitOfWork | None = None) -> dict:
    """Cart payload with its lines (ascending id) and their status codes."""
    def _op(u: UnitOfWork) -> dict:
        data = cart.to_dict()
        data["items"] = [cart_item_to_dict(item, uow=u) for item in cart_item_repo.find_by_cart_id(u, cart.id)]
        return data

    return with_transaction(_op, uow, write=False)
