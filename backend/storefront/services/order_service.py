# Overview: Service-layer operations for orders; assembly from cart items and the approval state machine.

"""
Order Service

WORKFLOW:
    client adds to cart -> cart items accumulate (Created)
    client submits a subset as an order -> order InProgress,
        order items InProgress, cart items Pending
    manager approves -> stock debited per line, everything Approved
    manager cancels  -> everything Cancelled, stock untouched

ATOMICITY:
Every entry point is one unit of work. Approval either commits every stock
decrement and every status change, or none of them: a single line with
insufficient stock rolls back the whole approval.

LOCK ORDER (approval):
    order row -> order items ascending id -> product row of each line
All approvals follow it, so two approvals over a common product queue on
the product lock instead of deadlocking.
"""

from __future__ import annotations

from flask import current_app

from ..errors import (
    ConflictError,
    InsufficientStockError,
    InvalidStateError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from ..models import Order, OrderItem
from ..repositories import cart_items as cart_item_repo
from ..repositories import order_items as order_item_repo
from ..repositories import orders as order_repo
from ..repositories import persons as person_repo
from .lifecycle_service import (
    current_status,
    ensure_transition,
    is_terminal,
    transition_cart_item,
    transition_order,
    transition_order_item,
)
from .status_catalog import CartItemStatus, OrderItemStatus, OrderStatus, status_catalog
from .stock_service import debit_for_order_item
from .unit_of_work import CancelToken, UnitOfWork, with_transaction

# Targets a manager may request
ALLOWED_TARGETS = (OrderStatus.APPROVED, OrderStatus.CANCELLED)

# Order target -> matching order item / cart item status
_ITEM_TARGETS = {
    OrderStatus.APPROVED: (OrderItemStatus.APPROVED, CartItemStatus.APPROVED),
    OrderStatus.CANCELLED: (OrderItemStatus.CANCELLED, CartItemStatus.CANCELLED),
}

MAX_PAGE_SIZE = 100


def parse_target(target) -> OrderStatus:
    """
    Accept an OrderStatus or its code string.

    Raises:
        ValidationError: If the code is not an OrderStatus at all
    """
    if isinstance(target, OrderStatus):
        return target
    try:
        return OrderStatus(target)
    except ValueError:
        raise ValidationError(
            f"Unknown order status '{target}'",
            details={"allowed": [t.value for t in ALLOWED_TARGETS]},
        ) from None


# =============================================================================
# ASSEMBLY
# =============================================================================

def create_order(
    client_id: int,
    cart_item_ids: list[int],
    *,
    details: str | None = None,
    uow: UnitOfWork | None = None,
    cancel_token: CancelToken | None = None,
) -> Order:
    """
    Create an order from a subset of the client's Created cart items.

    Checks run in the order listed below, so a foreign cart item is
    reported as ConflictError even when it is also no longer Created.

    Raises:
        ValidationError: Empty or duplicated cart_item_ids
        NotFoundError: Unknown client or cart item
        ConflictError: A cart item belongs to another client's cart
        InvalidStateError: A cart item is not in Created
    """
    if not cart_item_ids:
        raise ValidationError("cart_item_ids must not be empty")
    if len(set(cart_item_ids)) != len(cart_item_ids):
        raise ValidationError("cart_item_ids must be unique", details={"cart_item_ids": list(cart_item_ids)})

    def _op(u: UnitOfWork) -> Order:
        person_repo.get_by_id(u, client_id)
        in_progress_id = status_catalog.id_of(u, OrderStatus.IN_PROGRESS)
        item_in_progress_id = status_catalog.id_of(u, OrderItemStatus.IN_PROGRESS)

        cart_items = cart_item_repo.find_by_ids(u, list(cart_item_ids))
        found = {item.id for item in cart_items}
        missing = [cid for cid in cart_item_ids if cid not in found]
        if missing:
            raise NotFoundError("Cart items not found", details={"cart_item_ids": missing})

        foreign = [item.id for item in cart_items if item.cart.person_id != client_id]
        if foreign:
            raise ConflictError(
                "Cart items belong to another client",
                details={"cart_item_ids": foreign, "client_id": client_id},
            )

        for item in cart_items:
            status = current_status(u, item, CartItemStatus)
            if status is not CartItemStatus.CREATED:
                raise InvalidStateError(
                    f"Cart item {item.id} is '{status.value}', expected 'Created'",
                    details={"cart_item_id": item.id, "status": status.value},
                )

        order = order_repo.insert(u, Order(
            client_id=client_id,
            manager_id=None,
            details=details,
            status_id=in_progress_id,
        ))

        for item in cart_items:
            order_item_repo.insert(u, OrderItem(
                order_id=order.id,
                cart_item_id=item.id,
                status_id=item_in_progress_id,
            ))
            transition_cart_item(u, item, CartItemStatus.PENDING)
            cart_item_repo.update(u, item)

        current_app.logger.info(
            "Order %s created for client %s with %s item(s)",
            order.id, client_id, len(cart_items),
        )
        return order

    return with_transaction(_op, uow, cancel_token=cancel_token)


# =============================================================================
# STATE MACHINE
# =============================================================================

def _finish_order(u: UnitOfWork, order_id: int, manager_id: int, target: OrderStatus) -> Order:
    person_repo.get_by_id(u, manager_id)
    order = order_repo.find_for_update(u, order_id)
    if order is None:
        raise NotFoundError("Order not found", details={"id": order_id})

    ensure_transition(current_status(u, order, OrderStatus), target, entity="order", entity_id=order.id)
    item_target, cart_item_target = _ITEM_TARGETS[target]

    for order_item in order_item_repo.find_by_order_id(u, order.id):
        if target is OrderStatus.APPROVED:
            debit_for_order_item(u, order_item)
        transition_order_item(u, order_item, item_target)
        order_item_repo.update(u, order_item)

        cart_item = cart_item_repo.get_by_id(u, order_item.cart_item_id)
        transition_cart_item(u, cart_item, cart_item_target)
        cart_item_repo.update(u, cart_item)

    transition_order(u, order, target)
    order.manager_id = manager_id
    return order_repo.update(u, order)


def approve_order(uow: UnitOfWork, order_id: int, manager_id: int) -> Order:
    """InProgress -> Approved with per-line stock debit, inside uow."""
    try:
        order = _finish_order(uow, order_id, manager_id, OrderStatus.APPROVED)
    except InsufficientStockError as exc:
        current_app.logger.warning("Approval of order %s rejected: %s", order_id, exc.message)
        raise
    current_app.logger.info("Order %s approved by manager %s", order_id, manager_id)
    return order


def cancel_order(uow: UnitOfWork, order_id: int, manager_id: int) -> Order:
    """InProgress -> Cancelled, stock untouched, inside uow."""
    order = _finish_order(uow, order_id, manager_id, OrderStatus.CANCELLED)
    current_app.logger.info("Order %s cancelled by manager %s", order_id, manager_id)
    return order


def change_order_status(
    order_id: int,
    manager_id: int,
    target,
    *,
    uow: UnitOfWork | None = None,
    cancel_token: CancelToken | None = None,
) -> Order:
    """
    ChangeOrderStatus entry point.

    Raises:
        NotFoundError: Unknown order or manager
        InvalidTransitionError: Order is terminal, or target is not Approved/Cancelled
        InsufficientStockError: Any line lacks stock (nothing is committed)
    """
    target = parse_target(target)
    if target not in ALLOWED_TARGETS:
        raise InvalidTransitionError(
            f"Orders cannot be moved to '{target.value}'",
            details={"allowed": [t.value for t in ALLOWED_TARGETS]},
        )

    def _op(u: UnitOfWork) -> Order:
        if target is OrderStatus.APPROVED:
            return approve_order(u, order_id, manager_id)
        return cancel_order(u, order_id, manager_id)

    return with_transaction(_op, uow, cancel_token=cancel_token)


def update_order_details(
    order_id: int,
    details: str,
    *,
    uow: UnitOfWork | None = None,
    cancel_token: CancelToken | None = None,
) -> Order:
    """Edit free-text details while the order is still InProgress."""
    def _op(u: UnitOfWork) -> Order:
        order = order_repo.get_by_id(u, order_id)
        status = current_status(u, order, OrderStatus)
        if status is not OrderStatus.IN_PROGRESS:
            raise InvalidStateError(
                f"Cannot edit a '{status.value}' order",
                details={"id": order_id, "status": status.value},
            )
        order.details = details
        return order_repo.update(u, order)

    return with_transaction(_op, uow, cancel_token=cancel_token)


def delete_order(
    order_id: int,
    *,
    uow: UnitOfWork | None = None,
    cancel_token: CancelToken | None = None,
) -> None:
    """
    Delete a finished order together with its order items.

    Raises:
        NotFoundError: Unknown order
        InvalidStateError: Order is still InProgress
    """
    def _op(u: UnitOfWork) -> None:
        order = order_repo.get_by_id(u, order_id)
        status = current_status(u, order, OrderStatus)
        if not is_terminal(status):
            raise InvalidStateError(
                "Only approved or cancelled orders can be deleted",
                details={"id": order_id, "status": status.value},
            )
        order_repo.delete_by_id(u, order_id)
        current_app.logger.info("Order %s deleted", order_id)

    with_transaction(_op, uow, cancel_token=cancel_token)


# =============================================================================
# QUERIES
# =============================================================================

def get_order(
    order_id: int,
    *,
    uow: UnitOfWork | None = None,
    cancel_token: CancelToken | None = None,
) -> Order:
    return with_transaction(
        lambda u: order_repo.get_by_id(u, order_id), uow, cancel_token=cancel_token, write=False
    )


def list_order_items(
    order_id: int,
    *,
    uow: UnitOfWork | None = None,
    cancel_token: CancelToken | None = None,
) -> list[OrderItem]:
    def _op(u: UnitOfWork) -> list[OrderItem]:
        order_repo.get_by_id(u, order_id)
        return order_item_repo.find_by_order_id(u, order_id)

    return with_transaction(_op, uow, cancel_token=cancel_token, write=False)


def search_orders(
    *,
    client_id: int | None = None,
    manager_id: int | None = None,
    status=None,
    limit: int | None = None,
    offset: int | None = None,
    uow: UnitOfWork | None = None,
    cancel_token: CancelToken | None = None,
) -> list[Order]:
    """
    Orders matching every given criterion, ascending id.

    status may be an OrderStatus or its code; an unknown code raises
    ValidationError.
    """
    if limit is not None:
        limit = max(1, min(limit, MAX_PAGE_SIZE))
    status = parse_target(status) if status is not None else None

    def _op(u: UnitOfWork) -> list[Order]:
        criteria = {}
        if client_id is not None:
            criteria["client_id"] = client_id
        if manager_id is not None:
            criteria["manager_id"] = manager_id
        if status is not None:
            criteria["status_id"] = status_catalog.id_of(u, status)
        return order_repo.find_where(u, limit=limit, offset=offset, **criteria)

    return with_transaction(_op, uow, cancel_token=cancel_token, write=False)


def list_by_client(client_id: int, *, uow: UnitOfWork | None = None, cancel_token: CancelToken | None = None) -> list[Order]:
    return search_orders(client_id=client_id, uow=uow, cancel_token=cancel_token)


def list_by_manager(manager_id: int, *, uow: UnitOfWork | None = None, cancel_token: CancelToken | None = None) -> list[Order]:
    return search_orders(manager_id=manager_id, uow=uow, cancel_token=cancel_token)


def list_by_status(status, *, uow: UnitOfWork | None = None, cancel_token: CancelToken | None = None) -> list[Order]:
    return search_orders(status=status, uow=uow, cancel_token=cancel_token)


def list_by_manager_and_status(
    manager_id: int,
    status,
    *,
    uow: UnitOfWork | None = None,
    cancel_token: CancelToken | None = None,
) -> list[Order]:
    return search_orders(manager_id=manager_id, status=status, uow=uow, cancel_token=cancel_token)


# =============================================================================
# SERIALISATION
# =============================================================================

def order_to_dict(order: Order, *, include_items: bool = False, uow: UnitOfWork | None = None) -> dict:
    """Order payload with status codes resolved through the catalog."""
    def _op(u: UnitOfWork) -> dict:
        data = order.to_dict()
        data["status"] = status_catalog.code_of(u, order.status_id)
        if include_items:
            data["items"] = [order_item_to_dict(item, uow=u) for item in order_item_repo.find_by_order_id(u, order.id)]
        return data

    return with_transaction(_op, uow, write=False)


def order_item_to_dict(order_item: OrderItem, *, uow: UnitOfWork | None = None) -> dict:
    def _op(u: UnitOfWork) -> dict:
        data = order_item.to_dict()
        data["status"] = status_catalog.code_of(u, order_item.status_id)
        cart_item = order_item.cart_item
        data["cart_item"] = {
            **cart_item.to_dict(),
            "status": status_catalog.code_of(u, cart_item.status_id),
        }
        return data

    return with_transaction(_op, uow, write=False)
