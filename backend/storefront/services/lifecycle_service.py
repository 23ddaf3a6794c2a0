# Overview: Service-layer state machines for cart items, orders and order items.

"""
Storefront Lifecycle Service

================================================================================
PURPOSE: Enforce the purchase workflow state machines
================================================================================

CART ITEM (CartItemStatus):
    Created   -> Pending     enlisted into an order
    Pending   -> Approved    owning order item approved
    Pending   -> Cancelled   owning order item cancelled
    Created   -> Cancelled   removed from cart before ordering

ORDER (OrderStatus) and ORDER ITEM (OrderItemStatus):
    InProgress -> Approved
    InProgress -> Cancelled

RULES:
1. Approved and Cancelled are absorbing in every domain.
2. Any edge not listed above raises InvalidTransitionError.
3. Same-state "transitions" are not edges; callers must not request them.
4. Status ids are always translated through the status catalog, never
   compared as raw strings at call sites.
================================================================================
"""

from __future__ import annotations

from ..errors import InvalidTransitionError
from .status_catalog import (
    CartItemStatus,
    OrderItemStatus,
    OrderStatus,
    StatusDomain,
    status_catalog,
)


CART_ITEM_TRANSITIONS = {
    (CartItemStatus.CREATED, CartItemStatus.PENDING),
    (CartItemStatus.PENDING, CartItemStatus.APPROVED),
    (CartItemStatus.PENDING, CartItemStatus.CANCELLED),
    (CartItemStatus.CREATED, CartItemStatus.CANCELLED),
}

ORDER_TRANSITIONS = {
    (OrderStatus.IN_PROGRESS, OrderStatus.APPROVED),
    (OrderStatus.IN_PROGRESS, OrderStatus.CANCELLED),
}

ORDER_ITEM_TRANSITIONS = {
    (OrderItemStatus.IN_PROGRESS, OrderItemStatus.APPROVED),
    (OrderItemStatus.IN_PROGRESS, OrderItemStatus.CANCELLED),
}

TRANSITIONS = {
    CartItemStatus: CART_ITEM_TRANSITIONS,
    OrderStatus: ORDER_TRANSITIONS,
    OrderItemStatus: ORDER_ITEM_TRANSITIONS,
}

TERMINAL_STATUSES = {
    CartItemStatus: {CartItemStatus.APPROVED, CartItemStatus.CANCELLED},
    OrderStatus: {OrderStatus.APPROVED, OrderStatus.CANCELLED},
    OrderItemStatus: {OrderItemStatus.APPROVED, OrderItemStatus.CANCELLED},
}


def can_transition(from_status: StatusDomain, to_status: StatusDomain) -> bool:
    """
    Check whether from_status -> to_status is an edge of its state machine.

    Statuses from different domains never form an edge.
    """
    if type(from_status) is not type(to_status):
        return False
    return (from_status, to_status) in TRANSITIONS.get(type(from_status), set())


def is_terminal(status: StatusDomain) -> bool:
    return status in TERMINAL_STATUSES.get(type(status), set())


def ensure_transition(from_status: StatusDomain, to_status: StatusDomain, *, entity: str, entity_id) -> None:
    """
    Raises:
        InvalidTransitionError: If the edge is not defined
    """
    if not can_transition(from_status, to_status):
        raise InvalidTransitionError(
            f"Cannot move {entity} {entity_id} from '{from_status.value}' to '{to_status.value}'",
            details={
                "entity": entity,
                "id": entity_id,
                "from": from_status.value,
                "to": to_status.value,
            },
        )


def current_status(uow, entity, domain: type[StatusDomain]) -> StatusDomain:
    """Typed status of any row carrying a status_id."""
    return status_catalog.status_of(uow, domain, entity.status_id)


def transition(uow, entity, to_status: StatusDomain, *, entity_name: str):
    """
    Move entity to to_status after checking the edge.

    The caller persists the entity (it is already attached to the session,
    so the change is flushed with the rest of the unit of work).
    """
    from_status = current_status(uow, entity, type(to_status))
    ensure_transition(from_status, to_status, entity=entity_name, entity_id=entity.id)
    entity.status_id = status_catalog.id_of(uow, to_status)
    return entity


def transition_cart_item(uow, cart_item, to_status: CartItemStatus):
    return transition(uow, cart_item, to_status, entity_name="cart item")


def transition_order_item(uow, order_item, to_status: OrderItemStatus):
    return transition(uow, order_item, to_status, entity_name="order item")


def transition_order(uow, order, to_status: OrderStatus):
    return transition(uow, order, to_status, entity_name="order")
