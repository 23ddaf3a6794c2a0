"""Transition tables for cart items, orders and order items."""

import pytest

from storefront.errors import InvalidTransitionError
from storefront.services.lifecycle_service import (
    TRANSITIONS,
    can_transition,
    ensure_transition,
    is_terminal,
)
from storefront.services.status_catalog import CartItemStatus, OrderItemStatus, OrderStatus


@pytest.mark.parametrize(
    "from_status,to_status",
    [
        (CartItemStatus.CREATED, CartItemStatus.PENDING),
        (CartItemStatus.PENDING, CartItemStatus.APPROVED),
        (CartItemStatus.PENDING, CartItemStatus.CANCELLED),
        (CartItemStatus.CREATED, CartItemStatus.CANCELLED),
        (OrderStatus.IN_PROGRESS, OrderStatus.APPROVED),
        (OrderStatus.IN_PROGRESS, OrderStatus.CANCELLED),
        (OrderItemStatus.IN_PROGRESS, OrderItemStatus.APPROVED),
        (OrderItemStatus.IN_PROGRESS, OrderItemStatus.CANCELLED),
    ],
)
def test_allowed_edges(from_status, to_status):
    assert can_transition(from_status, to_status)
    ensure_transition(from_status, to_status, entity="x", entity_id=1)


@pytest.mark.parametrize(
    "from_status,to_status",
    [
        (CartItemStatus.CREATED, CartItemStatus.APPROVED),
        (CartItemStatus.PENDING, CartItemStatus.CREATED),
        (OrderStatus.APPROVED, OrderStatus.IN_PROGRESS),
        (OrderStatus.IN_PROGRESS, OrderStatus.IN_PROGRESS),
        # Same value code, different state machine
        (OrderStatus.IN_PROGRESS, OrderItemStatus.APPROVED),
    ],
)
def test_rejected_edges(from_status, to_status):
    assert not can_transition(from_status, to_status)
    with pytest.raises(InvalidTransitionError):
        ensure_transition(from_status, to_status, entity="x", entity_id=1)


def test_terminal_states_absorb():
    for domain, edges in TRANSITIONS.items():
        for status in domain:
            if is_terminal(status):
                assert not any(src is status for src, _ in edges), status
                for target in domain:
                    assert not can_transition(status, target)


def test_non_terminal_states():
    assert not is_terminal(CartItemStatus.CREATED)
    assert not is_terminal(CartItemStatus.PENDING)
    assert not is_terminal(OrderStatus.IN_PROGRESS)
    assert is_terminal(OrderItemStatus.CANCELLED)


def test_error_details():
    with pytest.raises(InvalidTransitionError) as exc:
        ensure_transition(OrderStatus.APPROVED, OrderStatus.CANCELLED, entity="order", entity_id=42)
    assert exc.value.details == {"entity": "order", "id": 42, "from": "Approved", "to": "Cancelled"}
    assert exc.value.http_status == 409
