# Overview: Service-layer stock adjustment for order item approval.

"""
Stock invariants

- Product.quantity is the available stock and is >= 0 at every commit.
- The core only decrements stock, on approval of an order item.
- Check-and-decrement is the critical section: the product row is read
  with SELECT ... FOR UPDATE in the caller's transaction and the lock is
  held until that transaction ends. Without it two approvals could both
  read the same stock, both pass the check and both decrement.
- Lock order inside one approval: order items by ascending id, then the
  product of each line. Every approval takes locks in that order.
"""

from __future__ import annotations

from ..errors import InsufficientStockError, NotFoundError
from ..models import OrderItem, Product
from ..repositories import cart_items as cart_item_repo
from ..repositories import products as product_repo
from .unit_of_work import UnitOfWork


def debit_for_order_item(uow: UnitOfWork, order_item: OrderItem) -> Product:
    """
    Decrement product stock by the quantity of the order item's cart line.

    Must run inside the approval's unit of work; a failure aborts the whole
    approval.

    Raises:
        NotFoundError: If the cart item or product is gone
        InsufficientStockError: If stock would go negative
    """
    cart_item = cart_item_repo.get_by_id(uow, order_item.cart_item_id)

    product = product_repo.find_for_update(uow, cart_item.product_id)
    if product is None:
        raise NotFoundError("Product not found", details={"id": cart_item.product_id})

    if product.quantity < cart_item.quantity:
        raise InsufficientStockError(
            f"Cannot approve order item {order_item.id}: {product.label} has "
            f"{product.quantity} in stock, {cart_item.quantity} requested",
            details={
                "order_item_id": order_item.id,
                "product_id": product.id,
                "requested_quantity": cart_item.quantity,
                "on_hand": product.quantity,
            },
        )

    product.quantity = product.quantity - cart_item.quantity
    return product_repo.update(uow, product)
