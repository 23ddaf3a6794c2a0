from __future__ import annotations

from ..extensions import db
from .base import TimestampMixin


class Order(TimestampMixin, db.Model):
    """
    A submitted, manager-reviewable snapshot of a subset of cart items.

    STATE MACHINE (OrderStatus):
        InProgress -> Approved    (stock debited per line)
        InProgress -> Cancelled   (no stock change)
    Approved and Cancelled are terminal.
    """
    __tablename__ = "orders"
    __table_args__ = (
        db.Index("ix_orders_manager_status", "manager_id", "status_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    client_id = db.Column(db.Integer, db.ForeignKey("persons.id"), nullable=False, index=True)
    manager_id = db.Column(db.Integer, db.ForeignKey("persons.id"), nullable=True, index=True)
    details = db.Column(db.Text, nullable=True)
    status_id = db.Column(db.Integer, db.ForeignKey("enum_values.id"), nullable=False, index=True)

    client = db.relationship("Person", foreign_keys=[client_id])
    manager = db.relationship("Person", foreign_keys=[manager_id])
    items = db.relationship(
        "OrderItem",
        backref="order",
        lazy=True,
        order_by="OrderItem.id",
        cascade="all, delete-orphan",
    )

    def __repr__(self) -> str:
        return f"<Order id={self.id} client_id={self.client_id} status_id={self.status_id}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "client_id": self.client_id,
            "manager_id": self.manager_id,
            "details": self.details,
            "status_id": self.status_id,
            **self._timestamps(),
        }


class OrderItem(TimestampMixin, db.Model):
    """A single order line, bound 1-1 to the cart item it was built from."""
    __tablename__ = "order_items"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    cart_item_id = db.Column(db.Integer, db.ForeignKey("cart_items.id"), nullable=False, index=True)
    status_id = db.Column(db.Integer, db.ForeignKey("enum_values.id"), nullable=False)

    cart_item = db.relationship("CartItem", backref=db.backref("order_items", lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "order_id": self.order_id,
            "cart_item_id": self.cart_item_id,
            "status_id": self.status_id,
            **self._timestamps(),
        }
