from __future__ import annotations

from ..extensions import db
from .base import TimestampMixin


class Cart(TimestampMixin, db.Model):
    """Per-client staging collection. At most one cart per person."""
    __tablename__ = "carts"
    __table_args__ = (
        db.UniqueConstraint("person_id", name="uq_carts_person"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    person_id = db.Column(db.Integer, db.ForeignKey("persons.id"), nullable=False)

    person = db.relationship("Person", backref=db.backref("cart", uselist=False, lazy=True))

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "person_id": self.person_id,
            **self._timestamps(),
        }


class CartItem(TimestampMixin, db.Model):
    """
    One product line in a cart.

    LIFECYCLE (CartItemStatus):
        Created -> Pending -> Approved | Cancelled
        Created -> Cancelled

    Shared: referenced by its cart and by the order item built from it.
    """
    __tablename__ = "cart_items"
    __table_args__ = (
        db.CheckConstraint("quantity >= 1", name="ck_cart_items_quantity_positive"),
        db.Index("ix_cart_items_cart_status", "cart_id", "status_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    cart_id = db.Column(db.Integer, db.ForeignKey("carts.id"), nullable=False, index=True)
    product_id = db.Column(db.Integer, db.ForeignKey("products.id"), nullable=False, index=True)
    quantity = db.Column(db.Integer, nullable=False)
    status_id = db.Column(db.Integer, db.ForeignKey("enum_values.id"), nullable=False)

    cart = db.relationship("Cart", backref=db.backref("items", lazy=True, order_by="CartItem.id"))
    product = db.relationship("Product")

    def __repr__(self) -> str:
        return f"<CartItem id={self.id} cart_id={self.cart_id} product_id={self.product_id} quantity={self.quantity}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "cart_id": self.cart_id,
            "product_id": self.product_id,
            "quantity": self.quantity,
            "status_id": self.status_id,
            **self._timestamps(),
        }
