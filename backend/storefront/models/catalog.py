from __future__ import annotations

from ..extensions import db
from .base import TimestampMixin


class Category(TimestampMixin, db.Model):
    __tablename__ = "categories"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(64), nullable=False, unique=True)
    label = db.Column(db.String(255), nullable=False)
    parent_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=True, index=True)

    parent = db.relationship("Category", remote_side=[id], backref=db.backref("children", lazy=True))

    def __repr__(self) -> str:
        return f"<Category id={self.id} code={self.code!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "label": self.label,
            "parent_id": self.parent_id,
            **self._timestamps(),
        }


class Product(TimestampMixin, db.Model):
    """
    Product master data.

    STOCK: quantity is the available stock. It is only ever decremented by
    order item approval, under a row lock, and must stay >= 0 at every commit.
    The CHECK constraint is the last line of defence; the stock service
    rejects the decrement before it reaches the database.
    """
    __tablename__ = "products"
    __table_args__ = (
        db.CheckConstraint("quantity >= 0", name="ck_products_quantity_non_negative"),
        db.CheckConstraint("price >= 0", name="ck_products_price_non_negative"),
        db.Index("ix_products_category_status", "category_id", "status_id"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(64), nullable=False, unique=True)
    sku = db.Column(db.String(64), nullable=False, unique=True)
    label = db.Column(db.String(255), nullable=False)

    # Fixed-point; serialised as a string so no float rounding leaks out
    price = db.Column(db.Numeric(12, 2), nullable=False, default=0)
    quantity = db.Column(db.Integer, nullable=False, default=0)

    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=False, index=True)
    status_id = db.Column(db.Integer, db.ForeignKey("enum_values.id"), nullable=True)

    category = db.relationship("Category", backref=db.backref("products", lazy=True))

    def __repr__(self) -> str:
        return f"<Product id={self.id} code={self.code!r} quantity={self.quantity}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "sku": self.sku,
            "label": self.label,
            "price": str(self.price) if self.price is not None else None,
            "quantity": self.quantity,
            "category_id": self.category_id,
            "status_id": self.status_id,
            **self._timestamps(),
        }
