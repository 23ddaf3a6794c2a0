from __future__ import annotations

from ..extensions import db
from .base import TimestampMixin


class Enumeration(TimestampMixin, db.Model):
    """
    Reference enumeration (e.g. "OrderStatus").

    Values are append-only domain data: the status catalog memoises
    lookups for the lifetime of the process.
    """
    __tablename__ = "enumerations"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    code = db.Column(db.String(64), nullable=False, unique=True, index=True)
    label = db.Column(db.String(255), nullable=False)

    values = db.relationship("EnumValue", backref="enum", lazy=True, order_by="EnumValue.id")

    def __repr__(self) -> str:
        return f"<Enumeration id={self.id} code={self.code!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "code": self.code,
            "label": self.label,
            **self._timestamps(),
        }


class EnumValue(TimestampMixin, db.Model):
    """One value of a reference enumeration; its id is used as a status_id."""
    __tablename__ = "enum_values"
    __table_args__ = (
        db.UniqueConstraint("enum_id", "code", name="uq_enum_values_enum_code"),
        {"sqlite_autoincrement": True},
    )

    id = db.Column(db.Integer, primary_key=True)
    enum_id = db.Column(db.Integer, db.ForeignKey("enumerations.id"), nullable=False, index=True)
    code = db.Column(db.String(64), nullable=False)
    label = db.Column(db.String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<EnumValue id={self.id} enum_id={self.enum_id} code={self.code!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "enum_id": self.enum_id,
            "code": self.code,
            "label": self.label,
            **self._timestamps(),
        }
