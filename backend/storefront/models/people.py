from __future__ import annotations

from ..extensions import db
from .base import TimestampMixin, to_utc_z


class Person(TimestampMixin, db.Model):
    """
    A client or manager known to the shop.

    user_login links the person to the identity provider; deleted_at is a
    soft-delete marker and soft-deleted persons are not resolved by login.
    """
    __tablename__ = "persons"
    __table_args__ = {"sqlite_autoincrement": True}

    id = db.Column(db.Integer, primary_key=True)
    user_login = db.Column(db.String(128), nullable=False, unique=True, index=True)
    firstname = db.Column(db.String(128), nullable=True)
    lastname = db.Column(db.String(128), nullable=True)
    phone = db.Column(db.String(32), nullable=True)
    deleted_at = db.Column(db.DateTime(timezone=True), nullable=True)

    def __repr__(self) -> str:
        return f"<Person id={self.id} user_login={self.user_login!r}>"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "user_login": self.user_login,
            "firstname": self.firstname,
            "lastname": self.lastname,
            "phone": self.phone,
            "deleted_at": to_utc_z(self.deleted_at),
            **self._timestamps(),
        }
