# Overview: Status catalog; resolves (enum code, value code) pairs to status ids with a process-local cache.

"""
Status catalog

Statuses live in the reference tables (enumerations -> enum_values). The
core never compares status strings at call sites: it works with the typed
enumerations below and asks the catalog for the numeric id once.

CACHING:
- Lookups are memoised per application in app.extensions["status_catalog"].
- The cache is filled lazily (get-or-fill); a miss queries the store.
- No invalidation: status codes are append-only domain data.
- Concurrent fills are idempotent (same key -> same id), guarded by a lock
  only to keep the two directions of the map consistent.
"""

from __future__ import annotations

import enum
import threading

from flask import current_app

from ..errors import NotFoundError
from ..repositories import enum_values as enum_value_repo


class StatusDomain(enum.Enum):
    """A status enumeration whose class name is its reference enum code."""

    @classmethod
    def enum_code(cls) -> str:
        return cls.__name__

    @classmethod
    def from_code(cls, value_code: str):
        try:
            return cls(value_code)
        except ValueError:
            raise NotFoundError(
                f"Unknown {cls.__name__} code '{value_code}'",
                details={"enum_code": cls.__name__, "value_code": value_code},
            ) from None


class OrderStatus(StatusDomain):
    IN_PROGRESS = "InProgress"
    APPROVED = "Approved"
    CANCELLED = "Cancelled"


class OrderItemStatus(StatusDomain):
    IN_PROGRESS = "InProgress"
    APPROVED = "Approved"
    CANCELLED = "Cancelled"


class CartItemStatus(StatusDomain):
    CREATED = "Created"
    PENDING = "Pending"
    APPROVED = "Approved"
    CANCELLED = "Cancelled"


class ProductStatus(StatusDomain):
    AVAILABLE = "Available"
    UNAVAILABLE = "Unavailable"


# Domains the purchase workflow cannot run without
CORE_STATUS_DOMAINS = (OrderStatus, OrderItemStatus, CartItemStatus)
STATUS_DOMAINS = CORE_STATUS_DOMAINS + (ProductStatus,)

STATUS_LABELS = {
    OrderStatus: "Order status",
    OrderItemStatus: "Order item status",
    CartItemStatus: "Cart item status",
    ProductStatus: "Product status",
}


class _CatalogCache:
    def __init__(self):
        self.lock = threading.Lock()
        self.ids: dict[tuple[str, str], int] = {}
        self.codes: dict[int, tuple[str, str]] = {}

    def put(self, enum_code: str, value_code: str, status_id: int) -> None:
        with self.lock:
            self.ids[(enum_code, value_code)] = status_id
            self.codes[status_id] = (enum_code, value_code)


class StatusCatalog:
    """Flask-extension style holder; the cache itself lives on the app."""

    extension_key = "status_catalog"

    def init_app(self, app) -> None:
        app.extensions[self.extension_key] = _CatalogCache()

    @property
    def _cache(self) -> _CatalogCache:
        return current_app.extensions[self.extension_key]

    def resolve(self, uow, enum_code: str, value_code: str) -> int:
        """
        Resolve (enum_code, value_code) to the enum_values.id used as status_id.

        Raises:
            NotFoundError: If either code is unknown to the reference table
        """
        cache = self._cache
        status_id = cache.ids.get((enum_code, value_code))
        if status_id is not None:
            return status_id

        value = enum_value_repo.find_by_codes(uow, enum_code, value_code)
        if value is None:
            raise NotFoundError(
                f"Status '{enum_code}/{value_code}' not found",
                details={"enum_code": enum_code, "value_code": value_code},
            )
        cache.put(enum_code, value_code, value.id)
        return value.id

    def code_of(self, uow, status_id: int) -> str:
        """Reverse lookup: status_id -> value code."""
        return self._entry_of(uow, status_id)[1]

    def _entry_of(self, uow, status_id: int) -> tuple[str, str]:
        cache = self._cache
        entry = cache.codes.get(status_id)
        if entry is not None:
            return entry

        value = enum_value_repo.find_by_id(uow, status_id)
        if value is None:
            raise NotFoundError("Status not found", details={"status_id": status_id})
        entry = (value.enum.code, value.code)
        cache.put(entry[0], entry[1], status_id)
        return entry

    def id_of(self, uow, status: StatusDomain) -> int:
        """Typed variant of resolve()."""
        return self.resolve(uow, status.enum_code(), status.value)

    def status_of(self, uow, domain: type[StatusDomain], status_id: int) -> StatusDomain:
        """
        Map a stored status_id back onto a member of domain.

        Raises:
            NotFoundError: If the id is unknown or belongs to another enumeration
        """
        enum_code, value_code = self._entry_of(uow, status_id)
        if enum_code != domain.enum_code():
            raise NotFoundError(
                f"Status {status_id} is not a {domain.enum_code()}",
                details={"status_id": status_id, "enum_code": enum_code},
            )
        return domain.from_code(value_code)

    def load(self, uow, domains=CORE_STATUS_DOMAINS) -> dict[StatusDomain, int]:
        """
        Resolve every member of the given domains into the cache.

        Returns the resolved mapping. Raises NotFoundError on the first
        missing status, so a partially seeded table fails loudly.
        """
        return {member: self.id_of(uow, member) for domain in domains for member in domain}

    def cached(self) -> dict[tuple[str, str], int]:
        return dict(self._cache.ids)


status_catalog = StatusCatalog()
