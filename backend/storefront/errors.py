"""
Error kinds surfaced by the storefront core.

Domain errors describe a request the business rules reject; they propagate
unchanged from the service layer to the routes and are never retried.
Technical errors wrap store failures and cancellation.
"""

from __future__ import annotations


class StorefrontError(Exception):
    """Base error with a human-readable message and structured details."""

    code = "ERROR"
    http_status = 500

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code, "details": self.details}


class DomainError(StorefrontError):
    """A business rule rejected the operation."""

    code = "DOMAIN_ERROR"
    http_status = 409


class NotFoundError(DomainError):
    """Referenced entity does not exist."""

    code = "NOT_FOUND"
    http_status = 404


class InvalidStateError(DomainError):
    """Entity exists but its current state does not permit the operation."""

    code = "INVALID_STATE"


class InvalidTransitionError(DomainError):
    """Requested state machine edge is not defined."""

    code = "INVALID_TRANSITION"


class InsufficientStockError(DomainError):
    """Operation would drive product stock below zero."""

    code = "INSUFFICIENT_STOCK"


class ConflictError(DomainError):
    """Uniqueness or ownership rule violated."""

    code = "CONFLICT"


class ValidationError(StorefrontError):
    """400-level input problem caught by the transport before the core."""

    code = "VALIDATION_ERROR"
    http_status = 400


class TechnicalError(StorefrontError):
    """Store I/O, serialisation failure or other non-business failure."""

    code = "TECHNICAL_ERROR"
    http_status = 500


class OperationCancelled(TechnicalError):
    """The caller cancelled the operation before it committed."""

    code = "CANCELLED"
    http_status = 503
