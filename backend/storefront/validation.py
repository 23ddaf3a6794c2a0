from __future__ import annotations

from typing import Any

from .errors import ValidationError
from .services.order_service import ALLOWED_TARGETS
from .services.status_catalog import OrderStatus


def parse_positive_int(value: Any, field: str) -> int:
    """
    Strict positive integer: rejects bools, floats, decimals and scientific notation.

    Raises:
        ValidationError: With the offending field and value in details
    """
    if isinstance(value, int) and not isinstance(value, bool):
        result = value
    elif isinstance(value, str):
        stripped = value.strip()
        # Reject "1e3", "12.5", "+4" and friends; only plain digits pass
        if not (stripped.isascii() and stripped.isdigit()):
            raise ValidationError(f"{field} must be a positive integer", details={field: value})
        result = int(stripped)
    else:
        raise ValidationError(f"{field} must be a positive integer", details={field: value})

    if result < 1:
        raise ValidationError(f"{field} must be a positive integer", details={field: value})
    return result


def parse_optional_positive_int(value: Any, field: str) -> int | None:
    if value is None:
        return None
    return parse_positive_int(value, field)


def parse_id_list(value: Any, field: str) -> list[int]:
    """Non-empty list of distinct positive integer ids."""
    if not isinstance(value, list) or not value:
        raise ValidationError(f"{field} must be a non-empty list of ids", details={field: value})
    ids = [parse_positive_int(item, field) for item in value]
    if len(set(ids)) != len(ids):
        raise ValidationError(f"{field} must not contain duplicates", details={field: value})
    return ids


def parse_status_target(value: Any) -> OrderStatus:
    """Approved or Cancelled; anything else is rejected before the core runs."""
    for target in ALLOWED_TARGETS:
        if value == target.value:
            return target
    raise ValidationError(
        "target must be one of: " + ", ".join(t.value for t in ALLOWED_TARGETS),
        details={"target": value},
    )


def parse_order_status(value: Any) -> OrderStatus:
    try:
        return OrderStatus(value)
    except ValueError:
        raise ValidationError(
            f"Unknown order status '{value}'",
            details={"allowed": [s.value for s in OrderStatus]},
        ) from None


def parse_page(limit: Any, offset: Any, *, default_limit: int = 50, max_limit: int = 100) -> tuple[int, int]:
    """Clamp limit/offset query values; non-integers are a ValidationError."""
    limit = default_limit if limit is None else _parse_int(limit, "limit")
    offset = 0 if offset is None else _parse_int(offset, "offset")
    return max(1, min(limit, max_limit)), max(0, offset)


def _parse_int(value: Any, field: str) -> int:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.isascii() and stripped.lstrip("-").isdigit():
            return int(stripped)
    raise ValidationError(f"{field} must be an integer", details={field: value})


def optional_text(value: Any, field: str) -> str | None:
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string", details={field: value})
    return value.strip()
