import pytest

from storefront.errors import ValidationError
from storefront.services.status_catalog import OrderStatus
from storefront.validation import (
    parse_id_list,
    parse_order_status,
    parse_page,
    parse_positive_int,
    parse_status_target,
)


@pytest.mark.parametrize("value,expected", [(1, 1), ("42", 42), (" 7 ", 7)])
def test_positive_int_accepts(value, expected):
    assert parse_positive_int(value, "id") == expected


@pytest.mark.parametrize("value", [0, -1, "0", "-3", "1.0", "1e2", "", "²", None, 2.0, False, [1]])
def test_positive_int_rejects(value):
    with pytest.raises(ValidationError) as exc:
        parse_positive_int(value, "id")
    assert exc.value.details == {"id": value}


def test_id_list():
    assert parse_id_list([3, "1", 2], "cart_item_ids") == [3, 1, 2]


@pytest.mark.parametrize("value", [[], None, "1,2", [1, 1], [1, "x"]])
def test_id_list_rejects(value):
    with pytest.raises(ValidationError):
        parse_id_list(value, "cart_item_ids")


def test_status_target():
    assert parse_status_target("Approved") is OrderStatus.APPROVED
    assert parse_status_target("Cancelled") is OrderStatus.CANCELLED
    for bad in ("InProgress", "approved", "", None):
        with pytest.raises(ValidationError):
            parse_status_target(bad)


def test_order_status():
    assert parse_order_status("InProgress") is OrderStatus.IN_PROGRESS
    with pytest.raises(ValidationError):
        parse_order_status("Pending")


def test_page_clamps():
    assert parse_page(None, None) == (50, 0)
    assert parse_page("500", "-4") == (100, 0)
    assert parse_page(0, 3) == (1, 3)
