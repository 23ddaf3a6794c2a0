"""
Status catalog tests.

Verifies:
- (enum code, value code) resolves to the stored enum value id
- Reverse lookup and typed lookups agree
- Unknown codes raise NotFoundError
- Lookups are memoised per application
"""

import pytest

from storefront.errors import NotFoundError
from storefront.extensions import db
from storefront.models import Enumeration, EnumValue
from storefront.services import reference_service
from storefront.services.status_catalog import (
    CORE_STATUS_DOMAINS,
    CartItemStatus,
    OrderItemStatus,
    OrderStatus,
    ProductStatus,
    status_catalog,
)
from storefront.services.unit_of_work import with_transaction


def _run(func):
    return with_transaction(func, write=False)


class TestResolve:

    def test_resolves_seeded_value(self, app):
        stored = (
            db.session.query(EnumValue)
            .join(Enumeration)
            .filter(Enumeration.code == "OrderStatus", EnumValue.code == "Approved")
            .one()
        )
        assert _run(lambda u: status_catalog.resolve(u, "OrderStatus", "Approved")) == stored.id

    def test_same_code_in_different_enums_has_different_ids(self, app):
        order_id = _run(lambda u: status_catalog.id_of(u, OrderStatus.APPROVED))
        item_id = _run(lambda u: status_catalog.id_of(u, OrderItemStatus.APPROVED))
        cart_id = _run(lambda u: status_catalog.id_of(u, CartItemStatus.APPROVED))
        assert len({order_id, item_id, cart_id}) == 3

    def test_unknown_value_code(self, app):
        with pytest.raises(NotFoundError) as exc:
            _run(lambda u: status_catalog.resolve(u, "OrderStatus", "Shipped"))
        assert exc.value.details == {"enum_code": "OrderStatus", "value_code": "Shipped"}

    def test_unknown_enum_code(self, app):
        with pytest.raises(NotFoundError):
            _run(lambda u: status_catalog.resolve(u, "NoSuchEnum", "Approved"))


class TestReverseLookup:

    def test_code_of_round_trips(self, app):
        for domain in CORE_STATUS_DOMAINS:
            for member in domain:
                status_id = _run(lambda u: status_catalog.id_of(u, member))
                assert _run(lambda u: status_catalog.code_of(u, status_id)) == member.value

    def test_status_of_rejects_other_domain(self, app):
        cart_created = _run(lambda u: status_catalog.id_of(u, CartItemStatus.CREATED))
        with pytest.raises(NotFoundError):
            _run(lambda u: status_catalog.status_of(u, OrderStatus, cart_created))

    def test_code_of_unknown_id(self, app):
        with pytest.raises(NotFoundError):
            _run(lambda u: status_catalog.code_of(u, 999_999))


class TestCaching:

    def test_lookup_is_memoised(self, app):
        assert ("OrderStatus", "InProgress") not in status_catalog.cached()
        first = _run(lambda u: status_catalog.id_of(u, OrderStatus.IN_PROGRESS))
        assert status_catalog.cached()[("OrderStatus", "InProgress")] == first

        # Cached entries survive the row going away (append-only data)
        db.session.query(EnumValue).filter_by(id=first).update({"code": "Renamed"})
        db.session.commit()
        assert _run(lambda u: status_catalog.id_of(u, OrderStatus.IN_PROGRESS)) == first

    def test_load_resolves_every_core_status(self, app):
        resolved = _run(lambda u: status_catalog.load(u))
        expected = sum(len(list(domain)) for domain in CORE_STATUS_DOMAINS)
        assert len(resolved) == expected
        assert len(status_catalog.cached()) == expected

    def test_load_fails_loudly_when_not_seeded(self, app):
        db.session.query(EnumValue).filter_by(code="Pending").delete()
        db.session.commit()
        with pytest.raises(NotFoundError):
            _run(lambda u: status_catalog.load(u))


class TestSeeding:

    def test_seed_is_idempotent(self, app):
        before = db.session.query(EnumValue).count()
        assert reference_service.seed_statuses() == 0
        assert db.session.query(EnumValue).count() == before

    def test_seed_adds_missing_values(self, app):
        db.session.query(EnumValue).filter_by(code="Unavailable").delete()
        db.session.commit()
        assert reference_service.seed_statuses() == 1
        assert _run(lambda u: status_catalog.id_of(u, ProductStatus.UNAVAILABLE))

    def test_seeded_codes(self, app):
        rows = reference_service.list_statuses()
        by_enum = {}
        for enum_code, value_code, _ in rows:
            by_enum.setdefault(enum_code, set()).add(value_code)
        assert by_enum == {
            "OrderStatus": {"InProgress", "Approved", "Cancelled"},
            "OrderItemStatus": {"InProgress", "Approved", "Cancelled"},
            "CartItemStatus": {"Created", "Pending", "Approved", "Cancelled"},
            "ProductStatus": {"Available", "Unavailable"},
        }
