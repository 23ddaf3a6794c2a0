"""
Concurrent approval tests.

Runs approvals from separate threads, each with its own application
context and session, against a file-backed SQLite database so the
transactions really contend for the same rows.
"""

import threading
from decimal import Decimal

import pytest

from conftest import API_TOKENS
from storefront import create_app
from storefront.errors import InsufficientStockError
from storefront.extensions import db
from storefront.models import Cart, Category, Order, Person, Product
from storefront.services import cart_service, order_service, reference_service
from storefront.services.status_catalog import ProductStatus, status_catalog
from storefront.services.unit_of_work import with_transaction


@pytest.fixture
def file_app(tmp_path):
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'storefront.sqlite3'}",
        'SQLALCHEMY_ENGINE_OPTIONS': {"connect_args": {"timeout": 30}},
        'API_TOKENS': API_TOKENS,
        'STATUS_CATALOG_WARMUP': False,
    })
    with app.app_context():
        db.create_all()
        reference_service.seed_statuses()
        yield app
        db.session.remove()
        db.drop_all()


def _seed_orders(quantity_on_hand, line_quantities):
    """One product, one client, one single-line order per requested quantity."""
    category = Category(code="GENERAL", label="General")
    client = Person(user_login="alice")
    manager = Person(user_login="manager")
    db.session.add_all([category, client, manager])
    db.session.commit()

    available = with_transaction(lambda u: status_catalog.id_of(u, ProductStatus.AVAILABLE), write=False)
    product = Product(
        code="P", sku="SKU-P", label="Widget", price=Decimal("1.00"),
        quantity=quantity_on_hand, category_id=category.id, status_id=available,
    )
    db.session.add_all([product, Cart(person_id=client.id)])
    db.session.commit()

    order_ids = []
    for quantity in line_quantities:
        cart_item = cart_service.add_to_cart(client.id, product.id, quantity)
        order_ids.append(order_service.create_order(client.id, [cart_item.id]).id)
    return product.id, manager.id, order_ids


def _approve_concurrently(app, order_ids, manager_id):
    barrier = threading.Barrier(len(order_ids))
    outcomes = {}

    def _worker(order_id):
        with app.app_context():
            barrier.wait()
            try:
                order_service.change_order_status(order_id, manager_id, "Approved")
                outcomes[order_id] = "approved"
            except InsufficientStockError:
                outcomes[order_id] = "insufficient"
            except Exception as e:
                outcomes[order_id] = repr(e)
            finally:
                db.session.remove()

    threads = [threading.Thread(target=_worker, args=(oid,)) for oid in order_ids]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)
    return outcomes


def _state(product_id, order_ids):
    db.session.expire_all()
    quantity = db.session.get(Product, product_id).quantity
    statuses = {
        oid: with_transaction(
            lambda u, oid=oid: status_catalog.code_of(u, db.session.get(Order, oid).status_id),
            write=False,
        )
        for oid in order_ids
    }
    return quantity, statuses


def test_concurrent_approvals_serialise(file_app):
    product_id, manager_id, order_ids = _seed_orders(5, [3, 3])

    outcomes = _approve_concurrently(file_app, order_ids, manager_id)

    assert sorted(outcomes.values()) == ["approved", "insufficient"]
    quantity, statuses = _state(product_id, order_ids)
    assert quantity == 2
    for oid, outcome in outcomes.items():
        assert statuses[oid] == ("Approved" if outcome == "approved" else "InProgress")


def test_no_phantom_approval(file_app):
    lines = [2, 2, 2, 1]
    product_id, manager_id, order_ids = _seed_orders(5, lines)

    outcomes = _approve_concurrently(file_app, order_ids, manager_id)

    assert set(outcomes.values()) <= {"approved", "insufficient"}, outcomes
    approved_quantity = sum(q for oid, q in zip(order_ids, lines) if outcomes[oid] == "approved")
    quantity, statuses = _state(product_id, order_ids)
    assert quantity >= 0
    assert 5 - quantity == approved_quantity
    assert sum(1 for s in statuses.values() if s == "Approved") == list(outcomes.values()).count("approved")
