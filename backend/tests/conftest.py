"""
Pytest fixtures for storefront backend tests.

Every test gets its own application (fresh status catalog cache) on an
in-memory SQLite database with the status enumerations seeded.
"""

from decimal import Decimal

import pytest
from storefront import create_app
from storefront.extensions import db
from storefront.models import Category, Product, Person, Cart, CartItem
from storefront.services import reference_service
from storefront.services.status_catalog import status_catalog, CartItemStatus, ProductStatus
from storefront.services.unit_of_work import with_transaction


API_TOKENS = "tok-admin=manager:admin,tok-alice=alice:guest,tok-bob=bob:guest,tok-ghost=ghost:guest"


def make_app(database_uri: str):
    return create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': database_uri,
        'API_TOKENS': API_TOKENS,
        'STATUS_CATALOG_WARMUP': False,
        'LOG_LEVEL': 'DEBUG',
    })


@pytest.fixture(scope='function')
def app():
    """Create application for testing."""
    app = make_app('sqlite:///:memory:')

    with app.app_context():
        db.create_all()
        reference_service.seed_statuses()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    yield db.session
    db.session.rollback()


def status_id(status) -> int:
    return with_transaction(lambda u: status_catalog.id_of(u, status), write=False)


def status_code(entity) -> str:
    """Current status code of a row, read fresh from the database."""
    db.session.refresh(entity)
    return with_transaction(lambda u: status_catalog.code_of(u, entity.status_id), write=False)


@pytest.fixture(scope='function')
def category(db_session):
    category = Category(code="GENERAL", label="General")
    db_session.add(category)
    db_session.commit()
    return category


@pytest.fixture(scope='function')
def make_person(db_session):
    """Factory: make_person("alice", id=7)."""
    def _make(user_login, **fields):
        person = Person(user_login=user_login, **fields)
        db_session.add(person)
        db_session.commit()
        return person
    return _make


@pytest.fixture(scope='function')
def make_product(db_session, category):
    """Factory: make_product(quantity=10, id=1)."""
    counter = {"n": 0}

    def _make(quantity=10, price="9.99", available=True, **fields):
        counter["n"] += 1
        status = ProductStatus.AVAILABLE if available else ProductStatus.UNAVAILABLE
        product = Product(
            code=fields.pop("code", f"P{counter['n']}"),
            sku=fields.pop("sku", f"SKU-{counter['n']:04d}"),
            label=fields.pop("label", f"Product {counter['n']}"),
            price=Decimal(price),
            quantity=quantity,
            category_id=category.id,
            status_id=status_id(status),
            **fields,
        )
        db_session.add(product)
        db_session.commit()
        return product
    return _make


@pytest.fixture(scope='function')
def make_cart(db_session):
    def _make(person):
        cart = Cart(person_id=person.id)
        db_session.add(cart)
        db_session.commit()
        return cart
    return _make


@pytest.fixture(scope='function')
def seed_cart_item(db_session):
    """Insert a Created cart line directly, bypassing the advisory stock check."""
    def _make(cart, product, quantity):
        cart_item = CartItem(
            cart_id=cart.id,
            product_id=product.id,
            quantity=quantity,
            status_id=status_id(CartItemStatus.CREATED),
        )
        db_session.add(cart_item)
        db_session.commit()
        return cart_item
    return _make


@pytest.fixture(scope='function')
def alice(make_person, make_cart):
    person = make_person("alice", id=7, firstname="Alice")
    make_cart(person)
    return person


@pytest.fixture(scope='function')
def bob(make_person, make_cart):
    person = make_person("bob", id=8, firstname="Bob")
    make_cart(person)
    return person


@pytest.fixture(scope='function')
def manager(make_person):
    return make_person("manager", id=5, firstname="Mona")


def auth_headers(token: str) -> dict:
    """Helper to create Authorization headers."""
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture(scope='function')
def admin_headers(manager):
    return auth_headers("tok-admin")


@pytest.fixture(scope='function')
def alice_headers(alice):
    return auth_headers("tok-alice")


@pytest.fixture(scope='function')
def bob_headers(bob):
    return auth_headers("tok-bob")
