"""Store contract: insert / update / find / find_where / delete_by_id per entity."""

import pytest

from storefront.errors import NotFoundError
from storefront.models import Category, Person
from storefront.repositories import categories as category_repo
from storefront.repositories import order_items as order_item_repo
from storefront.repositories import orders as order_repo
from storefront.repositories import persons as person_repo
from storefront.repositories import products as product_repo
from storefront.services import cart_service, order_service
from storefront.services.unit_of_work import with_transaction


def test_person_crud(app):
    def _op(u):
        person = person_repo.insert(u, Person(user_login="carol"))
        person.phone = "555-0100"
        person_repo.update(u, person)
        return person.id

    person_id = with_transaction(_op)
    found = with_transaction(lambda u: person_repo.find_by_id(u, person_id), write=False)
    assert found.phone == "555-0100"
    assert [p.id for p in with_transaction(lambda u: person_repo.find_all(u), write=False)] == [person_id]

    with_transaction(lambda u: person_repo.delete_by_id(u, person_id))
    assert with_transaction(lambda u: person_repo.find_by_id(u, person_id), write=False) is None
    with pytest.raises(NotFoundError):
        with_transaction(lambda u: person_repo.delete_by_id(u, person_id))


def test_soft_deleted_person_is_not_resolved(make_person):
    from datetime import datetime, timezone

    person = make_person("gone", deleted_at=datetime.now(timezone.utc))
    with pytest.raises(NotFoundError):
        with_transaction(lambda u: person_repo.get_by_id(u, person.id), write=False)
    assert with_transaction(lambda u: person_repo.find_by_user_login(u, "gone"), write=False) is None


def test_find_where_filters_and_orders(app):
    def _seed(u):
        for code in ("B", "A", "C"):
            category_repo.insert(u, Category(code=code, label=code.lower()))

    with_transaction(_seed)
    rows = with_transaction(lambda u: category_repo.find_where(u, code=["A", "C"]), write=False)
    assert [c.code for c in rows] == ["A", "C"]
    with pytest.raises(ValueError):
        with_transaction(lambda u: category_repo.find_where(u, nope=1), write=False)


def test_product_find_for_update_sees_committed_stock(make_product):
    product = make_product(quantity=3)

    def _op(u):
        locked = product_repo.find_for_update(u, product.id)
        locked.quantity = 1
        return product_repo.update(u, locked).quantity

    assert with_transaction(_op) == 1
    assert with_transaction(lambda u: product_repo.find_for_update(u, 999), write=False) is None


def test_order_item_lookups(alice, make_product):
    product = make_product()
    cart_item = cart_service.add_to_cart(alice.id, product.id, 1)
    order = order_service.create_order(alice.id, [cart_item.id])

    def _op(u):
        open_items = order_item_repo.find_by_cart_item_in_orders_with_status(u, cart_item.id, [order.status_id])
        return [i.order_id for i in open_items], len(order_item_repo.find_all(u)), len(order_repo.find_all(u))

    assert with_transaction(_op, write=False) == ([order.id], 1, 1)
