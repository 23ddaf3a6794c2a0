"""
Transaction boundary tests.

Verifies:
- Commit on success, rollback on any error
- Nested with_transaction() joins the outer unit of work
- Store errors surface as TechnicalError with the cause chained
- Cancellation before commit rolls everything back
"""

import pytest
from sqlalchemy.exc import IntegrityError

from storefront.errors import ConflictError, OperationCancelled, TechnicalError
from storefront.extensions import db
from storefront.models import Category, Person
from storefront.repositories import persons as person_repo
from storefront.services.unit_of_work import CancelToken, UnitOfWork, with_transaction


def _count_persons():
    return db.session.query(Person).count()


def test_commits_on_success(app):
    with_transaction(lambda u: person_repo.insert(u, Person(user_login="carol")))
    db.session.expunge_all()
    assert _count_persons() == 1


def test_rolls_back_on_domain_error(app):
    def _op(u):
        person_repo.insert(u, Person(user_login="carol"))
        raise ConflictError("nope")

    with pytest.raises(ConflictError):
        with_transaction(_op)
    assert _count_persons() == 0


def test_rolls_back_on_base_exception(app):
    def _op(u):
        person_repo.insert(u, Person(user_login="carol"))
        raise KeyboardInterrupt()

    with pytest.raises(KeyboardInterrupt):
        with_transaction(_op)
    assert _count_persons() == 0


def test_store_error_becomes_technical_error(app):
    def _op(u):
        person_repo.insert(u, Person(user_login="dup"))
        person_repo.insert(u, Person(user_login="dup"))

    with pytest.raises(TechnicalError) as exc:
        with_transaction(_op)
    assert isinstance(exc.value.__cause__, IntegrityError)
    assert exc.value.details == {"cause": "IntegrityError"}
    assert _count_persons() == 0


def test_nested_call_joins_outer_transaction(app):
    seen = []

    def _inner(u):
        seen.append(u)
        person_repo.insert(u, Person(user_login="inner"))

    def _outer(u):
        person_repo.insert(u, Person(user_login="outer"))
        with_transaction(_inner, u)
        seen.append(u)
        raise ConflictError("abort everything")

    with pytest.raises(ConflictError):
        with_transaction(_outer)

    assert seen[0] is seen[1]
    # The inner insert did not commit on its own
    assert _count_persons() == 0


def test_inactive_uow_is_not_joined(app):
    stale = UnitOfWork(db.session)
    captured = []
    with_transaction(lambda u: captured.append(u), stale)
    assert captured[0] is not stale


def test_cancelled_before_start(app):
    token = CancelToken()
    token.cancel("client went away")
    with pytest.raises(OperationCancelled) as exc:
        with_transaction(lambda u: person_repo.insert(u, Person(user_login="x")), cancel_token=token)
    assert exc.value.details == {"reason": "client went away"}
    assert exc.value.http_status == 503


def test_cancelled_midway_rolls_back(app):
    token = CancelToken()

    def _op(u):
        person_repo.insert(u, Person(user_login="first"))
        token.cancel()
        person_repo.insert(u, Person(user_login="second"))

    with pytest.raises(OperationCancelled):
        with_transaction(_op, cancel_token=token)
    assert _count_persons() == 0


def test_cancelled_before_commit_rolls_back(app):
    token = CancelToken()

    def _op(u):
        person_repo.insert(u, Person(user_login="only"))
        token.cancel()

    with pytest.raises(OperationCancelled):
        with_transaction(_op, cancel_token=token)
    assert _count_persons() == 0
    assert isinstance(OperationCancelled("x"), TechnicalError)


def test_unit_of_work_is_inactive_after_exit(app):
    captured = []
    with_transaction(lambda u: captured.append(u))
    assert captured[0].active is False


def test_not_null_violation_is_technical(app):
    with pytest.raises(TechnicalError):
        with_transaction(lambda u: u.session.add(Category(code=None, label="x")) or u.session.flush())
