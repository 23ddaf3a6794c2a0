# Overview: Transaction boundary for the order workflow; unit-of-work, row locks and cancellation.

"""
Unit of work

Every public workflow entry point runs its store operations through
with_transaction(). The closure receives a UnitOfWork and passes it
explicitly to every repository call, so "are we inside a transaction?"
is visible in the signatures rather than hidden in ambient state.

RULES:
1. A UnitOfWork handed to with_transaction() while still active is joined:
   the inner closure runs inside the outer transaction (no savepoints).
2. Closure returns normally -> commit.
3. Closure raises anything (domain error, store error, KeyboardInterrupt)
   -> rollback, then the error is re-raised.
4. SQLAlchemy errors are re-raised as TechnicalError with the original
   exception chained; domain errors surface unchanged.
5. Cancellation is checked before every repository call and before commit.

ISOLATION:
- Default READ COMMITTED, applied as an engine option in create_app().
- Correctness of stock decrements relies on lock_for_update() on the
  product row, not on the isolation level.
- SQLite ignores SELECT ... FOR UPDATE, so write transactions there start
  with BEGIN IMMEDIATE, which serialises writers for the whole transaction.
"""

from __future__ import annotations

import threading
from typing import Callable, TypeVar

from flask import current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..extensions import db
from ..errors import OperationCancelled, TechnicalError

T = TypeVar("T")


class CancelToken:
    """Cooperative cancellation flag shared between a caller and a workflow step."""

    def __init__(self):
        self._event = threading.Event()
        self.reason: str | None = None

    def cancel(self, reason: str = "cancelled by caller") -> None:
        self.reason = reason
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


class UnitOfWork:
    """Scoped handle under which all store operations share one transaction."""

    def __init__(
        self,
        session: Session,
        *,
        cancel_token: CancelToken | None = None,
        write: bool = True,
    ):
        self.session = session
        self.cancel_token = cancel_token
        self.write = write
        self.active = False
        self.depth = 0

    def __repr__(self) -> str:
        return f"<UnitOfWork active={self.active} depth={self.depth} write={self.write}>"

    def checkpoint(self) -> None:
        """Raise OperationCancelled if the caller cancelled this unit of work."""
        if self.cancel_token is not None and self.cancel_token.cancelled:
            raise OperationCancelled(
                "Operation cancelled before commit",
                details={"reason": self.cancel_token.reason},
            )

    def begin(self) -> None:
        self.active = True
        if self.write and self.session.get_bind().dialect.name == "sqlite":
            dbapi_connection = self.session.connection().connection.dbapi_connection
            # Only when the driver has not already opened a transaction on
            # this connection (pending writes from the caller).
            if not dbapi_connection.in_transaction:
                self.session.execute(text("BEGIN IMMEDIATE"))

    def commit(self) -> None:
        self.checkpoint()
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


def with_transaction(
    func: Callable[[UnitOfWork], T],
    uow: UnitOfWork | None = None,
    *,
    cancel_token: CancelToken | None = None,
    write: bool = True,
) -> T:
    """
    Run func inside a unit of work, creating one or joining uow.

    Args:
        func: Closure receiving the active UnitOfWork
        uow: An enclosing unit of work to join, if any
        cancel_token: Cancellation flag for a new unit of work
        write: False for read-only steps (skips the SQLite writer lock)

    Returns:
        Whatever func returns, after commit
    """
    if uow is not None and uow.active:
        uow.depth += 1
        try:
            return func(uow)
        finally:
            uow.depth -= 1

    uow = UnitOfWork(db.session, cancel_token=cancel_token, write=write)
    try:
        uow.checkpoint()
        uow.begin()
        result = func(uow)
        uow.commit()
        return result
    except SQLAlchemyError as exc:
        uow.rollback()
        current_app.logger.error("Transaction rolled back after store error: %s", exc)
        raise TechnicalError("Store operation failed", details={"cause": type(exc).__name__}) from exc
    except BaseException:
        uow.rollback()
        raise
    finally:
        uow.active = False


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE; UnitOfWork.begin() takes
    the database write lock there instead.
    """
    return query.with_for_update()
