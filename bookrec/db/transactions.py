"""Read and write scopes that translate store faults into engine errors.

``transaction`` is the unit of work for multi-row mutations: begin, run every
write, commit on success, roll back on any fault. The session (and with it
the connection's transaction state) is released on every exit path.
"""
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from sqlalchemy.exc import DBAPIError, SQLAlchemyError
from sqlalchemy.orm import Session

from bookrec.db.engine import Store
from bookrec.errors import ErrorReason, StoreUnavailableError, TransactionFailedError
from bookrec.utils.logging import get_logger

LOG = get_logger("bookrec.db.transactions")


@contextmanager
def read_session(store: Store) -> Iterator[Session]:
    try:
        with store.session() as session:
            yield session
    except DBAPIError as exc:
        LOG.error("Store read failed: %s", exc)
        raise StoreUnavailableError(ErrorReason.STORE_UNAVAILABLE, detail=str(exc)) from exc


@contextmanager
def transaction(store: Store, *, operation: str = "write") -> Iterator[Session]:
    session = store.new_session()
    try:
        yield session
        session.commit()
    except SQLAlchemyError as exc:
        session.rollback()
        LOG.error("Transaction failed during %s, rolled back: %s", operation, exc)
        raise TransactionFailedError(
            ErrorReason.TRANSACTION_FAILED, operation=operation, detail=str(exc)
        ) from exc
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


__all__ = ["read_session", "transaction"]
