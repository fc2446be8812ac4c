"""Database engine & session management.

`Store` is the explicit handle every service receives: it owns one SQLAlchemy
engine plus its session factory. The module-level helpers keep a lazily built
default store (configured from the environment) for wiring and tests.
"""
from __future__ import annotations

import os
import threading
from contextlib import contextmanager
from typing import Callable, Iterator, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session as SASession, sessionmaker
from sqlalchemy.pool import StaticPool

from bookrec import config as app_config
from bookrec.db.models import Base
from bookrec.utils.logging import get_logger

LOG = get_logger("bookrec.db")


def _is_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:")


class Store:
    """Owned connection handle for the library database."""

    def __init__(self, url: str, *, echo: bool = False) -> None:
        self.url = url
        kwargs = {"future": True, "echo": echo}
        if _is_memory_sqlite(url):
            # one shared connection, otherwise each session sees an empty db
            kwargs["poolclass"] = StaticPool
            kwargs["connect_args"] = {"check_same_thread": False}
        elif url.startswith("sqlite:///"):
            parent_dir = os.path.dirname(os.path.abspath(url[len("sqlite:///"):])) or "."
            os.makedirs(parent_dir, exist_ok=True)
        self.engine: Engine = create_engine(url, **kwargs)
        self._session_factory: Callable[[], SASession] = sessionmaker(
            bind=self.engine, expire_on_commit=False, class_=SASession
        )

    @classmethod
    def from_config(cls) -> "Store":
        return cls(app_config.get_db_url())

    def create_schema(self) -> None:
        Base.metadata.create_all(self.engine)
        LOG.debug("library schema ready url=%s", self.url)

    def drop_schema(self) -> None:
        Base.metadata.drop_all(self.engine)

    def dispose(self) -> None:
        self.engine.dispose()

    def new_session(self) -> SASession:
        return self._session_factory()

    @contextmanager
    def session(self) -> Iterator[SASession]:
        sess = self.new_session()
        try:
            yield sess
            sess.commit()
        except Exception:
            sess.rollback()
            raise
        finally:
            sess.close()

    def ping(self) -> bool:
        with self.session() as s:
            s.execute(text("SELECT 1"))
        return True

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Store url={self.url}>"


_store: Optional[Store] = None
_LOCK = threading.Lock()


def init_engine_once() -> Store:
    global _store
    if _store is not None:
        return _store
    with _LOCK:
        if _store is not None:
            return _store
        store = Store.from_config()
        LOG.info("Initializing library database engine at %s", store.url)
        store.create_schema()
        _store = store
        return _store


def get_store() -> Store:
    if _store is None:
        return init_engine_once()
    return _store


def reset_for_tests(drop: bool = False) -> None:
    global _store
    with _LOCK:
        if _store is not None:
            if drop:
                try:
                    _store.drop_schema()
                except Exception:
                    LOG.warning("Failed dropping tables during reset", exc_info=True)
            _store.dispose()
        _store = None


__all__ = [
    "Store",
    "init_engine_once",
    "get_store",
    "reset_for_tests",
]
