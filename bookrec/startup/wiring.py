"""Application initialization / wiring.

Orchestrates: store init, catalog cache warm-up, service composition and
route registration.
"""
from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

from bookrec.db.engine import Store, init_engine_once
from bookrec.services.catalog_cache import CatalogCache, CatalogEntry
from bookrec.services.catalog_service import AddBookResult, CatalogService
from bookrec.services.fines_service import FineReport, FineService
from bookrec.services.identity_service import Account, IdentityService
from bookrec.services.issuance_service import IssuanceService, IssueResult, ReturnResult
from bookrec.services.recommendation_service import RecommendationService
from bookrec.utils.logging import get_logger

LOG = get_logger("bookrec.startup")


class LibraryEngine:
    """Facade the presentation layer calls into.

    Calls are synchronous and may block on store I/O; callers dispatch them
    off any UI thread themselves. One logical operation at a time is
    expected against a given store.
    """

    def __init__(
        self,
        store: Store,
        *,
        today: Callable[[], date] = date.today,
        loan_days: Optional[int] = None,
        fine_rate: Optional[Decimal] = None,
        recommendation_limit: Optional[int] = None,
    ) -> None:
        self.store = store
        self.cache = CatalogCache(store)
        self.identity = IdentityService(store)
        self.issuance = IssuanceService(store, self.identity, loan_days=loan_days, today=today)
        self.fines = FineService(store, self.identity, rate=fine_rate, today=today)
        self.recommendations = RecommendationService(store, self.cache, limit=recommendation_limit)
        self.catalog = CatalogService(store, self.cache, today=today)

    # ---- catalog cache
    def reload(self) -> int:
        return self.cache.reload()

    def lookup(self, book_id: int) -> CatalogEntry:
        return self.cache.lookup(book_id)

    # ---- identity
    def resolve(self, username: str, role: str) -> Optional[int]:
        return self.identity.resolve(username, role)

    def authenticate(self, username: str, password: str, role: str) -> Optional[Account]:
        return self.identity.authenticate(username, password, role)

    def register_student(self, username: str, password: str, name: str, email: str) -> Account:
        return self.identity.register_student(username, password, name, email)

    def list_students(self) -> List[Dict[str, Any]]:
        return self.identity.list_students()

    # ---- circulation
    def issue(self, actor_is_admin: bool, student_username: str, book_id: int) -> IssueResult:
        return self.issuance.issue(student_username, book_id, actor_is_admin=actor_is_admin)

    def return_book(self, issue_id: int) -> ReturnResult:
        return self.issuance.return_book(issue_id)

    def list_active_loans(self, user_id: int) -> List[Dict[str, Any]]:
        return self.issuance.list_active_loans(user_id)

    def list_all_active_issues(self) -> List[Dict[str, Any]]:
        return self.issuance.list_all_active_issues()

    # ---- fines
    def settle_fines(self, student_username: str) -> FineReport:
        return self.fines.settle_fines(student_username)

    # ---- recommendations
    def recommend(self, user_id: int) -> List[int]:
        return self.recommendations.recommend(user_id)

    def recommend_details(self, user_id: int) -> List[CatalogEntry]:
        return self.recommendations.recommend_details(user_id)

    # ---- catalog mutation
    def add_book(self, title: str, author: str, genre: str, year: Any, total_copies: Any) -> AddBookResult:
        return self.catalog.add_book(title, author, genre, year, total_copies)


def build_engine(store: Optional[Store] = None, **kwargs: Any) -> LibraryEngine:
    """Compose the engine and warm the catalog cache, like startup does."""
    if store is None:
        store = init_engine_once()
    engine = LibraryEngine(store, **kwargs)
    engine.reload()
    return engine


def init_app(app: Any, engine: Optional[LibraryEngine] = None) -> LibraryEngine:
    from bookrec.routes.inject import register_all

    if engine is None:
        engine = build_engine()
    register_all(app, engine)
    LOG.info("bookrec initialized with %d catalog entries", len(engine.cache))
    return engine


def create_app(engine: Optional[LibraryEngine] = None):
    from flask import Flask

    app = Flask("bookrec")
    init_app(app, engine)
    return app


__all__ = ["LibraryEngine", "build_engine", "init_app", "create_app"]
