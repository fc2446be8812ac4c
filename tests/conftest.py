"""Shared fixtures: in-memory SQLite store plus small data factories."""
from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

import pytest

from bookrec.db.engine import get_store, init_engine_once, reset_for_tests
from bookrec.db.models import ROLE_ADMIN, ROLE_STUDENT, Book, BookIssue
from bookrec.db.repositories import books_repo, history_repo, issues_repo, users_repo

TODAY = date(2024, 3, 15)


@pytest.fixture(autouse=True)
def in_memory_db(monkeypatch):
    reset_for_tests(drop=True)
    monkeypatch.delenv("BOOKREC_DB_URL", raising=False)
    monkeypatch.setenv("BOOKREC_DB_PATH", ":memory:")
    init_engine_once()
    yield
    reset_for_tests(drop=True)


@pytest.fixture
def store():
    return get_store()


@pytest.fixture
def today():
    return lambda: TODAY


@pytest.fixture
def make_user(store):
    counter = {"n": 0}

    def _make(username: str, role: str = ROLE_STUDENT, password: str = "secret", name: Optional[str] = None) -> int:
        counter["n"] += 1
        with store.session() as session:
            user = users_repo.create_user(
                session,
                username=username,
                password=password,
                name=name or username.title(),
                email=f"{username}.{counter['n']}@example.com",
                role=role,
            )
            return user.id

    return _make


@pytest.fixture
def student(make_user):
    return make_user("alice")


@pytest.fixture
def admin(make_user):
    return make_user("librarian", role=ROLE_ADMIN)


@pytest.fixture
def make_book(store):
    def _make(
        title: str = "Dune",
        author: str = "Frank Herbert",
        genre: str = "Sci-Fi",
        year: int = 1965,
        copies: int = 2,
    ) -> int:
        with store.session() as session:
            book = books_repo.create_book(
                session,
                title=title,
                author=author,
                genre=genre,
                publication=year,
                total_copies=copies,
            )
            return book.id

    return _make


@pytest.fixture
def make_issue(store):
    def _make(user_id: int, book_id: int, due_date: date, status: str = "issued", fine: str = "0.00") -> int:
        with store.session() as session:
            issue = issues_repo.create_issue(
                session,
                user_id=user_id,
                book_id=book_id,
                issue_date=due_date - timedelta(days=14),
                due_date=due_date,
            )
            issue.status = status
            issue.fine = Decimal(fine)
            return issue.id

    return _make


@pytest.fixture
def add_history(store):
    def _add(user_id: int, book_id: int, kind: str = "issued") -> None:
        with store.session() as session:
            history_repo.append_event(session, user_id=user_id, book_id=book_id, interaction_type=kind)

    return _add


@pytest.fixture
def available(store):
    def _available(book_id: int) -> int:
        with store.session() as session:
            return session.query(Book).filter(Book.id == book_id).one().available_copies

    return _available


@pytest.fixture
def count_rows(store):
    def _count(model) -> int:
        with store.session() as session:
            return session.query(model).count()

    return _count


@pytest.fixture
def load_issue(store):
    def _load(issue_id: int) -> BookIssue:
        with store.session() as session:
            return session.query(BookIssue).filter(BookIssue.id == issue_id).one()

    return _load
