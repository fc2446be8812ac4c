"""Idempotent demo data for local runs and smoke tests."""
from __future__ import annotations

from typing import Any, Dict, List, Tuple

from sqlalchemy.orm import Session

from bookrec.db.models import ROLE_ADMIN, ROLE_STUDENT
from bookrec.db.repositories import books_repo, users_repo
from bookrec.db.transactions import transaction
from bookrec.startup.wiring import LibraryEngine
from bookrec.utils.logging import get_logger

LOG = get_logger("bookrec.seed")

DEMO_USERS: List[Dict[str, str]] = [
    {"username": "admin", "password": "admin", "name": "Library Admin", "email": "admin@example.com", "role": ROLE_ADMIN},
    {"username": "alice", "password": "alice", "name": "Alice Reader", "email": "alice@example.com", "role": ROLE_STUDENT},
    {"username": "bob", "password": "bob", "name": "Bob Student", "email": "bob@example.com", "role": ROLE_STUDENT},
]

DEMO_BOOKS: List[Tuple[str, str, str, int, int]] = [
    ("Dune", "Frank Herbert", "Sci-Fi", 1965, 2),
    ("Children of Dune", "Frank Herbert", "Sci-Fi", 1976, 1),
    ("Rendezvous with Rama", "Arthur C. Clarke", "Sci-Fi", 1973, 2),
    ("2001: A Space Odyssey", "Arthur C. Clarke", "Sci-Fi", 1968, 1),
    ("Clean Code", "Robert C. Martin", "Software", 2008, 3),
    ("The Pragmatic Programmer", "Andrew Hunt", "Software", 1999, 2),
    ("Pride and Prejudice", "Jane Austen", "Classic", 1813, 1),
]


def _seed_users(session: Session) -> int:
    created = 0
    for spec in DEMO_USERS:
        if users_repo.username_exists(session, spec["username"]):
            continue
        users_repo.create_user(session, **spec)
        created += 1
    return created


def _seed_books(session: Session) -> int:
    created = 0
    for title, author, genre, year, copies in DEMO_BOOKS:
        if books_repo.find_by_title_author(session, title, author) is not None:
            continue
        books_repo.create_book(
            session,
            title=title,
            author=author,
            genre=genre,
            publication=year,
            total_copies=copies,
        )
        created += 1
    return created


def seed_demo_data(engine: LibraryEngine) -> Dict[str, Any]:
    with transaction(engine.store, operation="seed") as session:
        users = _seed_users(session)
        books = _seed_books(session)
    total = engine.reload()
    LOG.info("Seeded users=%d books=%d catalog=%d", users, books, total)
    return {"users_created": users, "books_created": books, "catalog_size": total}


__all__ = ["seed_demo_data", "DEMO_USERS", "DEMO_BOOKS"]
