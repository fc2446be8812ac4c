"""Repository helpers for catalog books."""
from __future__ import annotations

from typing import List, Optional

from sqlalchemy import func, update
from sqlalchemy.orm import Session

from bookrec.db.models import Book


def get_book(session: Session, book_id: int) -> Optional[Book]:
    return session.query(Book).filter(Book.id == book_id).one_or_none()


def list_books(session: Session) -> List[Book]:
    return session.query(Book).order_by(Book.id).all()


def find_by_title_author(session: Session, title: str, author: str) -> Optional[Book]:
    """Case-insensitive (title, author) lookup used for duplicate detection."""
    return (
        session.query(Book)
        .filter(
            func.lower(Book.title) == title.strip().lower(),
            func.lower(Book.author) == author.strip().lower(),
        )
        .order_by(Book.id)
        .first()
    )


def create_book(
    session: Session,
    *,
    title: str,
    author: str,
    genre: str,
    publication: int,
    total_copies: int,
) -> Book:
    book = Book(
        title=title,
        author=author,
        genre=genre,
        publication=publication,
        total_copies=total_copies,
        available_copies=total_copies,
    )
    session.add(book)
    session.flush()
    return book


def decrement_available(session: Session, book_id: int) -> bool:
    """Take one copy off the shelf; False when none was left to take."""
    result = session.execute(
        update(Book)
        .where(Book.id == book_id, Book.available_copies > 0)
        .values(available_copies=Book.available_copies - 1)
        .execution_options(synchronize_session=False)
    )
    return (result.rowcount or 0) == 1


def increment_available(session: Session, book_id: int) -> bool:
    result = session.execute(
        update(Book)
        .where(Book.id == book_id, Book.available_copies < Book.total_copies)
        .values(available_copies=Book.available_copies + 1)
        .execution_options(synchronize_session=False)
    )
    return (result.rowcount or 0) == 1


__all__ = [
    "get_book",
    "list_books",
    "find_by_title_author",
    "create_book",
    "decrement_available",
    "increment_available",
]
