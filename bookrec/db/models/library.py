"""ORM models for the library store (users, books, issues, history).

Column names follow the existing MySQL schema (``BookID``, ``AvailableCopies``
...) so the models can be pointed at a database created by earlier tooling.
"""
from __future__ import annotations

import datetime
from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()

ROLE_STUDENT = "student"
ROLE_ADMIN = "admin"

STATUS_ISSUED = "issued"
STATUS_OVERDUE = "overdue"
STATUS_RETURNED = "returned"

INTERACTION_ISSUED = "issued"
INTERACTION_RETURNED = "returned"


def utcnow() -> datetime.datetime:
    """Naive UTC timestamp, matching the zone-less Timestamp column."""
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


class User(Base):
    __tablename__ = "users"

    id = Column("UserID", Integer, primary_key=True, autoincrement=True)
    username = Column("Username", String(50), nullable=False, unique=True)
    password = Column("Password", String(255), nullable=False)
    role = Column("Role", String(20), nullable=False, default=ROLE_STUDENT)
    name = Column("Name", String(100), nullable=False)
    email = Column("Email", String(100), nullable=False, unique=True)

    def as_dict(self) -> dict:
        # credential intentionally left out
        return {
            "id": self.id,
            "username": self.username,
            "role": self.role,
            "name": self.name,
            "email": self.email,
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"<User id={self.id} username={self.username} role={self.role}>"


class Book(Base):
    __tablename__ = "books"

    id = Column("BookID", Integer, primary_key=True, autoincrement=True)
    title = Column("Title", String(255), nullable=False)
    author = Column("Author", String(255), nullable=False)
    genre = Column("Genre", String(100), nullable=False)
    publication = Column("Publication", Integer, nullable=False)
    total_copies = Column("TotalCopies", Integer, nullable=False)
    available_copies = Column("AvailableCopies", Integer, nullable=False)

    __table_args__ = (
        CheckConstraint(
            "AvailableCopies >= 0 AND AvailableCopies <= TotalCopies",
            name="ck_books_available_range",
        ),
    )

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "genre": self.genre,
            "publication": self.publication,
            "total_copies": self.total_copies,
            "available_copies": self.available_copies,
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"<Book id={self.id} title={self.title!r} available={self.available_copies}/{self.total_copies}>"


class BookIssue(Base):
    """One lending transaction: status issued -> overdue -> returned."""

    __tablename__ = "book_issues"

    id = Column("IssueID", Integer, primary_key=True, autoincrement=True)
    book_id = Column("BookID", Integer, ForeignKey("books.BookID"), nullable=False, index=True)
    user_id = Column("UserID", Integer, ForeignKey("users.UserID"), nullable=False, index=True)
    issue_date = Column("IssueDate", Date, nullable=False)
    due_date = Column("DueDate", Date, nullable=False)
    status = Column("Status", String(20), nullable=False, default=STATUS_ISSUED)
    fine = Column("Fine", Numeric(10, 2), nullable=False, default=Decimal("0.00"))

    @property
    def is_active(self) -> bool:
        return self.status != STATUS_RETURNED

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "book_id": self.book_id,
            "user_id": self.user_id,
            "issue_date": self.issue_date.isoformat() if self.issue_date else None,
            "due_date": self.due_date.isoformat() if self.due_date else None,
            "status": self.status,
            "fine": str(self.fine) if self.fine is not None else "0.00",
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"<BookIssue id={self.id} user={self.user_id} book={self.book_id} status={self.status}>"


class HistoryEvent(Base):
    """Append-only user/book interaction log (recommendation signal)."""

    __tablename__ = "user_book_history"

    # The legacy table has no key of its own; the ORM needs one.
    id = Column("HistoryID", Integer, primary_key=True, autoincrement=True)
    user_id = Column("UserID", Integer, ForeignKey("users.UserID"), nullable=False, index=True)
    book_id = Column("BookID", Integer, ForeignKey("books.BookID"), nullable=False)
    interaction_type = Column("InteractionType", String(20), nullable=False)
    timestamp = Column("Timestamp", DateTime, nullable=False, default=utcnow)

    def __repr__(self) -> str:  # pragma: no cover
        return f"<HistoryEvent user={self.user_id} book={self.book_id} kind={self.interaction_type}>"


__all__ = [
    "Base",
    "User",
    "Book",
    "BookIssue",
    "HistoryEvent",
    "ROLE_STUDENT",
    "ROLE_ADMIN",
    "STATUS_ISSUED",
    "STATUS_OVERDUE",
    "STATUS_RETURNED",
    "INTERACTION_ISSUED",
    "INTERACTION_RETURNED",
    "utcnow",
]
