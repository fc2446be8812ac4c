"""Repository helpers for book issue (loan) records."""
from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from bookrec.db.models import (
    Book,
    BookIssue,
    STATUS_ISSUED,
    STATUS_OVERDUE,
    STATUS_RETURNED,
    User,
)


def get_issue(session: Session, issue_id: int) -> Optional[BookIssue]:
    return session.query(BookIssue).filter(BookIssue.id == issue_id).one_or_none()


def find_active_issue(session: Session, user_id: int, book_id: int) -> Optional[BookIssue]:
    return (
        session.query(BookIssue)
        .filter(
            BookIssue.user_id == user_id,
            BookIssue.book_id == book_id,
            BookIssue.status != STATUS_RETURNED,
        )
        .first()
    )


def create_issue(
    session: Session,
    *,
    user_id: int,
    book_id: int,
    issue_date: date,
    due_date: date,
) -> BookIssue:
    issue = BookIssue(
        user_id=user_id,
        book_id=book_id,
        issue_date=issue_date,
        due_date=due_date,
        status=STATUS_ISSUED,
        fine=Decimal("0.00"),
    )
    session.add(issue)
    session.flush()
    return issue


def list_newly_overdue(session: Session, user_id: int, today: date) -> List[Tuple[BookIssue, str]]:
    """Issues still flagged `issued` whose due date is strictly before today.

    Rows already marked `overdue` are not selected again.
    """
    return (
        session.query(BookIssue, Book.title)
        .join(Book, Book.id == BookIssue.book_id)
        .filter(
            BookIssue.user_id == user_id,
            BookIssue.status == STATUS_ISSUED,
            BookIssue.due_date < today,
        )
        .order_by(BookIssue.due_date, BookIssue.id)
        .all()
    )


def apply_fines(session: Session, fines: Iterable[Tuple[int, Decimal]]) -> int:
    """Batch-set fine amounts and mark the rows overdue."""
    mappings = [
        {"id": issue_id, "fine": amount, "status": STATUS_OVERDUE}
        for issue_id, amount in fines
    ]
    if not mappings:
        return 0
    session.bulk_update_mappings(BookIssue, mappings)
    session.flush()
    return len(mappings)


def outstanding_fine(session: Session, user_id: int):
    return (
        session.query(func.coalesce(func.sum(BookIssue.fine), 0))
        .filter(BookIssue.user_id == user_id, BookIssue.status != STATUS_RETURNED)
        .scalar()
    )


def mark_returned(session: Session, issue: BookIssue) -> BookIssue:
    issue.status = STATUS_RETURNED
    session.flush()
    return issue


def list_active_for_user(session: Session, user_id: int) -> List[Tuple[BookIssue, Book]]:
    return (
        session.query(BookIssue, Book)
        .join(Book, Book.id == BookIssue.book_id)
        .filter(BookIssue.user_id == user_id, BookIssue.status != STATUS_RETURNED)
        .order_by(BookIssue.due_date.asc(), BookIssue.id.asc())
        .all()
    )


def list_all_active(session: Session) -> List[Tuple[BookIssue, str, str]]:
    return (
        session.query(BookIssue, User.username, Book.title)
        .join(Book, Book.id == BookIssue.book_id)
        .join(User, User.id == BookIssue.user_id)
        .filter(BookIssue.status != STATUS_RETURNED)
        .order_by(User.username, BookIssue.due_date, BookIssue.id)
        .all()
    )


__all__ = [
    "get_issue",
    "find_active_issue",
    "create_issue",
    "list_newly_overdue",
    "apply_fines",
    "outstanding_fine",
    "mark_returned",
    "list_active_for_user",
    "list_all_active",
]
