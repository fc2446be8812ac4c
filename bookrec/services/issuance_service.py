"""Issuance workflow: lend a book to a student, take it back.

Only an admin actor may issue. Validation then short-circuits in a fixed
order, each failure with its own reason:

1. empty username            -> ValidationError(empty_username)
2. unknown student           -> NotFoundError(unknown_student)
3. unknown book              -> NotFoundError(unknown_book)
4. no copies on the shelf    -> ConflictError(no_copies_available)
5. active issue for the pair -> ConflictError(already_issued)

On success the issue row, the availability decrement and the history event
are written in one transaction; any store fault rolls all three back and
surfaces as TransactionFailedError.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any, Callable, Dict, List, Optional

from bookrec import config as app_config
from bookrec.db.engine import Store
from bookrec.db.models import INTERACTION_ISSUED, INTERACTION_RETURNED, STATUS_RETURNED
from bookrec.db.repositories import books_repo, history_repo, issues_repo
from bookrec.db.transactions import read_session, transaction
from bookrec.errors import ConflictError, ErrorReason, NotFoundError, PermissionDeniedError
from bookrec.services.identity_service import IdentityService
from bookrec.utils.currency import to_money
from bookrec.utils.logging import get_logger

LOG = get_logger("bookrec.issuance")


@dataclass
class IssueResult:
    issue_id: int
    book_id: int
    user_id: int
    username: str
    title: str
    issue_date: date
    due_date: date
    message: str = field(default="")

    def as_dict(self) -> Dict[str, Any]:
        return {
            "issue_id": self.issue_id,
            "book_id": self.book_id,
            "user_id": self.user_id,
            "username": self.username,
            "title": self.title,
            "issue_date": self.issue_date.isoformat(),
            "due_date": self.due_date.isoformat(),
            "message": self.message,
        }


@dataclass
class ReturnResult:
    issue_id: int
    book_id: int
    user_id: int
    fine: str
    message: str = ""

    def as_dict(self) -> Dict[str, Any]:
        return {
            "issue_id": self.issue_id,
            "book_id": self.book_id,
            "user_id": self.user_id,
            "fine": self.fine,
            "message": self.message,
        }


class IssuanceService:
    def __init__(
        self,
        store: Store,
        identity: IdentityService,
        *,
        loan_days: Optional[int] = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.store = store
        self.identity = identity
        self.loan_days = loan_days if loan_days is not None else app_config.loan_period_days()
        self.today = today

    def issue(self, student_username: str, book_id: int, *, actor_is_admin: bool) -> IssueResult:
        if not actor_is_admin:
            raise PermissionDeniedError(ErrorReason.ADMIN_REQUIRED)
        username, student_id = self.identity.require_student(student_username)

        issue_date = self.today()
        due_date = issue_date + timedelta(days=self.loan_days)

        with transaction(self.store, operation="issue") as session:
            book = books_repo.get_book(session, book_id)
            if book is None:
                raise NotFoundError(ErrorReason.UNKNOWN_BOOK, book_id=book_id)
            title = book.title
            if book.available_copies < 1:
                raise ConflictError(ErrorReason.NO_COPIES_AVAILABLE, book_id=book_id, title=title)
            if issues_repo.find_active_issue(session, student_id, book_id) is not None:
                raise ConflictError(
                    ErrorReason.ALREADY_ISSUED,
                    username=username,
                    book_id=book_id,
                    title=title,
                )

            issue = issues_repo.create_issue(
                session,
                user_id=student_id,
                book_id=book_id,
                issue_date=issue_date,
                due_date=due_date,
            )
            if not books_repo.decrement_available(session, book_id):
                # another caller took the last copy after our check
                raise ConflictError(ErrorReason.NO_COPIES_AVAILABLE, book_id=book_id, title=title)
            history_repo.append_event(
                session,
                user_id=student_id,
                book_id=book_id,
                interaction_type=INTERACTION_ISSUED,
            )
            issue_id = issue.id

        LOG.info(
            "Issued book_id=%s to user_id=%s username=%s due=%s",
            book_id,
            student_id,
            username,
            due_date.isoformat(),
        )
        return IssueResult(
            issue_id=issue_id,
            book_id=book_id,
            user_id=student_id,
            username=username,
            title=title,
            issue_date=issue_date,
            due_date=due_date,
            message=f"Book '{title}' (ID: {book_id}) issued to '{username}'. Due: {due_date.isoformat()}",
        )

    def return_book(self, issue_id: int) -> ReturnResult:
        with transaction(self.store, operation="return") as session:
            issue = issues_repo.get_issue(session, issue_id)
            if issue is None:
                raise NotFoundError(ErrorReason.UNKNOWN_ISSUE, issue_id=issue_id)
            if issue.status == STATUS_RETURNED:
                raise ConflictError(ErrorReason.ALREADY_RETURNED, issue_id=issue_id)
            book = books_repo.get_book(session, issue.book_id)
            title = book.title if book is not None else str(issue.book_id)
            issues_repo.mark_returned(session, issue)
            if not books_repo.increment_available(session, issue.book_id):
                LOG.warning("Availability already at total for book_id=%s on return", issue.book_id)
            history_repo.append_event(
                session,
                user_id=issue.user_id,
                book_id=issue.book_id,
                interaction_type=INTERACTION_RETURNED,
            )
            result = ReturnResult(
                issue_id=issue.id,
                book_id=issue.book_id,
                user_id=issue.user_id,
                fine=str(to_money(issue.fine)),
            )
        result.message = f"Book '{title}' (ID: {result.book_id}) returned."
        LOG.info("Returned issue_id=%s book_id=%s user_id=%s", issue_id, result.book_id, result.user_id)
        return result

    def list_active_loans(self, user_id: int) -> List[Dict[str, Any]]:
        with read_session(self.store) as session:
            return [
                {
                    "issue_id": issue.id,
                    "book_id": book.id,
                    "title": book.title,
                    "author": book.author,
                    "issue_date": issue.issue_date.isoformat(),
                    "due_date": issue.due_date.isoformat(),
                    "fine": str(to_money(issue.fine)),
                    "status": issue.status,
                }
                for issue, book in issues_repo.list_active_for_user(session, user_id)
            ]

    def list_all_active_issues(self) -> List[Dict[str, Any]]:
        with read_session(self.store) as session:
            return [
                {
                    "issue_id": issue.id,
                    "username": username,
                    "title": title,
                    "book_id": issue.book_id,
                    "issue_date": issue.issue_date.isoformat(),
                    "due_date": issue.due_date.isoformat(),
                    "status": issue.status,
                    "fine": str(to_money(issue.fine)),
                }
                for issue, username, title in issues_repo.list_all_active(session)
            ]


__all__ = ["IssueResult", "ReturnResult", "IssuanceService"]
