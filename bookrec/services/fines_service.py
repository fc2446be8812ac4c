"""Overdue fine assessment.

Fines are charged per calendar day past the due date. Only issues still
marked ``issued`` are selected, so once an issue has been flagged
``overdue`` its fine keeps the amount computed on that first pass and does
not grow on later runs.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Tuple

from bookrec import config as app_config
from bookrec.db.engine import Store
from bookrec.db.repositories import issues_repo
from bookrec.db.transactions import read_session, transaction
from bookrec.services.identity_service import IdentityService
from bookrec.utils.currency import ZERO, format_money, to_money
from bookrec.utils.logging import get_logger

LOG = get_logger("bookrec.fines")


@dataclass
class FineLine:
    issue_id: int
    book_id: int
    title: str
    due_date: date
    days_overdue: int
    fine: Decimal

    def as_dict(self) -> Dict[str, Any]:
        return {
            "issue_id": self.issue_id,
            "book_id": self.book_id,
            "title": self.title,
            "due_date": self.due_date.isoformat(),
            "days_overdue": self.days_overdue,
            "fine": str(self.fine),
        }


@dataclass
class FineReport:
    username: str
    user_id: int
    lines: List[FineLine] = field(default_factory=list)
    total_new_fine: Decimal = ZERO
    total_outstanding: Decimal = ZERO

    def summary(self) -> str:
        if not self.lines:
            parts = [f"No newly overdue books found for '{self.username}'."]
        else:
            parts = ["Calculated and updated fines for:"]
            for line in self.lines:
                parts.append(
                    f"- '{line.title}' (Issue {line.issue_id}): {line.days_overdue} days overdue, "
                    f"New Fine: {format_money(line.fine)}"
                )
            parts.append(f"Total New Fine Added: {format_money(self.total_new_fine)}")
        parts.append(f"Total Current Outstanding Fine: {format_money(self.total_outstanding)}")
        return "\n".join(parts)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "username": self.username,
            "user_id": self.user_id,
            "lines": [line.as_dict() for line in self.lines],
            "total_new_fine": str(self.total_new_fine),
            "total_outstanding": str(self.total_outstanding),
            "summary": self.summary(),
        }


def compute_fine(due_date: date, today: date, rate: Decimal) -> Tuple[int, Decimal]:
    """(days overdue, fine) for a loan; fine is zero unless days > 0."""
    days = (today - due_date).days
    if days <= 0:
        return days, ZERO
    return days, to_money(rate * days)


class FineService:
    def __init__(
        self,
        store: Store,
        identity: IdentityService,
        *,
        rate: Optional[Decimal] = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.store = store
        self.identity = identity
        self.rate = rate if rate is not None else app_config.fine_rate_per_day()
        self.today = today

    def settle_fines(self, student_username: str) -> FineReport:
        username, student_id = self.identity.require_student(student_username)
        today = self.today()
        report = FineReport(username=username, user_id=student_id)

        with read_session(self.store) as session:
            candidates = issues_repo.list_newly_overdue(session, student_id, today)
            for issue, title in candidates:
                days, amount = compute_fine(issue.due_date, today, self.rate)
                if days <= 0:
                    continue
                report.lines.append(
                    FineLine(
                        issue_id=issue.id,
                        book_id=issue.book_id,
                        title=title,
                        due_date=issue.due_date,
                        days_overdue=days,
                        fine=amount,
                    )
                )

        if report.lines:
            with transaction(self.store, operation="settle_fines") as session:
                issues_repo.apply_fines(session, [(line.issue_id, line.fine) for line in report.lines])
            report.total_new_fine = to_money(sum((line.fine for line in report.lines), ZERO))
            LOG.info(
                "Assessed fines user_id=%s issues=%d total_new=%s",
                student_id,
                len(report.lines),
                report.total_new_fine,
            )
        else:
            LOG.debug("No newly overdue issues for user_id=%s", student_id)

        with read_session(self.store) as session:
            report.total_outstanding = to_money(issues_repo.outstanding_fine(session, student_id))
        return report


__all__ = ["FineLine", "FineReport", "FineService", "compute_fine"]
