"""Repository helpers for the append-only interaction history."""
from __future__ import annotations

import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from bookrec.db.models import HistoryEvent, utcnow


def append_event(
    session: Session,
    *,
    user_id: int,
    book_id: int,
    interaction_type: str,
    timestamp: Optional[datetime.datetime] = None,
) -> HistoryEvent:
    event = HistoryEvent(
        user_id=user_id,
        book_id=book_id,
        interaction_type=interaction_type,
        timestamp=timestamp or utcnow(),
    )
    session.add(event)
    session.flush()
    return event


def distinct_book_ids(session: Session, user_id: int) -> List[int]:
    rows = (
        session.query(HistoryEvent.book_id)
        .filter(HistoryEvent.user_id == user_id)
        .distinct()
        .all()
    )
    return [r[0] for r in rows]


def list_events(session: Session, user_id: int) -> List[HistoryEvent]:
    return (
        session.query(HistoryEvent)
        .filter(HistoryEvent.user_id == user_id)
        .order_by(HistoryEvent.timestamp, HistoryEvent.id)
        .all()
    )


__all__ = ["append_event", "distinct_book_ids", "list_events"]
