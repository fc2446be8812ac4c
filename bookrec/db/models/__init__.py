"""ORM models aggregate exports."""
from .library import (  # noqa: F401
	Base,
	User,
	Book,
	BookIssue,
	HistoryEvent,
	ROLE_STUDENT,
	ROLE_ADMIN,
	STATUS_ISSUED,
	STATUS_OVERDUE,
	STATUS_RETURNED,
	INTERACTION_ISSUED,
	INTERACTION_RETURNED,
	utcnow,
)

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
