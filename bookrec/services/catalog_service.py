"""Catalog mutation: validated insertion of new books."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, Optional

from bookrec.db.engine import Store
from bookrec.db.repositories import books_repo
from bookrec.db.transactions import read_session, transaction
from bookrec.errors import ErrorReason, ValidationError
from bookrec.services.catalog_cache import CatalogCache
from bookrec.utils.logging import get_logger

LOG = get_logger("bookrec.catalog")

STATUS_CREATED = "created"
STATUS_DUPLICATE = "duplicate"
FUTURE_YEAR_SLACK = 5


@dataclass
class AddBookResult:
    status: str
    book_id: int
    message: str

    @property
    def is_duplicate(self) -> bool:
        return self.status == STATUS_DUPLICATE

    def as_dict(self) -> Dict[str, Any]:
        return {"status": self.status, "book_id": self.book_id, "message": self.message}


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


class CatalogService:
    def __init__(
        self,
        store: Store,
        cache: CatalogCache,
        *,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.store = store
        self.cache = cache
        self.today = today

    def add_book(self, title: str, author: str, genre: str, year: Any, total_copies: Any) -> AddBookResult:
        title_clean = (title or "").strip()
        author_clean = (author or "").strip()
        genre_clean = (genre or "").strip()
        if not title_clean or not author_clean or not genre_clean:
            raise ValidationError(ErrorReason.MISSING_BOOK_FIELDS)
        year_value = _as_int(year)
        max_year = self.today().year + FUTURE_YEAR_SLACK
        if year_value is None or year_value <= 0 or year_value > max_year:
            raise ValidationError(ErrorReason.INVALID_PUBLICATION_YEAR, year=year, max_year=max_year)
        copies = _as_int(total_copies)
        if copies is None or copies <= 0:
            raise ValidationError(ErrorReason.INVALID_TOTAL_COPIES, total_copies=total_copies)

        with read_session(self.store) as session:
            existing = books_repo.find_by_title_author(session, title_clean, author_clean)
            existing_id = existing.id if existing is not None else None
        if existing_id is not None:
            LOG.info("Skipped duplicate book title=%r author=%r existing_id=%s", title_clean, author_clean, existing_id)
            return AddBookResult(
                status=STATUS_DUPLICATE,
                book_id=existing_id,
                message=(
                    "A book with the same title and author already exists "
                    f"(ID: {existing_id}). Addition skipped."
                ),
            )

        with transaction(self.store, operation="add_book") as session:
            book = books_repo.create_book(
                session,
                title=title_clean,
                author=author_clean,
                genre=genre_clean,
                publication=year_value,
                total_copies=copies,
            )
            book_id = book.id

        self.cache.reload()
        LOG.info("Added book_id=%s title=%r copies=%d", book_id, title_clean, copies)
        return AddBookResult(
            status=STATUS_CREATED,
            book_id=book_id,
            message=f"Book '{title_clean}' added successfully.",
        )


__all__ = ["AddBookResult", "CatalogService", "STATUS_CREATED", "STATUS_DUPLICATE"]
