"""In-memory catalog snapshot.

The cache is a read-optimized projection of ``books`` keyed by book id.
``reload()`` builds a complete new mapping and swaps it in under a lock, so
readers only ever see a whole snapshot. A failed reload leaves the previous
snapshot in place. Readers get a read-only view (``MappingProxyType``) of a
dict that is never mutated after it is published.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from bookrec.db.engine import Store
from bookrec.db.repositories import books_repo
from bookrec.db.transactions import read_session
from bookrec.utils.logging import get_logger

LOG = get_logger("bookrec.catalog_cache")

UNKNOWN_TITLE = "Unknown Title"
UNKNOWN_AUTHOR = "Unknown Author"
UNKNOWN_GENRE = "Unknown Genre"


@dataclass(frozen=True)
class CatalogEntry:
    book_id: int
    title: str
    author: str
    genre: str
    year: Optional[int] = None
    known: bool = True

    def as_dict(self) -> dict:
        return {
            "book_id": self.book_id,
            "title": self.title,
            "author": self.author,
            "genre": self.genre,
            "year": self.year,
        }


def unknown_entry(book_id: int) -> CatalogEntry:
    return CatalogEntry(
        book_id=book_id,
        title=UNKNOWN_TITLE,
        author=UNKNOWN_AUTHOR,
        genre=UNKNOWN_GENRE,
        year=None,
        known=False,
    )


class CatalogCache:
    def __init__(self, store: Store) -> None:
        self.store = store
        self._lock = threading.Lock()
        self._snapshot: Mapping[int, CatalogEntry] = MappingProxyType({})
        self._loaded = False

    @property
    def loaded(self) -> bool:
        return self._loaded

    def reload(self) -> int:
        """Replace the snapshot with the current contents of ``books``.

        The lock spans the read and the swap, so overlapping reloads publish
        in the order they read.
        """
        with self._lock:
            with read_session(self.store) as session:
                fresh: Dict[int, CatalogEntry] = {
                    b.id: CatalogEntry(
                        book_id=b.id,
                        title=b.title,
                        author=b.author,
                        genre=b.genre,
                        year=b.publication,
                    )
                    for b in books_repo.list_books(session)
                }
            self._snapshot = MappingProxyType(fresh)
            self._loaded = True
        LOG.info("Loaded %d books into catalog cache", len(fresh))
        return len(fresh)

    def lookup(self, book_id: int) -> CatalogEntry:
        entry = self._snapshot.get(book_id)
        if entry is None:
            return unknown_entry(book_id)
        return entry

    def title(self, book_id: int) -> str:
        return self.lookup(book_id).title

    def all_entries(self) -> Mapping[int, CatalogEntry]:
        return self._snapshot

    def __len__(self) -> int:
        return len(self._snapshot)

    def __contains__(self, book_id: object) -> bool:
        return book_id in self._snapshot


__all__ = [
    "CatalogEntry",
    "CatalogCache",
    "unknown_entry",
    "UNKNOWN_TITLE",
    "UNKNOWN_AUTHOR",
    "UNKNOWN_GENRE",
]
