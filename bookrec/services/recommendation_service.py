"""Content-based recommendations from a user's borrowing history.

Scoring: every catalog book the user has not interacted with earns +1 when
its genre matches a genre from the history and +1 when its author matches
a historical author (case-insensitive, trimmed). Zero scores are dropped;
the rest are ranked by score, ties kept in catalog order.
"""
from __future__ import annotations

from typing import List, Optional, Set, Tuple

from bookrec import config as app_config
from bookrec.db.engine import Store
from bookrec.db.repositories import history_repo
from bookrec.db.transactions import read_session
from bookrec.services.catalog_cache import CatalogCache, CatalogEntry
from bookrec.utils.identity import fold
from bookrec.utils.logging import get_logger

LOG = get_logger("bookrec.recommendations")


def score_candidates(
    entries: List[CatalogEntry],
    seen: Set[int],
    genres: Set[str],
    authors: Set[str],
) -> List[Tuple[int, int]]:
    """(book_id, score) for every unseen entry with a positive score, best first."""
    scored: List[Tuple[int, int]] = []
    for entry in entries:
        if entry.book_id in seen:
            continue
        score = 0
        genre = fold(entry.genre)
        author = fold(entry.author)
        if genre and genre in genres:
            score += 1
        if author and author in authors:
            score += 1
        if score > 0:
            scored.append((entry.book_id, score))
    # sorted() is stable: equal scores keep catalog order
    return sorted(scored, key=lambda pair: pair[1], reverse=True)


class RecommendationService:
    def __init__(self, store: Store, cache: CatalogCache, *, limit: Optional[int] = None) -> None:
        self.store = store
        self.cache = cache
        self.limit = limit if limit is not None else app_config.recommendation_limit()

    def recommend(self, user_id: int) -> List[int]:
        with read_session(self.store) as session:
            seen = set(history_repo.distinct_book_ids(session, user_id))
        if not seen:
            return []

        genres: Set[str] = set()
        authors: Set[str] = set()
        for book_id in seen:
            entry = self.cache.lookup(book_id)
            if not entry.known:
                continue
            if fold(entry.genre):
                genres.add(fold(entry.genre))
            if fold(entry.author):
                authors.add(fold(entry.author))

        ranked = score_candidates(list(self.cache.all_entries().values()), seen, genres, authors)
        picks = [book_id for book_id, _score in ranked[: self.limit]]
        LOG.debug("Recommendations user_id=%s history=%d picks=%s", user_id, len(seen), picks)
        return picks

    def recommend_details(self, user_id: int) -> List[CatalogEntry]:
        return [self.cache.lookup(book_id) for book_id in self.recommend(user_id)]


__all__ = ["RecommendationService", "score_candidates"]
