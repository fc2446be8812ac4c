"""Tests for the in-memory catalog snapshot."""
from __future__ import annotations

import pytest
from sqlalchemy.exc import OperationalError

from bookrec.db.repositories import books_repo
from bookrec.errors import StoreUnavailableError
from bookrec.services.catalog_cache import CatalogCache, UNKNOWN_TITLE


def test_empty_before_first_reload(store):
    cache = CatalogCache(store)
    assert cache.loaded is False
    assert len(cache) == 0
    assert cache.lookup(1).known is False


def test_reload_mirrors_books_table(store, make_book):
    dune = make_book("Dune", "Frank Herbert", "Sci-Fi", 1965)
    emma = make_book("Emma", "Jane Austen", "Classic", 1815)
    cache = CatalogCache(store)

    assert cache.reload() == 2
    assert cache.loaded is True
    assert list(cache.all_entries()) == [dune, emma]
    entry = cache.lookup(emma)
    assert (entry.title, entry.author, entry.genre, entry.year) == ("Emma", "Jane Austen", "Classic", 1815)
    assert emma in cache
    assert cache.title(dune) == "Dune"


def test_unknown_id_returns_sentinel(store, make_book):
    make_book()
    cache = CatalogCache(store)
    cache.reload()
    entry = cache.lookup(999)
    assert entry.title == UNKNOWN_TITLE
    assert entry.author == "Unknown Author"
    assert entry.genre == "Unknown Genre"
    assert entry.known is False
    assert 999 not in cache


def test_snapshot_is_read_only(store, make_book):
    make_book()
    cache = CatalogCache(store)
    cache.reload()
    with pytest.raises(TypeError):
        cache.all_entries()[42] = cache.lookup(1)  # type: ignore[index]


def test_reload_sees_new_rows_only_after_reload(store, make_book):
    make_book("Dune")
    cache = CatalogCache(store)
    cache.reload()
    held = cache.all_entries()
    make_book("Emma", "Jane Austen")

    assert len(cache) == 1
    assert cache.reload() == 2
    # earlier snapshot is untouched by the swap
    assert len(held) == 1


def test_failed_reload_keeps_previous_snapshot(store, make_book, monkeypatch):
    book_id = make_book("Dune")
    cache = CatalogCache(store)
    cache.reload()

    def boom(_session):
        raise OperationalError("SELECT", {}, Exception("server has gone away"))

    monkeypatch.setattr(books_repo, "list_books", boom)
    with pytest.raises(StoreUnavailableError):
        cache.reload()
    assert len(cache) == 1
    assert cache.title(book_id) == "Dune"


def test_reload_holds_lock_while_reading(store, make_book, monkeypatch):
    make_book("Dune")
    cache = CatalogCache(store)
    real_list_books = books_repo.list_books
    lock_states = []

    def watching_list_books(session):
        lock_states.append(cache._lock.locked())
        return real_list_books(session)

    monkeypatch.setattr(books_repo, "list_books", watching_list_books)
    cache.reload()

    assert lock_states == [True]
    assert cache._lock.locked() is False


def test_failed_reload_releases_lock(store, monkeypatch):
    cache = CatalogCache(store)

    def boom(_session):
        raise OperationalError("SELECT", {}, Exception("server has gone away"))

    monkeypatch.setattr(books_repo, "list_books", boom)
    with pytest.raises(StoreUnavailableError):
        cache.reload()
    assert cache._lock.locked() is False
