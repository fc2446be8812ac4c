"""Repository and store-level tests against in-memory SQLite."""
from __future__ import annotations

import warnings
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sqlalchemy import inspect
from sqlalchemy.exc import IntegrityError, OperationalError

from bookrec.db.engine import Store, get_store, init_engine_once
from bookrec.db.models import ROLE_ADMIN, Book, BookIssue, STATUS_OVERDUE, STATUS_RETURNED, utcnow
from bookrec.db.repositories import books_repo, history_repo, issues_repo, users_repo
from bookrec.db.transactions import read_session, transaction
from bookrec.errors import ErrorReason, StoreUnavailableError, TransactionFailedError


def test_init_engine_once_creates_schema_and_is_cached():
    store = init_engine_once()
    assert store is get_store()
    tables = set(inspect(store.engine).get_table_names())
    assert {"users", "books", "book_issues", "user_book_history"} <= tables
    assert store.url == "sqlite://"
    assert store.ping() is True


def test_file_store_creates_parent_directory(tmp_path):
    target = tmp_path / "nested" / "dir" / "library.db"
    store = Store(f"sqlite:///{target}")
    try:
        store.create_schema()
        assert target.parent.is_dir()
        assert target.exists()
    finally:
        store.dispose()


def test_find_user_id_is_exact_and_role_scoped(store, make_user):
    alice = make_user("alice")
    make_user("root", role=ROLE_ADMIN)
    with store.session() as session:
        assert users_repo.find_user_id(session, "alice", "student") == alice
        assert users_repo.find_user_id(session, "Alice", "student") is None
        assert users_repo.find_user_id(session, "alice", "admin") is None
        assert users_repo.find_user_id(session, "root", "student") is None


def test_find_by_title_author_ignores_case(store, make_book):
    book_id = make_book("Dune", "Frank Herbert")
    with store.session() as session:
        found = books_repo.find_by_title_author(session, "dUNE", "frank herbert")
        assert found is not None and found.id == book_id
        assert books_repo.find_by_title_author(session, "Dune", "Brian Herbert") is None


def test_create_book_starts_fully_available(store, make_book):
    book_id = make_book(copies=4)
    with store.session() as session:
        book = books_repo.get_book(session, book_id)
        assert book.total_copies == 4
        assert book.available_copies == 4


def test_decrement_available_never_goes_below_zero(store, make_book, available):
    book_id = make_book(copies=1)
    with store.session() as session:
        assert books_repo.decrement_available(session, book_id) is True
    with store.session() as session:
        assert books_repo.decrement_available(session, book_id) is False
    assert available(book_id) == 0


def test_increment_available_is_capped_at_total(store, make_book, available):
    book_id = make_book(copies=2)
    with store.session() as session:
        assert books_repo.increment_available(session, book_id) is False
    with store.session() as session:
        books_repo.decrement_available(session, book_id)
    with store.session() as session:
        assert books_repo.increment_available(session, book_id) is True
    assert available(book_id) == 2


def test_check_constraint_rejects_available_above_total(store, make_book):
    book_id = make_book(copies=1)
    with pytest.raises(IntegrityError):
        with store.session() as session:
            book = session.query(Book).filter(Book.id == book_id).one()
            book.available_copies = 5


def test_list_books_in_id_order(store, make_book):
    first = make_book("B title", "Someone")
    second = make_book("A title", "Someone")
    with store.session() as session:
        assert [b.id for b in books_repo.list_books(session)] == [first, second]


def test_history_distinct_book_ids(store, student, make_book, add_history):
    dune = make_book("Dune")
    rama = make_book("Rama", "Arthur C. Clarke")
    add_history(student, dune, "issued")
    add_history(student, dune, "returned")
    add_history(student, rama, "issued")
    with store.session() as session:
        assert sorted(history_repo.distinct_book_ids(session, student)) == sorted([dune, rama])
        assert len(history_repo.list_events(session, student)) == 3
        assert history_repo.distinct_book_ids(session, student + 100) == []


def test_list_newly_overdue_skips_flagged_and_future_rows(store, student, make_book, make_issue):
    today = date(2024, 3, 15)
    late = make_issue(student, make_book("Late"), today - timedelta(days=3))
    make_issue(student, make_book("Due today"), today)
    make_issue(student, make_book("Flagged"), today - timedelta(days=9), status=STATUS_OVERDUE, fine="4.50")
    make_issue(student, make_book("Gone"), today - timedelta(days=9), status=STATUS_RETURNED)
    with store.session() as session:
        rows = issues_repo.list_newly_overdue(session, student, today)
        assert [(issue.id, title) for issue, title in rows] == [(late, "Late")]


def test_apply_fines_marks_rows_overdue(store, student, make_book, make_issue, load_issue):
    issue_id = make_issue(student, make_book(), date(2024, 3, 10))
    with store.session() as session:
        assert issues_repo.apply_fines(session, [(issue_id, Decimal("2.50"))]) == 1
        assert issues_repo.apply_fines(session, []) == 0
    issue = load_issue(issue_id)
    assert issue.status == STATUS_OVERDUE
    assert issue.fine == Decimal("2.50")


def test_outstanding_fine_excludes_returned_issues(store, student, make_book, make_issue):
    make_issue(student, make_book("One"), date(2024, 3, 1), status=STATUS_OVERDUE, fine="1.50")
    make_issue(student, make_book("Two"), date(2024, 3, 1), status=STATUS_RETURNED, fine="9.00")
    with store.session() as session:
        assert Decimal(str(issues_repo.outstanding_fine(session, student))) == Decimal("1.50")


def test_transaction_rolls_back_and_wraps_store_faults(store, make_book, count_rows):
    with pytest.raises(TransactionFailedError) as excinfo:
        with transaction(store, operation="seed_books") as session:
            books_repo.create_book(
                session, title="Ghost", author="Nobody", genre="None", publication=2000, total_copies=1
            )
            raise OperationalError("INSERT", {}, Exception("disk I/O error"))
    assert excinfo.value.reason is ErrorReason.TRANSACTION_FAILED
    assert excinfo.value.context["operation"] == "seed_books"
    assert "disk I/O error" in excinfo.value.detail
    assert count_rows(Book) == 0


def test_transaction_reraises_domain_errors_after_rollback(store, count_rows):
    with pytest.raises(KeyError):
        with transaction(store) as session:
            books_repo.create_book(
                session, title="Ghost", author="Nobody", genre="None", publication=2000, total_copies=1
            )
            raise KeyError("boom")
    assert count_rows(Book) == 0


def test_read_session_reports_store_unavailable(store, monkeypatch):
    def boom(_session):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(books_repo, "list_books", boom)
    with pytest.raises(StoreUnavailableError) as excinfo:
        with read_session(store) as session:
            books_repo.list_books(session)
    assert excinfo.value.reason is ErrorReason.STORE_UNAVAILABLE
    assert "database is locked" in excinfo.value.detail


def test_issue_rows_roundtrip_dates(store, student, make_book, make_issue, load_issue):
    due = date(2024, 4, 1)
    issue_id = make_issue(student, make_book(), due)
    issue = load_issue(issue_id)
    assert isinstance(issue, BookIssue)
    assert issue.due_date == due
    assert issue.issue_date == due - timedelta(days=14)
    assert issue.is_active is True
    assert issue.as_dict()["due_date"] == "2024-04-01"


def test_history_timestamps_are_naive_utc(store, student, make_book):
    before = datetime.now(timezone.utc).replace(tzinfo=None)
    with warnings.catch_warnings():
        warnings.filterwarnings("error", message=".*utcnow.*", category=DeprecationWarning)
        with store.session() as session:
            event = history_repo.append_event(
                session, user_id=student, book_id=make_book(), interaction_type="issued"
            )
            stamp = event.timestamp
    after = datetime.now(timezone.utc).replace(tzinfo=None)

    assert stamp.tzinfo is None
    assert before <= stamp <= after
    assert utcnow().tzinfo is None
