"""Tests for identity resolution, login and student registration."""
from __future__ import annotations

import pytest

from bookrec.db.models import ROLE_ADMIN, ROLE_STUDENT
from bookrec.errors import ConflictError, ErrorReason, NotFoundError, ValidationError
from bookrec.services.identity_service import IdentityService


@pytest.fixture
def identity(store):
    return IdentityService(store)


def test_resolve_exact_match_per_role(identity, make_user):
    alice = make_user("alice")
    boss = make_user("boss", role=ROLE_ADMIN)
    assert identity.resolve("alice", ROLE_STUDENT) == alice
    assert identity.resolve("boss", ROLE_ADMIN) == boss
    assert identity.resolve("ALICE", ROLE_STUDENT) is None
    assert identity.resolve("boss", ROLE_STUDENT) is None
    assert identity.resolve("", ROLE_STUDENT) is None


def test_require_student_trims_and_reports(identity, student):
    assert identity.require_student("  alice  ") == ("alice", student)
    with pytest.raises(ValidationError) as empty:
        identity.require_student("   ")
    assert empty.value.reason is ErrorReason.EMPTY_USERNAME
    with pytest.raises(NotFoundError) as missing:
        identity.require_student("mallory")
    assert missing.value.reason is ErrorReason.UNKNOWN_STUDENT
    assert missing.value.context == {"username": "mallory"}


def test_authenticate(identity, make_user):
    user_id = make_user("alice", password="pw1")
    account = identity.authenticate("alice", "pw1", ROLE_STUDENT)
    assert account is not None
    assert account.user_id == user_id
    assert account.role == ROLE_STUDENT
    assert identity.authenticate("alice", "wrong", ROLE_STUDENT) is None
    assert identity.authenticate("alice", "pw1", ROLE_ADMIN) is None
    assert identity.authenticate("", "pw1", ROLE_STUDENT) is None


def test_register_student_creates_account(identity):
    account = identity.register_student(" carol ", "pw", "Carol Reader", "carol@example.com")
    assert account.username == "carol"
    assert account.role == ROLE_STUDENT
    assert identity.resolve("carol", ROLE_STUDENT) == account.user_id
    assert identity.authenticate("carol", "pw", ROLE_STUDENT) is not None


@pytest.mark.parametrize(
    "username,password,name,email,reason",
    [
        ("", "pw", "Name", "a@example.com", ErrorReason.MISSING_REGISTRATION_FIELDS),
        ("dave", "", "Name", "a@example.com", ErrorReason.MISSING_REGISTRATION_FIELDS),
        ("dave", "pw", "  ", "a@example.com", ErrorReason.MISSING_REGISTRATION_FIELDS),
        ("dave", "pw", "Name", "not-an-email", ErrorReason.INVALID_EMAIL),
    ],
)
def test_register_student_validation(identity, username, password, name, email, reason):
    with pytest.raises(ValidationError) as excinfo:
        identity.register_student(username, password, name, email)
    assert excinfo.value.reason is reason


def test_register_student_conflicts(identity):
    identity.register_student("erin", "pw", "Erin", "erin@example.com")
    with pytest.raises(ConflictError) as taken:
        identity.register_student("erin", "pw", "Other", "other@example.com")
    assert taken.value.reason is ErrorReason.USERNAME_TAKEN
    with pytest.raises(ConflictError) as email:
        identity.register_student("frank", "pw", "Frank", "erin@example.com")
    assert email.value.reason is ErrorReason.EMAIL_TAKEN


def test_list_students_excludes_admins(identity, make_user):
    make_user("boss", role=ROLE_ADMIN)
    make_user("alice")
    make_user("bob")
    assert [s["username"] for s in identity.list_students()] == ["alice", "bob"]
    assert "password" not in identity.list_students()[0]
