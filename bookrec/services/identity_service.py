"""Identity lookup and account helpers.

``resolve`` translates a typed-in username + role into the numeric user id
used by every other table. It is a pure read with exact, case-sensitive
matching. Registration and login are thin, unhardened account operations:
credentials are compared as stored.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError

from bookrec.db.engine import Store
from bookrec.db.models import ROLE_STUDENT, User
from bookrec.db.repositories import users_repo
from bookrec.db.transactions import read_session, transaction
from bookrec.errors import (
    ConflictError,
    ErrorReason,
    NotFoundError,
    TransactionFailedError,
    ValidationError,
)
from bookrec.utils.identity import is_valid_email, normalize_email, normalize_username
from bookrec.utils.logging import get_logger

LOG = get_logger("bookrec.identity")


@dataclass
class Account:
    user_id: int
    username: str
    name: str
    role: str
    email: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "Account":
        return cls(
            user_id=user.id,
            username=user.username,
            name=user.name,
            role=user.role,
            email=user.email,
        )


class IdentityService:
    def __init__(self, store: Store) -> None:
        self.store = store

    def resolve(self, username: str, role: str) -> Optional[int]:
        if not username:
            return None
        with read_session(self.store) as session:
            return users_repo.find_user_id(session, username, role)

    def require_student(self, raw_username: Any) -> tuple[str, int]:
        """Trimmed username and id of an existing student, or raise."""
        username = normalize_username(raw_username)
        if not username:
            raise ValidationError(ErrorReason.EMPTY_USERNAME)
        user_id = self.resolve(username, ROLE_STUDENT)
        if user_id is None:
            raise NotFoundError(ErrorReason.UNKNOWN_STUDENT, username=username)
        return username, user_id

    def authenticate(self, username: str, password: str, role: str) -> Optional[Account]:
        cleaned = normalize_username(username)
        if not cleaned or not password:
            return None
        with read_session(self.store) as session:
            user = users_repo.find_by_credentials(session, cleaned, password, role)
            if user is None:
                LOG.info("Login rejected username=%s role=%s", cleaned, role)
                return None
            return Account.from_user(user)

    def register_student(self, username: str, password: str, name: str, email: str) -> Account:
        cleaned_username = normalize_username(username)
        cleaned_name = normalize_username(name)
        cleaned_email = normalize_email(email)
        if not cleaned_username or not password or not cleaned_name or not cleaned_email:
            raise ValidationError(ErrorReason.MISSING_REGISTRATION_FIELDS)
        if not is_valid_email(cleaned_email):
            raise ValidationError(ErrorReason.INVALID_EMAIL, email=cleaned_email)

        with read_session(self.store) as session:
            if users_repo.username_exists(session, cleaned_username):
                raise ConflictError(ErrorReason.USERNAME_TAKEN, username=cleaned_username)
            if users_repo.email_exists(session, cleaned_email):
                raise ConflictError(ErrorReason.EMAIL_TAKEN, email=cleaned_email)

        try:
            with transaction(self.store, operation="register_student") as session:
                user = users_repo.create_user(
                    session,
                    username=cleaned_username,
                    password=password,
                    name=cleaned_name,
                    email=cleaned_email,
                    role=ROLE_STUDENT,
                )
                account = Account.from_user(user)
        except TransactionFailedError as exc:
            # lost a race against a concurrent registration
            if isinstance(exc.__cause__, IntegrityError):
                raise ConflictError(ErrorReason.USERNAME_TAKEN, username=cleaned_username) from exc
            raise
        LOG.info("Registered student user_id=%s username=%s", account.user_id, account.username)
        return account

    def list_students(self) -> List[Dict[str, Any]]:
        with read_session(self.store) as session:
            return [
                {"id": u.id, "username": u.username, "name": u.name, "email": u.email}
                for u in users_repo.list_users_by_role(session, ROLE_STUDENT)
            ]


__all__ = ["Account", "IdentityService"]
