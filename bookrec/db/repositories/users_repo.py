"""Repository helpers for user accounts."""
from __future__ import annotations

from typing import List, Optional

from sqlalchemy.orm import Session

from bookrec.db.models import ROLE_STUDENT, User


def find_user_id(session: Session, username: str, role: str) -> Optional[int]:
    """Exact, case-sensitive username match restricted to one role."""
    row = (
        session.query(User.id)
        .filter(User.username == username, User.role == role)
        .one_or_none()
    )
    return row[0] if row else None


def find_by_credentials(session: Session, username: str, password: str, role: str) -> Optional[User]:
    return (
        session.query(User)
        .filter(User.username == username, User.password == password, User.role == role)
        .one_or_none()
    )


def username_exists(session: Session, username: str) -> bool:
    return session.query(User.id).filter(User.username == username).first() is not None


def email_exists(session: Session, email: str) -> bool:
    return session.query(User.id).filter(User.email == email).first() is not None


def create_user(
    session: Session,
    *,
    username: str,
    password: str,
    name: str,
    email: str,
    role: str = ROLE_STUDENT,
) -> User:
    user = User(username=username, password=password, name=name, email=email, role=role)
    session.add(user)
    session.flush()
    return user


def list_users_by_role(session: Session, role: str) -> List[User]:
    return session.query(User).filter(User.role == role).order_by(User.id).all()


__all__ = [
    "find_user_id",
    "find_by_credentials",
    "username_exists",
    "email_exists",
    "create_user",
    "list_users_by_role",
]
