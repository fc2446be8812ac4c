"""Session-scoped repository helpers."""
from . import books_repo, history_repo, issues_repo, users_repo

__all__ = ["books_repo", "history_repo", "issues_repo", "users_repo"]
