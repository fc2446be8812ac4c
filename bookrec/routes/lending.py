"""Lending JSON API blueprint.

Thin HTTP surface over `LibraryEngine`. The caller is already authenticated;
admin-only routes trust the ``X-Actor-Role`` header it forwards.

Routes (all under /api):
    POST /login                         -> credential check
    GET  /students, POST /students      -> list / register students
    GET  /books, POST /books            -> catalog snapshot / add a book
    POST /catalog/reload                -> rebuild the catalog cache
    GET  /issues, POST /issues          -> active issues / issue a book
    POST /issues/<id>/return            -> return an issue
    GET  /users/<id>/loans              -> a student's active loans
    POST /fines/<username>/settle       -> assess overdue fines
    GET  /users/<id>/recommendations    -> personalized picks
"""
from __future__ import annotations

from typing import Any, Dict, Optional

from flask import Blueprint, current_app, jsonify, request

from bookrec.db.models import ROLE_ADMIN, ROLE_STUDENT
from bookrec.errors import (
    ConflictError,
    LibraryError,
    NotFoundError,
    PermissionDeniedError,
    StoreUnavailableError,
    TransactionFailedError,
    ValidationError,
)
from bookrec.utils.logging import get_logger

bp = Blueprint("lending", __name__, url_prefix="/api")
LOG = get_logger("bookrec.routes.lending")

EXTENSION_KEY = "bookrec"

_ERROR_MESSAGES = {
    "admin_required": "Only administrators may perform this action.",
    "empty_username": "Student username cannot be empty.",
    "unknown_student": "Student username not found.",
    "unknown_book": "Book not found.",
    "unknown_issue": "Issue record not found.",
    "no_copies_available": "No copies of this book are currently available.",
    "already_issued": "The student already has this book issued.",
    "already_returned": "This issue has already been returned.",
    "missing_book_fields": "Title, Author, and Genre cannot be empty.",
    "invalid_publication_year": "Invalid Publication Year.",
    "invalid_total_copies": "Total Copies must be a positive number.",
    "missing_registration_fields": "All fields are required.",
    "invalid_email": "Invalid email format.",
    "username_taken": "Username already exists.",
    "email_taken": "Email address is already registered.",
    "transaction_failed": "Database transaction failed.",
    "store_unavailable": "Database is currently unavailable.",
    "invalid_book_id": "Book ID must be a number.",
    "invalid_credentials": "Invalid username or password.",
}

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (PermissionDeniedError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (TransactionFailedError, 500),
    (StoreUnavailableError, 503),
)


def _engine():
    return current_app.extensions[EXTENSION_KEY]


def _json_error(
    code: str,
    status: int = 400,
    *,
    message: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
):
    payload: Dict[str, Any] = {"error": code}
    final_message = message or _ERROR_MESSAGES.get(code)
    if final_message:
        payload["message"] = final_message
    if details:
        payload["details"] = details
    return jsonify(payload), status


def _library_error(exc: LibraryError):
    status = 500
    for exc_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, exc_type):
            status = code
            break
    details = {k: v for k, v in exc.context.items() if isinstance(v, (str, int, float, bool))}
    return _json_error(str(exc), status, details=details)


def _json_payload() -> Dict[str, Any]:
    payload = request.get_json(silent=True)
    return payload if isinstance(payload, dict) else {}


def _parse_book_id(raw: Any) -> Optional[int]:
    # whole numbers only; floats and booleans are rejected, not truncated
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and raw.strip().isdecimal():
        return int(raw.strip())
    return None


def _is_admin() -> bool:
    return (request.headers.get("X-Actor-Role") or "").strip().lower() == ROLE_ADMIN


def _require_admin_json():
    if not _is_admin():
        return _json_error("admin_required", 403)
    return True


@bp.errorhandler(LibraryError)
def _handle_library_error(exc: LibraryError):
    LOG.info("Request %s %s rejected: %s", request.method, request.path, exc)
    return _library_error(exc)


@bp.route("/login", methods=["POST"])
def api_login():
    payload = _json_payload()
    role = payload.get("role") or ROLE_STUDENT
    username = payload.get("username")
    password = payload.get("password")
    if not all(isinstance(value, str) for value in (role, username, password)):
        return _json_error("invalid_credentials", 401)
    account = _engine().authenticate(username, password, role.strip().lower())
    if account is None:
        return _json_error("invalid_credentials", 401)
    return jsonify({"account": account.__dict__})


@bp.route("/students", methods=["POST"])
def api_register_student():
    payload = _json_payload()
    account = _engine().register_student(
        payload.get("username"),
        payload.get("password"),
        payload.get("name"),
        payload.get("email"),
    )
    return jsonify({"account": account.__dict__, "status": "created"}), 201


@bp.route("/students", methods=["GET"])
def api_list_students():
    auth = _require_admin_json()
    if auth is not True:
        return auth
    return jsonify({"students": _engine().list_students()})


@bp.route("/books", methods=["GET"])
def api_list_books():
    entries = _engine().cache.all_entries()
    return jsonify({"books": [entry.as_dict() for entry in entries.values()]})


@bp.route("/books", methods=["POST"])
def api_add_book():
    auth = _require_admin_json()
    if auth is not True:
        return auth
    payload = _json_payload()
    result = _engine().add_book(
        payload.get("title"),
        payload.get("author"),
        payload.get("genre"),
        payload.get("year"),
        payload.get("total_copies"),
    )
    status = 200 if result.is_duplicate else 201
    return jsonify(result.as_dict()), status


@bp.route("/catalog/reload", methods=["POST"])
def api_reload_catalog():
    auth = _require_admin_json()
    if auth is not True:
        return auth
    count = _engine().reload()
    return jsonify({"status": "ok", "books": count})


@bp.route("/issues", methods=["GET"])
def api_list_issues():
    auth = _require_admin_json()
    if auth is not True:
        return auth
    return jsonify({"issues": _engine().list_all_active_issues()})


@bp.route("/issues", methods=["POST"])
def api_issue_book():
    payload = _json_payload()
    book_id = _parse_book_id(payload.get("book_id"))
    if book_id is None:
        return _json_error("invalid_book_id", 400)
    result = _engine().issue(_is_admin(), payload.get("username"), book_id)
    return jsonify(result.as_dict()), 201


@bp.route("/issues/<int:issue_id>/return", methods=["POST"])
def api_return_book(issue_id: int):
    auth = _require_admin_json()
    if auth is not True:
        return auth
    result = _engine().return_book(issue_id)
    return jsonify(result.as_dict())


@bp.route("/users/<int:user_id>/loans", methods=["GET"])
def api_user_loans(user_id: int):
    return jsonify({"loans": _engine().list_active_loans(user_id)})


@bp.route("/fines/<username>/settle", methods=["POST"])
def api_settle_fines(username: str):
    auth = _require_admin_json()
    if auth is not True:
        return auth
    report = _engine().settle_fines(username)
    return jsonify(report.as_dict())


@bp.route("/users/<int:user_id>/recommendations", methods=["GET"])
def api_recommendations(user_id: int):
    entries = _engine().recommend_details(user_id)
    return jsonify({"recommendations": [entry.as_dict() for entry in entries]})


def register_lending_blueprint(app: Any, engine: Any) -> None:
    app.extensions[EXTENSION_KEY] = engine
    if "lending" in app.blueprints:
        return
    app.register_blueprint(bp)
    LOG.debug("lending blueprint registered")


__all__ = ["bp", "register_lending_blueprint", "EXTENSION_KEY"]
