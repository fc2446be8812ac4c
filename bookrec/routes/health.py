"""Lightweight health probe endpoint.

Exposes /healthz returning a fast 200 when the library store answers.
"""
from __future__ import annotations

from typing import Any

from flask import Blueprint, current_app, jsonify

from bookrec.utils.logging import get_logger

LOG = get_logger("bookrec.health")

bp = Blueprint("health", __name__)


@bp.route("/healthz", methods=["GET"])
def healthz():
    db_ok = True
    engine = current_app.extensions.get("bookrec")
    try:
        if engine is None:
            db_ok = False
        else:
            engine.store.ping()
    except Exception as exc:
        db_ok = False
        LOG.debug("Health DB probe failed: %s", exc)
    status_code = 200 if db_ok else 500
    catalog_size = len(engine.cache) if engine is not None else 0
    return jsonify({"status": "ok" if db_ok else "degraded", "db": db_ok, "catalog": catalog_size}), status_code


def register_health(app: Any) -> None:
    if getattr(app, "_health_bp", None):  # idempotent
        return
    app.register_blueprint(bp)
    setattr(app, "_health_bp", bp)
    LOG.debug("health blueprint registered")


__all__ = ["register_health"]
