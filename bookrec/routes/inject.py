"""Route registration.

Called from startup to register every blueprint on the Flask app.
"""
from __future__ import annotations
from typing import Any

from .health import register_health
from .lending import register_lending_blueprint


def register_all(app: Any, engine: Any) -> None:
    register_lending_blueprint(app, engine)
    register_health(app)


__all__ = ["register_all"]
