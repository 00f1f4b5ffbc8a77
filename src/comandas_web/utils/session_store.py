"""Session store backed by Flask's signed cookie session."""

from __future__ import annotations

from typing import Any

from flask import session


class FlaskSessionStore:
    def get(self, key: str) -> Any:
        return session.get(key)

    def set(self, key: str, value: Any) -> None:
        session[key] = value
        session.permanent = True

    def delete(self, key: str) -> None:
        session.pop(key, None)
