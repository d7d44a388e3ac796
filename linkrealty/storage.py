"""Key/value stores holding per-browser state.

The production store is the Flask session: a signed cookie kept by the
visitor's browser, so everything saved here is scoped to one browser profile
and is fully under the visitor's control. ``MemoryStore`` backs tests and
scripts and additionally supports compare-and-set writes.
"""
from __future__ import annotations

from threading import Lock
from typing import Optional

from flask import has_request_context, session

TOKEN_BALANCE_KEY = "userTokens"
SESSION_FLAG_KEY = "isAuthenticated"
SEARCHED_ADDRESS_KEY = "searchedAddress"


class StoreUnavailableError(RuntimeError):
    """Raised when the backing store cannot be reached."""


class KeyValueStore:
    """String-keyed store of string values."""

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError


class SessionStore(KeyValueStore):
    """Store backed by the Flask session cookie of the current request."""

    @staticmethod
    def _require_session() -> None:
        if not has_request_context():
            raise StoreUnavailableError("The session store requires an active request.")

    def get(self, key: str) -> Optional[str]:
        self._require_session()
        value = session.get(key)
        return None if value is None else str(value)

    def set(self, key: str, value: str) -> None:
        self._require_session()
        session[key] = str(value)

    def remove(self, key: str) -> None:
        self._require_session()
        session.pop(key, None)


class MemoryStore(KeyValueStore):
    """Dict-backed store with an atomic compare-and-set."""

    def __init__(self, initial: Optional[dict[str, str]] = None) -> None:
        self._data: dict[str, str] = dict(initial or {})
        self._lock = Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = str(value)

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def compare_and_set(self, key: str, expected: Optional[str], value: str) -> bool:
        """Write ``value`` only if the slot still holds ``expected``."""

        with self._lock:
            if self._data.get(key) != expected:
                return False
            self._data[key] = str(value)
            return True

    def snapshot(self) -> dict[str, str]:
        """Return a copy of the stored values."""

        with self._lock:
            return dict(self._data)
