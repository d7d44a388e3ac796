"""Session gate deciding which pages a visitor may open.

The flag is a value in the visitor's own session cookie, so the gate is an
access-control convenience for the demo, not a security boundary.
"""
from __future__ import annotations

from functools import wraps
from typing import Callable, Optional

from flask import current_app, g, redirect, url_for

from ..storage import (
    SEARCHED_ADDRESS_KEY,
    SESSION_FLAG_KEY,
    TOKEN_BALANCE_KEY,
    KeyValueStore,
    SessionStore,
    StoreUnavailableError,
)


class SessionGate:
    """Sign-in flag plus the address remembered between search and report."""

    def __init__(self, store: KeyValueStore, *, reset_tokens_on_logout: bool = False) -> None:
        self.store = store
        self.reset_tokens_on_logout = reset_tokens_on_logout

    def _get(self, key: str) -> Optional[str]:
        try:
            return self.store.get(key)
        except StoreUnavailableError:
            return None

    def is_authenticated(self) -> bool:
        return bool(self._get(SESSION_FLAG_KEY))

    def login(self) -> None:
        self.store.set(SESSION_FLAG_KEY, "true")

    def logout(self) -> None:
        """Drop the flag and the remembered address.

        Removing the address is what invalidates a report that is still
        loading: the ready view finds nothing to render and redirects.
        """

        self.store.remove(SESSION_FLAG_KEY)
        self.store.remove(SEARCHED_ADDRESS_KEY)
        if self.reset_tokens_on_logout:
            self.store.remove(TOKEN_BALANCE_KEY)

    def remember_address(self, address: str) -> None:
        self.store.set(SEARCHED_ADDRESS_KEY, address)

    def remembered_address(self) -> Optional[str]:
        address = self._get(SEARCHED_ADDRESS_KEY)
        return address or None

    def forget_address(self) -> None:
        self.store.remove(SEARCHED_ADDRESS_KEY)


def get_gate() -> SessionGate:
    """Return the gate bound to the current visitor's session."""

    if "session_gate" not in g:
        g.session_gate = SessionGate(
            SessionStore(),
            reset_tokens_on_logout=current_app.config.get("RESET_TOKENS_ON_LOGOUT", False),
        )
    return g.session_gate


def login_required(view: Callable) -> Callable:
    """Redirect visitors without the session flag to the entry page."""

    @wraps(view)
    def wrapped(*args, **kwargs):
        if not get_gate().is_authenticated():
            return redirect(url_for("index.home"))
        return view(*args, **kwargs)

    return wrapped
