"""Token ledger that gates paid actions.

The balance lives in a key/value store as a base-10 string. Reads fall back to
the configured default when the slot is empty, unparsable or the store cannot be
reached; the default is not written back on read.

On plain stores every mutation is a read followed by a write, so two callers
sharing one store can both read the same balance and the later write wins
(lost update). Stores that provide ``compare_and_set`` get serialized
mutations: the write only lands if the slot is unchanged since the read, and
the ledger retries otherwise.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from flask import current_app, g

from ..storage import (
    TOKEN_BALANCE_KEY,
    KeyValueStore,
    SessionStore,
    StoreUnavailableError,
)

# Observer failures go to the app logger, not log_manager: the failing observer
# is usually log_manager itself writing through the same database session.
logger = logging.getLogger(__name__)

INITIAL_TOKENS = 50
TOKEN_COSTS: dict[str, int] = {
    "property_analysis": 5,
    "consultant_request": 15,
}


@dataclass(frozen=True)
class TokenEvent:
    """Notification sent to observers after a successful mutation."""

    action: str
    previous: int
    balance: int
    amount: int


TokenObserver = Callable[[TokenEvent], None]


class InsufficientTokensError(ValueError):
    """Raised when a charge exceeds the available balance."""

    def __init__(self, required: int, available: int, *, purpose: str = "continue") -> None:
        self.required = required
        self.available = available
        self.purpose = purpose
        super().__init__(
            f"Insufficient tokens! You need {required} tokens to {purpose}."
            f" You currently have {available} tokens."
        )

    @property
    def shortfall(self) -> int:
        return max(self.required - self.available, 0)


def _parse_balance(raw: Optional[str]) -> Optional[int]:
    if raw is None:
        return None
    try:
        return int(str(raw).strip(), 10)
    except ValueError:
        return None


class TokenLedger:
    """Integer token balance kept in a key/value store."""

    def __init__(
        self,
        store: KeyValueStore,
        *,
        default_balance: int = INITIAL_TOKENS,
        observers: Optional[list[TokenObserver]] = None,
        key: str = TOKEN_BALANCE_KEY,
    ) -> None:
        self.store = store
        self.default_balance = default_balance
        self.key = key
        # shared with the owner so subscriptions outlive a single ledger instance
        self._observers: list[TokenObserver] = observers if observers is not None else []

    def _read_raw(self) -> Optional[str]:
        try:
            return self.store.get(self.key)
        except StoreUnavailableError:
            return None

    def _balance_from(self, raw: Optional[str]) -> int:
        parsed = _parse_balance(raw)
        return self.default_balance if parsed is None else parsed

    def get_balance(self) -> int:
        """Return the stored balance or the default when nothing usable is stored."""

        return self._balance_from(self._read_raw())

    def _transition(
        self, action: str, amount: int, change: Callable[[int], Optional[int]]
    ) -> bool:
        """Apply ``change`` to the balance; ``None`` from ``change`` aborts."""

        compare_and_set = getattr(self.store, "compare_and_set", None)
        while True:
            raw = self._read_raw()
            previous = self._balance_from(raw)
            balance = change(previous)
            if balance is None:
                return False

            try:
                if compare_and_set is None:
                    self.store.set(self.key, str(balance))
                elif not compare_and_set(self.key, raw, str(balance)):
                    continue
            except StoreUnavailableError:
                # ledger stays at its default while the store is down
                return True

            self._notify(TokenEvent(action=action, previous=previous, balance=balance, amount=amount))
            return True

    def set_balance(self, balance: int) -> None:
        """Overwrite the stored balance."""

        self._transition("set", balance, lambda _previous: balance)

    def consume(self, amount: int) -> bool:
        """Deduct ``amount`` if the balance covers it; return whether it did."""

        return self._transition(
            "consume",
            amount,
            lambda previous: None if previous < amount else previous - amount,
        )

    def add(self, amount: int) -> None:
        """Credit ``amount`` to the balance."""

        self._transition("add", amount, lambda previous: previous + amount)

    def reset(self) -> None:
        """Restore the default balance."""

        self._transition("reset", self.default_balance, lambda _previous: self.default_balance)

    def charge(self, amount: int, *, purpose: str = "continue") -> int:
        """Consume ``amount`` or raise ``InsufficientTokensError``.

        Returns the balance left after the charge.
        """

        available = self.get_balance()
        if available < amount:
            raise InsufficientTokensError(amount, available, purpose=purpose)
        if not self.consume(amount):
            raise InsufficientTokensError(amount, self.get_balance(), purpose=purpose)
        return self.get_balance()

    def subscribe(self, observer: TokenObserver) -> Callable[[], None]:
        """Register ``observer`` and return a callable that removes it."""

        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _notify(self, event: TokenEvent) -> None:
        for observer in list(self._observers):
            try:
                observer(event)
            except Exception:
                logger.exception("Token observer %r failed for %s", observer, event.action)


def balance_tier(balance: int) -> str:
    """Classify a balance for the header badge."""

    if balance >= 20:
        return "healthy"
    if balance >= 10:
        return "low"
    return "critical"


def token_costs() -> dict[str, int]:
    """Return the configured cost of each paid action."""

    config = current_app.config
    return {
        "property_analysis": config.get(
            "TOKEN_COST_PROPERTY_ANALYSIS", TOKEN_COSTS["property_analysis"]
        ),
        "consultant_request": config.get(
            "TOKEN_COST_CONSULTANT_REQUEST", TOKEN_COSTS["consultant_request"]
        ),
    }


def init_app(app) -> None:
    """Prepare the application-wide observer registry."""

    app.extensions.setdefault("token_observers", [])


def get_ledger() -> TokenLedger:
    """Return the ledger bound to the current visitor's session."""

    if "token_ledger" not in g:
        g.token_ledger = TokenLedger(
            SessionStore(),
            default_balance=current_app.config.get("INITIAL_TOKENS", INITIAL_TOKENS),
            observers=current_app.extensions.setdefault("token_observers", []),
        )
    return g.token_ledger
