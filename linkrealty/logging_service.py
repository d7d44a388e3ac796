"""Structured logging for Link Realty page actions and ledger activity."""
from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional
from uuid import uuid4

from flask import current_app, g, has_request_context
from sqlalchemy.exc import SQLAlchemyError

from .extensions import db
from .models import SystemLog
from .timezones import convert_to_log_timezone

if TYPE_CHECKING:  # pragma: no cover
    from .tokens.services import TokenEvent


@dataclass(frozen=True)
class LogRecord:
    """Structured representation of a log message."""

    component: str
    action: str
    level: str
    result: str
    title: str
    user_summary: str
    technical_details: str
    correlation_id: str
    environment: str


_TOKEN_TITLES = {
    "set": "Token balance overwritten",
    "consume": "Tokens consumed",
    "add": "Tokens added",
    "reset": "Token balance reset",
}


class LogManager:
    """Persist and query structured log entries."""

    def __init__(self) -> None:
        self.app = None
        self.available_levels = ["info", "warn", "error"]
        self.available_components: list[str] = []

    def init_app(self, app) -> None:
        """Attach the log manager to the Flask app."""
        self.app = app

    def _ensure_component(self, component: str) -> None:
        if component not in self.available_components:
            self.available_components.append(component)
            self.available_components.sort()

    def register_component(self, component: str) -> None:
        """Explicitly register a component name."""
        self._ensure_component(component)

    @staticmethod
    def _request_correlation() -> Optional[str]:
        """Share one correlation id between every entry of a single request."""
        if not has_request_context():
            return None
        if "log_correlation_id" not in g:
            g.log_correlation_id = str(uuid4())
        return g.log_correlation_id

    def record(
        self,
        *,
        component: str,
        action: str,
        level: str = "info",
        result: str = "success",
        title: str,
        user_summary: str,
        technical_details: str,
        correlation_id: Optional[str] = None,
    ) -> LogRecord:
        """Persist a new log record."""
        if level not in self.available_levels:
            raise ValueError(f"Unsupported level '{level}'")

        self._ensure_component(component)
        config = (self.app or current_app).config
        environment = config.get("ENVIRONMENT", "development")
        correlation = correlation_id or self._request_correlation() or str(uuid4())

        entry = SystemLog(
            component=component,
            action=action,
            level=level,
            result=result,
            title=title,
            user_summary=user_summary,
            technical_details=technical_details,
            correlation_id=correlation,
            environment=environment,
        )
        db.session.add(entry)
        self._trim_logs(config.get("LOG_RETENTION", 200))
        db.session.commit()

        return LogRecord(
            component=component,
            action=action,
            level=level,
            result=result,
            title=title,
            user_summary=user_summary,
            technical_details=technical_details,
            correlation_id=correlation,
            environment=environment,
        )

    def _trim_logs(self, retention: int) -> None:
        """Keep the number of stored logs under the configured retention."""
        db.session.flush()
        total = SystemLog.query.count()
        if total <= retention:
            return
        excess = total - retention
        oldest_ids = [
            entry.id
            for entry in SystemLog.query.order_by(SystemLog.timestamp, SystemLog.id).limit(excess)
        ]
        if oldest_ids:
            SystemLog.query.filter(SystemLog.id.in_(oldest_ids)).delete(synchronize_session=False)

    def token_observer(self) -> Callable[["TokenEvent"], None]:
        """Return a ledger observer that records each balance change."""

        def observe(event: "TokenEvent") -> None:
            try:
                self.record(
                    component="Tokens",
                    action=event.action,
                    title=_TOKEN_TITLES.get(event.action, "Token balance changed"),
                    user_summary=f"Token balance moved from {event.previous} to {event.balance}.",
                    technical_details=(
                        f"TokenLedger.{event.action} applied amount={event.amount}"
                        f" previous={event.previous} balance={event.balance}."
                    ),
                )
            except SQLAlchemyError:
                db.session.rollback()
                raise

        return observe

    def fetch_logs(
        self,
        *,
        level: Optional[str] = None,
        component: Optional[str] = None,
        result: Optional[str] = None,
        search: Optional[str] = None,
        limit: int = 50,
    ) -> list[dict[str, object]]:
        """Retrieve structured logs with optional filtering."""
        query = SystemLog.query.order_by(SystemLog.timestamp.desc(), SystemLog.id.desc())
        if level and level in self.available_levels:
            query = query.filter_by(level=level)
        if component:
            query = query.filter_by(component=component)
        if result:
            query = query.filter_by(result=result)
        if search:
            like_pattern = f"%{search}%"
            query = query.filter(
                (SystemLog.title.ilike(like_pattern))
                | (SystemLog.user_summary.ilike(like_pattern))
                | (SystemLog.technical_details.ilike(like_pattern))
                | (SystemLog.correlation_id.ilike(like_pattern))
            )
        records = query.limit(max(1, min(limit, 200))).all()
        return [record.serialize() for record in records]

    def latest_timestamp(self) -> Optional[str]:
        """Return ISO formatted timestamp of the most recent log entry."""
        record = SystemLog.query.order_by(SystemLog.timestamp.desc()).first()
        if not record:
            return None
        return convert_to_log_timezone(record.timestamp).isoformat(timespec="seconds")


log_manager = LogManager()
