"""Timezone helpers for presenting stored UTC timestamps."""
from __future__ import annotations

from datetime import datetime, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from flask import current_app, has_app_context

_timezone_cache: dict[str, ZoneInfo] = {}


def _resolve_zoneinfo(name: str) -> ZoneInfo:
    """Return a ZoneInfo instance for the provided timezone name."""

    zone = _timezone_cache.get(name)
    if zone:
        return zone
    try:
        zone = ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        zone = ZoneInfo("UTC")
    _timezone_cache[name] = zone
    return zone


def get_log_timezone() -> ZoneInfo:
    """Return the zone log timestamps are displayed in."""

    name = "UTC"
    if has_app_context():
        name = current_app.config.get("LOG_TIMEZONE") or "UTC"
    return _resolve_zoneinfo(name)


def convert_to_log_timezone(value: datetime) -> datetime:
    """Convert a naive UTC datetime to the configured log timezone."""

    if not isinstance(value, datetime):
        raise TypeError("Datetime objects are required for timezone conversion")

    zone = get_log_timezone()
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)
    return value.astimezone(zone)


def utcnow() -> datetime:
    """Return the current naive UTC timestamp used for stored rows."""

    return datetime.now(timezone.utc).replace(tzinfo=None)
