"""Tests for structured logging and the log feed."""

from __future__ import annotations

import pytest

from linkrealty.logging_service import log_manager
from linkrealty.models import SystemLog
from linkrealty.tokens.services import TokenEvent


def _record(**overrides):
    fields = {
        "component": "Search",
        "action": "analyze",
        "title": "Property analysis requested",
        "user_summary": "Analysis started.",
        "technical_details": "test entry",
    }
    fields.update(overrides)
    return log_manager.record(**fields)


def test_record_rejects_unknown_level(app):
    with app.app_context():
        with pytest.raises(ValueError):
            _record(level="debug")


def test_records_are_trimmed_to_retention(app):
    app.config["LOG_RETENTION"] = 3

    with app.app_context():
        for index in range(5):
            _record(title=f"entry {index}")

        titles = {entry.title for entry in SystemLog.query.all()}
        assert titles == {"entry 2", "entry 3", "entry 4"}


def test_token_observer_records_balance_changes(app):
    observer = log_manager.token_observer()

    with app.app_context():
        observer(TokenEvent(action="reset", previous=3, balance=50, amount=50))

        entry = SystemLog.query.filter_by(component="Tokens").one()
        assert entry.action == "reset"
        assert entry.title == "Token balance reset"
        assert entry.user_summary == "Token balance moved from 3 to 50."


def test_entries_in_one_request_share_a_correlation_id(signed_in, app):
    signed_in.post("/search/", data={"address": "9 Elm Rd"})

    with app.app_context():
        entries = SystemLog.query.all()
        assert {entry.component for entry in entries} == {"Search", "Tokens"}
        assert len({entry.correlation_id for entry in entries}) == 1


def test_feed_filters_by_component(signed_in, app):
    with app.app_context():
        _record(component="Report", action="view", title="Report opened")
        _record(level="warn", result="error", title="Analysis rejected")

    response = signed_in.get("/logs/feed?component=Report")

    assert response.status_code == 200
    payload = response.get_json()
    assert [entry["title"] for entry in payload["logs"]] == ["Report opened"]
    assert payload["latest"] is not None
    assert "Tokens" in payload["components"]

    warnings = signed_in.get("/logs/feed?level=warn").get_json()["logs"]
    assert [entry["title"] for entry in warnings] == ["Analysis rejected"]


def test_feed_requires_sign_in(client):
    assert client.get("/logs/feed").status_code == 302
