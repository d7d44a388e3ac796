"""Tests for the report page and its terminal actions."""

from __future__ import annotations

from urllib.parse import urlparse

import pytest

from linkrealty.storage import SEARCHED_ADDRESS_KEY, TOKEN_BALANCE_KEY


def _path(response) -> str:
    return urlparse(response.headers["Location"]).path


@pytest.fixture()
def with_report(signed_in):
    """A signed-in client that already paid for a report."""

    with signed_in.session_transaction() as sess:
        sess[SEARCHED_ADDRESS_KEY] = "123 Main St"
        sess[TOKEN_BALANCE_KEY] = "45"
    return signed_in


def test_report_without_session_redirects_home(client):
    with client.session_transaction() as sess:
        sess[SEARCHED_ADDRESS_KEY] = "123 Main St"

    response = client.get("/report/?ready=1")

    assert response.status_code == 302
    assert _path(response) == "/"
    assert b"485,000" not in response.data


def test_report_without_address_redirects_to_search(signed_in):
    response = signed_in.get("/report/")

    assert response.status_code == 302
    assert _path(response) == "/search/"


def test_report_shows_loading_state_while_pending(with_report, app):
    app.config["REPORT_DELAY_SECONDS"] = 2

    loading = with_report.get("/report/")

    assert loading.status_code == 200
    assert b"Analyzing Property Data..." in loading.data
    assert b'http-equiv="refresh" content="2;url=/report/?ready=1"' in loading.data
    assert b"$485,000" not in loading.data

    ready = with_report.get("/report/?ready=1")
    assert b"$485,000" in ready.data
    assert b"Strong Investment Opportunity" in ready.data


def test_viewing_report_does_not_charge(with_report):
    with_report.get("/report/")

    with with_report.session_transaction() as sess:
        assert sess[TOKEN_BALANCE_KEY] == "45"


def test_consultant_request_charges_once_and_redirects(with_report):
    response = with_report.post("/report/consultant")

    assert response.status_code == 302
    assert _path(response) == "/search/"
    with with_report.session_transaction() as sess:
        assert sess[TOKEN_BALANCE_KEY] == "30"

    page = with_report.get(response.headers["Location"])

    assert page.status_code == 200
    assert b"sent to our investment consultant" in page.data
    assert b"(15 tokens consumed)" in page.data
    assert b"30 tokens" in page.data

    again = with_report.get("/search/")

    assert b"sent to our investment consultant" not in again.data
    with with_report.session_transaction() as sess:
        assert sess[TOKEN_BALANCE_KEY] == "30"


def test_consultant_request_with_insufficient_tokens(with_report):
    with with_report.session_transaction() as sess:
        sess[TOKEN_BALANCE_KEY] = "10"

    response = with_report.post("/report/consultant")

    assert response.status_code == 200
    assert b"You need 15 tokens to request consultant analysis" in response.data
    assert b"You currently have 10 tokens" in response.data
    assert b"$485,000" in response.data
    with with_report.session_transaction() as sess:
        assert sess[TOKEN_BALANCE_KEY] == "10"


def test_discard_requires_confirmation(with_report):
    prompt = with_report.post("/report/discard")

    assert prompt.status_code == 200
    assert b"This action cannot be undone." in prompt.data
    with with_report.session_transaction() as sess:
        assert sess[SEARCHED_ADDRESS_KEY] == "123 Main St"

    confirmed = with_report.post(
        "/report/discard", data={"confirm": "yes"}, follow_redirects=True
    )

    assert confirmed.status_code == 200
    assert confirmed.request.path == "/search/"
    assert b"Property analysis discarded." in confirmed.data
    with with_report.session_transaction() as sess:
        assert SEARCHED_ADDRESS_KEY not in sess
        assert sess[TOKEN_BALANCE_KEY] == "45"


def test_report_api_returns_json(with_report):
    response = with_report.get("/report/api/report")

    assert response.status_code == 200
    data = response.get_json()
    assert data["success"] is True
    assert data["report"]["address"] == "123 Main St"
    assert data["report"]["rental_potential"]["annual_rent"] == 38400


def test_report_api_without_address(signed_in):
    response = signed_in.get("/report/api/report")

    assert response.status_code == 404
    assert response.get_json()["success"] is False


def test_configured_provider_drives_the_page(app, with_report):
    from linkrealty.report.providers import SeededReportProvider

    app.extensions["report_provider"] = SeededReportProvider()
    expected = SeededReportProvider().generate("123 Main St")

    response = with_report.get("/report/api/report")

    report = response.get_json()["report"]
    assert report["market_value"] == expected.market_value
    assert report["debt_amount"] == expected.lien_total
