"""Tests for the session gate and the sign-in routes."""

from __future__ import annotations

from urllib.parse import urlparse

from linkrealty.index.services import SessionGate
from linkrealty.storage import (
    SEARCHED_ADDRESS_KEY,
    SESSION_FLAG_KEY,
    TOKEN_BALANCE_KEY,
    MemoryStore,
)


def _path(response) -> str:
    return urlparse(response.headers["Location"]).path


def test_login_and_logout_toggle_the_flag_and_forget_the_address():
    store = MemoryStore({TOKEN_BALANCE_KEY: "30"})
    gate = SessionGate(store)

    gate.login()
    gate.remember_address("123 Main St")
    assert gate.is_authenticated()
    assert gate.remembered_address() == "123 Main St"

    gate.logout()

    assert not gate.is_authenticated()
    assert gate.remembered_address() is None
    assert store.get(TOKEN_BALANCE_KEY) == "30"


def test_logout_can_wipe_the_token_balance():
    store = MemoryStore({TOKEN_BALANCE_KEY: "5", SESSION_FLAG_KEY: "true"})

    SessionGate(store, reset_tokens_on_logout=True).logout()

    assert store.snapshot() == {}


def test_home_shows_sign_in_form(client):
    response = client.get("/")

    assert response.status_code == 200
    assert b"Sign In" in response.data
    assert b"tokens</span>" not in response.data


def test_home_redirects_signed_in_visitors_to_search(signed_in):
    response = signed_in.get("/")

    assert response.status_code == 302
    assert _path(response) == "/search/"


def test_login_requires_both_fields(client):
    response = client.post("/login", data={"email": "investor@example.com", "password": ""})

    assert response.status_code == 200
    assert b"Enter your email and password to continue." in response.data
    with client.session_transaction() as sess:
        assert SESSION_FLAG_KEY not in sess


def test_login_sets_flag_and_shows_starting_balance(client):
    response = client.post(
        "/login",
        data={"email": "investor@example.com", "password": "secret"},
        follow_redirects=True,
    )

    assert response.status_code == 200
    assert b"Find Property Investment Opportunities" in response.data
    assert b"50 tokens" in response.data
    with client.session_transaction() as sess:
        assert sess[SESSION_FLAG_KEY] == "true"
        assert TOKEN_BALANCE_KEY not in sess


def test_logout_clears_flag_and_address(signed_in):
    with signed_in.session_transaction() as sess:
        sess[SEARCHED_ADDRESS_KEY] = "123 Main St"
        sess[TOKEN_BALANCE_KEY] = "45"

    response = signed_in.post("/logout")

    assert response.status_code == 302
    assert _path(response) == "/"
    with signed_in.session_transaction() as sess:
        assert SESSION_FLAG_KEY not in sess
        assert SEARCHED_ADDRESS_KEY not in sess
        assert sess[TOKEN_BALANCE_KEY] == "45"


def test_logout_in_flight_report_redirects_after_sign_in(signed_in):
    with signed_in.session_transaction() as sess:
        sess[SEARCHED_ADDRESS_KEY] = "123 Main St"

    signed_in.post("/logout")
    signed_in.post("/login", data={"email": "a@example.com", "password": "pw"})
    response = signed_in.get("/report/?ready=1")

    assert response.status_code == 302
    assert _path(response) == "/search/"
