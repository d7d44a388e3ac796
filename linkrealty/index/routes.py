"""Routes for the landing page and the demo sign-in."""
from __future__ import annotations

from flask import redirect, render_template, request, url_for

from ..logging_service import log_manager
from ..tokens.services import get_ledger
from . import bp
from .services import get_gate


@bp.route("/")
def home():
    """Show the sign-in form, or send signed-in visitors to the search page."""

    if get_gate().is_authenticated():
        return redirect(url_for("search.search"))

    return render_template(
        "index/home.html",
        title="Link Realty Consulting",
        feedback=None,
        active_nav="home",
    )


@bp.post("/login")
def login():
    """Set the session flag once both demo credentials are supplied."""

    email = (request.form.get("email") or "").strip()
    password = request.form.get("password") or ""

    if not email or not password:
        log_manager.record(
            component="Home",
            action="login",
            level="warn",
            result="error",
            title="Sign-in rejected — missing credentials",
            user_summary="Enter both an email address and a password to continue.",
            technical_details="index.login received an empty email or password field.",
        )
        return render_template(
            "index/home.html",
            title="Link Realty Consulting",
            feedback={
                "type": "error",
                "message": "Enter your email and password to continue.",
            },
            email=email,
            active_nav="home",
        )

    get_gate().login()
    log_manager.record(
        component="Home",
        action="login",
        level="info",
        result="success",
        title="Visitor signed in",
        user_summary=f"Signed in with {get_ledger().get_balance()} tokens available.",
        technical_details="index.login set the session flag for this browser.",
    )
    return redirect(url_for("search.search"))


@bp.post("/logout")
def logout():
    """Clear the session flag and remembered address, then return home."""

    get_gate().logout()
    log_manager.record(
        component="Home",
        action="logout",
        level="info",
        result="success",
        title="Visitor signed out",
        user_summary="Session ended and the remembered search was cleared.",
        technical_details="index.logout removed the session flag and searched address.",
    )
    return redirect(url_for("index.home"))
