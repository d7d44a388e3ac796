"""Routes for submitting an address for analysis."""
from __future__ import annotations

from flask import get_flashed_messages, redirect, render_template, request, url_for

from ..index.services import get_gate, login_required
from ..logging_service import log_manager
from ..tokens.services import InsufficientTokensError, get_ledger, token_costs
from . import bp


def render_search(*, feedback: dict[str, str] | None = None, address: str = ""):
    """Render the search form with optional feedback."""

    if feedback is None:
        # confirmation flashed by a redirected POST
        flashed = get_flashed_messages(with_categories=True)
        if flashed:
            category, message = flashed[-1]
            feedback = {"type": category, "message": message}

    return render_template(
        "search/index.html",
        title="Link Realty — Property Search",
        feedback=feedback,
        address=address,
        analysis_cost=token_costs()["property_analysis"],
        active_nav="search",
    )


@bp.route("/", methods=["GET", "POST"])
@login_required
def search():
    """Charge for an analysis and hand the address to the report page."""

    if request.method == "GET":
        return render_search()

    address = (request.form.get("address") or "").strip()
    if not address:
        return render_search(
            feedback={"type": "error", "message": "Enter a property address to analyze."}
        )

    cost = token_costs()["property_analysis"]
    try:
        remaining = get_ledger().charge(cost, purpose="analyze a property")
    except InsufficientTokensError as exc:
        log_manager.record(
            component="Search",
            action="analyze",
            level="warn",
            result="error",
            title="Analysis rejected — insufficient tokens",
            user_summary=str(exc),
            technical_details=(
                f"search.search needed {exc.required} tokens, balance was {exc.available}."
            ),
        )
        return render_search(feedback={"type": "error", "message": str(exc)}, address=address)

    get_gate().remember_address(address)
    log_manager.record(
        component="Search",
        action="analyze",
        level="info",
        result="success",
        title="Property analysis requested",
        user_summary=f"Analysis started for {address}; {remaining} tokens left.",
        technical_details=f"search.search charged {cost} tokens and stored the searched address.",
    )
    return redirect(url_for("report.summary"))
