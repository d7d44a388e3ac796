"""Routes for viewing and acting on a property report."""
from __future__ import annotations

from flask import current_app, flash, jsonify, redirect, render_template, request, url_for

from ..index.services import get_gate, login_required
from ..logging_service import log_manager
from ..tokens.services import InsufficientTokensError, get_ledger, token_costs
from . import bp
from .providers import get_report_provider


def _json_response(payload: dict[str, object], *, status: int = 200):
    """Return a JSON response with a consistent structure."""

    response = jsonify(payload)
    response.status_code = status
    return response


def _json_error(message: str, *, status: int = 400):
    """Return a JSON error payload with the supplied status."""

    return _json_response({"success": False, "message": message}, status=status)


def _render_report(address: str, *, feedback: dict[str, str] | None = None):
    report = get_report_provider().generate(address)
    return render_template(
        "report/summary.html",
        title="Link Realty — Property Summary",
        report=report.to_dict(),
        feedback=feedback,
        consultant_cost=token_costs()["consultant_request"],
        active_nav="report",
    )


@bp.route("/")
@login_required
def summary():
    """Show the loading state, then the report for the searched address."""

    address = get_gate().remembered_address()
    if not address:
        return redirect(url_for("search.search"))

    delay = current_app.config.get("REPORT_DELAY_SECONDS", 0)
    if delay > 0 and request.args.get("ready") != "1":
        return render_template(
            "report/loading.html",
            title="Link Realty — Analyzing",
            address=address,
            delay=delay,
            ready_url=url_for("report.summary", ready=1),
            active_nav="report",
        )

    log_manager.record(
        component="Report",
        action="view",
        level="info",
        result="success",
        title="Property report opened",
        user_summary=f"Report displayed for {address}.",
        technical_details=(
            f"report.summary rendered data from the '{get_report_provider().name}' provider."
        ),
    )
    return _render_report(address)


@bp.route("/api/report")
@login_required
def api_report():
    """Return the report for the searched address as JSON."""

    address = get_gate().remembered_address()
    if not address:
        return _json_error("Search for a property before requesting its report.", status=404)

    report = get_report_provider().generate(address)
    return _json_response({"success": True, "report": report.to_dict()})


@bp.post("/consultant")
@login_required
def consultant():
    """Charge for a consultant review of the current report."""

    address = get_gate().remembered_address()
    if not address:
        return redirect(url_for("search.search"))

    cost = token_costs()["consultant_request"]
    try:
        get_ledger().charge(cost, purpose="request consultant analysis")
    except InsufficientTokensError as exc:
        log_manager.record(
            component="Report",
            action="consultant",
            level="warn",
            result="error",
            title="Consultant request rejected — insufficient tokens",
            user_summary=str(exc),
            technical_details=(
                f"report.consultant needed {exc.required} tokens, balance was {exc.available}."
            ),
        )
        return _render_report(address, feedback={"type": "error", "message": str(exc)})

    message = (
        "Property analysis has been sent to our investment consultant. You will receive"
        f" a detailed report within 24 hours. ({cost} tokens consumed)"
    )
    log_manager.record(
        component="Report",
        action="consultant",
        level="info",
        result="success",
        title="Consultant review requested",
        user_summary=f"Consultant review queued for {address}.",
        technical_details=f"report.consultant charged {cost} tokens.",
    )
    flash(message, "success")
    return redirect(url_for("search.search"))


@bp.route("/discard", methods=["GET", "POST"])
@login_required
def discard():
    """Confirm, then forget the searched address at no token cost."""

    address = get_gate().remembered_address()
    if not address:
        return redirect(url_for("search.search"))

    if request.method == "GET" or request.form.get("confirm") != "yes":
        return render_template(
            "report/discard.html",
            title="Link Realty — Discard Analysis",
            address=address,
            active_nav="report",
        )

    get_gate().forget_address()
    log_manager.record(
        component="Report",
        action="discard",
        level="info",
        result="success",
        title="Property analysis discarded",
        user_summary=f"Analysis for {address} was discarded.",
        technical_details="report.discard removed the searched address after confirmation.",
    )
    flash("Property analysis discarded. You can search for other properties.", "success")
    return redirect(url_for("search.search"))
