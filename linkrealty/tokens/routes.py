"""JSON endpoints exposing the visitor's token balance."""
from __future__ import annotations

from flask import jsonify

from ..index.services import login_required
from . import bp
from .services import balance_tier, get_ledger, token_costs


@bp.route("/api/balance")
@login_required
def api_balance():
    """Return the current balance so the header badge can be refreshed."""

    balance = get_ledger().get_balance()
    return jsonify(
        {
            "success": True,
            "balance": balance,
            "tier": balance_tier(balance),
            "costs": token_costs(),
        }
    )
