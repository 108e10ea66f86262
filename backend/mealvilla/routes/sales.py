# Overview: Flask API routes for the daily sales entry; parses input and returns JSON responses.

# backend/mealvilla/routes/sales.py
"""Sales entry API routes. The entry always belongs to the signed-in user."""

from flask import Blueprint, g, request

from ..decorators import require_actor, require_role, respond
from ..roles import SALES_FINALIZER_ROLES
from ..services import sales_ledger

sales_bp = Blueprint("sales", __name__, url_prefix="/api/sales-entries")


@sales_bp.get("/today")
@require_actor
def get_today_route():
    return respond(sales_ledger.get_today_entry(g.actor.uid))


@sales_bp.post("/today")
@require_actor
def submit_today_route():
    """
    Add quantities to today's entry.

    Request body: any of collected, sold_cash, sold_transfer, sold_card,
    returned, damages; each {burger, jumbo, family, short} of non-negative
    integers. Omitted groups/products count as zero.
    """
    data = request.get_json(silent=True)
    return respond(sales_ledger.submit_entry(data, g.actor.uid, g.actor.staff_id))


@sales_bp.post("/today/reset")
@require_actor
def reset_today_route():
    return respond(sales_ledger.reset_today_entry(g.actor.uid, g.actor.staff_id))


@sales_bp.post("/<string:user_id>/today/finalize")
@require_actor
@require_role(*SALES_FINALIZER_ROLES)
def finalize_today_route(user_id: str):
    return respond(sales_ledger.finalize_today_entry(user_id, g.actor))
