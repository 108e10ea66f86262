# Overview: Flask API routes for supervisor requests and their approval; parses input and returns JSON responses.

"""
Approval request routes.

Supervisors file deletion/add-staff requests; managers and developers
approve or decline them. Role checks live in the services so that the same
rules apply to the CLI and tests.
"""

from flask import Blueprint, g, jsonify, request

from ..decorators import require_actor, respond
from ..errors import InvalidPayload, OperationResult
from ..services import approval_service, request_ledger
from ..services.request_ledger import KIND_ADD_STAFF, KIND_DELETION

requests_bp = Blueprint("requests", __name__, url_prefix="/api/requests")

URL_KINDS = {
    "deletion": KIND_DELETION,
    "add-staff": KIND_ADD_STAFF,
}


def _kind_or_404(url_kind: str):
    kind = URL_KINDS.get(url_kind)
    if kind is None:
        return None, (jsonify({"success": False, "code": "not_found", "message": "Unknown request kind"}), 404)
    return kind, None


def _object_body():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return None, respond(OperationResult.failed(InvalidPayload("Request body must be a JSON object.")))
    return data, None


def _decline_fields(data: dict) -> dict:
    return {
        "target_staff_id": data.get("target_staff_id"),
        "target_user_name": data.get("target_user_name"),
        "requester_name": data.get("requester_name"),
    }


@requests_bp.post("/deletion")
@require_actor
def create_deletion_request_route():
    """
    Request body:
    - target_user_uid: str (required)
    - reason_for_request: str (optional)
    """
    data = request.get_json(silent=True) or {}
    return respond(request_ledger.create_deletion_request(data, g.actor))


@requests_bp.post("/add-staff")
@require_actor
def create_add_staff_request_route():
    """
    Request body:
    - target_user_name: str (required)
    - target_staff_id: str, 6 digits (required)
    - target_user_role: str (required)
    - initial_password: str (optional)
    - reason_for_request: str (optional)
    """
    data = request.get_json(silent=True) or {}
    return respond(request_ledger.create_add_staff_request(data, g.actor))


@requests_bp.get("/<string:url_kind>")
@require_actor
def list_requests_route(url_kind: str):
    """
    Query params:
    - scope: "pending" (default, managers/developers) or "mine"
    """
    kind, error = _kind_or_404(url_kind)
    if error:
        return error

    scope = request.args.get("scope", "pending")
    if scope == "mine":
        return respond(request_ledger.list_requests_by_requester(kind, g.actor))
    if scope != "pending":
        return jsonify({"success": False, "code": "invalid_scope", "message": "scope must be pending or mine"}), 400
    return respond(request_ledger.list_pending_requests(kind, g.actor))


@requests_bp.get("/<string:url_kind>/<int:request_id>")
@require_actor
def get_request_route(url_kind: str, request_id: int):
    kind, error = _kind_or_404(url_kind)
    if error:
        return error
    return respond(request_ledger.get_request(kind, request_id))


@requests_bp.post("/deletion/<int:request_id>/approve")
@require_actor
def approve_deletion_route(request_id: int):
    return respond(approval_service.approve_deletion(request_id, g.actor))


@requests_bp.post("/deletion/<int:request_id>/decline")
@require_actor
def decline_deletion_route(request_id: int):
    """
    Request body (all optional):
    - feedback: str
    - target_staff_id, target_user_name, requester_name: when all three are
      present the requester is notified of the decline
    """
    data, error = _object_body()
    if error:
        return error
    return respond(approval_service.decline_deletion(
        request_id, g.actor, data.get("feedback"), **_decline_fields(data)
    ))


@requests_bp.post("/add-staff/<int:request_id>/approve")
@require_actor
def approve_add_staff_route(request_id: int):
    return respond(approval_service.approve_add_staff(request_id, g.actor))


@requests_bp.post("/add-staff/<int:request_id>/decline")
@require_actor
def decline_add_staff_route(request_id: int):
    data, error = _object_body()
    if error:
        return error
    return respond(approval_service.decline_add_staff(
        request_id, g.actor, data.get("feedback"), **_decline_fields(data)
    ))
