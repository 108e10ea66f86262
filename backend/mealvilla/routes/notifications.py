from __future__ import annotations

from flask import Blueprint, g, request

from ..decorators import require_actor, respond
from ..errors import InvalidPayload, OperationResult
from ..services import notification_service

notifications_bp = Blueprint("notifications", __name__, url_prefix="/api/notifications")


@notifications_bp.get("")
@require_actor
def list_notifications_route():
    limit = request.args.get("limit", type=int)
    return respond(notification_service.list_notifications(g.actor, limit=limit))


@notifications_bp.post("")
@require_actor
def send_notification_route():
    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        return respond(OperationResult.failed(InvalidPayload("Request body must be a JSON object.")))
    return respond(notification_service.send_notification(g.actor, data.get("title"), data.get("message")))
