# Overview: Flask API routes for the staff directory; parses input and returns JSON responses.

"""
Staff management routes.

SECURITY:
- Listing the directory requires any signed-in user.
- Creating and deleting users is limited to managers/developers by the
  user directory service itself.
"""

from flask import Blueprint, g, request

from ..decorators import require_actor, respond
from ..services import user_directory

staff_bp = Blueprint("staff", __name__, url_prefix="/api/staff")


@staff_bp.get("")
@require_actor
def list_staff_route():
    return respond(user_directory.list_users())


@staff_bp.post("")
@require_actor
def create_staff_route():
    """
    Create a staff record.

    Request body:
    - name: str (required)
    - staff_id: str, 6 digits (required)
    - role: str (required)
    - initial_password: str (optional)
    """
    data = request.get_json(silent=True) or {}
    return respond(user_directory.create_user(data, g.actor))


@staff_bp.delete("/<string:user_id>")
@require_actor
def delete_staff_route(user_id: str):
    return respond(user_directory.delete_user(user_id, g.actor))
