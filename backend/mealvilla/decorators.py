# Overview: Request decorators for API routes; resolve the acting user and check roles.

"""
Actor resolution.

Sign-in happens in front of this service: the authenticating gateway
forwards the signed-in user's id in the X-Actor-Uid header. Name, role and
staff id are read from the staff directory on every request, never from
the client.
"""

from functools import wraps

from flask import current_app, g, jsonify, request
from sqlalchemy.exc import SQLAlchemyError

from .errors import OperationResult
from .roles import Actor
from .services.user_directory import get_user

ACTOR_HEADER = "X-Actor-Uid"


def respond(result: OperationResult):
    """Render an OperationResult as a JSON response with its HTTP status."""
    return jsonify(result.to_dict()), result.status


def require_actor(f):
    """
    Require an identified caller and establish g.actor.

    Returns 401 if the header is missing or names no directory record,
    503 if the directory cannot be read.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        uid = (request.headers.get(ACTOR_HEADER) or "").strip()
        if not uid:
            return jsonify({"success": False, "code": "unauthenticated", "message": "Authentication required"}), 401

        try:
            user = get_user(uid)
        except SQLAlchemyError:
            current_app.logger.exception("Failed to resolve actor %s", uid)
            return jsonify({"success": False, "code": "unavailable", "message": "Service unavailable"}), 503

        if not user:
            return jsonify({"success": False, "code": "unauthenticated", "message": "Unknown user"}), 401

        g.actor = Actor.from_user(user)
        return f(*args, **kwargs)

    return decorated_function


def require_role(*roles):
    """
    Require the actor to hold one of the given roles.

    Services repeat their own role checks; this only rejects early for
    surfaces that are wholly role-gated.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            if not hasattr(g, "actor"):
                return jsonify({"success": False, "code": "unauthenticated", "message": "Authentication required"}), 401

            if g.actor.role not in roles:
                current_app.logger.info("Role check failed for %s on %s", g.actor.uid, request.path)
                return jsonify({
                    "success": False,
                    "code": "forbidden",
                    "message": f"Requires one of: {', '.join(sorted(roles))}",
                }), 403

            return f(*args, **kwargs)

        return decorated_function
    return decorator
