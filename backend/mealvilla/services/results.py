# Overview: Boundary decorator that turns service exceptions into OperationResult values.

from __future__ import annotations

from functools import wraps

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from ..errors import InvalidPayload, OperationResult, Unavailable, WorkflowError
from ..extensions import db


def store_boundary(action: str):
    """
    Wrap a workflow operation so it never raises to its caller.

    - WorkflowError -> failed OperationResult carrying the error code
    - SQLAlchemyError -> failed OperationResult with code "unavailable";
      the driver message is kept in details for diagnostics
    - a plain return value that is not an OperationResult is wrapped as success

    The session is rolled back on every failure path so no partial write
    survives.
    """
    def decorator(f):
        @wraps(f)
        def decorated_function(*args, **kwargs):
            try:
                result = f(*args, **kwargs)
            except WorkflowError as e:
                db.session.rollback()
                current_app.logger.info("%s rejected: %s (%s)", action, e.message, e.code)
                return OperationResult.failed(e)
            except SQLAlchemyError as e:
                db.session.rollback()
                current_app.logger.exception("%s failed: store unavailable", action)
                return OperationResult.failed(
                    Unavailable(f"Failed to {action}. Please try again.", details={"detail": str(e)})
                )

            if isinstance(result, OperationResult):
                return result
            return OperationResult.ok(f"{action} succeeded", data=result)

        return decorated_function
    return decorator


def require_object(data) -> dict:
    """Reject request payloads that are not a JSON object."""
    if not isinstance(data, dict):
        raise InvalidPayload("Request body must be a JSON object.")
    return data
