# Overview: Workflow error taxonomy and the structured result returned by every operation.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


class WorkflowError(Exception):
    """Base class for expected, user-facing workflow failures."""
    code = "error"
    status = 400

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class Forbidden(WorkflowError):
    code = "forbidden"
    status = 403


class NotFound(WorkflowError):
    code = "not_found"
    status = 404


class NotFoundOrProcessed(WorkflowError):
    code = "not_found_or_processed"
    status = 404


class AlreadyProcessed(WorkflowError):
    code = "already_processed"
    status = 409


class InvalidTarget(WorkflowError):
    code = "invalid_target"


class InvalidRole(WorkflowError):
    code = "invalid_role"


class InvalidStaffId(WorkflowError):
    code = "invalid_staff_id"


class EmptyName(WorkflowError):
    code = "empty_name"


class DuplicateStaffId(WorkflowError):
    code = "duplicate_staff_id"
    status = 409


class PrivilegeEscalation(WorkflowError):
    code = "privilege_escalation"
    status = 403


class PrivilegeBoundary(WorkflowError):
    code = "privilege_boundary"
    status = 403


class Locked(WorkflowError):
    code = "locked"
    status = 409


class InvalidQuantity(WorkflowError):
    code = "invalid_quantity"


class MissingIdentity(WorkflowError):
    code = "missing_identity"


class InvalidNotification(WorkflowError):
    code = "invalid_notification"


class InvalidPayload(WorkflowError):
    code = "invalid_payload"


class Unavailable(WorkflowError):
    code = "unavailable"
    status = 503


@dataclass
class OperationResult:
    """
    Outcome of a workflow operation.

    `warnings` carries secondary failures (e.g. a notification that could
    not be written) that did not affect the primary outcome.
    """
    success: bool
    message: str
    code: str = "ok"
    status: int = 200
    data: Any = None
    warnings: list[str] = field(default_factory=list)
    details: dict = field(default_factory=dict)

    @classmethod
    def ok(cls, message: str, data: Any = None, *, status: int = 200, warnings: list[str] | None = None) -> "OperationResult":
        return cls(success=True, message=message, status=status, data=data, warnings=list(warnings or []))

    @classmethod
    def failed(cls, error: WorkflowError) -> "OperationResult":
        return cls(
            success=False,
            message=error.message,
            code=error.code,
            status=error.status,
            details=dict(error.details),
        )

    def to_dict(self) -> dict:
        payload = {
            "success": self.success,
            "message": self.message,
            "code": self.code,
        }
        if self.data is not None:
            payload["data"] = self.data
        if self.warnings:
            payload["warnings"] = self.warnings
        if self.details:
            payload["details"] = self.details
        return payload
