# Overview: Service-layer operations for supervisor requests; creation, lookup and the status transition.

"""
Request Ledger

WHY: Supervisors cannot change the staff directory themselves. They file a
request (add or delete a staff member) that a manager/developer settles.

INVARIANTS:
- Requests are created pending; status changes exactly once, to approved
  or declined.
- transition_request is the only writer of status, processed_* and
  manager_feedback. It is a compare-and-set on status, so two concurrent
  settlements of the same request cannot both succeed.
"""

from __future__ import annotations

from flask import current_app
from sqlalchemy import update

from ..errors import (
    AlreadyProcessed,
    DuplicateStaffId,
    Forbidden,
    InvalidRole,
    InvalidTarget,
    NotFound,
    OperationResult,
    WorkflowError,
)
from ..extensions import db
from ..models import AddStaffRequest, DeletionRequest
from ..models.requests import STATUS_APPROVED, STATUS_DECLINED, STATUS_PENDING
from ..roles import (
    Actor,
    ADD_REQUEST_FORBIDDEN_ROLES,
    APPROVER_ROLES,
    DELETION_PROTECTED_ROLES,
    ROLE_MANAGER,
    ROLE_SUPERVISOR,
)
from .notification_service import collect_warning, emit_notification
from .results import require_object, store_boundary
from .user_directory import (
    find_by_staff_id,
    get_user,
    validate_assignable_role,
    validate_name,
    validate_staff_id,
)


KIND_DELETION = "deletion"
KIND_ADD_STAFF = "add_staff"

REQUEST_MODELS = {
    KIND_DELETION: DeletionRequest,
    KIND_ADD_STAFF: AddStaffRequest,
}


def model_for(kind: str):
    model = REQUEST_MODELS.get(kind)
    if model is None:
        raise NotFound(f"Unknown request kind: {kind}")
    return model


def load_request(kind: str, request_id: int):
    return db.session.query(model_for(kind)).filter_by(id=request_id).first()


def load_pending_request(kind: str, request_id: int):
    req = load_request(kind, request_id)
    if req is None or req.status != STATUS_PENDING:
        return None
    return req


def transition_request(
    kind: str,
    request_id: int,
    status: str,
    processed_by: Actor,
    feedback: str | None = None,
) -> None:
    """
    Move a pending request to approved/declined inside the caller's transaction.

    Raises NotFound if the request does not exist and AlreadyProcessed if it
    is no longer pending at write time.
    """
    if status not in (STATUS_APPROVED, STATUS_DECLINED):
        raise WorkflowError("Status must be approved or declined.")

    model = model_for(kind)
    values = {
        "status": status,
        "processed_by_uid": processed_by.uid,
        "processed_by_name": processed_by.name or "Manager/Dev",
        "processed_timestamp": db.func.now(),
    }
    if feedback is not None:
        values["manager_feedback"] = feedback

    stmt = (
        update(model)
        .where(model.id == request_id, model.status == STATUS_PENDING)
        .values(**values)
        .execution_options(synchronize_session=False)
    )
    result = db.session.execute(stmt)
    if result.rowcount != 1:
        if db.session.query(model.id).filter(model.id == request_id).first() is None:
            raise NotFound("Request not found.")
        raise AlreadyProcessed("Request has already been processed.")

    current_app.logger.info("%s request %s %s by %s", kind, request_id, status, processed_by.uid)


def _notify_managers(actor: Actor, title: str, message: str) -> list[str]:
    warnings: list[str] = []
    collect_warning(
        warnings,
        emit_notification(actor, title, message, recipient_role=ROLE_MANAGER),
    )
    return warnings


@store_boundary("submit deletion request")
def create_deletion_request(data: dict, actor: Actor) -> OperationResult:
    """
    File a request to delete an existing staff member.

    data keys: target_user_uid, reason_for_request (optional).
    The target's name, staff id and role are copied from the directory.
    """
    if actor.role != ROLE_SUPERVISOR:
        raise Forbidden("Permission denied: Only supervisors can request deletions.")

    data = require_object(data)
    target = get_user(data.get("target_user_uid"))
    if not target:
        raise NotFound("Target user not found.")

    if target.role in DELETION_PROTECTED_ROLES:
        raise InvalidTarget(
            "Supervisors cannot request deletion of managers, developers, or other supervisors."
        )

    req = DeletionRequest(
        requested_by_uid=actor.uid,
        requested_by_name=actor.name or "Supervisor",
        requested_by_role=actor.role,
        target_user_uid=target.id,
        target_staff_id=target.staff_id,
        target_user_name=target.name,
        target_user_role=target.role,
        status=STATUS_PENDING,
        reason_for_request=(data.get("reason_for_request") or "").strip(),
    )
    db.session.add(req)
    db.session.commit()
    payload = req.to_dict()

    warnings = _notify_managers(
        actor,
        "New Staff Deletion Request",
        f"A request to delete staff {target.name} (ID: {target.staff_id}) has been submitted by "
        f"{actor.display_name}. Please review in Approval Requests.",
    )

    return OperationResult.ok(
        "Deletion request submitted successfully. It is now pending manager approval.",
        data=payload,
        status=201,
        warnings=warnings,
    )


@store_boundary("submit add-staff request")
def create_add_staff_request(data: dict, actor: Actor) -> OperationResult:
    """
    File a request to add a new staff member.

    data keys: target_user_name, target_staff_id, target_user_role,
    initial_password (optional), reason_for_request (optional).
    """
    if actor.role != ROLE_SUPERVISOR:
        raise Forbidden("Permission denied: Only supervisors can request new staff.")

    data = require_object(data)
    role = data.get("target_user_role")
    if role in ADD_REQUEST_FORBIDDEN_ROLES:
        raise InvalidRole("Supervisors cannot request new managers or developers.")
    role = validate_assignable_role(role)

    staff_id = validate_staff_id(data.get("target_staff_id"))
    name = validate_name(data.get("target_user_name"))

    if find_by_staff_id(staff_id):
        raise DuplicateStaffId(f"Staff ID {staff_id} is already registered.")

    req = AddStaffRequest(
        requested_by_uid=actor.uid,
        requested_by_name=actor.name or "Supervisor",
        requested_by_role=actor.role,
        target_staff_id=staff_id,
        target_user_name=name,
        target_user_role=role,
        initial_password=data.get("initial_password") or None,
        status=STATUS_PENDING,
        reason_for_request=(data.get("reason_for_request") or "").strip(),
    )
    db.session.add(req)
    db.session.commit()
    payload = req.to_dict()

    warnings = _notify_managers(
        actor,
        "New Add Staff Request",
        f"A request to add {name} (ID: {staff_id}) as {role} has been submitted by "
        f"{actor.display_name}. Please review in Approval Requests.",
    )

    return OperationResult.ok(
        "Add staff request submitted successfully. It is now pending manager approval.",
        data=payload,
        status=201,
        warnings=warnings,
    )


@store_boundary("fetch request")
def get_request(kind: str, request_id: int) -> OperationResult:
    req = load_request(kind, request_id)
    if req is None:
        raise NotFound("Request not found.")
    return OperationResult.ok("Request found.", data=req.to_dict())


@store_boundary("update request status")
def set_request_status(
    kind: str,
    request_id: int,
    status: str,
    processed_by: Actor,
    feedback: str | None = None,
) -> OperationResult:
    transition_request(kind, request_id, status, processed_by, feedback)
    db.session.commit()
    return OperationResult.ok(f"Request {status}.", data=load_request(kind, request_id).to_dict())


@store_boundary("list pending requests")
def list_pending_requests(kind: str, actor: Actor) -> OperationResult:
    if actor.role not in APPROVER_ROLES:
        raise Forbidden("Permission denied: Only managers or developers can review requests.")

    model = model_for(kind)
    rows = (
        db.session.query(model)
        .filter(model.status == STATUS_PENDING)
        .order_by(model.request_timestamp.desc(), model.id.desc())
        .all()
    )
    return OperationResult.ok(f"{len(rows)} pending request(s)", data=[r.to_dict() for r in rows])


@store_boundary("list submitted requests")
def list_requests_by_requester(kind: str, actor: Actor) -> OperationResult:
    model = model_for(kind)
    rows = (
        db.session.query(model)
        .filter(model.requested_by_uid == actor.uid)
        .order_by(model.request_timestamp.desc(), model.id.desc())
        .all()
    )
    return OperationResult.ok(f"{len(rows)} request(s)", data=[r.to_dict() for r in rows])
