# Overview: Service-layer orchestration of the supervisor -> manager approval workflow.

"""
Approval Workflow

WHY: A supervisor's add/delete request only takes effect once a manager or
developer approves it. Approval performs the side effect (delete or create
the user record) and the status transition in one transaction, so either
both happen or neither does.

Notifications are sent after that transaction commits. A notification that
fails is reported as a warning on the result and never undoes the approval.
"""

from __future__ import annotations

from flask import current_app

from ..errors import AlreadyProcessed, Forbidden, NotFound, NotFoundOrProcessed, OperationResult
from ..extensions import db
from ..models import AddStaffRequest
from ..models.requests import STATUS_APPROVED, STATUS_DECLINED
from ..roles import Actor, APPROVER_ROLES
from .identity_service import get_identity_provisioner
from .notification_service import collect_warning, emit_notification
from .request_ledger import (
    KIND_ADD_STAFF,
    KIND_DELETION,
    load_pending_request,
    load_request,
    transition_request,
)
from .results import store_boundary
from .user_directory import insert_user, remove_user_record


def _require_approver(actor: Actor, verb: str) -> None:
    if actor.role not in APPROVER_ROLES:
        raise Forbidden(f"Permission denied: Only managers or developers can {verb} requests.")


def _require_pending(kind: str, request_id: int):
    req = load_pending_request(kind, request_id)
    if req is None:
        raise NotFoundOrProcessed("Request not found or already processed.")
    return req


def _settle(kind: str, request_id: int, status: str, actor: Actor, feedback: str | None = None) -> None:
    try:
        transition_request(kind, request_id, status, actor, feedback)
    except (NotFound, AlreadyProcessed):
        # Lost the race to another approver; the caller's writes roll back.
        raise NotFoundOrProcessed("Request not found or already processed.")


@store_boundary("approve deletion request")
def approve_deletion(request_id: int, actor: Actor) -> OperationResult:
    _require_approver(actor, "approve")
    req = _require_pending(KIND_DELETION, request_id)

    target_uid = req.target_user_uid
    target_name = req.target_user_name
    target_staff_id = req.target_staff_id
    requester_uid = req.requested_by_uid

    if not remove_user_record(target_uid):
        current_app.logger.warning(
            "Deletion request %s: user %s (%s) was already absent from the directory",
            request_id, target_uid, target_staff_id,
        )

    _settle(KIND_DELETION, request_id, STATUS_APPROVED, actor)
    db.session.commit()

    warnings: list[str] = []
    collect_warning(warnings, emit_notification(
        actor,
        "Deletion Request Approved",
        f"Your request to delete staff {target_name} (ID: {target_staff_id}) has been approved. "
        f"The user has been removed from the staff directory.",
        sender_name=actor.name or "System (Approval)",
        recipient_uid=requester_uid,
    ))
    collect_warning(warnings, emit_notification(
        actor,
        "Staff Member Removed",
        f"Staff member {target_name} (ID: {target_staff_id}) has been removed from the system.",
        sender_name="System Announcement",
        sender_role="system",
    ))

    return OperationResult.ok(
        "Deletion request approved. User removed from the staff directory.",
        data=load_request(KIND_DELETION, request_id).to_dict(),
        warnings=warnings,
    )


def _decline(
    kind: str,
    request_id: int,
    actor: Actor,
    feedback: str | None,
    *,
    target_staff_id: str | None,
    target_user_name: str | None,
    requester_name: str | None,
    subject: str,
    action_phrase: str,
) -> OperationResult:
    _require_approver(actor, "decline")
    req = _require_pending(kind, request_id)
    requester_uid = req.requested_by_uid

    _settle(kind, request_id, STATUS_DECLINED, actor, feedback or "")
    db.session.commit()

    # The requester hears about a decline only when the caller passed the
    # display fields along; without them no notification is sent.
    warnings: list[str] = []
    if target_user_name and target_staff_id and requester_name:
        collect_warning(warnings, emit_notification(
            actor,
            f"{subject} Request Declined",
            f"Your request to {action_phrase} {target_user_name} (ID: {target_staff_id}) has been "
            f"declined by {actor.display_name}. Feedback: {feedback or 'N/A'}",
            sender_name=actor.name or "System (Approval)",
            recipient_uid=requester_uid,
        ))

    return OperationResult.ok(
        f"{subject} request declined.",
        data=load_request(kind, request_id).to_dict(),
        warnings=warnings,
    )


@store_boundary("decline deletion request")
def decline_deletion(
    request_id: int,
    actor: Actor,
    feedback: str | None = None,
    *,
    target_staff_id: str | None = None,
    target_user_name: str | None = None,
    requester_name: str | None = None,
) -> OperationResult:
    return _decline(
        KIND_DELETION, request_id, actor, feedback,
        target_staff_id=target_staff_id,
        target_user_name=target_user_name,
        requester_name=requester_name,
        subject="Deletion",
        action_phrase="delete staff",
    )


@store_boundary("approve add-staff request")
def approve_add_staff(request_id: int, actor: Actor) -> OperationResult:
    _require_approver(actor, "approve")
    req = _require_pending(KIND_ADD_STAFF, request_id)

    name = req.target_user_name
    staff_id = req.target_staff_id
    requester_uid = req.requested_by_uid

    # Validation and uniqueness failures propagate; the request stays pending.
    user = insert_user(
        name=name,
        staff_id=staff_id,
        role=req.target_user_role,
        password=req.initial_password,
        commit=False,
    )
    try:
        _settle(KIND_ADD_STAFF, request_id, STATUS_APPROVED, actor)
    except NotFoundOrProcessed:
        get_identity_provisioner().revoke_credential(user.id)
        raise

    # The password has served its purpose once the credential exists.
    db.session.query(AddStaffRequest).filter_by(id=request_id).update(
        {"initial_password": None}, synchronize_session=False
    )
    db.session.commit()
    current_app.logger.info("Add-staff request %s created user %s (%s)", request_id, user.id, staff_id)

    warnings: list[str] = []
    collect_warning(warnings, emit_notification(
        actor,
        "Add Staff Request Approved",
        f"Your request to add {name} (ID: {staff_id}) has been approved. The user can now sign in.",
        sender_name=actor.name or "System (Approval)",
        recipient_uid=requester_uid,
    ))

    return OperationResult.ok(
        f"Add staff request approved. User {name} ({staff_id}) created.",
        data={"request": load_request(KIND_ADD_STAFF, request_id).to_dict(), "user": user.to_dict()},
        warnings=warnings,
    )


@store_boundary("decline add-staff request")
def decline_add_staff(
    request_id: int,
    actor: Actor,
    feedback: str | None = None,
    *,
    target_staff_id: str | None = None,
    target_user_name: str | None = None,
    requester_name: str | None = None,
) -> OperationResult:
    return _decline(
        KIND_ADD_STAFF, request_id, actor, feedback,
        target_staff_id=target_staff_id,
        target_user_name=target_user_name,
        requester_name=requester_name,
        subject="Add Staff",
        action_phrase="add",
    )
