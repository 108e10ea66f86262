from __future__ import annotations

from ..extensions import db
from mealvilla.time_utils import to_utc_z


STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_DECLINED = "declined"


class _ApprovalRequestMixin:
    """
    Envelope shared by both supervisor request kinds.

    LIFECYCLE:
    - pending: created by a supervisor, waiting for a manager/developer
    - approved / declined: terminal, set exactly once

    The processed_* columns and manager_feedback are written only by the
    pending -> terminal transition.
    """
    id = db.Column(db.Integer, primary_key=True)

    requested_by_uid = db.Column(db.String(64), nullable=False, index=True)
    requested_by_name = db.Column(db.String(255), nullable=False)
    requested_by_role = db.Column(db.String(16), nullable=False)

    target_staff_id = db.Column(db.String(6), nullable=False)
    target_user_name = db.Column(db.String(255), nullable=False)
    target_user_role = db.Column(db.String(16), nullable=False)

    status = db.Column(db.String(16), nullable=False, default=STATUS_PENDING, index=True)
    request_timestamp = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    processed_by_uid = db.Column(db.String(64), nullable=True)
    processed_by_name = db.Column(db.String(255), nullable=True)
    processed_timestamp = db.Column(db.DateTime(timezone=True), nullable=True)

    reason_for_request = db.Column(db.Text, nullable=True)
    manager_feedback = db.Column(db.Text, nullable=True)

    def _envelope_dict(self) -> dict:
        return {
            "id": self.id,
            "requested_by_uid": self.requested_by_uid,
            "requested_by_name": self.requested_by_name,
            "requested_by_role": self.requested_by_role,
            "target_staff_id": self.target_staff_id,
            "target_user_name": self.target_user_name,
            "target_user_role": self.target_user_role,
            "status": self.status,
            "request_timestamp": to_utc_z(self.request_timestamp),
            "processed_by_uid": self.processed_by_uid,
            "processed_by_name": self.processed_by_name,
            "processed_timestamp": to_utc_z(self.processed_timestamp) if self.processed_timestamp else None,
            "reason_for_request": self.reason_for_request,
            "manager_feedback": self.manager_feedback,
        }


class DeletionRequest(_ApprovalRequestMixin, db.Model):
    """Supervisor request to remove an existing staff member."""
    __tablename__ = "deletion_requests"
    __table_args__ = (
        db.Index("ix_deletion_requests_status_ts", "status", "request_timestamp"),
        {"sqlite_autoincrement": True},
    )

    kind = "deletion"

    target_user_uid = db.Column(db.String(64), nullable=False, index=True)

    def to_dict(self) -> dict:
        d = self._envelope_dict()
        d["kind"] = self.kind
        d["target_user_uid"] = self.target_user_uid
        return d


class AddStaffRequest(_ApprovalRequestMixin, db.Model):
    """
    Supervisor request to add a new staff member.

    Carries everything create_user needs; no user exists until approval.
    """
    __tablename__ = "add_staff_requests"
    __table_args__ = (
        db.Index("ix_add_staff_requests_status_ts", "status", "request_timestamp"),
        {"sqlite_autoincrement": True},
    )

    kind = "add_staff"

    # Optional password chosen by the supervisor; the configured default applies otherwise
    initial_password = db.Column(db.String(255), nullable=True)

    def to_dict(self) -> dict:
        d = self._envelope_dict()
        d["kind"] = self.kind
        d["has_initial_password"] = bool(self.initial_password)
        return d
