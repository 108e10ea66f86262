# Overview: Service-layer operations for the staff directory; create, delete and look up user records.

"""
User Directory

WHY: Every staff member has exactly one profile record keyed by their
credential id and identified to people by a 6-digit staff id.

RULES:
- Only managers and developers manage the directory directly.
- Managers cannot create managers/developers, and cannot delete another
  manager/developer (deleting themselves is allowed, see DESIGN.md).
- staff_id uniqueness is enforced by the uq_users_staff_id constraint; the
  lookup before insert only produces a friendlier message in the common case.
"""

from __future__ import annotations

import re

from flask import current_app
from sqlalchemy.exc import IntegrityError

from ..errors import (
    DuplicateStaffId,
    EmptyName,
    Forbidden,
    InvalidRole,
    InvalidStaffId,
    NotFound,
    OperationResult,
    PrivilegeBoundary,
    PrivilegeEscalation,
)
from ..extensions import db
from ..models import User
from ..roles import Actor, APPROVER_ROLES, PRIVILEGED_ROLES, ROLE_MANAGER, ROLE_NONE, is_valid_role
from .identity_service import get_identity_provisioner
from .results import require_object, store_boundary


STAFF_ID_PATTERN = re.compile(r"^\d{6}$")


def validate_staff_id(staff_id) -> str:
    if not isinstance(staff_id, str) or not STAFF_ID_PATTERN.fullmatch(staff_id):
        raise InvalidStaffId("Staff ID must be exactly 6 digits.")
    return staff_id


def validate_name(name) -> str:
    cleaned = name.strip() if isinstance(name, str) else ""
    if not cleaned:
        raise EmptyName("Name cannot be empty.")
    return cleaned


def validate_assignable_role(role) -> str:
    if not role or role == ROLE_NONE or not is_valid_role(role):
        raise InvalidRole("A valid role must be selected.")
    return role


def staff_email(staff_id: str) -> str:
    domain = current_app.config.get("STAFF_EMAIL_DOMAIN", "mealvilla.com")
    return f"{staff_id}@{domain}"


def get_user(uid: str | None) -> User | None:
    if not uid:
        return None
    return db.session.query(User).filter_by(id=uid).first()


def find_by_staff_id(staff_id: str) -> User | None:
    return db.session.query(User).filter_by(staff_id=staff_id).first()


def insert_user(*, name: str, staff_id: str, role: str, password: str | None = None, commit: bool = True) -> User:
    """
    Provision a credential and insert the profile record.

    No authorization here; callers (create_user, the approval workflow)
    check the actor first. Fields must already be validated.

    With commit=False the insert is only flushed so the caller can finish
    its own transaction; the credential id is returned on the user as .id.
    """
    if find_by_staff_id(staff_id):
        raise DuplicateStaffId(f"Staff ID {staff_id} is already registered.")

    email = staff_email(staff_id)
    provisioner = get_identity_provisioner()
    credential_id = provisioner.create_credential(
        email,
        password or current_app.config.get("DEFAULT_INITIAL_PASSWORD", "password"),
    )

    user = User(id=credential_id, staff_id=staff_id, name=name, email=email, role=role)
    db.session.add(user)
    try:
        db.session.flush()
    except IntegrityError:
        db.session.rollback()
        provisioner.revoke_credential(credential_id)
        raise DuplicateStaffId(f"Staff ID {staff_id} is already registered.")

    if commit:
        db.session.commit()
    return user


def remove_user_record(uid: str) -> bool:
    """
    Delete a profile record inside the caller's transaction.

    Returns False when no record existed.
    """
    deleted = db.session.query(User).filter_by(id=uid).delete(synchronize_session=False)
    return bool(deleted)


@store_boundary("add user")
def create_user(data: dict, actor: Actor) -> OperationResult:
    """
    Create a staff record directly (manager/developer only).

    data keys: name, staff_id, role, initial_password (optional).
    """
    if actor.role not in APPROVER_ROLES:
        raise Forbidden("Permission denied: Only managers or developers can add users.")

    data = require_object(data)
    role = data.get("role")
    if actor.role == ROLE_MANAGER and role in PRIVILEGED_ROLES:
        raise PrivilegeEscalation("Managers cannot create other managers or developers.")

    staff_id = validate_staff_id(data.get("staff_id"))
    name = validate_name(data.get("name"))
    role = validate_assignable_role(role)

    user = insert_user(
        name=name,
        staff_id=staff_id,
        role=role,
        password=data.get("initial_password"),
    )
    current_app.logger.info("User %s (%s) created by %s", user.id, staff_id, actor.uid)

    return OperationResult.ok(
        f"User {name} ({staff_id}) added successfully.",
        data=user.to_dict(),
        status=201,
    )


@store_boundary("delete user")
def delete_user(target_id: str, actor: Actor) -> OperationResult:
    if actor.role not in APPROVER_ROLES:
        raise Forbidden("Permission denied: Only managers or developers can delete users.")

    target = get_user(target_id)
    if not target:
        raise NotFound("User not found.")

    if actor.role == ROLE_MANAGER and target.role in PRIVILEGED_ROLES and actor.uid != target.id:
        raise PrivilegeBoundary("Managers cannot delete other managers or developers.")

    staff_id = target.staff_id
    remove_user_record(target.id)
    db.session.commit()
    current_app.logger.info("User %s (%s) deleted by %s", target_id, staff_id, actor.uid)

    return OperationResult.ok(
        "User deleted. The login credential, if any, must be removed through the identity provider."
    )


@store_boundary("list users")
def list_users() -> OperationResult:
    users = [u.to_dict() for u in db.session.query(User).order_by(User.name, User.staff_id).all()]
    return OperationResult.ok(f"{len(users)} user(s)", data=users)
