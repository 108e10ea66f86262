# Overview: Role names and the role groups each workflow checks against.

"""
Role definitions.

Roles are flat strings stored on the user record. Authorization is a
membership test against the groups below; there are no per-user overrides.
"""

from __future__ import annotations

from dataclasses import dataclass

ROLE_MANAGER = "manager"
ROLE_SUPERVISOR = "supervisor"
ROLE_STAFF = "staff"
ROLE_DEVELOPER = "developer"
ROLE_NONE = "none"

ALL_ROLES = (ROLE_MANAGER, ROLE_SUPERVISOR, ROLE_STAFF, ROLE_DEVELOPER, ROLE_NONE)

# May approve/decline requests and manage the staff directory directly
APPROVER_ROLES = frozenset({ROLE_MANAGER, ROLE_DEVELOPER})

# Peers a manager may neither create nor delete
PRIVILEGED_ROLES = frozenset({ROLE_MANAGER, ROLE_DEVELOPER})

# Roles a supervisor may not ask to have deleted
DELETION_PROTECTED_ROLES = frozenset({ROLE_MANAGER, ROLE_DEVELOPER, ROLE_SUPERVISOR})

# Roles a supervisor may not ask to have added
ADD_REQUEST_FORBIDDEN_ROLES = frozenset({ROLE_MANAGER, ROLE_DEVELOPER})

NOTIFICATION_SENDER_ROLES = frozenset({ROLE_MANAGER, ROLE_SUPERVISOR, ROLE_DEVELOPER})
SALES_FINALIZER_ROLES = frozenset({ROLE_MANAGER, ROLE_SUPERVISOR, ROLE_DEVELOPER})


@dataclass(frozen=True)
class Actor:
    """
    The already-authenticated caller of a workflow operation.

    Passed explicitly into every service call; services never look up
    the current user on their own.
    """
    uid: str
    name: str
    role: str
    staff_id: str | None = None

    @property
    def display_name(self) -> str:
        return self.name or self.role.capitalize()

    @classmethod
    def from_user(cls, user) -> "Actor":
        return cls(uid=user.id, name=user.name, role=user.role, staff_id=user.staff_id)


def is_valid_role(role: str | None) -> bool:
    return role in ALL_ROLES
