# Overview: Seam to the external identity provider that owns login credentials.

"""
Identity provisioning.

WHY: The staff directory only stores profile records. Login credentials
belong to an identity provider; creating one is an explicit call the user
directory makes before inserting the profile, never a hidden side effect.

The active provisioner lives in app.extensions["identity_provisioner"].
create_app installs LocalIdentityProvisioner unless one is already set.

Credential deletion on staff removal is intentionally not wired up: it is a
follow-up action for the identity provider's own tooling.
"""

import uuid

import bcrypt
from flask import current_app

from ..errors import WorkflowError
from ..extensions import db
from ..models import LoginCredential, User


class IdentityProvisioningError(WorkflowError):
    """Raised when the identity provider refuses or fails to create a credential."""
    code = "identity_provisioning_failed"
    status = 502


class IdentityProvisioner:
    """Interface for identity providers."""

    def create_credential(self, email: str, password: str) -> str:
        """Create a login credential and return its id."""
        raise NotImplementedError

    def revoke_credential(self, credential_id: str) -> None:
        """Undo create_credential when the profile insert that needed it fails."""
        raise NotImplementedError


class LocalIdentityProvisioner(IdentityProvisioner):
    """
    Stores bcrypt-hashed credentials in the application database.

    Writes join the caller's session, so a rolled-back profile insert
    rolls the credential back with it; revoke_credential is a no-op.

    A credential left behind by a deleted profile is replaced when its
    email is provisioned again.
    """

    def __init__(self, rounds: int | None = None):
        self.rounds = rounds

    def create_credential(self, email: str, password: str) -> str:
        if not password:
            raise IdentityProvisioningError("A password is required to create a login")

        self._drop_orphaned(email)

        rounds = self.rounds or current_app.config.get("BCRYPT_ROUNDS", 12)
        hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds))

        credential = LoginCredential(
            id=uuid.uuid4().hex,
            email=email,
            password_hash=hashed.decode("utf-8"),
        )
        db.session.add(credential)
        return credential.id

    def _drop_orphaned(self, email: str) -> None:
        existing = db.session.query(LoginCredential).filter_by(email=email).first()
        if existing is None:
            return
        if db.session.query(User.id).filter(User.id == existing.id).first() is not None:
            # Still in use; the profile insert fails on the unique constraint
            return
        current_app.logger.info("Replacing orphaned credential %s for %s", existing.id, email)
        db.session.delete(existing)
        # Deletes flush after inserts; push this one first to free the email
        db.session.flush()

    def revoke_credential(self, credential_id: str) -> None:
        return None


def get_identity_provisioner() -> IdentityProvisioner:
    provisioner = current_app.extensions.get("identity_provisioner")
    if provisioner is None:
        provisioner = LocalIdentityProvisioner()
        current_app.extensions["identity_provisioner"] = provisioner
    return provisioner
