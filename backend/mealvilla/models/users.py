from __future__ import annotations

from ..extensions import db
from mealvilla.time_utils import to_utc_z


class User(db.Model):
    """
    Staff directory record.

    The primary key is the credential id handed out by the identity
    provisioner, so a login and its profile share one identifier.

    staff_id is the 6-digit staff identifier; it is globally unique and the
    login email is derived from it.
    """
    __tablename__ = "users"
    __table_args__ = (
        db.UniqueConstraint("staff_id", name="uq_users_staff_id"),
        db.Index("ix_users_role", "role"),
    )

    id = db.Column(db.String(64), primary_key=True)
    staff_id = db.Column(db.String(6), nullable=False)
    name = db.Column(db.String(255), nullable=False)
    email = db.Column(db.String(255), nullable=False)

    # manager, supervisor, staff, developer, none
    role = db.Column(db.String(16), nullable=False, default="none")

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "staff_id": self.staff_id,
            "name": self.name,
            "email": self.email,
            "role": self.role,
            "created_at": to_utc_z(self.created_at),
        }


class LoginCredential(db.Model):
    """
    Credential record kept by the local identity provisioner.

    Deployments backed by an external identity provider never touch this
    table.
    """
    __tablename__ = "login_credentials"
    __table_args__ = (
        db.UniqueConstraint("email", name="uq_login_credentials_email"),
    )

    id = db.Column(db.String(64), primary_key=True)
    email = db.Column(db.String(255), nullable=False)

    # Bcrypt hashed password
    password_hash = db.Column(db.String(255), nullable=False)

    created_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.now())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "created_at": to_utc_z(self.created_at),
        }
