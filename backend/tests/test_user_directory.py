"""
User directory tests.

Verifies:
- Only managers/developers create or delete users
- Managers cannot create or delete their privileged peers
- Field validation and staff ID uniqueness
"""

import bcrypt
import pytest
from sqlalchemy.exc import OperationalError

from mealvilla.extensions import db
from mealvilla.models import LoginCredential, User
from mealvilla.services import user_directory
from mealvilla.services.identity_service import IdentityProvisioner


def _user_count():
    return db.session.query(User).count()


# =============================================================================
# CREATE
# =============================================================================


class TestCreateUser:

    def test_manager_creates_staff(self, manager):
        result = user_directory.create_user(
            {"name": "  Ada Obi ", "staff_id": "100500", "role": "staff"}, manager
        )

        assert result.success
        assert result.status == 201
        assert result.data["name"] == "Ada Obi"
        assert result.data["email"] == "100500@mealvilla.com"
        user = user_directory.find_by_staff_id("100500")
        assert user is not None
        assert user.id == result.data["id"]

    def test_initial_password_is_hashed(self, developer):
        result = user_directory.create_user(
            {"name": "Ada", "staff_id": "100500", "role": "staff", "initial_password": "s3cret"}, developer
        )

        credential = db.session.get(LoginCredential, result.data["id"])
        assert credential.email == "100500@mealvilla.com"
        assert credential.password_hash != "s3cret"
        assert bcrypt.checkpw(b"s3cret", credential.password_hash.encode("utf-8"))

    def test_default_password_used_when_omitted(self, app, manager):
        result = user_directory.create_user({"name": "Ada", "staff_id": "100500", "role": "staff"}, manager)

        credential = db.session.get(LoginCredential, result.data["id"])
        default = app.config["DEFAULT_INITIAL_PASSWORD"].encode("utf-8")
        assert bcrypt.checkpw(default, credential.password_hash.encode("utf-8"))

    @pytest.mark.parametrize("actor_fixture", ["supervisor", "staff"])
    def test_non_approver_forbidden(self, request, actor_fixture):
        actor = request.getfixturevalue(actor_fixture)
        before = _user_count()

        result = user_directory.create_user({"name": "Ada", "staff_id": "100500", "role": "staff"}, actor)

        assert not result.success
        assert result.code == "forbidden"
        assert result.status == 403
        assert _user_count() == before

    @pytest.mark.parametrize("role", ["manager", "developer"])
    def test_manager_cannot_create_privileged_peer(self, manager, role):
        result = user_directory.create_user({"name": "Peer", "staff_id": "100500", "role": role}, manager)

        assert result.code == "privilege_escalation"
        assert user_directory.find_by_staff_id("100500") is None

    def test_developer_can_create_manager(self, developer):
        result = user_directory.create_user({"name": "New Boss", "staff_id": "100500", "role": "manager"}, developer)

        assert result.success
        assert result.data["role"] == "manager"

    @pytest.mark.parametrize("staff_id", ["12345", "1234567", "abcdef", "", None, 123456])
    def test_invalid_staff_id(self, manager, staff_id):
        result = user_directory.create_user({"name": "Ada", "staff_id": staff_id, "role": "staff"}, manager)

        assert result.code == "invalid_staff_id"

    @pytest.mark.parametrize("name", ["", "   ", None])
    def test_empty_name(self, manager, name):
        result = user_directory.create_user({"name": name, "staff_id": "100500", "role": "staff"}, manager)

        assert result.code == "empty_name"

    @pytest.mark.parametrize("role", [None, "", "none", "owner"])
    def test_invalid_role(self, manager, role):
        result = user_directory.create_user({"name": "Ada", "staff_id": "100500", "role": role}, manager)

        assert result.code == "invalid_role"

    def test_duplicate_staff_id(self, manager):
        first = user_directory.create_user({"name": "Ada", "staff_id": "100500", "role": "staff"}, manager)
        second = user_directory.create_user({"name": "Bola", "staff_id": "100500", "role": "staff"}, manager)

        assert first.success
        assert second.code == "duplicate_staff_id"
        assert second.status == 409
        assert db.session.query(User).filter_by(staff_id="100500").count() == 1

    def test_unique_constraint_is_authoritative(self, manager, monkeypatch):
        user_directory.create_user({"name": "Ada", "staff_id": "100500", "role": "staff"}, manager)

        # Simulate a concurrent insert that slipped past the lookup
        monkeypatch.setattr(user_directory, "find_by_staff_id", lambda staff_id: None)
        result = user_directory.create_user({"name": "Bola", "staff_id": "100500", "role": "staff"}, manager)

        assert result.code == "duplicate_staff_id"
        assert db.session.query(User).filter_by(staff_id="100500").count() == 1

    def test_non_object_payload(self, manager):
        result = user_directory.create_user([1, 2], manager)

        assert result.code == "invalid_payload"
        assert result.status == 400

    def test_store_failure_is_unavailable(self, manager, monkeypatch):
        def _boom(**kwargs):
            raise OperationalError("INSERT INTO users", {}, Exception("database is locked"))

        monkeypatch.setattr(user_directory, "insert_user", _boom)
        result = user_directory.create_user({"name": "Ada", "staff_id": "100500", "role": "staff"}, manager)

        assert not result.success
        assert result.code == "unavailable"
        assert result.status == 503
        assert "database is locked" in result.details["detail"]

    def test_custom_identity_provisioner_supplies_user_id(self, app, manager):
        class FixedProvisioner(IdentityProvisioner):
            def __init__(self):
                self.created = []

            def create_credential(self, email, password):
                self.created.append(email)
                return "external-uid-1"

            def revoke_credential(self, credential_id):
                pass

        provisioner = FixedProvisioner()
        app.extensions["identity_provisioner"] = provisioner

        result = user_directory.create_user({"name": "Ada", "staff_id": "100500", "role": "staff"}, manager)

        assert result.data["id"] == "external-uid-1"
        assert provisioner.created == ["100500@mealvilla.com"]
        assert db.session.query(LoginCredential).filter_by(email="100500@mealvilla.com").count() == 0


# =============================================================================
# DELETE
# =============================================================================


class TestDeleteUser:

    def test_manager_deletes_staff(self, manager, staff):
        result = user_directory.delete_user(staff.uid, manager)

        assert result.success
        assert user_directory.get_user(staff.uid) is None

    def test_manager_cannot_delete_developer(self, manager, developer):
        result = user_directory.delete_user(developer.uid, manager)

        assert result.code == "privilege_boundary"
        assert user_directory.get_user(developer.uid) is not None

    def test_manager_cannot_delete_other_manager(self, manager, make_user):
        other = make_user("manager", "100600", "Other Manager")

        result = user_directory.delete_user(other.uid, manager)

        assert result.code == "privilege_boundary"

    def test_manager_can_delete_self(self, manager):
        result = user_directory.delete_user(manager.uid, manager)

        assert result.success
        assert user_directory.get_user(manager.uid) is None

    def test_developer_deletes_manager(self, developer, manager):
        result = user_directory.delete_user(manager.uid, developer)

        assert result.success

    def test_unknown_target(self, manager):
        result = user_directory.delete_user("does-not-exist", manager)

        assert result.code == "not_found"
        assert result.status == 404

    def test_supervisor_forbidden(self, supervisor, staff):
        result = user_directory.delete_user(staff.uid, supervisor)

        assert result.code == "forbidden"
        assert user_directory.get_user(staff.uid) is not None


# =============================================================================
# STAFF ID REUSE
# =============================================================================


class TestStaffIdReuse:

    def test_recreate_after_delete(self, manager):
        first = user_directory.create_user({"name": "Ada", "staff_id": "100500", "role": "staff"}, manager)
        user_directory.delete_user(first.data["id"], manager)

        second = user_directory.create_user({"name": "Ada Again", "staff_id": "100500", "role": "staff"}, manager)

        assert second.success, second.message
        assert second.data["id"] != first.data["id"]
        credentials = db.session.query(LoginCredential).filter_by(email="100500@mealvilla.com").all()
        assert [c.id for c in credentials] == [second.data["id"]]

    def test_credential_in_use_is_kept(self, manager, staff):
        result = user_directory.create_user({"name": "Clash", "staff_id": staff.staff_id, "role": "staff"}, manager)

        assert result.code == "duplicate_staff_id"
        assert db.session.get(LoginCredential, staff.uid) is not None


# =============================================================================
# LOOKUPS
# =============================================================================


class TestListUsers:

    def test_ordered_by_name(self, manager, supervisor, staff, developer):
        result = user_directory.list_users()

        names = [u["name"] for u in result.data]
        assert names == sorted(names)
        assert len(names) == 4
