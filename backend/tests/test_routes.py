"""
HTTP API tests.

Verifies:
- Actor resolution from the gateway header (401 when missing or unknown)
- Routes map workflow results onto JSON bodies and HTTP status codes
- The end-to-end supervisor -> manager flows over HTTP
"""

import pytest

from mealvilla.extensions import db
from mealvilla.models import Notification


# =============================================================================
# ACTOR RESOLUTION (401)
# =============================================================================


class TestActorResolution:

    @pytest.mark.parametrize(
        "method,path",
        [
            ("GET", "/api/staff"),
            ("POST", "/api/staff"),
            ("DELETE", "/api/staff/abc"),
            ("POST", "/api/requests/deletion"),
            ("GET", "/api/requests/add-staff"),
            ("GET", "/api/sales-entries/today"),
            ("POST", "/api/sales-entries/today/reset"),
            ("GET", "/api/notifications"),
        ],
    )
    def test_requires_actor(self, client, db_session, method, path):
        resp = getattr(client, method.lower())(path)
        assert resp.status_code == 401, f"{method} {path} returned {resp.status_code}"

    def test_unknown_actor(self, client, db_session):
        resp = client.get("/api/staff", headers={"X-Actor-Uid": "nobody"})

        assert resp.status_code == 401
        assert resp.get_json()["code"] == "unauthenticated"


class TestHealth:

    def test_healthy(self, client, db_session):
        resp = client.get("/health")

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["status"] == "healthy"
        assert body["checks"]["database"]["status"] == "healthy"


# =============================================================================
# STAFF
# =============================================================================


class TestStaffRoutes:

    def test_list(self, client, headers, staff, manager):
        resp = client.get("/api/staff", headers=headers(staff))

        assert resp.status_code == 200
        assert {u["staff_id"] for u in resp.get_json()["data"]} == {"100001", "100004"}

    def test_create(self, client, headers, manager):
        resp = client.post(
            "/api/staff",
            json={"name": "Ada", "staff_id": "100500", "role": "staff"},
            headers=headers(manager),
        )

        assert resp.status_code == 201
        body = resp.get_json()
        assert body["success"] is True
        assert body["data"]["email"] == "100500@mealvilla.com"

    def test_create_forbidden(self, client, headers, supervisor):
        resp = client.post(
            "/api/staff",
            json={"name": "Ada", "staff_id": "100500", "role": "staff"},
            headers=headers(supervisor),
        )

        assert resp.status_code == 403
        assert resp.get_json()["code"] == "forbidden"

    def test_create_duplicate(self, client, headers, manager, staff):
        resp = client.post(
            "/api/staff",
            json={"name": "Again", "staff_id": staff.staff_id, "role": "staff"},
            headers=headers(manager),
        )

        assert resp.status_code == 409
        assert resp.get_json()["code"] == "duplicate_staff_id"

    def test_delete(self, client, headers, manager, staff):
        resp = client.delete(f"/api/staff/{staff.uid}", headers=headers(manager))

        assert resp.status_code == 200
        assert client.get("/api/staff", headers=headers(manager)).get_json()["data"][0]["staff_id"] == "100001"

    def test_delete_privilege_boundary(self, client, headers, manager, developer):
        resp = client.delete(f"/api/staff/{developer.uid}", headers=headers(manager))

        assert resp.status_code == 403
        assert resp.get_json()["code"] == "privilege_boundary"


# =============================================================================
# REQUESTS
# =============================================================================


class TestRequestRoutes:

    def test_add_staff_flow(self, client, headers, supervisor, manager):
        created = client.post(
            "/api/requests/add-staff",
            json={"target_user_name": "Ada", "target_staff_id": "100200", "target_user_role": "staff"},
            headers=headers(supervisor),
        )
        assert created.status_code == 201
        request_id = created.get_json()["data"]["id"]

        pending = client.get("/api/requests/add-staff", headers=headers(manager)).get_json()["data"]
        assert [r["id"] for r in pending] == [request_id]

        approved = client.post(f"/api/requests/add-staff/{request_id}/approve", headers=headers(manager))
        assert approved.status_code == 200
        assert approved.get_json()["data"]["user"]["staff_id"] == "100200"

        again = client.post(f"/api/requests/add-staff/{request_id}/approve", headers=headers(manager))
        assert again.status_code == 404
        assert again.get_json()["code"] == "not_found_or_processed"

        mine = client.get("/api/requests/add-staff?scope=mine", headers=headers(supervisor)).get_json()["data"]
        assert mine[0]["status"] == "approved"

    def test_deletion_decline_flow(self, client, headers, supervisor, manager, staff):
        created = client.post(
            "/api/requests/deletion",
            json={"target_user_uid": staff.uid, "reason_for_request": "Absent"},
            headers=headers(supervisor),
        )
        request_id = created.get_json()["data"]["id"]

        declined = client.post(
            f"/api/requests/deletion/{request_id}/decline",
            json={
                "feedback": "not yet",
                "target_staff_id": staff.staff_id,
                "target_user_name": staff.name,
                "requester_name": supervisor.name,
            },
            headers=headers(manager),
        )

        assert declined.status_code == 200
        assert declined.get_json()["data"]["manager_feedback"] == "not yet"
        assert db.session.query(Notification).filter_by(recipient_uid=supervisor.uid).count() == 1

        fetched = client.get(f"/api/requests/deletion/{request_id}", headers=headers(supervisor))
        assert fetched.get_json()["data"]["status"] == "declined"

    def test_deletion_approve(self, client, headers, supervisor, developer, staff):
        created = client.post(
            "/api/requests/deletion", json={"target_user_uid": staff.uid}, headers=headers(supervisor)
        )
        request_id = created.get_json()["data"]["id"]

        resp = client.post(f"/api/requests/deletion/{request_id}/approve", headers=headers(developer))

        assert resp.status_code == 200
        assert resp.get_json()["data"]["status"] == "approved"

    def test_supervisor_cannot_approve(self, client, headers, supervisor, staff):
        created = client.post(
            "/api/requests/deletion", json={"target_user_uid": staff.uid}, headers=headers(supervisor)
        )
        request_id = created.get_json()["data"]["id"]

        resp = client.post(f"/api/requests/deletion/{request_id}/approve", headers=headers(supervisor))

        assert resp.status_code == 403

    def test_pending_list_forbidden_for_supervisor(self, client, headers, supervisor):
        resp = client.get("/api/requests/deletion?scope=pending", headers=headers(supervisor))

        assert resp.status_code == 403

    def test_unknown_kind(self, client, headers, manager):
        resp = client.get("/api/requests/promotion", headers=headers(manager))

        assert resp.status_code == 404

    def test_invalid_scope(self, client, headers, manager):
        resp = client.get("/api/requests/deletion?scope=all", headers=headers(manager))

        assert resp.status_code == 400


# =============================================================================
# NON-OBJECT BODIES (400)
# =============================================================================


class TestNonObjectBodies:

    @pytest.mark.parametrize(
        "path,actor_fixture",
        [
            ("/api/staff", "manager"),
            ("/api/requests/deletion", "supervisor"),
            ("/api/requests/add-staff", "supervisor"),
            ("/api/notifications", "manager"),
        ],
    )
    def test_create_routes_reject_array(self, request, client, headers, path, actor_fixture):
        actor = request.getfixturevalue(actor_fixture)

        resp = client.post(path, json=[1, 2], headers=headers(actor))

        assert resp.status_code == 400
        assert resp.get_json()["code"] == "invalid_payload"

    def test_deletion_decline_with_array_body(self, client, headers, supervisor, manager, staff):
        created = client.post(
            "/api/requests/deletion", json={"target_user_uid": staff.uid}, headers=headers(supervisor)
        )
        request_id = created.get_json()["data"]["id"]

        resp = client.post(f"/api/requests/deletion/{request_id}/decline", json=[1, 2], headers=headers(manager))

        assert resp.status_code == 400
        assert resp.get_json()["code"] == "invalid_payload"
        status = client.get(f"/api/requests/deletion/{request_id}", headers=headers(manager))
        assert status.get_json()["data"]["status"] == "pending"

    def test_add_staff_decline_with_array_body(self, client, headers, supervisor, manager):
        created = client.post(
            "/api/requests/add-staff",
            json={"target_user_name": "Ada", "target_staff_id": "100200", "target_user_role": "staff"},
            headers=headers(supervisor),
        )
        request_id = created.get_json()["data"]["id"]

        resp = client.post(f"/api/requests/add-staff/{request_id}/decline", json=[1, 2], headers=headers(manager))

        assert resp.status_code == 400
        assert resp.get_json()["code"] == "invalid_payload"


# =============================================================================
# SALES
# =============================================================================


class TestSalesRoutes:

    def test_submit_and_read(self, client, headers, staff):
        client.post("/api/sales-entries/today", json={"collected": {"burger": 2}}, headers=headers(staff))
        resp = client.post("/api/sales-entries/today", json={"collected": {"burger": 3}}, headers=headers(staff))

        assert resp.status_code == 200
        assert resp.get_json()["data"]["collected"]["burger"] == 5

        today = client.get("/api/sales-entries/today", headers=headers(staff)).get_json()["data"]
        assert today["collected"]["burger"] == 5
        assert today["user_id"] == staff.uid

    def test_invalid_quantity(self, client, headers, staff):
        resp = client.post("/api/sales-entries/today", json={"sold_cash": {"burger": -2}}, headers=headers(staff))

        assert resp.status_code == 400
        assert resp.get_json()["code"] == "invalid_quantity"

    def test_finalize_then_locked(self, client, headers, staff, supervisor):
        client.post("/api/sales-entries/today", json={"collected": {"jumbo": 1}}, headers=headers(staff))

        finalized = client.post(f"/api/sales-entries/{staff.uid}/today/finalize", headers=headers(supervisor))
        reset = client.post("/api/sales-entries/today/reset", headers=headers(staff))

        assert finalized.status_code == 200
        assert reset.status_code == 409
        assert reset.get_json()["code"] == "locked"

    def test_staff_cannot_finalize(self, client, headers, staff):
        client.post("/api/sales-entries/today", json={}, headers=headers(staff))

        resp = client.post(f"/api/sales-entries/{staff.uid}/today/finalize", headers=headers(staff))

        assert resp.status_code == 403


# =============================================================================
# NOTIFICATIONS
# =============================================================================


class TestNotificationRoutes:

    def test_send_and_list(self, client, headers, supervisor, staff):
        sent = client.post(
            "/api/notifications",
            json={"title": "Shift change", "message": "Morning shift starts at 7"},
            headers=headers(supervisor),
        )
        feed = client.get("/api/notifications", headers=headers(staff))

        assert sent.status_code == 201
        assert [n["title"] for n in feed.get_json()["data"]] == ["Shift change"]

    def test_staff_cannot_send(self, client, headers, staff):
        resp = client.post("/api/notifications", json={"title": "x", "message": "y"}, headers=headers(staff))

        assert resp.status_code == 403
