# Overview: Pytest coverage for registration, PIN login, and session lifecycle.

"""
Authentication and Session Tests

Covers:
- Store registration creates owner, store and OWNER employee, and logs in
- PIN login against the store email
- Failed logins are recorded as security events
- Logout, idle timeout, absolute timeout and deactivation end sessions
"""

from datetime import timedelta

import pytest

from repairdesk.extensions import db
from repairdesk.models import Employee, Owner, SecurityEvent, SessionToken, Store
from repairdesk.services import session_service
from repairdesk.time_utils import utcnow


REGISTRATION = {
    "owner_name": "Dana Rivera",
    "store_name": "Fix It Fast",
    "store_email": "Front@FixItFast.test",
    "pin": "2468",
    "store_phone": "555-0100",
}


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


# ============================================================================
# Registration
# ============================================================================

class TestRegistration:

    def test_register_creates_store_owner_and_session(self, client, db_session):
        resp = client.post("/api/auth/register", json=REGISTRATION)
        assert resp.status_code == 201
        body = resp.get_json()

        assert body["token"]
        assert body["store"]["store_email"] == "front@fixitfast.test"
        assert body["employee"]["role"] == "OWNER"

        store = db.session.query(Store).one()
        assert store.store_phone == "555-0100"
        assert store.notification_email == "front@fixitfast.test"
        assert db.session.query(Owner).one().email == "front@fixitfast.test"
        assert db.session.query(Employee).filter_by(store_id=store.id, role="OWNER").count() == 1

        me = client.get("/api/auth/me", headers=bearer(body["token"]))
        assert me.status_code == 200
        assert me.get_json() == {"employee_id": body["employee"]["id"], "store_id": store.id, "role": "OWNER"}

    def test_pin_is_hashed(self, client, db_session):
        client.post("/api/auth/register", json=REGISTRATION)
        employee = db.session.query(Employee).one()
        assert employee.pin_hash != "2468"
        assert employee.pin_hash.startswith("$2")

    def test_duplicate_store_email(self, client, db_session):
        assert client.post("/api/auth/register", json=REGISTRATION).status_code == 201
        resp = client.post("/api/auth/register", json={**REGISTRATION, "store_email": "front@fixitfast.test"})
        assert resp.status_code == 409
        assert resp.get_json()["kind"] == "CONFLICT"

    @pytest.mark.parametrize("field", ["owner_name", "store_name", "store_email", "pin"])
    def test_required_fields(self, client, db_session, field):
        payload = {k: v for k, v in REGISTRATION.items() if k != field}
        resp = client.post("/api/auth/register", json=payload)
        assert resp.status_code == 400
        assert db.session.query(Store).count() == 0

    @pytest.mark.parametrize("pin", ["123", "123456789", 1234])
    def test_pin_length_rules(self, client, db_session, pin):
        resp = client.post("/api/auth/register", json={**REGISTRATION, "pin": pin})
        assert resp.status_code == 400

    def test_invalid_json(self, client, db_session):
        resp = client.post("/api/auth/register", data="not json", content_type="application/json")
        assert resp.status_code == 400


# ============================================================================
# PIN login
# ============================================================================

class TestPinLogin:

    @pytest.mark.parametrize("role,pin", [("MANAGER", "2222"), ("CASHIER", "4444")])
    def test_login_identifies_employee_by_pin(self, client, tenant_a, role, pin):
        resp = client.post("/api/auth/pin-login", json={"store_email": "store-a@example.com", "pin": pin})
        assert resp.status_code == 200
        body = resp.get_json()
        assert body["employee"]["id"] == tenant_a.staff[role].id
        assert body["employee"]["role"] == role
        assert body["store"]["id"] == tenant_a.id

    def test_store_email_is_case_insensitive(self, client, tenant_a):
        resp = client.post("/api/auth/pin-login", json={"store_email": " STORE-A@example.com ", "pin": "1111"})
        assert resp.status_code == 200

    def test_wrong_pin_is_401_and_logged(self, client, tenant_a):
        resp = client.post("/api/auth/pin-login", json={"store_email": "store-a@example.com", "pin": "9999"})
        assert resp.status_code == 401
        assert resp.get_json()["kind"] == "AUTHENTICATION_FAILED"

        event = db.session.query(SecurityEvent).filter_by(event_type="LOGIN_FAILED").one()
        assert event.store_id == tenant_a.id
        assert event.success is False

    def test_same_pin_resolves_within_the_named_store(self, client, tenant_a, tenant_b):
        resp = client.post("/api/auth/pin-login", json={"store_email": "store-b@example.com", "pin": "1111"})
        body = resp.get_json()
        assert body["store"]["id"] == tenant_b.id
        assert body["employee"]["id"] == tenant_b.staff["OWNER"].id

    def test_unknown_store(self, client, db_session):
        resp = client.post("/api/auth/pin-login", json={"store_email": "nobody@example.com", "pin": "1111"})
        assert resp.status_code == 404

    def test_deactivated_employee_cannot_login(self, client, tenant_a):
        tenant_a.staff["CASHIER"].is_active = False
        db.session.commit()
        resp = client.post("/api/auth/pin-login", json={"store_email": "store-a@example.com", "pin": "4444"})
        assert resp.status_code == 401

    def test_missing_fields(self, client, tenant_a):
        assert client.post("/api/auth/pin-login", json={"pin": "1111"}).status_code == 400
        assert client.post("/api/auth/pin-login", json={"store_email": "store-a@example.com"}).status_code == 400
        assert client.post("/api/auth/pin-login", json={"store_email": "store-a@example.com", "pin": "  "}).status_code == 400

    def test_padded_pin_matches_registration(self, client, db_session):
        resp = client.post("/api/auth/register", json={**REGISTRATION, "pin": " 1357 "})
        assert resp.status_code == 201

        resp = client.post("/api/auth/pin-login", json={"store_email": "front@fixitfast.test", "pin": " 1357 "})
        assert resp.status_code == 200
        assert resp.get_json()["employee"]["role"] == "OWNER"

        resp = client.post("/api/auth/pin-login", json={"store_email": "front@fixitfast.test", "pin": "1357"})
        assert resp.status_code == 200

    def test_pin_of_invalid_length_is_400(self, client, tenant_a):
        resp = client.post("/api/auth/pin-login", json={"store_email": "store-a@example.com", "pin": "123"})
        assert resp.status_code == 400
        assert db.session.query(SecurityEvent).count() == 0


# ============================================================================
# Session lifecycle
# ============================================================================

class TestSessions:

    def test_missing_header_is_401(self, client, db_session):
        resp = client.get("/api/tickets")
        assert resp.status_code == 401
        assert resp.get_json()["kind"] == "AUTHENTICATION_FAILED"

    def test_malformed_header_is_401(self, client, tenant_a):
        token = tenant_a.token("OWNER")
        assert client.get("/api/tickets", headers={"Authorization": token}).status_code == 401

    def test_logout_revokes(self, client, tenant_a):
        headers = tenant_a.headers("MANAGER")
        assert client.post("/api/auth/logout", headers=headers).status_code == 200
        assert client.get("/api/tickets", headers=headers).status_code == 401

    def test_only_hash_is_stored(self, tenant_a):
        token = tenant_a.token("OWNER")
        assert db.session.query(SessionToken).filter_by(token_hash=token).count() == 0
        assert db.session.query(SessionToken).filter_by(token_hash=session_service.hash_token(token)).count() == 1

    def test_idle_session_expires(self, client, tenant_a):
        token = tenant_a.token("OWNER")
        session = db.session.query(SessionToken).filter_by(token_hash=session_service.hash_token(token)).one()
        session.last_used_at = utcnow() - timedelta(hours=3)
        db.session.commit()

        assert client.get("/api/tickets", headers=bearer(token)).status_code == 401
        db.session.refresh(session)
        assert session.is_revoked
        assert session.revoked_reason == "Idle timeout"

    def test_absolute_timeout(self, tenant_a):
        token = tenant_a.token("OWNER")
        session = db.session.query(SessionToken).filter_by(token_hash=session_service.hash_token(token)).one()
        session.expires_at = utcnow() - timedelta(seconds=1)
        db.session.commit()
        assert session_service.validate_session(token) is None

    def test_session_captures_role_at_login(self, tenant_a):
        token = tenant_a.token("CASHIER")
        context = session_service.validate_session(token)
        assert context.role == "CASHIER"
        assert context.store_id == tenant_a.id
        assert context.actor_id == tenant_a.staff["CASHIER"].id

    def test_deactivated_employee_session_rejected(self, client, tenant_a):
        headers = tenant_a.headers("TECHNICIAN")
        tenant_a.staff["TECHNICIAN"].is_active = False
        db.session.commit()
        assert client.get("/api/tickets", headers=headers).status_code == 401

    def test_cleanup_removes_old_revoked_sessions(self, tenant_a):
        token = tenant_a.token("OWNER")
        session_service.revoke_session(token)
        session = db.session.query(SessionToken).one()
        session.created_at = utcnow() - timedelta(days=31)
        db.session.commit()

        assert session_service.cleanup_expired_sessions() == 1
        assert db.session.query(SessionToken).count() == 0
