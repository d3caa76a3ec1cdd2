"""
Authentication tests.

Verifies:
- Login issues a bearer token for valid credentials
- Unknown email returns 404, wrong password 401, bad input 422
- Logout revokes the token
- Expired, idle and deactivated sessions are rejected
"""

from datetime import timedelta

import pytest

from posadmin.extensions import db
from posadmin.models import SessionToken, User
from posadmin.services import session_service
from posadmin.time_utils import server_now


class TestLogin:

    def test_valid_credentials(self, client, cashier):
        resp = client.post("/api/login", json={"email": "rudi@example.com", "password": "secret123"})

        assert resp.status_code == 200
        body = resp.get_json()
        assert body["message"] == "Login successful"
        assert len(body["access_token"]) == 64
        assert body["user"]["email"] == "rudi@example.com"
        assert body["user"]["last_login_at"] is not None
        assert "password_hash" not in body["user"]

    def test_token_works_on_protected_route(self, client, cashier):
        token = client.post(
            "/api/login", json={"email": "rudi@example.com", "password": "secret123"}
        ).get_json()["access_token"]

        resp = client.get("/api/user", headers={"Authorization": f"Bearer {token}"})

        assert resp.status_code == 200
        assert resp.get_json()["id"] == cashier.id

    def test_email_is_case_insensitive(self, client, cashier):
        resp = client.post("/api/login", json={"email": "  RUDI@Example.com ", "password": "secret123"})
        assert resp.status_code == 200

    def test_unknown_email(self, client, cashier):
        resp = client.post("/api/login", json={"email": "nobody@example.com", "password": "secret123"})

        assert resp.status_code == 404
        assert resp.get_json()["message"] == "Email not found"

    def test_wrong_password(self, client, cashier):
        resp = client.post("/api/login", json={"email": "rudi@example.com", "password": "wrong"})

        assert resp.status_code == 401
        assert resp.get_json()["message"] == "Invalid password"

    def test_deactivated_user(self, client, cashier):
        cashier.is_active = False
        db.session.commit()

        resp = client.post("/api/login", json={"email": "rudi@example.com", "password": "secret123"})
        assert resp.status_code == 401

    @pytest.mark.parametrize(
        "payload,fields",
        [
            ({}, {"email", "password"}),
            ({"email": "rudi@example.com"}, {"password"}),
            ({"email": "not-an-email", "password": "x"}, {"email"}),
            ({"email": "rudi@example.com", "password": 12345}, {"password"}),
        ],
    )
    def test_invalid_input(self, client, db_session, payload, fields):
        resp = client.post("/api/login", json=payload)

        assert resp.status_code == 422
        assert set(resp.get_json()["errors"]) == fields


class TestLogout:

    def test_revokes_token(self, client, token, headers):
        resp = client.post("/api/logout", headers=headers)

        assert resp.status_code == 200
        assert resp.get_json()["message"] == "Logout successful"
        assert client.get("/api/user", headers=headers).status_code == 401

        record = db.session.query(SessionToken).filter_by(
            token_hash=session_service.hash_token(token)
        ).one()
        assert record.is_revoked is True
        assert record.revoked_reason == "User logout"

    def test_requires_token(self, client, db_session):
        assert client.post("/api/logout").status_code == 401


class TestCurrentUser:

    def test_returns_user(self, client, headers, cashier):
        resp = client.get("/api/user", headers=headers)

        assert resp.status_code == 200
        assert resp.get_json()["name"] == "Rudi"

    @pytest.mark.parametrize(
        "header",
        [None, "Bearer", "Bearer ", "Token abc", "Bearer not-a-real-token"],
    )
    def test_rejects_bad_headers(self, client, db_session, header):
        headers = {"Authorization": header} if header is not None else {}
        resp = client.get("/api/user", headers=headers)

        assert resp.status_code == 401
        assert resp.get_json() == {"message": "Unauthenticated."}


class TestSessionLifetime:

    def _record(self, token):
        return db.session.query(SessionToken).filter_by(
            token_hash=session_service.hash_token(token)
        ).one()

    def test_expired_token(self, client, token, headers):
        record = self._record(token)
        record.expires_at = server_now() - timedelta(minutes=1)
        db.session.commit()

        assert client.get("/api/user", headers=headers).status_code == 401

    def test_idle_token_is_revoked(self, client, app, token, headers):
        record = self._record(token)
        idle = timedelta(hours=app.config["SESSION_IDLE_TIMEOUT_HOURS"], minutes=1)
        record.last_used_at = server_now() - idle
        db.session.commit()

        assert client.get("/api/user", headers=headers).status_code == 401
        db.session.expire_all()
        assert self._record(token).revoked_reason == "Idle timeout"

    def test_deactivated_user_token_is_revoked(self, client, cashier, token, headers):
        cashier.is_active = False
        db.session.commit()

        assert client.get("/api/user", headers=headers).status_code == 401
        db.session.expire_all()
        assert self._record(token).is_revoked is True

    def test_use_refreshes_last_used(self, client, token, headers):
        record = self._record(token)
        stale = server_now() - timedelta(minutes=30)
        record.last_used_at = stale
        db.session.commit()

        client.get("/api/user", headers=headers)

        db.session.expire_all()
        assert self._record(token).last_used_at > stale

    def test_cleanup_removes_old_dead_sessions(self, cashier, token):
        old = server_now() - timedelta(days=40)
        record = self._record(token)
        record.created_at = old
        record.expires_at = old + timedelta(hours=24)
        _, fresh = session_service.create_session(user_id=cashier.id)
        db.session.commit()

        deleted = session_service.cleanup_expired_sessions(retention_days=30)

        assert deleted == 1
        assert db.session.query(SessionToken).count() == 1
        assert session_service.validate_session(fresh).id == cashier.id


class TestUsers:

    def test_duplicate_email_rejected(self, cashier, make_user):
        with pytest.raises(ValueError):
            make_user("RUDI@example.com")

    def test_password_is_hashed(self, cashier):
        stored = db.session.get(User, cashier.id)
        assert stored.password_hash != "secret123"
        assert stored.password_hash.startswith("$2")
