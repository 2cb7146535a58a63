import pytest
from datetime import datetime, timedelta, UTC
from jose import jwt
from ledger_dashboard.config import settings
from ledger_dashboard.core.exceptions import RateLimitedException
from ledger_dashboard.core.security import decode_jwt, hash_password, verify_password
from ledger_dashboard.models.user import User
from ledger_dashboard.services.auth_service import LoginThrottle
from tests.conftest import OWNER_EMAIL, OWNER_PASSWORD, create_test_token


def test_health_endpoint_no_auth(client):
    """Health endpoint should not require authentication"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


class TestPasswordHashing:
    """Salted PBKDF2 hashes"""

    def test_hash_round_trip(self):
        hashed = hash_password("s3cret-pass")
        assert hashed.startswith("pbkdf2_sha256$")
        assert verify_password("s3cret-pass", hashed)
        assert not verify_password("wrong-pass", hashed)

    def test_same_password_gets_different_salt(self):
        assert hash_password("s3cret-pass") != hash_password("s3cret-pass")

    def test_malformed_hash_never_verifies(self):
        assert not verify_password("anything", "not-a-hash")
        assert not verify_password("anything", "md5$1$salt$digest")


class TestSignUp:
    """Tests for POST /api/auth/sign-up"""

    def test_sign_up_returns_session(self, client):
        response = client.post(
            "/api/auth/sign-up",
            json={"email": "New@Example.com", "password": "long-enough", "metadata": {"full_name": "New User"}},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["user"]["email"] == "new@example.com"
        assert decode_jwt(data["access_token"])["sub"] == data["user"]["id"]

    def test_sign_up_stores_profile(self, client, db_session):
        client.post(
            "/api/auth/sign-up",
            json={"email": "pat@example.com", "password": "long-enough", "metadata": {"full_name": "Pat Doe"}},
        )

        user = db_session.query(User).filter(User.email == "pat@example.com").one()
        assert user.full_name == "Pat Doe"
        assert user.password_hash != "long-enough"

    def test_sign_up_duplicate_email_conflict(self, client, test_user):
        response = client.post(
            "/api/auth/sign-up",
            json={"email": OWNER_EMAIL.upper(), "password": "long-enough"},
        )

        assert response.status_code == 409
        assert "already registered" in response.json()["detail"]

    def test_sign_up_short_password_rejected(self, client):
        response = client.post(
            "/api/auth/sign-up", json={"email": "short@example.com", "password": "short"}
        )
        assert response.status_code == 422


class TestSignIn:
    """Tests for POST /api/auth/sign-in"""

    def test_sign_in_success(self, client, test_user):
        response = client.post(
            "/api/auth/sign-in", json={"email": OWNER_EMAIL, "password": OWNER_PASSWORD}
        )

        assert response.status_code == 200
        data = response.json()
        assert data["user"] == {"id": test_user.id, "email": OWNER_EMAIL}
        assert decode_jwt(data["access_token"])["email"] == OWNER_EMAIL

    def test_sign_in_email_case_insensitive(self, client, test_user):
        response = client.post(
            "/api/auth/sign-in", json={"email": "  OWNER@example.com ", "password": OWNER_PASSWORD}
        )
        assert response.status_code == 200

    def test_wrong_password_rejected(self, client, test_user):
        response = client.post(
            "/api/auth/sign-in", json={"email": OWNER_EMAIL, "password": "nope"}
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"

    def test_unknown_email_rejected_same_way(self, client):
        response = client.post(
            "/api/auth/sign-in", json={"email": "ghost@example.com", "password": "nope"}
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"

    def test_lockout_after_repeated_failures(self, client, test_user):
        """Email is locked after AUTH_MAX_FAILED_ATTEMPTS failures"""
        for _ in range(settings.AUTH_MAX_FAILED_ATTEMPTS):
            response = client.post(
                "/api/auth/sign-in", json={"email": OWNER_EMAIL, "password": "nope"}
            )
            assert response.status_code == 401

        # Locked out even with the right password
        response = client.post(
            "/api/auth/sign-in", json={"email": OWNER_EMAIL, "password": OWNER_PASSWORD}
        )
        assert response.status_code == 429
        assert int(response.headers["Retry-After"]) > 0

    def test_success_resets_failure_count(self, client, test_user):
        for _ in range(settings.AUTH_MAX_FAILED_ATTEMPTS - 1):
            client.post("/api/auth/sign-in", json={"email": OWNER_EMAIL, "password": "nope"})
        client.post("/api/auth/sign-in", json={"email": OWNER_EMAIL, "password": OWNER_PASSWORD})

        response = client.post(
            "/api/auth/sign-in", json={"email": OWNER_EMAIL, "password": "nope"}
        )
        assert response.status_code == 401


class TestLoginThrottle:
    """Window behaviour with a controllable clock"""

    def test_lock_expires_with_window(self):
        now = [1000.0]
        throttle = LoginThrottle(max_attempts=2, window_seconds=60, clock=lambda: now[0])
        throttle.record_failure("a@example.com")
        throttle.record_failure("a@example.com")

        with pytest.raises(RateLimitedException) as exc_info:
            throttle.check("a@example.com")
        assert exc_info.value.retry_after == 61

        throttle.check("b@example.com")
        now[0] += 61
        throttle.check("a@example.com")

    def test_expired_emails_are_forgotten(self):
        """Emails whose failures left the window do not accumulate"""
        now = [0.0]
        throttle = LoginThrottle(max_attempts=5, window_seconds=60, clock=lambda: now[0])
        for n in range(1000):
            throttle.record_failure(f"user{n}@example.com")
        assert throttle.tracked_emails == 1000

        now[0] = 10000.0
        throttle.record_failure("late@example.com")

        assert throttle.tracked_emails == 1

    def test_emails_inside_window_are_kept(self):
        now = [0.0]
        throttle = LoginThrottle(max_attempts=2, window_seconds=60, clock=lambda: now[0])
        throttle.record_failure("a@example.com")
        now[0] = 30.0
        throttle.record_failure("b@example.com")
        throttle.record_failure("a@example.com")

        assert throttle.tracked_emails == 2
        with pytest.raises(RateLimitedException):
            throttle.check("a@example.com")


class TestTokens:
    """Bearer token validation and refresh"""

    def test_refresh_issues_new_token(self, client, test_user, auth_headers):
        response = client.post("/api/auth/refresh", headers=auth_headers)

        assert response.status_code == 200
        assert response.json()["user"]["id"] == test_user.id

    def test_missing_token_rejected(self, client):
        response = client.post("/api/auth/refresh")
        assert response.status_code == 401

    def test_expired_token_rejected(self, client, test_user):
        """Expired token should return 401"""
        token = create_test_token(test_user.id, expired=True)
        response = client.post("/api/auth/refresh", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_invalid_signature_rejected(self, client, test_user):
        payload = {"sub": test_user.id, "exp": datetime.now(UTC) + timedelta(minutes=15)}
        token = jwt.encode(payload, "wrong-secret-key", algorithm="HS256")

        response = client.post("/api/auth/refresh", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_missing_sub_claim_rejected(self, client):
        """Token without 'sub' claim should fail"""
        payload = {"exp": datetime.now(UTC) + timedelta(minutes=15)}
        token = jwt.encode(payload, settings.SECRET_KEY, algorithm="HS256")

        response = client.post("/api/auth/refresh", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert "user identifier" in response.json()["detail"].lower()

    def test_token_for_deleted_user_rejected(self, client):
        token = create_test_token("no-such-user")
        response = client.post("/api/auth/refresh", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401

    def test_sign_out_acknowledged(self, client, auth_headers):
        response = client.post("/api/auth/sign-out", headers=auth_headers)
        assert response.status_code == 204
