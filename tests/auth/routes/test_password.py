import re
from datetime import UTC, datetime, timedelta

import pytest

from taekwondo_api.core.security import generate_reset_token, hash_token
from tests.utils.helpers import assert_error_envelope

GENERIC_MESSAGE = "If an account with that email exists, password reset instructions have been sent"


def _token_from_email(email_outbox) -> str:
    match = re.search(r"/reset-password/([0-9a-f]{64})", email_outbox.sent[-1].body_text)
    assert match is not None
    return match.group(1)


class TestForgotPasswordEndpoint:
    @pytest.mark.asyncio
    async def test_should_email_reset_link_for_existing_user(
        self, test_client, test_user, email_outbox, db_session
    ):
        response = await test_client.post(
            "/api/auth/forgot-password", json={"email": test_user.email}
        )

        assert response.status_code == 200
        assert response.json()["message"] == GENERIC_MESSAGE
        assert len(email_outbox.sent) == 1
        assert email_outbox.sent[0].to == test_user.email

        raw_token = _token_from_email(email_outbox)
        await db_session.refresh(test_user)
        # Only the digest is stored
        assert test_user.reset_password_token == hash_token(raw_token)
        assert test_user.reset_password_expire is not None

    @pytest.mark.asyncio
    async def test_should_return_same_message_for_unknown_email(self, test_client, email_outbox):
        response = await test_client.post(
            "/api/auth/forgot-password", json={"email": "nobody@example.com"}
        )

        assert response.status_code == 200
        assert response.json()["message"] == GENERIC_MESSAGE
        assert email_outbox.sent == []

    @pytest.mark.asyncio
    async def test_should_succeed_when_email_delivery_fails(
        self, test_client, test_user, email_outbox
    ):
        email_outbox.fail = True

        response = await test_client.post(
            "/api/auth/forgot-password", json={"email": test_user.email}
        )

        assert response.status_code == 200
        assert response.json()["message"] == GENERIC_MESSAGE


class TestResetPasswordFlow:
    @pytest.mark.asyncio
    async def test_should_reset_once_then_reject_reused_token(
        self, test_client, test_user, email_outbox
    ):
        await test_client.post("/api/auth/forgot-password", json={"email": test_user.email})
        raw_token = _token_from_email(email_outbox)

        verify = await test_client.get(f"/api/auth/reset-password/{raw_token}/verify")
        assert verify.status_code == 200

        reset = await test_client.post(
            f"/api/auth/reset-password/{raw_token}", json={"password": "new1"}
        )
        assert reset.status_code == 200
        assert reset.json()["message"] == "Password reset successful"

        reused = await test_client.post(
            f"/api/auth/reset-password/{raw_token}", json={"password": "other1"}
        )
        body = assert_error_envelope(reused, 400, "VALIDATION_ERROR")
        assert body["message"] == "Invalid or expired token"

        login = await test_client.post(
            "/api/auth/login", json={"email": test_user.email, "password": "new1"}
        )
        assert login.status_code == 200

    @pytest.mark.asyncio
    async def test_should_reject_expired_token(self, test_client, test_user, db_session):
        raw_token, hashed_token, _ = generate_reset_token()
        test_user.reset_password_token = hashed_token
        test_user.reset_password_expire = datetime.now(UTC) - timedelta(minutes=1)
        await db_session.commit()

        verify = await test_client.get(f"/api/auth/reset-password/{raw_token}/verify")
        assert_error_envelope(verify, 400, "VALIDATION_ERROR")

        reset = await test_client.post(
            f"/api/auth/reset-password/{raw_token}", json={"password": "newpass1"}
        )
        assert_error_envelope(reset, 400, "VALIDATION_ERROR")

    @pytest.mark.asyncio
    async def test_should_reject_unknown_token(self, test_client):
        response = await test_client.get(f"/api/auth/reset-password/{'0' * 64}/verify")

        body = assert_error_envelope(response, 400, "VALIDATION_ERROR")
        assert body["message"] == "Invalid or expired token"

    @pytest.mark.asyncio
    async def test_should_require_new_password(self, test_client, test_user, email_outbox):
        await test_client.post("/api/auth/forgot-password", json={"email": test_user.email})
        raw_token = _token_from_email(email_outbox)

        response = await test_client.post(
            f"/api/auth/reset-password/{raw_token}", json={"password": ""}
        )

        body = assert_error_envelope(response, 400, "VALIDATION_ERROR")
        assert body["message"] == "Please provide a new password"

        verify = await test_client.get(f"/api/auth/reset-password/{raw_token}/verify")
        assert verify.status_code == 200
