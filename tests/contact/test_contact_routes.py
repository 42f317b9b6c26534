import uuid

import pytest

from taekwondo_api.core.config import settings
from tests.utils.factories import contact_payload
from tests.utils.helpers import assert_error_envelope, create_auth_headers


async def _submit(test_client, token, **overrides):
    response = await test_client.post(
        "/api/contact", json=contact_payload(**overrides), headers=create_auth_headers(token)
    )
    assert response.status_code == 201
    return response.json()["data"]


class TestContactSubmission:
    @pytest.mark.asyncio
    async def test_should_store_message_and_notify_admin(
        self, test_client, test_user_token, email_outbox
    ):
        response = await test_client.post(
            "/api/contact", json=contact_payload(), headers=create_auth_headers(test_user_token)
        )

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Your message has been sent successfully"
        assert body["data"]["status"] == "new"
        assert len(email_outbox.sent) == 1
        assert email_outbox.sent[0].to == settings.ADMIN_EMAIL
        assert email_outbox.sent[0].subject == "New Contact Form Submission: Classes for my son"

    @pytest.mark.asyncio
    async def test_should_succeed_when_notification_fails(
        self, test_client, test_user_token, email_outbox
    ):
        email_outbox.fail = True

        response = await test_client.post(
            "/api/contact", json=contact_payload(), headers=create_auth_headers(test_user_token)
        )

        assert response.status_code == 201

    @pytest.mark.asyncio
    async def test_should_require_authentication(self, test_client):
        response = await test_client.post("/api/contact", json=contact_payload())

        assert_error_envelope(response, 401, "UNAUTHORIZED")

    @pytest.mark.asyncio
    async def test_should_reject_overlong_message(self, test_client, test_user_token):
        response = await test_client.post(
            "/api/contact",
            json=contact_payload(message="x" * 1001),
            headers=create_auth_headers(test_user_token),
        )

        assert_error_envelope(response, 400, "VALIDATION_ERROR")


class TestContactAdministration:
    @pytest.mark.asyncio
    async def test_should_list_messages_for_admin(
        self, test_client, test_user_token, test_admin_token
    ):
        await _submit(test_client, test_user_token, subject="First")
        await _submit(test_client, test_user_token, subject="Second")

        response = await test_client.get("/api/contact", headers=create_auth_headers(test_admin_token))

        assert response.status_code == 200
        body = response.json()
        assert body["meta"]["count"] == 2
        assert {message["subject"] for message in body["data"]} == {"First", "Second"}

    @pytest.mark.asyncio
    async def test_should_forbid_listing_for_plain_user(self, test_client, test_user_token):
        response = await test_client.get("/api/contact", headers=create_auth_headers(test_user_token))

        assert_error_envelope(response, 403, "FORBIDDEN")

    @pytest.mark.asyncio
    async def test_should_stamp_response_date_when_replied(
        self, test_client, test_admin, test_user_token, test_admin_token
    ):
        message = await _submit(test_client, test_user_token)

        response = await test_client.put(
            f"/api/contact/{message['id']}",
            json={"status": "replied"},
            headers=create_auth_headers(test_admin_token),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["status"] == "replied"
        assert data["responded_by"] == str(test_admin.id)
        assert data["response_date"] is not None

    @pytest.mark.asyncio
    async def test_should_clear_response_date_when_reopened(
        self, test_client, test_user_token, test_admin_token
    ):
        message = await _submit(test_client, test_user_token)
        headers = create_auth_headers(test_admin_token)
        await test_client.put(
            f"/api/contact/{message['id']}", json={"status": "closed"}, headers=headers
        )

        response = await test_client.put(
            f"/api/contact/{message['id']}", json={"status": "read"}, headers=headers
        )

        assert response.json()["data"]["status"] == "read"
        assert "response_date" not in response.json()["data"]

    @pytest.mark.asyncio
    async def test_should_get_and_delete_message(
        self, test_client, test_user_token, test_admin_token
    ):
        message = await _submit(test_client, test_user_token)
        headers = create_auth_headers(test_admin_token)

        fetched = await test_client.get(f"/api/contact/{message['id']}", headers=headers)
        deleted = await test_client.delete(f"/api/contact/{message['id']}", headers=headers)
        missing = await test_client.get(f"/api/contact/{message['id']}", headers=headers)

        assert fetched.status_code == 200
        assert deleted.status_code == 200
        body = assert_error_envelope(missing, 404, "NOT_FOUND")
        assert body["message"] == "Contact submission not found"

    @pytest.mark.asyncio
    async def test_should_return_404_for_unknown_message(self, test_client, test_admin_token):
        response = await test_client.put(
            f"/api/contact/{uuid.uuid4()}",
            json={"status": "read"},
            headers=create_auth_headers(test_admin_token),
        )

        assert_error_envelope(response, 404, "NOT_FOUND")
