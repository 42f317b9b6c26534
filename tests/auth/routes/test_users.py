import pytest

from tests.utils.factories import create_user_factory
from tests.utils.helpers import assert_error_envelope, create_auth_headers


class TestProfileUpdate:
    @pytest.mark.asyncio
    async def test_should_update_own_profile(self, test_client, test_user_token):
        response = await test_client.put(
            "/api/users/me",
            json={"city": "Kolhapur", "belt_rank": "green", "phone_number": "9000000000"},
            headers=create_auth_headers(test_user_token),
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["city"] == "Kolhapur"
        assert data["belt_rank"] == "green"
        assert data["phone_number"] == "9000000000"

    @pytest.mark.asyncio
    async def test_should_not_allow_role_escalation_through_profile(
        self, test_client, test_user_token
    ):
        response = await test_client.put(
            "/api/users/me",
            json={"role": "admin", "name": "Still User"},
            headers=create_auth_headers(test_user_token),
        )

        assert response.status_code == 200
        assert response.json()["data"]["role"] == "user"
        assert response.json()["data"]["name"] == "Still User"

    @pytest.mark.asyncio
    async def test_should_keep_password_hash_on_profile_update(
        self, test_client, test_user, test_user_token
    ):
        await test_client.put(
            "/api/users/me",
            json={"country": "India"},
            headers=create_auth_headers(test_user_token),
        )

        login = await test_client.post(
            "/api/auth/login", json={"email": test_user.email, "password": "testpass123"}
        )
        assert login.status_code == 200


class TestUpdatePassword:
    @pytest.mark.asyncio
    async def test_should_update_password(self, test_client, test_user, test_user_token):
        response = await test_client.put(
            "/api/users/updatepassword",
            json={"current_password": "testpass123", "new_password": "brandnew1"},
            headers=create_auth_headers(test_user_token),
        )

        assert response.status_code == 200

        login = await test_client.post(
            "/api/auth/login", json={"email": test_user.email, "password": "brandnew1"}
        )
        assert login.status_code == 200


class TestAdminUserManagement:
    @pytest.mark.asyncio
    async def test_should_list_users_for_admin(
        self, test_client, test_user, test_admin, test_admin_token
    ):
        response = await test_client.get("/api/users", headers=create_auth_headers(test_admin_token))

        assert response.status_code == 200
        body = response.json()
        assert body["meta"]["count"] == 2
        emails = {user["email"] for user in body["data"]}
        assert emails == {test_user.email, test_admin.email}

    @pytest.mark.asyncio
    async def test_should_return_403_for_non_admin(self, test_client, test_user_token):
        response = await test_client.get("/api/users", headers=create_auth_headers(test_user_token))

        body = assert_error_envelope(response, 403, "FORBIDDEN")
        assert body["message"] == "User role 'user' is not authorized to access this route"

    @pytest.mark.asyncio
    async def test_should_change_user_role(self, test_client, test_user, test_admin_token):
        response = await test_client.put(
            f"/api/users/{test_user.id}/role",
            json={"role": "instructor"},
            headers=create_auth_headers(test_admin_token),
        )

        assert response.status_code == 200
        assert response.json()["data"]["role"] == "instructor"

    @pytest.mark.asyncio
    async def test_should_reject_unknown_role(self, test_client, test_user, test_admin_token):
        response = await test_client.put(
            f"/api/users/{test_user.id}/role",
            json={"role": "superuser"},
            headers=create_auth_headers(test_admin_token),
        )

        assert_error_envelope(response, 400, "VALIDATION_ERROR")

    @pytest.mark.asyncio
    async def test_should_not_change_own_role(self, test_client, test_admin, test_admin_token):
        response = await test_client.put(
            f"/api/users/{test_admin.id}/role",
            json={"role": "user"},
            headers=create_auth_headers(test_admin_token),
        )

        assert_error_envelope(response, 400, "VALIDATION_ERROR")

    @pytest.mark.asyncio
    async def test_should_return_404_for_unknown_user(
        self, test_client, db_session, test_admin_token
    ):
        ghost = await create_user_factory(db_session)
        ghost_id = ghost.id
        await db_session.delete(ghost)
        await db_session.commit()

        response = await test_client.put(
            f"/api/users/{ghost_id}/role",
            json={"role": "admin"},
            headers=create_auth_headers(test_admin_token),
        )

        body = assert_error_envelope(response, 404, "NOT_FOUND")
        assert body["message"] == "User not found"
