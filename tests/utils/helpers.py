from typing import Any

import httpx

from taekwondo_api.core.security import TOKEN_COOKIE_NAME


def assert_auth_response_valid(data: dict[str, Any], response: httpx.Response | None = None) -> None:
    """Assert that a register/login/google response carries a token and the user.

    When ``response`` is given, also check the token was mirrored into the
    httpOnly cookie.
    """
    assert data["success"] is True
    assert data["data"]["token"]
    assert_user_response_valid(data["data"]["user"])

    if response is not None:
        assert response.cookies.get(TOKEN_COOKIE_NAME) == data["data"]["token"]


def assert_user_response_valid(data: dict[str, Any]) -> None:
    assert "id" in data
    assert "email" in data
    assert "name" in data
    assert "role" in data
    assert "password" not in data
    assert "reset_password_token" not in data
    assert "reset_password_expire" not in data


def assert_error_envelope(response: httpx.Response, status_code: int, code: str) -> dict[str, Any]:
    assert response.status_code == status_code
    body: dict[str, Any] = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == code
    return body


def create_auth_headers(token: str) -> dict[str, str]:
    """Create Authorization headers with Bearer token."""
    return {"Authorization": f"Bearer {token}"}
