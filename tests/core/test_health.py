import pytest

from taekwondo_api.db.guardian import ConnectionState, DatabaseGuardian


class TestHealthEndpoint:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["/health", "/api/health"])
    async def test_should_report_connected_database(self, test_client, path):
        response = await test_client.get(path)

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["server"]["status"] == "online"
        assert body["database"]["status"] == "connected"
        assert body["database"]["state"] == "connected"
        assert body["database"]["ping"] == "successful"
        assert body["database"]["response_time_ms"] >= 0

    @pytest.mark.asyncio
    async def test_should_report_presence_flags_not_values(self, test_client):
        response = await test_client.get("/health")

        config = response.json()["config"]
        assert config["database_url_configured"] is True
        assert config["jwt_secret_configured"] is True
        assert all(isinstance(flag, bool) for flag in config.values())
        assert "test-secret-key-for-testing-only" not in response.text

    @pytest.mark.asyncio
    async def test_should_answer_200_when_database_down(self, test_client, test_app):
        def refuse(url):
            raise OSError("connection refused")

        test_app.state.guardian = DatabaseGuardian("sqlite+aiosqlite:///x.db", engine_factory=refuse)

        response = await test_client.get("/health")

        assert response.status_code == 200
        assert response.json()["database"]["status"] == "disconnected"

    @pytest.mark.asyncio
    async def test_should_mark_guardian_degraded_when_ping_fails(
        self, test_client, guardian, monkeypatch
    ):
        async def failing_ping():
            raise OSError("server closed the connection unexpectedly")

        monkeypatch.setattr(guardian, "ping", failing_ping)

        response = await test_client.get("/health")

        database = response.json()["database"]
        assert database["ping"] == "failed"
        assert "server closed" in database["ping_error"]
        assert guardian.state is ConnectionState.DEGRADED


class TestRootEndpoint:
    @pytest.mark.asyncio
    async def test_should_report_running(self, test_client):
        response = await test_client.get("/")

        assert response.status_code == 200
        assert response.json()["status"] == "running"
