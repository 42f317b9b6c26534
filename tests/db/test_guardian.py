"""Unit tests for the connection guardian state machine and reconnect policy."""

from types import SimpleNamespace

import pytest
from sqlalchemy import event

from taekwondo_api.core.exceptions import DatabaseUnavailableError
from taekwondo_api.db.guardian import (
    ConnectionState,
    DatabaseConnectionError,
    DatabaseGuardian,
    create_engine_for_url,
)


class EngineFactory:
    """Fails the first ``failures`` calls, then hands out real engines."""

    def __init__(self, failures: int = 0) -> None:
        self.failures = failures
        self.calls = 0

    def __call__(self, url):
        self.calls += 1
        if self.calls <= self.failures:
            raise OSError("connection refused")
        return create_engine_for_url(url)


class RecordingSleep:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


@pytest.fixture
def sleep():
    return RecordingSleep()


def _guardian(database_url, factory, sleep, **options) -> DatabaseGuardian:
    options.setdefault("max_retries", 4)
    options.setdefault("backoff_base", 1.0)
    options.setdefault("backoff_max", 30.0)
    return DatabaseGuardian(database_url, engine_factory=factory, sleep=sleep, **options)


class TestReconnectRound:
    @pytest.mark.asyncio
    async def test_should_stop_after_max_retries_until_next_tick(self, database_url, sleep):
        factory = EngineFactory(failures=100)
        guardian = _guardian(database_url, factory, sleep)

        connected = await guardian.reconnect()

        assert connected is False
        assert factory.calls == 4
        assert guardian.retries == 4
        assert guardian.state is ConnectionState.DISCONNECTED
        assert len(sleep.delays) == 3

        # Nothing else happens until the periodic tick starts a new round
        assert factory.calls == 4
        await guardian.tick()
        assert factory.calls == 8

    @pytest.mark.asyncio
    async def test_should_back_off_exponentially_with_cap(self, database_url, sleep):
        guardian = _guardian(
            database_url, EngineFactory(failures=100), sleep, max_retries=8, backoff_max=5.0
        )

        await guardian.reconnect()

        assert sleep.delays == sorted(sleep.delays)
        assert sleep.delays[1] > sleep.delays[0]
        assert max(sleep.delays) <= 5.0

    @pytest.mark.asyncio
    async def test_should_connect_after_transient_failures(self, database_url, sleep):
        factory = EngineFactory(failures=2)
        guardian = _guardian(database_url, factory, sleep)

        connected = await guardian.reconnect()

        assert connected is True
        assert factory.calls == 3
        assert guardian.state is ConnectionState.CONNECTED
        assert guardian.retries == 0
        assert guardian.is_healthy()

        await guardian.stop()


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_should_fail_startup_when_database_unreachable(self, database_url, sleep):
        guardian = _guardian(database_url, EngineFactory(failures=100), sleep, max_retries=2)

        with pytest.raises(DatabaseConnectionError):
            await guardian.start()

        assert not guardian.is_healthy()

    @pytest.mark.asyncio
    async def test_should_start_and_stop_cleanly(self, database_url, sleep):
        guardian = _guardian(database_url, EngineFactory(), sleep)

        await guardian.start()
        assert guardian.is_healthy()

        await guardian.stop()

        assert guardian.state is ConnectionState.DISCONNECTED
        assert not guardian.is_healthy()
        with pytest.raises(DatabaseUnavailableError):
            _ = guardian.engine

    @pytest.mark.asyncio
    async def test_should_refuse_sessions_while_disconnected(self, database_url, sleep):
        guardian = _guardian(database_url, EngineFactory(), sleep)

        with pytest.raises(DatabaseUnavailableError):
            async with guardian.session():
                pass


class TestDegradation:
    @pytest.mark.asyncio
    async def test_should_degrade_on_driver_disconnect(self, database_url, sleep):
        guardian = _guardian(database_url, EngineFactory(), sleep)
        assert await guardian.connect()

        guardian._on_driver_error(
            SimpleNamespace(is_disconnect=True, original_exception=OSError("gone"))
        )

        assert guardian.state is ConnectionState.DEGRADED
        assert not guardian.is_healthy()

        await guardian.stop()

    @pytest.mark.asyncio
    async def test_should_ignore_non_disconnect_driver_errors(self, database_url, sleep):
        guardian = _guardian(database_url, EngineFactory(), sleep)
        assert await guardian.connect()

        guardian._on_driver_error(
            SimpleNamespace(is_disconnect=False, original_exception=ValueError("syntax"))
        )

        assert guardian.state is ConnectionState.CONNECTED

        await guardian.stop()

    @pytest.mark.asyncio
    async def test_should_only_degrade_from_connected(self, database_url, sleep):
        guardian = _guardian(database_url, EngineFactory(), sleep)

        guardian.mark_degraded("not connected yet")

        assert guardian.state is ConnectionState.DISCONNECTED

    @pytest.mark.asyncio
    async def test_should_listen_for_driver_errors_on_every_engine(self, database_url, sleep):
        guardian = _guardian(database_url, EngineFactory(), sleep)
        assert await guardian.connect()
        first_engine = guardian.engine.sync_engine
        assert event.contains(first_engine, "handle_error", guardian._on_driver_error)

        assert await guardian.force_reconnect()

        second_engine = guardian.engine.sync_engine
        assert second_engine is not first_engine
        assert event.contains(second_engine, "handle_error", guardian._on_driver_error)

        await guardian.stop()

    @pytest.mark.asyncio
    async def test_tick_should_clear_health_flag_when_ping_fails(
        self, database_url, sleep, monkeypatch
    ):
        guardian = _guardian(database_url, EngineFactory(), sleep)
        assert await guardian.connect()

        async def unreachable():
            raise OSError("connection reset by peer")

        monkeypatch.setattr(guardian, "_select_one", unreachable)

        await guardian.tick()

        assert not guardian.is_healthy()
        assert guardian.state is ConnectionState.DISCONNECTED

        await guardian.stop()

    @pytest.mark.asyncio
    async def test_tick_should_recover_degraded_connection(self, database_url, sleep):
        guardian = _guardian(database_url, EngineFactory(), sleep)
        assert await guardian.connect()
        guardian.mark_degraded("simulated")

        await guardian.tick()

        assert guardian.state is ConnectionState.CONNECTED

        await guardian.stop()

    @pytest.mark.asyncio
    async def test_tick_should_only_ping_when_healthy(self, database_url, sleep):
        factory = EngineFactory()
        guardian = _guardian(database_url, factory, sleep)
        assert await guardian.connect()

        await guardian.tick()

        assert factory.calls == 1
        assert guardian.state is ConnectionState.CONNECTED

        await guardian.stop()

    @pytest.mark.asyncio
    async def test_force_reconnect_should_replace_engine(self, database_url, sleep):
        factory = EngineFactory()
        guardian = _guardian(database_url, factory, sleep)
        assert await guardian.connect()
        first_engine = guardian.engine

        assert await guardian.force_reconnect()

        assert factory.calls == 2
        assert guardian.engine is not first_engine

        await guardian.stop()
