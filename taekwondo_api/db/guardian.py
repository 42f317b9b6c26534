"""Connection guardian for the process-wide database engine.

The guardian owns the single SQLAlchemy async engine of the process and a
small state machine around it:

    DISCONNECTED -> CONNECTING -> CONNECTED -> DEGRADED -> CONNECTING ...

Driver disconnect events move a healthy connection to DEGRADED without
retrying on the spot. Recovery is driven from two places: the connectivity
gate (one bounded ``force_reconnect`` per request that needs the database)
and the periodic health check, which starts a fresh reconnect round with
exponential backoff. Reaching CONNECTED twice is harmless, so neither path
takes a lock.

Example:
    guardian = DatabaseGuardian.from_settings(settings)
    await guardian.start()          # fatal if the database is unreachable

    async with guardian.session() as session:
        result = await session.execute(select(User))
"""

import asyncio
import enum
import time
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager, suppress
from typing import TYPE_CHECKING, Any

import structlog
from sqlalchemy import event, text
from sqlalchemy.engine import ExceptionContext
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_result,
    stop_after_attempt,
    wait_exponential,
)

from taekwondo_api.core.exceptions import DatabaseUnavailableError
from taekwondo_api.core.log_config import mask_url

if TYPE_CHECKING:
    from taekwondo_api.core.config import Settings

logger = structlog.get_logger(__name__)

EngineFactory = Callable[[str], AsyncEngine]
SleepFn = Callable[[float], Awaitable[Any]]

# Errors a connect attempt may raise while the database is unreachable
CONNECT_ERRORS = (SQLAlchemyError, OSError, TimeoutError)


class ConnectionState(str, enum.Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DEGRADED = "degraded"


class DatabaseConnectionError(Exception):
    """Raised when the database cannot be reached during startup."""


def create_engine_for_url(url: str, pool_size: int = 10) -> AsyncEngine:
    """Create the async engine, with pooling options only where the driver supports them."""
    options: dict[str, Any] = {"pool_pre_ping": True}
    if not url.startswith("sqlite"):
        options.update(pool_size=pool_size, max_overflow=pool_size, pool_recycle=1800)
    return create_async_engine(url, **options)


class DatabaseGuardian:
    """Owns the database engine, its connection state and the reconnect policy."""

    def __init__(
        self,
        url: str,
        *,
        max_retries: int = 5,
        backoff_base: float = 1.0,
        backoff_max: float = 30.0,
        health_check_interval: float = 30.0,
        ping_timeout: float = 5.0,
        engine_factory: EngineFactory | None = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self.url = url
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self.backoff_max = backoff_max
        self.health_check_interval = health_check_interval
        self.ping_timeout = ping_timeout
        self._engine_factory = engine_factory or create_engine_for_url
        self._sleep = sleep

        self.state = ConnectionState.DISCONNECTED
        self.retries = 0
        self._engine: AsyncEngine | None = None
        self._sessionmaker: async_sessionmaker[AsyncSession] | None = None
        self._health_task: asyncio.Task[None] | None = None

    @classmethod
    def from_settings(cls, settings: "Settings") -> "DatabaseGuardian":
        return cls(
            settings.DATABASE_URL,
            max_retries=settings.DB_MAX_RETRIES,
            backoff_base=settings.DB_RETRY_BACKOFF_SECONDS,
            backoff_max=settings.DB_RETRY_BACKOFF_MAX_SECONDS,
            health_check_interval=settings.DB_HEALTH_CHECK_INTERVAL_SECONDS,
            ping_timeout=settings.DB_PING_TIMEOUT_SECONDS,
            engine_factory=lambda url: create_engine_for_url(url, settings.DB_POOL_SIZE),
        )

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            raise DatabaseUnavailableError()
        return self._engine

    def is_healthy(self) -> bool:
        """True only when the state flag says CONNECTED and an engine is installed.

        The flag tracks the driver's live status through two signals: the
        engine's ``handle_error`` listener (``_on_driver_error``) drops it to
        DEGRADED on any disconnect the driver reports, and ``tick`` does the
        same when the periodic ping fails. The engine check only guards
        against a disposed handle.
        """
        return self.state is ConnectionState.CONNECTED and self._engine is not None

    async def start(self) -> None:
        """Connect at boot and schedule the periodic health check.

        Raises:
            DatabaseConnectionError: If a full reconnect round fails. The
                caller is expected to abort startup.
        """
        logger.info("database_starting", url=mask_url(self.url))
        if not await self.reconnect():
            raise DatabaseConnectionError(
                f"Could not connect to {mask_url(self.url)} after {self.max_retries} attempts"
            )
        self._health_task = asyncio.create_task(
            self._health_check_loop(), name="database-health-check"
        )

    async def stop(self) -> None:
        if self._health_task is not None:
            self._health_task.cancel()
            with suppress(asyncio.CancelledError):
                await self._health_task
            self._health_task = None
        await self._dispose_engine()
        self.state = ConnectionState.DISCONNECTED
        logger.info("database_closed")

    async def connect(self) -> bool:
        """Make a single connection attempt. Returns whether the guardian is CONNECTED."""
        if self.is_healthy():
            return True

        self.state = ConnectionState.CONNECTING
        try:
            if self._engine is None:
                self._install_engine(self._engine_factory(self.url))
            await asyncio.wait_for(self._select_one(), timeout=self.ping_timeout)
        except CONNECT_ERRORS as exc:
            self.state = ConnectionState.DISCONNECTED
            logger.error(
                "database_connection_failed",
                error=str(exc),
                error_type=type(exc).__name__,
                retries=self.retries,
            )
            await self._dispose_engine()
            return False

        self.state = ConnectionState.CONNECTED
        self.retries = 0
        logger.info("database_connected", url=mask_url(self.url))
        return True

    async def reconnect(self) -> bool:
        """Run one bounded reconnect round.

        Makes up to ``max_retries`` attempts, waiting ``backoff_base * 2**n``
        seconds (capped at ``backoff_max``) between them. Once the round is
        exhausted nothing else is attempted until the next periodic tick.
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=self.backoff_base, max=self.backoff_max),
            retry=retry_if_result(lambda connected: not connected),
            retry_error_callback=self._give_up,
            sleep=self._sleep,
        )
        connected: bool = await retrying(self._attempt)
        return connected

    async def force_reconnect(self) -> bool:
        """Tear down whatever connection exists and try again immediately."""
        logger.warning("database_force_reconnect", state=self.state.value, retries=self.retries)
        self.state = ConnectionState.DISCONNECTED
        await self._dispose_engine()
        return await self.connect()

    def mark_degraded(self, reason: str) -> None:
        if self.state is ConnectionState.CONNECTED:
            self.state = ConnectionState.DEGRADED
            logger.warning("database_degraded", reason=reason)

    async def tick(self) -> None:
        """One periodic health evaluation: ping when healthy, start a new round otherwise."""
        if self.is_healthy():
            try:
                await self.ping()
                return
            except CONNECT_ERRORS as exc:
                self.mark_degraded(f"health check ping failed: {exc}")

        logger.info(
            "database_health_check_reconnecting", state=self.state.value, retries=self.retries
        )
        await self.reconnect()

    async def ping(self) -> float:
        """Round-trip a trivial query and return its latency in milliseconds."""
        start = time.perf_counter()
        await asyncio.wait_for(self._select_one(), timeout=self.ping_timeout)
        return round((time.perf_counter() - start) * 1000, 2)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        if self._sessionmaker is None:
            raise DatabaseUnavailableError()

        async with self._sessionmaker() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def _attempt(self) -> bool:
        connected = await self.connect()
        if not connected:
            self.retries += 1
            logger.info(
                "database_reconnect_attempt_failed",
                retries=self.retries,
                max_retries=self.max_retries,
            )
        return connected

    def _give_up(self, retry_state: RetryCallState) -> bool:
        logger.error(
            "database_reconnect_gave_up",
            attempts=retry_state.attempt_number,
            retries=self.retries,
        )
        return False

    async def _select_one(self) -> None:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def _health_check_loop(self) -> None:
        while True:
            await asyncio.sleep(self.health_check_interval)
            try:
                await self.tick()
            except Exception:
                # The loop must outlive any single failed evaluation
                logger.exception("database_health_check_failed")

    def _install_engine(self, engine: AsyncEngine) -> None:
        event.listen(engine.sync_engine, "handle_error", self._on_driver_error)
        self._engine = engine
        self._sessionmaker = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    def _on_driver_error(self, context: ExceptionContext) -> None:
        if context.is_disconnect:
            self.mark_degraded(str(context.original_exception))

    async def _dispose_engine(self) -> None:
        engine, self._engine, self._sessionmaker = self._engine, None, None
        if engine is None:
            return
        try:
            await engine.dispose()
        except CONNECT_ERRORS as exc:
            logger.info("database_dispose_failed", error=str(exc))
