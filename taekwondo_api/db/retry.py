"""Bounded retry for individual storage operations.

Each attempt is capped by ``DB_QUERY_TIMEOUT_SECONDS``. Timeouts and
connection-level driver errors are treated as transient: the session is
rolled back and the whole operation is replayed up to ``DB_QUERY_RETRIES``
more times with a fixed delay. Anything else (integrity errors, bugs)
propagates untouched on the first failure.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog
from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from taekwondo_api.core.config import settings
from taekwondo_api.core.exceptions import StorageUnavailableError

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class TransientStorageError(Exception):
    """A storage call failed in a way that is worth retrying."""


def is_transient(exc: DBAPIError) -> bool:
    return bool(exc.connection_invalidated) or isinstance(exc, OperationalError | InterfaceError)


async def _rollback_quietly(session: AsyncSession) -> None:
    try:
        await session.rollback()
    except DBAPIError as exc:
        logger.info("storage_rollback_failed", error=str(exc))


def _log_retry(retry_state: RetryCallState) -> None:
    outcome = retry_state.outcome
    logger.warning(
        "storage_retrying",
        attempt=retry_state.attempt_number,
        error=str(outcome.exception()) if outcome else None,
    )


async def run_with_retry(
    session: AsyncSession,
    operation: Callable[[], Awaitable[T]],
    *,
    description: str = "query",
) -> T:
    """Run ``operation`` with a per-attempt timeout and a small bounded retry.

    Raises:
        StorageUnavailableError: When every attempt failed transiently.
    """

    async def attempt() -> T:
        try:
            return await asyncio.wait_for(operation(), timeout=settings.DB_QUERY_TIMEOUT_SECONDS)
        except TimeoutError as exc:
            await _rollback_quietly(session)
            raise TransientStorageError(f"{description} timed out") from exc
        except DBAPIError as exc:
            if not is_transient(exc):
                raise
            await _rollback_quietly(session)
            raise TransientStorageError(f"{description} failed: {exc.orig}") from exc

    retrying = AsyncRetrying(
        stop=stop_after_attempt(settings.DB_QUERY_RETRIES + 1),
        wait=wait_fixed(settings.DB_QUERY_RETRY_DELAY_SECONDS),
        retry=retry_if_exception_type(TransientStorageError),
        before_sleep=_log_retry,
        reraise=True,
    )
    try:
        result: T = await retrying(attempt)
        return result
    except TransientStorageError as exc:
        logger.error("storage_retries_exhausted", operation=description, error=str(exc))
        raise StorageUnavailableError() from exc
