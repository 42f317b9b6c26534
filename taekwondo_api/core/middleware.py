import asyncio
from collections.abc import Awaitable, Callable, Iterable

import structlog
from fastapi import Request, Response, status
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from taekwondo_api.core.exceptions import DatabaseUnavailableError, error_response
from taekwondo_api.db.guardian import CONNECT_ERRORS, DatabaseGuardian

logger = structlog.get_logger(__name__)


class DatabaseGateMiddleware(BaseHTTPMiddleware):
    """Refuse requests that need the database while it is unreachable.

    Public paths and CORS preflights pass straight through. For everything
    else an unhealthy guardian gets one bounded reconnect attempt; if that
    does not restore the connection the request is answered with 503 and
    never reaches its handler.
    """

    def __init__(
        self,
        app: ASGIApp,
        public_paths: Iterable[str] = (),
        reconnect_timeout: float = 5.0,
    ) -> None:
        super().__init__(app)
        self.public_paths = frozenset(path.rstrip("/") or "/" for path in public_paths)
        self.reconnect_timeout = reconnect_timeout

    def is_public(self, request: Request) -> bool:
        if request.method == "OPTIONS":
            return True
        path = request.url.path.rstrip("/") or "/"
        return path in self.public_paths

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if self.is_public(request):
            return await call_next(request)

        guardian: DatabaseGuardian = request.app.state.guardian
        if not guardian.is_healthy():
            logger.warning(
                "database_gate_reconnecting",
                path=request.url.path,
                state=guardian.state.value,
            )
            try:
                await asyncio.wait_for(guardian.force_reconnect(), timeout=self.reconnect_timeout)
            except CONNECT_ERRORS as exc:
                logger.error("database_gate_reconnect_failed", error=str(exc))

        if not guardian.is_healthy():
            unavailable = DatabaseUnavailableError()
            return error_response(
                status.HTTP_503_SERVICE_UNAVAILABLE,
                unavailable.message,
                unavailable.error_code,
                {"state": guardian.state.value, "retries": guardian.retries},
            )

        return await call_next(request)
