import platform
from datetime import UTC, datetime
from typing import Any

import structlog
from fastapi import APIRouter, Depends

from taekwondo_api.core.config import settings
from taekwondo_api.db.guardian import CONNECT_ERRORS, DatabaseGuardian
from taekwondo_api.db.session import get_guardian

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get("/health")
async def health_check(guardian: DatabaseGuardian = Depends(get_guardian)) -> dict[str, Any]:
    """Report server, database and configuration status.

    Always answers 200 so monitoring can tell a running server with a broken
    database apart from a dead process. Only presence flags of settings are
    reported, never their values.
    """
    server = {
        "status": "online",
        "timestamp": datetime.now(UTC).isoformat(),
        "environment": settings.ENVIRONMENT,
        "python_version": platform.python_version(),
    }

    database: dict[str, Any] = {
        "status": "connected" if guardian.is_healthy() else "disconnected",
        "state": guardian.state.value,
        "retries": guardian.retries,
    }
    if guardian.is_healthy():
        try:
            database["response_time_ms"] = await guardian.ping()
            database["ping"] = "successful"
        except CONNECT_ERRORS as exc:
            logger.warning("health_ping_failed", error=str(exc))
            database["ping"] = "failed"
            database["ping_error"] = str(exc) or type(exc).__name__
            guardian.mark_degraded(f"health endpoint ping failed: {exc}")

    return {
        "success": True,
        "server": server,
        "database": database,
        "config": {
            "database_url_configured": bool(settings.DATABASE_URL),
            "jwt_secret_configured": bool(settings.JWT_SECRET),
            "cors_origins_configured": bool(settings.cors_origins),
            "smtp_configured": settings.EMAIL_BACKEND == "smtp" and bool(settings.SMTP_USERNAME),
            "google_client_configured": bool(settings.GOOGLE_CLIENT_ID),
        },
    }
