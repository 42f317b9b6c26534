from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

import taekwondo_api.db.base  # noqa: F401  registers every model with the mapper
from taekwondo_api.auth.routes import auth, password, users
from taekwondo_api.contact.routes import contact
from taekwondo_api.core import health
from taekwondo_api.core.config import settings
from taekwondo_api.core.exceptions import register_exception_handlers
from taekwondo_api.core.log_config import RequestLoggingMiddleware, setup_logging
from taekwondo_api.core.middleware import DatabaseGateMiddleware
from taekwondo_api.core.rate_limit import limiter, rate_limit_exceeded_handler
from taekwondo_api.db.guardian import DatabaseGuardian
from taekwondo_api.enrollments.routes import enrollments
from taekwondo_api.events.routes import events
from taekwondo_api.gallery.routes import gallery

setup_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    guardian = DatabaseGuardian.from_settings(settings)
    app.state.guardian = guardian

    # An unreachable database at boot is fatal: the exception aborts startup
    await guardian.start()
    logger.info("application_started", environment=settings.ENVIRONMENT)

    yield

    await guardian.stop()
    logger.info("application_stopped")


app = FastAPI(
    title=settings.PROJECT_NAME,
    debug=settings.DEBUG,
    lifespan=lifespan,
    description="Backend API for the Maharashtra Taekwondo Federation website",
    version="1.0.0",
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)  # type: ignore[arg-type]
register_exception_handlers(app, debug=settings.DEBUG)

# Starlette runs the last added middleware first: CORS, logging, gate, rate limit
app.add_middleware(SlowAPIMiddleware)
app.add_middleware(
    DatabaseGateMiddleware,
    public_paths=settings.public_paths,
    reconnect_timeout=settings.DB_RECONNECT_TIMEOUT_SECONDS,
)
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)

api = settings.API_PREFIX
app.include_router(auth.router, prefix=f"{api}/auth", tags=["authentication"])
app.include_router(password.router, prefix=f"{api}/auth", tags=["password-reset"])
app.include_router(users.router, prefix=f"{api}/users", tags=["users"])
app.include_router(events.router, prefix=f"{api}/events", tags=["events"])
app.include_router(gallery.router, prefix=f"{api}/gallery", tags=["gallery"])
app.include_router(contact.router, prefix=f"{api}/contact", tags=["contact"])
app.include_router(enrollments.router, prefix=f"{api}/enrollments", tags=["enrollments"])
app.include_router(health.router, tags=["health"])
app.include_router(health.router, prefix=api, tags=["health"])


@app.get("/")
async def root() -> dict[str, str]:
    return {
        "message": f"{settings.PROJECT_NAME} is running",
        "version": "1.0.0",
        "status": "running",
    }
