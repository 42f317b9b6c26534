import json

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Required: the service refuses to boot without these
    DATABASE_URL: str
    JWT_SECRET: str

    JWT_ALGORITHM: str = "HS256"
    # 0 issues effectively non-expiring tokens (100 years)
    JWT_EXPIRE_MINUTES: int = 30 * 24 * 60

    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    API_PREFIX: str = "/api"
    PROJECT_NAME: str = "Maharashtra Taekwondo Federation API"

    BACKEND_CORS_ORIGINS: str = '["http://localhost:3000","http://127.0.0.1:3000"]'

    FRONTEND_URL: str = "http://localhost:3000"

    PASSWORD_RESET_TOKEN_EXPIRE_MINUTES: int = 60
    PASSWORD_MIN_LENGTH: int = 6

    EMAIL_BACKEND: str = "console"
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587
    SMTP_USERNAME: str = ""
    SMTP_PASSWORD: str = ""
    SMTP_FROM_EMAIL: str = "noreply@example.com"
    SMTP_FROM_NAME: str = "Maharashtra Taekwondo Federation"
    SMTP_TIMEOUT_SECONDS: float = 10.0
    ADMIN_EMAIL: str = ""

    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_TOKENINFO_URL: str = "https://oauth2.googleapis.com/tokeninfo"
    GOOGLE_TIMEOUT_SECONDS: float = 5.0

    # Connection guardian
    DB_MAX_RETRIES: int = 5
    DB_RETRY_BACKOFF_SECONDS: float = 1.0
    DB_RETRY_BACKOFF_MAX_SECONDS: float = 30.0
    DB_HEALTH_CHECK_INTERVAL_SECONDS: float = 30.0
    DB_RECONNECT_TIMEOUT_SECONDS: float = 5.0
    DB_PING_TIMEOUT_SECONDS: float = 5.0
    DB_POOL_SIZE: int = 10

    # Per-query retry
    DB_QUERY_TIMEOUT_SECONDS: float = 5.0
    DB_QUERY_RETRIES: int = 2
    DB_QUERY_RETRY_DELAY_SECONDS: float = 1.0

    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_DEFAULT: str = "100/15minutes"
    RATE_LIMIT_LOGIN: str = "10/minute"
    RATE_LIMIT_REGISTER: str = "5/minute"
    RATE_LIMIT_PASSWORD_RESET: str = "3/minute"

    PUBLIC_PATHS: str = (
        '["/","/health","/api/health","/docs","/redoc","/openapi.json",'
        '"/api/enrollments/health"]'
    )

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"

    @field_validator("DATABASE_URL", "JWT_SECRET")
    @classmethod
    def _must_not_be_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("must be set to a non-empty value")
        return value

    @property
    def cors_origins(self) -> list[str]:
        return _parse_list(self.BACKEND_CORS_ORIGINS)

    @property
    def public_paths(self) -> frozenset[str]:
        return frozenset(_parse_list(self.PUBLIC_PATHS))

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"


def _parse_list(raw: str) -> list[str]:
    """Accept either a JSON list or a comma separated string."""
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        return [item.strip() for item in raw.split(",") if item.strip()]
    if isinstance(parsed, str):
        return [parsed]
    return [str(item) for item in parsed]


settings = Settings()
