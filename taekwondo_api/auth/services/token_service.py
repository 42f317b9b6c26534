import enum
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import structlog
from jose import ExpiredSignatureError, JWTError, jwt

from taekwondo_api.core.config import settings
from taekwondo_api.core.constants import NON_EXPIRING_TOKEN_DAYS

logger = structlog.get_logger(__name__)


class TokenFailure(str, enum.Enum):
    ABSENT = "absent"
    MALFORMED = "malformed"
    EXPIRED = "expired"


@dataclass(frozen=True)
class TokenDecision:
    """Outcome of verifying a bearer token: either a user id or a failure kind."""

    user_id: uuid.UUID | None = None
    failure: TokenFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None and self.user_id is not None


class TokenService:
    """Issues and verifies stateless bearer tokens bound to a user id.

    Tokens carry ``{sub, iat, exp}`` and are signed with the configured
    secret. There is no server-side revocation list.
    """

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expire_minutes: int = 30 * 24 * 60,
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    @property
    def lifetime(self) -> timedelta:
        if self.expire_minutes <= 0:
            return timedelta(days=NON_EXPIRING_TOKEN_DAYS)
        return timedelta(minutes=self.expire_minutes)

    def issue(self, user_id: uuid.UUID | str) -> str:
        now = datetime.now(UTC)
        payload = {
            "sub": str(user_id),
            "iat": int(now.timestamp()),
            "exp": int((now + self.lifetime).timestamp()),
        }
        return str(jwt.encode(payload, self.secret, algorithm=self.algorithm))

    def verify(self, token: str | None) -> TokenDecision:
        """Decode ``token``. Never raises; failures are reported in the decision."""
        if not token:
            return TokenDecision(failure=TokenFailure.ABSENT)

        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            logger.info("token_expired")
            return TokenDecision(failure=TokenFailure.EXPIRED)
        except JWTError as exc:
            logger.info("token_invalid", error=str(exc))
            return TokenDecision(failure=TokenFailure.MALFORMED)

        try:
            user_id = uuid.UUID(str(payload["sub"]))
        except (KeyError, ValueError):
            logger.info("token_invalid", error="missing or malformed subject")
            return TokenDecision(failure=TokenFailure.MALFORMED)

        return TokenDecision(user_id=user_id)


token_service = TokenService(
    secret=settings.JWT_SECRET,
    algorithm=settings.JWT_ALGORITHM,
    expire_minutes=settings.JWT_EXPIRE_MINUTES,
)
