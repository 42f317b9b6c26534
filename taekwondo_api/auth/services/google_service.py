"""Google ID token verification.

The frontend performs the Google sign-in and posts the resulting ID token.
The token is checked against Google's tokeninfo endpoint, which validates
the signature and expiry; the audience is then compared with the
configured OAuth client id.

API Documentation: https://developers.google.com/identity/sign-in/web/backend-auth
"""

from dataclasses import dataclass
from typing import Any

import httpx
import structlog

from taekwondo_api.core.config import settings
from taekwondo_api.core.exceptions import UnauthorizedError

logger = structlog.get_logger(__name__)

_TRUSTED_ISSUERS = {"accounts.google.com", "https://accounts.google.com"}


@dataclass
class GoogleIdentity:
    """Claims of a verified Google ID token."""

    google_id: str
    email: str
    name: str | None = None
    picture: str | None = None


class GoogleTokenVerifier:
    """Verifies Google ID tokens via the tokeninfo endpoint."""

    def __init__(
        self,
        client_id: str,
        tokeninfo_url: str = "https://oauth2.googleapis.com/tokeninfo",
        timeout: float = 5.0,
    ) -> None:
        self.client_id = client_id
        self.tokeninfo_url = tokeninfo_url
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id)

    async def verify(self, id_token: str) -> GoogleIdentity:
        """Return the identity behind ``id_token``.

        Raises:
            UnauthorizedError: If Google rejects the token, the claims do not
                match this application, or Google cannot be reached.
        """
        if not self.is_configured:
            logger.error("google_client_not_configured")
            raise UnauthorizedError("Google sign-in is not configured")

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(self.tokeninfo_url, params={"id_token": id_token})
                response.raise_for_status()
                claims: dict[str, Any] = response.json()
        except httpx.HTTPStatusError as e:
            logger.info("google_token_rejected", status=e.response.status_code)
            raise UnauthorizedError("Invalid Google token") from e
        except httpx.RequestError as e:
            logger.error("google_tokeninfo_unreachable", error=str(e))
            raise UnauthorizedError("Could not verify Google token") from e

        return self._identity_from_claims(claims)

    def _identity_from_claims(self, claims: dict[str, Any]) -> GoogleIdentity:
        if claims.get("aud") != self.client_id:
            logger.warning("google_token_audience_mismatch")
            raise UnauthorizedError("Invalid Google token")
        if claims.get("iss") not in _TRUSTED_ISSUERS:
            logger.warning("google_token_untrusted_issuer", issuer=claims.get("iss"))
            raise UnauthorizedError("Invalid Google token")
        # tokeninfo reports booleans as strings
        if str(claims.get("email_verified", "false")).lower() != "true":
            raise UnauthorizedError("Google account email is not verified")

        sub = claims.get("sub")
        email = claims.get("email")
        if not sub or not email:
            raise UnauthorizedError("Invalid Google token")

        return GoogleIdentity(
            google_id=str(sub),
            email=str(email),
            name=claims.get("name"),
            picture=claims.get("picture"),
        )


def get_google_verifier() -> GoogleTokenVerifier:
    return GoogleTokenVerifier(
        client_id=settings.GOOGLE_CLIENT_ID,
        tokeninfo_url=settings.GOOGLE_TOKENINFO_URL,
        timeout=settings.GOOGLE_TIMEOUT_SECONDS,
    )
