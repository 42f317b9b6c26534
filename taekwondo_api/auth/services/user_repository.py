from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from taekwondo_api.auth.models.user import User
from taekwondo_api.core import security
from taekwondo_api.core.repository import BaseRepository


class UserRepository(BaseRepository[User]):
    def __init__(self, db: AsyncSession):
        super().__init__(db, User)

    async def find_by_email(self, email: str) -> User | None:
        return await self.first(User.email == email.strip().lower())

    async def find_by_google_id(self, google_id: str) -> User | None:
        return await self.first(User.google_id == google_id)

    async def find_by_reset_token(self, raw_token: str) -> User | None:
        """Return the user holding an unexpired reset grant for ``raw_token``.

        Only the SHA-256 digest is stored, so the presented secret is hashed
        before the lookup. Expiry is compared in SQL.
        """
        return await self.first(
            User.reset_password_token == security.hash_token(raw_token),
            User.reset_password_expire > datetime.now(UTC),
        )

    async def list_users(self) -> list[User]:
        return await self.find_all(order_by=(User.created_at.desc(),))
