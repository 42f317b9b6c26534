"""Create the first admin account.

Self-registration only ever produces "user" accounts, so a fresh
deployment needs one admin created out of band. Safe to run repeatedly.

Usage:
    SEED_ADMIN_EMAIL=admin@example.com python -m taekwondo_api.scripts.seeds.seed_users
"""

import asyncio
import os
import secrets
import string

from sqlalchemy.ext.asyncio import AsyncSession

import taekwondo_api.db.base  # noqa: F401
from taekwondo_api.auth.models.user import User
from taekwondo_api.auth.services.user_repository import UserRepository
from taekwondo_api.core.config import settings
from taekwondo_api.core.constants import ROLE_ADMIN
from taekwondo_api.db.guardian import DatabaseGuardian


def generate_secure_password(length: int = 24) -> str:
    alphabet = string.ascii_letters + string.digits + "!@#$%&*"
    return "".join(secrets.choice(alphabet) for _ in range(length))


async def seed_admin_user(
    db: AsyncSession, email: str, password: str, name: str = "Admin"
) -> tuple[User, bool]:
    """Return the admin account for ``email`` and whether it was created now.

    An existing account with that email is promoted to admin; its password
    is left alone.
    """
    users = UserRepository(db)
    existing = await users.find_by_email(email)
    if existing is not None:
        if existing.role != ROLE_ADMIN:
            existing = await users.update(existing, role=ROLE_ADMIN)
        return existing, False

    admin = User(email=email, name=name, password=password, role=ROLE_ADMIN)
    await users.add(admin)
    return admin, True


async def main() -> None:
    admin_email = os.environ.get("SEED_ADMIN_EMAIL", "admin@mtf.example.com")
    admin_password = os.environ.get("SEED_ADMIN_PASSWORD") or generate_secure_password()
    admin_name = os.environ.get("SEED_ADMIN_NAME", "Admin")

    guardian = DatabaseGuardian.from_settings(settings)
    await guardian.start()
    try:
        async with guardian.session() as db:
            _, created = await seed_admin_user(db, admin_email, admin_password, admin_name)
    finally:
        await guardian.stop()

    if not created:
        print(f"✓ Admin user already exists: {admin_email}")
        return

    print("✓ Admin user created successfully!")
    print(f"  Email:    {admin_email}")
    print(f"  Password: {admin_password}")
    print()
    print("  Save this password now, it won't be shown again.")
    print("  Change it after first login.")


if __name__ == "__main__":
    asyncio.run(main())
