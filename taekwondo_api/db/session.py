from collections.abc import AsyncIterator
from datetime import datetime
from typing import Any

from fastapi import Depends, Request
from sqlalchemy import DateTime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import DeclarativeBase

from taekwondo_api.db.guardian import DatabaseGuardian


class Base(DeclarativeBase):
    # All timestamps are stored as UTC instants
    type_annotation_map: dict[Any, Any] = {datetime: DateTime(timezone=True)}


def get_guardian(request: Request) -> DatabaseGuardian:
    guardian: DatabaseGuardian = request.app.state.guardian
    return guardian


async def get_db(
    guardian: DatabaseGuardian = Depends(get_guardian),
) -> AsyncIterator[AsyncSession]:
    """Dependency for getting async database sessions"""
    async with guardian.session() as session:
        yield session
