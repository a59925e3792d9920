"""
Auth Token Repository
Stores digests of issued bearer tokens.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.db.models import AuthTokenModel


class AuthTokenRepository:
    """Repository for bearer tokens"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, user_id: int, token_hash: str, expires_at: datetime) -> AuthTokenModel:
        record = AuthTokenModel(
            user_id=user_id,
            token_hash=token_hash,
            expires_at=expires_at,
        )
        self.session.add(record)
        await self.session.flush()
        return record

    async def get_valid(self, token_hash: str, now: datetime) -> Optional[AuthTokenModel]:
        result = await self.session.execute(
            select(AuthTokenModel).where(
                AuthTokenModel.token_hash == token_hash,
                AuthTokenModel.expires_at > now,
            )
        )
        return result.scalar_one_or_none()

    async def purge_expired(self, user_id: int, now: datetime) -> None:
        await self.session.execute(
            delete(AuthTokenModel).where(
                AuthTokenModel.user_id == user_id,
                AuthTokenModel.expires_at <= now,
            )
        )
