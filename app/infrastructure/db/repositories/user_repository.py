"""
User Repository
Lookup and creation of registered users
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.db.models import UserModel


class UserRepository:
    """Repository for users"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get(self, user_id: int) -> Optional[UserModel]:
        return await self.session.get(UserModel, user_id)

    async def get_by_email(self, email: str) -> Optional[UserModel]:
        result = await self.session.execute(
            select(UserModel).where(UserModel.email == email.lower())
        )
        return result.scalar_one_or_none()

    async def create(
        self,
        *,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
    ) -> UserModel:
        model = UserModel(
            email=email.lower(),
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
        )
        self.session.add(model)
        await self.session.flush()
        return model
