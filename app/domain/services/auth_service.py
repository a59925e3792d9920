"""
Auth Service
Password hashing and bearer token issuance / verification.
"""

from __future__ import annotations

import hashlib
import secrets
from dataclasses import dataclass
from datetime import timedelta
from typing import Optional

import bcrypt
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.infrastructure.db.models import UserModel
from app.infrastructure.db.repositories.auth_token_repository import AuthTokenRepository
from app.infrastructure.db.repositories.user_repository import UserRepository
from app.utils.time import now_local_naive


class AuthError(Exception):
    """Credentials or token rejected"""


class EmailAlreadyRegistered(Exception):
    """Registration with an email that is already taken"""


@dataclass(frozen=True)
class IssuedToken:
    access_token: str
    user: UserModel


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed_password: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))


def _digest(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class AuthService:
    """Token service using the request DB session"""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.users = UserRepository(session)
        self.tokens = AuthTokenRepository(session)

    async def register(self, *, email: str, password: str, first_name: str, last_name: str) -> IssuedToken:
        if await self.users.get_by_email(email):
            raise EmailAlreadyRegistered(email)

        user = await self.users.create(
            email=email,
            password_hash=hash_password(password),
            first_name=first_name,
            last_name=last_name,
        )
        return await self._issue(user)

    async def login(self, *, email: str, password: str) -> IssuedToken:
        user = await self.users.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            raise AuthError("Invalid email or password")
        return await self._issue(user)

    async def authenticate(self, token: str) -> Optional[UserModel]:
        record = await self.tokens.get_valid(_digest(token), now_local_naive())
        if record is None:
            return None
        return await self.users.get(record.user_id)

    async def _issue(self, user: UserModel) -> IssuedToken:
        now = now_local_naive()
        await self.tokens.purge_expired(user.id, now)

        token = secrets.token_urlsafe(32)
        await self.tokens.create(
            user_id=user.id,
            token_hash=_digest(token),
            expires_at=now + timedelta(hours=settings.AUTH_TOKEN_TTL_HOURS),
        )
        return IssuedToken(access_token=token, user=user)
