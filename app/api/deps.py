"""
Shared route dependencies
"""

from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain.services.auth_service import AuthService
from app.infrastructure.db.database import get_db
from app.infrastructure.db.models import UserModel
from app.infrastructure.db.repositories.category_repository import CategoryRepository

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> UserModel:
    """Resolve the bearer token to a user or answer 401"""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = await AuthService(db).authenticate(credentials.credentials)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def ensure_category_exists(db: AsyncSession, category_id: Optional[int]) -> None:
    """404 when a request references a category that does not exist"""
    if category_id is None:
        return
    if not await CategoryRepository(db).exists(category_id):
        raise HTTPException(status_code=404, detail=f"Category {category_id} not found")


def reject_null_fields(changes: dict, required: tuple) -> None:
    """PATCH bodies may omit required fields but not null them"""
    cleared = [name for name in required if name in changes and changes[name] is None]
    if cleared:
        raise HTTPException(
            status_code=422,
            detail=f"Fields cannot be null: {', '.join(cleared)}",
        )
