from fastapi import APIRouter, Depends

from app.api.deps import get_current_user
from app.domain.schemas.auth import UserResponse
from app.infrastructure.db.models import UserModel

router = APIRouter()


@router.get("/profile", response_model=UserResponse)
async def get_profile(current_user: UserModel = Depends(get_current_user)):
    return UserResponse.from_model(current_user)
