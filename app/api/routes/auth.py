"""
Auth API Routes
Registration and login issuing bearer tokens
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
import logging

from app.domain.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, UserResponse
from app.domain.services.auth_service import AuthError, AuthService, EmailAlreadyRegistered
from app.infrastructure.db.database import get_db

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest, db: AsyncSession = Depends(get_db)):
    """Create an account and return a token for it"""
    try:
        issued = await AuthService(db).register(
            email=request.email,
            password=request.password,
            first_name=request.first_name.strip(),
            last_name=request.last_name.strip(),
        )
    except EmailAlreadyRegistered:
        raise HTTPException(status_code=409, detail="Email is already registered")

    logger.info(f"👤 Registered user {issued.user.id}")
    return AuthResponse(access_token=issued.access_token, user=UserResponse.from_model(issued.user))


@router.post("/login", response_model=AuthResponse)
async def login(request: LoginRequest, db: AsyncSession = Depends(get_db)):
    try:
        issued = await AuthService(db).login(email=request.email, password=request.password)
    except AuthError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return AuthResponse(access_token=issued.access_token, user=UserResponse.from_model(issued.user))
