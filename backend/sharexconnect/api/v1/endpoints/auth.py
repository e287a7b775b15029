from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from sharexconnect.core.database import get_db
from sharexconnect.core.security import create_token_pair
from sharexconnect.models.user import User
from sharexconnect.schemas.auth import UserRegister, UserLogin, UserResponse, LoginResponse
from sharexconnect.modules.auth.dependencies import get_current_user
from sharexconnect.services.user_service import UserService


router = APIRouter()


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserRegister,
    db: AsyncSession = Depends(get_db)
):
    """Register a new student, faculty or guest account"""
    return await UserService(db).register(user_data)


@router.post("/login", response_model=LoginResponse)
async def login(
    credentials: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """Exchange email and password for an access/refresh token pair"""
    user = await UserService(db).authenticate(credentials.email, credentials.password)

    return LoginResponse(**create_token_pair(user), user=UserResponse.model_validate(user))


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    """Get current user info"""
    return current_user
