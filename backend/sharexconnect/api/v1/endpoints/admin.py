"""
Institution administration endpoints
"""

from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from sharexconnect.core.database import get_db
from sharexconnect.models.user import User, UserRole
from sharexconnect.modules.auth.dependencies import get_current_admin
from sharexconnect.schemas.admin import RoleUpdate
from sharexconnect.schemas.auth import UserResponse
from sharexconnect.services.user_service import UserService


router = APIRouter()


@router.get("/users", response_model=List[UserResponse])
async def list_users(
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Active users in the admin's institution"""
    return await UserService(db).list_institution_users(current_admin)


@router.patch("/users/{user_id}/role", response_model=UserResponse)
async def update_user_role(
    user_id: str,
    body: RoleUpdate,
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    return await UserService(db).update_role(user_id, UserRole(body.role), current_admin)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_user(
    user_id: str,
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    """Deactivate a user; their projects revert to DRAFT"""
    await UserService(db).remove_user(user_id, current_admin)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
