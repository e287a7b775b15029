"""
Repository endpoints: a project's tree of files and folders
"""

from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from sharexconnect.core.database import get_db
from sharexconnect.models.user import User
from sharexconnect.modules.auth.dependencies import get_current_user
from sharexconnect.schemas.repository import (
    RepositoryItemCreate,
    RepositoryItemUpdate,
    RepositoryItemResponse,
)
from sharexconnect.services.repository_service import RepositoryService


router = APIRouter()


@router.get("/{project_id}/repository", response_model=List[RepositoryItemResponse])
async def get_repository(
    project_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Every node of the tree, ordered by path"""
    return await RepositoryService(db).get_structure(project_id, current_user)


@router.post(
    "/{project_id}/repository/items",
    response_model=RepositoryItemResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_item(
    project_id: str,
    item_data: RepositoryItemCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await RepositoryService(db).create_item(project_id, current_user, item_data)


@router.get("/{project_id}/repository/items/{item_id}", response_model=RepositoryItemResponse)
async def get_item(
    project_id: str,
    item_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await RepositoryService(db).get_item(project_id, item_id, current_user)


@router.put("/{project_id}/repository/items/{item_id}", response_model=RepositoryItemResponse)
async def update_item(
    project_id: str,
    item_id: str,
    item_data: RepositoryItemUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await RepositoryService(db).update_item(project_id, item_id, current_user, item_data)


@router.delete("/{project_id}/repository/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_item(
    project_id: str,
    item_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Deleting a folder removes its whole subtree"""
    await RepositoryService(db).delete_item(project_id, item_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
