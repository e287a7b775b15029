"""
Project endpoints: CRUD, collaborators and permanent project files
"""

from typing import List, Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, Query, UploadFile, File, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from sharexconnect.core.database import get_db
from sharexconnect.core.logging_config import set_project_id
from sharexconnect.models.user import User
from sharexconnect.modules.auth.dependencies import get_current_user
from sharexconnect.schemas.auth import UserSummary
from sharexconnect.schemas.project import (
    ProjectCreate,
    ProjectUpdate,
    ProjectResponse,
    ProjectListResponse,
    CollaboratorAdd,
    CollaboratorResponse,
    ProjectFileResponse,
    ProjectFileUploadResponse,
)
from sharexconnect.services.project_service import ProjectService


router = APIRouter()


# ==================== Projects ====================

@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    project_data: ProjectCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Create a project owned by the caller"""
    return await ProjectService(db).create_project(current_user, project_data)


@router.get("", response_model=ProjectListResponse)
async def list_projects(
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    category: Optional[str] = None,
    mine: bool = False,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """List projects visible to the caller, newest first"""
    return await ProjectService(db).list_visible_projects(
        current_user, page=page, page_size=page_size, category=category, owned_only=mine,
    )


@router.get("/{project_id}", response_model=ProjectResponse)
async def get_project(
    project_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    set_project_id(project_id)
    return await ProjectService(db).require_view(project_id, current_user)


@router.put("/{project_id}", response_model=ProjectResponse)
async def update_project(
    project_id: str,
    project_data: ProjectUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await ProjectService(db).update_project(project_id, current_user, project_data)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    project_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await ProjectService(db).delete_project(project_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ==================== Collaborators ====================

@router.get("/{project_id}/collaborators", response_model=List[CollaboratorResponse])
async def list_collaborators(
    project_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    rows = await ProjectService(db).list_collaborators(project_id, current_user)
    return [
        CollaboratorResponse(**UserSummary.model_validate(user).model_dump(), added_at=added_at)
        for user, added_at in rows
    ]


@router.post("/{project_id}/collaborators", status_code=status.HTTP_204_NO_CONTENT)
async def add_collaborator(
    project_id: str,
    body: CollaboratorAdd,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Owner adds a user directly, without a request or invitation"""
    await ProjectService(db).add_collaborator(project_id, body.user_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{project_id}/collaborators/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_collaborator(
    project_id: str,
    user_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await ProjectService(db).remove_collaborator(project_id, user_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ==================== Files ====================

@router.get("/{project_id}/files", response_model=List[ProjectFileResponse])
async def list_files(
    project_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """File metadata only; use the download endpoint for bytes"""
    return await ProjectService(db).list_files(project_id, current_user)


@router.post(
    "/{project_id}/files",
    response_model=ProjectFileUploadResponse,
    status_code=status.HTTP_201_CREATED,
)
async def upload_file(
    project_id: str,
    file: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Direct upload by the owner. Collaborators must open a pull request."""
    content = await file.read()
    project_file = await ProjectService(db).upload_file(
        project_id,
        current_user,
        file_name=file.filename,
        content=content,
        file_type=file.content_type,
    )
    return ProjectFileUploadResponse(
        message="File uploaded successfully",
        file=ProjectFileResponse.model_validate(project_file),
    )


@router.get("/{project_id}/files/{file_id}/download")
async def download_file(
    project_id: str,
    file_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    project_file = await ProjectService(db).get_file(project_id, file_id, current_user)
    return Response(
        content=project_file.content or b"",
        media_type=project_file.file_type or "application/octet-stream",
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(project_file.file_name)}"
        },
    )


@router.delete("/files/{file_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_file(
    file_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    await ProjectService(db).delete_file(file_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
