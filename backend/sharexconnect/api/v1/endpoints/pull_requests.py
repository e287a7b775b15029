"""
Pull request endpoints

Creation is multipart so collaborators can attach the files they want
merged. `files_changed` arrives as a JSON-encoded list of paths.
"""

import json
from typing import List, Optional

from fastapi import APIRouter, Depends, Form, File, UploadFile, status
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from sharexconnect.core.database import get_db
from sharexconnect.core.exceptions import ValidationError
from sharexconnect.models.pull_request import PullRequestStatus
from sharexconnect.models.user import User
from sharexconnect.modules.auth.dependencies import get_current_user
from sharexconnect.schemas.pull_request import (
    PullRequestCreate,
    AutoPullRequestCreate,
    PullRequestStatusUpdate,
    PullRequestResponse,
    PullRequestDetail,
    PullRequestCreatedResponse,
)
from sharexconnect.services.pull_request_service import PullRequestService, StagedUpload


router = APIRouter()


def parse_files_changed(raw: Optional[str]) -> List[str]:
    """Decode the multipart `files_changed` field into a list of paths"""
    if raw is None or not raw.strip():
        return []
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        raise ValidationError("files_changed must be a JSON-encoded list of file paths", field="files_changed")
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValidationError("files_changed must be a JSON-encoded list of file paths", field="files_changed")
    return value


def build_pull_request(
    title: str,
    description: str,
    branch_name: str,
    files_changed: Optional[str],
    changes_preview: Optional[str],
) -> PullRequestCreate:
    try:
        return PullRequestCreate(
            title=title,
            description=description,
            branch_name=branch_name,
            files_changed=parse_files_changed(files_changed),
            changes_preview=changes_preview,
        )
    except PydanticValidationError as e:
        errors = [
            {"field": ".".join(str(loc) for loc in err["loc"]), "message": err["msg"]}
            for err in e.errors()
        ]
        raise ValidationError("Invalid pull request data", errors=errors)


@router.get("/{project_id}/pull-requests", response_model=List[PullRequestResponse])
async def list_pull_requests(
    project_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """All pull requests for the project, oldest first"""
    return await PullRequestService(db).list_pull_requests(project_id, current_user)


@router.post(
    "/{project_id}/pull-requests",
    response_model=PullRequestCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_pull_request(
    project_id: str,
    title: str = Form(""),
    description: str = Form(""),
    branch_name: str = Form("feature-branch"),
    files_changed: Optional[str] = Form(None),
    changes_preview: Optional[str] = Form(None),
    files: Optional[List[UploadFile]] = File(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Open a pull request, optionally with files to stage.

    Who may open it is checked before the form contents, so an owner is
    pointed at direct upload even when the form is incomplete.
    """
    service = PullRequestService(db)
    await service.require_author(project_id, current_user)

    pr_data = build_pull_request(title, description, branch_name, files_changed, changes_preview)

    uploads = []
    for upload in files or []:
        if not upload.filename:
            continue
        uploads.append(StagedUpload(
            file_name=upload.filename,
            content=await upload.read(),
            file_type=upload.content_type,
        ))

    pull_request, files_uploaded = await service.create_pull_request(
        project_id, current_user, pr_data, uploads, author_checked=True
    )
    return PullRequestCreatedResponse(
        message="Pull request created successfully",
        pull_request=PullRequestResponse.model_validate(pull_request),
        files_uploaded=files_uploaded,
    )


@router.post(
    "/{project_id}/auto-pull-request",
    response_model=PullRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_auto_pull_request(
    project_id: str,
    body: AutoPullRequestCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await PullRequestService(db).create_auto_pull_request(project_id, current_user, body)


@router.get("/{project_id}/pull-requests/{pr_id}", response_model=PullRequestDetail)
async def get_pull_request(
    project_id: str,
    pr_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await PullRequestService(db).get_pull_request(project_id, pr_id, current_user)


@router.patch("/{project_id}/pull-requests/{pr_id}", response_model=PullRequestResponse)
async def update_pull_request_status(
    project_id: str,
    pr_id: str,
    body: PullRequestStatusUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Owner approves, rejects or merges. Merging moves staged files into the project."""
    return await PullRequestService(db).update_status(
        project_id, pr_id, PullRequestStatus(body.status), current_user
    )
