from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from sharexconnect.core.database import get_db
from sharexconnect.models.change_request import ChangeRequestStatus
from sharexconnect.models.user import User
from sharexconnect.modules.auth.dependencies import get_current_user
from sharexconnect.schemas.change_request import (
    ChangeRequestCreate,
    ChangeRequestReview,
    ChangeRequestResponse,
)
from sharexconnect.services.change_request_service import ChangeRequestService


router = APIRouter()


@router.get("/projects/{project_id}/change-requests", response_model=List[ChangeRequestResponse])
async def list_change_requests(
    project_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await ChangeRequestService(db).list_change_requests(project_id, current_user)


@router.post(
    "/projects/{project_id}/change-requests",
    response_model=ChangeRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_change_request(
    project_id: str,
    body: ChangeRequestCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await ChangeRequestService(db).create_change_request(project_id, current_user, body)


@router.post("/change-requests/{change_request_id}/review", response_model=ChangeRequestResponse)
async def review_change_request(
    change_request_id: str,
    body: ChangeRequestReview,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Record the owner's decision. The proposed change is not applied."""
    return await ChangeRequestService(db).review_change_request(
        change_request_id, ChangeRequestStatus(body.status), current_user
    )
