"""
Faculty review endpoints: reviewer assignment, grading and read receipts
"""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from sharexconnect.core.database import get_db
from sharexconnect.models.user import User
from sharexconnect.modules.auth.dependencies import (
    get_current_user,
    get_current_admin,
    get_current_faculty,
)
from sharexconnect.schemas.review import (
    ReviewerAssign,
    ReviewSubmit,
    ReviewResponse,
    ReviewAssignmentResponse,
)
from sharexconnect.services.review_service import ReviewService


router = APIRouter()


@router.post(
    "/projects/{project_id}/reviewers",
    response_model=ReviewAssignmentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def assign_reviewer(
    project_id: str,
    body: ReviewerAssign,
    current_admin: User = Depends(get_current_admin),
    db: AsyncSession = Depends(get_db)
):
    return await ReviewService(db).assign_reviewer(project_id, body.reviewer_id, current_admin)


@router.get("/faculty/assignments", response_model=List[ReviewAssignmentResponse])
async def list_assignments(
    current_faculty: User = Depends(get_current_faculty),
    db: AsyncSession = Depends(get_db)
):
    return await ReviewService(db).list_assignments(current_faculty)


@router.post(
    "/projects/{project_id}/reviews",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_review(
    project_id: str,
    body: ReviewSubmit,
    current_faculty: User = Depends(get_current_faculty),
    db: AsyncSession = Depends(get_db)
):
    """Grade a project. A final review approves it."""
    return await ReviewService(db).submit_review(project_id, current_faculty, body)


@router.get("/projects/{project_id}/reviews", response_model=List[ReviewResponse])
async def list_reviews(
    project_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await ReviewService(db).list_project_reviews(project_id, current_user)


@router.post("/reviews/{review_id}/read", response_model=ReviewResponse)
async def mark_review_read(
    review_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await ReviewService(db).mark_read(review_id, current_user)
