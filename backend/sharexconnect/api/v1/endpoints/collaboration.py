"""
Collaboration endpoints: join requests, invitations and the responses to them
"""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from sharexconnect.core.database import get_db
from sharexconnect.models.collaboration import RequestStatus
from sharexconnect.models.user import User
from sharexconnect.modules.auth.dependencies import get_current_user
from sharexconnect.schemas.collaboration import (
    CollaborationRequestCreate,
    InvitationCreate,
    CollaborationRespond,
    CollaborationRequestResponse,
    CollaborationRequestDetail,
    InvitationCreatedResponse,
)
from sharexconnect.services.collaboration_service import CollaborationService


router = APIRouter()


@router.post(
    "/projects/{project_id}/collaborate/request",
    response_model=CollaborationRequestResponse,
    status_code=status.HTTP_201_CREATED,
)
async def request_collaboration(
    project_id: str,
    body: CollaborationRequestCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Ask the project owner to be added as a collaborator"""
    return await CollaborationService(db).request_collaboration(project_id, current_user, body.message)


@router.post(
    "/projects/{project_id}/collaborators/invite",
    response_model=InvitationCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def invite_collaborator(
    project_id: str,
    body: InvitationCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Owner invites a registered user by email"""
    invitation = await CollaborationService(db).invite_by_email(
        project_id, body.email, current_user, body.message
    )
    return InvitationCreatedResponse(
        message="Invitation sent successfully",
        invitation=CollaborationRequestResponse.model_validate(invitation),
    )


@router.post(
    "/collaborate/requests/{request_id}/respond",
    response_model=CollaborationRequestResponse,
)
async def respond_to_request(
    request_id: str,
    body: CollaborationRespond,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Approve or reject a pending request or invitation. The owner answers
    requests; the invitee answers invitations.
    """
    return await CollaborationService(db).respond(request_id, RequestStatus(body.status), current_user)


@router.get(
    "/projects/{project_id}/collaborate/requests",
    response_model=List[CollaborationRequestDetail],
)
async def list_project_requests(
    project_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await CollaborationService(db).get_requests_for_user(project_id, current_user)


@router.get("/user/invitations", response_model=List[CollaborationRequestDetail])
async def list_my_invitations(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await CollaborationService(db).get_user_invitations(current_user)


@router.get("/owner/collaboration-requests", response_model=List[CollaborationRequestDetail])
async def list_owner_requests(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    return await CollaborationService(db).get_owner_requests(current_user)
