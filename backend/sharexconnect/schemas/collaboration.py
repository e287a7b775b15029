"""Pydantic schemas for collaboration requests and invitations"""
from pydantic import BaseModel, EmailStr, Field, ConfigDict
from typing import Optional, Literal
from datetime import datetime

from sharexconnect.models.collaboration import RequestType, RequestStatus
from sharexconnect.schemas.auth import UserSummary
from sharexconnect.schemas.project import ProjectSummary


class CollaborationRequestCreate(BaseModel):
    """Ask a project owner to join"""
    message: Optional[str] = Field(None, max_length=1000)


class InvitationCreate(BaseModel):
    """Owner invites a user by email"""
    email: EmailStr
    message: Optional[str] = Field(None, max_length=1000)


class CollaborationRespond(BaseModel):
    status: Literal["APPROVED", "REJECTED"]


class CollaborationRequestResponse(BaseModel):
    id: str
    project_id: str
    type: RequestType
    requester_id: Optional[str] = None
    invitee_id: Optional[str] = None
    sender_id: str
    message: Optional[str] = None
    status: RequestStatus
    created_at: datetime
    responded_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CollaborationRequestDetail(CollaborationRequestResponse):
    """Request with the project and parties loaded, for inbox views"""
    project: ProjectSummary
    sender: UserSummary
    requester: Optional[UserSummary] = None
    invitee: Optional[UserSummary] = None


class InvitationCreatedResponse(BaseModel):
    message: str
    invitation: CollaborationRequestResponse
