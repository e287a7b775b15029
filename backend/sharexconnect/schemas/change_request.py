from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, Literal
from datetime import datetime

from sharexconnect.models.change_request import ChangeType, ChangeRequestStatus
from sharexconnect.schemas.auth import UserSummary


class ChangeRequestCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    change_type: ChangeType
    file_id: Optional[str] = None
    proposed_changes: Optional[str] = None


class ChangeRequestReview(BaseModel):
    status: Literal["APPROVED", "REJECTED", "MERGED"]


class ChangeRequestResponse(BaseModel):
    id: str
    project_id: str
    requester_id: str
    file_id: Optional[str] = None
    title: str
    description: str
    change_type: ChangeType
    proposed_changes: Optional[str] = None
    status: ChangeRequestStatus
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    created_at: datetime
    requester: Optional[UserSummary] = None

    model_config = ConfigDict(from_attributes=True)
