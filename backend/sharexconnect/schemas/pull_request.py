"""Pydantic schemas for pull requests and their staged files"""
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, List, Literal
from datetime import datetime

from sharexconnect.models.pull_request import PullRequestStatus
from sharexconnect.schemas.auth import UserSummary


class PullRequestCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1, max_length=2000)
    branch_name: str = Field("feature-branch", min_length=1, max_length=100)
    files_changed: List[str] = Field(default_factory=list)
    changes_preview: Optional[str] = None

    @field_validator('title', 'description', 'branch_name')
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v.strip()


class AutoPullRequestCreate(BaseModel):
    """Collaborator shortcut; title and branch are generated"""
    files_changed: List[str] = Field(default_factory=list)
    changes_preview: Optional[str] = None
    description: Optional[str] = Field(None, max_length=2000)


class PullRequestStatusUpdate(BaseModel):
    status: Literal["APPROVED", "REJECTED", "MERGED"]


class PullRequestFileResponse(BaseModel):
    id: str
    pull_request_id: str
    file_name: str
    file_path: str
    file_type: Optional[str] = None
    file_size: int
    is_archive: bool
    uploaded_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PullRequestResponse(BaseModel):
    id: str
    project_id: str
    author_id: str
    title: str
    description: str
    branch_name: str
    status: PullRequestStatus
    files_changed: List[str] = Field(default_factory=list)
    changes_preview: Optional[str] = None
    reviewed_by: Optional[str] = None
    reviewed_at: Optional[datetime] = None
    merged_at: Optional[datetime] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    author: Optional[UserSummary] = None

    model_config = ConfigDict(from_attributes=True)


class PullRequestDetail(PullRequestResponse):
    files: List[PullRequestFileResponse] = Field(default_factory=list)


class PullRequestCreatedResponse(BaseModel):
    message: str
    pull_request: PullRequestResponse
    files_uploaded: int
