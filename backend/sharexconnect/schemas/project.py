"""Pydantic schemas for projects, collaborators and project files"""
from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional, List
from datetime import datetime

from sharexconnect.models.project import ProjectStatus, ProjectVisibility
from sharexconnect.schemas.auth import UserSummary


# ==================== Project Schemas ====================

class ProjectCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1, max_length=100)
    visibility: ProjectVisibility = ProjectVisibility.PRIVATE
    tech_stack: List[str] = Field(default_factory=list)
    github_url: Optional[str] = Field(None, max_length=500)
    demo_url: Optional[str] = Field(None, max_length=500)
    allows_collaboration: bool = True
    requires_approval_for_collaboration: bool = True


class ProjectUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = Field(None, min_length=1, max_length=100)
    visibility: Optional[ProjectVisibility] = None
    status: Optional[ProjectStatus] = None
    tech_stack: Optional[List[str]] = None
    github_url: Optional[str] = Field(None, max_length=500)
    demo_url: Optional[str] = Field(None, max_length=500)
    allows_collaboration: Optional[bool] = None
    requires_approval_for_collaboration: Optional[bool] = None

    @field_validator('title', 'description', 'category', 'visibility', 'status',
                     'allows_collaboration', 'requires_approval_for_collaboration')
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("Field cannot be null")
        return v

    @field_validator('status')
    @classmethod
    def owner_settable_status(cls, v: Optional[ProjectStatus]) -> Optional[ProjectStatus]:
        if v is not None and v not in (ProjectStatus.DRAFT, ProjectStatus.SUBMITTED):
            raise ValueError("Project status can only be set to DRAFT or SUBMITTED; approval comes from a final faculty review")
        return v


class ProjectResponse(BaseModel):
    id: str
    owner_id: str
    title: str
    description: str
    category: str
    visibility: ProjectVisibility
    status: ProjectStatus
    tech_stack: Optional[List[str]] = None
    github_url: Optional[str] = None
    demo_url: Optional[str] = None
    allows_collaboration: bool
    requires_approval_for_collaboration: bool
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ProjectListResponse(BaseModel):
    items: List[ProjectResponse]
    total: int
    page: int
    page_size: int
    total_pages: int
    has_next: bool
    has_previous: bool


class ProjectSummary(BaseModel):
    id: str
    title: str
    owner_id: str
    visibility: ProjectVisibility

    model_config = ConfigDict(from_attributes=True)


# ==================== Collaborator Schemas ====================

class CollaboratorAdd(BaseModel):
    user_id: str


class CollaboratorResponse(UserSummary):
    """A collaborator's user profile plus when they joined"""
    added_at: datetime


# ==================== Project File Schemas ====================

class ProjectFileResponse(BaseModel):
    id: str
    project_id: str
    file_name: str
    file_path: str
    file_type: Optional[str] = None
    file_size: int
    is_archive: bool
    uploaded_by: Optional[str] = None
    uploaded_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ProjectFileUploadResponse(BaseModel):
    message: str
    file: ProjectFileResponse
