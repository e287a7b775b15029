from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional
from datetime import datetime

from sharexconnect.models.repository import RepositoryItemType


class RepositoryItemCreate(BaseModel):
    path: str = Field(..., min_length=1, max_length=500)
    name: str = Field(..., min_length=1, max_length=255)
    type: RepositoryItemType
    content: Optional[str] = None
    parent_id: Optional[str] = None
    language: Optional[str] = Field(None, max_length=50)
    size: Optional[int] = Field(None, ge=0)


class RepositoryItemUpdate(BaseModel):
    """Partial update; a supplied `content` replaces the stored content"""
    path: Optional[str] = Field(None, min_length=1, max_length=500)
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    content: Optional[str] = None
    parent_id: Optional[str] = None
    language: Optional[str] = Field(None, max_length=50)

    @field_validator('path', 'name')
    @classmethod
    def not_null(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("Field cannot be null")
        return v


class RepositoryItemResponse(BaseModel):
    id: str
    project_id: str
    parent_id: Optional[str] = None
    path: str
    name: str
    type: RepositoryItemType
    content: Optional[str] = None
    size: int
    language: Optional[str] = None
    last_modified_by: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
