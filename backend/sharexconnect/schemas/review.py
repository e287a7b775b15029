from pydantic import BaseModel, Field, ConfigDict, field_validator
from typing import Optional
from datetime import datetime

from sharexconnect.models.review import ReviewStatus, LETTER_GRADES
from sharexconnect.schemas.auth import UserSummary
from sharexconnect.schemas.project import ProjectSummary


class ReviewerAssign(BaseModel):
    reviewer_id: str


class ReviewSubmit(BaseModel):
    grade: str = Field(..., description="Letter grade (A+ .. F) or a number 0-100")
    feedback: str = Field(..., min_length=1, max_length=5000)
    is_final: bool = False

    @field_validator('grade')
    @classmethod
    def validate_grade(cls, v: str) -> str:
        v = v.strip().upper()
        if v in LETTER_GRADES:
            return v
        if v.isdigit() and 0 <= int(v) <= 100:
            return v
        raise ValueError("Grade must be a letter grade (A+ to F) or a number from 0 to 100")


class ReviewResponse(BaseModel):
    id: str
    project_id: str
    reviewer_id: str
    status: ReviewStatus
    grade: Optional[int] = None
    letter_grade: Optional[str] = None
    feedback: Optional[str] = None
    is_final: bool
    is_read_by_student: bool
    created_at: datetime
    reviewer: Optional[UserSummary] = None

    model_config = ConfigDict(from_attributes=True)


class ReviewAssignmentResponse(ReviewResponse):
    project: ProjectSummary
