from pydantic import BaseModel, EmailStr, Field, ConfigDict, model_validator
from typing import Optional
from datetime import datetime

from sharexconnect.models.user import UserRole


class UserRegister(BaseModel):
    username: str = Field(..., min_length=3, max_length=30, pattern=r'^[A-Za-z0-9_.-]+$')
    email: EmailStr
    password: str = Field(..., min_length=8)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    role: UserRole = UserRole.STUDENT
    institution: Optional[str] = Field(None, max_length=255)

    # Faculty profile
    department: Optional[str] = Field(None, max_length=255)
    tech_expertise: Optional[str] = None
    bio: Optional[str] = None

    @model_validator(mode='after')
    def validate_role_fields(self):
        """Admins are provisioned, not self-registered; faculty need a department"""
        if self.role == UserRole.ADMIN:
            raise ValueError("Administrator accounts cannot be self-registered")
        if self.role == UserRole.FACULTY and not (self.department and self.department.strip()):
            raise ValueError("Department is required for faculty accounts")
        return self

    @property
    def college_domain(self) -> str:
        return self.email.split('@', 1)[1].lower()


class UserLogin(BaseModel):
    email: EmailStr
    password: str


class UserSummary(BaseModel):
    """Compact user shape embedded in other responses"""
    id: str
    username: str
    email: str
    first_name: str
    last_name: str
    role: UserRole
    institution: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class UserResponse(UserSummary):
    college_domain: Optional[str] = None
    department: Optional[str] = None
    tech_expertise: Optional[str] = None
    bio: Optional[str] = None
    is_active: bool
    is_verified: bool
    created_at: datetime


class LoginResponse(BaseModel):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    user: UserResponse
