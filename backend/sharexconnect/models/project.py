from sqlalchemy import Column, String, DateTime, Enum as SQLEnum, Text, ForeignKey, Boolean, Index
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from sharexconnect.core.database import Base
from sharexconnect.core.types import GUID, StringList, generate_uuid


class ProjectVisibility(str, enum.Enum):
    """Who can see a project"""
    PRIVATE = "PRIVATE"          # Owner and collaborators
    INSTITUTION = "INSTITUTION"  # Anyone from the owner's institution
    PUBLIC = "PUBLIC"


class ProjectStatus(str, enum.Enum):
    """Academic lifecycle; APPROVED is only set by a final faculty review"""
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    UNDER_REVIEW = "UNDER_REVIEW"
    APPROVED = "APPROVED"


class Project(Base):
    """Project model"""
    __tablename__ = "projects"

    __table_args__ = (
        Index('ix_projects_owner_id', 'owner_id'),
        Index('ix_projects_visibility', 'visibility'),
        Index('ix_projects_status', 'status'),
        Index('ix_projects_created_at', 'created_at'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    owner_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(100), nullable=False)
    visibility = Column(SQLEnum(ProjectVisibility), default=ProjectVisibility.PRIVATE, nullable=False)
    status = Column(SQLEnum(ProjectStatus), default=ProjectStatus.DRAFT, nullable=False)
    tech_stack = Column(StringList, nullable=True)  # ["react", "fastapi"]
    github_url = Column(String(500), nullable=True)
    demo_url = Column(String(500), nullable=True)

    # Collaboration settings
    allows_collaboration = Column(Boolean, default=True, nullable=False)
    requires_approval_for_collaboration = Column(Boolean, default=True, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    owner = relationship("User", back_populates="projects")
    collaborators = relationship("ProjectCollaborator", back_populates="project", cascade="all, delete-orphan", passive_deletes=True)
    files = relationship("ProjectFile", back_populates="project", cascade="all, delete-orphan", passive_deletes=True)

    def __repr__(self):
        return f"<Project {self.title}>"


class ProjectCollaborator(Base):
    """Membership row granting a user write access to a project"""
    __tablename__ = "project_collaborators"

    __table_args__ = (
        Index('ix_project_collaborators_project_id', 'project_id'),
        Index('ix_project_collaborators_user_id', 'user_id'),
        Index('ix_project_collaborators_project_user', 'project_id', 'user_id', unique=True),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    project_id = Column(GUID, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    added_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    project = relationship("Project", back_populates="collaborators")
    user = relationship("User", back_populates="collaborations")

    def __repr__(self):
        return f"<ProjectCollaborator {self.user_id} on {self.project_id}>"
