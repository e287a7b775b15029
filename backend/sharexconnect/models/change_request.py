from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Index, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from sharexconnect.core.database import Base
from sharexconnect.core.types import GUID, generate_uuid


class ChangeType(str, enum.Enum):
    ADD = "ADD"
    MODIFY = "MODIFY"
    DELETE = "DELETE"
    SUGGEST = "SUGGEST"


class ChangeRequestStatus(str, enum.Enum):
    OPEN = "OPEN"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    MERGED = "MERGED"


class ProjectChangeRequest(Base):
    """
    Single-file suggestion against a project.

    Reviewing records the decision only; `proposed_changes` is never
    applied to the referenced repository item automatically.
    """
    __tablename__ = "project_change_requests"

    __table_args__ = (
        Index('ix_project_change_requests_project_id', 'project_id'),
        Index('ix_project_change_requests_status', 'status'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    project_id = Column(GUID, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    requester_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    file_id = Column(GUID, ForeignKey("project_repository.id", ondelete="SET NULL"), nullable=True)

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    change_type = Column(SQLEnum(ChangeType), nullable=False)
    proposed_changes = Column(Text, nullable=True)
    status = Column(SQLEnum(ChangeRequestStatus), default=ChangeRequestStatus.OPEN, nullable=False)

    reviewed_by = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    reviewed_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    requester = relationship("User", foreign_keys=[requester_id])
    reviewer = relationship("User", foreign_keys=[reviewed_by])
    file = relationship("ProjectRepositoryItem")

    def __repr__(self):
        return f"<ProjectChangeRequest {self.title} {self.status.value if self.status else '?'}>"
