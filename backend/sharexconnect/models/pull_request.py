from sqlalchemy import Column, String, DateTime, Integer, Text, ForeignKey, Boolean, Index, LargeBinary, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from sharexconnect.core.database import Base
from sharexconnect.core.types import GUID, StringList, generate_uuid


class PullRequestStatus(str, enum.Enum):
    OPEN = "OPEN"
    DRAFT = "DRAFT"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    MERGED = "MERGED"


# Allowed owner transitions; terminal states map to an empty set
PULL_REQUEST_TRANSITIONS = {
    PullRequestStatus.OPEN: {PullRequestStatus.APPROVED, PullRequestStatus.REJECTED, PullRequestStatus.MERGED},
    PullRequestStatus.DRAFT: {PullRequestStatus.APPROVED, PullRequestStatus.REJECTED, PullRequestStatus.MERGED},
    PullRequestStatus.APPROVED: {PullRequestStatus.MERGED, PullRequestStatus.REJECTED},
    PullRequestStatus.REJECTED: set(),
    PullRequestStatus.MERGED: set(),
}

TERMINAL_PULL_REQUEST_STATUSES = frozenset({PullRequestStatus.REJECTED, PullRequestStatus.MERGED})


class ProjectPullRequest(Base):
    """Collaborator-submitted bundle of file changes awaiting owner review"""
    __tablename__ = "project_pull_requests"

    __table_args__ = (
        Index('ix_project_pull_requests_project_id', 'project_id'),
        Index('ix_project_pull_requests_author_id', 'author_id'),
        Index('ix_project_pull_requests_project_status', 'project_id', 'status'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    project_id = Column(GUID, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    author_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    branch_name = Column(String(100), default="feature-branch", nullable=False)
    status = Column(SQLEnum(PullRequestStatus), default=PullRequestStatus.OPEN, nullable=False)

    files_changed = Column(StringList, nullable=False, default=list)  # ["src/app.py", "README.md"]
    changes_preview = Column(Text, nullable=True)

    reviewed_by = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    reviewed_at = Column(DateTime, nullable=True)
    merged_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    author = relationship("User", foreign_keys=[author_id])
    reviewer = relationship("User", foreign_keys=[reviewed_by])
    files = relationship("PullRequestFile", back_populates="pull_request", cascade="all, delete-orphan", passive_deletes=True)

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_PULL_REQUEST_STATUSES

    def can_transition_to(self, status: PullRequestStatus) -> bool:
        return status in PULL_REQUEST_TRANSITIONS.get(self.status, set())

    def __repr__(self):
        return f"<ProjectPullRequest {self.title} {self.status.value if self.status else '?'}>"


class PullRequestFile(Base):
    """
    File staged on a pull request.

    Single-use: a merge copies each row into ProjectFile and deletes it.
    """
    __tablename__ = "pull_request_files"

    __table_args__ = (
        Index('ix_pull_request_files_pull_request_id', 'pull_request_id'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    pull_request_id = Column(GUID, ForeignKey("project_pull_requests.id", ondelete="CASCADE"), nullable=False)

    file_name = Column(String(255), nullable=False)
    file_path = Column(String(1000), nullable=False)
    file_type = Column(String(100), nullable=True)
    file_size = Column(Integer, default=0, nullable=False)
    content = Column(LargeBinary, nullable=True)
    is_archive = Column(Boolean, default=False, nullable=False)

    uploaded_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    pull_request = relationship("ProjectPullRequest", back_populates="files")

    def __repr__(self):
        return f"<PullRequestFile {self.file_name}>"
