from sqlalchemy import Column, String, DateTime, Integer, Text, ForeignKey, Index, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from sharexconnect.core.database import Base
from sharexconnect.core.types import GUID, generate_uuid


class RepositoryItemType(str, enum.Enum):
    FILE = "FILE"
    FOLDER = "FOLDER"


class ProjectRepositoryItem(Base):
    """
    Node in a project's browsable file tree.

    `parent_id` points at a FOLDER in the same project. Deleting a folder
    removes its subtree through ON DELETE CASCADE. Updates replace
    `content` wholesale; there is no history.
    """
    __tablename__ = "project_repository"

    __table_args__ = (
        Index('ix_project_repository_project_id', 'project_id'),
        Index('ix_project_repository_parent_id', 'parent_id'),
        Index('ix_project_repository_project_path', 'project_id', 'path'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    project_id = Column(GUID, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    parent_id = Column(GUID, ForeignKey("project_repository.id", ondelete="CASCADE"), nullable=True)

    path = Column(String(500), nullable=False)  # e.g. "src/app.py"
    name = Column(String(255), nullable=False)  # e.g. "app.py"
    type = Column(SQLEnum(RepositoryItemType), nullable=False)
    content = Column(Text, nullable=True)
    size = Column(Integer, default=0, nullable=False)
    language = Column(String(50), nullable=True)

    last_modified_by = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    children = relationship(
        "ProjectRepositoryItem",
        back_populates="parent",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    parent = relationship("ProjectRepositoryItem", back_populates="children", remote_side=[id])

    @property
    def is_folder(self) -> bool:
        return self.type == RepositoryItemType.FOLDER

    def __repr__(self):
        return f"<ProjectRepositoryItem {self.type.value if self.type else '?'} {self.path}>"
