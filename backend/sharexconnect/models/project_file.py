from sqlalchemy import Column, String, DateTime, Integer, ForeignKey, Boolean, Index, LargeBinary
from sqlalchemy.orm import relationship
from datetime import datetime

from sharexconnect.core.database import Base
from sharexconnect.core.types import GUID, generate_uuid


class ProjectFile(Base):
    """
    Permanent project file.

    Rows come from two places: a direct upload by the project owner, or a
    merged pull request copying its staged PullRequestFile rows across.
    File bytes are stored inline.
    """
    __tablename__ = "project_files"

    __table_args__ = (
        Index('ix_project_files_project_id', 'project_id'),
        Index('ix_project_files_project_path', 'project_id', 'file_path'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    project_id = Column(GUID, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    uploaded_by = Column(GUID, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    file_name = Column(String(255), nullable=False)
    file_path = Column(String(1000), nullable=False)
    file_type = Column(String(100), nullable=True)  # MIME type
    file_size = Column(Integer, default=0, nullable=False)
    content = Column(LargeBinary, nullable=True)
    is_archive = Column(Boolean, default=False, nullable=False)

    uploaded_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    project = relationship("Project", back_populates="files")

    def __repr__(self):
        return f"<ProjectFile {self.file_path}>"
