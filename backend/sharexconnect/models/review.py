"""Faculty review models: reviewer assignment and graded feedback"""
from sqlalchemy import Column, String, DateTime, Integer, Text, ForeignKey, Boolean, Index, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from sharexconnect.core.database import Base
from sharexconnect.core.types import GUID, generate_uuid


class ReviewStatus(str, enum.Enum):
    PENDING = "PENDING"      # Reviewer assigned, nothing submitted yet
    COMPLETED = "COMPLETED"


# Letter grade -> stored numeric grade
LETTER_GRADES = {
    "A+": 97, "A": 93, "A-": 90,
    "B+": 87, "B": 83, "B-": 80,
    "C+": 77, "C": 73, "C-": 70,
    "D+": 67, "D": 63, "D-": 60,
    "F": 0,
}


def letter_for_grade(grade: int) -> str:
    """Highest letter whose threshold the numeric grade reaches"""
    for letter, threshold in sorted(LETTER_GRADES.items(), key=lambda kv: kv[1], reverse=True):
        if grade >= threshold:
            return letter
    return "F"


class ProjectReview(Base):
    """
    Faculty review of a project.

    A PENDING row is an assignment; each submitted review is a new
    COMPLETED row. At most one review per project may be final, and the
    final review is what moves the project to APPROVED.
    """
    __tablename__ = "project_reviews"

    __table_args__ = (
        Index('ix_project_reviews_project_id', 'project_id'),
        Index('ix_project_reviews_reviewer_id', 'reviewer_id'),
        Index('ix_project_reviews_project_final', 'project_id', 'is_final'),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    project_id = Column(GUID, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    reviewer_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    status = Column(SQLEnum(ReviewStatus), default=ReviewStatus.PENDING, nullable=False)
    grade = Column(Integer, nullable=True)  # 0-100
    letter_grade = Column(String(2), nullable=True)
    feedback = Column(Text, nullable=True)
    is_final = Column(Boolean, default=False, nullable=False)
    is_read_by_student = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    project = relationship("Project")
    reviewer = relationship("User")

    def __repr__(self):
        return f"<ProjectReview {self.project_id} by {self.reviewer_id} {self.status.value if self.status else '?'}>"
