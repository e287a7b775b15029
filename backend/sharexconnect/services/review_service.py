"""
Review Service - faculty assignment, grading and final approval

A final review is the only way a project reaches APPROVED. The status
change is a guarded UPDATE (`status != 'APPROVED'`), so at most one final
review can land per project.
"""

from datetime import datetime
from typing import List

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from sharexconnect.core.exceptions import (
    ReviewNotFoundError,
    UserNotFoundError,
    PermissionDeniedError,
    ValidationError,
    InvalidStateTransitionError,
)
from sharexconnect.core.logging_config import logger
from sharexconnect.models.project import Project, ProjectStatus
from sharexconnect.models.review import ProjectReview, ReviewStatus, LETTER_GRADES, letter_for_grade
from sharexconnect.models.user import User, UserRole
from sharexconnect.schemas.review import ReviewSubmit
from sharexconnect.services.project_service import ProjectService


def parse_grade(grade: str):
    """Return (numeric, letter) for a letter grade or a 0-100 number"""
    grade = grade.strip().upper()
    if grade in LETTER_GRADES:
        return LETTER_GRADES[grade], grade
    numeric = int(grade)
    return numeric, letter_for_grade(numeric)


class ReviewService:

    def __init__(self, db: AsyncSession):
        self.db = db
        self.projects = ProjectService(db)

    async def assign_reviewer(self, project_id: str, reviewer_id: str, admin: User) -> ProjectReview:
        """Admin assigns a faculty member; a SUBMITTED project moves to UNDER_REVIEW"""
        project = await self.projects.get_project(project_id)

        result = await self.db.execute(select(User).where(User.id == reviewer_id))
        reviewer = result.scalar_one_or_none()
        if not reviewer or not reviewer.is_active:
            raise UserNotFoundError(reviewer_id)
        if reviewer.role != UserRole.FACULTY:
            raise ValidationError("Reviewers must be faculty members", field="reviewer_id")
        if reviewer.id == project.owner_id:
            raise ValidationError("Project owners cannot review their own projects", field="reviewer_id")

        existing = await self.db.execute(
            select(ProjectReview).where(
                ProjectReview.project_id == project_id,
                ProjectReview.reviewer_id == reviewer_id,
                ProjectReview.status == ReviewStatus.PENDING,
            )
        )
        assignment = existing.scalars().first()
        if assignment is None:
            assignment = ProjectReview(
                project_id=project_id,
                reviewer_id=reviewer_id,
                status=ReviewStatus.PENDING,
            )
            self.db.add(assignment)

        if project.status == ProjectStatus.SUBMITTED:
            project.status = ProjectStatus.UNDER_REVIEW
            project.updated_at = datetime.utcnow()

        await self.db.commit()
        logger.log_workflow_event(
            "Project", project_id, "reviewer_assigned", reviewer_id=reviewer_id, admin_id=admin.id,
        )
        return await self._load(assignment.id)

    async def _load(self, review_id: str) -> ProjectReview:
        result = await self.db.execute(
            select(ProjectReview)
            .options(selectinload(ProjectReview.reviewer), selectinload(ProjectReview.project))
            .where(ProjectReview.id == review_id)
            .execution_options(populate_existing=True)
        )
        review = result.scalar_one_or_none()
        if not review:
            raise ReviewNotFoundError(review_id)
        return review

    async def list_assignments(self, faculty: User) -> List[ProjectReview]:
        """Open assignments for a faculty member"""
        result = await self.db.execute(
            select(ProjectReview)
            .options(selectinload(ProjectReview.reviewer), selectinload(ProjectReview.project))
            .where(
                ProjectReview.reviewer_id == faculty.id,
                ProjectReview.status == ReviewStatus.PENDING,
            )
            .order_by(ProjectReview.created_at.asc())
        )
        return list(result.scalars().all())

    async def submit_review(self, project_id: str, reviewer: User, data: ReviewSubmit) -> ProjectReview:
        """Record a graded review; a final one approves the project"""
        await self.projects.get_project(project_id)
        if not await self.projects.is_reviewer(project_id, reviewer.id):
            raise PermissionDeniedError("You are not assigned to review this project")

        numeric, letter = parse_grade(data.grade)
        now = datetime.utcnow()

        if data.is_final:
            result = await self.db.execute(
                update(Project)
                .where(Project.id == project_id, Project.status != ProjectStatus.APPROVED)
                .values(status=ProjectStatus.APPROVED, updated_at=now)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise InvalidStateTransitionError(
                    "This project already has a final review. No more reviews can be submitted.",
                    current_status=ProjectStatus.APPROVED.value,
                )
            await self.db.execute(
                update(ProjectReview)
                .where(ProjectReview.project_id == project_id, ProjectReview.status == ReviewStatus.PENDING)
                .values(status=ReviewStatus.COMPLETED, updated_at=now)
                .execution_options(synchronize_session=False)
            )

        review = ProjectReview(
            project_id=project_id,
            reviewer_id=reviewer.id,
            status=ReviewStatus.COMPLETED,
            grade=numeric,
            letter_grade=letter,
            feedback=data.feedback,
            is_final=data.is_final,
        )
        self.db.add(review)
        await self.db.commit()

        logger.log_workflow_event(
            "ProjectReview", review.id, "final_submitted" if data.is_final else "submitted",
            project_id=project_id, reviewer_id=reviewer.id, grade=letter,
        )
        return await self._load(review.id)

    async def list_project_reviews(self, project_id: str, user: User) -> List[ProjectReview]:
        """Completed reviews, newest first"""
        project = await self.projects.get_project(project_id)
        allowed = (
            user.role == UserRole.ADMIN
            or await self.projects.is_member(project, user)
            or await self.projects.is_reviewer(project_id, user.id)
        )
        if not allowed:
            raise PermissionDeniedError("You do not have access to this project's reviews")

        result = await self.db.execute(
            select(ProjectReview)
            .options(selectinload(ProjectReview.reviewer))
            .where(ProjectReview.project_id == project_id, ProjectReview.status == ReviewStatus.COMPLETED)
            .order_by(ProjectReview.created_at.desc())
        )
        return list(result.scalars().all())

    async def mark_read(self, review_id: str, user: User) -> ProjectReview:
        review = await self._load(review_id)
        await self.projects.require_owner(
            review.project_id, user, "Only the project owner can mark reviews as read"
        )
        review.is_read_by_student = True
        await self.db.commit()
        return await self._load(review_id)
