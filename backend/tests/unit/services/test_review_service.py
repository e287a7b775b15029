"""
Unit Tests for ReviewService
Tests for: reviewer assignment, grading, final approval
"""
import pytest

from sharexconnect.core.exceptions import (
    InvalidStateTransitionError,
    PermissionDeniedError,
    ValidationError,
)
from sharexconnect.models.project import ProjectStatus, ProjectVisibility
from sharexconnect.models.review import ReviewStatus, letter_for_grade
from sharexconnect.models.user import UserRole
from sharexconnect.schemas.review import ReviewSubmit
from sharexconnect.services.project_service import ProjectService
from sharexconnect.services.review_service import ReviewService, parse_grade


@pytest.fixture
async def submitted_project(make_project, owner):
    return await make_project(owner, status=ProjectStatus.SUBMITTED, visibility=ProjectVisibility.PRIVATE)


@pytest.fixture
async def assignment(db_session, submitted_project, faculty, admin_user):
    return await ReviewService(db_session).assign_reviewer(submitted_project.id, faculty.id, admin_user)


class TestAssignReviewer:

    async def test_assignment_moves_project_under_review(self, db_session, submitted_project, assignment, faculty):
        assert assignment.status == ReviewStatus.PENDING
        assert assignment.reviewer.id == faculty.id

        project = await ProjectService(db_session).get_project(submitted_project.id)
        assert project.status == ProjectStatus.UNDER_REVIEW

    async def test_reassignment_reuses_pending_row(self, db_session, submitted_project, assignment, faculty, admin_user):
        again = await ReviewService(db_session).assign_reviewer(submitted_project.id, faculty.id, admin_user)

        assert again.id == assignment.id

    async def test_reviewer_must_be_faculty(self, db_session, submitted_project, student, admin_user):
        with pytest.raises(ValidationError):
            await ReviewService(db_session).assign_reviewer(submitted_project.id, student.id, admin_user)

    async def test_assigned_reviewer_sees_assignment(self, db_session, assignment, faculty, submitted_project):
        assignments = await ReviewService(db_session).list_assignments(faculty)

        assert [a.project.id for a in assignments] == [submitted_project.id]

    async def test_reviewer_can_view_private_project(self, db_session, assignment, faculty, submitted_project):
        assert await ProjectService(db_session).can_view(submitted_project, faculty)


class TestSubmitReview:

    async def test_unassigned_faculty_cannot_review(self, db_session, submitted_project, make_user):
        stranger = await make_user(role=UserRole.FACULTY)

        with pytest.raises(PermissionDeniedError):
            await ReviewService(db_session).submit_review(
                submitted_project.id, stranger, ReviewSubmit(grade="B", feedback="ok")
            )

    async def test_interim_review_keeps_status(self, db_session, submitted_project, assignment, faculty):
        review = await ReviewService(db_session).submit_review(
            submitted_project.id, faculty, ReviewSubmit(grade="85", feedback="Solid start")
        )

        assert review.status == ReviewStatus.COMPLETED
        assert review.grade == 85
        assert review.letter_grade == "B"
        assert review.is_final is False
        project = await ProjectService(db_session).get_project(submitted_project.id)
        await db_session.refresh(project)
        assert project.status == ProjectStatus.UNDER_REVIEW

    async def test_final_review_approves_once(self, db_session, submitted_project, assignment, faculty):
        service = ReviewService(db_session)

        review = await service.submit_review(
            submitted_project.id, faculty, ReviewSubmit(grade="A-", feedback="Great work", is_final=True)
        )

        assert review.grade == 90
        assert review.is_final is True
        project = await ProjectService(db_session).get_project(submitted_project.id)
        await db_session.refresh(project)
        assert project.status == ProjectStatus.APPROVED

        with pytest.raises(InvalidStateTransitionError):
            await service.submit_review(
                submitted_project.id, faculty, ReviewSubmit(grade="A", feedback="Again", is_final=True)
            )

    async def test_final_review_completes_assignment(self, db_session, submitted_project, assignment, faculty):
        service = ReviewService(db_session)
        await service.submit_review(
            submitted_project.id, faculty, ReviewSubmit(grade="C", feedback="Passing", is_final=True)
        )

        assert await service.list_assignments(faculty) == []

    async def test_owner_reads_reviews_and_marks_them(self, db_session, submitted_project, assignment, faculty, owner):
        service = ReviewService(db_session)
        review = await service.submit_review(
            submitted_project.id, faculty, ReviewSubmit(grade="B+", feedback="Nice")
        )

        reviews = await service.list_project_reviews(submitted_project.id, owner)
        assert [r.id for r in reviews] == [review.id]

        marked = await service.mark_read(review.id, owner)
        assert marked.is_read_by_student is True

    async def test_outsider_cannot_list_reviews(self, db_session, submitted_project, student):
        with pytest.raises(PermissionDeniedError):
            await ReviewService(db_session).list_project_reviews(submitted_project.id, student)


class TestGrades:

    @pytest.mark.parametrize("raw,expected", [
        ("A+", (97, "A+")),
        ("b-", (80, "B-")),
        ("100", (100, "A+")),
        ("59", (59, "F")),
        ("0", (0, "F")),
    ])
    def test_parse_grade(self, raw, expected):
        assert parse_grade(raw) == expected

    def test_letter_thresholds(self):
        assert letter_for_grade(93) == "A"
        assert letter_for_grade(92) == "A-"
        assert letter_for_grade(60) == "D-"
