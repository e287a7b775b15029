"""
Unit Tests for ChangeRequestService
"""
import pytest

from sharexconnect.core.exceptions import (
    ChangeRequestNotFoundError,
    InvalidStateTransitionError,
    PermissionDeniedError,
    ValidationError,
)
from sharexconnect.models.change_request import ChangeRequestStatus, ChangeType
from sharexconnect.models.repository import RepositoryItemType
from sharexconnect.schemas.change_request import ChangeRequestCreate
from sharexconnect.schemas.repository import RepositoryItemCreate
from sharexconnect.services.change_request_service import ChangeRequestService
from sharexconnect.services.project_service import ProjectService
from sharexconnect.services.repository_service import RepositoryService


@pytest.fixture
async def collaborator(db_session, project, owner, student):
    await ProjectService(db_session).add_collaborator(project.id, student.id, owner)
    return student


@pytest.fixture
async def repo_file(db_session, project, owner):
    return await RepositoryService(db_session).create_item(
        project.id, owner,
        RepositoryItemCreate(path="app.py", name="app.py", type=RepositoryItemType.FILE, content="print(1)"),
    )


def suggestion(**overrides) -> ChangeRequestCreate:
    fields = dict(
        title="Use logging",
        description="Replace print with logging",
        change_type=ChangeType.MODIFY,
        proposed_changes="import logging",
    )
    fields.update(overrides)
    return ChangeRequestCreate(**fields)


class TestCreateChangeRequest:

    async def test_collaborator_creates_open_request(self, db_session, project, collaborator, repo_file):
        change_request = await ChangeRequestService(db_session).create_change_request(
            project.id, collaborator, suggestion(file_id=repo_file.id)
        )

        assert change_request.status == ChangeRequestStatus.OPEN
        assert change_request.file_id == repo_file.id
        assert change_request.requester.id == collaborator.id

    async def test_non_member_cannot_create(self, db_session, project, student):
        with pytest.raises(PermissionDeniedError):
            await ChangeRequestService(db_session).create_change_request(project.id, student, suggestion())

    async def test_file_must_belong_to_project(self, db_session, make_project, project, owner, collaborator):
        other = await make_project(owner)
        foreign = await RepositoryService(db_session).create_item(
            other.id, owner,
            RepositoryItemCreate(path="x.py", name="x.py", type=RepositoryItemType.FILE, content=""),
        )

        with pytest.raises(ValidationError):
            await ChangeRequestService(db_session).create_change_request(
                project.id, collaborator, suggestion(file_id=foreign.id)
            )


class TestReviewChangeRequest:

    @pytest.mark.parametrize("outcome", [
        ChangeRequestStatus.APPROVED,
        ChangeRequestStatus.REJECTED,
        ChangeRequestStatus.MERGED,
    ])
    async def test_owner_reviews_once(self, db_session, project, owner, collaborator, outcome):
        service = ChangeRequestService(db_session)
        change_request = await service.create_change_request(project.id, collaborator, suggestion())

        reviewed = await service.review_change_request(change_request.id, outcome, owner)

        assert reviewed.status == outcome
        assert reviewed.reviewed_by == owner.id
        assert reviewed.reviewed_at is not None

        with pytest.raises(InvalidStateTransitionError):
            await service.review_change_request(change_request.id, ChangeRequestStatus.APPROVED, owner)

    async def test_review_does_not_touch_file(self, db_session, project, owner, collaborator, repo_file):
        service = ChangeRequestService(db_session)
        change_request = await service.create_change_request(
            project.id, collaborator, suggestion(file_id=repo_file.id)
        )

        await service.review_change_request(change_request.id, ChangeRequestStatus.MERGED, owner)

        item = await RepositoryService(db_session).get_item(project.id, repo_file.id, owner)
        await db_session.refresh(item)
        assert item.content == "print(1)"

    async def test_collaborator_cannot_review(self, db_session, project, collaborator):
        service = ChangeRequestService(db_session)
        change_request = await service.create_change_request(project.id, collaborator, suggestion())

        with pytest.raises(PermissionDeniedError):
            await service.review_change_request(change_request.id, ChangeRequestStatus.APPROVED, collaborator)

    async def test_open_is_not_a_review_outcome(self, db_session, project, owner, collaborator):
        service = ChangeRequestService(db_session)
        change_request = await service.create_change_request(project.id, collaborator, suggestion())

        with pytest.raises(ValidationError):
            await service.review_change_request(change_request.id, ChangeRequestStatus.OPEN, owner)

    async def test_missing_change_request(self, db_session, owner):
        with pytest.raises(ChangeRequestNotFoundError):
            await ChangeRequestService(db_session).review_change_request(
                "missing", ChangeRequestStatus.APPROVED, owner
            )

    async def test_list_newest_first(self, db_session, project, owner, collaborator):
        service = ChangeRequestService(db_session)
        first = await service.create_change_request(project.id, collaborator, suggestion(title="First"))
        second = await service.create_change_request(project.id, collaborator, suggestion(title="Second"))

        listed = await service.list_change_requests(project.id, owner)

        assert [cr.id for cr in listed] == [second.id, first.id]
