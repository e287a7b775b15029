"""
Unit Tests for CollaborationService
Tests for: join requests, invitations, one-shot responses, role-scoped listing
"""
import pytest

from sharexconnect.core.config import settings
from sharexconnect.core.exceptions import (
    CollaborationRequestNotFoundError,
    InvalidStateTransitionError,
    PermissionDeniedError,
    ProjectNotFoundError,
    UserNotFoundError,
    ValidationError,
)
from sharexconnect.models.collaboration import RequestStatus, RequestType
from sharexconnect.models.user import UserRole
from sharexconnect.services.collaboration_service import CollaborationService
from sharexconnect.services.project_service import ProjectService


class TestRequestCollaboration:
    """Test creating join requests"""

    async def test_creates_pending_request(self, db_session, project, student):
        service = CollaborationService(db_session)

        request = await service.request_collaboration(project.id, student, "let me help")

        assert request.type == RequestType.REQUEST
        assert request.status == RequestStatus.PENDING
        assert request.requester_id == student.id
        assert request.invitee_id is None
        assert request.sender_id == student.id
        assert request.message == "let me help"

    async def test_missing_project(self, db_session, student):
        with pytest.raises(ProjectNotFoundError):
            await CollaborationService(db_session).request_collaboration("missing-project", student)

    async def test_owner_cannot_request(self, db_session, project, owner):
        with pytest.raises(ValidationError):
            await CollaborationService(db_session).request_collaboration(project.id, owner)

    async def test_project_closed_to_collaboration(self, db_session, make_project, owner, student):
        closed = await make_project(owner, allows_collaboration=False)

        with pytest.raises(ValidationError):
            await CollaborationService(db_session).request_collaboration(closed.id, student)

    async def test_existing_collaborator_cannot_request(self, db_session, project, owner, student):
        await ProjectService(db_session).add_collaborator(project.id, student.id, owner)

        with pytest.raises(ValidationError):
            await CollaborationService(db_session).request_collaboration(project.id, student)

    async def test_duplicate_pending_request_rejected(self, db_session, project, student):
        service = CollaborationService(db_session)
        await service.request_collaboration(project.id, student)

        with pytest.raises(ValidationError) as exc_info:
            await service.request_collaboration(project.id, student)

        assert "pending" in exc_info.value.message

    async def test_duplicate_pending_request_allowed_by_setting(self, db_session, project, student, monkeypatch):
        monkeypatch.setattr(settings, "ALLOW_DUPLICATE_PENDING_REQUESTS", True)
        service = CollaborationService(db_session)

        first = await service.request_collaboration(project.id, student)
        second = await service.request_collaboration(project.id, student)

        assert first.id != second.id

    async def test_project_without_approval_admits_requester(self, db_session, make_project, owner, student):
        open_project = await make_project(owner, requires_approval_for_collaboration=False)

        request = await CollaborationService(db_session).request_collaboration(open_project.id, student)

        assert request.status == RequestStatus.APPROVED
        assert request.responded_at is not None
        assert await ProjectService(db_session).is_collaborator(open_project.id, student.id)

    async def test_settings_not_enforced_is_plain_insert(self, db_session, make_project, owner, student, monkeypatch):
        monkeypatch.setattr(settings, "ENFORCE_COLLABORATION_SETTINGS", False)
        closed = await make_project(
            owner, allows_collaboration=False, requires_approval_for_collaboration=False
        )
        service = CollaborationService(db_session)

        from_owner = await service.request_collaboration(closed.id, owner)
        from_student = await service.request_collaboration(closed.id, student)

        assert from_owner.status == RequestStatus.PENDING
        assert from_student.status == RequestStatus.PENDING
        assert not await ProjectService(db_session).is_collaborator(closed.id, student.id)


class TestInviteCollaborator:
    """Test owner invitations"""

    async def test_invite_uses_default_message(self, db_session, project, owner, faculty):
        invitation = await CollaborationService(db_session).invite_collaborator(project.id, faculty.id, owner)

        assert invitation.type == RequestType.INVITATION
        assert invitation.invitee_id == faculty.id
        assert invitation.requester_id is None
        assert invitation.sender_id == owner.id
        assert invitation.message == settings.DEFAULT_INVITATION_MESSAGE

    async def test_only_owner_can_invite(self, db_session, project, student, faculty):
        with pytest.raises(PermissionDeniedError):
            await CollaborationService(db_session).invite_collaborator(project.id, faculty.id, student)

    async def test_cannot_invite_existing_collaborator(self, db_session, project, owner, student):
        await ProjectService(db_session).add_collaborator(project.id, student.id, owner)

        with pytest.raises(ValidationError) as exc_info:
            await CollaborationService(db_session).invite_collaborator(project.id, student.id, owner)

        assert exc_info.value.message == "User is already a collaborator on this project"

    async def test_cannot_invite_owner(self, db_session, project, owner):
        with pytest.raises(ValidationError):
            await CollaborationService(db_session).invite_collaborator(project.id, owner.id, owner)

    async def test_invite_by_email(self, db_session, project, owner, faculty):
        invitation = await CollaborationService(db_session).invite_by_email(
            project.id, faculty.email.upper(), owner, "join us"
        )

        assert invitation.invitee_id == faculty.id
        assert invitation.message == "join us"

    async def test_invite_unknown_email(self, db_session, project, owner):
        with pytest.raises(UserNotFoundError):
            await CollaborationService(db_session).invite_by_email(project.id, "nobody@example.org", owner)


class TestRespond:
    """Test the one-shot PENDING -> APPROVED/REJECTED transition"""

    async def test_approve_request_adds_requester(self, db_session, project, owner, student):
        service = CollaborationService(db_session)
        request = await service.request_collaboration(project.id, student)

        updated = await service.respond(request.id, RequestStatus.APPROVED, owner)

        assert updated.status == RequestStatus.APPROVED
        assert updated.responded_at is not None
        assert await ProjectService(db_session).is_collaborator(project.id, student.id)

    async def test_approve_invitation_adds_invitee(self, db_session, project, owner, faculty):
        service = CollaborationService(db_session)
        invitation = await service.invite_collaborator(project.id, faculty.id, owner)

        await service.respond(invitation.id, RequestStatus.APPROVED, faculty)

        assert await ProjectService(db_session).is_collaborator(project.id, faculty.id)

    async def test_reject_does_not_add_collaborator(self, db_session, project, owner, student):
        service = CollaborationService(db_session)
        request = await service.request_collaboration(project.id, student)

        updated = await service.respond(request.id, RequestStatus.REJECTED, owner)

        assert updated.status == RequestStatus.REJECTED
        assert not await ProjectService(db_session).is_collaborator(project.id, student.id)

    @pytest.mark.parametrize("second", [RequestStatus.APPROVED, RequestStatus.REJECTED])
    async def test_second_response_fails(self, db_session, project, owner, student, second):
        service = CollaborationService(db_session)
        request = await service.request_collaboration(project.id, student)
        await service.respond(request.id, RequestStatus.APPROVED, owner)

        with pytest.raises(InvalidStateTransitionError):
            await service.respond(request.id, second, owner)

        reloaded = await service.get_request(request.id)
        assert reloaded.status == RequestStatus.APPROVED

    async def test_missing_request(self, db_session, owner):
        with pytest.raises(CollaborationRequestNotFoundError):
            await CollaborationService(db_session).respond("missing", RequestStatus.APPROVED, owner)

    async def test_requester_cannot_answer_own_request(self, db_session, project, student):
        service = CollaborationService(db_session)
        request = await service.request_collaboration(project.id, student)

        with pytest.raises(PermissionDeniedError):
            await service.respond(request.id, RequestStatus.APPROVED, student)

    async def test_owner_cannot_answer_invitation(self, db_session, project, owner, faculty):
        service = CollaborationService(db_session)
        invitation = await service.invite_collaborator(project.id, faculty.id, owner)

        with pytest.raises(PermissionDeniedError):
            await service.respond(invitation.id, RequestStatus.APPROVED, owner)

    async def test_resolved_check_precedes_permission_check(self, db_session, project, owner, student, outsider):
        service = CollaborationService(db_session)
        request = await service.request_collaboration(project.id, student)
        await service.respond(request.id, RequestStatus.REJECTED, owner)

        with pytest.raises(InvalidStateTransitionError):
            await service.respond(request.id, RequestStatus.APPROVED, outsider)

    async def test_approval_is_idempotent_for_membership(self, db_session, project, owner, student, monkeypatch):
        monkeypatch.setattr(settings, "ALLOW_DUPLICATE_PENDING_REQUESTS", True)
        service = CollaborationService(db_session)
        first = await service.request_collaboration(project.id, student)
        second = await service.request_collaboration(project.id, student)

        await service.respond(first.id, RequestStatus.APPROVED, owner)
        await service.respond(second.id, RequestStatus.APPROVED, owner)

        collaborators = await ProjectService(db_session).list_collaborators(project.id, owner)
        assert [user.id for user, _ in collaborators] == [student.id]


class TestRoleScopedListing:
    """Test that each caller sees only their slice of pending records"""

    async def test_owner_faculty_and_third_party_views(self, db_session, project, owner, student, faculty, make_user):
        service = CollaborationService(db_session)
        request = await service.request_collaboration(project.id, student)
        invitation = await service.invite_collaborator(project.id, faculty.id, owner)
        third_party = await make_user()

        as_owner = await service.get_requests_for_user(project.id, owner)
        as_faculty = await service.get_requests_for_user(project.id, faculty)
        as_third_party = await service.get_requests_for_user(project.id, third_party)

        assert [r.id for r in as_owner] == [request.id]
        assert [r.id for r in as_faculty] == [invitation.id]
        assert as_third_party == []

    async def test_resolved_records_drop_out(self, db_session, project, owner, student):
        service = CollaborationService(db_session)
        request = await service.request_collaboration(project.id, student)
        await service.respond(request.id, RequestStatus.REJECTED, owner)

        assert await service.get_requests_for_user(project.id, owner) == []

    async def test_user_invitations_across_projects(self, db_session, make_project, owner, faculty):
        service = CollaborationService(db_session)
        first = await make_project(owner)
        second = await make_project(owner)
        await service.invite_collaborator(first.id, faculty.id, owner)
        await service.invite_collaborator(second.id, faculty.id, owner)

        invitations = await service.get_user_invitations(faculty)

        assert {i.project_id for i in invitations} == {first.id, second.id}
        assert all(i.sender.id == owner.id for i in invitations)

    async def test_owner_requests_across_projects(self, db_session, make_project, owner, student, make_user):
        service = CollaborationService(db_session)
        first = await make_project(owner)
        second = await make_project(owner)
        someone_else = await make_user()
        foreign = await make_project(someone_else)
        await service.request_collaboration(first.id, student)
        await service.request_collaboration(second.id, student)
        await service.request_collaboration(foreign.id, student)

        requests = await service.get_owner_requests(owner)

        assert {r.project_id for r in requests} == {first.id, second.id}
        assert all(r.requester.id == student.id for r in requests)
        assert all(r.type == RequestType.REQUEST for r in requests)

    async def test_faculty_role_does_not_widen_scope(self, db_session, project, student, make_user):
        service = CollaborationService(db_session)
        await service.request_collaboration(project.id, student)
        other_faculty = await make_user(role=UserRole.FACULTY)

        assert await service.get_requests_for_user(project.id, other_faculty) == []
