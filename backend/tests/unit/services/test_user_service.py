"""
Unit Tests for UserService
Tests for: registration, authentication, institution administration
"""
import pytest
from sqlalchemy import select

from sharexconnect.core.exceptions import (
    AuthenticationError,
    PermissionDeniedError,
    ValidationError,
)
from sharexconnect.models.project import Project, ProjectStatus
from sharexconnect.models.user import User, UserRole
from sharexconnect.schemas.auth import UserRegister
from sharexconnect.services.project_service import ProjectService
from sharexconnect.services.user_service import UserService, REMOVED_OWNER_NOTE



def registration(**overrides) -> UserRegister:
    fields = dict(
        username="ada_l",
        email="Ada@Uni.edu",
        password="correct-horse",
        first_name="Ada",
        last_name="Lovelace",
        institution="State University",
    )
    fields.update(overrides)
    return UserRegister(**fields)


class TestRegistration:

    async def test_register_derives_domain(self, db_session):
        user = await UserService(db_session).register(registration())

        assert user.email == "ada@uni.edu"
        assert user.college_domain == "uni.edu"
        assert user.role == UserRole.STUDENT
        assert user.hashed_password != "correct-horse"

    async def test_duplicate_email(self, db_session):
        service = UserService(db_session)
        await service.register(registration())

        with pytest.raises(ValidationError):
            await service.register(registration(username="someone_else"))

    async def test_duplicate_username(self, db_session):
        service = UserService(db_session)
        await service.register(registration())

        with pytest.raises(ValidationError):
            await service.register(registration(email="other@uni.edu"))


class TestAuthenticate:

    async def test_valid_credentials(self, db_session, student, password):
        user = await UserService(db_session).authenticate(student.email, password)

        assert user.id == student.id

    async def test_wrong_password(self, db_session, student):
        with pytest.raises(AuthenticationError):
            await UserService(db_session).authenticate(student.email, "not-the-password")

    async def test_inactive_account(self, db_session, make_user, password):
        inactive = await make_user(is_active=False)

        with pytest.raises(PermissionDeniedError):
            await UserService(db_session).authenticate(inactive.email, password)


class TestAdministration:

    async def test_lists_only_own_institution(self, db_session, admin_user, student, outsider):
        users = await UserService(db_session).list_institution_users(admin_user)

        ids = {u.id for u in users}
        assert student.id in ids
        assert outsider.id not in ids

    async def test_update_role(self, db_session, admin_user, student):
        updated = await UserService(db_session).update_role(student.id, UserRole.FACULTY, admin_user)

        assert updated.role == UserRole.FACULTY

    async def test_cannot_promote_to_admin(self, db_session, admin_user, student):
        with pytest.raises(ValidationError):
            await UserService(db_session).update_role(student.id, UserRole.ADMIN, admin_user)

    async def test_other_institution_is_off_limits(self, db_session, admin_user, outsider):
        with pytest.raises(PermissionDeniedError):
            await UserService(db_session).update_role(outsider.id, UserRole.GUEST, admin_user)

    async def test_cannot_modify_other_admin(self, db_session, admin_user, make_user):
        other_admin = await make_user(role=UserRole.ADMIN)

        with pytest.raises(PermissionDeniedError):
            await UserService(db_session).remove_user(other_admin.id, admin_user)

    async def test_cannot_remove_self(self, db_session, admin_user):
        with pytest.raises(ValidationError):
            await UserService(db_session).remove_user(admin_user.id, admin_user)

    async def test_remove_user_is_soft(self, db_session, admin_user, owner, student, make_project):
        owned = await make_project(owner, status=ProjectStatus.SUBMITTED)
        elsewhere = await make_project(student)
        await ProjectService(db_session).add_collaborator(elsewhere.id, owner.id, student)
        owner_id, owned_id, elsewhere_id = owner.id, owned.id, elsewhere.id

        await UserService(db_session).remove_user(owner_id, admin_user)

        result = await db_session.execute(select(User.is_active).where(User.id == owner_id))
        assert result.scalar_one() is False

        result = await db_session.execute(
            select(Project.status, Project.description).where(Project.id == owned_id)
        )
        status, description = result.one()
        assert status == ProjectStatus.DRAFT
        assert description.endswith(REMOVED_OWNER_NOTE)

        assert not await ProjectService(db_session).is_collaborator(elsewhere_id, owner_id)

    async def test_remove_user_keeps_approved_status(self, db_session, admin_user, owner, make_project):
        approved = await make_project(owner, status=ProjectStatus.APPROVED)
        owner_id, approved_id = owner.id, approved.id

        await UserService(db_session).remove_user(owner_id, admin_user)

        result = await db_session.execute(
            select(Project.status, Project.description).where(Project.id == approved_id)
        )
        status, description = result.one()
        assert status == ProjectStatus.APPROVED
        assert description.endswith(REMOVED_OWNER_NOTE)
