"""
User Service - registration, login and institution administration
"""

from datetime import datetime
from typing import List

from sqlalchemy import select, delete, or_
from sqlalchemy.ext.asyncio import AsyncSession

from sharexconnect.core.exceptions import (
    AuthenticationError,
    PermissionDeniedError,
    UserNotFoundError,
    ValidationError,
)
from sharexconnect.core.logging_config import logger
from sharexconnect.core.security import verify_password, get_password_hash
from sharexconnect.models.project import Project, ProjectCollaborator, ProjectStatus
from sharexconnect.models.user import User, UserRole
from sharexconnect.schemas.auth import UserRegister


REMOVED_OWNER_NOTE = "[Owner account was removed by an administrator]"


class UserService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user(self, user_id: str) -> User:
        result = await self.db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
        if not user:
            raise UserNotFoundError(user_id)
        return user

    # ==================== Identity ====================

    async def register(self, data: UserRegister) -> User:
        email = data.email.lower()
        result = await self.db.execute(
            select(User.id).where(or_(User.email == email, User.username == data.username))
        )
        if result.first() is not None:
            raise ValidationError("A user with this email or username already exists", field="email")

        user = User(
            username=data.username,
            email=email,
            hashed_password=get_password_hash(data.password),
            first_name=data.first_name,
            last_name=data.last_name,
            role=data.role,
            institution=data.institution,
            college_domain=data.college_domain,
            department=data.department,
            tech_expertise=data.tech_expertise,
            bio=data.bio,
        )
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)

        logger.log_auth_event("register", success=True, user_email=email, user_id=user.id)
        return user

    async def authenticate(self, email: str, password: str) -> User:
        """Wrong credentials are 401; a deactivated account is 403"""
        result = await self.db.execute(select(User).where(User.email == email.lower()))
        user = result.scalar_one_or_none()

        if not user or not verify_password(password, user.hashed_password):
            logger.log_auth_event("login", success=False, user_email=email, reason="invalid_credentials")
            raise AuthenticationError("Invalid email or password")

        if not user.is_active:
            logger.log_auth_event("login", success=False, user_email=email, reason="inactive")
            raise PermissionDeniedError("User account is inactive")

        logger.log_auth_event("login", success=True, user_email=email, user_id=user.id)
        return user

    # ==================== Administration ====================

    async def _require_managed_user(self, user_id: str, admin: User) -> User:
        user = await self.get_user(user_id)
        if user.institution != admin.institution:
            raise PermissionDeniedError("You can only manage users from your own institution")
        if user.role == UserRole.ADMIN:
            raise PermissionDeniedError("Administrators cannot modify other administrators")
        return user

    async def list_institution_users(self, admin: User) -> List[User]:
        result = await self.db.execute(
            select(User)
            .where(User.institution == admin.institution, User.is_active == True)  # noqa: E712
            .order_by(User.created_at.desc())
        )
        return list(result.scalars().all())

    async def update_role(self, user_id: str, role: UserRole, admin: User) -> User:
        if role == UserRole.ADMIN:
            raise ValidationError("Role must be STUDENT, FACULTY or GUEST", field="role")
        user = await self._require_managed_user(user_id, admin)

        previous = user.role
        user.role = role
        user.updated_at = datetime.utcnow()
        await self.db.commit()
        await self.db.refresh(user)

        logger.info(f"Admin {admin.id} changed role of {user_id}: {previous.value} -> {role.value}")
        return user

    async def remove_user(self, user_id: str, admin: User) -> None:
        """
        Soft removal. The account is deactivated, its memberships dropped,
        and the projects it owns get a note appended. Unapproved projects go
        back to DRAFT; an APPROVED status only ever comes from faculty review
        and is left as is.
        """
        if user_id == admin.id:
            raise ValidationError("You cannot remove your own account")
        user = await self._require_managed_user(user_id, admin)
        now = datetime.utcnow()

        await self.db.execute(delete(ProjectCollaborator).where(ProjectCollaborator.user_id == user.id))

        owned = await self.db.execute(select(Project).where(Project.owner_id == user.id))
        for project in owned.scalars().all():
            if project.status != ProjectStatus.APPROVED:
                project.status = ProjectStatus.DRAFT
            project.description = f"{project.description}\n\n{REMOVED_OWNER_NOTE}"
            project.updated_at = now

        user.is_active = False
        user.updated_at = now
        await self.db.commit()
        logger.info(f"Admin {admin.id} removed user {user_id}")
