"""
Project Service - projects, visibility, collaborators and permanent files

The other workflow services build on this one for their access checks, and
the pull request merge writes files through `add_project_file`, the same
path a direct owner upload takes.
"""

from datetime import datetime
from typing import Optional, List, Tuple

from sqlalchemy import select, delete, or_, and_, exists
from sqlalchemy.ext.asyncio import AsyncSession

from sharexconnect.core.config import settings
from sharexconnect.core.exceptions import (
    ProjectNotFoundError,
    UserNotFoundError,
    CollaboratorNotFoundError,
    ProjectFileNotFoundError,
    PermissionDeniedError,
    RequiresPullRequestError,
    ValidationError,
    InvalidStateTransitionError,
)
from sharexconnect.core.logging_config import logger
from sharexconnect.models.project import Project, ProjectCollaborator, ProjectStatus, ProjectVisibility
from sharexconnect.models.project_file import ProjectFile
from sharexconnect.models.review import ProjectReview
from sharexconnect.models.user import User, UserRole
from sharexconnect.schemas.project import ProjectCreate, ProjectUpdate
from sharexconnect.utils.pagination import paginate


class ProjectService:
    """Project CRUD plus the access rules every other workflow relies on"""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ========== Lookups & Access ==========

    async def get_project(self, project_id: str) -> Project:
        result = await self.db.execute(select(Project).where(Project.id == project_id))
        project = result.scalar_one_or_none()
        if not project:
            raise ProjectNotFoundError(project_id)
        return project

    async def get_owner(self, project: Project) -> User:
        result = await self.db.execute(select(User).where(User.id == project.owner_id))
        return result.scalar_one()

    async def is_collaborator(self, project_id: str, user_id: str) -> bool:
        result = await self.db.execute(
            select(ProjectCollaborator.id).where(
                ProjectCollaborator.project_id == project_id,
                ProjectCollaborator.user_id == user_id,
            )
        )
        return result.first() is not None

    async def is_member(self, project: Project, user: User) -> bool:
        """Owner or collaborator"""
        return project.owner_id == user.id or await self.is_collaborator(project.id, user.id)

    async def is_reviewer(self, project_id: str, user_id: str) -> bool:
        result = await self.db.execute(
            select(ProjectReview.id).where(
                ProjectReview.project_id == project_id,
                ProjectReview.reviewer_id == user_id,
            ).limit(1)
        )
        return result.first() is not None

    async def can_view(self, project: Project, user: User) -> bool:
        """
        PUBLIC: anyone. INSTITUTION: anyone sharing the owner's institution.
        PRIVATE: nobody extra. Members and assigned reviewers always see it.
        """
        if project.visibility == ProjectVisibility.PUBLIC:
            return True
        if await self.is_member(project, user):
            return True
        if project.visibility == ProjectVisibility.INSTITUTION and user.institution:
            owner = await self.get_owner(project)
            if owner.institution == user.institution:
                return True
        return await self.is_reviewer(project.id, user.id)

    async def require_view(self, project_id: str, user: User) -> Project:
        project = await self.get_project(project_id)
        if not await self.can_view(project, user):
            raise PermissionDeniedError("You do not have access to this project")
        return project

    async def require_member(self, project_id: str, user: User, message: str = None) -> Project:
        project = await self.get_project(project_id)
        if not await self.is_member(project, user):
            raise PermissionDeniedError(message or "Only the project owner or collaborators can do this")
        return project

    async def require_owner(self, project_id: str, user: User, message: str = None) -> Project:
        project = await self.get_project(project_id)
        if project.owner_id != user.id:
            raise PermissionDeniedError(message or "Only the project owner can do this")
        return project

    # ========== Project Operations ==========

    async def create_project(self, owner: User, data: ProjectCreate) -> Project:
        project = Project(owner_id=owner.id, **data.model_dump())
        self.db.add(project)
        await self.db.commit()
        await self.db.refresh(project)
        logger.log_workflow_event("Project", project.id, "created", owner_id=owner.id)
        return project

    def _visible_projects_query(self, user: User):
        owner_institution = (
            select(User.institution).where(User.id == Project.owner_id).scalar_subquery()
        )
        is_collaborator = exists().where(
            ProjectCollaborator.project_id == Project.id,
            ProjectCollaborator.user_id == user.id,
        )
        conditions = [
            Project.visibility == ProjectVisibility.PUBLIC,
            Project.owner_id == user.id,
            is_collaborator,
        ]
        if user.institution:
            conditions.append(and_(
                Project.visibility == ProjectVisibility.INSTITUTION,
                owner_institution == user.institution,
            ))
        return select(Project).where(or_(*conditions))

    async def list_visible_projects(
        self,
        user: User,
        page: int = 1,
        page_size: int = 20,
        category: Optional[str] = None,
        owned_only: bool = False,
    ) -> dict:
        query = self._visible_projects_query(user)
        if category:
            query = query.where(Project.category == category)
        if owned_only:
            query = query.where(Project.owner_id == user.id)
        query = query.order_by(Project.created_at.desc())
        return await paginate(self.db, query, page=page, page_size=page_size)

    async def update_project(self, project_id: str, user: User, data: ProjectUpdate) -> Project:
        project = await self.require_owner(project_id, user, "Only the project owner can edit this project")
        updates = data.model_dump(exclude_unset=True)

        if "status" in updates and project.status == ProjectStatus.APPROVED:
            raise InvalidStateTransitionError(
                "Approved projects cannot change status",
                current_status=project.status.value,
                requested_status=updates["status"].value,
            )

        for field, value in updates.items():
            setattr(project, field, value)
        project.updated_at = datetime.utcnow()

        await self.db.commit()
        await self.db.refresh(project)
        return project

    async def delete_project(self, project_id: str, user: User) -> None:
        project = await self.require_owner(project_id, user, "Only the project owner can delete this project")
        await self.db.execute(delete(Project).where(Project.id == project.id))
        await self.db.commit()
        logger.log_workflow_event("Project", project_id, "deleted", owner_id=user.id)

    # ========== Collaborators ==========

    async def add_collaborator_row(self, project_id: str, user_id: str) -> bool:
        """
        Insert membership if absent; returns False when it already existed.
        Flushes but does not commit, so callers can fold it into their own
        transaction.
        """
        if await self.is_collaborator(project_id, user_id):
            return False
        self.db.add(ProjectCollaborator(project_id=project_id, user_id=user_id))
        await self.db.flush()
        return True

    async def add_collaborator(self, project_id: str, user_id: str, owner: User) -> bool:
        """Owner-direct add, bypassing the request/invitation handshake"""
        project = await self.require_owner(project_id, owner, "Only the project owner can add collaborators")
        if user_id == project.owner_id:
            raise ValidationError("The project owner cannot be added as a collaborator", field="user_id")

        result = await self.db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
        if not user or not user.is_active:
            raise UserNotFoundError(user_id)

        created = await self.add_collaborator_row(project_id, user_id)
        await self.db.commit()
        if created:
            logger.log_workflow_event("Project", project_id, "collaborator_added", user_id=user_id)
        return created

    async def remove_collaborator(self, project_id: str, user_id: str, owner: User) -> None:
        await self.require_owner(project_id, owner, "Only the project owner can remove collaborators")
        result = await self.db.execute(
            delete(ProjectCollaborator).where(
                ProjectCollaborator.project_id == project_id,
                ProjectCollaborator.user_id == user_id,
            )
        )
        if result.rowcount == 0:
            raise CollaboratorNotFoundError(user_id)
        await self.db.commit()
        logger.log_workflow_event("Project", project_id, "collaborator_removed", user_id=user_id)

    async def list_collaborators(self, project_id: str, user: User) -> List[Tuple[User, datetime]]:
        await self.require_view(project_id, user)
        result = await self.db.execute(
            select(User, ProjectCollaborator.added_at)
            .join(ProjectCollaborator, ProjectCollaborator.user_id == User.id)
            .where(ProjectCollaborator.project_id == project_id)
            .order_by(ProjectCollaborator.added_at.asc())
        )
        return [(row[0], row[1]) for row in result.all()]

    # ========== Project Files ==========

    def add_project_file(
        self,
        project_id: str,
        file_name: str,
        file_path: str,
        content: Optional[bytes],
        file_type: Optional[str] = None,
        file_size: Optional[int] = None,
        is_archive: Optional[bool] = None,
        uploaded_by: Optional[str] = None,
    ) -> ProjectFile:
        """Stage a permanent file row in the current transaction"""
        project_file = ProjectFile(
            project_id=project_id,
            file_name=file_name,
            file_path=file_path,
            file_type=file_type,
            file_size=file_size if file_size is not None else len(content or b""),
            content=content,
            is_archive=settings.is_archive(file_name) if is_archive is None else is_archive,
            uploaded_by=uploaded_by,
        )
        self.db.add(project_file)
        return project_file

    async def list_files(self, project_id: str, user: User) -> List[ProjectFile]:
        await self.require_view(project_id, user)
        result = await self.db.execute(
            select(ProjectFile)
            .where(ProjectFile.project_id == project_id)
            .order_by(ProjectFile.uploaded_at.asc(), ProjectFile.file_path.asc())
        )
        return list(result.scalars().all())

    async def upload_file(
        self,
        project_id: str,
        user: User,
        file_name: str,
        content: bytes,
        file_type: Optional[str] = None,
    ) -> ProjectFile:
        """Direct upload. Owners only; collaborators are pointed at pull requests."""
        project = await self.get_project(project_id)
        if project.owner_id != user.id:
            if await self.is_collaborator(project_id, user.id):
                raise RequiresPullRequestError(project_id)
            raise PermissionDeniedError("Access denied: You must be the project owner to upload files")

        if not file_name:
            raise ValidationError("No file uploaded", field="file")

        project_file = self.add_project_file(
            project_id=project_id,
            file_name=file_name,
            file_path=file_name,
            content=content,
            file_type=file_type,
            uploaded_by=user.id,
        )
        project.updated_at = datetime.utcnow()
        await self.db.commit()
        await self.db.refresh(project_file)
        logger.info(f"File uploaded to project {project_id}: {file_name} ({project_file.file_size} bytes)")
        return project_file

    async def get_file(self, project_id: str, file_id: str, user: User) -> ProjectFile:
        await self.require_view(project_id, user)
        result = await self.db.execute(
            select(ProjectFile).where(ProjectFile.id == file_id, ProjectFile.project_id == project_id)
        )
        project_file = result.scalar_one_or_none()
        if not project_file:
            raise ProjectFileNotFoundError(file_id)
        return project_file

    async def delete_file(self, file_id: str, user: User) -> None:
        result = await self.db.execute(select(ProjectFile).where(ProjectFile.id == file_id))
        project_file = result.scalar_one_or_none()
        if not project_file:
            raise ProjectFileNotFoundError(file_id)

        await self.require_owner(project_file.project_id, user, "Only the project owner can delete files")
        await self.db.delete(project_file)
        await self.db.commit()
        logger.info(f"File {file_id} deleted from project {project_file.project_id}")
