"""
Pull Request Service - collaborator change bundles, owner review and merge

State machine (owner-driven):

    OPEN/DRAFT --approve--> APPROVED --merge--> MERGED     (terminal)
    OPEN/DRAFT --merge----> MERGED                          (terminal)
    OPEN/DRAFT/APPROVED --reject--> REJECTED                (terminal)

Every transition is an UPDATE guarded by the status it was read in, so a
PR can only be merged once. Merging copies each staged PullRequestFile into
the project's permanent files and deletes the staged rows; the copy, the
cleanup and the status write commit together or not at all.
"""

import time
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from sqlalchemy import select, update, delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from sharexconnect.core.config import settings
from sharexconnect.core.exceptions import (
    PullRequestNotFoundError,
    PermissionDeniedError,
    ValidationError,
    InvalidStateTransitionError,
    MergeError,
)
from sharexconnect.core.logging_config import logger
from sharexconnect.models.project import Project
from sharexconnect.models.pull_request import (
    ProjectPullRequest,
    PullRequestFile,
    PullRequestStatus,
)
from sharexconnect.models.user import User
from sharexconnect.schemas.pull_request import PullRequestCreate, AutoPullRequestCreate
from sharexconnect.services.project_service import ProjectService


REVIEW_OUTCOMES = (PullRequestStatus.APPROVED, PullRequestStatus.REJECTED, PullRequestStatus.MERGED)


@dataclass
class StagedUpload:
    """An uploaded file waiting to be attached to a pull request"""
    file_name: str
    content: bytes
    file_type: Optional[str] = None
    file_path: Optional[str] = None

    @property
    def path(self) -> str:
        return self.file_path or self.file_name


class PullRequestService:

    def __init__(self, db: AsyncSession):
        self.db = db
        self.projects = ProjectService(db)

    # ==================== Lookups ====================

    async def _load(self, pr_id: str, with_files: bool = False) -> Optional[ProjectPullRequest]:
        options = [selectinload(ProjectPullRequest.author)]
        if with_files:
            options.append(selectinload(ProjectPullRequest.files))
        result = await self.db.execute(
            select(ProjectPullRequest)
            .options(*options)
            .where(ProjectPullRequest.id == pr_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _load_in_project(self, project_id: str, pr_id: str, with_files: bool = False) -> ProjectPullRequest:
        pull_request = await self._load(pr_id, with_files=with_files)
        if not pull_request or pull_request.project_id != project_id:
            raise PullRequestNotFoundError(pr_id)
        return pull_request

    async def staged_files(self, pr_id: str) -> List[PullRequestFile]:
        result = await self.db.execute(
            select(PullRequestFile)
            .where(PullRequestFile.pull_request_id == pr_id)
            .order_by(PullRequestFile.uploaded_at.asc())
        )
        return list(result.scalars().all())

    # ==================== Create ====================

    async def require_author(self, project_id: str, author: User) -> Project:
        """
        Owners upload directly, so ownership is rejected first (400); any
        other non-collaborator is refused (403).
        """
        project = await self.projects.get_project(project_id)
        if project.owner_id == author.id:
            raise ValidationError("Project owners cannot create pull requests for their own projects")
        if not await self.projects.is_collaborator(project_id, author.id):
            raise PermissionDeniedError("Only collaborators can create pull requests")
        return project

    def _stage_file(self, pr_id: str, upload: StagedUpload) -> PullRequestFile:
        staged = PullRequestFile(
            pull_request_id=pr_id,
            file_name=upload.file_name,
            file_path=upload.path,
            file_type=upload.file_type,
            file_size=len(upload.content or b""),
            content=upload.content,
            is_archive=settings.is_archive(upload.file_name),
        )
        self.db.add(staged)
        return staged

    async def create_pull_request(
        self,
        project_id: str,
        author: User,
        data: PullRequestCreate,
        uploads: Sequence[StagedUpload] = (),
        author_checked: bool = False,
    ) -> Tuple[ProjectPullRequest, int]:
        """
        Open a PR and stage any uploaded files under it in one transaction.
        Pass `author_checked` when the caller already ran `require_author`.
        """
        if not author_checked:
            await self.require_author(project_id, author)

        pull_request = ProjectPullRequest(
            project_id=project_id,
            author_id=author.id,
            title=data.title,
            description=data.description,
            branch_name=data.branch_name,
            files_changed=list(data.files_changed),
            changes_preview=data.changes_preview,
            status=PullRequestStatus.OPEN,
        )
        self.db.add(pull_request)
        await self.db.flush()

        for upload in uploads:
            self._stage_file(pull_request.id, upload)

        await self.db.commit()
        pr_id = pull_request.id

        logger.log_workflow_event(
            "PullRequest", pr_id, "opened",
            project_id=project_id, author_id=author.id, files=len(uploads),
        )
        return await self._load(pr_id), len(uploads)

    async def create_auto_pull_request(
        self,
        project_id: str,
        author: User,
        data: AutoPullRequestCreate,
    ) -> ProjectPullRequest:
        """Collaborator shortcut with a generated title and branch name"""
        await self.require_author(project_id, author)

        pr_data = PullRequestCreate(
            title=f"Auto PR: Changes by {author.first_name} {author.last_name}"[:200],
            description=data.description or "Automatically generated pull request from collaborator changes",
            branch_name=f"feature-{author.username}-{int(time.time() * 1000)}"[:100],
            files_changed=data.files_changed,
            changes_preview=data.changes_preview,
        )
        pull_request, _ = await self.create_pull_request(project_id, author, pr_data, author_checked=True)
        return pull_request

    # ==================== Queries ====================

    async def list_pull_requests(self, project_id: str, user: User) -> List[ProjectPullRequest]:
        """Oldest first; owner and collaborators only"""
        await self.projects.require_member(
            project_id, user, "Only the project owner or collaborators can view pull requests"
        )
        result = await self.db.execute(
            select(ProjectPullRequest)
            .options(selectinload(ProjectPullRequest.author))
            .where(ProjectPullRequest.project_id == project_id)
            .order_by(ProjectPullRequest.created_at.asc())
        )
        return list(result.scalars().all())

    async def get_pull_request(self, project_id: str, pr_id: str, user: User) -> ProjectPullRequest:
        await self.projects.require_member(
            project_id, user, "Only the project owner or collaborators can view pull requests"
        )
        return await self._load_in_project(project_id, pr_id, with_files=True)

    # ==================== Review & Merge ====================

    async def _migrate_staged_files(self, project_id: str, pr_id: str, merged_by: str) -> int:
        """Copy staged rows into permanent storage and delete them. No commit."""
        staged = await self.staged_files(pr_id)
        for staged_file in staged:
            self.projects.add_project_file(
                project_id=project_id,
                file_name=staged_file.file_name,
                file_path=staged_file.file_path,
                content=staged_file.content,
                file_type=staged_file.file_type,
                file_size=staged_file.file_size,
                is_archive=staged_file.is_archive,
                uploaded_by=merged_by,
            )
        await self.db.flush()
        await self.db.execute(delete(PullRequestFile).where(PullRequestFile.pull_request_id == pr_id))
        return len(staged)

    async def update_status(
        self,
        project_id: str,
        pr_id: str,
        status: PullRequestStatus,
        reviewer: User,
    ) -> ProjectPullRequest:
        """
        Approve, reject or merge. Only the project owner may call this.

        A merge runs inside the same transaction as the status write; if
        file migration fails everything is rolled back and MergeError is
        raised, leaving the PR and its staged files as they were.
        """
        if status not in REVIEW_OUTCOMES:
            raise ValidationError("Invalid status. Must be APPROVED, REJECTED, or MERGED", field="status")

        await self.projects.require_owner(
            project_id, reviewer, "Only project owners can approve, reject, or merge pull requests"
        )
        pull_request = await self._load_in_project(project_id, pr_id)
        current = pull_request.status

        if not pull_request.can_transition_to(status):
            raise InvalidStateTransitionError(
                f"Cannot change a {current.value.lower()} pull request to {status.value.lower()}",
                current_status=current.value,
                requested_status=status.value,
            )

        now = datetime.utcnow()
        values = {"status": status, "reviewed_by": reviewer.id, "reviewed_at": now, "updated_at": now}
        if status == PullRequestStatus.MERGED:
            values["merged_at"] = now

        reviewer_id = reviewer.id
        result = await self.db.execute(
            update(ProjectPullRequest)
            .where(ProjectPullRequest.id == pr_id, ProjectPullRequest.status == current)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise InvalidStateTransitionError(
                "Pull request status changed concurrently; reload and try again",
                current_status=current.value,
                requested_status=status.value,
            )

        merged_files = 0
        if status == PullRequestStatus.MERGED:
            try:
                await self.db.execute(
                    update(Project)
                    .where(Project.id == project_id)
                    .values(updated_at=now)
                    .execution_options(synchronize_session=False)
                )
                merged_files = await self._migrate_staged_files(project_id, pr_id, reviewer_id)
                await self.db.commit()
            except Exception as e:
                await self.db.rollback()
                logger.log_error_with_context(e, context="pull_request_merge", pull_request_id=pr_id)
                raise MergeError(pr_id) from e
        else:
            await self.db.commit()

        logger.log_workflow_event(
            "PullRequest", pr_id, status.value.lower(),
            project_id=project_id, reviewer_id=reviewer_id, merged_files=merged_files,
        )
        return await self._load(pr_id)
