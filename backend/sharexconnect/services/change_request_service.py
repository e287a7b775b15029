"""
Change Request Service - lightweight single-file suggestions

Reviewing records the decision and the reviewer. It does not touch the
referenced repository item; applying `proposed_changes` is up to the caller.
"""

from datetime import datetime
from typing import List

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from sharexconnect.core.exceptions import (
    ChangeRequestNotFoundError,
    PermissionDeniedError,
    ValidationError,
    InvalidStateTransitionError,
)
from sharexconnect.core.logging_config import logger
from sharexconnect.models.change_request import ProjectChangeRequest, ChangeRequestStatus
from sharexconnect.models.repository import ProjectRepositoryItem
from sharexconnect.models.user import User
from sharexconnect.schemas.change_request import ChangeRequestCreate
from sharexconnect.services.project_service import ProjectService


REVIEW_OUTCOMES = (ChangeRequestStatus.APPROVED, ChangeRequestStatus.REJECTED, ChangeRequestStatus.MERGED)


class ChangeRequestService:

    def __init__(self, db: AsyncSession):
        self.db = db
        self.projects = ProjectService(db)

    async def _load(self, change_request_id: str) -> ProjectChangeRequest:
        result = await self.db.execute(
            select(ProjectChangeRequest)
            .options(selectinload(ProjectChangeRequest.requester))
            .where(ProjectChangeRequest.id == change_request_id)
            .execution_options(populate_existing=True)
        )
        change_request = result.scalar_one_or_none()
        if not change_request:
            raise ChangeRequestNotFoundError(change_request_id)
        return change_request

    async def create_change_request(
        self,
        project_id: str,
        requester: User,
        data: ChangeRequestCreate,
    ) -> ProjectChangeRequest:
        await self.projects.require_member(
            project_id, requester, "Only the project owner or collaborators can propose changes"
        )

        if data.file_id:
            result = await self.db.execute(
                select(ProjectRepositoryItem.id).where(
                    ProjectRepositoryItem.id == data.file_id,
                    ProjectRepositoryItem.project_id == project_id,
                )
            )
            if result.first() is None:
                raise ValidationError("Referenced file does not belong to this project", field="file_id")

        change_request = ProjectChangeRequest(
            project_id=project_id,
            requester_id=requester.id,
            status=ChangeRequestStatus.OPEN,
            **data.model_dump(),
        )
        self.db.add(change_request)
        await self.db.commit()

        logger.log_workflow_event(
            "ChangeRequest", change_request.id, "opened",
            project_id=project_id, change_type=data.change_type.value,
        )
        return await self._load(change_request.id)

    async def list_change_requests(self, project_id: str, user: User) -> List[ProjectChangeRequest]:
        """Newest first"""
        await self.projects.require_view(project_id, user)
        result = await self.db.execute(
            select(ProjectChangeRequest)
            .options(selectinload(ProjectChangeRequest.requester))
            .where(ProjectChangeRequest.project_id == project_id)
            .order_by(ProjectChangeRequest.created_at.desc())
        )
        return list(result.scalars().all())

    async def review_change_request(
        self,
        change_request_id: str,
        status: ChangeRequestStatus,
        reviewer: User,
    ) -> ProjectChangeRequest:
        """Single OPEN -> APPROVED/REJECTED/MERGED transition by the project owner"""
        if status not in REVIEW_OUTCOMES:
            raise ValidationError("Status must be APPROVED, REJECTED or MERGED", field="status")

        change_request = await self._load(change_request_id)
        await self.projects.require_owner(
            change_request.project_id, reviewer, "Only the project owner can review change requests"
        )

        if change_request.status != ChangeRequestStatus.OPEN:
            raise InvalidStateTransitionError(
                f"This change request has already been {change_request.status.value.lower()}",
                current_status=change_request.status.value,
                requested_status=status.value,
            )

        now = datetime.utcnow()
        result = await self.db.execute(
            update(ProjectChangeRequest)
            .where(
                ProjectChangeRequest.id == change_request_id,
                ProjectChangeRequest.status == ChangeRequestStatus.OPEN,
            )
            .values(status=status, reviewed_by=reviewer.id, reviewed_at=now, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise InvalidStateTransitionError(
                "This change request has already been reviewed",
                requested_status=status.value,
            )
        await self.db.commit()

        logger.log_workflow_event(
            "ChangeRequest", change_request_id, status.value.lower(), reviewer_id=reviewer.id,
        )
        return await self._load(change_request_id)
