"""
Collaboration Service - join requests, invitations and their one-shot responses
"""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from sharexconnect.core.config import settings
from sharexconnect.core.exceptions import (
    CollaborationRequestNotFoundError,
    UserNotFoundError,
    PermissionDeniedError,
    ValidationError,
    InvalidStateTransitionError,
)
from sharexconnect.core.logging_config import logger
from sharexconnect.models.collaboration import CollaborationRequest, RequestType, RequestStatus
from sharexconnect.models.project import Project
from sharexconnect.models.user import User
from sharexconnect.services.project_service import ProjectService


def _with_parties(query):
    return query.options(
        selectinload(CollaborationRequest.project),
        selectinload(CollaborationRequest.sender),
        selectinload(CollaborationRequest.requester),
        selectinload(CollaborationRequest.invitee),
    )


class CollaborationService:
    """
    Manages CollaborationRequest rows.

    Responding is a compare-and-set: the status only moves off PENDING
    through an UPDATE guarded by `status = 'PENDING'`, so two concurrent
    responders cannot both succeed.
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self.projects = ProjectService(db)

    async def get_request(self, request_id: str) -> CollaborationRequest:
        result = await self.db.execute(
            select(CollaborationRequest)
            .where(CollaborationRequest.id == request_id)
            .execution_options(populate_existing=True)
        )
        collab_request = result.scalar_one_or_none()
        if not collab_request:
            raise CollaborationRequestNotFoundError(request_id)
        return collab_request

    # ==================== Create ====================

    async def request_collaboration(
        self,
        project_id: str,
        requester: User,
        message: Optional[str] = None,
    ) -> CollaborationRequest:
        """
        A user asks the project owner to join.

        With ENFORCE_COLLABORATION_SETTINGS off this is a plain PENDING
        insert. With it on, the project's `allows_collaboration` and
        `requires_approval_for_collaboration` flags apply, and a project
        that skips approval admits the requester in the same transaction.
        """
        project = await self.projects.get_project(project_id)
        enforce = settings.ENFORCE_COLLABORATION_SETTINGS

        if enforce:
            if project.owner_id == requester.id:
                raise ValidationError("You already own this project")
            if not project.allows_collaboration:
                raise ValidationError("This project is not accepting collaborators")
            if await self.projects.is_collaborator(project_id, requester.id):
                raise ValidationError("You are already a collaborator on this project")

        if not settings.ALLOW_DUPLICATE_PENDING_REQUESTS:
            existing = await self.db.execute(
                select(CollaborationRequest.id).where(
                    CollaborationRequest.project_id == project_id,
                    CollaborationRequest.requester_id == requester.id,
                    CollaborationRequest.type == RequestType.REQUEST,
                    CollaborationRequest.status == RequestStatus.PENDING,
                ).limit(1)
            )
            if existing.first() is not None:
                raise ValidationError("You already have a pending collaboration request for this project")

        collab_request = CollaborationRequest.join_request(project_id, requester.id, message)
        auto_approved = enforce and not project.requires_approval_for_collaboration
        if auto_approved:
            collab_request.status = RequestStatus.APPROVED
            collab_request.responded_at = datetime.utcnow()
        self.db.add(collab_request)
        if auto_approved:
            await self.projects.add_collaborator_row(project_id, requester.id)
        await self.db.commit()
        await self.db.refresh(collab_request)

        logger.log_workflow_event(
            "CollaborationRequest", collab_request.id,
            "auto_approved" if auto_approved else "requested",
            project_id=project_id, requester_id=requester.id,
        )
        return collab_request

    async def invite_collaborator(
        self,
        project_id: str,
        invitee_id: str,
        sender: User,
        message: Optional[str] = None,
    ) -> CollaborationRequest:
        """Project owner invites another user"""
        project = await self.projects.require_owner(
            project_id, sender, "Only the project owner can invite collaborators"
        )

        if invitee_id == project.owner_id or await self.projects.is_collaborator(project_id, invitee_id):
            raise ValidationError("User is already a collaborator on this project", field="email")

        invitation = CollaborationRequest.invitation(
            project_id,
            invitee_id,
            sender.id,
            message or settings.DEFAULT_INVITATION_MESSAGE,
        )
        self.db.add(invitation)
        await self.db.commit()
        await self.db.refresh(invitation)

        logger.log_workflow_event(
            "CollaborationRequest", invitation.id, "invited",
            project_id=project_id, invitee_id=invitee_id,
        )
        return invitation

    async def invite_by_email(
        self,
        project_id: str,
        email: str,
        sender: User,
        message: Optional[str] = None,
    ) -> CollaborationRequest:
        await self.projects.get_project(project_id)
        result = await self.db.execute(
            select(User).where(User.email == email.lower(), User.is_active == True)  # noqa: E712
        )
        invitee = result.scalar_one_or_none()
        if not invitee:
            raise UserNotFoundError(email)
        return await self.invite_collaborator(project_id, invitee.id, sender, message)

    # ==================== Respond ====================

    async def respond(
        self,
        request_id: str,
        status: RequestStatus,
        responder: User,
    ) -> CollaborationRequest:
        """
        Approve or reject a PENDING request/invitation.

        Fails with NotFound, then InvalidStateTransition if already resolved,
        then PermissionDenied if the caller is not the designated responder.
        On approval the beneficiary becomes a collaborator in the same
        transaction.
        """
        if status not in (RequestStatus.APPROVED, RequestStatus.REJECTED):
            raise ValidationError("Status must be APPROVED or REJECTED", field="status")

        collab_request = await self.get_request(request_id)
        kind = "request" if collab_request.type == RequestType.REQUEST else "invitation"

        if not collab_request.is_pending:
            raise InvalidStateTransitionError(
                f"This collaboration {kind} has already been {collab_request.status.value.lower()}",
                current_status=collab_request.status.value,
                requested_status=status.value,
            )

        project = await self.projects.get_project(collab_request.project_id)
        if responder.id != collab_request.responder_id(project.owner_id):
            if collab_request.type == RequestType.REQUEST:
                raise PermissionDeniedError("Only project owner can respond to collaboration requests")
            raise PermissionDeniedError("Only the invited user can respond to this invitation")

        result = await self.db.execute(
            update(CollaborationRequest)
            .where(
                CollaborationRequest.id == request_id,
                CollaborationRequest.status == RequestStatus.PENDING,
            )
            .values(status=status, responded_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            # Another responder won the race between our read and the update
            raise InvalidStateTransitionError(
                f"This collaboration {kind} has already been responded to",
                requested_status=status.value,
            )

        if status == RequestStatus.APPROVED:
            await self.projects.add_collaborator_row(project.id, collab_request.beneficiary_id)

        await self.db.commit()
        await self.db.refresh(collab_request)

        logger.log_workflow_event(
            "CollaborationRequest", request_id, status.value.lower(),
            project_id=project.id, responder_id=responder.id,
        )
        return collab_request

    # ==================== Queries ====================

    async def get_requests_for_user(self, project_id: str, user: User) -> List[CollaborationRequest]:
        """
        Role-scoped view of a project's pending records: the owner gets the
        join REQUESTs, everyone else only the INVITATIONs addressed to them.
        """
        project = await self.projects.get_project(project_id)

        query = select(CollaborationRequest).where(
            CollaborationRequest.project_id == project_id,
            CollaborationRequest.status == RequestStatus.PENDING,
        )
        if project.owner_id == user.id:
            query = query.where(CollaborationRequest.type == RequestType.REQUEST)
        else:
            query = query.where(
                CollaborationRequest.type == RequestType.INVITATION,
                CollaborationRequest.invitee_id == user.id,
            )

        result = await self.db.execute(
            _with_parties(query).order_by(CollaborationRequest.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_user_invitations(self, user: User) -> List[CollaborationRequest]:
        """Pending invitations addressed to the user, across all projects"""
        result = await self.db.execute(
            _with_parties(
                select(CollaborationRequest).where(
                    CollaborationRequest.type == RequestType.INVITATION,
                    CollaborationRequest.invitee_id == user.id,
                    CollaborationRequest.status == RequestStatus.PENDING,
                )
            ).order_by(CollaborationRequest.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_owner_requests(self, owner: User) -> List[CollaborationRequest]:
        """Pending join requests across every project the user owns"""
        result = await self.db.execute(
            _with_parties(
                select(CollaborationRequest)
                .join(Project, Project.id == CollaborationRequest.project_id)
                .where(
                    Project.owner_id == owner.id,
                    CollaborationRequest.type == RequestType.REQUEST,
                    CollaborationRequest.status == RequestStatus.PENDING,
                )
            ).order_by(CollaborationRequest.created_at.desc())
        )
        return list(result.scalars().all())
