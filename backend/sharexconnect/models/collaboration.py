"""
Collaboration request model.

One table holds both directions of the handshake, discriminated by `type`:

- REQUEST: a user asks to join. `requester_id` is set, `invitee_id` is null,
  and the project owner responds.
- INVITATION: the owner invites a user. `invitee_id` is set, `requester_id`
  is null, and the invitee responds.

The CHECK constraint keeps the two shapes from mixing; `responder_id()` and
`beneficiary_id` are the only places that branch on the variant.
"""
from sqlalchemy import Column, DateTime, Enum as SQLEnum, Text, ForeignKey, Index, CheckConstraint
from sqlalchemy.orm import relationship
from datetime import datetime
import enum

from sharexconnect.core.database import Base
from sharexconnect.core.types import GUID, generate_uuid


class RequestType(str, enum.Enum):
    REQUEST = "REQUEST"
    INVITATION = "INVITATION"


class RequestStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class CollaborationRequest(Base):
    """A pending or resolved request/invitation to collaborate on a project"""
    __tablename__ = "collaboration_requests"

    __table_args__ = (
        Index('ix_collaboration_requests_project_id', 'project_id'),
        Index('ix_collaboration_requests_requester_id', 'requester_id'),
        Index('ix_collaboration_requests_invitee_id', 'invitee_id'),
        Index('ix_collaboration_requests_project_status', 'project_id', 'status'),
        CheckConstraint(
            "(type = 'REQUEST' AND requester_id IS NOT NULL AND invitee_id IS NULL) OR "
            "(type = 'INVITATION' AND invitee_id IS NOT NULL AND requester_id IS NULL)",
            name="ck_collaboration_requests_variant",
        ),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    project_id = Column(GUID, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False)
    type = Column(SQLEnum(RequestType), nullable=False)

    requester_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=True)
    invitee_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=True)
    sender_id = Column(GUID, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    message = Column(Text, nullable=True)
    status = Column(SQLEnum(RequestStatus), default=RequestStatus.PENDING, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    responded_at = Column(DateTime, nullable=True)

    # Relationships
    project = relationship("Project")
    requester = relationship("User", foreign_keys=[requester_id])
    invitee = relationship("User", foreign_keys=[invitee_id])
    sender = relationship("User", foreign_keys=[sender_id])

    @classmethod
    def join_request(cls, project_id: str, requester_id: str, message: str = None) -> "CollaborationRequest":
        """Build a REQUEST variant (user asks the owner to join)"""
        return cls(
            project_id=project_id,
            type=RequestType.REQUEST,
            requester_id=requester_id,
            invitee_id=None,
            sender_id=requester_id,
            message=message,
            status=RequestStatus.PENDING,
        )

    @classmethod
    def invitation(cls, project_id: str, invitee_id: str, sender_id: str, message: str = None) -> "CollaborationRequest":
        """Build an INVITATION variant (owner invites a user)"""
        return cls(
            project_id=project_id,
            type=RequestType.INVITATION,
            requester_id=None,
            invitee_id=invitee_id,
            sender_id=sender_id,
            message=message,
            status=RequestStatus.PENDING,
        )

    def responder_id(self, project_owner_id: str) -> str:
        """User allowed to approve/reject this record"""
        if self.type == RequestType.REQUEST:
            return project_owner_id
        if self.type == RequestType.INVITATION:
            return self.invitee_id
        raise ValueError(f"Unknown collaboration request type: {self.type}")

    @property
    def beneficiary_id(self) -> str:
        """User who becomes a collaborator when this record is approved"""
        if self.type == RequestType.REQUEST:
            return self.requester_id
        if self.type == RequestType.INVITATION:
            return self.invitee_id
        raise ValueError(f"Unknown collaboration request type: {self.type}")

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING

    def __repr__(self):
        return f"<CollaborationRequest {self.type.value if self.type else '?'} {self.status.value if self.status else '?'}>"
