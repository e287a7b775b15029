# Re-export all models for convenient imports
from sharexconnect.models.user import User, UserRole
from sharexconnect.models.project import Project, ProjectCollaborator, ProjectStatus, ProjectVisibility
from sharexconnect.models.project_file import ProjectFile
from sharexconnect.models.collaboration import CollaborationRequest, RequestType, RequestStatus
from sharexconnect.models.repository import ProjectRepositoryItem, RepositoryItemType
from sharexconnect.models.change_request import ProjectChangeRequest, ChangeType, ChangeRequestStatus
from sharexconnect.models.pull_request import (
    ProjectPullRequest,
    PullRequestFile,
    PullRequestStatus,
    PULL_REQUEST_TRANSITIONS,
)
from sharexconnect.models.review import ProjectReview, ReviewStatus

__all__ = [
    # User
    "User",
    "UserRole",
    # Project
    "Project",
    "ProjectCollaborator",
    "ProjectStatus",
    "ProjectVisibility",
    "ProjectFile",
    # Collaboration
    "CollaborationRequest",
    "RequestType",
    "RequestStatus",
    # Repository
    "ProjectRepositoryItem",
    "RepositoryItemType",
    # Change requests
    "ProjectChangeRequest",
    "ChangeType",
    "ChangeRequestStatus",
    # Pull requests
    "ProjectPullRequest",
    "PullRequestFile",
    "PullRequestStatus",
    "PULL_REQUEST_TRANSITIONS",
    # Reviews
    "ProjectReview",
    "ReviewStatus",
]
