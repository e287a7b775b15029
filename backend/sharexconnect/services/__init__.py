from sharexconnect.services.project_service import ProjectService
from sharexconnect.services.collaboration_service import CollaborationService
from sharexconnect.services.repository_service import RepositoryService
from sharexconnect.services.change_request_service import ChangeRequestService
from sharexconnect.services.pull_request_service import PullRequestService, StagedUpload
from sharexconnect.services.review_service import ReviewService
from sharexconnect.services.user_service import UserService

__all__ = [
    # Projects & membership
    "ProjectService",
    "CollaborationService",
    # Collaboration workflows
    "RepositoryService",
    "ChangeRequestService",
    "PullRequestService",
    "StagedUpload",
    # Review & administration
    "ReviewService",
    "UserService",
]
