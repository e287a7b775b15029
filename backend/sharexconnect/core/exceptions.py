"""
Domain Exceptions for ShareXConnect
===================================

Services raise these instead of returning sentinel values; the handlers
registered in main.py turn them into the API error envelope:

    {"message": "...", "code": "...", "errors": [...]}   # errors is optional

Usage:
    from sharexconnect.core.exceptions import ProjectNotFoundError, PermissionDeniedError

    if not project:
        raise ProjectNotFoundError(project_id)
    if project.owner_id != user.id:
        raise PermissionDeniedError("Only the project owner can do this")
"""

from typing import Optional, Any, Dict, List


class ShareXConnectError(Exception):
    """Base exception for all ShareXConnect errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        self.errors = errors
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "message": self.message,
            "code": self.code,
        }
        if self.errors:
            body["errors"] = self.errors
        return body


# ============================================
# Authentication & Authorization Errors
# ============================================

class AuthenticationError(ShareXConnectError):
    """User authentication failed"""

    status_code = 401

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message, code="AUTHENTICATION_FAILED")


class PermissionDeniedError(ShareXConnectError):
    """Role, ownership or collaborator precondition not met"""

    status_code = 403

    def __init__(self, message: str = "Permission denied"):
        super().__init__(message, code="PERMISSION_DENIED")


class RequiresPullRequestError(PermissionDeniedError):
    """Collaborators must submit file changes through a pull request"""

    def __init__(self, project_id: str):
        super().__init__(
            "Collaborators cannot upload files directly. "
            "Please create a pull request with your changes."
        )
        self.code = "REQUIRES_PULL_REQUEST"
        self.details = {"redirect_to": f"/projects/{project_id}/collaborate"}


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(ShareXConnectError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} not found",
            code=f"{resource_type.upper().replace(' ', '_')}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class ProjectNotFoundError(ResourceNotFoundError):
    def __init__(self, project_id: str):
        super().__init__("Project", project_id)


class UserNotFoundError(ResourceNotFoundError):
    def __init__(self, user_id: str):
        super().__init__("User", user_id)


class CollaborationRequestNotFoundError(ResourceNotFoundError):
    def __init__(self, request_id: str):
        super().__init__("Collaboration request", request_id)


class CollaboratorNotFoundError(ResourceNotFoundError):
    def __init__(self, user_id: str):
        super().__init__("Collaborator", user_id)


class RepositoryItemNotFoundError(ResourceNotFoundError):
    def __init__(self, item_id: str):
        super().__init__("Repository item", item_id)


class ChangeRequestNotFoundError(ResourceNotFoundError):
    def __init__(self, change_request_id: str):
        super().__init__("Change request", change_request_id)


class PullRequestNotFoundError(ResourceNotFoundError):
    def __init__(self, pull_request_id: str):
        super().__init__("Pull request", pull_request_id)


class ProjectFileNotFoundError(ResourceNotFoundError):
    def __init__(self, file_id: str):
        super().__init__("File", file_id)


class ReviewNotFoundError(ResourceNotFoundError):
    def __init__(self, review_id: str):
        super().__init__("Review", review_id)


# ============================================
# Validation & State Errors (400-type)
# ============================================

class ValidationError(ShareXConnectError):
    """Input validation failed"""

    status_code = 400

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        errors: Optional[List[Dict[str, Any]]] = None,
    ):
        if errors is None and field:
            errors = [{"field": field, "message": message}]
        details = {"field": field} if field else {}
        super().__init__(message, code="VALIDATION_ERROR", details=details, errors=errors)


class InvalidStateTransitionError(ShareXConnectError):
    """Workflow entity is not in a state that allows the requested change"""

    status_code = 400

    def __init__(self, message: str, current_status: Optional[str] = None,
                 requested_status: Optional[str] = None):
        super().__init__(message, code="INVALID_STATE_TRANSITION")
        if current_status:
            self.details["current_status"] = current_status
        if requested_status:
            self.details["requested_status"] = requested_status


# ============================================
# Internal Errors (500-type)
# ============================================

class InternalError(ShareXConnectError):
    """Persistence failure or unexpected condition"""

    status_code = 500

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message, code="INTERNAL_ERROR")


class MergeError(InternalError):
    """Pull request merge aborted; nothing was applied"""

    def __init__(self, pull_request_id: str, message: str = "Failed to merge pull request"):
        super().__init__(message)
        self.code = "MERGE_FAILED"
        self.details["pull_request_id"] = pull_request_id
