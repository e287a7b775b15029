# Pydantic schemas
from sharexconnect.schemas.auth import (
    UserRegister,
    UserLogin,
    UserSummary,
    UserResponse,
    LoginResponse,
)
from sharexconnect.schemas.project import (
    ProjectCreate,
    ProjectUpdate,
    ProjectResponse,
    ProjectListResponse,
    ProjectSummary,
    CollaboratorAdd,
    CollaboratorResponse,
    ProjectFileResponse,
    ProjectFileUploadResponse,
)
from sharexconnect.schemas.collaboration import (
    CollaborationRequestCreate,
    InvitationCreate,
    CollaborationRespond,
    CollaborationRequestResponse,
    CollaborationRequestDetail,
    InvitationCreatedResponse,
)
from sharexconnect.schemas.repository import (
    RepositoryItemCreate,
    RepositoryItemUpdate,
    RepositoryItemResponse,
)
from sharexconnect.schemas.change_request import (
    ChangeRequestCreate,
    ChangeRequestReview,
    ChangeRequestResponse,
)
from sharexconnect.schemas.pull_request import (
    PullRequestCreate,
    AutoPullRequestCreate,
    PullRequestStatusUpdate,
    PullRequestFileResponse,
    PullRequestResponse,
    PullRequestDetail,
    PullRequestCreatedResponse,
)
from sharexconnect.schemas.review import (
    ReviewerAssign,
    ReviewSubmit,
    ReviewResponse,
    ReviewAssignmentResponse,
)
from sharexconnect.schemas.admin import RoleUpdate
