from fastapi import APIRouter
from sharexconnect.api.v1.endpoints import (
    auth,
    projects,
    collaboration,
    repository,
    change_requests,
    pull_requests,
    reviews,
    admin,
    health,
)

api_router = APIRouter()

api_router.include_router(health.router)

# Include endpoint routers
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(projects.router, prefix="/projects", tags=["Projects"])
api_router.include_router(repository.router, prefix="/projects", tags=["Repository"])
api_router.include_router(pull_requests.router, prefix="/projects", tags=["Pull Requests"])
api_router.include_router(collaboration.router, tags=["Collaboration"])
api_router.include_router(change_requests.router, tags=["Change Requests"])
api_router.include_router(reviews.router, tags=["Reviews"])
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])
