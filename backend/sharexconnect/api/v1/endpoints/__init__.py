# API endpoints
from . import auth, projects, collaboration, repository, change_requests, pull_requests, reviews, admin, health

__all__ = [
    "auth",
    "projects",
    "collaboration",
    "repository",
    "change_requests",
    "pull_requests",
    "reviews",
    "admin",
    "health",
]
