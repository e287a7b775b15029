# Authentication module

from sharexconnect.modules.auth.dependencies import (
    get_current_user,
    get_current_admin,
    get_current_faculty,
)

__all__ = [
    "get_current_user",
    "get_current_admin",
    "get_current_faculty",
]
