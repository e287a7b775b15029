from pydantic import BaseModel
from typing import Literal


class RoleUpdate(BaseModel):
    """Admins may move users between the non-admin roles only"""
    role: Literal["STUDENT", "FACULTY", "GUEST"]
