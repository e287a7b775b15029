"""Column types shared by the ShareXConnect models"""
import uuid
from typing import List, Optional

from sqlalchemy import JSON, String, TypeDecorator


def generate_uuid() -> str:
    return str(uuid.uuid4())


class GUID(TypeDecorator):
    """
    Identifiers are 36-char strings on every backend. `uuid.UUID` values
    are accepted on bind; everything is compared in lowercase form.
    """
    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect) -> Optional[str]:
        if value is None:
            return None
        return str(value).lower()

    def process_result_value(self, value, dialect) -> Optional[str]:
        return None if value is None else str(value)


class StringList(TypeDecorator):
    """JSON array of strings, e.g. a project's tech stack or a PR's changed paths"""
    impl = JSON
    cache_ok = True

    def process_bind_param(self, value, dialect) -> Optional[List[str]]:
        if value is None:
            return None
        return [str(item) for item in value]

    def process_result_value(self, value, dialect) -> List[str]:
        return list(value or [])
