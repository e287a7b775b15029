"""
Repository Service - per-project tree of files and folders

Writes are last-write-wins: an update replaces `content` outright. Deleting
a folder removes its whole subtree through the parent_id ON DELETE CASCADE.
"""

import os
from typing import List, Optional

from sqlalchemy import select, delete
from sqlalchemy.ext.asyncio import AsyncSession

from sharexconnect.core.exceptions import RepositoryItemNotFoundError, ValidationError
from sharexconnect.core.logging_config import logger
from sharexconnect.models.repository import ProjectRepositoryItem, RepositoryItemType
from sharexconnect.models.user import User
from sharexconnect.schemas.repository import RepositoryItemCreate, RepositoryItemUpdate
from sharexconnect.services.project_service import ProjectService


EXTENSION_LANGUAGES = {
    ".py": "python",
    ".js": "javascript",
    ".jsx": "javascript",
    ".ts": "typescript",
    ".tsx": "typescript",
    ".java": "java",
    ".c": "c",
    ".cpp": "cpp",
    ".cs": "csharp",
    ".go": "go",
    ".rs": "rust",
    ".rb": "ruby",
    ".php": "php",
    ".html": "html",
    ".css": "css",
    ".json": "json",
    ".md": "markdown",
    ".sql": "sql",
    ".yml": "yaml",
    ".yaml": "yaml",
}


def detect_language(name: str) -> Optional[str]:
    return EXTENSION_LANGUAGES.get(os.path.splitext(name)[1].lower())


def content_size(content: Optional[str]) -> int:
    return len(content.encode("utf-8")) if content else 0


class RepositoryService:

    def __init__(self, db: AsyncSession):
        self.db = db
        self.projects = ProjectService(db)

    async def _get_item(self, project_id: str, item_id: str) -> ProjectRepositoryItem:
        result = await self.db.execute(
            select(ProjectRepositoryItem).where(
                ProjectRepositoryItem.id == item_id,
                ProjectRepositoryItem.project_id == project_id,
            )
        )
        item = result.scalar_one_or_none()
        if not item:
            raise RepositoryItemNotFoundError(item_id)
        return item

    async def _validate_parent(self, project_id: str, parent_id: Optional[str], item_id: Optional[str] = None) -> None:
        if parent_id is None:
            return
        if item_id is not None and parent_id == item_id:
            raise ValidationError("An item cannot be its own parent", field="parent_id")
        result = await self.db.execute(
            select(ProjectRepositoryItem).where(
                ProjectRepositoryItem.id == parent_id,
                ProjectRepositoryItem.project_id == project_id,
            )
        )
        parent = result.scalar_one_or_none()
        if not parent:
            raise ValidationError("Parent folder not found in this project", field="parent_id")
        if not parent.is_folder:
            raise ValidationError("Parent must be a folder", field="parent_id")
        if item_id is None:
            return

        # The new parent must not sit inside the moved subtree
        ancestor_id = parent.parent_id
        while ancestor_id is not None:
            if ancestor_id == item_id:
                raise ValidationError("An item cannot be moved into its own subtree", field="parent_id")
            ancestor_id = (await self.db.execute(
                select(ProjectRepositoryItem.parent_id).where(ProjectRepositoryItem.id == ancestor_id)
            )).scalar_one_or_none()

    async def get_structure(self, project_id: str, user: User) -> List[ProjectRepositoryItem]:
        """Flat list of every node, ordered by path then name"""
        await self.projects.require_view(project_id, user)
        result = await self.db.execute(
            select(ProjectRepositoryItem)
            .where(ProjectRepositoryItem.project_id == project_id)
            .order_by(ProjectRepositoryItem.path.asc(), ProjectRepositoryItem.name.asc())
        )
        return list(result.scalars().all())

    async def get_item(self, project_id: str, item_id: str, user: User) -> ProjectRepositoryItem:
        await self.projects.require_view(project_id, user)
        return await self._get_item(project_id, item_id)

    async def create_item(self, project_id: str, user: User, data: RepositoryItemCreate) -> ProjectRepositoryItem:
        await self.projects.require_member(
            project_id, user, "Only the project owner or collaborators can edit the repository"
        )
        await self._validate_parent(project_id, data.parent_id)

        is_folder = data.type == RepositoryItemType.FOLDER
        content = None if is_folder else data.content
        item = ProjectRepositoryItem(
            project_id=project_id,
            parent_id=data.parent_id,
            path=data.path,
            name=data.name,
            type=data.type,
            content=content,
            size=data.size if data.size is not None else content_size(content),
            language=None if is_folder else (data.language or detect_language(data.name)),
            last_modified_by=user.id,
        )
        self.db.add(item)
        await self.db.commit()
        await self.db.refresh(item)
        logger.info(f"Repository {data.type.value.lower()} created in project {project_id}: {data.path}")
        return item

    async def update_item(
        self,
        project_id: str,
        item_id: str,
        user: User,
        data: RepositoryItemUpdate,
    ) -> ProjectRepositoryItem:
        await self.projects.require_member(
            project_id, user, "Only the project owner or collaborators can edit the repository"
        )
        item = await self._get_item(project_id, item_id)
        updates = data.model_dump(exclude_unset=True)

        if "parent_id" in updates:
            await self._validate_parent(project_id, updates["parent_id"], item_id=item.id)

        if "content" in updates:
            if item.is_folder and updates["content"] is not None:
                raise ValidationError("Folders cannot hold content", field="content")
            item.content = updates.pop("content")
            item.size = content_size(item.content)

        for field, value in updates.items():
            setattr(item, field, value)
        item.last_modified_by = user.id

        await self.db.commit()
        await self.db.refresh(item)
        return item

    async def delete_item(self, project_id: str, item_id: str, user: User) -> None:
        await self.projects.require_member(
            project_id, user, "Only the project owner or collaborators can edit the repository"
        )
        item = await self._get_item(project_id, item_id)
        path = item.path

        # Subtree goes with it via ON DELETE CASCADE on parent_id
        await self.db.execute(delete(ProjectRepositoryItem).where(ProjectRepositoryItem.id == item_id))
        await self.db.commit()
        logger.info(f"Repository item deleted from project {project_id}: {path}")
