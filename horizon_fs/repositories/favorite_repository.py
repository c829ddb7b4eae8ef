"""Favorite folder repository."""

from datetime import datetime
from typing import Optional

from ..models import FavoriteFolder
from ..models.types import utcnow
from .base import BaseRepository


class FavoriteRepository(BaseRepository[FavoriteFolder]):
    """Per-user favorite marks. Adding and removing are both idempotent."""

    model_class = FavoriteFolder

    def add(self, user_id: str, folder_id: int, created_time: Optional[datetime] = None) -> bool:
        """Mark a folder as favorite. Returns False if it already was."""
        inserted = self._insert_ignore(
            FavoriteFolder,
            {
                "user_id": user_id,
                "folder_id": folder_id,
                "created_time": created_time or utcnow(),
            },
            conflict_columns=["user_id", "folder_id"],
        )
        return bool(inserted)

    def delete(self, user_id: str, folder_id: int) -> int:
        """Remove a favorite mark. Returns the number of rows removed (0 or 1)."""
        return (
            self.db.query(FavoriteFolder)
            .filter(FavoriteFolder.user_id == user_id, FavoriteFolder.folder_id == folder_id)
            .delete(synchronize_session=False)
        )

    def is_favorite(self, user_id: str, folder_id: int) -> bool:
        return (
            self.db.query(FavoriteFolder.id)
            .filter(FavoriteFolder.user_id == user_id, FavoriteFolder.folder_id == folder_id)
            .first()
        ) is not None
