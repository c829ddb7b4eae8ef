"""Recency tracking repository."""

from datetime import datetime
from typing import Optional

from ..models import Activity, FolderActivity
from ..models.types import utcnow
from .base import BaseRepository


class ActivityRepository(BaseRepository[FolderActivity]):
    """Upserts "last visited" timestamps.

    A repeat visit rewrites the timestamp of the existing row in the same
    statement that would have inserted it, so concurrent visits by one user
    never create a second row.
    """

    model_class = FolderActivity

    def touch_folder(self, user_id: str, folder_id: int, visited_time: Optional[datetime] = None) -> int:
        return self._upsert(
            FolderActivity,
            {
                "user_id": user_id,
                "folder_id": folder_id,
                "last_visited_time": visited_time or utcnow(),
            },
            conflict_columns=["user_id", "folder_id"],
            update_columns=["last_visited_time"],
        )

    def add_activity(
        self,
        user_id: str,
        entity_type: int,
        entity_id: int,
        timestamp: Optional[datetime] = None,
    ) -> int:
        return self._upsert(
            Activity,
            {
                "user_id": user_id,
                "entity_type": entity_type,
                "entity_id": entity_id,
                "timestamp": timestamp or utcnow(),
            },
            conflict_columns=["user_id", "entity_type", "entity_id"],
            update_columns=["timestamp"],
        )

    def get_folder_activity(self, user_id: str, folder_id: int) -> Optional[FolderActivity]:
        return (
            self.db.query(FolderActivity)
            .filter(FolderActivity.user_id == user_id, FolderActivity.folder_id == folder_id)
            .first()
        )

    def get_activity(self, user_id: str, entity_type: int, entity_id: int) -> Optional[Activity]:
        return (
            self.db.query(Activity)
            .filter(
                Activity.user_id == user_id,
                Activity.entity_type == entity_type,
                Activity.entity_id == entity_id,
            )
            .first()
        )
