"""File history repository."""

from datetime import datetime
from typing import List, Optional

from ..models import FileHistory
from .base import BaseRepository


class FileHistoryRepository(BaseRepository[FileHistory]):
    """Append-only log of the content revisions of each file."""

    model_class = FileHistory

    def append(self, file_id: int, content_id: bytes, created_time: datetime) -> Optional[int]:
        """Record that ``file_id`` pointed at ``content_id`` at ``created_time``.

        An identical entry is suppressed rather than rejected; in that case
        None is returned instead of the existing id.
        """
        return self._insert_ignore(
            FileHistory,
            {
                "folder_id": file_id,
                "content_id": content_id,
                "created_time": created_time,
            },
            conflict_columns=["folder_id", "content_id", "created_time"],
            returning="id",
        )

    def list_by_file(self, file_id: int) -> List[FileHistory]:
        """All revisions of a file, oldest first."""
        return (
            self.db.query(FileHistory)
            .filter(FileHistory.folder_id == file_id)
            .order_by(FileHistory.created_time, FileHistory.id)
            .all()
        )
