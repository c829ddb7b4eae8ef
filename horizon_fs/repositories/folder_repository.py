"""Folder repository: persistence and lookup over the folder table.

Folders and files live in the same table; a row carrying a ``content_id``
is a file. Every lookup filters on ``type`` as well as the key so that a
dashboard folder and a snapshot folder with the same id space or path never
answer for each other.
"""

import logging
from typing import List, Optional, Sequence

from sqlalchemy import and_, update

from ..exceptions import ValidationError
from ..models import Content, FavoriteFolder, Folder, FolderActivity, FolderType
from .base import BaseRepository

logger = logging.getLogger(__name__)


class FolderRepository(BaseRepository[Folder]):
    """Repository for folder and file rows."""

    model_class = Folder

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_folder(self, folder: Folder) -> int:
        """Insert one row and return its generated id."""
        self.db.add(folder)
        self.db.flush()
        logger.debug("Created folder", extra={"folder_id": folder.id, "path": folder.path})
        return folder.id

    def create_folders(self, folders: Sequence[Folder]) -> List[int]:
        """Insert many rows in one batch. Ids come back in input order."""
        self.db.add_all(folders)
        self.db.flush()
        return [folder.id for folder in folders]

    def create_file(self, file: Folder) -> int:
        if file.content_id is None:
            raise ValidationError("A file requires a content id", field="content_id")
        return self.create_folder(file)

    def update_folder(self, folder: Folder) -> int:
        """Rewrite name, location and audit columns of one row.

        Only the row with ``folder.id`` changes; descendants keep their old
        paths until the caller rewrites them too. Returns the row count.
        """
        return self._update_by_id(folder.id, self._location_values(folder))

    def update_file(self, file: Folder) -> int:
        if file.content_id is None:
            raise ValidationError("A file requires a content id", field="content_id")
        values = self._location_values(file)
        values["content_id"] = file.content_id
        return self._update_by_id(file.id, values)

    @staticmethod
    def _location_values(folder: Folder) -> dict:
        return {
            "name": folder.name,
            "path": folder.path,
            "path_hash": folder.path_hash,
            "parent_path_hash": folder.parent_path_hash,
            "updated_by": folder.updated_by,
            "updated_time": folder.updated_time,
        }

    def _update_by_id(self, folder_id: int, values: dict) -> int:
        stmt = (
            update(Folder)
            .where(Folder.id == folder_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount

    # ------------------------------------------------------------------
    # Point lookups
    # ------------------------------------------------------------------

    def _typed_query(self, folder_type: FolderType):
        return self._base_query().filter(Folder.type == folder_type)

    def get_by_id(self, folder_type: FolderType, folder_id: int) -> Optional[Folder]:
        return self._typed_query(folder_type).filter(Folder.id == folder_id).first()

    def get_by_path_hash(self, folder_type: FolderType, path_hash: bytes) -> Optional[Folder]:
        return self._typed_query(folder_type).filter(Folder.path_hash == path_hash).first()

    def get_folder_by_id(self, folder_type: FolderType, folder_id: int, user_id: str) -> Optional[Folder]:
        """Folder rows only, with ``favorited_time`` set for ``user_id``."""
        row = (
            self.db.query(Folder, FavoriteFolder.created_time)
            .outerjoin(
                FavoriteFolder,
                and_(FavoriteFolder.folder_id == Folder.id, FavoriteFolder.user_id == user_id),
            )
            .filter(
                Folder.type == folder_type,
                Folder.id == folder_id,
                Folder.content_id.is_(None),
            )
            .first()
        )
        if row is None:
            return None
        folder, favorited_time = row
        folder.favorited_time = favorited_time
        return folder

    def get_file_by_id(self, folder_type: FolderType, file_id: int) -> Optional[Folder]:
        """File rows only, without the payload."""
        return (
            self._typed_query(folder_type)
            .filter(Folder.id == file_id, Folder.content_id.isnot(None))
            .first()
        )

    def get_file_and_content_by_id(self, folder_type: FolderType, file_id: int) -> Optional[Folder]:
        """File with its payload. None when the content row is missing."""
        row = (
            self.db.query(Folder, Content.data, Content.compressed)
            .join(Content, Content.sha2 == Folder.content_id)
            .filter(Folder.type == folder_type, Folder.id == file_id)
            .first()
        )
        return self._with_content(row)

    def get_file_or_folder_by_id(self, folder_type: FolderType, folder_id: int) -> Optional[Folder]:
        """Any row by id; ``content`` is None for folders and dangling files."""
        row = (
            self.db.query(Folder, Content.data, Content.compressed)
            .outerjoin(Content, Content.sha2 == Folder.content_id)
            .filter(Folder.type == folder_type, Folder.id == folder_id)
            .first()
        )
        return self._with_content(row)

    def get_file_and_content_by_path_hash(self, folder_type: FolderType, path_hash: bytes) -> Optional[Folder]:
        row = (
            self.db.query(Folder, Content.data, Content.compressed)
            .outerjoin(Content, Content.sha2 == Folder.content_id)
            .filter(Folder.type == folder_type, Folder.path_hash == path_hash)
            .first()
        )
        return self._with_content(row)

    @staticmethod
    def _with_content(row) -> Optional[Folder]:
        if row is None:
            return None
        folder, data, compressed = row
        folder.content = data
        folder.content_compressed = bool(compressed)
        return folder

    # ------------------------------------------------------------------
    # Listings
    # ------------------------------------------------------------------

    def list_by_parent_path_hash(self, folder_type: FolderType, parent_path_hash: bytes) -> List[Folder]:
        """Direct children of a path, one level only."""
        return (
            self._typed_query(folder_type)
            .filter(Folder.parent_path_hash == parent_path_hash)
            .order_by(Folder.id)
            .all()
        )

    def get_recently_visited(self, user_id: str, limit: int) -> List[Folder]:
        rows = (
            self.db.query(Folder, FolderActivity.last_visited_time)
            .join(FolderActivity, FolderActivity.folder_id == Folder.id)
            .filter(FolderActivity.user_id == user_id)
            .order_by(FolderActivity.last_visited_time.desc(), Folder.id.desc())
            .limit(limit)
            .all()
        )
        result = []
        for folder, visited in rows:
            folder.last_visited_time = visited
            result.append(folder)
        return result

    def get_favorites(self, user_id: str) -> List[Folder]:
        rows = (
            self.db.query(Folder, FavoriteFolder.created_time)
            .join(FavoriteFolder, FavoriteFolder.folder_id == Folder.id)
            .filter(FavoriteFolder.user_id == user_id)
            .order_by(FavoriteFolder.created_time.desc(), FavoriteFolder.id.desc())
            .all()
        )
        result = []
        for folder, favorited in rows:
            folder.favorited_time = favorited
            result.append(folder)
        return result
