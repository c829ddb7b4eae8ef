"""Folder and file views returned by the services."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from ..fs import Path
from ..models import FileHistory, Folder, FolderType


class FolderView(BaseModel):
    """A folder or file as callers see it.

    ``path`` is the short, id-based locator ``/<id>/<slug>``; ``full_path``
    is the virtual path stored on the row.
    """
    id: Optional[int] = None
    name: str
    type: FolderType
    path: Optional[str] = None
    full_path: str
    is_file: bool = False
    content: Optional[bytes] = None
    favorite: bool = False
    favorited_time: Optional[datetime] = None
    last_visited_time: Optional[datetime] = None
    created_by: Optional[str] = None
    created_time: Optional[datetime] = None
    updated_by: Optional[str] = None
    updated_time: Optional[datetime] = None
    subfolders: List["FolderView"] = Field(default_factory=list)
    files: List["FolderView"] = Field(default_factory=list)

    @classmethod
    def from_model(cls, folder: Folder, content: Optional[bytes] = None) -> "FolderView":
        locator = None
        if folder.id is not None and folder.id > 0:
            slug = folder.slug or Path.leaf_of(folder.path)
            locator = f"/{folder.id}/{slug}"
        return cls(
            id=folder.id,
            name=folder.name,
            type=folder.type,
            path=locator,
            full_path=folder.path,
            is_file=folder.is_file,
            content=content,
            favorite=folder.favorited_time is not None,
            favorited_time=folder.favorited_time,
            last_visited_time=folder.last_visited_time,
            created_by=folder.created_by,
            created_time=folder.created_time,
            updated_by=folder.updated_by,
            updated_time=folder.updated_time,
        )


class FileHistoryView(BaseModel):
    """One revision of a file."""
    id: int
    file_id: int
    content_id: str  # hex digest
    created_time: datetime

    @classmethod
    def from_model(cls, history: FileHistory) -> "FileHistoryView":
        return cls(
            id=history.id,
            file_id=history.folder_id,
            content_id=history.content_id.hex(),
            created_time=history.created_time,
        )
