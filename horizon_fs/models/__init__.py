"""Database models."""

from .folder import Folder, FolderType
from .content import Content
from .history import FileHistory, ContentHistory
from .activity import FavoriteFolder, FolderActivity, Activity

__all__ = [
    "Folder", "FolderType", "Content",
    "FileHistory", "ContentHistory",
    "FavoriteFolder", "FolderActivity", "Activity",
]
