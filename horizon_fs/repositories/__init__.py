"""Repositories for database access."""

from .folder_repository import FolderRepository
from .content_repository import ContentRepository
from .history_repository import FileHistoryRepository
from .favorite_repository import FavoriteRepository
from .activity_repository import ActivityRepository

__all__ = [
    "FolderRepository",
    "ContentRepository",
    "FileHistoryRepository",
    "FavoriteRepository",
    "ActivityRepository",
]
