"""Business logic services."""

from .activity_service import ActivityRecorder
from .content_service import ContentService
from .folder_service import FolderService

__all__ = ["ActivityRecorder", "ContentService", "FolderService"]
