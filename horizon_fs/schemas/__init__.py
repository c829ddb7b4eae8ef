"""Pydantic views."""

from .folder import FileHistoryView, FolderView

__all__ = ["FolderView", "FileHistoryView"]
