"""Virtual path model."""

from .path import Path, RootType, format_root_path, path_hash

__all__ = ["Path", "RootType", "format_root_path", "path_hash"]
