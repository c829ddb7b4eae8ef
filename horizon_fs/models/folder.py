"""Folder model: folders and files share one table."""

from enum import IntEnum

from sqlalchemy import Column, DateTime, Index, String, Text, UniqueConstraint
from ..database import Base
from .types import Digest, Id, IntEnumType, PathHash


class FolderType(IntEnum):
    """Kind of tree a folder row belongs to. Part of every lookup predicate."""

    DASHBOARD = 0
    SNAPSHOT = 1


class Folder(Base):
    """A node of the virtual filesystem.

    A row is a *file* iff ``content_id`` is set; otherwise it is a folder.
    ``path_hash`` and ``parent_path_hash`` must always be the digests of the
    current ``path`` and its parent path.
    """

    __tablename__ = "folder"
    __table_args__ = (
        UniqueConstraint("type", "path_hash", name="uq_folder_type_path_hash"),
        Index("ix_folder_type_parent_path_hash", "type", "parent_path_hash"),
    )

    # Primary key
    id = Column(Id, primary_key=True, autoincrement=True)

    name = Column(String(255), nullable=False)
    type = Column(IntEnumType(FolderType), nullable=False, default=FolderType.DASHBOARD)

    # Location
    path = Column(Text, nullable=False)
    path_hash = Column(PathHash, nullable=False)
    parent_path_hash = Column(PathHash, nullable=True)  # NULL for root folders

    # Content pointer (files only)
    content_id = Column(Digest, nullable=True)

    # Audit
    created_by = Column(String(255))
    created_time = Column(DateTime(timezone=True))
    updated_by = Column(String(255))
    updated_time = Column(DateTime(timezone=True))

    # Filled in from joins at read time; never persisted on this row.
    last_visited_time = None  # folder_activity.last_visited_time
    favorited_time = None  # favorite_folder.created_time
    slug = None
    content = None  # content.data
    content_compressed = False  # content.compressed

    @property
    def is_file(self) -> bool:
        return self.content_id is not None

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Folder):
            return NotImplemented
        return self.path == other.path

    def __hash__(self) -> int:
        return hash(self.path)

    def __repr__(self) -> str:
        kind = "file" if self.is_file else "folder"
        return f"<Folder {kind} id={self.id} path={self.path!r}>"
