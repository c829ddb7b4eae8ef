"""Append-only version history models."""

from sqlalchemy import Column, DateTime, ForeignKey, Index, SmallInteger, String, UniqueConstraint
from ..database import Base
from .types import Digest, Id


class FileHistory(Base):
    """One content revision of a file. Rows are never updated or deleted."""

    __tablename__ = "folder_history"
    __table_args__ = (
        UniqueConstraint("folder_id", "content_id", "created_time", name="uq_folder_history_entry"),
    )

    id = Column(Id, primary_key=True, autoincrement=True)
    folder_id = Column(Id, ForeignKey("folder.id", ondelete="CASCADE"), nullable=False)
    content_id = Column(Digest, nullable=False)
    created_time = Column(DateTime(timezone=True), nullable=False)


class ContentHistory(Base):
    """Content revision of any entity (alerts, snoozes, ...) keyed by type and id."""

    __tablename__ = "content_history"
    __table_args__ = (
        UniqueConstraint(
            "content_type", "entity_id", "content_id", "created_by", "created_time",
            name="uq_content_history_entry",
        ),
        Index("ix_content_history_entity", "content_type", "entity_id"),
    )

    id = Column(Id, primary_key=True, autoincrement=True)
    content_type = Column(SmallInteger, nullable=False)
    entity_id = Column(Id, nullable=False)
    content_id = Column(Digest, nullable=False)
    created_by = Column(String(255), nullable=False)
    created_time = Column(DateTime(timezone=True), nullable=False)
