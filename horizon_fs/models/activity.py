"""Favorites and recency tracking models."""

from sqlalchemy import Column, DateTime, ForeignKey, Index, SmallInteger, String, UniqueConstraint
from ..database import Base
from .types import Id


class FavoriteFolder(Base):
    """A user's favorite mark on a folder or file."""

    __tablename__ = "favorite_folder"
    __table_args__ = (
        UniqueConstraint("user_id", "folder_id", name="uq_favorite_folder_user_folder"),
    )

    id = Column(Id, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False)
    folder_id = Column(Id, ForeignKey("folder.id", ondelete="CASCADE"), nullable=False)
    created_time = Column(DateTime(timezone=True), nullable=False)


class FolderActivity(Base):
    """Last time a user visited a folder or file; one row per pair."""

    __tablename__ = "folder_activity"
    __table_args__ = (
        Index("ix_folder_activity_user_visited", "user_id", "last_visited_time"),
    )

    user_id = Column(String(255), primary_key=True)
    folder_id = Column(Id, ForeignKey("folder.id", ondelete="CASCADE"), primary_key=True)
    last_visited_time = Column(DateTime(timezone=True), nullable=False)


class Activity(Base):
    """Last time a user touched an entity of any type; one row per triple."""

    __tablename__ = "activity"

    user_id = Column(String(255), primary_key=True)
    entity_type = Column(SmallInteger, primary_key=True, autoincrement=False)
    entity_id = Column(Id, primary_key=True, autoincrement=False)
    timestamp = Column(DateTime(timezone=True), nullable=False)
