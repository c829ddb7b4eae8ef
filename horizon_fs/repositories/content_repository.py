"""Content repository: the content-addressable blob store."""

import logging
from typing import List, Optional

from ..models import Content, ContentHistory
from .base import BaseRepository

logger = logging.getLogger(__name__)


class ContentRepository(BaseRepository[Content]):
    """Digest-keyed payload storage plus the generic content history log.

    Content rows are immutable. Writing a digest that is already stored is a
    silent no-op and leaves the original ``created_by``/``created_time``.
    """

    model_class = Content
    id_column = "sha2"

    def create(self, content: Content) -> bool:
        """Store content if its digest is new. Returns True if a row was inserted."""
        inserted = self._insert_ignore(
            Content,
            {
                "sha2": content.sha2,
                "data": content.data,
                "compressed": bool(content.compressed),
                "created_by": content.created_by,
                "created_time": content.created_time,
            },
            conflict_columns=["sha2"],
        )
        if inserted:
            logger.debug("Stored content", extra={"sha2": content.sha2, "size": len(content.data)})
        return bool(inserted)

    def get_by_sha(self, sha2: bytes) -> Optional[Content]:
        return self.get_by_id_optional(sha2)

    def exists(self, sha2: bytes) -> bool:
        return self.db.query(Content.sha2).filter(Content.sha2 == sha2).first() is not None

    # --- Generic content history ---

    def create_history(self, history: ContentHistory) -> Optional[int]:
        """Append a history entry. Returns the new id, or None for a duplicate."""
        history_id = self._insert_ignore(
            ContentHistory,
            {
                "content_type": history.content_type,
                "entity_id": history.entity_id,
                "content_id": history.content_id,
                "created_by": history.created_by,
                "created_time": history.created_time,
            },
            conflict_columns=["content_type", "entity_id", "content_id", "created_by", "created_time"],
            returning="id",
        )
        history.id = history_id
        return history_id

    def list_history(self, content_type: int, entity_id: int) -> List[ContentHistory]:
        return (
            self.db.query(ContentHistory)
            .filter(
                ContentHistory.content_type == content_type,
                ContentHistory.entity_id == entity_id,
            )
            .order_by(ContentHistory.created_time, ContentHistory.id)
            .all()
        )
