"""Content store operations: build, store and read digest-keyed payloads."""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import sessionmaker

from ..core.config import settings
from ..database import ReadOnlySessionLocal, SessionLocal, session_scope
from ..models import Content, ContentHistory
from ..models.types import utcnow
from ..repositories.content_repository import ContentRepository
from .content_utils import compress, decompress, digest

logger = logging.getLogger(__name__)


class ContentService:
    """Stores opaque payloads once per digest.

    Public methods:
        build                  -- compress and digest a payload (no I/O)
        create_content         -- store a payload if its digest is new
        get                    -- stored row by digest
        get_content            -- original payload bytes by digest
        create_content_history -- record a revision of any entity
        get_content_history    -- revisions of one entity, oldest first
    """

    def __init__(
        self,
        session_factory: Optional[sessionmaker] = None,
        read_only_session_factory: Optional[sessionmaker] = None,
        compress_content: Optional[bool] = None,
    ):
        self.session_factory = session_factory or SessionLocal
        self.read_only_session_factory = read_only_session_factory or ReadOnlySessionLocal
        if compress_content is None:
            compress_content = settings.compress_content
        self.compress_content = compress_content

    def build(self, data: bytes, created_by: str, created_time: Optional[datetime] = None) -> Content:
        """Prepare a content row. The digest covers the bytes actually stored."""
        stored = compress(data) if self.compress_content else data
        return Content(
            sha2=digest(stored),
            data=stored,
            compressed=self.compress_content,
            created_by=created_by,
            created_time=created_time or utcnow(),
        )

    def create_content(self, data: bytes, created_by: str) -> Content:
        """Store a payload and return the stored row.

        When the digest is already stored the existing row comes back, with
        its original ``created_by`` and ``created_time``.
        """
        content = self.build(data, created_by)
        with session_scope(self.session_factory) as db:
            repo = ContentRepository(db)
            if repo.create(content):
                return content
            logger.debug("Content already stored", extra={"sha2": content.sha2})
            return repo.get_by_sha(content.sha2)

    def get(self, sha2: bytes) -> Optional[Content]:
        with session_scope(self.read_only_session_factory, read_only=True) as db:
            return ContentRepository(db).get_by_sha(sha2)

    def get_content(self, sha2: bytes) -> Optional[bytes]:
        content = self.get(sha2)
        if content is None:
            return None
        return decompress(content.data, content.compressed)

    def create_content_history(
        self,
        content_type: int,
        entity_id: int,
        data: bytes,
        created_by: str,
    ) -> Optional[int]:
        """Store ``data`` and log it as the latest revision of an entity.

        Returns the history id, or None when the same revision was already
        logged.
        """
        now = utcnow()
        content = self.build(data, created_by, now)
        with session_scope(self.session_factory) as db:
            repo = ContentRepository(db)
            repo.create(content)
            return repo.create_history(
                ContentHistory(
                    content_type=content_type,
                    entity_id=entity_id,
                    content_id=content.sha2,
                    created_by=created_by,
                    created_time=now,
                )
            )

    def get_content_history(self, content_type: int, entity_id: int) -> List[ContentHistory]:
        with session_scope(self.read_only_session_factory, read_only=True) as db:
            return ContentRepository(db).list_history(content_type, entity_id)
