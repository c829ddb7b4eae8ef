"""Content-addressable blob model."""

from sqlalchemy import Boolean, Column, DateTime, LargeBinary, String
from ..database import Base
from .types import Digest


class Content(Base):
    """Immutable payload keyed by the SHA-256 digest of its bytes."""

    __tablename__ = "content"

    sha2 = Column(Digest, primary_key=True)
    data = Column(LargeBinary, nullable=False)
    # Set when data is a gzip stream written by ContentService.build.
    compressed = Column(Boolean, nullable=False, default=False)

    created_by = Column(String(255))
    created_time = Column(DateTime(timezone=True))

    def __repr__(self) -> str:
        digest = self.sha2.hex() if self.sha2 else None
        return f"<Content sha2={digest}>"
