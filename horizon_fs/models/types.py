"""Shared column types."""

from datetime import datetime, timezone
from enum import IntEnum

from sqlalchemy import BigInteger, Integer, LargeBinary, SmallInteger
from sqlalchemy.types import TypeDecorator

# Autoincrement only works on INTEGER PRIMARY KEY in SQLite.
Id = BigInteger().with_variant(Integer, "sqlite")

# MD5 of a normalized path.
PathHash = LargeBinary(16)

# SHA-256 of stored content bytes.
Digest = LargeBinary(32)


class IntEnumType(TypeDecorator):
    """Store an IntEnum as its small integer value."""

    impl = SmallInteger
    cache_ok = True

    def __init__(self, enum_class: type[IntEnum], *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._enum_class = enum_class

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return int(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return self._enum_class(value)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)
