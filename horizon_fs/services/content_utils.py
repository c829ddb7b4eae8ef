"""Content processing utilities - deep helper module."""

import gzip
import hashlib
import re

COPY_PREFIX = "Copy of "
"""
Prefix given to a moved folder or file whose name is already taken at the
destination.
"""


def digest(data: bytes) -> bytes:
    """SHA-256 of the stored bytes; the primary key of the content table."""
    return hashlib.sha256(data).digest()


def compress(data: bytes) -> bytes:
    """
    Gzip a payload deterministically.

    The gzip header carries a modification time; pinning it to 0 keeps the
    output (and therefore its digest) identical for identical input, so
    compressed content still dedups.
    """
    return gzip.compress(data, mtime=0)


def decompress(data: bytes, compressed: bool) -> bytes:
    """Inflate a stored payload that was written compressed; return others unchanged."""
    if compressed:
        return gzip.decompress(data)
    return data


def slugify(name: str, default: str = "untitled") -> str:
    """
    Turn a display name into a path segment.

    Lower-cases, collapses runs of anything outside ``[a-z0-9]`` into one
    ``-`` and trims dashes from both ends. Names with nothing usable fall
    back to ``default``.
    """
    slug = re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")
    return slug or default
