"""Virtual path model for the folder hierarchy.

A path looks like ``/<root type>/<root name>/.../<leaf>``. Root types are
``user`` (``/user/alice``) and ``namespace`` (``/namespace/ns1``). Paths are
normalized to lower case with a leading slash and no trailing slash, and
their MD5 digest is what the folder table indexes on (``path_hash`` and
``parent_path_hash``) instead of walking parent ids.
"""

import hashlib
import string
from enum import Enum
from typing import Callable, Dict

from ..exceptions import PathError

SEPARATOR = "/"

# Trimmed from the right together so that normalize() is idempotent.
_TRAILING = SEPARATOR + string.whitespace


class RootType(str, Enum):
    """Top-level namespace of a virtual path."""

    USER = "user"
    NAMESPACE = "namespace"


def _format_user_root(user_id: str) -> str:
    # "user.alice" and "alice" both become "user/alice".
    user_id = user_id.replace(".", SEPARATOR)
    if not user_id.startswith(RootType.USER.value + SEPARATOR):
        user_id = RootType.USER.value + SEPARATOR + user_id
    return user_id


def _format_namespace_root(namespace: str) -> str:
    return SEPARATOR + RootType.NAMESPACE.value + SEPARATOR + namespace


_ROOT_FORMATTERS: Dict[RootType, Callable[[str], str]] = {
    RootType.USER: _format_user_root,
    RootType.NAMESPACE: _format_namespace_root,
}


def format_root_path(root_type: RootType, name: str) -> str:
    """Build the (un-normalized) root path string for a user id or namespace name."""
    return _ROOT_FORMATTERS[root_type](name)


def path_hash(path_string: str) -> bytes:
    """MD5 digest of a path string, used purely as an index key.

    A new hash object is created per call, so this is safe to use from
    concurrent threads.
    """
    return hashlib.md5(path_string.encode("utf-8"), usedforsecurity=False).digest()


class Path:
    """A parsed, normalized virtual path.

    Instances compare equal when their normalized path strings are equal.
    """

    _USER_ID_PREFIX = RootType.USER.value + "."

    def __init__(self, path_string: str):
        path_string = self.normalize(path_string)

        parts = path_string.split(SEPARATOR)
        if len(parts) < 3 or not parts[1] or not parts[2]:
            raise PathError(f"Invalid path {path_string}", path=path_string)

        try:
            root_type = RootType(parts[1])
        except ValueError:
            raise PathError(f"Invalid path {path_string}", path=path_string) from None

        self._path = path_string
        self._root_type = root_type
        self._root_name = parts[2]
        self._is_root = len(parts) == 3
        self._leaf = parts[-1]
        self._parent_path = path_string[:path_string.rfind(SEPARATOR)]

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def get(cls, path_string: str) -> "Path":
        return cls(path_string)

    @classmethod
    def get_by_user_id(cls, user_id: str) -> "Path":
        """Root path of a user, e.g. ``user.alice`` -> ``/user/alice``."""
        return cls(format_root_path(RootType.USER, user_id))

    @classmethod
    def get_by_namespace(cls, namespace: str) -> "Path":
        """Root path of a namespace, e.g. ``ns1`` -> ``/namespace/ns1``."""
        return cls(format_root_path(RootType.NAMESPACE, namespace))

    # ------------------------------------------------------------------
    # String helpers
    # ------------------------------------------------------------------

    @staticmethod
    def normalize(path_string: str) -> str:
        """Trim, force a leading slash, drop trailing slashes, lower-case."""
        path_string = path_string.strip()
        if not path_string.startswith(SEPARATOR):
            path_string = SEPARATOR + path_string
        path_string = path_string.rstrip(_TRAILING)
        return path_string.lower()

    @staticmethod
    def leaf_of(path_string: str) -> str:
        return path_string[path_string.rfind(SEPARATOR) + 1:]

    @classmethod
    def join(cls, parent_path: str, child: str) -> str:
        """Append a normalized child segment to a parent path string."""
        return parent_path + cls.normalize(child)

    @staticmethod
    def hash_of(path_string: str) -> bytes:
        return path_hash(path_string)

    @classmethod
    def get_user_id(cls, typed_user_id: str) -> str:
        """Strip the ``user.`` type prefix from a principal name, if present."""
        if typed_user_id.startswith(cls._USER_ID_PREFIX):
            return typed_user_id[len(cls._USER_ID_PREFIX):]
        return typed_user_id

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def path(self) -> str:
        return self._path

    @property
    def parent_path(self) -> str:
        return self._parent_path

    @property
    def root_type(self) -> RootType:
        return self._root_type

    @property
    def root_name(self) -> str:
        return self._root_name

    @property
    def leaf(self) -> str:
        return self._leaf

    @property
    def is_root(self) -> bool:
        return self._is_root

    def hash(self) -> bytes:
        return path_hash(self._path)

    def parent_hash(self) -> bytes:
        return path_hash(self._parent_path)

    def child_path(self, child: str) -> str:
        return self.join(self._path, child)

    # ------------------------------------------------------------------
    # Relations
    # ------------------------------------------------------------------

    def is_sibling(self, other: "Path") -> bool:
        return self._parent_path == other._parent_path

    def is_ancestor(self, other: "Path") -> bool:
        """Prefix test on parent paths, for paths that are not siblings.

        This compares raw string prefixes, so ``/user/a`` also counts as an
        ancestor of ``/user/ab/c``. Use ``contains`` for a strict subtree test.
        """
        return not self.is_sibling(other) and other._parent_path.startswith(self._parent_path)

    def contains(self, other: "Path") -> bool:
        """True if ``other`` lies strictly below this path in the tree."""
        return other._path.startswith(self._path + SEPARATOR)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def set_leaf(self, leaf: str) -> None:
        """Rename the last segment in place.

        Rows persisted under the old path (and, for folders, their
        descendants) are not touched; callers must rewrite them.
        """
        normalized = self.normalize(leaf)
        if not normalized:
            raise PathError(f"Invalid leaf {leaf!r} for path {self._path}", path=self._path)
        self._leaf = normalized[1:]
        self._path = self._parent_path + normalized

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Path):
            return NotImplemented
        return self._path == other._path

    def __hash__(self) -> int:
        return hash(self._path)

    def __str__(self) -> str:
        return self._path

    def __repr__(self) -> str:
        return f"Path({self._path!r})"
