"""Base repository with shared get-by-id and atomic write patterns.

Subclasses specify model_class and id_column. Besides plain lookups, the
base provides the two single-statement writes the store relies on to stay
race-free under concurrent writers:

- ``_insert_ignore``: insert a row unless a unique key already matches
  (``ON CONFLICT DO NOTHING`` / ``INSERT IGNORE``).
- ``_upsert``: insert a row or update some of its columns on key conflict
  (``ON CONFLICT DO UPDATE`` / ``ON DUPLICATE KEY UPDATE``).

Never replace these with a select followed by an insert.
"""

from typing import Any, Dict, Generic, Optional, Sequence, Type, TypeVar

from sqlalchemy import insert
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.orm import Query, Session

from ..database import Base

ModelT = TypeVar("ModelT", bound=Base)

_ON_CONFLICT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}
_MYSQL_DIALECTS = ("mysql", "mariadb")


class BaseRepository(Generic[ModelT]):
    """Shared repository logic for SQLAlchemy models.

    Class variables to set in subclasses:
        model_class: The SQLAlchemy model (e.g., Folder)
        id_column:   Name of the primary-key column (default "id")
    """

    model_class: Type[ModelT]
    id_column: str = "id"

    def __init__(self, db: Session):
        self.db = db

    def _base_query(self) -> Query:
        return self.db.query(self.model_class)

    def get_by_id_optional(self, entity_id) -> Optional[ModelT]:
        """Get entity by primary key, or None if not found."""
        col = getattr(self.model_class, self.id_column)
        return self._base_query().filter(col == entity_id).first()

    # ------------------------------------------------------------------
    # Atomic writes
    # ------------------------------------------------------------------

    @property
    def _dialect_name(self) -> str:
        return self.db.get_bind().dialect.name

    def _insert_ignore(
        self,
        model: type,
        values: Dict[str, Any],
        conflict_columns: Sequence[str],
        returning: Optional[str] = None,
    ) -> Optional[Any]:
        """Insert ``values`` unless a row with the same conflict key exists.

        Returns the ``returning`` column of the new row, ``True`` when no
        column was requested, or ``None`` when the insert was suppressed.
        """
        dialect = self._dialect_name
        table = model.__table__

        if dialect in _ON_CONFLICT_DIALECTS:
            stmt = _ON_CONFLICT_DIALECTS[dialect](table).values(**values)
            stmt = stmt.on_conflict_do_nothing(index_elements=list(conflict_columns))
            if returning is None:
                return True if self.db.execute(stmt).rowcount else None
            return self.db.execute(stmt.returning(table.c[returning])).scalar_one_or_none()

        if dialect in _MYSQL_DIALECTS:
            result = self.db.execute(insert(table).values(**values).prefix_with("IGNORE"))
            if not result.rowcount:
                return None
            if returning is None:
                return True
            return result.inserted_primary_key[0]

        raise NotImplementedError(f"Conditional insert is not supported on {dialect}")

    def _upsert(
        self,
        model: type,
        values: Dict[str, Any],
        conflict_columns: Sequence[str],
        update_columns: Sequence[str],
    ) -> int:
        """Insert ``values`` or overwrite ``update_columns`` of the existing row."""
        dialect = self._dialect_name
        table = model.__table__
        updates = {name: values[name] for name in update_columns}

        if dialect in _ON_CONFLICT_DIALECTS:
            stmt = _ON_CONFLICT_DIALECTS[dialect](table).values(**values)
            stmt = stmt.on_conflict_do_update(index_elements=list(conflict_columns), set_=updates)
        elif dialect in _MYSQL_DIALECTS:
            stmt = mysql.insert(table).values(**values).on_duplicate_key_update(**updates)
        else:
            raise NotImplementedError(f"Upsert is not supported on {dialect}")

        return self.db.execute(stmt).rowcount
