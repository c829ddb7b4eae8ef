"""Background recording of user activity.

Visits are bookkeeping: a failure to record one must never fail the read
that triggered it. The recorder therefore runs each upsert on a small
thread pool, in its own session, and only logs failures.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Optional

from sqlalchemy.orm import sessionmaker

from ..core.config import settings
from ..database import SessionLocal, session_scope
from ..exceptions import HorizonError
from ..repositories.activity_repository import ActivityRepository

logger = logging.getLogger(__name__)


class ActivityRecorder:
    """Fire-and-forget activity upserts.

    Args:
        session_factory: Read-write session factory (defaults to SessionLocal).
        max_workers: Pool size (defaults to ``settings.activity_workers``).
    """

    def __init__(self, session_factory: Optional[sessionmaker] = None, max_workers: Optional[int] = None):
        self.session_factory = session_factory or SessionLocal
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers or settings.activity_workers,
            thread_name_prefix="activity",
        )

    def record_visit(self, user_id: str, folder_id: int) -> Future:
        """Queue a "last visited" upsert for a folder or file."""
        return self._submit(
            lambda repo: repo.touch_folder(user_id, folder_id),
            {"user_id": user_id, "folder_id": folder_id},
        )

    def record(self, user_id: str, entity_type: int, entity_id: int) -> Future:
        """Queue a generic activity upsert."""
        return self._submit(
            lambda repo: repo.add_activity(user_id, entity_type, entity_id),
            {"user_id": user_id, "entity_type": entity_type, "entity_id": entity_id},
        )

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

    def _submit(self, action: Callable[[ActivityRepository], int], context: dict) -> Future:
        return self._executor.submit(self._run, action, context)

    def _run(self, action: Callable[[ActivityRepository], int], context: dict) -> bool:
        try:
            with session_scope(self.session_factory) as db:
                action(ActivityRepository(db))
            return True
        except HorizonError as e:
            logger.error("Error recording user activity: %s", e.message, extra=context)
            return False
        except Exception as e:
            logger.error("Unexpected error recording user activity: %s", e, extra=context, exc_info=True)
            return False
