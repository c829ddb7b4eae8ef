"""Deep module for folder and file operations on the virtual filesystem.

Every public method runs in one scoped session: lookups on the read-only
factory, writes on the read-write factory in a single transaction. Multi-row
changes (creating a file with its content and first revision, renaming or
moving a subtree) therefore commit or roll back as a whole.
"""

import logging
import re
from typing import List, Optional, Sequence

from sqlalchemy.orm import Session, sessionmaker

from ..core.config import settings
from ..database import ReadOnlySessionLocal, SessionLocal, session_scope
from ..exceptions import FileEntryNotFoundError, FolderNotFoundError, ValidationError
from ..fs import Path, path_hash
from ..models import Folder, FolderType
from ..models.types import utcnow
from ..repositories.activity_repository import ActivityRepository
from ..repositories.content_repository import ContentRepository
from ..repositories.favorite_repository import FavoriteRepository
from ..repositories.folder_repository import FolderRepository
from ..repositories.history_repository import FileHistoryRepository
from ..schemas.folder import FileHistoryView, FolderView
from .activity_service import ActivityRecorder
from .content_service import ContentService
from .content_utils import COPY_PREFIX, decompress, slugify

HOME_FOLDER_NAME = "Home"
TRASH_FOLDER_NAME = "Trash"

logger = logging.getLogger(__name__)


class FolderService:
    """All folder and file operations behind a simple interface.

    Public methods:
        create_folder / create_folders / create_home_folder
        create_file / update_file
        rename_folder / move      -- rewrite the whole subtree's paths
        get_folder / get_file / get_by_path / get_folder_at
        get_user_folder / get_namespace_folder / list_children
        get_file_history
        get_recently_visited / record_visit
        get_favorites / add_to_favorites / delete_from_favorites / is_favorite
    """

    def __init__(
        self,
        session_factory: Optional[sessionmaker] = None,
        read_only_session_factory: Optional[sessionmaker] = None,
        content_service: Optional[ContentService] = None,
        activity_recorder: Optional[ActivityRecorder] = None,
        folder_type: FolderType = FolderType.DASHBOARD,
    ):
        self.session_factory = session_factory or SessionLocal
        self.read_only_session_factory = read_only_session_factory or ReadOnlySessionLocal
        self.content_service = content_service or ContentService(
            self.session_factory, self.read_only_session_factory
        )
        self.activity_recorder = activity_recorder
        self.folder_type = folder_type

    def _write(self):
        return session_scope(self.session_factory)

    def _read(self):
        return session_scope(self.read_only_session_factory, read_only=True)

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    def create_folder(self, name: str, created_by: str, parent_id: Optional[int] = None) -> FolderView:
        """Create a folder under ``parent_id``, or under the creator's root."""
        with self._write() as db:
            repo = FolderRepository(db)
            folder = self._prepare(repo, name, created_by, parent_id)
            repo.create_folder(folder)
        logger.info("Created folder", extra={"folder_id": folder.id, "path": folder.path})
        return FolderView.from_model(folder)

    def create_folders(self, folders: Sequence[Folder]) -> List[int]:
        """Insert prepared rows in one batch; all or none are created."""
        with self._write() as db:
            return FolderRepository(db).create_folders(folders)

    def create_home_folder(self, root: Path, created_by: str) -> List[FolderView]:
        """Provision the ``Home`` folder at ``root`` and its ``Trash`` child.

        Idempotent: when the home folder already exists nothing is written
        and the existing folders are returned.
        """
        with self._write() as db:
            repo = FolderRepository(db)
            existing = repo.get_by_path_hash(self.folder_type, root.hash())
            if existing is not None:
                children = repo.list_by_parent_path_hash(self.folder_type, existing.path_hash)
                return [FolderView.from_model(f) for f in [existing] + children]

            now = utcnow()
            trash_path = root.child_path(TRASH_FOLDER_NAME)
            home = Folder(
                name=HOME_FOLDER_NAME,
                type=self.folder_type,
                path=root.path,
                path_hash=root.hash(),
                parent_path_hash=None,
                created_by=created_by,
                created_time=now,
                updated_by=created_by,
                updated_time=now,
            )
            trash = Folder(
                name=TRASH_FOLDER_NAME,
                type=self.folder_type,
                path=trash_path,
                path_hash=path_hash(trash_path),
                parent_path_hash=home.path_hash,
                created_by=created_by,
                created_time=now,
                updated_by=created_by,
                updated_time=now,
            )
            repo.create_folders([home, trash])
        logger.info("Created home folder", extra={"path": root.path})
        return [FolderView.from_model(home), FolderView.from_model(trash)]

    def create_file(
        self,
        name: str,
        data: bytes,
        created_by: str,
        parent_id: Optional[int] = None,
    ) -> FolderView:
        """Store the payload, create the file row and log its first revision."""
        with self._write() as db:
            repo = FolderRepository(db)
            file = self._prepare(repo, name, created_by, parent_id)
            content = self.content_service.build(data, created_by, file.created_time)
            ContentRepository(db).create(content)
            file.content_id = content.sha2
            repo.create_file(file)
            FileHistoryRepository(db).append(file.id, content.sha2, file.created_time)
        logger.info("Created file", extra={"file_id": file.id, "path": file.path})
        return FolderView.from_model(file, content=data)

    def _prepare(self, repo: FolderRepository, name: str, user_id: str, parent_id: Optional[int]) -> Folder:
        if not name or not name.strip():
            raise ValidationError("Name is required", field="name")

        if parent_id is None:
            parent_path = Path.get_by_user_id(user_id)
        else:
            parent = repo.get_folder_by_id(self.folder_type, parent_id, user_id)
            if parent is None:
                raise ValidationError(f"Invalid parent id : {parent_id}", field="parent_id")
            parent_path = Path.get(parent.path)

        now = utcnow()
        slug = slugify(name)
        path_string = parent_path.child_path(slug)
        folder = Folder(
            name=name,
            type=self.folder_type,
            path=path_string,
            path_hash=path_hash(path_string),
            parent_path_hash=parent_path.hash(),
            created_by=user_id,
            created_time=now,
            updated_by=user_id,
            updated_time=now,
        )
        folder.slug = slug
        return folder

    # ------------------------------------------------------------------
    # Update
    # ------------------------------------------------------------------

    def update_file(
        self,
        file_id: int,
        updated_by: str,
        name: Optional[str] = None,
        data: Optional[bytes] = None,
    ) -> FolderView:
        """Rename a file and/or point it at new content.

        A revision is logged only when the content digest actually changes.
        """
        with self._write() as db:
            repo = FolderRepository(db)
            file = repo.get_file_by_id(self.folder_type, file_id)
            if file is None:
                raise FileEntryNotFoundError(file_id)

            now = utcnow()
            updated = False

            if name and name != file.name:
                path = Path.get(file.path)
                path.set_leaf(slugify(name))
                file.name = name
                file.path = path.path
                file.path_hash = path.hash()
                updated = True

            if data is not None:
                content = self.content_service.build(data, updated_by, now)
                if content.sha2 != file.content_id:
                    ContentRepository(db).create(content)
                    file.content_id = content.sha2
                    FileHistoryRepository(db).append(file.id, content.sha2, now)
                    updated = True

            if updated:
                file.updated_by = updated_by
                file.updated_time = now
                repo.update_file(file)

        return FolderView.from_model(file, content=data)

    def rename_folder(self, folder_id: int, new_name: str, updated_by: str) -> FolderView:
        """Rename a folder and rewrite the paths of everything below it."""
        with self._write() as db:
            repo = FolderRepository(db)
            folder = repo.get_folder_by_id(self.folder_type, folder_id, updated_by)
            if folder is None:
                raise FolderNotFoundError(folder_id)

            if new_name and new_name != folder.name:
                old_path_hash = folder.path_hash
                path = Path.get(folder.path)
                path.set_leaf(slugify(new_name))
                folder.name = new_name
                folder.path = path.path
                folder.path_hash = path.hash()
                folder.updated_by = updated_by
                folder.updated_time = utcnow()
                self._update_path_recursively(repo, folder, old_path_hash)
                repo.update_folder(folder)
                logger.info("Renamed folder", extra={"folder_id": folder_id, "path": folder.path})

        return FolderView.from_model(folder)

    def move(self, source_id: int, destination_id: int, updated_by: str) -> FolderView:
        """Move a folder (with its subtree) or a file under another folder.

        A name already taken at the destination gets a ``Copy of`` prefix.
        """
        with self._write() as db:
            repo = FolderRepository(db)
            source = repo.get_file_or_folder_by_id(self.folder_type, source_id)
            if source is None:
                raise FolderNotFoundError(source_id)
            destination = repo.get_file_or_folder_by_id(self.folder_type, destination_id)
            if destination is None:
                raise FolderNotFoundError(destination_id)
            if destination.is_file:
                raise ValidationError("Destination is not a folder", field="destination_id")

            source_path = Path.get(source.path)
            destination_path = Path.get(destination.path)
            if source_path == destination_path:
                return FolderView.from_model(source)
            if source_path.contains(destination_path):
                raise ValidationError("Can't move ancestor folder to descendant", field="destination_id")

            old_path_hash = source.path_hash
            candidate = destination_path.child_path(source_path.leaf)
            existing = repo.list_by_parent_path_hash(self.folder_type, destination.path_hash)
            if any(f.path == candidate and f.id != source.id for f in existing):
                source.name = COPY_PREFIX + source.name

            new_path = destination_path.child_path(slugify(source.name))
            source.path = new_path
            source.path_hash = path_hash(new_path)
            source.parent_path_hash = destination.path_hash
            source.updated_by = updated_by
            source.updated_time = utcnow()

            if source.is_file:
                repo.update_file(source)
            else:
                self._update_path_recursively(repo, source, old_path_hash)
                repo.update_folder(source)
            logger.info(
                "Moved folder",
                extra={"folder_id": source_id, "destination_id": destination_id, "path": new_path},
            )

        return FolderView.from_model(source)

    def _update_path_recursively(self, repo: FolderRepository, parent: Folder, old_parent_path_hash: bytes) -> None:
        # Children are still indexed under the parent's old hash.
        for child in repo.list_by_parent_path_hash(self.folder_type, old_parent_path_hash):
            old_path_hash = child.path_hash
            child_path = Path.join(parent.path, Path.leaf_of(child.path))
            child.path = child_path
            child.path_hash = path_hash(child_path)
            child.parent_path_hash = parent.path_hash
            child.updated_by = parent.updated_by
            child.updated_time = parent.updated_time
            if not child.is_file:
                self._update_path_recursively(repo, child, old_path_hash)
            repo.update_folder(child)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_folder(self, folder_id: int, user_id: str) -> FolderView:
        with self._read() as db:
            folder = FolderRepository(db).get_folder_by_id(self.folder_type, folder_id, user_id)
        if folder is None:
            raise FolderNotFoundError(folder_id)
        return FolderView.from_model(folder)

    def get_file(self, file_id: int, user_id: str) -> FolderView:
        """File with its payload; counts as a visit by ``user_id``."""
        with self._read() as db:
            file = FolderRepository(db).get_file_and_content_by_id(self.folder_type, file_id)
            if file is None:
                raise FileEntryNotFoundError(file_id)
            favorite = FavoriteRepository(db).is_favorite(user_id, file_id)
        self._queue_visit(user_id, file_id)
        view = self._view_with_content(file)
        view.favorite = favorite
        return view

    def get_by_path(self, locator: str, user_id: str) -> FolderView:
        """Resolve an ``/<id>/<slug>`` locator to a file, or a folder with its children."""
        id_string = locator.split("/")[1 if locator.startswith("/") else 0]
        if not re.fullmatch(r"[0-9]+", id_string):
            raise ValidationError(f"Invalid path: {locator}", field="path")
        folder_id = int(id_string)

        with self._read() as db:
            repo = FolderRepository(db)
            folder = repo.get_file_or_folder_by_id(self.folder_type, folder_id)
            if folder is None:
                raise FolderNotFoundError(folder_id)
            favorite = FavoriteRepository(db).is_favorite(user_id, folder_id)
            children = [] if folder.is_file else repo.list_by_parent_path_hash(self.folder_type, folder.path_hash)

        if folder.is_file:
            self._queue_visit(user_id, folder_id)
        view = self._view_with_children(folder, children)
        view.favorite = favorite
        return view

    def get_folder_at(self, path: Path) -> Optional[FolderView]:
        """File, or folder with its children, stored at a virtual path."""
        with self._read() as db:
            repo = FolderRepository(db)
            folder = repo.get_file_and_content_by_path_hash(self.folder_type, path.hash())
            if folder is None:
                return None
            children = [] if folder.is_file else repo.list_by_parent_path_hash(self.folder_type, folder.path_hash)
        return self._view_with_children(folder, children)

    def get_user_folder(self, user_id: str) -> Optional[FolderView]:
        return self.get_folder_at(Path.get_by_user_id(user_id))

    def get_namespace_folder(self, namespace: str) -> Optional[FolderView]:
        return self.get_folder_at(Path.get_by_namespace(namespace))

    def list_children(self, folder_id: int) -> List[FolderView]:
        with self._read() as db:
            repo = FolderRepository(db)
            folder = repo.get_by_id(self.folder_type, folder_id)
            if folder is None:
                raise FolderNotFoundError(folder_id)
            children = repo.list_by_parent_path_hash(self.folder_type, folder.path_hash)
        return [FolderView.from_model(child) for child in children]

    def get_file_history(self, file_id: int) -> List[FileHistoryView]:
        with self._read() as db:
            history = FileHistoryRepository(db).list_by_file(file_id)
        return [FileHistoryView.from_model(entry) for entry in history]

    def _view_with_content(self, folder: Folder) -> FolderView:
        data = decompress(folder.content, folder.content_compressed) if folder.content is not None else None
        return FolderView.from_model(folder, content=data)

    def _view_with_children(self, folder: Folder, children: List[Folder]) -> FolderView:
        view = self._view_with_content(folder)
        for child in children:
            child_view = FolderView.from_model(child)
            if child.is_file:
                view.files.append(child_view)
            else:
                view.subfolders.append(child_view)
        return view

    # ------------------------------------------------------------------
    # Recency
    # ------------------------------------------------------------------

    def get_recently_visited(self, user_id: str, limit: Optional[int] = None) -> List[FolderView]:
        if limit is None:
            limit = settings.recently_visited_limit
        with self._read() as db:
            folders = FolderRepository(db).get_recently_visited(user_id, limit)
        return [FolderView.from_model(f) for f in folders]

    def record_visit(self, folder_id: int, user_id: str) -> None:
        """Record a visit synchronously."""
        with self._write() as db:
            ActivityRepository(db).touch_folder(user_id, folder_id)

    def _queue_visit(self, user_id: str, folder_id: int) -> None:
        if self.activity_recorder is not None:
            self.activity_recorder.record_visit(user_id, folder_id)

    # ------------------------------------------------------------------
    # Favorites
    # ------------------------------------------------------------------

    def get_favorites(self, user_id: str) -> List[FolderView]:
        with self._read() as db:
            folders = FolderRepository(db).get_favorites(user_id)
        return [FolderView.from_model(f) for f in folders]

    def add_to_favorites(self, folder_id: int, user_id: str) -> None:
        with self._write() as db:
            self._require(db, folder_id)
            FavoriteRepository(db).add(user_id, folder_id)

    def delete_from_favorites(self, folder_id: int, user_id: str) -> None:
        with self._write() as db:
            self._require(db, folder_id)
            FavoriteRepository(db).delete(user_id, folder_id)

    def is_favorite(self, folder_id: int, user_id: str) -> bool:
        with self._read() as db:
            return FavoriteRepository(db).is_favorite(user_id, folder_id)

    def _require(self, db: Session, folder_id: int) -> Folder:
        folder = FolderRepository(db).get_by_id(self.folder_type, folder_id)
        if folder is None:
            raise FolderNotFoundError(folder_id)
        return folder
