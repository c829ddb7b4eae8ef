"""Tests for FolderRepository: folder/file rows, typed lookups and joins."""

import pytest
from sqlalchemy.exc import IntegrityError

from horizon_fs.exceptions import ValidationError
from horizon_fs.fs import Path
from horizon_fs.models import Content, FolderType
from horizon_fs.repositories import (
    ActivityRepository,
    ContentRepository,
    FavoriteRepository,
    FolderRepository,
)
from horizon_fs.services.content_utils import digest

from factories import BASE_TIME, at, make_folder


def _store(db, data: bytes) -> bytes:
    sha2 = digest(data)
    ContentRepository(db).create(Content(sha2=sha2, data=data, created_by="alice", created_time=BASE_TIME))
    return sha2


class TestCreate:
    """Single and batch inserts."""

    def test_create_folder_returns_id(self, db):
        repo = FolderRepository(db)
        folder_id = repo.create_folder(make_folder("/user/alice/a"))
        found = repo.get_by_id(FolderType.DASHBOARD, folder_id)
        assert found is not None
        assert found.path == "/user/alice/a"
        assert not found.is_file

    def test_batch_ids_in_input_order(self, db):
        repo = FolderRepository(db)
        paths = ["/user/alice", "/user/alice/trash", "/user/alice/b", "/user/alice/a"]
        ids = repo.create_folders([make_folder(p) for p in paths])

        assert len(ids) == len(paths)
        assert len(set(ids)) == len(paths)
        for folder_id, path in zip(ids, paths):
            assert repo.get_by_id(FolderType.DASHBOARD, folder_id).path == path

    def test_create_file_requires_content(self, db):
        with pytest.raises(ValidationError) as exc_info:
            FolderRepository(db).create_file(make_folder("/user/alice/f"))
        assert exc_info.value.details["field"] == "content_id"

    def test_create_file(self, db):
        sha2 = _store(db, b"{}")
        repo = FolderRepository(db)
        file_id = repo.create_file(make_folder("/user/alice/f", content_id=sha2))
        assert repo.get_by_id(FolderType.DASHBOARD, file_id).is_file

    def test_duplicate_path_rejected(self, db):
        repo = FolderRepository(db)
        repo.create_folder(make_folder("/user/alice/a"))
        with pytest.raises(IntegrityError):
            repo.create_folder(make_folder("/user/alice/a"))

    def test_same_path_allowed_for_other_type(self, db):
        repo = FolderRepository(db)
        first = repo.create_folder(make_folder("/user/alice/a"))
        second = repo.create_folder(make_folder("/user/alice/a", folder_type=FolderType.SNAPSHOT))
        assert first != second


class TestLookups:
    """Point lookups always filter on type."""

    def test_type_mismatch_returns_none(self, db):
        repo = FolderRepository(db)
        folder_id = repo.create_folder(make_folder("/user/alice/a"))
        path = Path("/user/alice/a")

        assert repo.get_by_id(FolderType.SNAPSHOT, folder_id) is None
        assert repo.get_by_path_hash(FolderType.SNAPSHOT, path.hash()) is None
        assert repo.get_by_path_hash(FolderType.DASHBOARD, path.hash()).id == folder_id

    def test_missing_returns_none(self, db):
        repo = FolderRepository(db)
        assert repo.get_by_id(FolderType.DASHBOARD, 12345) is None
        assert repo.get_by_path_hash(FolderType.DASHBOARD, Path.hash_of("/user/nobody")) is None

    def test_folder_and_file_lookups_are_exclusive(self, db):
        repo = FolderRepository(db)
        folder_id = repo.create_folder(make_folder("/user/alice/a"))
        file_id = repo.create_file(make_folder("/user/alice/f", content_id=_store(db, b"x")))

        assert repo.get_folder_by_id(FolderType.DASHBOARD, folder_id, "alice") is not None
        assert repo.get_folder_by_id(FolderType.DASHBOARD, file_id, "alice") is None
        assert repo.get_file_by_id(FolderType.DASHBOARD, file_id) is not None
        assert repo.get_file_by_id(FolderType.DASHBOARD, folder_id) is None

    def test_get_folder_by_id_joins_favorite(self, db):
        repo = FolderRepository(db)
        folder_id = repo.create_folder(make_folder("/user/alice/a"))
        FavoriteRepository(db).add("alice", folder_id, created_time=at(5))

        assert repo.get_folder_by_id(FolderType.DASHBOARD, folder_id, "alice").favorited_time is not None
        assert repo.get_folder_by_id(FolderType.DASHBOARD, folder_id, "bob").favorited_time is None


class TestContentJoins:
    """Inner vs. left joins against the content table."""

    def test_inner_join_returns_payload(self, db):
        repo = FolderRepository(db)
        file_id = repo.create_file(make_folder("/user/alice/f", content_id=_store(db, b"payload")))

        found = repo.get_file_and_content_by_id(FolderType.DASHBOARD, file_id)
        assert found.content == b"payload"
        assert found.content_compressed is False

    def test_inner_join_drops_file_without_content_row(self, db):
        repo = FolderRepository(db)
        file_id = repo.create_file(make_folder("/user/alice/f", content_id=digest(b"never stored")))

        assert repo.get_file_and_content_by_id(FolderType.DASHBOARD, file_id) is None
        found = repo.get_file_or_folder_by_id(FolderType.DASHBOARD, file_id)
        assert found is not None
        assert found.content is None

    def test_left_join_returns_folders(self, db):
        repo = FolderRepository(db)
        folder_id = repo.create_folder(make_folder("/user/alice/a"))
        found = repo.get_file_or_folder_by_id(FolderType.DASHBOARD, folder_id)
        assert found.path == "/user/alice/a"
        assert found.content is None

    def test_by_path_hash(self, db):
        repo = FolderRepository(db)
        repo.create_file(make_folder("/user/alice/f", content_id=_store(db, b"abc")))

        found = repo.get_file_and_content_by_path_hash(FolderType.DASHBOARD, Path.hash_of("/user/alice/f"))
        assert found.content == b"abc"
        assert repo.get_file_and_content_by_path_hash(FolderType.SNAPSHOT, Path.hash_of("/user/alice/f")) is None


class TestUpdate:
    """Updates touch one row and never cascade."""

    def test_update_folder_rewrites_location(self, db):
        repo = FolderRepository(db)
        folder = make_folder("/user/alice/a")
        repo.create_folder(folder)

        path = Path(folder.path)
        path.set_leaf("renamed")
        folder.name = "Renamed"
        folder.path = path.path
        folder.path_hash = path.hash()
        folder.updated_by = "bob"

        assert repo.update_folder(folder) == 1
        assert repo.get_by_path_hash(FolderType.DASHBOARD, Path.hash_of("/user/alice/renamed")).id == folder.id
        assert repo.get_by_path_hash(FolderType.DASHBOARD, Path.hash_of("/user/alice/a")) is None

    def test_update_does_not_cascade(self, db):
        repo = FolderRepository(db)
        parent = make_folder("/user/alice/a")
        repo.create_folder(parent)
        repo.create_folder(make_folder("/user/alice/a/child"))

        parent.path = "/user/alice/b"
        parent.path_hash = Path.hash_of("/user/alice/b")
        repo.update_folder(parent)

        old_children = repo.list_by_parent_path_hash(FolderType.DASHBOARD, Path.hash_of("/user/alice/a"))
        assert [c.path for c in old_children] == ["/user/alice/a/child"]

    def test_setting_content_reclassifies_as_file(self, db):
        repo = FolderRepository(db)
        row = make_folder("/user/alice/x")
        folder_id = repo.create_folder(row)

        row.content_id = _store(db, b"now a file")
        assert repo.update_file(row) == 1

        assert repo.get_folder_by_id(FolderType.DASHBOARD, folder_id, "alice") is None
        assert repo.get_file_by_id(FolderType.DASHBOARD, folder_id) is not None

    def test_update_file_requires_content(self, db):
        repo = FolderRepository(db)
        row = make_folder("/user/alice/x")
        repo.create_folder(row)
        with pytest.raises(ValidationError):
            repo.update_file(row)

    def test_update_missing_row(self, db):
        row = make_folder("/user/alice/ghost")
        row.id = 999
        assert FolderRepository(db).update_folder(row) == 0


class TestListings:
    """Children, recently visited and favorites."""

    def test_list_by_parent_path_hash(self, db):
        repo = FolderRepository(db)
        repo.create_folders([
            make_folder("/user/alice/a"),
            make_folder("/user/alice/a/one"),
            make_folder("/user/alice/a/two", content_id=_store(db, b"2")),
            make_folder("/user/alice/a/one/deep"),
            make_folder("/user/alice/a/three", folder_type=FolderType.SNAPSHOT),
        ])

        children = repo.list_by_parent_path_hash(FolderType.DASHBOARD, Path.hash_of("/user/alice/a"))
        assert [c.path for c in children] == ["/user/alice/a/one", "/user/alice/a/two"]
        assert [c.is_file for c in children] == [False, True]

    def test_recently_visited_newest_first(self, db):
        repo = FolderRepository(db)
        ids = repo.create_folders([make_folder(f"/user/alice/f{i}") for i in range(4)])
        activity = ActivityRepository(db)
        activity.touch_folder("alice", ids[0], visited_time=at(1))
        activity.touch_folder("alice", ids[2], visited_time=at(3))
        activity.touch_folder("alice", ids[1], visited_time=at(2))
        activity.touch_folder("bob", ids[3], visited_time=at(9))

        recent = repo.get_recently_visited("alice", limit=10)
        assert [f.id for f in recent] == [ids[2], ids[1], ids[0]]
        assert all(f.last_visited_time is not None for f in recent)

        assert [f.id for f in repo.get_recently_visited("alice", limit=2)] == [ids[2], ids[1]]

    def test_favorites_newest_first(self, db):
        repo = FolderRepository(db)
        ids = repo.create_folders([make_folder(f"/user/alice/f{i}") for i in range(3)])
        favorites = FavoriteRepository(db)
        favorites.add("alice", ids[1], created_time=at(1))
        favorites.add("alice", ids[0], created_time=at(2))
        favorites.add("bob", ids[2], created_time=at(3))

        found = repo.get_favorites("alice")
        assert [f.id for f in found] == [ids[0], ids[1]]
        assert all(f.favorited_time is not None for f in found)
