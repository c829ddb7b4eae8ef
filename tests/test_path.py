"""Tests for the virtual path model: parsing, normalization, hashing, relations."""

import hashlib

import pytest

from horizon_fs.exceptions import ErrorCode, PathError
from horizon_fs.fs import Path, RootType, format_root_path, path_hash


class TestNormalize:
    """Normalization is lower-case, leading slash, no trailing slash."""

    @pytest.mark.parametrize("raw, expected", [
        ("/User/Alice/Dashboards/", "/user/alice/dashboards"),
        ("user/alice", "/user/alice"),
        ("  /namespace/NS1/a  ", "/namespace/ns1/a"),
        ("/user/alice//", "/user/alice"),
        ("/user/alice/ ", "/user/alice"),
    ])
    def test_normalize(self, raw, expected):
        assert Path.normalize(raw) == expected

    @pytest.mark.parametrize("raw", [
        "", "/", "//", " / ", "a", "/A/B/", "user/alice//  /", "/x /", "\t/y/z/\n",
    ])
    def test_idempotent(self, raw):
        once = Path.normalize(raw)
        assert Path.normalize(once) == once


class TestConstruct:
    """Parsing a path string into its parts."""

    def test_round_trip(self):
        path = Path("/User/Alice/Dashboards/")
        assert path.path == "/user/alice/dashboards"
        assert path.root_type is RootType.USER
        assert path.root_name == "alice"
        assert path.leaf == "dashboards"
        assert path.parent_path == "/user/alice"
        assert not path.is_root

    def test_root_path(self):
        path = Path.get("/namespace/ns1")
        assert path.is_root
        assert path.root_type is RootType.NAMESPACE
        assert path.leaf == "ns1"
        assert path.parent_path == "/namespace"

    def test_parent_plus_leaf_is_path(self):
        path = Path("/namespace/ns1/a/b/c")
        assert path.parent_path + "/" + path.leaf == path.path

    @pytest.mark.parametrize("raw", ["/user", "/user/", "", "/", "//alice", "/user//x"])
    def test_too_few_segments_rejected(self, raw):
        with pytest.raises(PathError):
            Path(raw)

    def test_unknown_root_type_rejected(self):
        with pytest.raises(PathError) as exc_info:
            Path("/group/admins/x")
        assert exc_info.value.error_code == ErrorCode.INVALID_PATH
        assert exc_info.value.details["path"] == "/group/admins/x"

    def test_equality_by_normalized_path(self):
        assert Path("/User/Alice") == Path("user/alice/")
        assert len({Path("/user/alice"), Path("USER/ALICE")}) == 1
        assert Path("/user/alice") != Path("/user/bob")


class TestRootBuilders:
    """User and namespace root paths."""

    def test_user_id_with_type_prefix(self):
        assert Path.get_by_user_id("user.alice").path == "/user/alice"

    def test_plain_user_id(self):
        assert Path.get_by_user_id("Alice").path == "/user/alice"

    def test_namespace(self):
        path = Path.get_by_namespace("NS1")
        assert path.path == "/namespace/ns1"
        assert path.is_root

    def test_format_root_path(self):
        assert format_root_path(RootType.NAMESPACE, "ns1") == "/namespace/ns1"
        assert format_root_path(RootType.USER, "alice") == "user/alice"

    def test_get_user_id_strips_prefix(self):
        assert Path.get_user_id("user.alice") == "alice"
        assert Path.get_user_id("bob") == "bob"


class TestHash:
    """Path hashes are raw 16-byte MD5 digests of the normalized path."""

    def test_matches_md5(self):
        path = Path("/user/alice/a")
        assert path.hash() == hashlib.md5(b"/user/alice/a").digest()
        assert len(path.hash()) == 16

    def test_deterministic(self):
        assert Path("/user/alice").hash() == Path("/USER/alice/").hash()
        assert path_hash("/user/alice") == Path.hash_of("/user/alice")

    def test_distinct_paths_differ(self):
        assert Path("/user/alice/a").hash() != Path("/user/alice/b").hash()

    def test_parent_hash(self):
        path = Path("/user/alice/a")
        assert path.parent_hash() == Path.hash_of("/user/alice")


class TestRelations:
    """Sibling, ancestor and containment checks."""

    def test_siblings(self):
        b = Path("/namespace/ns1/a/b")
        c = Path("/namespace/ns1/a/c")
        assert b.is_sibling(c)
        assert not b.is_ancestor(c)

    def test_ancestor_of_both_but_not_sibling(self):
        a = Path("/namespace/ns1/a")
        for other in (Path("/namespace/ns1/a/b"), Path("/namespace/ns1/a/c")):
            assert a.is_ancestor(other)
            assert not a.is_sibling(other)

    def test_contains_is_strict(self):
        a = Path("/user/alice/a")
        assert a.contains(Path("/user/alice/a/b/c"))
        assert not a.contains(a)
        assert not a.contains(Path("/user/alice/ab/c"))

    def test_is_ancestor_is_a_prefix_test(self):
        # Looser than contains(): only the parent paths are compared.
        assert Path("/user/a").is_ancestor(Path("/user/ab/c"))
        assert not Path("/user/a").contains(Path("/user/ab/c"))


class TestChildAndLeaf:
    """Child path building and leaf renames."""

    def test_child_path(self):
        assert Path("/user/alice").child_path("Dash") == "/user/alice/dash"
        assert Path.join("/user/alice", "/x/") == "/user/alice/x"

    def test_leaf_of(self):
        assert Path.leaf_of("/user/alice/reports") == "reports"

    def test_set_leaf(self):
        path = Path("/user/alice/old")
        path.set_leaf("New")
        assert path.path == "/user/alice/new"
        assert path.leaf == "new"
        assert path.parent_path == "/user/alice"
        assert path.hash() == Path.hash_of("/user/alice/new")

    def test_set_empty_leaf_rejected(self):
        path = Path("/user/alice/old")
        with pytest.raises(PathError):
            path.set_leaf("  ")
        assert path.path == "/user/alice/old"
