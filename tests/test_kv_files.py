"""Tests for the Files KV store."""

import pytest

from minigit.kv.files import Files


class TestFilesBasic:
    def test_set_get(self, tmp_path):
        store = Files(tmp_path)
        store.set("k", b"v")
        assert store.get("k") == b"v"

    def test_get_missing(self, tmp_path):
        store = Files(tmp_path)
        assert store.get("nope") is None
        assert store.get("objects/nope") is None

    def test_nested_key_is_a_file(self, tmp_path):
        store = Files(tmp_path / "repo")
        store.set("refs/heads/main", b"abc")
        assert (tmp_path / "repo" / "refs" / "heads" / "main").read_bytes() == b"abc"

    def test_contains(self, tmp_path):
        store = Files(tmp_path)
        store.set("objects/ab", b"x")
        assert "objects/ab" in store
        assert "objects" not in store
        assert "objects/cd" not in store

    def test_empty_value(self, tmp_path):
        store = Files(tmp_path)
        store.set("refs/heads/main", b"")
        assert store.get("refs/heads/main") == b""
        assert "refs/heads/main" in store

    def test_set_many_get_many(self, tmp_path):
        store = Files(tmp_path)
        store.set_many(a=b"1", b=b"2", c=b"3")
        assert store.get_many("a", "c", "missing") == {"a": b"1", "c": b"3"}

    def test_keys_with_prefix(self, tmp_path):
        store = Files(tmp_path)
        store.set("refs/heads/main", b"")
        store.set("refs/heads/dev", b"")
        store.set("HEAD", b"ref: refs/heads/main")
        assert list(store.keys("refs/heads/")) == ["refs/heads/dev", "refs/heads/main"]
        assert set(store.keys()) == {"HEAD", "refs/heads/dev", "refs/heads/main"}

    def test_keys_walk_only_the_prefix_directory(self, tmp_path, monkeypatch):
        store = Files(tmp_path)
        store.set("objects/abc", b"blob")
        store.set("refs/heads/main", b"")
        walked = []
        rglob = type(tmp_path).rglob

        def recording_rglob(path, pattern):
            walked.append(path)
            return rglob(path, pattern)

        monkeypatch.setattr(type(tmp_path), "rglob", recording_rglob)
        assert list(store.keys("refs/heads/")) == ["refs/heads/main"]
        assert walked == [tmp_path / "refs" / "heads"]

    def test_keys_with_partial_name_prefix(self, tmp_path):
        store = Files(tmp_path)
        store.set("objects/abc", b"1")
        store.set("objects/abd", b"2")
        store.set("objects/xyz", b"3")
        assert list(store.keys("objects/ab")) == ["objects/abc", "objects/abd"]
        assert list(store.keys("refs/")) == []

    def test_keys_of_missing_root(self, tmp_path):
        assert list(Files(tmp_path / "absent").keys()) == []


class TestFilesValidation:
    @pytest.mark.parametrize("key", ["", "../escape", "a//b", "objects/.", "/abs"])
    def test_invalid_keys(self, tmp_path, key):
        store = Files(tmp_path)
        with pytest.raises(ValueError, match="Invalid key"):
            store.set(key, b"x")

    def test_type_error_on_non_bytes(self, tmp_path):
        store = Files(tmp_path)
        with pytest.raises(TypeError, match="Expected bytes"):
            store.set("k", "not bytes")  # type: ignore


class TestFilesPersistence:
    def test_survives_reload(self, tmp_path):
        Files(tmp_path).set("objects/ab", b"persistent")
        assert Files(tmp_path).get("objects/ab") == b"persistent"
