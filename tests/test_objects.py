"""Tests for the content-addressed ObjectStore."""

import pytest

from minigit import NotFound, ObjectStore
from minigit.kv.memory import Memory
from minigit.objects import blake2b, resolve_digest, sha256


class TestContentAddressing:
    def test_put_returns_same_hash(self):
        objects = ObjectStore()
        assert objects.put(b"hello") == objects.put(b"hello")

    def test_get_put_roundtrip(self):
        objects = ObjectStore()
        for content in (b"", b"hello", b"\x00\xff binary", "ünïcode".encode()):
            assert objects.get(objects.put(content)) == content

    def test_distinct_content_distinct_hash(self):
        objects = ObjectStore()
        assert objects.put(b"a") != objects.put(b"b")

    def test_put_is_idempotent(self):
        store = Memory()
        objects = ObjectStore(store)
        objects.put(b"same")
        objects.put(b"same")
        assert len(list(store.keys("objects/"))) == 1

    def test_existing_object_not_rewritten(self):
        store = Memory()
        objects = ObjectStore(store)
        h = objects.put(b"original")
        store.set(f"objects/{h}", b"tampered")
        objects.put(b"original")
        assert store.get(f"objects/{h}") == b"tampered"

    def test_hash_independent_of_store(self):
        assert ObjectStore(Memory()).put(b"x") == ObjectStore(Memory()).put(b"x")


class TestGet:
    def test_get_unknown_raises(self):
        objects = ObjectStore()
        with pytest.raises(NotFound):
            objects.get("0" * 40)

    def test_not_found_is_key_error(self):
        with pytest.raises(KeyError):
            ObjectStore().get("missing")

    @pytest.mark.parametrize("bad", ["", "../HEAD", ".", ".."])
    def test_get_invalid_hash_raises(self, bad):
        with pytest.raises(NotFound):
            ObjectStore().get(bad)

    def test_contains(self):
        objects = ObjectStore()
        h = objects.put(b"x")
        assert h in objects
        assert "deadbeef" not in objects
        assert "" not in objects

    def test_get_many(self):
        objects = ObjectStore()
        a = objects.put(b"a")
        b = objects.put(b"b")
        assert objects.get_many(a, b) == {a: b"a", b: b"b"}

    def test_get_many_missing_raises(self):
        objects = ObjectStore()
        a = objects.put(b"a")
        with pytest.raises(NotFound):
            objects.get_many(a, "missing")

    def test_readable_from_new_handle(self, tmp_path):
        from minigit.kv.files import Files

        h = ObjectStore(Files(tmp_path)).put(b"persisted")
        assert ObjectStore(Files(tmp_path)).get(h) == b"persisted"


class TestDigest:
    def test_builtin_digests_are_deterministic(self):
        assert sha256(b"x") == sha256(b"x")
        assert blake2b(b"x") == blake2b(b"x")
        assert len(sha256(b"x")) == 40
        assert len(blake2b(b"x")) == 40

    def test_resolve_by_name(self):
        assert resolve_digest("sha256") is sha256
        assert resolve_digest("blake2b") is blake2b

    def test_resolve_callable(self):
        fn = lambda content: "h%d" % len(content)  # noqa: E731
        assert resolve_digest(fn) is fn

    def test_resolve_unknown(self):
        with pytest.raises(ValueError, match="Unknown digest"):
            resolve_digest("md4")

    def test_custom_digest_is_used(self):
        objects = ObjectStore(digest=lambda content: "len%d" % len(content))
        assert objects.put(b"abc") == "len3"
        assert objects.get("len3") == b"abc"

    def test_digests_differ(self):
        assert ObjectStore(digest="sha256").put(b"x") != ObjectStore(
            digest="blake2b"
        ).put(b"x")
