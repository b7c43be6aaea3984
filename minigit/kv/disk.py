"""Disk-backed KV store using diskcache."""

from typing import Iterable, Mapping, cast

from ..errors import IOFailure
from .base import KVStore

ONE_GB = 1024 * 1024 * 1024


class Disk(KVStore):
    """KV store backed by diskcache (SQLite + mmap).

    A packed alternative to ``Files``: the same keys live in a single
    cache directory instead of one file per key. Eviction is disabled.
    """

    def __init__(self, directory: str, size_limit: int = ONE_GB) -> None:
        from diskcache import Cache as DiskCache

        self.store = DiskCache(
            directory, size_limit=size_limit, eviction_policy="none"
        )

    def get(self, key: str) -> bytes | None:
        try:
            return cast(bytes | None, self.store.get(key))
        except OSError as exc:
            raise IOFailure(f"Failed to read {key}: {exc}") from exc

    def set(self, key: str, value: bytes) -> None:
        if not isinstance(value, bytes):
            raise TypeError(f"Expected bytes, got {type(value).__name__}")
        try:
            self.store[key] = value
        except OSError as exc:
            raise IOFailure(f"Failed to write {key}: {exc}") from exc

    def get_many(self, *args: str) -> Mapping[str, bytes]:
        return {k: v for k in args if (v := self.get(k)) is not None}

    def set_many(self, **kwargs: bytes) -> None:
        for key, value in kwargs.items():
            if not isinstance(value, bytes):
                raise TypeError(f"Expected bytes for {key}, got {type(value).__name__}")
        with self.store.transact():
            for key, value in kwargs.items():
                self.set(key, value)

    def keys(self, prefix: str = "") -> Iterable[str]:
        for key in self.store.iterkeys():
            key = str(key)
            if key.startswith(prefix):
                yield key

    def __contains__(self, key: str) -> bool:
        return key in self.store

    def close(self) -> None:
        self.store.close()
