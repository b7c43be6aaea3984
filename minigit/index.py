"""Index: the staged snapshot of the next commit."""

from collections.abc import Iterator, MutableMapping

from .kv.base import KVStore
from .layout import INDEX_KEY


def encode_index(entries: dict[str, str]) -> bytes:
    """One ``<hash> <path>`` line per entry, sorted by path."""
    return "".join(
        f"{entries[path]} {path}\n" for path in sorted(entries)
    ).encode()


def decode_index(raw: bytes) -> dict[str, str]:
    entries: dict[str, str] = {}
    for line in raw.decode().split("\n"):
        object_hash, _, path = line.partition(" ")
        if object_hash and path:
            entries[path] = object_hash
    return entries


class Index(MutableMapping[str, str]):
    """Mutable ``path -> blob hash`` mapping persisted in a ``KVStore``.

    Changes are held in memory until ``save()``. The index is not
    content-addressed.
    """

    def __init__(self, store: KVStore, entries: dict[str, str] | None = None) -> None:
        self._store = store
        self._entries: dict[str, str] = dict(entries or {})

    @classmethod
    def load(cls, store: KVStore) -> "Index":
        raw = store.get(INDEX_KEY)
        return cls(store, decode_index(raw) if raw else None)

    def save(self) -> None:
        self._store.set(INDEX_KEY, encode_index(self._entries))

    # -- Mapping --

    def __getitem__(self, path: str) -> str:
        return self._entries[path]

    def __setitem__(self, path: str, object_hash: str) -> None:
        self._entries[path] = object_hash

    def __delitem__(self, path: str) -> None:
        del self._entries[path]

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    # -- Staging --

    def stage(self, path: str, object_hash: str) -> None:
        """Record ``path`` at ``object_hash`` for the next commit."""
        self._entries[path] = object_hash

    def replace(self, snapshot: dict[str, str]) -> None:
        """Replace every entry with ``snapshot``."""
        self._entries = dict(snapshot)

    def snapshot(self) -> dict[str, str]:
        return dict(self._entries)

    @property
    def is_empty(self) -> bool:
        return not self._entries
