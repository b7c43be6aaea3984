"""Content-addressed object store: blobs and commits keyed by digest."""

import hashlib
import logging
from typing import Callable

from .errors import NotFound
from .kv.base import KVStore
from .kv.memory import Memory
from .layout import OBJECT_KEY

logger = logging.getLogger(__name__)

Digest = Callable[[bytes], str]
"""Digest function: content bytes -> hex object hash.

Only determinism is relied on; no particular algorithm is assumed.
"""


def sha256(content: bytes) -> str:
    """Default digest: the first 40 hex chars of SHA-256."""
    return hashlib.sha256(content).hexdigest()[:40]


def blake2b(content: bytes) -> str:
    """BLAKE2b digest sized to 40 hex chars."""
    return hashlib.blake2b(content, digest_size=20).hexdigest()


DIGESTS: dict[str, Digest] = {"sha256": sha256, "blake2b": blake2b}


def resolve_digest(digest: str | Digest) -> Digest:
    """Return a digest function given its name or the function itself."""
    if callable(digest):
        return digest
    try:
        return DIGESTS[digest]
    except KeyError:
        raise ValueError(f"Unknown digest: {digest!r}") from None


class ObjectStore:
    """Append-only object namespace over a ``KVStore``.

    Identical content is stored at most once. Objects are never
    rewritten or deleted.
    """

    def __init__(
        self, store: KVStore | None = None, *, digest: str | Digest = "sha256"
    ) -> None:
        self.store = store if store is not None else Memory()
        self.digest = resolve_digest(digest)

    @staticmethod
    def _valid(object_hash: str) -> bool:
        return (
            bool(object_hash)
            and "/" not in object_hash
            and object_hash not in (".", "..")
        )

    def put(self, content: bytes) -> str:
        """Store ``content`` if it is new and return its hash."""
        object_hash = self.digest(content)
        key = OBJECT_KEY % object_hash
        if key not in self.store:
            self.store.set(key, content)
            logger.debug("Stored object %s (%d bytes)", object_hash, len(content))
        return object_hash

    def get(self, object_hash: str) -> bytes:
        """Return the stored bytes. Raises ``NotFound`` for an unknown hash."""
        content = (
            self.store.get(OBJECT_KEY % object_hash)
            if self._valid(object_hash)
            else None
        )
        if content is None:
            raise NotFound(f"No object {object_hash!r}")
        return content

    def get_many(self, *hashes: str) -> dict[str, bytes]:
        """Fetch several objects at once. Every hash must exist."""
        found = self.store.get_many(
            *(OBJECT_KEY % h for h in hashes if self._valid(h))
        )
        result: dict[str, bytes] = {}
        for object_hash in hashes:
            content = found.get(OBJECT_KEY % object_hash)
            if content is None:
                raise NotFound(f"No object {object_hash!r}")
            result[object_hash] = content
        return result

    def __contains__(self, object_hash: str) -> bool:
        return self._valid(object_hash) and (OBJECT_KEY % object_hash) in self.store
