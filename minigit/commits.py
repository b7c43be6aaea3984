"""Commit records and the commit graph over the object store."""

import json
from collections import deque
from dataclasses import dataclass, field
from typing import Iterator, Mapping

from .errors import NotFound
from .objects import ObjectStore

COMMIT_TYPE = "commit"


def _to_bytes(obj) -> bytes:
    """Encode a JSON-safe Python object to canonical bytes."""
    return json.dumps(obj, sort_keys=True, separators=(",", ":")).encode()


@dataclass(frozen=True)
class Commit:
    """An immutable commit record.

    ``snapshot`` maps every tracked path to its blob hash. ``parents``
    holds zero (root), one, or two (merge) commit hashes.
    """

    message: str
    timestamp: int
    snapshot: Mapping[str, str] = field(default_factory=dict)
    parents: tuple[str, ...] = ()

    @property
    def is_root(self) -> bool:
        return not self.parents

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1

    def serialize(self) -> bytes:
        return _to_bytes(
            {
                "type": COMMIT_TYPE,
                "message": self.message,
                "timestamp": self.timestamp,
                "parents": list(self.parents),
                "snapshot": dict(self.snapshot),
            }
        )

    @classmethod
    def deserialize(cls, raw: bytes) -> "Commit":
        """Decode a commit record. Raises ``ValueError`` for anything else."""
        try:
            data = json.loads(raw)
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ValueError("Not a commit record") from exc
        if not isinstance(data, dict) or data.get("type") != COMMIT_TYPE:
            raise ValueError("Not a commit record")
        try:
            return cls(
                message=data["message"],
                timestamp=int(data["timestamp"]),
                snapshot=dict(data["snapshot"]),
                parents=tuple(data["parents"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError("Malformed commit record") from exc


class CommitGraph:
    """Immutable commit DAG stored in the shared object namespace.

    Commits are keyed by the digest of their serialized form, next to
    the blobs they reference.
    """

    def __init__(self, objects: ObjectStore) -> None:
        self.objects = objects

    def create(
        self,
        message: str,
        timestamp: int,
        snapshot: Mapping[str, str],
        parents: tuple[str, ...] | list[str] = (),
    ) -> str:
        """Store a new commit and return its hash.

        Identical arguments always produce the identical hash. Every
        parent must already be a stored commit.

        Raises:
            ValueError: If more than two parents are given.
            NotFound: If a parent is not a stored commit.
        """
        if len(parents) > 2:
            raise ValueError("A commit has at most two parents")
        for p in parents:
            if not self.is_commit(p):
                raise NotFound(f"Parent {p!r} is not a commit")
        commit = Commit(
            message=message,
            timestamp=timestamp,
            snapshot=dict(snapshot),
            parents=tuple(parents),
        )
        return self.objects.put(commit.serialize())

    def load(self, commit_hash: str) -> Commit:
        """Load a commit. Raises ``NotFound`` if it is unknown or not a commit."""
        raw = self.objects.get(commit_hash)
        try:
            return Commit.deserialize(raw)
        except ValueError:
            raise NotFound(f"Object {commit_hash!r} is not a commit") from None

    def is_commit(self, commit_hash: str) -> bool:
        try:
            self.load(commit_hash)
        except NotFound:
            return False
        return True

    def parents(self, commit_hash: str) -> tuple[str, ...]:
        return self.load(commit_hash).parents

    def ancestors(self, commit_hash: str) -> set[str]:
        """All commits reachable through any parent edge, BFS order."""
        seen: set[str] = set()
        queue: deque[str] = deque([commit_hash])
        while queue:
            current = queue.popleft()
            for p in self.parents(current):
                if p not in seen:
                    seen.add(p)
                    queue.append(p)
        return seen

    def first_parent_chain(self, commit_hash: str) -> Iterator[str]:
        """Yield ``commit_hash`` and its first parents down to the root."""
        current: str | None = commit_hash
        while current is not None:
            yield current
            parents = self.parents(current)
            current = parents[0] if parents else None
