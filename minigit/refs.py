"""Branches and HEAD."""

import logging
from dataclasses import dataclass

from .errors import AlreadyExists, NoCommitsYet, NotFound
from .kv.base import KVStore
from .layout import BRANCH_KEY, HEAD_KEY, HEADS_PREFIX, SYMBOLIC_PREFIX

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Head:
    """The checkout position.

    Exactly one of ``branch`` (attached, symbolic) or ``commit``
    (detached, direct) is meaningful: a symbolic HEAD has ``branch``
    set and ``commit`` empty.
    """

    branch: str | None = None
    commit: str = ""

    @classmethod
    def symbolic(cls, branch: str) -> "Head":
        return cls(branch=branch)

    @classmethod
    def direct(cls, commit_hash: str) -> "Head":
        return cls(commit=commit_hash)

    @property
    def is_detached(self) -> bool:
        return self.branch is None

    def encode(self) -> bytes:
        if self.branch is not None:
            return f"{SYMBOLIC_PREFIX}{BRANCH_KEY % self.branch}".encode()
        return self.commit.encode()

    @classmethod
    def decode(cls, raw: bytes) -> "Head":
        text = raw.decode().strip()
        if text.startswith(SYMBOLIC_PREFIX):
            ref = text[len(SYMBOLIC_PREFIX):]
            if ref.startswith(HEADS_PREFIX):
                return cls.symbolic(ref[len(HEADS_PREFIX):])
            return cls.symbolic(ref.rsplit("/", 1)[-1])
        return cls.direct(text)


def validate_branch_name(name: str) -> None:
    """Raise ``ValueError`` for names that cannot be stored as a ref."""
    if not name or name in (".", "..") or "/" in name or name != name.strip():
        raise ValueError(f"Invalid branch name: {name!r}")
    if any(ch in name for ch in "\\\n\r\t\0"):
        raise ValueError(f"Invalid branch name: {name!r}")


class Refs:
    """Named branch pointers plus HEAD, stored in a ``KVStore``.

    Not safe for concurrent mutation; callers serialize access.
    """

    def __init__(self, store: KVStore) -> None:
        self.store = store

    # -- HEAD --

    def head(self) -> Head:
        raw = self.store.get(HEAD_KEY)
        if raw is None:
            raise NotFound("HEAD is missing")
        return Head.decode(raw)

    def set_head(self, head: Head) -> None:
        self.store.set(HEAD_KEY, head.encode())

    def head_commit(self) -> str:
        """Resolve HEAD to a commit hash; empty when there are no commits."""
        head = self.head()
        if head.branch is not None:
            return self.branch_commit(head.branch) or ""
        return head.commit

    def current_branch(self) -> str | None:
        return self.head().branch

    def advance(self, commit_hash: str) -> None:
        """Move the current branch, or a detached HEAD, to ``commit_hash``."""
        head = self.head()
        if head.branch is not None:
            self.set_branch(head.branch, commit_hash)
        else:
            self.set_head(Head.direct(commit_hash))

    # -- Branches --

    def has_branch(self, name: str) -> bool:
        try:
            validate_branch_name(name)
        except ValueError:
            return False
        return BRANCH_KEY % name in self.store

    def branch_commit(self, name: str) -> str | None:
        """The branch's commit hash, ``""`` for an empty branch, None if unknown."""
        if not self.has_branch(name):
            return None
        raw = self.store.get(BRANCH_KEY % name)
        return raw.decode().strip() if raw is not None else None

    def set_branch(self, name: str, commit_hash: str) -> None:
        validate_branch_name(name)
        self.store.set(BRANCH_KEY % name, commit_hash.encode())

    def create_branch(self, name: str) -> str:
        """Create ``name`` at the HEAD commit and return that commit.

        Raises:
            AlreadyExists: If the branch exists.
            NoCommitsYet: If HEAD has no commit to point at.
        """
        validate_branch_name(name)
        if self.has_branch(name):
            raise AlreadyExists(f"Branch '{name}' already exists")
        head_commit = self.head_commit()
        if not head_commit:
            raise NoCommitsYet("No commits yet")
        self.set_branch(name, head_commit)
        logger.info("Created branch %s at %s", name, head_commit)
        return head_commit

    def branches(self) -> list[str]:
        """List all branch names."""
        return sorted(
            key[len(HEADS_PREFIX):] for key in self.store.keys(HEADS_PREFIX)
        )
