"""Repository: the handle every operation runs against."""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Iterator, Literal

from .commits import Commit, CommitGraph
from .diff import ChangeKind, diff_snapshots
from .errors import (
    AlreadyExists,
    MergeConflict,
    NoCommitsYet,
    NotInitialized,
)
from .index import Index
from .kv.base import KVStore
from .kv.memory import Memory
from .layout import DEFAULT_BRANCH, HEAD_KEY, MINIGIT_DIR
from .merge import find_common_ancestor, three_way_merge
from .objects import Digest, ObjectStore
from .refs import Head, Refs, validate_branch_name
from .workspace import Workspace

logger = logging.getLogger(__name__)


class Status(str, Enum):
    OK = "ok"
    MERGED = "merged"
    FAST_FORWARDED = "fast_forwarded"
    UP_TO_DATE = "up_to_date"
    CONFLICTS = "conflicts"
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    NOTHING_TO_COMMIT = "nothing_to_commit"
    NO_COMMITS_YET = "no_commits_yet"
    NOT_INITIALIZED = "not_initialized"


_SUCCESS = frozenset(
    {Status.OK, Status.MERGED, Status.FAST_FORWARDED, Status.UP_TO_DATE}
)


@dataclass(frozen=True)
class Result:
    """Outcome of a repository operation.

    ``commit`` is the commit produced or reached, when there is one.
    ``conflicts`` lists conflicting paths for ``Status.CONFLICTS``.
    """

    status: Status
    commit: str | None = None
    conflicts: tuple[str, ...] = ()

    def __bool__(self) -> bool:
        return self.status in _SUCCESS


@dataclass(frozen=True)
class LogEntry:
    """One commit in a history walk."""

    commit_hash: str
    commit: Commit


class Repository:
    """A minigit repository over a ``KVStore`` and a working directory.

    Result-returning operations (``init``, ``commit``, ``create_branch``,
    ``checkout``, ``merge``) report recoverable outcomes as a ``Result``.
    Queries (``stage``, ``add``, ``log``, ``diff``) raise the matching
    ``MinigitError`` instead. ``IOFailure`` always propagates.
    """

    def __init__(
        self,
        store: KVStore | None = None,
        *,
        workdir: str | Path = ".",
        digest: str | Digest = "sha256",
        clock: Callable[[], int] | None = None,
        default_branch: str = DEFAULT_BRANCH,
    ) -> None:
        if store is None:
            store = Memory()
        validate_branch_name(default_branch)
        self.store = store
        self.objects = ObjectStore(store, digest=digest)
        self.graph = CommitGraph(self.objects)
        self.refs = Refs(store)
        self.workspace = Workspace(workdir)
        self._clock = clock or time.time_ns
        self._default_branch = default_branch

    def __enter__(self) -> "Repository":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        """Close the backing store."""
        self.store.close()

    def is_initialized(self) -> bool:
        return HEAD_KEY in self.store

    def _require_init(self) -> None:
        if not self.is_initialized():
            raise NotInitialized("Not a minigit repository")

    # -- Setup --

    def init(self) -> Result:
        """Create HEAD, an empty default branch and an empty index."""
        if self.is_initialized():
            return Result(Status.ALREADY_EXISTS)
        self.refs.set_branch(self._default_branch, "")
        Index(self.store).save()
        self.refs.set_head(Head.symbolic(self._default_branch))
        logger.info("Initialized empty repository on branch %s", self._default_branch)
        return Result(Status.OK)

    # -- Staging --

    def stage(self, path: str, content: bytes) -> str:
        """Store ``content`` as a blob and stage it at ``path``.

        Returns:
            The blob hash.
        """
        self._require_init()
        rel = self._tracked_path(path)
        blob_hash = self.objects.put(content)
        index = Index.load(self.store)
        index.stage(rel, blob_hash)
        index.save()
        logger.debug("Staged %s as %s", rel, blob_hash)
        return blob_hash

    def add(self, path: str | Path) -> str:
        """Stage a file from the working directory.

        Raises:
            NotFound: If the file does not exist.
        """
        self._require_init()
        rel = self._tracked_path(path)
        return self.stage(rel, self.workspace.read(rel))

    def staged(self) -> dict[str, str]:
        """The current index as ``path -> blob hash``."""
        self._require_init()
        return Index.load(self.store).snapshot()

    def _tracked_path(self, path: str | Path) -> str:
        rel = self.workspace.relative(path)
        if rel.split("/", 1)[0] == MINIGIT_DIR:
            raise ValueError(f"{path} is inside the repository directory")
        if "\n" in rel or "\r" in rel:
            raise ValueError(f"Path contains a line break: {path!r}")
        return rel

    # -- Commits --

    def commit(self, message: str) -> Result:
        """Commit the index as a new snapshot and clear the index.

        The current branch advances to the new commit; with a detached
        HEAD, HEAD itself moves.
        """
        if not self.is_initialized():
            return Result(Status.NOT_INITIALIZED)
        index = Index.load(self.store)
        if index.is_empty:
            return Result(Status.NOTHING_TO_COMMIT)

        parent = self.refs.head_commit()
        commit_hash = self.graph.create(
            message,
            self._clock(),
            index.snapshot(),
            (parent,) if parent else (),
        )
        self.refs.advance(commit_hash)
        index.clear()
        index.save()

        branch = self.refs.current_branch()
        if branch is not None:
            logger.info("Committed to %s as %s", branch, commit_hash)
        else:
            logger.info("Committed in detached HEAD as %s", commit_hash)
        return Result(Status.OK, commit=commit_hash)

    def log(self, start: str | None = None) -> Iterator[LogEntry]:
        """Commits from ``start`` (default HEAD) along first parents.

        Arguments are checked on the call; commits are loaded lazily.

        Raises:
            NotInitialized: If the repository has not been initialized.
            NotFound: If ``start`` is not a commit.
        """
        self._require_init()
        if start is None:
            start = self.refs.head_commit()
            if not start:
                return iter(())
        self.graph.load(start)
        return self._walk(start)

    def _walk(self, start: str) -> Iterator[LogEntry]:
        for commit_hash in self.graph.first_parent_chain(start):
            yield LogEntry(commit_hash, self.graph.load(commit_hash))

    # -- Refs --

    def head(self) -> Head:
        self._require_init()
        return self.refs.head()

    def head_commit(self) -> str:
        """The HEAD commit hash, or ``""`` before the first commit."""
        self._require_init()
        return self.refs.head_commit()

    def current_branch(self) -> str | None:
        self._require_init()
        return self.refs.current_branch()

    def branches(self) -> list[str]:
        self._require_init()
        return self.refs.branches()

    def create_branch(self, name: str) -> Result:
        """Create a branch at the HEAD commit."""
        if not self.is_initialized():
            return Result(Status.NOT_INITIALIZED)
        try:
            commit_hash = self.refs.create_branch(name)
        except AlreadyExists:
            return Result(Status.ALREADY_EXISTS)
        except NoCommitsYet:
            return Result(Status.NO_COMMITS_YET)
        return Result(Status.OK, commit=commit_hash)

    # -- Checkout --

    def checkout(self, target: str) -> Result:
        """Switch to a branch or commit and sync the working directory.

        Branch names take precedence over commit hashes. A branch with
        no commits only moves HEAD.
        """
        if not self.is_initialized():
            return Result(Status.NOT_INITIALIZED)

        branch_commit = self.refs.branch_commit(target)
        if branch_commit is not None:
            head = Head.symbolic(target)
            commit_hash = branch_commit
        elif self.graph.is_commit(target):
            head = Head.direct(target)
            commit_hash = target
        else:
            return Result(Status.NOT_FOUND)

        self.refs.set_head(head)
        if not commit_hash:
            logger.info("Switched to new branch %s", target)
            return Result(Status.OK)

        self._materialize(commit_hash)
        if head.branch is not None:
            logger.info("Switched to branch %s", target)
        else:
            logger.info("Switched to commit %s", target)
        return Result(Status.OK, commit=commit_hash)

    def _materialize(self, commit_hash: str, previous: str = "") -> None:
        """Write ``commit_hash``'s snapshot to the workspace and the index.

        Files recorded in the index are removed first, along with those
        of the ``previous`` commit when one is given.
        """
        snapshot = dict(self.graph.load(commit_hash).snapshot)
        blobs = self.objects.get_many(*set(snapshot.values()))
        index = Index.load(self.store)
        old_paths = set(index)
        if previous:
            old_paths.update(self.graph.load(previous).snapshot)
        self.workspace.sync(sorted(old_paths), snapshot, blobs)
        index.replace(snapshot)
        index.save()

    # -- Merge --

    def merge(self, branch: str) -> Result:
        """Merge ``branch`` into HEAD.

        When HEAD is an ancestor of ``branch`` the merge is a checkout of
        ``branch``: HEAD moves onto it and no branch pointer changes.
        Otherwise a two-parent merge commit is recorded, unless paths
        conflict.
        """
        if not self.is_initialized():
            return Result(Status.NOT_INITIALIZED)
        theirs = self.refs.branch_commit(branch)
        if theirs is None:
            return Result(Status.NOT_FOUND)
        ours = self.refs.head_commit()

        if ours == theirs or not theirs:
            logger.info("Already up to date with %s", branch)
            return Result(Status.UP_TO_DATE, commit=ours or None)

        ancestor = find_common_ancestor(self.graph, ours, theirs) if ours else ""
        if ancestor == ours:
            # A fast-forward is a checkout of the other branch.
            self.refs.set_head(Head.symbolic(branch))
            self._materialize(theirs, previous=ours)
            logger.info("Fast-forwarded to %s at %s", branch, theirs)
            return Result(Status.FAST_FORWARDED, commit=theirs)
        if ancestor == theirs:
            logger.info("Already up to date with %s", branch)
            return Result(Status.UP_TO_DATE, commit=ours)

        base = self.graph.load(ancestor).snapshot if ancestor else {}
        try:
            merged = three_way_merge(
                base,
                self.graph.load(ours).snapshot,
                self.graph.load(theirs).snapshot,
            )
        except MergeConflict as exc:
            for path in exc.conflicting_paths:
                logger.warning("CONFLICT: %s - both modified", path)
            return Result(Status.CONFLICTS, conflicts=exc.conflicting_paths)

        merge_hash = self.graph.create(
            f"Merge branch '{branch}'", self._clock(), merged, (ours, theirs)
        )
        self.refs.advance(merge_hash)
        self._materialize(merge_hash, previous=ours)
        logger.info("Merged %s as %s", branch, merge_hash)
        return Result(Status.MERGED, commit=merge_hash)

    # -- Diff --

    def diff(self, commit_a: str, commit_b: str) -> list[tuple[str, ChangeKind]]:
        """Path-level changes going from ``commit_a`` to ``commit_b``.

        Raises:
            NotFound: If either hash is not a commit.
        """
        self._require_init()
        return diff_snapshots(
            self.graph.load(commit_a).snapshot,
            self.graph.load(commit_b).snapshot,
        )


def repository(
    path: str | Path = ".",
    *,
    storage: Literal["files", "disk", "memory"] = "files",
    digest: str | Digest = "sha256",
    clock: Callable[[], int] | None = None,
    default_branch: str = DEFAULT_BRANCH,
) -> Repository:
    """Open (without initializing) the repository rooted at ``path``.

    Args:
        path: Working directory. Repository data lives in
            ``<path>/.minigit`` for on-disk storage.
        storage: ``"files"`` (default) for one file per object, ref,
            HEAD and index; ``"disk"`` for a diskcache-packed store;
            ``"memory"`` for a throwaway in-memory store.
        digest: Digest name (``"sha256"``, ``"blake2b"``) or function.
        clock: Returns commit timestamps (default ``time.time_ns``).
        default_branch: Branch HEAD points at after ``init()``.

    Returns:
        A ``Repository`` handle. Call ``init()`` to create a new one.
    """
    workdir = Path(path)
    if storage == "files":
        from .kv.files import Files

        backend: KVStore = Files(workdir / MINIGIT_DIR)
    elif storage == "disk":
        from .kv.disk import Disk

        backend = Disk(str(workdir / MINIGIT_DIR))
    elif storage == "memory":
        backend = Memory()
    else:
        raise ValueError(f"Unknown storage: {storage!r}")

    return Repository(
        backend,
        workdir=workdir,
        digest=digest,
        clock=clock,
        default_branch=default_branch,
    )
