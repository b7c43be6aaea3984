"""minigit: a minimal content-addressed version-control engine."""

from .commits import Commit, CommitGraph
from .diff import ChangeKind, diff_snapshots
from .errors import (
    AlreadyExists,
    IOFailure,
    MergeConflict,
    MinigitError,
    NoCommitsYet,
    NotFound,
    NotInitialized,
)
from .index import Index
from .kv.base import KVStore
from .merge import ABSENT, find_common_ancestor, three_way_merge
from .objects import Digest, ObjectStore
from .refs import Head, Refs
from .repository import LogEntry, Repository, Result, Status, repository
from .workspace import Workspace

__all__ = [
    "ABSENT",
    "AlreadyExists",
    "ChangeKind",
    "Commit",
    "CommitGraph",
    "Digest",
    "Head",
    "IOFailure",
    "Index",
    "KVStore",
    "LogEntry",
    "MergeConflict",
    "MinigitError",
    "NoCommitsYet",
    "NotFound",
    "NotInitialized",
    "ObjectStore",
    "Refs",
    "Repository",
    "Result",
    "Status",
    "Workspace",
    "diff_snapshots",
    "find_common_ancestor",
    "repository",
    "three_way_merge",
]
