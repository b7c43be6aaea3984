"""Merge engine: common-ancestor search and three-way snapshot merge."""

from collections import deque
from typing import Mapping

from .commits import CommitGraph
from .errors import MergeConflict


class _Absent:
    """Sentinel for a path with no entry in a snapshot."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = _Absent()


def find_common_ancestor(graph: CommitGraph, commit_a: str, commit_b: str) -> str | None:
    """Find a common ancestor of two commits.

    Collects ``commit_a`` and everything reachable from it, then walks
    breadth-first from ``commit_b`` (itself first) over every parent
    edge in order, returning the first commit already collected. On
    histories with several shared ancestors this need not be the lowest
    one; the first match in that walk is what fast-forward and
    up-to-date detection expect.

    Returns None if the histories share nothing.
    """
    reachable_a = graph.ancestors(commit_a) | {commit_a}

    seen: set[str] = {commit_b}
    queue: deque[str] = deque([commit_b])
    while queue:
        current = queue.popleft()
        if current in reachable_a:
            return current
        for p in graph.parents(current):
            if p not in seen:
                seen.add(p)
                queue.append(p)
    return None


def three_way_merge(
    base: Mapping[str, str],
    ours: Mapping[str, str],
    theirs: Mapping[str, str],
) -> dict[str, str]:
    """Merge two snapshots against their common ancestor.

    Starts from ``ours`` and takes every path only ``theirs`` changed,
    deletions included. A path both sides changed differently is a
    conflict.

    Raises:
        MergeConflict: Listing every conflicting path.
    """
    merged = dict(ours)
    conflicts: set[str] = set()

    for path in set(base) | set(ours) | set(theirs):
        base_h = base.get(path, ABSENT)
        our_h = ours.get(path, ABSENT)
        their_h = theirs.get(path, ABSENT)

        if our_h == their_h:
            continue
        if our_h != base_h and their_h != base_h:
            conflicts.add(path)
        elif their_h != base_h:
            if their_h is ABSENT:
                merged.pop(path, None)
            else:
                merged[path] = their_h

    if conflicts:
        raise MergeConflict(conflicts)
    return merged
