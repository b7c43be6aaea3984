"""Path-level differences between two snapshots."""

from enum import Enum
from typing import Mapping


class ChangeKind(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"


def diff_snapshots(
    snapshot_a: Mapping[str, str], snapshot_b: Mapping[str, str]
) -> list[tuple[str, ChangeKind]]:
    """Classify every path that differs going from ``snapshot_a`` to ``snapshot_b``.

    Only presence and blob hashes are compared. Results are sorted by path.
    """
    changes: list[tuple[str, ChangeKind]] = []
    for path in sorted(set(snapshot_a) | set(snapshot_b)):
        if path not in snapshot_a:
            changes.append((path, ChangeKind.ADDED))
        elif path not in snapshot_b:
            changes.append((path, ChangeKind.REMOVED))
        elif snapshot_a[path] != snapshot_b[path]:
            changes.append((path, ChangeKind.MODIFIED))
    return changes
