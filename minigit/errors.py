"""minigit error types."""


class MinigitError(Exception):
    """Base class for all minigit errors."""


class NotInitialized(MinigitError):
    """Raised when an operation runs before ``init()``."""


class NotFound(MinigitError, KeyError):
    """Raised when a file, branch, commit or object hash does not resolve."""

    def __str__(self) -> str:
        return Exception.__str__(self)


class AlreadyExists(MinigitError):
    """Raised when a repository or branch already exists."""


class NoCommitsYet(MinigitError):
    """Raised when an operation needs a HEAD commit and there is none."""


class IOFailure(MinigitError):
    """Raised when the underlying storage cannot be read or written.

    This is the only fatal kind: the current operation is aborted and
    nothing is retried.
    """


class MergeConflict(MinigitError):
    """Raised when a three-way merge finds paths changed on both sides.

    Attributes:
        conflicting_paths: Sorted tuple of the paths that could not be merged.
    """

    def __init__(self, conflicting_paths: set[str]) -> None:
        self.conflicting_paths = tuple(sorted(conflicting_paths))
        paths_str = ", ".join(self.conflicting_paths)
        super().__init__(f"Merge conflict on paths: {paths_str}")
