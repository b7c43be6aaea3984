"""Working-directory I/O for checkout and staging."""

import logging
import os
from pathlib import Path
from typing import Mapping

from .errors import IOFailure, NotFound

logger = logging.getLogger(__name__)


class Workspace:
    """The working tree rooted at ``root``.

    Paths are forward-slash strings relative to the root.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def relative(self, path: str | Path) -> str:
        """Normalize ``path`` to a forward-slash path relative to the root.

        Relative inputs are taken relative to the root. Raises
        ``ValueError`` for paths that escape it.
        """
        candidate = Path(path)
        if not candidate.is_absolute():
            candidate = self.root / candidate
        resolved = Path(os.path.normpath(candidate.absolute()))
        root = Path(os.path.normpath(self.root.absolute()))
        try:
            rel = resolved.relative_to(root)
        except ValueError:
            raise ValueError(f"{path} is outside the working directory") from None
        if not rel.parts:
            raise ValueError(f"{path} is the working directory itself")
        return rel.as_posix()

    def _path(self, path: str) -> Path:
        return self.root / self.relative(path)

    def exists(self, path: str) -> bool:
        return self._path(path).is_file()

    def read(self, path: str) -> bytes:
        target = self._path(path)
        try:
            return target.read_bytes()
        except FileNotFoundError:
            raise NotFound(f"File '{path}' does not exist") from None
        except OSError as exc:
            raise IOFailure(f"Failed to read: {target}") from exc

    def write(self, path: str, content: bytes) -> None:
        target = self._path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content)
        except OSError as exc:
            raise IOFailure(f"Failed to write: {target}") from exc
        logger.debug("Wrote %s", path)

    def remove(self, path: str) -> None:
        """Delete ``path`` if present and prune directories left empty."""
        target = self._path(path)
        try:
            target.unlink()
        except FileNotFoundError:
            return
        except OSError as exc:
            raise IOFailure(f"Failed to remove: {target}") from exc
        logger.debug("Removed %s", path)

        parent = target.parent
        root = self.root.absolute()
        while parent.absolute() != root:
            try:
                parent.rmdir()
            except OSError:
                break
            parent = parent.parent

    def sync(
        self,
        old_paths: list[str],
        snapshot: Mapping[str, str],
        blobs: Mapping[str, bytes],
    ) -> None:
        """Replace ``old_paths`` with the files of ``snapshot``.

        ``blobs`` maps each snapshot hash to its content.
        """
        for path in old_paths:
            self.remove(path)
        for path, object_hash in sorted(snapshot.items()):
            self.write(path, blobs[object_hash])
