"""Plain-file KV store: one file per key under a root directory."""

from pathlib import Path
from typing import Iterable, Mapping

from ..errors import IOFailure
from .base import KVStore


class Files(KVStore):
    """KV store that maps each key to a file below ``root``.

    ``objects/ab12`` is stored at ``<root>/objects/ab12``. Parent
    directories are created on write. Any ``OSError`` is raised as
    ``IOFailure``.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def _path(self, key: str) -> Path:
        parts = key.split("/")
        if not key or any(part in ("", ".", "..") for part in parts):
            raise ValueError(f"Invalid key: {key!r}")
        return self.root.joinpath(*parts)

    def get(self, key: str) -> bytes | None:
        path = self._path(key)
        try:
            return path.read_bytes()
        except (FileNotFoundError, NotADirectoryError, IsADirectoryError):
            return None
        except OSError as exc:
            raise IOFailure(f"Failed to read: {path}") from exc

    def set(self, key: str, value: bytes) -> None:
        if not isinstance(value, bytes):
            raise TypeError(f"Expected bytes, got {type(value).__name__}")
        path = self._path(key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(value)
        except OSError as exc:
            raise IOFailure(f"Failed to write: {path}") from exc

    def get_many(self, *args: str) -> Mapping[str, bytes]:
        return {k: v for k in args if (v := self.get(k)) is not None}

    def set_many(self, **kwargs: bytes) -> None:
        for key, value in kwargs.items():
            if not isinstance(value, bytes):
                raise TypeError(f"Expected bytes for {key}, got {type(value).__name__}")
        for key, value in kwargs.items():
            self.set(key, value)

    def keys(self, prefix: str = "") -> Iterable[str]:
        """Keys starting with ``prefix``.

        Only the directory named by the prefix up to its last ``/`` is
        walked, so ``refs/heads/`` never visits ``objects/``.
        """
        directory, _, _ = prefix.rpartition("/")
        top = self._path(directory) if directory else self.root
        if not top.is_dir():
            return []
        try:
            found = [
                path.relative_to(self.root).as_posix()
                for path in top.rglob("*")
                if path.is_file()
            ]
        except OSError as exc:
            raise IOFailure(f"Failed to list: {self.root}") from exc
        return sorted(key for key in found if key.startswith(prefix))

    def __contains__(self, key: str) -> bool:
        return self._path(key).is_file()
