"""Abstract KV store interface."""

from abc import ABC, abstractmethod
from typing import Iterable, Mapping


class KVStore(ABC):
    """Key-value store operating on bytes only.

    Keys are slash-separated relative names (``objects/<hash>``,
    ``refs/heads/main``, ``HEAD``). Serialization is handled at higher
    layers.
    """

    @abstractmethod
    def get(self, key: str) -> bytes | None:
        """Get bytes value for key, or None if not found."""

    @abstractmethod
    def set(self, key: str, value: bytes) -> None:
        """Set bytes value for key."""

    @abstractmethod
    def get_many(self, *args: str) -> Mapping[str, bytes]:
        """Get multiple keys, returning only keys that exist."""

    @abstractmethod
    def set_many(self, **kwargs: bytes) -> None:
        """Set multiple key-value pairs."""

    @abstractmethod
    def keys(self, prefix: str = "") -> Iterable[str]:
        """Iterate over all keys starting with ``prefix``."""

    @abstractmethod
    def __contains__(self, key: str) -> bool:
        """Check if key exists in store."""

    def close(self) -> None:
        """Release any open handles. A no-op unless overridden."""
