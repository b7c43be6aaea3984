"""In-memory KV store."""

from typing import Iterable, Mapping

from .base import KVStore


class Memory(KVStore):
    """A memory-backed KV store."""

    def __init__(self) -> None:
        self.memory: dict[str, bytes] = {}

    def get(self, key: str) -> bytes | None:
        return self.memory.get(key)

    def set(self, key: str, value: bytes) -> None:
        if not isinstance(value, bytes):
            raise TypeError(f"Expected bytes, got {type(value).__name__}")
        self.memory[key] = value

    def get_many(self, *args: str) -> Mapping[str, bytes]:
        return {key: val for key in args if (val := self.memory.get(key)) is not None}

    def set_many(self, **kwargs: bytes) -> None:
        for key, value in kwargs.items():
            if not isinstance(value, bytes):
                raise TypeError(f"Expected bytes for {key}, got {type(value).__name__}")
        self.memory.update(kwargs)

    def keys(self, prefix: str = "") -> Iterable[str]:
        return [key for key in self.memory if key.startswith(prefix)]

    def __contains__(self, key: str) -> bool:
        return key in self.memory
