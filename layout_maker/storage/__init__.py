"""Key-value durable store (local filesystem, in-memory or S3)."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from layout_maker.settings import StorageSettings


class KeyValueStore(Protocol):
    def get_bytes(self, key: str) -> bytes | None:  # None when the key is absent
        ...

    def put_bytes(self, key: str, data: bytes) -> str:  # returns uri
        ...

    def delete(self, key: str) -> None:
        ...


def get_storage(config: StorageSettings) -> KeyValueStore:
    if config.backend == "memory":
        from layout_maker.storage.memory import MemoryStorage

        return MemoryStorage()
    if config.backend == "s3":
        from layout_maker.storage.s3 import S3Storage

        return S3Storage(bucket=config.bucket or "", prefix=config.prefix, region=config.region)
    from layout_maker.storage.local import LocalStorage

    return LocalStorage(Path(config.root))


__all__ = ["KeyValueStore", "get_storage"]
