from __future__ import annotations

import re
from pathlib import Path

from layout_maker.exceptions import StorageError

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]")


class LocalStorage:
    """One file per key under ``root``."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.root / f"{_UNSAFE.sub('_', key)}.json"

    def get_bytes(self, key: str) -> bytes | None:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return path.read_bytes()
        except OSError as exc:
            raise StorageError(f"cannot read {path}", {"key": key}) from exc

    def put_bytes(self, key: str, data: bytes) -> str:
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        try:
            # full replace: write aside, then swap in
            tmp.write_bytes(data)
            tmp.replace(path)
        except OSError as exc:
            raise StorageError(f"cannot write {path}", {"key": key}) from exc
        return str(path)

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


__all__ = ["LocalStorage"]
