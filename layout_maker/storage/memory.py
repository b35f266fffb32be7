from __future__ import annotations


class MemoryStorage:
    def __init__(self, initial: dict[str, bytes] | None = None) -> None:
        self.data: dict[str, bytes] = dict(initial or {})

    def get_bytes(self, key: str) -> bytes | None:
        return self.data.get(key)

    def put_bytes(self, key: str, data: bytes) -> str:
        self.data[key] = bytes(data)
        return f"memory://{key}"

    def delete(self, key: str) -> None:
        self.data.pop(key, None)


__all__ = ["MemoryStorage"]
