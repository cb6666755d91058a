"""Key-value blob stores (JSON file per key + fcntl.flock + atomic write)."""

import fcntl
import os
import tempfile
from pathlib import Path
from typing import Protocol
from urllib.parse import quote


class BlobStore(Protocol):
    """Synchronous get/set/remove of string blobs by key."""

    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> None: ...


class JsonFileBlobStore:
    """Stores each key as ``<quoted key>.json`` under a directory.

    Args:
        directory: Directory holding the blob files.
    """

    def __init__(self, directory: Path):
        self.directory = directory
        self.directory.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{quote(key, safe='-_.')}.json"

    def get(self, key: str) -> str | None:
        path = self.path_for(key)
        if not path.exists():
            return None
        with open(path, encoding="utf-8") as f:
            fcntl.flock(f, fcntl.LOCK_SH)
            data = f.read()
            fcntl.flock(f, fcntl.LOCK_UN)
        return data

    def set(self, key: str, value: str) -> None:
        path = self.path_for(key)
        with tempfile.NamedTemporaryFile(
            "w", dir=self.directory, delete=False, suffix=".json", encoding="utf-8"
        ) as tmp:
            tmp.write(value)
        os.replace(tmp.name, path)

    def remove(self, key: str) -> None:
        self.path_for(key).unlink(missing_ok=True)


class MemoryBlobStore:
    """Process-local store, used for tests and ephemeral runs."""

    def __init__(self, initial: dict[str, str] | None = None):
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)
