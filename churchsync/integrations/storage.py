"""
File storage.

Uploaded images, documents and generated exports are addressed by a storage
key such as ``exports/grace-church/<export id>/connect-cards-generic-2025-01-05.csv``.
``LocalFileStorage`` keeps them under a root directory; a key that would
resolve outside the root is rejected.
"""

from __future__ import annotations

import re
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os

from churchsync.core.errors import BusinessRuleError, NotFoundError
from churchsync.core.logging_config import get_logger
from churchsync.server.core.config import settings

logger = get_logger(__name__)

_UNSAFE_FILE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class FileStorage(ABC):
    """Key/value blob storage used by uploads and exports."""

    @abstractmethod
    async def put(self, key: str, data: bytes) -> None:
        """Store ``data`` under ``key``, replacing any previous content."""

    @abstractmethod
    async def get(self, key: str) -> bytes:
        """Return the content stored under ``key``.

        Raises:
            NotFoundError: Nothing is stored under the key.
        """

    @abstractmethod
    async def delete(self, key: str) -> bool:
        """Remove ``key``; returns False when it did not exist."""

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Whether something is stored under ``key``."""


class LocalFileStorage(FileStorage):
    """Storage backed by a directory on the local filesystem."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).resolve()

    def _path(self, key: str) -> Path:
        if not key or key.startswith(("/", "\\")):
            raise BusinessRuleError("Invalid file key")
        path = (self.root / key).resolve()
        if self.root not in path.parents:
            raise BusinessRuleError("Invalid file key")
        return path

    async def put(self, key: str, data: bytes) -> None:
        path = self._path(key)
        await aiofiles.os.makedirs(path.parent, exist_ok=True)
        async with aiofiles.open(path, "wb") as handle:
            await handle.write(data)
        logger.debug(f"Stored {len(data)} bytes at {key}")

    async def get(self, key: str) -> bytes:
        path = self._path(key)
        if not await aiofiles.os.path.isfile(path):
            raise NotFoundError("File not found")
        async with aiofiles.open(path, "rb") as handle:
            return await handle.read()

    async def delete(self, key: str) -> bool:
        path = self._path(key)
        if not await aiofiles.os.path.isfile(path):
            return False
        await aiofiles.os.remove(path)
        logger.debug(f"Deleted {key}")
        return True

    async def exists(self, key: str) -> bool:
        return await aiofiles.os.path.isfile(self._path(key))


def safe_file_name(file_name: str) -> str:
    """File name reduced to characters that are safe inside a storage key."""
    name = _UNSAFE_FILE_CHARS.sub("-", Path(file_name).name).strip("-.")
    return name or "file"


def unique_upload_key(file_name: str) -> str:
    return f"{uuid.uuid4()}-{safe_file_name(file_name)}"


_storage: Optional[FileStorage] = None


def get_storage() -> FileStorage:
    """Process-wide storage instance, usable as a FastAPI dependency."""
    global _storage
    if _storage is None:
        _storage = LocalFileStorage(settings.storage.root)
    return _storage
