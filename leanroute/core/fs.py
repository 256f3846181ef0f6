"""Filesystem capability used by project resolution.

Resolution only ever checks for existence and reads small text files, so the
host surface is kept to three async calls. Tests substitute their own
implementation.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Protocol

logger = logging.getLogger(__name__)


class FileSystem(Protocol):
    async def exists(self, path: Path) -> bool: ...

    async def is_file(self, path: Path) -> bool: ...

    async def read_text(self, path: Path) -> str: ...


class LocalFileSystem:
    """The host filesystem, with blocking calls moved off the event loop."""

    async def exists(self, path: Path) -> bool:
        return await asyncio.to_thread(_path_exists, path)

    async def is_file(self, path: Path) -> bool:
        return await asyncio.to_thread(_path_is_file, path)

    async def read_text(self, path: Path) -> str:
        return await asyncio.to_thread(Path(path).read_text, encoding="utf-8")


def _path_exists(path: Path) -> bool:
    try:
        return Path(path).exists()
    except OSError as e:
        logger.debug("exists(%s) failed: %s", path, e)
        return False


def _path_is_file(path: Path) -> bool:
    try:
        return Path(path).is_file()
    except OSError as e:
        logger.debug("is_file(%s) failed: %s", path, e)
        return False


_DEFAULT_FS = LocalFileSystem()


def default_filesystem() -> LocalFileSystem:
    return _DEFAULT_FS
