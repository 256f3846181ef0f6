"""Reading the `lean-toolchain` file of a project."""

from __future__ import annotations

import logging
from typing import Optional

from ..core.fs import FileSystem, default_filesystem
from ..core.paths import Location

logger = logging.getLogger(__name__)

TOOLCHAIN_FILE_NAME = "lean-toolchain"


def toolchain_file_for(root: Location) -> Location:
    return root.joinpath(TOOLCHAIN_FILE_NAME)


async def read_toolchain_file(toolchain_file: Location, fs: Optional[FileSystem] = None) -> str:
    """Read and trim a toolchain file. Raises on I/O or decode errors."""
    if not toolchain_file.is_file:
        return ""
    fs = fs or default_filesystem()
    text = await fs.read_text(toolchain_file.fs_path)
    return text.strip()


async def read_toolchain_file_or_none(toolchain_file: Location, fs: Optional[FileSystem] = None) -> Optional[str]:
    try:
        return await read_toolchain_file(toolchain_file, fs)
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Could not read %s: %s", toolchain_file, e)
        return None


async def read_lean_version(root: Location, fs: Optional[FileSystem] = None) -> Optional[str]:
    """Version string from `root/lean-toolchain`, or None when absent or unreadable."""
    if not root.is_file:
        return None
    fs = fs or default_filesystem()
    toolchain_file = toolchain_file_for(root)
    if not await fs.exists(toolchain_file.fs_path):
        return None
    return await read_toolchain_file_or_none(toolchain_file, fs)
