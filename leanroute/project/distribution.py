"""Detection of Lean 4's own source tree or a bundled distribution.

A core directory is recognized by shape alone: all entries of one signature
must exist directly beneath it. Contents are not inspected.
"""

from __future__ import annotations

import asyncio
from typing import NamedTuple, Optional

from ..core.fs import FileSystem, default_filesystem
from ..core.paths import Location


class CoreShape(NamedTuple):
    name: str
    entries: tuple[str, ...]


CORE_SHAPES: tuple[CoreShape, ...] = (
    # Nightly/release distribution root.
    CoreShape("distribution", ("LICENSE", "LICENSES", "src")),
    # The lean4 repository's src/ directory.
    CoreShape("source", ("Init", "Lean", "kernel", "runtime")),
)


async def _has_all(location: Location, entries: tuple[str, ...], fs: FileSystem) -> bool:
    checks = [fs.exists(location.joinpath(e).fs_path) for e in entries]
    results = await asyncio.gather(*checks)
    return all(results)


async def match_core_shape(location: Location, fs: Optional[FileSystem] = None) -> Optional[CoreShape]:
    """Return the first core shape `location` matches, or None."""
    if not location.is_file:
        return None
    fs = fs or default_filesystem()
    for shape in CORE_SHAPES:
        if await _has_all(location, shape.entries, fs):
            return shape
    return None


async def is_core_lean_directory(location: Location, fs: Optional[FileSystem] = None) -> bool:
    return await match_core_shape(location, fs) is not None
