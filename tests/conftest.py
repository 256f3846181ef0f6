from __future__ import annotations

from pathlib import Path
from typing import List

import pytest

from leanroute.core.fs import LocalFileSystem


def write_toolchain(folder: Path, version: str) -> Path:
    folder.mkdir(parents=True, exist_ok=True)
    path = folder / "lean-toolchain"
    path.write_text(version + "\n", encoding="utf-8")
    return path


def write_lean_file(path: Path, text: str = "def main : IO Unit := pure ()\n") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


class RecordingFileSystem(LocalFileSystem):
    """Local filesystem that records every call."""

    def __init__(self) -> None:
        self.calls: List[tuple[str, Path]] = []

    async def exists(self, path: Path) -> bool:
        self.calls.append(("exists", Path(path)))
        return await super().exists(path)

    async def is_file(self, path: Path) -> bool:
        self.calls.append(("is_file", Path(path)))
        return await super().is_file(path)

    async def read_text(self, path: Path) -> str:
        self.calls.append(("read_text", Path(path)))
        return await super().read_text(path)


class UnreadableFileSystem(LocalFileSystem):
    """Every read fails as if permission were denied."""

    async def read_text(self, path: Path) -> str:
        raise PermissionError(13, "Permission denied", str(path))


@pytest.fixture
def recording_fs() -> RecordingFileSystem:
    return RecordingFileSystem()
