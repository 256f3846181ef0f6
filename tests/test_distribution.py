from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from conftest import UnreadableFileSystem, write_toolchain
from leanroute.core.paths import Location
from leanroute.project.distribution import is_core_lean_directory, match_core_shape
from leanroute.project.toolchain import read_lean_version, read_toolchain_file


def _touch_all(folder: Path, names) -> None:
    folder.mkdir(parents=True, exist_ok=True)
    for name in names:
        if name.startswith("LICENSE"):
            (folder / name).write_text("", encoding="utf-8")
        else:
            (folder / name).mkdir()


@pytest.mark.parametrize(
    "entries, shape",
    [
        (("LICENSE", "LICENSES", "src"), "distribution"),
        (("Init", "Lean", "kernel", "runtime"), "source"),
    ],
)
def test_core_shapes(tmp_path: Path, entries, shape) -> None:
    _touch_all(tmp_path, entries)

    matched = asyncio.run(match_core_shape(Location.parse(tmp_path)))

    assert matched is not None
    assert matched.name == shape


def test_partial_shape_is_not_core(tmp_path: Path) -> None:
    _touch_all(tmp_path, ("LICENSE", "src", "Init", "Lean", "kernel"))
    assert not asyncio.run(is_core_lean_directory(Location.parse(tmp_path)))


def test_shape_is_a_heuristic(tmp_path: Path) -> None:
    # Any folder with these entries passes; contents are never inspected.
    (tmp_path / "LICENSE").mkdir()
    (tmp_path / "LICENSES").write_text("not a directory", encoding="utf-8")
    (tmp_path / "src").write_text("not a directory either", encoding="utf-8")

    assert asyncio.run(is_core_lean_directory(Location.parse(tmp_path)))


def test_non_file_location_is_never_core(recording_fs) -> None:
    assert not asyncio.run(is_core_lean_directory(Location.parse("untitled:Untitled-1"), recording_fs))
    assert recording_fs.calls == []


def test_read_lean_version(tmp_path: Path) -> None:
    write_toolchain(tmp_path, "leanprover/lean4:v4.0.0")
    assert asyncio.run(read_lean_version(Location.parse(tmp_path))) == "leanprover/lean4:v4.0.0"


def test_read_lean_version_without_toolchain(tmp_path: Path) -> None:
    assert asyncio.run(read_lean_version(Location.parse(tmp_path))) is None


def test_read_lean_version_unreadable(tmp_path: Path) -> None:
    write_toolchain(tmp_path, "4.0.0")
    assert asyncio.run(read_lean_version(Location.parse(tmp_path), UnreadableFileSystem())) is None


def test_read_toolchain_file_propagates_errors(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        asyncio.run(read_toolchain_file(Location.parse(tmp_path / "lean-toolchain")))


def test_read_toolchain_file_non_file_location_is_empty() -> None:
    assert asyncio.run(read_toolchain_file(Location.parse("untitled:lean-toolchain"))) == ""
