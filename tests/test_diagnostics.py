from __future__ import annotations

import asyncio
from pathlib import Path

from conftest import write_toolchain
from leanroute.core.paths import Location, WorkspaceFolders
from leanroute.project.diagnostics import check_workspace_folder
from leanroute.project.resolver import ProjectResolver, find_nearest_valid_ancestor


def test_nearest_ancestor_with_toolchain(tmp_path: Path) -> None:
    proj = tmp_path / "proj"
    write_toolchain(proj, "4.0.0")
    docs = proj / "docs" / "examples"
    docs.mkdir(parents=True)

    assert asyncio.run(find_nearest_valid_ancestor(docs)) == Location.parse(proj)


def test_start_folder_itself_is_never_tested(tmp_path: Path) -> None:
    outer = tmp_path / "outer"
    inner = outer / "inner"
    write_toolchain(outer, "4.0.0")
    write_toolchain(inner, "4.1.0")

    assert asyncio.run(find_nearest_valid_ancestor(inner)) == Location.parse(outer)


def test_core_distribution_is_a_valid_ancestor(tmp_path: Path) -> None:
    dist = tmp_path / "dist"
    nested = dist / "src" / "lean"
    nested.mkdir(parents=True)
    (dist / "LICENSE").write_text("", encoding="utf-8")
    (dist / "LICENSES").mkdir()

    assert asyncio.run(find_nearest_valid_ancestor(nested)) == Location.parse(dist)


def test_no_valid_ancestor(tmp_path: Path) -> None:
    folder = tmp_path / "nothing" / "here"
    folder.mkdir(parents=True)
    assert asyncio.run(find_nearest_valid_ancestor(folder)) is None


def test_ancestor_scan_ignores_workspace_folders(tmp_path: Path) -> None:
    proj = tmp_path / "proj"
    write_toolchain(proj, "4.0.0")
    ws = proj / "ws"
    folder = ws / "sub"
    folder.mkdir(parents=True)
    resolver = ProjectResolver(WorkspaceFolders([ws]))

    assert asyncio.run(resolver.find_nearest_valid_ancestor(folder)) == Location.parse(proj)


def test_valid_folder_has_no_warning(tmp_path: Path) -> None:
    write_toolchain(tmp_path / "proj", "4.0.0")
    assert asyncio.run(check_workspace_folder(tmp_path / "proj")) is None


def test_warning_names_ancestor_project(tmp_path: Path) -> None:
    proj = tmp_path / "proj"
    write_toolchain(proj, "4.0.0")
    sub = proj / "Sub"
    sub.mkdir()

    warning = asyncio.run(check_workspace_folder(sub))

    assert warning is not None
    assert warning.ancestor == Location.parse(proj)
    assert str(proj) in warning.message
    assert "not a valid Lean 4 project" in warning.message


def test_warning_without_ancestor(tmp_path: Path) -> None:
    folder = tmp_path / "empty"
    folder.mkdir()

    warning = asyncio.run(check_workspace_folder(folder))

    assert warning is not None
    assert warning.ancestor is None
    assert warning.message == "Opened folder does not contain a valid Lean 4 project."


def test_warnings_can_be_disabled(tmp_path: Path) -> None:
    assert asyncio.run(check_workspace_folder(tmp_path, enabled=False)) is None
