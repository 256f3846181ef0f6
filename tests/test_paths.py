from __future__ import annotations

import os
from pathlib import Path

from lsprotocol import types as lsp

from leanroute.core.paths import Location, WorkspaceFolders, is_relative_to, path_to_uri


def test_file_uri_and_path_are_the_same_location(tmp_path: Path) -> None:
    by_path = Location.parse(tmp_path / "A.lean")
    by_uri = Location.parse(path_to_uri(tmp_path / "A.lean"))

    assert by_path == by_uri
    assert hash(by_path) == hash(by_uri)
    assert by_uri.is_file


def test_trailing_separator_does_not_change_identity(tmp_path: Path) -> None:
    assert Location.parse(str(tmp_path) + os.sep) == Location.parse(tmp_path)


def test_uri_with_spaces_round_trips(tmp_path: Path) -> None:
    loc = Location.parse(tmp_path / "my project" / "Main.lean")
    assert Location.parse(loc.uri) == loc
    assert loc.name == "Main.lean"


def test_untitled_location_is_not_a_file() -> None:
    loc = Location.parse("untitled:Untitled-1")

    assert not loc.is_file
    assert loc.scheme == "untitled"
    assert loc.uri == "untitled:Untitled-1"
    assert loc.parent == loc


def test_filesystem_root_is_its_own_parent() -> None:
    root = Location.parse(Path(os.path.abspath(os.sep)))
    assert root.parent == root


def test_is_relative_to(tmp_path: Path) -> None:
    base = Location.parse(tmp_path / "ws")
    assert is_relative_to(Location.parse(tmp_path / "ws" / "a" / "b"), base)
    assert is_relative_to(base, base)
    assert not is_relative_to(Location.parse(tmp_path / "ws2"), base)
    assert not is_relative_to(Location.parse("untitled:x"), base)


def test_workspace_folders_pick_innermost(tmp_path: Path) -> None:
    outer = tmp_path / "ws"
    inner = outer / "proj"
    folders = WorkspaceFolders([outer, lsp.WorkspaceFolder(uri=path_to_uri(inner), name="proj")])

    assert folders.containing(Location.parse(inner / "Main.lean")) == Location.parse(inner)
    assert folders.containing(Location.parse(outer / "Other.lean")) == Location.parse(outer)
    assert folders.containing(Location.parse(tmp_path / "elsewhere")) is None


def test_workspace_folders_add_remove(tmp_path: Path) -> None:
    folders = WorkspaceFolders()
    folders.add(tmp_path)
    folders.add(str(tmp_path) + os.sep)
    assert len(folders) == 1

    removed = folders.remove(tmp_path)
    assert removed is not None
    assert len(folders) == 0
    assert folders.remove(tmp_path) is None
