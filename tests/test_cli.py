from __future__ import annotations

import json
from pathlib import Path

import pytest

from conftest import write_lean_file, write_toolchain
from leanroute.cli import main


@pytest.fixture(autouse=True)
def _isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LEANROUTE_CONFIG", str(tmp_path / "no-config.yaml"))
    monkeypatch.delenv("DEFAULT_LEAN_TOOLCHAIN", raising=False)
    monkeypatch.delenv("LEANROUTE_TOOLCHAIN_PATH", raising=False)
    monkeypatch.delenv("LEANROUTE_ENABLE_LAKE", raising=False)


def test_resolve_json(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    proj = tmp_path / "ws" / "proj"
    write_toolchain(proj, "4.0.0")
    main_file = write_lean_file(proj / "src" / "Main.lean")

    assert main(["resolve", str(main_file), "--json"]) == 0

    out = json.loads(capsys.readouterr().out)
    assert out == [{"path": str(main_file), "root": str(proj), "version": "4.0.0", "reason": "toolchain"}]


def test_resolve_with_workspace_folder(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    write_toolchain(tmp_path / "outer", "4.0.0")
    ws = tmp_path / "outer" / "ws"
    doc = write_lean_file(ws / "A.lean")

    assert main(["resolve", str(doc), "-w", str(ws)]) == 0

    out = capsys.readouterr().out
    assert f"root:    {ws}" in out
    assert "version: -" in out
    assert "workspace_fence" in out


def test_check_reports_ancestor(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    proj = tmp_path / "proj"
    write_toolchain(proj, "4.0.0")
    (proj / "docs").mkdir()

    assert main(["check", str(proj / "docs")]) == 1
    assert str(proj) in capsys.readouterr().out

    assert main(["check", str(proj)]) == 0
    assert "ok" in capsys.readouterr().out


def test_command_json(tmp_path: Path, capsys: pytest.CaptureFixture) -> None:
    proj = tmp_path / "proj"
    write_toolchain(proj, "4.0.0")
    doc = write_lean_file(proj / "Main.lean")

    assert main(["command", str(doc), "--json"]) == 0

    out = json.loads(capsys.readouterr().out)
    assert out["cmd"] == ["lean", "+4.0.0", "--server"]
    assert out["cwd"] == str(proj)


def test_no_command_prints_help(capsys: pytest.CaptureFixture) -> None:
    assert main([]) == 1
    assert "resolve" in capsys.readouterr().out
