"""Building the command line for a project's Lean server."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

from ..config import Settings, server_environment
from ..core.fs import FileSystem, default_filesystem
from ..core.models import VersionInfo

LAKEFILE_NAMES: tuple[str, ...] = ("lakefile.lean", "lakefile.toml")


@dataclass(frozen=True)
class ServerCommand:
    cmd: List[str]
    cwd: str
    env: Dict[str, str] = field(default_factory=dict)
    uses_lake: bool = False


def _executable(name: str, settings: Settings) -> str:
    if settings.toolchain_path:
        return os.path.join(settings.toolchain_path, "bin", name)
    return name


async def _has_lakefile(info: VersionInfo, fs: FileSystem) -> bool:
    for name in LAKEFILE_NAMES:
        if await fs.exists(info.root.joinpath(name).fs_path):
            return True
    return False


async def build_server_command(
    info: VersionInfo,
    settings: Optional[Settings] = None,
    fs: Optional[FileSystem] = None,
    *,
    base_env: Optional[Mapping[str, str]] = None,
) -> ServerCommand:
    """Command that serves `info.root` with the toolchain named by `info.version`.

    Without an explicit toolchain path, the version (or the configured default
    toolchain when the project names none) is passed to elan as a
    `+toolchain` override.
    """
    settings = settings or Settings()
    fs = fs or default_filesystem()

    uses_lake = settings.enable_lake and info.root.is_file and await _has_lakefile(info, fs)
    if uses_lake:
        executable = settings.lake_path or _executable("lake", settings)
    else:
        executable = _executable("lean", settings)

    cmd = [executable]
    toolchain = info.version or settings.default_toolchain
    if toolchain and not settings.toolchain_path:
        cmd.append(f"+{toolchain}")
    cmd.extend(["serve", "--"] if uses_lake else ["--server"])
    cmd.extend(settings.server_args)

    env = server_environment(settings, base_env)
    if settings.server_logging_enabled:
        env["LEAN_SERVER_LOG_DIR"] = settings.server_logging_path

    cwd = str(info.root) if info.root.is_file else os.getcwd()
    return ServerCommand(cmd=cmd, cwd=cwd, env=env, uses_lake=uses_lake)
