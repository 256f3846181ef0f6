"""Configuration for leanroute.

Settings come from `~/.leanroute/config.yaml` (or `LEANROUTE_CONFIG`), then
environment overrides.
"""

from __future__ import annotations

import logging
import os
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Dict, List, Mapping, Optional

import yaml

logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".leanroute"
CONFIG_FILE = CONFIG_DIR / "config.yaml"

DEFAULT_TOOLCHAIN = "leanprover/lean4:stable"


@dataclass
class Settings:
    """Server and toolchain settings."""

    toolchain_path: str = ""  # Empty = resolve through elan
    lake_path: str = ""
    enable_lake: bool = False
    server_env: Dict[str, str] = field(default_factory=dict)
    server_env_paths: List[str] = field(default_factory=list)
    server_args: List[str] = field(default_factory=list)
    server_logging_enabled: bool = False
    server_logging_path: str = "."
    show_invalid_project_warnings: bool = True
    default_toolchain: str = DEFAULT_TOOLCHAIN
    request_timeout: float = 30.0

    def to_dict(self) -> dict:
        return asdict(self)


def _parse_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _from_mapping(data: Mapping) -> Settings:
    known = {f.name for f in fields(Settings)}
    filtered = {k: v for k, v in data.items() if k in known}
    unknown = sorted(set(data) - known)
    if unknown:
        logger.debug("Ignoring unknown settings: %s", ", ".join(map(str, unknown)))
    return Settings(**filtered)


def _apply_env(settings: Settings, environ: Mapping[str, str]) -> Settings:
    if environ.get("DEFAULT_LEAN_TOOLCHAIN"):
        settings.default_toolchain = environ["DEFAULT_LEAN_TOOLCHAIN"]
    if environ.get("LEANROUTE_TOOLCHAIN_PATH"):
        settings.toolchain_path = environ["LEANROUTE_TOOLCHAIN_PATH"]
    if environ.get("LEANROUTE_LAKE_PATH"):
        settings.lake_path = environ["LEANROUTE_LAKE_PATH"]
    if "LEANROUTE_ENABLE_LAKE" in environ:
        settings.enable_lake = _parse_bool(environ["LEANROUTE_ENABLE_LAKE"])
    return settings


def load_settings(path: Optional[Path] = None, environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Load settings from YAML if present; fall back to defaults on any problem."""
    environ = os.environ if environ is None else environ
    if path is None:
        override = (environ.get("LEANROUTE_CONFIG") or "").strip()
        path = Path(override) if override else CONFIG_FILE

    settings = Settings()
    if path.exists():
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
            if isinstance(data, dict):
                settings = _from_mapping(data)
            else:
                logger.warning("Ignoring %s: expected a mapping", path)
        except (OSError, yaml.YAMLError, TypeError) as e:
            logger.warning("Could not load settings from %s: %s", path, e)
            settings = Settings()

    return _apply_env(settings, environ)


def elan_bin_dir() -> Path:
    return Path.home() / ".elan" / "bin"


def _prepend_paths(current: str, extra: List[str]) -> str:
    parts = [p for p in current.split(os.pathsep) if p]
    for p in reversed(extra):
        if p and p not in parts:
            parts.insert(0, p)
    return os.pathsep.join(parts)


def server_environment(settings: Settings, base_env: Optional[Mapping[str, str]] = None) -> Dict[str, str]:
    """Environment for a server process: base env + serverEnv + extra PATH entries."""
    env = dict(os.environ if base_env is None else base_env)
    env.update({str(k): str(v) for k, v in settings.server_env.items()})
    extra = list(settings.server_env_paths)
    if not settings.toolchain_path:
        extra.append(str(elan_bin_dir()))
    env["PATH"] = _prepend_paths(env.get("PATH", ""), extra)
    return env
