from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .paths import Location


class RootReason(str, Enum):
    """Why a project-root walk stopped where it did."""

    TOOLCHAIN = "toolchain"
    ARTIFACT_ESCAPE = "artifact_escape"
    CORE_DISTRIBUTION = "core_distribution"
    WORKSPACE_FENCE = "workspace_fence"
    FALLBACK = "fallback"
    NOT_A_FILE = "not_a_file"


@dataclass(frozen=True)
class PackageRoot:
    """A resolved project root and the toolchain file found there, if any."""

    root: Location
    toolchain_file: Optional[Location] = None
    reason: RootReason = RootReason.FALLBACK

    def as_tuple(self) -> tuple[Location, Optional[Location]]:
        return (self.root, self.toolchain_file)


@dataclass(frozen=True)
class VersionInfo:
    """A project root plus the trimmed toolchain version string, if readable."""

    root: Location
    version: Optional[str] = None
    reason: RootReason = RootReason.FALLBACK

    def as_tuple(self) -> tuple[Location, Optional[str]]:
        return (self.root, self.version)

    def to_dict(self) -> dict:
        return {"root": str(self.root), "version": self.version, "reason": self.reason.value}
