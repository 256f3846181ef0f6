"""Warnings for workspace folders that are not Lean projects."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.paths import Location
from .resolver import ProjectResolver


@dataclass(frozen=True)
class ProjectWarning:
    folder: Location
    message: str
    ancestor: Optional[Location] = None


async def check_workspace_folder(
    folder: Location | str,
    resolver: Optional[ProjectResolver] = None,
    *,
    enabled: bool = True,
) -> Optional[ProjectWarning]:
    """Return a warning when `folder` is not itself a valid project."""
    if not enabled:
        return None
    folder = Location.parse(folder)
    if not folder.is_file:
        return None
    resolver = resolver or ProjectResolver()
    if await resolver.is_valid_project(folder):
        return None

    ancestor = await resolver.find_nearest_valid_ancestor(folder)
    if ancestor is not None:
        return ProjectWarning(
            folder=folder,
            message=f"Opened folder is not a valid Lean 4 project, but folder {ancestor} above it is.",
            ancestor=ancestor,
        )
    return ProjectWarning(folder=folder, message="Opened folder does not contain a valid Lean 4 project.")
