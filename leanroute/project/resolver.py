"""Project root and toolchain resolution.

Given a document, find the Lean project that should serve it: walk upward from
the document's folder and stop at the first level that

1) holds a `lean-toolchain` file (unless that project sits inside another
   project's `.lake`/`build` directory, in which case the outer project wins),
2) is Lean's own source tree or distribution,
3) is the workspace folder containing the document.

If the filesystem root is reached first, the document's own folder is used.
Resolution never raises for filesystem conditions; every document maps to some
root.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

from ..core.fs import FileSystem, default_filesystem
from ..core.models import PackageRoot, RootReason, VersionInfo
from ..core.paths import Location, WorkspaceFolders
from .distribution import is_core_lean_directory
from .toolchain import read_toolchain_file_or_none, toolchain_file_for

logger = logging.getLogger(__name__)

ARTIFACT_DIR_NAMES: frozenset[str] = frozenset({".lake", "build"})


class _Step(Enum):
    FOUND = "found"
    CORE = "core"
    FENCED = "fenced"
    EXHAUSTED = "exhausted"
    CONTINUE = "continue"


class ProjectResolver:
    """Resolves documents and folders to Lean project roots.

    Holds no per-call state, so one instance may serve concurrent resolutions.
    """

    def __init__(
        self,
        workspace_folders: Optional[WorkspaceFolders] = None,
        fs: Optional[FileSystem] = None,
    ):
        self.workspace_folders = workspace_folders if workspace_folders is not None else WorkspaceFolders()
        self.fs = fs or default_filesystem()

    async def _start_folder(self, location: Location) -> Location:
        # The location may already be a folder. A path that does not exist
        # yet (an unsaved new file) starts from its parent.
        if await self.fs.is_file(location.fs_path):
            return location.parent
        if not await self.fs.exists(location.fs_path):
            return location.parent
        return location

    async def _classify(self, level: Location, fence: Optional[Location]) -> tuple[_Step, Optional[Location]]:
        """Apply the per-level rules in precedence order."""
        toolchain_file = toolchain_file_for(level)
        if await self.fs.exists(toolchain_file.fs_path):
            return _Step.FOUND, toolchain_file
        if await is_core_lean_directory(level, self.fs):
            return _Step.CORE, None
        if fence is not None and level == fence:
            return _Step.FENCED, None
        if level.parent == level:
            return _Step.EXHAUSTED, None
        return _Step.CONTINUE, None

    async def find_package_root(self, location: Location | str) -> PackageRoot:
        """Find the project root for `location` and its toolchain file, if any."""
        location = Location.parse(location)
        if not location.is_file:
            return PackageRoot(location, None, RootReason.NOT_A_FILE)

        fence = self.workspace_folders.containing(location)
        start = await self._start_folder(location)
        level = start

        while True:
            step, toolchain_file = await self._classify(level, fence)
            if step is _Step.FOUND:
                assert toolchain_file is not None
                escaped = await self.find_parent_project_with_artifacts(level)
                if escaped is not None:
                    logger.debug("%s is inside build artifacts of %s", level, escaped.root)
                    return escaped
                return PackageRoot(level, toolchain_file, RootReason.TOOLCHAIN)
            if step is _Step.CORE:
                return PackageRoot(level, None, RootReason.CORE_DISTRIBUTION)
            if step is _Step.FENCED:
                return PackageRoot(level, None, RootReason.WORKSPACE_FENCE)
            if step is _Step.EXHAUSTED:
                break
            level = level.parent

        return PackageRoot(start, None, RootReason.FALLBACK)

    async def find_parent_project_with_artifacts(self, location: Location) -> Optional[PackageRoot]:
        """Find the project whose `.lake`/`build` directory contains `location`.

        Only the first artifact directory above `location` is considered. The
        search stops at the workspace folder containing `location`.
        """
        location = Location.parse(location)
        parent = location.parent
        if parent == location:
            return None

        fence = self.workspace_folders.containing(location)
        if fence is not None and fence == location:
            return None
        current = parent
        while True:
            # The owner of an artifact directory at the fence lies above it.
            if fence is not None and current == fence:
                return None
            if current.name in ARTIFACT_DIR_NAMES:
                owner = current.parent
                toolchain_file = toolchain_file_for(owner)
                if await self.fs.exists(toolchain_file.fs_path):
                    return PackageRoot(owner, toolchain_file, RootReason.ARTIFACT_ESCAPE)
                return None
            parent = current.parent
            if parent == current:
                return None
            current = parent

    async def find_version_info(self, location: Location | str) -> VersionInfo:
        """Project root for `location` plus the version named by its toolchain file."""
        package = await self.find_package_root(location)
        version: Optional[str] = None
        if package.toolchain_file is not None:
            version = await read_toolchain_file_or_none(package.toolchain_file, self.fs)
        return VersionInfo(package.root, version, package.reason)

    async def is_valid_project(self, folder: Location | str) -> bool:
        """A folder is a project if it has a toolchain file or is Lean itself."""
        folder = Location.parse(folder)
        if not folder.is_file:
            return False
        if await self.fs.exists(toolchain_file_for(folder).fs_path):
            return True
        return await is_core_lean_directory(folder, self.fs)

    async def find_nearest_valid_ancestor(self, folder: Location | str) -> Optional[Location]:
        """Nearest strict ancestor of `folder` that is a valid project.

        Workspace folders are not respected here: this answers a question about
        directory structure, not about session scope.
        """
        current = Location.parse(folder)
        if not current.is_file:
            return None
        while True:
            parent = current.parent
            if parent == current:
                return None
            if await self.is_valid_project(parent):
                return parent
            current = parent


async def find_package_root(
    location: Location | str,
    workspace_folders: Optional[WorkspaceFolders] = None,
    fs: Optional[FileSystem] = None,
) -> PackageRoot:
    return await ProjectResolver(workspace_folders, fs).find_package_root(location)


async def find_version_info(
    location: Location | str,
    workspace_folders: Optional[WorkspaceFolders] = None,
    fs: Optional[FileSystem] = None,
) -> VersionInfo:
    return await ProjectResolver(workspace_folders, fs).find_version_info(location)


async def find_nearest_valid_ancestor(folder: Location | str, fs: Optional[FileSystem] = None) -> Optional[Location]:
    return await ProjectResolver(None, fs).find_nearest_valid_ancestor(folder)
