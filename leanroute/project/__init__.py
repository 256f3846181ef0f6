"""Lean project discovery.

Usage:
    from leanroute.project import ProjectResolver
    info = await ProjectResolver().find_version_info("/path/to/Main.lean")
"""

from .diagnostics import ProjectWarning, check_workspace_folder
from .distribution import CORE_SHAPES, CoreShape, is_core_lean_directory, match_core_shape
from .resolver import (
    ARTIFACT_DIR_NAMES,
    ProjectResolver,
    find_nearest_valid_ancestor,
    find_package_root,
    find_version_info,
)
from .toolchain import TOOLCHAIN_FILE_NAME, read_lean_version, read_toolchain_file

__all__ = [
    "ARTIFACT_DIR_NAMES",
    "CORE_SHAPES",
    "CoreShape",
    "ProjectResolver",
    "ProjectWarning",
    "TOOLCHAIN_FILE_NAME",
    "check_workspace_folder",
    "find_nearest_valid_ancestor",
    "find_package_root",
    "find_version_info",
    "is_core_lean_directory",
    "match_core_shape",
    "read_lean_version",
    "read_toolchain_file",
]
