"""
leanroute: route Lean 4 documents to the project, toolchain and server that
should serve them.

Main interface: ProjectResolver, SessionRouter
"""

__version__ = "0.1.0"

from .config import Settings, load_settings
from .core import Location, PackageRoot, RootReason, VersionInfo, WorkspaceFolders
from .project import ProjectResolver, check_workspace_folder
from .server import SessionRouter

__all__ = [
    "Location",
    "PackageRoot",
    "ProjectResolver",
    "RootReason",
    "SessionRouter",
    "Settings",
    "VersionInfo",
    "WorkspaceFolders",
    "check_workspace_folder",
    "load_settings",
]
