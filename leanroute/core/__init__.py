"""Core types: locations, workspace folders, filesystem access, results."""

from .fs import FileSystem, LocalFileSystem, default_filesystem
from .models import PackageRoot, RootReason, VersionInfo
from .paths import Location, WorkspaceFolders, is_relative_to, path_to_uri, uri_to_path

__all__ = [
    # paths
    "Location",
    "WorkspaceFolders",
    "is_relative_to",
    "path_to_uri",
    "uri_to_path",
    # fs
    "FileSystem",
    "LocalFileSystem",
    "default_filesystem",
    # models
    "PackageRoot",
    "RootReason",
    "VersionInfo",
]
