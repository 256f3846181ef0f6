"""Location and workspace-folder primitives.

Documents arrive as paths or URIs. Only `file` locations are walked; anything
else (e.g. `untitled:Untitled-1`) is carried through opaquely.
"""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional
from urllib.parse import quote, unquote, urlparse

from lsprotocol import types as lsp

FILE_SCHEME = "file"


def uri_to_path(uri: str) -> str:
    """Convert file:// URI to filesystem path."""
    parsed = urlparse(uri)
    if parsed.scheme != FILE_SCHEME:
        raise ValueError(f"Expected file:// URI, got: {uri}")
    path = unquote(parsed.path)
    if os.name == "nt" and path.startswith("/") and len(path) > 2 and path[2] == ":":
        path = path[1:]
    return path


def path_to_uri(path: str | os.PathLike) -> str:
    """Convert filesystem path to file:// URI."""
    abs_path = os.path.abspath(path)
    if os.name == "nt":
        return "file:///" + quote(abs_path.replace("\\", "/"), safe="/:")
    return "file://" + quote(abs_path, safe="/")


def _has_scheme(value: str) -> bool:
    parsed = urlparse(value)
    # Single letters are Windows drive letters, not schemes.
    return len(parsed.scheme) > 1


@dataclass(frozen=True, eq=False)
class Location:
    """A document or directory location.

    For file locations `path` is an absolute filesystem path. For other schemes
    it is the opaque remainder of the URI.
    """

    scheme: str
    path: str

    @classmethod
    def parse(cls, value: "str | os.PathLike | Location") -> "Location":
        if isinstance(value, Location):
            return value
        s = os.fspath(value)
        if _has_scheme(s):
            parsed = urlparse(s)
            if parsed.scheme == FILE_SCHEME:
                return cls.file(uri_to_path(s))
            return cls(scheme=parsed.scheme, path=s[len(parsed.scheme) + 1 :])
        return cls.file(s)

    @classmethod
    def file(cls, path: str | os.PathLike) -> "Location":
        return cls(scheme=FILE_SCHEME, path=os.path.normpath(os.path.abspath(path)))

    @property
    def is_file(self) -> bool:
        return self.scheme == FILE_SCHEME

    @property
    def fs_path(self) -> Path:
        if not self.is_file:
            raise ValueError(f"Not a file location: {self}")
        return Path(self.path)

    @property
    def name(self) -> str:
        return os.path.basename(self.path) if self.is_file else ""

    @property
    def parent(self) -> "Location":
        """Containing directory. The filesystem root is its own parent."""
        if not self.is_file:
            return self
        return Location.file(os.path.dirname(self.path))

    def joinpath(self, *parts: str) -> "Location":
        return Location.file(os.path.join(self.fs_path, *parts))

    @property
    def key(self) -> str:
        """Canonical identity used for equality and routing."""
        if not self.is_file:
            return f"{self.scheme}:{self.path}"
        return os.path.normcase(os.path.normpath(self.path))

    @property
    def uri(self) -> str:
        if self.is_file:
            return path_to_uri(self.path)
        return f"{self.scheme}:{self.path}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Location):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __str__(self) -> str:
        return self.path if self.is_file else self.uri

    def __repr__(self) -> str:
        return f"Location({self.uri!r})"


def is_relative_to(path: Location, base: Location) -> bool:
    """True when `path` is `base` or lies beneath it."""
    if not (path.is_file and base.is_file):
        return False
    p, b = path.key, base.key
    if p == b:
        return True
    prefix = b if b.endswith(os.sep) else b + os.sep
    return p.startswith(prefix)


class WorkspaceFolders:
    """The host's workspace folders, queryable by containment."""

    def __init__(self, folders: Iterable[lsp.WorkspaceFolder | str | os.PathLike] = ()):
        self._lock = threading.Lock()
        self._folders: List[lsp.WorkspaceFolder] = []
        for f in folders:
            self.add(f)

    @staticmethod
    def _coerce(folder: lsp.WorkspaceFolder | str | os.PathLike) -> lsp.WorkspaceFolder:
        if isinstance(folder, lsp.WorkspaceFolder):
            return folder
        loc = Location.parse(folder)
        return lsp.WorkspaceFolder(uri=loc.uri, name=loc.name or loc.path)

    def add(self, folder: lsp.WorkspaceFolder | str | os.PathLike) -> lsp.WorkspaceFolder:
        wf = self._coerce(folder)
        loc = Location.parse(wf.uri)
        with self._lock:
            if all(Location.parse(f.uri) != loc for f in self._folders):
                self._folders.append(wf)
        return wf

    def remove(self, folder: lsp.WorkspaceFolder | str | os.PathLike) -> Optional[lsp.WorkspaceFolder]:
        loc = Location.parse(self._coerce(folder).uri)
        with self._lock:
            for idx, f in enumerate(self._folders):
                if Location.parse(f.uri) == loc:
                    return self._folders.pop(idx)
        return None

    def __iter__(self):
        with self._lock:
            return iter(list(self._folders))

    def __len__(self) -> int:
        with self._lock:
            return len(self._folders)

    def locations(self) -> List[Location]:
        return [Location.parse(f.uri) for f in self]

    def containing(self, location: Location) -> Optional[Location]:
        """Innermost workspace folder containing `location`, if any."""
        best: Optional[Location] = None
        for folder in self.locations():
            if is_relative_to(location, folder):
                if best is None or len(folder.key) > len(best.key):
                    best = folder
        return best
