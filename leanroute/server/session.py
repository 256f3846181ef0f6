"""Per-project Lean server sessions.

One server process per resolved project root. Every document that resolves to
the same root (by canonical path) is served by the same `LeanSession`; distinct
roots get independent sessions, possibly on different toolchains.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
from typing import Any, Callable, Dict, List, Optional

from ..config import Settings
from ..core.fs import FileSystem
from ..core.models import VersionInfo
from ..core.paths import Location, WorkspaceFolders, is_relative_to
from ..project.resolver import ProjectResolver
from .command import ServerCommand, build_server_command
from .lsp import LSPClient, LSPConfig, LSPError

logger = logging.getLogger(__name__)

ClientFactory = Callable[[ServerCommand, LSPConfig], Any]


def _default_client_factory(command: ServerCommand, config: LSPConfig) -> LSPClient:
    return LSPClient(command.cmd, workspace=command.cwd, env=command.env, config=config)


class LeanSession:
    """A persistent Lean server session for a single project root."""

    def __init__(
        self,
        *,
        info: VersionInfo,
        command: ServerCommand,
        config: Optional[LSPConfig] = None,
        client_factory: Optional[ClientFactory] = None,
    ):
        self.info = info
        self.command = command
        self.config = config or LSPConfig()
        self._client_factory = client_factory or _default_client_factory

        self._client: Optional[Any] = None
        self._start_lock = asyncio.Lock()
        self._disabled_reason: str | None = None
        self._documents: set[str] = set()

    @property
    def root(self) -> Location:
        return self.info.root

    @property
    def version(self) -> Optional[str]:
        return self.info.version

    @property
    def documents(self) -> List[str]:
        return sorted(self._documents)

    @property
    def is_started(self) -> bool:
        return self._client is not None

    async def ensure_started(self) -> Any:
        """Start the server if needed and return its client."""
        async with self._start_lock:
            if self._disabled_reason is not None:
                raise LSPError(self._disabled_reason)

            if self._client is not None:
                if getattr(self._client, "is_running", True):
                    return self._client
                logger.info("Server for %s exited; restarting", self.root)
                await self._stop_client()

            if not self.command.cmd:
                self._disabled_reason = "Missing Lean server command"
                raise LSPError(self._disabled_reason)
            search_path = self.command.env.get("PATH") or None
            is_default = self._client_factory is _default_client_factory
            if is_default and shutil.which(self.command.cmd[0], path=search_path) is None:
                self._disabled_reason = f"Missing Lean server: {self.command.cmd[0]}"
                raise LSPError(self._disabled_reason)

            client = self._client_factory(self.command, self.config)
            try:
                await client.start()
            except (OSError, LSPError) as e:
                self._disabled_reason = f"Lean server failed to start: {type(e).__name__}"
                logger.warning("Lean server for %s failed to start: %s", self.root, e)
                try:
                    await client.stop()
                except (OSError, LSPError):
                    pass
                raise LSPError(self._disabled_reason) from e
            self._client = client
            return client

    async def open_document(self, uri: str, text: str) -> None:
        client = await self.ensure_started()
        await client.open_document(uri, text)
        self._documents.add(uri)

    async def close_document(self, uri: str) -> None:
        self._documents.discard(uri)
        if self._client is not None:
            await self._client.close_document(uri)

    async def _stop_client(self) -> None:
        client, self._client = self._client, None
        if client is None:
            return
        try:
            await client.stop()
        except (OSError, LSPError) as e:
            logger.warning("Error stopping Lean server for %s: %s", self.root, e)

    async def shutdown(self) -> None:
        """Shutdown the server; the session may be started again later."""
        async with self._start_lock:
            await self._stop_client()
            self._documents.clear()


class SessionRouter:
    """Owns the root -> session table.

    Intended to be used from a single asyncio event loop. Sessions are created
    lazily on the first document that resolves to a new root, and torn down
    when their workspace folder is removed or on `shutdown()`.
    """

    def __init__(
        self,
        *,
        resolver: Optional[ProjectResolver] = None,
        settings: Optional[Settings] = None,
        client_factory: Optional[ClientFactory] = None,
        fs: Optional[FileSystem] = None,
    ):
        self.resolver = resolver or ProjectResolver(fs=fs)
        self.fs = fs or self.resolver.fs
        self.settings = settings or Settings()
        self.config = LSPConfig(request_timeout=self.settings.request_timeout)
        self._client_factory = client_factory
        self._sessions: Dict[str, LeanSession] = {}
        self._document_roots: Dict[str, str] = {}
        self._lock = asyncio.Lock()

    @property
    def workspace_folders(self) -> WorkspaceFolders:
        return self.resolver.workspace_folders

    def sessions(self) -> List[LeanSession]:
        return list(self._sessions.values())

    def get(self, root: Location | str) -> Optional[LeanSession]:
        return self._sessions.get(Location.parse(root).key)

    async def session_for(self, location: Location | str) -> LeanSession:
        """Get or create the session serving `location`."""
        location = Location.parse(location)
        info = await self.resolver.find_version_info(location)
        key = info.root.key

        if (sess := self._sessions.get(key)) is not None:
            return sess

        command = await build_server_command(info, self.settings, self.fs)
        async with self._lock:
            if (sess := self._sessions.get(key)) is None:
                sess = LeanSession(info=info, command=command, config=self.config, client_factory=self._client_factory)
                self._sessions[key] = sess
                logger.info("New session for %s (toolchain: %s)", info.root, info.version or "default")
            return sess

    async def _document_text(self, location: Location) -> str:
        if not location.is_file:
            return ""
        try:
            return await self.fs.read_text(location.fs_path)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read %s: %s", location, e)
            return ""

    async def open_document(self, location: Location | str, text: Optional[str] = None) -> LeanSession:
        """Route a newly opened document to its session and open it on the server."""
        location = Location.parse(location)
        sess = await self.session_for(location)
        self._document_roots[location.key] = sess.root.key
        if text is None:
            text = await self._document_text(location)
        await sess.open_document(location.uri, text)
        return sess

    async def close_document(self, location: Location | str) -> Optional[LeanSession]:
        location = Location.parse(location)
        root_key = self._document_roots.pop(location.key, None)
        sess = self._sessions.get(root_key) if root_key is not None else None
        if sess is not None:
            await sess.close_document(location.uri)
        return sess

    def add_workspace_folder(self, folder: Location | str) -> None:
        self.workspace_folders.add(Location.parse(folder).uri)

    async def remove_workspace_folder(self, folder: Location | str) -> List[LeanSession]:
        """Forget a workspace folder and stop the sessions rooted inside it."""
        folder = Location.parse(folder)
        self.workspace_folders.remove(folder.uri)
        async with self._lock:
            keys = [k for k, s in self._sessions.items() if is_relative_to(s.root, folder)]
            removed = [self._sessions.pop(k) for k in keys]
            self._document_roots = {d: r for d, r in self._document_roots.items() if r not in keys}
        for sess in removed:
            await sess.shutdown()
        return removed

    async def shutdown(self) -> None:
        """Stop every session."""
        async with self._lock:
            removed = list(self._sessions.values())
            self._sessions.clear()
            self._document_roots.clear()
        for sess in removed:
            await sess.shutdown()
