"""Minimal stdio LSP client for a Lean server process.

Only lifecycle and document sync live here; the Lean-specific RPC calls are
forwarded through `request()` untouched.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

from lsprotocol import types as lsp
from lsprotocol.converters import get_converter

from ..core.paths import path_to_uri

logger = logging.getLogger(__name__)

NotificationHandler = Callable[[str, Any], None]


class LSPError(Exception):
    """LSP communication or protocol error."""

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message)
        self.code = code


_LSP_CONVERTER = get_converter()
_LSP_CONVERTER.register_unstructure_hook(Path, lambda p: str(p))
_LSP_CONVERTER.register_unstructure_hook(Enum, lambda e: e.value)


def _to_dict(obj: Any) -> Dict[str, Any]:
    """Convert lsprotocol attrs types to JSON-serializable dicts."""
    return _json_clean(_LSP_CONVERTER.unstructure(obj))


def _json_clean(obj: Any) -> Any:
    """Recursively remove None values and ensure JSON-compatible containers."""
    if isinstance(obj, dict):
        return {str(k): _json_clean(v) for k, v in obj.items() if v is not None}
    if isinstance(obj, (list, tuple, set)):
        return [_json_clean(v) for v in obj if v is not None]
    return obj


@dataclass
class LSPConfig:
    """Configuration for LSP client."""

    retry_attempts: int = 3
    retry_delay_ms: int = 100
    request_timeout: float = 30.0


class LSPClient:
    """Async LSP client with subprocess-based JSON-RPC communication."""

    def __init__(
        self,
        cmd: List[str],
        workspace: str,
        *,
        env: Optional[Mapping[str, str]] = None,
        config: Optional[LSPConfig] = None,
        on_notification: Optional[NotificationHandler] = None,
    ):
        self.cmd = cmd
        self.workspace = os.path.abspath(workspace)
        self.env = dict(env) if env is not None else None
        self.config = config or LSPConfig()
        self.on_notification = on_notification

        self._process: Optional[asyncio.subprocess.Process] = None
        self._request_id = 0
        self._pending: Dict[int, asyncio.Future] = {}
        self._reader_task: Optional[asyncio.Task] = None
        self._stderr_task: Optional[asyncio.Task] = None
        self._send_lock = asyncio.Lock()
        self._initialized = False
        self._open_documents: Dict[str, int] = {}

    async def __aenter__(self) -> "LSPClient":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.stop()

    @property
    def is_running(self) -> bool:
        return self._process is not None and self._process.returncode is None

    async def start(self) -> None:
        """Start the language server process and initialize."""
        logger.info("Starting %s in %s", " ".join(self.cmd), self.workspace)
        self._process = await asyncio.create_subprocess_exec(
            *self.cmd,
            cwd=self.workspace,
            env=self.env,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        self._reader_task = asyncio.create_task(self._read_messages())
        self._stderr_task = asyncio.create_task(self._drain_stderr())
        await self._initialize()

    async def stop(self) -> None:
        """Shutdown language server gracefully."""
        if self._initialized:
            try:
                await self._request("shutdown", {})
                await self._notify("exit", {})
            except (LSPError, OSError) as e:
                logger.debug("Server in %s did not shut down cleanly: %s", self.workspace, e)
            self._initialized = False

        for task in (self._reader_task, self._stderr_task):
            if task:
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass

        if self._process and self._process.returncode is None:
            try:
                self._process.terminate()
            except ProcessLookupError:
                pass
            try:
                await asyncio.wait_for(self._process.wait(), timeout=2.0)
            except asyncio.TimeoutError:
                self._process.kill()
        self._open_documents.clear()

    async def _initialize(self) -> None:
        """Send initialize request with the project root as workspace folder."""
        workspace_uri = path_to_uri(self.workspace)
        init_params = lsp.InitializeParams(
            process_id=os.getpid(),
            root_uri=workspace_uri,
            capabilities=lsp.ClientCapabilities(
                text_document=lsp.TextDocumentClientCapabilities(
                    publish_diagnostics=lsp.PublishDiagnosticsClientCapabilities(related_information=True),
                ),
            ),
            workspace_folders=[lsp.WorkspaceFolder(uri=workspace_uri, name=Path(self.workspace).name)],
        )
        await self._request("initialize", _to_dict(init_params))
        await self._notify("initialized", {})
        self._initialized = True

    async def open_document(self, uri: str, text: str, *, language_id: str = "lean4", version: int = 1) -> None:
        """Open a document on the server (textDocument/didOpen)."""
        if uri in self._open_documents:
            return
        params = lsp.DidOpenTextDocumentParams(
            text_document=lsp.TextDocumentItem(uri=uri, language_id=language_id, version=version, text=text)
        )
        await self._notify("textDocument/didOpen", _to_dict(params))
        self._open_documents[uri] = version

    async def close_document(self, uri: str) -> None:
        """Close a document on the server (textDocument/didClose)."""
        if self._open_documents.pop(uri, None) is None:
            return
        params = lsp.DidCloseTextDocumentParams(text_document=lsp.TextDocumentIdentifier(uri=uri))
        await self._notify("textDocument/didClose", _to_dict(params))

    @property
    def open_documents(self) -> List[str]:
        return list(self._open_documents)

    async def request(self, method: str, params: Dict[str, Any]) -> Any:
        """Send an arbitrary request, retrying on timeouts and server errors."""
        return await self._request_with_retry(method, params)

    async def _request(self, method: str, params: Dict[str, Any]) -> Any:
        """Send JSON-RPC request and wait for response."""
        self._request_id += 1
        req_id = self._request_id
        message = {"jsonrpc": "2.0", "id": req_id, "method": method, "params": params}

        future: asyncio.Future = asyncio.get_running_loop().create_future()
        self._pending[req_id] = future
        await self._send(message)

        try:
            return await asyncio.wait_for(future, timeout=self.config.request_timeout)
        except asyncio.TimeoutError:
            self._pending.pop(req_id, None)
            await self._cancel(req_id)
            raise LSPError(f"Request {method} timed out")
        except asyncio.CancelledError:
            self._pending.pop(req_id, None)
            await self._cancel(req_id)
            raise

    async def _cancel(self, req_id: int) -> None:
        try:
            await self._notify("$/cancelRequest", {"id": req_id})
        except (LSPError, OSError):
            pass

    async def _request_with_retry(self, method: str, params: Dict[str, Any]) -> Any:
        """Send request with retry logic for flaky servers."""
        last_error = None
        for attempt in range(self.config.retry_attempts):
            try:
                return await self._request(method, params)
            except LSPError as e:
                last_error = e
                if attempt < self.config.retry_attempts - 1:
                    await asyncio.sleep(self.config.retry_delay_ms / 1000.0)
        raise last_error or LSPError(f"Request {method} failed after retries")

    async def _notify(self, method: str, params: Dict[str, Any]) -> None:
        """Send JSON-RPC notification (no response expected)."""
        await self._send({"jsonrpc": "2.0", "method": method, "params": params})

    async def _send(self, message: Dict[str, Any]) -> None:
        """Send message with Content-Length header."""
        if not self._process or not self._process.stdin:
            raise LSPError("LSP process not running")
        async with self._send_lock:
            content = json.dumps(message).encode("utf-8")
            self._process.stdin.write(f"Content-Length: {len(content)}\r\n\r\n".encode("utf-8"))
            self._process.stdin.write(content)
            await self._process.stdin.drain()

    def _dispatch(self, message: Dict[str, Any]) -> None:
        if "id" in message and message["id"] in self._pending:
            future = self._pending.pop(message["id"])
            if "error" in message:
                err = message["error"]
                future.set_exception(LSPError(err.get("message", "Unknown error"), err.get("code")))
            else:
                future.set_result(message.get("result"))
            return
        method = message.get("method")
        if method and "id" not in message and self.on_notification is not None:
            self.on_notification(method, message.get("params"))

    async def _read_messages(self) -> None:
        """Background task to read and dispatch responses and notifications."""
        if not self._process or not self._process.stdout:
            return
        while True:
            try:
                headers: Dict[str, str] = {}
                while True:
                    line = await self._process.stdout.readline()
                    if not line:
                        return
                    line_str = line.decode("utf-8").strip()
                    if not line_str:
                        break
                    if ":" in line_str:
                        key, value = line_str.split(":", 1)
                        headers[key.strip().lower()] = value.strip()

                content_length = int(headers.get("content-length", 0))
                if content_length == 0:
                    continue

                content = await self._process.stdout.readexactly(content_length)
                self._dispatch(json.loads(content.decode("utf-8")))
            except asyncio.CancelledError:
                break
            except (ValueError, asyncio.IncompleteReadError) as e:
                logger.warning("Dropping malformed message from server in %s: %s", self.workspace, e)
                continue

    async def _drain_stderr(self) -> None:
        """Continuously drain stderr to avoid subprocess backpressure/deadlocks."""
        if not self._process or not self._process.stderr:
            return
        try:
            while True:
                line = await self._process.stderr.readline()
                if not line:
                    return
                logger.debug("[%s] %s", Path(self.workspace).name, line.decode("utf-8", "replace").rstrip())
        except asyncio.CancelledError:
            return
