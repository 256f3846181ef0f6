"""Lean server processes, one per resolved project root."""

from .command import ServerCommand, build_server_command
from .lsp import LSPClient, LSPConfig, LSPError
from .session import LeanSession, SessionRouter

__all__ = [
    "LSPClient",
    "LSPConfig",
    "LSPError",
    "LeanSession",
    "ServerCommand",
    "SessionRouter",
    "build_server_command",
]
