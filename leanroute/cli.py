#!/usr/bin/env python3
"""
leanroute CLI - find the Lean project, toolchain and server for a file

Usage:
    leanroute resolve <path>... [-w FOLDER]   Show project root and toolchain version
    leanroute check <folder>                  Warn if a folder is not a Lean project
    leanroute command <path> [-w FOLDER]      Show the server command for a file
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from .config import load_settings
from .core.paths import Location, WorkspaceFolders
from .project.diagnostics import check_workspace_folder
from .project.resolver import ProjectResolver
from .server.command import build_server_command


def _resolver(folders: List[str]) -> ProjectResolver:
    return ProjectResolver(WorkspaceFolders(folders))


async def _cmd_resolve(args: argparse.Namespace) -> int:
    resolver = _resolver(args.workspace_folder)
    infos = await asyncio.gather(*(resolver.find_version_info(p) for p in args.paths))
    if args.json:
        out = [{"path": p, **info.to_dict()} for p, info in zip(args.paths, infos)]
        print(json.dumps(out, indent=2))
        return 0
    for p, info in zip(args.paths, infos):
        print(f"{p}")
        print(f"  root:    {info.root}")
        print(f"  version: {info.version or '-'}")
        print(f"  reason:  {info.reason.value}")
    return 0


async def _cmd_check(args: argparse.Namespace) -> int:
    settings = load_settings()
    warning = await check_workspace_folder(args.folder, enabled=settings.show_invalid_project_warnings)
    if warning is None:
        print(f"{Location.parse(args.folder)}: ok")
        return 0
    print(warning.message)
    return 1


async def _cmd_command(args: argparse.Namespace) -> int:
    settings = load_settings()
    info = await _resolver(args.workspace_folder).find_version_info(args.path)
    command = await build_server_command(info, settings)
    if args.json:
        print(json.dumps({"cmd": command.cmd, "cwd": command.cwd, "uses_lake": command.uses_lake}, indent=2))
    else:
        print(f"cd {command.cwd} && {' '.join(command.cmd)}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="leanroute: route Lean 4 files to their project and toolchain",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    leanroute resolve ./proj/Main.lean
    leanroute resolve ./ws/a/A.lean ./ws/b/B.lean -w ./ws --json
    leanroute check ./proj/docs
    leanroute command ./proj/Main.lean
        """,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # resolve command
    resolve_parser = subparsers.add_parser("resolve", help="Show project root and toolchain version")
    resolve_parser.add_argument("paths", nargs="+", help="Files or folders to resolve")
    resolve_parser.add_argument(
        "--workspace-folder", "-w", action="append", default=[], help="Workspace folder boundary (repeatable)"
    )
    resolve_parser.add_argument("--json", "-j", action="store_true", help="Output as JSON")

    # check command
    check_parser = subparsers.add_parser("check", help="Warn if a folder is not a Lean project")
    check_parser.add_argument("folder", help="Folder to check")

    # command command
    command_parser = subparsers.add_parser("command", help="Show the server command for a file")
    command_parser.add_argument("path", help="File to resolve")
    command_parser.add_argument(
        "--workspace-folder", "-w", action="append", default=[], help="Workspace folder boundary (repeatable)"
    )
    command_parser.add_argument("--json", "-j", action="store_true", help="Output as JSON")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not args.command:
        parser.print_help()
        return 1

    handlers = {"resolve": _cmd_resolve, "check": _cmd_check, "command": _cmd_command}
    return asyncio.run(handlers[args.command](args))


if __name__ == "__main__":
    sys.exit(main())
