from __future__ import annotations

import argparse
from pathlib import Path
import sys

from .catalog import VersionCatalog
from .console import RichMessages, RichProgress, configure_logging
from .exceptions import McsdkError
from .http import HttpClient
from .models import ServerSpec, ServerState, Software
from .process import ServerProcess
from .workspace import WorkspaceManager

EPHEMERAL_SENTINEL = "none"


def exit_status(returncode: int | None) -> int:
    """Shell-style status; a child killed by signal N maps to 128 + N."""
    if returncode is None:
        return 0
    if returncode < 0:
        return 128 - returncode
    return returncode


def _spec_from_args(args: argparse.Namespace) -> ServerSpec:
    working_directory = (
        None if args.working_directory == EPHEMERAL_SENTINEL else Path(args.working_directory)
    )
    return ServerSpec(
        software=Software(args.software),
        version=args.version,
        plugins=tuple(Path(p) for p in args.plugins),
        working_directory=working_directory,
        args=tuple(args.args or []),
        mem=args.mem,
        gui=args.gui,
    )


def _cmd_start(args: argparse.Namespace, messages: RichMessages) -> int:
    spec = _spec_from_args(args)
    http_client = HttpClient()
    catalog = VersionCatalog(http_client=http_client, messages=messages)
    if not catalog.validate(spec.version):
        return 1

    server = ServerProcess(
        spec,
        http_client=http_client,
        catalog=catalog,
        workspace_manager=WorkspaceManager(
            messages=messages,
            stop_on_missing_plugin=not args.keep_going,
        ),
        messages=messages,
        progress=RichProgress(),
        java_path=args.java,
    )
    try:
        workspace = server.initialize(validate_version=False)
        messages.info(f"Starting server in {workspace.root}. Press Ctrl+C to stop.")
        result = server.start()
    except McsdkError as exc:
        messages.error(str(exc))
        return 1

    if result.state is ServerState.KILLED:
        messages.info("Server stopped.")
        return 0
    messages.info(f"Server exited with code {result.returncode}.")
    return exit_status(result.returncode)


def _cmd_list(args: argparse.Namespace, messages: RichMessages) -> int:
    catalog = VersionCatalog(messages=messages)
    try:
        versions = catalog.list_versions(release_only=not args.snapshots, limit=args.limit)
    except (McsdkError, KeyError, TypeError, ValueError) as exc:
        messages.error(f"Failed to fetch version manifest - {exc}")
        return 1
    for version in versions:
        print(version)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcsdk",
        description="Download and run a throwaway Minecraft server for plugin testing.",
    )
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show debug logging.",
    )
    sub = parser.add_subparsers(dest="command")

    start = sub.add_parser(
        "start", parents=[common], help="Provision and start a server."
    )
    start.add_argument(
        "software",
        choices=[software.value for software in Software],
        help="Server software.",
    )
    start.add_argument("version", help="Minecraft version, for example 1.20.4.")
    start.add_argument(
        "plugins",
        nargs="*",
        default=[],
        help="Absolute paths of plugin files to copy into plugins/.",
    )
    start.add_argument(
        "-w",
        "--working-directory",
        default=EPHEMERAL_SENTINEL,
        help="Server directory (default: none, creates a temporary one).",
    )
    start.add_argument(
        "-a",
        "--args",
        action="append",
        help="Extra server argument (repeat for multiple).",
    )
    start.add_argument(
        "-m",
        "--mem",
        type=int,
        default=2048,
        help="Max heap size in megabytes (default: 2048).",
    )
    start.add_argument(
        "--gui",
        action="store_true",
        help="Do not pass nogui to the server.",
    )
    start.add_argument("--java", default="java", help="Java executable path.")
    start.add_argument(
        "--keep-going",
        action="store_true",
        help="Skip missing plugins instead of ignoring the rest of the list.",
    )

    versions = sub.add_parser(
        "list", parents=[common], help="Print known Minecraft versions."
    )
    versions.add_argument(
        "--snapshots",
        action="store_true",
        help="Include snapshots and other non-release versions.",
    )
    versions.add_argument("--limit", type=int, default=50, help="Maximum entries.")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(getattr(args, "verbose", False))
    messages = RichMessages()

    if args.command == "start":
        return _cmd_start(args, messages)
    if args.command == "list":
        return _cmd_list(args, messages)
    parser.print_help()
    return 0


if __name__ == "__main__":
    sys.exit(main())
