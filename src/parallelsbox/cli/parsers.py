#!/usr/bin/env python3
"""
Argument parsers for the parallelsbox CLI.
"""

import argparse
import sys

from rich.markup import escape

from parallelsbox import __version__
from parallelsbox.cli.commands import (
    cmd_delete,
    cmd_export,
    cmd_halt,
    cmd_list,
    cmd_networks,
    cmd_start,
    cmd_status,
    cmd_suspend,
    cmd_version,
)
from parallelsbox.cli.utils import console
from parallelsbox.errors import ParallelsError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="parallelsbox", description="Control Parallels Desktop VMs through prlctl"
    )
    parser.add_argument("--version", action="version", version=f"parallelsbox {__version__}")
    parser.add_argument("--config", "-c", help="Path to a parallelsbox YAML config")
    parser.add_argument("--log-level", help="Log level (DEBUG, INFO, WARNING, ERROR)")
    parser.add_argument("--json-logs", action="store_true", help="Render logs as JSON")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    version_parser = subparsers.add_parser("version", help="Show Parallels Desktop version")
    version_parser.set_defaults(func=cmd_version)

    list_parser = subparsers.add_parser("list", help="List registered VMs")
    list_parser.add_argument("--json", action="store_true", help="Output raw JSON")
    list_parser.set_defaults(func=cmd_list)

    status_parser = subparsers.add_parser("status", help="Show VM state")
    status_parser.add_argument("uuid", help="VM uuid or name")
    status_parser.add_argument("--verbose", "-v", action="store_true", help="Explain the state")
    status_parser.set_defaults(func=cmd_status)

    start_parser = subparsers.add_parser("start", help="Start a VM")
    start_parser.add_argument("uuid", help="VM uuid or name")
    start_parser.add_argument("--gui", action="store_true", help="Start with a window")
    start_parser.set_defaults(func=cmd_start)

    for name, func, help_text in (
        ("halt", cmd_halt, "Halt a VM (pulls the plug)"),
        ("suspend", cmd_suspend, "Suspend a VM"),
        ("delete", cmd_delete, "Delete a VM"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("uuid", help="VM uuid or name")
        sub.set_defaults(func=func)

    export_parser = subparsers.add_parser("export", help="Export a VM as a template")
    export_parser.add_argument("uuid", help="VM uuid or name")
    export_parser.add_argument("path", help="Destination directory")
    export_parser.set_defaults(func=cmd_export)

    networks_parser = subparsers.add_parser("networks", help="List host networks")
    networks_parser.add_argument(
        "--prune", action="store_true", help="Delete host-only networks no VM uses"
    )
    networks_parser.set_defaults(func=cmd_networks)

    return parser


def main(argv=None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not hasattr(args, "func"):
        parser.print_help()
        return

    try:
        args.func(args)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted.[/]")
        sys.exit(1)
    except ParallelsError as e:
        console.print(f"[red]{escape(str(e))}[/]")
        sys.exit(1)
    except ValueError as e:
        console.print(f"[red]Error: {escape(str(e))}[/]")
        sys.exit(1)


if __name__ == "__main__":
    main()
