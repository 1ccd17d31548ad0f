#!/usr/bin/env python3
"""
Argument parsers for the goldenreset CLI.
"""

import argparse
import sys

from goldenreset import __version__
from goldenreset.cli.config_commands import cmd_config_set, cmd_config_show
from goldenreset.cli.interactive import interactive_mode
from goldenreset.cli.reset_commands import cmd_reset, cmd_snapshots, cmd_vms
from goldenreset.cli.trash_commands import cmd_trash_delete, cmd_trash_list
from goldenreset.cli.utils import console
from goldenreset.exceptions import GoldenResetError, PartialSwap
from goldenreset.logging import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="goldenreset",
        description="Reset a VMware VM to its golden snapshot by clone-and-swap",
    )
    parser.add_argument("--version", action="version", version=f"goldenreset {__version__}")
    parser.add_argument("--config", help="Config file (default: ~/.config/goldenreset/config.yaml)")
    parser.add_argument("--base-path", help="Directory searched for .vmx files")
    parser.add_argument("--vmrun", help="Path to vmrun")
    parser.add_argument("--tag", help="Golden snapshot tag used for recommendations")
    parser.add_argument("--log-level", default="WARNING", help="Log level (default: WARNING)")
    parser.add_argument("--log-file", help="Also write JSON logs to this file")
    parser.add_argument("--json-logs", action="store_true", help="Render console logs as JSON")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Interactive mode (default)
    parser.set_defaults(func=interactive_mode)

    vms_parser = subparsers.add_parser("vms", help="List VMs under the base path")
    vms_parser.set_defaults(func=cmd_vms)

    snapshots_parser = subparsers.add_parser("snapshots", help="List snapshots of a VM")
    snapshots_parser.add_argument("--vm", help="VM name or path to .vmx")
    snapshots_parser.set_defaults(func=cmd_snapshots)

    reset_parser = subparsers.add_parser("reset", help="Reset a VM to a snapshot")
    reset_parser.add_argument("--vm", help="VM name or path to .vmx")
    reset_parser.add_argument("--snapshot", "-s", help="Snapshot name (default: golden snapshot)")
    reset_parser.add_argument("--yes", "-y", action="store_true", help="Do not ask for confirmation")
    reset_parser.set_defaults(func=cmd_reset)

    trash_parser = subparsers.add_parser("trash", help="Manage retired VM directories")
    trash_parser.set_defaults(func=lambda args, p=trash_parser: p.print_help())
    trash_sub = trash_parser.add_subparsers(dest="trash_command", help="Trash commands")

    trash_list = trash_sub.add_parser("list", help="List trash directories")
    trash_list.add_argument("--root", help="Directory to scan (default: base path)")
    trash_list.set_defaults(func=cmd_trash_list)

    trash_delete = trash_sub.add_parser("delete", help="Delete a trash directory")
    trash_delete.add_argument("name", nargs="?", default=None, help="Trash directory name")
    trash_delete.add_argument("--root", help="Directory to scan (default: base path)")
    trash_delete.add_argument(
        "--confirm", help="Exact directory name, required to delete without a prompt"
    )
    trash_delete.set_defaults(func=cmd_trash_delete)

    config_parser = subparsers.add_parser("config", help="Show or save settings")
    config_parser.set_defaults(func=lambda args, p=config_parser: p.print_help())
    config_sub = config_parser.add_subparsers(dest="config_command", help="Config commands")
    config_sub.add_parser("show", help="Print effective settings").set_defaults(func=cmd_config_show)
    config_sub.add_parser(
        "set", help="Save --base-path/--vmrun/--tag to the config file"
    ).set_defaults(func=cmd_config_set)

    return parser


def main(argv=None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(
        level=args.log_level,
        json_output=args.json_logs,
        log_file=args.log_file,
    )

    try:
        args.func(args)
    except PartialSwap as e:
        console.print(f"[bold red]❌ {e}[/]")
        console.print(f"[yellow]Recovery: {e.recovery_hint}[/]")
        return 2
    except (GoldenResetError, LookupError, FileNotFoundError, ValueError) as e:
        console.print(f"[red]❌ {e}[/]")
        return 1
    except KeyboardInterrupt:
        console.print("\n[dim]Interrupted.[/]")
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
