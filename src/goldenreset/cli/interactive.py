#!/usr/bin/env python3
"""
Interactive menu for goldenreset.
"""

import argparse

import questionary

from goldenreset.cli.reset_commands import cmd_reset, cmd_snapshots, cmd_vms
from goldenreset.cli.trash_commands import cmd_trash_delete, cmd_trash_list
from goldenreset.cli.utils import console, custom_style
from goldenreset.exceptions import GoldenResetError, PartialSwap


def interactive_mode(args: argparse.Namespace):
    """Menu loop over the non-interactive commands."""
    actions = {
        "reset": cmd_reset,
        "snapshots": cmd_snapshots,
        "vms": cmd_vms,
        "trash_list": cmd_trash_list,
        "trash_delete": cmd_trash_delete,
    }
    defaults = dict(vm=None, snapshot=None, yes=False, name=None, confirm=None, root=None)
    for key, value in defaults.items():
        if not hasattr(args, key):
            setattr(args, key, value)

    while True:
        choice = questionary.select(
            "What would you like to do?",
            choices=[
                questionary.Choice("♻️  Reset VM to snapshot", value="reset"),
                questionary.Choice("📋 List snapshots", value="snapshots"),
                questionary.Choice("🖥️  List VMs", value="vms"),
                questionary.Choice("🗑️  List trash", value="trash_list"),
                questionary.Choice("🧹 Delete trash", value="trash_delete"),
                questionary.Choice("🚪 Exit", value="exit"),
            ],
            style=custom_style,
        ).ask()

        if choice in (None, "exit"):
            return

        try:
            actions[choice](args)
        except PartialSwap:
            raise
        except (GoldenResetError, LookupError) as e:
            console.print(f"[red]❌ {e}[/]")
