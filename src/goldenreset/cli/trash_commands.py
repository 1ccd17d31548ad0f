#!/usr/bin/env python3
"""
Trash commands for the goldenreset CLI.
"""

from pathlib import Path

import questionary

from goldenreset.cli.utils import (
    build_orchestrator,
    console,
    custom_style,
    human_size,
    is_interactive,
    trash_table,
)
from goldenreset.reset.models import DeletionResult


def _list(orch, args):
    if getattr(args, "root", None):
        return orch.list_trash_in(Path(args.root).expanduser())
    return orch.list_trash()


def cmd_trash_list(args):
    """List trash directories."""
    orch = build_orchestrator(args)
    entries = _list(orch, args)
    if not entries:
        console.print("[dim]Trash is empty[/]")
        return
    console.print(trash_table(entries))
    total = sum(e.size_bytes for e in entries)
    console.print(f"[dim]{len(entries)} entries, {human_size(total)} total[/]")


def cmd_trash_delete(args):
    """Delete trash directories, one confirmed entry at a time."""
    orch = build_orchestrator(args)

    while True:
        # Re-scan every round: deletions happen between listings
        entries = _list(orch, args)
        if not entries:
            console.print("[dim]Trash is empty[/]")
            return

        if args.name:
            matches = [e for e in entries if e.name == args.name]
            if not matches:
                raise LookupError(f"No trash directory named '{args.name}'")
            entry = matches[0]
        elif is_interactive():
            console.print(trash_table(entries))
            entry = questionary.select(
                "Select trash entry to delete:",
                choices=[
                    questionary.Choice(f"{e.name}  ({human_size(e.size_bytes)})", value=e)
                    for e in entries
                ]
                + [questionary.Choice("🔙 Done", value=None)],
                style=custom_style,
            ).ask()
            if entry is None:
                return
        else:
            raise LookupError("Specify the trash directory name to delete")

        token = args.confirm
        if token is None:
            if not is_interactive():
                raise LookupError("Pass --confirm <directory name> to delete non-interactively")
            console.print(f"[red]This permanently deletes {entry.path} ({human_size(entry.size_bytes)}).[/]")
            token = questionary.text(
                f"Type the directory name '{entry.name}' to confirm:", style=custom_style
            ).ask()

        result = orch.delete_trash(entry, token or "")
        if result is DeletionResult.DELETED:
            console.print(f"[green]✅ Deleted {entry.path}[/]")
        else:
            console.print("[dim]Confirmation did not match; nothing deleted.[/]")

        if args.name:
            return
