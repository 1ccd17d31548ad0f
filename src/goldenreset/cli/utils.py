#!/usr/bin/env python3
"""
Shared utilities for the goldenreset CLI.
"""

import sys
from datetime import timedelta
from pathlib import Path
from typing import List, Optional

import questionary
from questionary import Style
from rich.console import Console
from rich.table import Table

from goldenreset.models import ResetSettings, load_settings
from goldenreset.orchestrator import ResetOrchestrator
from goldenreset.reset.catalog import format_snapshot_label
from goldenreset.reset.discovery import format_vm_label
from goldenreset.reset.models import SnapshotInfo, TrashEntry, VirtualMachineRef

custom_style = Style(
    [
        ("qmark", "fg:cyan bold"),
        ("question", "bold"),
        ("answer", "fg:green"),
        ("pointer", "fg:cyan bold"),
        ("highlighted", "fg:cyan bold"),
        ("selected", "fg:green"),
        ("separator", "fg:gray"),
        ("instruction", "fg:gray italic"),
    ]
)

console = Console()


def human_size(size_bytes: Optional[int]) -> str:
    if size_bytes is None:
        return "?"
    size = float(size_bytes)
    for unit in ("B", "KB", "MB", "GB", "TB"):
        if size < 1024 or unit == "TB":
            return f"{size:.1f} {unit}" if unit != "B" else f"{int(size)} B"
        size /= 1024
    return f"{size:.1f} TB"


def format_age(age: timedelta) -> str:
    seconds = max(int(age.total_seconds()), 0)
    days, seconds = divmod(seconds, 86400)
    hours, seconds = divmod(seconds, 3600)
    if days:
        return f"{days}d {hours}h"
    if hours:
        return f"{hours}h {seconds // 60}m"
    return f"{seconds // 60}m"


def is_interactive() -> bool:
    return sys.stdin.isatty() and sys.stdout.isatty()


def settings_from_args(args) -> ResetSettings:
    """Load the config file and apply command line overrides."""
    config_path = getattr(args, "config", None)
    settings = load_settings(Path(config_path) if config_path else None)
    return settings.with_overrides(
        base_path=getattr(args, "base_path", None),
        vmrun_path=getattr(args, "vmrun", None),
        golden_tag=getattr(args, "tag", None),
    )


def build_orchestrator(args) -> ResetOrchestrator:
    return ResetOrchestrator(settings_from_args(args))


def resolve_vm(orch: ResetOrchestrator, value: Optional[str]) -> VirtualMachineRef:
    """Turn a --vm argument into a VM, prompting when it is omitted."""
    if value and value.lower().endswith(".vmx"):
        path = Path(value).expanduser()
        if not path.exists():
            raise FileNotFoundError(f"VM definition not found: {path}")
        try:
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError:
            text = None
        return VirtualMachineRef.from_path(path.resolve(), text)

    vms = orch.find_vms()
    if value:
        matches = [vm for vm in vms if value in (vm.name, vm.base_name, vm.display_name)]
        if not matches:
            raise LookupError(f"No VM named '{value}' under {orch.settings.base_path}")
        return matches[0]

    if len(vms) == 1:
        return vms[0]
    if not is_interactive():
        raise LookupError("Several VMs found; pass --vm")
    return select_vm(vms)


def select_vm(vms: List[VirtualMachineRef]) -> VirtualMachineRef:
    choice = questionary.select(
        "Select VM:",
        choices=[questionary.Choice(format_vm_label(vm), value=vm) for vm in vms],
        style=custom_style,
    ).ask()
    if choice is None:
        raise KeyboardInterrupt
    return choice


def select_snapshot(
    snapshots: List[SnapshotInfo], golden_tag: str, recommended: Optional[SnapshotInfo]
) -> SnapshotInfo:
    choice = questionary.select(
        "Select snapshot to reset to:",
        choices=[
            questionary.Choice(format_snapshot_label(s, golden_tag), value=s) for s in snapshots
        ],
        default=recommended,
        style=custom_style,
    ).ask()
    if choice is None:
        raise KeyboardInterrupt
    return choice


def snapshot_table(vm: VirtualMachineRef, snapshots: List[SnapshotInfo], golden_tag: str) -> Table:
    table = Table(title=f"Snapshots for {vm.display_name}")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Name", style="green")
    table.add_column("Size", style="yellow", justify="right")
    table.add_column("Golden", style="cyan")
    for index, snapshot in enumerate(snapshots, start=1):
        table.add_row(
            str(index),
            snapshot.name,
            human_size(snapshot.size_bytes),
            "★" if snapshot.is_golden(golden_tag) else "",
        )
    return table


def trash_table(entries: List[TrashEntry]) -> Table:
    table = Table(title="Trash")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Directory", style="cyan")
    table.add_column("VM", style="green")
    table.add_column("Created", style="blue")
    table.add_column("Age", style="magenta", justify="right")
    table.add_column("Size", style="yellow", justify="right")
    for index, entry in enumerate(entries, start=1):
        table.add_row(
            str(index),
            str(entry.path),
            entry.vm_name,
            entry.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            format_age(entry.age),
            human_size(entry.size_bytes),
        )
    return table
