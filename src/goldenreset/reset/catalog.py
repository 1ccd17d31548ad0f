#!/usr/bin/env python3
"""Snapshot catalog: list a VM's snapshots and estimate their sizes."""

import re
from pathlib import Path
from typing import Dict, List, Optional

import structlog

from ..interfaces.filesystem import FileSystem
from ..vmrun import VmrunTool
from .models import SnapshotInfo, VirtualMachineRef

log = structlog.get_logger(__name__)

_SIDECAR_LINE_RE = re.compile(
    r'^\s*snapshot(?P<index>\d+)\.(?P<key>displayName|filename)\s*=\s*"(?P<value>[^"]*)"\s*$',
    re.MULTILINE | re.IGNORECASE,
)
# .vmsd values encode special characters as |XX (hex)
_VMSD_ESCAPE_RE = re.compile(r"\|([0-9A-Fa-f]{2})")


def parse_snapshot_listing(output: str) -> List[str]:
    """Snapshot names from ``listSnapshots`` output.

    The first line is the ``Total snapshots: N`` header; every further
    non-blank line is one name.
    """
    names: List[str] = []
    for line in output.splitlines()[1:]:
        name = line.strip()
        if name and name not in names:
            names.append(name)
    return names


def _unescape_vmsd(value: str) -> str:
    return _VMSD_ESCAPE_RE.sub(lambda m: chr(int(m.group(1), 16)), value)


def parse_sidecar(text: str) -> Dict[str, str]:
    """Map snapshot display name -> snapshot file name from .vmsd text."""
    entries: Dict[str, Dict[str, str]] = {}
    for match in _SIDECAR_LINE_RE.finditer(text):
        entry = entries.setdefault(match.group("index"), {})
        entry[match.group("key").lower()] = _unescape_vmsd(match.group("value"))

    pairs: Dict[str, str] = {}
    for entry in entries.values():
        if "displayname" in entry and "filename" in entry:
            pairs[entry["displayname"]] = entry["filename"]
    return pairs


def sidecar_path(vm: VirtualMachineRef) -> Path:
    return vm.vmx_path.with_suffix(".vmsd")


def format_snapshot_label(snapshot: SnapshotInfo, golden_tag: str) -> str:
    """Human-readable label for menus and tables. Never parsed back."""
    size = "size unknown"
    if snapshot.size_bytes is not None:
        size = f"{snapshot.size_bytes / (1024 ** 3):.2f} GB"
    label = f"{snapshot.name} ({size})"
    if snapshot.is_golden(golden_tag):
        label += "  [recommended]"
    return label


class SnapshotCatalog:
    """Read-only view of the snapshots of a VM."""

    def __init__(self, tool: VmrunTool, fs: FileSystem):
        self.tool = tool
        self.fs = fs

    def list_snapshots(self, vm: VirtualMachineRef) -> List[SnapshotInfo]:
        """List snapshots; an empty list when vmrun fails or reports none."""
        result = self.tool.list_snapshots(vm.vmx_path)
        if not result.success:
            log.warning(
                "snapshots.list_failed",
                vmx=str(vm.vmx_path),
                exit_code=result.returncode,
                stderr=result.stderr.strip() or result.stdout.strip(),
            )
            return []

        names = parse_snapshot_listing(result.stdout)
        if not names:
            log.warning("snapshots.none", vmx=str(vm.vmx_path))
            return []

        sizes = self._sidecar_sizes(vm, names)
        return [SnapshotInfo(name=name, size_bytes=sizes.get(name)) for name in names]

    @staticmethod
    def recommend(snapshots: List[SnapshotInfo], golden_tag: str) -> Optional[SnapshotInfo]:
        """The most recent snapshot carrying the golden tag, if any."""
        tagged = [s for s in snapshots if s.is_golden(golden_tag)]
        return tagged[-1] if tagged else None

    def _sidecar_sizes(self, vm: VirtualMachineRef, names: List[str]) -> Dict[str, int]:
        path = sidecar_path(vm)
        try:
            text = self.fs.read_text(path)
        except OSError as e:
            log.debug("snapshots.sidecar_unavailable", path=str(path), error=str(e))
            return {}

        pairs = parse_sidecar(text)
        sizes: Dict[str, int] = {}
        for name in names:
            pattern = re.compile(f"^{SnapshotInfo(name).pattern}$")
            filename = next((f for d, f in pairs.items() if pattern.match(d)), None)
            if filename is None:
                continue
            try:
                sizes[name] = self.fs.file_size(vm.directory / filename)
            except OSError as e:
                log.debug("snapshots.size_unavailable", snapshot=name, error=str(e))
        return sizes
