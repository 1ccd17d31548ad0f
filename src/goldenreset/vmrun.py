"""
Thin wrapper around VMware's ``vmrun`` command line tool.

Only the three verbs a reset needs are exposed: listing snapshots, making a
full clone from a snapshot, and stopping a VM. Every call reports through
the exit code and captured output; interpretation is left to the caller.
"""

import shutil
from pathlib import Path
from typing import Callable, List, Optional

import structlog

from .exceptions import ToolNotFound
from .interfaces.process import ProcessHandle, ProcessResult, ProcessRunner

log = structlog.get_logger(__name__)

KNOWN_LOCATIONS = [
    Path("C:/Program Files (x86)/VMware/VMware Workstation/vmrun.exe"),
    Path("C:/Program Files/VMware/VMware Workstation/vmrun.exe"),
    Path("/Applications/VMware Fusion.app/Contents/Library/vmrun"),
    Path("/usr/bin/vmrun"),
    Path("/usr/local/bin/vmrun"),
]

LIST_TIMEOUT = 60
STOP_TIMEOUT = 120


def locate_vmrun(
    configured: Optional[Path] = None,
    which: Callable[[str], Optional[str]] = shutil.which,
    exists: Callable[[Path], bool] = Path.is_file,
) -> Path:
    """Find vmrun: configured path, then PATH, then known install locations.

    A configured path that does not exist raises; there is no fallback.
    """
    if configured is not None:
        if exists(configured):
            return configured
        raise ToolNotFound(str(configured))

    found = which("vmrun")
    if found:
        return Path(found)

    for candidate in KNOWN_LOCATIONS:
        if exists(candidate):
            return candidate

    raise ToolNotFound(", ".join(["PATH"] + [str(p) for p in KNOWN_LOCATIONS]))


class VmrunTool:
    """Build and run vmrun commands for one host type."""

    def __init__(self, vmrun_path: Path, runner: ProcessRunner, host_type: str = "ws"):
        self.vmrun_path = Path(vmrun_path)
        self.runner = runner
        self.host_type = host_type

    def _base(self) -> List[str]:
        return [str(self.vmrun_path), "-T", self.host_type]

    def list_snapshots_command(self, vmx_path: Path) -> List[str]:
        return self._base() + ["listSnapshots", str(vmx_path)]

    def clone_command(
        self, vmx_path: Path, destination_vmx: Path, snapshot_name: str, clone_name: str
    ) -> List[str]:
        return self._base() + [
            "clone",
            str(vmx_path),
            str(destination_vmx),
            "full",
            f"-snapshot={snapshot_name}",
            f"-cloneName={clone_name}",
        ]

    def stop_command(self, vmx_path: Path, hard: bool = True) -> List[str]:
        return self._base() + ["stop", str(vmx_path), "hard" if hard else "soft"]

    def list_snapshots(self, vmx_path: Path) -> ProcessResult:
        cmd = self.list_snapshots_command(vmx_path)
        log.debug("vmrun.list_snapshots", vmx=str(vmx_path))
        return self.runner.run(cmd, timeout=LIST_TIMEOUT)

    def start_clone(
        self, vmx_path: Path, destination_vmx: Path, snapshot_name: str, clone_name: str
    ) -> ProcessHandle:
        cmd = self.clone_command(vmx_path, destination_vmx, snapshot_name, clone_name)
        log.debug("vmrun.clone", command=cmd)
        return self.runner.start(cmd)

    def stop(self, vmx_path: Path, hard: bool = True) -> ProcessResult:
        cmd = self.stop_command(vmx_path, hard=hard)
        log.debug("vmrun.stop", vmx=str(vmx_path), hard=hard)
        return self.runner.run(cmd, timeout=STOP_TIMEOUT)
