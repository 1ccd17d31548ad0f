"""Find VMware VMs below a base directory."""

from pathlib import Path
from typing import List

import structlog

from ..interfaces.filesystem import FileSystem
from ..paths import is_staging_name, parse_trash_name
from .models import VirtualMachineRef

log = structlog.get_logger(__name__)

MAX_DEPTH = 2


def _skip_directory(name: str) -> bool:
    return is_staging_name(name) or parse_trash_name(name) is not None


def discover_vms(base_path: Path, fs: FileSystem, max_depth: int = MAX_DEPTH) -> List[VirtualMachineRef]:
    """Every ``*.vmx`` up to ``max_depth`` levels below ``base_path``, sorted by path.

    Staging and trash directories are never offered as reset targets.
    """
    found: List[Path] = []

    def walk(directory: Path, depth: int) -> None:
        try:
            children = list(fs.iter_dir(directory))
        except OSError as e:
            log.debug("discovery.unreadable", path=str(directory), error=str(e))
            return
        for child in children:
            if child.is_dir:
                if depth < max_depth and not child.is_symlink and not _skip_directory(child.name):
                    walk(child.path, depth + 1)
            elif child.path.suffix.lower() == ".vmx":
                found.append(child.path)

    if fs.is_dir(base_path):
        walk(base_path, 0)

    vms = []
    for vmx in sorted(found):
        try:
            text = fs.read_text(vmx)
        except OSError:
            text = None
        vms.append(VirtualMachineRef.from_path(vmx, text))
    return vms


def format_vm_label(vm: VirtualMachineRef) -> str:
    """Human-readable label for menus and tables. Never parsed back."""
    if vm.display_name != vm.base_name:
        return f"{vm.display_name} ({vm.vmx_path})"
    return str(vm.vmx_path)
