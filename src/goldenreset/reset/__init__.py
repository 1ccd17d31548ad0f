"""Golden-snapshot reset components."""

from .catalog import SnapshotCatalog, format_snapshot_label
from .clone import CloneDriver
from .discovery import discover_vms, format_vm_label
from .models import (
    CloneJob,
    DeletionResult,
    ProgressSample,
    SnapshotInfo,
    TrashEntry,
    VirtualMachineRef,
)
from .progress import ProgressMonitor, compute_progress, format_eta
from .sizing import DirectorySizer, DuSizeStrategy, WalkSizeStrategy, default_sizer
from .swap import SwapCoordinator
from .trash import TrashManager

__all__ = [
    "CloneDriver",
    "CloneJob",
    "DeletionResult",
    "DirectorySizer",
    "DuSizeStrategy",
    "ProgressMonitor",
    "ProgressSample",
    "SnapshotCatalog",
    "SnapshotInfo",
    "SwapCoordinator",
    "TrashEntry",
    "TrashManager",
    "VirtualMachineRef",
    "WalkSizeStrategy",
    "compute_progress",
    "default_sizer",
    "discover_vms",
    "format_eta",
    "format_snapshot_label",
    "format_vm_label",
]
