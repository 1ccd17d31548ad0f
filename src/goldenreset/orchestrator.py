"""
Golden-snapshot reset orchestration.

Ties the components together: discover VMs, list snapshots, clone the chosen
snapshot while reporting progress, then swap the clone into place.

Usage:
    orch = ResetOrchestrator(load_settings())
    vm = orch.find_vms()[0]
    snapshot = orch.recommend(orch.list_snapshots(vm))
    outcome = orch.reset(vm, snapshot.name, on_progress=print)
"""

import time
from contextlib import nullcontext
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, List, Optional

from .backends.local_filesystem import LocalFileSystem
from .backends.subprocess_runner import SubprocessRunner
from .exceptions import NoSnapshotsFound, NoVMsFound
from .interfaces.filesystem import FileSystem
from .interfaces.process import ProcessRunner
from .locking import reset_lock
from .logging import get_logger, log_operation
from .models import ResetSettings
from .reset.catalog import SnapshotCatalog
from .reset.clone import CloneDriver
from .reset.discovery import discover_vms
from .reset.models import (
    DeletionResult,
    ProgressSample,
    SnapshotInfo,
    TrashEntry,
    VirtualMachineRef,
)
from .reset.progress import ProgressMonitor
from .reset.sizing import DirectorySizer, default_sizer
from .reset.swap import SwapCoordinator
from .reset.trash import TrashManager
from .vmrun import VmrunTool, locate_vmrun

log = get_logger(__name__)

ProgressCallback = Callable[[ProgressSample], None]


@dataclass
class ResetOutcome:
    """Result of a completed reset."""

    vm: VirtualMachineRef
    snapshot_name: str
    trash: TrashEntry
    source_bytes: int
    duration: timedelta


class ResetOrchestrator:
    """
    Reset VMs to a snapshot by clone-and-swap.

    Collaborators are created lazily from ``settings`` unless injected, so a
    missing vmrun is only reported when an operation actually needs it.
    """

    def __init__(
        self,
        settings: Optional[ResetSettings] = None,
        runner: Optional[ProcessRunner] = None,
        fs: Optional[FileSystem] = None,
        tool: Optional[VmrunTool] = None,
        sizer: Optional[DirectorySizer] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
        now: Callable[[], datetime] = datetime.now,
    ):
        self.settings = settings or ResetSettings()
        self.runner = runner or SubprocessRunner()
        self.fs = fs or LocalFileSystem()
        self._tool = tool
        self.sizer = sizer or default_sizer(self.runner, self.fs)
        self._sleep = sleep
        self._clock = clock
        self._now = now

    @property
    def tool(self) -> VmrunTool:
        """Resolve vmrun on first use (raises ToolNotFound)."""
        if self._tool is None:
            path = locate_vmrun(self.settings.vmrun_path)
            self._tool = VmrunTool(path, self.runner, host_type=self.settings.host_type)
            log.debug("vmrun.resolved", path=str(path))
        return self._tool

    @property
    def catalog(self) -> SnapshotCatalog:
        return SnapshotCatalog(self.tool, self.fs)

    @property
    def trash_manager(self) -> TrashManager:
        return TrashManager(self.fs, self.sizer)

    def find_vms(self) -> List[VirtualMachineRef]:
        """VMs under the configured base path; raises NoVMsFound if there are none."""
        vms = discover_vms(self.settings.base_path, self.fs)
        if not vms:
            raise NoVMsFound(self.settings.base_path)
        return vms

    def list_snapshots(self, vm: VirtualMachineRef) -> List[SnapshotInfo]:
        """Snapshots of ``vm``; raises NoSnapshotsFound if there are none."""
        snapshots = self.catalog.list_snapshots(vm)
        if not snapshots:
            raise NoSnapshotsFound(vm.vmx_path)
        return snapshots

    def recommend(self, snapshots: List[SnapshotInfo]) -> Optional[SnapshotInfo]:
        return SnapshotCatalog.recommend(snapshots, self.settings.golden_tag)

    def reset(
        self,
        vm: VirtualMachineRef,
        snapshot_name: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ResetOutcome:
        """Clone ``snapshot_name`` and swap the clone in as the live VM.

        Interrupting while the clone runs (Ctrl-C or an exception from
        ``on_progress``) kills the clone and removes the partial copy. Once
        the clone has finished, failures propagate with the staging copy left
        in place.
        """
        tool = self.tool
        driver = CloneDriver(tool, self.fs)
        monitor = ProgressMonitor(
            self.sizer,
            interval=self.settings.poll_interval,
            warmup=self.settings.eta_warmup,
            sleep=self._sleep,
            clock=self._clock,
        )
        swap = SwapCoordinator(
            tool,
            self.fs,
            settle_delay=self.settings.settle_delay,
            sleep=self._sleep,
            now=self._now,
        )

        lock = reset_lock(vm.directory, self.fs) if self.settings.use_lock else nullcontext()
        started = self._clock()

        with log_operation(log, "reset", vm_name=vm.name, snapshot=snapshot_name) as op_log, lock:
            total = self.sizer.size(vm.directory)
            op_log.info("reset.source_measured", source_bytes=total)

            job = driver.start_clone(vm, snapshot_name)
            job.started_monotonic = self._clock()
            try:
                for sample in monitor.samples(job, total):
                    if on_progress:
                        on_progress(sample)
                driver.wait(job)
            except BaseException:
                if not job.released:
                    driver.cancel(job)
                raise

            if on_progress:
                on_progress(
                    ProgressSample.completed(
                        elapsed=job.elapsed(self._clock()),
                        total_bytes=total,
                        current_bytes=self.sizer.size(job.destination_dir),
                    )
                )

            trash = swap.commit_reset(job)

        return ResetOutcome(
            vm=vm,
            snapshot_name=snapshot_name,
            trash=trash,
            source_bytes=total,
            duration=timedelta(seconds=max(self._clock() - started, 0.0)),
        )

    def list_trash(self, vm: Optional[VirtualMachineRef] = None) -> List[TrashEntry]:
        """Trash entries for ``vm``, or for every VM under the base path.

        Trash is written beside each VM directory, so without ``vm`` the base
        path and the parent of every discovered VM are scanned. Newest first.
        """
        if vm is not None:
            return self.trash_manager.list_trash(vm.directory.parent, vm_name=vm.name)

        base = self.settings.base_path
        roots = [base]
        for found in discover_vms(base, self.fs):
            parent = found.directory.parent
            if parent not in roots:
                roots.append(parent)

        entries = {}
        for root in roots:
            for entry in self.trash_manager.list_trash(root):
                entries.setdefault(entry.path, entry)
        return sorted(entries.values(), key=lambda e: (e.created_at, e.name), reverse=True)

    def list_trash_in(self, root: Path) -> List[TrashEntry]:
        return self.trash_manager.list_trash(root)

    def delete_trash(self, entry: TrashEntry, confirmation: str) -> DeletionResult:
        return self.trash_manager.delete_trash(entry, confirmation)
