#!/usr/bin/env python3
"""Clone driver: run ``vmrun clone`` in the background and judge its outcome."""

from pathlib import Path
from typing import Optional

from ..exceptions import CloneFailed, CloneIncomplete
from ..interfaces.filesystem import FileSystem
from ..logging import get_logger
from ..paths import staging_dir
from ..vmrun import VmrunTool
from .models import CloneJob, VirtualMachineRef

log = get_logger(__name__)


class CloneDriver:
    """Start, await and cancel full clones from a snapshot."""

    def __init__(self, tool: VmrunTool, fs: FileSystem):
        self.tool = tool
        self.fs = fs

    def start_clone(
        self,
        source: VirtualMachineRef,
        snapshot_name: str,
        destination_dir: Optional[Path] = None,
        destination_vmx: Optional[Path] = None,
        clone_name: Optional[str] = None,
    ) -> CloneJob:
        """Launch the clone without waiting for it.

        Args:
            source: VM to clone
            snapshot_name: Snapshot to clone from
            destination_dir: Staging directory (default: ``<Name>_New`` beside the VM)
            destination_vmx: Clone definition file (default: same file name as the source)
            clone_name: Display name of the clone (default: the source base name)

        A leftover destination directory from an interrupted attempt is
        deleted first; it is never reused.
        """
        destination_dir = destination_dir or staging_dir(source.directory)
        destination_vmx = destination_vmx or destination_dir / source.vmx_path.name
        clone_name = clone_name or source.base_name

        if self.fs.exists(destination_dir):
            log.warning("clone.removing_stale_destination", path=str(destination_dir))
            self.fs.remove_tree(destination_dir)

        handle = self.tool.start_clone(source.vmx_path, destination_vmx, snapshot_name, clone_name)
        log.info(
            "clone.started",
            vm_name=source.name,
            snapshot=snapshot_name,
            destination=str(destination_dir),
            pid=handle.pid,
        )
        return CloneJob(
            source=source,
            snapshot_name=snapshot_name,
            destination_dir=destination_dir,
            destination_vmx=destination_vmx,
            handle=handle,
        )

    def wait(self, job: CloneJob) -> None:
        """Block until the clone exits and verify the result on disk.

        Raises:
            CloneFailed: vmrun exited non-zero
            CloneIncomplete: vmrun exited zero but the clone .vmx is missing

        The destination is left in place on failure for inspection.
        """
        result = job.handle.wait()
        self._release(job)

        if not result.success:
            log.error(
                "clone.failed",
                exit_code=result.returncode,
                stdout=result.stdout.strip(),
                stderr=result.stderr.strip(),
            )
            raise CloneFailed(result.returncode, result.stdout, result.stderr)

        if not self.fs.exists(job.destination_vmx):
            log.error("clone.incomplete", expected=str(job.destination_vmx))
            raise CloneIncomplete(job.destination_vmx)

        log.info("clone.completed", destination=str(job.destination_vmx))

    def cancel(self, job: CloneJob) -> None:
        """Kill the clone and remove whatever it wrote so far."""
        log.warning("clone.cancelling", pid=job.handle.pid, destination=str(job.destination_dir))
        try:
            job.handle.kill()
            job.handle.wait()
        finally:
            self._release(job)
        if self.fs.exists(job.destination_dir):
            self.fs.remove_tree(job.destination_dir)
        log.info("clone.cancelled", destination=str(job.destination_dir))

    @staticmethod
    def _release(job: CloneJob) -> None:
        if not job.released:
            job.handle.release()
            job.released = True
