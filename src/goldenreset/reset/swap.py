#!/usr/bin/env python3
"""Swap coordinator: retire the live VM to trash and promote the clone.

The two renames form the only mutation of the live slot. The live
directory is renamed away before the clone is renamed in, so the slot never
holds two directories and is empty only between the two renames.
"""

import time
from datetime import datetime
from typing import Callable

from ..exceptions import CloneIncomplete, PartialSwap, SwapFailed
from ..interfaces.filesystem import FileSystem
from ..logging import get_logger
from ..paths import parse_trash_name, trash_dir
from ..vmrun import VmrunTool
from .models import CloneJob, TrashEntry

log = get_logger(__name__)

SETTLE_DELAY = 2.0


class SwapCoordinator:
    """Commit a finished clone as the new live VM."""

    def __init__(
        self,
        tool: VmrunTool,
        fs: FileSystem,
        settle_delay: float = SETTLE_DELAY,
        sleep: Callable[[float], None] = time.sleep,
        now: Callable[[], datetime] = datetime.now,
    ):
        self.tool = tool
        self.fs = fs
        self.settle_delay = settle_delay
        self._sleep = sleep
        self._now = now

    def commit_reset(self, job: CloneJob) -> TrashEntry:
        """Swap the clone of ``job`` into the live slot.

        Returns the trash entry holding the previous live VM.

        Raises:
            CloneIncomplete: the clone .vmx is not on disk; nothing was renamed
            SwapFailed: the live VM could not be moved to trash; it is untouched
            PartialSwap: the live VM is in trash but the clone was not promoted
        """
        if not self.fs.exists(job.destination_vmx):
            raise CloneIncomplete(job.destination_vmx)

        live = job.source.directory
        staging = job.destination_dir

        self._stop_vm(job)

        if self.settle_delay > 0:
            self._sleep(self.settle_delay)

        created_at = self._now().replace(microsecond=0)
        trash = trash_dir(live, created_at)

        # Step 1: live -> trash. Must finish before the clone moves in.
        if self.fs.exists(trash):
            raise SwapFailed(live, trash, "trash directory already exists")
        try:
            self.fs.rename(live, trash)
        except OSError as e:
            log.error("swap.trash_failed", live=str(live), trash=str(trash), error=str(e))
            raise SwapFailed(live, trash, str(e)) from e
        log.info("swap.retired", live=str(live), trash=str(trash))

        # Step 2: staging -> live
        try:
            self.fs.rename(staging, live)
        except OSError as e:
            log.critical(
                "swap.partial",
                live=str(live),
                trash=str(trash),
                staging=str(staging),
                error=str(e),
            )
            raise PartialSwap(live, trash, staging, str(e)) from e
        log.info("swap.promoted", staging=str(staging), live=str(live))

        vm_name, _ = parse_trash_name(trash.name)
        return TrashEntry(path=trash, vm_name=vm_name, created_at=created_at)

    def _stop_vm(self, job: CloneJob) -> None:
        """Best-effort hard stop; a failure is only a warning."""
        vmx = job.source.vmx_path
        try:
            result = self.tool.stop(vmx, hard=True)
        except Exception as e:
            log.warning("swap.stop_failed", vmx=str(vmx), error=str(e))
            return
        if not result.success:
            # vmrun also fails when the VM is simply not running
            log.warning(
                "swap.stop_failed",
                vmx=str(vmx),
                exit_code=result.returncode,
                output=result.stderr.strip() or result.stdout.strip(),
            )
        else:
            log.info("swap.vm_stopped", vmx=str(vmx))
