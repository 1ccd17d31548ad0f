"""Exceptions raised by reset operations.

Exception Hierarchy:
    GoldenResetError (base)
        ├── ToolNotFound
        ├── NoVMsFound
        ├── NoSnapshotsFound
        ├── ResetInProgress
        ├── CloneError
        │   ├── CloneFailed
        │   └── CloneIncomplete
        └── SwapError
            ├── SwapFailed
            └── PartialSwap

Stopping the VM is best-effort and only logs a warning; a declined trash
deletion is reported as ``DeletionResult.CANCELLED``, not raised.
"""

from pathlib import Path


class GoldenResetError(Exception):
    """Base exception for all reset operations."""


class ToolNotFound(GoldenResetError):
    """The vmrun executable could not be located."""

    def __init__(self, searched: str):
        self.searched = searched
        super().__init__(f"vmrun not found (searched: {searched})")


class NoVMsFound(GoldenResetError):
    """No .vmx files below the configured base path."""

    def __init__(self, base_path: Path):
        self.base_path = base_path
        super().__init__(f"No virtual machines found under {base_path}")


class NoSnapshotsFound(GoldenResetError):
    """The selected VM has no snapshots to reset to."""

    def __init__(self, vmx_path: Path):
        self.vmx_path = vmx_path
        super().__init__(f"No snapshots found for {vmx_path}")


class ResetInProgress(GoldenResetError):
    """Another reset holds the lock for this VM."""

    def __init__(self, lock_path: Path, owner: str = ""):
        self.lock_path = lock_path
        self.owner = owner
        msg = f"Another reset is in progress (lock: {lock_path})"
        if owner:
            msg += f" held by {owner}"
        super().__init__(msg)


class CloneError(GoldenResetError):
    """Base exception for clone failures."""


class CloneFailed(CloneError):
    """vmrun clone exited with a non-zero status."""

    def __init__(self, exit_code: int, stdout: str = "", stderr: str = ""):
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        details = (stderr or "").strip() or (stdout or "").strip() or "no output"
        super().__init__(f"Clone failed with exit code {exit_code}: {details}")


class CloneIncomplete(CloneError):
    """vmrun reported success but the cloned .vmx is missing."""

    def __init__(self, expected_path: Path):
        self.expected_path = expected_path
        super().__init__(f"Clone finished but {expected_path} does not exist")


class SwapError(GoldenResetError):
    """Base exception for directory swap failures."""


class SwapFailed(SwapError):
    """Moving the live VM to trash failed; the live VM is untouched."""

    def __init__(self, live_dir: Path, trash_dir: Path, reason: str):
        self.live_dir = live_dir
        self.trash_dir = trash_dir
        self.reason = reason
        super().__init__(f"Could not move {live_dir} to {trash_dir}: {reason}")


class PartialSwap(SwapError):
    """The live VM is in trash but the clone could not be promoted.

    Requires manual recovery: rename ``staging_dir`` (or ``trash_dir``) to
    ``live_dir``.
    """

    def __init__(self, live_dir: Path, trash_dir: Path, staging_dir: Path, reason: str):
        self.live_dir = live_dir
        self.trash_dir = trash_dir
        self.staging_dir = staging_dir
        self.reason = reason
        super().__init__(
            f"PARTIAL SWAP: original moved to {trash_dir} but promoting {staging_dir} "
            f"to {live_dir} failed: {reason}. No VM is at {live_dir}; rename "
            f"{staging_dir.name} (or {trash_dir.name}) to {live_dir.name} manually."
        )

    @property
    def recovery_hint(self) -> str:
        return f"rename '{self.staging_dir}' -> '{self.live_dir}'"
