#!/usr/bin/env python3
"""Data models for golden-snapshot resets."""

import re
import time
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from pathlib import Path
from typing import Optional

from ..interfaces.process import ProcessHandle

_DISPLAY_NAME_RE = re.compile(r'^\s*displayName\s*=\s*"(?P<value>[^"]*)"', re.MULTILINE | re.IGNORECASE)


@dataclass(frozen=True)
class VirtualMachineRef:
    """A VM identified by its .vmx definition file."""

    vmx_path: Path
    display_name: str = ""

    def __post_init__(self):
        if not self.display_name:
            object.__setattr__(self, "display_name", self.vmx_path.stem)

    @property
    def directory(self) -> Path:
        return self.vmx_path.parent

    @property
    def base_name(self) -> str:
        return self.vmx_path.stem

    @property
    def name(self) -> str:
        """Name of the live directory, the ``<Name>`` of the naming contract."""
        return self.directory.name

    @classmethod
    def from_path(cls, vmx_path: Path, vmx_text: Optional[str] = None) -> "VirtualMachineRef":
        """Build a reference, taking the display name from the .vmx text if given."""
        display_name = ""
        if vmx_text:
            match = _DISPLAY_NAME_RE.search(vmx_text)
            if match:
                display_name = match.group("value").strip()
        return cls(vmx_path=Path(vmx_path), display_name=display_name)


@dataclass(frozen=True)
class SnapshotInfo:
    """A snapshot as reported by ``vmrun listSnapshots``."""

    name: str
    size_bytes: Optional[int] = None

    @property
    def pattern(self) -> str:
        """The name escaped for use inside a regular expression."""
        return re.escape(self.name)

    def is_golden(self, tag: str) -> bool:
        """True if the name contains ``tag``, compared literally and case-insensitively."""
        if not tag:
            return False
        return re.search(re.escape(tag), self.name, re.IGNORECASE) is not None


@dataclass
class CloneJob:
    """One in-flight clone of a snapshot into the staging directory."""

    source: VirtualMachineRef
    snapshot_name: str
    destination_dir: Path
    destination_vmx: Path
    handle: ProcessHandle
    started_at: datetime = field(default_factory=datetime.now)
    started_monotonic: float = field(default_factory=time.monotonic)
    released: bool = False

    def is_running(self) -> bool:
        return not self.released and self.handle.poll() is None

    def elapsed(self, now: Optional[float] = None) -> timedelta:
        current = time.monotonic() if now is None else now
        return timedelta(seconds=max(current - self.started_monotonic, 0.0))


@dataclass(frozen=True)
class ProgressSample:
    """Observed clone progress at one poll tick."""

    elapsed: timedelta
    current_bytes: int
    total_bytes: int
    percent: int
    eta: Optional[timedelta] = None  # None means unknown

    @classmethod
    def completed(cls, elapsed: timedelta, total_bytes: int, current_bytes: int) -> "ProgressSample":
        """The final 100% sample, only valid once completion is confirmed on disk."""
        return cls(
            elapsed=elapsed,
            current_bytes=current_bytes,
            total_bytes=total_bytes,
            percent=100,
            eta=timedelta(0),
        )


@dataclass(frozen=True)
class TrashEntry:
    """A retired VM directory named ``<Name>_Trash_<yyyyMMdd>_<HHmmss>``."""

    path: Path
    vm_name: str
    created_at: datetime
    size_bytes: int = 0

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def age(self) -> timedelta:
        return datetime.now() - self.created_at


class DeletionResult(Enum):
    """Outcome of a trash deletion request."""

    DELETED = "deleted"
    CANCELLED = "cancelled"
