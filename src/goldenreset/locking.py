"""Per-VM reset lock.

Usage:
    with reset_lock(vm.directory, fs):
        # clone, monitor, swap
        ...

The lock file sits beside the VM directory (``.<Name>.reset.lock``) so the
directory swap does not move it. A lock left behind by a dead process is
taken over.
"""

import os
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Generator, Optional

import psutil

from .exceptions import ResetInProgress
from .interfaces.filesystem import FileSystem
from .logging import get_logger
from .paths import lock_path

log = get_logger(__name__)


def _lock_owner(fs: FileSystem, path: Path) -> Optional[int]:
    try:
        first = fs.read_text(path).split()[0]
        return int(first)
    except (OSError, IndexError, ValueError):
        return None


def _acquire(fs: FileSystem, path: Path) -> None:
    content = f"{os.getpid()} {datetime.now().isoformat(timespec='seconds')}\n"
    try:
        fs.create_exclusive(path, content)
        return
    except FileExistsError:
        pass

    owner = _lock_owner(fs, path)
    if owner is not None and owner != os.getpid() and not psutil.pid_exists(owner):
        log.warning("lock.stale", path=str(path), pid=owner)
        fs.remove_file(path)
        try:
            fs.create_exclusive(path, content)
            return
        except FileExistsError:
            owner = _lock_owner(fs, path)

    raise ResetInProgress(path, f"pid {owner}" if owner is not None else "")


@contextmanager
def reset_lock(vm_dir: Path, fs: FileSystem) -> Generator[Path, None, None]:
    """Hold the exclusive reset lock for ``vm_dir`` for the duration of the block."""
    path = lock_path(vm_dir)
    _acquire(fs, path)
    log.debug("lock.acquired", path=str(path))
    try:
        yield path
    finally:
        try:
            fs.remove_file(path)
            log.debug("lock.released", path=str(path))
        except OSError as e:
            log.warning("lock.release_failed", path=str(path), error=str(e))
