"""Recursive directory sizing for source VMs and in-progress clones.

Sizing is best-effort: a missing or unreadable tree counts as 0 bytes and
never raises. The destination tree is being written while it is measured,
so files may appear, grow or vanish between listing and stat.
"""

import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, List, Optional

import structlog

from ..interfaces.filesystem import FileSystem
from ..interfaces.process import ProcessRunner

log = structlog.get_logger(__name__)


class SizeStrategy(ABC):
    """One way of measuring a directory tree."""

    name = "abstract"

    @abstractmethod
    def measure(self, path: Path) -> Optional[int]:
        """Total bytes below ``path``, or None if this strategy cannot tell."""
        pass


class DuSizeStrategy(SizeStrategy):
    """Whole-tree size in one call to ``du -sb`` where available."""

    name = "du"

    def __init__(
        self,
        runner: ProcessRunner,
        which: Callable[[str], Optional[str]] = shutil.which,
        timeout: int = 30,
    ):
        self.runner = runner
        self.timeout = timeout
        self._du = which("du")

    @property
    def available(self) -> bool:
        return self._du is not None

    def measure(self, path: Path) -> Optional[int]:
        if not self.available:
            return None
        try:
            result = self.runner.run([self._du, "-sb", str(path)], timeout=self.timeout)
        except Exception as e:
            log.debug("size.du_error", path=str(path), error=str(e))
            return None
        # A non-zero exit means part of the tree was not counted
        if not result.success:
            log.debug("size.du_failed", path=str(path), exit_code=result.returncode)
            return None
        first = result.stdout.strip().split("\t", 1)[0] if result.stdout else ""
        if not first.isdigit():
            return None
        return int(first)


class WalkSizeStrategy(SizeStrategy):
    """Sum file sizes by walking the tree through the filesystem interface."""

    name = "walk"

    def __init__(self, fs: FileSystem):
        self.fs = fs

    def measure(self, path: Path) -> Optional[int]:
        if not self.fs.is_dir(path):
            try:
                return self.fs.file_size(path)
            except OSError:
                return 0
        return self._walk(path)

    def _walk(self, path: Path) -> int:
        total = 0
        try:
            entries = list(self.fs.iter_dir(path))
        except OSError:
            return 0
        for entry in entries:
            if entry.is_symlink:
                continue
            if entry.is_dir:
                total += self._walk(entry.path)
                continue
            try:
                total += self.fs.file_size(entry.path)
            except OSError:
                pass
        return total


class DirectorySizer:
    """Try each strategy in order; the first definite answer wins."""

    def __init__(self, strategies: List[SizeStrategy], fs: FileSystem):
        self.strategies = strategies
        self.fs = fs

    def size(self, path: Path) -> int:
        if not self.fs.exists(path):
            return 0
        for strategy in self.strategies:
            try:
                measured = strategy.measure(path)
            except Exception as e:
                log.debug("size.strategy_failed", strategy=strategy.name, path=str(path), error=str(e))
                continue
            if measured is not None:
                return max(measured, 0)
        return 0


def default_sizer(runner: ProcessRunner, fs: FileSystem) -> DirectorySizer:
    """``du`` when the platform has it, tree walk otherwise."""
    strategies: List[SizeStrategy] = []
    du = DuSizeStrategy(runner)
    if du.available:
        strategies.append(du)
    strategies.append(WalkSizeStrategy(fs))
    return DirectorySizer(strategies, fs)
