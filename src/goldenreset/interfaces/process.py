"""Abstract interface for process execution."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional


@dataclass
class ProcessResult:
    """Result of process execution."""

    returncode: int
    stdout: str
    stderr: str

    @property
    def success(self) -> bool:
        return self.returncode == 0


class ProcessHandle(ABC):
    """A process started without waiting for it.

    Output is captured rather than streamed and becomes available from
    ``wait`` once the process has exited.
    """

    @property
    @abstractmethod
    def pid(self) -> int:
        pass

    @abstractmethod
    def poll(self) -> Optional[int]:
        """Return the exit code, or None while the process is running."""
        pass

    @abstractmethod
    def wait(self, timeout: Optional[float] = None) -> ProcessResult:
        """Block until exit and return the captured output."""
        pass

    @abstractmethod
    def kill(self) -> None:
        """Terminate the process forcibly. No-op if it already exited."""
        pass

    @abstractmethod
    def release(self) -> None:
        """Free OS resources held for the process."""
        pass


class ProcessRunner(ABC):
    """Abstract interface for process execution."""

    @abstractmethod
    def run(
        self,
        command: List[str],
        timeout: Optional[int] = None,
    ) -> ProcessResult:
        """Run a command to completion. Never raises on non-zero exit."""
        pass

    @abstractmethod
    def start(self, command: List[str]) -> ProcessHandle:
        """Start a command in the background with output captured."""
        pass
