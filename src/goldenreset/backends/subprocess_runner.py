"""Subprocess process runner implementation."""

import subprocess
import tempfile
from typing import IO, List, Optional

from ..interfaces.process import ProcessHandle, ProcessResult, ProcessRunner


def _decode(data: bytes) -> str:
    if not data:
        return ""
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return data.decode("latin-1", errors="replace")


class SubprocessHandle(ProcessHandle):
    """Wraps a Popen whose output is spooled to temporary files.

    Spooling instead of pipes means a chatty child can never block on a full
    pipe while nobody is reading it.
    """

    def __init__(self, process: subprocess.Popen, stdout: IO[bytes], stderr: IO[bytes]):
        self._process = process
        self._stdout = stdout
        self._stderr = stderr
        self._result: Optional[ProcessResult] = None

    @property
    def pid(self) -> int:
        return self._process.pid

    def poll(self) -> Optional[int]:
        return self._process.poll()

    def wait(self, timeout: Optional[float] = None) -> ProcessResult:
        if self._result is None:
            returncode = self._process.wait(timeout=timeout)
            self._result = ProcessResult(
                returncode=returncode,
                stdout=self._read(self._stdout),
                stderr=self._read(self._stderr),
            )
        return self._result

    def kill(self) -> None:
        if self._process.poll() is None:
            self._process.kill()

    def release(self) -> None:
        for stream in (self._stdout, self._stderr):
            if not stream.closed:
                stream.close()

    @staticmethod
    def _read(stream: IO[bytes]) -> str:
        if stream.closed:
            return ""
        stream.seek(0)
        return _decode(stream.read())


class SubprocessRunner(ProcessRunner):
    """Run processes using the subprocess module."""

    def run(
        self,
        command: List[str],
        timeout: Optional[int] = None,
    ) -> ProcessResult:
        """Run a command."""
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                timeout=timeout,
                check=False,
            )
        except FileNotFoundError as e:
            return ProcessResult(returncode=127, stdout="", stderr=str(e))
        except subprocess.TimeoutExpired as e:
            return ProcessResult(
                returncode=124,
                stdout=_decode(e.stdout or b""),
                stderr=f"Command timed out after {timeout} seconds",
            )
        return ProcessResult(
            returncode=result.returncode,
            stdout=_decode(result.stdout),
            stderr=_decode(result.stderr),
        )

    def start(self, command: List[str]) -> ProcessHandle:
        """Start a command in the background."""
        stdout = tempfile.TemporaryFile()
        stderr = tempfile.TemporaryFile()
        try:
            process = subprocess.Popen(
                command,
                stdin=subprocess.DEVNULL,
                stdout=stdout,
                stderr=stderr,
            )
        except OSError:
            stdout.close()
            stderr.close()
            raise
        return SubprocessHandle(process, stdout, stderr)
