"""
Pytest fixtures and test doubles for goldenreset tests.
"""
from pathlib import Path
from typing import Callable, Dict, List, Optional

import pytest

from goldenreset.backends.local_filesystem import LocalFileSystem
from goldenreset.interfaces.process import ProcessHandle, ProcessResult, ProcessRunner
from goldenreset.reset.models import VirtualMachineRef
from goldenreset.vmrun import VmrunTool


class FakeHandle(ProcessHandle):
    """Process that reports running for ``polls`` calls to poll(), then exits."""

    def __init__(
        self,
        polls: int = 0,
        returncode: int = 0,
        stdout: str = "",
        stderr: str = "",
        on_exit: Optional[Callable[[], None]] = None,
    ):
        self.remaining = polls
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr
        self.on_exit = on_exit
        self.exited = False
        self.killed = False
        self.released = False

    @property
    def pid(self) -> int:
        return 4242

    def _finish(self) -> None:
        if not self.exited:
            self.exited = True
            if self.on_exit and not self.killed:
                self.on_exit()

    def poll(self) -> Optional[int]:
        if self.exited:
            return self.returncode
        if self.remaining > 0:
            self.remaining -= 1
            return None
        self._finish()
        return self.returncode

    def wait(self, timeout=None) -> ProcessResult:
        self._finish()
        return ProcessResult(self.returncode, self.stdout, self.stderr)

    def kill(self) -> None:
        if not self.exited:
            self.killed = True
            self.returncode = -9
            self.exited = True

    def release(self) -> None:
        self.released = True


class FakeRunner(ProcessRunner):
    """Scripted runner keyed by the vmrun verb (third argv element)."""

    def __init__(self):
        self.results: Dict[str, ProcessResult] = {}
        self.handle: Optional[FakeHandle] = None
        self.calls: List[List[str]] = []
        self.started: List[List[str]] = []

    def verb(self, command: List[str]) -> str:
        return command[3] if len(command) > 3 else command[0]

    def run(self, command, timeout=None) -> ProcessResult:
        self.calls.append(list(command))
        return self.results.get(self.verb(command), ProcessResult(0, "", ""))

    def start(self, command) -> ProcessHandle:
        self.started.append(list(command))
        if self.handle is None:
            self.handle = FakeHandle()
        return self.handle


@pytest.fixture
def fs():
    return LocalFileSystem()


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def tool(runner):
    return VmrunTool(Path("/opt/vmware/vmrun"), runner)


@pytest.fixture
def vm_tree(tmp_path):
    """A base directory holding one VM: <base>/X/X.vmx with a disk file."""
    base = tmp_path / "VMs"
    vm_dir = base / "X"
    vm_dir.mkdir(parents=True)
    (vm_dir / "X.vmx").write_text('displayName = "X Golden Box"\n')
    (vm_dir / "X.vmdk").write_bytes(b"\0" * 4096)
    return base


@pytest.fixture
def vm(vm_tree):
    vmx = vm_tree / "X" / "X.vmx"
    return VirtualMachineRef.from_path(vmx, vmx.read_text())


def make_clone_writer(vm: VirtualMachineRef, payload: int = 1024) -> Callable[[], None]:
    """on_exit hook writing the clone into <Name>_New like vmrun would."""

    def write():
        staging = vm.directory.parent / f"{vm.name}_New"
        staging.mkdir(exist_ok=True)
        (staging / vm.vmx_path.name).write_text('displayName = "clone"\n')
        (staging / f"{vm.base_name}-cl1.vmdk").write_bytes(b"\1" * payload)

    return write


@pytest.fixture
def clone_writer():
    return make_clone_writer


@pytest.fixture
def handle_factory():
    return FakeHandle
