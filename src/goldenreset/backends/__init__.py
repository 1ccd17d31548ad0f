"""Concrete implementations of the goldenreset interfaces."""

from .local_filesystem import LocalFileSystem
from .subprocess_runner import SubprocessHandle, SubprocessRunner

__all__ = ["LocalFileSystem", "SubprocessHandle", "SubprocessRunner"]
