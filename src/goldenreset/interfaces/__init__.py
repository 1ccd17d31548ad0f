"""Abstract interfaces for the external collaborators of a reset."""

from .filesystem import DirEntry, FileSystem
from .process import ProcessHandle, ProcessResult, ProcessRunner

__all__ = ["DirEntry", "FileSystem", "ProcessHandle", "ProcessResult", "ProcessRunner"]
