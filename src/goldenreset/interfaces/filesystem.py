"""Abstract interface for the filesystem operations a reset performs."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator


@dataclass(frozen=True)
class DirEntry:
    """One child of a directory, as seen at listing time."""

    path: Path
    is_dir: bool
    is_symlink: bool = False

    @property
    def name(self) -> str:
        return self.path.name


class FileSystem(ABC):
    """Filesystem access used by discovery, sizing, cloning, swap and trash."""

    @abstractmethod
    def exists(self, path: Path) -> bool:
        pass

    @abstractmethod
    def is_dir(self, path: Path) -> bool:
        pass

    @abstractmethod
    def iter_dir(self, path: Path) -> Iterator[DirEntry]:
        """Yield the children of ``path``. Raises OSError if it cannot be listed."""
        pass

    @abstractmethod
    def file_size(self, path: Path) -> int:
        """Size in bytes without following symlinks. Raises OSError."""
        pass

    @abstractmethod
    def read_text(self, path: Path) -> str:
        pass

    @abstractmethod
    def rename(self, src: Path, dst: Path) -> None:
        """Rename ``src`` to ``dst``. Raises if ``dst`` exists."""
        pass

    @abstractmethod
    def remove_tree(self, path: Path) -> None:
        """Recursively delete a directory."""
        pass

    @abstractmethod
    def create_exclusive(self, path: Path, content: str) -> None:
        """Create a new file, raising FileExistsError if it already exists."""
        pass

    @abstractmethod
    def remove_file(self, path: Path) -> None:
        pass
