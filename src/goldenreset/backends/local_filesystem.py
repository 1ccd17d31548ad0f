"""Local filesystem implementation backed by os and shutil."""

import os
import shutil
from pathlib import Path
from typing import Iterator

from ..interfaces.filesystem import DirEntry, FileSystem


class LocalFileSystem(FileSystem):
    """Operate on the host filesystem."""

    def exists(self, path: Path) -> bool:
        return os.path.lexists(path)

    def is_dir(self, path: Path) -> bool:
        return os.path.isdir(path)

    def iter_dir(self, path: Path) -> Iterator[DirEntry]:
        with os.scandir(path) as it:
            for entry in it:
                try:
                    is_dir = entry.is_dir(follow_symlinks=False)
                    is_symlink = entry.is_symlink()
                except OSError:
                    continue
                yield DirEntry(path=Path(entry.path), is_dir=is_dir, is_symlink=is_symlink)

    def file_size(self, path: Path) -> int:
        return os.lstat(path).st_size

    def read_text(self, path: Path) -> str:
        return Path(path).read_text(encoding="utf-8", errors="replace")

    def rename(self, src: Path, dst: Path) -> None:
        # os.rename silently replaces an empty directory on POSIX
        if os.path.lexists(dst):
            raise FileExistsError(f"Destination already exists: {dst}")
        os.rename(src, dst)

    def remove_tree(self, path: Path) -> None:
        shutil.rmtree(path)

    def create_exclusive(self, path: Path, content: str) -> None:
        fd = os.open(path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)

    def remove_file(self, path: Path) -> None:
        os.unlink(path)
