#!/usr/bin/env python3
"""Trash manager: list and delete retired VM directories."""

from pathlib import Path
from typing import List, Optional

import structlog

from ..interfaces.filesystem import FileSystem
from ..paths import parse_trash_name
from .models import DeletionResult, TrashEntry
from .sizing import DirectorySizer

log = structlog.get_logger(__name__)


class TrashManager:
    """Enumerate ``<Name>_Trash_<yyyyMMdd>_<HHmmss>`` directories under a root."""

    def __init__(self, fs: FileSystem, sizer: DirectorySizer):
        self.fs = fs
        self.sizer = sizer

    def list_trash(self, root: Path, vm_name: Optional[str] = None) -> List[TrashEntry]:
        """Scan ``root`` afresh and return trash entries, newest first.

        Args:
            root: Directory holding the VM directories
            vm_name: Only entries retired from this live directory name
        """
        if not self.fs.is_dir(root):
            return []

        entries: List[TrashEntry] = []
        try:
            children = list(self.fs.iter_dir(root))
        except OSError as e:
            log.warning("trash.scan_failed", root=str(root), error=str(e))
            return []

        for child in children:
            if not child.is_dir or child.is_symlink:
                continue
            parsed = parse_trash_name(child.name)
            if parsed is None:
                continue
            name, created_at = parsed
            if vm_name is not None and name != vm_name:
                continue
            entries.append(
                TrashEntry(
                    path=child.path,
                    vm_name=name,
                    created_at=created_at,
                    size_bytes=self.sizer.size(child.path),
                )
            )

        entries.sort(key=lambda e: (e.created_at, e.name), reverse=True)
        return entries

    def delete_trash(self, entry: TrashEntry, confirmation: str) -> DeletionResult:
        """Recursively delete ``entry`` if ``confirmation`` is exactly its directory name.

        Any other confirmation leaves the directory alone. Deletion errors
        propagate to the caller.
        """
        if parse_trash_name(entry.path.name) is None:
            raise ValueError(f"Not a trash directory: {entry.path}")

        if confirmation != entry.path.name:
            log.info("trash.delete_declined", path=str(entry.path))
            return DeletionResult.CANCELLED

        if not self.fs.exists(entry.path):
            raise FileNotFoundError(f"Trash directory no longer exists: {entry.path}")

        self.fs.remove_tree(entry.path)
        log.info("trash.deleted", path=str(entry.path), size_bytes=entry.size_bytes)
        return DeletionResult.DELETED
