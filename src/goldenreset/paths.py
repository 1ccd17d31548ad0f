"""
Canonical path helpers for goldenreset.

The directory names produced here are load-bearing: the Trash Manager only
recognises directories that ``trash_dir`` would have produced.

    <Name>                           live VM directory
    <Name>_New                       clone staging directory
    <Name>_Trash_<yyyyMMdd>_<HHmmss> retired VM directory
"""

import os
import re
from datetime import datetime
from pathlib import Path
from typing import Optional, Tuple

STAGING_SUFFIX = "_New"
TRASH_MARKER = "_Trash_"
TRASH_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
TRASH_PATTERN = re.compile(r"^(?P<name>.+)_Trash_(?P<stamp>\d{8}_\d{6})$")
LOCK_SUFFIX = ".reset.lock"


# ── configuration locations ──────────────────────────────────────────────────

def default_base_path() -> Path:
    """Default VM search root: the per-user VMware documents folder."""
    env = os.getenv("GOLDENRESET_BASE_PATH")
    if env:
        return Path(env).expanduser()
    return Path.home() / "Documents" / "Virtual Machines"


def default_config_path() -> Path:
    """~/.config/goldenreset/config.yaml (overridable via GOLDENRESET_CONFIG)."""
    return Path(
        os.getenv("GOLDENRESET_CONFIG", str(Path.home() / ".config/goldenreset/config.yaml"))
    ).expanduser()


# ── naming contract ──────────────────────────────────────────────────────────

def staging_dir(vm_dir: Path) -> Path:
    """Sibling directory the clone is written to before promotion."""
    return vm_dir.parent / f"{vm_dir.name}{STAGING_SUFFIX}"


def trash_dir(vm_dir: Path, when: datetime) -> Path:
    """Sibling directory the live VM is retired to, stamped at second precision."""
    return vm_dir.parent / f"{vm_dir.name}{TRASH_MARKER}{when.strftime(TRASH_TIMESTAMP_FORMAT)}"


def parse_trash_name(name: str) -> Optional[Tuple[str, datetime]]:
    """Return (vm_name, created_at) for a trash directory name, else None.

    Names with the right shape but an impossible timestamp are rejected too.
    """
    match = TRASH_PATTERN.match(name)
    if not match:
        return None
    try:
        created = datetime.strptime(match.group("stamp"), TRASH_TIMESTAMP_FORMAT)
    except ValueError:
        return None
    return match.group("name"), created


def is_staging_name(name: str) -> bool:
    return name.endswith(STAGING_SUFFIX)


def lock_path(vm_dir: Path) -> Path:
    """Lock file beside the VM directory, so it survives the directory swap."""
    return vm_dir.parent / f".{vm_dir.name}{LOCK_SUFFIX}"
