"""Tests for the directory naming contract."""
from datetime import datetime
from pathlib import Path

import pytest

from goldenreset.paths import (
    default_base_path,
    is_staging_name,
    lock_path,
    parse_trash_name,
    staging_dir,
    trash_dir,
)


def test_staging_dir_is_sibling_with_suffix():
    assert staging_dir(Path("/vms/X")) == Path("/vms/X_New")


def test_trash_dir_embeds_second_precision_timestamp():
    when = datetime(2026, 1, 21, 15, 30, 0)
    assert trash_dir(Path("/vms/X"), when) == Path("/vms/X_Trash_20260121_153000")


@pytest.mark.parametrize("name,expected", [
    ("X_Trash_20260121_153000", ("X", datetime(2026, 1, 21, 15, 30, 0))),
    ("My_VM_Trash_20251231_235959", ("My_VM", datetime(2025, 12, 31, 23, 59, 59))),
    ("MyVM_Trash_bad", None),
    ("MyVM_Trash_2026012_153000", None),
    ("MyVM_Trash_20261399_153000", None),
    ("MyVM_Trash_20260121_153000_copy", None),
    ("MyVM", None),
    ("MyVM_New", None),
])
def test_parse_trash_name(name, expected):
    assert parse_trash_name(name) == expected


def test_trash_dir_round_trips_through_parser():
    when = datetime(2026, 3, 4, 5, 6, 7)
    assert parse_trash_name(trash_dir(Path("/vms/Win 11"), when).name) == ("Win 11", when)


def test_is_staging_name():
    assert is_staging_name("X_New")
    assert not is_staging_name("X")


def test_lock_path_lives_beside_vm_directory():
    assert lock_path(Path("/vms/X")) == Path("/vms/.X.reset.lock")


def test_default_base_path_env_override(monkeypatch, tmp_path):
    monkeypatch.setenv("GOLDENRESET_BASE_PATH", str(tmp_path))
    assert default_base_path() == tmp_path


def test_default_base_path_is_documents(monkeypatch):
    monkeypatch.delenv("GOLDENRESET_BASE_PATH", raising=False)
    assert default_base_path() == Path.home() / "Documents" / "Virtual Machines"
