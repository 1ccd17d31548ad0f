"""Tests for the command line front-end."""
import logging
from datetime import datetime, timedelta

import pytest
import structlog
import yaml

from goldenreset.cli import build_parser, main
from goldenreset.cli.utils import format_age, trash_table
from goldenreset.orchestrator import ResetOutcome
from goldenreset.reset.models import SnapshotInfo, TrashEntry

TRASH_NAME = "X_Trash_20260101_120000"


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        handler.close()
        root.removeHandler(handler)
    structlog.reset_defaults()


@pytest.fixture
def base_args(tmp_path, vm_tree):
    return ["--config", str(tmp_path / "config.yaml"), "--base-path", str(vm_tree)]


@pytest.fixture
def trash_dir(vm_tree):
    path = vm_tree / TRASH_NAME
    path.mkdir()
    (path / "X.vmdk").write_bytes(b"\0" * 64)
    return path


class TestParser:
    """Test argument parsing."""

    def test_reset_flags(self):
        args = build_parser().parse_args(["reset", "--vm", "X", "-s", "Base (OK)", "-y"])
        assert args.vm == "X"
        assert args.snapshot == "Base (OK)"
        assert args.yes is True

    def test_trash_delete_flags(self):
        args = build_parser().parse_args(["trash", "delete", TRASH_NAME, "--confirm", TRASH_NAME])
        assert args.name == TRASH_NAME
        assert args.confirm == TRASH_NAME


class TestCommands:
    """Test commands end to end against a temporary tree."""

    def test_vms(self, base_args, capsys):
        assert main(base_args + ["vms"]) == 0
        assert "X Golden Box" in capsys.readouterr().out

    def test_vms_empty_base_path(self, tmp_path, capsys):
        empty = tmp_path / "empty"
        empty.mkdir()
        code = main(["--config", str(tmp_path / "c.yaml"), "--base-path", str(empty), "vms"])
        assert code == 1
        assert "No virtual machines found" in capsys.readouterr().out

    def test_trash_list(self, base_args, trash_dir, capsys):
        assert main(base_args + ["trash", "list"]) == 0
        assert "1 entries" in capsys.readouterr().out

    def test_trash_list_empty(self, base_args, capsys):
        assert main(base_args + ["trash", "list"]) == 0
        assert "Trash is empty" in capsys.readouterr().out

    def test_trash_delete_wrong_token_keeps_directory(self, base_args, trash_dir, capsys):
        code = main(base_args + ["trash", "delete", TRASH_NAME, "--confirm", TRASH_NAME.lower()])
        assert code == 0
        assert trash_dir.exists()
        assert "nothing deleted" in capsys.readouterr().out

    def test_trash_delete_exact_token(self, base_args, trash_dir):
        assert main(base_args + ["trash", "delete", TRASH_NAME, "--confirm", TRASH_NAME]) == 0
        assert not trash_dir.exists()

    def test_trash_delete_unknown_name(self, base_args, trash_dir):
        assert main(base_args + ["trash", "delete", "X_Trash_20250101_000000", "--confirm", "x"]) == 1
        assert trash_dir.exists()

    def test_trash_delete_requires_name_when_not_interactive(self, base_args, trash_dir, monkeypatch):
        monkeypatch.setattr("goldenreset.cli.trash_commands.is_interactive", lambda: False)
        assert main(base_args + ["trash", "delete"]) == 1
        assert trash_dir.exists()

    def test_config_set_and_show(self, tmp_path, capsys):
        config = tmp_path / "config.yaml"
        assert main(["--config", str(config), "--tag", "OK", "config", "set"]) == 0
        assert yaml.safe_load(config.read_text())["golden_tag"] == "OK"

        capsys.readouterr()
        assert main(["--config", str(config), "config", "show"]) == 0
        assert "golden_tag: OK" in capsys.readouterr().out

    def test_invalid_config_is_reported(self, tmp_path):
        config = tmp_path / "config.yaml"
        config.write_text("poll_interval: -1\n")
        assert main(["--config", str(config), "config", "show"]) == 1


class TestVmSelection:
    """Test which VM a command acts on when --vm is omitted."""

    @pytest.fixture
    def second_vm(self, vm_tree):
        vm_dir = vm_tree / "Y"
        vm_dir.mkdir()
        (vm_dir / "Y.vmx").write_text('displayName = "Y Box"\n')
        return vm_dir

    @pytest.fixture
    def resets(self, monkeypatch):
        calls = []
        monkeypatch.setattr("goldenreset.cli.utils.is_interactive", lambda: False)
        monkeypatch.setattr("goldenreset.cli.reset_commands.is_interactive", lambda: False)
        monkeypatch.setattr(
            "goldenreset.orchestrator.ResetOrchestrator.list_snapshots",
            lambda self, vm: [SnapshotInfo("golden")],
        )

        def fake_reset(self, vm, name, on_progress=None):
            calls.append((vm, name))
            trash = TrashEntry(
                vm.directory.parent / f"{vm.name}_Trash_20260101_120000",
                vm.name,
                datetime(2026, 1, 1, 12),
            )
            return ResetOutcome(vm, name, trash, 0, timedelta(0))

        monkeypatch.setattr("goldenreset.orchestrator.ResetOrchestrator.reset", fake_reset)
        return calls

    def test_several_vms_require_explicit_choice(self, base_args, second_vm, resets, capsys):
        assert main(base_args + ["reset", "-y"]) == 1
        assert resets == []
        assert "pass --vm" in capsys.readouterr().out
        assert not (second_vm.parent / "X_New").exists()
        assert not (second_vm.parent / "Y_New").exists()

    def test_single_vm_is_used_without_prompt(self, base_args, resets, capsys):
        assert main(base_args + ["reset", "-y"]) == 0
        assert [(vm.name, name) for vm, name in resets] == [("X", "golden")]


def test_trash_delete_finds_nested_vm_trash(base_args, vm_tree):
    group = vm_tree / "Group"
    (group / "Z").mkdir(parents=True)
    (group / "Z" / "Z.vmx").write_text('displayName = "Z"\n')
    nested = group / "Z_Trash_20260101_000000"
    nested.mkdir()

    assert main(base_args + ["trash", "delete", nested.name, "--confirm", nested.name]) == 0
    assert not nested.exists()


@pytest.mark.parametrize("age,expected", [
    (timedelta(seconds=59), "0m"),
    (timedelta(minutes=42), "42m"),
    (timedelta(hours=3, minutes=5), "3h 5m"),
    (timedelta(days=2, hours=7, minutes=30), "2d 7h"),
    (timedelta(seconds=-10), "0m"),
])
def test_format_age(age, expected):
    assert format_age(age) == expected


def test_trash_table_shows_age(tmp_path):
    entry = TrashEntry(tmp_path / "X_Trash_20260101_120000", "X", datetime.now() - timedelta(hours=2))
    table = trash_table([entry])
    assert "Age" in [column.header for column in table.columns]
    assert "2h 0m" in list(table.columns[4].cells)
