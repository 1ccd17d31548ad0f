"""Tests for directory sizing strategies."""
import os
from pathlib import Path

import pytest

from goldenreset.backends.local_filesystem import LocalFileSystem
from goldenreset.interfaces.process import ProcessResult
from goldenreset.reset.sizing import (
    DirectorySizer,
    DuSizeStrategy,
    WalkSizeStrategy,
    default_sizer,
)


@pytest.fixture
def tree(tmp_path):
    root = tmp_path / "tree"
    (root / "a" / "b").mkdir(parents=True)
    (root / "one.bin").write_bytes(b"1" * 100)
    (root / "a" / "two.bin").write_bytes(b"2" * 200)
    (root / "a" / "b" / "three.bin").write_bytes(b"3" * 300)
    return root


class VanishingFileSystem(LocalFileSystem):
    """Files named 'gone*' disappear between listing and stat."""

    def file_size(self, path):
        if Path(path).name.startswith("gone"):
            raise FileNotFoundError(path)
        return super().file_size(path)


class UnlistableFileSystem(LocalFileSystem):
    def iter_dir(self, path):
        raise PermissionError(path)


class TestWalkSizeStrategy:
    """Test per-file summation."""

    def test_sums_recursively(self, tree):
        assert WalkSizeStrategy(LocalFileSystem()).measure(tree) == 600

    def test_tolerates_vanishing_files(self, tree):
        (tree / "gone.tmp").write_bytes(b"x" * 50)
        assert WalkSizeStrategy(VanishingFileSystem()).measure(tree) == 600

    def test_unreadable_tree_is_zero(self, tree):
        assert WalkSizeStrategy(UnlistableFileSystem()).measure(tree) == 0

    @pytest.mark.skipif(not hasattr(os, "symlink"), reason="symlinks unsupported")
    def test_does_not_follow_symlinked_directories(self, tree, tmp_path):
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "big.bin").write_bytes(b"x" * 10000)
        try:
            os.symlink(outside, tree / "link", target_is_directory=True)
        except OSError:
            pytest.skip("cannot create symlink")
        assert WalkSizeStrategy(LocalFileSystem()).measure(tree) == 600


class TestDuSizeStrategy:
    """Test the whole-tree fast path with a scripted runner."""

    def test_unavailable_without_du(self, runner):
        strategy = DuSizeStrategy(runner, which=lambda name: None)
        assert not strategy.available
        assert strategy.measure(Path("/x")) is None
        assert runner.calls == []

    def test_parses_du_output(self, runner):
        runner.results["du"] = ProcessResult(0, "12345\t/x\n", "")
        strategy = DuSizeStrategy(runner, which=lambda name: "du")
        assert strategy.measure(Path("/x")) == 12345
        assert runner.calls == [["du", "-sb", "/x"]]

    def test_partial_scan_defers_to_next_strategy(self, runner):
        runner.results["du"] = ProcessResult(1, "4096\t/x\n", "du: cannot read directory '/x': Permission denied")
        assert DuSizeStrategy(runner, which=lambda name: "du").measure(Path("/x")) is None

    def test_unparseable_output(self, runner):
        runner.results["du"] = ProcessResult(1, "", "du: invalid option -- 'b'")
        assert DuSizeStrategy(runner, which=lambda name: "du").measure(Path("/x")) is None


class TestDirectorySizer:
    """Test strategy fallback."""

    def test_missing_path_is_zero(self, tmp_path):
        sizer = DirectorySizer([WalkSizeStrategy(LocalFileSystem())], LocalFileSystem())
        assert sizer.size(tmp_path / "does-not-exist") == 0

    def test_falls_back_when_fast_path_fails(self, runner, tree):
        runner.results["du"] = ProcessResult(1, "", "boom")
        fs = LocalFileSystem()
        sizer = DirectorySizer(
            [DuSizeStrategy(runner, which=lambda name: "du"), WalkSizeStrategy(fs)], fs
        )
        assert sizer.size(tree) == 600

    def test_unreadable_tree_ignores_du_directory_entry(self, runner, tree):
        runner.results["du"] = ProcessResult(1, f"4096\t{tree}\n", "du: Permission denied")
        fs = UnlistableFileSystem()
        sizer = DirectorySizer(
            [DuSizeStrategy(runner, which=lambda name: "du"), WalkSizeStrategy(fs)], fs
        )
        assert sizer.size(tree) == 0

    def test_prefers_fast_path(self, runner, tree):
        runner.results["du"] = ProcessResult(0, "999\t.\n", "")
        fs = LocalFileSystem()
        sizer = DirectorySizer(
            [DuSizeStrategy(runner, which=lambda name: "du"), WalkSizeStrategy(fs)], fs
        )
        assert sizer.size(tree) == 999

    def test_strategy_exception_is_swallowed(self, tree):
        class Broken(WalkSizeStrategy):
            def measure(self, path):
                raise RuntimeError("broken")

        fs = LocalFileSystem()
        sizer = DirectorySizer([Broken(fs), WalkSizeStrategy(fs)], fs)
        assert sizer.size(tree) == 600

    def test_repeated_calls_see_growth(self, tree):
        fs = LocalFileSystem()
        sizer = DirectorySizer([WalkSizeStrategy(fs)], fs)
        assert sizer.size(tree) == 600
        (tree / "new.bin").write_bytes(b"n" * 400)
        assert sizer.size(tree) == 1000


def test_default_sizer_always_ends_with_walk(runner, fs):
    sizer = default_sizer(runner, fs)
    assert isinstance(sizer.strategies[-1], WalkSizeStrategy)
