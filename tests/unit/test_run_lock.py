"""Tests for the single-instance run lock."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from asmforge.core.run_lock import RunLock
from asmforge.errors import PipelineLockedError


class TestRunLock:
    def test_creates_and_removes_file(self, tmp_dir: Path):
        path = tmp_dir / "state" / "run.lock"
        with RunLock(path) as lock:
            assert lock.held
            assert path.read_text(encoding="ascii").strip() == str(os.getpid())
        assert not path.exists()
        assert not lock.held

    def test_second_holder_refused(self, tmp_dir: Path):
        path = tmp_dir / "run.lock"
        with RunLock(path):
            with pytest.raises(PipelineLockedError, match=str(os.getpid())):
                RunLock(path).acquire()
        assert not path.exists()

    def test_stale_lock_blocks(self, tmp_dir: Path):
        path = tmp_dir / "run.lock"
        path.write_text("99999\n", encoding="ascii")
        with pytest.raises(PipelineLockedError, match="99999"):
            with RunLock(path):
                pass
        # someone else's lock is never removed
        assert path.exists()

    def test_released_on_error(self, tmp_dir: Path):
        path = tmp_dir / "run.lock"
        with pytest.raises(ValueError):
            with RunLock(path):
                raise ValueError("boom")
        assert not path.exists()

    def test_release_is_idempotent(self, tmp_dir: Path):
        lock = RunLock(tmp_dir / "run.lock")
        lock.release()
        lock.acquire()
        lock.release()
        lock.release()
        assert not lock.path.exists()
