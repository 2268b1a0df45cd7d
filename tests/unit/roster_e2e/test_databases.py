"""Unit tests for per-worker database files."""

import os
import time
from pathlib import Path

import pytest

from roster_e2e.databases import (
    WorkerDatabase,
    cleanup_all_databases,
    cleanup_stale_databases,
    delete_database,
    find_databases,
    get_temp_directory,
)


class TestWorkerDatabase:
    def test_name_carries_prefix_worker_and_timestamp(self, tmp_path):
        database = WorkerDatabase.create(3, temp_dir=tmp_path, now_ms=1700000000123)

        assert database.path == tmp_path / "CrudTest_Worker3_1700000000123.db"
        assert database.url == f"sqlite+aiosqlite:///{database.path.as_posix()}"

    def test_workers_get_different_files(self, tmp_path):
        first = WorkerDatabase.create(0, temp_dir=tmp_path, now_ms=1)
        second = WorkerDatabase.create(1, temp_dir=tmp_path, now_ms=1)

        assert first.path != second.path

    def test_size_and_delete(self, tmp_path):
        database = WorkerDatabase.create(0, temp_dir=tmp_path)
        database.path.write_bytes(b"x" * 10)

        assert database.exists()
        assert database.size() == 10
        assert database.delete()
        assert not database.exists()
        assert database.size() == 0


class TestTempDirectory:
    def test_prefers_temp_variables(self, monkeypatch, tmp_path):
        monkeypatch.setenv("TEMP", str(tmp_path))

        assert get_temp_directory() == tmp_path

    def test_falls_back_to_tempfile(self, monkeypatch):
        for name in ("TEMP", "TMP", "TMPDIR"):
            monkeypatch.delenv(name, raising=False)

        assert isinstance(get_temp_directory(), Path)


class TestDeleteDatabase:
    def test_removes_sidecars(self, tmp_path):
        db_path = tmp_path / "CrudTest_Worker0_1.db"
        for suffix in ("", "-wal", "-shm"):
            Path(f"{db_path}{suffix}").write_text("data")

        assert delete_database(db_path)
        assert list(tmp_path.iterdir()) == []

    def test_missing_file_counts_as_deleted(self, tmp_path):
        assert delete_database(tmp_path / "missing.db")

    def test_retries_locked_file_with_linear_backoff(self, tmp_path, monkeypatch):
        db_path = tmp_path / "locked.db"
        db_path.write_text("data")
        original_unlink = Path.unlink
        attempts = {"count": 0}

        def flaky_unlink(self, *args, **kwargs):
            if self == db_path and attempts["count"] < 2:
                attempts["count"] += 1
                raise PermissionError("in use")
            return original_unlink(self, *args, **kwargs)

        monkeypatch.setattr(Path, "unlink", flaky_unlink)
        sleeps: list[float] = []

        assert delete_database(db_path, retry_delay=0.5, sleep=sleeps.append)
        assert sleeps == [0.5, 1.0]
        assert not db_path.exists()

    def test_gives_up_after_max_retries(self, tmp_path, monkeypatch):
        db_path = tmp_path / "stuck.db"
        db_path.write_text("data")

        def locked_unlink(self, *args, **kwargs):
            raise PermissionError("in use")

        monkeypatch.setattr(Path, "unlink", locked_unlink)
        sleeps: list[float] = []

        assert not delete_database(db_path, max_retries=3, sleep=sleeps.append)
        assert len(sleeps) == 2


class TestCleanup:
    @pytest.fixture
    def databases(self, tmp_path):
        old = tmp_path / "CrudTest_Worker0_1.db"
        new = tmp_path / "CrudTest_Worker1_2.db"
        other = tmp_path / "Unrelated.db"
        for path in (old, new, other):
            path.write_text("data")
        two_hours_ago = time.time() - 2 * 3600
        os.utime(old, (two_hours_ago, two_hours_ago))
        return old, new, other

    def test_find_matches_prefix_only(self, tmp_path, databases):
        old, new, _ = databases

        assert find_databases(temp_dir=tmp_path) == sorted([old, new])

    def test_stale_cleanup_keeps_recent_files(self, tmp_path, databases):
        old, new, other = databases

        deleted = cleanup_stale_databases(older_than_hours=1, temp_dir=tmp_path)

        assert deleted == [old]
        assert new.exists()
        assert other.exists()

    def test_cleanup_all(self, tmp_path, databases):
        old, new, other = databases

        deleted = cleanup_all_databases(temp_dir=tmp_path)

        assert sorted(deleted) == sorted([old, new])
        assert other.exists()

    def test_missing_directory(self, tmp_path):
        assert find_databases(temp_dir=tmp_path / "nope") == []
