"""Per-worker SQLite database files.

Every worker gets its own file ``<temp>/<prefix>_Worker<index>_<ms>.db`` so
that parallel workers never share data.
"""

import logging
import os
import tempfile
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

logger = logging.getLogger(__name__)

DEFAULT_PREFIX = "CrudTest"
SQLITE_SIDECAR_SUFFIXES = ("-wal", "-shm", "-journal")


def get_temp_directory() -> Path:
    """TEMP, TMP or TMPDIR when set, otherwise the platform temp directory."""
    for name in ("TEMP", "TMP", "TMPDIR"):
        value = os.environ.get(name)
        if value:
            return Path(value)
    return Path(tempfile.gettempdir())


@dataclass(frozen=True)
class WorkerDatabase:
    worker_index: int
    path: Path

    @classmethod
    def create(
        cls,
        worker_index: int,
        prefix: str = DEFAULT_PREFIX,
        temp_dir: Path | None = None,
        now_ms: int | None = None,
    ) -> "WorkerDatabase":
        directory = temp_dir or get_temp_directory()
        directory.mkdir(parents=True, exist_ok=True)
        stamp = now_ms if now_ms is not None else int(time.time() * 1000)
        return cls(
            worker_index=worker_index,
            path=directory / f"{prefix}_Worker{worker_index}_{stamp}.db",
        )

    @property
    def url(self) -> str:
        """SQLAlchemy URL for the async API process."""
        return f"sqlite+aiosqlite:///{self.path.as_posix()}"

    def exists(self) -> bool:
        return self.path.exists()

    def size(self) -> int:
        try:
            return self.path.stat().st_size
        except FileNotFoundError:
            return 0

    def delete(self, max_retries: int = 5, retry_delay: float = 1.0) -> bool:
        return delete_database(
            self.path,
            max_retries=max_retries,
            retry_delay=retry_delay,
        )


def _sidecars(db_path: Path) -> list[Path]:
    return [
        db_path.with_name(db_path.name + suffix) for suffix in SQLITE_SIDECAR_SUFFIXES
    ]


def delete_database(
    db_path: Path,
    max_retries: int = 5,
    retry_delay: float = 1.0,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """
    Delete a SQLite file together with its WAL/SHM siblings.

    A file locked by a process that is still shutting down raises
    ``PermissionError``; the deletion is retried after ``retry_delay * attempt``
    seconds. A missing file counts as deleted.

    Returns
    -------
    True when no file is left behind.
    """
    remaining = [db_path, *_sidecars(db_path)]
    for attempt in range(1, max_retries + 1):
        still_locked = []
        for path in remaining:
            try:
                path.unlink()
            except FileNotFoundError:
                continue
            except PermissionError:
                still_locked.append(path)

        if not still_locked:
            logger.debug("Deleted database %s", db_path.name)
            return True

        remaining = still_locked
        if attempt < max_retries:
            logger.info(
                "Database %s locked, retrying (%d/%d)",
                db_path.name,
                attempt,
                max_retries,
            )
            sleep(retry_delay * attempt)

    logger.warning(
        "Failed to delete %s after %d attempts",
        ", ".join(path.name for path in remaining),
        max_retries,
    )
    return False


def find_databases(
    prefix: str = DEFAULT_PREFIX,
    temp_dir: Path | None = None,
) -> list[Path]:
    directory = temp_dir or get_temp_directory()
    if not directory.is_dir():
        return []
    return sorted(directory.glob(f"{prefix}_*.db"))


def cleanup_stale_databases(
    older_than_hours: float = 1.0,
    prefix: str = DEFAULT_PREFIX,
    temp_dir: Path | None = None,
    now: float | None = None,
) -> list[Path]:
    """Delete test databases last modified more than ``older_than_hours`` ago."""
    current = now if now is not None else time.time()
    deleted = []
    for path in find_databases(prefix, temp_dir):
        try:
            age_hours = (current - path.stat().st_mtime) / 3600
        except FileNotFoundError:
            continue
        if age_hours > older_than_hours and delete_database(path, max_retries=3):
            logger.info(
                "Cleaned up old database %s (%.1f hours old)",
                path.name,
                age_hours,
            )
            deleted.append(path)
    return deleted


def cleanup_all_databases(
    prefix: str = DEFAULT_PREFIX,
    temp_dir: Path | None = None,
) -> list[Path]:
    deleted = [
        path
        for path in find_databases(prefix, temp_dir)
        if delete_database(path, max_retries=3)
    ]
    if deleted:
        logger.info("Deleted %d test database(s)", len(deleted))
    return deleted
