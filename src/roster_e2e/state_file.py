"""JSON record of the running worker servers.

Lets a later process (teardown, status, a re-run) find servers started by
an earlier one.
"""

import json
import logging
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Iterable

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordedServer:
    worker_index: int
    host: str
    api_port: int
    database: str
    started_at: float
    frontend_port: int | None = None
    api_pid: int | None = None
    frontend_pid: int | None = None

    @property
    def api_url(self) -> str:
        return f"http://{self.host}:{self.api_port}"

    @property
    def frontend_url(self) -> str | None:
        if self.frontend_port is None:
            return None
        return f"http://{self.host}:{self.frontend_port}"

    @property
    def database_path(self) -> Path:
        return Path(self.database)

    def age(self, now: float | None = None) -> float:
        return (now if now is not None else time.time()) - self.started_at

    @classmethod
    def from_dict(cls, data: dict) -> "RecordedServer":
        return cls(
            worker_index=int(data["worker_index"]),
            host=data.get("host", "127.0.0.1"),
            api_port=int(data["api_port"]),
            database=data["database"],
            started_at=float(data["started_at"]),
            frontend_port=data.get("frontend_port"),
            api_pid=data.get("api_pid"),
            frontend_pid=data.get("frontend_pid"),
        )


class ServerStateFile:
    """Reads and writes ``.test-servers.json``."""

    def __init__(self, path: Path):
        self.path = path

    def write(self, servers: Iterable[RecordedServer]) -> None:
        payload = {
            "updated_at": time.time(),
            "servers": {
                str(server.worker_index): asdict(server)
                for server in sorted(servers, key=lambda s: s.worker_index)
            },
        }
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        tmp_path.replace(self.path)
        logger.debug("Wrote %d server(s) to %s", len(payload["servers"]), self.path)

    def read(self) -> list[RecordedServer]:
        """All recorded servers; an unreadable file reads as empty."""
        if not self.path.exists():
            return []
        try:
            payload = json.loads(self.path.read_text(encoding="utf-8"))
            return [
                RecordedServer.from_dict(entry)
                for entry in payload.get("servers", {}).values()
            ]
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.warning("Ignoring unreadable state file %s: %s", self.path, e)
            return []

    def fresh(
        self,
        max_age: float,
        now: float | None = None,
    ) -> dict[int, RecordedServer]:
        """Servers recorded less than ``max_age`` seconds ago, by worker index."""
        return {
            server.worker_index: server
            for server in self.read()
            if server.age(now) < max_age
        }

    def remove(self) -> bool:
        try:
            self.path.unlink()
        except FileNotFoundError:
            return False
        logger.debug("Removed state file %s", self.path)
        return True
