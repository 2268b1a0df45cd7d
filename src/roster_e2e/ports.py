"""Port planning, probing and reservation for E2E workers.

Worker ``i`` is planned on API port ``api_base_port + i`` and frontend port
``frontend_base_port + i * frontend_port_stride``. The allocator is the only
place that hands out ports, so a port it has given to one worker is never
given to another until released.
"""

import logging
import os
import re
import signal
import socket
import subprocess
import threading
from dataclasses import dataclass
from typing import Callable

from roster_e2e.exceptions import PortUnavailableError

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_RANGE = 100


def is_port_available(port: int, host: str = "127.0.0.1") -> bool:
    """Return True when nothing is listening on ``host:port``."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.bind((host, port))
        except OSError:
            return False
    return True


def find_pids_on_port(port: int) -> list[int]:
    """PIDs of processes listening on ``port`` (lsof on POSIX, netstat on Windows)."""
    if os.name == "nt":
        command = ["netstat", "-ano", "-p", "TCP"]
    else:
        command = ["lsof", "-ti", f"tcp:{port}", "-sTCP:LISTEN"]

    try:
        proc = subprocess.run(
            command,
            capture_output=True,
            text=True,
            timeout=5,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.debug("Could not look up processes on port %d: %s", port, e)
        return []

    pids: set[int] = set()
    if os.name == "nt":
        pattern = re.compile(rf"[:.]{port}\s+\S+\s+LISTENING\s+(\d+)")
        for line in proc.stdout.splitlines():
            match = pattern.search(line)
            if match:
                pids.add(int(match.group(1)))
    else:
        pids.update(int(pid) for pid in proc.stdout.split() if pid.isdigit())

    pids.discard(0)
    pids.discard(os.getpid())
    return sorted(pids)


def kill_process_on_port(port: int) -> list[int]:
    """Kill every process listening on ``port``. Returns the killed PIDs."""
    killed = []
    for pid in find_pids_on_port(port):
        try:
            if os.name == "nt":
                subprocess.run(
                    ["taskkill", "/F", "/T", "/PID", str(pid)],
                    capture_output=True,
                    check=False,
                )
            else:
                os.kill(pid, signal.SIGKILL)
        except ProcessLookupError:
            continue
        except OSError as e:
            logger.warning("Failed to kill process %d on port %d: %s", pid, port, e)
            continue
        logger.info("Killed process %d on port %d", pid, port)
        killed.append(pid)
    return killed


@dataclass(frozen=True)
class PortPlan:
    """Ports assigned to one worker. ``frontend_port`` is None for API-only runs."""

    worker_index: int
    api_port: int
    frontend_port: int | None = None

    @property
    def ports(self) -> tuple[int, ...]:
        if self.frontend_port is None:
            return (self.api_port,)
        return (self.api_port, self.frontend_port)


@dataclass(frozen=True)
class PortConflict:
    worker_index: int
    port: int
    role: str
    pids: tuple[int, ...] = ()


class PortAllocator:
    """Single source of truth for the ports used by E2E workers."""

    def __init__(  # NOQA: PLR0913
        self,
        api_base_port: int = 5172,
        frontend_base_port: int = 4200,
        frontend_port_stride: int = 10,
        search_range: int = DEFAULT_SEARCH_RANGE,
        host: str = "127.0.0.1",
        kill_existing: bool = False,
        is_free: Callable[[int], bool] | None = None,
        killer: Callable[[int], list[int]] = kill_process_on_port,
        pid_lookup: Callable[[int], list[int]] = find_pids_on_port,
    ):
        self.api_base_port = api_base_port
        self.frontend_base_port = frontend_base_port
        self.frontend_port_stride = frontend_port_stride
        self.search_range = search_range
        self.host = host
        self.kill_existing = kill_existing
        self._is_free = is_free or (lambda port: is_port_available(port, host))
        self._killer = killer
        self._pid_lookup = pid_lookup
        self._reserved: dict[int, int] = {}
        self._lock = threading.Lock()

    def planned_api_port(self, worker_index: int) -> int:
        return self.api_base_port + worker_index

    def planned_frontend_port(self, worker_index: int) -> int:
        return self.frontend_base_port + worker_index * self.frontend_port_stride

    def plan(self, worker_index: int, with_frontend: bool = False) -> PortPlan:
        """The nominal ports of a worker, without probing or reserving."""
        return PortPlan(
            worker_index=worker_index,
            api_port=self.planned_api_port(worker_index),
            frontend_port=(
                self.planned_frontend_port(worker_index) if with_frontend else None
            ),
        )

    @property
    def reserved(self) -> dict[int, int]:
        """Reserved port -> worker index."""
        with self._lock:
            return dict(self._reserved)

    def find_available_port(self, start_port: int, max_port: int | None = None) -> int:
        """First port from ``start_port`` that is neither reserved nor busy."""
        if max_port is None:
            max_port = start_port + self.search_range
        for port in range(start_port, max_port + 1):
            if port in self._reserved:
                continue
            if self._is_free(port):
                return port
        raise PortUnavailableError(start_port, max_port)

    def _claim(self, worker_index: int, preferred: int, role: str) -> int:
        if preferred not in self._reserved and self._is_free(preferred):
            port = preferred
        elif preferred not in self._reserved and self.kill_existing:
            logger.warning(
                "%s port %d for worker %d is busy, killing its owner",
                role,
                preferred,
                worker_index,
            )
            self._killer(preferred)
            port = (
                preferred
                if self._is_free(preferred)
                else self.find_available_port(preferred + 1)
            )
        else:
            port = self.find_available_port(preferred + 1)
            logger.info(
                "%s port %d for worker %d unavailable, using %d",
                role,
                preferred,
                worker_index,
                port,
            )
        self._reserved[port] = worker_index
        return port

    def allocate(self, worker_index: int, with_frontend: bool = False) -> PortPlan:
        """Check and reserve the ports of a worker."""
        with self._lock:
            existing = sorted(
                port for port, index in self._reserved.items() if index == worker_index
            )
            if existing:
                msg = f"Worker {worker_index} already holds ports {existing}"
                raise ValueError(msg)

            try:
                api_port = self._claim(
                    worker_index,
                    self.planned_api_port(worker_index),
                    "API",
                )
                frontend_port = None
                if with_frontend:
                    frontend_port = self._claim(
                        worker_index,
                        self.planned_frontend_port(worker_index),
                        "Frontend",
                    )
            except PortUnavailableError:
                self._release_locked(worker_index)
                raise

        plan = PortPlan(worker_index, api_port, frontend_port)
        logger.debug("Allocated ports for worker %d: %s", worker_index, plan.ports)
        return plan

    def reserve(self, plan: PortPlan) -> None:
        """Reserve the ports of a server that is already running."""
        with self._lock:
            for port in plan.ports:
                owner = self._reserved.get(port)
                if owner is not None and owner != plan.worker_index:
                    msg = f"Port {port} is reserved by worker {owner}"
                    raise ValueError(msg)
            for port in plan.ports:
                self._reserved[port] = plan.worker_index

    def _release_locked(self, worker_index: int) -> list[int]:
        ports = [
            port for port, index in self._reserved.items() if index == worker_index
        ]
        for port in ports:
            del self._reserved[port]
        return ports

    def release(self, worker_index: int) -> list[int]:
        with self._lock:
            ports = self._release_locked(worker_index)
        if ports:
            logger.debug("Released ports for worker %d: %s", worker_index, ports)
        return ports

    def scan(
        self,
        worker_count: int,
        with_frontend: bool = False,
    ) -> list[PortConflict]:
        """Report every planned port that is currently busy."""
        conflicts = []
        for index in range(worker_count):
            plan = self.plan(index, with_frontend)
            roles = [("api", plan.api_port)]
            if plan.frontend_port is not None:
                roles.append(("frontend", plan.frontend_port))
            for role, port in roles:
                if port in self._reserved or self._is_free(port):
                    continue
                conflicts.append(
                    PortConflict(
                        worker_index=index,
                        port=port,
                        role=role,
                        pids=tuple(self._pid_lookup(port)),
                    ),
                )
        return conflicts

    def free_ports(self, conflicts: list[PortConflict]) -> list[int]:
        """Kill the owners of conflicting ports. Returns the killed PIDs."""
        killed: list[int] = []
        for conflict in conflicts:
            killed.extend(self._killer(conflict.port))
        return killed
