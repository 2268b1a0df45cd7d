"""Child processes of the worker pool (API and frontend dev servers)."""

import asyncio
import logging
import os
import signal
import subprocess
import sys
import time
from pathlib import Path
from typing import IO, Mapping, Sequence

logger = logging.getLogger(__name__)


def pid_running(pid: int | None) -> bool:
    if pid is None or pid <= 0:
        return False
    if os.name == "nt":
        proc = subprocess.run(
            ["tasklist", "/FI", f"PID eq {pid}", "/NH"],
            capture_output=True,
            text=True,
            check=False,
        )
        return str(pid) in proc.stdout
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        # Exists but owned by someone else
        return True
    return True


def terminate_pid(pid: int, grace_period: float = 5.0) -> None:
    """SIGTERM a process we no longer hold a handle for, then SIGKILL it."""
    if not pid_running(pid):
        return
    if os.name == "nt":
        subprocess.run(
            ["taskkill", "/PID", str(pid), "/T", "/F"],
            check=False,
            capture_output=True,
        )
        return
    try:
        os.kill(pid, signal.SIGTERM)
    except ProcessLookupError:
        return
    deadline = time.monotonic() + grace_period
    while time.monotonic() < deadline:
        if not pid_running(pid):
            return
        time.sleep(0.1)
    logger.warning("Process %d ignored SIGTERM, killing it", pid)
    try:
        os.kill(pid, signal.SIGKILL)
    except ProcessLookupError:
        pass


class ManagedProcess:
    """
    A long-running server process with output captured to a log file.

    On POSIX the process leads its own session so that stopping it also
    stops the children it spawned (``npm`` starting ``ng serve``).
    """

    def __init__(  # NOQA: PLR0913
        self,
        name: str,
        command: Sequence[str],
        env: Mapping[str, str] | None = None,
        cwd: Path | None = None,
        log_path: Path | None = None,
    ):
        self.name = name
        self.command = list(command)
        self.env = dict(env) if env is not None else None
        self.cwd = cwd
        self.log_path = log_path
        self._process: asyncio.subprocess.Process | None = None
        self._log_file: IO[bytes] | None = None

    @property
    def pid(self) -> int | None:
        return self._process.pid if self._process is not None else None

    @property
    def returncode(self) -> int | None:
        return self._process.returncode if self._process is not None else None

    def is_running(self) -> bool:
        return self._process is not None and self._process.returncode is None

    async def start(self) -> None:
        if self.is_running():
            msg = f"{self.name} is already running (pid {self.pid})"
            raise RuntimeError(msg)

        stdout: IO[bytes] | int = subprocess.DEVNULL
        if self.log_path is not None:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
            self._log_file = self.log_path.open("ab")
            stdout = self._log_file

        kwargs = {}
        if sys.platform == "win32":
            kwargs["creationflags"] = subprocess.CREATE_NEW_PROCESS_GROUP
        else:
            kwargs["start_new_session"] = True

        try:
            self._process = await asyncio.create_subprocess_exec(
                *self.command,
                cwd=str(self.cwd) if self.cwd else None,
                env=self.env,
                stdin=subprocess.DEVNULL,
                stdout=stdout,
                stderr=subprocess.STDOUT,
                **kwargs,
            )
        except OSError:
            self._close_log()
            raise

        logger.info(
            "Started %s (pid %d): %s",
            self.name,
            self.pid,
            " ".join(self.command),
        )

    def _signal(self, sig: int) -> None:
        if self._process is None:
            return
        try:
            if sys.platform == "win32":
                self._process.kill()
            else:
                os.killpg(self._process.pid, sig)
        except ProcessLookupError:
            pass

    async def stop(self, grace_period: float = 5.0) -> int | None:
        """SIGTERM the process group, then SIGKILL it after ``grace_period``."""
        if self._process is None:
            return None

        if self.is_running():
            logger.info("Stopping %s (pid %d)", self.name, self.pid)
            self._signal(signal.SIGTERM)
            try:
                await asyncio.wait_for(self._process.wait(), timeout=grace_period)
            except asyncio.TimeoutError:
                logger.warning(
                    "%s did not exit within %.1fs, killing it",
                    self.name,
                    grace_period,
                )
                self._signal(signal.SIGKILL)
                await self._process.wait()

        self._close_log()
        return self._process.returncode

    def _close_log(self) -> None:
        if self._log_file is not None:
            self._log_file.close()
            self._log_file = None

    def tail_log(self, lines: int = 20) -> str:
        """Last lines of the captured output, for startup error reports."""
        if self.log_path is None or not self.log_path.exists():
            return ""
        content = self.log_path.read_text(encoding="utf-8", errors="replace")
        return "\n".join(content.splitlines()[-lines:])

    def __repr__(self) -> str:
        return f"ManagedProcess(name={self.name!r}, pid={self.pid})"
