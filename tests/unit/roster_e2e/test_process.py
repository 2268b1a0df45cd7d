"""ManagedProcess and the pid helpers against real child processes."""

import asyncio
import os
import signal
import subprocess
import sys
import threading
import time

import pytest

from roster_e2e.process import ManagedProcess, pid_running, terminate_pid

pytestmark = pytest.mark.skipif(
    sys.platform == "win32",
    reason="signals and process groups are POSIX only",
)

SLEEPER = "import time; time.sleep(30)"
ANNOUNCER = "print('listening on 5172', flush=True); import time; time.sleep(30)"
# Prints once the SIGTERM handler is in place so tests never signal too early
STUBBORN = (
    "import signal, time\n"
    "signal.signal(signal.SIGTERM, signal.SIG_IGN)\n"
    "print('ready', flush=True)\n"
    "time.sleep(30)\n"
)


def python(code: str) -> list[str]:
    return [sys.executable, "-c", code]


async def wait_for_log(process: ManagedProcess, text: str, timeout: float = 10.0):
    deadline = time.monotonic() + timeout
    while text not in process.tail_log():
        if time.monotonic() > deadline:
            pytest.fail(f"{text!r} never appeared in {process.name} output")
        await asyncio.sleep(0.05)


async def wait_until_exited(process: ManagedProcess, timeout: float = 10.0):
    deadline = time.monotonic() + timeout
    while process.is_running():
        if time.monotonic() > deadline:
            pytest.fail(f"{process.name} did not exit")
        await asyncio.sleep(0.05)


class TestManagedProcess:
    async def test_output_goes_to_log_file(self, tmp_path):
        log_path = tmp_path / "logs" / "api.log"
        process = ManagedProcess(
            "api-0",
            python(ANNOUNCER),
            log_path=log_path,
        )

        await process.start()
        try:
            await wait_for_log(process, "listening on 5172")
            assert process.is_running()
            assert pid_running(process.pid)
        finally:
            await process.stop(grace_period=5)

        assert not process.is_running()
        assert log_path.read_text().startswith("listening on 5172")

    async def test_tail_log_keeps_last_lines(self, tmp_path):
        process = ManagedProcess(
            "api-0",
            python("for i in range(30): print(f'line {i}', flush=True)"),
            log_path=tmp_path / "api.log",
        )

        await process.start()
        await wait_until_exited(process)
        await process.stop()

        assert process.tail_log(lines=3).splitlines() == [
            "line 27",
            "line 28",
            "line 29",
        ]

    async def test_stop_sends_sigterm(self, tmp_path):
        process = ManagedProcess("api-0", python(SLEEPER), log_path=tmp_path / "a.log")
        await process.start()

        returncode = await process.stop(grace_period=5)

        assert returncode == -signal.SIGTERM

    async def test_stop_escalates_to_sigkill(self, tmp_path):
        process = ManagedProcess("api-0", python(STUBBORN), log_path=tmp_path / "a.log")
        await process.start()
        await wait_for_log(process, "ready")

        started = time.monotonic()
        returncode = await process.stop(grace_period=0.5)

        assert returncode == -signal.SIGKILL
        assert time.monotonic() - started >= 0.5

    async def test_stop_after_exit_returns_exit_code(self, tmp_path):
        process = ManagedProcess(
            "api-0",
            python("import sys; sys.exit(3)"),
            log_path=tmp_path / "a.log",
        )
        await process.start()
        await wait_until_exited(process)

        assert await process.stop() == 3
        assert process.returncode == 3

    async def test_stop_before_start_returns_none(self):
        assert await ManagedProcess("api-0", python(SLEEPER)).stop() is None

    async def test_start_twice_is_rejected(self, tmp_path):
        process = ManagedProcess("api-0", python(SLEEPER), log_path=tmp_path / "a.log")
        await process.start()
        try:
            with pytest.raises(RuntimeError, match="already running"):
                await process.start()
        finally:
            await process.stop(grace_period=5)

    async def test_missing_executable_raises(self, tmp_path):
        process = ManagedProcess(
            "api-0",
            [str(tmp_path / "no-such-binary")],
            log_path=tmp_path / "a.log",
        )

        with pytest.raises(OSError):
            await process.start()
        assert not process.is_running()


def _spawn_reaped(code: str) -> subprocess.Popen:
    """A child that is reaped as soon as it exits, like a foreign process."""
    proc = subprocess.Popen(python(code), stdout=subprocess.PIPE, text=True)
    threading.Thread(target=proc.wait, daemon=True).start()
    return proc


class TestPidHelpers:
    @pytest.mark.parametrize("pid", [None, 0, -1])
    def test_invalid_pids_are_not_running(self, pid):
        assert pid_running(pid) is False

    def test_own_pid_is_running(self):
        assert pid_running(os.getpid())

    def test_reaped_child_is_not_running(self):
        proc = subprocess.Popen(python("pass"))
        proc.wait(timeout=10)

        assert not pid_running(proc.pid)

    def test_terminate_pid_uses_sigterm(self):
        proc = _spawn_reaped(SLEEPER)

        terminate_pid(proc.pid, grace_period=5)

        assert proc.wait(timeout=5) == -signal.SIGTERM

    def test_terminate_pid_kills_after_grace_period(self):
        proc = _spawn_reaped(STUBBORN)
        assert proc.stdout.readline().strip() == "ready"

        terminate_pid(proc.pid, grace_period=0.5)

        assert proc.wait(timeout=5) == -signal.SIGKILL

    def test_terminate_pid_ignores_dead_process(self):
        proc = subprocess.Popen(python("pass"))
        proc.wait(timeout=10)

        terminate_pid(proc.pid, grace_period=0.1)
