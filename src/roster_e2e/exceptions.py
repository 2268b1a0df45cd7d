"""Errors raised by the E2E worker pool."""


class E2EError(Exception):
    """Base exception for the E2E orchestration."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class InvalidStateTransition(E2EError):  # NOQA: N818
    """Raised when a server is moved to a state its current state cannot reach."""

    def __init__(self, name: str, current, target):
        self.current = current
        self.target = target
        super().__init__(
            f"{name}: cannot transition from {current.value} to {target.value}",
        )


class PortUnavailableError(E2EError):
    """Raised when no free port can be found for a worker."""

    def __init__(self, start_port: int, max_port: int):
        self.start_port = start_port
        self.max_port = max_port
        super().__init__(f"No available port between {start_port} and {max_port}")


class HealthCheckError(E2EError):
    """Raised when a server never becomes healthy."""


class WorkerStartupError(E2EError):
    """Raised when a worker's servers fail to start."""

    def __init__(self, worker_index: int, reason: str):
        self.worker_index = worker_index
        self.reason = reason
        super().__init__(f"Worker {worker_index} failed to start: {reason}")
