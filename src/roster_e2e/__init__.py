"""Per-worker API servers for parallel end-to-end test runs.

Each test worker gets its own API process, SQLite file and ports, all
derived from the worker index, and every server moves through the same
lifecycle: idle, starting, healthy, stopping, stopped.
"""

from roster_e2e.databases import (
    WorkerDatabase,
    cleanup_all_databases,
    cleanup_stale_databases,
    delete_database,
    get_temp_directory,
)
from roster_e2e.exceptions import (
    E2EError,
    HealthCheckError,
    InvalidStateTransition,
    PortUnavailableError,
    WorkerStartupError,
)
from roster_e2e.orchestration import global_setup, global_teardown
from roster_e2e.pool import WorkerPool, WorkerServer
from roster_e2e.ports import PortAllocator, PortConflict, PortPlan
from roster_e2e.settings import E2ESettings, get_e2e_settings
from roster_e2e.state_file import RecordedServer, ServerStateFile
from roster_e2e.states import LifecycleStateMachine, ServerState

__all__ = [
    "E2EError",
    "E2ESettings",
    "HealthCheckError",
    "InvalidStateTransition",
    "LifecycleStateMachine",
    "PortAllocator",
    "PortConflict",
    "PortPlan",
    "PortUnavailableError",
    "RecordedServer",
    "ServerState",
    "ServerStateFile",
    "WorkerDatabase",
    "WorkerPool",
    "WorkerServer",
    "WorkerStartupError",
    "cleanup_all_databases",
    "cleanup_stale_databases",
    "delete_database",
    "get_e2e_settings",
    "get_temp_directory",
    "global_setup",
    "global_teardown",
]
