"""Configuration of the E2E worker pool.

Every field can be set through an ``E2E_``-prefixed environment variable,
for example ``E2E_API_BASE_PORT=6100`` or ``E2E_KILL_EXISTING_SERVERS=true``.
List fields take JSON (``E2E_FRONTEND_COMMAND='["npm", "start"]'``).
"""

import sys
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_API_COMMAND = [
    sys.executable,
    "-m",
    "uvicorn",
    "roster.presentation.api.app:create_app",
    "--factory",
    "--host",
    "{host}",
    "--port",
    "{port}",
]

DEFAULT_FRONTEND_COMMAND = [
    "npm",
    "start",
    "--",
    "--port={port}",
    "--proxy-config={proxy_config}",
    "--live-reload=false",
    "--hmr=false",
]


class E2ESettings(BaseSettings):
    """Worker pool settings loaded from ``E2E_*`` environment variables."""

    model_config = SettingsConfigDict(env_prefix="E2E_", extra="ignore")

    # Ports
    host: str = "127.0.0.1"
    api_base_port: int = 5172
    frontend_base_port: int = 4200
    frontend_port_stride: int = 10
    port_search_range: int = 100

    # Commands; {host}, {port}, {api_port} and {proxy_config} are substituted
    api_command: list[str] = Field(default_factory=lambda: list(DEFAULT_API_COMMAND))
    api_cwd: Path | None = None
    api_env: dict[str, str] = Field(default_factory=dict)
    frontend_command: list[str] = Field(
        default_factory=lambda: list(DEFAULT_FRONTEND_COMMAND),
    )
    frontend_cwd: Path | None = None
    enable_frontend: bool = False

    # Timing (seconds)
    api_startup_timeout: float = 60.0
    frontend_startup_timeout: float = 300.0
    poll_interval: float = 0.5
    request_timeout: float = 5.0
    stop_grace_period: float = 5.0

    # Databases
    temp_dir: Path | None = None
    db_prefix: str = "CrudTest"
    stale_database_hours: float = 1.0

    # Behaviour
    kill_existing_servers: bool = False
    cleanup_before_tests: bool = True
    keep_databases: bool = False
    max_concurrent_startups: int = Field(default=2, ge=1)

    # State file
    state_file: Path = Path(".test-servers.json")
    state_file_max_age: float = 600.0
    reuse_servers: bool = False

    # Logs of the spawned servers; defaults to the temp dir
    log_dir: Path | None = None


@lru_cache
def get_e2e_settings() -> E2ESettings:
    return E2ESettings()
