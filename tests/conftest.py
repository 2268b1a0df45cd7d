"""Root pytest configuration.

Tests marked ``integration`` spawn real API processes and are skipped
unless enabled with ``--run-integration`` / ``RUN_INTEGRATION=1`` or
``--run-all`` / ``RUN_ALL_TESTS=1``.

    tests/
    ├── unit/           # domain, application, auth, config, worker pool
    └── integration/
        ├── api/        # TestClient against per-test SQLite files
        └── e2e/        # spawned API processes (marked integration)
"""

import os
from pathlib import Path

import pytest
from dotenv import load_dotenv

from roster_config import clear_settings_cache

CONFIG_DIR = Path(__file__).resolve().parents[1] / "config"

for _name in (".env.dev", ".env"):
    if (CONFIG_DIR / _name).exists():
        load_dotenv(CONFIG_DIR / _name)
        break


def _enabled(config, option: str, env_var: str) -> bool:
    if config.getoption(option):
        return True
    return os.environ.get(env_var, "").lower() in ("1", "true", "yes")


def pytest_addoption(parser):
    parser.addoption(
        "--run-integration",
        action="store_true",
        help="run tests marked integration",
    )
    parser.addoption("--run-all", action="store_true", help="run every test")


def pytest_configure(config):
    config.addinivalue_line(
        "markers",
        "integration: spawns real API processes; skipped by default",
    )
    config.addinivalue_line("markers", "slow: takes more than a second")


def pytest_collection_modifyitems(config, items):
    if _enabled(config, "--run-all", "RUN_ALL_TESTS") or _enabled(
        config,
        "--run-integration",
        "RUN_INTEGRATION",
    ):
        return

    skip = pytest.mark.skip(reason="needs --run-integration or RUN_INTEGRATION=1")
    for item in items:
        if item.get_closest_marker("integration") is not None:
            item.add_marker(skip)


@pytest.fixture(scope="session", autouse=True)
def fresh_settings_cache():
    clear_settings_cache()
    yield
    clear_settings_cache()
