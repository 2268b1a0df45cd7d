"""Unit tests for the worker lookup helpers of the pytest plugin."""

from pathlib import Path

import pytest

from roster_e2e.pytest_plugin import E2EServer, server_from_env, worker_index_from_env


@pytest.mark.parametrize(
    ("environ", "expected"),
    [
        ({}, 0),
        ({"PYTEST_XDIST_WORKER": "gw0"}, 0),
        ({"PYTEST_XDIST_WORKER": "gw3"}, 3),
        ({"PYTEST_XDIST_WORKER": "gw12"}, 12),
        ({"PYTEST_XDIST_WORKER": "master"}, 0),
    ],
)
def test_worker_index_from_env(environ, expected):
    assert worker_index_from_env(environ) == expected


def test_server_from_env_reads_announced_urls():
    environ = {
        "API_URL_2": "http://127.0.0.1:5174",
        "FRONTEND_URL_2": "http://127.0.0.1:4220",
        "DATABASE_PATH_2": "/tmp/CrudTest_Worker2_1.db",
    }

    assert server_from_env(2, environ) == E2EServer(
        worker_index=2,
        api_url="http://127.0.0.1:5174",
        frontend_url="http://127.0.0.1:4220",
        database_path=Path("/tmp/CrudTest_Worker2_1.db"),
    )


def test_server_from_env_without_announcement():
    assert server_from_env(0, {"API_URL_1": "http://127.0.0.1:5173"}) is None


def test_server_from_env_api_only():
    server = server_from_env(0, {"API_URL_0": "http://127.0.0.1:5172"})

    assert server.frontend_url is None
    assert server.database_path is None
