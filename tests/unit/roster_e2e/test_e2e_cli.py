"""Unit tests for the roster-e2e commands that need no running servers."""

import os
import time

import pytest
from typer.testing import CliRunner

from roster_e2e.cli import app
from roster_e2e.settings import get_e2e_settings

runner = CliRunner()


@pytest.fixture(autouse=True)
def e2e_env(tmp_path, monkeypatch):
    monkeypatch.setenv("E2E_TEMP_DIR", str(tmp_path))
    monkeypatch.setenv("E2E_STATE_FILE", str(tmp_path / ".test-servers.json"))
    get_e2e_settings.cache_clear()
    yield
    get_e2e_settings.cache_clear()


def test_cleanup_dbs_deletes_all_by_default(tmp_path):
    for index in range(2):
        (tmp_path / f"CrudTest_Worker{index}_1.db").write_text("data")

    result = runner.invoke(app, ["cleanup-dbs"])

    assert result.exit_code == 0
    assert "Deleted 2 database(s)" in result.output
    assert list(tmp_path.glob("*.db")) == []


def test_cleanup_dbs_older_than(tmp_path):
    old = tmp_path / "CrudTest_Worker0_1.db"
    new = tmp_path / "CrudTest_Worker1_2.db"
    old.write_text("data")
    new.write_text("data")
    two_hours_ago = time.time() - 2 * 3600
    os.utime(old, (two_hours_ago, two_hours_ago))

    result = runner.invoke(app, ["cleanup-dbs", "--older-than-hours", "1"])

    assert result.exit_code == 0
    assert not old.exists()
    assert new.exists()


def test_status_without_state_file():
    result = runner.invoke(app, ["status"])

    assert result.exit_code == 0
    assert "No servers recorded" in result.output
