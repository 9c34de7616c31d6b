"""Tests for the command line interface."""

from __future__ import annotations

import logging

import pytest
from click.testing import CliRunner

from devotion.cli import cli


@pytest.fixture
def runner(tmp_path, monkeypatch):
    monkeypatch.setenv("DEVOTION_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("DEVOTION_DEV_MODE", "false")
    monkeypatch.delenv("DEVOTION_DATABASE_URL", raising=False)
    yield CliRunner()
    package_logger = logging.getLogger("devotion")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()


def test_init_db(runner, tmp_path):
    result = runner.invoke(cli, ["init-db"])
    assert result.exit_code == 0, result.output
    assert "Database ready" in result.output
    assert (tmp_path / "devotion.db").exists()


def test_create_profile_and_empty_balance(runner):
    result = runner.invoke(cli, ["create-profile", "Ada", "--role", "dominant"])
    assert result.exit_code == 0, result.output
    assert "Created profile 1 (Ada, dominant)" in result.output

    result = runner.invoke(cli, ["balance", "1"])
    assert result.exit_code == 0
    assert result.output.strip() == "0"


def test_create_profile_rejects_blank_name(runner):
    result = runner.invoke(cli, ["create-profile", "   "])
    assert result.exit_code != 0
    assert "Invalid ProfileForm" in result.output


def test_seed_demo_then_stats_and_history(runner):
    result = runner.invoke(cli, ["seed-demo"])
    assert result.exit_code == 0, result.output
    assert "Demo data ready (2 profiles, 2 habits, 4 transactions)" in result.output

    # Seeding twice is a no-op
    again = runner.invoke(cli, ["seed-demo"])
    assert "Demo data ready (2 profiles, 2 habits, 4 transactions)" in again.output

    stats = runner.invoke(cli, ["stats", "2"])
    assert stats.exit_code == 0, stats.output
    assert "Pet Demo (submissive)" in stats.output
    assert "balance:      20" in stats.output
    assert "partner:      1" in stats.output

    history = runner.invoke(cli, ["history", "2", "--limit", "2"])
    assert history.exit_code == 0
    lines = [line for line in history.output.splitlines() if line.strip()]
    assert len(lines) == 2
    assert all("Habit accomplished: Morning check-in" in line for line in lines)


def test_stats_unknown_profile(runner):
    result = runner.invoke(cli, ["stats", "99"])
    assert result.exit_code != 0
    assert "Profile 99 not found" in result.output


def test_history_empty(runner):
    runner.invoke(cli, ["create-profile", "Bo"])
    result = runner.invoke(cli, ["history", "1"])
    assert result.exit_code == 0
    assert "No transactions." in result.output
