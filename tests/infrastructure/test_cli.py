"""Tests for the operational CLI."""

import sqlite3

from click.testing import CliRunner

from order_service.infrastructure.cli.main import cli


def test_init_db_creates_tables(tmp_path):
    db_file = tmp_path / "orders.db"
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["init-db"],
        env={"DATABASE_URL": f"sqlite+aiosqlite:///{db_file}", "LOG_LEVEL": "WARNING"},
    )

    assert result.exit_code == 0, result.output
    assert "up to date" in result.output
    with sqlite3.connect(db_file) as conn:
        tables = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
    assert {"orders", "order_items"} <= tables


def test_bad_configuration_is_reported(tmp_path):
    result = CliRunner().invoke(cli, ["init-db"], env={"INVENTORY_CHECK_MODE": "psychic"})
    assert result.exit_code == 1
    assert "INVENTORY_CHECK_MODE" in result.output


def test_help_lists_commands():
    result = CliRunner().invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "serve" in result.output
    assert "init-db" in result.output
