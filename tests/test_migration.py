"""Tests for the three-column budget migration script."""

import importlib.util
import os
import sqlite3
import tempfile
from decimal import Decimal
from pathlib import Path

import pytest

MIGRATION = Path(__file__).parent.parent / "migrations" / "migrate_add_three_column_budget.py"


@pytest.fixture
def migration():
    spec = importlib.util.spec_from_file_location("migrate_add_three_column_budget", MIGRATION)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def legacy_db_path():
    """A database whose budget_items table predates the three-column model."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    conn = sqlite3.connect(db_path)
    conn.executescript(
        """
        CREATE TABLE projects (
            id INTEGER PRIMARY KEY,
            name VARCHAR(200) NOT NULL,
            property_type VARCHAR NOT NULL DEFAULT 'sfh',
            closing_costs NUMERIC(12, 2) NOT NULL DEFAULT 0,
            holding_costs_monthly NUMERIC(10, 2) NOT NULL DEFAULT 0,
            hold_months INTEGER NOT NULL DEFAULT 4,
            selling_cost_percent NUMERIC(5, 2) NOT NULL DEFAULT 8,
            contingency_percent NUMERIC(5, 2) NOT NULL DEFAULT 10,
            status VARCHAR NOT NULL DEFAULT 'lead',
            created_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updated_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP
        );
        CREATE TABLE budget_items (
            id INTEGER PRIMARY KEY,
            project_id INTEGER NOT NULL REFERENCES projects(id),
            category VARCHAR NOT NULL,
            item VARCHAR NOT NULL,
            qty NUMERIC(10, 2) NOT NULL DEFAULT 1,
            rate NUMERIC(10, 2) NOT NULL DEFAULT 0,
            actual NUMERIC(10, 2),
            created_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP,
            updated_at DATETIME NOT NULL DEFAULT CURRENT_TIMESTAMP
        );
        INSERT INTO projects (id, name) VALUES (1, 'Legacy');
        INSERT INTO budget_items (project_id, category, item, qty, rate, actual)
            VALUES (1, 'flooring', 'LVP', 800, 4.5, 3700);
        """
    )
    conn.commit()
    conn.close()

    yield db_path

    if os.path.exists(db_path):
        os.unlink(db_path)


def _columns(db_path):
    conn = sqlite3.connect(db_path)
    try:
        return {row[1] for row in conn.execute("PRAGMA table_info(budget_items)")}
    finally:
        conn.close()


def test_migrates_legacy_table(migration, legacy_db_path):
    assert migration.migrate_database(legacy_db_path) is True

    columns = _columns(legacy_db_path)
    assert {"underwriting_amount", "forecast_amount", "actual_amount"} <= columns
    assert "actual" not in columns

    conn = sqlite3.connect(legacy_db_path)
    try:
        underwriting, forecast, actual = conn.execute(
            "SELECT underwriting_amount, forecast_amount, actual_amount FROM budget_items"
        ).fetchone()
    finally:
        conn.close()
    assert Decimal(str(underwriting)) == Decimal("3600")
    assert Decimal(str(forecast)) == Decimal("0")
    assert Decimal(str(actual)) == Decimal("3700")


def test_migration_is_idempotent(migration, legacy_db_path):
    migration.migrate_database(legacy_db_path)
    assert migration.migrate_database(legacy_db_path) is False


def test_new_database_needs_no_migration(migration, temp_db):
    assert migration.migrate_database(temp_db.database_path) is False

