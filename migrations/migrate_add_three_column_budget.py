#!/usr/bin/env python3
"""Migration script to move budget_items to the three-column budget model.

Older databases track a single estimate (qty x rate) and an ``actual``
column per budget item. This migration:
- adds underwriting_amount (NUMERIC, default 0)
- adds forecast_amount (NUMERIC, default 0)
- renames actual to actual_amount
- backfills underwriting_amount from qty * rate where it is still 0

Forecast amounts stay at 0, so every item's budget keeps reading from its
underwriting estimate until a forecast is entered.

Usage:
    python migrations/migrate_add_three_column_budget.py [--db-path PATH]
"""

import sys
from pathlib import Path

# Add src to path so we can import flipbudget modules
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from sqlalchemy import text, inspect
from flipbudget.database.factories import create_sqlite_database


def column_exists(engine, table_name: str, column_name: str) -> bool:
    """Check if a column exists in a table.

    Args:
        engine: SQLAlchemy engine
        table_name: Name of the table
        column_name: Name of the column

    Returns:
        True if column exists, False otherwise
    """
    inspector = inspect(engine)
    columns = [col["name"] for col in inspector.get_columns(table_name)]
    return column_name in columns


def migrate_database(database_path: str | None = None) -> bool:
    """Migrate budget_items to underwriting/forecast/actual columns.

    Args:
        database_path: Path to database file. If None, uses default location.

    Returns:
        True if anything changed, False if the migration was already applied

    Raises:
        Exception: If migration fails
    """
    db = create_sqlite_database(database_path=database_path)
    db.connect()

    try:
        # Get engine from sessionmaker by creating a session and accessing its bind
        session = db.session_factory()
        try:
            engine = session.bind
            if engine is None:
                raise Exception("Could not get database engine from session")
        finally:
            session.close()

        inspector = inspect(engine)
        if "budget_items" not in inspector.get_table_names():
            raise Exception("Table 'budget_items' does not exist. Please initialize the database schema first.")

        has_underwriting = column_exists(engine, "budget_items", "underwriting_amount")
        has_forecast = column_exists(engine, "budget_items", "forecast_amount")
        has_old_actual = column_exists(engine, "budget_items", "actual")
        has_actual_amount = column_exists(engine, "budget_items", "actual_amount")
        has_qty_rate = column_exists(engine, "budget_items", "qty") and column_exists(engine, "budget_items", "rate")

        if has_underwriting and has_forecast and has_actual_amount and not has_old_actual:
            print("Migration already applied: budget_items uses the three-column budget model")
            return False

        print("Starting migration: three-column budget model...")

        with engine.begin() as conn:
            if not has_underwriting:
                conn.execute(
                    text("ALTER TABLE budget_items ADD COLUMN underwriting_amount NUMERIC(10, 2) NOT NULL DEFAULT 0")
                )
                print("  Added column: underwriting_amount")
            if not has_forecast:
                conn.execute(
                    text("ALTER TABLE budget_items ADD COLUMN forecast_amount NUMERIC(10, 2) NOT NULL DEFAULT 0")
                )
                print("  Added column: forecast_amount")
            if has_old_actual and not has_actual_amount:
                conn.execute(text("ALTER TABLE budget_items RENAME COLUMN actual TO actual_amount"))
                print("  Renamed column: actual -> actual_amount")
            elif not has_actual_amount:
                conn.execute(text("ALTER TABLE budget_items ADD COLUMN actual_amount NUMERIC(10, 2)"))
                print("  Added column: actual_amount")

            if has_qty_rate:
                result = conn.execute(
                    text(
                        "UPDATE budget_items SET underwriting_amount = qty * rate "
                        "WHERE underwriting_amount = 0 AND qty IS NOT NULL AND rate IS NOT NULL"
                    )
                )
                print(f"  Backfilled underwriting_amount for {result.rowcount} item(s)")

        print("Migration completed successfully!")
        return True

    except Exception as e:
        print(f"Migration failed: {e}")
        raise
    finally:
        db.disconnect()


def main():
    """Main entry point for migration script."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Migrate budget_items to the three-column budget model"
    )
    parser.add_argument(
        "--db-path",
        type=str,
        help="Path to database file (overrides FLIPBUDGET_DB_PATH environment variable)",
    )
    args = parser.parse_args()

    try:
        migrate_database(database_path=args.db_path)
        return 0
    except Exception as e:
        print(f"\nMigration failed: {e}", file=sys.stderr)
        import traceback
        traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())
