"""
Database migration script for Tickerbook.
Adds the currency columns to databases created before multi-currency support
and merges duplicate stock rows.
"""

import sqlite3
import os
import logging

from config import get_settings

logger = logging.getLogger(__name__)


# (table, column, DDL fragment)
CURRENCY_COLUMNS = [
    ("stock", "currency", "TEXT NOT NULL DEFAULT 'USD'"),
    ("transaction", "currency", "TEXT NOT NULL DEFAULT 'USD'"),
    ("transaction", "exchange_rate", "REAL DEFAULT 1.0"),
    ("transaction", "fx_fee", "REAL DEFAULT 0.0"),
    ("userpreferences", "default_currency", "TEXT DEFAULT 'GBP'"),
    ("userpreferences", "name", "TEXT"),
]


def get_db_file() -> str:
    """Path of the SQLite database file from the configured URL."""
    url = get_settings().database_url
    if not url.startswith("sqlite:///"):
        raise ValueError(f"Migrations only support SQLite databases, got {url}")
    return url[len("sqlite:///"):]


def migrate_add_currency_columns(db_file: str) -> int:
    """
    Add currency, exchange rate and FX fee columns where they are missing.
    Existing rows take the column defaults: stocks and transactions in USD,
    the user in GBP.

    Returns:
        Number of columns added
    """
    if not os.path.exists(db_file):
        print(f"Database {db_file} does not exist. Nothing to migrate.")
        return 0

    conn = sqlite3.connect(db_file)
    cursor = conn.cursor()
    added = 0

    try:
        for table, column, ddl in CURRENCY_COLUMNS:
            cursor.execute(f'PRAGMA table_info("{table}")')
            columns = [col[1] for col in cursor.fetchall()]
            if not columns:
                print(f"Table '{table}' does not exist, skipping.")
                continue

            if column not in columns:
                print(f"Adding '{column}' column to {table} table...")
                cursor.execute(f'ALTER TABLE "{table}" ADD COLUMN {column} {ddl}')
                added += 1
                print(f"✓ Added '{column}' column successfully.")
            else:
                print(f"✓ Column '{column}' already exists in {table} table.")
        conn.commit()

    except sqlite3.OperationalError as e:
        print(f"Error during migration: {e}")
        logger.error(f"Currency column migration failed: {e}")
        conn.rollback()
    finally:
        conn.close()

    return added


def migrate_merge_duplicate_stocks() -> int:
    """Merge stock rows sharing a ticker onto the oldest one."""
    from db_engine import init_db
    from services.stocks import StockService

    init_db()
    removed = StockService.merge_duplicate_stocks()
    if removed:
        print(f"✓ Removed {removed} duplicate stock rows.")
    else:
        print("✓ No duplicate stocks found.")
    return removed


def run_all_migrations():
    """Run all pending migrations."""
    print("=" * 60)
    print("Tickerbook Database Migration")
    print("=" * 60)

    db_file = get_db_file()
    migrate_add_currency_columns(db_file)
    if os.path.exists(db_file):
        migrate_merge_duplicate_stocks()

    print("=" * 60)
    print("Migration complete!")
    print("=" * 60)


if __name__ == "__main__":
    logging.basicConfig(
        level=get_settings().log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    run_all_migrations()
