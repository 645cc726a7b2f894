"""Database schema initialization and migrations."""

import os
import sqlite3
from pathlib import Path


def get_xdg_data_home() -> Path:
    """Get XDG data directory, with fallback to ~/.local/share."""
    xdg_data = os.environ.get("XDG_DATA_HOME")
    if xdg_data:
        return Path(xdg_data)
    return Path.home() / ".local" / "share"


def get_db_path() -> Path:
    """Get the default database path (XDG compliant)."""
    return get_xdg_data_home() / "finplan" / "finplan.db"


def get_snapshot_path() -> Path:
    """Get the default snapshot file path (XDG compliant)."""
    return get_xdg_data_home() / "finplan" / "finplan.json"


def database_exists(db_path: Path | None = None) -> bool:
    """Check if the database file exists.

    Args:
        db_path: Path to check. If None, uses default location.

    Returns:
        True if database exists, False otherwise.
    """
    if db_path is None:
        db_path = get_db_path()
    return db_path.exists()


def init_database(db_path: Path | None = None) -> None:
    """Initialize the database with the required schema.

    Amounts are stored as integer minor units, which keeps the exactness of
    a DECIMAL(12,2) column without floating point rounding.

    Args:
        db_path: Path to the database file. If None, uses default location.

    Raises:
        sqlite3.Error: If database initialization fails.
    """
    if db_path is None:
        db_path = get_db_path()

    db_path.parent.mkdir(parents=True, exist_ok=True)

    conn = sqlite3.connect(db_path)
    cursor = conn.cursor()

    try:
        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS budgets (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                month TEXT NOT NULL UNIQUE,
                total_income INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL DEFAULT (datetime('now')),
                updated_at TEXT NOT NULL DEFAULT (datetime('now'))
            )
        """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS budget_categories (
                id TEXT PRIMARY KEY,
                budget_id TEXT NOT NULL REFERENCES budgets(id) ON DELETE CASCADE,
                name TEXT NOT NULL,
                planned_amount INTEGER NOT NULL DEFAULT 0,
                actual_amount INTEGER NOT NULL DEFAULT 0,
                type TEXT NOT NULL,
                category_type TEXT NOT NULL,
                proportion NUMERIC(5,4),
                color TEXT,
                is_permanent INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL DEFAULT (datetime('now'))
            )
        """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS transactions (
                id TEXT PRIMARY KEY,
                category_id TEXT NOT NULL,
                amount INTEGER NOT NULL,
                description TEXT NOT NULL,
                date TEXT NOT NULL,
                month TEXT NOT NULL,
                type TEXT NOT NULL,
                created_at TEXT NOT NULL DEFAULT (datetime('now'))
            )
        """
        )

        cursor.execute(
            """
            CREATE TABLE IF NOT EXISTS user_settings (
                id INTEGER PRIMARY KEY CHECK (id = 1),
                savings_goal INTEGER NOT NULL,
                savings_goal_description TEXT NOT NULL,
                current_month TEXT NOT NULL,
                created_at TEXT NOT NULL DEFAULT (datetime('now')),
                updated_at TEXT NOT NULL DEFAULT (datetime('now'))
            )
        """
        )

        # Migration: Add 'is_permanent' column if missing
        cursor.execute("PRAGMA table_info(budget_categories)")
        columns = [row[1] for row in cursor.fetchall()]
        if "is_permanent" not in columns:
            cursor.execute("ALTER TABLE budget_categories ADD COLUMN is_permanent INTEGER NOT NULL DEFAULT 0")

        cursor.execute("CREATE INDEX IF NOT EXISTS idx_categories_budget ON budget_categories(budget_id)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_categories_type ON budget_categories(type)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_txn_category ON transactions(category_id)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_txn_month ON transactions(month)")
        cursor.execute("CREATE INDEX IF NOT EXISTS idx_txn_date ON transactions(date)")

        conn.commit()

    except sqlite3.Error:
        conn.rollback()
        raise
    finally:
        conn.close()
