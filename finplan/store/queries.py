"""Database query functions."""

import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Any

from finplan.store.schema import get_db_path

CATEGORY_COLUMNS = (
    "id, name, planned_amount, actual_amount, type, category_type, proportion, color, is_permanent"
)
TRANSACTION_COLUMNS = "id, category_id, amount, description, date, month, type, created_at"


@contextmanager
def _connect(db_path: Path | None = None) -> Iterator[sqlite3.Connection]:
    """Open a database connection for one unit of work.

    Commits on success, rolls back on error, and always closes.

    Args:
        db_path: Path to the database file. If None, uses default location.

    Yields:
        Database connection with row_factory and foreign keys enabled.
    """
    if db_path is None:
        db_path = get_db_path()
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    try:
        yield conn
        conn.commit()
    except sqlite3.Error:
        conn.rollback()
        raise
    finally:
        conn.close()


def _fetch_categories(conn: sqlite3.Connection, budget_id: str) -> list[dict[str, Any]]:
    cursor = conn.execute(
        f"SELECT {CATEGORY_COLUMNS} FROM budget_categories WHERE budget_id = ? ORDER BY rowid",
        (budget_id,),
    )
    return [dict(row) for row in cursor.fetchall()]


def _delete_budget_rows(conn: sqlite3.Connection, month: str) -> None:
    """Delete a month's budget, its categories, and its transactions on them."""
    conn.execute(
        """
        DELETE FROM transactions
        WHERE month = ?
          AND category_id IN (
            SELECT c.id FROM budget_categories c JOIN budgets b ON c.budget_id = b.id WHERE b.month = ?
          )
        """,
        (month, month),
    )
    # budget_categories rows go with the budget via ON DELETE CASCADE
    conn.execute("DELETE FROM budgets WHERE month = ?", (month,))


def _insert_category(conn: sqlite3.Connection, budget_id: str, category: dict[str, Any]) -> None:
    conn.execute(
        """
        INSERT INTO budget_categories
            (id, budget_id, name, planned_amount, actual_amount, type, category_type, proportion, color, is_permanent)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            category["id"],
            budget_id,
            category["name"],
            category["planned_amount"],
            category["actual_amount"],
            category["type"],
            category["category_type"],
            _round_proportion(category["proportion"]),
            category["color"],
            int(category["is_permanent"]),
        ),
    )


def _round_proportion(proportion: float | None) -> float | None:
    return None if proportion is None else round(proportion, 4)


def insert_budget(budget: dict[str, Any], db_path: Path | None = None) -> None:
    """Insert a budget with its categories, replacing any budget for the same month.

    Args:
        budget: Budget record including a "categories" list.
        db_path: Path to the database file. If None, uses default location.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        _delete_budget_rows(conn, budget["month"])
        conn.execute(
            "INSERT INTO budgets (id, name, month, total_income, created_at, updated_at) VALUES (?, ?, ?, ?, ?, ?)",
            (
                budget["id"],
                budget["name"],
                budget["month"],
                budget["total_income"],
                budget["created_at"],
                budget["updated_at"],
            ),
        )
        for category in budget["categories"]:
            _insert_category(conn, budget["id"], category)


def get_budget(month: str, db_path: Path | None = None) -> dict[str, Any] | None:
    """Get the budget for a month.

    Args:
        month: Month in YYYY-MM format.
        db_path: Path to the database file. If None, uses default location.

    Returns:
        Budget record with a "categories" list, or None if no budget exists.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        row = conn.execute(
            "SELECT id, name, month, total_income, created_at, updated_at FROM budgets WHERE month = ?",
            (month,),
        ).fetchone()
        if row is None:
            return None
        budget = dict(row)
        budget["categories"] = _fetch_categories(conn, budget["id"])
        return budget


def get_all_budgets(db_path: Path | None = None) -> list[dict[str, Any]]:
    """Get all budgets, newest month first.

    Args:
        db_path: Path to the database file. If None, uses default location.

    Returns:
        List of budget records, each with a "categories" list.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        rows = conn.execute(
            "SELECT id, name, month, total_income, created_at, updated_at FROM budgets ORDER BY month DESC"
        ).fetchall()
        budgets = []
        for row in rows:
            budget = dict(row)
            budget["categories"] = _fetch_categories(conn, budget["id"])
            budgets.append(budget)
        return budgets


def update_budget_income(month: str, total_income: int, db_path: Path | None = None) -> None:
    """Set the total income for a month's budget.

    Args:
        month: Month in YYYY-MM format.
        total_income: Income in minor units.
        db_path: Path to the database file. If None, uses default location.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        conn.execute(
            "UPDATE budgets SET total_income = ?, updated_at = ? WHERE month = ?",
            (total_income, datetime.now().isoformat(), month),
        )


def delete_budget(month: str, db_path: Path | None = None) -> None:
    """Delete a month's budget together with its categories and their transactions.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        _delete_budget_rows(conn, month)


def insert_category(month: str, category: dict[str, Any], db_path: Path | None = None) -> None:
    """Add a category to a month's budget.

    Does nothing if the month has no budget.

    Args:
        month: Month in YYYY-MM format.
        category: Category record.
        db_path: Path to the database file. If None, uses default location.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        row = conn.execute("SELECT id FROM budgets WHERE month = ?", (month,)).fetchone()
        if row is None:
            return
        _insert_category(conn, row["id"], category)
        conn.execute("UPDATE budgets SET updated_at = ? WHERE id = ?", (datetime.now().isoformat(), row["id"]))


def update_category(category: dict[str, Any], db_path: Path | None = None) -> None:
    """Overwrite a category's fields.

    Args:
        category: Category record; matched by id.
        db_path: Path to the database file. If None, uses default location.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        conn.execute(
            """
            UPDATE budget_categories
            SET name = ?, planned_amount = ?, actual_amount = ?, type = ?, category_type = ?,
                proportion = ?, color = ?, is_permanent = ?
            WHERE id = ?
            """,
            (
                category["name"],
                category["planned_amount"],
                category["actual_amount"],
                category["type"],
                category["category_type"],
                _round_proportion(category["proportion"]),
                category["color"],
                int(category["is_permanent"]),
                category["id"],
            ),
        )


def delete_category(month: str, category_id: str, db_path: Path | None = None) -> None:
    """Delete a category and that month's transactions recorded against it.

    Transactions in other months that reference the same category id are kept.

    Args:
        month: Month in YYYY-MM format.
        category_id: Category ID.
        db_path: Path to the database file. If None, uses default location.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        conn.execute("DELETE FROM transactions WHERE category_id = ? AND month = ?", (category_id, month))
        conn.execute(
            "DELETE FROM budget_categories WHERE id = ? AND budget_id IN (SELECT id FROM budgets WHERE month = ?)",
            (category_id, month),
        )


def insert_transaction(transaction: dict[str, Any], db_path: Path | None = None) -> None:
    """Insert a transaction.

    Args:
        transaction: Transaction record.
        db_path: Path to the database file. If None, uses default location.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        conn.execute(
            f"INSERT INTO transactions ({TRANSACTION_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
            (
                transaction["id"],
                transaction["category_id"],
                transaction["amount"],
                transaction["description"],
                transaction["date"],
                transaction["month"],
                transaction["type"],
                transaction["created_at"],
            ),
        )


def update_transaction(transaction: dict[str, Any], db_path: Path | None = None) -> None:
    """Overwrite a transaction's fields.

    Args:
        transaction: Transaction record; matched by id.
        db_path: Path to the database file. If None, uses default location.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        conn.execute(
            """
            UPDATE transactions
            SET category_id = ?, amount = ?, description = ?, date = ?, month = ?, type = ?
            WHERE id = ?
            """,
            (
                transaction["category_id"],
                transaction["amount"],
                transaction["description"],
                transaction["date"],
                transaction["month"],
                transaction["type"],
                transaction["id"],
            ),
        )


def delete_transaction(transaction_id: str, db_path: Path | None = None) -> None:
    """Delete a transaction.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        conn.execute("DELETE FROM transactions WHERE id = ?", (transaction_id,))


def get_transactions_by_category(
    category_id: str, month: str | None = None, db_path: Path | None = None
) -> list[dict[str, Any]]:
    """Get all transactions for a category.

    Args:
        category_id: Category ID to filter by.
        month: Optional month (YYYY-MM) to restrict to.
        db_path: Path to the database file. If None, uses default location.

    Returns:
        List of transaction records ordered by date descending.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        query = f"SELECT {TRANSACTION_COLUMNS} FROM transactions WHERE category_id = ?"
        params: list[Any] = [category_id]

        if month:
            query += " AND month = ?"
            params.append(month)

        query += " ORDER BY date DESC"

        rows = conn.execute(query, params).fetchall()
        return [dict(row) for row in rows]


def get_all_transactions(db_path: Path | None = None) -> list[dict[str, Any]]:
    """Get all transactions.

    Args:
        db_path: Path to the database file. If None, uses default location.

    Returns:
        List of transaction records ordered by date ascending.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        rows = conn.execute(f"SELECT {TRANSACTION_COLUMNS} FROM transactions ORDER BY date, created_at").fetchall()
        return [dict(row) for row in rows]


def get_user_settings(db_path: Path | None = None) -> dict[str, Any] | None:
    """Get the stored user settings.

    Returns:
        Settings record, or None if never saved.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        row = conn.execute(
            "SELECT current_month, savings_goal, savings_goal_description FROM user_settings WHERE id = 1"
        ).fetchone()
        return dict(row) if row else None


def set_user_settings(settings: dict[str, Any], db_path: Path | None = None) -> None:
    """Insert or replace the user settings row.

    Args:
        settings: Settings record.
        db_path: Path to the database file. If None, uses default location.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        conn.execute(
            """
            INSERT INTO user_settings (id, savings_goal, savings_goal_description, current_month)
            VALUES (1, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                savings_goal = excluded.savings_goal,
                savings_goal_description = excluded.savings_goal_description,
                current_month = excluded.current_month,
                updated_at = datetime('now')
            """,
            (settings["savings_goal"], settings["savings_goal_description"], settings["current_month"]),
        )


def clear_all(db_path: Path | None = None) -> None:
    """Delete every budget, category, transaction and setting.

    Raises:
        sqlite3.Error: If database operation fails.
    """
    with _connect(db_path) as conn:
        conn.execute("DELETE FROM transactions")
        conn.execute("DELETE FROM budget_categories")
        conn.execute("DELETE FROM budgets")
        conn.execute("DELETE FROM user_settings")


def check_connection(db_path: Path | None = None) -> bool:
    """Check that the database can be opened and queried.

    Returns:
        True if a trivial query succeeds, False otherwise.
    """
    if db_path is None:
        db_path = get_db_path()
    if not db_path.exists():
        return False
    try:
        with _connect(db_path) as conn:
            conn.execute("SELECT 1").fetchone()
            conn.execute("SELECT COUNT(*) FROM budgets").fetchone()
        return True
    except sqlite3.Error:
        return False
