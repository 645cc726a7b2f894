"""SQLite-backed persistence adapter."""

import logging
import sqlite3
from pathlib import Path

from finplan.domain.models import Budget, BudgetCategory, Month, Transaction, UserSettings
from finplan.store import queries
from finplan.store.base import PersistenceError
from finplan.store.schema import get_db_path, init_database
from finplan.store.serialization import (
    budget_from_record,
    budget_to_record,
    category_to_record,
    settings_from_record,
    settings_to_record,
    transaction_from_record,
    transaction_to_record,
)

logger = logging.getLogger(__name__)


class SqliteAdapter:
    """Persist budgets, categories, transactions and settings in SQLite."""

    def __init__(self, db_path: Path | None = None, create: bool = True) -> None:
        self.db_path = db_path or get_db_path()
        if create:
            try:
                init_database(self.db_path)
            except (sqlite3.Error, OSError) as e:
                raise PersistenceError(f"Could not initialize database at {self.db_path}: {e}") from e

    def _run(self, action: str, func, *args):
        logger.debug("sqlite %s %s", action, self.db_path)
        try:
            return func(*args, db_path=self.db_path)
        except sqlite3.Error as e:
            raise PersistenceError(f"Database error during {action}: {e}") from e

    def create_budget(self, budget: Budget) -> None:
        self._run("create_budget", queries.insert_budget, budget_to_record(budget))

    def get_budget(self, month: Month) -> Budget | None:
        record = self._run("get_budget", queries.get_budget, month)
        return budget_from_record(record) if record else None

    def get_all_budgets(self) -> list[Budget]:
        return [budget_from_record(r) for r in self._run("get_all_budgets", queries.get_all_budgets)]

    def update_budget_income(self, month: Month, total_income: int) -> None:
        self._run("update_budget_income", queries.update_budget_income, month, total_income)

    def delete_budget(self, month: Month) -> None:
        self._run("delete_budget", queries.delete_budget, month)

    def add_category(self, month: Month, category: BudgetCategory) -> None:
        self._run("add_category", queries.insert_category, month, category_to_record(category))

    def update_category(self, category: BudgetCategory) -> None:
        self._run("update_category", queries.update_category, category_to_record(category))

    def remove_category(self, month: Month, category_id: str) -> None:
        self._run("remove_category", queries.delete_category, month, category_id)

    def add_transaction(self, transaction: Transaction) -> None:
        self._run("add_transaction", queries.insert_transaction, transaction_to_record(transaction))

    def update_transaction(self, transaction: Transaction) -> None:
        self._run("update_transaction", queries.update_transaction, transaction_to_record(transaction))

    def remove_transaction(self, transaction_id: str) -> None:
        self._run("remove_transaction", queries.delete_transaction, transaction_id)

    def get_transactions_by_category(self, category_id: str, month: Month | None = None) -> list[Transaction]:
        records = self._run("get_transactions_by_category", queries.get_transactions_by_category, category_id, month)
        return [transaction_from_record(r) for r in records]

    def get_all_transactions(self) -> list[Transaction]:
        return [transaction_from_record(r) for r in self._run("get_all_transactions", queries.get_all_transactions)]

    def get_user_settings(self, defaults: UserSettings) -> UserSettings:
        """Get stored settings, saving the defaults first if none exist."""
        record = self._run("get_user_settings", queries.get_user_settings)
        if record is None:
            self.update_user_settings(defaults)
            return defaults
        return settings_from_record(record)

    def update_user_settings(self, settings: UserSettings) -> None:
        self._run("update_user_settings", queries.set_user_settings, settings_to_record(settings))

    def clear_all(self) -> None:
        self._run("clear_all", queries.clear_all)

    def check_connection(self) -> bool:
        return queries.check_connection(self.db_path)
