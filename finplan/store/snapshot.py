"""Snapshot-file persistence adapter.

The whole store is kept as one JSON document under a fixed key, the same
way a browser app keeps its state in local storage. Every write replaces
the file.
"""

import json
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any

from finplan.domain.models import Budget, BudgetCategory, Month, Transaction, UserSettings
from finplan.store.base import PersistenceError
from finplan.store.schema import get_snapshot_path
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

STORAGE_KEY = "finance-store"


def empty_snapshot() -> dict[str, Any]:
    return {"budgets": {}, "transactions": [], "settings": None}


class SnapshotAdapter:
    """Persist the store as a single JSON snapshot file."""

    def __init__(self, path: Path | None = None) -> None:
        self.path = path or get_snapshot_path()

    def _load(self) -> dict[str, Any]:
        if not self.path.exists():
            return empty_snapshot()
        try:
            with self.path.open("r", encoding="utf-8") as handle:
                document = json.load(handle)
        except (json.JSONDecodeError, OSError) as e:
            raise PersistenceError(f"Could not read snapshot {self.path}: {e}") from e

        if not isinstance(document, dict):
            raise PersistenceError(f"Snapshot {self.path} is not a JSON object")
        state = document.get(STORAGE_KEY)
        if not isinstance(state, dict):
            return empty_snapshot()
        state.setdefault("budgets", {})
        state.setdefault("transactions", [])
        state.setdefault("settings", None)
        return state

    def _save(self, state: dict[str, Any]) -> None:
        tmp_path = self.path.with_suffix(".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tmp_path.open("w", encoding="utf-8") as handle:
                json.dump({STORAGE_KEY: state}, handle, indent=2, sort_keys=True, ensure_ascii=False)
            os.replace(tmp_path, self.path)
        except OSError as e:
            raise PersistenceError(f"Could not write snapshot {self.path}: {e}") from e
        logger.debug("Snapshot written to %s", self.path)

    def _find_category(self, state: dict[str, Any], category_id: str) -> dict[str, Any] | None:
        for budget in state["budgets"].values():
            for category in budget["categories"]:
                if category["id"] == category_id:
                    return category
        return None

    def create_budget(self, budget: Budget) -> None:
        state = self._load()
        self._drop_budget(state, budget.month)
        state["budgets"][budget.month] = budget_to_record(budget)
        self._save(state)

    def get_budget(self, month: Month) -> Budget | None:
        record = self._load()["budgets"].get(month)
        return budget_from_record(record) if record else None

    def get_all_budgets(self) -> list[Budget]:
        budgets = self._load()["budgets"]
        return [budget_from_record(budgets[month]) for month in sorted(budgets, reverse=True)]

    def update_budget_income(self, month: Month, total_income: int) -> None:
        state = self._load()
        budget = state["budgets"].get(month)
        if budget is None:
            return
        budget["total_income"] = total_income
        budget["updated_at"] = datetime.now().isoformat()
        self._save(state)

    def _drop_budget(self, state: dict[str, Any], month: str) -> None:
        budget = state["budgets"].pop(month, None)
        if budget is None:
            return
        category_ids = {c["id"] for c in budget["categories"]}
        state["transactions"] = [
            t for t in state["transactions"] if not (t["month"] == month and t["category_id"] in category_ids)
        ]

    def delete_budget(self, month: Month) -> None:
        state = self._load()
        self._drop_budget(state, month)
        self._save(state)

    def add_category(self, month: Month, category: BudgetCategory) -> None:
        state = self._load()
        budget = state["budgets"].get(month)
        if budget is None:
            return
        budget["categories"].append(category_to_record(category))
        budget["updated_at"] = datetime.now().isoformat()
        self._save(state)

    def update_category(self, category: BudgetCategory) -> None:
        state = self._load()
        record = self._find_category(state, category.id)
        if record is None:
            return
        record.update(category_to_record(category))
        self._save(state)

    def remove_category(self, month: Month, category_id: str) -> None:
        state = self._load()
        budget = state["budgets"].get(month)
        if budget is None:
            return
        budget["categories"] = [c for c in budget["categories"] if c["id"] != category_id]
        state["transactions"] = [
            t for t in state["transactions"] if not (t["category_id"] == category_id and t["month"] == month)
        ]
        self._save(state)

    def add_transaction(self, transaction: Transaction) -> None:
        state = self._load()
        state["transactions"].append(transaction_to_record(transaction))
        self._save(state)

    def update_transaction(self, transaction: Transaction) -> None:
        state = self._load()
        state["transactions"] = [
            transaction_to_record(transaction) if t["id"] == transaction.id else t for t in state["transactions"]
        ]
        self._save(state)

    def remove_transaction(self, transaction_id: str) -> None:
        state = self._load()
        state["transactions"] = [t for t in state["transactions"] if t["id"] != transaction_id]
        self._save(state)

    def get_transactions_by_category(self, category_id: str, month: Month | None = None) -> list[Transaction]:
        matches = [
            transaction_from_record(t)
            for t in self._load()["transactions"]
            if t["category_id"] == category_id and (month is None or t["month"] == month)
        ]
        return sorted(matches, key=lambda t: t.date, reverse=True)

    def get_all_transactions(self) -> list[Transaction]:
        return [transaction_from_record(t) for t in self._load()["transactions"]]

    def get_user_settings(self, defaults: UserSettings) -> UserSettings:
        """Get stored settings, saving the defaults first if none exist."""
        record = self._load()["settings"]
        if record is None:
            self.update_user_settings(defaults)
            return defaults
        return settings_from_record(record)

    def update_user_settings(self, settings: UserSettings) -> None:
        state = self._load()
        state["settings"] = settings_to_record(settings)
        self._save(state)

    def clear_all(self) -> None:
        self._save(empty_snapshot())

    def check_connection(self) -> bool:
        try:
            self._load()
        except PersistenceError:
            return False
        return True
