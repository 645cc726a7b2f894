"""Tests for finplan.store.sqlite and the query layer."""

import sqlite3
from dataclasses import replace
from datetime import date
from pathlib import Path

import pytest

from finplan.domain.models import (
    Budget,
    BudgetCategory,
    CategoryId,
    CategoryKind,
    Fixed,
    Money,
    Month,
    UserSettings,
    Variable,
)
from finplan.domain.transactions import build_transaction
from finplan.store.base import PersistenceError
from finplan.store.queries import check_connection
from finplan.store.sqlite import SqliteAdapter

JUNE = Month("2024-06")
JULY = Month("2024-07")


def make_budget(month: Month, budget_id: str, *categories: BudgetCategory) -> Budget:
    return Budget(id=budget_id, name=f"Budget {month}", month=month, total_income=Money(150000), categories=categories)


def rent(category_id: str = "rent") -> BudgetCategory:
    return BudgetCategory(CategoryId(category_id), "Rent", Money(45000), CategoryKind.EXPENSE, Fixed(), color="#EF4444")


def food(category_id: str = "food") -> BudgetCategory:
    return BudgetCategory(CategoryId(category_id), "Food", Money(52500), CategoryKind.EXPENSE, Variable(0.5))


@pytest.fixture
def adapter(tmp_path: Path) -> SqliteAdapter:
    return SqliteAdapter(tmp_path / "finplan.db")


class TestBudgets:
    """Tests for budget persistence."""

    def test_round_trip_with_categories(self, adapter: SqliteAdapter) -> None:
        """Should store a budget and its categories in order."""
        budget = make_budget(JUNE, "b1", rent(), food())

        adapter.create_budget(budget)

        assert adapter.get_budget(JUNE) == budget
        assert adapter.get_budget(JULY) is None

    def test_all_budgets_newest_first(self, adapter: SqliteAdapter) -> None:
        """Should list budgets by month descending."""
        adapter.create_budget(make_budget(JUNE, "b1"))
        adapter.create_budget(make_budget(JULY, "b2"))

        assert [b.month for b in adapter.get_all_budgets()] == [JULY, JUNE]

    def test_create_replaces_month(self, adapter: SqliteAdapter) -> None:
        """Should replace an existing budget and drop its month's transactions."""
        adapter.create_budget(make_budget(JUNE, "b1", rent()))
        adapter.add_transaction(build_transaction("t1", "rent", Money(100), "", date(2024, 6, 1)))

        adapter.create_budget(make_budget(JUNE, "b2"))

        assert adapter.get_budget(JUNE).id == "b2"
        assert adapter.get_budget(JUNE).categories == ()
        assert adapter.get_all_transactions() == []

    def test_update_income(self, adapter: SqliteAdapter) -> None:
        """Should change the month's income."""
        adapter.create_budget(make_budget(JUNE, "b1"))

        adapter.update_budget_income(JUNE, Money(99))

        assert adapter.get_budget(JUNE).total_income == Money(99)

    def test_delete_budget_cascades_categories(self, adapter: SqliteAdapter, tmp_path: Path) -> None:
        """Should remove categories along with the budget."""
        adapter.create_budget(make_budget(JUNE, "b1", rent()))

        adapter.delete_budget(JUNE)

        assert adapter.get_budget(JUNE) is None
        conn = sqlite3.connect(tmp_path / "finplan.db")
        try:
            assert conn.execute("SELECT COUNT(*) FROM budget_categories").fetchone()[0] == 0
        finally:
            conn.close()


class TestCategories:
    """Tests for category persistence."""

    def test_add_and_update(self, adapter: SqliteAdapter) -> None:
        """Should append a category and later store its changes."""
        adapter.create_budget(make_budget(JUNE, "b1", rent()))

        adapter.add_category(JUNE, food())
        adapter.update_category(replace(food(), planned_amount=Money(1), allocation=Variable(0.25)))

        stored = adapter.get_budget(JUNE).find_category("food")
        assert stored.planned_amount == Money(1)
        assert stored.allocation == Variable(0.25)

    def test_add_to_missing_budget_is_noop(self, adapter: SqliteAdapter) -> None:
        """Should ignore categories for months without a budget."""
        adapter.add_category(JULY, food())

        assert adapter.get_budget(JULY) is None

    def test_proportion_rounded_to_four_places(self, adapter: SqliteAdapter) -> None:
        """Should keep proportions at NUMERIC(5,4) precision."""
        adapter.create_budget(make_budget(JUNE, "b1", replace(food(), allocation=Variable(1 / 3))))

        assert adapter.get_budget(JUNE).categories[0].proportion == 0.3333

    def test_remove_only_touches_that_month(self, adapter: SqliteAdapter) -> None:
        """Should delete the category's transactions for that month only."""
        adapter.create_budget(make_budget(JUNE, "b1", food()))
        adapter.add_transaction(build_transaction("t1", "food", Money(100), "", date(2024, 6, 1)))
        adapter.add_transaction(build_transaction("t2", "food", Money(200), "", date(2024, 7, 1)))

        adapter.remove_category(JUNE, "food")

        assert adapter.get_budget(JUNE).categories == ()
        assert [t.id for t in adapter.get_all_transactions()] == ["t2"]


class TestTransactions:
    """Tests for transaction persistence."""

    def test_add_update_remove(self, adapter: SqliteAdapter) -> None:
        """Should keep transactions in sync with each command."""
        txn = build_transaction("t1", "food", Money(100), "Lunch", date(2024, 6, 30))
        adapter.add_transaction(txn)
        assert adapter.get_all_transactions() == [txn]

        moved = replace(txn, date=date(2024, 7, 1), month=JULY, description="Dinner")
        adapter.update_transaction(moved)
        assert adapter.get_all_transactions() == [moved]

        adapter.remove_transaction("t1")
        assert adapter.get_all_transactions() == []

    def test_by_category(self, adapter: SqliteAdapter) -> None:
        """Should filter by category and optional month, newest first."""
        adapter.add_transaction(build_transaction("t1", "food", Money(1), "", date(2024, 6, 1)))
        adapter.add_transaction(build_transaction("t2", "food", Money(2), "", date(2024, 7, 1)))
        adapter.add_transaction(build_transaction("t3", "rent", Money(3), "", date(2024, 6, 2)))

        assert [t.id for t in adapter.get_transactions_by_category("food")] == ["t2", "t1"]
        assert [t.id for t in adapter.get_transactions_by_category("food", JUNE)] == ["t1"]


class TestSettings:
    """Tests for user settings persistence."""

    def test_defaults_saved_on_first_read(self, adapter: SqliteAdapter) -> None:
        """Should store and return the defaults when nothing is saved."""
        defaults = UserSettings(JUNE, Money(100000), "Savings goal")

        assert adapter.get_user_settings(defaults) == defaults
        assert adapter.get_user_settings(UserSettings(JULY, Money(1), "x")) == defaults

    def test_update(self, adapter: SqliteAdapter) -> None:
        """Should overwrite the single settings row."""
        adapter.update_user_settings(UserSettings(JUNE, Money(1), "a"))
        adapter.update_user_settings(UserSettings(JULY, Money(2), "b"))

        assert adapter.get_user_settings(UserSettings(JUNE, Money(0), "")) == UserSettings(JULY, Money(2), "b")


class TestMaintenance:
    """Tests for clearing and connection checks."""

    def test_clear_all(self, adapter: SqliteAdapter) -> None:
        """Should empty every table."""
        adapter.create_budget(make_budget(JUNE, "b1", rent()))
        adapter.add_transaction(build_transaction("t1", "rent", Money(1), "", date(2024, 6, 1)))

        adapter.clear_all()

        assert adapter.get_all_budgets() == []
        assert adapter.get_all_transactions() == []

    def test_check_connection(self, adapter: SqliteAdapter, tmp_path: Path) -> None:
        """Should report whether the database can be reached."""
        assert adapter.check_connection()
        assert not check_connection(tmp_path / "missing.db")

    def test_errors_become_persistence_errors(self, adapter: SqliteAdapter) -> None:
        """Should wrap database errors."""
        adapter.add_transaction(build_transaction("t1", "food", Money(1), "", date(2024, 6, 1)))

        with pytest.raises(PersistenceError):
            adapter.add_transaction(build_transaction("t1", "food", Money(1), "", date(2024, 6, 1)))

    def test_unusable_path(self, tmp_path: Path) -> None:
        """Should fail to open a database inside a file."""
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        with pytest.raises(PersistenceError):
            SqliteAdapter(blocker / "finplan.db")
