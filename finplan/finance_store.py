"""The finance store: single authoritative state for budgets and transactions.

All mutation goes through the command methods below. Each command computes
the new state with the pure functions in finplan.domain, writes it through
the persistence adapter, and only then updates the in-memory state. If the
adapter fails, the error is logged and the in-memory state is left as it was.
"""

import logging
import uuid
from collections.abc import Callable, Mapping
from dataclasses import replace
from datetime import date, datetime
from types import MappingProxyType
from typing import Any

from finplan.dates import month_key, previous_month
from finplan.domain.budget import (
    BudgetSummary,
    DailyAverage,
    SavingsSummary,
    category_actual_amount,
    compute_budget_summary,
    compute_daily_average,
    compute_savings_summary,
    needs_redistribution,
    redistribute_income,
)
from finplan.domain.models import (
    Allocation,
    Budget,
    BudgetCategory,
    CategoryId,
    CategoryKind,
    Fixed,
    Money,
    Month,
    Transaction,
    TransactionType,
    UserSettings,
    Variable,
)
from finplan.domain.transactions import apply_transaction_update, build_transaction, filter_by_category
from finplan.store.base import PersistenceAdapter, PersistenceError
from finplan.store.snapshot import SnapshotAdapter
from finplan.store.sqlite import SqliteAdapter

logger = logging.getLogger(__name__)

DEFAULT_SAVINGS_GOAL = Money(100000)
DEFAULT_SAVINGS_GOAL_DESCRIPTION = "Savings goal"

CATEGORY_FIELDS = frozenset({"name", "planned_amount", "actual_amount", "kind", "allocation", "color", "is_permanent"})

# Placeholder categories for seeded budgets: (name, planned, allocation, color)
SEED_CATEGORIES: tuple[tuple[str, Money, Allocation, str], ...] = (
    ("Rent", Money(4500000), Fixed(), "#EF4444"),
    ("Utilities", Money(800000), Fixed(), "#F59E0B"),
    ("Loan", Money(2500000), Fixed(), "#DC2626"),
    ("Groceries", Money(0), Variable(50), "#10B981"),
    ("Transport", Money(0), Variable(20), "#3B82F6"),
    ("Entertainment", Money(0), Variable(30), "#8B5CF6"),
)
SEED_INCOME = Money(15000000)


def new_id() -> str:
    return str(uuid.uuid4())


class FinanceStore:
    """State container for budgets keyed by month, transactions and settings.

    Args:
        adapter: Storage backend. If None, state lives in memory only.
        savings_goal: Goal used until settings are loaded or changed.
        savings_goal_description: Description used with the default goal.
        today: Date used to pick the initial current month.
        id_factory: Callable producing fresh identifiers.
    """

    def __init__(
        self,
        adapter: PersistenceAdapter | None = None,
        savings_goal: Money = DEFAULT_SAVINGS_GOAL,
        savings_goal_description: str = DEFAULT_SAVINGS_GOAL_DESCRIPTION,
        today: date | None = None,
        id_factory: Callable[[], str] = new_id,
    ) -> None:
        self._adapter = adapter
        self._new_id = id_factory
        self._budgets: dict[Month, Budget] = {}
        self._transactions: list[Transaction] = []
        self._current_month = month_key(today or date.today())
        self._savings_goal = savings_goal
        self._savings_goal_description = savings_goal_description

    # ------------------------------------------------------------------
    # State views

    @property
    def budgets(self) -> Mapping[Month, Budget]:
        return MappingProxyType(self._budgets)

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        return tuple(self._transactions)

    @property
    def current_month(self) -> Month:
        return self._current_month

    @property
    def savings_goal(self) -> Money:
        return self._savings_goal

    @property
    def savings_goal_description(self) -> str:
        return self._savings_goal_description

    def _settings(self) -> UserSettings:
        return UserSettings(
            current_month=self._current_month,
            savings_goal=self._savings_goal,
            savings_goal_description=self._savings_goal_description,
        )

    def _persist(self, action: str, method: str, *args: Any) -> bool:
        """Call one adapter method, logging instead of raising on failure."""
        if self._adapter is None:
            return True
        try:
            getattr(self._adapter, method)(*args)
        except PersistenceError as e:
            logger.error("Failed to %s: %s", action, e)
            return False
        return True

    def load(self) -> bool:
        """Replace the in-memory state with what the adapter holds.

        Returns:
            True on success. On failure the current state is kept.
        """
        if self._adapter is None:
            return True
        try:
            settings = self._adapter.get_user_settings(self._settings())
            budgets = self._adapter.get_all_budgets()
            transactions = self._adapter.get_all_transactions()
        except PersistenceError as e:
            logger.error("Failed to load data: %s", e)
            return False

        self._budgets = {b.month: b for b in budgets}
        self._transactions = list(transactions)
        self._current_month = settings.current_month
        self._savings_goal = settings.savings_goal
        self._savings_goal_description = settings.savings_goal_description
        logger.debug("Loaded %d budgets and %d transactions", len(budgets), len(transactions))
        return True

    # ------------------------------------------------------------------
    # Budget commands

    def create_budget(self, name: str, month: Month, total_income: Money = Money(0)) -> Budget | None:
        """Create the budget for a month, replacing any existing one.

        The new budget starts with no categories and becomes the current month.

        Returns:
            The new budget, or None if it could not be saved.
        """
        now = datetime.now()
        budget = Budget(
            id=self._new_id(),
            name=name,
            month=month,
            total_income=total_income,
            created_at=now,
            updated_at=now,
        )
        if not self._persist("create budget", "create_budget", budget):
            return None

        replaced = self._budgets.get(month)
        if replaced is not None:
            old_ids = {c.id for c in replaced.categories}
            self._transactions = [t for t in self._transactions if not (t.month == month and t.category_id in old_ids)]
            logger.info("Replaced existing budget for %s", month)

        self._budgets[month] = budget
        self.set_current_month(month)
        return budget

    def update_budget_income(self, month: Month, total_income: Money) -> Budget | None:
        """Set a month's income and redistribute variable categories.

        Returns:
            The updated budget, or None if there is no budget or saving failed.
        """
        budget = self._budgets.get(month)
        if budget is None:
            return None
        if not self._persist("update budget income", "update_budget_income", month, total_income):
            return None

        self._budgets[month] = replace(budget, total_income=total_income, updated_at=datetime.now())
        return self.redistribute_income(month)

    def redistribute_income(self, month: Month) -> Budget | None:
        """Recompute variable planned amounts for a month.

        Returns:
            The budget after redistribution (unchanged if it could not be saved),
            or None if the month has no budget.
        """
        budget = self._budgets.get(month)
        if budget is None:
            return None

        redistributed = redistribute_income(budget)
        changed = [
            new for old, new in zip(budget.categories, redistributed.categories) if old.planned_amount != new.planned_amount
        ]
        if not changed:
            return budget

        for category in changed:
            if not self._persist("redistribute income", "update_category", category):
                return budget

        self._budgets[month] = replace(redistributed, updated_at=datetime.now())
        logger.debug("Redistributed %d variable categories for %s", len(changed), month)
        return self._budgets[month]

    # ------------------------------------------------------------------
    # Category commands

    def add_category(
        self,
        month: Month,
        name: str,
        planned_amount: Money = Money(0),
        kind: CategoryKind = CategoryKind.EXPENSE,
        allocation: Allocation = Fixed(),
        color: str | None = None,
        is_permanent: bool = False,
    ) -> BudgetCategory | None:
        """Add a category to a month's budget.

        Adding a variable category redistributes the month's income.

        Returns:
            The category as stored, or None if there is no budget or saving failed.
        """
        budget = self._budgets.get(month)
        if budget is None:
            return None

        category = BudgetCategory(
            id=CategoryId(self._new_id()),
            name=name,
            planned_amount=planned_amount,
            kind=kind,
            allocation=allocation,
            actual_amount=Money(0),
            color=color,
            is_permanent=is_permanent,
        )
        if not self._persist("add category", "add_category", month, category):
            return None

        self._budgets[month] = replace(budget, categories=budget.categories + (category,), updated_at=datetime.now())
        if category.is_variable:
            self.redistribute_income(month)
        return self._budgets[month].find_category(category.id)

    def update_category(self, month: Month, category_id: str, **updates: Any) -> BudgetCategory | None:
        """Apply a partial update to a category.

        A ``proportion`` keyword is accepted as a shortcut for a new
        ``Variable`` allocation. Changes that affect the variable pool (a
        fixed planned amount, an allocation or a kind) redistribute income.

        Returns:
            The updated category, or None if it does not exist or saving failed.

        Raises:
            ValueError: If updates names an unknown field, gives a
                proportion for a category that is not variable, or sets the
                planned amount of a variable expense.
        """
        budget = self._budgets.get(month)
        if budget is None:
            return None
        category = budget.find_category(category_id)
        if category is None:
            return None

        if "proportion" in updates:
            proportion = updates.pop("proportion")
            allocation = updates.get("allocation", category.allocation)
            if not isinstance(allocation, Variable):
                raise ValueError("Proportion applies to variable categories only")
            updates["allocation"] = Variable(proportion=proportion)

        unknown = set(updates) - CATEGORY_FIELDS
        if unknown:
            raise ValueError(f"Cannot update category fields: {', '.join(sorted(unknown))}")

        updated = replace(category, **updates)
        if "planned_amount" in updates and updated.is_variable and updated.kind == CategoryKind.EXPENSE:
            raise ValueError("Planned amount of a variable category is derived from income")
        if not self._persist("update category", "update_category", updated):
            return None

        categories = tuple(updated if c.id == category_id else c for c in budget.categories)
        self._budgets[month] = replace(budget, categories=categories, updated_at=datetime.now())

        if needs_redistribution(category, updated):
            self.redistribute_income(month)
        return self._budgets[month].find_category(category_id)

    def remove_category(self, month: Month, category_id: str) -> bool:
        """Remove a category and that month's transactions recorded against it.

        Transactions in other months that reference the same id are kept.

        Returns:
            True if the category was removed.
        """
        budget = self._budgets.get(month)
        if budget is None:
            return False
        category = budget.find_category(category_id)
        if category is None:
            return False
        if not self._persist("remove category", "remove_category", month, category_id):
            return False

        categories = tuple(c for c in budget.categories if c.id != category_id)
        self._budgets[month] = replace(budget, categories=categories, updated_at=datetime.now())
        self._transactions = [
            t for t in self._transactions if not (t.category_id == category_id and t.month == month)
        ]

        if category.is_variable:
            self.redistribute_income(month)
        return True

    def copy_permanent_category_to_future_months(self, category: BudgetCategory, from_month: Month) -> list[BudgetCategory]:
        """Copy a recurring category into every later month that already has a budget.

        Months that already have a category with the same name are skipped.
        Earlier months are never touched.

        Returns:
            The categories that were created.
        """
        created = []
        for month in sorted(m for m in self._budgets if m > from_month):
            budget = self._budgets[month]
            if any(c.name == category.name for c in budget.categories):
                continue
            added = self.add_category(
                month,
                name=category.name,
                planned_amount=category.planned_amount,
                kind=category.kind,
                allocation=category.allocation,
                color=category.color,
                is_permanent=category.is_permanent,
            )
            if added is not None:
                created.append(added)
        return created

    # ------------------------------------------------------------------
    # Transaction commands

    def add_transaction(
        self,
        category_id: str,
        amount: Money,
        description: str,
        day: date,
        type: TransactionType = TransactionType.EXPENSE,
    ) -> Transaction | None:
        """Record a transaction. Its month is derived from its date.

        Returns:
            The new transaction, or None if saving failed.
        """
        transaction = build_transaction(self._new_id(), category_id, amount, description, day, type)
        if not self._persist("add transaction", "add_transaction", transaction):
            return None
        self._transactions.append(transaction)
        return transaction

    def update_transaction(self, transaction_id: str, **updates: Any) -> Transaction | None:
        """Apply a partial update to a transaction, re-deriving its month.

        Returns:
            The updated transaction, or None if it does not exist or saving failed.
        """
        for index, transaction in enumerate(self._transactions):
            if transaction.id == transaction_id:
                break
        else:
            return None

        updated = apply_transaction_update(transaction, updates)
        if not self._persist("update transaction", "update_transaction", updated):
            return None
        self._transactions[index] = updated
        return updated

    def remove_transaction(self, transaction_id: str) -> bool:
        """Delete a transaction.

        Returns:
            True if the transaction was removed.
        """
        if not any(t.id == transaction_id for t in self._transactions):
            return False
        if not self._persist("remove transaction", "remove_transaction", transaction_id):
            return False
        self._transactions = [t for t in self._transactions if t.id != transaction_id]
        return True

    # ------------------------------------------------------------------
    # Settings commands

    def set_current_month(self, month: Month) -> bool:
        """Point the store at another month, whether or not it has a budget yet."""
        settings = replace(self._settings(), current_month=month)
        if not self._persist("update current month", "update_user_settings", settings):
            return False
        self._current_month = month
        return True

    def set_savings_goal(self, goal: Money, description: str) -> bool:
        settings = replace(self._settings(), savings_goal=goal, savings_goal_description=description)
        if not self._persist("update savings goal", "update_user_settings", settings):
            return False
        self._savings_goal = goal
        self._savings_goal_description = description
        return True

    def initialize_with_seed_data(self, today: date | None = None) -> None:
        """Create placeholder budgets for the previous and current month."""
        current = month_key(today or date.today())
        for month in (previous_month(current), current):
            if self.create_budget(f"Budget {month}", month, SEED_INCOME) is None:
                continue
            for name, planned, allocation, color in SEED_CATEGORIES:
                self.add_category(month, name, planned, CategoryKind.EXPENSE, allocation, color)
        self.set_current_month(current)

    def clear_all_data(self, today: date | None = None) -> bool:
        """Delete everything and reset settings to their defaults.

        Returns:
            True if the data was cleared.
        """
        if not self._persist("clear data", "clear_all"):
            return False
        self._budgets = {}
        self._transactions = []
        self._current_month = month_key(today or date.today())
        self._savings_goal = DEFAULT_SAVINGS_GOAL
        self._savings_goal_description = DEFAULT_SAVINGS_GOAL_DESCRIPTION
        return True

    # ------------------------------------------------------------------
    # Queries

    def get_budget(self, month: Month | None = None) -> Budget | None:
        return self._budgets.get(month or self._current_month)

    def get_current_budget(self) -> Budget | None:
        return self._budgets.get(self._current_month)

    def get_budget_summary(self, month: Month | None = None) -> BudgetSummary:
        """Plan-vs-actual summary; all zero for a month without a budget."""
        return compute_budget_summary(self.get_budget(month), self._transactions)

    def get_category_actual_amount(self, category_id: str, month: Month | None = None) -> Money:
        """Actual amount for a category in a month (0 if either is missing)."""
        budget = self.get_budget(month)
        if budget is None:
            return Money(0)
        category = budget.find_category(category_id)
        if category is None:
            return Money(0)
        return category_actual_amount(category, self._transactions, budget.month)

    def get_transactions_by_category(self, category_id: str, month: Month | None = None) -> list[Transaction]:
        """A category's transactions, newest first, optionally for one month."""
        return filter_by_category(self._transactions, category_id, month)

    def get_transactions(self, month: Month | None = None) -> list[Transaction]:
        """Transactions for a month (all months if None), newest first."""
        matches = [t for t in self._transactions if month is None or t.month == month]
        return sorted(matches, key=lambda t: (t.date, t.created_at), reverse=True)

    def get_available_months(self) -> list[Month]:
        """Sorted months that have a budget or at least one transaction."""
        return sorted(set(self._budgets) | {t.month for t in self._transactions})

    def get_savings_summary(self) -> SavingsSummary:
        return compute_savings_summary(
            self._budgets.values(), self._transactions, self._savings_goal, self._savings_goal_description
        )

    def get_daily_average(self, month: Month | None = None, today: date | None = None) -> DailyAverage:
        return compute_daily_average(self._transactions, month or self._current_month, today or date.today())

    def find_category(self, month: Month, reference: str) -> BudgetCategory | None:
        """Find a category by 1-based index, id, or case-insensitive name."""
        budget = self._budgets.get(month)
        if budget is None:
            return None

        if reference.isdigit():
            index = int(reference) - 1
            if 0 <= index < len(budget.categories):
                return budget.categories[index]
            return None

        for category in budget.categories:
            if category.id == reference or category.name.lower() == reference.lower():
                return category
        return None


def create_adapter(storage: str) -> PersistenceAdapter:
    """Build the persistence adapter named by the ``storage`` config key.

    Raises:
        ValueError: If the backend name is unknown.
        PersistenceError: If the backend cannot be opened.
    """
    if storage == "sqlite":
        return SqliteAdapter()
    if storage == "snapshot":
        return SnapshotAdapter()
    raise ValueError(f"Unknown storage backend '{storage}'")


def open_store(settings: Mapping[str, Any], today: date | None = None) -> FinanceStore:
    """Create a store for the configured backend and load its data.

    Raises:
        PersistenceError: If the backend cannot be opened or read.
    """
    store = FinanceStore(
        create_adapter(settings["storage"]),
        savings_goal=Money(round(settings["savings_goal"] * 100)),
        savings_goal_description=settings["savings_goal_description"],
        today=today,
    )
    if not store.load():
        raise PersistenceError(f"Could not load data from {settings['storage']} storage")
    return store
