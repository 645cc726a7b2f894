"""Domain type definitions for finplan.

These types provide semantic clarity and help with type checking:
- Money: Amount in minor units (pence)
- Month: Month in YYYY-MM format
- Budget, BudgetCategory, Transaction: the entities the store owns
- Fixed / Variable: allocation kinds for a category

Entities are frozen. Changes are made by building a replacement with
dataclasses.replace, never by assigning to fields.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import NewType

# Money amounts are stored as minor units to avoid floating point errors
Money = NewType("Money", int)

# Month is always in YYYY-MM format (e.g., "2025-01")
Month = NewType("Month", str)

CategoryId = NewType("CategoryId", str)
TransactionId = NewType("TransactionId", str)


class CategoryKind(str, Enum):
    """Semantic type of a budget category."""

    INCOME = "income"
    EXPENSE = "expense"
    SAVINGS = "savings"


class TransactionType(str, Enum):
    """Direction of a recorded transaction."""

    INCOME = "income"
    EXPENSE = "expense"


@dataclass(frozen=True)
class Fixed:
    """Planned amount is authored directly and never redistributed."""

    label = "fixed"


@dataclass(frozen=True)
class Variable:
    """Planned amount is a proportional share of income left after fixed expenses."""

    proportion: float = 0.0

    label = "variable"


Allocation = Fixed | Variable


@dataclass(frozen=True)
class BudgetCategory:
    """Immutable category within one month's budget."""

    id: CategoryId
    name: str
    planned_amount: Money
    kind: CategoryKind
    allocation: Allocation
    actual_amount: Money = Money(0)
    color: str | None = None
    is_permanent: bool = False

    @property
    def is_fixed(self) -> bool:
        return isinstance(self.allocation, Fixed)

    @property
    def is_variable(self) -> bool:
        return isinstance(self.allocation, Variable)

    @property
    def proportion(self) -> float | None:
        """Variable weight, or None for fixed categories."""
        if isinstance(self.allocation, Variable):
            return self.allocation.proportion
        return None


@dataclass(frozen=True)
class Budget:
    """Immutable plan for one calendar month."""

    id: str
    name: str
    month: Month
    total_income: Money
    categories: tuple[BudgetCategory, ...] = ()
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)

    def find_category(self, category_id: str) -> BudgetCategory | None:
        for category in self.categories:
            if category.id == category_id:
                return category
        return None


@dataclass(frozen=True)
class Transaction:
    """Immutable recorded expense or income event."""

    id: TransactionId
    category_id: CategoryId
    amount: Money
    description: str
    date: date
    month: Month
    type: TransactionType = TransactionType.EXPENSE
    created_at: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class UserSettings:
    """Store-wide settings persisted alongside the budgets."""

    current_month: Month
    savings_goal: Money
    savings_goal_description: str
