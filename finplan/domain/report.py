"""Pure functions for report calculations and aggregations.

This module contains the functional core for reporting operations:
- No I/O operations (no database, no console, no files)
- No side effects
- Pure data transformations
- Easy to test

All monetary amounts are in minor units (Money type).
"""

from dataclasses import dataclass
from typing import Iterable

from finplan.domain.budget import category_actual_amount
from finplan.domain.models import Budget, BudgetCategory, CategoryKind, Money, Transaction


@dataclass(frozen=True)
class CategoryReport:
    """Immutable plan-vs-actual line for one category."""

    category: BudgetCategory
    planned: Money
    actual: Money
    percentage: float | None = None

    @property
    def remaining(self) -> Money:
        return Money(self.planned - self.actual)


def calculate_budget_percentage(actual: Money, planned: Money) -> float:
    """Calculate percentage of planned amount used.

    Args:
        actual: Actual amount in minor units.
        planned: Planned amount in minor units.

    Returns:
        Percentage of plan used (0-100+).
    """
    if planned <= 0:
        return 0.0
    return (abs(actual) / planned) * 100


def create_category_reports(
    budget: Budget,
    transactions: Iterable[Transaction],
    sort_by: str = "value",
) -> list[CategoryReport]:
    """Build plan-vs-actual lines for every category in a budget.

    Args:
        budget: Budget to report on.
        transactions: All transactions.
        sort_by: Sort method - "value" (largest planned first), "alpha", or "kind".

    Returns:
        List of CategoryReport.
    """
    transactions = list(transactions)
    reports = []
    for category in budget.categories:
        actual = category_actual_amount(category, transactions, budget.month)
        percentage = calculate_budget_percentage(actual, category.planned_amount) if category.planned_amount else None
        reports.append(
            CategoryReport(
                category=category,
                planned=category.planned_amount,
                actual=actual,
                percentage=percentage,
            )
        )

    if sort_by == "alpha":
        return sorted(reports, key=lambda r: r.category.name.lower())
    if sort_by == "kind":
        order = {CategoryKind.INCOME: 0, CategoryKind.EXPENSE: 1, CategoryKind.SAVINGS: 2}
        return sorted(reports, key=lambda r: (order[r.category.kind], r.category.is_variable, r.category.name))
    return sorted(reports, key=lambda r: r.planned, reverse=True)


def calculate_histogram_bar_length(
    amount: Money,
    max_amount: Money,
    bar_width: int,
) -> int:
    """Calculate histogram bar length.

    Args:
        amount: Amount to display.
        max_amount: Maximum amount in dataset.
        bar_width: Maximum bar width in characters.

    Returns:
        Bar length in characters.
    """
    if max_amount <= 0:
        return 0
    return int((abs(amount) / max_amount) * bar_width)


def format_money(amount: Money, symbol: str = "£") -> str:
    """Format minor units for display (e.g., 123456 -> "£1,234.56")."""
    sign = "-" if amount < 0 else ""
    return f"{sign}{symbol}{abs(amount) / 100:,.2f}"
