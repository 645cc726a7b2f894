"""Pure functions for budget calculations and logic.

This module contains the functional core for budget operations:
- No I/O operations (no database, no console, no files)
- No side effects
- Pure data transformations
- Easy to test

All monetary amounts are in minor units (Money type). Savings are never
allocated directly: they are whatever income remains after planned or
actual expenses.
"""

from dataclasses import dataclass, replace
from datetime import date
from typing import Iterable

from finplan.dates import days_in_month, month_key
from finplan.domain.models import (
    Budget,
    BudgetCategory,
    CategoryKind,
    Money,
    Month,
    Transaction,
    TransactionType,
    Variable,
)


@dataclass(frozen=True)
class BudgetSummary:
    """Immutable plan-vs-actual summary for one month."""

    total_income: Money
    total_fixed_expenses: Money
    total_variable_expenses: Money
    total_planned_expenses: Money
    total_actual_expenses: Money
    total_planned_savings: Money
    total_actual_savings: Money
    available_for_variable: Money


EMPTY_SUMMARY = BudgetSummary(
    total_income=Money(0),
    total_fixed_expenses=Money(0),
    total_variable_expenses=Money(0),
    total_planned_expenses=Money(0),
    total_actual_expenses=Money(0),
    total_planned_savings=Money(0),
    total_actual_savings=Money(0),
    available_for_variable=Money(0),
)


@dataclass(frozen=True)
class MonthlySavings:
    """Immutable planned and actual savings for one month."""

    month: Month
    planned: Money
    actual: Money


@dataclass(frozen=True)
class SavingsSummary:
    """Immutable savings totals across all months."""

    total_planned_savings: Money
    total_actual_savings: Money
    savings_by_month: list[MonthlySavings]
    goal: Money
    goal_description: str

    @property
    def progress(self) -> float:
        """Percentage of the goal covered by actual savings."""
        if self.goal <= 0:
            return 0.0
        return (self.total_actual_savings / self.goal) * 100


@dataclass(frozen=True)
class DailyAverage:
    """Immutable average daily spending for a month."""

    average_per_day: float
    total_expenses: Money
    days_count: int
    is_past_month: bool


def expense_categories(budget: Budget) -> tuple[list[BudgetCategory], list[BudgetCategory]]:
    """Partition a budget's expense categories into fixed and variable.

    Returns:
        Tuple of (fixed, variable) expense categories.
    """
    fixed = [c for c in budget.categories if c.kind == CategoryKind.EXPENSE and c.is_fixed]
    variable = [c for c in budget.categories if c.kind == CategoryKind.EXPENSE and c.is_variable]
    return fixed, variable


def calculate_variable_share(available: Money, proportion: float, total_proportion: float) -> Money:
    """Calculate one variable category's share of the available income.

    Args:
        available: Income left for variable categories.
        proportion: The category's weight.
        total_proportion: Sum of all variable weights (must be non-zero).

    Returns:
        Planned amount, rounded to the minor unit and never negative.
    """
    return Money(max(0, round(available * proportion / total_proportion)))


def redistribute_income(budget: Budget) -> Budget:
    """Recompute planned amounts of variable expense categories.

    Fixed expenses are taken out of income first. What remains is split
    across variable expense categories by proportion. A budget whose
    variable proportions sum to zero is returned unchanged.

    Args:
        budget: Budget to redistribute.

    Returns:
        Budget with recomputed variable planned amounts.
    """
    fixed, variable = expense_categories(budget)

    total_fixed = sum(c.planned_amount for c in fixed)
    available = Money(max(0, budget.total_income - total_fixed))
    total_proportion = sum(c.proportion or 0.0 for c in variable)

    if total_proportion == 0:
        return budget

    categories = tuple(
        replace(c, planned_amount=calculate_variable_share(available, c.proportion or 0.0, total_proportion))
        if c.kind == CategoryKind.EXPENSE and isinstance(c.allocation, Variable)
        else c
        for c in budget.categories
    )
    return replace(budget, categories=categories)


def sum_transactions(transactions: Iterable[Transaction], category_id: str, month: Month) -> Money:
    """Sum transaction amounts for a category within a month."""
    return Money(sum(t.amount for t in transactions if t.category_id == category_id and t.month == month))


def category_actual_amount(category: BudgetCategory, transactions: Iterable[Transaction], month: Month) -> Money:
    """Get the actual amount for a category.

    Fixed spend is assumed to happen exactly as planned. Everything else is
    the sum of the month's transactions recorded against the category.
    """
    if category.is_fixed:
        return category.planned_amount
    return sum_transactions(transactions, category.id, month)


def compute_budget_summary(budget: Budget | None, transactions: Iterable[Transaction]) -> BudgetSummary:
    """Compute the plan-vs-actual summary for a budget.

    Args:
        budget: Budget to summarize, or None.
        transactions: Transactions to draw actual spending from.

    Returns:
        BudgetSummary. All fields are zero when budget is None.
    """
    if budget is None:
        return EMPTY_SUMMARY

    month_transactions = [t for t in transactions if t.month == budget.month]
    fixed, variable = expense_categories(budget)

    total_fixed = Money(sum(c.planned_amount for c in fixed))
    total_variable = Money(sum(c.planned_amount for c in variable))
    total_planned = Money(total_fixed + total_variable)

    actual_variable = sum(sum_transactions(month_transactions, c.id, budget.month) for c in variable)
    total_actual = Money(total_fixed + actual_variable)

    return BudgetSummary(
        total_income=budget.total_income,
        total_fixed_expenses=total_fixed,
        total_variable_expenses=total_variable,
        total_planned_expenses=total_planned,
        total_actual_expenses=total_actual,
        total_planned_savings=Money(max(0, budget.total_income - total_planned)),
        total_actual_savings=Money(max(0, budget.total_income - total_actual)),
        available_for_variable=Money(budget.total_income - total_fixed),
    )


def compute_savings_summary(
    budgets: Iterable[Budget],
    transactions: Iterable[Transaction],
    goal: Money,
    goal_description: str,
) -> SavingsSummary:
    """Aggregate remainder savings across all budgeted months.

    Args:
        budgets: All budgets.
        transactions: All transactions.
        goal: Savings target.
        goal_description: What the target is for.

    Returns:
        SavingsSummary with months in ascending order.
    """
    transactions = list(transactions)
    by_month: list[MonthlySavings] = []

    for budget in sorted(budgets, key=lambda b: b.month):
        summary = compute_budget_summary(budget, transactions)
        by_month.append(
            MonthlySavings(
                month=budget.month,
                planned=summary.total_planned_savings,
                actual=summary.total_actual_savings,
            )
        )

    return SavingsSummary(
        total_planned_savings=Money(sum(m.planned for m in by_month)),
        total_actual_savings=Money(sum(m.actual for m in by_month)),
        savings_by_month=by_month,
        goal=goal,
        goal_description=goal_description,
    )


def compute_daily_average(transactions: Iterable[Transaction], month: Month, today: date) -> DailyAverage:
    """Average daily expense spending for a month.

    The running month is divided by the days elapsed so far. Any other
    month is divided by its full length.

    Args:
        transactions: All transactions.
        month: Month to average.
        today: Current date.

    Returns:
        DailyAverage for the month.
    """
    total = Money(sum(t.amount for t in transactions if t.month == month and t.type == TransactionType.EXPENSE))

    if month == month_key(today):
        days = today.day
        is_past = False
    else:
        days = days_in_month(month)
        is_past = True

    return DailyAverage(
        average_per_day=total / days if days else 0.0,
        total_expenses=total,
        days_count=days,
        is_past_month=is_past,
    )


def needs_redistribution(before: BudgetCategory, after: BudgetCategory) -> bool:
    """Check whether a category update changes the variable allocation pool.

    Args:
        before: Category as it was.
        after: Category with the update applied.

    Returns:
        True if variable planned amounts must be recomputed.
    """
    touches_expenses = CategoryKind.EXPENSE in (before.kind, after.kind)
    if not touches_expenses:
        return False

    if before.kind != after.kind or before.allocation != after.allocation:
        return True

    return after.is_fixed and before.planned_amount != after.planned_amount

