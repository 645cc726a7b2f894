"""Tests for finplan.domain.budget pure functions."""

from dataclasses import replace
from datetime import date

from finplan.domain.budget import (
    EMPTY_SUMMARY,
    calculate_variable_share,
    category_actual_amount,
    compute_budget_summary,
    compute_daily_average,
    compute_savings_summary,
    needs_redistribution,
    redistribute_income,
)
from finplan.domain.models import (
    Budget,
    BudgetCategory,
    CategoryId,
    CategoryKind,
    Fixed,
    Money,
    Month,
    TransactionType,
    Variable,
)
from finplan.domain.transactions import build_transaction


def make_category(
    category_id: str,
    planned: int = 0,
    allocation: Fixed | Variable = Fixed(),
    kind: CategoryKind = CategoryKind.EXPENSE,
) -> BudgetCategory:
    return BudgetCategory(
        id=CategoryId(category_id),
        name=category_id.title(),
        planned_amount=Money(planned),
        kind=kind,
        allocation=allocation,
    )


def make_budget(income: int, *categories: BudgetCategory, month: str = "2024-06") -> Budget:
    return Budget(id=f"b-{month}", name="June", month=Month(month), total_income=Money(income), categories=categories)


def june_budget() -> Budget:
    """Income 150000, rent 45000 fixed, two variable categories at 0.5 each."""
    return make_budget(
        150000,
        make_category("rent", 45000),
        make_category("food", allocation=Variable(0.5)),
        make_category("fun", allocation=Variable(0.5)),
    )


class TestCalculateVariableShare:
    """Tests for calculate_variable_share."""

    def test_even_split(self) -> None:
        """Should give each equal weight the same share."""
        assert calculate_variable_share(Money(105000), 0.5, 1.0) == Money(52500)

    def test_rounds_to_minor_unit(self) -> None:
        """Should round fractional shares to the nearest minor unit."""
        assert calculate_variable_share(Money(100), 1, 3) == Money(33)
        assert calculate_variable_share(Money(100), 2, 3) == Money(67)

    def test_never_negative(self) -> None:
        """Should clamp negative shares to zero."""
        assert calculate_variable_share(Money(-100), 1, 1) == Money(0)


class TestRedistributeIncome:
    """Tests for redistribute_income."""

    def test_splits_income_after_fixed_by_proportion(self) -> None:
        """Should give both variable categories 52500 from 105000 available."""
        result = redistribute_income(june_budget())

        assert result.find_category("food").planned_amount == Money(52500)
        assert result.find_category("fun").planned_amount == Money(52500)
        assert result.find_category("rent").planned_amount == Money(45000)

    def test_variable_total_matches_available(self) -> None:
        """Should allocate all available income across variable categories within rounding."""
        budget = make_budget(
            100000,
            make_category("rent", 30001),
            make_category("a", allocation=Variable(1)),
            make_category("b", allocation=Variable(1)),
            make_category("c", allocation=Variable(1)),
        )
        result = redistribute_income(budget)

        variable_total = sum(c.planned_amount for c in result.categories if c.is_variable)
        assert abs(variable_total - (100000 - 30001)) <= 3

    def test_uneven_proportions(self) -> None:
        """Should weight shares by proportion."""
        budget = make_budget(
            10000,
            make_category("a", allocation=Variable(50)),
            make_category("b", allocation=Variable(20)),
            make_category("c", allocation=Variable(30)),
        )
        result = redistribute_income(budget)

        assert [c.planned_amount for c in result.categories] == [5000, 2000, 3000]

    def test_is_idempotent(self) -> None:
        """Should produce identical planned amounts when applied twice."""
        once = redistribute_income(june_budget())
        twice = redistribute_income(once)

        assert once == twice

    def test_zero_total_proportion_is_noop(self) -> None:
        """Should leave the budget unchanged when all weights are zero."""
        budget = make_budget(
            150000,
            make_category("rent", 45000),
            make_category("food", 1234, allocation=Variable(0)),
        )
        assert redistribute_income(budget) is budget

    def test_fixed_above_income_leaves_nothing_for_variable(self) -> None:
        """Should clamp available income at zero when fixed exceeds income."""
        budget = make_budget(
            1000,
            make_category("rent", 5000),
            make_category("food", 700, allocation=Variable(1)),
        )
        result = redistribute_income(budget)

        assert result.find_category("food").planned_amount == Money(0)

    def test_ignores_non_expense_categories(self) -> None:
        """Should not count or change income and savings categories."""
        budget = make_budget(
            10000,
            make_category("salary", 9999, kind=CategoryKind.INCOME),
            make_category("pot", 0, allocation=Variable(1), kind=CategoryKind.SAVINGS),
            make_category("food", allocation=Variable(1)),
        )
        result = redistribute_income(budget)

        assert result.find_category("food").planned_amount == Money(10000)
        assert result.find_category("pot").planned_amount == Money(0)
        assert result.find_category("salary").planned_amount == Money(9999)


class TestCategoryActualAmount:
    """Tests for category_actual_amount."""

    def test_fixed_category_equals_planned(self) -> None:
        """Should report planned amount for fixed categories regardless of transactions."""
        rent = make_category("rent", 45000)
        txns = [build_transaction("t1", "rent", Money(100), "", date(2024, 6, 3))]

        assert category_actual_amount(rent, txns, Month("2024-06")) == Money(45000)

    def test_variable_category_sums_month_transactions(self) -> None:
        """Should sum only the month's transactions for the category."""
        food = make_category("food", allocation=Variable(1))
        txns = [
            build_transaction("t1", "food", Money(1500), "", date(2024, 6, 3)),
            build_transaction("t2", "food", Money(500), "", date(2024, 6, 20)),
            build_transaction("t3", "food", Money(9999), "", date(2024, 7, 1)),
            build_transaction("t4", "other", Money(9999), "", date(2024, 6, 4)),
        ]

        assert category_actual_amount(food, txns, Month("2024-06")) == Money(2000)


class TestComputeBudgetSummary:
    """Tests for compute_budget_summary."""

    def test_missing_budget_is_all_zero(self) -> None:
        """Should return a zero summary for a missing budget."""
        assert compute_budget_summary(None, []) == EMPTY_SUMMARY

    def test_planned_and_actual_totals(self) -> None:
        """Should include variable spending in actuals and derive savings as remainder."""
        budget = redistribute_income(june_budget())
        txns = [build_transaction("t1", "food", Money(20000), "Groceries", date(2024, 6, 10))]

        summary = compute_budget_summary(budget, txns)

        assert summary.total_income == Money(150000)
        assert summary.total_fixed_expenses == Money(45000)
        assert summary.total_variable_expenses == Money(105000)
        assert summary.total_planned_expenses == Money(150000)
        assert summary.total_actual_expenses == Money(65000)
        assert summary.total_planned_savings == Money(0)
        assert summary.total_actual_savings == Money(85000)
        assert summary.available_for_variable == Money(105000)

    def test_savings_clamped_but_available_can_go_negative(self) -> None:
        """Should never report negative savings but show a negative variable pool."""
        budget = make_budget(1000, make_category("rent", 5000))

        summary = compute_budget_summary(budget, [])

        assert summary.total_planned_savings == Money(0)
        assert summary.total_actual_savings == Money(0)
        assert summary.available_for_variable == Money(-4000)


class TestComputeSavingsSummary:
    """Tests for compute_savings_summary."""

    def test_aggregates_months_in_order(self) -> None:
        """Should list months ascending and total their remainder savings."""
        july = make_budget(50000, make_category("rent", 20000), month="2024-07")
        june = make_budget(40000, make_category("rent", 30000), month="2024-06")

        summary = compute_savings_summary([july, june], [], Money(100000), "Holiday")

        assert [m.month for m in summary.savings_by_month] == ["2024-06", "2024-07"]
        assert summary.total_planned_savings == Money(40000)
        assert summary.total_actual_savings == Money(40000)
        assert summary.progress == 40.0
        assert summary.goal_description == "Holiday"

    def test_zero_goal_has_no_progress(self) -> None:
        """Should report zero progress when there is no goal."""
        summary = compute_savings_summary([], [], Money(0), "")
        assert summary.progress == 0.0


class TestComputeDailyAverage:
    """Tests for compute_daily_average."""

    def test_current_month_uses_days_elapsed(self) -> None:
        """Should divide by the day of month for the running month."""
        txns = [
            build_transaction("t1", "food", Money(1000), "", date(2024, 6, 1)),
            build_transaction("t2", "food", Money(2000), "", date(2024, 6, 9)),
            build_transaction("t3", "pay", Money(99999), "", date(2024, 6, 2), TransactionType.INCOME),
        ]

        average = compute_daily_average(txns, Month("2024-06"), date(2024, 6, 10))

        assert average.total_expenses == Money(3000)
        assert average.days_count == 10
        assert average.average_per_day == 300.0
        assert not average.is_past_month

    def test_other_month_uses_full_length(self) -> None:
        """Should divide by the number of days in a month that is not running."""
        txns = [build_transaction("t1", "food", Money(2900), "", date(2024, 2, 5))]

        average = compute_daily_average(txns, Month("2024-02"), date(2024, 6, 10))

        assert average.days_count == 29
        assert average.average_per_day == 100.0
        assert average.is_past_month


class TestNeedsRedistribution:
    """Tests for needs_redistribution."""

    def test_fixed_planned_change(self) -> None:
        """Should redistribute when a fixed expense amount changes."""
        rent = make_category("rent", 45000)
        assert needs_redistribution(rent, replace(rent, planned_amount=Money(50000)))

    def test_allocation_change(self) -> None:
        """Should redistribute when switching between fixed and variable."""
        rent = make_category("rent", 45000)
        assert needs_redistribution(rent, replace(rent, allocation=Variable(1)))

    def test_proportion_change(self) -> None:
        """Should redistribute when a variable weight changes."""
        food = make_category("food", allocation=Variable(0.5))
        assert needs_redistribution(food, replace(food, allocation=Variable(0.7)))

    def test_kind_change(self) -> None:
        """Should redistribute when an expense becomes savings."""
        food = make_category("food", allocation=Variable(0.5))
        assert needs_redistribution(food, replace(food, kind=CategoryKind.SAVINGS))

    def test_cosmetic_change(self) -> None:
        """Should not redistribute for a rename or color change."""
        rent = make_category("rent", 45000)
        assert not needs_redistribution(rent, replace(rent, name="Mortgage", color="#fff"))

    def test_non_expense_change(self) -> None:
        """Should not redistribute for changes to income categories."""
        salary = make_category("salary", 100, kind=CategoryKind.INCOME)
        assert not needs_redistribution(salary, replace(salary, planned_amount=Money(200)))

