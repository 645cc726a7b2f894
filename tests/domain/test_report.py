"""Tests for finplan.domain.report pure functions."""

from datetime import date

from finplan.domain.models import Budget, BudgetCategory, CategoryId, CategoryKind, Fixed, Money, Month, Variable
from finplan.domain.report import (
    calculate_budget_percentage,
    calculate_histogram_bar_length,
    create_category_reports,
    format_money,
)
from finplan.domain.transactions import build_transaction


def sample_budget() -> Budget:
    return Budget(
        id="b1",
        name="June",
        month=Month("2024-06"),
        total_income=Money(150000),
        categories=(
            BudgetCategory(CategoryId("food"), "food", Money(52500), CategoryKind.EXPENSE, Variable(0.5)),
            BudgetCategory(CategoryId("rent"), "Rent", Money(45000), CategoryKind.EXPENSE, Fixed()),
            BudgetCategory(CategoryId("pot"), "Pot", Money(10000), CategoryKind.SAVINGS, Fixed()),
        ),
    )


class TestCalculateBudgetPercentage:
    """Tests for calculate_budget_percentage."""

    def test_percentage_of_plan(self) -> None:
        """Should express actual as a percentage of planned."""
        assert calculate_budget_percentage(Money(5000), Money(10000)) == 50.0

    def test_zero_plan(self) -> None:
        """Should return zero when nothing is planned."""
        assert calculate_budget_percentage(Money(5000), Money(0)) == 0.0


class TestCreateCategoryReports:
    """Tests for create_category_reports."""

    def test_actuals_follow_allocation(self) -> None:
        """Should use planned for fixed and transactions for variable categories."""
        txns = [build_transaction("t1", "food", Money(21000), "", date(2024, 6, 5))]

        reports = {r.category.id: r for r in create_category_reports(sample_budget(), txns)}

        assert reports["rent"].actual == Money(45000)
        assert reports["food"].actual == Money(21000)
        assert reports["food"].percentage == 40.0
        assert reports["food"].remaining == Money(31500)

    def test_sort_by_value(self) -> None:
        """Should put the largest planned amount first."""
        reports = create_category_reports(sample_budget(), [])
        assert [r.category.id for r in reports] == ["food", "rent", "pot"]

    def test_sort_alpha_is_case_insensitive(self) -> None:
        """Should sort names alphabetically ignoring case."""
        reports = create_category_reports(sample_budget(), [], sort_by="alpha")
        assert [r.category.name for r in reports] == ["food", "Pot", "Rent"]

    def test_sort_by_kind(self) -> None:
        """Should list fixed expenses, then variable expenses, then savings."""
        reports = create_category_reports(sample_budget(), [], sort_by="kind")
        assert [r.category.id for r in reports] == ["rent", "food", "pot"]


class TestCalculateHistogramBarLength:
    """Tests for calculate_histogram_bar_length."""

    def test_scales_to_width(self) -> None:
        """Should scale relative to the maximum amount."""
        assert calculate_histogram_bar_length(Money(5000), Money(10000), 30) == 15

    def test_zero_max(self) -> None:
        """Should return zero when there is nothing to scale against."""
        assert calculate_histogram_bar_length(Money(5000), Money(0), 30) == 0


class TestFormatMoney:
    """Tests for format_money."""

    def test_formats_minor_units(self) -> None:
        """Should format with symbol and thousands separator."""
        assert format_money(Money(123456)) == "£1,234.56"

    def test_negative_and_custom_symbol(self) -> None:
        """Should put the sign before the symbol."""
        assert format_money(Money(-500), "$") == "-$5.00"
