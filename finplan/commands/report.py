"""Report and savings commands for viewing plan against actual spending."""

import sys
from typing import Any

from finplan.commands.common import console, money, open_cli_store, require_money, resolve_month
from finplan.dates import format_month
from finplan.domain.models import CategoryKind, Money
from finplan.domain.report import CategoryReport, calculate_histogram_bar_length, create_category_reports

SORT_OPTIONS = ("value", "alpha", "kind")


def format_budget_display_with_color(percentage: float) -> str:
    """Format budget display with color based on percentage.

    Args:
        percentage: Budget usage percentage.

    Returns:
        Colored string for budget display.
    """
    budget_text = f"({percentage:.0f}%)"
    if percentage > 100:
        return f"[red]{budget_text}[/red]"
    elif percentage > 90:
        return f"[yellow]{budget_text}[/yellow]"
    else:
        return f"[green]{budget_text}[/green]"


def render_category_line(
    cat_report: CategoryReport,
    settings: dict[str, Any],
    histogram: bool,
    max_amount: Money | None,
    bar_width: int,
) -> None:
    """Render single category line.

    Args:
        cat_report: CategoryReport with planned and actual amounts.
        settings: Display settings (currency symbol).
        histogram: Whether to show histogram bars.
        max_amount: Maximum amount for histogram scaling.
        bar_width: Width of histogram bar in characters.
    """
    name = cat_report.category.name
    actual_display = money(cat_report.actual, settings)

    if cat_report.planned:
        percentage = cat_report.percentage or 0
        budget_display = f"/ {money(cat_report.planned, settings)} {format_budget_display_with_color(percentage)}"
    else:
        budget_display = ""

    if histogram and max_amount:
        bar_length = calculate_histogram_bar_length(cat_report.actual, max_amount, bar_width)
        bar = "█" * bar_length
        console.print(f"  {name:20} {actual_display:>12} {budget_display:30} {bar}")
    elif cat_report.planned:
        percentage = cat_report.percentage or 0
        console.print(f"  {name}: {actual_display} / {money(cat_report.planned, settings)} ({percentage:.0f}%)")
    else:
        console.print(f"  {name}: {actual_display}")


def report_command(
    sort_by: str = "value",
    histogram: bool = True,
    month: str | None = None,
) -> None:
    """Generate plan against actual spending report."""
    if sort_by not in SORT_OPTIONS:
        console.print(f"[red]Invalid sort '{sort_by}'. Use one of: {', '.join(SORT_OPTIONS)}[/red]", style="bold")
        sys.exit(1)

    store, settings = open_cli_store()
    report_month = resolve_month(store, month)
    budget = store.get_budget(report_month)

    if budget is None or not budget.categories:
        console.print(f"[dim]No budget categories for {format_month(report_month)}[/dim]")
        return

    reports = create_category_reports(budget, store.transactions, sort_by)
    expenses = [r for r in reports if r.category.kind == CategoryKind.EXPENSE]
    summary = store.get_budget_summary(report_month)

    console.print(f"[bold cyan]{format_month(report_month)}[/bold cyan]\n")

    if expenses:
        console.print("[bold red]Expenses by category:[/bold red]\n")
        max_amount = Money(max(max(r.actual, r.planned) for r in expenses)) if histogram else None
        bar_width = 30

        for cat_report in expenses:
            render_category_line(cat_report, settings, histogram, max_amount, bar_width)

        console.print(
            f"\n  [bold]Total expenses:[/bold] {money(summary.total_actual_expenses, settings)}"
            f" / {money(summary.total_planned_expenses, settings)}\n"
        )

    console.print(f"[bold green]Income:[/bold green] {money(summary.total_income, settings)}")
    console.print(
        f"[bold cyan]Savings:[/bold cyan] {money(summary.total_actual_savings, settings)}"
        f" [dim](planned {money(summary.total_planned_savings, settings)})[/dim]"
    )

    daily = store.get_daily_average(report_month)
    period = f"over {daily.days_count} days" if daily.is_past_month else f"over {daily.days_count} days so far"
    console.print(
        f"[bold]Daily average:[/bold] {money(Money(round(daily.average_per_day)), settings)} {period}"
        f" [dim](total {money(daily.total_expenses, settings)})[/dim]"
    )


def savings_command(goal: str | None = None, description: str | None = None) -> None:
    """Show savings by month and progress towards the savings goal."""
    store, settings = open_cli_store()

    if goal is not None or description is not None:
        new_goal = require_money(goal, "goal") if goal is not None else store.savings_goal
        new_description = description if description is not None else store.savings_goal_description
        if not store.set_savings_goal(new_goal, new_description):
            console.print("[red]Failed to update savings goal[/red]", style="bold")
            sys.exit(1)
        console.print(f"[green]✓[/green] Savings goal set: {new_description} ({money(new_goal, settings)})\n")

    summary = store.get_savings_summary()

    if not summary.savings_by_month:
        console.print("[dim]No budgets yet[/dim]")
    else:
        console.print("[bold cyan]Savings by month:[/bold cyan]\n")
        for entry in summary.savings_by_month:
            console.print(
                f"  {format_month(entry.month):20} {money(entry.actual, settings):>12}"
                f" [dim]/ {money(entry.planned, settings)} planned[/dim]"
            )
        console.print(
            f"\n  [bold]Total saved:[/bold] {money(summary.total_actual_savings, settings)}"
            f" / {money(summary.total_planned_savings, settings)} planned\n"
        )

    progress = min(summary.progress, 100.0)
    bar_width = 30
    filled = int(progress / 100 * bar_width)
    bar = "█" * filled + "░" * (bar_width - filled)
    console.print(f"[bold]{summary.goal_description}:[/bold] {money(summary.goal, settings)}")
    console.print(f"  {bar} {summary.progress:.0f}%")
