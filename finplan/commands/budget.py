"""Budget command for creating month budgets and showing plan against actual."""

import sys
from typing import Any

from rich.table import Table

from finplan.commands.common import console, money, open_cli_store, require_money, resolve_month
from finplan.dates import format_month
from finplan.domain.models import CategoryKind, Money, Month
from finplan.domain.report import create_category_reports
from finplan.finance_store import FinanceStore


def format_deviation(deviation: Money, settings: dict[str, Any]) -> str:
    """Format actual minus planned, red when over plan and green when under."""
    if deviation > 0:
        return f"[red]+{money(deviation, settings)}[/red]"
    if deviation < 0:
        return f"[green]{money(deviation, settings)}[/green]"
    return "[dim]0[/dim]"


def show_budget_status(store: FinanceStore, month: Month, settings: dict[str, Any]) -> None:
    """Display the plan/actual/deviation table and the month's balance."""
    budget = store.get_budget(month)
    if budget is None:
        console.print(f"[yellow]No budget for {format_month(month)}. Use --create to add one.[/yellow]")
        return

    reports = [
        r
        for r in create_category_reports(budget, store.transactions, sort_by="kind")
        if r.category.kind == CategoryKind.EXPENSE
    ]

    table = Table(title=f"{budget.name} - {format_month(month)}")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Category", style="magenta")
    table.add_column("Type", style="dim")
    table.add_column("Planned", justify="right", style="cyan")
    table.add_column("Actual", justify="right")
    table.add_column("Deviation", justify="right")

    for report in reports:
        category = report.category
        kind = category.allocation.label
        if category.proportion is not None:
            kind = f"{kind} ({category.proportion:g})"
        index = budget.categories.index(category) + 1
        table.add_row(
            str(index),
            category.name,
            kind,
            money(report.planned, settings),
            money(report.actual, settings),
            format_deviation(Money(report.actual - report.planned), settings),
        )

    summary = store.get_budget_summary(month)
    table.add_section()
    table.add_row(
        "",
        "[bold]Total[/bold]",
        "",
        f"[bold]{money(summary.total_planned_expenses, settings)}[/bold]",
        f"[bold]{money(summary.total_actual_expenses, settings)}[/bold]",
        format_deviation(Money(summary.total_actual_expenses - summary.total_planned_expenses), settings),
    )
    console.print(table)

    console.print(f"\n[bold]Income:[/bold] {money(summary.total_income, settings)}")
    console.print(f"  Fixed expenses: {money(summary.total_fixed_expenses, settings)}")
    console.print(f"  Variable expenses: {money(summary.total_variable_expenses, settings)}")
    available = summary.available_for_variable
    available_style = "red" if available < 0 else "cyan"
    console.print(f"  Available for variable: [{available_style}]{money(available, settings)}[/{available_style}]")
    console.print(
        f"[bold]Savings:[/bold] planned {money(summary.total_planned_savings, settings)}, "
        f"actual [green]{money(summary.total_actual_savings, settings)}[/green]"
    )


def budget_command(
    create: bool = False,
    name: str | None = None,
    income: str | None = None,
    month: str | None = None,
) -> None:
    """Create a budget, set its income, or show its status."""
    store, settings = open_cli_store()
    target_month = resolve_month(store, month)
    month_display = format_month(target_month)

    if create:
        total_income = require_money(income, "income") if income is not None else Money(0)
        if store.get_budget(target_month) is not None:
            console.print(f"[yellow]Replacing existing budget for {month_display}[/yellow]")
        budget = store.create_budget(name or f"Budget {target_month}", target_month, total_income)
        if budget is None:
            console.print("[red]Failed to create budget[/red]", style="bold")
            sys.exit(1)
        console.print(f"[green]✓ Created budget for {month_display}: {money(total_income, settings)} income[/green]")
        console.print("[dim]Add categories with 'finplan category add'[/dim]")
        return

    if income is not None:
        total_income = require_money(income, "income")
        if store.get_budget(target_month) is None:
            console.print(f"[red]No budget for {month_display}. Use --create first.[/red]", style="bold")
            sys.exit(1)
        if store.update_budget_income(target_month, total_income) is None:
            console.print("[red]Failed to update income[/red]", style="bold")
            sys.exit(1)
        console.print(f"[green]✓ Set income for {month_display}: {money(total_income, settings)}[/green]")

    show_budget_status(store, target_month, settings)
