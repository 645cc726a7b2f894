"""Category management commands (add, edit, remove, list)."""

import sys
from typing import Any

import typer
from rich.table import Table

from finplan.commands.common import console, money, open_cli_store, require_category, require_money, resolve_month
from finplan.dates import format_month
from finplan.domain.models import Allocation, CategoryKind, Fixed, Money, Variable
from finplan.domain.transactions import parse_proportion

ALLOCATIONS = ("fixed", "variable")


def parse_kind(kind: str) -> CategoryKind:
    try:
        return CategoryKind(kind.lower())
    except ValueError:
        choices = ", ".join(k.value for k in CategoryKind)
        console.print(f"[red]Invalid category type '{kind}'. Use one of: {choices}[/red]", style="bold")
        sys.exit(1)


def require_proportion(value: str) -> float:
    proportion = parse_proportion(value)
    if proportion is None:
        console.print(f"[red]Invalid proportion '{value}'. Must be a non-negative number[/red]", style="bold")
        sys.exit(1)
    return proportion


def build_allocation(allocation: str | None, proportion: str | None, current: Allocation | None = None) -> Allocation:
    """Work out the allocation from the --allocation and --proportion options.

    Giving a proportion implies a variable allocation.
    """
    if allocation is not None and allocation.lower() not in ALLOCATIONS:
        console.print(f"[red]Invalid allocation '{allocation}'. Use 'fixed' or 'variable'[/red]", style="bold")
        sys.exit(1)

    if allocation is not None and allocation.lower() == "fixed":
        if proportion is not None:
            console.print("[red]Fixed categories cannot have a proportion[/red]", style="bold")
            sys.exit(1)
        return Fixed()

    if proportion is not None:
        return Variable(proportion=require_proportion(proportion))
    if allocation is not None:
        return current if isinstance(current, Variable) else Variable()
    return current if current is not None else Fixed()


def add_command(
    name: str,
    planned: str | None = None,
    proportion: str | None = None,
    allocation: str | None = None,
    kind: str = "expense",
    color: str | None = None,
    permanent: bool = False,
    month: str | None = None,
) -> None:
    """Add a category to a month's budget."""
    store, settings = open_cli_store()
    target_month = resolve_month(store, month)

    if store.get_budget(target_month) is None:
        console.print(f"[red]No budget for {format_month(target_month)}. Create one first.[/red]", style="bold")
        sys.exit(1)

    new_allocation = build_allocation(allocation, proportion)
    planned_amount = require_money(planned, "planned amount") if planned is not None else Money(0)

    category = store.add_category(
        target_month,
        name,
        planned_amount,
        parse_kind(kind),
        new_allocation,
        color=color,
        is_permanent=permanent,
    )
    if category is None:
        console.print("[red]Failed to add category[/red]", style="bold")
        sys.exit(1)

    console.print(f"[green]✓[/green] Added {category.allocation.label} category: {category.name}")
    console.print(f"  Planned: {money(category.planned_amount, settings)}")

    if permanent:
        copies = store.copy_permanent_category_to_future_months(category, target_month)
        if copies:
            console.print(f"[dim]  Copied to {len(copies)} later month(s)[/dim]")


def edit_command(
    reference: str,
    name: str | None = None,
    planned: str | None = None,
    proportion: str | None = None,
    allocation: str | None = None,
    kind: str | None = None,
    color: str | None = None,
    permanent: bool | None = None,
    month: str | None = None,
) -> None:
    """Edit a category."""
    store, settings = open_cli_store()
    target_month = resolve_month(store, month)
    category = require_category(store, target_month, reference)

    updates: dict[str, Any] = {}
    if name is not None:
        updates["name"] = name
    if planned is not None:
        updates["planned_amount"] = require_money(planned, "planned amount")
    if allocation is not None or proportion is not None:
        updates["allocation"] = build_allocation(allocation, proportion, category.allocation)
    if kind is not None:
        updates["kind"] = parse_kind(kind)
    if color is not None:
        updates["color"] = color
    if permanent is not None:
        updates["is_permanent"] = permanent

    if not updates:
        console.print("[yellow]Nothing to change[/yellow]")
        return

    try:
        updated = store.update_category(target_month, category.id, **updates)
    except ValueError as e:
        console.print(f"[red]{e}[/red]", style="bold")
        sys.exit(1)
    if updated is None:
        console.print("[red]Failed to update category[/red]", style="bold")
        sys.exit(1)

    console.print(f"[green]✓[/green] Updated category: {updated.name}")
    console.print(f"  Planned: {money(updated.planned_amount, settings)}")


def remove_command(reference: str, yes: bool = False, month: str | None = None) -> None:
    """Remove a category and its transactions for the month."""
    store, _ = open_cli_store()
    target_month = resolve_month(store, month)
    category = require_category(store, target_month, reference)

    count = len(store.get_transactions_by_category(category.id, target_month))
    if not yes:
        prompt = f"Remove '{category.name}'"
        if count:
            prompt += f" and its {count} transaction(s)"
        if not typer.confirm(f"{prompt}?", default=False):
            console.print("[dim]Cancelled[/dim]")
            return

    if not store.remove_category(target_month, category.id):
        console.print("[red]Failed to remove category[/red]", style="bold")
        sys.exit(1)
    console.print(f"[green]✓[/green] Removed category: {category.name}")


def list_command(month: str | None = None) -> None:
    """List a month's categories."""
    store, settings = open_cli_store()
    target_month = resolve_month(store, month)
    budget = store.get_budget(target_month)

    if budget is None or not budget.categories:
        console.print(f"[yellow]No categories for {format_month(target_month)}[/yellow]")
        return

    table = Table(title=f"Categories - {format_month(target_month)}")
    table.add_column("#", style="dim", justify="right")
    table.add_column("Name", style="magenta")
    table.add_column("Type")
    table.add_column("Allocation")
    table.add_column("Planned", justify="right", style="cyan")
    table.add_column("Actual", justify="right")
    table.add_column("Permanent", justify="center")
    table.add_column("Color", style="dim")

    for idx, category in enumerate(budget.categories, 1):
        allocation = category.allocation.label
        if category.proportion is not None:
            allocation = f"{allocation} ({category.proportion:g})"
        table.add_row(
            str(idx),
            category.name,
            category.kind.value,
            allocation,
            money(category.planned_amount, settings),
            money(store.get_category_actual_amount(category.id, target_month), settings),
            "✓" if category.is_permanent else "",
            category.color or "",
        )

    console.print(table)
