"""Transaction management commands (spend, list, edit, remove)."""

import sys
from typing import Any

import typer
from rich.table import Table

from finplan.commands.common import (
    console,
    money,
    open_cli_store,
    parse_date,
    require_category,
    require_money,
    resolve_month,
)
from finplan.dates import format_month, month_key
from finplan.domain.models import Month, Transaction, TransactionType
from finplan.finance_store import FinanceStore


def parse_type(value: str) -> TransactionType:
    try:
        return TransactionType(value.lower())
    except ValueError:
        console.print(f"[red]Invalid transaction type '{value}'. Use 'expense' or 'income'[/red]", style="bold")
        sys.exit(1)


def find_transaction(store: FinanceStore, reference: str) -> Transaction:
    """Find a transaction by id or unique id prefix, exiting if there is no single match."""
    matches = [t for t in store.transactions if t.id.startswith(reference)]
    if len(matches) != 1:
        problem = "not found" if not matches else "is ambiguous"
        console.print(f"[red]Transaction '{reference}' {problem}[/red]", style="bold")
        console.print("[dim]Use 'finplan transaction list' to see transaction ids[/dim]")
        sys.exit(1)
    return matches[0]


def category_names(store: FinanceStore, month: Month | None) -> dict[str, str]:
    """Map category ids to names for display."""
    months = [month] if month else list(store.budgets)
    names = {}
    for key in months:
        budget = store.get_budget(key)
        if budget is not None:
            names.update({c.id: c.name for c in budget.categories})
    return names


def spend_command(
    category: str,
    amount: str,
    description: str = "",
    date: str | None = None,
    income: bool = False,
) -> None:
    """Record a transaction against a category.

    Args:
        category: Category name, index or id in the transaction's month.
        amount: Amount in major units.
        description: Transaction description.
        date: Transaction date (YYYY-MM-DD, DD/MM/YYYY, or other formats). Defaults to today.
        income: Record as income instead of an expense.
    """
    store, settings = open_cli_store()
    day = parse_date(date)
    amount_minor = require_money(amount)
    target = require_category(store, month_key(day), category)

    transaction = store.add_transaction(
        target.id,
        amount_minor,
        description,
        day,
        TransactionType.INCOME if income else TransactionType.EXPENSE,
    )
    if transaction is None:
        console.print("[red]Failed to add transaction[/red]", style="bold")
        sys.exit(1)

    console.print("[green]✓[/green] Transaction added:")
    console.print(f"  Date: {transaction.date.isoformat()}")
    console.print(f"  Category: {target.name}")
    console.print(f"  Description: {transaction.description or '-'}")
    console.print(f"  Amount: {money(transaction.amount, settings)}")
    console.print(f"  [dim]ID: {transaction.id}[/dim]")


def list_command(
    month: str | None = None,
    all: bool = False,
    category: str | None = None,
    limit: int = 50,
) -> None:
    """List transactions, newest first."""
    store, settings = open_cli_store()
    target_month = None if all else resolve_month(store, month)

    if category:
        if target_month is None:
            console.print("[red]--category needs a month[/red]", style="bold")
            sys.exit(1)
        target = require_category(store, target_month, category)
        transactions = store.get_transactions_by_category(target.id, target_month)
    else:
        transactions = store.get_transactions(target_month)

    if not transactions:
        console.print("[yellow]No transactions found[/yellow]")
        return

    shown = transactions[:limit] if limit > 0 else transactions
    period = format_month(target_month) if target_month else "All Time"
    table = Table(title=f"Transactions - {period} (showing {len(shown)} of {len(transactions)})")
    table.add_column("ID", style="dim")
    table.add_column("Date", style="cyan")
    table.add_column("Category", style="magenta")
    table.add_column("Description", style="white")
    table.add_column("Amount", justify="right")

    names = category_names(store, target_month)
    total = 0
    for txn in shown:
        if txn.type == TransactionType.INCOME:
            amount_display = f"[green]+{money(txn.amount, settings)}[/green]"
        else:
            amount_display = f"[red]-{money(txn.amount, settings)}[/red]"
            total += txn.amount
        table.add_row(
            txn.id[:8],
            txn.date.isoformat(),
            names.get(txn.category_id, "[dim]-[/dim]"),
            txn.description,
            amount_display,
        )

    console.print(table)
    console.print(f"\n[bold]Total spent:[/bold] [red]{money(total, settings)}[/red]")


def edit_command(
    reference: str,
    amount: str | None = None,
    description: str | None = None,
    date: str | None = None,
    category: str | None = None,
    type: str | None = None,
) -> None:
    """Edit a transaction."""
    store, settings = open_cli_store()
    transaction = find_transaction(store, reference)

    updates: dict[str, Any] = {}
    if amount is not None:
        updates["amount"] = require_money(amount)
    if description is not None:
        updates["description"] = description
    if date is not None:
        updates["date"] = parse_date(date)
    if category is not None:
        month = month_key(updates.get("date", transaction.date))
        updates["category_id"] = require_category(store, month, category).id
    if type is not None:
        updates["type"] = parse_type(type)

    if not updates:
        console.print("[yellow]Nothing to change[/yellow]")
        return

    updated = store.update_transaction(transaction.id, **updates)
    if updated is None:
        console.print("[red]Failed to update transaction[/red]", style="bold")
        sys.exit(1)

    console.print(f"[green]✓[/green] Updated transaction {updated.id[:8]}:")
    console.print(f"  Date: {updated.date.isoformat()}")
    console.print(f"  Description: {updated.description or '-'}")
    console.print(f"  Amount: {money(updated.amount, settings)}")


def remove_command(reference: str, yes: bool = False) -> None:
    """Delete a transaction."""
    store, settings = open_cli_store()
    transaction = find_transaction(store, reference)

    if not yes:
        summary = f"{transaction.date.isoformat()} {transaction.description} {money(transaction.amount, settings)}"
        if not typer.confirm(f"Delete {summary}?", default=False):
            console.print("[dim]Cancelled[/dim]")
            return

    if not store.remove_transaction(transaction.id):
        console.print("[red]Failed to delete transaction[/red]", style="bold")
        sys.exit(1)
    console.print(f"[green]✓[/green] Deleted transaction {transaction.id[:8]}")
