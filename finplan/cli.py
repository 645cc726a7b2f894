"""CLI entry point for finplan."""

import typer

from finplan.commands import categories, transactions
from finplan.commands.admin import (
    backup_command,
    check_command,
    clear_command,
    config_command,
    init_command,
    month_command,
    months_command,
    ping_command,
    seed_command,
)
from finplan.commands.budget import budget_command
from finplan.commands.report import report_command, savings_command
from finplan.logger import setup_logging

app = typer.Typer(
    name="finplan",
    help="Monthly budget planner with fixed and proportional categories",
    add_completion=False,
)
category_app = typer.Typer(help="Manage the categories of a month's budget.")
transaction_app = typer.Typer(help="Manage recorded transactions.")
app.add_typer(category_app, name="category")
app.add_typer(transaction_app, name="transaction")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Monthly budget planner with fixed and proportional categories."""
    setup_logging(verbose)


@app.command(name="backup")
def backup(
    output_dir: str = typer.Option(None, "--output", "-o", help="Backup directory (default: ~/.finplan/backups)"),
) -> None:
    """Backup your data and configuration files."""
    backup_command(output_dir)


@app.command(name="init")
def init(
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite existing data and config"),
    migrate: bool = typer.Option(False, "--migrate", help="Update the database schema only"),
    storage: str = typer.Option("sqlite", "--storage", help="Storage backend: 'sqlite' or 'snapshot'"),
) -> None:
    """Initialize finplan storage and configuration."""
    init_command(force, migrate, storage)


@app.command()
def config(
    key: str = typer.Argument(None, help="Option name"),
    value: str = typer.Argument(None, help="New value"),
) -> None:
    """Show your configuration, or set one option."""
    config_command(key, value)


@app.command()
def ping() -> None:
    """Check that finplan is alive."""
    ping_command()


@app.command()
def check() -> None:
    """Check the connection to your configured storage."""
    check_command()


@app.command()
def seed(
    force: bool = typer.Option(False, "--force", "-f", help="Seed even if budgets already exist"),
) -> None:
    """Create example budgets for last month and this month."""
    seed_command(force)


@app.command()
def clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete all your budgets, transactions and settings."""
    clear_command(yes)


@app.command()
def month(
    target: str = typer.Argument(None, help="Month to switch to (YYYY-MM)"),
) -> None:
    """Show or change the current month."""
    month_command(target)


@app.command()
def months() -> None:
    """List months with a budget or transactions."""
    months_command()


@app.command()
def budget(
    create: bool = typer.Option(False, "--create", help="Create the budget for the month (replaces any existing one)"),
    name: str = typer.Option(None, "--name", help="Budget name (with --create)"),
    income: str = typer.Option(None, "--income", help="Total income for the month (in major units)"),
    month: str = typer.Option(None, "--month", help="Month (YYYY-MM, default: current month)"),
) -> None:
    """Create a month's budget, set its income, or show its status."""
    budget_command(create, name, income, month)


@category_app.command(name="add")
def category_add(
    name: str,
    planned: str = typer.Option(None, "--planned", help="Planned amount for fixed categories"),
    proportion: str = typer.Option(None, "--proportion", "-p", help="Weight for a variable category"),
    allocation: str = typer.Option(None, "--allocation", help="'fixed' or 'variable'"),
    kind: str = typer.Option("expense", "--type", help="'expense', 'income' or 'savings'"),
    color: str = typer.Option(None, "--color", help="Display color"),
    permanent: bool = typer.Option(False, "--permanent", help="Also add to later months that have a budget"),
    month: str = typer.Option(None, "--month", help="Month (YYYY-MM, default: current month)"),
) -> None:
    """Add a category to a month's budget."""
    categories.add_command(name, planned, proportion, allocation, kind, color, permanent, month)


@category_app.command(name="edit")
def category_edit(
    reference: str = typer.Argument(..., help="Category name, index or id"),
    name: str = typer.Option(None, "--name", help="New name"),
    planned: str = typer.Option(None, "--planned", help="New planned amount (fixed categories only)"),
    proportion: str = typer.Option(None, "--proportion", "-p", help="New variable weight"),
    allocation: str = typer.Option(None, "--allocation", help="'fixed' or 'variable'"),
    kind: str = typer.Option(None, "--type", help="'expense', 'income' or 'savings'"),
    color: str = typer.Option(None, "--color", help="Display color"),
    permanent: bool = typer.Option(False, "--permanent", help="Mark as recurring"),
    not_permanent: bool = typer.Option(False, "--not-permanent", help="Stop marking as recurring"),
    month: str = typer.Option(None, "--month", help="Month (YYYY-MM, default: current month)"),
) -> None:
    """Edit a category."""
    recurring = True if permanent else False if not_permanent else None
    categories.edit_command(reference, name, planned, proportion, allocation, kind, color, recurring, month)


@category_app.command(name="remove")
def category_remove(
    reference: str = typer.Argument(..., help="Category name, index or id"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
    month: str = typer.Option(None, "--month", help="Month (YYYY-MM, default: current month)"),
) -> None:
    """Remove a category and its transactions for the month."""
    categories.remove_command(reference, yes, month)


@category_app.command(name="list")
def category_list(
    month: str = typer.Option(None, "--month", help="Month (YYYY-MM, default: current month)"),
) -> None:
    """List a month's categories."""
    categories.list_command(month)


@app.command()
def spend(
    category: str = typer.Argument(..., help="Category name, index or id"),
    amount: str = typer.Argument(..., help="Amount (in major units)"),
    description: str = typer.Option("", "--description", "-d", help="Description"),
    date: str = typer.Option(None, "--date", help="Date (YYYY-MM-DD or DD/MM/YYYY, default: today)"),
    income: bool = typer.Option(False, "--income", help="Record as income"),
) -> None:
    """Record a transaction against a category."""
    transactions.spend_command(category, amount, description, date, income)


@transaction_app.command(name="list")
def transaction_list(
    month: str = typer.Option(None, "--month", help="Month (YYYY-MM, default: current month)"),
    all: bool = typer.Option(False, "--all", "-a", help="Show all months"),
    category: str = typer.Option(None, "--category", "-c", help="Only this category"),
    limit: int = typer.Option(50, help="Maximum transactions to show (0 for no limit)"),
) -> None:
    """List your transactions."""
    transactions.list_command(month, all, category, limit)


@transaction_app.command(name="edit")
def transaction_edit(
    reference: str = typer.Argument(..., help="Transaction id or id prefix"),
    amount: str = typer.Option(None, "--amount", help="New amount"),
    description: str = typer.Option(None, "--description", "-d", help="New description"),
    date: str = typer.Option(None, "--date", help="New date"),
    category: str = typer.Option(None, "--category", "-c", help="New category name, index or id"),
    type: str = typer.Option(None, "--type", help="'expense' or 'income'"),
) -> None:
    """Edit a transaction."""
    transactions.edit_command(reference, amount, description, date, category, type)


@transaction_app.command(name="remove")
def transaction_remove(
    reference: str = typer.Argument(..., help="Transaction id or id prefix"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a transaction."""
    transactions.remove_command(reference, yes)


@app.command(name="report")
def report(
    sort_by: str = typer.Option("value", help="Sort by 'value', 'alpha' or 'kind'"),
    histogram: bool = typer.Option(True, help="Show histogram of your spending"),
    month: str = typer.Option(None, "--month", help="Specific month (YYYY-MM)"),
) -> None:
    """Show your spending against plan."""
    report_command(sort_by, histogram, month)


@app.command()
def savings(
    goal: str = typer.Option(None, "--goal", help="Set your savings goal (in major units)"),
    description: str = typer.Option(None, "--description", "-d", help="What the goal is for"),
) -> None:
    """Show your savings and progress towards your goal."""
    savings_command(goal, description)


if __name__ == "__main__":
    app()
