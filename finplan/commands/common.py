"""Helpers shared by the CLI commands."""

import sys
import tomllib
from datetime import date
from typing import Any

import pandas as pd
from rich.console import Console

from finplan.config import load_settings
from finplan.dates import parse_month
from finplan.domain.models import BudgetCategory, Money, Month
from finplan.domain.report import format_money
from finplan.domain.transactions import parse_money
from finplan.finance_store import FinanceStore, open_store
from finplan.store.base import PersistenceError

console = Console()


def load_cli_settings() -> dict[str, Any]:
    """Load settings, exiting with a message if the config is unusable."""
    try:
        return load_settings()
    except (ValueError, tomllib.TOMLDecodeError) as e:
        console.print(f"[red]Invalid config: {e}[/red]", style="bold")
        sys.exit(1)


def open_cli_store() -> tuple[FinanceStore, dict[str, Any]]:
    """Open the configured store, exiting with a message on failure.

    Returns:
        Tuple of (store, settings).
    """
    settings = load_cli_settings()
    try:
        store = open_store(settings)
    except PersistenceError as e:
        console.print(f"[red]Storage error: {e}[/red]", style="bold")
        console.print("[dim]Run 'finplan init' to create the data files[/dim]")
        sys.exit(1)
    return store, settings


def resolve_month(store: FinanceStore, month: str | None) -> Month:
    """Validate an optional month argument, defaulting to the store's current month."""
    if month is None:
        return store.current_month
    try:
        return parse_month(month)
    except ValueError:
        console.print(f"[red]Invalid month '{month}'. Use YYYY-MM[/red]", style="bold")
        sys.exit(1)


def parse_date(value: str | None) -> date:
    """Parse a user supplied date, defaulting to today.

    Accepts YYYY-MM-DD, DD/MM/YYYY and the other formats pandas understands.
    ISO dates are read year-month-day; everything else is day first.
    """
    if value is None:
        return date.today()
    try:
        return date.fromisoformat(value)
    except ValueError:
        pass
    try:
        return pd.to_datetime(value, dayfirst=True).date()
    except (ValueError, pd.errors.ParserError) as e:
        console.print(f"[red]Invalid date format: {e}[/red]")
        console.print("[dim]Accepted formats: YYYY-MM-DD, DD/MM/YYYY, DD-MM-YYYY, etc.[/dim]")
        sys.exit(1)


def require_money(value: str, label: str = "amount") -> Money:
    """Parse a money argument in major units, exiting if it is invalid."""
    amount = parse_money(value)
    if amount is None:
        console.print(f"[red]Invalid {label} '{value}'. Must be a non-negative number[/red]", style="bold")
        sys.exit(1)
    return amount


def require_category(store: FinanceStore, month: Month, reference: str) -> BudgetCategory:
    """Find a category by index, id or name, exiting if it does not exist."""
    category = store.find_category(month, reference)
    if category is None:
        console.print(f"[red]Category '{reference}' not found in {month}[/red]", style="bold")
        console.print("[dim]Use 'finplan category list' to see categories[/dim]")
        sys.exit(1)
    return category


def money(amount: Money, settings: dict[str, Any]) -> str:
    return format_money(amount, settings["currency_symbol"])
