"""Admin commands for setup, backup, health checks and month navigation."""

import shutil
import sqlite3
import sys
from datetime import datetime
from pathlib import Path

import typer
from rich.table import Table

from finplan.commands.common import console, load_cli_settings, money, open_cli_store, resolve_month
from finplan.config import DEFAULT_CONFIG, STORAGE_BACKENDS, create_default_config, get_config_path, set_option
from finplan.dates import format_month
from finplan.domain.transactions import parse_money
from finplan.finance_store import create_adapter
from finplan.store.base import PersistenceError
from finplan.store.schema import database_exists, get_db_path, get_snapshot_path, init_database


def data_path(storage: str) -> Path:
    """Path of the data file used by a storage backend."""
    return get_snapshot_path() if storage == "snapshot" else get_db_path()


def backup_command(
    output_dir: str | None = None,
) -> None:
    """Backup data and configuration files."""
    settings = load_cli_settings()
    source_path = data_path(settings["storage"])
    config_path = get_config_path()

    if not source_path.exists():
        console.print("[red]Data file not found. Run 'finplan init' first.[/red]", style="bold")
        sys.exit(1)

    if not config_path.exists():
        console.print("[red]Config not found. Run 'finplan init' first.[/red]", style="bold")
        sys.exit(1)

    if output_dir:
        backup_dir = Path(output_dir).expanduser()
    else:
        backup_dir = Path.home() / ".finplan" / "backups"

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    data_backup = backup_dir / f"finplan_{timestamp}{source_path.suffix}"
    config_backup = backup_dir / f"config_{timestamp}.toml"

    try:
        backup_dir.mkdir(parents=True, exist_ok=True)

        shutil.copy2(source_path, data_backup)
        console.print(f"[green]✓[/green] Data backed up to: {data_backup}")

        shutil.copy2(config_path, config_backup)
        console.print(f"[green]✓[/green] Config backed up to: {config_backup}")

        console.print("\n[green]Backup complete![/green]", style="bold")
        console.print(f"[dim]Backup directory: {backup_dir}[/dim]")

    except OSError as e:
        console.print(f"[red]Backup failed: {e}[/red]", style="bold")
        sys.exit(1)


def run_migration(db_path: Path) -> None:
    """Run database migrations on existing database."""
    console.print(f"[cyan]Running migrations on {db_path}...[/cyan]")
    init_database(db_path)
    console.print("[green]✓[/green] Migrations complete")
    console.print("[dim]Database schema is up to date[/dim]")


def run_full_init(storage: str, config_path: Path) -> None:
    """Initialize new data file and config."""
    path = data_path(storage)
    console.print(f"[cyan]Initializing {storage} storage at {path}...[/cyan]")
    path.unlink(missing_ok=True)
    if storage == "snapshot":
        create_adapter(storage).clear_all()
    else:
        init_database(path)
    console.print("[green]✓[/green] Storage initialized")

    console.print(f"[cyan]Creating config file at {config_path}...[/cyan]")
    create_default_config(config_path, storage=storage)
    console.print("[green]✓[/green] Config file created (permissions: 600)")

    console.print("\n[green]Initialization complete![/green]", style="bold")
    console.print(f"[dim]Data: {path}[/dim]")
    console.print(f"[dim]Config: {config_path}[/dim]")


def init_command(force: bool = False, migrate: bool = False, storage: str = "sqlite") -> None:
    """Initialize finplan storage and configuration."""
    if storage not in STORAGE_BACKENDS:
        console.print(f"[red]Unknown storage backend '{storage}'. Use one of: {', '.join(STORAGE_BACKENDS)}[/red]", style="bold")
        sys.exit(1)

    config_path = get_config_path()
    path = data_path(storage)

    data_exists = path.exists()
    config_exists = config_path.exists()

    try:
        if migrate:
            db_path = get_db_path()
            if not database_exists(db_path):
                console.print("[red]No database found to migrate[/red]", style="bold")
                console.print(f"[dim]Expected location: {db_path}[/dim]")
                sys.exit(1)
            run_migration(db_path)
            return

        if not force and (data_exists or config_exists):
            console.print("[red]Initialization failed:[/red]", style="bold")
            if data_exists:
                console.print(f"  Data file already exists: {path}")
            if config_exists:
                console.print(f"  Config already exists: {config_path}")
            console.print("\n[yellow]Use 'finplan init --force' to overwrite[/yellow]")
            console.print("[yellow]Or 'finplan init --migrate' to update database schema only[/yellow]")
            sys.exit(1)

        run_full_init(storage, config_path)

    except (sqlite3.Error, PersistenceError) as e:
        console.print(f"[red]Storage error: {e}[/red]", style="bold")
        sys.exit(1)
    except OSError as e:
        console.print(f"[red]Filesystem error: {e}[/red]", style="bold")
        sys.exit(1)


def ping_command() -> None:
    """Report that the command line is alive."""
    console.print(f"[green]alive[/green] {datetime.now().isoformat(timespec='seconds')}")
    console.print("[dim]Service is running[/dim]")


def check_command() -> None:
    """Check that the configured storage can be reached."""
    settings = load_cli_settings()
    storage = settings["storage"]
    path = data_path(storage)

    if not path.exists():
        console.print(f"[red]✗ {storage} storage not found at {path}[/red]", style="bold")
        console.print("[dim]Run 'finplan init' first[/dim]")
        sys.exit(1)

    try:
        connected = create_adapter(storage).check_connection()
    except PersistenceError as e:
        console.print(f"[red]✗ Storage initialization failed: {e}[/red]", style="bold")
        sys.exit(1)

    if not connected:
        console.print(f"[red]✗ {storage} storage connection failed[/red]", style="bold")
        sys.exit(1)

    console.print(f"[green]✓[/green] {storage} storage connected successfully")
    console.print(f"[dim]{path}[/dim]")


def seed_command(force: bool = False) -> None:
    """Create placeholder budgets for the previous and current month."""
    store, _ = open_cli_store()

    if store.budgets and not force:
        console.print("[yellow]Budgets already exist. Use --force to seed anyway.[/yellow]")
        return

    store.initialize_with_seed_data()
    console.print("[green]✓[/green] Seed data created")
    for month in sorted(store.budgets):
        console.print(f"  {format_month(month)}: {len(store.budgets[month].categories)} categories")


def clear_command(yes: bool = False) -> None:
    """Delete all budgets, transactions and settings."""
    store, _ = open_cli_store()

    if not yes and not typer.confirm("Delete all budgets and transactions?", default=False):
        console.print("[dim]Cancelled[/dim]")
        return

    if not store.clear_all_data():
        console.print("[red]Failed to clear data[/red]", style="bold")
        sys.exit(1)
    console.print("[green]✓[/green] All data cleared")


def month_command(month: str | None = None) -> None:
    """Show or change the current month."""
    store, _ = open_cli_store()

    if month is None:
        console.print(f"[bold]Current month:[/bold] {format_month(store.current_month)} ({store.current_month})")
        if store.get_current_budget() is None:
            console.print("[dim]No budget yet. Use 'finplan budget --create' to add one.[/dim]")
        return

    target = resolve_month(store, month)
    if not store.set_current_month(target):
        console.print("[red]Failed to change month[/red]", style="bold")
        sys.exit(1)
    console.print(f"[green]✓[/green] Current month: {format_month(target)}")


def months_command() -> None:
    """List months that have a budget or transactions."""
    store, settings = open_cli_store()

    months = store.get_available_months()
    if not months:
        console.print("[yellow]No months found[/yellow]")
        return

    table = Table(title="Months")
    table.add_column("Month", style="cyan")
    table.add_column("Income", justify="right")
    table.add_column("Planned", justify="right")
    table.add_column("Actual", justify="right")
    table.add_column("Transactions", justify="right", style="dim")

    for month in months:
        summary = store.get_budget_summary(month)
        marker = " [bold]*[/bold]" if month == store.current_month else ""
        count = len(store.get_transactions(month))
        if store.get_budget(month) is None:
            table.add_row(f"{format_month(month)}{marker}", "[dim]-[/dim]", "[dim]-[/dim]", "[dim]-[/dim]", str(count))
            continue
        table.add_row(
            f"{format_month(month)}{marker}",
            money(summary.total_income, settings),
            money(summary.total_planned_expenses, settings),
            money(summary.total_actual_expenses, settings),
            str(count),
        )

    console.print(table)


def config_command(key: str | None = None, value: str | None = None) -> None:
    """Show configuration, or set one option."""
    settings = load_cli_settings()

    if key is None:
        for name in sorted(settings):
            console.print(f"[bold]{name}[/bold] = {settings[name]}")
        console.print(f"[dim]{get_config_path()}[/dim]")
        return

    if key not in DEFAULT_CONFIG:
        console.print(f"[red]Unknown option '{key}'. Use one of: {', '.join(sorted(DEFAULT_CONFIG))}[/red]", style="bold")
        sys.exit(1)

    if value is None:
        console.print(f"[bold]{key}[/bold] = {settings[key]}")
        return

    parsed: str | float = value
    if key == "storage" and value not in STORAGE_BACKENDS:
        console.print(f"[red]Unknown storage backend '{value}'. Use one of: {', '.join(STORAGE_BACKENDS)}[/red]")
        sys.exit(1)
    if key == "savings_goal":
        amount = parse_money(value)
        if amount is None:
            console.print(f"[red]Invalid savings goal '{value}'[/red]", style="bold")
            sys.exit(1)
        parsed = amount / 100

    try:
        set_option(key, parsed)
    except OSError as e:
        console.print(f"[red]Could not write config: {e}[/red]", style="bold")
        sys.exit(1)
    console.print(f"[green]✓[/green] {key} = {parsed}")
