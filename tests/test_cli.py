"""Smoke tests for the finplan command line."""

from datetime import date
from pathlib import Path

import pytest
from typer.testing import CliRunner

from finplan.cli import app
from finplan.commands.common import console, parse_date
from finplan.config import load_config

runner = CliRunner()


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point config and data directories at a temporary location."""
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path / "data"))
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setattr(console, "width", 200)
    return tmp_path


def invoke(*args: str):
    result = runner.invoke(app, list(args))
    assert result.exit_code == 0, result.output
    return result


class TestInit:
    """Tests for init, check and ping."""

    def test_init_creates_storage_and_config(self, isolated_home: Path) -> None:
        """Should create the database and config file."""
        invoke("init")

        assert (isolated_home / "data" / "finplan" / "finplan.db").exists()
        assert load_config()["storage"] == "sqlite"

    def test_init_refuses_to_overwrite(self) -> None:
        """Should fail without --force when files exist."""
        invoke("init")

        result = runner.invoke(app, ["init"])

        assert result.exit_code == 1
        assert "already exists" in result.output

    def test_init_snapshot_then_check(self, isolated_home: Path) -> None:
        """Should set up snapshot storage and report it connected."""
        invoke("init", "--storage", "snapshot")

        result = invoke("check")

        assert "connected successfully" in result.output
        assert (isolated_home / "data" / "finplan" / "finplan.json").exists()

    def test_check_without_init_fails(self) -> None:
        """Should fail when storage has not been created."""
        result = runner.invoke(app, ["check"])
        assert result.exit_code == 1

    def test_ping(self) -> None:
        """Should report that the tool is alive."""
        assert "alive" in invoke("ping").output

    def test_config_sets_option(self) -> None:
        """Should write a single option and show it back."""
        invoke("init")

        invoke("config", "currency_symbol", "$")

        assert load_config()["currency_symbol"] == "$"
        assert "currency_symbol = $" in invoke("config").output

    def test_config_rejects_unknown_option(self) -> None:
        """Should fail for options it does not know."""
        result = runner.invoke(app, ["config", "colour", "red"])
        assert result.exit_code == 1


class TestBudgetWorkflow:
    """Tests for a budget, categories and spending end to end."""

    @pytest.fixture(autouse=True)
    def june_budget(self, isolated_home: Path) -> None:
        invoke("init")
        invoke("month", "2024-06")
        invoke("budget", "--create", "--income", "1500")
        invoke("category", "add", "Rent", "--planned", "450")
        invoke("category", "add", "Food", "--proportion", "0.5")
        invoke("category", "add", "Fun", "--proportion", "0.5")

    def test_variable_categories_share_income(self) -> None:
        """Should show both variable categories at 525.00."""
        result = invoke("category", "list")

        assert result.output.count("£525.00") == 2
        assert "£450.00" in result.output

    def test_spend_updates_report(self) -> None:
        """Should count spending in the report and savings."""
        invoke("spend", "Food", "200", "--date", "10/06/2024", "-d", "Groceries")

        report = invoke("report", "--no-histogram")
        assert "Food: £200.00 / £525.00" in report.output
        assert "£850.00" in report.output

        listing = invoke("transaction", "list")
        assert "Groceries" in listing.output
        assert "2024-06-10" in listing.output

    def test_iso_date_keeps_month(self) -> None:
        """Should file an ISO date with a small day under its own month."""
        invoke("spend", "Food", "200", "--date", "2024-06-05", "-d", "Market")

        listing = invoke("transaction", "list")
        assert "2024-06-05" in listing.output
        assert "Food: £200.00 / £525.00" in invoke("report", "--no-histogram").output

    def test_planned_amount_of_variable_category_rejected(self) -> None:
        """Should refuse to set a variable category's planned amount by hand."""
        result = runner.invoke(app, ["category", "edit", "Food", "--planned", "99"])

        assert result.exit_code == 1
        assert invoke("category", "list").output.count("£525.00") == 2

    def test_income_change_redistributes(self) -> None:
        """Should recompute variable amounts after an income change."""
        invoke("budget", "--income", "2450")

        assert invoke("category", "list").output.count("£1,000.00") == 2

    def test_remove_category(self) -> None:
        """Should remove a category without prompting when --yes is given."""
        invoke("category", "remove", "Fun", "--yes")

        result = invoke("category", "list")
        assert "Fun" not in result.output
        assert "£1,050.00" in result.output

    def test_months_lists_budget(self) -> None:
        """Should list the budgeted month."""
        assert "June 2024" in invoke("months").output

    def test_invalid_amount_rejected(self) -> None:
        """Should reject negative amounts before touching the store."""
        result = runner.invoke(app, ["spend", "Food", "-5", "--date", "2024-06-10"])
        assert result.exit_code != 0

    def test_unknown_category_rejected(self) -> None:
        """Should fail for a category that does not exist."""
        result = runner.invoke(app, ["spend", "Nope", "5", "--date", "2024-06-10"])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_savings_goal(self) -> None:
        """Should set and show the savings goal."""
        result = invoke("savings", "--goal", "100", "-d", "Holiday")

        assert "Holiday" in result.output
        assert "June 2024" in result.output


class TestSeedAndClear:
    """Tests for seed and clear."""

    def test_seed_then_clear(self) -> None:
        """Should create example budgets and then wipe them."""
        invoke("init", "--storage", "snapshot")

        seeded = invoke("seed")
        assert date.today().strftime("%B %Y") in seeded.output

        invoke("clear", "--yes")
        assert "No months found" in invoke("months").output


class TestParseDate:
    """Tests for parse_date."""

    def test_iso_date_is_year_month_day(self) -> None:
        """Should not swap month and day for ISO dates."""
        assert parse_date("2024-06-05") == date(2024, 6, 5)

    def test_slashed_date_is_day_first(self) -> None:
        """Should read DD/MM/YYYY with the day first."""
        assert parse_date("05/06/2024") == date(2024, 6, 5)

    def test_invalid_date_exits(self) -> None:
        """Should exit for text that is not a date."""
        with pytest.raises(SystemExit):
            parse_date("not a date")
