"""Persistence boundary shared by every storage backend."""

from typing import Protocol

from finplan.domain.models import Budget, BudgetCategory, Month, Transaction, UserSettings


class PersistenceError(Exception):
    """A storage backend failed to read or write."""


class PersistenceAdapter(Protocol):
    """Operations the finance store needs from a storage backend.

    Every method raises PersistenceError on failure. Operations on missing
    rows are silent no-ops.
    """

    def create_budget(self, budget: Budget) -> None: ...

    def get_budget(self, month: Month) -> Budget | None: ...

    def get_all_budgets(self) -> list[Budget]: ...

    def update_budget_income(self, month: Month, total_income: int) -> None: ...

    def delete_budget(self, month: Month) -> None: ...

    def add_category(self, month: Month, category: BudgetCategory) -> None: ...

    def update_category(self, category: BudgetCategory) -> None: ...

    def remove_category(self, month: Month, category_id: str) -> None: ...

    def add_transaction(self, transaction: Transaction) -> None: ...

    def update_transaction(self, transaction: Transaction) -> None: ...

    def remove_transaction(self, transaction_id: str) -> None: ...

    def get_transactions_by_category(self, category_id: str, month: Month | None = None) -> list[Transaction]: ...

    def get_all_transactions(self) -> list[Transaction]: ...

    def get_user_settings(self, defaults: UserSettings) -> UserSettings: ...

    def update_user_settings(self, settings: UserSettings) -> None: ...

    def clear_all(self) -> None: ...

    def check_connection(self) -> bool: ...
