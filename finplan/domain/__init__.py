"""Domain models and types for finplan.

This package contains the functional core:
- Pure functions with no side effects
- No I/O operations
- Easy to test
- Business logic separated from infrastructure
"""

from finplan.domain.models import (
    Budget,
    BudgetCategory,
    CategoryKind,
    Fixed,
    Money,
    Month,
    Transaction,
    TransactionType,
    UserSettings,
    Variable,
)

__all__ = [
    "Budget",
    "BudgetCategory",
    "CategoryKind",
    "Fixed",
    "Money",
    "Month",
    "Transaction",
    "TransactionType",
    "UserSettings",
    "Variable",
]
