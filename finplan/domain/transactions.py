"""Pure functions for transaction records and input parsing.

This module contains the functional core for transaction operations:
- No I/O operations (no database, no console, no files)
- No side effects
- Pure data transformations
- Easy to test

All monetary amounts are in minor units (Money type).
"""

import math
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Iterable

from finplan.dates import month_key
from finplan.domain.models import CategoryId, Money, Transaction, TransactionId, TransactionType

TRANSACTION_FIELDS = frozenset({"category_id", "amount", "description", "date", "type"})


def build_transaction(
    transaction_id: str,
    category_id: str,
    amount: Money,
    description: str,
    day: date,
    type: TransactionType = TransactionType.EXPENSE,
    created_at: datetime | None = None,
) -> Transaction:
    """Create a transaction with its month key derived from its date."""
    return Transaction(
        id=TransactionId(transaction_id),
        category_id=CategoryId(category_id),
        amount=amount,
        description=description,
        date=day,
        month=month_key(day),
        type=type,
        created_at=created_at or datetime.now(),
    )


def apply_transaction_update(transaction: Transaction, updates: dict[str, Any]) -> Transaction:
    """Apply a partial update to a transaction.

    The month key is always re-derived from the (possibly new) date, so it
    can never drift from the date.

    Args:
        transaction: Transaction to update.
        updates: Field values keyed by field name.

    Returns:
        Updated transaction.

    Raises:
        ValueError: If updates names a field that cannot be changed.
    """
    unknown = set(updates) - TRANSACTION_FIELDS
    if unknown:
        raise ValueError(f"Cannot update transaction fields: {', '.join(sorted(unknown))}")

    updated = replace(transaction, **updates)
    return replace(updated, month=month_key(updated.date))


def filter_by_category(transactions: Iterable[Transaction], category_id: str, month: str | None = None) -> list[Transaction]:
    """Get a category's transactions, newest first.

    Args:
        transactions: All transactions.
        category_id: Category to match.
        month: Optional month to restrict to.

    Returns:
        Matching transactions ordered by date descending.
    """
    matches = [t for t in transactions if t.category_id == category_id and (month is None or t.month == month)]
    return sorted(matches, key=lambda t: t.date, reverse=True)


def parse_money(amount_str: str) -> Money | None:
    """Parse money string to minor units.

    Args:
        amount_str: String containing amount in major units.

    Returns:
        Money amount in minor units, or None if invalid or negative.
    """
    try:
        major = float(amount_str.replace(",", ""))
    except ValueError:
        return None
    if not math.isfinite(major) or major < 0:
        return None
    return Money(round(major * 100))


def parse_proportion(value: str) -> float | None:
    """Parse a variable category weight.

    Args:
        value: Weight as text (e.g. "0.5" or "50").

    Returns:
        Weight rounded to four decimal places, or None if invalid or negative.
    """
    try:
        proportion = float(value)
    except ValueError:
        return None
    if not math.isfinite(proportion) or proportion < 0:
        return None
    return round(proportion, 4)
