"""Conversion between domain entities and plain records.

The same record shape is used for snapshot JSON and for SQLite rows, so
column names and JSON keys match.
"""

from datetime import date, datetime
from typing import Any

from finplan.domain.models import (
    Allocation,
    Budget,
    BudgetCategory,
    CategoryId,
    CategoryKind,
    Fixed,
    Money,
    Month,
    Transaction,
    TransactionId,
    TransactionType,
    UserSettings,
    Variable,
)


def allocation_from_record(category_type: str, proportion: Any) -> Allocation:
    """Rebuild an allocation from its stored type tag and proportion.

    Raises:
        ValueError: If the type tag is unknown.
    """
    if category_type == Fixed.label:
        return Fixed()
    if category_type == Variable.label:
        return Variable(proportion=float(proportion or 0))
    raise ValueError(f"Unknown category type: {category_type!r}")


def category_to_record(category: BudgetCategory) -> dict[str, Any]:
    return {
        "id": category.id,
        "name": category.name,
        "planned_amount": category.planned_amount,
        "actual_amount": category.actual_amount,
        "type": category.kind.value,
        "category_type": category.allocation.label,
        "proportion": category.proportion,
        "color": category.color,
        "is_permanent": category.is_permanent,
    }


def category_from_record(record: dict[str, Any]) -> BudgetCategory:
    return BudgetCategory(
        id=CategoryId(record["id"]),
        name=record["name"],
        planned_amount=Money(int(record["planned_amount"])),
        actual_amount=Money(int(record.get("actual_amount") or 0)),
        kind=CategoryKind(record["type"]),
        allocation=allocation_from_record(record["category_type"], record.get("proportion")),
        color=record.get("color"),
        is_permanent=bool(record.get("is_permanent")),
    )


def budget_to_record(budget: Budget) -> dict[str, Any]:
    return {
        "id": budget.id,
        "name": budget.name,
        "month": budget.month,
        "total_income": budget.total_income,
        "categories": [category_to_record(c) for c in budget.categories],
        "created_at": budget.created_at.isoformat(),
        "updated_at": budget.updated_at.isoformat(),
    }


def budget_from_record(record: dict[str, Any], categories: list[dict[str, Any]] | None = None) -> Budget:
    """Rebuild a budget.

    Args:
        record: Budget record.
        categories: Category records. If None, taken from record["categories"].
    """
    if categories is None:
        categories = record.get("categories", [])
    return Budget(
        id=record["id"],
        name=record["name"],
        month=Month(record["month"]),
        total_income=Money(int(record["total_income"])),
        categories=tuple(category_from_record(c) for c in categories),
        created_at=datetime.fromisoformat(record["created_at"]),
        updated_at=datetime.fromisoformat(record["updated_at"]),
    )


def transaction_to_record(transaction: Transaction) -> dict[str, Any]:
    return {
        "id": transaction.id,
        "category_id": transaction.category_id,
        "amount": transaction.amount,
        "description": transaction.description,
        "date": transaction.date.isoformat(),
        "month": transaction.month,
        "type": transaction.type.value,
        "created_at": transaction.created_at.isoformat(),
    }


def transaction_from_record(record: dict[str, Any]) -> Transaction:
    return Transaction(
        id=TransactionId(record["id"]),
        category_id=CategoryId(record["category_id"]),
        amount=Money(int(record["amount"])),
        description=record["description"],
        date=date.fromisoformat(record["date"]),
        month=Month(record["month"]),
        type=TransactionType(record["type"]),
        created_at=datetime.fromisoformat(record["created_at"]),
    )


def settings_to_record(settings: UserSettings) -> dict[str, Any]:
    return {
        "current_month": settings.current_month,
        "savings_goal": settings.savings_goal,
        "savings_goal_description": settings.savings_goal_description,
    }


def settings_from_record(record: dict[str, Any]) -> UserSettings:
    return UserSettings(
        current_month=Month(record["current_month"]),
        savings_goal=Money(int(record["savings_goal"])),
        savings_goal_description=record["savings_goal_description"],
    )
