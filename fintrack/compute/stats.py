from __future__ import annotations

from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from fintrack.models import EXPENSE, INCOME, Category, Transaction, TransactionStats


def aggregate_stats(transactions: Iterable[Transaction]) -> TransactionStats:
    """Single pass over the transactions: totals, counts and balance (income - expense)."""
    income = Decimal("0")
    expense = Decimal("0")
    n_income = 0
    n_expense = 0

    for t in transactions:
        if t.type == INCOME:
            income += t.amount
            n_income += 1
        elif t.type == EXPENSE:
            expense += t.amount
            n_expense += 1

    return TransactionStats(
        total_income=income,
        total_expense=expense,
        balance=income - expense,
        income_count=n_income,
        expense_count=n_expense,
    )


def category_distribution(categories: Iterable[Category]) -> Dict[str, List[Tuple[str, Decimal]]]:
    """(name, total) pairs per type for the distribution charts. Empty categories are left out."""
    out: Dict[str, List[Tuple[str, Decimal]]] = {EXPENSE: [], INCOME: []}
    for c in categories:
        if c.type not in out or c.total_amount == 0:
            continue
        out[c.type].append((c.name, c.total_amount))
    return out


def category_name(category_id: Optional[int], categories: Sequence[Category]) -> str:
    for c in categories:
        if c.id == category_id:
            return c.name
    return f"Category #{category_id}"


def search_transactions(
    transactions: Iterable[Transaction],
    query: str = "",
    *,
    categories: Sequence[Category] = (),
    type: Optional[str] = None,
) -> List[Transaction]:
    """Filter by type ("all"/None keeps both), then by a case-insensitive substring.

    The query is matched against note, category name, amount and date.
    """
    q = (query or "").strip().lower()
    kind = None if type in (None, "", "all") else type

    out: List[Transaction] = []
    for t in transactions:
        if kind is not None and t.type != kind:
            continue
        if q:
            haystack = " ".join(
                [
                    t.note,
                    category_name(t.category_id, categories),
                    str(t.amount),
                    t.date,
                ]
            ).lower()
            if q not in haystack:
                continue
        out.append(t)
    return out
