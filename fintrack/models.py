from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Optional

INCOME = "income"
EXPENSE = "expense"
TRANSACTION_TYPES = (INCOME, EXPENSE)


def to_decimal(v: Any) -> Decimal:
    """Backend amounts arrive as strings ("12.50") or numbers; blanks count as zero."""
    if v is None or v == "":
        return Decimal("0")
    try:
        d = Decimal(str(v))
    except InvalidOperation:
        raise ValueError(f"amount_not_numeric: {v!r}")
    if not d.is_finite():
        raise ValueError(f"amount_not_finite: {v!r}")
    return d


def _opt_int(v: Any) -> Optional[int]:
    if v is None or v == "":
        return None
    return int(v)


@dataclass(frozen=True)
class User:
    id: int
    name: str
    email: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_api(cls, d: Dict[str, Any]) -> "User":
        # The backend may echo the password hash; it is never kept client-side.
        return cls(
            id=int(d["id"]),
            name=str(d.get("name") or ""),
            email=str(d.get("email") or ""),
            created_at=d.get("createdAt"),
            updated_at=d.get("updatedAt"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


@dataclass(frozen=True)
class Category:
    id: int
    name: str
    type: str
    total_amount: Decimal = Decimal("0")
    user_id: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_api(cls, d: Dict[str, Any]) -> "Category":
        return cls(
            id=int(d["id"]),
            name=str(d.get("name") or ""),
            type=str(d.get("type") or EXPENSE),
            total_amount=to_decimal(d.get("totalAmount")),
            user_id=_opt_int(d.get("userId")),
            created_at=d.get("createdAt"),
            updated_at=d.get("updatedAt"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "totalAmount": str(self.total_amount),
            "userId": self.user_id,
        }


@dataclass(frozen=True)
class Transaction:
    id: int
    amount: Decimal
    type: str
    date: str
    note: str = ""
    category_id: Optional[int] = None
    user_id: Optional[int] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @classmethod
    def from_api(cls, d: Dict[str, Any]) -> "Transaction":
        return cls(
            id=int(d["id"]),
            amount=to_decimal(d.get("amount")),
            type=str(d.get("type") or EXPENSE),
            date=str(d.get("date") or ""),
            note=str(d.get("note") or ""),
            category_id=_opt_int(d.get("categoryId")),
            user_id=_opt_int(d.get("userId")),
            created_at=d.get("createdAt"),
            updated_at=d.get("updatedAt"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "amount": str(self.amount),
            "type": self.type,
            "date": self.date,
            "note": self.note,
            "categoryId": self.category_id,
        }


@dataclass(frozen=True)
class TransactionStats:
    total_income: Decimal
    total_expense: Decimal
    balance: Decimal
    income_count: int
    expense_count: int

    @classmethod
    def from_api(cls, d: Dict[str, Any]) -> "TransactionStats":
        return cls(
            total_income=to_decimal(d.get("totalIncome")),
            total_expense=to_decimal(d.get("totalExpense")),
            balance=to_decimal(d.get("balance")),
            income_count=int(d.get("incomeCount") or 0),
            expense_count=int(d.get("expenseCount") or 0),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalIncome": str(self.total_income),
            "totalExpense": str(self.total_expense),
            "balance": str(self.balance),
            "incomeCount": self.income_count,
            "expenseCount": self.expense_count,
        }


@dataclass(frozen=True)
class AISuggestion:
    period: str
    suggestions: str
