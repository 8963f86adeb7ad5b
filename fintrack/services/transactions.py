from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from fintrack.api.client import ApiClient
from fintrack.models import TRANSACTION_TYPES, Transaction, TransactionStats


def _check_type(type: str) -> None:
    if type not in TRANSACTION_TYPES:
        raise ValueError(f"invalid_transaction_type: {type}")


def _amount(v: Any) -> float:
    try:
        d = Decimal(str(v).strip())
    except InvalidOperation:
        raise ValueError(f"amount_not_numeric: {v!r}")
    # NaN and Infinity parse as Decimals but are not amounts.
    if not d.is_finite():
        raise ValueError(f"amount_not_finite: {v!r}")
    if d <= 0:
        raise ValueError("amount_must_be_positive")
    return float(d)


class TransactionService:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    def list(
        self,
        *,
        type: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        category_id: Optional[int] = None,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
    ) -> List[Transaction]:
        """List transactions. Unset (or falsy) filters are not sent."""
        params: Dict[str, Any] = {}
        if type:
            params["type"] = type
        if start_date:
            params["startDate"] = start_date
        if end_date:
            params["endDate"] = end_date
        if category_id:
            params["categoryId"] = int(category_id)
        if limit:
            params["limit"] = int(limit)
        if offset:
            params["offset"] = int(offset)

        data = self.api.get("/transactions", params=params or None) or []
        return [Transaction.from_api(d) for d in data]

    def get(self, transaction_id: int) -> Transaction:
        return Transaction.from_api(self.api.get(f"/transactions/{int(transaction_id)}"))

    def create(
        self,
        *,
        amount: Any,
        type: str,
        date: str,
        category_id: int,
        note: str = "",
    ) -> Transaction:
        _check_type(type)
        if not date:
            raise ValueError("date_required")
        payload = {
            "amount": _amount(amount),
            "type": type,
            "date": date,
            "note": note or "",
            "categoryId": int(category_id),
        }
        return Transaction.from_api(self.api.post("/transactions", payload))

    def update(self, transaction_id: int, **fields: Any) -> Transaction:
        """Partial update. Accepts amount, type, date, note, category_id."""
        payload: Dict[str, Any] = {}
        if fields.get("amount") is not None:
            payload["amount"] = _amount(fields["amount"])
        if fields.get("type") is not None:
            _check_type(fields["type"])
            payload["type"] = fields["type"]
        if fields.get("date") is not None:
            payload["date"] = fields["date"]
        if fields.get("note") is not None:
            payload["note"] = fields["note"]
        if fields.get("category_id") is not None:
            payload["categoryId"] = int(fields["category_id"])
        if not payload:
            raise ValueError("nothing_to_update")
        return Transaction.from_api(self.api.put(f"/transactions/{int(transaction_id)}", payload))

    def delete(self, transaction_id: int) -> None:
        self.api.delete(f"/transactions/{int(transaction_id)}")

    def stats(self, *, start_date: Optional[str] = None, end_date: Optional[str] = None) -> TransactionStats:
        params: Dict[str, Any] = {}
        if start_date:
            params["startDate"] = start_date
        if end_date:
            params["endDate"] = end_date
        return TransactionStats.from_api(self.api.get("/transactions/stats", params=params or None) or {})
