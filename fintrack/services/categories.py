from __future__ import annotations

from typing import Any, Iterable, List, Optional

from fintrack.api.client import ApiClient, ApiError
from fintrack.models import TRANSACTION_TYPES, Category

CATEGORY_EXISTS = "Category already exists"


class CategoryExistsError(ApiError):
    def __init__(self) -> None:
        super().__init__(CATEGORY_EXISTS, status=409)


def _normalize_name(name: str) -> str:
    return " ".join((name or "").split()).lower()


def _validate(name: str, type: str) -> str:
    n = (name or "").strip()
    if not n:
        raise ValueError("Category name is required")
    if type not in TRANSACTION_TYPES:
        raise ValueError(f"invalid_category_type: {type}")
    return n


def find_duplicate(name: str, known: Iterable[Category], *, exclude_id: Optional[int] = None) -> Optional[Category]:
    """Return an existing category with the same name, of either type."""
    key = _normalize_name(name)
    for c in known:
        if exclude_id is not None and c.id == exclude_id:
            continue
        if _normalize_name(c.name) == key:
            return c
    return None


class CategoryService:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    def list(self) -> List[Category]:
        data = self.api.get("/categories") or []
        return [Category.from_api(d) for d in data]

    def create(self, name: str, type: str, *, known: Optional[Iterable[Category]] = None) -> Category:
        """Create a category.

        Raises CategoryExistsError without calling the backend when `known` already holds the name,
        and when the backend answers with its "already exists" message instead of a record.
        """
        n = _validate(name, type)
        if known is not None and find_duplicate(n, known) is not None:
            raise CategoryExistsError()

        data: Any = self.api.post("/categories", {"name": n, "type": type})
        if isinstance(data, dict) and data.get("message") == CATEGORY_EXISTS:
            raise CategoryExistsError()
        if not isinstance(data, dict) or "id" not in data:
            raise ApiError(f"unexpected create category payload: {data!r}")
        return Category.from_api(data)

    def update(self, category_id: int, name: str, type: str) -> Category:
        n = _validate(name, type)
        data = self.api.put(f"/categories/{int(category_id)}", {"name": n, "type": type})
        return Category.from_api(data)

    def delete(self, category_id: int) -> str:
        data = self.api.delete(f"/categories/{int(category_id)}") or {}
        return str(data.get("message") or "")
