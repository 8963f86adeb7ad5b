from __future__ import annotations

from fintrack.api.client import ApiClient, ApiError
from fintrack.models import AISuggestion
from fintrack.util.time import format_period


class AIService:
    def __init__(self, api: ApiClient) -> None:
        self.api = api

    def get_suggestions(self, period: str) -> AISuggestion:
        """Ask the backend for spending suggestions for one month.

        `period` may be a month picker value (2025-03) or an already formatted label (March 2025).
        The returned text is markdown.
        """
        label = format_period(period)
        data = self.api.post("/ai/suggestions", {"period": label}) or {}
        if not data.get("success"):
            raise ApiError("Failed to get AI suggestions")
        suggestions = (data.get("data") or {}).get("suggestions") or ""
        return AISuggestion(period=label, suggestions=str(suggestions))
