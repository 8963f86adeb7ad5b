from __future__ import annotations

from typing import Any, Dict

from fintrack.api.client import ApiClient
from fintrack.models import User


class AuthService:
    """Typed wrappers for the /auth endpoints.

    login/register only establish the session cookie; the user record always comes from `me()`.
    """

    def __init__(self, api: ApiClient) -> None:
        self.api = api

    def register(self, *, name: str, email: str, password: str) -> Dict[str, Any]:
        return self.api.post("/auth/register", {"name": name, "email": email, "password": password}) or {}

    def login(self, *, email: str, password: str) -> Dict[str, Any]:
        return self.api.post("/auth/login", {"email": email, "password": password}) or {}

    def me(self) -> User:
        data = self.api.get("/auth/me")
        if not isinstance(data, dict):
            raise ValueError(f"unexpected /auth/me payload: {data!r}")
        return User.from_api(data)

    def logout(self) -> None:
        self.api.post("/auth/logout")
