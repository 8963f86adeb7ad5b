from __future__ import annotations

import asyncio
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, List, Optional

from fintrack.models import User
from fintrack.services.auth import AuthService


def _debug(msg: str) -> None:
    print(f"[auth] {msg}")


class SessionStatus(str, Enum):
    ANONYMOUS = "anonymous"
    LOADING = "loading"
    AUTHENTICATED = "authenticated"
    ERROR = "error"


@dataclass(frozen=True)
class LoginCredentials:
    email: str
    password: str


@dataclass(frozen=True)
class RegisterCredentials:
    name: str
    email: str
    password: str


@dataclass(frozen=True)
class AuthState:
    user: Optional[User] = None
    is_loading: bool = False
    is_authenticated: bool = False
    error: Optional[str] = None

    @property
    def status(self) -> SessionStatus:
        if self.is_loading:
            return SessionStatus.LOADING
        if self.is_authenticated:
            return SessionStatus.AUTHENTICATED
        if self.error:
            return SessionStatus.ERROR
        return SessionStatus.ANONYMOUS


Listener = Callable[[AuthState], None]


def _message(e: BaseException, fallback: str) -> str:
    msg = str(getattr(e, "message", None) or e or "").strip()
    return msg or fallback


class AuthStore:
    """Holds the client-side auth session.

    State changes only through the four async actions (login, register, fetch_profile,
    logout) and the three plain reducers (reset, clear_error, set_credentials).

    Actions never raise for backend failures: login/register store a message in `error`,
    fetch_profile silently falls back to anonymous, logout always resets.

    There is no ordering between concurrent actions. Each applies its outcome when it
    settles, so the one that settles last decides the final state.
    """

    def __init__(self, auth: AuthService, *, debug: bool = False) -> None:
        self._auth = auth
        self._debug_enabled = debug
        self._state = AuthState()
        self._listeners: List[Listener] = []

    @property
    def state(self) -> AuthState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener called with every new state. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def _set(self, action: str, **changes: Any) -> AuthState:
        self._state = replace(self._state, **changes)
        if self._debug_enabled:
            _debug(f"{action} -> {self._state.status.value}")
        for listener in list(self._listeners):
            listener(self._state)
        return self._state

    async def _call(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        # Backend calls block on requests; keep the event loop free while they run.
        return await asyncio.to_thread(fn, *args, **kwargs)

    # -----------------------------
    # Reducers
    # -----------------------------

    def reset(self) -> AuthState:
        return self._set("reset", user=None, is_authenticated=False, error=None)

    def clear_error(self) -> AuthState:
        return self._set("clear_error", error=None)

    def set_credentials(self, user: User) -> AuthState:
        return self._set("set_credentials", user=user, is_authenticated=True)

    # -----------------------------
    # Actions
    # -----------------------------

    async def login(self, credentials: LoginCredentials) -> AuthState:
        self._set("login/pending", is_loading=True, error=None)
        try:
            await self._call(self._auth.login, email=credentials.email, password=credentials.password)
            user = await self._call(self._auth.me)
        except Exception as e:
            return self._set(
                "login/rejected",
                is_loading=False,
                error=_message(e, "Login failed"),
                user=None,
                is_authenticated=False,
            )
        return self._set("login/fulfilled", is_loading=False, user=user, is_authenticated=True, error=None)

    async def register(self, credentials: RegisterCredentials) -> AuthState:
        self._set("register/pending", is_loading=True, error=None)
        try:
            await self._call(
                self._auth.register,
                name=credentials.name,
                email=credentials.email,
                password=credentials.password,
            )
            # The backend sets the session cookie on register, so this logs the new user in.
            user = await self._call(self._auth.me)
        except Exception as e:
            return self._set(
                "register/rejected",
                is_loading=False,
                error=_message(e, "Registration failed"),
                user=None,
                is_authenticated=False,
            )
        return self._set("register/fulfilled", is_loading=False, user=user, is_authenticated=True)

    async def fetch_profile(self) -> AuthState:
        self._set("fetch_profile/pending", is_loading=True)
        try:
            user = await self._call(self._auth.me)
        except Exception as e:
            # No valid session is an expected outcome, not an error.
            if self._debug_enabled:
                _debug(f"fetch_profile: no session ({e})")
            return self._set("fetch_profile/rejected", is_loading=False, user=None, is_authenticated=False)
        return self._set("fetch_profile/fulfilled", is_loading=False, user=user, is_authenticated=True)

    async def logout(self) -> AuthState:
        self._set("logout/pending", is_loading=True)
        try:
            await self._call(self._auth.logout)
        except Exception as e:
            # Local logout always wins.
            _debug(f"logout request failed, clearing local session anyway: {e}")
        return self._set("logout", is_loading=False, user=None, is_authenticated=False, error=None)
