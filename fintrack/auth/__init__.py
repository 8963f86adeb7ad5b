"""Client-side auth session.

- `AuthStore` holds who is logged in and exposes the session actions
- `SessionBootstrap` restores the session once on application load

The session credential itself is a backend-managed cookie. Nothing here reads or
validates the token; only the backend does that, on every request.
"""

from .bootstrap import SessionBootstrap
from .store import (
    AuthState,
    AuthStore,
    LoginCredentials,
    RegisterCredentials,
    SessionStatus,
)

__all__ = [
    "AuthState",
    "AuthStore",
    "LoginCredentials",
    "RegisterCredentials",
    "SessionBootstrap",
    "SessionStatus",
]
