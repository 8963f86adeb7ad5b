from __future__ import annotations

import asyncio
from typing import Callable, Optional, TypeVar

from fintrack.auth.store import AuthState, AuthStore

T = TypeVar("T")


class SessionBootstrap:
    """Restore the session once per application load before anything is rendered.

    `run(render)` fetches the profile, then renders whatever the outcome. A missing or
    expired session is indistinguishable from "never logged in"; the route guard and the
    page handlers take the remaining access decisions.
    """

    def __init__(self, store: AuthStore, *, on_loading: Optional[Callable[[], None]] = None) -> None:
        self.store = store
        self.on_loading = on_loading
        self.is_initializing = True
        self._task: Optional[asyncio.Task] = None

    async def restore(self) -> AuthState:
        if not self.is_initializing:
            return self.store.state
        if self._task is None:
            if self.on_loading is not None:
                self.on_loading()
            self._task = asyncio.ensure_future(self.store.fetch_profile())
        try:
            return await self._task
        finally:
            self.is_initializing = False

    async def run(self, render: Callable[[AuthState], T]) -> T:
        state = await self.restore()
        return render(state)
