from __future__ import annotations

from typing import Any, Callable, Optional

from fintrack.api.client import ApiClient
from fintrack.auth import AuthStore, SessionBootstrap
from fintrack.config import Config, load_config
from fintrack.services.ai import AIService
from fintrack.services.auth import AuthService
from fintrack.services.categories import CategoryService
from fintrack.services.transactions import TransactionService


class ClientApp:
    """Application root: one API client, the services, one auth store and its bootstrap.

    Anything that needs the session gets it from here instead of from module globals.
    The CLI owns one per process; the web front end builds one per browser request.
    """

    def __init__(
        self,
        cfg: Config,
        *,
        api: Optional[ApiClient] = None,
        on_loading: Optional[Callable[[], None]] = None,
        **api_kwargs: Any,
    ) -> None:
        self.cfg = cfg
        self.api = api or ApiClient.from_config(cfg, **api_kwargs)
        self.auth = AuthService(self.api)
        self.categories = CategoryService(self.api)
        self.transactions = TransactionService(self.api)
        self.ai = AIService(self.api)
        self.store = AuthStore(self.auth, debug=cfg.DEBUG)
        self.bootstrap = SessionBootstrap(self.store, on_loading=on_loading)


def build_app(cfg: Optional[Config] = None, **kwargs: Any) -> ClientApp:
    return ClientApp(cfg or load_config(), **kwargs)
