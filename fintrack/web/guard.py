from __future__ import annotations

from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import RedirectResponse

from fintrack.config import Config


def _debug(msg: str) -> None:
    print(f"[guard] {msg}")


def _under(path: str, prefix: str) -> bool:
    p = prefix.rstrip("/") or "/"
    return path == p or path.startswith(p + "/")


def is_matched(path: str, cfg: Config) -> bool:
    """Paths the guard looks at at all: the protected area and the two auth pages."""
    return _under(path, cfg.PROTECTED_PREFIX) or path in (cfg.LOGIN_PATH, cfg.REGISTER_PATH)


def resolve_redirect(path: str, has_credential: bool, cfg: Config) -> Optional[str]:
    """Return where to send this navigation, or None to let it through.

    1. protected path, no session cookie  -> login
    2. login/register, session cookie set -> dashboard
    3. anything else                      -> unchanged
    """
    if not has_credential and _under(path, cfg.PROTECTED_PREFIX):
        return cfg.LOGIN_PATH
    if has_credential and path in (cfg.LOGIN_PATH, cfg.REGISTER_PATH):
        return cfg.DASHBOARD_PATH
    return None


class RouteGuardMiddleware(BaseHTTPMiddleware):
    """Cookie-presence admission control, evaluated before any handler runs.

    The token is never decoded here. An expired but present cookie is let through and
    is rejected later by the backend on the first data request.
    """

    def __init__(self, app, cfg: Config) -> None:
        super().__init__(app)
        self.cfg = cfg

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if not is_matched(path, self.cfg):
            return await call_next(request)

        has_credential = bool(request.cookies.get(self.cfg.AUTH_COOKIE_NAME))
        target = resolve_redirect(path, has_credential, self.cfg)
        if self.cfg.DEBUG:
            _debug(f"path={path} credential={has_credential} redirect={target}")
        if target is None:
            return await call_next(request)
        # Form posts are turned into a plain GET of the target page.
        status = 307 if request.method in ("GET", "HEAD") else 303
        return RedirectResponse(target, status_code=status)
