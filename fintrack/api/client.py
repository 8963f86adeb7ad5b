from __future__ import annotations

import json
from http.cookiejar import CookieJar
from typing import Any, Dict, Optional

import requests

from fintrack.config import Config

NETWORK_ERROR_MESSAGE = "Unable to connect to server. Please check your network connection."


def _debug(msg: str) -> None:
    print(f"[api] {msg}")


class ApiError(Exception):
    """A backend call failed.

    `status` is the HTTP status code, or None when the backend was never reached.
    """

    def __init__(self, message: str, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


class UnauthorizedError(ApiError):
    """401 from the backend.

    For /auth/me this simply means "not logged in".
    """

    def __init__(self, message: str = "UNAUTHORIZED") -> None:
        super().__init__(message, status=401)


class NetworkError(ApiError):
    def __init__(self, message: str = NETWORK_ERROR_MESSAGE) -> None:
        super().__init__(message, status=None)


def _body_message(r: requests.Response) -> Optional[str]:
    try:
        body = r.json()
    except ValueError:
        return None
    if isinstance(body, dict):
        msg = body.get("message") or body.get("detail")
        if msg:
            return str(msg)
    return None


def _error_message(r: requests.Response) -> str:
    msg = _body_message(r)
    if msg:
        return msg
    try:
        r.json()
    except ValueError:
        return "An error occurred"
    return f"HTTP error! status: {r.status_code}"


class ApiClient:
    """Thin JSON wrapper around one cookie-carrying `requests.Session`.

    The session's cookie jar plays the role of the browser: the backend sets and clears
    the session credential through response headers, and every request sends it back.
    """

    def __init__(
        self,
        base_url: str,
        *,
        cookie_name: str = "token",
        timeout: float = 30.0,
        debug: bool = False,
        session: Optional[requests.Session] = None,
        cookies: Optional[CookieJar | Dict[str, str]] = None,
    ) -> None:
        self.base_url = (base_url or "").rstrip("/")
        self.cookie_name = cookie_name
        self.timeout = timeout
        self.debug = debug
        self.session = session or requests.Session()
        if isinstance(cookies, CookieJar):
            self.session.cookies = cookies  # type: ignore[assignment]
        elif cookies:
            for k, v in cookies.items():
                self.session.cookies.set(k, v)

    @classmethod
    def from_config(cls, cfg: Config, **kwargs: Any) -> "ApiClient":
        return cls(
            cfg.API_BASE_URL,
            cookie_name=cfg.AUTH_COOKIE_NAME,
            timeout=cfg.REQUEST_TIMEOUT_SECONDS,
            debug=cfg.DEBUG,
            **kwargs,
        )

    # -----------------------------
    # Session credential
    # -----------------------------

    def credential(self) -> Optional[str]:
        """Current session cookie value, if the backend has set one."""
        for c in self.session.cookies:
            if c.name == self.cookie_name and c.value:
                return c.value
        return None

    def clear_credentials(self) -> None:
        self.session.cookies.clear()

    # -----------------------------
    # Requests
    # -----------------------------

    def request(
        self,
        method: str,
        endpoint: str,
        *,
        data: Any = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = f"{self.base_url}{endpoint}"
        body = json.dumps(data) if data is not None else None

        if self.debug:
            _debug(f"{method} {url} params={params} body={body}")

        try:
            r = self.session.request(
                method,
                url,
                data=body,
                params=params,
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
        except (requests.ConnectionError, requests.Timeout) as e:
            _debug(f"Network error calling {url}: {e}")
            raise NetworkError() from e

        if r.status_code == 401:
            raise UnauthorizedError(_body_message(r) or "UNAUTHORIZED")

        if not r.ok:
            raise ApiError(_error_message(r), status=r.status_code)

        if not r.content:
            return None
        try:
            return r.json()
        except ValueError as e:
            raise ApiError(f"Invalid JSON from {endpoint}", status=r.status_code) from e

    def get(self, endpoint: str, *, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", endpoint, params=params)

    def post(self, endpoint: str, data: Any = None) -> Any:
        return self.request("POST", endpoint, data=data)

    def put(self, endpoint: str, data: Any = None) -> Any:
        return self.request("PUT", endpoint, data=data)

    def delete(self, endpoint: str) -> Any:
        return self.request("DELETE", endpoint)
