import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# A local .env (FINTRACK_API_URL, FINTRACK_DEBUG, ...) fills in anything the shell did not set.
load_dotenv()

_TRUE_WORDS = frozenset({"1", "true", "yes", "y", "on"})
_FALSE_WORDS = frozenset({"0", "false", "no", "n", "off"})


def _env_bool(name: str, default: Optional[bool] = None) -> Optional[bool]:
    """Read a yes/no environment flag; unset or unrecognised values give `default`."""
    value = (os.environ.get(name) or "").strip().lower()
    if value in _TRUE_WORDS:
        return True
    if value in _FALSE_WORDS:
        return False
    return default


@dataclass(frozen=True)
class Config:
    """Runtime configuration.

    Everything is read from environment variables (or a .env file).
    The client never stores the session token itself; only the cookie name is configured.
    """

    # -----------------
    # Backend
    # -----------------
    API_BASE_URL: str = os.environ.get("FINTRACK_API_URL", "http://localhost:5000/api")
    REQUEST_TIMEOUT_SECONDS: float = float(os.environ.get("FINTRACK_REQUEST_TIMEOUT", "30"))

    # Log every backend request (method, url, body).
    DEBUG: bool = _env_bool("FINTRACK_DEBUG", False) is True

    # -----------------
    # Session cookie + routing
    # -----------------
    # The backend sets this cookie on /auth/login and /auth/register and clears it on /auth/logout.
    AUTH_COOKIE_NAME: str = os.environ.get("AUTH_COOKIE_NAME", "token")

    PROTECTED_PREFIX: str = os.environ.get("PROTECTED_PREFIX", "/dashboard")
    LOGIN_PATH: str = os.environ.get("LOGIN_PATH", "/login")
    REGISTER_PATH: str = os.environ.get("REGISTER_PATH", "/register")
    DASHBOARD_PATH: str = os.environ.get("DASHBOARD_PATH", "/dashboard")

    # -----------------
    # CLI
    # -----------------
    COOKIE_JAR_PATH: str = os.environ.get(
        "FINTRACK_COOKIE_JAR",
        os.path.join(os.path.expanduser("~"), ".fintrack_cookies"),
    )

    # -----------------
    # Web front end
    # -----------------
    WEB_HOST: str = os.environ.get("WEB_HOST", "0.0.0.0")
    WEB_PORT: int = int(os.environ.get("WEB_PORT", "3000"))

    # Needed only when the pages are consumed from another origin during development.
    CORS_ALLOW_ORIGINS: str = os.environ.get(
        "CORS_ALLOW_ORIGINS",
        "http://localhost:5173,http://127.0.0.1:5173",
    )


def load_config() -> Config:
    return Config()
