from __future__ import annotations

import re
from datetime import date

_MONTH_NAMES = [
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
]

_PERIOD_RE = re.compile(r"^(\d{4})-(\d{1,2})$")


def today_iso() -> str:
    return date.today().isoformat()


def format_period(period: str) -> str:
    """Turn a month picker value (2025-03) into the label the AI endpoint expects (March 2025).

    Anything that is not YYYY-MM is assumed to be formatted already and is returned trimmed.
    """
    p = (period or "").strip()
    if not p:
        raise ValueError("Please select a period")

    m = _PERIOD_RE.match(p)
    if not m:
        return p

    year, month = m.group(1), int(m.group(2))
    if month < 1 or month > 12:
        raise ValueError(f"Invalid month in period: {p}")
    return f"{_MONTH_NAMES[month - 1]} {year}"
