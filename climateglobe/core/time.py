from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def epoch_ms_to_iso(value: Any) -> Optional[str]:
    """USGS-style epoch milliseconds -> ISO8601 UTC, or None if unusable."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        return datetime.fromtimestamp(value / 1000.0, tz=timezone.utc).isoformat()
    except (OverflowError, OSError, ValueError):
        return None


def iso_or_now(value: Any) -> str:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return utc_now_iso()


def days_ago_date(days: int) -> str:
    """Calendar date (YYYY-MM-DD, UTC) `days` before today."""
    now = datetime.now(timezone.utc)
    return datetime.fromtimestamp(now.timestamp() - days * 86400, tz=timezone.utc).date().isoformat()
