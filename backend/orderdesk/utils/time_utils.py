"""Time utilities with Africa/Johannesburg local time."""

from datetime import datetime
from zoneinfo import ZoneInfo
from typing import Optional

try:
    SAST_TZ = ZoneInfo("Africa/Johannesburg")
except Exception:
    # Fallback to system local timezone when tzdata is unavailable (Windows)
    SAST_TZ = datetime.now().astimezone().tzinfo

# Matches the en-ZA locale rendering used in the ledger and emails,
# e.g. "2025/03/14, 09:05:33".
DISPLAY_FORMAT = "%Y/%m/%d, %H:%M:%S"


def now_sast() -> datetime:
    """Return timezone-aware datetime in Africa/Johannesburg."""
    return datetime.now(SAST_TZ)


def now_sast_naive() -> datetime:
    """Return naive datetime representing Africa/Johannesburg local time."""
    return now_sast().replace(tzinfo=None)


def iso_sast() -> str:
    """Return ISO timestamp with Africa/Johannesburg offset."""
    return now_sast().isoformat()


def to_sast(dt: Optional[datetime]) -> Optional[datetime]:
    """Convert a datetime to Africa/Johannesburg tz (assumes SAST if naive)."""
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=SAST_TZ)
    return dt.astimezone(SAST_TZ)


def format_sast(dt: Optional[datetime]) -> str:
    """Human-readable SAST timestamp for the ledger and email."""
    dt_local = to_sast(dt)
    return dt_local.strftime(DISPLAY_FORMAT) if dt_local else ""
