from datetime import datetime, timedelta, timezone
from typing import Optional
import time

from .config import settings


def now_ms() -> int:
    """Epoch milliseconds, the unit of createdAt/updatedAt/archivedAt."""
    return int(time.time() * 1000)


def local_now() -> datetime:
    """Current time in the barangay's timezone (TZ_OFFSET hours from UTC)."""
    return datetime.now(timezone(timedelta(hours=settings.TZ_OFFSET)))


def today_iso(now: Optional[datetime] = None) -> str:
    return (now or local_now()).strftime("%Y-%m-%d")


def long_date(now: Optional[datetime] = None) -> str:
    """e.g. 'May 26, 2025'"""
    moment = now or local_now()
    return f"{moment.strftime('%B')} {moment.day}, {moment.year}"
