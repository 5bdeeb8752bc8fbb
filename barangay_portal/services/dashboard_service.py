from typing import Any, Dict, Optional
import asyncio
import logging

from ..database.database_service import database_service
from ..database.collections import COLLECTIONS
from ..core.clock import local_now, now_ms, today_iso
from ..core.exceptions import StoreError, ok
from .record_service import operation

logger = logging.getLogger(__name__)

DAY_MS = 24 * 60 * 60 * 1000
ACTIVE_BLOTTER_STATUSES = {"pending", "investigating", "additionalInfo"}
UPCOMING_APPOINTMENT_STATUSES = {"pending", "confirmed"}


def _percent_change(recent: int, previous: int) -> int:
    if previous <= 0:
        return 0
    return round((recent - previous) / previous * 100)


def _monthly_change(records: Dict[str, Any], now: int) -> int:
    """Records created in the last 30 days against the 30 days before that."""
    recent = previous = 0
    for record in records.values():
        created = int((record or {}).get("createdAt") or 0)
        if now - 30 * DAY_MS <= created <= now:
            recent += 1
        elif now - 60 * DAY_MS <= created < now - 30 * DAY_MS:
            previous += 1
    return _percent_change(recent, previous)


class DashboardService:
    """Admin dashboard statistics"""

    def __init__(self, db=None):
        self.db = db or database_service

    async def _read(self, collection: str) -> Dict[str, Any]:
        success, data, error = await self.db.get(COLLECTIONS[collection])
        if not success:
            raise StoreError(f"Failed to read {collection}: {error}")
        return data or {}

    @operation("Failed to fetch dashboard statistics")
    async def get_dashboard_stats(self, today: Optional[str] = None) -> Dict[str, Any]:
        certificates, appointments, blotter, users = await asyncio.gather(
            self._read("certificates"),
            self._read("appointments"),
            self._read("blotter"),
            self._read("users"),
        )

        cutoff = today or today_iso()
        current_time = local_now().strftime("%H:%M")
        now = now_ms()

        def is_upcoming(appointment: Dict[str, Any]) -> bool:
            if appointment.get("status") not in UPCOMING_APPOINTMENT_STATUSES:
                return False
            scheduled = (appointment.get("date") or "", appointment.get("time") or "")
            return scheduled >= (cutoff, current_time if today is None else "")

        stats = {
            "pendingCertificates": sum(1 for c in certificates.values() if (c or {}).get("status") == "pending"),
            "upcomingAppointments": sum(1 for a in appointments.values() if is_upcoming(a or {})),
            "activeBlotterCases": sum(
                1 for b in blotter.values() if (b or {}).get("status") in ACTIVE_BLOTTER_STATUSES
            ),
            "registeredResidents": sum(1 for u in users.values() if (u or {}).get("role") == "resident"),
            "certificatesChange": _monthly_change(certificates, now),
            "appointmentsChange": _monthly_change(appointments, now),
            "blotterChange": _monthly_change(blotter, now),
            "residentsChange": _monthly_change(
                {uid: u for uid, u in users.items() if (u or {}).get("role") == "resident"}, now
            ),
        }
        return ok(stats=stats)


dashboard_service = DashboardService()
