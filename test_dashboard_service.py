import pytest

from barangay_portal.core.clock import now_ms
from barangay_portal.services.dashboard_service import DAY_MS, DashboardService
from conftest import FakeRealtimeDB

pytestmark = pytest.mark.asyncio


async def test_dashboard_stats():
    now = now_ms()
    recent = now - 5 * DAY_MS
    older = now - 45 * DAY_MS
    db = FakeRealtimeDB({
        "certificates": {
            "c1": {"status": "pending", "createdAt": recent},
            "c2": {"status": "pending", "createdAt": recent},
            "c3": {"status": "completed", "createdAt": older},
        },
        "appointments": {
            "a1": {"status": "confirmed", "date": "2025-06-02", "time": "09:00", "createdAt": recent},
            "a2": {"status": "pending", "date": "2025-06-01", "time": "13:00", "createdAt": older},
            "a3": {"status": "pending", "date": "2025-05-31", "time": "13:00", "createdAt": older},
            "a4": {"status": "cancelled", "date": "2025-06-05", "time": "13:00", "createdAt": older},
        },
        "blotter": {
            "b1": {"status": "investigating", "createdAt": recent},
            "b2": {"status": "closed", "createdAt": recent},
        },
        "users": {
            "u1": {"role": "resident", "createdAt": recent},
            "u2": {"role": "admin", "createdAt": recent},
            "u3": {"role": "resident", "createdAt": older},
        },
    })

    result = await DashboardService(db=db).get_dashboard_stats(today="2025-06-01")

    assert result["success"] is True
    stats = result["stats"]
    assert stats["pendingCertificates"] == 2
    assert stats["upcomingAppointments"] == 2
    assert stats["activeBlotterCases"] == 1
    assert stats["registeredResidents"] == 2
    assert stats["certificatesChange"] == 100
    assert stats["appointmentsChange"] == -67
    assert stats["blotterChange"] == 0
    assert stats["residentsChange"] == 0


async def test_dashboard_on_empty_database():
    result = await DashboardService(db=FakeRealtimeDB()).get_dashboard_stats()

    assert result["stats"]["pendingCertificates"] == 0
    assert result["stats"]["registeredResidents"] == 0


async def test_dashboard_read_failure():
    db = FakeRealtimeDB()
    db.fail_reads.add("blotter")

    result = await DashboardService(db=db).get_dashboard_stats()

    assert result == {"success": False, "error": "Failed to fetch dashboard statistics", "error_type": "store"}
