import pytest

from barangay_portal.services.event_service import EventService

pytestmark = pytest.mark.asyncio

EVENT = {
    "name": "Medical Mission",
    "date": "2025-08-15",
    "time": "08:00",
    "location": "Covered Court",
    "description": "Free check-ups and medicine",
    "category": "health",
    "organizer": "Health Committee",
    "contact": "09190001111",
}


@pytest.fixture
def service(db, archive, reference_numbers, notifier, mailer):
    return EventService(db=db, archive=archive, reference_numbers=reference_numbers, notifier=notifier, email=mailer)


async def create(service, **overrides):
    result = await service.create_event({**EVENT, **overrides})
    assert result["success"] is True
    return result["eventId"]


async def test_create_defaults(service, db, notifier):
    event_id = await create(service, category=None)

    stored = db.read(f"events/{event_id}")
    assert stored["status"] == "active"
    assert stored["featured"] is False
    assert stored["category"] == "community"
    assert notifier.called("notify_event")[0][1] == ("Medical Mission", "2025-08-15", event_id)


async def test_create_rejects_unknown_category(service):
    result = await service.create_event({**EVENT, "category": "fiesta"})

    assert result["error_type"] == "validation"


async def test_toggle_status_flips_between_active_and_inactive(service, db):
    event_id = await create(service)

    assert await service.toggle_event_status(event_id) == {"success": True, "status": "inactive"}
    assert await service.toggle_event_status(event_id) == {"success": True, "status": "active"}
    assert db.read(f"events/{event_id}/status") == "active"


async def test_toggle_featured(service):
    event_id = await create(service)
    await create(service, name="Clean-up Drive", category="community")

    assert await service.toggle_featured_status(event_id) == {"success": True, "featured": True}

    featured = await service.get_featured_events()
    assert [e["name"] for e in featured["events"]] == ["Medical Mission"]

    counts = (await service.get_events_count())["counts"]
    assert counts == {"total": 2, "active": 2, "inactive": 0, "featured": 1}


async def test_toggle_missing_event_is_not_found(service):
    assert (await service.toggle_featured_status("ghost"))["error_type"] == "not_found"


async def test_filter_by_category_and_status(service):
    health = await create(service)
    await create(service, name="Basketball League", category="sports")
    await service.toggle_event_status(health)

    sports = await service.get_events_by_category("sports")
    assert [e["name"] for e in sports["events"]] == ["Basketball League"]

    inactive = await service.get_events_by_status("inactive")
    assert [e["id"] for e in inactive["events"]] == [health]
