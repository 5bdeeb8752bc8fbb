import pytest

from barangay_portal.services.blotter_service import BlotterService

pytestmark = pytest.mark.asyncio

REPORT = {
    "type": "Noise Complaint",
    "description": "Karaoke past midnight",
    "reportedBy": "Lorna Cruz",
    "contactNumber": "09181112222",
    "email": "lorna@example.com",
    "priority": "medium",
    "location": "Purok 5",
}


@pytest.fixture
def service(db, archive, reference_numbers, mailer):
    return BlotterService(db=db, archive=archive, reference_numbers=reference_numbers, email=mailer)


async def create(service, **overrides):
    result = await service.create_blotter_entry({**REPORT, **overrides})
    assert result["success"] is True
    return result["entryId"]


async def test_create_rejects_unknown_priority(service):
    result = await service.create_blotter_entry({**REPORT, "priority": "critical"})

    assert result["error_type"] == "validation"


async def test_create_stamps_reference_and_report_date(service, db):
    entry_id = await create(service)

    stored = db.read(f"blotter/{entry_id}")
    assert stored["referenceNumber"].startswith("BLT-")
    assert stored["status"] == "pending"
    assert stored["date"]


async def test_status_update_emails_reporter(service, db, mailer):
    entry_id = await create(service)

    result = await service.update_blotter_status(entry_id, "investigating", notes="Tanod dispatched")

    assert result["success"] is True
    assert db.read(f"blotter/{entry_id}/notes") == "Tanod dispatched"
    email = mailer.called("send_blotter_status_email")[0]
    assert email[1][:2] == ("lorna@example.com", "investigating")
    assert email[1][2]["notes"] == "Tanod dispatched"


async def test_cannot_close_unresolved_case(service, db):
    entry_id = await create(service)

    result = await service.update_blotter_status(entry_id, "closed")

    assert result["error_type"] == "validation"
    assert db.read(f"blotter/{entry_id}/status") == "pending"


async def test_priority_update(service, db):
    entry_id = await create(service)

    assert (await service.update_blotter_priority(entry_id, "urgent"))["success"] is True
    assert db.read(f"blotter/{entry_id}/priority") == "urgent"
    assert (await service.update_blotter_priority(entry_id, "extreme"))["error_type"] == "validation"


async def test_search_matches_location_and_reporter(service):
    await create(service)
    await create(service, reportedBy="Ramon Diaz", location="Purok 1", type="Theft", description="Bike stolen")

    by_location = await service.search_blotter("purok 5")
    assert [e["reportedBy"] for e in by_location["entries"]] == ["Lorna Cruz"]

    by_reporter = await service.search_blotter("RAMON")
    assert [e["type"] for e in by_reporter["entries"]] == ["Theft"]

    everything = await service.search_blotter("  ")
    assert len(everything["entries"]) == 2


async def test_archive_and_restore(service, db, archive):
    entry_id = await create(service, reportedBy="Juan Dela Cruz")
    original = db.read(f"blotter/{entry_id}")

    assert (await service.delete_blotter_entry(entry_id))["success"] is True
    assert db.read(f"blotter/{entry_id}") is None
    listing = (await archive.get_archived_items_action())["archives"]
    assert [item["id"] for item in listing] == [entry_id]
    preview = listing[0]["preview"]
    assert (preview["type"], preview["status"], preview["reportedBy"]) == ("Noise Complaint", "pending", "Juan Dela Cruz")

    assert (await archive.restore_archived_item_action("blotter", entry_id))["success"] is True
    assert db.read(f"blotter/{entry_id}") == original


async def test_counts_include_urgent(service):
    entry_id = await create(service, priority="urgent")
    await create(service)
    await service.update_blotter_status(entry_id, "investigating")

    counts = (await service.get_blotter_count())["counts"]

    assert counts["total"] == 2
    assert counts["investigating"] == 1
    assert counts["pending"] == 1
    assert counts["urgent"] == 1
