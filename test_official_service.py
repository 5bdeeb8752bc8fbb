import pytest

from barangay_portal.services.official_service import OfficialService, split_list
from conftest import FakeStorage

pytestmark = pytest.mark.asyncio

OFFICIAL = {
    "name": "Jesus De Una",
    "position": "captain",
    "term": "2023-2026",
    "email": "captain@malinta.gov.ph",
    "phone": "09171230000",
    "committees": "Peace and Order, Health ,",
}


@pytest.fixture
def service(db, archive, storage):
    return OfficialService(db=db, archive=archive, storage=storage)


async def create(service, photo=None, **overrides):
    result = await service.create_official({**OFFICIAL, **overrides}, photo=photo)
    assert result["success"] is True
    return result["officialId"]


def test_split_list_accepts_strings_and_lists():
    assert split_list("a, b ,,c") == ["a", "b", "c"]
    assert split_list([" x ", ""]) == ["x"]
    assert split_list(None) == []


async def test_create_with_photo(service, db, storage):
    official_id = await create(service, photo=b"\x89PNG")

    stored = db.read(f"officials/{official_id}")
    assert stored["committees"] == ["Peace and Order", "Health"]
    assert stored["projects"] == []
    assert stored["status"] == "active"
    assert stored["photoPublicId"] == "barangay-portal/officials/fake.png"
    assert storage.called("upload")[0][1] == (b"\x89PNG", "officials")


async def test_create_validates_position_and_required_fields(service, db):
    assert (await service.create_official({**OFFICIAL, "position": "mayor"}))["error_type"] == "validation"
    assert (await service.create_official({"name": "No Term"}))["error_type"] == "validation"
    assert db.read("officials") is None


async def test_search_by_name_position_and_status(service):
    await create(service)
    await create(service, name="Ana Reyes", email="ana@malinta.gov.ph", position="councilor", status="inactive")

    by_name = await service.search_officials("ANA")
    assert [o["name"] for o in by_name["officials"]] == ["Ana Reyes"]

    captains = await service.search_officials("", position_filter="captain")
    assert [o["name"] for o in captains["officials"]] == ["Jesus De Una"]

    inactive = await service.search_officials(status_filter="inactive")
    assert [o["position"] for o in inactive["officials"]] == ["councilor"]


async def test_replacing_photo_deletes_the_old_one(service, db, storage):
    official_id = await create(service, photo=b"old")
    db.write(f"officials/{official_id}/photoPublicId", "barangay-portal/officials/old.png")

    result = await service.update_official(official_id, {"term": "2026-2029"}, photo=b"new")

    assert result["success"] is True
    assert result["official"]["term"] == "2026-2029"
    assert db.read(f"officials/{official_id}/photoPublicId") == "barangay-portal/officials/fake.png"
    assert storage.called("delete") == [("delete", ("barangay-portal/officials/old.png",), {})]


async def test_update_survives_failed_cleanup_of_old_photo(db, archive):
    service = OfficialService(db=db, archive=archive, storage=FakeStorage(failing={"delete"}))
    official_id = await create(service, photo=b"old")

    result = await service.update_official(official_id, {"name": "Jesus H. De Una"}, photo=b"new")

    assert result["success"] is True
    assert db.read(f"officials/{official_id}/name") == "Jesus H. De Una"


async def test_update_without_photo_keeps_it(service, db, storage):
    official_id = await create(service, photo=b"png")

    await service.update_official(official_id, {"photo": "https://elsewhere", "phone": "0917"})

    assert db.read(f"officials/{official_id}/photo").startswith("https://storage.example/")
    assert storage.called("delete") == []


async def test_delete_archives_and_purge_removes_photo(service, db, archive, storage):
    official_id = await create(service, photo=b"png")

    assert (await service.delete_official(official_id, archived_by="admin-1"))["success"] is True
    assert db.read(f"officials/{official_id}") is None
    preview = db.read(f"archives/officials/{official_id}/preview")
    assert preview["photoPublicId"] == "barangay-portal/officials/fake.png"
    assert storage.called("delete") == []

    assert (await archive.delete_archived_item_action("officials", official_id))["success"] is True
    assert storage.called("delete") == [("delete", ("barangay-portal/officials/fake.png",), {})]


async def test_missing_official(service):
    result = await service.get_official("ghost")

    assert result == {"success": False, "error": "Official not found.", "error_type": "not_found"}
