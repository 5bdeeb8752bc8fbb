import pytest

from barangay_portal.services.resident_service import ResidentService
from conftest import RecordingPort

pytestmark = pytest.mark.asyncio


def resident(first, last, email, status="pending", registered=0, address="Purok 1"):
    return {
        "personalInfo": {"firstName": first, "lastName": last},
        "contactInfo": {"email": email, "phoneNumber": "0917"},
        "addressInfo": {"fullAddress": address},
        "verification": {"status": status, "submittedAt": registered},
        "registrationDate": registered,
    }


@pytest.fixture
def service(db, archive, notifier, mailer, auth_port):
    db.write("residents/u1", resident("Maria", "Santos", "maria@example.com", registered=10))
    db.write("residents/u2", resident("Jose", "Rizal", "jose@example.com", "verified", registered=20, address="Calamba"))
    db.write("users/u1", {"role": "resident", "verificationStatus": "pending"})
    return ResidentService(db=db, archive=archive, notifier=notifier, email=mailer, auth=auth_port)


async def test_verification_writes_resident_and_user_mirror_together(service, db, notifier, mailer):
    db.multi_path_calls.clear()

    result = await service.update_resident_verification("u1", "verified", notes="ID matches", reviewer_id="admin-1")

    assert result == {"success": True}
    assert len(db.multi_path_calls) == 1
    verification = db.read("residents/u1/verification")
    assert verification["status"] == "verified"
    assert verification["reviewedBy"] == "admin-1"
    assert verification["notes"] == "ID matches"
    assert db.read("users/u1/verificationStatus") == "verified"
    assert notifier.called("notify_resident_verification")[0][1][:3] == ("u1", "Maria Santos", "verified")
    assert mailer.called("send_resident_verification_email")[0][1][:2] == ("maria@example.com", "verified")


async def test_verification_failure_writes_nothing(service, db):
    db.fail_multi_path = True

    result = await service.update_resident_verification("u1", "verified")

    assert result["error_type"] == "store"
    assert db.read("residents/u1/verification/status") == "pending"
    assert db.read("users/u1/verificationStatus") == "pending"


async def test_verified_resident_cannot_be_rejected(service, db):
    result = await service.update_resident_verification("u2", "rejected", notes="late")

    assert result["error_type"] == "validation"
    assert db.read("residents/u2/verification/status") == "verified"


async def test_verification_succeeds_when_push_and_email_fail(db, archive, auth_port):
    db.write("residents/u1", resident("Maria", "Santos", "maria@example.com"))
    service = ResidentService(
        db=db, archive=archive, auth=auth_port,
        notifier=RecordingPort(failing={"notify_resident_verification"}),
        email=RecordingPort(failing={"send_resident_verification_email"}),
    )

    result = await service.update_resident_verification("u1", "rejected", notes="Blurry ID")

    assert result["success"] is True
    assert db.read("residents/u1/verification/status") == "rejected"


async def test_listing_is_newest_registration_first(service):
    result = await service.get_residents()

    assert [r["uid"] for r in result["residents"]] == ["u2", "u1"]
    assert result["residents"][0]["name"] == "Jose Rizal"


async def test_search_by_text_and_verification(service):
    by_address = await service.search_residents("calamba")
    assert [r["uid"] for r in by_address["residents"]] == ["u2"]

    pending = await service.search_residents("", "pending")
    assert [r["uid"] for r in pending["residents"]] == ["u1"]

    everyone = await service.search_residents("", "all")
    assert len(everyone["residents"]) == 2


async def test_details_and_missing_resident(service):
    details = await service.get_resident_details("u1")
    assert details["resident"]["contactInfo"]["email"] == "maria@example.com"

    missing = await service.get_resident_details("nobody")
    assert missing == {"success": False, "error": "Resident not found", "error_type": "not_found"}


async def test_account_status(service, db):
    assert (await service.update_resident_status("u1", "inactive"))["success"] is True
    assert db.read("residents/u1/status") == "inactive"
    assert (await service.update_resident_status("u1", "banned"))["error_type"] == "validation"
