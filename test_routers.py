import pytest
from fastapi.testclient import TestClient

from barangay_portal.main import app
from barangay_portal.auth.dependencies import get_current_user
from barangay_portal.routers import announcements as announcements_router
from barangay_portal.routers import appointments as appointments_router
from barangay_portal.routers import archives as archives_router
from barangay_portal.routers import certificates as certificates_router
from barangay_portal.routers import officials as officials_router
from barangay_portal.services.announcement_service import AnnouncementService
from barangay_portal.services.appointment_service import AppointmentService
from barangay_portal.services.archive_service import ArchiveService
from barangay_portal.services.certificate_service import CertificateService
from barangay_portal.services.official_service import OfficialService
from barangay_portal.services.reference_number_service import ReferenceNumberService
from conftest import FakeRealtimeDB, FakeStorage, RecordingPort

ADMIN = {"uid": "admin-1", "role": "admin", "email": "admin@example.com"}
RESIDENT = {"uid": "resident-1", "role": "resident", "email": "juan@example.com"}
NEIGHBOUR = {"uid": "resident-2", "role": "resident", "email": "maria@example.com"}


@pytest.fixture
def fake_db():
    return FakeRealtimeDB()


@pytest.fixture
def client(fake_db, monkeypatch):
    archive = ArchiveService(db=fake_db, auth=RecordingPort(), storage=FakeStorage())
    references = ReferenceNumberService(db=fake_db, strategy="count")
    monkeypatch.setattr(certificates_router, "certificate_service", CertificateService(
        db=fake_db, archive=archive, reference_numbers=references,
        notifier=RecordingPort(), email=RecordingPort(), storage=FakeStorage(),
    ))
    monkeypatch.setattr(announcements_router, "announcement_service", AnnouncementService(
        db=fake_db, archive=archive, reference_numbers=references,
        notifier=RecordingPort(), email=RecordingPort(),
    ))
    monkeypatch.setattr(appointments_router, "appointment_service", AppointmentService(
        db=fake_db, archive=archive, reference_numbers=references,
        notifier=RecordingPort(), email=RecordingPort(),
    ))
    monkeypatch.setattr(officials_router, "official_service", OfficialService(
        db=fake_db, archive=archive, storage=FakeStorage(),
    ))
    monkeypatch.setattr(archives_router, "archive_service", archive)

    app.dependency_overrides[get_current_user] = lambda: ADMIN
    yield TestClient(app)
    app.dependency_overrides.clear()


def login_as(user):
    app.dependency_overrides[get_current_user] = lambda: user


CERTIFICATE_REQUEST = {
    "type": "Barangay Clearance",
    "requestedBy": "Juan Dela Cruz",
    "emailToNotify": "juan@example.com",
    "purpose": "Employment",
}


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] in ("healthy", "degraded")


def test_create_certificate_defaults_user_id_to_caller(client, fake_db):
    login_as(RESIDENT)

    response = client.post("/certificates/", json=CERTIFICATE_REQUEST)

    assert response.status_code == 200
    body = response.json()
    assert body["referenceNumber"].startswith("CERT-")
    assert fake_db.read(f"certificates/{body['certificateId']}/userId") == "resident-1"


def test_missing_certificate_maps_to_404(client):
    response = client.get("/certificates/does-not-exist")

    assert response.status_code == 404
    assert response.json()["detail"] == "Certificate not found."


def test_rejection_without_reason_maps_to_400(client):
    certificate_id = client.post("/certificates/", json=CERTIFICATE_REQUEST).json()["certificateId"]

    response = client.put(f"/certificates/{certificate_id}/status", json={"status": "rejected"})

    assert response.status_code == 400


def test_store_failure_maps_to_500(client, fake_db):
    fake_db.fail_reads.add("certificates")

    response = client.get("/certificates/")

    assert response.status_code == 500
    assert response.json()["detail"] == "Failed to fetch certificates. Please try again."


def test_staff_endpoints_reject_residents(client):
    login_as(RESIDENT)

    response = client.get("/certificates/counts")

    assert response.status_code == 403


def test_archive_and_restore_over_http(client, fake_db):
    certificate_id = client.post("/certificates/", json=CERTIFICATE_REQUEST).json()["certificateId"]

    assert client.delete(f"/certificates/{certificate_id}").status_code == 200
    listing = client.get("/archives/", params={"entity": "certificates"}).json()
    assert [item["id"] for item in listing["archives"]] == [certificate_id]
    assert listing["archives"][0]["archivedBy"] == "admin-1"

    restored = client.post(f"/archives/certificates/{certificate_id}/restore")

    assert restored.status_code == 200
    assert fake_db.read(f"certificates/{certificate_id}/type") == "Barangay Clearance"


def test_permanent_delete_requires_admin(client):
    login_as({"uid": "official-1", "role": "official"})

    response = client.delete("/archives/certificates/anything")

    assert response.status_code == 403


def test_public_announcements_need_no_login(client, fake_db):
    app.dependency_overrides.clear()
    fake_db.write("announcements/a1", {"title": "Fiesta", "status": "published", "visibility": "public"})
    fake_db.write("announcements/a2", {"title": "Draft", "status": "draft", "visibility": "public"})

    response = client.get("/announcements/public")

    assert response.status_code == 200
    assert [item["title"] for item in response.json()["announcements"]] == ["Fiesta"]


APPOINTMENT_REQUEST = {
    "title": "Consultation",
    "description": "Boundary dispute",
    "date": "2025-06-10",
    "time": "09:00",
    "requestedBy": "Juan Dela Cruz",
    "contactNumber": "09170000000",
    "email": "juan@example.com",
}


def test_resident_cannot_read_another_residents_certificate(client):
    login_as(RESIDENT)
    certificate_id = client.post("/certificates/", json=CERTIFICATE_REQUEST).json()["certificateId"]
    assert client.get(f"/certificates/{certificate_id}").status_code == 200

    login_as(NEIGHBOUR)
    response = client.get(f"/certificates/{certificate_id}")

    assert response.status_code == 404
    assert "juan@example.com" not in response.text

    login_as(ADMIN)
    assert client.get(f"/certificates/{certificate_id}").status_code == 200


def test_resident_cannot_claim_certificate_for_someone_else(client, fake_db):
    login_as(NEIGHBOUR)

    body = client.post("/certificates/", json={**CERTIFICATE_REQUEST, "userId": "resident-1"}).json()

    assert fake_db.read(f"certificates/{body['certificateId']}/userId") == "resident-2"


def test_resident_cannot_read_or_reschedule_another_residents_appointment(client, fake_db):
    login_as(RESIDENT)
    appointment_id = client.post("/appointments/", json=APPOINTMENT_REQUEST).json()["appointmentId"]
    login_as(ADMIN)
    client.put(f"/appointments/{appointment_id}/status", json={"status": "confirmed"})

    login_as(NEIGHBOUR)
    assert client.get(f"/appointments/{appointment_id}").status_code == 404
    response = client.put(f"/appointments/{appointment_id}/schedule", json={"date": "2025-06-20", "time": "10:00"})

    assert response.status_code == 404
    stored = fake_db.read(f"appointments/{appointment_id}")
    assert (stored["date"], stored["status"]) == ("2025-06-10", "confirmed")

    login_as(RESIDENT)
    response = client.put(f"/appointments/{appointment_id}/schedule", json={"date": "2025-06-20", "time": "10:00"})
    assert response.status_code == 200
    assert fake_db.read(f"appointments/{appointment_id}/status") == "pending"


def test_official_created_from_form_with_photo(client, fake_db):
    response = client.post(
        "/officials/",
        data={"name": "Jesus De Una", "position": "captain", "term": "2023-2026", "committees": "Health, Peace"},
        files={"photo": ("captain.png", b"\x89PNG", "image/png")},
    )

    assert response.status_code == 200
    official_id = response.json()["officialId"]
    stored = fake_db.read(f"officials/{official_id}")
    assert stored["committees"] == ["Health", "Peace"]
    assert stored["photoPublicId"] == "barangay-portal/officials/fake.png"

    login_as(RESIDENT)
    assert client.get(f"/officials/{official_id}").json()["official"]["name"] == "Jesus De Una"
    assert client.delete(f"/officials/{official_id}").status_code == 403


def test_staff_management_is_admin_only(client):
    login_as({"uid": "official-1", "role": "official"})

    assert client.get("/staff/").status_code == 403
    assert client.put("/staff/someone/status", json={"status": "suspended"}).status_code == 403
