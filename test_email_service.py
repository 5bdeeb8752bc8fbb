import pytest

from barangay_portal.services.email_service import (
    APPOINTMENT_TEMPLATES,
    CERTIFICATE_TEMPLATES,
    VERIFICATION_TEMPLATES,
    EmailService,
)


@pytest.fixture
def mailer():
    service = EmailService()
    service.mock_mode = True
    return service


@pytest.mark.parametrize("template", sorted(
    {name for name, _ in CERTIFICATE_TEMPLATES.values()}
    | {name for name, _ in APPOINTMENT_TEMPLATES.values()}
    | {name for name, _ in VERIFICATION_TEMPLATES.values()}
    | {"blotter_status_update.html", "announcement_created.html", "event_created.html"}
))
def test_every_template_renders(mailer, template):
    html = mailer.render_template(
        template,
        certificate={"userName": "Juan", "referenceNumber": "CERT-2025-0526-001"},
        appointment={"userName": "Juan", "referenceNumber": "APT-2025-0526-001", "date": "2025-06-01"},
        blotter={"reportedBy": "Juan", "referenceNumber": "BLT-2025-0526-001"},
        announcement={"title": "Water Interruption", "description": "Saturday"},
        event={"name": "Fiesta", "date": "2025-05-15"},
        resident={"fullName": "Juan Dela Cruz"},
        status="pending",
    )

    assert "<html" in html.lower()


def test_rejection_email_includes_reason(mailer):
    html = mailer.render_template(
        "certificate_rejected.html",
        certificate={"userName": "Juan", "rejectedReason": "ID <expired>"},
    )

    assert "ID &lt;expired&gt;" in html


@pytest.mark.asyncio
async def test_mock_mode_sends_without_sendgrid(mailer):
    sent = await mailer.send_certificate_status_email(
        "juan@example.com", "ready", {"userName": "Juan", "referenceNumber": "CERT-2025-0526-001"},
    )

    assert sent is True


@pytest.mark.asyncio
async def test_unknown_certificate_status_is_not_sent(mailer):
    assert await mailer.send_certificate_status_email("juan@example.com", "archived", {}) is False


@pytest.mark.asyncio
async def test_bulk_email_counts_recipients(mailer):
    result = await mailer.send_announcement_created_email(
        [{"email": "a@example.com", "name": "A"}, {"email": "b@example.com", "name": "B"}],
        {"title": "Clean-up Drive", "description": "Sunday 6AM"},
    )

    assert result == {"success_count": 2, "failure_count": 0, "total_recipients": 2}
