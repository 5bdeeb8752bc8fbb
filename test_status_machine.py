import pytest

from barangay_portal.core.exceptions import ValidationError
from barangay_portal.services.status_machine import (
    APPOINTMENT_MACHINE,
    BLOTTER_MACHINE,
    CERTIFICATE_MACHINE,
    VERIFICATION_MACHINE,
)


def test_certificate_happy_path_is_allowed():
    CERTIFICATE_MACHINE.check("pending", "processing")
    CERTIFICATE_MACHINE.check("processing", "ready")
    CERTIFICATE_MACHINE.check("ready", "completed")
    CERTIFICATE_MACHINE.check("additionalInfo", "processing")


def test_skipping_states_is_rejected_when_enforced():
    with pytest.raises(ValidationError):
        CERTIFICATE_MACHINE.check("pending", "completed", enforce=True)


def test_any_in_domain_status_is_accepted_when_not_enforced():
    CERTIFICATE_MACHINE.check("completed", "pending", enforce=False)
    BLOTTER_MACHINE.check("closed", "investigating", enforce=False)


def test_unknown_status_is_rejected_even_without_enforcement():
    with pytest.raises(ValidationError):
        CERTIFICATE_MACHINE.check("pending", "approved", enforce=False)


def test_enforcement_defaults_to_settings(monkeypatch):
    from barangay_portal.core.config import settings

    monkeypatch.setattr(settings, "ENFORCE_STATUS_TRANSITIONS", False)
    APPOINTMENT_MACHINE.check("completed", "pending")

    monkeypatch.setattr(settings, "ENFORCE_STATUS_TRANSITIONS", True)
    with pytest.raises(ValidationError):
        APPOINTMENT_MACHINE.check("completed", "pending")


def test_rejection_requires_reason():
    with pytest.raises(ValidationError, match="rejectedReason"):
        CERTIFICATE_MACHINE.check("pending", "rejected", {"rejectedReason": "  "})
    CERTIFICATE_MACHINE.check("pending", "rejected", {"rejectedReason": "Missing ID"})


def test_additional_info_requires_notes():
    with pytest.raises(ValidationError, match="notes"):
        CERTIFICATE_MACHINE.check("processing", "additionalInfo", {})


def test_terminal_states():
    assert CERTIFICATE_MACHINE.is_terminal("completed")
    assert CERTIFICATE_MACHINE.is_terminal("rejected")
    assert not CERTIFICATE_MACHINE.is_terminal("ready")
    assert APPOINTMENT_MACHINE.is_terminal("cancelled")
    assert BLOTTER_MACHINE.is_terminal("closed")


def test_verification_is_one_way():
    VERIFICATION_MACHINE.check("pending", "verified")
    with pytest.raises(ValidationError):
        VERIFICATION_MACHINE.check("verified", "rejected", enforce=True)


def test_additional_info_returns_to_pending_or_processing():
    CERTIFICATE_MACHINE.check("additionalInfo", "pending", enforce=True)
    CERTIFICATE_MACHINE.check("additionalInfo", "processing", enforce=True)

    with pytest.raises(ValidationError):
        CERTIFICATE_MACHINE.check("additionalInfo", "ready", enforce=True)
