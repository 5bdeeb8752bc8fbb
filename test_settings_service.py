import pytest

from barangay_portal.models.database_models import NotificationSettings, OfficeHours
from barangay_portal.services.settings_service import DEFAULT_SETTINGS, SettingsService
from conftest import FakeRealtimeDB

pytestmark = pytest.mark.asyncio


async def test_empty_database_returns_defaults():
    service = SettingsService(db=FakeRealtimeDB())

    assert await service.get_settings() == {"success": True, "settings": DEFAULT_SETTINGS}


async def test_missing_sections_are_filled_from_defaults():
    db = FakeRealtimeDB({"settings": {"barangay": {"barangayName": "Barangay Uno"}}})

    result = (await SettingsService(db=db).get_settings())["settings"]

    assert result["barangay"] == {"barangayName": "Barangay Uno"}
    assert result["officeHours"] == DEFAULT_SETTINGS["officeHours"]


async def test_defaults_are_not_shared_between_calls():
    service = SettingsService(db=FakeRealtimeDB())

    first = (await service.get_settings())["settings"]
    first["barangay"]["barangayName"] = "Changed"

    second = (await service.get_settings())["settings"]
    assert second["barangay"]["barangayName"] == DEFAULT_SETTINGS["barangay"]["barangayName"]


async def test_notification_update_keeps_stored_sms_flag():
    db = FakeRealtimeDB({"settings": {"notifications": {"smsNotifications": True}}})
    service = SettingsService(db=db)

    result = await service.update_notification_settings(
        NotificationSettings(emailNotifications=False, smsNotifications=False, systemNotifications=False)
    )

    assert result == {"success": True, "message": "Notification settings updated successfully"}
    assert db.read("settings/notifications") == {
        "emailNotifications": False,
        "smsNotifications": True,
        "systemNotifications": False,
    }


async def test_system_notifications_flag():
    db = FakeRealtimeDB()
    service = SettingsService(db=db)
    assert await service.system_notifications_enabled() is True

    db.write("settings/notifications/systemNotifications", False)
    assert await service.system_notifications_enabled() is False


async def test_initialize_does_not_overwrite_existing_settings():
    db = FakeRealtimeDB()
    service = SettingsService(db=db)

    assert (await service.initialize_default_settings())["message"] == "Default settings initialized"
    await service.update_office_hours(OfficeHours(
        weekdays={"start": "7", "end": "16"}, weekends={"start": "8", "end": "11"},
    ))

    assert (await service.initialize_default_settings())["message"] == "Settings already exist"
    assert db.read("settings/officeHours/weekdays/start") == "7"


async def test_read_failure_is_reported_not_raised():
    db = FakeRealtimeDB()
    db.fail_reads.add("settings")
    service = SettingsService(db=db)

    assert await service.get_settings() == {
        "success": False, "error": "Failed to fetch settings", "error_type": "store",
    }
    assert (await service.initialize_default_settings())["error_type"] == "store"


async def test_write_failure_is_reported_not_raised():
    class ReadOnlyDB(FakeRealtimeDB):
        async def set(self, path, value):
            return False, "permission denied"

    result = await SettingsService(db=ReadOnlyDB()).update_office_hours(OfficeHours(
        weekdays={"start": "7", "end": "16"}, weekends={"start": "8", "end": "11"},
    ))

    assert result == {"success": False, "error": "Failed to update office hours", "error_type": "store"}
