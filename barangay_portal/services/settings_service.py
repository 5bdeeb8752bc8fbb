from typing import Any, Dict
import copy
import logging

from ..database.database_service import database_service
from ..database.collections import COLLECTIONS
from ..models.database_models import (
    AllSettings,
    BarangaySettings,
    CertificateSettings,
    NotificationSettings,
    OfficeHours,
    UserRoleSettings,
)
from ..core.exceptions import StoreError, ok
from .record_service import operation

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS: Dict[str, Any] = {
    "barangay": {
        "barangayName": "Barangay Malinta",
        "municipality": "Valenzuela City",
        "address": "123 Main Street, Valenzuela City, Metro Manila",
        "contact": "+63 (2) 8123 4567",
        "email": "malinta@valenzuela.gov.ph",
    },
    "officeHours": {
        "weekdays": {"start": "8", "end": "17"},
        "weekends": {"start": "9", "end": "12"},
    },
    "notifications": {
        "emailNotifications": True,
        "smsNotifications": False,
        "systemNotifications": True,
    },
    "userRoles": {
        "superAdmin": {
            "description": "Full access to all features and settings",
            "permissions": ["all"],
        },
        "staff": {
            "description": "Limited access to resident services",
            "permissions": ["residents", "certificates", "events"],
        },
        "resident": {
            "description": "Access to resident portal only",
            "permissions": ["profile", "requests", "certificates"],
        },
    },
    "certificateSettings": {
        "officialName": "HON. JESUS H. DE UNA JR.",
        "officialPosition": "Punong Barangay",
    },
}


def get_default_settings() -> Dict[str, Any]:
    return copy.deepcopy(DEFAULT_SETTINGS)


class SettingsService:
    """Process-wide configuration stored under settings/ in the database."""

    def __init__(self, db=None):
        self.db = db or database_service

    def _path(self, section: str = "") -> str:
        return f"{COLLECTIONS['settings']}/{section}" if section else COLLECTIONS['settings']

    async def _load(self) -> Dict[str, Any]:
        success, stored, error = await self.db.get(self._path())
        if not success:
            raise StoreError(f"Failed to read settings: {error}")

        if not stored:
            return get_default_settings()

        settings_data = dict(stored)
        # Older databases predate some sections
        for section, default in get_default_settings().items():
            settings_data.setdefault(section, default)
        return settings_data

    @operation("Failed to fetch settings")
    async def get_settings(self) -> Dict[str, Any]:
        return ok(settings=await self._load())

    async def system_notifications_enabled(self) -> bool:
        success, stored, error = await self.db.get(self._path("notifications"))
        if not success:
            logger.warning(f"Could not read notification settings, assuming enabled: {error}")
            return True
        if not stored:
            return True
        return bool(stored.get("systemNotifications", True))

    async def _write_section(self, section: str, data: Dict[str, Any], label: str) -> Dict[str, Any]:
        success, error = await self.db.set(self._path(section), data)
        if not success:
            raise StoreError(f"Failed to write settings/{section}: {error}")
        logger.info(f"Settings section '{section}' updated")
        return ok(message=f"{label[0].upper()}{label[1:]} updated successfully")

    @operation("Failed to update barangay information")
    async def update_barangay_info(self, data: BarangaySettings) -> Dict[str, Any]:
        return await self._write_section("barangay", data.model_dump(), "barangay information")

    @operation("Failed to update office hours")
    async def update_office_hours(self, data: OfficeHours) -> Dict[str, Any]:
        return await self._write_section("officeHours", data.model_dump(), "office hours")

    async def _stored_sms_flag(self) -> bool:
        # SMS delivery is not available yet; keep whatever is stored
        success, current, _ = await self.db.get(self._path("notifications"))
        return bool((current or {}).get("smsNotifications", False)) if success else False

    @operation("Failed to update notification settings")
    async def update_notification_settings(self, data: NotificationSettings) -> Dict[str, Any]:
        payload = data.model_dump()
        payload["smsNotifications"] = await self._stored_sms_flag()
        return await self._write_section("notifications", payload, "notification settings")

    @operation("Failed to update user role settings")
    async def update_user_role_settings(self, data: UserRoleSettings) -> Dict[str, Any]:
        return await self._write_section("userRoles", data.model_dump(), "user role settings")

    @operation("Failed to update certificate settings")
    async def update_certificate_settings(self, data: CertificateSettings) -> Dict[str, Any]:
        return await self._write_section(
            "certificateSettings", data.model_dump(exclude_none=True), "certificate settings"
        )

    @operation("Failed to update settings")
    async def update_all_settings(self, data: AllSettings) -> Dict[str, Any]:
        payload = data.model_dump(exclude_none=True)
        payload["notifications"]["smsNotifications"] = await self._stored_sms_flag()
        success, error = await self.db.set(self._path(), payload)
        if not success:
            raise StoreError(f"Failed to write settings: {error}")
        return ok(message="All settings updated successfully")

    @operation("Failed to initialize default settings")
    async def initialize_default_settings(self) -> Dict[str, Any]:
        success, stored, error = await self.db.get(self._path())
        if not success:
            raise StoreError(f"Failed to read settings: {error}")
        if stored:
            return ok(message="Settings already exist")

        success, error = await self.db.set(self._path(), get_default_settings())
        if not success:
            raise StoreError(f"Failed to write default settings: {error}")
        return ok(message="Default settings initialized")


settings_service = SettingsService()
