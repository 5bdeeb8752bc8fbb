from fastapi import APIRouter, Depends
import logging

from ..models.database_models import (
    AllSettings,
    BarangaySettings,
    CertificateSettings,
    NotificationSettings,
    OfficeHours,
    UserRoleSettings,
)
from ..services.settings_service import settings_service
from ..auth.dependencies import require_admin, require_staff_or_admin
from .result_mapping import unwrap

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("/")
async def get_settings(current_user: dict = Depends(require_staff_or_admin)):
    return unwrap(await settings_service.get_settings())


@router.put("/barangay")
async def update_barangay_info(request: BarangaySettings, current_user: dict = Depends(require_admin)):
    return unwrap(await settings_service.update_barangay_info(request))


@router.put("/office-hours")
async def update_office_hours(request: OfficeHours, current_user: dict = Depends(require_admin)):
    return unwrap(await settings_service.update_office_hours(request))


@router.put("/notifications")
async def update_notification_settings(request: NotificationSettings, current_user: dict = Depends(require_admin)):
    return unwrap(await settings_service.update_notification_settings(request))


@router.put("/user-roles")
async def update_user_role_settings(request: UserRoleSettings, current_user: dict = Depends(require_admin)):
    return unwrap(await settings_service.update_user_role_settings(request))


@router.put("/certificates")
async def update_certificate_settings(request: CertificateSettings, current_user: dict = Depends(require_admin)):
    return unwrap(await settings_service.update_certificate_settings(request))


@router.put("/")
async def update_all_settings(request: AllSettings, current_user: dict = Depends(require_admin)):
    return unwrap(await settings_service.update_all_settings(request))


@router.post("/initialize")
async def initialize_default_settings(current_user: dict = Depends(require_admin)):
    return unwrap(await settings_service.initialize_default_settings())
