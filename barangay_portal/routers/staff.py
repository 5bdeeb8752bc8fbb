from fastapi import APIRouter, Depends
from typing import Dict, Optional
from pydantic import BaseModel, Field
import logging

from ..services.staff_service import staff_service
from ..auth.dependencies import require_admin
from .result_mapping import unwrap

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/staff", tags=["staff"])


class CreateStaffRequest(BaseModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=6)
    firstName: str = Field(..., min_length=1)
    lastName: str = Field(..., min_length=1)
    role: str = Field(..., description="official or admin")
    phoneNumber: Optional[str] = None
    address: Optional[str] = None
    position: Optional[str] = None
    department: Optional[str] = None
    employeeId: Optional[str] = None
    permissions: Optional[Dict[str, bool]] = None


class UpdateStaffRequest(BaseModel):
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    phoneNumber: Optional[str] = None
    address: Optional[str] = None
    position: Optional[str] = None
    department: Optional[str] = None
    employeeId: Optional[str] = None
    status: Optional[str] = None
    permissions: Optional[Dict[str, bool]] = None


class StaffStatusRequest(BaseModel):
    status: str


@router.get("/")
async def get_staff(current_user: dict = Depends(require_admin)):
    return unwrap(await staff_service.get_all_staff())


@router.get("/{uid}")
async def get_staff_member(uid: str, current_user: dict = Depends(require_admin)):
    return unwrap(await staff_service.get_staff_member(uid))


@router.post("/")
async def create_staff_member(request: CreateStaffRequest, current_user: dict = Depends(require_admin)):
    data = request.model_dump(exclude={"email", "password"}, exclude_none=True)
    return unwrap(await staff_service.create_staff_member(request.email, request.password, data))


@router.patch("/{uid}")
async def update_staff_member(uid: str, request: UpdateStaffRequest, current_user: dict = Depends(require_admin)):
    return unwrap(await staff_service.update_staff_member(uid, request.model_dump(exclude_none=True)))


@router.put("/{uid}/status")
async def toggle_staff_status(uid: str, request: StaffStatusRequest, current_user: dict = Depends(require_admin)):
    return unwrap(await staff_service.toggle_staff_status(uid, request.status))


@router.put("/{uid}/permissions")
async def update_staff_permissions(uid: str, permissions: Dict[str, bool], current_user: dict = Depends(require_admin)):
    return unwrap(await staff_service.update_staff_permissions(uid, permissions))


@router.delete("/{uid}")
async def delete_staff_member(uid: str, current_user: dict = Depends(require_admin)):
    logger.info(f"Staff member {uid} deleted by {current_user.get('uid')}")
    return unwrap(await staff_service.delete_staff_member(uid, archived_by=current_user.get("uid")))
