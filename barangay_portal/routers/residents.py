from fastapi import APIRouter, Depends, Query
from typing import Optional
from pydantic import BaseModel
import logging

from ..services.resident_service import resident_service
from ..auth.dependencies import require_staff_or_admin
from .result_mapping import unwrap

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/residents", tags=["residents"])


class VerificationRequest(BaseModel):
    status: str
    notes: Optional[str] = None


class ResidentStatusRequest(BaseModel):
    status: str


@router.get("/")
async def get_residents(
    q: Optional[str] = Query(None, description="Name, email, phone or address"),
    verification: Optional[str] = Query(None, description="pending, verified, rejected or all"),
    current_user: dict = Depends(require_staff_or_admin),
):
    if q or verification:
        return unwrap(await resident_service.search_residents(q or "", verification))
    return unwrap(await resident_service.get_residents())


@router.get("/{uid}")
async def get_resident(uid: str, current_user: dict = Depends(require_staff_or_admin)):
    return unwrap(await resident_service.get_resident_details(uid))


@router.put("/{uid}/verification")
async def update_verification(uid: str, request: VerificationRequest, current_user: dict = Depends(require_staff_or_admin)):
    return unwrap(await resident_service.update_resident_verification(
        uid, request.status, notes=request.notes, reviewer_id=current_user.get("uid"),
    ))


@router.put("/{uid}/status")
async def update_resident_status(uid: str, request: ResidentStatusRequest, current_user: dict = Depends(require_staff_or_admin)):
    return unwrap(await resident_service.update_resident_status(uid, request.status))


@router.delete("/{uid}")
async def delete_resident(uid: str, current_user: dict = Depends(require_staff_or_admin)):
    return unwrap(await resident_service.delete_resident(uid, archived_by=current_user.get("uid")))
