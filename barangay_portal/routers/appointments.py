from fastapi import APIRouter, Depends, Query
from typing import Optional
from pydantic import BaseModel, Field
import logging

from ..services.appointment_service import appointment_service
from ..auth.dependencies import ensure_owner, get_current_user, is_staff, require_staff_or_admin
from .result_mapping import unwrap

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["appointments"])


class CreateAppointmentRequest(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    date: str = Field(..., description="YYYY-MM-DD")
    time: str = Field(..., description="HH:MM")
    requestedBy: str = Field(..., min_length=1)
    contactNumber: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)


class AppointmentStatusRequest(BaseModel):
    status: str
    notes: Optional[str] = None


class RescheduleRequest(BaseModel):
    date: str
    time: str


@router.post("/")
async def create_appointment(request: CreateAppointmentRequest, current_user: dict = Depends(get_current_user)):
    data = request.model_dump()
    data["userId"] = current_user.get("uid")
    return unwrap(await appointment_service.create_appointment(data))


@router.get("/")
async def get_appointments(status: Optional[str] = Query(None), current_user: dict = Depends(require_staff_or_admin)):
    if status:
        return unwrap(await appointment_service.get_appointments_by_status(status))
    return unwrap(await appointment_service.get_all_appointments())


@router.get("/mine")
async def get_my_appointments(current_user: dict = Depends(get_current_user)):
    return unwrap(await appointment_service.get_appointments_by_user(current_user.get("uid")))


@router.get("/recent")
async def get_recent_appointments(
    limit: int = Query(10, ge=1, le=100), current_user: dict = Depends(require_staff_or_admin)
):
    return unwrap(await appointment_service.get_recent_appointments(limit))


@router.get("/counts")
async def get_appointment_counts(current_user: dict = Depends(require_staff_or_admin)):
    return unwrap(await appointment_service.get_appointments_count())


@router.get("/{appointment_id}")
async def get_appointment(appointment_id: str, current_user: dict = Depends(get_current_user)):
    result = unwrap(await appointment_service.get_appointment(appointment_id))
    ensure_owner(result["appointment"], current_user, "Appointment not found.")
    return result


@router.put("/{appointment_id}/status")
async def update_appointment_status(
    appointment_id: str, request: AppointmentStatusRequest, current_user: dict = Depends(require_staff_or_admin)
):
    return unwrap(await appointment_service.update_appointment_status(appointment_id, request.status, request.notes))


@router.put("/{appointment_id}/schedule")
async def reschedule_appointment(
    appointment_id: str, request: RescheduleRequest, current_user: dict = Depends(get_current_user)
):
    if not is_staff(current_user):
        existing = unwrap(await appointment_service.get_appointment(appointment_id))
        ensure_owner(existing["appointment"], current_user, "Appointment not found.")
    return unwrap(await appointment_service.reschedule_appointment(appointment_id, request.date, request.time))


@router.delete("/{appointment_id}")
async def delete_appointment(appointment_id: str, current_user: dict = Depends(require_staff_or_admin)):
    return unwrap(await appointment_service.delete_appointment(appointment_id, archived_by=current_user.get("uid")))
