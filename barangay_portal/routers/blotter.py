from fastapi import APIRouter, Depends, Query
from typing import Optional
from pydantic import BaseModel, Field
import logging

from ..services.blotter_service import blotter_service
from ..auth.dependencies import get_current_user, require_staff_or_admin
from .result_mapping import unwrap

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/blotter", tags=["blotter"])


class CreateBlotterRequest(BaseModel):
    type: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    reportedBy: str = Field(..., min_length=1)
    contactNumber: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    priority: str = Field(..., description="low, medium, high, urgent")
    location: Optional[str] = None
    incidentDate: Optional[str] = None


class BlotterStatusRequest(BaseModel):
    status: str
    notes: Optional[str] = None


class BlotterPriorityRequest(BaseModel):
    priority: str


@router.post("/")
async def create_blotter_entry(request: CreateBlotterRequest, current_user: dict = Depends(get_current_user)):
    data = request.model_dump(exclude_none=True)
    data["userId"] = current_user.get("uid")
    return unwrap(await blotter_service.create_blotter_entry(data))


@router.get("/")
async def get_blotter(
    status: Optional[str] = Query(None),
    q: Optional[str] = Query(None, description="Free-text search"),
    current_user: dict = Depends(require_staff_or_admin),
):
    if q:
        return unwrap(await blotter_service.search_blotter(q))
    if status:
        return unwrap(await blotter_service.get_blotter_by_status(status))
    return unwrap(await blotter_service.get_all_blotter())


@router.get("/mine")
async def get_my_blotter(current_user: dict = Depends(get_current_user)):
    return unwrap(await blotter_service.get_blotter_by_user(current_user.get("uid")))


@router.get("/counts")
async def get_blotter_counts(current_user: dict = Depends(require_staff_or_admin)):
    return unwrap(await blotter_service.get_blotter_count())


@router.get("/{entry_id}")
async def get_blotter_entry(entry_id: str, current_user: dict = Depends(require_staff_or_admin)):
    return unwrap(await blotter_service.get_blotter_entry(entry_id))


@router.put("/{entry_id}/status")
async def update_blotter_status(
    entry_id: str, request: BlotterStatusRequest, current_user: dict = Depends(require_staff_or_admin)
):
    return unwrap(await blotter_service.update_blotter_status(entry_id, request.status, request.notes))


@router.put("/{entry_id}/priority")
async def update_blotter_priority(
    entry_id: str, request: BlotterPriorityRequest, current_user: dict = Depends(require_staff_or_admin)
):
    return unwrap(await blotter_service.update_blotter_priority(entry_id, request.priority))


@router.delete("/{entry_id}")
async def delete_blotter_entry(entry_id: str, current_user: dict = Depends(require_staff_or_admin)):
    return unwrap(await blotter_service.delete_blotter_entry(entry_id, archived_by=current_user.get("uid")))
