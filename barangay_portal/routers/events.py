from fastapi import APIRouter, Depends, Query
from typing import Optional
from pydantic import BaseModel, Field
import logging

from ..services.event_service import event_service
from ..auth.dependencies import require_staff_or_admin
from .result_mapping import unwrap

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["events"])


class CreateEventRequest(BaseModel):
    name: str = Field(..., min_length=1)
    date: str
    time: str
    location: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    category: str = Field(default="community")
    organizer: str = Field(..., min_length=1)
    contact: str = Field(..., min_length=1)
    image: Optional[str] = None
    featured: bool = False


class UpdateEventRequest(BaseModel):
    name: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    location: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    organizer: Optional[str] = None
    contact: Optional[str] = None
    image: Optional[str] = None


@router.post("/")
async def create_event(request: CreateEventRequest, current_user: dict = Depends(require_staff_or_admin)):
    return unwrap(await event_service.create_event(request.model_dump(exclude_none=True)))


@router.get("/")
async def get_events(category: Optional[str] = Query(None), status: Optional[str] = Query(None)):
    if category:
        return unwrap(await event_service.get_events_by_category(category))
    if status:
        return unwrap(await event_service.get_events_by_status(status))
    return unwrap(await event_service.get_all_events())


@router.get("/featured")
async def get_featured_events():
    return unwrap(await event_service.get_featured_events())


@router.get("/counts")
async def get_event_counts(current_user: dict = Depends(require_staff_or_admin)):
    return unwrap(await event_service.get_events_count())


@router.get("/{event_id}")
async def get_event(event_id: str):
    return unwrap(await event_service.get_event(event_id))


@router.patch("/{event_id}")
async def update_event(event_id: str, request: UpdateEventRequest, current_user: dict = Depends(require_staff_or_admin)):
    return unwrap(await event_service.update_event(event_id, request.model_dump(exclude_none=True)))


@router.post("/{event_id}/toggle-status")
async def toggle_event_status(event_id: str, current_user: dict = Depends(require_staff_or_admin)):
    return unwrap(await event_service.toggle_event_status(event_id))


@router.post("/{event_id}/toggle-featured")
async def toggle_featured_status(event_id: str, current_user: dict = Depends(require_staff_or_admin)):
    return unwrap(await event_service.toggle_featured_status(event_id))


@router.delete("/{event_id}")
async def delete_event(event_id: str, current_user: dict = Depends(require_staff_or_admin)):
    return unwrap(await event_service.delete_event(event_id, archived_by=current_user.get("uid")))
