from fastapi import APIRouter, Depends, Query
from typing import Optional
from pydantic import BaseModel, Field
import logging

from ..services.announcement_service import announcement_service
from ..auth.dependencies import require_staff_or_admin
from .result_mapping import unwrap

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/announcements", tags=["announcements"])


class CreateAnnouncementRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    category: str = Field(..., description="Event, Notice, Important, Emergency")
    visibility: str = Field(default="public", description="public, residents")
    author: str = Field(..., min_length=1)
    expiresOn: str = Field(..., description="YYYY-MM-DD")
    image: Optional[str] = None


class UpdateAnnouncementRequest(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    category: Optional[str] = None
    visibility: Optional[str] = None
    author: Optional[str] = None
    expiresOn: Optional[str] = None
    image: Optional[str] = None


class ExpireRequest(BaseModel):
    today: Optional[str] = Field(None, description="YYYY-MM-DD, defaults to the current local date")


@router.post("/")
async def create_announcement(request: CreateAnnouncementRequest, current_user: dict = Depends(require_staff_or_admin)):
    return unwrap(await announcement_service.create_announcement(request.model_dump(exclude_none=True)))


@router.get("/")
async def get_announcements(
    category: Optional[str] = Query(None), current_user: dict = Depends(require_staff_or_admin)
):
    if category:
        return unwrap(await announcement_service.get_announcements_by_category(category))
    return unwrap(await announcement_service.get_all_announcements())


@router.get("/public")
async def get_public_announcements():
    return unwrap(await announcement_service.get_public_announcements())


@router.post("/expire")
async def expire_announcements(request: ExpireRequest, current_user: dict = Depends(require_staff_or_admin)):
    return unwrap(await announcement_service.expire_announcements(request.today))


@router.get("/{announcement_id}")
async def get_announcement(announcement_id: str):
    return unwrap(await announcement_service.get_announcement(announcement_id))


@router.patch("/{announcement_id}")
async def update_announcement(
    announcement_id: str, request: UpdateAnnouncementRequest, current_user: dict = Depends(require_staff_or_admin)
):
    return unwrap(await announcement_service.update_announcement(
        announcement_id, request.model_dump(exclude_none=True)
    ))


@router.post("/{announcement_id}/publish")
async def publish_announcement(announcement_id: str, current_user: dict = Depends(require_staff_or_admin)):
    return unwrap(await announcement_service.publish_announcement(announcement_id))


@router.post("/{announcement_id}/unpublish")
async def unpublish_announcement(announcement_id: str, current_user: dict = Depends(require_staff_or_admin)):
    return unwrap(await announcement_service.unpublish_announcement(announcement_id))


@router.delete("/{announcement_id}")
async def delete_announcement(announcement_id: str, current_user: dict = Depends(require_staff_or_admin)):
    return unwrap(await announcement_service.delete_announcement(announcement_id, archived_by=current_user.get("uid")))
