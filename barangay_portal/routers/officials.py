from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from typing import Optional
import logging

from ..services.official_service import official_service
from ..auth.dependencies import get_current_user, require_admin
from .result_mapping import unwrap

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/officials", tags=["officials"])


async def _photo(photo: Optional[UploadFile]):
    if photo is None:
        return None, "image/png"
    content = await photo.read()
    return (content or None), (photo.content_type or "")


def _form_data(**fields) -> dict:
    return {key: value for key, value in fields.items() if value is not None}


@router.get("/")
async def get_officials(
    q: Optional[str] = Query(None, description="Name or email"),
    position: str = Query("all"),
    status: str = Query("all"),
    current_user: dict = Depends(get_current_user),
):
    if q or position != "all" or status != "all":
        return unwrap(await official_service.search_officials(q or "", position, status))
    return unwrap(await official_service.get_all_officials())


@router.get("/{official_id}")
async def get_official(official_id: str, current_user: dict = Depends(get_current_user)):
    return unwrap(await official_service.get_official(official_id))


@router.post("/")
async def create_official(
    name: str = Form(...),
    position: str = Form(...),
    term: str = Form(...),
    birthday: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    officeHours: Optional[str] = Form(None),
    committees: Optional[str] = Form(None, description="Comma-separated"),
    biography: Optional[str] = Form(None),
    message: Optional[str] = Form(None),
    projects: Optional[str] = Form(None, description="Comma-separated"),
    achievements: Optional[str] = Form(None, description="Comma-separated"),
    status: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
    current_user: dict = Depends(require_admin),
):
    content, content_type = await _photo(photo)
    data = _form_data(
        name=name, position=position, term=term, birthday=birthday, email=email, phone=phone,
        officeHours=officeHours, committees=committees, biography=biography, message=message,
        projects=projects, achievements=achievements, status=status,
    )
    return unwrap(await official_service.create_official(data, photo=content, photo_content_type=content_type))


@router.put("/{official_id}")
async def update_official(
    official_id: str,
    name: Optional[str] = Form(None),
    position: Optional[str] = Form(None),
    term: Optional[str] = Form(None),
    birthday: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    phone: Optional[str] = Form(None),
    officeHours: Optional[str] = Form(None),
    committees: Optional[str] = Form(None),
    biography: Optional[str] = Form(None),
    message: Optional[str] = Form(None),
    projects: Optional[str] = Form(None),
    achievements: Optional[str] = Form(None),
    status: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
    current_user: dict = Depends(require_admin),
):
    content, content_type = await _photo(photo)
    data = _form_data(
        name=name, position=position, term=term, birthday=birthday, email=email, phone=phone,
        officeHours=officeHours, committees=committees, biography=biography, message=message,
        projects=projects, achievements=achievements, status=status,
    )
    return unwrap(await official_service.update_official(
        official_id, data, photo=content, photo_content_type=content_type,
    ))


@router.delete("/{official_id}")
async def delete_official(official_id: str, current_user: dict = Depends(require_admin)):
    return unwrap(await official_service.delete_official(official_id, archived_by=current_user.get("uid")))
