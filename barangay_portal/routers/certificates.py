from fastapi import APIRouter, Depends, File, Query, UploadFile
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field
import logging

from ..services.certificate_service import certificate_service
from ..auth.dependencies import ensure_owner, get_current_user, is_staff, require_staff_or_admin
from .result_mapping import unwrap

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/certificates", tags=["certificates"])


class CreateCertificateRequest(BaseModel):
    # Type-specific extras (age, address, businessName...) pass through
    model_config = ConfigDict(extra="allow")

    type: str = Field(..., min_length=1)
    requestedBy: str = Field(..., min_length=1)
    emailToNotify: str = Field(..., min_length=3)
    purpose: str = Field(..., min_length=1)
    estimatedCompletion: Optional[str] = None
    photoUrl: Optional[str] = None


class UpdateCertificateRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: Optional[str] = None
    requestedBy: Optional[str] = None
    emailToNotify: Optional[str] = None
    purpose: Optional[str] = None
    estimatedCompletion: Optional[str] = None
    notes: Optional[str] = None


class CertificateStatusRequest(BaseModel):
    status: str
    rejectedReason: Optional[str] = None
    notes: Optional[str] = None
    completedOn: Optional[str] = None


class MarkGeneratedRequest(BaseModel):
    pdfUrl: Optional[str] = None


@router.post("/")
async def create_certificate(request: CreateCertificateRequest, current_user: dict = Depends(get_current_user)):
    data = request.model_dump(exclude_none=True)
    if is_staff(current_user):
        data.setdefault("userId", current_user.get("uid"))
    else:
        data["userId"] = current_user.get("uid")
    return unwrap(await certificate_service.create_certificate(data))


@router.get("/")
async def get_certificates(
    status: Optional[str] = Query(None),
    q: Optional[str] = Query(None, description="Free-text search"),
    current_user: dict = Depends(require_staff_or_admin),
):
    if q:
        return unwrap(await certificate_service.search_certificates(q))
    if status:
        return unwrap(await certificate_service.get_certificates_by_status(status))
    return unwrap(await certificate_service.get_all_certificates())


@router.get("/mine")
async def get_my_certificates(current_user: dict = Depends(get_current_user)):
    return unwrap(await certificate_service.get_certificates_by_user(current_user.get("uid")))


@router.get("/counts")
async def get_certificate_counts(current_user: dict = Depends(require_staff_or_admin)):
    return unwrap(await certificate_service.get_certificates_count())


@router.get("/{certificate_id}")
async def get_certificate(certificate_id: str, current_user: dict = Depends(get_current_user)):
    result = unwrap(await certificate_service.get_certificate(certificate_id))
    ensure_owner(result["certificate"], current_user, "Certificate not found.")
    return result


@router.patch("/{certificate_id}")
async def update_certificate(
    certificate_id: str, request: UpdateCertificateRequest, current_user: dict = Depends(require_staff_or_admin)
):
    return unwrap(await certificate_service.update_certificate(certificate_id, request.model_dump(exclude_none=True)))


@router.put("/{certificate_id}/status")
async def update_certificate_status(
    certificate_id: str, request: CertificateStatusRequest, current_user: dict = Depends(require_staff_or_admin)
):
    return unwrap(await certificate_service.update_certificate_status(
        certificate_id,
        request.status,
        rejected_reason=request.rejectedReason,
        notes=request.notes,
        completed_on=request.completedOn,
    ))


@router.post("/{certificate_id}/signature")
async def upload_signature(
    certificate_id: str, file: UploadFile = File(...), current_user: dict = Depends(require_staff_or_admin)
):
    content = await file.read()
    return unwrap(await certificate_service.attach_signature(certificate_id, content, file.content_type or ""))


@router.post("/{certificate_id}/generated")
async def mark_generated(
    certificate_id: str, request: MarkGeneratedRequest, current_user: dict = Depends(require_staff_or_admin)
):
    return unwrap(await certificate_service.mark_generated(
        certificate_id, generated_by=current_user.get("name") or current_user.get("uid"), pdf_url=request.pdfUrl,
    ))


@router.delete("/{certificate_id}")
async def delete_certificate(certificate_id: str, current_user: dict = Depends(require_staff_or_admin)):
    return unwrap(await certificate_service.delete_certificate(certificate_id, archived_by=current_user.get("uid")))
