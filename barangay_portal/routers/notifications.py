from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
import logging

from ..models.notification_models import UserRole
from ..services.notification_service import notification_service
from ..auth.dependencies import get_current_user
from .result_mapping import unwrap

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])


class RegisterTokenRequest(BaseModel):
    token: str = Field(..., min_length=1)
    deviceType: str = Field(default="web", description="web, mobile")


@router.post("/token")
async def register_token(request: RegisterTokenRequest, current_user: dict = Depends(get_current_user)):
    """Register the caller's FCM token under their auth role."""
    role = current_user.get("role") or UserRole.RESIDENT.value
    if role not in {r.value for r in UserRole}:
        role = UserRole.RESIDENT.value
    return unwrap(await notification_service.store_token(
        current_user.get("uid"), request.token, UserRole(role), request.deviceType,
    ))


@router.delete("/token")
async def remove_token(current_user: dict = Depends(get_current_user)):
    return unwrap(await notification_service.remove_token(current_user.get("uid")))
