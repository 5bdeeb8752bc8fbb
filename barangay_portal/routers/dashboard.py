from fastapi import APIRouter, Depends
import logging

from ..services.dashboard_service import dashboard_service
from ..auth.dependencies import require_staff_or_admin
from .result_mapping import unwrap

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats")
async def get_dashboard_stats(current_user: dict = Depends(require_staff_or_admin)):
    return unwrap(await dashboard_service.get_dashboard_stats())
