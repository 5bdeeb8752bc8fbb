from fastapi import APIRouter, Depends, Query
from typing import Optional
import logging

from ..services.archive_service import archive_service
from ..auth.dependencies import require_admin, require_staff_or_admin
from .result_mapping import unwrap

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/archives", tags=["archives"])


@router.get("/")
async def get_archived_items(
    entity: Optional[str] = Query(None, description="Limit to one entity, e.g. certificates"),
    current_user: dict = Depends(require_staff_or_admin),
):
    return unwrap(await archive_service.get_archived_items_action(entity))


@router.post("/{entity}/{record_id}/restore")
async def restore_archived_item(entity: str, record_id: str, current_user: dict = Depends(require_staff_or_admin)):
    return unwrap(await archive_service.restore_archived_item_action(entity, record_id))


@router.delete("/{entity}/{record_id}")
async def delete_archived_item(entity: str, record_id: str, current_user: dict = Depends(require_admin)):
    logger.info(f"Permanent delete of {entity}/{record_id} requested by {current_user.get('uid')}")
    return unwrap(await archive_service.delete_archived_item_action(entity, record_id))
