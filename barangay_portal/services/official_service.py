from typing import Any, Dict, List, Optional
import logging

from ..models.database_models import Official, OfficialPosition
from ..core.clock import now_ms
from ..core.exceptions import ValidationError, ok
from .best_effort import run_best_effort
from .file_storage_service import file_storage_service
from .record_service import RecordService, matches_query, operation

logger = logging.getLogger(__name__)

POSITIONS = {position.value for position in OfficialPosition}
OFFICIAL_STATUSES = {"active", "inactive"}
LIST_FIELDS = ("committees", "projects", "achievements")


def split_list(value: Any) -> List[str]:
    """Accept a list or a comma-separated string; drop blank items."""
    if value is None:
        return []
    items = value if isinstance(value, (list, tuple)) else str(value).split(",")
    return [str(item).strip() for item in items if str(item).strip()]


class OfficialService(RecordService):
    """
    Barangay officials shown on the public site.

    Each official may carry a profile photo in object storage. Replacing the
    photo removes the old object; deleting an official archives the record and
    leaves the photo in place until the archive entry is purged.
    """

    collection = "officials"
    model = Official
    label = "Official"

    def __init__(self, db=None, archive=None, storage=None):
        super().__init__(db=db, archive=archive)
        self.storage = storage or file_storage_service

    @staticmethod
    def _clean(data: Dict[str, Any]) -> Dict[str, Any]:
        values = RecordService._writable(data)
        values.pop("photo", None)
        values.pop("photoPublicId", None)
        for field in LIST_FIELDS:
            if field in values:
                values[field] = split_list(values[field])
        if "position" in values and values["position"] not in POSITIONS:
            raise ValidationError(f"Invalid position: {values['position']}")
        if "status" in data and data["status"] is not None:
            if data["status"] not in OFFICIAL_STATUSES:
                raise ValidationError(f"Invalid official status: {data['status']}")
            values["status"] = data["status"]
        return values

    async def _upload_photo(self, content: bytes, content_type: str, official_id: Optional[str] = None) -> Dict[str, Any]:
        tags = ["official", "profile"] + ([official_id] if official_id else [])
        return await self.storage.upload(content, "officials", content_type=content_type, tags=tags)

    @operation("Failed to create official. Please try again.")
    async def create_official(
        self,
        data: Dict[str, Any],
        photo: Optional[bytes] = None,
        photo_content_type: str = "image/png",
    ) -> Dict[str, Any]:
        self._require_fields(data)
        record = {
            **{field: [] for field in LIST_FIELDS},
            "status": "active",
            **self._clean(data),
        }

        if photo:
            upload = await self._upload_photo(photo, photo_content_type)
            record["photo"] = upload["url"]
            record["photoPublicId"] = upload["public_id"]

        timestamp = now_ms()
        record["createdAt"] = timestamp
        record["updatedAt"] = timestamp
        official_id = await self._insert(record)
        return ok(officialId=official_id, official=Official.from_record(official_id, record))

    @operation("Failed to fetch officials. Please try again.")
    async def get_all_officials(self) -> Dict[str, Any]:
        return ok(officials=await self._fetch_all())

    @operation("Failed to fetch official. Please try again.")
    async def get_official(self, official_id: str) -> Dict[str, Any]:
        return ok(official=await self._fetch(official_id))

    @operation("Failed to search officials. Please try again.")
    async def search_officials(
        self, query: str = "", position_filter: str = "all", status_filter: str = "all"
    ) -> Dict[str, Any]:
        officials = await self._fetch_all()
        if query and query.strip():
            officials = [o for o in officials if matches_query(o, query, ("name", "email"))]
        if position_filter and position_filter != "all":
            officials = [o for o in officials if o.get("position") == position_filter]
        if status_filter and status_filter != "all":
            officials = [o for o in officials if o.get("status") == status_filter]
        return ok(officials=officials)

    @operation("Failed to update official. Please try again.")
    async def update_official(
        self,
        official_id: str,
        data: Dict[str, Any],
        photo: Optional[bytes] = None,
        photo_content_type: str = "image/png",
    ) -> Dict[str, Any]:
        current = await self._fetch_raw(official_id)
        values = self._clean(data)

        if photo:
            upload = await self._upload_photo(photo, photo_content_type, official_id)
            values["photo"] = upload["url"]
            values["photoPublicId"] = upload["public_id"]

        if not values:
            raise ValidationError("No fields to update.")
        values = await self._patch(official_id, values)

        old_public_id = current.get("photoPublicId")
        if photo and old_public_id:
            await run_best_effort(f"delete replaced photo {old_public_id}", self.storage.delete, old_public_id)

        return ok(official=Official.from_record(official_id, {**current, **values}))

    @operation("Failed to delete official. Please try again.")
    async def delete_official(self, official_id: str, archived_by: Optional[str] = None) -> Dict[str, Any]:
        await self._archive(official_id, archived_by)
        return ok()

    def _preview(self, record_id: str, raw: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "name": raw.get("name"),
            "position": raw.get("position"),
            "status": raw.get("status"),
            "photoPublicId": raw.get("photoPublicId") or None,
        }


official_service = OfficialService()
