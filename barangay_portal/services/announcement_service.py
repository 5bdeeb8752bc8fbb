from typing import Any, Dict, Optional
import logging

from ..models.database_models import Announcement, AnnouncementStatus
from ..core.clock import now_ms, today_iso
from ..core.exceptions import StoreError, ValidationError, ok
from .best_effort import run_best_effort
from .email_service import email_service
from .notification_service import notification_service
from .record_service import RecordService, operation, resident_recipients
from .reference_number_service import reference_number_service
from .status_machine import ANNOUNCEMENT_MACHINE

logger = logging.getLogger(__name__)

CATEGORIES = {"Event", "Notice", "Important", "Emergency"}
VISIBILITIES = {"public", "residents"}


class AnnouncementService(RecordService):
    """Service for managing announcements and broadcasting them to residents"""

    collection = "announcements"
    model = Announcement
    label = "Announcement"

    def __init__(self, db=None, archive=None, reference_numbers=None, notifier=None, email=None):
        super().__init__(db=db, archive=archive)
        self.reference_numbers = reference_numbers or reference_number_service
        self.notifier = notifier or notification_service
        self.email = email or email_service

    @staticmethod
    def _check_choices(data: Dict[str, Any]) -> None:
        if "category" in data and data["category"] not in CATEGORIES:
            raise ValidationError(f"Invalid category: {data['category']}")
        if "visibility" in data and data["visibility"] not in VISIBILITIES:
            raise ValidationError(f"Invalid visibility: {data['visibility']}")

    async def _email_residents(self, announcement: Dict[str, Any]) -> Dict[str, Any]:
        recipients = await resident_recipients(self.db)
        if not recipients:
            logger.info("No resident emails on file, skipping announcement email")
            return {"success_count": 0, "failure_count": 0}
        return await self.email.send_announcement_created_email(recipients, announcement)

    @operation("Failed to create announcement. Please try again.")
    async def create_announcement(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a draft announcement, then notify residents.

        The push and the bulk email run after the record is stored. If some
        emails fail the announcement still counts as created.
        """
        self._require_fields(data, "All required fields must be filled out.")
        self._check_choices(data)

        reference_number = await self.reference_numbers.generate(self.collection)
        timestamp = now_ms()
        record = {
            **self._writable(data),
            "referenceNumber": reference_number,
            "status": AnnouncementStatus.DRAFT.value,
            "publishedOn": today_iso(),
            "createdAt": timestamp,
            "updatedAt": timestamp,
        }
        announcement_id = await self._insert(record)

        await run_best_effort(
            "announcement push",
            self.notifier.notify_announcement, record["title"], record["description"], announcement_id,
        )
        await run_best_effort("announcement email", self._email_residents, record)

        return ok(announcementId=announcement_id, referenceNumber=reference_number)

    @operation("Failed to fetch announcements. Please try again.")
    async def get_all_announcements(self) -> Dict[str, Any]:
        return ok(announcements=await self._fetch_all())

    @operation("Failed to fetch announcement. Please try again.")
    async def get_announcement(self, announcement_id: str) -> Dict[str, Any]:
        return ok(announcement=await self._fetch(announcement_id))

    @operation("Failed to fetch announcements. Please try again.")
    async def get_public_announcements(self) -> Dict[str, Any]:
        announcements = [
            item for item in await self._fetch_all()
            if item.get("status") == AnnouncementStatus.PUBLISHED.value and item.get("visibility") == "public"
        ]
        announcements.sort(key=lambda item: item.get("publishedOn") or "", reverse=True)
        return ok(announcements=announcements)

    @operation("Failed to fetch announcements. Please try again.")
    async def get_announcements_by_category(self, category: str) -> Dict[str, Any]:
        if category not in CATEGORIES:
            raise ValidationError(f"Invalid category: {category}")
        return ok(announcements=await self._query("category", category))

    @operation("Failed to update announcement. Please try again.")
    async def update_announcement(self, announcement_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        await self._fetch_raw(announcement_id)
        values = self._writable(data)
        values.pop("publishedOn", None)
        if not values:
            raise ValidationError("No fields to update.")
        self._check_choices(values)
        await self._patch(announcement_id, values)
        return ok()

    async def _move(self, announcement_id: str, target: str, extra: Optional[Dict[str, Any]] = None) -> None:
        announcement = await self._fetch(announcement_id)
        ANNOUNCEMENT_MACHINE.check(announcement.get("status", AnnouncementStatus.DRAFT.value), target)
        await self._patch(announcement_id, {"status": target, **(extra or {})})
        logger.info(f"Announcement {announcement_id} status {announcement.get('status')} -> {target}")

    @operation("Failed to publish announcement. Please try again.")
    async def publish_announcement(self, announcement_id: str) -> Dict[str, Any]:
        await self._move(announcement_id, AnnouncementStatus.PUBLISHED.value, {"publishedOn": today_iso()})
        return ok()

    @operation("Failed to unpublish announcement. Please try again.")
    async def unpublish_announcement(self, announcement_id: str) -> Dict[str, Any]:
        # publishedOn is kept
        await self._move(announcement_id, AnnouncementStatus.DRAFT.value)
        return ok()

    @operation("Failed to expire announcements. Please try again.")
    async def expire_announcements(self, today: Optional[str] = None) -> Dict[str, Any]:
        """Move published announcements whose expiresOn is before `today` to expired, in one write."""
        cutoff = today or today_iso()
        timestamp = now_ms()
        updates: Dict[str, Any] = {}
        for item in await self._fetch_all():
            expires_on = item.get("expiresOn")
            if item.get("status") == AnnouncementStatus.PUBLISHED.value and expires_on and expires_on < cutoff:
                updates[f"{self._path(item['id'])}/status"] = AnnouncementStatus.EXPIRED.value
                updates[f"{self._path(item['id'])}/updatedAt"] = timestamp

        if updates:
            success, error = await self.db.multi_path_update(updates)
            if not success:
                raise StoreError(f"Failed to expire announcements: {error}")

        expired = len(updates) // 2
        logger.info(f"Expired {expired} announcement(s) before {cutoff}")
        return ok(expired=expired)

    @operation("Failed to delete announcement. Please try again.")
    async def delete_announcement(self, announcement_id: str, archived_by: Optional[str] = None) -> Dict[str, Any]:
        await self._archive(announcement_id, archived_by)
        return ok()

    def _preview(self, record_id: str, raw: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "referenceNumber": raw.get("referenceNumber"),
            "title": raw.get("title"),
            "category": raw.get("category"),
            "status": raw.get("status"),
        }


announcement_service = AnnouncementService()
