from typing import Any, Dict, Optional
import logging

from ..models.database_models import BlotterEntry, BlotterPriority, BlotterStatus
from ..core.clock import long_date, now_ms
from ..core.exceptions import ValidationError, ok
from .best_effort import run_best_effort
from .email_service import email_service
from .record_service import RecordService, matches_query, operation
from .reference_number_service import reference_number_service
from .status_machine import BLOTTER_MACHINE

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("type", "description", "reportedBy", "location", "referenceNumber", "id")
PRIORITIES = {priority.value for priority in BlotterPriority}


class BlotterService(RecordService):
    """
    Incident reports. Status changes only email the reporter; there is no
    push notification for blotter updates.
    """

    collection = "blotter"
    model = BlotterEntry
    label = "Blotter entry"

    def __init__(self, db=None, archive=None, reference_numbers=None, email=None):
        super().__init__(db=db, archive=archive)
        self.reference_numbers = reference_numbers or reference_number_service
        self.email = email or email_service

    @staticmethod
    def _check_priority(priority: str) -> None:
        if priority not in PRIORITIES:
            raise ValidationError(f"Invalid priority: {priority}")

    @operation("Failed to create blotter entry. Please check your connection and try again.")
    async def create_blotter_entry(self, data: Dict[str, Any]) -> Dict[str, Any]:
        self._require_fields(data, "All required fields must be filled out.")
        self._check_priority(data["priority"])

        reference_number = await self.reference_numbers.generate(self.collection)
        timestamp = now_ms()
        record = {
            **self._writable(data),
            "referenceNumber": reference_number,
            "status": BlotterStatus.PENDING.value,
            "date": long_date(),
            "createdAt": timestamp,
            "updatedAt": timestamp,
        }
        entry_id = await self._insert(record)
        return ok(entryId=entry_id, referenceNumber=reference_number)

    @operation("Failed to fetch blotter entries. Please try again.")
    async def get_all_blotter(self) -> Dict[str, Any]:
        return ok(entries=await self._fetch_all())

    @operation("Failed to fetch blotter entry. Please try again.")
    async def get_blotter_entry(self, entry_id: str) -> Dict[str, Any]:
        return ok(entry=await self._fetch(entry_id))

    @operation("Failed to fetch blotter entries by status. Please try again.")
    async def get_blotter_by_status(self, status: str) -> Dict[str, Any]:
        if status not in BLOTTER_MACHINE.statuses:
            raise ValidationError(f"Invalid blotter status: {status}")
        return ok(entries=await self._query("status", status))

    @operation("Failed to fetch your blotter reports. Please try again.")
    async def get_blotter_by_user(self, user_id: str) -> Dict[str, Any]:
        if not user_id:
            raise ValidationError("User ID is required.")
        return ok(entries=await self._query("userId", user_id))

    @operation("Failed to search blotter entries. Please try again.")
    async def search_blotter(self, query: str) -> Dict[str, Any]:
        entries = await self._fetch_all()
        if query and query.strip():
            entries = [entry for entry in entries if matches_query(entry, query, SEARCH_FIELDS)]
        return ok(entries=entries)

    @operation("Failed to update blotter status. Please try again.")
    async def update_blotter_status(self, entry_id: str, status: str, notes: Optional[str] = None) -> Dict[str, Any]:
        if not status:
            raise ValidationError("Status is required.")

        entry = await self._fetch(entry_id)
        BLOTTER_MACHINE.check(entry.get("status", BlotterStatus.PENDING.value), status)

        values: Dict[str, Any] = {"status": status}
        if notes:
            values["notes"] = notes
        await self._patch(entry_id, values)
        logger.info(f"Blotter {entry_id} status {entry.get('status')} -> {status}")

        updated = {**entry, **values}
        await run_best_effort(
            f"blotter {status} email",
            self.email.send_blotter_status_email,
            updated.get("email"), status,
            {
                "reportedBy": updated.get("reportedBy", ""),
                "referenceNumber": updated.get("referenceNumber", ""),
                "type": updated.get("type", ""),
                "notes": updated.get("notes"),
            },
        )
        return ok()

    @operation("Failed to update blotter priority. Please try again.")
    async def update_blotter_priority(self, entry_id: str, priority: str) -> Dict[str, Any]:
        self._check_priority(priority)
        await self._fetch_raw(entry_id)
        await self._patch(entry_id, {"priority": priority})
        return ok()

    @operation("Failed to delete blotter entry. Please try again.")
    async def delete_blotter_entry(self, entry_id: str, archived_by: Optional[str] = None) -> Dict[str, Any]:
        await self._archive(entry_id, archived_by)
        return ok()

    @operation("Failed to fetch blotter counts. Please try again.")
    async def get_blotter_count(self) -> Dict[str, Any]:
        entries = await self._fetch_all()
        counts = self._status_counts(entries, [status.value for status in BlotterStatus], BlotterStatus.PENDING.value)
        counts["urgent"] = sum(1 for entry in entries if entry.get("priority") == BlotterPriority.URGENT.value)
        return ok(counts=counts)

    def _preview(self, record_id: str, raw: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "referenceNumber": raw.get("referenceNumber"),
            "type": raw.get("type"),
            "reportedBy": raw.get("reportedBy"),
            "priority": raw.get("priority"),
            "status": raw.get("status"),
        }


blotter_service = BlotterService()
