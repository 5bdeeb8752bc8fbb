from typing import Any, Dict, Optional
import logging

from ..models.database_models import Event, EventStatus
from ..core.clock import now_ms
from ..core.exceptions import ValidationError, ok
from .best_effort import run_best_effort
from .email_service import email_service
from .notification_service import notification_service
from .record_service import RecordService, operation, resident_recipients
from .reference_number_service import reference_number_service
from .status_machine import EVENT_MACHINE

logger = logging.getLogger(__name__)

CATEGORIES = {"community", "health", "education", "sports", "culture", "government"}


class EventService(RecordService):
    collection = "events"
    model = Event
    label = "Event"

    def __init__(self, db=None, archive=None, reference_numbers=None, notifier=None, email=None):
        super().__init__(db=db, archive=archive)
        self.reference_numbers = reference_numbers or reference_number_service
        self.notifier = notifier or notification_service
        self.email = email or email_service

    async def _email_residents(self, event: Dict[str, Any]) -> Dict[str, Any]:
        recipients = await resident_recipients(self.db)
        if not recipients:
            logger.info("No resident emails on file, skipping event email")
            return {"success_count": 0, "failure_count": 0}
        return await self.email.send_event_created_email(recipients, event)

    @operation("Failed to create event. Please try again.")
    async def create_event(self, data: Dict[str, Any]) -> Dict[str, Any]:
        self._require_fields(data, "All required fields must be filled out.")
        category = data.get("category") or "community"
        if category not in CATEGORIES:
            raise ValidationError(f"Invalid category: {category}")

        reference_number = await self.reference_numbers.generate(self.collection)
        timestamp = now_ms()
        record = {
            **self._writable(data),
            "referenceNumber": reference_number,
            "category": category,
            "status": EventStatus.ACTIVE.value,
            "featured": bool(data.get("featured", False)),
            "createdAt": timestamp,
            "updatedAt": timestamp,
        }
        event_id = await self._insert(record)

        await run_best_effort(
            "event push",
            self.notifier.notify_event, record["name"], record["date"], event_id,
        )
        await run_best_effort("event email", self._email_residents, record)

        return ok(eventId=event_id, referenceNumber=reference_number)

    @operation("Failed to fetch events. Please try again.")
    async def get_all_events(self) -> Dict[str, Any]:
        return ok(events=await self._fetch_all())

    @operation("Failed to fetch event. Please try again.")
    async def get_event(self, event_id: str) -> Dict[str, Any]:
        return ok(event=await self._fetch(event_id))

    @operation("Failed to fetch events by category. Please try again.")
    async def get_events_by_category(self, category: str) -> Dict[str, Any]:
        if category not in CATEGORIES:
            raise ValidationError(f"Invalid category: {category}")
        return ok(events=await self._query("category", category))

    @operation("Failed to fetch events by status. Please try again.")
    async def get_events_by_status(self, status: str) -> Dict[str, Any]:
        if status not in EVENT_MACHINE.statuses:
            raise ValidationError(f"Invalid event status: {status}")
        return ok(events=await self._query("status", status))

    @operation("Failed to fetch featured events. Please try again.")
    async def get_featured_events(self) -> Dict[str, Any]:
        return ok(events=await self._query("featured", True))

    @operation("Failed to update event. Please try again.")
    async def update_event(self, event_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        await self._fetch_raw(event_id)
        values = self._writable(data)
        if not values:
            raise ValidationError("No fields to update.")
        if "category" in values and values["category"] not in CATEGORIES:
            raise ValidationError(f"Invalid category: {values['category']}")
        await self._patch(event_id, values)
        return ok()

    @operation("Failed to toggle event status. Please check your connection and try again.")
    async def toggle_event_status(self, event_id: str) -> Dict[str, Any]:
        event = await self._fetch(event_id)
        current = event.get("status") or EventStatus.ACTIVE.value
        target = EventStatus.INACTIVE.value if current == EventStatus.ACTIVE.value else EventStatus.ACTIVE.value
        EVENT_MACHINE.check(current, target)
        await self._patch(event_id, {"status": target})
        return ok(status=target)

    @operation("Failed to toggle featured status. Please check your connection and try again.")
    async def toggle_featured_status(self, event_id: str) -> Dict[str, Any]:
        event = await self._fetch(event_id)
        featured = not bool(event.get("featured"))
        await self._patch(event_id, {"featured": featured})
        return ok(featured=featured)

    @operation("Failed to delete event. Please try again.")
    async def delete_event(self, event_id: str, archived_by: Optional[str] = None) -> Dict[str, Any]:
        await self._archive(event_id, archived_by)
        return ok()

    @operation("Failed to fetch event counts. Please try again.")
    async def get_events_count(self) -> Dict[str, Any]:
        events = await self._fetch_all()
        counts = self._status_counts(events, [status.value for status in EventStatus], EventStatus.ACTIVE.value)
        counts["featured"] = sum(1 for event in events if event.get("featured"))
        return ok(counts=counts)

    def _preview(self, record_id: str, raw: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "referenceNumber": raw.get("referenceNumber"),
            "name": raw.get("name"),
            "date": raw.get("date"),
            "status": raw.get("status"),
        }


event_service = EventService()
