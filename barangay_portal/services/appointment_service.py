from typing import Any, Dict, Optional
from datetime import date
import logging

from ..models.database_models import Appointment, AppointmentStatus
from ..core.clock import local_now, now_ms
from ..core.config import settings
from ..core.exceptions import ValidationError, ok
from .best_effort import run_best_effort
from .email_service import email_service
from .notification_service import notification_service
from .record_service import RecordService, operation
from .reference_number_service import reference_number_service
from .status_machine import APPOINTMENT_MACHINE

logger = logging.getLogger(__name__)


class AppointmentService(RecordService):
    collection = "appointments"
    model = Appointment
    label = "Appointment"

    def __init__(self, db=None, archive=None, reference_numbers=None, notifier=None, email=None):
        super().__init__(db=db, archive=archive)
        self.reference_numbers = reference_numbers or reference_number_service
        self.notifier = notifier or notification_service
        self.email = email or email_service

    @operation("Failed to create appointment. Please try again.")
    async def create_appointment(self, data: Dict[str, Any]) -> Dict[str, Any]:
        self._require_fields(data, "All required fields must be filled.")

        reference_number = await self.reference_numbers.generate(self.collection)
        timestamp = now_ms()
        record = {
            **self._writable(data),
            "referenceNumber": reference_number,
            "status": AppointmentStatus.PENDING.value,
            "createdAt": timestamp,
            "updatedAt": timestamp,
        }
        appointment_id = await self._insert(record)

        await run_best_effort(
            "appointment request received email",
            self.email.send_appointment_request_received_email, record["email"], self._email_data(record),
        )
        await run_best_effort(
            "new appointment push",
            self.notifier.notify_new_appointment_request, appointment_id, record,
        )

        return ok(appointmentId=appointment_id, referenceNumber=reference_number)

    @operation("Failed to fetch appointments. Please try again.")
    async def get_all_appointments(self) -> Dict[str, Any]:
        return ok(appointments=await self._fetch_all())

    @operation("Failed to fetch your appointments. Please try again.")
    async def get_appointments_by_user(self, user_id: str) -> Dict[str, Any]:
        if not user_id:
            raise ValidationError("User ID is required.")
        return ok(appointments=await self._query("userId", user_id))

    @operation("Failed to fetch appointments by status. Please try again.")
    async def get_appointments_by_status(self, status: str) -> Dict[str, Any]:
        if status not in APPOINTMENT_MACHINE.statuses:
            raise ValidationError(f"Invalid appointment status: {status}")
        return ok(appointments=await self._query("status", status))

    @operation("Failed to fetch appointment. Please try again.")
    async def get_appointment(self, appointment_id: str) -> Dict[str, Any]:
        return ok(appointment=await self._fetch(appointment_id))

    @operation("Failed to fetch recent appointments. Please try again.")
    async def get_recent_appointments(self, limit: int = 10) -> Dict[str, Any]:
        """Soonest scheduled first."""
        appointments = await self._fetch_all()
        appointments.sort(key=lambda item: (item.get("date") or "", item.get("time") or ""))
        return ok(appointments=appointments[:max(limit, 0)])

    @operation("Failed to update appointment status. Please try again.")
    async def update_appointment_status(
        self, appointment_id: str, status: str, notes: Optional[str] = None
    ) -> Dict[str, Any]:
        if not status:
            raise ValidationError("Status is required.")

        appointment = await self._fetch(appointment_id)
        APPOINTMENT_MACHINE.check(appointment.get("status", AppointmentStatus.PENDING.value), status)

        values: Dict[str, Any] = {"status": status}
        if notes:
            values["notes"] = notes
        await self._patch(appointment_id, values)
        logger.info(f"Appointment {appointment_id} status {appointment.get('status')} -> {status}")

        updated = {**appointment, **values}
        await run_best_effort(
            f"appointment {status} email",
            self.email.send_appointment_status_email, updated.get("email"), status, self._email_data(updated),
        )
        if updated.get("userId"):
            await run_best_effort(
                "appointment update push",
                self.notifier.notify_appointment_update,
                updated["userId"], updated.get("title", ""), status, appointment_id,
            )

        return ok()

    @operation("Failed to reschedule appointment. Please try again.")
    async def reschedule_appointment(self, appointment_id: str, new_date: str, new_time: str) -> Dict[str, Any]:
        """Move the appointment and send it back through approval."""
        if not new_date or not new_time:
            raise ValidationError("Date and time are required.")
        try:
            parsed = date.fromisoformat(new_date)
        except ValueError:
            raise ValidationError("Date must be in YYYY-MM-DD format.")

        if settings.ENFORCE_FUTURE_RESCHEDULE and parsed < local_now().date():
            raise ValidationError("Please select a future date.")

        appointment = await self._fetch(appointment_id)
        current = appointment.get("status", AppointmentStatus.PENDING.value)
        if settings.ENFORCE_STATUS_TRANSITIONS and APPOINTMENT_MACHINE.is_terminal(current):
            raise ValidationError(f"Cannot reschedule a {current} appointment.")

        await self._patch(appointment_id, {
            "date": new_date,
            "time": new_time,
            "status": AppointmentStatus.PENDING.value,
        })
        logger.info(f"Appointment {appointment_id} rescheduled to {new_date} {new_time}")
        return ok()

    @operation("Failed to delete appointment. Please try again.")
    async def delete_appointment(self, appointment_id: str, archived_by: Optional[str] = None) -> Dict[str, Any]:
        await self._archive(appointment_id, archived_by)
        return ok()

    @operation("Failed to fetch appointment counts. Please try again.")
    async def get_appointments_count(self) -> Dict[str, Any]:
        appointments = await self._fetch_all()
        counts = self._status_counts(
            appointments, [status.value for status in AppointmentStatus], AppointmentStatus.PENDING.value
        )
        return ok(counts=counts)

    def _preview(self, record_id: str, raw: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "referenceNumber": raw.get("referenceNumber"),
            "title": raw.get("title"),
            "requestedBy": raw.get("requestedBy"),
            "date": raw.get("date"),
            "status": raw.get("status"),
        }

    @staticmethod
    def _email_data(appointment: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "userName": appointment.get("requestedBy", ""),
            "referenceNumber": appointment.get("referenceNumber", ""),
            "title": appointment.get("title", ""),
            "date": appointment.get("date", ""),
            "time": appointment.get("time", ""),
            "notes": appointment.get("notes"),
        }


appointment_service = AppointmentService()
