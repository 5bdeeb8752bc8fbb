from typing import Any, Dict, List, Optional
import logging

from ..models.notification_models import (
    NotificationPriority,
    NotificationRequest,
    NotificationType,
    UserRole,
)
from ..core.clock import now_ms
from ..core.config import settings
from ..core.exceptions import StoreError, ValidationError, fail, ok
from .fcm_service import fcm_service
from .settings_service import settings_service

logger = logging.getLogger(__name__)

CERTIFICATE_STATUS_MESSAGES = {
    "pending": "Your certificate request has been submitted and is pending review.",
    "processing": "Your certificate request is now being processed.",
    "ready": "Your certificate is ready for pickup!",
    "completed": "Your certificate request has been completed.",
}

APPOINTMENT_STATUS_MESSAGES = {
    "pending": "Your appointment is awaiting confirmation.",
    "confirmed": "Your appointment has been confirmed!",
    "cancelled": "Your appointment has been cancelled.",
    "completed": "Your appointment has been marked as completed.",
}


class NotificationService:
    """
    Fans a logical event out to push notifications.

    Delivery is best effort: every public method returns a result dict and
    logs failures instead of raising, so callers never roll back a state
    change because a push could not be delivered.
    """

    def __init__(self, fcm=None, settings_store=None):
        self.fcm = fcm or fcm_service
        self.settings_store = settings_store or settings_service

    async def _resolve_tokens(self, request: NotificationRequest) -> List[str]:
        # A user-targeted push never widens to other users
        if request.target_uids:
            return await self.fcm.get_tokens_by_uids(request.target_uids)

        if request.target_roles:
            return await self.fcm.get_tokens_by_roles(request.target_roles)
        return []

    async def send_notification(self, request: NotificationRequest) -> Dict[str, Any]:
        try:
            if not await self.settings_store.system_notifications_enabled():
                logger.info("System notifications are disabled, skipping push notification")
                return {"success": True, "sent": 0, "skipped": True}

            tokens = await self._resolve_tokens(request)
            if not tokens:
                logger.info("No FCM tokens found for notification")
                return {"success": True, "sent": 0}

            result = await self.fcm.send_to_multiple_tokens(
                tokens,
                request.title,
                request.body,
                request.message_data(now_ms()),
            )

            if result.get("failed_tokens"):
                logger.info(f"Cleaning up {len(result['failed_tokens'])} invalid tokens...")
                await self.fcm.cleanup_invalid_tokens(result["failed_tokens"])

            return {"success": True, "sent": result.get("success_count", 0), "failed": result.get("failure_count", 0)}

        except Exception as e:
            logger.error(f"Error sending notification: {str(e)}")
            return {"success": False, "error": "Failed to send notification"}

    async def store_token(self, uid: str, token: str, role: UserRole, device_type: str = "web") -> Dict[str, Any]:
        if not uid or not token:
            return fail(ValidationError("User ID and token are required."))
        if not await self.fcm.save_user_token(uid, token, role, device_type):
            return fail(StoreError("Failed to store FCM token"))
        logger.info(f"Stored FCM token for {uid} ({role})")
        return ok()

    async def remove_token(self, uid: str) -> Dict[str, Any]:
        if not uid:
            return fail(ValidationError("User ID is required."))
        if not await self.fcm.remove_user_token(uid):
            return fail(StoreError("Failed to remove FCM token"))
        return ok()

    # ===== Typed helpers, one per event kind =====

    async def notify_new_certificate_request(self, certificate_id: str, certificate: Dict[str, Any]) -> Dict[str, Any]:
        return await self.send_notification(NotificationRequest(
            type=NotificationType.CERTIFICATE_REQUEST,
            target_roles=[UserRole.ADMIN, UserRole.OFFICIAL],
            title="New Certificate Request",
            body=f"{certificate.get('requestedBy')} requested: {certificate.get('type')}",
            icon=settings.NOTIFICATION_ICON,
            click_action="/admin/certificates",
            data={
                "certificateId": certificate_id,
                "referenceNumber": certificate.get("referenceNumber"),
                "certificateType": certificate.get("type"),
                "requestedBy": certificate.get("requestedBy"),
            },
        ))

    async def notify_certificate_update(
        self,
        resident_uid: str,
        certificate_type: str,
        status: str,
        certificate_id: str,
        notes: Optional[str] = None,
    ) -> Dict[str, Any]:
        if status == "additionalInfo":
            message = f"Additional information is needed: {notes or 'Please check your email for details.'}"
        elif status == "rejected":
            message = f"Your certificate request was not approved. {f'Reason: {notes}' if notes else ''}".strip()
        else:
            message = CERTIFICATE_STATUS_MESSAGES.get(status, f"Status changed to {status}.")

        return await self.send_notification(NotificationRequest(
            type=NotificationType.CERTIFICATE_UPDATE,
            target_uids=[resident_uid],
            title="Certificate Update",
            body=f"{certificate_type}: {message}",
            icon=settings.NOTIFICATION_ICON,
            click_action="/certificates",
            data={
                "certificateId": certificate_id,
                "certificateType": certificate_type,
                "status": status,
                "residentUid": resident_uid,
                "notes": notes,
            },
            priority=NotificationPriority.HIGH if status in ("ready", "rejected") else NotificationPriority.NORMAL,
        ))

    async def notify_new_appointment_request(self, appointment_id: str, appointment: Dict[str, Any]) -> Dict[str, Any]:
        return await self.send_notification(NotificationRequest(
            type=NotificationType.APPOINTMENT_UPDATE,
            target_roles=[UserRole.ADMIN, UserRole.OFFICIAL],
            title="New Appointment Request",
            body=f"{appointment.get('requestedBy')} requested: {appointment.get('title')} on {appointment.get('date')} {appointment.get('time')}",
            icon=settings.NOTIFICATION_ICON,
            click_action="/admin/appointments",
            data={
                "appointmentId": appointment_id,
                "referenceNumber": appointment.get("referenceNumber"),
            },
        ))

    async def notify_appointment_update(
        self,
        resident_uid: str,
        appointment_title: str,
        status: str,
        appointment_id: str,
    ) -> Dict[str, Any]:
        return await self.send_notification(NotificationRequest(
            type=NotificationType.APPOINTMENT_UPDATE,
            target_uids=[resident_uid],
            title="Appointment Update",
            body=f"{appointment_title}: {APPOINTMENT_STATUS_MESSAGES.get(status, f'Status changed to {status}.')}",
            icon=settings.NOTIFICATION_ICON,
            click_action="/appointments",
            data={
                "appointmentId": appointment_id,
                "appointmentTitle": appointment_title,
                "status": status,
                "residentUid": resident_uid,
            },
            priority=NotificationPriority.HIGH,
        ))

    async def notify_announcement(self, title: str, content: str, announcement_id: str) -> Dict[str, Any]:
        preview = content[:100] + ("..." if len(content) > 100 else "")
        return await self.send_notification(NotificationRequest(
            type=NotificationType.ANNOUNCEMENT,
            target_roles=[UserRole.RESIDENT],
            title="New Announcement",
            body=title,
            icon=settings.NOTIFICATION_ICON,
            click_action="/announcements",
            data={"announcementId": announcement_id, "title": title, "content": preview},
        ))

    async def notify_event(self, event_name: str, event_date: str, event_id: str) -> Dict[str, Any]:
        return await self.send_notification(NotificationRequest(
            type=NotificationType.EVENT_UPDATE,
            target_roles=[UserRole.RESIDENT],
            title="New Event",
            body=f"{event_name} - {event_date}",
            icon=settings.NOTIFICATION_ICON,
            click_action="/events",
            data={"eventId": event_id, "eventName": event_name, "eventDate": event_date},
        ))

    async def notify_resident_verification(
        self,
        resident_uid: str,
        resident_name: str,
        status: str,
        notes: Optional[str] = None,
    ) -> Dict[str, Any]:
        if status == "verified":
            body = f"Congratulations {resident_name}! Your account has been verified."
        else:
            body = f"Your account verification was not approved. {f'Reason: {notes}' if notes else ''}".strip()

        return await self.send_notification(NotificationRequest(
            type=NotificationType.RESIDENT_VERIFICATION,
            target_uids=[resident_uid],
            title="Account Verification Update",
            body=body,
            icon=settings.NOTIFICATION_ICON,
            click_action="/",
            data={"residentUid": resident_uid, "verificationStatus": status, "notes": notes},
            priority=NotificationPriority.HIGH,
        ))


notification_service = NotificationService()
