from typing import List, Dict, Any, Optional
import sendgrid
from sendgrid.helpers.mail import Mail, Email, To, Content
import logging
from jinja2 import Environment, FileSystemLoader, select_autoescape
from pathlib import Path

from ..core.config import settings
from ..core.clock import long_date

logger = logging.getLogger(__name__)

CERTIFICATE_TEMPLATES = {
    "pending": ("certificate_pending.html", "Certificate Request Pending"),
    "processing": ("certificate_processing.html", "Certificate Processing"),
    "ready": ("certificate_ready.html", "Certificate Ready for Pickup"),
    "completed": ("certificate_completed.html", "Certificate Request Completed"),
    "rejected": ("certificate_rejected.html", "Certificate Request Rejected"),
    "additionalInfo": ("certificate_additional_info.html", "Additional Information Required"),
}

APPOINTMENT_TEMPLATES = {
    "pending": ("appointment_request_received.html", "Appointment Request Received"),
    "confirmed": ("appointment_confirmed.html", "Appointment Confirmed"),
    "cancelled": ("appointment_cancelled.html", "Appointment Cancelled"),
    "completed": ("appointment_completed.html", "Appointment Completed"),
}

VERIFICATION_TEMPLATES = {
    "verified": ("resident_verified.html", "Your Account Has Been Verified"),
    "rejected": ("resident_rejected.html", "Account Verification Update"),
}


class EmailService:
    """Email service using SendGrid for resident-facing transactional emails"""

    def __init__(self):
        self.api_key = settings.SENDGRID_API_KEY
        self.from_email = settings.FROM_EMAIL
        self.from_name = settings.FROM_NAME
        self.mock_mode = settings.EMAIL_MOCK_MODE

        if not self.mock_mode and self.api_key:
            self.sg = sendgrid.SendGridAPIClient(api_key=self.api_key)
        else:
            self.sg = None
            logger.info("Email service running in MOCK mode")

        template_dir = Path(__file__).parent.parent / 'templates' / 'email'
        self.jinja_env = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=select_autoescape(['html', 'xml'])
        )

    def _common_context(self) -> Dict[str, Any]:
        return {
            "contact_phone": settings.CONTACT_PHONE,
            "contact_email": settings.CONTACT_EMAIL,
            "barangay_name": self.from_name,
            "sent_on": long_date(),
        }

    async def send_email(
        self,
        to_email: str,
        to_name: str,
        subject: str,
        html_content: str,
        plain_content: Optional[str] = None
    ) -> bool:
        """Send an email using SendGrid"""
        try:
            if self.mock_mode:
                logger.info(f"[MOCK EMAIL] To: {to_name} <{to_email}>")
                logger.info(f"[MOCK EMAIL] Subject: {subject}")
                logger.debug(f"[MOCK EMAIL] HTML Content: {html_content[:200]}...")
                return True

            if not self.sg:
                logger.error("SendGrid client not initialized")
                return False

            mail = Mail(Email(self.from_email, self.from_name), To(to_email, to_name), subject, plain_content or "")
            if html_content:
                mail.add_content(Content("text/html", html_content))

            response = self.sg.send(mail)

            if response.status_code in [200, 201, 202]:
                logger.info(f"Email sent successfully to {to_email}")
                return True
            logger.error(f"Failed to send email. Status: {response.status_code}")
            return False

        except Exception as e:
            logger.error(f"Error sending email: {str(e)}")
            return False

    async def send_bulk_email(
        self,
        recipients: List[Dict[str, str]],  # [{"email": "...", "name": "..."}]
        subject: str,
        html_content: str,
    ) -> Dict[str, Any]:
        """Send the same email to every recipient, one message each"""
        if self.mock_mode:
            logger.info(f"[MOCK BULK EMAIL] Recipients: {len(recipients)}")
            logger.info(f"[MOCK BULK EMAIL] Subject: {subject}")
            return {"success_count": len(recipients), "failure_count": 0, "total_recipients": len(recipients)}

        success_count = 0
        failure_count = 0
        for recipient in recipients:
            if await self.send_email(recipient["email"], recipient.get("name", ""), subject, html_content):
                success_count += 1
            else:
                failure_count += 1

        return {
            "success_count": success_count,
            "failure_count": failure_count,
            "total_recipients": len(recipients)
        }

    def render_template(self, template_name: str, **kwargs) -> str:
        """Render email template with data"""
        context = self._common_context()
        context.update(kwargs)
        return self.jinja_env.get_template(template_name).render(**context)

    # ===== Certificates =====

    async def send_certificate_status_email(self, to_email: str, status: str, data: Dict[str, Any]) -> bool:
        """
        data carries userName, referenceNumber, certificateType, requestDate and
        purpose, plus rejectedReason or additionalInfoRequest where relevant.
        """
        template_info = CERTIFICATE_TEMPLATES.get(status)
        if not template_info:
            logger.error(f"Unknown certificate email status: {status}")
            return False

        template, subject = template_info
        try:
            html_content = self.render_template(
                template,
                certificate=data,
                pickup_location=settings.PICKUP_LOCATION,
                pickup_hours=settings.PICKUP_HOURS,
            )
        except Exception as e:
            logger.error(f"Error rendering email template {template}: {str(e)}")
            return False

        return await self.send_email(
            to_email,
            data.get("userName", ""),
            f"{subject} - {data.get('referenceNumber', '')}",
            html_content,
        )

    # ===== Appointments =====

    async def send_appointment_request_received_email(self, to_email: str, data: Dict[str, Any]) -> bool:
        return await self.send_appointment_status_email(to_email, "pending", data)

    async def send_appointment_status_email(self, to_email: str, status: str, data: Dict[str, Any]) -> bool:
        template, subject = APPOINTMENT_TEMPLATES.get(
            status, ("appointment_request_received.html", "Appointment Update")
        )
        try:
            html_content = self.render_template(template, appointment=data, status=status)
        except Exception as e:
            logger.error(f"Error rendering email template {template}: {str(e)}")
            return False

        return await self.send_email(
            to_email,
            data.get("userName", ""),
            f"{subject} - {data.get('referenceNumber', '')}",
            html_content,
        )

    # ===== Blotter =====

    async def send_blotter_status_email(self, to_email: str, status: str, data: Dict[str, Any]) -> bool:
        try:
            html_content = self.render_template("blotter_status_update.html", blotter=data, status=status)
        except Exception as e:
            logger.error(f"Error rendering blotter email: {str(e)}")
            return False

        return await self.send_email(
            to_email,
            data.get("reportedBy", ""),
            f"Blotter Report Update - {data.get('referenceNumber', '')}",
            html_content,
        )

    # ===== Broadcasts =====

    async def send_announcement_created_email(
        self, recipients: List[Dict[str, str]], announcement_data: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Send announcement emails to multiple recipients"""
        html_content = self.render_template("announcement_created.html", announcement=announcement_data)
        return await self.send_bulk_email(
            recipients,
            f"New Announcement: {announcement_data.get('title', '')}",
            html_content,
        )

    async def send_event_created_email(
        self, recipients: List[Dict[str, str]], event_data: Dict[str, Any]
    ) -> Dict[str, Any]:
        html_content = self.render_template("event_created.html", event=event_data)
        return await self.send_bulk_email(
            recipients,
            f"New Event: {event_data.get('name', '')}",
            html_content,
        )

    # ===== Residents =====

    async def send_resident_verification_email(self, to_email: str, status: str, data: Dict[str, Any]) -> bool:
        template_info = VERIFICATION_TEMPLATES.get(status)
        if not template_info:
            logger.warning(f"No verification email for status {status}")
            return False

        template, subject = template_info
        try:
            html_content = self.render_template(template, resident=data)
        except Exception as e:
            logger.error(f"Error rendering email template {template}: {str(e)}")
            return False

        return await self.send_email(to_email, data.get("fullName", ""), subject, html_content)


email_service = EmailService()
