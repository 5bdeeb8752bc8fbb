from typing import Any, Dict, Optional
import logging

from ..models.database_models import Certificate, CertificateStatus
from ..core.clock import long_date, now_ms
from ..core.exceptions import ValidationError, ok
from .best_effort import run_best_effort
from .email_service import email_service
from .file_storage_service import file_storage_service
from .notification_service import notification_service
from .record_service import RecordService, matches_query, operation
from .reference_number_service import reference_number_service
from .status_machine import CERTIFICATE_MACHINE

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ("type", "requestedBy", "purpose", "id", "referenceNumber")


class CertificateService(RecordService):
    """Certificate requests: pending -> processing -> ready -> completed, with rejected/additionalInfo branches."""

    collection = "certificates"
    model = Certificate
    label = "Certificate"

    def __init__(self, db=None, archive=None, reference_numbers=None, notifier=None, email=None, storage=None):
        super().__init__(db=db, archive=archive)
        self.reference_numbers = reference_numbers or reference_number_service
        self.notifier = notifier or notification_service
        self.email = email or email_service
        self.storage = storage or file_storage_service

    @operation("Failed to create certificate request. Please try again.")
    async def create_certificate(self, data: Dict[str, Any]) -> Dict[str, Any]:
        self._require_fields(data, "Type, requested by, email to notify, and purpose are required fields.")

        reference_number = await self.reference_numbers.generate(self.collection)
        timestamp = now_ms()
        record = {
            **self._writable(data),
            "referenceNumber": reference_number,
            "status": CertificateStatus.PENDING.value,
            "requestedOn": long_date(),
            "hasSignature": bool(data.get("hasSignature", False)),
            "createdAt": timestamp,
            "updatedAt": timestamp,
        }
        certificate_id = await self._insert(record)

        await run_best_effort(
            "new certificate push",
            self.notifier.notify_new_certificate_request, certificate_id, record,
        )
        await run_best_effort(
            "certificate pending email",
            self.email.send_certificate_status_email,
            record["emailToNotify"], CertificateStatus.PENDING.value, self._email_data(record),
        )

        return ok(certificateId=certificate_id, referenceNumber=reference_number)

    @operation("Failed to fetch certificates. Please try again.")
    async def get_all_certificates(self) -> Dict[str, Any]:
        return ok(certificates=await self._fetch_all())

    @operation("Failed to fetch certificate. Please try again.")
    async def get_certificate(self, certificate_id: str) -> Dict[str, Any]:
        return ok(certificate=await self._fetch(certificate_id))

    @operation("Failed to fetch certificates by status. Please try again.")
    async def get_certificates_by_status(self, status: str) -> Dict[str, Any]:
        if status not in CERTIFICATE_MACHINE.statuses:
            raise ValidationError(f"Invalid certificate status: {status}")
        return ok(certificates=await self._query("status", status))

    @operation("Failed to fetch your certificates. Please try again.")
    async def get_certificates_by_user(self, user_id: str) -> Dict[str, Any]:
        if not user_id:
            raise ValidationError("User ID is required.")
        return ok(certificates=await self._query("userId", user_id))

    @operation("Failed to search certificates. Please try again.")
    async def search_certificates(self, query: str) -> Dict[str, Any]:
        certificates = await self._fetch_all()
        if query and query.strip():
            certificates = [c for c in certificates if matches_query(c, query, SEARCH_FIELDS)]
        return ok(certificates=certificates)

    @operation("Failed to update certificate. Please try again.")
    async def update_certificate(self, certificate_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        await self._fetch_raw(certificate_id)
        values = self._writable(data)
        if not values:
            raise ValidationError("No fields to update.")
        await self._patch(certificate_id, values)
        return ok()

    @operation("Failed to update certificate status. Please check your connection and try again.")
    async def update_certificate_status(
        self,
        certificate_id: str,
        status: str,
        rejected_reason: Optional[str] = None,
        notes: Optional[str] = None,
        completed_on: Optional[str] = None,
    ) -> Dict[str, Any]:
        if not status:
            raise ValidationError("Status is required.")

        certificate = await self._fetch(certificate_id)
        side_data = {"rejectedReason": rejected_reason, "notes": notes}
        CERTIFICATE_MACHINE.check(certificate.get("status", CertificateStatus.PENDING.value), status, side_data)

        values: Dict[str, Any] = {"status": status}
        if status == CertificateStatus.REJECTED.value:
            values["rejectedReason"] = rejected_reason
        elif status == CertificateStatus.ADDITIONAL_INFO.value:
            values["notes"] = notes
        elif status == CertificateStatus.COMPLETED.value:
            values["completedOn"] = completed_on or long_date()
        elif notes:
            values["notes"] = notes

        await self._patch(certificate_id, values)
        logger.info(f"Certificate {certificate_id} status {certificate.get('status')} -> {status}")

        updated = {**certificate, **values}
        await run_best_effort(
            f"certificate {status} email",
            self.email.send_certificate_status_email,
            updated.get("emailToNotify"), status, self._email_data(updated),
        )
        if updated.get("userId"):
            await run_best_effort(
                "certificate update push",
                self.notifier.notify_certificate_update,
                updated["userId"], updated.get("type", ""), status, certificate_id,
                rejected_reason or notes,
            )
        else:
            logger.warning(f"Certificate {certificate_id} has no userId, skipping push notification")

        return ok()

    @operation("Failed to delete certificate. Please try again.")
    async def delete_certificate(self, certificate_id: str, archived_by: Optional[str] = None) -> Dict[str, Any]:
        await self._archive(certificate_id, archived_by)
        return ok()

    @operation("Failed to fetch certificate counts. Please try again.")
    async def get_certificates_count(self) -> Dict[str, Any]:
        certificates = await self._fetch_all()
        counts = self._status_counts(
            certificates, [status.value for status in CertificateStatus], CertificateStatus.PENDING.value
        )
        return ok(counts=counts)

    @operation("Failed to upload signature")
    async def attach_signature(self, certificate_id: str, content: bytes, content_type: str) -> Dict[str, Any]:
        await self._fetch_raw(certificate_id)
        upload = await self.storage.upload(
            content, "signatures", content_type=content_type, tags=["certificate", "signature", certificate_id],
        )
        await self._patch(certificate_id, {"signatureUrl": upload["url"], "hasSignature": True})
        return ok(signatureUrl=upload["url"])

    @operation("Failed to record certificate generation")
    async def mark_generated(
        self, certificate_id: str, generated_by: Optional[str] = None, pdf_url: Optional[str] = None
    ) -> Dict[str, Any]:
        certificate = await self._fetch(certificate_id)
        values: Dict[str, Any] = {
            "hasSignature": bool(certificate.get("hasSignature")),
            "generatedBy": generated_by or "System",
            "generatedOn": long_date(),
        }
        if pdf_url:
            values["pdfUrl"] = pdf_url
        await self._patch(certificate_id, values)
        return ok(pdfUrl=pdf_url or certificate.get("signatureUrl"))

    def _preview(self, record_id: str, raw: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "referenceNumber": raw.get("referenceNumber"),
            "type": raw.get("type"),
            "requestedBy": raw.get("requestedBy"),
            "status": raw.get("status"),
        }

    @staticmethod
    def _email_data(certificate: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "userName": certificate.get("requestedBy", ""),
            "referenceNumber": certificate.get("referenceNumber", ""),
            "certificateType": certificate.get("type", ""),
            "requestDate": certificate.get("requestedOn", ""),
            "purpose": certificate.get("purpose", ""),
            "estimatedCompletionDate": certificate.get("estimatedCompletion") or "3-5 business days",
            "rejectedReason": certificate.get("rejectedReason"),
            "additionalInfoRequest": certificate.get("notes"),
        }


certificate_service = CertificateService()
