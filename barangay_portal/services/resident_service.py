from typing import Any, Dict, List, Optional
import logging

from ..database.database_service import database_service
from ..database.collections import COLLECTIONS
from ..models.database_models import Resident
from ..core.clock import now_ms
from ..core.exceptions import NotFoundError, StoreError, ValidationError, ok
from .archive_service import archive_service
from .best_effort import run_best_effort
from .email_service import email_service
from .notification_service import notification_service
from .record_service import operation
from .status_machine import VERIFICATION_MACHINE

logger = logging.getLogger(__name__)

RESIDENT_STATUSES = {"active", "inactive"}


class ResidentService:
    """
    Resident records keyed by auth uid.

    Verification is a one-way gate (pending -> verified | rejected). Its status
    is mirrored onto users/{uid}/verificationStatus in the same write.
    """

    def __init__(self, db=None, archive=None, notifier=None, email=None, auth=None):
        self.db = db or database_service
        self.archive = archive or archive_service
        self.notifier = notifier or notification_service
        self.email = email or email_service
        self._auth = auth

    @property
    def auth(self):
        if self._auth is None:
            from ..auth.firebase_auth import firebase_auth
            self._auth = firebase_auth
        return self._auth

    @staticmethod
    def _resident_path(uid: str) -> str:
        return f"{COLLECTIONS['residents']}/{uid}"

    @staticmethod
    def _user_path(uid: str) -> str:
        return f"{COLLECTIONS['users']}/{uid}"

    async def _load_raw(self, uid: str) -> Dict[str, Any]:
        if not uid:
            raise ValidationError("Resident ID is required.")
        success, data, error = await self.db.get(self._resident_path(uid))
        if not success:
            raise StoreError(f"Failed to read resident {uid}: {error}")
        if not data:
            raise NotFoundError("Resident not found")
        return data

    async def _load(self, uid: str) -> Resident:
        return Resident(**{**await self._load_raw(uid), "uid": uid})

    @staticmethod
    def _list_item(resident: Resident) -> Dict[str, Any]:
        return {
            "uid": resident.uid,
            "name": resident.personalInfo.full_name,
            "email": resident.contactInfo.email,
            "phone": resident.contactInfo.phoneNumber,
            "address": resident.addressInfo.fullAddress,
            "verificationStatus": resident.verification.status,
            "status": resident.status,
            "registrationDate": resident.registrationDate,
            "profileImageUrl": resident.verification.selfiePhotoUrl,
        }

    async def _load_all(self) -> List[Resident]:
        success, data, error = await self.db.get(COLLECTIONS['residents'])
        if not success:
            raise StoreError(f"Failed to read residents: {error}")
        residents = [Resident(**{**(value or {}), "uid": uid}) for uid, value in (data or {}).items()]
        residents.sort(key=lambda resident: resident.registrationDate, reverse=True)
        return residents

    @operation("Failed to fetch residents")
    async def get_residents(self) -> Dict[str, Any]:
        return ok(residents=[self._list_item(resident) for resident in await self._load_all()])

    @operation("Failed to fetch resident details")
    async def get_resident_details(self, uid: str) -> Dict[str, Any]:
        resident = await self._load(uid)
        return ok(resident=resident.model_dump(exclude_none=True))

    @operation("Failed to search residents")
    async def search_residents(self, query: str = "", status_filter: Optional[str] = None) -> Dict[str, Any]:
        """Match name, email, phone or address; optionally filter by verification status."""
        needle = (query or "").strip().lower()
        results = []
        for resident in await self._load_all():
            item = self._list_item(resident)
            if needle and not any(
                needle in str(item[field] or "").lower() for field in ("name", "email", "phone", "address")
            ):
                continue
            if status_filter and status_filter != "all" and item["verificationStatus"] != status_filter:
                continue
            results.append(item)
        return ok(residents=results)

    @operation("Failed to update verification status")
    async def update_resident_verification(
        self,
        uid: str,
        status: str,
        notes: Optional[str] = None,
        reviewer_id: Optional[str] = None,
    ) -> Dict[str, Any]:
        resident = await self._load(uid)
        VERIFICATION_MACHINE.check(resident.verification.status, status)

        base = f"{self._resident_path(uid)}/verification"
        success, error = await self.db.multi_path_update({
            f"{base}/status": status,
            f"{base}/reviewedAt": now_ms(),
            f"{base}/reviewedBy": reviewer_id or "admin",
            f"{base}/notes": notes or "",
            f"{self._user_path(uid)}/verificationStatus": status,
        })
        if not success:
            raise StoreError(f"Failed to write verification for {uid}: {error}")
        logger.info(f"Resident {uid} verification {resident.verification.status} -> {status}")

        full_name = resident.personalInfo.full_name
        await run_best_effort(
            "verification push",
            self.notifier.notify_resident_verification, uid, full_name, status, notes,
        )
        if resident.contactInfo.email:
            await run_best_effort(
                "verification email",
                self.email.send_resident_verification_email,
                resident.contactInfo.email, status, {"fullName": full_name, "notes": notes},
            )
        return ok()

    @operation("Failed to update resident status")
    async def update_resident_status(self, uid: str, status: str) -> Dict[str, Any]:
        if status not in RESIDENT_STATUSES:
            raise ValidationError(f"Invalid resident status: {status}")
        await self._load(uid)
        success, error = await self.db.set(f"{self._resident_path(uid)}/status", status)
        if not success:
            raise StoreError(f"Failed to update resident status for {uid}: {error}")
        return ok()

    @operation("Failed to delete resident")
    async def delete_resident(self, uid: str, archived_by: Optional[str] = None) -> Dict[str, Any]:
        """Disable the auth account, then archive residents/{uid} and users/{uid} as one unit."""
        raw_resident = await self._load_raw(uid)
        resident = Resident(**{**raw_resident, "uid": uid})

        await run_best_effort(f"disable auth account {uid}", self.auth.disable_user, uid)

        paths = {self._resident_path(uid): raw_resident}
        success, raw_user, error = await self.db.get(self._user_path(uid))
        if not success:
            raise StoreError(f"Failed to read user {uid}: {error}")
        if raw_user:
            paths[self._user_path(uid)] = raw_user

        await self.archive.archive_record(
            "residents",
            uid,
            paths,
            preview={
                "name": resident.personalInfo.full_name,
                "email": resident.contactInfo.email,
                "verificationStatus": resident.verification.status,
                "photoPublicId": raw_resident.get("photoPublicId"),
            },
            archived_by=archived_by,
        )
        return ok()


resident_service = ResidentService()
