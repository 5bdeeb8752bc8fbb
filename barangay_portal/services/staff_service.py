from typing import Any, Dict, Optional
import logging

from ..models.database_models import StaffMember, StaffPermissions, StaffStatus
from ..core.clock import now_ms
from ..core.exceptions import StoreError, ValidationError, ok
from .best_effort import run_best_effort
from .record_service import RecordService, operation

logger = logging.getLogger(__name__)

STAFF_ROLES = {"admin", "official"}
STAFF_STATUSES = {status.value for status in StaffStatus}
PROFILE_FIELDS = ("firstName", "lastName", "phoneNumber", "address", "position", "department", "employeeId")


class StaffService(RecordService):
    """
    Admin and official accounts.

    A staff member is an auth account plus a users/{uid} profile whose role is
    admin or official. Deleting one disables the account and archives the
    profile, so restoring from the archives brings both back.
    """

    collection = "users"
    model = StaffMember
    label = "Staff member"

    def __init__(self, db=None, archive=None, auth=None):
        super().__init__(db=db, archive=archive)
        self._auth = auth

    @property
    def auth(self):
        if self._auth is None:
            from ..auth.firebase_auth import firebase_auth
            self._auth = firebase_auth
        return self._auth

    async def _fetch_staff(self, uid: str) -> Dict[str, Any]:
        raw = await self._fetch_raw(uid)
        if raw.get("role") not in STAFF_ROLES:
            raise ValidationError("User is not a staff member.")
        return raw

    @staticmethod
    def _profile_values(data: Dict[str, Any]) -> Dict[str, Any]:
        # Blank strings mean "leave unchanged"
        return {
            field: data[field].strip() if isinstance(data[field], str) else data[field]
            for field in PROFILE_FIELDS
            if data.get(field) is not None and (not isinstance(data[field], str) or data[field].strip())
        }

    @operation("Failed to fetch staff members. Please try again.")
    async def get_all_staff(self) -> Dict[str, Any]:
        users = await self._fetch_all()
        return ok(staff=[user for user in users if user.get("role") in STAFF_ROLES])

    @operation("Failed to fetch staff member. Please try again.")
    async def get_staff_member(self, uid: str) -> Dict[str, Any]:
        return ok(staff=StaffMember.from_record(uid, await self._fetch_staff(uid)))

    @operation("Failed to create staff member. Please try again.")
    async def create_staff_member(self, email: str, password: str, data: Dict[str, Any]) -> Dict[str, Any]:
        role = data.get("role")
        if role not in STAFF_ROLES:
            raise ValidationError(f"Invalid staff role: {role}")
        if not email or not password:
            raise ValidationError("Email and password are required.")
        self._require_fields({**data, "email": email}, "All required fields must be filled.")

        profile_values = self._profile_values(data)
        account = await self.auth.create_user(
            email=email,
            password=password,
            display_name=" ".join(filter(None, (profile_values.get("firstName"), profile_values.get("lastName")))),
        )
        uid = account["uid"]

        permissions = StaffPermissions.for_role(role).model_dump()
        permissions.update(data.get("permissions") or {})
        timestamp = now_ms()
        profile = {
            **profile_values,
            "uid": uid,
            "email": email,
            "role": role,
            "hireDate": timestamp,
            "status": StaffStatus.ACTIVE.value,
            "permissions": StaffPermissions(**permissions).model_dump(),
            "createdAt": timestamp,
            "updatedAt": timestamp,
        }

        success, error = await self.db.set(self._path(uid), profile)
        if not success:
            # Do not leave an auth account without a profile
            await run_best_effort(f"remove orphaned auth account {uid}", self.auth.delete_user, uid)
            raise StoreError(f"Failed to write staff profile {uid}: {error}")

        await run_best_effort(f"set role claim for {uid}", self.auth.set_custom_claims, uid, {"role": role})
        logger.info(f"Created staff member {uid} ({role})")
        return ok(staff=StaffMember.from_record(uid, profile))

    @operation("Failed to update staff member. Please try again.")
    async def update_staff_member(self, uid: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        await self._fetch_staff(uid)
        values = self._profile_values(updates)
        status = updates.get("status")
        if status:
            if status not in STAFF_STATUSES:
                raise ValidationError(f"Invalid staff status: {status}")
            values["status"] = status
        if updates.get("permissions"):
            values["permissions"] = StaffPermissions(**updates["permissions"]).model_dump()
        if not values:
            raise ValidationError("No fields to update.")
        await self._patch(uid, values)
        return ok()

    @operation("Failed to update staff status. Please try again.")
    async def toggle_staff_status(self, uid: str, status: str) -> Dict[str, Any]:
        if status not in STAFF_STATUSES:
            raise ValidationError(f"Invalid staff status: {status}")
        await self._fetch_staff(uid)
        await self._patch(uid, {"status": status})
        return ok(status=status)

    @operation("Failed to update permissions. Please try again.")
    async def update_staff_permissions(self, uid: str, permissions: Dict[str, Any]) -> Dict[str, Any]:
        await self._fetch_staff(uid)
        values = StaffPermissions(**(permissions or {})).model_dump()
        await self._patch(uid, {"permissions": values})
        return ok(permissions=values)

    @operation("Failed to delete staff member. Please try again.")
    async def delete_staff_member(self, uid: str, archived_by: Optional[str] = None) -> Dict[str, Any]:
        """Disable the auth account, then archive users/{uid} under the staff entity."""
        raw = await self._fetch_staff(uid)
        await run_best_effort(f"disable auth account {uid}", self.auth.disable_user, uid)
        await self.archive.archive_record(
            "staff",
            uid,
            {self._path(uid): raw},
            preview=self._preview(uid, raw),
            archived_by=archived_by,
        )
        return ok()

    def _preview(self, record_id: str, raw: Dict[str, Any]) -> Dict[str, Any]:
        name = " ".join(part for part in (raw.get("firstName"), raw.get("lastName")) if part)
        return {"name": name, "email": raw.get("email"), "role": raw.get("role")}


staff_service = StaffService()
