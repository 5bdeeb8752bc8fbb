from typing import Any, Dict, Iterable, List, Optional, Type
import functools
import logging

from ..database.database_service import database_service
from ..database.collections import COLLECTIONS, missing_required_fields
from ..models.database_models import RecordModel
from ..core.clock import now_ms
from ..core.exceptions import NotFoundError, PortalError, StoreError, ValidationError, fail
from .archive_service import archive_service

logger = logging.getLogger(__name__)

# Keys a caller may never write directly; lifecycle operations own them
PROTECTED_FIELDS = ("id", "referenceNumber", "status", "createdAt", "updatedAt")


def operation(failure_message: str):
    """
    Turn an async service method into a public operation that never raises.

    Validation and not-found errors keep their own message; anything else is
    logged and reported with `failure_message`.
    """
    def decorator(fn):
        @functools.wraps(fn)
        async def wrapper(*args, **kwargs):
            try:
                return await fn(*args, **kwargs)
            except (ValidationError, NotFoundError) as e:
                return fail(e)
            except PortalError as e:
                logger.error(f"{fn.__qualname__} failed: {e.message}")
                return fail(StoreError(failure_message))
            except Exception as e:
                logger.error(f"{fn.__qualname__} failed: {str(e)}")
                return fail(StoreError(failure_message))
        return wrapper
    return decorator


def matches_query(record: Dict[str, Any], query: str, fields: Iterable[str]) -> bool:
    """Case-insensitive substring match on any of `fields`."""
    needle = query.strip().lower()
    return any(needle in str(record.get(field) or "").lower() for field in fields)


class RecordService:
    """Common storage plumbing for the lifecycle services of one collection."""

    collection: str = ""
    model: Type[RecordModel] = RecordModel
    label: str = "Record"

    def __init__(self, db=None, archive=None):
        self.db = db or database_service
        self.archive = archive or archive_service

    def _path(self, record_id: Optional[str] = None) -> str:
        base = COLLECTIONS[self.collection]
        return f"{base}/{record_id}" if record_id else base

    def _require_fields(self, data: Dict[str, Any], message: Optional[str] = None) -> None:
        missing = missing_required_fields(self.collection, data)
        if missing:
            raise ValidationError(message or f"Missing required fields: {', '.join(missing)}")

    async def _fetch_raw(self, record_id: str) -> Dict[str, Any]:
        if not record_id:
            raise ValidationError(f"{self.label} ID is required.")
        success, data, error = await self.db.get(self._path(record_id))
        if not success:
            raise StoreError(f"Failed to read {self.collection}/{record_id}: {error}")
        if not data:
            raise NotFoundError(f"{self.label} not found.")
        return data

    async def _fetch(self, record_id: str) -> Dict[str, Any]:
        return self.model.from_record(record_id, await self._fetch_raw(record_id))

    async def _fetch_all(self) -> List[Dict[str, Any]]:
        """Every record in the collection, newest createdAt first."""
        success, data, error = await self.db.get(self._path())
        if not success:
            raise StoreError(f"Failed to read {self.collection}: {error}")
        records = [self.model.from_record(key, value) for key, value in (data or {}).items()]
        records.sort(key=lambda record: record.get("createdAt", 0), reverse=True)
        return records

    async def _query(self, child: str, value: Any) -> List[Dict[str, Any]]:
        success, data, error = await self.db.query_by_child(self._path(), child, value)
        if not success:
            raise StoreError(f"Failed to query {self.collection} by {child}: {error}")
        records = [self.model.from_record(key, item) for key, item in data.items()]
        records.sort(key=lambda record: record.get("createdAt", 0), reverse=True)
        return records

    async def _insert(self, record: Dict[str, Any]) -> str:
        success, record_id, error = await self.db.push(self._path(), record)
        if not success or not record_id:
            raise StoreError(f"Failed to create {self.collection} record: {error}")
        logger.info(f"Created {self.collection}/{record_id}")
        return record_id

    async def _patch(self, record_id: str, values: Dict[str, Any]) -> Dict[str, Any]:
        values = {**values, "updatedAt": now_ms()}
        success, error = await self.db.update(self._path(record_id), values)
        if not success:
            raise StoreError(f"Failed to update {self.collection}/{record_id}: {error}")
        return values

    @staticmethod
    def _writable(data: Dict[str, Any]) -> Dict[str, Any]:
        return {key: value for key, value in data.items() if key not in PROTECTED_FIELDS and value is not None}

    def _preview(self, record_id: str, raw: Dict[str, Any]) -> Dict[str, Any]:
        """Summary kept next to the archive entry for the archives listing."""
        return {"referenceNumber": raw.get("referenceNumber"), "status": raw.get("status")}

    async def _archive(self, record_id: str, archived_by: Optional[str] = None):
        raw = await self._fetch_raw(record_id)
        return await self.archive.archive_record(
            self.collection,
            record_id,
            {self._path(record_id): raw},
            preview=self._preview(record_id, raw),
            archived_by=archived_by,
        )

    @staticmethod
    def _status_counts(records: List[Dict[str, Any]], statuses: Iterable[str], default: str) -> Dict[str, int]:
        counts = {"total": 0, **{status: 0 for status in statuses}}
        for record in records:
            counts["total"] += 1
            status = record.get("status") or default
            if status in counts:
                counts[status] += 1
        return counts


async def resident_recipients(db) -> List[Dict[str, str]]:
    """Every resident with a stored email, as bulk email recipients."""
    success, residents, error = await db.get(COLLECTIONS["residents"])
    if not success:
        raise StoreError(f"Failed to read residents: {error}")

    recipients = []
    for resident in (residents or {}).values():
        contact = (resident or {}).get("contactInfo") or {}
        if contact.get("email"):
            personal = resident.get("personalInfo") or {}
            name = " ".join(part for part in (personal.get("firstName"), personal.get("lastName")) if part)
            recipients.append({"email": contact["email"], "name": name})
    return recipients
