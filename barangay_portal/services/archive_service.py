from typing import Any, Dict, List, Optional
import logging

from ..database.database_service import database_service
from ..database.collections import COLLECTIONS
from ..models.database_models import ArchiveEntry, ArchivePath
from ..core.clock import now_ms
from ..core.exceptions import NotFoundError, PortalError, StoreError, ValidationError, fail, ok
from .best_effort import run_best_effort

logger = logging.getLogger(__name__)

# Entities whose archive unit includes an auth account
ACCOUNT_ENTITIES = {"residents", "staff", "users"}


class ArchiveService:
    """
    Soft delete for every entity.

    Archiving snapshots one or more live paths into archives/{entity}/{id} and
    removes them in the same multi-path write. Restoring writes every captured
    path back and clears the archive entry, again in one write, so a failed
    restore leaves the archive entry in place for a retry.
    """

    def __init__(self, db=None, auth=None, storage=None):
        self.db = db or database_service
        self._auth = auth
        self._storage = storage

    @property
    def auth(self):
        if self._auth is None:
            from ..auth.firebase_auth import firebase_auth
            self._auth = firebase_auth
        return self._auth

    @property
    def storage(self):
        if self._storage is None:
            from .file_storage_service import file_storage_service
            self._storage = file_storage_service
        return self._storage

    @staticmethod
    def _archive_path(entity: str, record_id: str) -> str:
        return f"{COLLECTIONS['archives']}/{entity}/{record_id}"

    @staticmethod
    def _normalize_paths(paths: Any) -> List[ArchivePath]:
        # Older entries stored paths as {path: value}
        if isinstance(paths, dict):
            return [ArchivePath(path=path, value=value) for path, value in paths.items()]
        return [ArchivePath(**item) for item in (paths or [])]

    def _to_entry(self, entity: str, record_id: str, raw: Dict[str, Any]) -> ArchiveEntry:
        return ArchiveEntry(
            entity=entity,
            id=record_id,
            archivedAt=raw.get("archivedAt", 0),
            archivedBy=raw.get("archivedBy"),
            paths=self._normalize_paths(raw.get("paths")),
            preview=raw.get("preview") or {},
        )

    async def archive_record(
        self,
        entity: str,
        record_id: str,
        paths: Dict[str, Any],
        preview: Optional[Dict[str, Any]] = None,
        archived_by: Optional[str] = None,
    ) -> ArchiveEntry:
        if not entity or not record_id:
            raise ValidationError("Entity and id are required to archive a record.")
        if not paths:
            raise ValidationError("At least one path is required to archive a record.")

        entry = ArchiveEntry(
            entity=entity,
            id=record_id,
            archivedAt=now_ms(),
            archivedBy=archived_by,
            paths=[ArchivePath(path=path, value=value) for path, value in paths.items()],
            preview={key: value for key, value in (preview or {}).items() if value is not None},
        )

        updates: Dict[str, Any] = {path: None for path in paths}
        updates[self._archive_path(entity, record_id)] = entry.model_dump()

        success, error = await self.db.multi_path_update(updates)
        if not success:
            raise StoreError(f"Failed to archive {entity}/{record_id}: {error}")

        logger.info(f"Archived {entity}/{record_id} ({len(paths)} path(s))")
        return entry

    async def get_archived_items(self, entity: Optional[str] = None) -> List[ArchiveEntry]:
        path = f"{COLLECTIONS['archives']}/{entity}" if entity else COLLECTIONS['archives']
        success, data, error = await self.db.get(path)
        if not success:
            raise StoreError(f"Failed to read archives: {error}")
        if not data:
            return []

        entries: List[ArchiveEntry] = []
        if entity:
            for record_id, raw in data.items():
                entries.append(self._to_entry(entity, record_id, raw))
        else:
            for entity_key, items in data.items():
                for record_id, raw in (items or {}).items():
                    entries.append(self._to_entry(entity_key, record_id, raw))

        entries.sort(key=lambda entry: entry.archivedAt, reverse=True)
        return entries

    async def _get_entry(self, entity: str, record_id: str) -> ArchiveEntry:
        if not entity or not record_id:
            raise ValidationError("Entity and id are required.")

        success, raw, error = await self.db.get(self._archive_path(entity, record_id))
        if not success:
            raise StoreError(f"Failed to read archive entry: {error}")
        if not raw:
            raise NotFoundError("Archived record not found.")
        return self._to_entry(entity, record_id, raw)

    async def restore_archived_item(self, entity: str, record_id: str) -> ArchiveEntry:
        entry = await self._get_entry(entity, record_id)

        updates: Dict[str, Any] = {item.path: item.value for item in entry.paths}
        updates[self._archive_path(entity, record_id)] = None

        success, error = await self.db.multi_path_update(updates)
        if not success:
            raise StoreError(f"Failed to restore {entity}/{record_id}: {error}")

        logger.info(f"Restored {entity}/{record_id} ({len(entry.paths)} path(s))")
        return entry

    async def delete_archived_item(self, entity: str, record_id: str) -> ArchiveEntry:
        entry = await self._get_entry(entity, record_id)

        success, error = await self.db.delete(self._archive_path(entity, record_id))
        if not success:
            raise StoreError(f"Failed to delete archive entry {entity}/{record_id}: {error}")

        logger.info(f"Permanently deleted archived {entity}/{record_id}")
        return entry

    # ===== Result-dict operations used by routers =====

    async def get_archived_items_action(self, entity: Optional[str] = None) -> Dict[str, Any]:
        try:
            archives = await self.get_archived_items(entity)
            return ok(archives=[entry.model_dump() for entry in archives])
        except PortalError as e:
            logger.error(f"Error fetching archived items: {e.message}")
            return fail(StoreError("Failed to fetch archived items. Please try again."))
        except Exception as e:
            logger.error(f"Error fetching archived items: {str(e)}")
            return fail(StoreError("Failed to fetch archived items. Please try again."))

    async def restore_archived_item_action(self, entity: str, record_id: str) -> Dict[str, Any]:
        try:
            restored = await self.restore_archived_item(entity, record_id)
        except (ValidationError, NotFoundError) as e:
            return fail(e)
        except Exception as e:
            logger.error(f"Error restoring archived item {entity}/{record_id}: {str(e)}")
            return fail(StoreError("Failed to restore the archived item. Please try again."))

        if restored.entity in ACCOUNT_ENTITIES:
            await run_best_effort(
                f"re-enable auth account {restored.id}",
                self.auth.update_user, restored.id, disabled=False,
            )

        return ok(restored=restored.model_dump())

    async def delete_archived_item_action(self, entity: str, record_id: str) -> Dict[str, Any]:
        try:
            entry = await self.delete_archived_item(entity, record_id)
        except (ValidationError, NotFoundError) as e:
            return fail(e)
        except Exception as e:
            logger.error(f"Error deleting archived item {entity}/{record_id}: {str(e)}")
            return fail(StoreError("Failed to delete the archived item. Please try again."))

        if entry.entity in ACCOUNT_ENTITIES:
            await run_best_effort(
                f"delete auth account {entry.id}",
                self.auth.delete_user, entry.id,
            )

        photo_public_id = entry.preview.get("photoPublicId")
        if isinstance(photo_public_id, str) and photo_public_id:
            await run_best_effort(
                f"delete stored photo {photo_public_id}",
                self.storage.delete, photo_public_id,
            )

        return ok()


archive_service = ArchiveService()
