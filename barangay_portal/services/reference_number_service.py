from ..database.database_service import database_service
from ..database.collections import COLLECTIONS, REFERENCE_PREFIXES
from ..core.clock import local_now
from ..core.config import settings
from ..core.exceptions import StoreError
from datetime import datetime
from typing import Optional
import logging
import re

logger = logging.getLogger(__name__)


class ReferenceNumberService:
    def __init__(self, db=None, strategy: Optional[str] = None):
        self.db = db or database_service
        self.strategy = strategy or settings.REFERENCE_NUMBER_STRATEGY

    async def generate(self, collection: str, now: Optional[datetime] = None) -> str:
        """
        Generate the next reference number for a collection in format:
        PREFIX-YYYY-MMDD-SEQ, e.g. APT-2025-0526-001.

        With the "count" strategy SEQ is the number of records already in the
        collection (any date) plus one. Two creations that read the count at the
        same time get the same number. The "counter" strategy increments
        counters/{PREFIX} in a transaction instead, starting from the collection
        count when the counter does not exist yet.
        """
        prefix = REFERENCE_PREFIXES[collection]
        moment = now or local_now()

        if self.strategy == "counter":
            sequence = await self._next_counter_value(collection, prefix)
        else:
            sequence = await self._count(collection) + 1

        reference_number = self.format(prefix, moment, sequence)
        logger.info(f"Generated reference number: {reference_number}")
        return reference_number

    async def _count(self, collection: str) -> int:
        success, total, error = await self.db.count(COLLECTIONS[collection])
        if not success:
            logger.error(f"Failed to count {collection} for reference number: {error}")
            raise StoreError(f"Failed to count {collection}")
        return total

    async def _next_counter_value(self, collection: str, prefix: str) -> int:
        counter_path = f"{COLLECTIONS['counters']}/{prefix}"
        success, current, error = await self.db.get(counter_path)
        if not success:
            logger.error(f"Failed to read {prefix} counter: {error}")
            raise StoreError(f"Failed to read {prefix} counter")

        # A counter switched on over existing records continues after them
        seed = 0 if current is not None else await self._count(collection)
        success, value, error = await self.db.transaction(
            counter_path,
            lambda stored: (seed if stored is None else stored) + 1,
        )
        if not success or value is None:
            logger.error(f"Failed to increment {prefix} counter: {error}")
            raise StoreError(f"Failed to increment {prefix} counter")
        return int(value)

    @staticmethod
    def format(prefix: str, moment: datetime, sequence: int) -> str:
        return f"{prefix}-{moment.year}-{moment.month:02d}{moment.day:02d}-{sequence:03d}"

    @staticmethod
    def is_valid(reference_number: str, prefix: str) -> bool:
        return re.fullmatch(rf"{re.escape(prefix)}-\d{{4}}-\d{{4}}-\d{{3,}}", reference_number or "") is not None


reference_number_service = ReferenceNumberService()
