import asyncio
import pytest
from datetime import datetime

from barangay_portal.services.reference_number_service import ReferenceNumberService
from conftest import FakeRealtimeDB

MAY_26 = datetime(2025, 5, 26, 10, 30)


def test_format_pads_month_day_and_sequence():
    assert ReferenceNumberService.format("APT", MAY_26, 1) == "APT-2025-0526-001"
    assert ReferenceNumberService.format("CERT", datetime(2025, 12, 3), 1234) == "CERT-2025-1203-1234"


def test_is_valid():
    assert ReferenceNumberService.is_valid("BLT-2025-0526-007", "BLT")
    assert ReferenceNumberService.is_valid("BLT-2025-0526-1007", "BLT")
    assert not ReferenceNumberService.is_valid("BLT-2025-526-007", "BLT")
    assert not ReferenceNumberService.is_valid("APT-2025-0526-007", "BLT")
    assert not ReferenceNumberService.is_valid("", "BLT")


@pytest.mark.asyncio
async def test_count_strategy_uses_collection_size_plus_one():
    db = FakeRealtimeDB({"appointments": {"a": {}, "b": {}}})
    service = ReferenceNumberService(db=db, strategy="count")

    assert await service.generate("appointments", MAY_26) == "APT-2025-0526-003"


@pytest.mark.asyncio
async def test_count_strategy_starts_at_one_for_empty_collection():
    service = ReferenceNumberService(db=FakeRealtimeDB(), strategy="count")

    assert await service.generate("events", MAY_26) == "EVT-2025-0526-001"


@pytest.mark.asyncio
async def test_count_strategy_collides_when_two_creations_read_the_same_count():
    db = FakeRealtimeDB({"appointments": {f"a{i}": {} for i in range(5)}})
    service = ReferenceNumberService(db=db, strategy="count")

    first, second = await asyncio.gather(
        service.generate("appointments", MAY_26),
        service.generate("appointments", MAY_26),
    )

    assert first == second == "APT-2025-0526-006"


@pytest.mark.asyncio
async def test_counter_strategy_is_monotonic():
    service = ReferenceNumberService(db=FakeRealtimeDB(), strategy="counter")

    first = await service.generate("blotter", MAY_26)
    second = await service.generate("blotter", MAY_26)

    assert first == "BLT-2025-0526-001"
    assert second == "BLT-2025-0526-002"


@pytest.mark.asyncio
async def test_counter_continues_after_existing_records():
    db = FakeRealtimeDB({"blotter": {"b1": {}, "b2": {}}})
    service = ReferenceNumberService(db=db, strategy="counter")

    first = await service.generate("blotter", MAY_26)
    db.write("blotter/b3", {})
    second = await service.generate("blotter", MAY_26)

    assert first == "BLT-2025-0526-003"
    assert second == "BLT-2025-0526-004"
    assert db.read("counters/BLT") == 4


@pytest.mark.asyncio
async def test_existing_counter_is_not_reseeded():
    db = FakeRealtimeDB({"blotter": {"b1": {}, "b2": {}}, "counters": {"BLT": 10}})
    service = ReferenceNumberService(db=db, strategy="counter")

    assert await service.generate("blotter", MAY_26) == "BLT-2025-0526-011"


@pytest.mark.asyncio
async def test_count_failure_raises_store_error():
    from barangay_portal.core.exceptions import StoreError

    class FailingCountDB(FakeRealtimeDB):
        async def count(self, path):
            return False, 0, "offline"

    service = ReferenceNumberService(db=FailingCountDB(), strategy="count")
    with pytest.raises(StoreError):
        await service.generate("announcements", MAY_26)
