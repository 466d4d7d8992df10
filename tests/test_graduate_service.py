from __future__ import annotations

import asyncio
import json
from collections import Counter

import pytest

from errors import InvalidArgument, MigrationError, StoreReadError, StoreWriteError
from persistence.local_cache import LocalGraduateCache
from services.graduate_service import INITIAL_DATA, GraduateService
from services.models import GraduateRecord, summarize


def _service(store, slots, cached=None) -> GraduateService:
    if cached is not None:
        slots.set_item("collegeGraduates", json.dumps(cached))
    return GraduateService(store, LocalGraduateCache(slots))


def test_add_fills_defaults_and_returns_store_id(memory_store, memory_slots):
    async def _run():
        service = _service(memory_store, memory_slots)
        store_id = await service.add({"code": "7", "name": "N", "department": "D", "year": 2020, "grade": "A"})

        fields = memory_store.documents["graduates"][store_id]
        assert fields["feedback"] == ""
        assert fields["status"] == "Under Review"
        assert fields["fromLocalCache"] is False
        assert fields["year"] == 2020
        assert fields["createdAt"] and fields["updatedAt"]
        assert "storeId" not in fields

    asyncio.run(_run())


def test_add_propagates_store_write_errors(make_store, memory_slots):
    async def _run():
        service = _service(make_store(fail_on_create=1), memory_slots)
        with pytest.raises(StoreWriteError):
            await service.add({"code": "1"})

    asyncio.run(_run())


def test_list_returns_newest_first_with_store_ids(memory_store, memory_slots):
    async def _run():
        service = _service(memory_store, memory_slots)
        a = await service.add({"code": "A"})
        b = await service.add({"code": "B"})

        records = await service.list()
        assert [r.storeId for r in records] == [b, a]
        assert all(isinstance(r, GraduateRecord) for r in records)

    asyncio.run(_run())


@pytest.mark.parametrize("bad_id", ["", "   ", None])
def test_delete_rejects_missing_id_without_touching_store(memory_store, memory_slots, bad_id):
    async def _run():
        service = _service(memory_store, memory_slots)
        with pytest.raises(InvalidArgument):
            await service.delete(bad_id)
        assert memory_store.calls == []

    asyncio.run(_run())


def test_delete_removes_record(memory_store, memory_slots):
    async def _run():
        service = _service(memory_store, memory_slots)
        store_id = await service.add({"code": "1"})
        assert await service.delete(store_id) is True
        assert await service.list() == []

    asyncio.run(_run())


def test_migrate_empty_cache_makes_no_store_calls(memory_store, memory_slots):
    async def _run():
        service = _service(memory_store, memory_slots)
        result = await service.migrate()
        assert (result.migratedCount, result.totalCount) == (0, 0)
        assert memory_store.calls == []

    asyncio.run(_run())


def test_migrate_single_record(memory_store, memory_slots):
    async def _run():
        service = _service(memory_store, memory_slots, cached=[{"code": "1", "name": "X", "department": "CS"}])
        result = await service.migrate()
        assert (result.migratedCount, result.totalCount) == (1, 1)

        [record] = await service.list()
        assert record.code == "1"
        assert record.fromLocalCache is True

    asyncio.run(_run())


def test_migrated_non_string_fields_still_list(memory_store, memory_slots):
    cached = [{"code": 1, "name": "X", "grade": True, "department": ["Math"], "year": 2019, "status": None}]

    async def _run():
        service = _service(memory_store, memory_slots, cached=cached)
        result = await service.migrate()
        assert (result.migratedCount, result.totalCount) == (1, 1)

        [record] = await service.list()
        assert record.code == "1"
        assert record.grade == "True"
        assert record.department == "['Math']"
        assert record.year == 2019
        assert record.status_label == "Under Review"
        assert summarize([record]) == {"total": 1, "approved": 0, "underReview": 1}

    asyncio.run(_run())


def test_unreadable_document_is_a_read_error(memory_store, memory_slots):
    memory_store.documents["graduates"] = {"bad": {"code": "1", "createdAt": "not a timestamp"}}

    async def _run():
        service = _service(memory_store, memory_slots)
        with pytest.raises(StoreReadError):
            await service.list()

    asyncio.run(_run())


def test_migrate_keeps_cache_order_and_does_not_deduplicate(memory_store, memory_slots):
    cached = [{"code": "1", "name": "X"}, {"code": "2", "name": "Y"}, {"code": "3", "name": "Z"}]

    async def _run():
        service = _service(memory_store, memory_slots, cached=cached)
        await service.migrate()
        written = [f["code"] for f in memory_store.documents["graduates"].values()]
        assert written == ["1", "2", "3"]

        second = await service.migrate()
        assert (second.migratedCount, second.totalCount) == (3, 3)

        counts = Counter(r.code for r in await service.list())
        assert counts == {"1": 2, "2": 2, "3": 2}
        assert len({r.storeId for r in await service.list()}) == 6

    asyncio.run(_run())


def test_migrate_stops_at_first_failure_and_keeps_written_records(make_store, memory_slots):
    cached = [{"code": str(i)} for i in range(1, 5)]
    store = make_store(fail_on_create=3)

    async def _run():
        service = _service(store, memory_slots, cached=cached)
        with pytest.raises(MigrationError) as exc:
            await service.migrate()

        assert exc.value.migrated_count == 2
        assert exc.value.total_count == 4
        assert isinstance(exc.value, StoreWriteError)
        assert [f["code"] for f in store.documents["graduates"].values()] == ["1", "2"]
        # the loop aborted: no create attempted after the failing one
        assert store.calls.count("create") == 3

    asyncio.run(_run())


def test_create_initial_data_writes_cache_then_store(memory_store, memory_slots):
    async def _run():
        service = _service(memory_store, memory_slots, cached=[{"code": "old"}])
        await service.create_initial_data()

        cached = json.loads(memory_slots.items["collegeGraduates"])
        assert [r["code"] for r in cached] == ["20231001", "20231002"]

        records = await service.list()
        assert {r.code for r in records} == {"20231001", "20231002"}
        assert {r.status for r in records} == {"Approved", "Under Review"}
        assert not any(r.fromLocalCache for r in records)
        assert summarize(records) == {"total": 2, "approved": 1, "underReview": 1}

    asyncio.run(_run())


def test_create_initial_data_store_failure_propagates(make_store, memory_slots):
    store = make_store(fail_on_create=2)

    async def _run():
        service = _service(store, memory_slots)
        with pytest.raises(StoreWriteError):
            await service.create_initial_data()
        assert len(store.documents["graduates"]) == 1
        # cache was written before the store calls
        assert len(json.loads(memory_slots.items["collegeGraduates"])) == len(INITIAL_DATA)

    asyncio.run(_run())


def test_status_other_than_approved_counts_as_under_review():
    records = [
        GraduateRecord(storeId="a", status="Approved"),
        GraduateRecord(storeId="b"),
        GraduateRecord(storeId="c", status="approved"),
        GraduateRecord(storeId="d", status=None),
        GraduateRecord(storeId="e", status="Under Review"),
    ]
    assert [r.status_label for r in records] == ["Approved", "Under Review", "Under Review", "Under Review", "Under Review"]
    assert summarize(records) == {"total": 5, "approved": 1, "underReview": 4}
