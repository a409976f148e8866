import pytest

from core.data import (
    CachingRecordReader,
    RecordNotFoundError,
    RecordPatch,
    RecordReadService,
    select_fields,
)
from use_cases.refund_approval.local_store import InMemoryRecordService


class CountingReader(RecordReadService):
    def __init__(self, records):
        self.records = records
        self.calls = 0

    def fetch(self, record_id, fields=None):
        self.calls += 1
        return select_fields(self.records.get(record_id), fields)


def test_select_fields_keeps_id():
    record = {"id": "A", "name": "x", "other": 1}
    assert select_fields(record, ["name"]) == {"id": "A", "name": "x"}
    assert select_fields(record, None) is record
    assert select_fields(None, ["name"]) is None


def test_caching_reader_serves_repeat_reads_from_cache():
    inner = CountingReader({"A": {"id": "A", "name": "x", "other": 1}})
    reader = CachingRecordReader(inner)

    assert reader.fetch("A") == {"id": "A", "name": "x", "other": 1}
    assert reader.fetch("A", ["name"]) == {"id": "A", "name": "x"}
    assert inner.calls == 1


def test_caching_reader_invalidate_forces_refetch():
    inner = CountingReader({"A": {"id": "A"}, "B": {"id": "B"}})
    reader = CachingRecordReader(inner)
    reader.fetch("A")
    reader.fetch("B")

    reader.invalidate("A")
    reader.fetch("A")
    reader.fetch("B")
    assert inner.calls == 3

    reader.invalidate()
    reader.fetch("A")
    reader.fetch("B")
    assert inner.calls == 5


def test_caching_reader_does_not_cache_missing_records():
    inner = CountingReader({})
    reader = CachingRecordReader(inner)

    assert reader.fetch("A") is None
    inner.records["A"] = {"id": "A"}
    assert reader.fetch("A") == {"id": "A"}
    assert inner.calls == 2


def test_caching_reader_expires_entries():
    inner = CountingReader({"A": {"id": "A"}})
    reader = CachingRecordReader(inner, ttl_seconds=0)
    reader.fetch("A")
    reader.fetch("A")
    assert inner.calls == 2


def test_in_memory_store_pending_records():
    store = InMemoryRecordService(records=[{"id": "A", "name": "x"}])
    store.mark_pending("A")
    assert store.fetch("A") is None

    store.mark_loaded("A")
    assert store.fetch("A") == {"id": "A", "name": "x"}


def test_in_memory_store_returns_copies():
    store = InMemoryRecordService(records=[{"id": "A", "tags": ["x"]}])
    store.fetch("A")["tags"].append("y")
    assert store.fetch("A") == {"id": "A", "tags": ["x"]}


def test_in_memory_store_update_merges_fields():
    store = InMemoryRecordService(records=[{"id": "A", "name": "x", "count": 0}])
    result = store.update(RecordPatch(record_id="A", fields={"count": 2}))

    assert result.success
    assert store.fetch("A") == {"id": "A", "name": "x", "count": 2}


def test_in_memory_store_update_missing_record_fails():
    store = InMemoryRecordService()
    result = store.update(RecordPatch(record_id="missing", fields={"count": 2}))

    assert not result.success
    assert result.record_id == "missing"
    assert result.reason == "record not found"


def test_sample_data_links_every_case_to_an_account():
    store = InMemoryRecordService.with_sample_data()
    for case_id in ("CASE-5001", "CASE-5002", "CASE-5003", "CASE-5004"):
        case = store.fetch(case_id)
        assert store.fetch(case["account_id"]) is not None


def test_in_memory_store_unknown_record_raises():
    store = InMemoryRecordService()
    with pytest.raises(RecordNotFoundError) as excinfo:
        store.fetch("missing")
    assert excinfo.value.record_id == "missing"


def test_caching_reader_passes_through_missing_records():
    store = InMemoryRecordService(records=[{"id": "A"}])
    reader = CachingRecordReader(store)

    with pytest.raises(RecordNotFoundError):
        reader.fetch("B")

    store.add({"id": "B"})
    assert reader.fetch("B") == {"id": "B"}
