"""
In-memory record service for the refund approval flow.

A local stand-in for Cosmos DB, used for development and tests.
Records can be marked pending to mimic a store that has not loaded them yet.
"""

import copy
import logging
from typing import Any, Dict, Iterable, Optional, Set

from core.data import (
    RecordNotFoundError,
    RecordPatch,
    RecordReadService,
    RecordWriteService,
    WriteResult,
    select_fields,
)

from .sample_data import build_sample_records

logger = logging.getLogger(__name__)


class InMemoryRecordService(RecordReadService, RecordWriteService):
    """A local mock of the record store."""

    def __init__(self, records: Optional[Iterable[Dict[str, Any]]] = None):
        self._records: Dict[str, Dict[str, Any]] = {}
        self._pending: Set[str] = set()
        for record in records or []:
            self.add(record)

    @classmethod
    def with_sample_data(cls) -> "InMemoryRecordService":
        cases, accounts = build_sample_records()
        return cls(records=[*cases, *accounts])

    def add(self, record: Dict[str, Any]):
        """Insert or replace a record."""
        self._records[record["id"]] = copy.deepcopy(record)

    def mark_pending(self, record_id: str):
        """Report the record as not yet loaded until mark_loaded is called."""
        self._pending.add(record_id)

    def mark_loaded(self, record_id: str):
        self._pending.discard(record_id)

    def fetch(self, record_id: str, fields: Optional[Iterable[str]] = None) -> Optional[Dict[str, Any]]:
        if record_id in self._pending:
            return None
        record = self._records.get(record_id)
        if record is None:
            raise RecordNotFoundError(record_id)
        return select_fields(copy.deepcopy(record), fields)

    def update(self, patch: RecordPatch) -> WriteResult:
        record = self._records.get(patch.record_id)
        if record is None:
            logger.warning(f"Update rejected, record {patch.record_id} not found")
            return WriteResult.failure(patch.record_id, "record not found")
        record.update(copy.deepcopy(patch.fields))
        logger.info(f"Updated record {patch.record_id}: {sorted(patch.fields)}")
        return WriteResult.ok(patch.record_id)
