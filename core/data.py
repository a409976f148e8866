"""
Data Layer Base Classes.

The data layer hides the record store behind two narrow services:
a read service that returns records as plain dicts, and a write service
that applies a field patch to one record.

Key principles:
- Services handle reads and writes only
- No business logic in the data layer
- A record that is not loaded yet is returned as None
- A record that does not exist raises RecordNotFoundError
- Support for different backends via dependency injection
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Tuple
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecordPatch:
    """A partial update: the fields to set on one record."""
    record_id: Optional[str]
    fields: Dict[str, Any] = field(default_factory=dict)

    def get(self, name: str, default: Any = None) -> Any:
        return self.fields.get(name, default)


@dataclass(frozen=True)
class WriteResult:
    """Outcome of a record update."""
    success: bool
    record_id: Optional[str] = None
    reason: Optional[str] = None

    @staticmethod
    def ok(record_id: str) -> "WriteResult":
        return WriteResult(success=True, record_id=record_id)

    @staticmethod
    def failure(record_id: Optional[str], reason: str) -> "WriteResult":
        return WriteResult(success=False, record_id=record_id, reason=reason)


class RecordNotFoundError(LookupError):
    """Raised by a read service when the record does not exist at all."""

    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Record {record_id} not found")


class RecordReadService(ABC):
    """
    Abstract base class for record reads.

    Example:
        class CosmosRecordService(RecordReadService):
            def fetch(self, record_id, fields=None):
                doc = self._container.read_item(record_id, record_id)
                return select_fields(doc, fields)
    """

    @abstractmethod
    def fetch(self, record_id: str, fields: Optional[Iterable[str]] = None) -> Optional[Dict[str, Any]]:
        """
        Fetch a record by its ID.

        Args:
            record_id: The record's unique identifier
            fields: Optional subset of fields to return ("id" is always kept)

        Returns:
            The record if it is loaded, None while it is still pending

        Raises:
            RecordNotFoundError: If no such record exists
        """
        pass

    def invalidate(self, record_id: Optional[str] = None):
        """Drop any cached copy so the next fetch re-reads. No-op when uncached."""
        pass


class RecordWriteService(ABC):
    """Abstract base class for record updates."""

    @abstractmethod
    def update(self, patch: RecordPatch) -> WriteResult:
        """
        Apply a partial update to a record.

        Implementations must not raise for store failures; they report
        them as WriteResult.failure and leave the record unmodified.
        """
        pass


def select_fields(record: Optional[Dict[str, Any]], fields: Optional[Iterable[str]]) -> Optional[Dict[str, Any]]:
    """Project a record down to the requested fields."""
    if record is None or fields is None:
        return record
    wanted = set(fields) | {"id"}
    return {k: v for k, v in record.items() if k in wanted}


class CachingRecordReader(RecordReadService):
    """
    A read service decorator that adds caching.

    Entries expire after the TTL and can be dropped per record, which is
    how callers force a re-fetch after writing to a record.
    """

    def __init__(self, inner: RecordReadService, ttl_seconds: int = 300):
        """
        Initialize with an inner service and cache TTL.

        Args:
            inner: The underlying read service to cache
            ttl_seconds: How long to cache records (default 5 minutes)
        """
        self._inner = inner
        self._ttl_seconds = ttl_seconds
        self._cache: Dict[str, Tuple[datetime, Dict[str, Any]]] = {}

    def _is_fresh(self, cached_at: datetime) -> bool:
        age = (datetime.now(timezone.utc) - cached_at).total_seconds()
        return age < self._ttl_seconds

    def fetch(self, record_id: str, fields: Optional[Iterable[str]] = None) -> Optional[Dict[str, Any]]:
        entry = self._cache.get(record_id)
        if entry is not None and self._is_fresh(entry[0]):
            return select_fields(entry[1], fields)

        try:
            record = self._inner.fetch(record_id)
        except RecordNotFoundError:
            self._cache.pop(record_id, None)
            raise
        # pending records are not cached so the next call retries
        if record is None:
            self._cache.pop(record_id, None)
            return None
        self._cache[record_id] = (datetime.now(timezone.utc), record)
        return select_fields(record, fields)

    def invalidate(self, record_id: Optional[str] = None):
        """Invalidate one record, or the whole cache when no ID is given."""
        if record_id is None:
            self._cache.clear()
        else:
            self._cache.pop(record_id, None)
        logger.debug(f"Invalidated record cache for {record_id or 'all records'}")
