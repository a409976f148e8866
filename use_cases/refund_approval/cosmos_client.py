"""
Cosmos DB Record Service for the Refund Approval Use Case.

Provides record reads and partial updates for cases and accounts.
Uses DefaultAzureCredential for flexible authentication.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from azure.cosmos import CosmosClient
from azure.cosmos.exceptions import CosmosHttpResponseError, CosmosResourceNotFoundError
from azure.identity import DefaultAzureCredential

from core.data import (
    RecordNotFoundError,
    RecordPatch,
    RecordReadService,
    RecordWriteService,
    WriteResult,
    select_fields,
)

# Import shared configuration
from shared.cosmos_config import (
    COSMOS_ENDPOINT,
    DATABASE_NAME,
    REFUND_CONTAINER_NAMES,
)

logger = logging.getLogger(__name__)


def to_document_value(value: Any) -> Any:
    """Convert domain values into JSON-friendly document values."""
    if isinstance(value, Decimal):
        return float(value)
    return value


class CosmosRecordService(RecordReadService, RecordWriteService):
    """Reads and patches records in one Cosmos DB container."""

    def __init__(self, container: str, database=None):
        """
        Initialize the service for a logical container.

        Args:
            container: Logical container name ("cases", "accounts")
            database: Optional database client; defaults to the shared one
        """
        self.container_name = REFUND_CONTAINER_NAMES.get(container, container)
        self._database = database or get_cosmos_database()
        self._container = self._database.get_container_client(self.container_name)

    def fetch(self, record_id: str, fields: Optional[Iterable[str]] = None) -> Optional[Dict[str, Any]]:
        """Read a record; Cosmos has no pending state, so a miss means it does not exist."""
        try:
            item = self._container.read_item(item=record_id, partition_key=record_id)
        except CosmosResourceNotFoundError:
            logger.info(f"Record {record_id} not found in {self.container_name}")
            raise RecordNotFoundError(record_id)
        return select_fields(item, fields)

    def update(self, patch: RecordPatch) -> WriteResult:
        """Apply the patch as Cosmos "set" operations on the record."""
        operations: List[Dict[str, Any]] = [
            {"op": "set", "path": f"/{name}", "value": to_document_value(value)}
            for name, value in patch.fields.items()
        ]
        try:
            self._container.patch_item(
                item=patch.record_id,
                partition_key=patch.record_id,
                patch_operations=operations,
            )
        except CosmosResourceNotFoundError:
            logger.warning(f"Cannot update {patch.record_id}: not found in {self.container_name}")
            return WriteResult.failure(patch.record_id, "record not found")
        except CosmosHttpResponseError as e:
            logger.error(f"Error updating record {patch.record_id}: {e}", exc_info=True)
            return WriteResult.failure(patch.record_id, str(e))

        logger.info(f"Updated record {patch.record_id} in {self.container_name}")
        return WriteResult.ok(patch.record_id)


# Singleton database client
_database = None


def get_cosmos_database():
    """Get the shared Cosmos DB database client."""
    global _database
    if _database is None:
        logger.info("Initializing Refund Cosmos DB client...")
        credential = DefaultAzureCredential(
            exclude_interactive_browser_credential=False,
            exclude_shared_token_cache_credential=False,
        )
        client = CosmosClient(COSMOS_ENDPOINT, credential=credential)
        _database = client.get_database_client(DATABASE_NAME)
        logger.info(f"Connected to Cosmos DB: {DATABASE_NAME}")
    return _database
