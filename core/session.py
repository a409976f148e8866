"""
Session Management for Use Cases.

Provides per-record view-model state across requests.
This enables:
- Keeping the form values the user has entered
- Remembering the last computed result until it is confirmed
- Retrying a failed write without recomputing
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from datetime import datetime, timezone
import logging

logger = logging.getLogger(__name__)


@dataclass
class SessionContext:
    """
    Base session context for one record being worked on.

    Each use case should extend this with use-case-specific fields.
    The session context is:
    - Scoped to a single record
    - Owned by the caller; domain services never read it
    - Reset when the record is cleared from the manager
    """
    # Identity
    record_id: str = ""

    # Timestamps
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def _touch(self):
        """Update the timestamp."""
        self.updated_at = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "record_id": self.record_id,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


class SessionManager:
    """
    Manages session contexts across records.

    This is a simple in-memory manager. For production, extend
    this to persist sessions to a database.
    """

    def __init__(self, context_class: type = SessionContext):
        """
        Initialize the session manager.

        Args:
            context_class: The SessionContext class to use (can be a subclass)
        """
        self._sessions: Dict[str, SessionContext] = {}
        self._context_class = context_class

    def get_or_create(self, record_id: str) -> SessionContext:
        """
        Get an existing session or create a new one.

        Args:
            record_id: The record ID to get/create a session for

        Returns:
            The session context for this record
        """
        if record_id not in self._sessions:
            session = self._context_class()
            session.record_id = record_id
            self._sessions[record_id] = session
            logger.debug(f"Created new session for record {record_id}")
        return self._sessions[record_id]

    def get(self, record_id: str) -> Optional[SessionContext]:
        """Get an existing session, or None."""
        return self._sessions.get(record_id)

    def clear(self, record_id: str):
        """Clear a session."""
        if record_id in self._sessions:
            del self._sessions[record_id]
            logger.debug(f"Cleared session for record {record_id}")
