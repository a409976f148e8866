"""
Core Framework for Refund Approval Use Cases.

This module provides the extensible base classes and interfaces
that all use cases should implement. The layered architecture ensures:

1. Domain Layer - Pure business rules, no I/O
2. Data Layer - Record read/write services for data access
3. Presentation Layer - View and notification composition
4. Session Layer - Caller-owned view-model state

Each use case follows this pattern for consistency and reusability.
"""

from .domain import DomainService, PolicyEngine, Validator, ValidationError, ValidationResult
from .data import (
    CachingRecordReader,
    RecordNotFoundError,
    RecordPatch,
    RecordReadService,
    RecordWriteService,
    WriteResult,
)
from .presentation import Notification, NotificationVariant, ViewComposer, ViewTheme
from .session import SessionManager, SessionContext

__all__ = [
    # Domain
    "DomainService",
    "PolicyEngine",
    "Validator",
    "ValidationError",
    "ValidationResult",
    # Data
    "CachingRecordReader",
    "RecordNotFoundError",
    "RecordPatch",
    "RecordReadService",
    "RecordWriteService",
    "WriteResult",
    # Presentation
    "Notification",
    "NotificationVariant",
    "ViewComposer",
    "ViewTheme",
    # Session
    "SessionManager",
    "SessionContext",
]
