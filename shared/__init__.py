"""
Shared modules for the Refund Approval application.

This package contains shared configuration and utilities used across the application.
"""

from shared.cosmos_config import (
    COSMOS_ENDPOINT,
    DATABASE_NAME,
    REFUND_CONTAINERS,
    REFUND_CONTAINER_NAMES,
)

__all__ = [
    "COSMOS_ENDPOINT",
    "DATABASE_NAME",
    "REFUND_CONTAINERS",
    "REFUND_CONTAINER_NAMES",
]
