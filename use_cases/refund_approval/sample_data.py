"""
Sample cases and accounts for the refund approval flow.

Dates are relative to "now" so the experience classification of each
account stays stable whenever the data is seeded.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional, Tuple

from .fields import (
    ACCOUNT_APPROVED_AT,
    ACCOUNT_REFUNDS_APPROVED_COUNT,
    CASE_ACCOUNT_ID,
    CASE_AMOUNT_REFUNDED,
    CASE_REFUND_APPROVED,
    CASE_REFUND_DECISION,
    CASE_REFUND_NOTES,
    CASE_REFUND_REASON,
    CASE_REFUNDS_APPROVED,
    CASE_REQUEST_TOTAL,
    CASE_SHORTLISTS_REQUESTED,
    CASE_TYPE,
)


def _account(account_id: str, approved_days_ago: Optional[int], refunds_approved: int,
             now: datetime) -> Dict[str, Any]:
    approved_at = None
    if approved_days_ago is not None:
        approved_at = (now - timedelta(days=approved_days_ago)).isoformat()
    return {
        "id": account_id,
        "name": f"Account {account_id[-4:]}",
        ACCOUNT_APPROVED_AT: approved_at,
        ACCOUNT_REFUNDS_APPROVED_COUNT: refunds_approved,
    }


def _case(case_id: str, account_id: Optional[str], subject: str) -> Dict[str, Any]:
    return {
        "id": case_id,
        "subject": subject,
        CASE_ACCOUNT_ID: account_id,
        CASE_TYPE: "Support",
        CASE_AMOUNT_REFUNDED: 0,
        CASE_REFUND_APPROVED: False,
        CASE_REFUND_DECISION: None,
        CASE_REFUND_REASON: None,
        CASE_SHORTLISTS_REQUESTED: 0,
        CASE_REQUEST_TOTAL: 0,
        CASE_REFUND_NOTES: "",
        CASE_REFUNDS_APPROVED: 0,
    }


def build_sample_records(now: Optional[datetime] = None) -> Tuple[List[Dict[str, Any]], List[Dict[str, Any]]]:
    """Return (cases, accounts) sample documents."""
    now = now or datetime.now(timezone.utc)

    accounts = [
        # established, clean refund history
        _account("ACC-1001", 200, 0, now),
        # joined ten days ago
        _account("ACC-1002", 10, 0, now),
        # long-standing, several refunds already approved
        _account("ACC-1003", 400, 3, now),
        # never approved
        _account("ACC-1004", None, 0, now),
    ]

    cases = [
        _case("CASE-5001", "ACC-1001", "Refund for unused shortlists"),
        _case("CASE-5002", "ACC-1002", "New member refund request"),
        _case("CASE-5003", "ACC-1003", "Repeat refund request"),
        _case("CASE-5004", "ACC-1004", "Refund before first approval"),
    ]

    return cases, accounts
