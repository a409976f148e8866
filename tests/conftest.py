from datetime import datetime, timezone

import pytest

from core.data import CachingRecordReader
from use_cases.refund_approval.domain import RefundDecisionEngine
from use_cases.refund_approval.local_store import InMemoryRecordService
from use_cases.refund_approval.sample_data import build_sample_records
from use_cases.refund_approval.workflow import RefundApprovalWorkflow


NOW = datetime(2026, 6, 1, tzinfo=timezone.utc)


@pytest.fixture
def engine():
    return RefundDecisionEngine()


@pytest.fixture
def store():
    cases, accounts = build_sample_records(now=NOW)
    return InMemoryRecordService(records=[*cases, *accounts])


@pytest.fixture
def cached_cases(store):
    return CachingRecordReader(store, ttl_seconds=300)


@pytest.fixture
def workflow(store, cached_cases):
    return RefundApprovalWorkflow(
        cases=cached_cases,
        accounts=store,
        writer=store,
        clock=lambda: NOW,
    )
