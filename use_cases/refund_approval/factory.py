"""
Builds the refund approval workflow from application settings.
"""

import logging
from typing import Tuple

from core.data import CachingRecordReader, RecordReadService, RecordWriteService

from .domain.policies import RefundPolicyConfig
from .domain.services import RefundDecisionEngine
from .local_store import InMemoryRecordService
from .workflow import RefundApprovalWorkflow

logger = logging.getLogger(__name__)


def build_policy_config(settings) -> RefundPolicyConfig:
    """Policy parameters from settings."""
    return RefundPolicyConfig(
        ratio_lower=settings.refund_ratio_lower,
        ratio_upper=settings.refund_ratio_upper,
        max_fee=settings.refund_max_fee,
        max_shortlists=settings.refund_max_shortlists,
        experience_days=settings.refund_experience_days,
        experience_year_days=settings.refund_experience_year_days,
        experience_shortlists=settings.refund_experience_shortlists,
        currency_symbol=settings.currency_symbol,
    )


def build_record_services(settings) -> Tuple[RecordReadService, RecordReadService, RecordWriteService]:
    """
    Build (case reader, account reader, case writer) for the configured backend.

    Readers are wrapped in a cache so confirmed writes can invalidate them.
    """
    backend = settings.data_backend.lower()
    if backend == "memory":
        store = InMemoryRecordService.with_sample_data()
        cases, accounts, writer = store, store, store
    elif backend == "cosmos":
        # imported lazily so the memory backend never needs Azure credentials
        from .cosmos_client import CosmosRecordService

        cases = CosmosRecordService("cases")
        accounts = CosmosRecordService("accounts")
        writer = cases
    else:
        raise ValueError(f"Unknown data backend: {settings.data_backend}")

    logger.info(f"Using '{backend}' record backend")
    ttl = settings.record_cache_ttl_seconds
    return CachingRecordReader(cases, ttl), CachingRecordReader(accounts, ttl), writer


def build_workflow(settings) -> RefundApprovalWorkflow:
    cases, accounts, writer = build_record_services(settings)
    return RefundApprovalWorkflow(
        cases=cases,
        accounts=accounts,
        writer=writer,
        engine=RefundDecisionEngine(build_policy_config(settings)),
        case_type=settings.case_type,
    )
