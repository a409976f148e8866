"""
Refund Approval Use Case.

Decides refund requests raised on customer cases and writes the
outcome back to the case record.

Components:
- RefundDecisionEngine: pure decision rules (domain/)
- RefundApprovalWorkflow: compute then confirm-and-persist
- InMemoryRecordService / CosmosRecordService: record backends
- RefundViewComposer: JSON views for the front end

Usage:
    from use_cases.refund_approval import build_workflow
    from config import settings

    workflow = build_workflow(settings)
    attempt = workflow.compute_decision("CASE-5001", RefundForm(...))
"""

from use_cases.refund_approval.domain import (
    RefundDecision,
    RefundDecisionEngine,
    RefundPolicyConfig,
    RefundRequestInput,
)
from use_cases.refund_approval.factory import build_workflow
from use_cases.refund_approval.local_store import InMemoryRecordService
from use_cases.refund_approval.presentation import RefundViewComposer
from use_cases.refund_approval.session import RefundSessionContext
from use_cases.refund_approval.workflow import (
    AttemptStatus,
    DecisionAttempt,
    NoDecisionError,
    RefundApprovalWorkflow,
    RefundForm,
)

__all__ = [
    # Domain
    "RefundDecision",
    "RefundDecisionEngine",
    "RefundPolicyConfig",
    "RefundRequestInput",
    # Workflow
    "AttemptStatus",
    "DecisionAttempt",
    "NoDecisionError",
    "RefundApprovalWorkflow",
    "RefundForm",
    "build_workflow",
    # Data
    "InMemoryRecordService",
    # Presentation
    "RefundViewComposer",
    "RefundSessionContext",
]
