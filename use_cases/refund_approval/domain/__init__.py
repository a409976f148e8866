"""
Refund Approval Domain Layer.

Contains pure business logic for the refund approval use case.
No database access or I/O - just business rules.
"""

from .policies import (
    DEFAULT_POLICY,
    DecisionRule,
    DisplayStyle,
    Experience,
    Outcome,
    RefundPolicyConfig,
    compute_ratio,
)
from .services import (
    CasePatch,
    RefundDecision,
    RefundDecisionEngine,
    RefundRequestInput,
    RefundValidationError,
)

__all__ = [
    "DEFAULT_POLICY",
    "DecisionRule",
    "DisplayStyle",
    "Experience",
    "Outcome",
    "RefundPolicyConfig",
    "compute_ratio",
    "CasePatch",
    "RefundDecision",
    "RefundDecisionEngine",
    "RefundRequestInput",
    "RefundValidationError",
]
