"""
Domain Services - Business Operations.

These services orchestrate business logic without I/O dependencies.
They use policies for decisions and work with pure data structures.
"""

from dataclasses import asdict, dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional, Union

from core.data import RecordPatch
from core.domain import DomainService, ValidationResult, whole_days_between

from ..fields import (
    CASE_AMOUNT_REFUNDED,
    CASE_REFUND_APPROVED,
    CASE_REFUND_DECISION,
    CASE_REFUND_NOTES,
    CASE_REFUND_REASON,
    CASE_REFUNDS_APPROVED,
    CASE_REQUEST_TOTAL,
    CASE_SHORTLISTS_REQUESTED,
    CASE_TYPE,
    DEFAULT_CASE_TYPE,
)
from .policies import (
    DEFAULT_POLICY,
    DISPLAY_MESSAGES,
    DISPLAY_STYLES,
    DecisionRule,
    DisplayStyle,
    Experience,
    ExperiencePolicy,
    Outcome,
    RefundDecisionPolicy,
    RefundPolicyConfig,
    RefundRequestValidator,
    compute_ratio,
)


@dataclass(frozen=True)
class RefundRequestInput:
    """The values one refund decision is computed from."""
    shortlists_requested: int
    total_sum_requested: Decimal
    shortlist_count: int
    first_activity_date: Optional[date] = None
    prior_approved_refund_count: int = 0
    refund_notes: Optional[str] = None


@dataclass(frozen=True)
class RefundDecision:
    """Result of evaluating a refund request."""
    outcome: Outcome
    display_message: str
    display_style: DisplayStyle
    reason: str
    rule: DecisionRule
    experience: Experience
    ratio: Decimal
    approved_amount: Decimal
    approved_shortlist_count: int

    @property
    def is_approved(self) -> bool:
        return self.outcome == Outcome.APPROVED

    @property
    def outcome_reason(self) -> str:
        """Short reason persisted with the case."""
        return self.rule.value


@dataclass(frozen=True)
class CasePatch(RecordPatch):
    """Fields written back to a case once a decision is confirmed."""

    @property
    def outcome(self) -> Optional[str]:
        return self.fields.get(CASE_REFUND_DECISION)


class RefundValidationError(ValueError):
    """Raised when a decision is requested for invalid input."""

    def __init__(self, result: ValidationResult):
        self.result = result
        super().__init__(f"Invalid refund request: {'; '.join(result.messages())}")


class RefundDecisionEngine(DomainService):
    """
    Decides refund requests against a RefundPolicyConfig.

    Stateless: every call works only on its arguments, so one engine can
    serve any number of concurrent evaluations.
    """

    def __init__(self, config: RefundPolicyConfig = DEFAULT_POLICY):
        self.config = config
        self.validator = RefundRequestValidator()
        self.experience_policy = ExperiencePolicy(config)
        self.decision_policy = RefundDecisionPolicy(config)

    def validate(self, request: RefundRequestInput) -> ValidationResult:
        """Check the required fields; returns every failure at once."""
        return ValidationResult(errors=self.validator.validate(asdict(request)))

    def classify_experience(
        self,
        first_activity_date: date,
        shortlist_count: int,
        now: Optional[Union[date, datetime]] = None,
    ) -> Experience:
        now = now or datetime.now(timezone.utc)
        return self.experience_policy.evaluate({
            "days_since_first_activity": whole_days_between(first_activity_date, now),
            "shortlist_count": shortlist_count,
        })

    def compute_ratio(self, prior_approved_refund_count: int, shortlist_count: int) -> Decimal:
        return compute_ratio(prior_approved_refund_count, shortlist_count)

    def decide(self, request: RefundRequestInput, experience: Experience, ratio: Decimal) -> RefundDecision:
        """
        Apply the decision table.

        Args:
            request: The validated request
            experience: Classification of the requesting account
            ratio: Rounded prior-refund ratio

        Returns:
            RefundDecision; approved amounts are zero unless approved
        """
        match = self.decision_policy.evaluate({
            "shortlists_requested": request.shortlists_requested,
            "total_sum_requested": request.total_sum_requested,
            "experience": experience,
            "ratio": ratio,
        })
        approved = match.outcome == Outcome.APPROVED

        return RefundDecision(
            outcome=match.outcome,
            display_message=DISPLAY_MESSAGES[match.outcome],
            display_style=DISPLAY_STYLES[match.outcome],
            reason=match.reason,
            rule=match.rule,
            experience=experience,
            ratio=ratio,
            approved_amount=Decimal(request.total_sum_requested) if approved else Decimal("0"),
            approved_shortlist_count=request.shortlists_requested if approved else 0,
        )

    def evaluate(
        self,
        request: RefundRequestInput,
        now: Optional[Union[date, datetime]] = None,
    ) -> RefundDecision:
        """
        Validate, classify, and decide in one call.

        Raises:
            RefundValidationError: If any required field is missing or zero
        """
        result = self.validate(request)
        if not result.is_valid:
            raise RefundValidationError(result)

        experience = self.classify_experience(
            request.first_activity_date, request.shortlist_count, now
        )
        ratio = self.compute_ratio(request.prior_approved_refund_count, request.shortlist_count)
        return self.decide(request, experience, ratio)

    def execute(self, request: RefundRequestInput, now: Optional[Union[date, datetime]] = None) -> RefundDecision:
        return self.evaluate(request, now)

    def build_patch(
        self,
        request: RefundRequestInput,
        decision: RefundDecision,
        record_id: Optional[str] = None,
        case_type: str = DEFAULT_CASE_TYPE,
    ) -> CasePatch:
        """Map a confirmed decision onto the case fields to persist."""
        return CasePatch(
            record_id=record_id,
            fields={
                CASE_REFUND_DECISION: decision.outcome.value,
                CASE_REFUND_REASON: decision.outcome_reason,
                CASE_TYPE: case_type,
                CASE_AMOUNT_REFUNDED: decision.approved_amount,
                CASE_REFUND_APPROVED: decision.is_approved,
                CASE_SHORTLISTS_REQUESTED: request.shortlists_requested,
                CASE_REQUEST_TOTAL: request.total_sum_requested,
                CASE_REFUND_NOTES: request.refund_notes or "",
                CASE_REFUNDS_APPROVED: decision.approved_shortlist_count,
            },
        )
