"""
Refund Approval Policies - Pure Business Rules.

These policies encapsulate the business rules for refund requests.
They have NO dependencies on databases or external services.
All data needed for evaluation is passed in as parameters.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, List, Optional

from core.domain import (
    PolicyEngine,
    Validator,
    ValidationError,
    plain_number,
)


# =============================================================================
# CONFIGURATION
# =============================================================================

@dataclass(frozen=True)
class RefundPolicyConfig:
    """
    Frozen policy parameters for the refund decision table.

    Tune policy by building a different config; the decision logic
    never reads literals of its own.
    """
    ratio_lower: Decimal = Decimal("0.25")
    ratio_upper: Decimal = Decimal("0.40")
    max_fee: Decimal = Decimal("60")
    max_shortlists: int = 3
    experience_days: int = 100
    experience_year_days: int = 366
    experience_shortlists: int = 16
    currency_symbol: str = "£"

    def fee_label(self) -> str:
        return f"{self.currency_symbol}{plain_number(self.max_fee)}"


DEFAULT_POLICY = RefundPolicyConfig()

RATIO_PLACES = Decimal("0.01")


# =============================================================================
# DECISION VOCABULARY
# =============================================================================

class Outcome(Enum):
    """Refund decision outcome, valued with the text persisted on the case."""
    APPROVED = "Approved"
    HOLD_AND_CALL = "Hold & Call"
    DENIED = "Denied"


class DisplayStyle(Enum):
    """Presentational style of a decision, 1:1 with Outcome."""
    SUCCESS = "success"
    HOLD = "hold"
    ERROR = "error"


class Experience(Enum):
    EXPERIENCED = "experienced"
    INEXPERIENCED = "inexperienced"


class DecisionRule(Enum):
    """Rows of the decision table, valued with the short persisted reason."""
    SHORTLISTS_OVER_LIMIT = "Number of shortlists requested over limit"
    INEXPERIENCED_WITHIN_PARAMS = "Inexperienced TP within params"
    INEXPERIENCED_OVER_FEE = "Inexperienced TP refund amount over limit"
    EXPERIENCED_WITHIN_PARAMS = "Experienced TP within params"
    EXPERIENCED_RATIO_HOLD = "Experienced TP ratio over lower limit"
    EXPERIENCED_OVER_FEE = "Experienced TP refund amount over limit"
    EXPERIENCED_RATIO_DENIED = "Experienced TP ratio over upper limit"


DISPLAY_MESSAGES = {
    Outcome.APPROVED: "Refund Approved",
    Outcome.HOLD_AND_CALL: "Hold & Call",
    Outcome.DENIED: "Denied",
}

DISPLAY_STYLES = {
    Outcome.APPROVED: DisplayStyle.SUCCESS,
    Outcome.HOLD_AND_CALL: DisplayStyle.HOLD,
    Outcome.DENIED: DisplayStyle.ERROR,
}


@dataclass(frozen=True)
class RuleMatch:
    """The decision-table row that fired, with its explanation."""
    rule: DecisionRule
    outcome: Outcome
    reason: str


# =============================================================================
# POLICIES
# =============================================================================

class ExperiencePolicy(PolicyEngine):
    """
    Classifies the account behind a request as experienced or not.

    Context required:
        - days_since_first_activity: whole days, may be negative
        - shortlist_count: shortlists ever sent by the requester
    """

    def __init__(self, config: RefundPolicyConfig = DEFAULT_POLICY):
        self.config = config

    def evaluate(self, context: Dict[str, Any]) -> Experience:
        days = context["days_since_first_activity"]
        shortlist_count = context["shortlist_count"]
        cfg = self.config

        # a future first-activity date yields negative days and lands here too
        if days < cfg.experience_days:
            return Experience.INEXPERIENCED
        if days < cfg.experience_year_days and shortlist_count < cfg.experience_shortlists:
            return Experience.INEXPERIENCED
        return Experience.EXPERIENCED


def compute_ratio(prior_approved_refund_count: int, shortlist_count: int) -> Decimal:
    """
    Prior approved refunds per shortlist, rounded half-up to 2 places.

    With approvals on record but no shortlists the ratio is infinite,
    which no ratio cap admits.
    """
    if prior_approved_refund_count == 0:
        return Decimal("0")
    if shortlist_count == 0:
        return Decimal("Infinity")
    ratio = Decimal(prior_approved_refund_count) / Decimal(shortlist_count)
    return ratio.quantize(RATIO_PLACES, rounding=ROUND_HALF_UP)


class RefundDecisionPolicy(PolicyEngine):
    """
    The refund decision table. First matching row wins.

    Context required:
        - shortlists_requested: int
        - total_sum_requested: Decimal
        - experience: Experience
        - ratio: Decimal
    """

    def __init__(self, config: RefundPolicyConfig = DEFAULT_POLICY):
        self.config = config

    def evaluate(self, context: Dict[str, Any]) -> RuleMatch:
        cfg = self.config
        total = Decimal(context["total_sum_requested"])
        ratio = context["ratio"]
        fee = cfg.fee_label()
        lower = plain_number(cfg.ratio_lower)
        upper = plain_number(cfg.ratio_upper)
        shown_ratio = plain_number(ratio)

        if context["shortlists_requested"] >= cfg.max_shortlists:
            return RuleMatch(
                rule=DecisionRule.SHORTLISTS_OVER_LIMIT,
                outcome=Outcome.HOLD_AND_CALL,
                reason=f"Requested {cfg.max_shortlists} or more refunds at once",
            )

        if context["experience"] == Experience.INEXPERIENCED:
            if total <= cfg.max_fee:
                return RuleMatch(
                    rule=DecisionRule.INEXPERIENCED_WITHIN_PARAMS,
                    outcome=Outcome.APPROVED,
                    reason=f"Inexperienced TP & total refund below {fee}.",
                )
            return RuleMatch(
                rule=DecisionRule.INEXPERIENCED_OVER_FEE,
                outcome=Outcome.HOLD_AND_CALL,
                reason=f"Inexperienced TP, total refund over {fee}.",
            )

        if total <= cfg.max_fee and ratio <= cfg.ratio_lower:
            return RuleMatch(
                rule=DecisionRule.EXPERIENCED_WITHIN_PARAMS,
                outcome=Outcome.APPROVED,
                reason=f"Experienced TP, total refund below {fee} & SL/Refund ratio {shown_ratio}.",
            )
        # must stay ahead of the over-fee row: both match at exactly max_fee
        if total <= cfg.max_fee and ratio <= cfg.ratio_upper:
            return RuleMatch(
                rule=DecisionRule.EXPERIENCED_RATIO_HOLD,
                outcome=Outcome.HOLD_AND_CALL,
                reason=f"Experienced TP, ratio over {lower}, but not over {upper}: {shown_ratio}",
            )
        if total >= cfg.max_fee and ratio <= cfg.ratio_upper:
            return RuleMatch(
                rule=DecisionRule.EXPERIENCED_OVER_FEE,
                outcome=Outcome.HOLD_AND_CALL,
                reason=f"Experienced TP, total refund over {fee} and ratio below {upper}: {shown_ratio}",
            )
        return RuleMatch(
            rule=DecisionRule.EXPERIENCED_RATIO_DENIED,
            outcome=Outcome.DENIED,
            reason=f"Experienced TP, ratio {shown_ratio}, over the limit of {upper}.",
        )


# =============================================================================
# VALIDATORS
# =============================================================================

class RefundRequestValidator(Validator):
    """
    Validates refund request input before a decision is computed.

    Every field is checked; one failure never hides another.
    """

    REQUIRED_FIELDS = [
        "shortlists_requested",
        "total_sum_requested",
        "shortlist_count",
        "first_activity_date",
    ]

    NON_NEGATIVE_FIELDS = [
        "shortlists_requested",
        "total_sum_requested",
        "shortlist_count",
        "prior_approved_refund_count",
    ]

    FIELD_LABELS = {
        "shortlists_requested": "Shortlists requested",
        "total_sum_requested": "Total sum requested",
        "shortlist_count": "Shortlist count",
        "first_activity_date": "First activity date",
        "prior_approved_refund_count": "Prior approved refund count",
    }

    def validate(self, data: Dict[str, Any]) -> List[ValidationError]:
        errors = []

        for field in self.REQUIRED_FIELDS:
            if not data.get(field):
                errors.append(ValidationError(
                    field=field,
                    message=f"{self.FIELD_LABELS[field]} is required",
                    code="required",
                ))

        for field in self.NON_NEGATIVE_FIELDS:
            value: Optional[Any] = data.get(field)
            if value is not None and value < 0:
                errors.append(ValidationError(
                    field=field,
                    message=f"{self.FIELD_LABELS[field]} cannot be negative",
                    code="min_value",
                ))

        return errors
