"""
Refund Approval Session Context.

Extends the base SessionContext with the refund form's view-model:
the values entered, which fields are in error, and the last decision
awaiting confirmation.
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional

from core.domain import ValidationResult
from core.session import SessionContext

from .domain.services import RefundDecision, RefundRequestInput


class RefundFlowStep(Enum):
    """Steps in the refund approval flow."""
    NOT_STARTED = "not_started"
    RECORDS_PENDING = "records_pending"
    INPUT_INVALID = "input_invalid"
    DECIDED = "decided"
    WRITE_FAILED = "write_failed"
    CONFIRMED = "confirmed"


@dataclass
class RefundSessionContext(SessionContext):
    """
    Session context for one case's refund request.

    Tracks all the state needed between calculating and confirming.
    """

    # Form values
    shortlists_requested: int = 0
    total_sum_requested: Decimal = Decimal("0")
    shortlist_count: int = 0
    first_activity_date: Optional[date] = None
    refund_notes: str = ""

    # Loaded from the case's account
    account_id: Optional[str] = None
    prior_approved_refund_count: int = 0

    # Field name -> message, for fields that failed validation
    field_errors: Dict[str, str] = field(default_factory=dict)

    # Last computed result
    last_request: Optional[RefundRequestInput] = None
    last_decision: Optional[RefundDecision] = None
    show_result: bool = False
    last_write_error: Optional[str] = None

    flow_step: RefundFlowStep = RefundFlowStep.NOT_STARTED

    def has_error(self, field_name: str) -> bool:
        return field_name in self.field_errors

    def clear_error(self, field_name: str):
        """Forget a field's error once the user edits it."""
        self.field_errors.pop(field_name, None)
        self._touch()

    def _drop_decision(self):
        self.last_request = None
        self.last_decision = None
        self.last_write_error = None
        self.show_result = False

    def set_errors(self, result: ValidationResult):
        # a rejected resubmit withdraws the earlier decision from confirmation
        self.field_errors = {e.field: e.message for e in result.errors}
        self._drop_decision()
        self.flow_step = RefundFlowStep.INPUT_INVALID
        self._touch()

    def mark_pending(self):
        self._drop_decision()
        self.flow_step = RefundFlowStep.RECORDS_PENDING
        self._touch()

    def record_decision(self, request: RefundRequestInput, decision: RefundDecision):
        self.field_errors = {}
        self.last_request = request
        self.last_decision = decision
        self.last_write_error = None
        self.show_result = True
        self.flow_step = RefundFlowStep.DECIDED
        self._touch()

    def mark_write_failed(self, reason: Optional[str]):
        # decision is kept so the write can be retried as-is
        self.last_write_error = reason
        self.flow_step = RefundFlowStep.WRITE_FAILED
        self._touch()

    def mark_confirmed(self):
        self._drop_decision()
        self.flow_step = RefundFlowStep.CONFIRMED
        self._touch()

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({
            "flow_step": self.flow_step.value,
            "account_id": self.account_id,
            "field_errors": dict(self.field_errors),
            "show_result": self.show_result,
        })
        return data
