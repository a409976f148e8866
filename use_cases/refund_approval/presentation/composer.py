"""
Refund Approval View Composer.

Transforms refund domain data into JSON-ready views.
All view building logic is centralized here for consistency.
"""

from typing import Any, Callable, Dict, Optional

from core.presentation import (
    Notification,
    TextFormatter,
    ViewComposer,
    ViewTheme,
)

from ..domain.services import RefundDecision
from ..session import RefundFlowStep, RefundSessionContext
from ..workflow import DecisionAttempt


class RefundViewComposer(ViewComposer):
    """
    View composer for the refund approval flow.

    Provides methods for building every view the front end renders.
    """

    def __init__(self, theme: Optional[ViewTheme] = None, currency_symbol: str = "£"):
        super().__init__(theme=theme)
        self.currency_symbol = currency_symbol

    def get_view_builders(self) -> Dict[str, Callable]:
        """Return mapping of view names to builder methods."""
        return {
            "decision": self.compose_decision,
            "form": self.compose_form,
            "attempt": self.compose_attempt,
            "notification": self.compose_notification,
        }

    # =========================================================================
    # DECISION
    # =========================================================================

    def compose_decision(self, decision: RefundDecision) -> Dict[str, Any]:
        """Result panel for a computed decision."""
        style = decision.display_style.value
        return {
            "outcome": decision.outcome.value,
            "message": decision.display_message,
            "style": style,
            "style_class": self.theme.get_style_class(style),
            "icon": self.theme.icon(style),
            "reason": decision.reason,
            "outcome_reason": decision.outcome_reason,
            "experience": decision.experience.value,
            "ratio": TextFormatter.number(decision.ratio),
            "approved_amount": TextFormatter.number(decision.approved_amount),
            "approved_amount_display": TextFormatter.currency(decision.approved_amount, self.currency_symbol),
            "approved_shortlist_count": decision.approved_shortlist_count,
        }

    # =========================================================================
    # FORM
    # =========================================================================

    def compose_form(self, session: RefundSessionContext) -> Dict[str, Any]:
        """The refund form with its current values and error flags."""
        view = {
            "case_id": session.record_id,
            "account_id": session.account_id,
            "flow_step": session.flow_step.value,
            "pending": session.flow_step == RefundFlowStep.RECORDS_PENDING,
            "values": {
                "shortlists_requested": session.shortlists_requested,
                "total_sum_requested": TextFormatter.number(session.total_sum_requested),
                "shortlist_count": session.shortlist_count,
                "first_activity_date": TextFormatter.date(session.first_activity_date),
                "prior_approved_refund_count": session.prior_approved_refund_count,
                "refund_notes": session.refund_notes,
            },
            "errors": dict(session.field_errors),
            "show_result": session.show_result,
            "result": None,
        }
        if session.show_result and session.last_decision is not None:
            view["result"] = self.compose_decision(session.last_decision)
        return view

    def compose_attempt(self, attempt: DecisionAttempt) -> Dict[str, Any]:
        """Response body for a calculate request."""
        view: Dict[str, Any] = {"status": attempt.status.value}
        if attempt.decision is not None:
            view["result"] = self.compose_decision(attempt.decision)
        if attempt.validation.errors:
            view["errors"] = {e.field: e.message for e in attempt.validation.errors}
        if attempt.missing_records:
            view["missing_records"] = list(attempt.missing_records)
        return view

    def compose_notification(self, notification: Notification) -> Dict[str, Any]:
        return {
            "notification": notification.to_dict(),
            "icon": self.theme.icon("success" if not notification.is_error else "error"),
        }
