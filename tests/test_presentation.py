from decimal import Decimal

from core.presentation import TextFormatter
from use_cases.refund_approval.domain import RefundRequestInput
from use_cases.refund_approval.presentation import RefundViewComposer
from use_cases.refund_approval.workflow import UPDATE_FAILED, RefundForm

from conftest import NOW


def test_text_formatter():
    assert TextFormatter.currency(Decimal("1234.5")) == "£1,234.50"
    assert TextFormatter.number(Decimal("0.30")) == "0.3"
    assert TextFormatter.number(Decimal("60.00")) == "60"
    assert TextFormatter.number(Decimal("Infinity")) == "Infinity"
    assert TextFormatter.date(None) == ""


def test_compose_held_decision(engine):
    request = RefundRequestInput(
        shortlists_requested=1,
        total_sum_requested=Decimal("60"),
        shortlist_count=10,
        first_activity_date=NOW.date().replace(year=2024),
        prior_approved_refund_count=3,
    )
    view = RefundViewComposer().compose_decision(engine.evaluate(request, now=NOW))

    assert view["outcome"] == "Hold & Call"
    assert view["style"] == "hold"
    assert view["style_class"] == "hold-message"
    assert view["ratio"] == "0.3"
    assert view["approved_amount"] == "0"
    assert view["approved_amount_display"] == "£0.00"
    assert view["outcome_reason"] == "Experienced TP ratio over lower limit"


def test_compose_form_hides_result_until_decided(workflow):
    composer = RefundViewComposer()
    view = composer.compose_form(workflow.load("CASE-5002"))
    assert view["result"] is None
    assert view["errors"] == {}

    workflow.compute_decision("CASE-5002", RefundForm())
    view = composer.compose_form(workflow.sessions.get("CASE-5002"))
    assert view["flow_step"] == "input_invalid"
    assert view["errors"]["shortlist_count"] == "Shortlist count is required"


def test_compose_error_notification():
    view = RefundViewComposer().compose_notification(UPDATE_FAILED)
    assert view["notification"]["variant"] == "error"
    assert view["icon"] == "❌"
