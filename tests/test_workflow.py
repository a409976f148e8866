import asyncio
from datetime import timedelta
from decimal import Decimal

import pytest

from core.data import RecordNotFoundError, RecordWriteService, WriteResult
from use_cases.refund_approval.domain import DecisionRule, Outcome
from use_cases.refund_approval.session import RefundFlowStep
from use_cases.refund_approval.workflow import (
    UPDATE_FAILED,
    UPDATE_SUCCESS,
    AttemptStatus,
    NoDecisionError,
    RefundApprovalWorkflow,
    RefundForm,
)

from conftest import NOW


APPROVABLE = RefundForm(
    shortlists_requested=1,
    total_sum_requested=Decimal("50"),
    shortlist_count=20,
    refund_notes="Unused shortlists",
)


class FlakyWriter(RecordWriteService):
    """Fails the first `failures` writes, then delegates."""

    def __init__(self, inner, failures=1):
        self.inner = inner
        self.failures = failures
        self.calls = 0

    def update(self, patch):
        self.calls += 1
        if self.calls <= self.failures:
            return WriteResult.failure(patch.record_id, "store unavailable")
        return self.inner.update(patch)


class RaisingWriter(RecordWriteService):
    def update(self, patch):
        raise ConnectionError("connection reset")


def test_load_prefills_from_account(workflow):
    session = workflow.load("CASE-5003")

    assert session.account_id == "ACC-1003"
    assert session.prior_approved_refund_count == 3
    assert session.first_activity_date == (NOW - timedelta(days=400)).date()
    assert session.flow_step == RefundFlowStep.NOT_STARTED


def test_load_reports_pending_case(workflow, store):
    store.mark_pending("CASE-5001")
    session = workflow.load("CASE-5001")
    assert session.flow_step == RefundFlowStep.RECORDS_PENDING


def test_compute_defers_while_account_is_pending(workflow, store):
    store.mark_pending("ACC-1001")
    attempt = workflow.compute_decision("CASE-5001", APPROVABLE)

    assert attempt.status == AttemptStatus.PENDING
    assert attempt.decision is None
    assert attempt.missing_records == ["account"]

    store.mark_loaded("ACC-1001")
    attempt = workflow.compute_decision("CASE-5001", APPROVABLE)
    assert attempt.status == AttemptStatus.DECIDED


def test_compute_flags_invalid_fields(workflow):
    attempt = workflow.compute_decision("CASE-5004", RefundForm())
    session = workflow.sessions.get("CASE-5004")

    assert attempt.status == AttemptStatus.INVALID
    assert attempt.validation.fields == {
        "shortlists_requested",
        "total_sum_requested",
        "shortlist_count",
        "first_activity_date",
    }
    assert session.flow_step == RefundFlowStep.INPUT_INVALID
    assert session.has_error("first_activity_date")
    assert session.last_decision is None


def test_account_supplies_first_activity_date(workflow):
    attempt = workflow.compute_decision("CASE-5001", RefundForm(total_sum_requested=Decimal("50")))
    assert attempt.validation.fields == {"shortlists_requested", "shortlist_count"}


def test_form_first_activity_date_wins(workflow):
    form = RefundForm(
        shortlists_requested=1,
        total_sum_requested=Decimal("61"),
        shortlist_count=20,
        first_activity_date=(NOW - timedelta(days=10)).date(),
    )
    attempt = workflow.compute_decision("CASE-5001", form)

    assert attempt.decision.outcome == Outcome.HOLD_AND_CALL
    assert attempt.decision.rule == DecisionRule.INEXPERIENCED_OVER_FEE


def test_prior_refunds_come_from_account(workflow):
    form = RefundForm(shortlists_requested=1, total_sum_requested=Decimal("60"), shortlist_count=10)
    attempt = workflow.compute_decision("CASE-5003", form)

    assert attempt.decision.ratio == Decimal("0.30")
    assert attempt.decision.rule == DecisionRule.EXPERIENCED_RATIO_HOLD


def test_valid_input_after_errors_clears_flags(workflow):
    workflow.compute_decision("CASE-5001", RefundForm())
    attempt = workflow.compute_decision("CASE-5001", APPROVABLE)
    session = workflow.sessions.get("CASE-5001")

    assert attempt.status == AttemptStatus.DECIDED
    assert session.field_errors == {}
    assert session.show_result


def test_confirm_persists_decision(workflow, store):
    workflow.compute_decision("CASE-5001", APPROVABLE)
    notification = asyncio.run(workflow.confirm_and_persist("CASE-5001"))

    assert notification == UPDATE_SUCCESS
    case = store.fetch("CASE-5001")
    assert case["refund_decision_outcome"] == "Approved"
    assert case["refund_decision_reason"] == "Experienced TP within params"
    assert case["type"] == "Refund Request"
    assert case["amount_refunded"] == Decimal("50")
    assert case["refund_approved"] is True
    assert case["refund_request_notes"] == "Unused shortlists"
    assert case["refunds_approved"] == 1

    session = workflow.sessions.get("CASE-5001")
    assert session.flow_step == RefundFlowStep.CONFIRMED
    assert session.last_decision is None


def test_confirm_invalidates_cached_case(workflow, cached_cases):
    workflow.compute_decision("CASE-5001", APPROVABLE)
    assert cached_cases.fetch("CASE-5001")["refund_decision_outcome"] is None

    asyncio.run(workflow.confirm_and_persist("CASE-5001"))
    assert cached_cases.fetch("CASE-5001")["refund_decision_outcome"] == "Approved"


def test_confirm_without_decision_raises(workflow):
    with pytest.raises(NoDecisionError):
        asyncio.run(workflow.confirm_and_persist("CASE-5001"))

    workflow.compute_decision("CASE-5001", RefundForm())
    with pytest.raises(NoDecisionError):
        asyncio.run(workflow.confirm_and_persist("CASE-5001"))


def test_failed_write_keeps_decision_for_retry(store, cached_cases):
    writer = FlakyWriter(store)
    workflow = RefundApprovalWorkflow(cases=cached_cases, accounts=store, writer=writer, clock=lambda: NOW)
    workflow.compute_decision("CASE-5001", APPROVABLE)

    notification = asyncio.run(workflow.confirm_and_persist("CASE-5001"))
    session = workflow.sessions.get("CASE-5001")

    assert notification == UPDATE_FAILED
    assert session.flow_step == RefundFlowStep.WRITE_FAILED
    assert session.last_write_error == "store unavailable"
    assert session.last_decision is not None
    assert store.fetch("CASE-5001")["refund_decision_outcome"] is None

    notification = asyncio.run(workflow.confirm_and_persist("CASE-5001"))
    assert notification == UPDATE_SUCCESS
    assert writer.calls == 2
    assert store.fetch("CASE-5001")["refund_decision_outcome"] == "Approved"


def test_raising_writer_reports_failure(store):
    workflow = RefundApprovalWorkflow(cases=store, accounts=store, writer=RaisingWriter(), clock=lambda: NOW)
    workflow.compute_decision("CASE-5001", APPROVABLE)

    notification = asyncio.run(workflow.confirm_and_persist("CASE-5001"))

    assert notification.is_error
    assert notification.message == "An error occurred while updating the record"
    assert workflow.sessions.get("CASE-5001").last_write_error == "connection reset"


def test_case_without_account_has_no_prior_refunds(store):
    store.add({"id": "CASE-6000", "account_id": None})
    workflow = RefundApprovalWorkflow(cases=store, accounts=store, writer=store, clock=lambda: NOW)
    form = RefundForm(
        shortlists_requested=1,
        total_sum_requested=Decimal("20"),
        shortlist_count=5,
        first_activity_date=(NOW - timedelta(days=30)).date(),
    )
    attempt = workflow.compute_decision("CASE-6000", form)

    assert attempt.decision.outcome == Outcome.APPROVED
    assert attempt.decision.ratio == Decimal("0")


def test_session_error_flags_clear_per_field(workflow):
    workflow.compute_decision("CASE-5004", RefundForm())
    session = workflow.sessions.get("CASE-5004")

    session.clear_error("shortlist_count")
    assert not session.has_error("shortlist_count")
    assert session.has_error("shortlists_requested")

    data = session.to_dict()
    assert data["record_id"] == "CASE-5004"
    assert data["flow_step"] == "input_invalid"
    assert "shortlist_count" not in data["field_errors"]


def test_cleared_session_starts_over(workflow):
    workflow.compute_decision("CASE-5001", APPROVABLE)
    workflow.sessions.clear("CASE-5001")

    assert workflow.sessions.get("CASE-5001") is None
    with pytest.raises(NoDecisionError):
        asyncio.run(workflow.confirm_and_persist("CASE-5001"))


def test_rejected_resubmit_cannot_be_confirmed(workflow, store):
    workflow.compute_decision("CASE-5001", APPROVABLE)
    attempt = workflow.compute_decision(
        "CASE-5001",
        RefundForm(shortlists_requested=1, total_sum_requested=Decimal("0"), shortlist_count=20),
    )
    assert attempt.status == AttemptStatus.INVALID

    with pytest.raises(NoDecisionError):
        asyncio.run(workflow.confirm_and_persist("CASE-5001"))

    case = store.fetch("CASE-5001")
    assert case["refund_decision_outcome"] is None
    assert case["amount_refunded"] == 0


def test_pending_resubmit_cannot_be_confirmed(workflow, store):
    workflow.compute_decision("CASE-5001", APPROVABLE)
    store.mark_pending("ACC-1001")
    assert workflow.compute_decision("CASE-5001", APPROVABLE).status == AttemptStatus.PENDING

    with pytest.raises(NoDecisionError):
        asyncio.run(workflow.confirm_and_persist("CASE-5001"))
    assert store.fetch("CASE-5001")["refund_decision_outcome"] is None


def test_confirmed_decision_is_not_written_twice(workflow):
    workflow.compute_decision("CASE-5001", APPROVABLE)
    asyncio.run(workflow.confirm_and_persist("CASE-5001"))

    with pytest.raises(NoDecisionError):
        asyncio.run(workflow.confirm_and_persist("CASE-5001"))


def test_unknown_case_is_not_found(workflow):
    attempt = workflow.compute_decision("NO-SUCH-CASE", APPROVABLE)

    assert attempt.status == AttemptStatus.NOT_FOUND
    assert attempt.missing_records == ["case"]
    assert workflow.sessions.get("NO-SUCH-CASE") is None

    with pytest.raises(RecordNotFoundError):
        workflow.load("NO-SUCH-CASE")
    assert workflow.sessions.get("NO-SUCH-CASE") is None


def test_case_with_unknown_account_is_not_found(store, workflow):
    store.add({"id": "CASE-6001", "account_id": "ACC-GONE"})
    attempt = workflow.compute_decision("CASE-6001", APPROVABLE)

    assert attempt.status == AttemptStatus.NOT_FOUND
    assert attempt.missing_records == ["account"]


def test_session_date_follows_the_decided_request(workflow):
    typed = (NOW - timedelta(days=10)).date()
    workflow.compute_decision("CASE-5001", RefundForm(
        shortlists_requested=1,
        total_sum_requested=Decimal("50"),
        shortlist_count=20,
        first_activity_date=typed,
    ))
    session = workflow.sessions.get("CASE-5001")
    assert session.first_activity_date == typed

    attempt = workflow.compute_decision("CASE-5001", APPROVABLE)
    account_date = (NOW - timedelta(days=200)).date()

    assert attempt.decision.rule == DecisionRule.EXPERIENCED_WITHIN_PARAMS
    assert session.first_activity_date == account_date
    assert session.last_request.first_activity_date == account_date
