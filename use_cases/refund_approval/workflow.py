"""
Refund Approval Workflow.

Wires the record services, the decision engine and the session together
as a two-phase operation:

1. compute_decision - read the case and account, validate, decide (no writes)
2. confirm_and_persist - hand the case patch to the write service

Cancelling is simply never calling the second phase.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from core.data import RecordNotFoundError, RecordReadService, RecordWriteService, WriteResult
from core.domain import ValidationResult, parse_date
from core.presentation import Notification, NotificationVariant
from core.session import SessionManager

from .domain.services import (
    RefundDecision,
    RefundDecisionEngine,
    RefundRequestInput,
)
from .fields import (
    ACCOUNT_APPROVED_AT,
    ACCOUNT_FIELDS,
    ACCOUNT_REFUNDS_APPROVED_COUNT,
    CASE_ACCOUNT_ID,
    CASE_FIELDS,
    DEFAULT_CASE_TYPE,
)
from .session import RefundFlowStep, RefundSessionContext

logger = logging.getLogger(__name__)


UPDATE_SUCCESS = Notification(
    title="Success",
    message="Record updated successfully",
    variant=NotificationVariant.SUCCESS,
)
UPDATE_FAILED = Notification(
    title="Error",
    message="An error occurred while updating the record",
    variant=NotificationVariant.ERROR,
)

CONFIRMABLE_STEPS = (RefundFlowStep.DECIDED, RefundFlowStep.WRITE_FAILED)


class NoDecisionError(RuntimeError):
    """Raised when confirming a case that has no computed decision."""


class AttemptStatus(Enum):
    PENDING = "pending"
    NOT_FOUND = "not_found"
    INVALID = "invalid"
    DECIDED = "decided"


@dataclass(frozen=True)
class RefundForm:
    """Values entered on the refund form."""
    shortlists_requested: int = 0
    total_sum_requested: Decimal = Decimal("0")
    shortlist_count: int = 0
    first_activity_date: Optional[date] = None
    refund_notes: str = ""


@dataclass(frozen=True)
class LoadedRecords:
    """The case and its account, either of which may still be loading."""
    case: Optional[Dict[str, Any]]
    account: Optional[Dict[str, Any]]

    @property
    def is_loaded(self) -> bool:
        return self.case is not None and self.account is not None

    @property
    def missing(self) -> List[str]:
        missing = []
        if self.case is None:
            missing.append("case")
        if self.account is None:
            missing.append("account")
        return missing


@dataclass(frozen=True)
class DecisionAttempt:
    """Outcome of the compute phase."""
    status: AttemptStatus
    decision: Optional[RefundDecision] = None
    validation: ValidationResult = field(default_factory=ValidationResult)
    missing_records: List[str] = field(default_factory=list)


class RefundApprovalWorkflow:
    """
    Runs the refund approval flow for cases.

    Holds no decision state itself; per-case state lives in the session
    manager so calculate and confirm can arrive as separate requests.
    """

    def __init__(
        self,
        cases: RecordReadService,
        accounts: RecordReadService,
        writer: RecordWriteService,
        engine: Optional[RefundDecisionEngine] = None,
        sessions: Optional[SessionManager] = None,
        case_type: str = DEFAULT_CASE_TYPE,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._cases = cases
        self._accounts = accounts
        self._writer = writer
        self.engine = engine or RefundDecisionEngine()
        self.sessions = sessions or SessionManager(RefundSessionContext)
        self.case_type = case_type
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    # =========================================================================
    # LOADING
    # =========================================================================

    def fetch_records(self, case_id: str) -> LoadedRecords:
        """
        Fetch the case and, once it is there, its account.

        Raises:
            RecordNotFoundError: If the case, or the account it names, does not exist
        """
        case = self._cases.fetch(case_id, CASE_FIELDS)
        if case is None:
            return LoadedRecords(case=None, account=None)

        account_id = case.get(CASE_ACCOUNT_ID)
        if not account_id:
            # a case without an account has no approvals on record
            return LoadedRecords(case=case, account={})
        return LoadedRecords(case=case, account=self._accounts.fetch(account_id, ACCOUNT_FIELDS))

    def load(self, case_id: str) -> RefundSessionContext:
        """
        Get the case's session, prefilled from the account when it is loaded.

        Raises:
            RecordNotFoundError: If the case or its account does not exist
        """
        records = self.fetch_records(case_id)
        session = self.sessions.get_or_create(case_id)
        if not records.is_loaded:
            logger.info(f"Records for {case_id} not loaded yet: {records.missing}")
            session.mark_pending()
            return session

        self._apply_account(session, records)
        return session

    def _apply_account(self, session: RefundSessionContext, records: LoadedRecords):
        account = records.account
        session.account_id = records.case.get(CASE_ACCOUNT_ID)
        session.prior_approved_refund_count = int(account.get(ACCOUNT_REFUNDS_APPROVED_COUNT) or 0)
        if session.first_activity_date is None:
            session.first_activity_date = parse_date(account.get(ACCOUNT_APPROVED_AT))

    def build_request_input(self, form: RefundForm, account: Dict[str, Any]) -> RefundRequestInput:
        """
        Turn form values and an account record into engine input.

        A first-activity date typed on the form wins over the account's.
        """
        first_activity = form.first_activity_date or parse_date(account.get(ACCOUNT_APPROVED_AT))
        return RefundRequestInput(
            shortlists_requested=form.shortlists_requested,
            total_sum_requested=Decimal(form.total_sum_requested),
            shortlist_count=form.shortlist_count,
            first_activity_date=first_activity,
            prior_approved_refund_count=int(account.get(ACCOUNT_REFUNDS_APPROVED_COUNT) or 0),
            refund_notes=form.refund_notes,
        )

    # =========================================================================
    # PHASE 1: COMPUTE
    # =========================================================================

    def compute_decision(self, case_id: str, form: RefundForm) -> DecisionAttempt:
        """
        Compute a decision for the case from the submitted form.

        Pending records defer the evaluation; invalid input flags the
        failing fields on the session. A case or account that does not
        exist is reported without creating a session. Nothing is written.
        """
        try:
            records = self.fetch_records(case_id)
        except RecordNotFoundError as e:
            kind = "case" if e.record_id == case_id else "account"
            logger.warning(f"Cannot decide refund for {case_id}: {kind} {e.record_id} does not exist")
            return DecisionAttempt(status=AttemptStatus.NOT_FOUND, missing_records=[kind])

        session = self.sessions.get_or_create(case_id)
        session.shortlists_requested = form.shortlists_requested
        session.total_sum_requested = Decimal(form.total_sum_requested)
        session.shortlist_count = form.shortlist_count
        session.refund_notes = form.refund_notes
        session.first_activity_date = form.first_activity_date

        if not records.is_loaded:
            logger.info(f"Deferring decision for {case_id}; waiting on {records.missing}")
            session.mark_pending()
            return DecisionAttempt(status=AttemptStatus.PENDING, missing_records=records.missing)
        self._apply_account(session, records)

        request = self.build_request_input(form, records.account)
        session.first_activity_date = request.first_activity_date
        validation = self.engine.validate(request)
        if not validation.is_valid:
            logger.info(f"Refund request for {case_id} invalid: {sorted(validation.fields)}")
            session.set_errors(validation)
            return DecisionAttempt(status=AttemptStatus.INVALID, validation=validation)

        decision = self.engine.evaluate(request, now=self._clock())
        session.record_decision(request, decision)
        logger.info(
            f"Refund decision for {case_id}: {decision.outcome.value} "
            f"({decision.rule.name}, experience={decision.experience.value}, ratio={decision.ratio})"
        )
        return DecisionAttempt(status=AttemptStatus.DECIDED, decision=decision, validation=validation)

    # =========================================================================
    # PHASE 2: CONFIRM
    # =========================================================================

    async def confirm_and_persist(self, case_id: str) -> Notification:
        """
        Persist the case's last decision.

        Returns:
            The notification to show the user

        Raises:
            NoDecisionError: If the latest calculation for this case did not
                produce a decision, or it has already been saved
        """
        session = self.sessions.get(case_id)
        if (
            session is None
            or session.last_decision is None
            or session.flow_step not in CONFIRMABLE_STEPS
        ):
            raise NoDecisionError(f"No refund decision to confirm for case {case_id}")

        patch = self.engine.build_patch(
            session.last_request,
            session.last_decision,
            record_id=case_id,
            case_type=self.case_type,
        )

        try:
            result = await asyncio.to_thread(self._writer.update, patch)
        except Exception as e:
            logger.error(f"Error updating record {case_id}: {e}", exc_info=True)
            result = WriteResult.failure(case_id, str(e))

        if not result.success:
            logger.error(f"Refund decision for {case_id} not saved: {result.reason}")
            session.mark_write_failed(result.reason)
            return UPDATE_FAILED

        self._cases.invalidate(case_id)
        session.mark_confirmed()
        logger.info(f"Refund decision for {case_id} saved")
        return UPDATE_SUCCESS
