"""
Record field names for the refund approval flow.

Case and account documents share these names across every backend
(in-memory, Cosmos DB), so patches and reads never spell them inline.
"""

# Case fields
CASE_ACCOUNT_ID = "account_id"
CASE_TYPE = "type"
CASE_AMOUNT_REFUNDED = "amount_refunded"
CASE_REFUND_APPROVED = "refund_approved"
CASE_REFUND_DECISION = "refund_decision_outcome"
CASE_REFUND_REASON = "refund_decision_reason"
CASE_SHORTLISTS_REQUESTED = "refund_request_shortlists_requested"
CASE_REQUEST_TOTAL = "refund_request_total_amount"
CASE_REFUND_NOTES = "refund_request_notes"
CASE_REFUNDS_APPROVED = "refunds_approved"

CASE_FIELDS = [
    CASE_ACCOUNT_ID,
    CASE_TYPE,
    CASE_AMOUNT_REFUNDED,
    CASE_REFUND_APPROVED,
    CASE_REFUND_DECISION,
    CASE_REFUND_REASON,
    CASE_SHORTLISTS_REQUESTED,
    CASE_REQUEST_TOTAL,
    CASE_REFUND_NOTES,
    CASE_REFUNDS_APPROVED,
]

# Account fields
ACCOUNT_REFUNDS_APPROVED_COUNT = "total_refunds_approved"
ACCOUNT_APPROVED_AT = "approved_at"

ACCOUNT_FIELDS = [
    ACCOUNT_REFUNDS_APPROVED_COUNT,
    ACCOUNT_APPROVED_AT,
]

DEFAULT_CASE_TYPE = "Refund Request"
