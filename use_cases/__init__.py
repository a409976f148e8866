"""
Use Cases Package.

This package contains modular use case implementations.
Each use case is a self-contained module with its own:
- Domain policies and services
- Record service backends
- View composer
- Session context and workflow

Available use cases:
- refund_approval: Refund decisions for customer cases

Architecture:
Each use case follows the layered architecture pattern defined in core/:
- domain/: Pure business logic (policies, services)
- local_store.py / cosmos_client.py: Record services
- presentation/: View composition
- session.py: Use-case-specific session context
- workflow.py: Orchestration of the above
"""

from use_cases.refund_approval import (
    RefundApprovalWorkflow,
    RefundDecisionEngine,
    build_workflow,
)

__all__ = [
    "RefundApprovalWorkflow",
    "RefundDecisionEngine",
    "build_workflow",
]
