"""
FastAPI Application for the Refund Approval Service.

Exposes the refund form endpoints: load a case, calculate a decision,
and confirm it back to the case record.
"""

import logging
from contextlib import asynccontextmanager
from datetime import date
from decimal import Decimal
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from config import settings
from core.data import RecordNotFoundError
from use_cases.refund_approval import (
    AttemptStatus,
    NoDecisionError,
    RefundApprovalWorkflow,
    RefundForm,
    RefundViewComposer,
    build_workflow,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

# Reduce Azure SDK logging verbosity
logging.getLogger("azure.cosmos").setLevel(logging.WARNING)
logging.getLogger("azure.core").setLevel(logging.WARNING)
logging.getLogger("azure.identity").setLevel(logging.WARNING)

# Global instances
workflow: Optional[RefundApprovalWorkflow] = None
composer = RefundViewComposer(currency_symbol=settings.currency_symbol)


class RefundFormRequest(BaseModel):
    """Body of a calculate request; zero means "not entered"."""
    shortlists_requested: int = 0
    total_sum_requested: Decimal = Decimal("0")
    shortlist_count: int = 0
    first_activity_date: Optional[date] = None
    refund_notes: str = ""

    def to_form(self) -> RefundForm:
        return RefundForm(
            shortlists_requested=self.shortlists_requested,
            total_sum_requested=self.total_sum_requested,
            shortlist_count=self.shortlist_count,
            first_activity_date=self.first_activity_date,
            refund_notes=self.refund_notes,
        )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager - handles startup and shutdown."""
    global workflow

    logger.info("Starting Refund Approval Service...")
    workflow = build_workflow(settings)
    logger.info("Refund approval workflow initialized")

    yield

    logger.info("Shutting down...")
    workflow = None


# Create FastAPI app
app = FastAPI(
    title="Refund Approval",
    description="Refund decisions for customer cases",
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc"
)

# CORS middleware for local development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Restrict in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _not_initialized() -> JSONResponse:
    return JSONResponse(content={"error": "Server not initialized"}, status_code=500)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": "1.0.0",
        "use_case": "refund_approval",
        "data_backend": settings.data_backend,
    }


@app.get("/api/cases/{case_id}/refund")
async def get_refund_form(case_id: str):
    """
    Load the refund form for a case.
    Prefills the first activity date and prior refund count from the account.
    """
    if workflow is None:
        return _not_initialized()

    try:
        session = workflow.load(case_id)
        return composer.compose_form(session)
    except RecordNotFoundError as e:
        return JSONResponse(content={"error": str(e)}, status_code=404)
    except Exception as e:
        logger.error(f"Error loading refund form for {case_id}: {e}", exc_info=True)
        return JSONResponse(content={"error": str(e)}, status_code=500)


@app.post("/api/cases/{case_id}/refund/decision")
async def calculate_refund(case_id: str, request: RefundFormRequest):
    """
    Compute a refund decision from the submitted form.
    Nothing is written until the decision is confirmed.
    """
    if workflow is None:
        return _not_initialized()

    try:
        attempt = workflow.compute_decision(case_id, request.to_form())
    except Exception as e:
        logger.error(f"Error calculating refund for {case_id}: {e}", exc_info=True)
        return JSONResponse(content={"error": str(e)}, status_code=500)

    body = composer.compose_attempt(attempt)
    if attempt.status == AttemptStatus.PENDING:
        return JSONResponse(content=body, status_code=202)
    if attempt.status == AttemptStatus.NOT_FOUND:
        return JSONResponse(content=body, status_code=404)
    if attempt.status == AttemptStatus.INVALID:
        return JSONResponse(content=body, status_code=422)
    return JSONResponse(content=body, status_code=200)


@app.post("/api/cases/{case_id}/refund/confirm")
async def confirm_refund(case_id: str):
    """
    Write the last computed decision back to the case.
    A failed write keeps the decision so the call can be retried.
    """
    if workflow is None:
        return _not_initialized()

    try:
        notification = await workflow.confirm_and_persist(case_id)
    except NoDecisionError as e:
        return JSONResponse(content={"error": str(e)}, status_code=409)

    status_code = 502 if notification.is_error else 200
    return JSONResponse(content=composer.compose_notification(notification), status_code=status_code)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=False,
        log_level=settings.log_level.lower()
    )
