"""
creditmemo.web.api
~~~~~~~~~~~~~~~~~~
FastAPI backend for the credit memo service.

Nothing is persisted: every request builds a prompt, calls the model and
returns the result.

Endpoints (prefix configurable, default ``/api/v1``)
----------------------------------------------------
POST {prefix}/credit-memos             Generate a credit memo (201)
POST {prefix}/credit-memos/summary     Management summary only
POST {prefix}/credit-memos/validate    Model-assisted risk assessment
GET  {prefix}/credit-memos/health      Liveness
GET  /config                           Active model configuration
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..config import Config
from ..exceptions import CreditMemoGenerationError
from ..models import CreditMemoRequest
from ..service import CreditMemoService

logger = logging.getLogger(__name__)

GENERATION_ERROR_MESSAGE = "The credit memo could not be generated. Please try again later."
UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."


# ---------------------------------------------------------------------------
# Dependencies
# ---------------------------------------------------------------------------

def get_service(request: Request) -> CreditMemoService:
    """One stateless service per app, created on first use."""
    service = getattr(request.app.state, "service", None)
    if service is None:
        service = CreditMemoService(config=request.app.state.config)
        request.app.state.service = service
    return service


# ---------------------------------------------------------------------------
# Error bodies
# ---------------------------------------------------------------------------

def _error_body(request: Request, status_code: int, error: str, message: str) -> dict:
    return {
        "timestamp": datetime.now().isoformat(),
        "status":    status_code,
        "error":     error,
        "message":   message,
        "path":      request.url.path,
    }


def _field_errors(exc: RequestValidationError) -> dict[str, str]:
    errors: dict[str, str] = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part != "body"]
        errors[".".join(loc) or "body"] = err.get("msg", "Invalid value")
    return errors


async def _handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = _field_errors(exc)
    logger.warning("Validation error on %s: %s", request.url.path, errors)
    body = _error_body(
        request, status.HTTP_400_BAD_REQUEST, "Validation Error",
        "Invalid request parameters",
    )
    body["errors"] = errors
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body)


async def _handle_generation_error(request: Request, exc: CreditMemoGenerationError) -> JSONResponse:
    logger.error("Credit memo generation error on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(
            request, status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Credit Memo Generation Error", GENERATION_ERROR_MESSAGE,
        ),
    )


async def _handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unexpected error on %s", request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=_error_body(
            request, status.HTTP_500_INTERNAL_SERVER_ERROR,
            "Internal Server Error", UNEXPECTED_ERROR_MESSAGE,
        ),
    )


# ---------------------------------------------------------------------------
# Credit memo routes
# ---------------------------------------------------------------------------

router = APIRouter(prefix="/credit-memos", tags=["credit-memos"])


@router.post("", status_code=status.HTTP_201_CREATED)
def generate_credit_memo(
    body: CreditMemoRequest,
    service: CreditMemoService = Depends(get_service),
):
    """Generate a complete credit memo document."""
    logger.info(
        "Received credit memo generation request from %s for customer %s",
        body.requester.requester_type.value, body.customer.customer_id,
    )
    response = service.generate_credit_memo(body)
    return response.to_dict()


@router.post("/summary")
def generate_credit_memo_summary(
    body: CreditMemoRequest,
    service: CreditMemoService = Depends(get_service),
):
    """Generate a short management summary, without the full document."""
    summary = service.generate_summary(body)
    return {
        "customerId":    body.customer.customer_id,
        "invoiceNumber": body.original_transaction.invoice_number,
        "summary":       summary,
    }


@router.post("/validate")
def validate_credit_memo_request(
    body: CreditMemoRequest,
    service: CreditMemoService = Depends(get_service),
):
    """Ask the model for a risk assessment before generating."""
    return service.validate_request(body).to_dict()


@router.get("/health")
def health():
    return {"status": "UP", "message": "Credit Memo Service is operational"}


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------

def create_app(config: Optional[Config] = None) -> FastAPI:
    config = config or Config()

    app = FastAPI(
        title="creditmemo API",
        description=(
            "Generates credit memos from structured requests using a local "
            "Ollama language model."
        ),
        version="0.1.0",
    )
    app.state.config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        max_age=3600,
    )

    app.add_exception_handler(RequestValidationError, _handle_validation_error)
    app.add_exception_handler(CreditMemoGenerationError, _handle_generation_error)
    app.add_exception_handler(Exception, _handle_unexpected_error)

    app.include_router(router, prefix=config.api_prefix)

    @app.get("/config", tags=["meta"])
    def get_config():
        """Return the active model configuration."""
        mc = config.get_model_config()
        return {
            "ollama_base_url": mc.base_url,
            "model":           mc.model,
            "request_timeout": mc.timeout,
            "api_prefix":      config.api_prefix,
        }

    return app


app = create_app()
