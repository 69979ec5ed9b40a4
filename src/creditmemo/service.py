"""
creditmemo.service
~~~~~~~~~~~~~~~~~~
Main entry point for credit memo generation.

Pipeline for ``generate_credit_memo`` (linear, no retries, no state):
  1. Memo context: memo number, issue date, tax split, credit type, issuer
  2. Document prompt → model (JSON) → CreditMemoDocument
  3. Reconcile the document with the core values
  4. Summary prompt → model (text)
  5. Assemble the response with the request's authoritative values

Either a complete ``CreditMemoResponse`` is returned or
``CreditMemoGenerationError`` is raised; there is no partial result.
"""

from __future__ import annotations

import logging
import time
import uuid
from datetime import date
from typing import Optional

from .assembler import assemble_response, reconcile_document
from .config import Config
from .exceptions import CreditMemoGenerationError
from .gateway import ModelGateway
from .models import CreditMemoDocument, CreditMemoRequest, CreditMemoResponse, ValidationResult
from .prompts import (
    build_credit_memo_prompt,
    build_summary_prompt,
    build_validation_prompt,
    prepare_memo_context,
)

logger = logging.getLogger(__name__)
logger.addHandler(logging.NullHandler())


class CreditMemoService:
    """
    Orchestrates prompt building, the model calls and response assembly.

    Args:
        config:  Optional Config instance (reads .env by default).
        gateway: Optional ModelGateway; built from ``config`` when omitted.
    """

    def __init__(
        self,
        config:  Optional[Config] = None,
        gateway: Optional[ModelGateway] = None,
    ) -> None:
        self.config = config or Config()
        self.gateway = gateway or ModelGateway(self.config.get_model_config())

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def generate_credit_memo(
        self,
        request: CreditMemoRequest,
        today:   Optional[date] = None,
    ) -> CreditMemoResponse:
        """Generate a full credit memo. Two sequential model calls."""
        logger.info(
            "Generating credit memo for customer %s, requester type %s",
            request.customer.customer_id,
            request.requester.requester_type.value,
        )
        start = time.monotonic()

        try:
            context = prepare_memo_context(request, today=today)
            prompt = build_credit_memo_prompt(request, context)

            document = self.gateway.generate_structured(prompt, CreditMemoDocument)
            if not document.credit_line_items:
                logger.warning(
                    "Model returned no credit line items for memo %s", context.memo_number
                )
            document = reconcile_document(document, request, context)

            summary = self.generate_summary(request)

            elapsed_ms = int((time.monotonic() - start) * 1000)
            response = assemble_response(
                request,
                document,
                summary,
                processing_time_ms=elapsed_ms,
                model=self.gateway.model_name,
                credit_memo_id=str(uuid.uuid4()),
            )
        except CreditMemoGenerationError as exc:
            logger.error("Credit memo generation failed: %s", exc)
            raise
        except Exception as exc:
            logger.exception("Unexpected error generating credit memo.")
            raise CreditMemoGenerationError(
                f"Failed to generate credit memo: {exc}", cause=exc
            ) from exc

        logger.info(
            "Generated credit memo %s for customer %s in %d ms",
            response.credit_memo_number,
            response.customer_id,
            response.metadata.processing_time_ms,
        )
        return response

    def generate_summary(self, request: CreditMemoRequest) -> str:
        """2-3 sentence management summary of the request."""
        logger.info("Generating credit memo summary for customer %s", request.customer.customer_id)
        return self.gateway.generate(build_summary_prompt(request))

    def validate_request(self, request: CreditMemoRequest) -> ValidationResult:
        """Model-assisted risk assessment of the request."""
        logger.info("Validating credit memo request for customer %s", request.customer.customer_id)
        return self.gateway.generate_structured(build_validation_prompt(request), ValidationResult)


__all__ = ["CreditMemoService"]
