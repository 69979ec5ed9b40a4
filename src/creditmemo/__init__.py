"""
creditmemo
~~~~~~~~~~
LLM-backed credit memo generator.

Typical usage::

    from creditmemo import CreditMemoRequest, CreditMemoService

    service = CreditMemoService()
    response = service.generate_credit_memo(CreditMemoRequest.model_validate(payload))

    print(response.credit_memo_number, response.status.value)
    print(response.credit_memo_document)
"""

from .calculator import TAX_RATE, determine_credit_type, split_credit_amount
from .config import Config, ModelConfig, cfg
from .exceptions import CreditMemoError, CreditMemoGenerationError
from .gateway import ModelGateway
from .models import (
    CreditMemoDocument,
    CreditMemoRequest,
    CreditMemoResponse,
    CreditMemoStatus,
    CreditReason,
    RequesterType,
    ValidationResult,
)
from .service import CreditMemoService

__all__ = [
    # Core service
    "CreditMemoService",
    "ModelGateway",
    # Configuration
    "Config",
    "ModelConfig",
    "cfg",
    # Models
    "CreditMemoRequest",
    "CreditMemoDocument",
    "CreditMemoResponse",
    "CreditMemoStatus",
    "CreditReason",
    "RequesterType",
    "ValidationResult",
    # Calculations
    "TAX_RATE",
    "split_credit_amount",
    "determine_credit_type",
    # Exceptions
    "CreditMemoError",
    "CreditMemoGenerationError",
]
