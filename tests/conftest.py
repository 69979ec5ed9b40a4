"""
tests/conftest.py
~~~~~~~~~~~~~~~~~
Shared pytest fixtures for the creditmemo test suite.
"""

from __future__ import annotations

import copy
import json
from datetime import date
from unittest.mock import MagicMock

import pytest

from creditmemo.config import Config
from creditmemo.models import CreditMemoRequest


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

@pytest.fixture
def default_config() -> Config:
    return Config(_env_file=None)  # type: ignore[call-arg]


@pytest.fixture
def today() -> date:
    return date(2024, 10, 1)


# ---------------------------------------------------------------------------
# Request payloads
# ---------------------------------------------------------------------------

_BASE_PAYLOAD: dict = {
    "requester": {
        "requesterId": "EMP-4471",
        "requesterType": "BANK_COLLEAGUE",
        "name": "Sarah Mitchell",
        "email": "sarah.mitchell@ukbusinessbank.co.uk",
        "department": "Commercial Banking",
    },
    "customer": {
        "customerId": "CUST-10293",
        "customerName": "Northern Supplies Limited",
        "email": "accounts@northernsupplies.co.uk",
        "phone": "+44 161 496 0123",
        "billingAddress": {
            "street": "42 Deansgate",
            "city": "Manchester",
            "state": "Greater Manchester",
            "zipCode": "M3 2BW",
            "country": "United Kingdom",
        },
        "accountNumber": "31926819",
    },
    "originalTransaction": {
        "transactionId": "TXN-2024-88812",
        "invoiceNumber": "INV-2024-00417",
        "transactionDate": "2024-09-12",
        "originalAmount": "5000.00",
        "currency": "USD",
        "lineItems": [
            {
                "itemId": "ITEM-1",
                "description": "Industrial shelving unit",
                "quantity": 10,
                "unitPrice": "400.00",
                "totalPrice": "4000.00",
            },
            {
                "itemId": "ITEM-2",
                "description": "Installation service",
                "quantity": 1,
                "unitPrice": "1000.00",
                "totalPrice": "1000.00",
            },
        ],
    },
    "creditDetails": {
        "reason": "DEFECTIVE_GOODS",
        "reasonDescription": "One shelving unit arrived with a cracked frame.",
        "creditAmount": "500.00",
        "affectedItems": ["ITEM-1"],
        "additionalNotes": "Replacement unit dispatched separately.",
        "requiresApproval": False,
    },
}


@pytest.fixture
def request_payload() -> dict:
    """A fresh, mutable copy of a valid CreditMemoRequest body."""
    return copy.deepcopy(_BASE_PAYLOAD)


@pytest.fixture
def make_request(request_payload):
    """Build a CreditMemoRequest, overriding creditDetails / transaction fields."""

    def _make(
        *,
        credit: dict | None = None,
        transaction: dict | None = None,
        requester: dict | None = None,
        issuer: dict | None = None,
        customer: dict | None = None,
    ) -> CreditMemoRequest:
        payload = copy.deepcopy(request_payload)
        payload["creditDetails"].update(credit or {})
        payload["originalTransaction"].update(transaction or {})
        payload["requester"].update(requester or {})
        payload["customer"].update(customer or {})
        if issuer is not None:
            payload["issuer"] = issuer
        return CreditMemoRequest.model_validate(payload)

    return _make


@pytest.fixture
def sample_request(make_request) -> CreditMemoRequest:
    return make_request()


# ---------------------------------------------------------------------------
# Model replies
# ---------------------------------------------------------------------------

@pytest.fixture
def llm_document_response() -> dict:
    """A well-formed document reply, as the model would return it."""
    return {
        "creditMemoNumber": "CM-2024-1A2B3C4D",
        "issueDate": "2024-10-01",
        "issuer": {
            "name": "UK Business Bank plc",
            "address": "1 Threadneedle Street, London, EC2R 8AH, United Kingdom",
            "email": "credit.operations@ukbusinessbank.co.uk",
            "phone": "+44 20 7946 0000",
            "accountNumber": None,
        },
        "recipient": {
            "customerId": "CUST-10293",
            "name": "Northern Supplies Limited",
            "address": "42 Deansgate, Manchester, Greater Manchester M3 2BW, United Kingdom",
            "email": "accounts@northernsupplies.co.uk",
            "phone": "+44 161 496 0123",
            "accountNumber": "31926819",
            "bankDetails": None,
        },
        "originalInvoice": {
            "invoiceNumber": "INV-2024-00417",
            "invoiceDate": "2024-09-12",
            "originalAmount": 5000.0,
        },
        "creditInfo": {
            "reason": "DEFECTIVE_GOODS",
            "detailedExplanation": (
                "One shelving unit was delivered with a cracked frame. "
                "The customer returned the unit for inspection. "
                "The defect was confirmed by the warehouse team. "
                "A partial credit is issued for the affected unit."
            ),
            "creditType": "PARTIAL",
        },
        "creditLineItems": [
            {
                "itemDescription": "Industrial shelving unit",
                "quantity": 1,
                "unitPrice": 400.0,
                "lineTotal": 500.0,
                "reasonForCredit": "Frame cracked on delivery.",
            }
        ],
        "financialSummary": {
            "subtotal": 416.67,
            "taxAmount": 83.33,
            "totalCreditAmount": 500.0,
            "currency": "USD",
        },
        "termsAndConditions": "Standard terms apply.",
        "authorizedBy": "Sarah Mitchell",
        "notes": "Replacement unit dispatched separately.",
    }


@pytest.fixture
def llm_validation_response() -> dict:
    return {
        "isValid": True,
        "issues": [],
        "recommendations": ["Attach the warehouse inspection report."],
        "riskLevel": "LOW",
    }


def mock_ollama_response(payload, status_code: int = 200) -> MagicMock:
    """A mock requests.Response carrying ``payload`` as the Ollama reply text."""
    text = payload if isinstance(payload, str) else json.dumps(payload)
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = {"response": text, "done": True}
    return resp


@pytest.fixture
def ollama_reply():
    return mock_ollama_response
