"""
creditmemo.models
~~~~~~~~~~~~~~~~~
Data models for credit memo generation.

Key design decisions
--------------------
* ``CreditMemoRequest`` is a pydantic model. It is the only input that
  crosses the HTTP boundary, so shape errors are caught there and turned
  into a 400 before any prompt is built. JSON keys are camelCase.

* ``CreditMemoDocument`` is what the model is asked to produce. It is
  parsed leniently with ``from_dict``: any substructure may be missing,
  and every consumer must tolerate ``None`` / empty lists.

* ``CreditMemoResponse`` monetary fields are copied from the request,
  never from the document.

* ``RiskLevel`` is a thin string wrapper; unknown values from the model are
  normalised to ``"MEDIUM"`` so a sloppy reply never breaks construction.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .utils import parse_date, parse_decimal, parse_int, parse_str


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class RequesterType(str, Enum):
    BUSINESS_CUSTOMER = "BUSINESS_CUSTOMER"
    BANK_COLLEAGUE = "BANK_COLLEAGUE"
    SYSTEM_AUTOMATED = "SYSTEM_AUTOMATED"
    CUSTOMER_SERVICE = "CUSTOMER_SERVICE"


class CreditReason(str, Enum):
    PRODUCT_RETURN = "PRODUCT_RETURN"
    DEFECTIVE_GOODS = "DEFECTIVE_GOODS"
    BILLING_ERROR = "BILLING_ERROR"
    OVERCHARGE = "OVERCHARGE"
    PRICE_ADJUSTMENT = "PRICE_ADJUSTMENT"
    SERVICE_ISSUE = "SERVICE_ISSUE"
    CANCELLATION = "CANCELLATION"
    GOODWILL_GESTURE = "GOODWILL_GESTURE"
    OTHER = "OTHER"


class CreditMemoStatus(str, Enum):
    """Memo lifecycle. This service only ever produces DRAFT or PENDING_APPROVAL."""

    DRAFT = "DRAFT"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    APPROVED = "APPROVED"
    ISSUED = "ISSUED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


# ---------------------------------------------------------------------------
# Request (HTTP input)
# ---------------------------------------------------------------------------

class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Address(_CamelModel):
    street:   Optional[str] = None
    city:     Optional[str] = None
    state:    Optional[str] = None
    zip_code: Optional[str] = None
    country:  Optional[str] = None

    def __str__(self) -> str:
        """Compact one-line representation, skipping empty parts."""
        region = " ".join(p for p in (self.state, self.zip_code) if p)
        return ", ".join(p for p in (self.street, self.city, region, self.country) if p)


class BankDetails(_CamelModel):
    bank_name:           Optional[str] = None
    bank_branch:         Optional[str] = None
    sort_code:           Optional[str] = None
    swift_code:          Optional[str] = None
    account_holder_name: Optional[str] = None


class RequesterInfo(_CamelModel):
    requester_id:   str
    requester_type: RequesterType
    name:           str
    email:          Optional[str] = None
    department:     Optional[str] = None


class IssuerInfo(_CamelModel):
    company_name:   Optional[str] = None
    email:          Optional[str] = None
    phone:          Optional[str] = None
    address:        Optional[Address] = None
    account_number: Optional[str] = None


class CustomerInfo(_CamelModel):
    customer_id:     str
    customer_name:   str
    email:           Optional[str] = None
    phone:           Optional[str] = None
    billing_address: Optional[Address] = None
    account_number:  Optional[str] = None
    # Only present when the customer banks with a different bank
    bank_details:    Optional[BankDetails] = None


class LineItem(_CamelModel):
    item_id:     Optional[str] = None
    description: Optional[str] = None
    quantity:    int = Field(default=1, ge=0)
    unit_price:  Optional[Decimal] = None
    total_price: Optional[Decimal] = None


class TransactionInfo(_CamelModel):
    transaction_id:   Optional[str] = None
    invoice_number:   str
    transaction_date: date
    original_amount:  Decimal = Field(ge=0, max_digits=15, decimal_places=2)
    currency:         str = Field(min_length=1)
    line_items:       List[LineItem] = Field(default_factory=list)


class CreditDetails(_CamelModel):
    reason:             CreditReason
    reason_description: str
    credit_amount:      Decimal = Field(gt=0, max_digits=15, decimal_places=2)
    affected_items:     Optional[List[str]] = None
    additional_notes:   Optional[str] = None
    requires_approval:  bool = False
    approver_email:     Optional[str] = None


class CreditMemoRequest(_CamelModel):
    """Validated input for every credit memo operation."""

    requester:            RequesterInfo
    # Issuer block: meaningful when a business customer issues the memo
    issuer:               Optional[IssuerInfo] = None
    customer:             CustomerInfo
    original_transaction: TransactionInfo
    credit_details:       CreditDetails


# ---------------------------------------------------------------------------
# Document (model output)
# ---------------------------------------------------------------------------

def _section(data: dict, key: str) -> Optional[dict]:
    value = data.get(key)
    return value if isinstance(value, dict) and value else None


@dataclass
class IssuerDetails:
    name:           Optional[str] = None
    address:        Optional[str] = None
    email:          Optional[str] = None
    phone:          Optional[str] = None
    account_number: Optional[str] = None

    @classmethod
    def from_dict(cls, d: dict) -> "IssuerDetails":
        return cls(
            name=           parse_str(d.get("name")),
            address=        parse_str(d.get("address")),
            email=          parse_str(d.get("email")),
            phone=          parse_str(d.get("phone")),
            account_number= parse_str(d.get("accountNumber")),
        )

    def to_dict(self) -> dict:
        return {
            "name":          self.name,
            "address":       self.address,
            "email":         self.email,
            "phone":         self.phone,
            "accountNumber": self.account_number,
        }


@dataclass
class RecipientBankDetails:
    bank_name:           Optional[str] = None
    bank_branch:         Optional[str] = None
    sort_code:           Optional[str] = None
    swift_code:          Optional[str] = None
    account_holder_name: Optional[str] = None

    @classmethod
    def from_dict(cls, d: dict) -> "RecipientBankDetails":
        return cls(
            bank_name=           parse_str(d.get("bankName")),
            bank_branch=         parse_str(d.get("bankBranch")),
            sort_code=           parse_str(d.get("sortCode")),
            swift_code=          parse_str(d.get("swiftCode")),
            account_holder_name= parse_str(d.get("accountHolderName")),
        )

    @classmethod
    def from_request(cls, bank: BankDetails) -> "RecipientBankDetails":
        return cls(
            bank_name=bank.bank_name,
            bank_branch=bank.bank_branch,
            sort_code=bank.sort_code,
            swift_code=bank.swift_code,
            account_holder_name=bank.account_holder_name,
        )

    def to_dict(self) -> dict:
        return {
            "bankName":          self.bank_name,
            "bankBranch":        self.bank_branch,
            "sortCode":          self.sort_code,
            "swiftCode":         self.swift_code,
            "accountHolderName": self.account_holder_name,
        }


@dataclass
class RecipientDetails:
    customer_id:    Optional[str] = None
    name:           Optional[str] = None
    address:        Optional[str] = None
    email:          Optional[str] = None
    phone:          Optional[str] = None
    account_number: Optional[str] = None
    bank_details:   Optional[RecipientBankDetails] = None

    @classmethod
    def from_dict(cls, d: dict) -> "RecipientDetails":
        bank = _section(d, "bankDetails")
        return cls(
            customer_id=    parse_str(d.get("customerId")),
            name=           parse_str(d.get("name")),
            address=        parse_str(d.get("address")),
            email=          parse_str(d.get("email")),
            phone=          parse_str(d.get("phone")),
            account_number= parse_str(d.get("accountNumber")),
            bank_details=   RecipientBankDetails.from_dict(bank) if bank else None,
        )

    @classmethod
    def from_customer(cls, customer: CustomerInfo) -> "RecipientDetails":
        return cls(
            customer_id=customer.customer_id,
            name=customer.customer_name,
            address=str(customer.billing_address) if customer.billing_address else None,
            email=customer.email,
            phone=customer.phone,
            account_number=customer.account_number,
            bank_details=(
                RecipientBankDetails.from_request(customer.bank_details)
                if customer.bank_details else None
            ),
        )

    def to_dict(self) -> dict:
        return {
            "customerId":    self.customer_id,
            "name":          self.name,
            "address":       self.address,
            "email":         self.email,
            "phone":         self.phone,
            "accountNumber": self.account_number,
            "bankDetails":   self.bank_details.to_dict() if self.bank_details else None,
        }


@dataclass
class OriginalInvoiceReference:
    invoice_number:  Optional[str] = None
    invoice_date:    Optional[date] = None
    original_amount: Optional[Decimal] = None

    @classmethod
    def from_dict(cls, d: dict) -> "OriginalInvoiceReference":
        return cls(
            invoice_number=  parse_str(d.get("invoiceNumber")),
            invoice_date=    parse_date(d.get("invoiceDate")),
            original_amount= parse_decimal(d.get("originalAmount")),
        )


@dataclass
class CreditInformation:
    reason:               Optional[str] = None
    detailed_explanation: Optional[str] = None
    credit_type:          Optional[str] = None   # FULL or PARTIAL

    @classmethod
    def from_dict(cls, d: dict) -> "CreditInformation":
        credit_type = parse_str(d.get("creditType"))
        return cls(
            reason=               parse_str(d.get("reason")),
            detailed_explanation= parse_str(d.get("detailedExplanation")),
            credit_type=          credit_type.upper() if credit_type else None,
        )


@dataclass
class CreditLineItem:
    item_description:  Optional[str] = None
    quantity:          Optional[int] = None
    unit_price:        Optional[Decimal] = None
    line_total:        Optional[Decimal] = None
    reason_for_credit: Optional[str] = None

    @classmethod
    def from_dict(cls, d: dict) -> "CreditLineItem":
        return cls(
            item_description=  parse_str(d.get("itemDescription") or d.get("description")),
            quantity=          parse_int(d.get("quantity")),
            unit_price=        parse_decimal(d.get("unitPrice")),
            line_total=        parse_decimal(d.get("lineTotal")),
            reason_for_credit= parse_str(d.get("reasonForCredit")),
        )


@dataclass
class FinancialSummary:
    subtotal:            Optional[Decimal] = None
    tax_amount:          Optional[Decimal] = None
    total_credit_amount: Optional[Decimal] = None
    currency:            Optional[str] = None

    @classmethod
    def from_dict(cls, d: dict) -> "FinancialSummary":
        return cls(
            subtotal=            parse_decimal(d.get("subtotal")),
            tax_amount=          parse_decimal(d.get("taxAmount")),
            total_credit_amount= parse_decimal(d.get("totalCreditAmount")),
            currency=            parse_str(d.get("currency")),
        )


@dataclass
class CreditMemoDocument:
    """
    Structured credit memo as returned by the model.

    Every field is optional. ``credit_line_items`` is ``None`` when the key
    was missing from the reply and ``[]`` when it was present but empty.
    """

    credit_memo_number:   Optional[str] = None
    issue_date:           Optional[date] = None
    issuer:               Optional[IssuerDetails] = None
    recipient:            Optional[RecipientDetails] = None
    original_invoice:     Optional[OriginalInvoiceReference] = None
    credit_info:          Optional[CreditInformation] = None
    credit_line_items:    Optional[List[CreditLineItem]] = None
    financial_summary:    Optional[FinancialSummary] = None
    terms_and_conditions: Optional[str] = None
    authorized_by:        Optional[str] = None
    notes:                Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> "CreditMemoDocument":
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object, got {type(data).__name__}")

        issuer = _section(data, "issuer")
        recipient = _section(data, "recipient")
        invoice = _section(data, "originalInvoice")
        credit_info = _section(data, "creditInfo")
        summary = _section(data, "financialSummary")

        items: Optional[List[CreditLineItem]] = None
        raw_items = data.get("creditLineItems")
        if isinstance(raw_items, list):
            items = [CreditLineItem.from_dict(i) for i in raw_items if isinstance(i, dict)]

        return cls(
            credit_memo_number=   parse_str(data.get("creditMemoNumber")),
            issue_date=           parse_date(data.get("issueDate")),
            issuer=               IssuerDetails.from_dict(issuer) if issuer else None,
            recipient=            RecipientDetails.from_dict(recipient) if recipient else None,
            original_invoice=     OriginalInvoiceReference.from_dict(invoice) if invoice else None,
            credit_info=          CreditInformation.from_dict(credit_info) if credit_info else None,
            credit_line_items=    items,
            financial_summary=    FinancialSummary.from_dict(summary) if summary else None,
            terms_and_conditions= parse_str(data.get("termsAndConditions")),
            authorized_by=        parse_str(data.get("authorizedBy")),
            notes=                parse_str(data.get("notes")),
        )


# ---------------------------------------------------------------------------
# Validation result
# ---------------------------------------------------------------------------

class RiskLevel(str):
    """``LOW``, ``MEDIUM`` or ``HIGH``; anything else becomes ``MEDIUM``."""

    VALID: frozenset = frozenset({"LOW", "MEDIUM", "HIGH"})

    def __new__(cls, value: str = "MEDIUM") -> "RiskLevel":
        normalised = str(value).strip().upper()
        if normalised not in cls.VALID:
            normalised = "MEDIUM"
        return super().__new__(cls, normalised)


def _str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value] if value.strip() else []
    if isinstance(value, list):
        return [str(v).strip() for v in value if v is not None and str(v).strip()]
    return []


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"true", "yes", "1"}
    return bool(value)


@dataclass
class ValidationResult:
    """Model-authored risk assessment of a credit memo request."""

    is_valid:        bool
    issues:          List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    risk_level:      RiskLevel = field(default_factory=RiskLevel)

    @classmethod
    def from_dict(cls, data: dict) -> "ValidationResult":
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
        raw_valid = data.get("isValid", data.get("valid"))
        if raw_valid is None:
            raise ValueError("Validation reply is missing 'isValid'.")
        return cls(
            is_valid=        _as_bool(raw_valid),
            issues=          _str_list(data.get("issues")),
            recommendations= _str_list(data.get("recommendations")),
            risk_level=      RiskLevel(data.get("riskLevel") or "MEDIUM"),
        )

    def to_dict(self) -> dict:
        return {
            "isValid":         self.is_valid,
            "issues":          list(self.issues),
            "recommendations": list(self.recommendations),
            "riskLevel":       str(self.risk_level),
        }


# ---------------------------------------------------------------------------
# Response (HTTP output)
# ---------------------------------------------------------------------------

@dataclass
class ProcessingMetadata:
    processing_time_ms: int
    model:              str
    tokens_used:        int = 0   # not reported by the gateway yet
    request_id:         str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self) -> dict:
        return {
            "processingTimeMs": self.processing_time_ms,
            "model":            self.model,
            "tokensUsed":       self.tokens_used,
            "requestId":        self.request_id,
        }


@dataclass
class CreditMemoResponse:
    """
    Final result of ``CreditMemoService.generate_credit_memo()``.

    ``credit_amount``, ``currency`` and ``reason`` are the request's values.
    The model's restated copies only appear inside ``credit_memo_document``.
    """

    credit_memo_id:          str
    credit_memo_number:      Optional[str]
    generated_at:            datetime
    status:                  CreditMemoStatus
    original_invoice_number: str
    customer_id:             str
    customer_name:           str
    credit_amount:           Decimal
    currency:                str
    reason:                  str
    credit_memo_document:    str
    summary:                 str
    requires_approval:       bool
    approval_status:         str
    generated_by:            str
    metadata:                ProcessingMetadata

    def to_dict(self) -> dict:
        return {
            "creditMemoId":          self.credit_memo_id,
            "creditMemoNumber":      self.credit_memo_number,
            "generatedAt":           self.generated_at.isoformat(),
            "status":                self.status.value,
            "originalInvoiceNumber": self.original_invoice_number,
            "customerId":            self.customer_id,
            "customerName":          self.customer_name,
            "creditAmount":          float(self.credit_amount),
            "currency":              self.currency,
            "reason":                self.reason,
            "creditMemoDocument":    self.credit_memo_document,
            "summary":               self.summary,
            "requiresApproval":      self.requires_approval,
            "approvalStatus":        self.approval_status,
            "generatedBy":           self.generated_by,
            "metadata":              self.metadata.to_dict(),
        }


__all__ = [
    "RequesterType",
    "CreditReason",
    "CreditMemoStatus",
    "Address",
    "BankDetails",
    "RequesterInfo",
    "IssuerInfo",
    "CustomerInfo",
    "LineItem",
    "TransactionInfo",
    "CreditDetails",
    "CreditMemoRequest",
    "IssuerDetails",
    "RecipientBankDetails",
    "RecipientDetails",
    "OriginalInvoiceReference",
    "CreditInformation",
    "CreditLineItem",
    "FinancialSummary",
    "CreditMemoDocument",
    "RiskLevel",
    "ValidationResult",
    "ProcessingMetadata",
    "CreditMemoResponse",
]
