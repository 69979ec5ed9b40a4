"""
creditmemo.prompts
~~~~~~~~~~~~~~~~~~
Prompt templates for the three model calls.

  Document:   request + MemoContext → one JSON credit memo object
  Summary:    request → 2-3 sentence management synopsis (plain text)
  Validation: request → JSON risk assessment

Every number and identifier in the document prompt is computed here, not by
the model. The model only writes the credit explanation and the per-item
reasons for credit. Templates use named placeholders filled through
``str.format(**fields)``; the JSON template itself is built from a dict with
``json.dumps`` so braces never collide with placeholders.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field, replace
from datetime import date
from decimal import Decimal
from typing import Callable, Optional

from .calculator import FinancialBreakdown, determine_credit_type, split_credit_amount
from .models import (
    CreditMemoRequest,
    IssuerDetails,
    LineItem,
    RecipientDetails,
    RequesterType,
)
from .utils import format_amount

SYSTEM_PROMPT = """\
You are a professional financial document specialist with expertise in generating \
credit memos and other financial documents. You always use precise financial \
language, follow standard business document formats, keep a professional tone, \
and never alter figures you are given."""

TERMS_AND_CONDITIONS = (
    "This credit memo may be applied against outstanding or future invoices, or "
    "refunded to the account on file, within 30 days of the issue date. It remains "
    "valid for 12 months from the issue date and is not transferable. Please quote "
    "the credit memo number in all correspondence."
)

ALL_ITEMS = "All items"

_NOT_PROVIDED = "Not provided"


# ---------------------------------------------------------------------------
# Requester context (one sentence per requester type)
# ---------------------------------------------------------------------------

REQUESTER_CONTEXT: dict[RequesterType, str] = {
    RequesterType.BUSINESS_CUSTOMER: (
        "This credit memo is issued by a business customer of the bank to one of its "
        "own customers, using the bank's credit memo service."
    ),
    RequesterType.BANK_COLLEAGUE: (
        "This credit memo is issued by the bank itself, raised by a bank colleague "
        "who manages the customer relationship."
    ),
    RequesterType.SYSTEM_AUTOMATED: (
        "This credit memo was raised automatically by an upstream system following a "
        "rule-based credit decision; no person reviewed it before generation."
    ),
    RequesterType.CUSTOMER_SERVICE: (
        "This credit memo is issued by the customer service team in response to a "
        "customer enquiry or complaint."
    ),
}


def requester_context(requester_type: RequesterType) -> str:
    return REQUESTER_CONTEXT[RequesterType(requester_type)]


# ---------------------------------------------------------------------------
# Issuer resolution
# ---------------------------------------------------------------------------

BANK_ISSUER = IssuerDetails(
    name="UK Business Bank plc",
    address="1 Threadneedle Street, London, EC2R 8AH, United Kingdom",
    email="credit.operations@ukbusinessbank.co.uk",
    phone="+44 20 7946 0000",
    account_number=None,
)

GENERIC_ISSUER_NAME = "Business Customer"


def _bank_issuer(request: CreditMemoRequest) -> IssuerDetails:
    return replace(BANK_ISSUER)


def _request_issuer(request: CreditMemoRequest) -> IssuerDetails:
    issuer = request.issuer
    if issuer is None or not any(
        (issuer.company_name, issuer.email, issuer.phone, issuer.address, issuer.account_number)
    ):
        return IssuerDetails(name=GENERIC_ISSUER_NAME, email=request.requester.email)
    return IssuerDetails(
        name=issuer.company_name or GENERIC_ISSUER_NAME,
        address=(str(issuer.address) or None) if issuer.address else None,
        email=issuer.email or request.requester.email,
        phone=issuer.phone,
        account_number=issuer.account_number,
    )


ISSUER_RESOLVERS: dict[RequesterType, Callable[[CreditMemoRequest], IssuerDetails]] = {
    RequesterType.BANK_COLLEAGUE:    _bank_issuer,
    RequesterType.BUSINESS_CUSTOMER: _request_issuer,
    RequesterType.SYSTEM_AUTOMATED:  _request_issuer,
    RequesterType.CUSTOMER_SERVICE:  _request_issuer,
}


def resolve_issuer(request: CreditMemoRequest) -> IssuerDetails:
    """Return the party shown as the source of the credit."""
    return ISSUER_RESOLVERS[request.requester.requester_type](request)


# ---------------------------------------------------------------------------
# Memo context: values fixed before the model is called
# ---------------------------------------------------------------------------

def generate_memo_number(today: date) -> str:
    """``CM-<year>-<8 hex chars>``."""
    return f"CM-{today.year}-{uuid.uuid4().hex[:8].upper()}"


@dataclass
class MemoContext:
    memo_number:  str
    issue_date:   date
    breakdown:    FinancialBreakdown
    credit_type:  str
    currency:     str
    issuer:       IssuerDetails
    recipient:    RecipientDetails
    line_items:   list[dict] = field(default_factory=list)


def _affected_line_items(request: CreditMemoRequest) -> list[dict]:
    """
    Template entries for ``creditLineItems``, one per affected item.

    Affected ids are matched against the original line items; unmatched ids
    are passed through as descriptions. No affected items means one
    ``"All items"`` entry covering the full credit amount.
    """
    details = request.credit_details
    affected = [a for a in (details.affected_items or []) if a and a.strip()]

    if not affected:
        return [{
            "itemDescription": ALL_ITEMS,
            "quantity":        1,
            "unitPrice":       float(details.credit_amount),
            "lineTotal":       float(details.credit_amount),
            "reasonForCredit": "<one sentence: why this item is credited>",
        }]

    by_id: dict[str, LineItem] = {
        li.item_id: li for li in request.original_transaction.line_items if li.item_id
    }
    entries = []
    for item_id in affected:
        li = by_id.get(item_id)
        entries.append({
            "itemDescription": (li.description or item_id) if li else item_id,
            "quantity":        li.quantity if li else 1,
            "unitPrice":       _num(li.unit_price) if li else None,
            "lineTotal":       _num(li.total_price) if li else None,
            "reasonForCredit": "<one sentence: why this item is credited>",
        })
    return entries


def prepare_memo_context(request: CreditMemoRequest, today: Optional[date] = None) -> MemoContext:
    today = today or date.today()
    details = request.credit_details
    txn = request.original_transaction
    return MemoContext(
        memo_number=generate_memo_number(today),
        issue_date=today,
        breakdown=split_credit_amount(details.credit_amount),
        credit_type=determine_credit_type(details.credit_amount, txn.original_amount),
        currency=txn.currency,
        issuer=resolve_issuer(request),
        recipient=RecipientDetails.from_customer(request.customer),
        line_items=_affected_line_items(request),
    )


# ---------------------------------------------------------------------------
# Document prompt
# ---------------------------------------------------------------------------

def _num(value: Optional[Decimal]) -> Optional[float]:
    return float(value) if value is not None else None


def _text(value: Optional[str]) -> str:
    return value if value else _NOT_PROVIDED


def _document_template(request: CreditMemoRequest, ctx: MemoContext) -> str:
    """The literal JSON object the model must fill in and return."""
    txn = request.original_transaction
    details = request.credit_details
    template = {
        "creditMemoNumber": ctx.memo_number,
        "issueDate":        ctx.issue_date.isoformat(),
        "issuer":           ctx.issuer.to_dict(),
        "recipient":        ctx.recipient.to_dict(),
        "originalInvoice": {
            "invoiceNumber":  txn.invoice_number,
            "invoiceDate":    txn.transaction_date.isoformat(),
            "originalAmount": float(txn.original_amount),
        },
        "creditInfo": {
            "reason":              details.reason.value,
            "detailedExplanation": "<3-4 formal sentences explaining why the credit is issued>",
            "creditType":          ctx.credit_type,
        },
        "creditLineItems": ctx.line_items,
        "financialSummary": {
            "subtotal":          float(ctx.breakdown.subtotal),
            "taxAmount":         float(ctx.breakdown.tax_amount),
            "totalCreditAmount": float(ctx.breakdown.total),
            "currency":          ctx.currency,
        },
        "termsAndConditions": TERMS_AND_CONDITIONS,
        "authorizedBy":       request.requester.name,
        "notes":              details.additional_notes,
    }
    return json.dumps(template, indent=2, ensure_ascii=False)


def _format_line_items(items: list[LineItem], currency: str) -> str:
    if not items:
        return "- No line items supplied"
    return "\n".join(
        f"- [{li.item_id or '-'}] {li.description or 'Item'} | Qty: {li.quantity} | "
        f"Unit price: {format_amount(li.unit_price) or '-'} {currency} | "
        f"Line total: {format_amount(li.total_price) or '-'} {currency}"
        for li in items
    )


def _format_bank_details(request: CreditMemoRequest) -> str:
    bank = request.customer.bank_details
    if bank is None:
        return "- Not provided (recipient banks with the issuer)"
    return (
        f"- Bank: {_text(bank.bank_name)}\n"
        f"- Branch: {_text(bank.bank_branch)}\n"
        f"- Sort Code: {_text(bank.sort_code)}\n"
        f"- SWIFT: {_text(bank.swift_code)}\n"
        f"- Account Holder: {_text(bank.account_holder_name)}"
    )


CREDIT_MEMO_PROMPT_TEMPLATE = """\
You are generating a professional credit memo as a single JSON object.

CONTEXT
{context}

REQUESTER
- Requester Type: {requester_type}
- Name: {requester_name}
- Department: {requester_department}

ISSUER (FROM)
- Name: {issuer_name}
- Address: {issuer_address}
- Email: {issuer_email}
- Phone: {issuer_phone}
- Account Number: {issuer_account}

RECIPIENT (TO)
- Customer ID: {customer_id}
- Name: {customer_name}
- Email: {customer_email}
- Phone: {customer_phone}
- Account Number: {customer_account}
- Address: {customer_address}

RECIPIENT BANK DETAILS
{bank_details}

ORIGINAL TRANSACTION
- Transaction ID: {transaction_id}
- Invoice Number: {invoice_number}
- Transaction Date: {transaction_date}
- Original Amount: {original_amount} {currency}
- Line Items:
{line_items}

CREDIT DETAILS
- Reason: {reason}
- Description: {reason_description}
- Credit Amount: {credit_amount} {currency}
- Affected Items: {affected_items}
- Additional Notes: {notes}

PRE-CALCULATED VALUES (authoritative, copy exactly)
- Credit Memo Number: {memo_number}
- Issue Date: {issue_date}
- Credit Type: {credit_type}
- Subtotal: {subtotal} {currency}
- Tax ({tax_percentage}%): {tax_amount} {currency}
- Total Credit Amount: {credit_amount} {currency}

RULES
1. Output exactly one JSON object and nothing else: no explanation before or after it.
2. Do not wrap the JSON in markdown code fences.
3. Do not invent, recalculate or round any financial figure. Use the pre-calculated values above.
4. Write all dates as YYYY-MM-DD.
5. Write numbers as plain JSON numbers without thousands separators or currency symbols.
6. creditLineItems must contain at least one entry. Use one entry per affected item ({affected_items}).
7. Replace every <...> placeholder with your own text. Keep every other value unchanged.

Fill in this JSON object and return it:
{schema}

Return only JSON:
"""


def build_credit_memo_prompt(request: CreditMemoRequest, context: MemoContext) -> str:
    """Full-document prompt: authoritative data in, JSON credit memo out."""
    requester = request.requester
    customer = request.customer
    txn = request.original_transaction
    details = request.credit_details
    affected = [a for a in (details.affected_items or []) if a and a.strip()]

    return CREDIT_MEMO_PROMPT_TEMPLATE.format(
        context=              requester_context(requester.requester_type),
        requester_type=       requester.requester_type.value,
        requester_name=       requester.name,
        requester_department= _text(requester.department),
        issuer_name=          _text(context.issuer.name),
        issuer_address=       _text(context.issuer.address),
        issuer_email=         _text(context.issuer.email),
        issuer_phone=         _text(context.issuer.phone),
        issuer_account=       _text(context.issuer.account_number),
        customer_id=          customer.customer_id,
        customer_name=        customer.customer_name,
        customer_email=       _text(customer.email),
        customer_phone=       _text(customer.phone),
        customer_account=     _text(customer.account_number),
        customer_address=     _text(str(customer.billing_address) if customer.billing_address else None),
        bank_details=         _format_bank_details(request),
        transaction_id=       _text(txn.transaction_id),
        invoice_number=       txn.invoice_number,
        transaction_date=     txn.transaction_date.isoformat(),
        original_amount=      format_amount(txn.original_amount),
        currency=             txn.currency,
        line_items=           _format_line_items(txn.line_items, txn.currency),
        reason=               details.reason.value,
        reason_description=   details.reason_description,
        credit_amount=        format_amount(details.credit_amount),
        affected_items=       ", ".join(affected) if affected else ALL_ITEMS,
        notes=                _text(details.additional_notes),
        memo_number=          context.memo_number,
        issue_date=           context.issue_date.isoformat(),
        credit_type=          context.credit_type,
        subtotal=             format_amount(context.breakdown.subtotal),
        tax_amount=           format_amount(context.breakdown.tax_amount),
        tax_percentage=       format_amount(context.breakdown.tax_percentage),
        schema=               _document_template(request, context),
    )


# ---------------------------------------------------------------------------
# Summary prompt
# ---------------------------------------------------------------------------

SUMMARY_PROMPT_TEMPLATE = """\
Provide a brief 2-3 sentence summary of this credit memo request for management review.

- Customer: {customer_name} (ID: {customer_id})
- Original Invoice: {invoice_number}
- Credit Reason: {reason} ({reason_description})
- Credit Amount: {credit_amount} {currency}
- Requester: {requester_name} ({requester_type})

Use a professional tone. Mention the customer, the invoice, the reason, the amount and \
who requested the credit. Return plain text only, without headings, lists or markdown.
"""


def build_summary_prompt(request: CreditMemoRequest) -> str:
    details = request.credit_details
    return SUMMARY_PROMPT_TEMPLATE.format(
        customer_name=      request.customer.customer_name,
        customer_id=        request.customer.customer_id,
        invoice_number=     request.original_transaction.invoice_number,
        reason=             details.reason.value,
        reason_description= details.reason_description,
        credit_amount=      format_amount(details.credit_amount),
        currency=           request.original_transaction.currency,
        requester_name=     request.requester.name,
        requester_type=     request.requester.requester_type.value,
    )


# ---------------------------------------------------------------------------
# Validation prompt
# ---------------------------------------------------------------------------

_VALIDATION_SCHEMA = json.dumps(
    {
        "isValid": True,
        "issues": ["<issue>"],
        "recommendations": ["<recommendation>"],
        "riskLevel": "LOW | MEDIUM | HIGH",
    },
    indent=2,
)

VALIDATION_PROMPT_TEMPLATE = """\
Validate this credit memo request and identify any issues or concerns.

- Credit Amount: {credit_amount} {currency}
- Original Transaction Amount: {original_amount} {currency}
- Credit as share of original: {credit_share}
- Credit Type: {credit_type}
- Reason: {reason} - {reason_description}
- Requester Type: {requester_type}
- Requires Approval: {requires_approval}
- Approver Email: {approver_email}

Analyse:
1. Is the credit amount reasonable compared to the original transaction?
2. Is the reason clearly explained and justified?
3. Are there any red flags or concerns?
4. Should this require additional approval?

Set riskLevel to exactly one of LOW, MEDIUM or HIGH. Use empty lists when there are \
no issues or recommendations.

OUTPUT: valid JSON only, no markdown, no explanation.
{schema}

Return only JSON:
"""


def build_validation_prompt(request: CreditMemoRequest) -> str:
    details = request.credit_details
    txn = request.original_transaction
    if txn.original_amount > 0:
        share = f"{(details.credit_amount / txn.original_amount * 100).quantize(Decimal('0.1'))}%"
    else:
        share = "n/a (original amount is zero)"
    return VALIDATION_PROMPT_TEMPLATE.format(
        credit_amount=      format_amount(details.credit_amount),
        original_amount=    format_amount(txn.original_amount),
        currency=           txn.currency,
        credit_share=       share,
        credit_type=        determine_credit_type(details.credit_amount, txn.original_amount),
        reason=             details.reason.value,
        reason_description= details.reason_description,
        requester_type=     request.requester.requester_type.value,
        requires_approval=  "yes" if details.requires_approval else "no",
        approver_email=     _text(details.approver_email),
        schema=             _VALIDATION_SCHEMA,
    )


__all__ = [
    "SYSTEM_PROMPT",
    "TERMS_AND_CONDITIONS",
    "ALL_ITEMS",
    "REQUESTER_CONTEXT",
    "BANK_ISSUER",
    "GENERIC_ISSUER_NAME",
    "ISSUER_RESOLVERS",
    "MemoContext",
    "requester_context",
    "resolve_issuer",
    "generate_memo_number",
    "prepare_memo_context",
    "build_credit_memo_prompt",
    "build_summary_prompt",
    "build_validation_prompt",
]
