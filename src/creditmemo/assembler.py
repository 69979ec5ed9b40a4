"""
creditmemo.assembler
~~~~~~~~~~~~~~~~~~~~
Turns the model's document into the API response.

Three steps, all pure:
  1. ``reconcile_document``: overwrite the fields the core owns and fill
     in any substructure the model left out.
  2. ``render_document``:    deterministic text rendering, null-safe.
  3. ``assemble_response``:  authoritative values from the request,
     rendering + summary from the model.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import InvalidOperation
from typing import Optional

from .calculator import round_money
from .models import (
    CreditInformation,
    CreditMemoDocument,
    CreditMemoRequest,
    CreditMemoResponse,
    CreditMemoStatus,
    FinancialSummary,
    OriginalInvoiceReference,
    ProcessingMetadata,
)
from .prompts import TERMS_AND_CONDITIONS, MemoContext
from .utils import format_amount

NO_LINE_ITEMS = "No line item breakdown available"
NOT_PROVIDED = "Not provided"


# ---------------------------------------------------------------------------
# Status
# ---------------------------------------------------------------------------

def derive_status(request: CreditMemoRequest) -> CreditMemoStatus:
    if request.credit_details.requires_approval:
        return CreditMemoStatus.PENDING_APPROVAL
    return CreditMemoStatus.DRAFT


# ---------------------------------------------------------------------------
# Reconciliation
# ---------------------------------------------------------------------------

def reconcile_document(
    document: CreditMemoDocument,
    request: CreditMemoRequest,
    context: MemoContext,
) -> CreditMemoDocument:
    """
    Apply core-owned values to ``document`` (in place) and return it.

    Memo number, issue date, terms, authorisation, notes, the invoice
    reference, the credit reason and type, and every financial summary
    figure always come from the core. A missing issuer or recipient is
    rebuilt from the request.
    Line items are left exactly as the model produced them, including
    ``None``, so the renderer's fallback stays visible.
    """
    txn = request.original_transaction
    details = request.credit_details

    document.credit_memo_number = context.memo_number
    document.issue_date = context.issue_date
    document.terms_and_conditions = TERMS_AND_CONDITIONS
    document.authorized_by = request.requester.name
    document.notes = details.additional_notes

    if document.issuer is None:
        document.issuer = context.issuer
    if document.recipient is None:
        document.recipient = context.recipient
    document.original_invoice = OriginalInvoiceReference(
        invoice_number=txn.invoice_number,
        invoice_date=txn.transaction_date,
        original_amount=txn.original_amount,
    )

    if document.credit_info is None:
        document.credit_info = CreditInformation()
    document.credit_info.reason = details.reason.value
    document.credit_info.credit_type = context.credit_type

    document.financial_summary = FinancialSummary(
        subtotal=context.breakdown.subtotal,
        tax_amount=context.breakdown.tax_amount,
        total_credit_amount=context.breakdown.total,
        currency=context.currency,
    )

    return document


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------

def _v(value: object) -> str:
    """Single fallback rendering for any absent scalar."""
    if value is None or value == "":
        return NOT_PROVIDED
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return str(value)


def _amount(value, currency: Optional[str] = None) -> str:
    if value is None:
        return NOT_PROVIDED
    try:
        text = format_amount(round_money(value))
    except InvalidOperation:
        text = format_amount(value)
    return f"{text} {currency}" if currency else text


def _render_header(doc: CreditMemoDocument) -> list[str]:
    return [
        "=== CREDIT MEMO ===",
        "",
        f"Credit Memo Number: {_v(doc.credit_memo_number)}",
        f"Issue Date: {_v(doc.issue_date)}",
        "",
    ]


def _render_issuer(doc: CreditMemoDocument) -> list[str]:
    issuer = doc.issuer
    if issuer is None:
        return ["ISSUER (FROM):", NOT_PROVIDED, ""]
    lines = [
        "ISSUER (FROM):",
        f"Name: {_v(issuer.name)}",
        f"Address: {_v(issuer.address)}",
        f"Email: {_v(issuer.email)}",
        f"Phone: {_v(issuer.phone)}",
    ]
    if issuer.account_number:
        lines.append(f"Account Number: {issuer.account_number}")
    lines.append("")
    return lines


def _render_recipient(doc: CreditMemoDocument) -> list[str]:
    recipient = doc.recipient
    if recipient is None:
        return ["RECIPIENT (TO):", NOT_PROVIDED, ""]
    lines = [
        "RECIPIENT (TO):",
        f"Name: {_v(recipient.name)}",
        f"Customer ID: {_v(recipient.customer_id)}",
        f"Address: {_v(recipient.address)}",
        f"Email: {_v(recipient.email)}",
        f"Phone: {_v(recipient.phone)}",
        f"Account Number: {_v(recipient.account_number)}",
        "",
    ]
    bank = recipient.bank_details
    if bank is not None:
        lines += [
            "RECIPIENT BANK DETAILS:",
            f"Bank: {_v(bank.bank_name)}",
            f"Branch: {_v(bank.bank_branch)}",
            f"Sort Code: {_v(bank.sort_code)}",
            f"SWIFT: {_v(bank.swift_code)}",
            f"Account Holder: {_v(bank.account_holder_name)}",
            "",
        ]
    return lines


def _render_invoice(doc: CreditMemoDocument, currency: Optional[str]) -> list[str]:
    invoice = doc.original_invoice or OriginalInvoiceReference()
    return [
        "ORIGINAL INVOICE REFERENCE:",
        f"Invoice Number: {_v(invoice.invoice_number)}",
        f"Invoice Date: {_v(invoice.invoice_date)}",
        f"Original Amount: {_amount(invoice.original_amount, currency)}",
        "",
    ]


def _render_credit_info(doc: CreditMemoDocument) -> list[str]:
    info = doc.credit_info or CreditInformation()
    return [
        "CREDIT REASON:",
        f"Reason: {_v(info.reason)}",
        f"Credit Type: {_v(info.credit_type)}",
        _v(info.detailed_explanation),
        "",
    ]


def _render_line_items(doc: CreditMemoDocument) -> list[str]:
    lines = ["CREDIT LINE ITEMS:"]
    if not doc.credit_line_items:
        lines.append(NO_LINE_ITEMS)
    else:
        for item in doc.credit_line_items:
            lines.append(
                f"- {_v(item.item_description)} (Qty: {_v(item.quantity)}) "
                f"@ {_amount(item.unit_price)} = {_amount(item.line_total)}"
                f" - {_v(item.reason_for_credit)}"
            )
    lines.append("")
    return lines


def _render_financial_summary(doc: CreditMemoDocument) -> list[str]:
    summary = doc.financial_summary or FinancialSummary()
    return [
        "FINANCIAL SUMMARY:",
        f"Subtotal: {_amount(summary.subtotal)}",
        f"Tax: {_amount(summary.tax_amount)}",
        f"TOTAL CREDIT: {_amount(summary.total_credit_amount, summary.currency)}",
        "",
    ]


def render_document(document: CreditMemoDocument) -> str:
    """
    Human-readable rendering in a fixed section order.

    Never raises on missing data: absent scalars become "Not provided",
    missing line items become a single fallback line, and the bank details
    and notes sections are left out entirely when absent.
    """
    currency = document.financial_summary.currency if document.financial_summary else None

    lines: list[str] = []
    lines += _render_header(document)
    lines += _render_issuer(document)
    lines += _render_recipient(document)
    lines += _render_invoice(document, currency)
    lines += _render_credit_info(document)
    lines += _render_line_items(document)
    lines += _render_financial_summary(document)
    lines.append(f"Terms & Conditions: {_v(document.terms_and_conditions)}")
    lines.append(f"Authorized By: {_v(document.authorized_by)}")
    if document.notes:
        lines.append(f"Notes: {document.notes}")
    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# Response
# ---------------------------------------------------------------------------

def assemble_response(
    request: CreditMemoRequest,
    document: CreditMemoDocument,
    summary: str,
    *,
    processing_time_ms: int,
    model: str,
    credit_memo_id: Optional[str] = None,
    generated_at: Optional[datetime] = None,
) -> CreditMemoResponse:
    """Build the API response. Amount, currency and reason come from ``request``."""
    credit_memo_id = credit_memo_id or str(uuid.uuid4())
    status = derive_status(request)
    details = request.credit_details
    txn = request.original_transaction

    return CreditMemoResponse(
        credit_memo_id=          credit_memo_id,
        credit_memo_number=      document.credit_memo_number,
        generated_at=            generated_at or datetime.now(),
        status=                  status,
        original_invoice_number= txn.invoice_number,
        customer_id=             request.customer.customer_id,
        customer_name=           request.customer.customer_name,
        credit_amount=           details.credit_amount,
        currency=                txn.currency,
        reason=                  details.reason.value,
        credit_memo_document=    render_document(document),
        summary=                 summary,
        requires_approval=       details.requires_approval,
        approval_status=         status.value,
        generated_by=            request.requester.name,
        metadata=ProcessingMetadata(
            processing_time_ms=processing_time_ms,
            model=model,
            tokens_used=0,
            request_id=credit_memo_id,
        ),
    )


__all__ = [
    "NO_LINE_ITEMS",
    "NOT_PROVIDED",
    "derive_status",
    "reconcile_document",
    "render_document",
    "assemble_response",
]
