"""
tests/test_assembler.py
~~~~~~~~~~~~~~~~~~~~~~~
Tests for creditmemo.assembler: status derivation, reconciliation,
document rendering and response assembly.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from creditmemo.assembler import (
    NO_LINE_ITEMS,
    NOT_PROVIDED,
    assemble_response,
    derive_status,
    reconcile_document,
    render_document,
)
from creditmemo.models import (
    CreditMemoDocument,
    CreditMemoStatus,
    RecipientBankDetails,
)
from creditmemo.prompts import BANK_ISSUER, TERMS_AND_CONDITIONS, prepare_memo_context


@pytest.fixture
def context(sample_request, today):
    return prepare_memo_context(sample_request, today=today)


@pytest.fixture
def document(llm_document_response) -> CreditMemoDocument:
    return CreditMemoDocument.from_dict(llm_document_response)


class TestDeriveStatus:
    def test_draft_without_approval(self, make_request):
        assert derive_status(make_request(credit={"requiresApproval": False})) == CreditMemoStatus.DRAFT

    def test_pending_with_approval(self, make_request):
        req = make_request(credit={"requiresApproval": True})
        assert derive_status(req) == CreditMemoStatus.PENDING_APPROVAL


class TestReconcileDocument:
    def test_core_fields_overwrite_model_values(self, document, sample_request, context):
        doc = reconcile_document(document, sample_request, context)
        assert doc.credit_memo_number == context.memo_number
        assert doc.issue_date == date(2024, 10, 1)
        assert doc.terms_and_conditions == TERMS_AND_CONDITIONS
        assert doc.authorized_by == "Sarah Mitchell"
        assert doc.notes == "Replacement unit dispatched separately."

    def test_empty_document_is_filled(self, sample_request, context):
        doc = reconcile_document(CreditMemoDocument(), sample_request, context)
        assert doc.issuer == BANK_ISSUER
        assert doc.recipient.customer_id == "CUST-10293"
        assert doc.original_invoice.invoice_number == "INV-2024-00417"
        assert doc.original_invoice.original_amount == Decimal("5000.00")
        assert doc.credit_info.reason == "DEFECTIVE_GOODS"
        assert doc.credit_info.credit_type == "PARTIAL"
        assert doc.financial_summary.subtotal == Decimal("416.67")
        assert doc.financial_summary.tax_amount == Decimal("83.33")
        assert doc.financial_summary.total_credit_amount == Decimal("500.00")
        assert doc.financial_summary.currency == "USD"

    def test_line_items_left_alone(self, sample_request, context):
        doc = reconcile_document(CreditMemoDocument(), sample_request, context)
        assert doc.credit_line_items is None

    def test_model_figures_replaced_by_core_values(self, document, sample_request, context):
        document.financial_summary.subtotal = Decimal("400.0")
        document.financial_summary.tax_amount = Decimal("100.0")
        document.financial_summary.total_credit_amount = Decimal("999.99")
        document.financial_summary.currency = "EUR"
        document.credit_info.credit_type = "FULL"
        document.credit_info.reason = "GOODWILL_GESTURE"
        document.original_invoice.original_amount = Decimal("1.00")
        document.original_invoice.invoice_number = "INV-MADE-UP"

        doc = reconcile_document(document, sample_request, context)
        assert doc.financial_summary.subtotal == Decimal("416.67")
        assert doc.financial_summary.tax_amount == Decimal("83.33")
        assert doc.financial_summary.total_credit_amount == Decimal("500.00")
        assert doc.financial_summary.currency == "USD"
        assert doc.credit_info.credit_type == "PARTIAL"
        assert doc.credit_info.reason == "DEFECTIVE_GOODS"
        assert doc.original_invoice.original_amount == Decimal("5000.00")
        assert doc.original_invoice.invoice_number == "INV-2024-00417"

    def test_model_explanation_kept(self, document, sample_request, context):
        doc = reconcile_document(document, sample_request, context)
        assert doc.credit_info.detailed_explanation.startswith("One shelving unit")

    def test_notes_cleared_when_request_has_none(self, document, make_request, context):
        req = make_request(credit={"additionalNotes": None})
        assert reconcile_document(document, req, context).notes is None


class TestRenderDocument:
    def test_section_order(self, document, sample_request, context):
        text = render_document(reconcile_document(document, sample_request, context))
        headings = [
            "=== CREDIT MEMO ===",
            "ISSUER (FROM):",
            "RECIPIENT (TO):",
            "ORIGINAL INVOICE REFERENCE:",
            "CREDIT REASON:",
            "CREDIT LINE ITEMS:",
            "FINANCIAL SUMMARY:",
            "Terms & Conditions:",
            "Authorized By:",
        ]
        positions = [text.index(h) for h in headings]
        assert positions == sorted(positions)

    def test_values_rendered(self, document, sample_request, context):
        text = render_document(reconcile_document(document, sample_request, context))
        assert f"Credit Memo Number: {context.memo_number}" in text
        assert "Issue Date: 2024-10-01" in text
        assert "Name: UK Business Bank plc" in text
        assert "Customer ID: CUST-10293" in text
        assert "Original Amount: 5000.00 USD" in text
        assert "- Industrial shelving unit (Qty: 1)" in text
        assert "Subtotal: 416.67" in text
        assert "Tax: 83.33" in text
        assert "TOTAL CREDIT: 500.00 USD" in text
        assert "Authorized By: Sarah Mitchell" in text

    def test_missing_line_items_use_fallback(self, llm_document_response, sample_request, context):
        del llm_document_response["creditLineItems"]
        doc = CreditMemoDocument.from_dict(llm_document_response)
        text = render_document(reconcile_document(doc, sample_request, context))
        assert NO_LINE_ITEMS in text

    def test_empty_line_items_use_fallback(self, llm_document_response):
        llm_document_response["creditLineItems"] = []
        text = render_document(CreditMemoDocument.from_dict(llm_document_response))
        assert NO_LINE_ITEMS in text

    def test_bank_details_omitted_when_absent(self, document):
        assert "RECIPIENT BANK DETAILS:" not in render_document(document)

    def test_bank_details_rendered_when_present(self, document):
        document.recipient.bank_details = RecipientBankDetails(
            bank_name="Other Bank", sort_code="20-00-00"
        )
        text = render_document(document)
        assert "RECIPIENT BANK DETAILS:" in text
        assert "Bank: Other Bank" in text
        assert f"SWIFT: {NOT_PROVIDED}" in text

    def test_notes_omitted_when_absent(self, document):
        document.notes = None
        assert "Notes:" not in render_document(document)

    def test_notes_rendered_when_present(self, document):
        assert "Notes: Replacement unit dispatched separately." in render_document(document)

    def test_empty_document_never_raises(self):
        text = render_document(CreditMemoDocument())
        assert text.startswith("=== CREDIT MEMO ===")
        assert NO_LINE_ITEMS in text
        assert f"Credit Memo Number: {NOT_PROVIDED}" in text

    def test_amounts_rendered_with_two_decimals(self, document):
        document.financial_summary.subtotal = Decimal("416.6")
        document.financial_summary.tax_amount = Decimal("83.335")
        document.credit_line_items[0].unit_price = Decimal("400")
        text = render_document(document)
        assert "Subtotal: 416.60" in text
        assert "Tax: 83.34" in text
        assert "@ 400.00 = 500.00" in text

    def test_oversized_amount_does_not_raise(self, document):
        document.financial_summary.subtotal = Decimal("1E+40")
        assert "Subtotal:" in render_document(document)

    def test_deterministic(self, document):
        assert render_document(document) == render_document(document)


class TestAssembleResponse:
    def test_authoritative_values_from_request(self, document, sample_request, context):
        # The model restates a different amount and currency; the response must not use them.
        document.financial_summary.total_credit_amount = Decimal("999.99")
        document.financial_summary.currency = "EUR"
        doc = reconcile_document(document, sample_request, context)

        resp = assemble_response(
            sample_request, doc, "Summary text.",
            processing_time_ms=1234, model="llama3.1",
            credit_memo_id="id-1", generated_at=datetime(2024, 10, 1, 9, 30),
        )
        assert resp.credit_amount == Decimal("500.00")
        assert resp.currency == "USD"
        assert resp.reason == "DEFECTIVE_GOODS"
        assert resp.customer_id == "CUST-10293"
        assert resp.customer_name == "Northern Supplies Limited"
        assert resp.original_invoice_number == "INV-2024-00417"
        assert resp.generated_by == "Sarah Mitchell"
        assert "Subtotal: 416.67" in resp.credit_memo_document
        assert "TOTAL CREDIT: 500.00 USD" in resp.credit_memo_document
        assert "999.99" not in resp.credit_memo_document
        assert "EUR" not in resp.credit_memo_document

    def test_status_and_approval(self, document, make_request, context):
        req = make_request(credit={"requiresApproval": True})
        resp = assemble_response(req, document, "s", processing_time_ms=1, model="m")
        assert resp.status == CreditMemoStatus.PENDING_APPROVAL
        assert resp.approval_status == "PENDING_APPROVAL"
        assert resp.requires_approval is True

    def test_metadata(self, document, sample_request):
        resp = assemble_response(
            sample_request, document, "s",
            processing_time_ms=42, model="llama3.1", credit_memo_id="abc",
        )
        assert resp.credit_memo_id == "abc"
        assert resp.metadata.request_id == "abc"
        assert resp.metadata.processing_time_ms == 42
        assert resp.metadata.model == "llama3.1"
        assert resp.metadata.tokens_used == 0

    def test_generates_id_when_missing(self, document, sample_request):
        resp = assemble_response(sample_request, document, "s", processing_time_ms=1, model="m")
        assert len(resp.credit_memo_id) == 36

    def test_document_and_summary(self, document, sample_request):
        resp = assemble_response(sample_request, document, "Summary text.", processing_time_ms=1, model="m")
        assert resp.summary == "Summary text."
        assert resp.credit_memo_document == render_document(document)
        assert resp.credit_memo_number == document.credit_memo_number
