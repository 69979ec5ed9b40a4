"""
creditmemo.calculator
~~~~~~~~~~~~~~~~~~~~~
Derived financial figures for a credit memo.

Credit amounts are gross (tax included). The net subtotal is recovered by
dividing out the tax rate::

    subtotal   = credit_amount / (1 + rate)      rounded half-up to cents
    tax_amount = credit_amount - subtotal

so ``subtotal + tax_amount == credit_amount`` always holds exactly.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

TAX_RATE = Decimal("0.20")

CREDIT_TYPE_FULL = "FULL"
CREDIT_TYPE_PARTIAL = "PARTIAL"

_TWO = Decimal("0.01")


def round_money(value: Decimal) -> Decimal:
    return value.quantize(_TWO, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class FinancialBreakdown:
    """Subtotal / tax split of a gross credit amount."""

    subtotal:   Decimal
    tax_amount: Decimal
    total:      Decimal
    tax_rate:   Decimal = TAX_RATE

    @property
    def tax_percentage(self) -> Decimal:
        """Tax rate as a percentage, e.g. ``Decimal("20")``."""
        return (self.tax_rate * 100).normalize()


def calculate_subtotal(credit_amount: Decimal, rate: Decimal = TAX_RATE) -> Decimal:
    """Net amount contained in a gross ``credit_amount``."""
    return round_money(Decimal(credit_amount) / (Decimal(1) + rate))


def calculate_tax_amount(credit_amount: Decimal, rate: Decimal = TAX_RATE) -> Decimal:
    """Tax portion of a gross ``credit_amount``."""
    return Decimal(credit_amount) - calculate_subtotal(credit_amount, rate)


def split_credit_amount(credit_amount: Decimal, rate: Decimal = TAX_RATE) -> FinancialBreakdown:
    subtotal = calculate_subtotal(credit_amount, rate)
    return FinancialBreakdown(
        subtotal=subtotal,
        tax_amount=Decimal(credit_amount) - subtotal,
        total=Decimal(credit_amount),
        tax_rate=rate,
    )


def determine_credit_type(credit_amount: Decimal, original_amount: Decimal) -> str:
    """``"FULL"`` when the credit covers the whole original amount, else ``"PARTIAL"``."""
    if Decimal(credit_amount) >= Decimal(original_amount):
        return CREDIT_TYPE_FULL
    return CREDIT_TYPE_PARTIAL


__all__ = [
    "TAX_RATE",
    "CREDIT_TYPE_FULL",
    "CREDIT_TYPE_PARTIAL",
    "FinancialBreakdown",
    "round_money",
    "calculate_subtotal",
    "calculate_tax_amount",
    "split_credit_amount",
    "determine_credit_type",
]
