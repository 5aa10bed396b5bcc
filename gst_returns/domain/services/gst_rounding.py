# gst_returns/domain/services/gst_rounding.py
"""
Money helpers shared by every GSTR-1 bucket.

Rule: each line's taxable value and tax are rounded to paise as soon as they
are computed from quantity x rate. Totals are sums of those rounded values.
Halving a tax amount for CGST/SGST rounds again.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from gst_returns.domain.models.gst import GSTType, LineItem

ZERO = Decimal("0.00")
HUNDRED = Decimal("100")
_PAISE = Decimal("0.01")


def _to_decimal(value) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return ZERO


def r2(value) -> Decimal:
    """Round to 2 decimal places, halves away from zero."""
    return _to_decimal(value).quantize(_PAISE, rounding=ROUND_HALF_UP)


def line_taxable(item: LineItem) -> Decimal:
    return r2(_to_decimal(item.quantity) * _to_decimal(item.rate))


def line_tax(item: LineItem) -> Decimal:
    return r2(line_taxable(item) * _to_decimal(item.gst_rate) / HUNDRED)


def split_tax(tax: Decimal, gst_type: GSTType) -> tuple[Decimal, Decimal, Decimal]:
    """Split a line's tax into (igst, cgst, sgst) for the given regime."""
    if gst_type == GSTType.IGST:
        return r2(tax), ZERO, ZERO
    half = r2(tax / 2)
    return ZERO, half, half


def compute_totals(items: list[LineItem], gst_type: GSTType) -> dict[str, Decimal]:
    """
    Build document totals from line items using the same rounding as the
    return, so ``total_amount == total_before_tax + cgst + sgst + igst``.
    """
    total_before_tax = ZERO
    igst = cgst = sgst = ZERO
    for item in items:
        total_before_tax += line_taxable(item)
        i, c, s = split_tax(line_tax(item), gst_type)
        igst += i
        cgst += c
        sgst += s

    return {
        "total_before_tax": total_before_tax,
        "cgst": cgst,
        "sgst": sgst,
        "igst": igst,
        "total_amount": total_before_tax + cgst + sgst + igst,
    }
