# gst_returns/domain/services/tax_summary.py
"""
Tax summary for a set of invoices: totals, a rate-wise breakdown and the tax
still outstanding on unpaid or partly paid invoices.

This is a books view; it reads invoices as recorded and does not classify
them into GSTR-1 tables.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Iterable

from gst_returns.domain.models.gst import GSTType, Invoice
from gst_returns.domain.services.gst_rounding import ZERO, line_tax, line_taxable, r2, split_tax

OUTSTANDING_STATUSES = ("Unpaid", "Partial")


@dataclass
class TaxRateRow:
    rate: Decimal
    taxable: Decimal = ZERO
    cgst: Decimal = ZERO
    sgst: Decimal = ZERO
    igst: Decimal = ZERO
    tax: Decimal = ZERO
    count: int = 0  # line items at this rate


@dataclass
class TaxSummary:
    taxable: Decimal = ZERO
    cgst: Decimal = ZERO
    sgst: Decimal = ZERO
    igst: Decimal = ZERO
    intra_state_invoices: int = 0
    inter_state_invoices: int = 0
    unpaid_invoices: int = 0
    outstanding_tax: Decimal = ZERO
    rates: list[TaxRateRow] = field(default_factory=list)

    @property
    def total_tax(self) -> Decimal:
        return self.cgst + self.sgst + self.igst

    def to_dict(self) -> dict:
        return {
            "taxable": float(self.taxable),
            "cgst": float(self.cgst),
            "sgst": float(self.sgst),
            "igst": float(self.igst),
            "total_tax": float(self.total_tax),
            "intra_state_invoices": self.intra_state_invoices,
            "inter_state_invoices": self.inter_state_invoices,
            "unpaid_invoices": self.unpaid_invoices,
            "outstanding_tax": float(self.outstanding_tax),
            "rates": [
                {
                    "rate": float(row.rate),
                    "taxable": float(row.taxable),
                    "cgst": float(row.cgst),
                    "sgst": float(row.sgst),
                    "igst": float(row.igst),
                    "tax": float(row.tax),
                    "count": row.count,
                }
                for row in self.rates
            ],
        }


def tax_summary(invoices: Iterable[Invoice]) -> TaxSummary:
    """
    Totals come from the invoices' recorded amounts; the rate-wise rows are
    rebuilt from line items with the return's rounding, split by each
    invoice's regime. Deleted invoices are skipped.
    """
    summary = TaxSummary()
    by_rate: dict[Decimal, TaxRateRow] = {}

    for inv in invoices:
        if inv.deleted:
            continue
        summary.taxable += r2(inv.total_before_tax)
        summary.cgst += r2(inv.cgst)
        summary.sgst += r2(inv.sgst)
        summary.igst += r2(inv.igst)
        if inv.gst_type == GSTType.IGST:
            summary.inter_state_invoices += 1
        else:
            summary.intra_state_invoices += 1
        if inv.status in OUTSTANDING_STATUSES:
            summary.unpaid_invoices += 1
            summary.outstanding_tax += r2(inv.cgst) + r2(inv.sgst) + r2(inv.igst)

        for item in inv.items:
            row = by_rate.get(item.gst_rate)
            if row is None:
                row = by_rate[item.gst_rate] = TaxRateRow(rate=item.gst_rate)
            tax = line_tax(item)
            igst, cgst, sgst = split_tax(tax, inv.gst_type)
            row.taxable += line_taxable(item)
            row.cgst += cgst
            row.sgst += sgst
            row.igst += igst
            row.tax += igst + cgst + sgst
            row.count += 1

    summary.rates = sorted(by_rate.values(), key=lambda r: r.rate)
    return summary
