# gst_returns/domain/services/sales_register.py
"""
Register exports for the books: sales register, credit/debit note register
and an unfiltered HSN summary. Single-sheet workbooks, one row per document,
closing TOTAL row.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Literal, Sequence

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill
from openpyxl.utils import get_column_letter

from gst_returns.domain.models.gst import (
    BusinessProfile,
    Customer,
    Invoice,
    Note,
)
from gst_returns.domain.services.gst_rounding import ZERO, line_tax, line_taxable, r2, split_tax
from gst_returns.domain.services.gstr1_service import format_gst_date

logger = logging.getLogger("sales_register")

HEADER_FILL = PatternFill(start_color="D9D9D9", end_color="D9D9D9", fill_type="solid")


def register_filename(prefix: str, period_label: str) -> str:
    safe = re.sub(r"[^a-zA-Z0-9\-_]", "_", period_label)
    return f"{prefix}_{safe}.xlsx"


def _build_workbook(
    title: str,
    gstin: str,
    sheet_name: str,
    headers: Sequence[str],
    rows: list[list],
    col_widths: Sequence[int],
) -> Workbook:
    wb = Workbook()
    ws = wb.active
    ws.title = sheet_name

    ws.cell(row=1, column=1, value=title).font = Font(bold=True, size=12)
    ws.cell(row=1, column=4, value=f"GSTIN: {gstin or '-'}")
    # row 2 left blank
    for idx, col_name in enumerate(headers, start=1):
        hdr = ws.cell(row=3, column=idx, value=col_name)
        hdr.font = Font(bold=True)
        hdr.fill = HEADER_FILL
    for r_idx, row in enumerate(rows, start=4):
        for c_idx, val in enumerate(row, start=1):
            ws.cell(row=r_idx, column=c_idx, value=val)
    if rows:
        for c_idx in range(1, len(headers) + 1):
            ws.cell(row=3 + len(rows), column=c_idx).font = Font(bold=True)

    for idx, width in enumerate(col_widths, start=1):
        ws.column_dimensions[get_column_letter(idx)].width = width
    return wb


# ---------------------------------------------------------------------------
# Sales register
# ---------------------------------------------------------------------------

SALES_REGISTER_HEADERS = (
    "#", "Date", "Invoice No.", "Party Name", "GSTIN", "Taxable Amount",
    "IGST", "CGST", "SGST", "Total Tax", "Total Amount", "Status",
)


def build_sales_register(
    profile: BusinessProfile,
    invoices: Iterable[Invoice],
    customers: Iterable[Customer],
    period_label: str,
) -> Workbook:
    cust_map = {c.id: c for c in customers}
    ordered = sorted(invoices, key=lambda inv: inv.date)

    totals = dict.fromkeys(("taxable", "igst", "cgst", "sgst", "tax", "amount"), ZERO)
    rows: list[list] = []
    for idx, inv in enumerate(ordered, start=1):
        cust = cust_map.get(inv.customer_id)
        tax = r2(inv.cgst + inv.sgst + inv.igst)
        totals["taxable"] += r2(inv.total_before_tax)
        totals["igst"] += r2(inv.igst)
        totals["cgst"] += r2(inv.cgst)
        totals["sgst"] += r2(inv.sgst)
        totals["tax"] += tax
        totals["amount"] += r2(inv.total_amount)
        rows.append([
            idx,
            format_gst_date(inv.date),
            inv.invoice_number,
            inv.customer_name,
            (cust.gstin if cust else None) or "",
            float(r2(inv.total_before_tax)),
            float(r2(inv.igst)),
            float(r2(inv.cgst)),
            float(r2(inv.sgst)),
            float(tax),
            float(r2(inv.total_amount)),
            inv.status,
        ])

    rows.append([
        "TOTAL", "", "", "", "",
        float(totals["taxable"]),
        float(totals["igst"]),
        float(totals["cgst"]),
        float(totals["sgst"]),
        float(totals["tax"]),
        float(totals["amount"]),
        "",
    ])

    logger.info("sales_register: %d invoices for %s", len(ordered), period_label)
    return _build_workbook(
        title=f"Sales Register - {period_label} - {profile.name}",
        gstin=profile.gstin,
        sheet_name="Sales Register",
        headers=SALES_REGISTER_HEADERS,
        rows=rows,
        col_widths=(4, 12, 16, 26, 18, 15, 10, 10, 10, 12, 14, 10),
    )


# ---------------------------------------------------------------------------
# Credit / debit note register
# ---------------------------------------------------------------------------

def build_notes_register(
    profile: BusinessProfile,
    notes: Iterable[Note],
    note_type: Literal["Credit", "Debit"],
    period_label: str,
    customers: Iterable[Customer] = (),
) -> Workbook:
    cust_map = {c.id: c for c in customers}
    headers = (
        "#", "Date", f"{note_type} Note No.", "Party Name", "GSTIN", "Linked Invoice",
        "Taxable Amount", "IGST", "CGST", "SGST", "Total Amount",
    )
    ordered = sorted(notes, key=lambda n: n.date)

    totals = dict.fromkeys(("taxable", "igst", "cgst", "sgst", "amount"), ZERO)
    rows: list[list] = []
    for idx, note in enumerate(ordered, start=1):
        cust = cust_map.get(note.customer_id)
        totals["taxable"] += r2(note.total_before_tax)
        totals["igst"] += r2(note.igst)
        totals["cgst"] += r2(note.cgst)
        totals["sgst"] += r2(note.sgst)
        totals["amount"] += r2(note.total_amount)
        rows.append([
            idx,
            format_gst_date(note.date),
            note.note_number,
            note.customer_name,
            (cust.gstin if cust else None) or "",
            note.original_invoice_number or "",
            float(r2(note.total_before_tax)),
            float(r2(note.igst)),
            float(r2(note.cgst)),
            float(r2(note.sgst)),
            float(r2(note.total_amount)),
        ])

    rows.append([
        "TOTAL", "", "", "", "", "",
        float(totals["taxable"]),
        float(totals["igst"]),
        float(totals["cgst"]),
        float(totals["sgst"]),
        float(totals["amount"]),
    ])

    return _build_workbook(
        title=f"{note_type} Notes Register - {period_label} - {profile.name}",
        gstin=profile.gstin,
        sheet_name=f"{note_type} Notes",
        headers=headers,
        rows=rows,
        col_widths=(4, 12, 18, 26, 18, 16, 15, 10, 10, 10, 14),
    )


# ---------------------------------------------------------------------------
# HSN summary (books view)
# ---------------------------------------------------------------------------

@dataclass
class HsnRegisterRow:
    hsn_code: str
    description: str
    uqc: str = "NOS"
    total_qty: Decimal = ZERO
    taxable_value: Decimal = ZERO
    cgst: Decimal = ZERO
    sgst: Decimal = ZERO
    igst: Decimal = ZERO
    total_tax: Decimal = ZERO


def aggregate_hsn(invoices: Iterable[Invoice]) -> list[HsnRegisterRow]:
    """
    HSN totals over invoices only, every code kept (no minimum-digit rule,
    unlike the GSTR-1 HSN table). Blank codes are grouped under ``N/A``.
    """
    rows: dict[str, HsnRegisterRow] = {}
    for inv in invoices:
        for item in inv.items:
            hsn = (item.hsn_code or "").strip() or "N/A"
            row = rows.get(hsn)
            if row is None:
                row = rows[hsn] = HsnRegisterRow(hsn_code=hsn, description=item.description)
            igst, cgst, sgst = split_tax(line_tax(item), inv.gst_type)
            row.total_qty += item.quantity
            row.taxable_value += line_taxable(item)
            row.igst += igst
            row.cgst += cgst
            row.sgst += sgst
            row.total_tax += igst + cgst + sgst
    return sorted(rows.values(), key=lambda r: r.hsn_code)


def build_hsn_register(profile: BusinessProfile, invoices: Iterable[Invoice], period_label: str) -> Workbook:
    hsn_rows = aggregate_hsn(invoices)
    rows: list[list] = [
        [
            r.hsn_code, r.description, r.uqc, float(r2(r.total_qty)), float(r.taxable_value),
            float(r.cgst), float(r.sgst), float(r.igst), float(r.total_tax),
        ]
        for r in hsn_rows
    ]
    rows.append([
        "TOTAL", "", "", "",
        float(sum((r.taxable_value for r in hsn_rows), ZERO)),
        float(sum((r.cgst for r in hsn_rows), ZERO)),
        float(sum((r.sgst for r in hsn_rows), ZERO)),
        float(sum((r.igst for r in hsn_rows), ZERO)),
        float(sum((r.total_tax for r in hsn_rows), ZERO)),
    ])
    return _build_workbook(
        title=f"HSN Summary - {period_label} - {profile.name}",
        gstin=profile.gstin,
        sheet_name="HSN Summary",
        headers=("HSN Code", "Description", "UQC", "Total Qty", "Taxable Value", "CGST", "SGST", "IGST", "Total Tax"),
        rows=rows,
        col_widths=(12, 30, 8, 10, 16, 12, 12, 12, 14),
    )
