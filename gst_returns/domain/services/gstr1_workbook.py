# gst_returns/domain/services/gstr1_workbook.py
"""
GSTR-1 workbook in the GST portal offline-tool layout.

Every sheet follows the same block:
    Row 1: Sheet title
    Row 2: Summary labels
    Row 3: Summary values (live COUNTA/SUM formulas over the data range)
    Row 4: Column headers
    Row 5+: Data rows

The formulas run to the last spreadsheet row so that rows added by hand
before upload are still counted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from io import BytesIO
from typing import Callable

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font, PatternFill
from openpyxl.utils import get_column_letter

from gst_returns.config.settings import settings
from gst_returns.domain.services.gstr1_service import Gstr1Summary

logger = logging.getLogger("gstr1_workbook")

DATA_START_ROW = 5
COLUMN_WIDTH = 20
HEADER_FILL = PatternFill(start_color="D9D9D9", end_color="D9D9D9", fill_type="solid")

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

Row = list


def _d(val: Decimal | None) -> float:
    """Convert Decimal to float for the sheet."""
    if val is None:
        return 0.0
    return float(val)


def _applicable(flag: bool) -> str:
    return "Applicable" if flag else "Not Applicable"


def _state_type(inter_state: bool) -> str:
    return "Inter-State" if inter_state else "Intra-State"


# ---------------------------------------------------------------------------
# Data rows per sheet
# ---------------------------------------------------------------------------

def _b2b_rows(summary: Gstr1Summary) -> list[Row]:
    return [
        [
            inv.ctin, inv.receiver_name, inv.num, inv.dt, _d(inv.val), inv.pos,
            "Y" if inv.rchrg else "N",
            "Regular",
            "",  # E-Commerce GSTIN
            _d(item.rt), _d(item.txval), 0,
        ]
        for inv in summary.b2b
        for item in inv.itms
    ]


def _sez_rows(summary: Gstr1Summary) -> list[Row]:
    return [
        [
            inv.ctin, inv.receiver_name, inv.num, inv.dt, _d(inv.val), inv.pos,
            _applicable(inv.with_payment), _d(item.rt), _d(item.txval), 0,
        ]
        for inv in summary.sez
        for item in inv.itms
    ]


def _de_rows(summary: Gstr1Summary) -> list[Row]:
    return [
        [
            inv.ctin, inv.receiver_name, inv.num, inv.dt, _d(inv.val), inv.pos,
            "Applicable", _d(item.rt), _d(item.txval), 0,
        ]
        for inv in summary.de
        for item in inv.itms
    ]


def _b2cl_rows(summary: Gstr1Summary) -> list[Row]:
    return [
        [inv.num, inv.dt, _d(inv.val), inv.pos, "Applicable", _d(item.rt), _d(item.txval), 0]
        for inv in summary.b2cl
        for item in inv.itms
    ]


def _b2cs_rows(summary: Gstr1Summary) -> list[Row]:
    return [
        [_state_type(row.inter_state), row.pos, "Applicable", _d(row.rt), _d(row.txval), 0, ""]
        for row in summary.b2cs
    ]


def _cdnr_rows(summary: Gstr1Summary) -> list[Row]:
    return [
        [
            note.ctin, note.receiver_name, note.num, note.dt, note.ntty, note.pos,
            "Y" if note.rchrg else "N",
            "Regular",
            _d(note.val), "Applicable", _d(item.rt), _d(item.txval), 0,
        ]
        for note in summary.cdnr
        for item in note.itms
    ]


def _cdnur_rows(summary: Gstr1Summary) -> list[Row]:
    return [
        [
            _state_type(note.inter_state), note.num, note.dt, note.ntty, note.pos,
            _d(note.val), "Applicable", _d(item.rt), _d(item.txval), 0,
        ]
        for note in summary.cdnur
        for item in note.itms
    ]


def _exp_rows(summary: Gstr1Summary) -> list[Row]:
    return [
        [
            inv.exp_typ, inv.num, inv.dt, _d(inv.val),
            inv.port_code, inv.sb_num, inv.sb_dt,
            _applicable(inv.with_payment), _d(item.rt), _d(item.txval), 0,
        ]
        for inv in summary.exp
        for item in inv.itms
    ]


def _no_rows(summary: Gstr1Summary) -> list[Row]:
    return []


def _exemp_rows(summary: Gstr1Summary) -> list[Row]:
    nil = summary.nil
    return [
        ["Inter-State supplies to registered persons", _d(nil.inter_reg), 0, 0],
        ["Inter-State supplies to unregistered persons", _d(nil.inter_unreg), 0, 0],
        ["Intra-State supplies to registered persons", _d(nil.intra_reg), 0, 0],
        ["Intra-State supplies to unregistered persons", _d(nil.intra_unreg), 0, 0],
    ]


def _hsn_rows(summary: Gstr1Summary) -> list[Row]:
    return [
        [
            row.hsn, row.desc, row.uqc, _d(row.qty), _d(row.val), _d(row.txval),
            _d(row.igst), _d(row.cgst), _d(row.sgst), 0,
        ]
        for row in summary.hsn
    ]


def _docs_rows(summary: Gstr1Summary) -> list[Row]:
    return [[doc.nature, doc.first, doc.last, doc.total, doc.cancelled] for doc in summary.docs]


# ---------------------------------------------------------------------------
# Sheet definitions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SheetSpec:
    """
    One portal sheet.

    ``summary`` pairs each summary label with a formula spec: ``None`` for an
    empty cell, or a tuple of ``(FUNCTION, column)`` terms that are added
    together, e.g. ``(("SUM", "G"), ("SUM", "H"))``.
    """
    name: str
    title: str
    headers: tuple[str, ...]
    summary: tuple[tuple[str, tuple[tuple[str, str], ...] | None], ...]
    rows: Callable[[Gstr1Summary], list[Row]]


_INVOICE_SUMMARY = (
    ("Summary", None),
    ("No. of Recipients", (("COUNTA", "A"),)),
    ("No. of Invoices", (("COUNTA", "C"),)),
    ("Total Invoice Value", (("SUM", "E"),)),
)

SHEETS: tuple[SheetSpec, ...] = (
    SheetSpec(
        name="b2b",
        title="GSTR1 - B2B Invoices",
        headers=(
            "GSTIN of Recipient", "Receiver Name", "Invoice Number", "Invoice date",
            "Invoice Value", "Place Of Supply", "Reverse Charge", "Invoice Type",
            "E-Commerce GSTIN", "Rate", "Taxable Value", "Cess Amount",
        ),
        summary=_INVOICE_SUMMARY + (("Total Taxable Value", (("SUM", "K"),)),),
        rows=_b2b_rows,
    ),
    SheetSpec(
        name="sez",
        title="GSTR1 - SEZ Supplies",
        headers=(
            "GSTIN of Recipient", "Receiver Name", "Invoice Number", "Invoice date",
            "Invoice Value", "Place Of Supply", "Applicable % of Tax Rate", "Rate",
            "Taxable Value", "Cess Amount",
        ),
        summary=_INVOICE_SUMMARY + (("Total Taxable Value", (("SUM", "I"),)),),
        rows=_sez_rows,
    ),
    SheetSpec(
        name="de",
        title="GSTR1 - Deemed Exports",
        headers=(
            "GSTIN of Recipient", "Receiver Name", "Invoice Number", "Invoice date",
            "Invoice Value", "Place Of Supply", "Applicable % of Tax Rate", "Rate",
            "Taxable Value", "Cess Amount",
        ),
        summary=_INVOICE_SUMMARY + (("Total Taxable Value", (("SUM", "I"),)),),
        rows=_de_rows,
    ),
    SheetSpec(
        name="b2cl",
        title="GSTR1 - B2CL Invoices (Inter-state >2.5L)",
        headers=(
            "Invoice Number", "Invoice date", "Invoice Value", "Place Of Supply",
            "Applicable % of Tax Rate", "Rate", "Taxable Value", "Cess Amount",
        ),
        summary=(
            ("Summary", None),
            ("No. of Invoices", (("COUNTA", "A"),)),
            ("Total Invoice Value", (("SUM", "C"),)),
            ("Total Taxable Value", (("SUM", "G"),)),
        ),
        rows=_b2cl_rows,
    ),
    SheetSpec(
        name="b2cs",
        title="GSTR1 - B2CS Invoices (Intra-state & Inter-state <=2.5L)",
        headers=(
            "Type", "Place Of Supply", "Applicable % of Tax Rate", "Rate",
            "Taxable Value", "Cess Amount", "E-Commerce GSTIN",
        ),
        summary=(
            ("Summary", None),
            ("No. of States", (("COUNTA", "B"),)),
            ("Total Taxable Value", (("SUM", "E"),)),
        ),
        rows=_b2cs_rows,
    ),
    SheetSpec(
        name="cdnr",
        title="GSTR1 - CDNR (Credit/Debit Notes for Registered)",
        headers=(
            "GSTIN of Recipient", "Receiver Name", "Note Number", "Note Date",
            "Note Type", "Place Of Supply", "Reverse Charge", "Note Supply Type",
            "Note Value", "Applicable % of Tax Rate", "Rate", "Taxable Value", "Cess Amount",
        ),
        summary=(
            ("Summary", None),
            ("No. of Recipients", (("COUNTA", "A"),)),
            ("No. of Notes", (("COUNTA", "C"),)),
            ("Total Note Value", (("SUM", "I"),)),
            ("Total Taxable Value", (("SUM", "L"),)),
        ),
        rows=_cdnr_rows,
    ),
    SheetSpec(
        name="cdnur",
        title="GSTR1 - CDNUR (Credit/Debit Notes for Unregistered)",
        headers=(
            "UR Type", "Note Number", "Note Date", "Note Type", "Place Of Supply",
            "Note Value", "Applicable % of Tax Rate", "Rate", "Taxable Value", "Cess Amount",
        ),
        summary=(
            ("Summary", None),
            ("No. of Notes", (("COUNTA", "B"),)),
            ("Total Note Value", (("SUM", "F"),)),
            ("Total Taxable Value", (("SUM", "I"),)),
        ),
        rows=_cdnur_rows,
    ),
    SheetSpec(
        name="exp",
        title="GSTR1 - Exports",
        headers=(
            "Export Type", "Invoice Number", "Invoice Date", "Invoice Value",
            "Port Code", "Shipping Bill Number", "Shipping Bill Date",
            "Applicable % of Tax Rate", "Rate", "Taxable Value", "Cess Amount",
        ),
        summary=(
            ("Summary", None),
            ("No. of Invoices", (("COUNTA", "B"),)),
            ("Total Invoice Value", (("SUM", "D"),)),
            ("Total Taxable Value", (("SUM", "J"),)),
        ),
        rows=_exp_rows,
    ),
    SheetSpec(
        name="at",
        title="GSTR1 - Advances Received",
        headers=("Place Of Supply", "Applicable % of Tax Rate", "Rate", "Gross Advance Received", "Cess Amount"),
        summary=(
            ("Summary", None),
            ("No. of Records", (("COUNTA", "A"),)),
            ("Total Advance Received", (("SUM", "D"),)),
        ),
        rows=_no_rows,
    ),
    SheetSpec(
        name="atadj",
        title="GSTR1 - Advance Adjusted",
        headers=("Place Of Supply", "Applicable % of Tax Rate", "Rate", "Gross Advance Adjusted", "Cess Amount"),
        summary=(
            ("Summary", None),
            ("No. of Records", (("COUNTA", "A"),)),
            ("Total Advance Adjusted", (("SUM", "D"),)),
        ),
        rows=_no_rows,
    ),
    SheetSpec(
        name="exemp",
        title="GSTR1 - Exempt/Nil/Non-GST Supplies",
        headers=(
            "Description", "Nil Rated Supplies",
            "Exempted (other than nil rated/non GST supply)", "Non-GST Supplies",
        ),
        summary=(
            ("Summary", None),
            ("Total Nil Rated", (("SUM", "B"),)),
            ("Total Exempted", (("SUM", "C"),)),
            ("Total Non-GST", (("SUM", "D"),)),
        ),
        rows=_exemp_rows,
    ),
    SheetSpec(
        name="hsn",
        title="GSTR1 - HSN Summary",
        headers=(
            "HSN", "Description", "UQC", "Total Quantity", "Total Value",
            "Taxable Value", "Integrated Tax Amount", "Central Tax Amount",
            "State/UT Tax Amount", "Cess Amount",
        ),
        summary=(
            ("Summary", None),
            ("No. of HSN Codes", (("COUNTA", "A"),)),
            ("Total Taxable Value", (("SUM", "F"),)),
            ("Total Tax", (("SUM", "G"), ("SUM", "H"), ("SUM", "I"))),
        ),
        rows=_hsn_rows,
    ),
    SheetSpec(
        name="docs",
        title="GSTR1 - Document Summary",
        headers=("Nature of Document", "Sr. No. From", "Sr. No. To", "Total Number", "Cancelled"),
        summary=(
            ("Summary", None),
            ("Total Documents Issued", (("SUM", "D"),)),
            ("Total Cancelled", (("SUM", "E"),)),
        ),
        rows=_docs_rows,
    ),
)

SHEET_NAMES = tuple(spec.name for spec in SHEETS)


def summary_formula(terms: tuple[tuple[str, str], ...] | None, max_row: int | None = None) -> str | None:
    """``(("SUM", "K"),)`` -> ``=SUM(K5:K1048576)``."""
    if not terms:
        return None
    max_row = max_row or settings.SHEET_MAX_ROW
    parts = [f"{func}({col}{DATA_START_ROW}:{col}{max_row})" for func, col in terms]
    return "=" + "+".join(parts)


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------

def _write_sheet(wb: Workbook, spec: SheetSpec, summary: Gstr1Summary) -> None:
    ws = wb.create_sheet(spec.name)

    title = ws.cell(row=1, column=1, value=f"{spec.title} - {summary.fp}")
    title.font = Font(bold=True, size=12)

    for idx, (label, terms) in enumerate(spec.summary, start=1):
        ws.cell(row=2, column=idx, value=label).font = Font(bold=True)
        ws.cell(row=3, column=idx, value=summary_formula(terms))

    for idx, col_name in enumerate(spec.headers, start=1):
        hdr = ws.cell(row=4, column=idx, value=col_name)
        hdr.font = Font(bold=True)
        hdr.fill = HEADER_FILL
        hdr.alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)
        ws.column_dimensions[get_column_letter(idx)].width = COLUMN_WIDTH

    for r_idx, row in enumerate(spec.rows(summary), start=DATA_START_ROW):
        for c_idx, val in enumerate(row, start=1):
            ws.cell(row=r_idx, column=c_idx, value=val)


def build_gstr1_workbook(summary: Gstr1Summary) -> Workbook:
    """Render the 13-sheet GSTR-1 workbook from an aggregated summary."""
    wb = Workbook()
    wb.remove(wb.active)
    for spec in SHEETS:
        _write_sheet(wb, spec, summary)
    logger.info("gstr1_workbook: rendered %d sheets for %s", len(SHEETS), summary.fp)
    return wb


def workbook_to_bytes(wb: Workbook) -> bytes:
    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
