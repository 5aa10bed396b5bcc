# gst_returns/api/v1/routes/gstr1.py
"""
GSTR-1 endpoints: preview, workbook/JSON downloads, register downloads and
the tax summary.

The caller posts the full snapshot (profile, customers, invoices, notes, fp).
With ``filter_to_period=true`` the snapshot is first narrowed to the
documents dated inside ``fp``. Register and tax summary requests may name a
``quarter`` instead, which narrows them to that quarter.
"""

from __future__ import annotations

import logging
from io import BytesIO

from fastapi import APIRouter, HTTPException, Query, status
from fastapi.responses import StreamingResponse

from gst_returns.api.v1.envelope import ok
from gst_returns.api.v1.schemas.gstr1 import RegisterRequest, TaxSummaryRequest
from gst_returns.domain.models.gst import Gstr1Snapshot
from gst_returns.domain.services.gst_export import JSON_MEDIA_TYPE
from gst_returns.domain.services.gst_service import (
    filing_due_dates,
    period_bounds,
    quarter_bounds,
    quarter_label,
    snapshot_for_range,
)
from gst_returns.domain.services.gstr1_generator import generate_gstr1
from gst_returns.domain.services.gstr1_service import prepare_gstr1_form, prepare_gstr1_summary
from gst_returns.domain.services.gstr1_workbook import XLSX_MEDIA_TYPE, workbook_to_bytes
from gst_returns.domain.services.sales_register import (
    build_hsn_register,
    build_notes_register,
    build_sales_register,
    register_filename,
)
from gst_returns.domain.services.tax_summary import tax_summary

logger = logging.getLogger("api.v1.gstr1")

router = APIRouter(prefix="/gst", tags=["GSTR-1"])


def download_response(content: bytes, filename: str, media_type: str) -> StreamingResponse:
    """Send bytes as a file download."""
    return StreamingResponse(
        BytesIO(content),
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def _bad_request(exc: ValueError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


def _period_snapshot(
    snapshot: Gstr1Snapshot,
    filter_to_period: bool,
    quarter: str | None = None,
) -> Gstr1Snapshot:
    if not (filter_to_period or quarter):
        return snapshot
    try:
        start, end = quarter_bounds(quarter) if quarter else period_bounds(snapshot.fp)
    except ValueError as exc:
        raise _bad_request(exc)
    return snapshot_for_range(
        profile=snapshot.profile,
        invoices=snapshot.invoices,
        customers=snapshot.customers,
        credit_notes=snapshot.credit_notes,
        debit_notes=snapshot.debit_notes,
        start=start,
        end=end,
        fp=snapshot.fp,
    )


@router.post("/gstr1/preview", response_model=dict)
def preview_gstr1(
    snapshot: Gstr1Snapshot,
    filter_to_period: bool = Query(False, description="Keep only documents dated within fp"),
):
    """
    Bucket counts, totals and diagnostics for a GSTR-1 return, without
    rendering files.
    """
    summary = prepare_gstr1_summary(_period_snapshot(snapshot, filter_to_period))
    message = None
    if summary.diagnostics:
        message = f"{len(summary.diagnostics)} record(s) need attention before filing"
    return ok(prepare_gstr1_form(summary), message=message)


@router.post("/gstr1/export.xlsx")
def export_gstr1_xlsx(
    snapshot: Gstr1Snapshot,
    filter_to_period: bool = Query(False, description="Keep only documents dated within fp"),
):
    artifacts = generate_gstr1(_period_snapshot(snapshot, filter_to_period))
    logger.info("api.v1.gstr1: sending %s", artifacts.xlsx_filename)
    return download_response(artifacts.xlsx_bytes(), artifacts.xlsx_filename, XLSX_MEDIA_TYPE)


@router.post("/gstr1/export.json")
def export_gstr1_json(
    snapshot: Gstr1Snapshot,
    filter_to_period: bool = Query(False, description="Keep only documents dated within fp"),
):
    artifacts = generate_gstr1(_period_snapshot(snapshot, filter_to_period))
    logger.info("api.v1.gstr1: sending %s", artifacts.json_filename)
    return download_response(artifacts.json_bytes(), artifacts.json_filename, JSON_MEDIA_TYPE)


@router.post("/registers/export.xlsx")
def export_register(
    body: RegisterRequest,
    filter_to_period: bool = Query(False, description="Keep only documents dated within fp"),
):
    snapshot = _period_snapshot(body.snapshot, filter_to_period, body.quarter)
    label = body.period_label or (quarter_label(body.quarter) if body.quarter else snapshot.fp)

    if body.kind == "sales":
        wb = build_sales_register(snapshot.profile, snapshot.invoices, snapshot.customers, label)
        prefix = "Sales_Register"
    elif body.kind == "credit_notes":
        wb = build_notes_register(snapshot.profile, snapshot.credit_notes, "Credit", label, snapshot.customers)
        prefix = "Credit_Notes_Register"
    elif body.kind == "debit_notes":
        wb = build_notes_register(snapshot.profile, snapshot.debit_notes, "Debit", label, snapshot.customers)
        prefix = "Debit_Notes_Register"
    else:
        wb = build_hsn_register(snapshot.profile, snapshot.invoices, label)
        prefix = "HSN_Summary"

    return download_response(workbook_to_bytes(wb), register_filename(prefix, label), XLSX_MEDIA_TYPE)


@router.post("/tax-summary", response_model=dict)
def get_tax_summary(
    body: TaxSummaryRequest,
    filter_to_period: bool = Query(False, description="Keep only documents dated within fp"),
):
    """
    Rate-wise tax breakdown, outstanding tax and filing due dates for a month
    (``fp``) or a quarter.
    """
    snapshot = _period_snapshot(body.snapshot, filter_to_period, body.quarter)
    try:
        period_end = quarter_bounds(body.quarter)[1] if body.quarter else period_bounds(snapshot.fp)[1]
    except ValueError as exc:
        raise _bad_request(exc)

    data = tax_summary(snapshot.invoices).to_dict()
    data["period_label"] = quarter_label(body.quarter) if body.quarter else snapshot.fp
    data["due_dates"] = {name: due.isoformat() for name, due in filing_due_dates(period_end).items()}
    return ok(data)
