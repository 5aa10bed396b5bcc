# gst_returns/api/v1/schemas/gstr1.py
"""Request schemas for GSTR-1, register and tax summary endpoints."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from gst_returns.domain.models.gst import Gstr1Snapshot

QUARTER_DESCRIPTION = "Indian FY quarter, e.g. '2025-Q4' (Jan-Mar 2026); overrides the monthly filter"


class RegisterRequest(BaseModel):
    """
    Body for register downloads. ``register`` picks the workbook. The period
    label defaults to the quarter label when ``quarter`` is given, otherwise
    to the snapshot's ``fp``.
    """

    model_config = ConfigDict(populate_by_name=True)

    snapshot: Gstr1Snapshot
    kind: Literal["sales", "credit_notes", "debit_notes", "hsn"] = Field(default="sales", alias="register")
    quarter: str | None = Field(default=None, description=QUARTER_DESCRIPTION)
    period_label: str | None = Field(default=None, description="e.g. 'Feb 2026'")


class TaxSummaryRequest(BaseModel):
    snapshot: Gstr1Snapshot
    quarter: str | None = Field(default=None, description=QUARTER_DESCRIPTION)
