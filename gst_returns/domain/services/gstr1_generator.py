# gst_returns/domain/services/gstr1_generator.py
"""
One-call GSTR-1 generation: aggregate once, render the workbook and the JSON
payload from the same summary.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict

from openpyxl import Workbook

from gst_returns.domain.models.gst import Gstr1Snapshot
from gst_returns.domain.services.gst_export import gstr1_json_bytes, make_gstr1_json
from gst_returns.domain.services.gstr1_service import (
    Gstr1Diagnostic,
    Gstr1Summary,
    prepare_gstr1_summary,
)
from gst_returns.domain.services.gstr1_workbook import build_gstr1_workbook, workbook_to_bytes

logger = logging.getLogger("gstr1_generator")


def gstr1_filename(gstin: str, fp: str, extension: str) -> str:
    """``GSTR1_{gstin}_{fp}.{ext}``; ``export`` stands in for a blank GSTIN."""
    return f"GSTR1_{gstin or 'export'}_{fp}.{extension}"


@dataclass
class Gstr1Artifacts:
    summary: Gstr1Summary
    workbook: Workbook
    payload: Dict[str, Any]

    @property
    def diagnostics(self) -> list[Gstr1Diagnostic]:
        return self.summary.diagnostics

    @property
    def xlsx_filename(self) -> str:
        return gstr1_filename(self.summary.gstin, self.summary.fp, "xlsx")

    @property
    def json_filename(self) -> str:
        return gstr1_filename(self.summary.gstin, self.summary.fp, "json")

    def xlsx_bytes(self) -> bytes:
        return workbook_to_bytes(self.workbook)

    def json_bytes(self) -> bytes:
        return gstr1_json_bytes(self.payload)


def generate_gstr1(snapshot: Gstr1Snapshot) -> Gstr1Artifacts:
    summary = prepare_gstr1_summary(snapshot)
    artifacts = Gstr1Artifacts(
        summary=summary,
        workbook=build_gstr1_workbook(summary),
        payload=make_gstr1_json(summary),
    )
    if summary.diagnostics:
        logger.warning(
            "gstr1_generator: %s generated with %d diagnostic(s)",
            artifacts.xlsx_filename,
            len(summary.diagnostics),
        )
    return artifacts
