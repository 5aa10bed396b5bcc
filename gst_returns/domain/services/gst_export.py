# gst_returns/domain/services/gst_export.py
"""
Build the GSTR-1 JSON payload in the GST API schema layout.

Everything here is reshaping: amounts come straight from the
``Gstr1Summary`` built by gstr1_service.py, so the JSON and the workbook
report the same figures.
"""

from __future__ import annotations

import json
from decimal import Decimal
from typing import Any, Dict

from gst_returns.domain.services.gstr1_service import (
    Gstr1Invoice,
    Gstr1Item,
    Gstr1Note,
    Gstr1Summary,
)

JSON_MEDIA_TYPE = "application/json"

# Nil/exempt supply type codes
NIL_SUPPLY_TYPES = (
    ("INTRB2B", "inter_reg"),
    ("INTRB2C", "inter_unreg"),
    ("INTRAB2B", "intra_reg"),
    ("INTRAB2C", "intra_unreg"),
)


def _d(val: Decimal | None) -> float:
    """Convert Decimal to float for JSON serialization."""
    if val is None:
        return 0.0
    return float(val)


def _item_json(item: Gstr1Item, split: bool = True) -> Dict[str, Any]:
    """``split`` adds camt/samt; IGST-only tables pass it only for intra-state documents."""
    itm_det: Dict[str, Any] = {
        "rt": _d(item.rt),
        "txval": _d(item.txval),
        "iamt": _d(item.igst),
    }
    if split:
        itm_det["camt"] = _d(item.cgst)
        itm_det["samt"] = _d(item.sgst)
    itm_det["csamt"] = 0
    return {"num": item.num, "itm_det": itm_det}


def _group_by_ctin(invoices: list[Gstr1Invoice]) -> list[Dict[str, Any]]:
    by_ctin: dict[str, list] = {}
    for inv in invoices:
        by_ctin.setdefault(inv.ctin, []).append({
            "inum": inv.num,
            "idt": inv.dt,
            "val": _d(inv.val),
            "pos": inv.pos,
            "rchrg": "Y" if inv.rchrg else "N",
            "inv_typ": inv.inv_typ,
            "itms": [_item_json(item) for item in inv.itms],
        })
    return [{"ctin": ctin, "inv": inv_list} for ctin, inv_list in by_ctin.items()]


def _b2cl_json(invoices: list[Gstr1Invoice]) -> list[Dict[str, Any]]:
    by_pos: dict[str, list] = {}
    for inv in invoices:
        by_pos.setdefault(inv.pos, []).append({
            "inum": inv.num,
            "idt": inv.dt,
            "val": _d(inv.val),
            "itms": [_item_json(item, split=not inv.inter_state) for item in inv.itms],
        })
    return [{"pos": pos, "inv": inv_list} for pos, inv_list in by_pos.items()]


def _cdnr_json(notes: list[Gstr1Note]) -> list[Dict[str, Any]]:
    by_ctin: dict[str, list] = {}
    for note in notes:
        by_ctin.setdefault(note.ctin, []).append({
            "ntty": note.ntty,
            "nt_num": note.num,
            "nt_dt": note.dt,
            "val": _d(note.val),
            "pos": note.pos,
            "rchrg": "Y" if note.rchrg else "N",
            "itms": [_item_json(item) for item in note.itms],
        })
    return [{"ctin": ctin, "nt": nt_list} for ctin, nt_list in by_ctin.items()]


def _cdnur_json(notes: list[Gstr1Note]) -> list[Dict[str, Any]]:
    return [
        {
            "ntty": note.ntty,
            "typ": "B2CL" if note.inter_state else "B2CS",
            "nt_num": note.num,
            "nt_dt": note.dt,
            "val": _d(note.val),
            "pos": note.pos,
            "itms": [_item_json(item, split=not note.inter_state) for item in note.itms],
        }
        for note in notes
    ]


def _exp_json(invoices: list[Gstr1Invoice]) -> list[Dict[str, Any]]:
    by_type: dict[str, list] = {}
    for inv in invoices:
        by_type.setdefault(inv.exp_typ, []).append({
            "inum": inv.num,
            "idt": inv.dt,
            "val": _d(inv.val),
            "sbpcode": inv.port_code,
            "sbnum": inv.sb_num,
            "sbdt": inv.sb_dt,
            "itms": [_item_json(item, split=not inv.inter_state) for item in inv.itms],
        })
    return [{"exp_typ": exp_typ, "inv": inv_list} for exp_typ, inv_list in by_type.items()]


def make_gstr1_json(summary: Gstr1Summary) -> Dict[str, Any]:
    """
    Build GSTR-1 JSON from an aggregated ``Gstr1Summary``.

    Returns:
        Dict matching the GSTR-1 API schema (plus ``sez``/``de`` tables that
        mirror the workbook's sheets).
    """
    b2cs_list = [
        {
            "sply_ty": "INTER" if row.inter_state else "INTRA",
            "pos": row.pos,
            "typ": "OE",
            "rt": _d(row.rt),
            "txval": _d(row.txval),
            "iamt": _d(row.igst),
            "camt": _d(row.cgst),
            "samt": _d(row.sgst),
            "csamt": 0,
        }
        for row in summary.b2cs
    ]

    nil_list = [
        {
            "sply_ty": sply_ty,
            "nil_amt": _d(getattr(summary.nil, attr)),
            "expt_amt": 0,
            "ngsup_amt": 0,
        }
        for sply_ty, attr in NIL_SUPPLY_TYPES
    ]

    hsn_list = [
        {
            "num": idx,
            "hsn_sc": row.hsn,
            "desc": row.desc,
            "uqc": row.uqc,
            "qty": _d(row.qty),
            "val": _d(row.val),
            "txval": _d(row.txval),
            "iamt": _d(row.igst),
            "camt": _d(row.cgst),
            "samt": _d(row.sgst),
            "csamt": 0,
        }
        for idx, row in enumerate(summary.hsn, start=1)
    ]

    doc_det = [
        {
            "doc_num": doc.doc_num,
            "docs": [{
                "num": 1,
                "from": doc.first,
                "to": doc.last,
                "totnum": doc.total,
                "cancel": doc.cancelled,
                "net_issue": doc.net_issued,
            }],
        }
        for doc in summary.docs
        if doc.tracked
    ]

    return {
        "gstin": summary.gstin,
        "fp": summary.fp,
        "gt": _d(summary.gt),
        "cur_gt": _d(summary.cur_gt),
        "b2b": _group_by_ctin(summary.b2b),
        "sez": _group_by_ctin(summary.sez),
        "de": _group_by_ctin(summary.de),
        "b2cl": _b2cl_json(summary.b2cl),
        "b2cs": b2cs_list,
        "cdnr": _cdnr_json(summary.cdnr),
        "cdnur": _cdnur_json(summary.cdnur),
        "exp": _exp_json(summary.exp),
        "at": [],
        "txpd": [],
        "nil": {"inv": nil_list},
        "hsn": {"data": hsn_list},
        "doc_issue": {"doc_det": doc_det},
    }


def gstr1_json_bytes(payload: Dict[str, Any]) -> bytes:
    return json.dumps(payload, indent=2, ensure_ascii=False).encode("utf-8")
