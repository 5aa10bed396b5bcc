# tests/test_gst_export.py
"""
Tests for the GSTR-1 JSON builder (gst_export.py), including agreement with
the workbook rendered from the same summary.
"""

import json
from io import BytesIO

import pytest
from openpyxl import load_workbook

from gst_returns.domain.models.gst import GSTType
from gst_returns.domain.services.gst_export import gstr1_json_bytes, make_gstr1_json
from gst_returns.domain.services.gstr1_service import prepare_gstr1_summary
from gst_returns.domain.services.gstr1_workbook import (
    DATA_START_ROW,
    build_gstr1_workbook,
    workbook_to_bytes,
)


@pytest.fixture
def summary(mixed_snapshot):
    return prepare_gstr1_summary(mixed_snapshot)


@pytest.fixture
def payload(summary):
    return make_gstr1_json(summary)


def _column_total(ws, col: int) -> float:
    return sum(
        row[col - 1] or 0
        for row in ws.iter_rows(min_row=DATA_START_ROW, values_only=True)
    )


# ============================================================
# Structure
# ============================================================

class TestMakeGstr1Json:
    def test_top_level_keys(self, payload):
        assert set(payload) == {
            "gstin", "fp", "gt", "cur_gt", "b2b", "sez", "de", "b2cl", "b2cs",
            "cdnr", "cdnur", "exp", "at", "txpd", "nil", "hsn", "doc_issue",
        }
        assert payload["gstin"] == "36AABCU9603R1ZM"
        assert payload["fp"] == "022026"
        assert payload["at"] == payload["txpd"] == []

    def test_b2b_grouped_by_recipient(self, payload):
        assert [entry["ctin"] for entry in payload["b2b"]] == ["36AADCB2230M1ZP", "27AADCB2230M1ZP"]
        inv = payload["b2b"][0]["inv"][0]
        assert inv == {
            "inum": "INV-001",
            "idt": "10-02-2026",
            "val": 1120.0,
            "pos": "36",
            "rchrg": "N",
            "inv_typ": "R",
            "itms": [{
                "num": 1,
                "itm_det": {"rt": 12.0, "txval": 1000.0, "iamt": 0.0, "camt": 60.0, "samt": 60.0, "csamt": 0},
            }],
        }
        assert [i["num"] for i in payload["b2b"][1]["inv"][0]["itms"]] == [1, 2]

    def test_two_invoices_same_recipient_share_entry(self, make_snapshot, make_invoice, make_item):
        invoices = [
            make_invoice("INV-1", "reg-local", [make_item()]),
            make_invoice("INV-2", "reg-local", [make_item()]),
        ]
        payload = make_gstr1_json(prepare_gstr1_summary(make_snapshot(invoices)))
        assert len(payload["b2b"]) == 1
        assert [inv["inum"] for inv in payload["b2b"][0]["inv"]] == ["INV-1", "INV-2"]

    def test_sez_and_de_tables(self, payload):
        assert payload["sez"][0]["inv"][0]["inv_typ"] == "SEWP"
        assert payload["de"] == []

    def test_b2cl_grouped_by_pos_igst_only(self, payload):
        assert payload["b2cl"] == [{
            "pos": "29",
            "inv": [{
                "inum": "INV-004",
                "idt": "10-02-2026",
                "val": 306800.0,
                "itms": [{"num": 1, "itm_det": {"rt": 18.0, "txval": 260000.0, "iamt": 46800.0, "csamt": 0}}],
            }],
        }]

    def test_b2cs_rows(self, payload):
        rows = sorted(payload["b2cs"], key=lambda r: r["rt"])
        assert rows[1] == {
            "sply_ty": "INTRA", "pos": "36", "typ": "OE", "rt": 5.0, "txval": 455.0,
            "iamt": 0.0, "camt": 11.38, "samt": 11.38, "csamt": 0,
        }

    def test_inter_state_b2cs_row(self, make_snapshot, make_invoice, make_item):
        inv = make_invoice("INV-1", "unreg-other", [make_item(rate=100)], GSTType.IGST)
        payload = make_gstr1_json(prepare_gstr1_summary(make_snapshot([inv])))
        assert payload["b2cs"][0]["sply_ty"] == "INTER"
        assert payload["b2cs"][0]["iamt"] == 18.0

    def test_notes(self, payload):
        assert payload["cdnr"][0]["ctin"] == "36AADCB2230M1ZP"
        nt = payload["cdnr"][0]["nt"][0]
        assert (nt["ntty"], nt["nt_num"], nt["val"]) == ("C", "CN-001", 560.0)
        cdnur = payload["cdnur"][0]
        assert (cdnur["ntty"], cdnur["typ"], cdnur["pos"]) == ("D", "B2CL", "29")
        assert set(cdnur["itms"][0]["itm_det"]) == {"rt", "txval", "iamt", "csamt"}

    def test_intra_state_unregistered_note_keeps_split_tax(self, make_snapshot, make_note, make_item):
        cn = make_note("credit", "CN-9", "unreg-local", [make_item(qty=1, rate=1000, gst_rate=18)])
        payload = make_gstr1_json(prepare_gstr1_summary(make_snapshot(credit_notes=[cn])))
        note = payload["cdnur"][0]
        assert note["typ"] == "B2CS"
        itm_det = note["itms"][0]["itm_det"]
        assert (itm_det["iamt"], itm_det["camt"], itm_det["samt"]) == (0.0, 90.0, 90.0)
        assert itm_det["iamt"] + itm_det["camt"] + itm_det["samt"] == 180.0

    def test_intra_state_b2cl_keeps_split_tax(self, make_snapshot, make_invoice, make_item):
        inv = make_invoice("INV-9", "unreg-other", [make_item(rate=260000)])
        payload = make_gstr1_json(prepare_gstr1_summary(make_snapshot([inv])))
        itm_det = payload["b2cl"][0]["inv"][0]["itms"][0]["itm_det"]
        assert itm_det == {"rt": 18.0, "txval": 260000.0, "iamt": 0.0, "camt": 23400.0, "samt": 23400.0, "csamt": 0}

    def test_exports_grouped_by_type(self, payload):
        assert payload["exp"] == [{
            "exp_typ": "WPAY",
            "inv": [{
                "inum": "INV-006",
                "idt": "10-02-2026",
                "val": 7080.0,
                "sbpcode": "INMAA1",
                "sbnum": "SB1234",
                "sbdt": "12-02-2026",
                "itms": [{"num": 1, "itm_det": {"rt": 18.0, "txval": 6000.0, "iamt": 1080.0, "csamt": 0}}],
            }],
        }]

    def test_nil_supplies(self, payload):
        nil = {row["sply_ty"]: row for row in payload["nil"]["inv"]}
        assert list(nil) == ["INTRB2B", "INTRB2C", "INTRAB2B", "INTRAB2C"]
        assert nil["INTRAB2C"] == {"sply_ty": "INTRAB2C", "nil_amt": 1200.0, "expt_amt": 0, "ngsup_amt": 0}
        assert nil["INTRB2B"]["nil_amt"] == 0.0

    def test_hsn_numbered_from_one(self, payload):
        data = payload["hsn"]["data"]
        assert [row["num"] for row in data] == list(range(1, len(data) + 1))
        first = data[0]
        assert first["hsn_sc"] == "8471"
        assert first["uqc"] == "NOS"

    def test_doc_issue_only_tracked_natures(self, payload):
        doc_det = payload["doc_issue"]["doc_det"]
        assert [d["doc_num"] for d in doc_det] == [1, 4, 5]
        assert doc_det[0]["docs"] == [{
            "num": 1, "from": "INV-001", "to": "INV-007", "totnum": 7, "cancel": 0, "net_issue": 7,
        }]
        assert doc_det[1]["docs"][0]["from"] == "DN-001"
        assert doc_det[2]["docs"][0]["from"] == "CN-001"

    def test_turnover(self, payload, summary):
        assert payload["gt"] == payload["cur_gt"] == float(summary.gt)

    def test_bytes_are_indented_utf8(self, payload):
        raw = gstr1_json_bytes(payload)
        assert raw.startswith(b"{\n  ")
        assert json.loads(raw.decode("utf-8")) == payload


# ============================================================
# Workbook and JSON agree
# ============================================================

class TestRenderersAgree:
    @pytest.fixture
    def sheets(self, summary):
        return load_workbook(BytesIO(workbook_to_bytes(build_gstr1_workbook(summary))))

    def test_b2b_taxable(self, payload, sheets):
        json_total = sum(
            itm["itm_det"]["txval"]
            for entry in payload["b2b"] for inv in entry["inv"] for itm in inv["itms"]
        )
        assert _column_total(sheets["b2b"], 11) == pytest.approx(json_total, abs=0.005)

    def test_b2cs_taxable(self, payload, sheets):
        assert _column_total(sheets["b2cs"], 5) == pytest.approx(sum(r["txval"] for r in payload["b2cs"]), abs=0.005)

    def test_hsn_taxable_and_tax(self, payload, sheets):
        data = payload["hsn"]["data"]
        ws = sheets["hsn"]
        assert _column_total(ws, 6) == pytest.approx(sum(r["txval"] for r in data), abs=0.005)
        tax = sum(r["iamt"] + r["camt"] + r["samt"] for r in data)
        assert _column_total(ws, 7) + _column_total(ws, 8) + _column_total(ws, 9) == pytest.approx(tax, abs=0.005)

    def test_nil_amount(self, payload, sheets):
        assert _column_total(sheets["exemp"], 2) == pytest.approx(sum(r["nil_amt"] for r in payload["nil"]["inv"]), abs=0.005)

    def test_document_counts(self, payload, sheets):
        totals = {d["doc_num"]: d["docs"][0]["totnum"] for d in payload["doc_issue"]["doc_det"]}
        assert _column_total(sheets["docs"], 4) == sum(totals.values())
