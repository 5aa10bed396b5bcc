# tests/test_sales_register.py
"""
Tests for the book registers (sales_register.py).
"""

from datetime import date
from decimal import Decimal

from gst_returns.domain.models.gst import GSTType
from gst_returns.domain.services.sales_register import (
    aggregate_hsn,
    build_hsn_register,
    build_notes_register,
    build_sales_register,
    register_filename,
)


def _rows(ws, min_row=4):
    return [list(r) for r in ws.iter_rows(min_row=min_row, values_only=True)]


class TestRegisterFilename:
    def test_label_sanitised(self):
        assert register_filename("Sales_Register", "Feb 2026") == "Sales_Register_Feb_2026.xlsx"
        assert register_filename("HSN_Summary", "02/2026") == "HSN_Summary_02_2026.xlsx"


# ============================================================
# Sales register
# ============================================================

class TestSalesRegister:
    def test_rows_sorted_by_date_with_total(self, profile, customers, make_invoice, make_item):
        invoices = [
            make_invoice("INV-2", "unreg-local", [make_item(rate=100)], day=date(2026, 2, 20)),
            make_invoice("INV-1", "reg-other", [make_item(rate=200)], GSTType.IGST, day=date(2026, 2, 3)),
        ]
        wb = build_sales_register(profile, invoices, customers, "Feb 2026")
        ws = wb["Sales Register"]

        assert ws.cell(row=1, column=1).value == "Sales Register - Feb 2026 - ABC Traders Pvt Ltd"
        assert ws.cell(row=1, column=4).value == "GSTIN: 36AABCU9603R1ZM"
        assert ws.cell(row=3, column=3).value == "Invoice No."

        rows = _rows(ws)
        assert rows[0] == [1, "03-02-2026", "INV-1", "XYZ Enterprises", "27AADCB2230M1ZP",
                           200.0, 36.0, 0.0, 0.0, 36.0, 236.0, "Unpaid"]
        assert rows[1][2] == "INV-2"
        assert rows[1][4] == ""
        assert rows[2] == ["TOTAL", "", "", "", "", 300.0, 36.0, 9.0, 9.0, 54.0, 354.0, ""]

    def test_total_row_is_bold(self, profile, customers, make_invoice, make_item):
        wb = build_sales_register(profile, [make_invoice("INV-1", "reg-local", [make_item()])], customers, "Feb")
        assert wb.active.cell(row=5, column=1).font.bold

    def test_empty_register_has_only_total(self, profile, customers):
        ws = build_sales_register(profile, [], customers, "Feb 2026").active
        assert _rows(ws) == [["TOTAL", "", "", "", "", 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, ""]]


# ============================================================
# Notes register
# ============================================================

class TestNotesRegister:
    def test_credit_notes(self, profile, customers, make_note, make_item):
        notes = [
            make_note("credit", "CN-1", "reg-local", [make_item(rate=100)], original_invoice_number="INV-7"),
        ]
        wb = build_notes_register(profile, notes, "Credit", "Feb 2026", customers)
        ws = wb["Credit Notes"]
        assert ws.cell(row=3, column=3).value == "Credit Note No."
        rows = _rows(ws)
        assert rows[0] == [1, "10-02-2026", "CN-1", "Deccan Supplies", "36AADCB2230M1ZP", "INV-7",
                           100.0, 0.0, 9.0, 9.0, 118.0]
        assert rows[1][0] == "TOTAL"
        assert rows[1][-1] == 118.0

    def test_debit_notes_without_customers(self, profile, make_note, make_item):
        notes = [make_note("debit", "DN-1", "reg-local", [make_item(rate=100)])]
        ws = build_notes_register(profile, notes, "Debit", "Feb 2026").active
        assert ws.title == "Debit Notes"
        assert _rows(ws)[0][4:6] == ["", ""]


# ============================================================
# HSN register
# ============================================================

class TestHsnRegister:
    def test_aggregate_keeps_short_and_blank_codes(self, make_invoice, make_item):
        invoices = [
            make_invoice("INV-1", "reg-local", [make_item(hsn="99"), make_item(hsn="", rate=50)]),
            make_invoice("INV-2", "reg-other", [make_item(hsn="99", qty=2)], GSTType.IGST),
        ]
        rows = {r.hsn_code: r for r in aggregate_hsn(invoices)}
        assert set(rows) == {"99", "N/A"}
        short = rows["99"]
        assert short.total_qty == Decimal("3")
        assert short.taxable_value == Decimal("3000.00")
        assert short.igst == Decimal("360.00")
        assert short.cgst == short.sgst == Decimal("90.00")
        assert short.total_tax == Decimal("540.00")

    def test_sorted_by_code(self, make_invoice, make_item):
        inv = make_invoice("INV-1", "reg-local", [make_item(hsn="9983"), make_item(hsn="1006")])
        assert [r.hsn_code for r in aggregate_hsn([inv])] == ["1006", "9983"]

    def test_workbook(self, profile, make_invoice, make_item):
        inv = make_invoice("INV-1", "reg-local", [make_item(hsn="8471", qty=2)])
        ws = build_hsn_register(profile, [inv], "Feb 2026")["HSN Summary"]
        rows = _rows(ws)
        assert rows[0] == ["8471", "Laptop Computer", "NOS", 2.0, 2000.0, 180.0, 180.0, 0.0, 360.0]
        assert rows[1] == ["TOTAL", "", "", "", 2000.0, 180.0, 180.0, 0.0, 360.0]
