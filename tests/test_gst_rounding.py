# tests/test_gst_rounding.py
"""
Tests for the money helpers (gst_rounding.py).
"""

from decimal import Decimal

from gst_returns.domain.models.gst import GSTType
from gst_returns.domain.services.gst_rounding import (
    ZERO,
    compute_totals,
    line_tax,
    line_taxable,
    r2,
    split_tax,
)


class TestR2:
    def test_half_rounds_up(self):
        assert r2(Decimal("0.125")) == Decimal("0.13")
        assert r2(Decimal("0.115")) == Decimal("0.12")

    def test_negative_half_rounds_away_from_zero(self):
        assert r2(Decimal("-0.125")) == Decimal("-0.13")

    def test_float_input_uses_its_repr(self):
        """2.675 as a float is 2.67499...; going through str keeps 2.675."""
        assert r2(2.675) == Decimal("2.68")

    def test_none_and_garbage_are_zero(self):
        assert r2(None) == ZERO
        assert r2("not a number") == ZERO

    def test_always_two_places(self):
        assert str(r2(Decimal("5"))) == "5.00"


class TestLineAmounts:
    def test_taxable_and_tax(self, make_item):
        item = make_item(qty=2, rate=500, gst_rate=12)
        assert line_taxable(item) == Decimal("1000.00")
        assert line_tax(item) == Decimal("120.00")

    def test_taxable_rounded_before_tax(self, make_item):
        """3 x 33.335 = 100.005 -> 100.01; tax is 18% of 100.01."""
        item = make_item(qty=3, rate="33.335", gst_rate=18)
        assert line_taxable(item) == Decimal("100.01")
        assert line_tax(item) == Decimal("18.00")

    def test_fractional_quantity(self, make_item):
        item = make_item(qty="2.5", rate="99.99", gst_rate=5)
        assert line_taxable(item) == Decimal("249.98")
        assert line_tax(item) == Decimal("12.50")


class TestSplitTax:
    def test_igst_regime(self):
        assert split_tax(Decimal("180.00"), GSTType.IGST) == (Decimal("180.00"), ZERO, ZERO)

    def test_cgst_sgst_regime_halves(self):
        assert split_tax(Decimal("120.00"), GSTType.CGST_SGST) == (ZERO, Decimal("60.00"), Decimal("60.00"))

    def test_odd_paisa_rounds_each_half_up(self):
        """0.05 halves to 0.025, each half rounds to 0.03."""
        igst, cgst, sgst = split_tax(Decimal("0.05"), GSTType.CGST_SGST)
        assert igst == ZERO
        assert cgst == sgst == Decimal("0.03")


class TestComputeTotals:
    def test_intra_state_totals(self, make_item):
        totals = compute_totals([make_item(qty=2, rate=500, gst_rate=12)], GSTType.CGST_SGST)
        assert totals == {
            "total_before_tax": Decimal("1000.00"),
            "cgst": Decimal("60.00"),
            "sgst": Decimal("60.00"),
            "igst": ZERO,
            "total_amount": Decimal("1120.00"),
        }

    def test_total_equals_sum_of_parts(self, make_item):
        items = [
            make_item(qty=3, rate="33.335", gst_rate=18),
            make_item(qty=7, rate="12.49", gst_rate=5),
            make_item(qty=1, rate="0.01", gst_rate=28),
        ]
        for gst_type in GSTType:
            totals = compute_totals(items, gst_type)
            assert totals["total_amount"] == (
                totals["total_before_tax"] + totals["cgst"] + totals["sgst"] + totals["igst"]
            )

    def test_empty_items(self):
        totals = compute_totals([], GSTType.IGST)
        assert totals["total_amount"] == ZERO
