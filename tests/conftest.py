"""Shared test fixtures for the GSTR-1 test suite."""

from datetime import date
from decimal import Decimal

import pytest

from gst_returns.domain.models.gst import (
    BusinessProfile,
    CreditNote,
    Customer,
    DebitNote,
    GSTType,
    Gstr1Snapshot,
    Invoice,
    LineItem,
)
from gst_returns.domain.services.gst_rounding import compute_totals

FP = "022026"
INVOICE_DATE = date(2026, 2, 10)


@pytest.fixture
def profile() -> BusinessProfile:
    """Filer registered in Telangana, turnover below 5 crore."""
    return BusinessProfile(
        name="ABC Traders Pvt Ltd",
        gstin="36AABCU9603R1ZM",
        state="Telangana",
        annual_turnover="below5cr",
    )


@pytest.fixture
def customers() -> list[Customer]:
    return [
        Customer(id="reg-local", name="Deccan Supplies", gstin="36AADCB2230M1ZP", state="Telangana"),
        Customer(id="reg-other", name="XYZ Enterprises", gstin="27AADCB2230M1ZP", state="Maharashtra"),
        Customer(id="unreg-local", name="Ravi Kumar", state="Telangana"),
        Customer(id="unreg-other", name="Anita Rao", state="Karnataka"),
        Customer(id="unreg-unknown", name="Walk-in", state="Atlantis"),
    ]


@pytest.fixture
def make_item():
    def _make(hsn="8471", qty=1, rate=1000, gst_rate=18, description="Laptop Computer") -> LineItem:
        return LineItem(
            description=description,
            hsn_code=hsn,
            quantity=Decimal(str(qty)),
            rate=Decimal(str(rate)),
            gst_rate=Decimal(str(gst_rate)),
        )

    return _make


@pytest.fixture
def make_invoice(customers):
    names = {c.id: c.name for c in customers}

    def _make(number, customer_id, items, gst_type=GSTType.CGST_SGST, day=INVOICE_DATE, **extra) -> Invoice:
        return Invoice(
            id=extra.pop("id", number),
            invoice_number=number,
            date=day,
            customer_id=customer_id,
            customer_name=names.get(customer_id, "Unknown"),
            items=items,
            gst_type=gst_type,
            **compute_totals(items, gst_type),
            **extra,
        )

    return _make


@pytest.fixture
def make_note(customers):
    names = {c.id: c.name for c in customers}

    def _make(kind, number, customer_id, items, gst_type=GSTType.CGST_SGST, day=INVOICE_DATE, **extra):
        model = CreditNote if kind == "credit" else DebitNote
        return model(
            id=extra.pop("id", number),
            note_number=number,
            date=day,
            customer_id=customer_id,
            customer_name=names.get(customer_id, "Unknown"),
            items=items,
            gst_type=gst_type,
            reason="Goods returned" if kind == "credit" else "Price revision",
            **compute_totals(items, gst_type),
            **extra,
        )

    return _make


@pytest.fixture
def make_snapshot(profile, customers):
    def _make(invoices=(), credit_notes=(), debit_notes=(), fp=FP, profile_override=None) -> Gstr1Snapshot:
        return Gstr1Snapshot(
            profile=profile_override or profile,
            invoices=list(invoices),
            customers=customers,
            credit_notes=list(credit_notes),
            debit_notes=list(debit_notes),
            fp=fp,
        )

    return _make


@pytest.fixture
def mixed_snapshot(make_snapshot, make_invoice, make_note, make_item):
    """A month with one document of every kind the generator handles."""
    invoices = [
        make_invoice("INV-001", "reg-local", [make_item(qty=2, rate=500, gst_rate=12)]),
        make_invoice(
            "INV-002", "reg-other",
            [make_item(hsn="847130", qty=1, rate=300000), make_item(hsn="9983", qty=3, rate=1500, gst_rate=5)],
            gst_type=GSTType.IGST,
        ),
        make_invoice("INV-003", "unreg-local", [make_item(hsn="1006", qty=10, rate=45.5, gst_rate=5)]),
        make_invoice("INV-004", "unreg-other", [make_item(qty=1, rate=260000)], gst_type=GSTType.IGST),
        make_invoice("INV-005", "unreg-local", [make_item(hsn="0401", qty=20, rate=60, gst_rate=0)]),
        make_invoice(
            "INV-006", "reg-other", [make_item(qty=5, rate=1200)], gst_type=GSTType.IGST,
            supply_type="EXPWP", port_code="INMAA1", shipping_bill_no="SB1234",
            shipping_bill_date=date(2026, 2, 12),
        ),
        make_invoice("INV-007", "reg-other", [make_item(qty=2, rate=999.99)], gst_type=GSTType.IGST, supply_type="SEZWP"),
    ]
    credit_notes = [make_note("credit", "CN-001", "reg-local", [make_item(qty=1, rate=500, gst_rate=12)])]
    debit_notes = [make_note("debit", "DN-001", "unreg-other", [make_item(qty=1, rate=100)], gst_type=GSTType.IGST)]
    return make_snapshot(invoices, credit_notes, debit_notes)
