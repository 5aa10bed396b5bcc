# gst_returns/domain/models/gst.py
"""
Input models for GSTR-1 generation.

These mirror the records kept by the invoicing app (profile, customers,
invoices, credit/debit notes). They are read-only inputs: the generator never
mutates them.
"""

import datetime
from decimal import Decimal
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, Field


class GSTType(str, Enum):
    CGST_SGST = "CGST_SGST"  # intra-state
    IGST = "IGST"  # inter-state


class SupplyType(str, Enum):
    B2B = "B2B"
    B2CS = "B2CS"
    B2CL = "B2CL"
    SEZWP = "SEZWP"
    SEZWOP = "SEZWOP"
    EXPWP = "EXPWP"
    EXPWOP = "EXPWOP"
    DE = "DE"


class LineItem(BaseModel):
    id: str = ""
    description: str = ""
    hsn_code: str = ""
    quantity: Decimal = Field(default=Decimal("0"))
    rate: Decimal = Field(default=Decimal("0"), description="Unit price before tax")
    gst_rate: Decimal = Field(default=Decimal("0"), description="Tax rate in percent (e.g. 18)")


class Customer(BaseModel):
    id: str
    name: str = ""
    gstin: Optional[str] = None
    phone: str = ""
    email: str = ""
    address: str = ""
    city: str = ""
    state: str = ""
    pincode: str = ""


class BusinessProfile(BaseModel):
    name: str = ""
    gstin: str = ""
    state: str = ""
    address: str = ""
    city: str = ""
    pincode: str = ""
    # Sets the minimum HSN digits reportable in the HSN summary (4 vs 6)
    annual_turnover: Literal["below5cr", "above5cr"] = "below5cr"


class _TaxedDocument(BaseModel):
    id: str = ""
    date: datetime.date
    customer_id: str = ""
    customer_name: str = ""
    items: list[LineItem] = Field(default_factory=list)
    gst_type: GSTType = GSTType.CGST_SGST
    total_before_tax: Decimal = Field(default=Decimal("0"))
    cgst: Decimal = Field(default=Decimal("0"))
    sgst: Decimal = Field(default=Decimal("0"))
    igst: Decimal = Field(default=Decimal("0"))
    total_amount: Decimal = Field(default=Decimal("0"))


class Invoice(_TaxedDocument):
    invoice_number: str
    status: Literal["Paid", "Unpaid", "Partial"] = "Unpaid"
    deleted: bool = False

    # GSTR-1 classification
    supply_type: Optional[SupplyType] = None
    reverse_charge: bool = False

    # Export / SEZ details
    port_code: Optional[str] = None
    shipping_bill_no: Optional[str] = None
    shipping_bill_date: Optional[datetime.date] = None
    export_country: Optional[str] = None


class Note(_TaxedDocument):
    note_number: str
    original_invoice_id: Optional[str] = None
    original_invoice_number: Optional[str] = None
    reason: str = ""


class CreditNote(Note):
    pass


class DebitNote(Note):
    pass


class Gstr1Snapshot(BaseModel):
    """Everything needed to build one GSTR-1 return for one filing period."""

    profile: BusinessProfile
    invoices: list[Invoice] = Field(default_factory=list)
    customers: list[Customer] = Field(default_factory=list)
    credit_notes: list[CreditNote] = Field(default_factory=list)
    debit_notes: list[DebitNote] = Field(default_factory=list)
    fp: str = Field(..., min_length=6, max_length=6, description="Filing period MMYYYY, e.g. 022026")
