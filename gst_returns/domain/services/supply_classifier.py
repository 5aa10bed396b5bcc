# gst_returns/domain/services/supply_classifier.py

from __future__ import annotations

from decimal import Decimal

from gst_returns.config.settings import settings
from gst_returns.domain.models.gst import Customer, Invoice, SupplyType


def resolve_supply_type(
    invoice: Invoice,
    customer: Customer | None,
    profile_state: str,
    b2cl_threshold: Decimal | None = None,
) -> SupplyType:
    """
    Decide the GSTR-1 table an invoice is reported in.

    Order matters:
    1. A manual ``supply_type`` on the invoice always wins. SEZ, deemed
       export and export supplies can only come from here.
    2. No customer record -> B2CS.
    3. Customer has a GSTIN -> B2B (checked before the B2CL test, so a large
       inter-state sale to a registered buyer stays B2B).
    4. Inter-state and invoice value above the B2CL threshold -> B2CL.
    5. Everything else -> B2CS.
    """
    if invoice.supply_type:
        return invoice.supply_type
    if customer is None:
        return SupplyType.B2CS
    if customer.gstin:
        return SupplyType.B2B

    threshold = settings.B2CL_THRESHOLD if b2cl_threshold is None else b2cl_threshold
    inter_state = (customer.state or "") != profile_state
    if inter_state and invoice.total_amount > threshold:
        return SupplyType.B2CL
    return SupplyType.B2CS
