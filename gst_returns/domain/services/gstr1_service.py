# gst_returns/domain/services/gstr1_service.py
"""
GSTR-1 aggregation.

``prepare_gstr1_summary`` classifies every invoice and note of a snapshot and
aggregates them once into a ``Gstr1Summary``. The workbook renderer
(gstr1_workbook.py) and the JSON renderer (gst_export.py) both read from that
summary and never recompute amounts, so the two files always agree.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from gst_returns.config.settings import settings
from gst_returns.domain.models.gst import (
    Customer,
    GSTType,
    Gstr1Snapshot,
    Invoice,
    LineItem,
    Note,
    SupplyType,
)
from gst_returns.domain.services.gst_rounding import (
    ZERO,
    line_tax,
    line_taxable,
    r2,
    split_tax,
)
from gst_returns.domain.services.state_codes import is_known_state, state_code
from gst_returns.domain.services.supply_classifier import resolve_supply_type

logger = logging.getLogger("gstr1_service")

# Invoice type codes used by the portal for invoice-level tables
INVOICE_TYPE_CODES = {
    SupplyType.B2B: "R",
    SupplyType.SEZWP: "SEWP",
    SupplyType.SEZWOP: "SEWOP",
    SupplyType.DE: "DE",
}

EXPORT_TYPE_CODES = {
    SupplyType.EXPWP: "WPAY",
    SupplyType.EXPWOP: "WOPAY",
}

# (doc_num, nature, tracked) in portal order; only tracked natures get counts
DOCUMENT_NATURES = (
    (1, "Invoices for outward supply", True),
    (2, "Invoices for inward supply from unregistered person", False),
    (3, "Revised Invoice", False),
    (4, "Debit Note", True),
    (5, "Credit Note", True),
    (6, "Advance Receipt", False),
    (7, "Payment Voucher", False),
    (8, "Refund Voucher", False),
    (9, "Delivery Challan for job work", False),
)


def format_gst_date(d: date | None) -> str:
    """Portal date format DD-MM-YYYY; empty string when missing."""
    if d is None:
        return ""
    return d.strftime("%d-%m-%Y")


def min_hsn_digits(annual_turnover: str) -> int:
    return 6 if annual_turnover == "above5cr" else 4


# ---------- Dataclasses representing GSTR-1 structure ----------


@dataclass
class Gstr1Item:
    num: int
    rt: Decimal
    txval: Decimal
    igst: Decimal = ZERO
    cgst: Decimal = ZERO
    sgst: Decimal = ZERO


@dataclass
class Gstr1Invoice:
    num: str  # invoice number
    dt: str  # DD-MM-YYYY
    val: Decimal  # invoice total value
    pos: str  # place of supply (2-digit state code)
    itms: list[Gstr1Item] = field(default_factory=list)
    supply_type: SupplyType = SupplyType.B2B
    ctin: str = ""  # counterparty GSTIN
    receiver_name: str = ""
    rchrg: bool = False
    inter_state: bool = False  # charged as IGST
    # Exports only
    port_code: str = ""
    sb_num: str = ""
    sb_dt: str = ""

    @property
    def inv_typ(self) -> str:
        return INVOICE_TYPE_CODES.get(self.supply_type, "R")

    @property
    def exp_typ(self) -> str:
        return EXPORT_TYPE_CODES.get(self.supply_type, "")

    @property
    def with_payment(self) -> bool:
        return self.supply_type in (SupplyType.SEZWP, SupplyType.EXPWP)


@dataclass
class Gstr1Note:
    num: str  # note number
    dt: str
    ntty: str  # "C" credit, "D" debit
    val: Decimal
    pos: str
    itms: list[Gstr1Item] = field(default_factory=list)
    ctin: str = ""
    receiver_name: str = ""
    inter_state: bool = False
    rchrg: bool = False


@dataclass
class Gstr1B2CSRow:
    pos: str
    inter_state: bool
    rt: Decimal
    txval: Decimal = ZERO
    igst: Decimal = ZERO
    cgst: Decimal = ZERO
    sgst: Decimal = ZERO


@dataclass
class Gstr1NilSupplies:
    """Taxable value of zero-rated lines split four ways.

    Exempt and non-GST supplies cannot be told apart from nil-rated ones in
    the source data, so they are always zero.
    """
    inter_reg: Decimal = ZERO
    inter_unreg: Decimal = ZERO
    intra_reg: Decimal = ZERO
    intra_unreg: Decimal = ZERO

    def add(self, value: Decimal, inter_state: bool, registered: bool) -> None:
        if inter_state and registered:
            self.inter_reg += value
        elif inter_state:
            self.inter_unreg += value
        elif registered:
            self.intra_reg += value
        else:
            self.intra_unreg += value


@dataclass
class Gstr1HsnRow:
    hsn: str
    desc: str
    uqc: str
    qty: Decimal = ZERO
    val: Decimal = ZERO  # taxable + tax
    txval: Decimal = ZERO
    igst: Decimal = ZERO
    cgst: Decimal = ZERO
    sgst: Decimal = ZERO


@dataclass
class Gstr1DocumentRange:
    doc_num: int
    nature: str
    first: str = ""
    last: str = ""
    total: int = 0
    cancelled: int = 0
    tracked: bool = False

    @property
    def net_issued(self) -> int:
        return self.total - self.cancelled


@dataclass
class Gstr1Diagnostic:
    """A record the return left out or could not resolve. Never fatal."""
    # hsn_excluded | state_unresolved | customer_missing | export_metadata_missing | regime_mismatch
    code: str
    document: str
    detail: str

    def to_dict(self) -> dict:
        return {"code": self.code, "document": self.document, "detail": self.detail}


@dataclass
class Gstr1Summary:
    gstin: str
    fp: str  # filing period in MMYYYY format
    gt: Decimal = ZERO  # gross turnover
    cur_gt: Decimal = ZERO  # current-period gross turnover
    net_turnover: Decimal = ZERO  # invoices + debit notes - credit notes
    b2b: list[Gstr1Invoice] = field(default_factory=list)
    sez: list[Gstr1Invoice] = field(default_factory=list)
    de: list[Gstr1Invoice] = field(default_factory=list)
    b2cl: list[Gstr1Invoice] = field(default_factory=list)
    b2cs: list[Gstr1B2CSRow] = field(default_factory=list)
    cdnr: list[Gstr1Note] = field(default_factory=list)
    cdnur: list[Gstr1Note] = field(default_factory=list)
    exp: list[Gstr1Invoice] = field(default_factory=list)
    nil: Gstr1NilSupplies = field(default_factory=Gstr1NilSupplies)
    hsn: list[Gstr1HsnRow] = field(default_factory=list)
    docs: list[Gstr1DocumentRange] = field(default_factory=list)
    diagnostics: list[Gstr1Diagnostic] = field(default_factory=list)


# ---------- Builder from snapshot ----------


# Buckets that are inter-state by definition
INTER_STATE_SUPPLIES = frozenset(
    (SupplyType.B2CL, SupplyType.SEZWP, SupplyType.SEZWOP, SupplyType.EXPWP, SupplyType.EXPWOP)
)


@dataclass(frozen=True)
class _Ref:
    """A document as named in diagnostics, plus a key that tells same-numbered documents apart."""
    label: str
    key: str

    def sub(self, suffix: str) -> "_Ref":
        return _Ref(f"{self.label} / {suffix}", self.key)


def _ref(kind: str, number: str, doc_id: str, position: int) -> _Ref:
    return _Ref(f"{kind} {number}", doc_id or f"#{position}")


class _Context:
    """Lookups and the diagnostics sink for one generation call."""

    def __init__(self, snapshot: Gstr1Snapshot):
        self.profile = snapshot.profile
        self.customers = {c.id: c for c in snapshot.customers}
        self.diagnostics: list[Gstr1Diagnostic] = []
        self._flagged: set[tuple[str, _Ref]] = set()

    def flag(self, code: str, ref: _Ref, detail: str) -> None:
        if (code, ref) in self._flagged:
            return
        self._flagged.add((code, ref))
        logger.warning("gstr1: %s for %s (%s)", code, ref.label, detail)
        self.diagnostics.append(Gstr1Diagnostic(code=code, document=ref.label, detail=detail))

    def customer(self, customer_id: str, ref: _Ref) -> Customer | None:
        cust = self.customers.get(customer_id)
        if cust is None:
            self.flag("customer_missing", ref, f"no customer with id {customer_id!r}")
        return cust

    def place_of_supply(self, state: str, ref: _Ref) -> str:
        if not is_known_state(state):
            self.flag("state_unresolved", ref, f"state {state!r} has no GST code")
        return state_code(state)

    def default_pos(self, cust: Customer | None, ref: _Ref) -> str:
        return self.place_of_supply((cust.state if cust else "") or self.profile.state, ref)


def _build_items(items: list[LineItem], gst_type: GSTType, with_tax: bool = True) -> list[Gstr1Item]:
    """Per-line items; tax follows the document's gst_type, or is zero for supplies without payment."""
    result: list[Gstr1Item] = []
    for idx, item in enumerate(items, start=1):
        if with_tax:
            igst, cgst, sgst = split_tax(line_tax(item), gst_type)
        else:
            igst = cgst = sgst = ZERO
        result.append(
            Gstr1Item(num=idx, rt=item.gst_rate, txval=line_taxable(item), igst=igst, cgst=cgst, sgst=sgst)
        )
    return result


def _build_invoice(
    inv: Invoice, cust: Customer | None, supply_type: SupplyType, ref: _Ref, ctx: _Context
) -> Gstr1Invoice:
    if supply_type == SupplyType.B2CL:
        # Consumer sale: place of supply is the buyer's state, never ours
        pos = ctx.place_of_supply(cust.state if cust else "", ref)
    else:
        pos = ctx.default_pos(cust, ref)

    if supply_type in INTER_STATE_SUPPLIES and inv.gst_type != GSTType.IGST:
        ctx.flag(
            "regime_mismatch",
            ref,
            f"{supply_type.value} supply charged as {inv.gst_type.value}, reported as charged",
        )

    gstr1_inv = Gstr1Invoice(
        num=inv.invoice_number,
        dt=format_gst_date(inv.date),
        val=r2(inv.total_amount),
        pos=pos,
        itms=_build_items(
            inv.items,
            inv.gst_type,
            with_tax=supply_type not in (SupplyType.SEZWOP, SupplyType.EXPWOP),
        ),
        supply_type=supply_type,
        ctin=(cust.gstin if cust else None) or "",
        receiver_name=inv.customer_name,
        rchrg=inv.reverse_charge,
        inter_state=inv.gst_type == GSTType.IGST,
    )

    if supply_type in EXPORT_TYPE_CODES:
        gstr1_inv.port_code = inv.port_code or ""
        gstr1_inv.sb_num = inv.shipping_bill_no or ""
        gstr1_inv.sb_dt = format_gst_date(inv.shipping_bill_date)
        if not (inv.port_code and inv.shipping_bill_no):
            ctx.flag("export_metadata_missing", ref, "port code or shipping bill number is empty")

    return gstr1_inv


def _add_b2cs(
    rows: dict[tuple, Gstr1B2CSRow], inv: Invoice, cust: Customer | None, ref: _Ref, ctx: _Context
) -> None:
    pos = ctx.default_pos(cust, ref)
    inter_state = inv.gst_type == GSTType.IGST
    for item in inv.items:
        key = (pos, inter_state, item.gst_rate)
        row = rows.get(key)
        if row is None:
            row = rows[key] = Gstr1B2CSRow(pos=pos, inter_state=inter_state, rt=item.gst_rate)
        igst, cgst, sgst = split_tax(line_tax(item), inv.gst_type)
        row.txval += line_taxable(item)
        row.igst += igst
        row.cgst += cgst
        row.sgst += sgst


def _build_note(note: Note, ntty: str, cust: Customer | None, ref: _Ref, ctx: _Context) -> Gstr1Note:
    return Gstr1Note(
        num=note.note_number,
        dt=format_gst_date(note.date),
        ntty=ntty,
        val=r2(note.total_amount),
        pos=ctx.default_pos(cust, ref),
        itms=_build_items(note.items, note.gst_type),
        ctin=(cust.gstin if cust else None) or "",
        receiver_name=note.customer_name,
        inter_state=note.gst_type == GSTType.IGST,
    )


def _add_hsn(
    rows: dict[str, Gstr1HsnRow],
    items: list[LineItem],
    gst_type: GSTType,
    sign: int,
    min_digits: int,
    ref: _Ref,
    ctx: _Context,
) -> None:
    for item in items:
        hsn = (item.hsn_code or "").strip()
        if len(hsn) < min_digits:
            ctx.flag(
                "hsn_excluded",
                ref.sub(hsn or "(blank)"),
                f"HSN shorter than {min_digits} digits, left out of HSN summary",
            )
            continue

        taxable = line_taxable(item)
        tax = line_tax(item)
        igst, cgst, sgst = split_tax(tax, gst_type)

        row = rows.get(hsn)
        if row is None:
            row = rows[hsn] = Gstr1HsnRow(hsn=hsn, desc=item.description, uqc=settings.DEFAULT_UQC)
        if not row.desc:
            row.desc = item.description
        row.qty += sign * item.quantity
        row.val += sign * r2(taxable + tax)
        row.txval += sign * taxable
        row.igst += sign * igst
        row.cgst += sign * cgst
        row.sgst += sign * sgst


def _document_ranges(snapshot: Gstr1Snapshot) -> list[Gstr1DocumentRange]:
    # Plain string sort: "INV-10" sorts before "INV-9" unless numbers are zero-padded
    numbers = {
        1: sorted(inv.invoice_number for inv in snapshot.invoices),
        4: sorted(dn.note_number for dn in snapshot.debit_notes),
        5: sorted(cn.note_number for cn in snapshot.credit_notes),
    }
    ranges = []
    for doc_num, nature, tracked in DOCUMENT_NATURES:
        nums = numbers.get(doc_num, [])
        ranges.append(
            Gstr1DocumentRange(
                doc_num=doc_num,
                nature=nature,
                first=nums[0] if nums else "",
                last=nums[-1] if nums else "",
                total=len(nums),
                tracked=tracked,
            )
        )
    return ranges


def prepare_gstr1_summary(snapshot: Gstr1Snapshot) -> Gstr1Summary:
    """
    Build the canonical GSTR-1 summary for one filing period.

    The snapshot must already be limited to the period; nothing is filtered
    by date here. Records that cannot be reported cleanly (short HSN codes,
    unknown states, missing customers, exports without shipping details,
    inter-state buckets charged as CGST/SGST) are still handled the way the
    portal expects and are listed in ``summary.diagnostics``. Tax is always
    reported the way the document charged it.
    """
    ctx = _Context(snapshot)
    profile = snapshot.profile
    summary = Gstr1Summary(gstin=profile.gstin, fp=snapshot.fp)

    b2cs_rows: dict[tuple, Gstr1B2CSRow] = {}
    buckets = {
        SupplyType.B2B: summary.b2b,
        SupplyType.SEZWP: summary.sez,
        SupplyType.SEZWOP: summary.sez,
        SupplyType.DE: summary.de,
        SupplyType.B2CL: summary.b2cl,
        SupplyType.EXPWP: summary.exp,
        SupplyType.EXPWOP: summary.exp,
    }

    invoice_refs = [
        _ref("invoice", inv.invoice_number, inv.id, pos) for pos, inv in enumerate(snapshot.invoices)
    ]
    credit_refs = [
        _ref("credit note", cn.note_number, cn.id, pos) for pos, cn in enumerate(snapshot.credit_notes)
    ]
    debit_refs = [
        _ref("debit note", dn.note_number, dn.id, pos) for pos, dn in enumerate(snapshot.debit_notes)
    ]

    for inv, ref in zip(snapshot.invoices, invoice_refs):
        cust = ctx.customer(inv.customer_id, ref)
        supply_type = resolve_supply_type(inv, cust, profile.state)

        if supply_type == SupplyType.B2CS:
            _add_b2cs(b2cs_rows, inv, cust, ref, ctx)
        else:
            buckets[supply_type].append(_build_invoice(inv, cust, supply_type, ref, ctx))

        nil_value = sum((line_taxable(i) for i in inv.items if i.gst_rate == 0), ZERO)
        if nil_value:
            summary.nil.add(
                nil_value,
                inter_state=inv.gst_type == GSTType.IGST,
                registered=bool(cust and cust.gstin),
            )

    summary.b2cs = list(b2cs_rows.values())

    for ntty, notes, refs in (("C", snapshot.credit_notes, credit_refs), ("D", snapshot.debit_notes, debit_refs)):
        for note, ref in zip(notes, refs):
            cust = ctx.customer(note.customer_id, ref)
            gstr1_note = _build_note(note, ntty, cust, ref, ctx)
            if cust is not None and cust.gstin:
                summary.cdnr.append(gstr1_note)
            else:
                summary.cdnur.append(gstr1_note)

    min_digits = min_hsn_digits(profile.annual_turnover)
    hsn_rows: dict[str, Gstr1HsnRow] = {}
    for inv, ref in zip(snapshot.invoices, invoice_refs):
        _add_hsn(hsn_rows, inv.items, inv.gst_type, 1, min_digits, ref, ctx)
    for cn, ref in zip(snapshot.credit_notes, credit_refs):
        _add_hsn(hsn_rows, cn.items, cn.gst_type, -1, min_digits, ref, ctx)
    for dn, ref in zip(snapshot.debit_notes, debit_refs):
        _add_hsn(hsn_rows, dn.items, dn.gst_type, 1, min_digits, ref, ctx)
    for row in hsn_rows.values():
        row.qty = r2(row.qty)
    summary.hsn = list(hsn_rows.values())

    summary.docs = _document_ranges(snapshot)

    invoice_total = sum((r2(inv.total_amount) for inv in snapshot.invoices), ZERO)
    summary.gt = invoice_total
    summary.cur_gt = invoice_total
    summary.net_turnover = (
        invoice_total
        + sum((r2(dn.total_amount) for dn in snapshot.debit_notes), ZERO)
        - sum((r2(cn.total_amount) for cn in snapshot.credit_notes), ZERO)
    )

    summary.diagnostics = ctx.diagnostics
    logger.info(
        "gstr1: prepared %s for %s: b2b=%d sez=%d de=%d b2cl=%d b2cs=%d cdnr=%d cdnur=%d exp=%d hsn=%d diagnostics=%d",
        summary.fp,
        summary.gstin or "-",
        len(summary.b2b),
        len(summary.sez),
        len(summary.de),
        len(summary.b2cl),
        len(summary.b2cs),
        len(summary.cdnr),
        len(summary.cdnur),
        len(summary.exp),
        len(summary.hsn),
        len(summary.diagnostics),
    )
    return summary


# ---------- Local 'form' for previews ----------


def prepare_gstr1_form(summary: Gstr1Summary) -> dict:
    """
    Build a small aggregate form from the summary for previews.
    """
    invoice_buckets = {
        "b2b": summary.b2b,
        "sez": summary.sez,
        "de": summary.de,
        "b2cl": summary.b2cl,
        "exp": summary.exp,
    }

    total_txval = ZERO
    for invoices in invoice_buckets.values():
        for inv in invoices:
            for item in inv.itms:
                total_txval += item.txval
    for row in summary.b2cs:
        total_txval += row.txval

    return {
        "gstin": summary.gstin,
        "fp": summary.fp,
        "b2b_parties": len({inv.ctin for inv in summary.b2b}),
        **{f"{name}_invoices": len(invoices) for name, invoices in invoice_buckets.items()},
        "b2cs_rows": len(summary.b2cs),
        "cdnr_notes": len(summary.cdnr),
        "cdnur_notes": len(summary.cdnur),
        "hsn_codes": len(summary.hsn),
        "total_txval": float(total_txval),
        "gross_turnover": float(summary.gt),
        "net_turnover": float(summary.net_turnover),
        "diagnostics": [d.to_dict() for d in summary.diagnostics],
    }
