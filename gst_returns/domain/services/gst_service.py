# gst_returns/domain/services/gst_service.py
"""
Filing-period helpers used by callers of the GSTR-1 generator.

The generator trusts its snapshot; limiting records to a month or a quarter
happens here, before generation. Quarters follow the Indian financial year.
"""

from __future__ import annotations

import calendar
from datetime import date
from typing import Iterable

from gst_returns.domain.models.gst import (
    BusinessProfile,
    CreditNote,
    Customer,
    DebitNote,
    Gstr1Snapshot,
    Invoice,
)


def filing_period(d: date) -> str:
    """Filing period MMYYYY (e.g. 112025)."""
    return f"{d.month:02d}{d.year}"


def get_current_gst_period(today: date | None = None) -> str:
    """
    Period currently due for filing: the previous calendar month.
    """
    today = today or date.today()
    if today.month == 1:
        return filing_period(date(today.year - 1, 12, 1))
    return filing_period(date(today.year, today.month - 1, 1))


def period_bounds(fp: str) -> tuple[date, date]:
    """First and last day of an MMYYYY period. Raises ValueError if malformed."""
    if len(fp) != 6 or not fp.isdigit():
        raise ValueError(f"Filing period must be MMYYYY, got {fp!r}")
    month, year = int(fp[:2]), int(fp[2:])
    if not 1 <= month <= 12:
        raise ValueError(f"Invalid month in filing period {fp!r}")
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def snapshot_for_range(
    profile: BusinessProfile,
    invoices: Iterable[Invoice],
    customers: Iterable[Customer],
    credit_notes: Iterable[CreditNote],
    debit_notes: Iterable[DebitNote],
    start: date,
    end: date,
    fp: str,
) -> Gstr1Snapshot:
    """
    Documents dated between ``start`` and ``end`` (inclusive), soft-deleted
    invoices dropped. Customers are passed through whole.
    """

    def in_range(d: date) -> bool:
        return start <= d <= end

    return Gstr1Snapshot(
        profile=profile,
        invoices=[inv for inv in invoices if not inv.deleted and in_range(inv.date)],
        customers=list(customers),
        credit_notes=[cn for cn in credit_notes if in_range(cn.date)],
        debit_notes=[dn for dn in debit_notes if in_range(dn.date)],
        fp=fp,
    )


def snapshot_for_period(
    profile: BusinessProfile,
    invoices: Iterable[Invoice],
    customers: Iterable[Customer],
    credit_notes: Iterable[CreditNote],
    debit_notes: Iterable[DebitNote],
    fp: str,
) -> Gstr1Snapshot:
    """Assemble a generator snapshot for one month."""
    start, end = period_bounds(fp)
    return snapshot_for_range(profile, invoices, customers, credit_notes, debit_notes, start, end, fp)


# ---------- Quarters (Indian financial year) ----------

# Q1 = Apr-Jun ... Q4 = Jan-Mar of the following calendar year
QUARTER_MONTHS = {1: (4, 5, 6), 2: (7, 8, 9), 3: (10, 11, 12), 4: (1, 2, 3)}
QUARTER_RANGES = {1: "Apr - Jun", 2: "Jul - Sep", 3: "Oct - Dec", 4: "Jan - Mar"}


def parse_quarter(q_key: str) -> tuple[int, int]:
    """``"2025-Q4"`` -> ``(2025, 4)``; the year is the FY start year."""
    year, sep, quarter = q_key.partition("-Q")
    if not sep or not (year.isdigit() and len(year) == 4) or quarter not in ("1", "2", "3", "4"):
        raise ValueError(f"Quarter must be YYYY-Q1..YYYY-Q4, got {q_key!r}")
    return int(year), int(quarter)


def current_quarter(today: date | None = None) -> str:
    today = today or date.today()
    if today.month <= 3:
        return f"{today.year - 1}-Q4"
    return f"{today.year}-Q{(today.month - 4) // 3 + 1}"


def quarter_months(q_key: str) -> list[str]:
    """Filing periods (MMYYYY) of the quarter's three months."""
    year, quarter = parse_quarter(q_key)
    cal_year = year + 1 if quarter == 4 else year
    return [f"{month:02d}{cal_year}" for month in QUARTER_MONTHS[quarter]]


def quarter_bounds(q_key: str) -> tuple[date, date]:
    months = quarter_months(q_key)
    return period_bounds(months[0])[0], period_bounds(months[-1])[1]


def quarter_label(q_key: str) -> str:
    """``"2025-Q4"`` -> ``"Q4 FY 2025-26 (Jan - Mar)"``."""
    year, quarter = parse_quarter(q_key)
    return f"Q{quarter} FY {year}-{str(year + 1)[2:]} ({QUARTER_RANGES[quarter]})"


def filing_due_dates(period_end: date) -> dict[str, date]:
    """GSTR-1 is due on the 11th and GSTR-3B on the 20th of the month after the period."""
    if period_end.month == 12:
        year, month = period_end.year + 1, 1
    else:
        year, month = period_end.year, period_end.month + 1
    return {"gstr1": date(year, month, 11), "gstr3b": date(year, month, 20)}
