# billing.py
from dataclasses import replace
from datetime import date
from typing import Iterable, List, Optional, Sequence

from parking_split.data_models import (
    BillingPeriod,
    BillingTerms,
    Booking,
    PeriodStatus,
    PeriodSummary,
    Settlement,
)
from parking_split.dates import add_one_month


def latest_status(statuses: Iterable[PeriodStatus]) -> Optional[PeriodStatus]:
    """The status with the latest end date. On ties the first one seen wins."""
    latest = None
    for status in statuses:
        if latest is None or status.end_date > latest.end_date:
            latest = status
    return latest


def generate_periods(anchor: date, horizon: date, statuses: Iterable[PeriodStatus] = ()) -> List[BillingPeriod]:
    """
    Monthly periods starting at the anchor, far enough to contain the horizon.

    When the latest tracked period is already paid and reaches at least as far
    as the horizon requires, one more period past it is opened so it can be
    marked ahead of time.
    """
    limit = add_one_month(anchor)
    while horizon >= limit:
        limit = add_one_month(limit)

    latest = latest_status(statuses)
    if latest is not None and latest.is_paid and latest.end_date >= limit:
        limit = add_one_month(latest.end_date)

    periods = []
    start = anchor
    while start < limit:
        end = add_one_month(start)
        periods.append(BillingPeriod(start=start, end=end))
        start = end
    return periods


def is_generated_period(anchor: date, start: date, end: date) -> bool:
    """True when [start, end) is one of the periods counted from the anchor."""
    cursor = anchor
    while cursor < start:
        cursor = add_one_month(cursor)
    return cursor == start and add_one_month(start) == end


def bookings_in_period(bookings: Iterable[Booking], period: BillingPeriod) -> List[Booking]:
    return sorted((b for b in bookings if period.contains(b.date)), key=lambda b: b.date)


def settle(period: BillingPeriod, bookings: Iterable[Booking], terms: BillingTerms) -> Settlement:
    """
    Splits the monthly rent for one period. The rate payer owes the daily rate
    for each day used, capped at the rent; the other party covers the rest.
    """
    used_days = sum(1 for b in bookings if b.occupant == terms.rate_payer)
    usage_amount = min(used_days * terms.daily_rate, terms.monthly_rent)
    remainder_amount = max(terms.monthly_rent - usage_amount, 0)
    return Settlement(
        used_days=used_days,
        usage_amount=float(usage_amount),
        remainder_amount=float(remainder_amount),
    )


def horizon_date(bookings: Iterable[Booking], selected: date, today: date) -> date:
    return max([selected, today] + [b.date for b in bookings])


def find_status(statuses: Iterable[PeriodStatus], period: BillingPeriod) -> Optional[PeriodStatus]:
    for status in statuses:
        if status.start_date == period.start and status.end_date == period.end:
            return status
    return None


def is_paid(statuses: Iterable[PeriodStatus], period: BillingPeriod) -> bool:
    status = find_status(statuses, period)
    return status.is_paid if status is not None else False


def select_current_period(periods: Sequence[BillingPeriod], selected: date) -> BillingPeriod:
    """The period containing the selected day, or the last one if none does."""
    if not periods:
        raise ValueError("No billing periods to select from.")
    for period in periods:
        if period.contains(selected):
            return period
    return periods[-1]


def summarize_periods(
    bookings: Sequence[Booking],
    statuses: Sequence[PeriodStatus],
    selected: date,
    today: date,
    terms: BillingTerms,
) -> List[PeriodSummary]:
    horizon = horizon_date(bookings, selected, today)
    periods = generate_periods(terms.contract_start, horizon, statuses)
    current = select_current_period(periods, selected)

    summaries = []
    for period in periods:
        settlement = settle(period, bookings_in_period(bookings, period), terms)
        settlement = replace(settlement, is_paid=is_paid(statuses, period))
        summaries.append(PeriodSummary(period=period, settlement=settlement, is_current=period == current))
    return summaries


def current_summary(summaries: Sequence[PeriodSummary]) -> PeriodSummary:
    for summary in summaries:
        if summary.is_current:
            return summary
    return summaries[-1]
