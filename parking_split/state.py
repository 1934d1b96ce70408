# state.py
from dataclasses import dataclass, replace
from datetime import date
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple

from parking_split.billing import bookings_in_period, current_summary, summarize_periods
from parking_split.data_models import BillingTerms, Booking, PeriodStatus, PeriodSummary
from parking_split.dates import build_month_grid, format_date, month_label, shift_month


@dataclass(frozen=True)
class AppState:
    """
    Everything one viewer of the tracker sees. Bookings and statuses only ever
    hold records the store has returned.
    """
    acting_as: str
    selected_date: date
    view_year: int
    view_month: int
    bookings: Tuple[Booking, ...] = ()
    statuses: Tuple[PeriodStatus, ...] = ()
    notice: Optional[str] = None


def initial_state(terms: BillingTerms, today: date, acting_as: Optional[str] = None) -> AppState:
    return AppState(
        acting_as=acting_as or terms.occupants[0],
        selected_date=today,
        view_year=today.year,
        view_month=today.month,
    )


def _sorted(bookings: Iterable[Booking]) -> Tuple[Booking, ...]:
    return tuple(sorted(bookings, key=lambda b: b.date))


def with_loaded(state: AppState, bookings: Iterable[Booking], statuses: Iterable[PeriodStatus]) -> AppState:
    return replace(state, bookings=_sorted(bookings), statuses=tuple(statuses), notice=None)


def with_booking_added(state: AppState, booking: Booking) -> AppState:
    others = [b for b in state.bookings if b.id != booking.id]
    return replace(state, bookings=_sorted(others + [booking]), notice=None)


def with_booking_removed(state: AppState, booking_id: int) -> AppState:
    return replace(state, bookings=tuple(b for b in state.bookings if b.id != booking_id), notice=None)


def with_status_upserted(state: AppState, status: PeriodStatus) -> AppState:
    others = [
        s for s in state.statuses
        if not (s.start_date == status.start_date and s.end_date == status.end_date)
    ]
    return replace(state, statuses=tuple(others + [status]), notice=None)


def with_selected_date(state: AppState, day: date) -> AppState:
    return replace(state, selected_date=day, notice=None)


def with_month_shift(state: AppState, delta: int) -> AppState:
    year, month = shift_month(state.view_year, state.view_month, delta)
    return replace(state, view_year=year, view_month=month, notice=None)


def with_view_month(state: AppState, year: int, month: int) -> AppState:
    return replace(state, view_year=year, view_month=month)


def with_today(state: AppState, today: date) -> AppState:
    return replace(state, selected_date=today, view_year=today.year, view_month=today.month, notice=None)


def with_acting(state: AppState, occupant: str) -> AppState:
    return replace(state, acting_as=occupant, notice=None)


def with_notice(state: AppState, notice: str) -> AppState:
    return replace(state, notice=notice)


def booking_on(state: AppState, day: date) -> Optional[Booking]:
    for booking in state.bookings:
        if booking.date == day:
            return booking
    return None


def summaries_for(state: AppState, terms: BillingTerms, today: date) -> Sequence[PeriodSummary]:
    return summarize_periods(state.bookings, state.statuses, state.selected_date, today, terms)


# Serialization for the JSON API, the WebSocket and the dashboard template

def booking_to_dict(booking: Booking) -> Dict[str, Any]:
    return {
        "id": booking.id,
        "date": format_date(booking.date),
        "occupant": booking.occupant,
        "created_at": booking.created_at.isoformat() if booking.created_at else None,
    }


def status_to_dict(status: PeriodStatus) -> Dict[str, Any]:
    return {
        "start_date": format_date(status.start_date),
        "end_date": format_date(status.end_date),
        "is_paid": status.is_paid,
    }


def summary_to_dict(summary: PeriodSummary, terms: BillingTerms) -> Dict[str, Any]:
    settlement = summary.settlement
    return {
        "start": format_date(summary.period.start),
        "end": format_date(summary.period.end),
        "rate_payer": terms.rate_payer,
        "other_party": terms.other_party,
        "used_days": settlement.used_days,
        "usage_amount": settlement.usage_amount,
        "remainder_amount": settlement.remainder_amount,
        "is_paid": settlement.is_paid,
        "is_current": summary.is_current,
    }


def to_view(state: AppState, terms: BillingTerms, today: date) -> Dict[str, Any]:
    """The full picture a client renders: month grid, selected day and periods."""
    occupied = {b.date: b.occupant for b in state.bookings}
    cells = [
        {
            "date": format_date(cell.date),
            "in_current_month": cell.in_current_month,
            "occupant": occupied.get(cell.date),
            "is_today": cell.date == today,
            "is_selected": cell.date == state.selected_date,
        }
        for cell in build_month_grid(state.view_year, state.view_month)
    ]

    summaries = summaries_for(state, terms, today)
    current = current_summary(summaries)
    selected = booking_on(state, state.selected_date)

    current_view = summary_to_dict(current, terms)
    current_view["bookings"] = [booking_to_dict(b) for b in bookings_in_period(state.bookings, current.period)]

    return {
        "acting_as": state.acting_as,
        "occupants": list(terms.occupants),
        "currency": terms.currency,
        "today": format_date(today),
        "selected_date": format_date(state.selected_date),
        "selected_booking": booking_to_dict(selected) if selected else None,
        "month": {
            "year": state.view_year,
            "month": state.view_month,
            "label": month_label(state.view_year, state.view_month),
            "cells": cells,
        },
        "current_period": current_view,
        "periods": [summary_to_dict(s, terms) for s in summaries],
        "notice": state.notice,
    }
