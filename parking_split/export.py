# export.py
from typing import Sequence

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from parking_split.data_models import BillingPeriod, BillingTerms, Booking, PeriodSummary
from parking_split.dates import format_date


def export_filename(period: BillingPeriod) -> str:
    return f"parking_{format_date(period.start)}_{format_date(period.end)}.pdf"


def _line(pdf: FPDF, text: str, height: float = 6) -> None:
    pdf.cell(0, height, text, new_x=XPos.LMARGIN, new_y=YPos.NEXT)


def render_period_pdf(summary: PeriodSummary, bookings: Sequence[Booking], terms: BillingTerms) -> bytes:
    """Printable statement for one billing period: totals first, then one line per booked day."""
    period, settlement = summary.period, summary.settlement
    money = f"{terms.currency} {{:.2f}}"

    pdf = FPDF()
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()

    pdf.set_font("Helvetica", "B", 14)
    _line(pdf, "Parking spot statement", height=10)

    pdf.set_font("Helvetica", size=10)
    _line(pdf, f"Period: {format_date(period.start)} to {format_date(period.end)}")
    _line(pdf, f"Status: {'paid' if settlement.is_paid else 'open'}")
    pdf.ln(4)

    pdf.set_font("Helvetica", "B", 11)
    _line(pdf, "Summary")
    pdf.set_font("Helvetica", size=10)
    _line(pdf, f"{terms.rate_payer}: {settlement.used_days} day(s) -> {money.format(settlement.usage_amount)}")
    _line(pdf, f"{terms.other_party}: {money.format(settlement.remainder_amount)}")
    pdf.ln(4)

    pdf.set_font("Helvetica", "B", 11)
    _line(pdf, "Days")
    pdf.set_font("Helvetica", size=9)
    if not bookings:
        _line(pdf, "No bookings in this period.", height=5)
    for booking in sorted(bookings, key=lambda b: b.date):
        _line(pdf, f"{format_date(booking.date)}: {booking.occupant}", height=5)

    return bytes(pdf.output())
