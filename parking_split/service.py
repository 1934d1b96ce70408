# service.py
import logging
from datetime import date
from typing import List, Optional, Tuple

from parking_split.billing import bookings_in_period, find_status, is_generated_period, summarize_periods
from parking_split.data_models import BillingPeriod, BillingTerms, Booking, PeriodStatus, PeriodSummary
from parking_split.dates import format_date
from parking_split.errors import Conflict, NotFound, UnknownOccupant
from parking_split.stores import BookingStore, PeriodStatusStore

logger = logging.getLogger(__name__)


class ParkingService:
    """
    The actions either party can take against the shared stores.

    There is no authentication: whoever calls an action says which party they
    are acting as, and the ownership rules below are checked against that.
    """

    def __init__(self, booking_store: BookingStore, status_store: PeriodStatusStore, terms: BillingTerms):
        self.booking_store = booking_store
        self.status_store = status_store
        self.terms = terms

    def check_occupant(self, occupant: str) -> str:
        if occupant not in self.terms.occupants:
            raise UnknownOccupant(f"Unknown party {occupant!r}, expected one of {', '.join(self.terms.occupants)}.")
        return occupant

    async def load(self) -> Tuple[List[Booking], List[PeriodStatus]]:
        return await self.booking_store.list(), await self.status_store.list()

    async def claim(self, day: date, occupant: str) -> Tuple[Booking, bool]:
        """
        Books the day for the occupant and says whether a new booking was made.

        Claiming a day one already holds returns the existing booking with
        False; claiming a day the other party holds is a Conflict.
        """
        self.check_occupant(occupant)
        existing = await self.booking_store.get_by_date(day)
        if existing is not None:
            if existing.occupant == occupant:
                return existing, False
            raise Conflict(f"{format_date(day)} is already taken by {existing.occupant}.")
        return await self.booking_store.create(day, occupant), True

    async def claim_day(self, day: date, occupant: str) -> Booking:
        booking, _ = await self.claim(day, occupant)
        return booking

    async def release_booking(self, booking_id: int, acting_as: str) -> Booking:
        self.check_occupant(acting_as)
        booking = await self.booking_store.get(booking_id)
        if booking is None:
            raise NotFound(f"Booking {booking_id} not found.")
        return await self._release(booking, acting_as)

    async def release_date(self, day: date, acting_as: str) -> Booking:
        self.check_occupant(acting_as)
        booking = await self.booking_store.get_by_date(day)
        if booking is None:
            raise NotFound(f"There is no booking on {format_date(day)}.")
        return await self._release(booking, acting_as)

    async def _release(self, booking: Booking, acting_as: str) -> Booking:
        if booking.occupant != acting_as:
            logger.warning("%s tried to delete %s's booking on %s", acting_as, booking.occupant, booking.date)
            raise Conflict("You can only delete your own bookings.")
        await self.booking_store.delete(booking.id)
        return booking

    async def set_paid(self, start: date, end: date, is_paid: bool) -> PeriodStatus:
        if not is_generated_period(self.terms.contract_start, start, end):
            raise NotFound(f"{format_date(start)}..{format_date(end)} is not a billing period.")
        return await self.status_store.upsert(start, end, is_paid)

    async def toggle_paid(self, start: date, end: date, current: Optional[bool] = None) -> PeriodStatus:
        """Flips the paid flag. Without a known current value the stored one is used."""
        if current is None:
            statuses = await self.status_store.list()
            status = find_status(statuses, BillingPeriod(start=start, end=end))
            current = status.is_paid if status is not None else False
        return await self.set_paid(start, end, not current)

    async def overview(self, selected: date, today: date) -> Tuple[List[Booking], List[PeriodStatus], List[PeriodSummary]]:
        bookings, statuses = await self.load()
        return bookings, statuses, summarize_periods(bookings, statuses, selected, today, self.terms)

    async def find_summary(self, start: date, end: date, today: date) -> Tuple[PeriodSummary, List[Booking]]:
        """Summary of one generated period plus its bookings, for export."""
        bookings, statuses, summaries = await self.overview(start, today)
        for summary in summaries:
            if summary.period.start == start and summary.period.end == end:
                return summary, bookings_in_period(bookings, summary.period)
        raise NotFound(f"{format_date(start)}..{format_date(end)} is not a billing period.")
