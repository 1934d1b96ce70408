"""In-memory stand-ins for the record store, with the same contract as parking_split.stores."""
from datetime import date, datetime
from typing import Dict, List, Optional, Tuple

from parking_split.data_models import BillingTerms, Booking, PeriodStatus
from parking_split.errors import Conflict, NotFound, StoreUnavailable

TERMS = BillingTerms(
    daily_rate=2.5,
    monthly_rent=50.0,
    contract_start=date(2025, 11, 10),
    occupants=("najani", "ali"),
    rate_payer="ali",
    currency="CHF",
)


class InMemoryBookingStore:
    def __init__(self):
        self.rows: Dict[int, Booking] = {}
        self.next_id = 1
        self.fail = False

    def _check(self):
        if self.fail:
            raise StoreUnavailable("Store is down.")

    async def list(self) -> List[Booking]:
        self._check()
        return sorted(self.rows.values(), key=lambda b: b.date)

    async def get(self, booking_id: int) -> Optional[Booking]:
        self._check()
        return self.rows.get(booking_id)

    async def get_by_date(self, day: date) -> Optional[Booking]:
        self._check()
        return next((b for b in self.rows.values() if b.date == day), None)

    async def create(self, day: date, occupant: str) -> Booking:
        self._check()
        if await self.get_by_date(day) is not None:
            raise Conflict(f"{day} is already taken.")
        booking = Booking(id=self.next_id, date=day, occupant=occupant, created_at=datetime(2025, 11, 1, 8, 0))
        self.rows[booking.id] = booking
        self.next_id += 1
        return booking

    async def delete(self, booking_id: int) -> None:
        self._check()
        if booking_id not in self.rows:
            raise NotFound(f"Booking {booking_id} not found.")
        del self.rows[booking_id]


class InMemoryStatusStore:
    def __init__(self):
        self.rows: Dict[Tuple[date, date], PeriodStatus] = {}
        self.fail = False

    async def list(self) -> List[PeriodStatus]:
        if self.fail:
            raise StoreUnavailable("Store is down.")
        return list(self.rows.values())

    async def upsert(self, start: date, end: date, is_paid: bool) -> PeriodStatus:
        if self.fail:
            raise StoreUnavailable("Store is down.")
        existing = self.rows.get((start, end))
        status_id = existing.id if existing else len(self.rows) + 1
        self.rows[(start, end)] = PeriodStatus(start_date=start, end_date=end, is_paid=is_paid, id=status_id)
        return self.rows[(start, end)]
