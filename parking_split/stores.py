# stores.py
import logging
from contextlib import asynccontextmanager
from datetime import date, datetime
from typing import List, Optional

from databases import Database
from sqlalchemy.dialects import postgresql, sqlite

from parking_split.data_models import Booking, PeriodStatus
from parking_split.database import database
from parking_split.dates import format_date, parse_date
from parking_split.errors import Conflict, NotFound, ParkingError, StoreUnavailable
from parking_split.models import billing_periods, bookings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def _store_call(action: str):
    """Turns any database failure into StoreUnavailable."""
    try:
        yield
    except ParkingError:
        raise
    except Exception as exc:
        logger.exception("Store call failed: %s", action)
        raise StoreUnavailable(f"Could not {action}. Please try again.") from exc


def _booking_from_row(row) -> Booking:
    created_at = row["created_at"]
    return Booking(
        id=row["id"],
        date=parse_date(row["date"]),
        occupant=row["occupant"],
        created_at=datetime.fromisoformat(created_at) if created_at else None,
    )


def _status_from_row(row) -> PeriodStatus:
    return PeriodStatus(
        id=row["id"],
        start_date=parse_date(row["start_date"]),
        end_date=parse_date(row["end_date"]),
        is_paid=bool(row["is_paid"]),
    )


class BookingStore:
    """Day bookings. The unique date column is the only arbiter between concurrent claims."""

    def __init__(self, db: Database = database):
        self.db = db

    async def list(self) -> List[Booking]:
        async with _store_call("load bookings"):
            rows = await self.db.fetch_all(bookings.select().order_by(bookings.c.date))
        logger.debug("Loaded %d bookings", len(rows))
        return [_booking_from_row(row) for row in rows]

    async def get(self, booking_id: int) -> Optional[Booking]:
        async with _store_call("load the booking"):
            row = await self.db.fetch_one(bookings.select().where(bookings.c.id == booking_id))
        return _booking_from_row(row) if row else None

    async def get_by_date(self, day: date) -> Optional[Booking]:
        async with _store_call("load the booking"):
            row = await self.db.fetch_one(bookings.select().where(bookings.c.date == format_date(day)))
        return _booking_from_row(row) if row else None

    async def create(self, day: date, occupant: str) -> Booking:
        key = format_date(day)
        existing = await self.get_by_date(day)
        if existing is not None:
            raise Conflict(f"{key} is already taken by {existing.occupant}.")

        query = bookings.insert().values(
            date=key,
            occupant=occupant,
            created_at=datetime.now().isoformat(timespec="seconds"),
        )
        try:
            booking_id = await self.db.execute(query)
        except Exception as exc:
            # Lost the race against a concurrent insert for the same day
            winner = await self.get_by_date(day)
            if winner is not None:
                raise Conflict(f"{key} is already taken by {winner.occupant}.") from exc
            logger.exception("Insert failed for booking on %s", key)
            raise StoreUnavailable("Could not save the booking. Please try again.") from exc

        booking = await self.get(booking_id)
        if booking is None:
            raise StoreUnavailable("The saved booking could not be read back.")
        logger.info("Booked %s for %s (id=%s)", key, occupant, booking.id)
        return booking

    async def delete(self, booking_id: int) -> None:
        async with _store_call("delete the booking"):
            deleted = await self.db.fetch_one(
                bookings.delete().where(bookings.c.id == booking_id).returning(bookings.c.id)
            )
        if deleted is None:
            raise NotFound(f"Booking {booking_id} not found.")
        logger.info("Deleted booking %s", booking_id)


def _dialect_insert(db: Database):
    """The INSERT construct that supports ON CONFLICT for this database's dialect."""
    if db.url.dialect in ("postgresql", "postgres"):
        return postgresql.insert
    return sqlite.insert


class PeriodStatusStore:
    """Paid flags keyed by (start_date, end_date)."""

    def __init__(self, db: Database = database):
        self.db = db

    async def list(self) -> List[PeriodStatus]:
        async with _store_call("load payment statuses"):
            rows = await self.db.fetch_all(billing_periods.select().order_by(billing_periods.c.id))
        return [_status_from_row(row) for row in rows]

    async def upsert(self, start: date, end: date, is_paid: bool) -> PeriodStatus:
        """Creates or updates the row for these bounds and returns it as stored."""
        insert = _dialect_insert(self.db)
        statement = (
            insert(billing_periods)
            .values(start_date=format_date(start), end_date=format_date(end), is_paid=is_paid)
            .on_conflict_do_update(index_elements=["start_date", "end_date"], set_={"is_paid": is_paid})
        )
        async with _store_call("save the payment status"):
            await self.db.execute(statement)
            row = await self.db.fetch_one(
                billing_periods.select().where(
                    billing_periods.c.start_date == format_date(start),
                    billing_periods.c.end_date == format_date(end),
                )
            )

        logger.info("Period %s..%s marked %s", format_date(start), format_date(end), "paid" if is_paid else "open")
        return _status_from_row(row)
