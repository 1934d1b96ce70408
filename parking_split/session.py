# session.py
import logging
from datetime import date
from typing import Callable, Optional

from parking_split import state as st
from parking_split.billing import find_status
from parking_split.data_models import BillingPeriod, BillingTerms
from parking_split.dates import parse_date
from parking_split.errors import ParkingError
from parking_split.service import ParkingService

logger = logging.getLogger(__name__)


class ParkingSession:
    """
    One connected viewer. Holds that viewer's AppState and runs its actions
    against the shared stores.

    Every action is one store round trip. The local state is replaced only
    after the store answers, with the record it returned; a failure leaves it
    as it was and shows a notice instead.
    """

    def __init__(self, service: ParkingService, terms: BillingTerms, today: Callable[[], date] = date.today):
        self.service = service
        self.terms = terms
        self.today = today
        self.state = st.initial_state(terms, today())

    def view(self) -> dict:
        return st.to_view(self.state, self.terms, self.today())

    def _fail(self, action: str, exc: ParkingError) -> bool:
        logger.warning("%s failed for %s: %s", action, self.state.acting_as, exc.detail)
        self.state = st.with_notice(self.state, exc.detail)
        return False

    async def load(self) -> bool:
        try:
            bookings, statuses = await self.service.load()
        except ParkingError as exc:
            return self._fail("load", exc)
        self.state = st.with_loaded(self.state, bookings, statuses)
        return True

    async def claim_day(self, day: Optional[date] = None) -> bool:
        """Books the selected day (or the given one) for whoever is acting."""
        day = day or self.state.selected_date
        existing = st.booking_on(self.state, day)
        if existing is not None and existing.occupant == self.state.acting_as:
            return False
        try:
            booking, created = await self.service.claim(day, self.state.acting_as)
        except ParkingError as exc:
            return self._fail("claim_day", exc)
        self.state = st.with_booking_added(self.state, booking)
        return created

    async def delete_booking(self, booking_id: int) -> bool:
        try:
            booking = await self.service.release_booking(booking_id, self.state.acting_as)
        except ParkingError as exc:
            return self._fail("delete_booking", exc)
        self.state = st.with_booking_removed(self.state, booking.id)
        return True

    async def delete_booking_by_date(self, day: Optional[date] = None) -> bool:
        day = day or self.state.selected_date
        try:
            booking = await self.service.release_date(day, self.state.acting_as)
        except ParkingError as exc:
            return self._fail("delete_booking_by_date", exc)
        self.state = st.with_booking_removed(self.state, booking.id)
        return True

    async def toggle_paid(self, start: date, end: date) -> bool:
        current = find_status(self.state.statuses, BillingPeriod(start=start, end=end))
        try:
            status = await self.service.toggle_paid(start, end, current.is_paid if current else False)
        except ParkingError as exc:
            return self._fail("toggle_paid", exc)
        self.state = st.with_status_upserted(self.state, status)
        return True

    def select_date(self, day: date) -> None:
        self.state = st.with_selected_date(self.state, day)

    def change_month(self, delta: int) -> None:
        self.state = st.with_month_shift(self.state, delta)

    def go_to_today(self) -> None:
        self.state = st.with_today(self.state, self.today())

    def set_acting(self, occupant: str) -> None:
        try:
            self.service.check_occupant(occupant)
        except ParkingError as exc:
            self._fail("set_acting", exc)
            return
        self.state = st.with_acting(self.state, occupant)

    async def handle_message(self, message: dict) -> bool:
        """
        Routes one client message. Returns True when the shared stores changed,
        so other viewers should reload.
        """
        msg_type = message.get("type")
        data = message.get("data")
        if not isinstance(data, dict):
            data = {}
        try:
            if msg_type == "reload":
                await self.load()
            elif msg_type == "select_date":
                self.select_date(parse_date(data["date"]))
            elif msg_type == "change_month":
                self.change_month(int(data.get("delta", 0)))
            elif msg_type == "go_to_today":
                self.go_to_today()
            elif msg_type == "set_acting":
                self.set_acting(data["occupant"])
            elif msg_type == "claim_day":
                return await self.claim_day(parse_date(data["date"]) if "date" in data else None)
            elif msg_type == "delete_booking":
                return await self.delete_booking(int(data["booking_id"]))
            elif msg_type == "delete_booking_by_date":
                return await self.delete_booking_by_date(parse_date(data["date"]) if "date" in data else None)
            elif msg_type == "toggle_paid":
                return await self.toggle_paid(parse_date(data["start"]), parse_date(data["end"]))
            else:
                self.state = st.with_notice(self.state, f"Unknown message type {msg_type!r}.")
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Malformed %r message: %s", msg_type, exc)
            self.state = st.with_notice(self.state, f"Malformed {msg_type!r} message.")
        return False
