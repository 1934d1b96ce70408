import asyncio
import unittest
from datetime import date

from parking_split.errors import Conflict, NotFound, UnknownOccupant
from parking_split.service import ParkingService

from fakes import TERMS, InMemoryBookingStore, InMemoryStatusStore


class ServiceTestCase(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.booking_store = InMemoryBookingStore()
        self.status_store = InMemoryStatusStore()
        self.service = ParkingService(self.booking_store, self.status_store, TERMS)


class TestClaims(ServiceTestCase):
    async def test_claim_free_day(self):
        booking = await self.service.claim_day(date(2025, 11, 12), "ali")
        self.assertEqual(booking.occupant, "ali")
        self.assertEqual(len(self.booking_store.rows), 1)

    async def test_reclaim_by_same_party_is_a_no_op(self):
        first = await self.service.claim_day(date(2025, 11, 12), "ali")
        again = await self.service.claim_day(date(2025, 11, 12), "ali")
        self.assertEqual(first, again)
        self.assertEqual(len(self.booking_store.rows), 1)

    async def test_claim_reports_whether_booking_is_new(self):
        booking, created = await self.service.claim(date(2025, 11, 12), "ali")
        self.assertTrue(created)
        again, created = await self.service.claim(date(2025, 11, 12), "ali")
        self.assertFalse(created)
        self.assertEqual(again, booking)

    async def test_claim_taken_day_conflicts(self):
        await self.service.claim_day(date(2025, 11, 12), "najani")
        with self.assertRaises(Conflict):
            await self.service.claim_day(date(2025, 11, 12), "ali")

    async def test_claims_gathered_together_leave_one_booking(self):
        results = await asyncio.gather(
            self.service.claim_day(date(2025, 11, 12), "najani"),
            self.service.claim_day(date(2025, 11, 12), "ali"),
            return_exceptions=True,
        )
        conflicts = [r for r in results if isinstance(r, Conflict)]
        self.assertEqual(len(conflicts), 1)
        self.assertEqual(len(self.booking_store.rows), 1)

    async def test_unknown_occupant(self):
        with self.assertRaises(UnknownOccupant):
            await self.service.claim_day(date(2025, 11, 12), "mallory")


class TestReleases(ServiceTestCase):
    async def test_owner_can_delete(self):
        booking = await self.service.claim_day(date(2025, 11, 12), "ali")
        removed = await self.service.release_booking(booking.id, "ali")
        self.assertEqual(removed, booking)
        self.assertEqual(self.booking_store.rows, {})

    async def test_other_party_cannot_delete(self):
        booking = await self.service.claim_day(date(2025, 11, 12), "ali")
        with self.assertRaises(Conflict):
            await self.service.release_booking(booking.id, "najani")
        self.assertIn(booking.id, self.booking_store.rows)

    async def test_release_by_date(self):
        await self.service.claim_day(date(2025, 11, 12), "najani")
        await self.service.release_date(date(2025, 11, 12), "najani")
        with self.assertRaises(NotFound):
            await self.service.release_date(date(2025, 11, 12), "najani")

    async def test_missing_booking(self):
        with self.assertRaises(NotFound):
            await self.service.release_booking(99, "ali")


class TestPaidStatus(ServiceTestCase):
    async def test_set_paid_on_generated_period(self):
        status = await self.service.set_paid(date(2025, 12, 10), date(2026, 1, 10), True)
        self.assertTrue(status.is_paid)

    async def test_set_paid_rejects_bounds_that_are_not_a_period(self):
        with self.assertRaises(NotFound):
            await self.service.set_paid(date(2025, 12, 1), date(2026, 1, 1), True)
        self.assertEqual(self.status_store.rows, {})

    async def test_toggle_reads_stored_flag(self):
        start, end = date(2025, 11, 10), date(2025, 12, 10)
        self.assertTrue((await self.service.toggle_paid(start, end)).is_paid)
        self.assertFalse((await self.service.toggle_paid(start, end)).is_paid)
        self.assertEqual(len(self.status_store.rows), 1)

    async def test_toggle_with_known_flag(self):
        start, end = date(2025, 11, 10), date(2025, 12, 10)
        self.assertFalse((await self.service.toggle_paid(start, end, current=True)).is_paid)


class TestOverview(ServiceTestCase):
    async def test_find_summary_returns_period_bookings(self):
        for day, who in [(date(2025, 11, 12), "ali"), (date(2025, 11, 13), "najani"), (date(2025, 12, 12), "ali")]:
            await self.service.claim_day(day, who)
        await self.service.set_paid(date(2025, 11, 10), date(2025, 12, 10), True)

        summary, bookings = await self.service.find_summary(date(2025, 11, 10), date(2025, 12, 10), date(2025, 11, 20))
        self.assertTrue(summary.settlement.is_paid)
        self.assertEqual(summary.settlement.used_days, 1)
        self.assertEqual([b.date for b in bookings], [date(2025, 11, 12), date(2025, 11, 13)])

    async def test_find_summary_unknown_period(self):
        with self.assertRaises(NotFound):
            await self.service.find_summary(date(2025, 11, 1), date(2025, 12, 1), date(2025, 11, 20))


if __name__ == "__main__":
    unittest.main()
