import hashlib
import unittest

from tourism_mcp.config import DEFAULT_CATALOG_PATH
from tourism_mcp.errors import AlreadyConfirmed, CategoryMismatch, InvalidState, NotFound
from tourism_mcp.services.catalog import AttractionCatalog
from tourism_mcp.services.models import LifecycleStatus, Reservation
from tourism_mcp.services.reservations import ReservationManager
from tourism_mcp.services.store import InMemoryTTLStore


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class TestReservationManager(unittest.TestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.store = InMemoryTTLStore(clock=self.clock)
        self.catalog = AttractionCatalog.from_file(DEFAULT_CATALOG_PATH)
        self.manager = ReservationManager(self.store, self.catalog)

    def prepare(self, attraction_id=503, people=2, special_requests=None):
        return self.manager.prepare_restaurant_reservation(
            attraction_id=attraction_id,
            number_of_people=people,
            reservation_date="2026-06-01",
            reservation_time="19:30",
            guest_name="Lukas Gruber",
            guest_email="lukas@gruber.at",
            special_requests=special_requests,
        )

    def test_prepare_restaurant(self):
        reservation = self.prepare(503, 4, "Window table")
        self.assertIsInstance(reservation, Reservation)
        self.assertRegex(reservation.reservation_id, r"^RSV-[0-9A-F]{8}$")
        self.assertEqual(reservation.status, LifecycleStatus.PENDING)
        self.assertEqual(reservation.attraction_name, "Steirereck")
        self.assertEqual(reservation.special_requests, "Window table")
        self.assertEqual(reservation.location.latitude, 48.2008)
        self.assertIsNone(reservation.confirmation_number)
        self.assertEqual(self.manager.get_reservation(reservation.reservation_id).number_of_people, 4)

    def test_prepare_cafe(self):
        self.assertIsInstance(self.prepare(801), Reservation)

    def test_historical_site_is_category_mismatch(self):
        outcome = self.prepare(101)
        self.assertIsInstance(outcome, CategoryMismatch)
        self.assertEqual(outcome.to_dict()["error"], "category_mismatch")

    def test_unknown_venue(self):
        self.assertIsInstance(self.prepare(9999), NotFound)

    def test_confirm_issues_confirmation_number(self):
        reservation = self.prepare()
        confirmed = self.manager.confirm_restaurant_reservation(reservation.reservation_id)
        expected = "CNF-" + hashlib.md5(reservation.reservation_id.encode()).hexdigest()[:10].upper()
        self.assertEqual(confirmed.confirmation_number, expected)
        self.assertEqual(confirmed.status, LifecycleStatus.CONFIRMED)
        self.assertIsNotNone(confirmed.confirmed_at)

    def test_confirm_twice(self):
        reservation = self.prepare()
        first = self.manager.confirm_restaurant_reservation(reservation.reservation_id)
        second = self.manager.confirm_restaurant_reservation(reservation.reservation_id)
        self.assertIsInstance(second, AlreadyConfirmed)
        self.assertEqual(second.record.confirmation_number, first.confirmation_number)
        self.assertEqual(second.record.confirmed_at, first.confirmed_at)

    def test_confirm_unknown(self):
        self.assertIsInstance(self.manager.confirm_restaurant_reservation("RSV-NOPE0000"), NotFound)

    def test_cancel_then_confirm(self):
        reservation = self.prepare()
        cancelled = self.manager.cancel_reservation(reservation.reservation_id)
        self.assertEqual(cancelled.status, LifecycleStatus.CANCELLED)
        outcome = self.manager.confirm_restaurant_reservation(reservation.reservation_id)
        self.assertIsInstance(outcome, InvalidState)
        self.assertIsNone(self.manager.get_reservation(reservation.reservation_id).confirmation_number)

    def test_cancel_confirmed(self):
        reservation = self.prepare()
        self.manager.confirm_restaurant_reservation(reservation.reservation_id)
        self.assertIsInstance(self.manager.cancel_reservation(reservation.reservation_id), InvalidState)

    def test_expired_reservation(self):
        reservation = self.prepare()
        self.clock.advance(7200)
        self.assertIsNone(self.manager.get_reservation(reservation.reservation_id))
        self.assertIsInstance(self.manager.confirm_restaurant_reservation(reservation.reservation_id), NotFound)

    def test_list_reservations(self):
        first = self.prepare(503)
        second = self.prepare(601)
        self.assertEqual(
            [r.reservation_id for r in self.manager.list_reservations()],
            [first.reservation_id, second.reservation_id],
        )

    def test_confirmed_reservation_stays_listed(self):
        reservation = self.prepare(503)
        self.clock.advance(7000)
        self.manager.confirm_restaurant_reservation(reservation.reservation_id)
        self.clock.advance(300)
        self.assertEqual(
            [r.reservation_id for r in self.manager.list_reservations()],
            [reservation.reservation_id],
        )

    def test_bookings_and_reservations_share_a_store(self):
        from tourism_mcp.services.bookings import BookingManager

        BookingManager(self.store, self.catalog).prepare_booking(
            101, 1, "2026-06-01", "Lukas Gruber", "lukas@gruber.at"
        )
        self.prepare()
        self.assertEqual(len(self.manager.list_reservations()), 1)


if __name__ == "__main__":
    unittest.main()
