import hashlib
import re
import unittest

from tourism_mcp.services import ids


class TestIds(unittest.TestCase):
    def test_booking_id_format(self):
        self.assertRegex(ids.booking_id(), r"^BKG-[0-9A-F]{8}$")

    def test_reservation_id_format(self):
        self.assertRegex(ids.reservation_id(), r"^RSV-[0-9A-F]{8}$")

    def test_ids_are_fresh(self):
        self.assertEqual(len({ids.booking_id() for _ in range(50)}), 50)

    def test_ticket_numbers_are_pure(self):
        first = ids.ticket_numbers("BKG-ABCD1234", 3)
        second = ids.ticket_numbers("BKG-ABCD1234", 3)
        self.assertEqual(first, second)
        self.assertEqual(len(set(first)), 3)
        for ticket in first:
            self.assertRegex(ticket, r"^TKT-[0-9A-F]{10}$")

    def test_ticket_number_recomputed_out_of_band(self):
        expected = "TKT-" + hashlib.md5(b"BKG-ABCD12342").hexdigest()[:10].upper()
        self.assertEqual(ids.ticket_number("BKG-ABCD1234", 2), expected)
        self.assertEqual(ids.ticket_numbers("BKG-ABCD1234", 2)[1], expected)

    def test_confirmation_number_is_pure(self):
        expected = "CNF-" + hashlib.md5(b"RSV-00000001").hexdigest()[:10].upper()
        self.assertEqual(ids.confirmation_number("RSV-00000001"), expected)

    def test_transaction_id_format(self):
        self.assertRegex(ids.transaction_id("BKG-ABCD1234"), r"^TXN-[0-9A-F]{12}$")

    def test_guest_user_id(self):
        self.assertTrue(re.match(r"^GUEST-[0-9a-f]{8}$", ids.guest_user_id()))


if __name__ == "__main__":
    unittest.main()
