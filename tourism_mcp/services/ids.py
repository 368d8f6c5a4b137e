"""Display identifiers for bookings, reservations, tickets and mock payments."""

import hashlib
import uuid

BOOKING_PREFIX = "BKG-"
RESERVATION_PREFIX = "RSV-"
TICKET_PREFIX = "TKT-"
CONFIRMATION_PREFIX = "CNF-"
TRANSACTION_PREFIX = "TXN-"
GUEST_PREFIX = "GUEST-"


def _digest(seed: str, length: int) -> str:
    return hashlib.md5(seed.encode("utf-8")).hexdigest()[:length].upper()


def _random_seed() -> str:
    return uuid.uuid4().hex


def booking_id() -> str:
    return BOOKING_PREFIX + _digest(_random_seed(), 8)


def reservation_id() -> str:
    return RESERVATION_PREFIX + _digest(_random_seed(), 8)


def ticket_number(booking_id: str, index: int) -> str:
    """Ticket ``index`` (1-based) of a booking. Same inputs, same ticket."""
    return TICKET_PREFIX + _digest(f"{booking_id}{index}", 10)


def ticket_numbers(booking_id: str, count: int):
    return [ticket_number(booking_id, i) for i in range(1, count + 1)]


def confirmation_number(reservation_id: str) -> str:
    return CONFIRMATION_PREFIX + _digest(reservation_id, 10)


def transaction_id(booking_id: str) -> str:
    return TRANSACTION_PREFIX + _digest(booking_id + _random_seed(), 12)


def guest_user_id() -> str:
    # Anonymous recommendation profiles keep the lowercase digest
    return GUEST_PREFIX + hashlib.md5(_random_seed().encode("utf-8")).hexdigest()[:8]
