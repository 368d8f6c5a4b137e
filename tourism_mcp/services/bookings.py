"""Attraction ticket bookings: prepare a priced hold, then confirm it into tickets."""

import logging
from typing import List, Optional, Union

from ..errors import AlreadyConfirmed, InvalidState, NotBookable, NotFound
from . import ids
from .lifecycle import LifecycleManager
from .models import Booking, LifecycleStatus, PaymentSummary

logger = logging.getLogger(__name__)

BOOKING_KEY_PREFIX = "booking:"
BOOKING_INDEX_KEY = "bookings:index"


class BookingManager(LifecycleManager[Booking]):
    key_prefix = BOOKING_KEY_PREFIX
    index_key = BOOKING_INDEX_KEY
    record_model = Booking
    kind = "booking"

    def prepare_booking(
        self,
        attraction_id: int,
        number_of_tickets: int,
        visit_date: str,
        visitor_name: str,
        visitor_email: str,
        payment_summary: Optional[PaymentSummary] = None,
    ) -> Union[Booking, NotFound, NotBookable]:
        """
        Store a pending booking with the attraction's current price frozen in.

        The total is ``price * number_of_tickets``; later catalog changes do not
        touch an existing booking.
        """
        if number_of_tickets < 1:
            raise ValueError("number_of_tickets must be at least 1")

        attraction = self.catalog.get_attraction(attraction_id)
        if attraction is None:
            return NotFound(f"Attraction {attraction_id} not found")
        if not attraction.bookable or attraction.price is None:
            logger.info(f"Attraction {attraction_id} is not bookable")
            return NotBookable(f"{attraction.name} is not available for online booking")

        booking = Booking(
            booking_id=ids.booking_id(),
            attraction_id=attraction.id,
            attraction_name=attraction.name,
            category=attraction.category,
            number_of_tickets=number_of_tickets,
            price_per_ticket=attraction.price,
            total_amount=attraction.price * number_of_tickets,
            currency=attraction.currency or "EUR",
            visit_date=visit_date,
            visitor_name=visitor_name,
            visitor_email=visitor_email,
            payment_details=payment_summary,
            status=LifecycleStatus.PENDING,
            created_at=self.clock(),
            booking_details=attraction.booking_details,
            opening_hours=attraction.opening_hours,
            duration_minutes=attraction.duration_minutes,
        )
        self._create(booking.booking_id, booking)
        logger.info(
            f"Booking {booking.booking_id} prepared: {number_of_tickets} x {attraction.name} "
            f"= {booking.total_amount} {booking.currency}"
        )
        return booking

    def confirm_booking(
        self, booking_id: str, transaction_id: Optional[str] = None
    ) -> Union[Booking, NotFound, AlreadyConfirmed, InvalidState]:
        """Mint tickets and mark the booking confirmed. Re-confirming returns ``AlreadyConfirmed``."""

        def _mint(booking: Booking) -> Booking:
            return booking.model_copy(update={
                "status": LifecycleStatus.CONFIRMED,
                "confirmed_at": self.clock(),
                "ticket_numbers": ids.ticket_numbers(booking.booking_id, booking.number_of_tickets),
                "payment_transaction_id": transaction_id,
            })

        return self._confirm(booking_id, _mint)

    def cancel_booking(self, booking_id: str) -> Union[Booking, NotFound, InvalidState]:
        return self._cancel(booking_id)

    def get_booking(self, booking_id: str) -> Optional[Booking]:
        return self._get(booking_id)

    def list_bookings(self) -> List[Booking]:
        return self._list()
