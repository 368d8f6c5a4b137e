import logging
from typing import Any, Dict

from pydantic import ValidationError

from ..services import ids
from ..services.bookings import BookingManager
from ..services.models import Booking, LifecycleStatus
from . import responses
from .validation import PrepareBookingArgs

logger = logging.getLogger(__name__)


class BookingTools:
    """Two-step ticket booking: prepare (price and card check) then confirm (mock payment, tickets)."""

    def __init__(self, bookings: BookingManager):
        self.bookings = bookings

    def prepare_booking(
        self,
        attraction_id: int,
        number_of_tickets: int,
        visit_date: str,
        visitor_name: str,
        visitor_email: str,
        card_number: str,
        card_holder_name: str,
        card_expiry: str,
        card_cvv: str,
    ) -> Dict[str, Any]:
        """
        Prepare a pending ticket booking for a bookable attraction. Nothing is charged yet.

        Ask the user for their real name, e-mail and card details first; never use placeholders.

        Args:
            attraction_id: The attraction to book.
            number_of_tickets: Number of tickets (1-10).
            visit_date: Visit date, YYYY-MM-DD.
            visitor_name: Full name of the visitor.
            visitor_email: E-mail address of the visitor.
            card_number: Credit card number.
            card_holder_name: Name as printed on the card.
            card_expiry: Expiry date, MM/YY or MM/YYYY.
            card_cvv: Card security code (3 digits, 4 for American Express).
        """
        try:
            args = PrepareBookingArgs(
                attraction_id=attraction_id,
                number_of_tickets=number_of_tickets,
                visit_date=visit_date,
                visitor_name=visitor_name,
                visitor_email=visitor_email,
                card_number=card_number,
                card_holder_name=card_holder_name,
                card_expiry=card_expiry,
                card_cvv=card_cvv,
            )
        except ValidationError as e:
            logger.info(f"Rejected booking input for attraction {attraction_id}")
            return responses.invalid_input(e)

        outcome = self.bookings.prepare_booking(
            attraction_id=args.attraction_id,
            number_of_tickets=args.number_of_tickets,
            visit_date=args.visit_date.isoformat(),
            visitor_name=args.visitor_name,
            visitor_email=args.visitor_email,
            payment_summary=args.payment_summary(),
        )
        if not isinstance(outcome, Booking):
            return responses.from_outcome(outcome)

        return responses.success(
            f"Booking {outcome.booking_id} prepared and awaiting confirmation. "
            f"Total {outcome.total_amount} {outcome.currency}.",
            booking=outcome.model_dump(mode="json"),
            next_step=f"Confirm with confirm_booking(booking_id='{outcome.booking_id}')",
        )

    def confirm_booking(self, booking_id: str, payment_method: str = "credit_card") -> Dict[str, Any]:
        """
        Confirm a prepared booking: run the mock payment and issue ticket numbers.

        Args:
            booking_id: The ID returned by prepare_booking.
            payment_method: Payment method label, informational only.
        """
        booking = self.bookings.get_booking(booking_id)
        # Status outcomes come from the manager; only the payment precondition is checked here
        if booking is not None and booking.status == LifecycleStatus.PENDING and booking.payment_details is None:
            return responses.error(
                "This booking has no payment details. Please prepare a new booking with valid card details.",
                error="payment_missing",
            )

        transaction_id = ids.transaction_id(booking_id)
        outcome = self.bookings.confirm_booking(booking_id, transaction_id=transaction_id)
        if not isinstance(outcome, Booking):
            return responses.from_outcome(outcome)

        logger.info(
            f"Mock payment {transaction_id} ({payment_method}) for booking {booking_id}: "
            f"{outcome.total_amount} {outcome.currency}, card ending {outcome.payment_details.card_last_four}"
        )
        return responses.success(
            f"Booking {booking_id} confirmed with {len(outcome.ticket_numbers)} ticket(s).",
            booking=outcome.model_dump(mode="json"),
            transaction_id=transaction_id,
        )

    def cancel_booking(self, booking_id: str) -> Dict[str, Any]:
        """
        Cancel a booking that has not been confirmed yet.

        Args:
            booking_id: The booking to cancel.
        """
        outcome = self.bookings.cancel_booking(booking_id)
        if not isinstance(outcome, Booking):
            return responses.from_outcome(outcome)
        return responses.success(f"Booking {booking_id} cancelled.", booking=outcome.model_dump(mode="json"))
