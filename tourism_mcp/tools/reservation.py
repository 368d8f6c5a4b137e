import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ..services.models import Reservation
from ..services.reservations import ReservationManager
from . import responses
from .validation import PrepareReservationArgs

logger = logging.getLogger(__name__)


class ReservationTools:
    """Two-step table reservation at restaurants and cafes. No payment involved."""

    def __init__(self, reservations: ReservationManager):
        self.reservations = reservations

    def prepare_restaurant_reservation(
        self,
        attraction_id: int,
        number_of_people: int,
        reservation_date: str,
        reservation_time: str,
        guest_name: str,
        guest_email: str,
        special_requests: Optional[str] = None,
    ) -> Dict[str, Any]:
        """
        Hold a table at a restaurant or cafe. No credit card needed.

        Args:
            attraction_id: ID of the restaurant or cafe.
            number_of_people: Party size (1-20).
            reservation_date: Date, YYYY-MM-DD.
            reservation_time: Time, HH:MM (24h).
            guest_name: Full name for the reservation.
            guest_email: E-mail address of the guest.
            special_requests: Dietary needs, seating wishes and the like.
        """
        try:
            args = PrepareReservationArgs(
                attraction_id=attraction_id,
                number_of_people=number_of_people,
                reservation_date=reservation_date,
                reservation_time=reservation_time,
                guest_name=guest_name,
                guest_email=guest_email,
                special_requests=special_requests,
            )
        except ValidationError as e:
            return responses.invalid_input(e)

        outcome = self.reservations.prepare_restaurant_reservation(
            attraction_id=args.attraction_id,
            number_of_people=args.number_of_people,
            reservation_date=args.reservation_date.isoformat(),
            reservation_time=args.reservation_time,
            guest_name=args.guest_name,
            guest_email=args.guest_email,
            special_requests=args.special_requests,
        )
        if not isinstance(outcome, Reservation):
            return responses.from_outcome(outcome)

        return responses.success(
            f"Reservation {outcome.reservation_id} at {outcome.attraction_name} prepared and awaiting confirmation.",
            reservation=outcome.model_dump(mode="json"),
            next_step=f"Confirm with confirm_restaurant_reservation(reservation_id='{outcome.reservation_id}')",
        )

    def confirm_restaurant_reservation(self, reservation_id: str) -> Dict[str, Any]:
        """
        Confirm a prepared table reservation and issue its confirmation number.

        Args:
            reservation_id: The ID returned by prepare_restaurant_reservation.
        """
        outcome = self.reservations.confirm_restaurant_reservation(reservation_id)
        if not isinstance(outcome, Reservation):
            return responses.from_outcome(outcome)
        return responses.success(
            f"Reservation {reservation_id} confirmed. Confirmation number {outcome.confirmation_number}.",
            reservation=outcome.model_dump(mode="json"),
        )

    def cancel_restaurant_reservation(self, reservation_id: str) -> Dict[str, Any]:
        """
        Cancel a table reservation that has not been confirmed yet.

        Args:
            reservation_id: The reservation to cancel.
        """
        outcome = self.reservations.cancel_reservation(reservation_id)
        if not isinstance(outcome, Reservation):
            return responses.from_outcome(outcome)
        return responses.success(
            f"Reservation {reservation_id} cancelled.", reservation=outcome.model_dump(mode="json")
        )
