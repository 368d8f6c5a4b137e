"""Table reservations at restaurants and cafes. No payment, no price."""

import logging
from typing import List, Optional, Union

from ..errors import AlreadyConfirmed, CategoryMismatch, InvalidState, NotFound
from . import ids
from .lifecycle import LifecycleManager
from .models import LifecycleStatus, Location, Reservation

logger = logging.getLogger(__name__)

RESERVATION_KEY_PREFIX = "reservation:"
RESERVATION_INDEX_KEY = "reservations:index"


class ReservationManager(LifecycleManager[Reservation]):
    key_prefix = RESERVATION_KEY_PREFIX
    index_key = RESERVATION_INDEX_KEY
    record_model = Reservation
    kind = "reservation"

    def prepare_restaurant_reservation(
        self,
        attraction_id: int,
        number_of_people: int,
        reservation_date: str,
        reservation_time: str,
        guest_name: str,
        guest_email: str,
        special_requests: Optional[str] = None,
    ) -> Union[Reservation, NotFound, CategoryMismatch]:
        if number_of_people < 1:
            raise ValueError("number_of_people must be at least 1")

        venue = self.catalog.get_attraction(attraction_id)
        if venue is None:
            return NotFound(f"Restaurant or cafe {attraction_id} not found")
        # Any restaurant or cafe takes reservations, bookable or not
        if not venue.is_dining:
            logger.info(f"Attraction {attraction_id} ({venue.category}) does not take reservations")
            return CategoryMismatch(
                f"{venue.name} is a {venue.category}; only restaurants and cafes take reservations"
            )

        reservation = Reservation(
            reservation_id=ids.reservation_id(),
            attraction_id=venue.id,
            attraction_name=venue.name,
            category=venue.category,
            number_of_people=number_of_people,
            reservation_date=reservation_date,
            reservation_time=reservation_time,
            guest_name=guest_name,
            guest_email=guest_email,
            special_requests=special_requests,
            status=LifecycleStatus.PENDING,
            created_at=self.clock(),
            opening_hours=venue.opening_hours,
            location=Location(latitude=venue.latitude, longitude=venue.longitude),
        )
        self._create(reservation.reservation_id, reservation)
        logger.info(
            f"Reservation {reservation.reservation_id} prepared: {venue.name}, "
            f"{number_of_people} people on {reservation_date} {reservation_time}"
        )
        return reservation

    def confirm_restaurant_reservation(
        self, reservation_id: str
    ) -> Union[Reservation, NotFound, AlreadyConfirmed, InvalidState]:
        def _confirm(reservation: Reservation) -> Reservation:
            return reservation.model_copy(update={
                "status": LifecycleStatus.CONFIRMED,
                "confirmed_at": self.clock(),
                "confirmation_number": ids.confirmation_number(reservation.reservation_id),
            })

        return self._confirm(reservation_id, _confirm)

    def cancel_reservation(self, reservation_id: str) -> Union[Reservation, NotFound, InvalidState]:
        return self._cancel(reservation_id)

    def get_reservation(self, reservation_id: str) -> Optional[Reservation]:
        return self._get(reservation_id)

    def list_reservations(self) -> List[Reservation]:
        return self._list()
