"""
Tool handlers exposed to the model over MCP.

Each handler validates its input, calls one service and returns a JSON-able
dict with ``status`` (``success``, ``info`` or ``error``) and ``message``.

    tools = TourismTools(discovery, booking, reservation, atm)
    tools.register(server)
"""

from .atm import ATMTools
from .booking import BookingTools
from .discovery import DiscoveryTools
from .reservation import ReservationTools


class TourismTools:
    """Groups the tool handlers and registers their bound methods on an ``MCPServer``."""

    def __init__(
        self,
        discovery: DiscoveryTools,
        booking: BookingTools,
        reservation: ReservationTools,
        atm: ATMTools,
    ):
        self.discovery = discovery
        self.booking = booking
        self.reservation = reservation
        self.atm = atm

    def handlers(self):
        return [
            self.discovery.get_top_attractions,
            self.discovery.get_attraction_details,
            self.discovery.find_nearby_attractions,
            self.discovery.get_restaurants_and_cafes,
            self.discovery.recommend_attractions,
            self.booking.prepare_booking,
            self.booking.confirm_booking,
            self.booking.cancel_booking,
            self.reservation.prepare_restaurant_reservation,
            self.reservation.confirm_restaurant_reservation,
            self.reservation.cancel_restaurant_reservation,
            self.atm.locate_atms,
        ]

    def register(self, server) -> None:
        for handler in self.handlers():
            server.register_tool(handler)


__all__ = [
    "ATMTools",
    "BookingTools",
    "DiscoveryTools",
    "ReservationTools",
    "TourismTools",
]
