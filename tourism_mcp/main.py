"""
Stdio entry point: newline-delimited JSON-RPC on stdin/stdout.

    python -m tourism_mcp.main

Logs go to stderr; stdout carries only protocol messages.
"""

import json
import logging
import sys
from typing import Optional, TextIO

from pydantic import ValidationError

from tourism_mcp import __version__
from tourism_mcp.config import Config, setup_logging
from tourism_mcp.mcp.mcp_server import MCPServer
from tourism_mcp.mcp.protocol import (
    INVALID_REQUEST,
    PARSE_ERROR,
    JsonRpcRequest,
    JsonRpcResponse,
    error_response,
)
from tourism_mcp.services import (
    AttractionCatalog,
    BookingManager,
    MastercardClient,
    OAuthSigner,
    RecommendationService,
    ReservationManager,
    TTLStore,
    create_store,
)
from tourism_mcp.tools import ATMTools, BookingTools, DiscoveryTools, ReservationTools, TourismTools

logger = logging.getLogger(__name__)

SERVER_NAME = "Tourism Server"

INSTRUCTIONS = """\
Tourism data, attraction bookings and restaurant reservations for Austrian destinations
(Vienna, Salzburg, Innsbruck, Hallstatt).

Discovery: get_top_attractions, recommend_attractions, find_nearby_attractions,
get_attraction_details, get_restaurants_and_cafes.

Bookings are two steps: prepare_booking (needs the visitor's real card details) shows the
price and returns a booking_id; confirm_booking finalizes it after the user agrees and issues
ticket numbers. Payments are simulated.

Restaurant reservations are two steps without payment: prepare_restaurant_reservation then
confirm_restaurant_reservation.

Pending bookings and reservations expire after two hours.

locate_atms finds nearby ATMs through the Mastercard ATM Locator."""


def build_mastercard_client() -> Optional[MastercardClient]:
    if not Config.validate():
        return None
    signer = OAuthSigner(Config.MASTERCARD_CONSUMER_KEY, Config.mastercard_private_key())
    return MastercardClient(signer, Config.MASTERCARD_API_URL, timeout=Config.MASTERCARD_TIMEOUT)


def build_server(
    store: Optional[TTLStore] = None,
    catalog: Optional[AttractionCatalog] = None,
    mastercard: Optional[MastercardClient] = None,
) -> MCPServer:
    """Wire store, catalog and services into a server with every tool registered."""
    if store is None:
        store = create_store(Config.CACHE_BACKEND, Config.REDIS_URL)
    if catalog is None:
        catalog = AttractionCatalog.from_file(Config.CATALOG_PATH)

    bookings = BookingManager(store, catalog, ttl_seconds=Config.BOOKING_TTL_SECONDS)
    reservations = ReservationManager(store, catalog, ttl_seconds=Config.RESERVATION_TTL_SECONDS)
    recommendations = RecommendationService(store, catalog, ttl_seconds=Config.USER_PROFILE_TTL_SECONDS)

    tools = TourismTools(
        discovery=DiscoveryTools(catalog, recommendations),
        booking=BookingTools(bookings),
        reservation=ReservationTools(reservations),
        atm=ATMTools(catalog, mastercard),
    )

    server = MCPServer(name=SERVER_NAME, version=__version__, instructions=INSTRUCTIONS)
    tools.register(server)
    logger.info(f"{SERVER_NAME} ready with {len(server.list_tools())} tools")
    return server


def handle_line(server: MCPServer, line: str) -> Optional[JsonRpcResponse]:
    """Parse one line of input and dispatch it."""
    try:
        payload = json.loads(line)
    except json.JSONDecodeError as e:
        return error_response(None, PARSE_ERROR, f"Parse error: {e}")

    try:
        request = JsonRpcRequest(**payload) if isinstance(payload, dict) else None
    except ValidationError as e:
        request_id = payload.get("id")
        if not isinstance(request_id, (str, int)):
            request_id = None
        return error_response(request_id, INVALID_REQUEST, f"Invalid request: {e}")
    if request is None:
        return error_response(None, INVALID_REQUEST, "Invalid request: expected a JSON object")

    return server.handle_request(request)


def serve(server: MCPServer, stdin: TextIO = sys.stdin, stdout: TextIO = sys.stdout) -> None:
    for line in stdin:
        line = line.strip()
        if not line:
            continue
        response = handle_line(server, line)
        if response is not None:
            stdout.write(json.dumps(response.to_dict(), default=str) + "\n")
            stdout.flush()


def main():
    setup_logging(Config.LOG_LEVEL, stream=sys.stderr)
    server = build_server(mastercard=build_mastercard_client())
    try:
        serve(server)
    except KeyboardInterrupt:
        pass
    logger.info("Server stopped")


if __name__ == "__main__":
    main()
