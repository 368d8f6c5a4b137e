"""
ATM locator backed by the Mastercard ATM Locations API.

The search point is resolved in priority order: explicit coordinates, postal
code, attraction, then destination / city name.
"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..services.catalog import AttractionCatalog
from ..services.mastercard import MastercardClient
from . import responses
from .validation import LocateATMArgs

logger = logging.getLogger(__name__)

DEFAULT_POSTAL_COUNTRY = "USA"


def resolve_search_params(args: LocateATMArgs, catalog: AttractionCatalog) -> Optional[Dict[str, Any]]:
    params: Dict[str, Any] = {
        "Distance": args.distance,
        "DistanceUnit": args.distance_unit,
        "PageOffset": 0,
        "PageLength": args.limit,
    }

    if args.latitude is not None and args.longitude is not None:
        params.update(Latitude=args.latitude, Longitude=args.longitude, search_type="coordinates")
        return params

    if args.postal_code:
        params.update(
            PostalCode=args.postal_code,
            Country=args.country or DEFAULT_POSTAL_COUNTRY,
            search_type="postal",
        )
        return params

    if args.attraction_id is not None:
        attraction = catalog.get_attraction(args.attraction_id)
        if attraction is not None:
            params.update(
                Latitude=attraction.latitude,
                Longitude=attraction.longitude,
                search_type="attraction",
                search_name=attraction.name,
            )
            return params

    name = args.destination_name or args.city or args.location
    if name:
        destination = catalog.get_destination_by_name(name)
        if destination is not None:
            params.update(
                Latitude=destination.latitude,
                Longitude=destination.longitude,
                search_type="destination",
                search_name=destination.name,
            )
            return params
    # No geocoding for places outside the catalog
    return None


def describe_search(params: Dict[str, Any]) -> str:
    if params.get("search_name"):
        return f"near {params['search_name']}"
    if params.get("PostalCode"):
        return f"near postal code {params['PostalCode']}, {params['Country']}"
    if params.get("Latitude") is not None:
        return f"near coordinates ({params['Latitude']}, {params['Longitude']})"
    return "in the area"


def format_atm(atm: Dict[str, Any]) -> Dict[str, Any]:
    features = []
    if atm.get("handicapAccessible", "NO") == "YES":
        features.append("wheelchair accessible")
    if atm.get("camera", "NO") == "YES":
        features.append("security camera")
    if atm.get("sharedDeposit", "NO") == "YES":
        features.append("accepts deposits")
    if str(atm.get("supportEmv", "")).lower() not in ("", "0", "false", "no", "none"):
        features.append("EMV chip support")

    raw_availability = atm.get("availability") or "unknown"
    distance = atm.get("distance")
    return {
        "name": atm.get("locationName") or atm.get("owner") or "ATM",
        "address": {
            "street": atm.get("addressLine1", ""),
            "city": atm.get("city", ""),
            "state": atm.get("countrySubdivisionName", ""),
            "postal_code": atm.get("postalCode", ""),
            "country": atm.get("countryName", ""),
        },
        "coordinates": {
            "latitude": float(atm.get("latitude") or 0),
            "longitude": float(atm.get("longitude") or 0),
        },
        "distance": (
            f"{round(float(distance), 2)} {(atm.get('distanceUnit') or 'mile').lower()}"
            if distance is not None else "N/A"
        ),
        "location_type": (atm.get("locationType") or ("atm" if "locationName" in atm else "unknown")).lower(),
        "availability": raw_availability.lower().replace("_", " "),
        "features": features,
        "access_fees": (atm.get("accessFees") or "unknown").lower().replace("_", " and "),
        "owner": atm.get("owner") or "Unknown",
        "is_24_7": raw_availability == "ALWAYS_AVAILABLE",
    }


class ATMTools:
    def __init__(self, catalog: AttractionCatalog, client: Optional[MastercardClient] = None):
        self.catalog = catalog
        self.client = client

    def locate_atms(
        self,
        location: Optional[str] = None,
        city: Optional[str] = None,
        destination_name: Optional[str] = None,
        attraction_id: Optional[int] = None,
        postal_code: Optional[str] = None,
        country: Optional[str] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        distance: float = 5,
        distance_unit: str = "MILE",
        limit: int = 10,
    ) -> Dict[str, Any]:
        """
        Find ATMs near a place using the Mastercard ATM Locator, with address, distance,
        opening availability, access fees and features.

        Args:
            location: General place name.
            city: City name, e.g. "Vienna".
            destination_name: Destination from the tourism catalog.
            attraction_id: Attraction to search around.
            postal_code: Postal or ZIP code.
            country: Three-letter ISO country code for postal_code searches (default USA).
            latitude: Latitude, together with longitude.
            longitude: Longitude, together with latitude.
            distance: Search radius (1-50).
            distance_unit: MILE or KM.
            limit: Maximum number of ATMs (1-50).
        """
        if self.client is None:
            return responses.error(
                "The ATM locator is not configured. Set the Mastercard credentials to enable it.",
                error="not_configured",
            )

        try:
            args = LocateATMArgs(
                location=location,
                city=city,
                destination_name=destination_name,
                attraction_id=attraction_id,
                postal_code=postal_code,
                country=country,
                latitude=latitude,
                longitude=longitude,
                distance=distance,
                distance_unit=distance_unit,
                limit=limit,
            )
        except ValidationError as e:
            return responses.invalid_input(e)

        params = resolve_search_params(args, self.catalog)
        if params is None:
            return responses.error(
                "Unable to determine location. Please provide a location or city name, "
                "an attraction_id, a postal_code, or latitude/longitude coordinates.",
                error="unknown_location",
            )
        logger.info(f"ATM search ({params['search_type']}) {describe_search(params)}")

        result = self.client.search_atms(params)
        if not result["success"]:
            return responses.error(
                result.get("message") or "Failed to retrieve ATM locations",
                error=result["error"],
            )

        return self.format_results(result["data"], params)

    def format_results(self, data: Any, params: Dict[str, Any]) -> Dict[str, Any]:
        search_info = describe_search(params)
        if not isinstance(data, dict):
            logger.error(f"Unexpected ATM search payload: {type(data).__name__}")
            return responses.error("The ATM service returned an unexpected response.", error="unexpected_response")
        atms: List[Dict[str, Any]] = data.get("atms") or []
        if not atms:
            return responses.success(
                f"No ATMs found {search_info}. Try increasing the search radius.",
                total_count=0,
                atms=[],
            )

        count = data.get("count", len(atms))
        total = data.get("total", count)
        return responses.success(
            f"Found {count} ATM(s) {search_info}",
            search_info=search_info,
            total_count=int(total),
            returned_count=count,
            atms=[format_atm(atm) for atm in atms],
        )
