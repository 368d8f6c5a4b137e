"""
Discovery tools: top sights, attraction details, nearby search, dining and
personalized recommendations. All of them read the catalog; only
``recommend_attractions`` writes (the traveler profile).
"""

import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError

from ..services import ids
from ..services.catalog import AttractionCatalog
from ..services.models import Attraction, UserProfile
from ..services.recommendations import RecommendationService
from . import responses
from .validation import RecommendArgs

logger = logging.getLogger(__name__)


def attraction_summary(attraction: Attraction) -> Dict[str, Any]:
    summary = {
        "id": attraction.id,
        "name": attraction.name,
        "category": attraction.category,
        "description": attraction.description,
        "bookable": attraction.bookable,
        "tags": list(attraction.tags),
    }
    if attraction.bookable:
        summary.update({
            "price": attraction.price,
            "currency": attraction.currency,
            "duration_minutes": attraction.duration_minutes,
            "opening_hours": attraction.opening_hours,
            "booking_details": attraction.booking_details,
        })
    return summary


def match_label(score: int) -> str:
    if score >= 90:
        return "Perfect Match"
    if score >= 75:
        return "Excellent Match"
    if score >= 60:
        return "Good Match"
    return "Recommended"


class DiscoveryTools:
    def __init__(self, catalog: AttractionCatalog, recommendations: RecommendationService):
        self.catalog = catalog
        self.recommendations = recommendations

    def get_top_attractions(
        self,
        destination_name: Optional[str] = None,
        destination_id: Optional[int] = None,
        limit: int = 4,
    ) -> Dict[str, Any]:
        """
        Get the must-see attractions of a destination, bookable ones first.

        Args:
            destination_name: Destination name, e.g. "Vienna" or "Salzburg".
            destination_id: Destination ID, used instead of the name when given.
            limit: Number of attractions to return (1-10).
        """
        if destination_id is None and not destination_name:
            return responses.error("Please provide either a destination_name or destination_id.")
        if not 1 <= limit <= 10:
            return responses.error("limit must be between 1 and 10")

        destination = self.catalog.resolve_destination(destination_id, destination_name)
        if destination is None:
            return responses.error(
                f"Destination '{destination_name or destination_id}' not found.", error="not_found"
            )

        attractions = self.catalog.top_attractions(destination.id, limit)
        if not attractions:
            return responses.info(f"No attractions found for {destination.name}.", attractions=[])
        return responses.success(
            f"Top {len(attractions)} attractions in {destination.name}",
            destination=destination.name,
            attractions=[attraction_summary(a) for a in attractions],
        )

    def get_attraction_details(self, attraction_id: int) -> Dict[str, Any]:
        """
        Get full details of one attraction, including price and booking information.

        Args:
            attraction_id: The attraction ID.
        """
        attraction = self.catalog.get_attraction(attraction_id)
        if attraction is None:
            return responses.error(f"Attraction with ID {attraction_id} not found.", error="not_found")

        destination = self.catalog.get_destination(attraction.destination_id)
        details = attraction.model_dump(exclude_none=True)
        details["destination"] = destination.name if destination else None
        return responses.success(f"Details for {attraction.name}", attraction=details)

    def find_nearby_attractions(
        self,
        destination_name: Optional[str] = None,
        latitude: Optional[float] = None,
        longitude: Optional[float] = None,
        radius_km: float = 10,
    ) -> Dict[str, Any]:
        """
        Find attractions around a destination or a coordinate, nearest first.

        Args:
            destination_name: Destination to use as the reference point.
            latitude: Latitude of the reference point.
            longitude: Longitude of the reference point.
            radius_km: Search radius in kilometres.
        """
        if destination_name:
            destination = self.catalog.get_destination_by_name(destination_name)
            if destination is None:
                return responses.error(f"Destination '{destination_name}' not found.", error="not_found")
            latitude, longitude = destination.latitude, destination.longitude
        if latitude is None or longitude is None:
            return responses.error("Provide a destination_name or both latitude and longitude.")

        nearby = self.catalog.find_nearby(latitude, longitude, radius_km)
        if not nearby:
            return responses.info("No attractions found in the specified area.", attractions=[])
        return responses.success(
            f"Found {len(nearby)} nearby attractions",
            attractions=[
                {**attraction_summary(item["attraction"]), "distance_km": item["distance_km"]}
                for item in nearby
            ],
        )

    def get_restaurants_and_cafes(
        self,
        destination_id: Optional[int] = None,
        destination_name: Optional[str] = None,
        limit: int = 6,
    ) -> Dict[str, Any]:
        """
        List restaurants and cafes of a destination, cheapest first.

        Args:
            destination_id: Destination ID.
            destination_name: Destination name, used when no ID is given.
            limit: Number of places to return (1-20).
        """
        if destination_id is None and not destination_name:
            return responses.error("Please provide either a destination_name or destination_id.")
        if not 1 <= limit <= 20:
            return responses.error("limit must be between 1 and 20")

        destination = self.catalog.resolve_destination(destination_id, destination_name)
        if destination is None:
            return responses.error(
                f"Destination '{destination_name or destination_id}' not found.", error="not_found"
            )

        places = self.catalog.restaurants_and_cafes(destination.id, limit)
        if not places:
            return responses.info(f"No restaurants or cafes found for {destination.name}.", places=[])
        return responses.success(
            f"{len(places)} restaurants and cafes in {destination.name}",
            destination=destination.name,
            places=[
                {
                    **attraction_summary(p),
                    "latitude": p.latitude,
                    "longitude": p.longitude,
                }
                for p in places
            ],
        )

    def recommend_attractions(
        self,
        destination_name: Optional[str] = None,
        destination_id: Optional[int] = None,
        user_id: Optional[str] = None,
        preferences: Optional[List[str]] = None,
        travel_type: str = "general",
        age_group: str = "adult",
        budget: str = "moderate",
        limit: int = 6,
    ) -> Dict[str, Any]:
        """
        Recommend attractions for a traveler's interests and profile, best match first.

        Args:
            destination_name: Destination name, e.g. "Vienna".
            destination_id: Destination ID, used instead of the name when given.
            user_id: Profile ID to remember preferences under; a guest ID is generated when omitted.
            preferences: Interests such as "history", "art", "nature", "food", "family-friendly".
            travel_type: One of general, solo, family, romantic, business, adventure, cultural, budget, luxury.
            age_group: One of adult, child, teen, family, senior.
            budget: One of budget, moderate, luxury.
            limit: Number of recommendations (1-20).
        """
        try:
            args = RecommendArgs(
                destination_name=destination_name,
                destination_id=destination_id,
                user_id=user_id,
                preferences=preferences or [],
                travel_type=travel_type,
                age_group=age_group,
                budget=budget,
                limit=limit,
            )
        except ValidationError as e:
            return responses.invalid_input(e)

        destination = self.catalog.resolve_destination(args.destination_id, args.destination_name)
        if destination is None:
            return responses.error(
                "Destination not found. Please provide a valid destination name or ID.", error="not_found"
            )

        profile = UserProfile(
            user_id=args.user_id or ids.guest_user_id(),
            preferences=args.preferences,
            travel_type=args.travel_type,
            age_group=args.age_group,
            budget=args.budget,
        )
        ranked = self.recommendations.recommend(destination.id, profile, args.limit)
        if not ranked:
            return responses.info(f"No attractions found for {destination.name}.", recommendations=[])

        return responses.success(
            f"{len(ranked)} recommendations in {destination.name}",
            destination=destination.name,
            user_id=profile.user_id,
            recommendations=[
                {
                    **attraction_summary(item["attraction"]),
                    "match_score": item["match_score"],
                    "match_label": match_label(item["match_score"]),
                    "matched_tags": item["matched_tags"],
                }
                for item in ranked
            ],
        )
