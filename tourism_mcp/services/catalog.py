"""
Read-only attraction catalog.

Destinations and attractions are loaded once from a JSON resource and served
through lookups; nothing here writes.
"""

import json
import logging
import math
from pathlib import Path
from typing import Dict, List, Optional, Union

from .models import Attraction, Destination

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance between two points, in kilometres."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (
        math.sin(d_lat / 2) ** 2
        + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2
    )
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


class AttractionCatalog:
    def __init__(self, destinations: List[Destination], attractions: List[Attraction]):
        self._destinations: Dict[int, Destination] = {d.id: d for d in destinations}
        self._attractions: Dict[int, Attraction] = {a.id: a for a in attractions}

    @classmethod
    def from_dict(cls, data: dict) -> "AttractionCatalog":
        return cls(
            destinations=[Destination(**d) for d in data.get("destinations", [])],
            attractions=[Attraction(**a) for a in data.get("attractions", [])],
        )

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "AttractionCatalog":
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        catalog = cls.from_dict(data)
        logger.info(
            f"Loaded catalog from {path}: {len(catalog._destinations)} destinations, "
            f"{len(catalog._attractions)} attractions"
        )
        return catalog

    # Destinations

    def destinations(self) -> List[Destination]:
        return list(self._destinations.values())

    def get_destination(self, destination_id: int) -> Optional[Destination]:
        return self._destinations.get(destination_id)

    def get_destination_by_name(self, name: str) -> Optional[Destination]:
        wanted = name.strip().lower()
        for destination in self._destinations.values():
            if destination.name.lower() == wanted:
                return destination
        return None

    def search_destinations(
        self,
        query: Optional[str] = None,
        country: Optional[str] = None,
        type: Optional[str] = None,
    ) -> List[Destination]:
        results = []
        for destination in self._destinations.values():
            if query and query.lower() not in destination.name.lower() \
                    and query.lower() not in destination.description.lower():
                continue
            if country and destination.country.lower() != country.lower():
                continue
            if type and destination.type.lower() != type.lower():
                continue
            results.append(destination)
        return results

    def resolve_destination(
        self,
        destination_id: Optional[int] = None,
        destination_name: Optional[str] = None,
    ) -> Optional[Destination]:
        """Look a destination up by id first, then by name."""
        if destination_id is not None:
            return self.get_destination(destination_id)
        if destination_name:
            return self.get_destination_by_name(destination_name)
        return None

    # Attractions

    def get_attraction(self, attraction_id: int) -> Optional[Attraction]:
        return self._attractions.get(attraction_id)

    def list_by_destination(self, destination_id: int, category: Optional[str] = None) -> List[Attraction]:
        return [
            a for a in self._attractions.values()
            if a.destination_id == destination_id and (category is None or a.category == category)
        ]

    def top_attractions(self, destination_id: int, limit: int = 4) -> List[Attraction]:
        """Everything at a destination, bookable entries first, catalog order otherwise."""
        entries = self.list_by_destination(destination_id)
        entries.sort(key=lambda a: not a.bookable)
        return entries[:limit]

    def restaurants_and_cafes(self, destination_id: int, limit: int = 6) -> List[Attraction]:
        dining = [a for a in self.list_by_destination(destination_id) if a.is_dining]
        dining.sort(key=lambda a: a.price if a.price is not None else 0.0)
        return dining[:limit]

    def find_nearby(self, latitude: float, longitude: float, radius_km: float = 10.0) -> List[dict]:
        """Attractions within ``radius_km`` of a point, nearest first."""
        nearby = []
        for attraction in self._attractions.values():
            distance = haversine_km(latitude, longitude, attraction.latitude, attraction.longitude)
            if distance <= radius_km:
                nearby.append({"attraction": attraction, "distance_km": round(distance, 2)})
        nearby.sort(key=lambda item: item["distance_km"])
        return nearby
