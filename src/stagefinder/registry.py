from __future__ import annotations

from typing import Dict, Iterator, List, Mapping, Optional, Tuple

from .models import GeoPoint, canonical_city

# City centres (WGS84). Cities missing here simply cannot take part in
# proximity search.
DEFAULT_CITY_COORDINATES: Dict[str, Tuple[float, float]] = {
    # Marseille area
    "MARSEILLE": (43.2965, 5.3698),
    "AIX-EN-PROVENCE": (43.5297, 5.4474),
    "AUBAGNE": (43.2928, 5.5706),
    "VITROLLES": (43.4553, 5.2478),
    "LA CIOTAT": (43.1747, 5.6064),
    # Lyon area
    "LYON": (45.7640, 4.8357),
    "VILLEURBANNE": (45.7667, 4.8797),
    # Other major cities
    "PARIS": (48.8566, 2.3522),
    "TOULOUSE": (43.6047, 1.4442),
    "NICE": (43.7102, 7.2620),
    "NANTES": (47.2184, -1.5536),
    "BORDEAUX": (44.8378, -0.5792),
    "MONTPELLIER": (43.6108, 3.8767),
    "STRASBOURG": (48.5734, 7.7521),
    "LILLE": (50.6292, 3.0573),
}


class CityRegistry:
    """
    Read-only lookup table: canonical city name -> GeoPoint.

    Built from any mapping of name -> GeoPoint or (lat, lon). Names are
    canonicalised on the way in and on every lookup, so callers may pass
    any casing.
    """

    def __init__(self, coordinates: Mapping[str, object]):
        points: Dict[str, GeoPoint] = {}
        for name, value in coordinates.items():
            key = canonical_city(name)
            if not key:
                continue
            if key in points:
                raise ValueError(f"duplicate city in registry: '{key}'")
            if isinstance(value, GeoPoint):
                points[key] = value
            else:
                lat, lon = value
                points[key] = GeoPoint(float(lat), float(lon))
        self._points = points

    @classmethod
    def default(cls) -> CityRegistry:
        return cls(DEFAULT_CITY_COORDINATES)

    def lookup(self, city: str) -> Optional[GeoPoint]:
        """Return the point for *city*, or None if it is not in the table."""
        return self._points.get(canonical_city(city))

    def cities(self) -> List[str]:
        return sorted(self._points)

    def items(self) -> Iterator[Tuple[str, GeoPoint]]:
        return iter(sorted(self._points.items()))

    def __contains__(self, city: object) -> bool:
        return isinstance(city, str) and canonical_city(city) in self._points

    def __len__(self) -> int:
        return len(self._points)

    def __repr__(self) -> str:
        return f"CityRegistry({len(self)} cities)"
