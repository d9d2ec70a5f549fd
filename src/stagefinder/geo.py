from __future__ import annotations

import logging
import math
from typing import List

from .models import CityDistance, GeoPoint, canonical_city
from .registry import CityRegistry

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0


def haversine_km(a: GeoPoint, b: GeoPoint) -> float:
    """
    Great-circle distance between two points on Earth in kilometers.
    """
    phi1 = math.radians(a.latitude)
    phi2 = math.radians(b.latitude)
    dphi = math.radians(b.latitude - a.latitude)
    dlambda = math.radians(b.longitude - a.longitude)

    h = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    # clamp: rounding can push h a hair above 1 for antipodal points
    h = min(1.0, max(0.0, h))
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(h))


def nearby_cities(
    registry: CityRegistry,
    reference_city: str,
    radius_km: float,
) -> List[CityDistance]:
    """
    Registry cities within *radius_km* of *reference_city*, closest first.

    The reference city itself is never part of the result. An unknown
    reference city yields an empty list so the caller can fall back to a
    single-city search.
    """
    if radius_km < 0:
        raise ValueError(f"radius_km must be >= 0, got {radius_km}")

    ref = canonical_city(reference_city)
    center = registry.lookup(ref)
    if center is None:
        logger.debug("'%s' not in city registry, no nearby cities", ref)
        return []

    out: List[CityDistance] = []
    for city, point in registry.items():
        if city == ref:
            continue
        dist = haversine_km(center, point)
        if dist <= radius_km:
            out.append(CityDistance(city=city, distance_km=dist))

    out.sort(key=lambda c: (c.distance_km, c.city))
    logger.debug("%d city(ies) within %.0f km of %s", len(out), radius_km, ref)
    return out
