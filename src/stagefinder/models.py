from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date
from typing import Optional, Tuple


def canonical_city(name: str) -> str:
    """'  aix-en-provence ' -> 'AIX-EN-PROVENCE'"""
    return (name or "").strip().upper()


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class CityDistance:
    city: str
    distance_km: float

    def to_dict(self) -> dict:
        return {"city": self.city, "distance_km": round(self.distance_km, 1)}


@dataclass(frozen=True)
class SessionLocation:
    city: str
    address: str = ""
    postal_code: str = ""
    point: Optional[GeoPoint] = None
    site_name: str = ""


@dataclass(frozen=True)
class CourseSession:
    id: int
    site_id: int
    date_start: Optional[date]     # None when the provider sent no usable date
    date_end: Optional[date]
    price: float
    capacity_total: int
    capacity_used: int
    visible: bool
    cancelled: bool
    location: SessionLocation

    @property
    def city(self) -> str:
        return self.location.city

    @property
    def places_left(self) -> int:
        return max(self.capacity_total - self.capacity_used, 0)

    def with_city(self, city: str) -> CourseSession:
        """Return a copy whose location carries *city* instead."""
        return replace(self, location=replace(self.location, city=city))

    def to_dict(self) -> dict:
        point = self.location.point
        return {
            "id": self.id,
            "site_id": self.site_id,
            "date_start": self.date_start.isoformat() if self.date_start else None,
            "date_end": self.date_end.isoformat() if self.date_end else None,
            "price": self.price,
            "capacity_total": self.capacity_total,
            "capacity_used": self.capacity_used,
            "places_left": self.places_left,
            "visible": self.visible,
            "cancelled": self.cancelled,
            "location": {
                "city": self.location.city,
                "address": self.location.address,
                "postal_code": self.location.postal_code,
                "site_name": self.location.site_name,
                "latitude": point.latitude if point else None,
                "longitude": point.longitude if point else None,
            },
        }


@dataclass(frozen=True)
class SearchContext:
    reference_city: str
    radius_km: float
    today: date

    def __post_init__(self):
        object.__setattr__(self, "reference_city", canonical_city(self.reference_city))

    @classmethod
    def create(cls, reference_city: str, radius_km: float, today: Optional[date] = None) -> SearchContext:
        if radius_km < 0:
            raise ValueError(f"radius_km must be >= 0, got {radius_km}")
        return cls(
            reference_city=canonical_city(reference_city),
            radius_km=float(radius_km),
            today=today or date.today(),
        )


@dataclass(frozen=True)
class RankedSession:
    session: CourseSession
    pertinence_score: float
    distance_km: float

    @property
    def city(self) -> str:
        return self.session.city

    def to_dict(self) -> dict:
        d = self.session.to_dict()
        d["pertinence_score"] = round(self.pertinence_score, 3)
        d["distance_km"] = round(self.distance_km, 1)
        return d


@dataclass(frozen=True)
class FetchFailure:
    city: str
    reason: str


@dataclass(frozen=True)
class AggregateResult:
    sessions: Tuple[CourseSession, ...]
    failures: Tuple[FetchFailure, ...]

    @property
    def failed_cities(self) -> list:
        return [f.city for f in self.failures]


@dataclass(frozen=True)
class SearchResult:
    sessions: Tuple[RankedSession, ...]
    nearby_cities: Tuple[CityDistance, ...]
    failed_cities: Tuple[str, ...]

    @property
    def is_partial(self) -> bool:
        return bool(self.failed_cities)

    def to_dict(self) -> dict:
        return {
            "sessions": [r.to_dict() for r in self.sessions],
            "nearby_cities": [c.to_dict() for c in self.nearby_cities],
            "failed_cities": list(self.failed_cities),
        }
