# src/stagefinder/ranker.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Callable, Collection, Dict, Iterable, List, Mapping, Optional

from .models import CourseSession, RankedSession, SearchContext, canonical_city

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RankConfig:
    # Pertinence weights (lower score = better)
    reference_city_offset: float = 100.0   # added to every session outside the searched city
    price_divisor: float = 10.0

    # Output bounds
    result_cap: int = 100                  # applied on the initial ranking pass only

    # Search defaults
    default_radius_km: float = 40.0
    horizon_days: Optional[int] = None     # drop sessions starting later than today + N days
    max_workers: int = 8


class SortMode(str, Enum):
    PERTINENCE = "pertinence"
    PROXIMITY = "proximity"
    DATE = "date"
    PRICE = "price"

    @classmethod
    def parse(cls, value: str | SortMode) -> SortMode:
        """Accept enum values, their names and the French UI labels."""
        if isinstance(value, SortMode):
            return value
        key = (value or "").strip().lower()
        mode = _SORT_ALIASES.get(key)
        if mode is None:
            raise ValueError(f"unknown sort mode: '{value}'")
        return mode


_SORT_ALIASES: Dict[str, SortMode] = {m.value: m for m in SortMode}
_SORT_ALIASES.update({"proximite": SortMode.PROXIMITY, "prix": SortMode.PRICE})


def as_day(value: Optional[date]) -> Optional[date]:
    """Truncate a date or datetime to its calendar day."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    return value


def filter_sessions(
    sessions: Iterable[CourseSession],
    context: SearchContext,
    allowed_cities: Collection[str],
    cfg: RankConfig = RankConfig(),
) -> List[CourseSession]:
    """
    Keep sessions that:
      - are held in one of *allowed_cities*
      - are bookable (visible and not cancelled)
      - start today or later (calendar-day comparison); no date -> dropped
      - start within cfg.horizon_days of today, when a horizon is set
    """
    allowed = {canonical_city(c) for c in allowed_cities}
    today = as_day(context.today)
    last_day = today + timedelta(days=cfg.horizon_days) if cfg.horizon_days is not None else None

    out: List[CourseSession] = []
    for s in sessions:
        if canonical_city(s.city) not in allowed:
            continue
        if s.cancelled or not s.visible:
            continue

        start = as_day(s.date_start)
        if start is None or start < today:
            continue
        if last_day is not None and start > last_day:
            continue

        out.append(s)

    logger.debug("Filter kept %d session(s)", len(out))
    return out


def distance_for(city: str, context: SearchContext, distances: Mapping[str, float]) -> float:
    """Distance penalty for *city*: 0 for the searched city and for unknown cities."""
    city = canonical_city(city)
    if city == context.reference_city:
        return 0.0
    return float(distances.get(city, 0.0))


def pertinence_score(
    session: CourseSession,
    context: SearchContext,
    distances: Mapping[str, float],
    cfg: RankConfig = RankConfig(),
) -> float:
    """
    offset (0 in the searched city) + price / divisor + distance in km.

    The offset dominates, so searched-city sessions come first whatever
    their price.
    """
    outside = 0 if canonical_city(session.city) == context.reference_city else 1
    return (
        outside * cfg.reference_city_offset
        + session.price / cfg.price_divisor
        + distance_for(session.city, context, distances)
    )


def _date_key(r: RankedSession):
    start = as_day(r.session.date_start)
    # undated sessions go last
    return (start is None, start or date.min)


_SORT_KEYS: Dict[SortMode, Callable[[RankedSession], object]] = {
    SortMode.PERTINENCE: lambda r: r.pertinence_score,
    SortMode.PROXIMITY: lambda r: r.distance_km,
    SortMode.DATE: _date_key,
    SortMode.PRICE: lambda r: r.session.price,
}


def apply_sort(ranked: Iterable[RankedSession], mode: str | SortMode) -> List[RankedSession]:
    """Stable re-sort of an already ranked list. No truncation."""
    key = _SORT_KEYS[SortMode.parse(mode)]
    return sorted(ranked, key=key)


def rank_sessions(
    sessions: Iterable[CourseSession],
    context: SearchContext,
    distances: Mapping[str, float],
    mode: str | SortMode = SortMode.PERTINENCE,
    cfg: RankConfig = RankConfig(),
) -> List[RankedSession]:
    """
    Initial ranking pass: score -> stable sort by *mode* -> top cfg.result_cap.
    """
    dist = {canonical_city(c): d for c, d in distances.items()}

    ranked = [
        RankedSession(
            session=s,
            pertinence_score=pertinence_score(s, context, dist, cfg),
            distance_km=distance_for(s.city, context, dist),
        )
        for s in sessions
    ]
    ranked = apply_sort(ranked, mode)
    return ranked[: cfg.result_cap]


def fmt_price(price: float) -> str:
    """180.0 -> '180 €', 179.5 -> '179.50 €'"""
    if float(price).is_integer():
        return f"{int(price)} €"
    return f"{price:.2f} €"
