"""SessionSearch: the entry point the presentation layer talks to."""

from __future__ import annotations

import logging
import threading
from datetime import date
from typing import Iterable, List, Optional

from .aggregator import SessionProvider, aggregate_sessions
from .geo import nearby_cities
from .models import RankedSession, SearchContext, SearchResult
from .ranker import RankConfig, SortMode, apply_sort, filter_sessions, rank_sessions
from .registry import CityRegistry
from .selection import CitySelection, effective_filter

logger = logging.getLogger(__name__)


class SessionSearch:
    """
    Multi-city session search around a reference city.

    search() runs the whole pipeline: nearby cities -> concurrent fetch ->
    filter -> pertinence ranking (capped). Partial provider failures are
    reported in SearchResult.failed_cities, never raised.
    """

    def __init__(
        self,
        provider: SessionProvider,
        registry: Optional[CityRegistry] = None,
        cfg: Optional[RankConfig] = None,
    ):
        self.provider = provider
        self.registry = registry if registry is not None else CityRegistry.default()
        self.cfg = cfg or RankConfig()

    # ── Public API ────────────────────────────────────────────────

    def search(
        self,
        reference_city: str,
        radius_km: Optional[float] = None,
        today: Optional[date] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> SearchResult:
        if radius_km is None:
            radius_km = self.cfg.default_radius_km
        context = SearchContext.create(reference_city, radius_km, today)
        if not context.reference_city:
            raise ValueError("reference_city is required")

        nearby = nearby_cities(self.registry, context.reference_city, context.radius_km)
        cities = [context.reference_city] + [c.city for c in nearby]

        aggregate = aggregate_sessions(
            self.provider,
            cities,
            max_workers=self.cfg.max_workers,
            cancel_event=cancel_event,
        )
        kept = filter_sessions(aggregate.sessions, context, set(cities), self.cfg)
        ranked = rank_sessions(
            kept,
            context,
            {c.city: c.distance_km for c in nearby},
            SortMode.PERTINENCE,
            self.cfg,
        )

        logger.info(
            "Search %s (%.0f km): %d city(ies), %d session(s), %d failed",
            context.reference_city, context.radius_km, len(cities),
            len(ranked), len(aggregate.failures),
        )
        return SearchResult(
            sessions=tuple(ranked),
            nearby_cities=tuple(nearby),
            failed_cities=tuple(aggregate.failed_cities),
        )

    @staticmethod
    def apply_sort(sessions: Iterable[RankedSession], mode: str | SortMode) -> List[RankedSession]:
        return apply_sort(sessions, mode)

    @staticmethod
    def select(sessions: Iterable[RankedSession], selection: CitySelection) -> List[RankedSession]:
        """Keep only sessions from the cities *selection* lets through, order preserved."""
        sessions = list(sessions)
        allowed = set(effective_filter(selection, {r.city for r in sessions}))
        return [r for r in sessions if r.city in allowed]
