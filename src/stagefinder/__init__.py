"""stagefinder: find course sessions near a city and rank them."""

from stagefinder.aggregator import aggregate_sessions
from stagefinder.engine import SessionSearch
from stagefinder.exceptions import AggregationCancelled, ProviderError, StageFinderError
from stagefinder.geo import haversine_km, nearby_cities
from stagefinder.models import (
    AggregateResult,
    CityDistance,
    CourseSession,
    FetchFailure,
    GeoPoint,
    RankedSession,
    SearchContext,
    SearchResult,
    SessionLocation,
)
from stagefinder.ranker import RankConfig, SortMode, apply_sort, filter_sessions, rank_sessions
from stagefinder.registry import CityRegistry
from stagefinder.selection import CitySelection, effective_filter

__all__ = [
    "SessionSearch",
    "CityRegistry",
    "CitySelection",
    "effective_filter",
    "RankConfig",
    "SortMode",
    "aggregate_sessions",
    "apply_sort",
    "filter_sessions",
    "rank_sessions",
    "haversine_km",
    "nearby_cities",
    "AggregateResult",
    "CityDistance",
    "CourseSession",
    "FetchFailure",
    "GeoPoint",
    "RankedSession",
    "SearchContext",
    "SearchResult",
    "SessionLocation",
    "StageFinderError",
    "ProviderError",
    "AggregationCancelled",
]
