from __future__ import annotations

from collections import defaultdict
from typing import Dict, Iterable, List

from ..models import CourseSession, canonical_city


class StaticSessionProvider:
    """
    In-memory provider over a fixed list of sessions, grouped by city.

    Useful offline (JSON dumps) and in tests. Unknown cities return an
    empty list, which is a valid answer rather than an error.
    """

    def __init__(self, sessions: Iterable[CourseSession]):
        by_city: Dict[str, List[CourseSession]] = defaultdict(list)
        for s in sessions:
            by_city[canonical_city(s.city)].append(s)
        self._by_city = dict(by_city)

    def __call__(self, city: str) -> List[CourseSession]:
        return list(self._by_city.get(canonical_city(city), []))

    def cities(self) -> List[str]:
        return sorted(self._by_city)
