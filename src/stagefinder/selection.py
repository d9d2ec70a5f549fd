"""Which of the searched cities the user currently wants to see."""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Iterable, List

from .models import canonical_city


@dataclass(frozen=True)
class CitySelection:
    """
    Either every city (the initial state) or an explicit non-empty subset.

    Values are immutable; each transition returns a new selection. An
    empty subset is never stored: removing the last city falls back to
    "all cities".
    """

    _subset: FrozenSet[str] = frozenset()

    @classmethod
    def all_cities(cls) -> CitySelection:
        return cls()

    @property
    def is_all(self) -> bool:
        return not self._subset

    @property
    def cities(self) -> FrozenSet[str]:
        """Selected cities; empty when every city is selected."""
        return self._subset

    def is_selected(self, city: str) -> bool:
        return self.is_all or canonical_city(city) in self._subset

    def toggle(self, city: str) -> CitySelection:
        key = canonical_city(city)
        if not key:
            return self
        if key in self._subset:
            return CitySelection(self._subset - {key})
        return CitySelection(self._subset | {key})

    def select_all(self) -> CitySelection:
        return CitySelection()

    def __repr__(self) -> str:
        if self.is_all:
            return "CitySelection(all)"
        return f"CitySelection({sorted(self._subset)})"


def effective_filter(selection: CitySelection, candidates: Iterable[str]) -> List[str]:
    """Candidates unchanged for "all cities", else only the selected ones (order kept)."""
    if selection.is_all:
        return list(candidates)
    return [c for c in candidates if canonical_city(c) in selection.cities]
