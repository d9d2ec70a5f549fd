"""Exception hierarchy for stagefinder."""


class StageFinderError(Exception):
    """Base exception for all stagefinder errors."""


class ProviderError(StageFinderError):
    """A session-data provider answered with something we cannot decode."""

    def __init__(self, city: str, detail: str):
        self.city = city
        super().__init__(f"Provider returned unexpected data for '{city}': {detail}")


class AggregationCancelled(StageFinderError):
    """The caller cancelled a multi-city fetch before it settled."""

    def __init__(self, pending: int):
        self.pending = pending
        super().__init__(f"Aggregation cancelled with {pending} request(s) outstanding")
