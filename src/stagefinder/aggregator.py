from __future__ import annotations

import logging
import threading
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait
from typing import Callable, Dict, Iterable, List, Optional

from .exceptions import AggregationCancelled
from .models import AggregateResult, CourseSession, FetchFailure, canonical_city

logger = logging.getLogger(__name__)

SessionProvider = Callable[[str], Iterable[CourseSession]]

DEFAULT_MAX_WORKERS = 8
_CANCEL_POLL_SEC = 0.1


def _unique_cities(cities: Iterable[str]) -> List[str]:
    seen = set()
    out: List[str] = []
    for c in cities:
        key = canonical_city(c)
        if key and key not in seen:
            seen.add(key)
            out.append(key)
    return out


def _fetch_city(provider: SessionProvider, city: str) -> List[CourseSession]:
    sessions = []
    for s in provider(city):
        norm = canonical_city(s.city)
        sessions.append(s if norm == s.city else s.with_city(norm))
    return sessions


def aggregate_sessions(
    provider: SessionProvider,
    cities: Iterable[str],
    max_workers: int = DEFAULT_MAX_WORKERS,
    cancel_event: Optional[threading.Event] = None,
) -> AggregateResult:
    """
    Fetch sessions for every city concurrently and merge them.

    Each city is fetched independently: an exception for one city is
    recorded as a FetchFailure and the other cities still come back.
    Sessions are merged in request order once every request has settled.
    Setting *cancel_event* abandons the whole aggregation and raises
    AggregationCancelled.
    """
    requested = _unique_cities(cities)
    if not requested:
        return AggregateResult(sessions=(), failures=())

    fetched: Dict[str, List[CourseSession]] = {}
    failed: Dict[str, FetchFailure] = {}

    executor = ThreadPoolExecutor(
        max_workers=max(1, min(max_workers, len(requested))),
        thread_name_prefix="stagefinder-fetch",
    )
    try:
        futures: Dict[Future, str] = {
            executor.submit(_fetch_city, provider, city): city for city in requested
        }
        pending = set(futures)
        while pending:
            if cancel_event is not None and cancel_event.is_set():
                raise AggregationCancelled(len(pending))
            done, pending = wait(
                pending,
                timeout=_CANCEL_POLL_SEC if cancel_event is not None else None,
                return_when=FIRST_COMPLETED,
            )
            for fut in done:
                city = futures[fut]
                try:
                    fetched[city] = fut.result()
                except Exception as exc:
                    logger.warning("Fetching sessions for %s failed: %s", city, exc)
                    failed[city] = FetchFailure(city=city, reason=str(exc) or type(exc).__name__)
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    sessions: List[CourseSession] = []
    failures: List[FetchFailure] = []
    for city in requested:
        if city in failed:
            failures.append(failed[city])
        else:
            sessions.extend(fetched[city])

    logger.debug(
        "Aggregated %d session(s) from %d city(ies), %d failure(s)",
        len(sessions), len(requested) - len(failures), len(failures),
    )
    return AggregateResult(sessions=tuple(sessions), failures=tuple(failures))
