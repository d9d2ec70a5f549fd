from __future__ import annotations

from typing import List, Optional

import requests

from ..exceptions import ProviderError
from ..models import CourseSession, canonical_city
from .parser import to_course_sessions

BASE = "https://api.twelvy.net"
STAGES_PATH = "/stages.php"
DEFAULT_TIMEOUT = 30


def fetch_stages_payload(
    city: str,
    base_url: str = BASE,
    timeout: float = DEFAULT_TIMEOUT,
    session: Optional[requests.Session] = None,
) -> dict:
    city = canonical_city(city)
    if not city:
        raise ValueError("city is required")

    http = session or requests
    r = http.get(
        base_url.rstrip("/") + STAGES_PATH,
        params={"city": city},
        headers={"Accept": "application/json"},
        timeout=timeout,
    )
    r.raise_for_status()
    try:
        data = r.json()
    except ValueError as exc:
        raise ProviderError(city, f"invalid JSON ({exc})") from exc
    if not isinstance(data, dict) or not isinstance(data.get("stages"), list):
        raise ProviderError(city, "missing 'stages' list")
    return data


class ApiSessionProvider:
    """
    Session-data provider backed by the stages HTTP API.

    Instances are callables ``city -> list[CourseSession]`` so they plug
    straight into aggregate_sessions. Any network error, non-2xx status
    or malformed payload propagates to the caller, which records it as a
    per-city failure.
    """

    def __init__(
        self,
        base_url: str = BASE,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self._session = session

    def __call__(self, city: str) -> List[CourseSession]:
        data = fetch_stages_payload(
            city, base_url=self.base_url, timeout=self.timeout, session=self._session
        )
        return to_course_sessions(data)

    def __repr__(self) -> str:
        return f"ApiSessionProvider({self.base_url!r}, timeout={self.timeout})"
