"""Shared test fixtures: a small city table and a session factory."""

from datetime import date

import pytest

from stagefinder.models import CourseSession, SessionLocation
from stagefinder.registry import CityRegistry

TODAY = date(2026, 10, 19)


@pytest.fixture()
def today() -> date:
    return TODAY


@pytest.fixture()
def registry() -> CityRegistry:
    """Marseille area plus a far-away city."""
    return CityRegistry(
        {
            "MARSEILLE": (43.2965, 5.3698),
            "AIX-EN-PROVENCE": (43.5297, 5.4474),
            "VITROLLES": (43.4553, 5.2478),
            "AUBAGNE": (43.2928, 5.5706),
            "PARIS": (48.8566, 2.3522),
        }
    )


_next_id = iter(range(1, 1_000_000))


def make_session(
    city: str = "MARSEILLE",
    price: float = 200.0,
    date_start=date(2026, 11, 2),
    date_end=None,
    visible: bool = True,
    cancelled: bool = False,
    capacity_total: int = 20,
    capacity_used: int = 5,
    id=None,
) -> CourseSession:
    return CourseSession(
        id=id if id is not None else next(_next_id),
        site_id=1,
        date_start=date_start,
        date_end=date_end or date_start,
        price=price,
        capacity_total=capacity_total,
        capacity_used=capacity_used,
        visible=visible,
        cancelled=cancelled,
        location=SessionLocation(city=city, address="1 rue de la Gare", postal_code="13001"),
    )


@pytest.fixture()
def session_factory():
    return make_session


def stage_payload(id=1, ville="Marseille", prix=180, date_start="2026-11-02", **extra) -> dict:
    """One stage object in the provider's JSON shape."""
    stage = {
        "id": id,
        "id_site": 7,
        "date_start": date_start,
        "date_end": date_start,
        "prix": prix,
        "nb_places": 20,
        "nb_inscrits": 4,
        "visible": 1,
        "site": {
            "id": 7,
            "nom": "Hotel Ibis",
            "ville": ville,
            "adresse": "12 boulevard National",
            "code_postal": "13001",
            "latitude": 43.3,
            "longitude": 5.38,
        },
    }
    stage.update(extra)
    return stage
