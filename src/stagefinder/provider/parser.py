import logging
from datetime import date

from ..models import CourseSession, GeoPoint, SessionLocation, canonical_city

logger = logging.getLogger(__name__)

NO_DATE = "0000-00-00"


def _str(x):
    if x is None:
        return ""
    return str(x).strip()


def _float(x, default=0.0):
    if x is None or x == "":
        return default
    return float(x)


def _int(x, default=0):
    if x is None or x == "":
        return default
    return int(float(x))


def _bool(x) -> bool:
    if isinstance(x, str):
        return x.strip().lower() in ("1", "true", "yes")
    return bool(x)


def parse_date(raw):
    """'2026-11-03' or '2026-11-03 08:30:00' -> date(2026, 11, 3); sentinel/garbage -> None."""
    s = _str(raw)
    if not s or s.startswith(NO_DATE):
        return None
    try:
        return date.fromisoformat(s[:10])
    except ValueError:
        return None


def _point(site: dict):
    lat = site.get("latitude")
    lon = site.get("longitude")
    if lat in (None, "") or lon in (None, ""):
        return None
    try:
        return GeoPoint(float(lat), float(lon))
    except (TypeError, ValueError):
        return None


def to_course_session(stage: dict) -> CourseSession:
    site = stage.get("site") or {}
    return CourseSession(
        id=_int(stage["id"]),
        site_id=_int(stage.get("id_site") or site.get("id")),
        date_start=parse_date(stage.get("date_start")),
        date_end=parse_date(stage.get("date_end")),
        price=_float(stage.get("prix")),
        capacity_total=_int(stage.get("nb_places")),
        capacity_used=_int(stage.get("nb_inscrits")),
        visible=_bool(stage.get("visible", 1)),
        cancelled=_bool(stage.get("annule", 0)),
        location=SessionLocation(
            city=canonical_city(_str(site.get("ville"))),
            address=_str(site.get("adresse")),
            postal_code=_str(site.get("code_postal")),
            point=_point(site),
            site_name=_str(site.get("nom")),
        ),
    )


def to_course_sessions(api_response: dict) -> list:
    """
    Decode a provider payload ``{"stages": [...], "city": ...}``.

    Rows that cannot be decoded are logged and skipped so one bad record
    does not cost the whole city.
    """
    sessions = []
    stages = (api_response or {}).get("stages") or []

    for stage in stages:
        try:
            sessions.append(to_course_session(stage))
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            stage_id = stage.get("id") if isinstance(stage, dict) else None
            logger.warning("Skipping undecodable stage %r: %s", stage_id, exc)

    return sessions
