from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Dict, List, Tuple

from .models import CourseSession, canonical_city
from .provider.parser import to_course_sessions
from .registry import CityRegistry


def load_cities_csv(path: str | Path) -> CityRegistry:
    """
    Reads a city table with header: city,latitude,longitude
    Returns a CityRegistry keyed by canonical city name.
    """
    p = Path(path)
    out: Dict[str, Tuple[float, float]] = {}

    with p.open("r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        for row in reader:
            city = canonical_city(row.get("city") or "")
            if not city:
                continue
            if city in out:
                raise ValueError(f"duplicate city in {p.name}: '{city}'")
            out[city] = (float(row["latitude"]), float(row["longitude"]))
    return CityRegistry(out)


def load_sessions_json(path: str | Path) -> List[CourseSession]:
    """
    Reads a JSON dump in the provider payload shape: {"stages": [...]}.
    A bare list of stage objects is accepted too.
    """
    p = Path(path)
    data = json.loads(p.read_text(encoding="utf-8"))
    if isinstance(data, list):
        data = {"stages": data}
    return to_course_sessions(data)
