"""Tests for stagefinder.geo and stagefinder.registry."""

import pytest

from stagefinder.geo import haversine_km, nearby_cities
from stagefinder.models import GeoPoint
from stagefinder.registry import CityRegistry

MARSEILLE = GeoPoint(43.2965, 5.3698)
PARIS = GeoPoint(48.8566, 2.3522)


class TestHaversine:
    def test_self_distance_is_zero(self):
        assert haversine_km(MARSEILLE, MARSEILLE) == pytest.approx(0.0, abs=1e-9)

    @pytest.mark.parametrize(
        ("a", "b"),
        [
            (MARSEILLE, PARIS),
            (GeoPoint(0.0, 0.0), GeoPoint(0.0, 180.0)),
            (GeoPoint(-33.86, 151.21), GeoPoint(51.51, -0.13)),
        ],
    )
    def test_symmetric(self, a: GeoPoint, b: GeoPoint):
        assert haversine_km(a, b) == pytest.approx(haversine_km(b, a))

    def test_marseille_paris(self):
        assert haversine_km(MARSEILLE, PARIS) == pytest.approx(661, abs=5)

    def test_antipodal_is_half_circumference(self):
        d = haversine_km(GeoPoint(0.0, 0.0), GeoPoint(0.0, 180.0))
        assert d == pytest.approx(3.141592653589793 * 6371.0, rel=1e-9)


class TestCityRegistry:
    def test_lookup_is_case_and_space_insensitive(self, registry: CityRegistry):
        assert registry.lookup("  marseille ") == GeoPoint(43.2965, 5.3698)

    def test_missing_city_is_none(self, registry: CityRegistry):
        assert registry.lookup("TROU-PERDU") is None

    def test_contains_and_len(self, registry: CityRegistry):
        assert "aix-en-provence" in registry
        assert "LYON" not in registry
        assert len(registry) == 5

    def test_duplicate_after_canonicalisation_rejected(self):
        with pytest.raises(ValueError):
            CityRegistry({"Nice": (43.7, 7.26), "NICE ": (43.7, 7.26)})

    def test_default_table(self):
        reg = CityRegistry.default()
        assert "MARSEILLE" in reg
        assert reg.cities() == sorted(reg.cities())

    def test_source_mapping_not_shared(self):
        table = {"NICE": (43.7102, 7.2620)}
        reg = CityRegistry(table)
        table["LYON"] = (45.764, 4.8357)
        assert "LYON" not in reg


class TestNearbyCities:
    def test_radius_containment(self, registry: CityRegistry):
        result = nearby_cities(registry, "MARSEILLE", 40)
        assert result
        assert all(c.distance_km <= 40 for c in result)
        assert "MARSEILLE" not in [c.city for c in result]
        assert "PARIS" not in [c.city for c in result]

    def test_sorted_by_distance(self, registry: CityRegistry):
        result = nearby_cities(registry, "marseille", 40)
        assert [c.city for c in result] == ["AUBAGNE", "VITROLLES", "AIX-EN-PROVENCE"]
        distances = [c.distance_km for c in result]
        assert distances == sorted(distances)

    def test_unknown_reference_city_is_empty(self, registry: CityRegistry):
        assert nearby_cities(registry, "TROU-PERDU", 500) == []

    def test_zero_radius(self, registry: CityRegistry):
        assert nearby_cities(registry, "MARSEILLE", 0) == []

    def test_ties_broken_by_name(self):
        reg = CityRegistry(
            {"CENTRE": (0.0, 0.0), "ZED": (0.0, 0.1), "ALPHA": (0.0, -0.1)}
        )
        assert [c.city for c in nearby_cities(reg, "CENTRE", 50)] == ["ALPHA", "ZED"]

    def test_negative_radius_rejected(self, registry: CityRegistry):
        with pytest.raises(ValueError):
            nearby_cities(registry, "MARSEILLE", -1)
