"""Tests for stagefinder.aggregator."""

import threading
import time

import pytest

from stagefinder.aggregator import aggregate_sessions
from stagefinder.exceptions import AggregationCancelled
from stagefinder.provider.static import StaticSessionProvider
from conftest import make_session


def _provider_failing_for(*bad_cities, sessions=()):
    static = StaticSessionProvider(sessions)

    def provider(city):
        if city in bad_cities:
            raise ConnectionError(f"timeout fetching {city}")
        return static(city)

    return provider


class TestAggregateSessions:
    def test_merges_all_cities_in_request_order(self):
        home = make_session(city="MARSEILLE")
        vit = make_session(city="VITROLLES")
        aix = make_session(city="AIX-EN-PROVENCE")
        provider = StaticSessionProvider([aix, vit, home])

        result = aggregate_sessions(provider, ["MARSEILLE", "VITROLLES", "AIX-EN-PROVENCE"])

        assert list(result.sessions) == [home, vit, aix]
        assert result.failures == ()

    def test_partial_failure_is_recorded(self):
        home = make_session(city="MARSEILLE")
        vit = make_session(city="VITROLLES")
        aix = make_session(city="AIX-EN-PROVENCE")
        provider = _provider_failing_for("VITROLLES", sessions=[home, vit, aix])

        result = aggregate_sessions(provider, ["MARSEILLE", "VITROLLES", "AIX-EN-PROVENCE"])

        assert list(result.sessions) == [home, aix]
        assert result.failed_cities == ["VITROLLES"]
        assert "timeout" in result.failures[0].reason

    def test_every_city_failing_gives_empty_result(self):
        provider = _provider_failing_for("MARSEILLE", "NICE")
        result = aggregate_sessions(provider, ["MARSEILLE", "NICE"])
        assert result.sessions == ()
        assert result.failed_cities == ["MARSEILLE", "NICE"]

    def test_city_casing_normalised_on_copies(self):
        raw = make_session(city="Marseille")

        result = aggregate_sessions(lambda city: [raw], ["MARSEILLE"])

        (merged,) = result.sessions
        assert merged.city == "MARSEILLE"
        assert raw.city == "Marseille"
        assert merged.id == raw.id

    def test_empty_city_is_not_an_error(self):
        result = aggregate_sessions(StaticSessionProvider([]), ["MARSEILLE"])
        assert result.sessions == ()
        assert result.failures == ()

    def test_duplicate_cities_fetched_once(self):
        calls = []

        def provider(city):
            calls.append(city)
            return []

        aggregate_sessions(provider, ["Marseille", "MARSEILLE ", "NICE"])
        assert sorted(calls) == ["MARSEILLE", "NICE"]

    def test_no_cities(self):
        result = aggregate_sessions(StaticSessionProvider([]), [])
        assert result.sessions == () and result.failures == ()

    def test_requests_run_concurrently(self):
        barrier = threading.Barrier(3, timeout=5)

        def provider(city):
            # deadlocks (and times out) unless all three run at once
            barrier.wait()
            return [make_session(city=city)]

        result = aggregate_sessions(provider, ["A", "B", "C"], max_workers=3)
        assert [s.city for s in result.sessions] == ["A", "B", "C"]
        assert result.failures == ()

    def test_slow_city_does_not_drop_others(self):
        def provider(city):
            if city == "SLOW":
                time.sleep(0.2)
            return [make_session(city=city)]

        result = aggregate_sessions(provider, ["SLOW", "FAST"])
        assert [s.city for s in result.sessions] == ["SLOW", "FAST"]


class TestCancellation:
    def test_cancel_discards_everything(self):
        cancel = threading.Event()
        release = threading.Event()

        def provider(city):
            if city == "FAST":
                return [make_session(city=city)]
            cancel.set()
            release.wait(5)
            return [make_session(city=city)]

        try:
            with pytest.raises(AggregationCancelled) as exc_info:
                aggregate_sessions(provider, ["FAST", "STUCK"], cancel_event=cancel)
            assert exc_info.value.pending >= 1
        finally:
            release.set()

    def test_unset_event_does_not_interfere(self):
        cancel = threading.Event()
        result = aggregate_sessions(
            lambda city: [make_session(city=city)], ["MARSEILLE"], cancel_event=cancel
        )
        assert len(result.sessions) == 1
