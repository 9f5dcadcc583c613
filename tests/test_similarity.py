"""Tests for the similar-vehicle prefilter, scorer and ranker."""

import asyncio

import pytest

from conftest import CountingRepository, make_vehicle
from drivematch.core.exceptions import VehicleNotFoundError
from drivematch.models.criteria import Exact, NotEqual, Range
from drivematch.services.memory_repository import InMemoryVehicleRepository
from drivematch.services.similarity import (
    ScoredCandidate,
    build_prefilter,
    price_band,
    rank,
    rank_similar,
    score_breakdown,
    similarity_score,
)


def _similar(vehicles, reference_id, **kwargs):
    repository = InMemoryVehicleRepository(vehicles)
    return asyncio.run(rank_similar(repository, reference_id, **kwargs))


# ---------------------------------------------------------------------------
# Prefilter
# ---------------------------------------------------------------------------


class TestPrefilter:
    def test_price_band_is_fifteen_percent(self):
        band = price_band(1_000_000)
        assert band.gte == pytest.approx(850_000)
        assert band.lte == pytest.approx(1_150_000)

    def test_price_band_degenerate_for_zero_price(self):
        assert price_band(0) == Range(gte=0, lte=0)

    def test_hard_constraints(self):
        base = make_vehicle("base", transmission="Automatic", fuel_type="Diesel")
        criteria = build_prefilter(base)
        assert criteria["id"] == NotEqual("base")
        assert criteria["type"] == Exact("car")
        assert criteria["fuel_type"] == Exact("Diesel")
        assert criteria["transmission"] == Exact("Automatic")
        assert isinstance(criteria["price"], Range)

    def test_criteria_are_read_only(self):
        criteria = build_prefilter(make_vehicle("base"))
        with pytest.raises(TypeError):
            criteria["type"] = Exact("bike")


# ---------------------------------------------------------------------------
# Scorer
# ---------------------------------------------------------------------------


class TestScorer:
    def test_identical_attributes_score_100(self):
        base = make_vehicle("a")
        twin = make_vehicle("b")
        assert similarity_score(base, twin) == pytest.approx(100.0)

    def test_price_sub_score(self):
        base = make_vehicle("a", price=1_000_000)
        candidate = make_vehicle("b", price=1_100_000)
        assert score_breakdown(base, candidate)["price"] == pytest.approx(22.5)

    def test_categorical_bonuses(self):
        base = make_vehicle("a")
        other = make_vehicle("b", fuel_type="Diesel", transmission="Automatic", body_type="Sedan")
        parts = score_breakdown(base, other)
        assert parts["fuel_type"] == 0.0
        assert parts["transmission"] == 0.0
        assert parts["body_type"] == 0.0
        assert score_breakdown(base, make_vehicle("c"))["body_type"] == 5.0

    def test_performance_and_eco_components(self):
        base = make_vehicle("a", performance_score=80, eco_score=40)
        candidate = make_vehicle("b", performance_score=60, eco_score=50)
        parts = score_breakdown(base, candidate)
        assert parts["performance_score"] == pytest.approx(8.0)
        assert parts["eco_score"] == pytest.approx(4.5)

    def test_missing_reference_power_goes_negative_unclamped(self):
        base = make_vehicle("a", engine_power=None)
        candidate = make_vehicle("b", engine_power="150 bhp")
        parts = score_breakdown(base, candidate)
        assert parts["engine_power"] == pytest.approx((1 - 150) * 20)
        assert similarity_score(base, candidate) < 0


# ---------------------------------------------------------------------------
# Ranker
# ---------------------------------------------------------------------------


class TestRank:
    def test_descending_and_truncated(self):
        scored = [ScoredCandidate(make_vehicle(str(i)), float(i)) for i in range(6)]
        top = rank(scored)
        assert [s.score for s in top] == [5.0, 4.0, 3.0, 2.0]

    def test_ties_keep_input_order(self):
        scored = [ScoredCandidate(make_vehicle(vid), 50.0) for vid in ("x", "y", "z")]
        assert [s.vehicle.id for s in rank(scored)] == ["x", "y", "z"]


class TestRankSimilar:
    def test_excludes_reference_and_respects_constraints(self):
        vehicles = [
            make_vehicle("base"),
            make_vehicle("close", price=1_050_000),
            make_vehicle("diesel", fuel_type="Diesel"),
            make_vehicle("auto", transmission="Automatic"),
            make_vehicle("bike", type="bike"),
            make_vehicle("pricey", price=1_300_000),
        ]
        base, similar = _similar(vehicles, "base")
        assert base.id == "base"
        assert [v.id for v in similar] == ["close"]

    def test_at_most_four_sorted_descending(self):
        vehicles = [make_vehicle("base")] + [
            make_vehicle(f"c{i}", price=1_000_000 + i * 20_000) for i in range(7)
        ]
        base, similar = _similar(vehicles, "base")
        assert len(similar) == 4
        scores = [similarity_score(base, v) for v in similar]
        assert scores == sorted(scores, reverse=True)
        assert [v.id for v in similar] == ["c0", "c1", "c2", "c3"]

    def test_ties_follow_repository_order(self):
        vehicles = [make_vehicle("base"), make_vehicle("t2"), make_vehicle("t1")]
        _, similar = _similar(vehicles, "base")
        assert [v.id for v in similar] == ["t2", "t1"]

    def test_unknown_reference(self):
        with pytest.raises(VehicleNotFoundError):
            _similar([make_vehicle("base")], "missing")

    def test_no_candidates_is_empty_not_error(self):
        base, similar = _similar([make_vehicle("base")], "base")
        assert base.id == "base"
        assert similar == []

    def test_zero_price_reference_does_not_fail(self):
        vehicles = [make_vehicle("base", price=0), make_vehicle("free", price=0)]
        _, similar = _similar(vehicles, "base")
        assert [v.id for v in similar] == ["free"]

    def test_candidate_cap_limits_fetch(self):
        vehicles = [make_vehicle("base")] + [make_vehicle(f"c{i}") for i in range(5)]
        _, similar = _similar(vehicles, "base", candidate_cap=2)
        assert [v.id for v in similar] == ["c0", "c1"]

    def test_exactly_two_repository_calls(self):
        repository = CountingRepository(
            InMemoryVehicleRepository([make_vehicle("base"), make_vehicle("other")])
        )
        asyncio.run(rank_similar(repository, "base"))
        assert repository.calls == ["find_by_id", "find_by_filter"]
