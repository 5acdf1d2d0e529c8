from __future__ import annotations

import logging

import pytest

from bikeflow.traffic import query
from bikeflow.traffic.aggregate import aggregate_traffic
from bikeflow.traffic.buckets import build_bucket_index
from bikeflow.traffic.query import (
    StationKeyMismatchError,
    StationTraffic,
    compute_station_traffic,
    summarize,
    validate_station_keys,
)
from bikeflow.traffic.types import UNFILTERED
from bikeflow.traffic.window import window_minutes

from helpers import random_trips, station, trip


def _traffic(stations):
    return [(s.station_id, s.departures, s.arrivals, s.total_traffic) for s in stations]


def test_single_trip_scenario() -> None:
    index = build_bucket_index([trip("A", "B", 5, 40)])
    stations = [station("A"), station("B")]
    traffic = StationTraffic(index)

    at_midnight = traffic.compute_station_traffic(stations, 0)
    at_five_am = traffic.compute_station_traffic(stations, 300)

    assert _traffic(at_midnight) == [("A", 1, 0, 1), ("B", 0, 1, 1)]
    assert _traffic(at_five_am) == [("A", 0, 0, 0), ("B", 0, 0, 0)]


def test_default_is_unfiltered() -> None:
    index = build_bucket_index([trip("A", "B", 5, 40), trip("B", "A", 700, 720)])
    stations = [station("A"), station("B")]

    out = StationTraffic(index).compute_station_traffic(stations)

    assert _traffic(out) == [("A", 1, 1, 2), ("B", 1, 1, 2)]


def test_idempotent(index, stations) -> None:
    traffic = StationTraffic(index)

    first = traffic.compute_station_traffic(stations, 480)
    second = traffic.compute_station_traffic(stations, 480)

    assert _traffic(first) == _traffic(second)


def test_unfiltered_matches_naive_reference(trips, index, stations) -> None:
    out = compute_station_traffic(index, stations, UNFILTERED)
    naive = aggregate_traffic(stations, trips, trips)

    assert _traffic(out) == _traffic(naive)


@pytest.mark.parametrize("minute", [0, 30, 480, 1020, 1439])
def test_window_matches_naive_filter(trips, index, stations, minute) -> None:
    inside = set(window_minutes(minute))
    deps = [t for t in trips if t.start_minute in inside]
    arrs = [t for t in trips if t.end_minute in inside]

    out = compute_station_traffic(index, stations, minute)

    assert _traffic(out) == _traffic(aggregate_traffic(stations, deps, arrs))


@pytest.mark.parametrize("minute", [UNFILTERED, 90, 1400])
def test_totals_when_every_station_is_known(trips, index, stations, minute) -> None:
    inside = set(window_minutes(minute))
    n_dep = sum(1 for t in trips if t.start_minute in inside)
    n_arr = sum(1 for t in trips if t.end_minute in inside)

    out = compute_station_traffic(index, stations, minute)

    assert sum(s.total_traffic for s in out) == n_dep + n_arr
    if minute == UNFILTERED:
        assert sum(s.total_traffic for s in out) == 2 * len(trips)


def test_totals_with_unknown_stations() -> None:
    index = build_bucket_index([trip("A", "Z", 10, 20), trip("Z", "A", 10, 20)])

    out = compute_station_traffic(index, [station("A")], 10)

    assert _traffic(out) == [("A", 1, 1, 2)]


def test_empty_trip_set_all_zero(stations) -> None:
    out = compute_station_traffic(build_bucket_index([]), stations, 600)

    assert all(s.total_traffic == 0 for s in out)
    assert len(out) == len(stations)


@pytest.mark.parametrize("bad", [-5, 1440, 2.5])
def test_rejects_out_of_range_filter(index, stations, bad) -> None:
    with pytest.raises(ValueError):
        compute_station_traffic(index, stations, bad)


def test_debug_logs_unmatched_ids(caplog) -> None:
    index = build_bucket_index([trip("X", "Y", 10, 20)])

    with caplog.at_level(logging.DEBUG, logger="bikeflow.traffic.query"):
        compute_station_traffic(index, [station("A")], 10)

    assert "match no station" in caplog.text


def test_validate_station_keys_fails_fast_on_disjoint_ids() -> None:
    index = build_bucket_index([trip("A32012", "A32013", 0, 5)])

    with pytest.raises(StationKeyMismatchError):
        validate_station_keys(index, [station("67"), station("68")])


def test_validate_station_keys_reports_partial_overlap(caplog) -> None:
    index = build_bucket_index([trip("1", "2", 0, 5), trip("1", "99", 0, 5)])

    with caplog.at_level(logging.WARNING):
        missing = validate_station_keys(index, [station("1"), station("2")])

    assert missing == {"99"}
    assert "no matching station" in caplog.text


def test_validate_station_keys_accepts_empty_trips() -> None:
    assert validate_station_keys(build_bucket_index([]), [station("1")]) == set()


def test_summarize() -> None:
    trips = random_trips(50, ["1", "2", "3"], seed=3)
    index = build_bucket_index(trips)
    out = compute_station_traffic(index, [station("1"), station("2"), station("3"), station("4")])

    summary = summarize(out, top_n=2)

    assert summary.departures == 50
    assert summary.arrivals == 50
    assert summary.active_stations == 3
    assert len(summary.busiest) == 2
    assert summary.max_traffic == summary.busiest[0][1]
    assert summary.busiest[0][1] >= summary.busiest[1][1]


def test_summarize_empty_window() -> None:
    summary = summarize([station("1")])

    assert summary.max_traffic == 0
    assert summary.busiest == []
    assert summary.to_dict()["active_stations"] == 0


def test_facade_composes_aggregate_traffic(monkeypatch, index, stations) -> None:
    calls = []
    real = query.aggregate_traffic

    def _spy(stations_, deps, arrs):
        calls.append((len(deps), len(arrs)))
        return real(stations_, deps, arrs)

    monkeypatch.setattr(query, "aggregate_traffic", _spy)

    out = StationTraffic(index).compute_station_traffic(stations, 600)

    assert len(calls) == 1
    assert sum(s.departures for s in out) == calls[0][0]
    assert sum(s.arrivals for s in out) == calls[0][1]
