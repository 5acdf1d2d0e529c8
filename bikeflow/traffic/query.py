# bikeflow/traffic/query.py
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Sequence, Set, Tuple

from bikeflow.traffic.aggregate import aggregate_traffic, count_by_station, unmatched_keys
from bikeflow.traffic.buckets import MinuteBucketIndex
from bikeflow.traffic.types import UNFILTERED, Station, StationKey
from bikeflow.traffic.window import select_window, validate_time_filter

logger = logging.getLogger(__name__)


class StationKeyMismatchError(ValueError):
    """Trip station ids and station ids share no common key."""


def _trip_keys(index: MinuteBucketIndex) -> Set[StationKey]:
    keys: Set[StationKey] = set()
    for bucket in index.departures:
        for t in bucket:
            keys.add(t.start_station_id)
            keys.add(t.end_station_id)
    return keys


def validate_station_keys(index: MinuteBucketIndex, stations: Sequence[Station]) -> Set[StationKey]:
    """
    Load-time check that trips and stations use the same id scheme.

    Raises StationKeyMismatchError when there are trips but none of their
    station ids is a known station (e.g. legacy_id vs short_name).
    Returns the trip keys that matched no station.
    """
    if index.trip_count == 0:
        return set()

    trip_keys = _trip_keys(index)
    known = {s.station_id for s in stations}
    matched = trip_keys & known
    missing = trip_keys - known

    if not matched:
        sample = sorted(trip_keys)[:5]
        raise StationKeyMismatchError(
            f"none of {len(trip_keys)} trip station ids match the {len(known)} "
            f"station ids (trip ids look like {sample})"
        )

    if missing:
        logger.warning(
            "%d of %d trip station ids have no matching station; their trips are not counted",
            len(missing),
            len(trip_keys),
        )

    return missing


class StationTraffic:
    """
    Query facade over a prebuilt MinuteBucketIndex.

    The index is owned by the caller and only read here, so one instance
    can answer every slider tick for the session.
    """

    def __init__(self, index: MinuteBucketIndex):
        self.index = index

    def compute_station_traffic(
        self,
        stations: Sequence[Station],
        time_filter: int = UNFILTERED,
    ) -> List[Station]:
        minute = validate_time_filter(time_filter)

        deps = select_window(self.index.departures, minute)
        arrs = select_window(self.index.arrivals, minute)

        if logger.isEnabledFor(logging.DEBUG):
            lost = unmatched_keys(count_by_station(deps, "start_station_id"), stations)
            lost |= unmatched_keys(count_by_station(arrs, "end_station_id"), stations)
            if lost:
                logger.debug(
                    "time_filter=%d: %d station ids in window match no station: %s",
                    minute,
                    len(lost),
                    sorted(lost)[:10],
                )

        return aggregate_traffic(stations, deps, arrs)


def compute_station_traffic(
    index: MinuteBucketIndex,
    stations: Sequence[Station],
    time_filter: int = UNFILTERED,
) -> List[Station]:
    return StationTraffic(index).compute_station_traffic(stations, time_filter)


@dataclass
class TrafficSummary:
    departures: int
    arrivals: int
    max_traffic: int
    active_stations: int
    busiest: List[Tuple[StationKey, int]] = field(default_factory=list)

    def to_dict(self):
        return {
            "departures": self.departures,
            "arrivals": self.arrivals,
            "max_traffic": self.max_traffic,
            "active_stations": self.active_stations,
            "busiest": [{"station_id": sid, "total_traffic": n} for sid, n in self.busiest],
        }


def summarize(stations: Sequence[Station], top_n: int = 5) -> TrafficSummary:
    """
    Totals over annotated stations. max_traffic is 0 for an empty window,
    which callers use as the upper end of their size scale.
    """
    ranked = sorted(
        (s for s in stations if s.total_traffic > 0),
        key=lambda s: (-s.total_traffic, s.station_id),
    )
    return TrafficSummary(
        departures=sum(s.departures for s in stations),
        arrivals=sum(s.arrivals for s in stations),
        max_traffic=max((s.total_traffic for s in stations), default=0),
        active_stations=len(ranked),
        busiest=[(s.station_id, s.total_traffic) for s in ranked[: max(0, int(top_n))]],
    )
