# bikeflow/traffic/aggregate.py
from __future__ import annotations

from collections import Counter
from dataclasses import replace
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Set

from bikeflow.traffic.types import Station, StationKey, Trip


def count_by_station(trips: Iterable[Trip], attr: str) -> Dict[StationKey, int]:
    """
    attr: "start_station_id" for departures, "end_station_id" for arrivals
    """
    if attr not in ("start_station_id", "end_station_id"):
        raise ValueError(f"cannot group trips by {attr!r}")
    return dict(Counter(getattr(t, attr) for t in trips))


def lookup(counts: Mapping[StationKey, int], key: StationKey) -> int:
    return int(counts.get(key, 0))


def aggregate_traffic(
    stations: Sequence[Station],
    selected_departures: Iterable[Trip],
    selected_arrivals: Iterable[Trip],
) -> List[Station]:
    """
    Returns new Station values in the same order as stations with
    departures / arrivals / total_traffic filled in. A station with no
    trips in the selection gets zeros.
    """
    dep = count_by_station(selected_departures, "start_station_id")
    arr = count_by_station(selected_arrivals, "end_station_id")
    return apply_counts(stations, dep, arr)


def apply_counts(
    stations: Sequence[Station],
    dep: Mapping[StationKey, int],
    arr: Mapping[StationKey, int],
) -> List[Station]:
    out = []
    for s in stations:
        d = lookup(dep, s.station_id)
        a = lookup(arr, s.station_id)
        out.append(replace(s, departures=d, arrivals=a, total_traffic=d + a))
    return out


def unmatched_keys(counts: Mapping[StationKey, int], stations: Sequence[Station]) -> Set[StationKey]:
    known = {s.station_id for s in stations}
    return {k for k in counts if k not in known}


def departure_ratio(station: Station) -> Optional[float]:
    """departures / total_traffic, or None for a station with no traffic."""
    if station.total_traffic <= 0:
        return None
    return station.departures / station.total_traffic
