# bikeflow/traffic/types.py
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, NewType, Optional


MINUTES_PER_DAY = 1440
WINDOW_HALF_WIDTH = 60

# time_filter value meaning "every trip, regardless of time of day"
UNFILTERED = -1


StationKey = NewType("StationKey", str)


def station_key(value: Any) -> StationKey:
    """
    Canonical station key shared by trips and stations.

    GBFS feeds and trip exports disagree on types ("123", 123, 123.0, " 123 "),
    so every id goes through here before it is stored or compared.
    """
    if value is None:
        raise ValueError("station id is missing")

    if isinstance(value, bool):
        raise ValueError(f"invalid station id: {value!r}")

    if isinstance(value, float):
        if math.isnan(value):
            raise ValueError("station id is NaN")
        if value.is_integer():
            return StationKey(str(int(value)))
        return StationKey(repr(value))

    if isinstance(value, int):
        return StationKey(str(value))

    s = str(value).strip()
    if not s:
        raise ValueError("station id is empty")

    # "123.0" from a float-typed CSV column
    if s.endswith(".0") and s[:-2].isdigit():
        s = s[:-2]

    return StationKey(s)


def minute_of_day(ts: Optional[datetime]) -> Optional[int]:
    if ts is None:
        return None
    try:
        return int(ts.hour) * 60 + int(ts.minute)
    except (AttributeError, TypeError, ValueError):
        return None


@dataclass(frozen=True)
class Trip:
    """
    One ride. start_minute / end_minute are the bucketing keys and are
    computed once here; they are None when the timestamp is unusable.
    """
    start_station_id: StationKey
    end_station_id: StationKey
    started_at: Optional[datetime]
    ended_at: Optional[datetime]
    start_minute: Optional[int] = field(init=False, repr=False, compare=False)
    end_minute: Optional[int] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "start_minute", minute_of_day(self.started_at))
        object.__setattr__(self, "end_minute", minute_of_day(self.ended_at))


@dataclass(frozen=True)
class Station:
    station_id: StationKey
    name: str = ""
    lat: float = 0.0
    lon: float = 0.0
    capacity: Optional[int] = None
    extra: Dict[str, Any] = field(default_factory=dict, compare=False)

    # query annotations, replaced on every call
    departures: int = 0
    arrivals: int = 0
    total_traffic: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "station_id": self.station_id,
            "name": self.name,
            "lat": self.lat,
            "lon": self.lon,
            "capacity": self.capacity,
            "departures": self.departures,
            "arrivals": self.arrivals,
            "total_traffic": self.total_traffic,
        }
