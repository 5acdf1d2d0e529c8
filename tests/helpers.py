from __future__ import annotations

import random
from datetime import datetime, timedelta

from bikeflow.traffic.types import Station, Trip, station_key

DAY = datetime(2024, 3, 1)


def at(minute: int) -> datetime:
    return DAY + timedelta(minutes=minute)


def trip(start: str, end: str, start_min: int, end_min: int) -> Trip:
    return Trip(
        start_station_id=station_key(start),
        end_station_id=station_key(end),
        started_at=at(start_min),
        ended_at=at(end_min),
    )


def station(sid: str, name: str = "") -> Station:
    return Station(station_id=station_key(sid), name=name or f"Station {sid}", lat=42.36, lon=-71.09)


def random_trips(n: int, station_ids: list[str], seed: int = 7) -> list[Trip]:
    rng = random.Random(seed)
    out = []
    for _ in range(n):
        s0 = rng.choice(station_ids)
        s1 = rng.choice(station_ids)
        t0 = rng.randrange(1440)
        t1 = (t0 + rng.randrange(1, 90)) % 1440
        out.append(trip(s0, s1, t0, t1))
    return out
