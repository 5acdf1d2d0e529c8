# bikeflow/traffic/buckets.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Tuple

from tqdm import tqdm

from bikeflow.traffic.types import MINUTES_PER_DAY, Trip

logger = logging.getLogger(__name__)


Buckets = Tuple[Tuple[Trip, ...], ...]


@dataclass(frozen=True)
class MinuteBucketIndex:
    """
    departures[m]: trips that started at minute-of-day m
    arrivals[m]:   trips that ended at minute-of-day m

    Both have exactly MINUTES_PER_DAY buckets. Built once by
    build_bucket_index and never modified afterwards.
    """
    departures: Buckets
    arrivals: Buckets
    trip_count: int
    skipped: int = 0

    def bucket_sizes(self, side: str = "departures") -> List[int]:
        if side == "departures":
            buckets = self.departures
        elif side == "arrivals":
            buckets = self.arrivals
        else:
            raise ValueError(f"side must be 'departures' or 'arrivals', got {side!r}")
        return [len(b) for b in buckets]


def build_bucket_index(trips: Iterable[Trip], *, progress: bool = False) -> MinuteBucketIndex:
    """
    Single O(n) pass over trips. A trip goes into one departure bucket
    (start_minute) and one arrival bucket (end_minute), or into neither
    when either timestamp could not be parsed.
    """
    departures: List[List[Trip]] = [[] for _ in range(MINUTES_PER_DAY)]
    arrivals: List[List[Trip]] = [[] for _ in range(MINUTES_PER_DAY)]

    it = trips
    if progress:
        it = tqdm(trips, desc="Bucketing trips", unit="trip")

    placed = 0
    skipped = 0
    for trip in it:
        start_min = trip.start_minute
        end_min = trip.end_minute
        if start_min is None or end_min is None:
            skipped += 1
            continue

        departures[start_min].append(trip)
        arrivals[end_min].append(trip)
        placed += 1

    if skipped:
        logger.warning("Skipped %d trips with unusable timestamps", skipped)
    logger.info("Bucketed %d trips into %d minute buckets", placed, MINUTES_PER_DAY)

    return MinuteBucketIndex(
        departures=tuple(tuple(b) for b in departures),
        arrivals=tuple(tuple(b) for b in arrivals),
        trip_count=placed,
        skipped=skipped,
    )
