# bikeflow/util/trips.py
from __future__ import annotations

import logging
from pathlib import Path
from typing import List

import pandas as pd

from bikeflow.traffic.types import Trip, station_key

logger = logging.getLogger(__name__)


REQUIRED_COLUMNS = ("start_station_id", "end_station_id", "started_at", "ended_at")


def _to_datetime(value):
    if pd.isna(value):
        return None
    return value.to_pydatetime()


def load_trips_csv(trips_csv: str | Path) -> List[Trip]:
    """
    Loads a Bluebikes-style trips CSV with columns:

      ride_id, rideable_type, started_at, ended_at,
      start_station_id, end_station_id, ...

    Returns Trip records. Unparsable timestamps become None (the bucket
    index skips those trips); rows without both station ids are dropped.
    """
    trips_csv = Path(trips_csv)
    if not trips_csv.exists():
        raise ValueError(f"Trips file not found: {trips_csv}")

    df = pd.read_csv(
        trips_csv,
        dtype={"start_station_id": str, "end_station_id": str},
        encoding="utf-8-sig",
    )
    df.columns = [c.strip() for c in df.columns]

    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Trips CSV missing columns: {', '.join(missing)}")

    started = pd.to_datetime(df["started_at"], errors="coerce")
    ended = pd.to_datetime(df["ended_at"], errors="coerce")

    bad_times = int((started.isna() | ended.isna()).sum())
    if bad_times:
        logger.warning("%d trips have unparsable timestamps", bad_times)

    trips: List[Trip] = []
    dropped = 0
    for s0, s1, t0, t1 in zip(df["start_station_id"], df["end_station_id"], started, ended):
        try:
            k0 = station_key(None if pd.isna(s0) else s0)
            k1 = station_key(None if pd.isna(s1) else s1)
        except ValueError:
            dropped += 1
            continue

        trips.append(
            Trip(
                start_station_id=k0,
                end_station_id=k1,
                started_at=_to_datetime(t0),
                ended_at=_to_datetime(t1),
            )
        )

    if dropped:
        logger.warning("Dropped %d trips without start/end station ids", dropped)
    logger.info("Loaded %d trips from %s", len(trips), trips_csv)

    return trips
