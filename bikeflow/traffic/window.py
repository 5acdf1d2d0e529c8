# bikeflow/traffic/window.py
from __future__ import annotations

import numbers
from typing import List, Sequence, Tuple

from bikeflow.traffic.types import MINUTES_PER_DAY, UNFILTERED, WINDOW_HALF_WIDTH, Trip


def validate_time_filter(value) -> int:
    """
    Accepts UNFILTERED (-1) or a minute of day in [0, 1439].

    Anything else raises ValueError. Values are never clamped or wrapped,
    so 1500 is an error rather than a window around 01:00.
    """
    if isinstance(value, bool):
        raise ValueError(f"time filter must be an integer, got {value!r}")

    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"time filter must be a whole minute, got {value!r}")
        value = int(value)

    if not isinstance(value, numbers.Integral):
        raise ValueError(f"time filter must be an integer, got {value!r}")

    value = int(value)
    if value != UNFILTERED and not (0 <= value < MINUTES_PER_DAY):
        raise ValueError(
            f"time filter must be {UNFILTERED} or in [0, {MINUTES_PER_DAY - 1}], got {value}"
        )

    return value


def window_bounds(minute: int) -> Tuple[int, int]:
    """
    Half-open circular window [lo, hi) of 2 * WINDOW_HALF_WIDTH minutes
    centred on minute. lo > hi means the window crosses midnight.
    """
    lo = (minute - WINDOW_HALF_WIDTH + MINUTES_PER_DAY) % MINUTES_PER_DAY
    hi = (minute + WINDOW_HALF_WIDTH) % MINUTES_PER_DAY
    return lo, hi


def window_minutes(minute: int) -> List[int]:
    """Bucket indices visited for minute, in visiting order."""
    if minute == UNFILTERED:
        return list(range(MINUTES_PER_DAY))

    lo, hi = window_bounds(minute)
    if lo > hi:
        # before midnight first, then after
        return list(range(lo, MINUTES_PER_DAY)) + list(range(0, hi))
    return list(range(lo, hi))


def select_window(buckets: Sequence[Sequence[Trip]], minute: int) -> List[Trip]:
    """
    Flatten the buckets that fall inside the window around minute.

    minute == UNFILTERED returns every trip once, bucket by bucket.
    Cost is proportional to the trips in the window, not the whole day.
    """
    if len(buckets) != MINUTES_PER_DAY:
        raise ValueError(f"expected {MINUTES_PER_DAY} buckets, got {len(buckets)}")

    out: List[Trip] = []
    for m in window_minutes(minute):
        out.extend(buckets[m])
    return out
