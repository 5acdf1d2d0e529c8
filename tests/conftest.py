from __future__ import annotations

import pytest

from bikeflow.traffic.buckets import build_bucket_index

from helpers import random_trips, station


@pytest.fixture
def stations():
    return [station(str(i)) for i in range(1, 21)]


@pytest.fixture
def trips():
    return random_trips(2000, [str(i) for i in range(1, 21)])


@pytest.fixture
def index(trips):
    return build_bucket_index(trips)
