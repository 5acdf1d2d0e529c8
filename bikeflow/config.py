"""Environment-driven configuration for the station traffic viewer."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from bikeflow.traffic.types import UNFILTERED
from bikeflow.traffic.window import validate_time_filter
from bikeflow.util.stations import KEY_FIELDS

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


@dataclass(frozen=True)
class ViewerConfig:
    """Settings for loading data and serving traffic queries."""

    trips_csv: str
    stations_json: str
    station_key: str
    host: str
    port: int
    log_level: str
    default_time: int


def _int_env(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from exc


def load_config(env: Optional[Mapping[str, str]] = None) -> ViewerConfig:
    """Build a ViewerConfig from environment variables (os.environ by default)."""
    if env is None:
        env = os.environ

    station_key = env.get("STATION_KEY", "station_id").strip()
    if station_key not in KEY_FIELDS:
        raise ValueError(f"STATION_KEY must be one of {KEY_FIELDS}, got {station_key!r}")

    log_level = env.get("LOG_LEVEL", "INFO").strip().upper()
    if log_level not in LOG_LEVELS:
        raise ValueError(f"LOG_LEVEL must be one of {LOG_LEVELS}, got {log_level!r}")

    return ViewerConfig(
        trips_csv=env.get("TRIPS_CSV", "bluebikes-traffic-2024-03.csv"),
        stations_json=env.get("STATIONS_JSON", "bluebikes-stations.json"),
        station_key=station_key,
        host=env.get("HOST", "127.0.0.1"),
        port=_int_env(env, "PORT", 8080),
        log_level=log_level,
        default_time=validate_time_filter(_int_env(env, "DEFAULT_TIME", UNFILTERED)),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
