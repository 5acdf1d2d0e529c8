import json
import logging
from pathlib import Path

from bikeflow.traffic.types import Station, station_key

logger = logging.getLogger(__name__)

KEY_FIELDS = ("station_id", "short_name", "legacy_id")


def load_stations(path, key_field="station_id"):
    """
    Load bike share stations from a GBFS station_information.json.

    key_field picks which GBFS field becomes Station.station_id. It has to
    be the same id scheme the trips file uses for start/end stations.
    Stations without that field are skipped.
    """
    if key_field not in KEY_FIELDS:
        raise ValueError(f"key_field must be one of {KEY_FIELDS}, got {key_field!r}")

    path = Path(path)
    if not path.exists():
        raise ValueError(f"Stations file not found: {path}")

    with open(path) as f:
        doc = json.load(f)

    try:
        raw = doc["data"]["stations"]
    except (KeyError, TypeError) as exc:
        raise ValueError(f"{path} is not a GBFS station_information feed") from exc

    stations = []
    skipped = 0
    for s in raw:
        try:
            sid = station_key(s.get(key_field))
        except ValueError:
            skipped += 1
            continue

        cap = s.get("capacity")
        stations.append(
            Station(
                station_id=sid,
                name=s.get("name", ""),
                lat=float(s["lat"]),
                lon=float(s["lon"]),
                capacity=int(cap) if cap is not None else None,
                extra={k: s[k] for k in KEY_FIELDS if k in s and k != key_field},
            )
        )

    if skipped:
        logger.warning("Skipped %d stations without a %s", skipped, key_field)

    return stations
