# bikeflow/server.py
import logging
import threading

from flask import Flask, jsonify, request

from bikeflow.traffic.aggregate import departure_ratio
from bikeflow.traffic.buckets import build_bucket_index
from bikeflow.traffic.query import StationTraffic, summarize, validate_station_keys
from bikeflow.traffic.types import UNFILTERED
from bikeflow.util.stations import load_stations
from bikeflow.util.trips import load_trips_csv

logger = logging.getLogger(__name__)


def format_time(minutes):
    """540 -> '9:00 AM'; UNFILTERED -> 'any time'"""
    if minutes == UNFILTERED:
        return "any time"
    h, m = divmod(int(minutes), 60)
    suffix = "AM" if h < 12 else "PM"
    return f"{h % 12 or 12}:{m:02d} {suffix}"


def station_json(station):
    out = station.to_dict()
    out["departure_ratio"] = departure_ratio(station)
    return out


class LastTick:
    """
    Memo of the most recent (time_filter, payload) answer.

    The pair is stored and read as one tuple under a lock, so a reader
    never sees a new time_filter with an old payload.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._entry = None

    def get(self, t):
        with self._lock:
            entry = self._entry
        if entry is not None and entry[0] == t:
            return entry[1]
        return None

    def put(self, t, payload):
        with self._lock:
            self._entry = (t, payload)


def create_app(index, stations, *, default_time=UNFILTERED):
    """
    JSON endpoints for a map front-end:

      GET /traffic?t=<minute>   stations annotated for the window around t
      GET /health               dataset sizes

    The most recent answer is memoized so repeated ticks at the same
    slider position are not recomputed.
    """
    traffic = StationTraffic(index)
    last = LastTick()

    app = Flask(__name__)

    @app.route("/traffic")
    def _traffic():
        raw = request.args.get("t")
        if raw is None or raw.strip() == "":
            t_req = default_time
        else:
            try:
                t_req = int(raw)
            except ValueError:
                return jsonify({"error": f"t must be an integer, got {raw!r}"}), 400

        cached = last.get(t_req)
        if cached is not None:
            return jsonify(cached)

        try:
            annotated = traffic.compute_station_traffic(stations, t_req)
        except ValueError as exc:
            return jsonify({"error": str(exc)}), 400

        payload = {
            "time_filter": t_req,
            "label": format_time(t_req),
            "stations": [station_json(s) for s in annotated],
            "summary": summarize(annotated).to_dict(),
        }
        last.put(t_req, payload)
        return jsonify(payload)

    @app.route("/health")
    def _health():
        return jsonify(
            {
                "status": "ok",
                "trips": index.trip_count,
                "stations": len(stations),
                "skipped": index.skipped,
            }
        )

    return app


def load_viewer_data(trips_csv, stations_json, *, key_field="station_id", progress=False):
    """Load both files, build the bucket index once, and check the id schemes agree."""
    stations = load_stations(stations_json, key_field=key_field)
    trips = load_trips_csv(trips_csv)
    index = build_bucket_index(trips, progress=progress)
    validate_station_keys(index, stations)
    return index, stations


def serve_traffic(config, *, debug=False):
    index, stations = load_viewer_data(
        config.trips_csv,
        config.stations_json,
        key_field=config.station_key,
        progress=True,
    )
    logger.info("Serving traffic for %d stations on %s:%d", len(stations), config.host, config.port)

    app = create_app(index, stations, default_time=config.default_time)
    app.run(host=config.host, port=config.port, debug=debug)
