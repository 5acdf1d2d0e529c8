# main.py
import argparse

from colorama import Fore, Style

from bikeflow.config import configure_logging, load_config
from bikeflow.server import format_time, load_viewer_data
from bikeflow.traffic.query import StationTraffic, summarize
from bikeflow.traffic.types import UNFILTERED
from bikeflow.traffic.window import validate_time_filter


def main():
    cfg = load_config()

    parser = argparse.ArgumentParser(description="Print the busiest stations around a time of day.")
    parser.add_argument("--trips", default=cfg.trips_csv)
    parser.add_argument("--stations", default=cfg.stations_json)
    parser.add_argument("--key", default=cfg.station_key)
    parser.add_argument("--time", type=int, default=cfg.default_time,
                        help="minute of day 0..1439, or -1 for all trips")
    parser.add_argument("--top", type=int, default=10)
    args = parser.parse_args()
    try:
        args.time = validate_time_filter(args.time)
    except ValueError as exc:
        parser.error(str(exc))

    configure_logging(cfg.log_level)

    print(f"{Fore.CYAN}Loading stations and trips…{Style.RESET_ALL}")
    index, stations = load_viewer_data(args.trips, args.stations, key_field=args.key, progress=True)

    traffic = StationTraffic(index)
    annotated = traffic.compute_station_traffic(stations, args.time)
    summary = summarize(annotated, top_n=args.top)
    names = {s.station_id: s.name for s in annotated}

    window = "all day" if args.time == UNFILTERED else f"±60 min around {format_time(args.time)}"
    print(
        f"\n{Fore.GREEN}{summary.departures} departures, {summary.arrivals} arrivals "
        f"at {summary.active_stations} stations ({window}){Style.RESET_ALL}\n"
    )
    for i, (sid, n) in enumerate(summary.busiest, 1):
        print(f"{i:02d}. {n:6d} trips | {sid:>8} | {names.get(sid, '')}")

    if index.skipped:
        print(f"\n{Fore.YELLOW}{index.skipped} trips skipped (bad timestamps){Style.RESET_ALL}")


if __name__ == "__main__":
    main()
