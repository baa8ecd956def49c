"""Command-line entry point.

    globeclock sun [--at ISO]
    globeclock where --lat LAT --lon LON [--at ISO]
    globeclock click X Y Z [--at ISO]
"""

import argparse
import json
import logging
import sys

from dotenv import load_dotenv

load_dotenv()

from globeclock.clock import parse_instant, system_clock  # noqa: E402
from globeclock.config import ConfigError, Settings, load_settings  # noqa: E402
from globeclock.logging_config import setup_logging  # noqa: E402
from globeclock.models import GeoCoordinate  # noqa: E402
from globeclock.pipeline import resolve_click  # noqa: E402
from globeclock.projection import geo_to_point  # noqa: E402
from globeclock.sun import solar_declination_deg, sun_direction  # noqa: E402
from globeclock.timezones import DatasetError, TimezoneIndex, load_timezone_index  # noqa: E402

logger = logging.getLogger("globeclock.cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="globeclock",
        description="Sun direction and local time for points on the globe.",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail instead of falling back to GMT when the timezone dataset cannot be loaded",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sun = sub.add_parser("sun", help="Print the sun direction vector")
    sun.add_argument("--at", help="UTC instant (ISO 8601); defaults to now")

    where = sub.add_parser("where", help="Local time at a latitude/longitude")
    where.add_argument("--lat", type=float, required=True)
    where.add_argument("--lon", type=float, required=True)
    where.add_argument("--at", help="UTC instant (ISO 8601); defaults to now")

    click = sub.add_parser("click", help="Local time at a 3D hit point on the globe")
    click.add_argument("point", type=float, nargs=3, metavar=("X", "Y", "Z"))
    click.add_argument("--at", help="UTC instant (ISO 8601); defaults to now")

    return parser


def _load_index(settings: Settings, strict: bool) -> TimezoneIndex | None:
    try:
        return load_timezone_index(
            settings.timezones_source,
            zone_property=settings.zone_property,
            timeout=settings.http_timeout,
        )
    except DatasetError as e:
        if strict:
            raise
        logger.error("%s; every location will resolve as GMT", e)
        return None


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        settings = load_settings()
    except ConfigError as e:
        print(f"globeclock: {e}", file=sys.stderr)
        return 2

    setup_logging(settings.log_level)

    try:
        now = parse_instant(args.at) if args.at else system_clock()
    except ValueError as e:
        print(f"globeclock: bad --at value: {e}", file=sys.stderr)
        return 2

    if args.command == "sun":
        direction = sun_direction(now)
        output = {
            "at": now.isoformat(),
            "declination": solar_declination_deg(now),
            "direction": list(direction.as_tuple()),
        }
        print(json.dumps(output, indent=2))
        return 0

    try:
        index = _load_index(settings, args.strict)
    except DatasetError as e:
        logger.error("%s", e)
        return 1

    if args.command == "where":
        point = geo_to_point(
            GeoCoordinate(latitude=args.lat, longitude=args.lon),
            settings.earth_radius,
            settings.axial_tilt_rad,
        )
    else:
        point = tuple(args.point)

    result = resolve_click(point, settings.earth_radius, settings.axial_tilt_rad, index, now)
    if result is None:
        logger.error("No location resolved for point %s", point)
        return 1
    print(json.dumps(result.as_payload(), indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
