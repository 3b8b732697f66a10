import argparse
import logging
import sys

from trail_engine.parser import parse_gpx
from trail_engine.probe import ChartLayout, probe
from trail_engine.profile import build_profile


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Summarize the elevation profile of a GPX hiking track."
    )
    parser.add_argument("gpx_file", help="Path to GPX file")
    parser.add_argument(
        "--probe-x",
        type=float,
        default=None,
        help="Report the track sample under this chart x position (0-800 viewBox units)",
    )
    parser.add_argument(
        "--png",
        default=None,
        help="Write a rendered profile chart to this path",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        points = parse_gpx(args.gpx_file)
    except FileNotFoundError:
        print(f"Error: File not found: {args.gpx_file}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Error parsing GPX file: {e}", file=sys.stderr)
        sys.exit(1)

    profile = build_profile(points)

    print("=== Track Profile ===")
    if profile is None:
        print("No track data available.")
        return

    print(f"Points:         {profile.point_count}")
    print(f"Distance:       {profile.total_distance:.2f} km")
    print(f"Min Elevation:  {profile.min_elevation:.0f} m")
    print(f"Max Elevation:  {profile.max_elevation:.0f} m")
    print(f"Elevation Diff: {profile.elevation_difference:.0f} m")
    print(f"Elevation Gain: {profile.total_gain:.0f} m")
    print(f"Elevation Loss: {profile.total_loss:.0f} m")
    print(f"Shape:          {profile.route_shape}")
    if profile.point_count > 1:
        steepest = max(profile.slopes, key=abs)
        print(f"Steepest Grade: {steepest:.1f}%")

    if args.probe_x is not None:
        result = probe(profile, ChartLayout(), args.probe_x)
        if result is None:
            print("Probe:          outside chart")
        else:
            print(
                f"Probe:          #{result.nearest_index} at {result.interpolated_distance:.2f} km, "
                f"{result.interpolated_elevation:.0f} m"
            )

    if args.png:
        from trail_engine.charts import generate_profile_image

        with open(args.png, "wb") as f:
            f.write(generate_profile_image(profile))
        print(f"Chart written to {args.png}")
