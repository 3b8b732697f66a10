import gpxpy

from trail_engine.models import TrackPoint


def _to_track_points(gpx) -> list[TrackPoint]:
    points: list[TrackPoint] = []
    for track in gpx.tracks:
        for segment in track.segments:
            for pt in segment.points:
                points.append(TrackPoint(lat=pt.latitude, lng=pt.longitude, elevation=pt.elevation or 0.0))

    # Route-only files carry their geometry as rtept
    if not points:
        for route in gpx.routes:
            for pt in route.points:
                points.append(TrackPoint(lat=pt.latitude, lng=pt.longitude, elevation=pt.elevation or 0.0))
    return points


def parse_gpx_string(content: str) -> tuple[str | None, list[TrackPoint]]:
    """Parse GPX XML and return (name, points). Missing elevations become 0."""
    gpx = gpxpy.parse(content)
    name = gpx.name
    if not name and gpx.tracks:
        name = gpx.tracks[0].name
    if not name and gpx.routes:
        name = gpx.routes[0].name
    return name, _to_track_points(gpx)


def parse_gpx(filepath: str) -> list[TrackPoint]:
    """Parse a GPX file and return a list of TrackPoints."""
    with open(filepath, "r") as f:
        gpx = gpxpy.parse(f)
    return _to_track_points(gpx)
