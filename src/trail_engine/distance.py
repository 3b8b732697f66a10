"""Great-circle distance and slope calculations.

Haversine is accurate enough for trail lengths (< 0.5% error) and needs no
ellipsoid model.
"""

from __future__ import annotations
import math
from typing import TYPE_CHECKING, Sequence

if TYPE_CHECKING:
    from trail_engine.models import TrackPoint

# Earth's mean radius in kilometers
EARTH_RADIUS_KM = 6371.0

# Map hover tolerance in meters, by minimum zoom level (highest first)
HOVER_THRESHOLDS_M = [(14, 50.0), (11, 100.0)]
DEFAULT_HOVER_THRESHOLD_M = 200.0


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Calculate distance between two points using the Haversine formula.

    Uses the atan2 form with the intermediate term clamped to [0, 1], so
    antipodal and near-coincident points never hit a sqrt domain error.

    Args:
        lat1, lng1: First point coordinates in degrees
        lat2, lng2: Second point coordinates in degrees

    Returns:
        Distance in kilometers
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlng = math.radians(lng2 - lng1)

    a = math.sin(dlat / 2) ** 2 + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlng / 2) ** 2
    a = min(1.0, max(0.0, a))
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def slope_percent(
    lat1: float, lng1: float, elev1: float,
    lat2: float, lng2: float, elev2: float,
) -> float:
    """Grade in percent between two points (positive = uphill).

    Coincident fixes have no horizontal run, so their slope is 0.
    """
    distance = haversine_km(lat1, lng1, lat2, lng2)
    if distance == 0:
        return 0.0
    return (elev2 - elev1) / (distance * 1000) * 100


def hover_threshold_m(zoom: float | None) -> float:
    """Maximum cursor-to-track distance that still counts as hovering the track."""
    if zoom:
        for min_zoom, threshold in HOVER_THRESHOLDS_M:
            if zoom >= min_zoom:
                return threshold
    return DEFAULT_HOVER_THRESHOLD_M


def closest_track_point(
    points: Sequence[TrackPoint], lat: float, lng: float, zoom: float | None = None
) -> int | None:
    """Index of the track sample nearest to a map cursor position.

    Returns None when the track is empty or the nearest sample is further
    away than the zoom-dependent hover threshold.
    """
    if not points:
        return None

    closest_idx = 0
    min_dist = math.inf
    for i, pt in enumerate(points):
        d = haversine_km(pt.lat, pt.lng, lat, lng) * 1000
        if d < min_dist:
            min_dist = d
            closest_idx = i

    if min_dist <= hover_threshold_m(zoom):
        return closest_idx
    return None
