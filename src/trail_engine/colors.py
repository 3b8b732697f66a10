"""Slope color mapping for the profile chart and the map track line."""

import math
from typing import Sequence

from trail_engine.distance import slope_percent
from trail_engine.models import TrackPoint

GREEN = '#22c55e'     # 0%
YELLOW = '#eab308'    # 5%
ORANGE = '#f97316'    # 10%
RED = '#ef4444'       # 20%
DARK_RED = '#dc2626'  # 30%+

# (lower bound %, upper bound %, start color, end color)
SLOPE_BANDS = [
    (0.0, 5.0, GREEN, YELLOW),
    (5.0, 10.0, YELLOW, ORANGE),
    (10.0, 20.0, ORANGE, RED),
    (20.0, 30.0, RED, DARK_RED),
]

SLOPE_LEGEND = [
    ('Gentle (0-5%)', GREEN),
    ('Moderate (5-10%)', YELLOW),
    ('Steep (10-20%)', ORANGE),
    ('Very steep (>20%)', RED),
]

DEFAULT_TRACK_COLOR = '#3b82f6'


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def interpolate_color(color1: str, color2: str, factor: float) -> str:
    """Linearly interpolate each RGB channel between two hex colors."""
    c1 = int(color1[1:], 16)
    c2 = int(color2[1:], 16)

    r1, g1, b1 = (c1 >> 16) & 255, (c1 >> 8) & 255, c1 & 255
    r2, g2, b2 = (c2 >> 16) & 255, (c2 >> 8) & 255, c2 & 255

    r = _round_half_up(r1 + (r2 - r1) * factor)
    g = _round_half_up(g1 + (g2 - g1) * factor)
    b = _round_half_up(b1 + (b2 - b1) * factor)

    return f'#{(r << 16) | (g << 8) | b:06x}'


def slope_color(slope: float) -> str:
    """Map a slope in percent to a hex color.

    Uphill and downhill grades share a color. Within each band the color
    is interpolated so the track reads as a continuous gradient.
    """
    abs_slope = abs(slope)
    for low, high, start, end in SLOPE_BANDS:
        if abs_slope < high:
            return interpolate_color(start, end, (abs_slope - low) / (high - low))
    return DARK_RED


def segment_features(points: Sequence[TrackPoint], color_by_slope: bool = True) -> list[dict]:
    """Build one GeoJSON LineString feature per track segment.

    Each feature carries a ``color`` property for the map's line layer.
    Tracks with fewer than two points have no segments.
    """
    features = []
    for prev, curr in zip(points, points[1:]):
        color = DEFAULT_TRACK_COLOR
        if color_by_slope:
            color = slope_color(slope_percent(
                prev.lat, prev.lng, prev.elevation,
                curr.lat, curr.lng, curr.elevation,
            ))
        features.append({
            'type': 'Feature',
            'geometry': {
                'type': 'LineString',
                'coordinates': [[prev.lng, prev.lat], [curr.lng, curr.lat]],
            },
            'properties': {'color': color},
        })
    return features
