"""Elevation profile data calculation for a track."""

import logging
from typing import Sequence

from trail_engine.colors import slope_color
from trail_engine.distance import haversine_km, slope_percent
from trail_engine.models import TrackPoint, TrackProfile

logger = logging.getLogger(__name__)

# Endpoints closer than this (km) make a loop
CIRCULAR_ROUTE_THRESHOLD_KM = 0.1


def calculate_elevation_changes(elevations: Sequence[float]) -> tuple[float, float]:
    """Sum positive and negative elevation deltas.

    Returns (gain, loss) in meters, both as non-negative numbers.
    """
    gain = 0.0
    loss = 0.0
    for prev, curr in zip(elevations, elevations[1:]):
        diff = curr - prev
        if diff > 0:
            gain += diff
        else:
            loss -= diff
    return gain, loss


def route_shape(points: Sequence[TrackPoint]) -> str:
    """Classify a track as "circular" or "point-to-point" by its endpoints."""
    if len(points) < 2:
        return "point-to-point"
    first, last = points[0], points[-1]
    if haversine_km(first.lat, first.lng, last.lat, last.lng) < CIRCULAR_ROUTE_THRESHOLD_KM:
        return "circular"
    return "point-to-point"


def build_profile(points: Sequence[TrackPoint]) -> TrackProfile | None:
    """Derive cumulative distances, slopes and summary stats from a track.

    A single forward pass over consecutive pairs. Segment i (between
    points i and i+1) is colored by slopes[i + 1], the grade of the
    segment ending at point i + 1.

    Returns None for an empty track; a one-point track gives a profile with
    zero distance and no segments.
    """
    if not points:
        return None

    elevations = [pt.elevation for pt in points]
    cum_dist = [0.0]
    slopes = [0.0]
    colors = []

    for prev, curr in zip(points, points[1:]):
        cum_dist.append(cum_dist[-1] + haversine_km(prev.lat, prev.lng, curr.lat, curr.lng))
        slope = slope_percent(
            prev.lat, prev.lng, prev.elevation,
            curr.lat, curr.lng, curr.elevation,
        )
        slopes.append(slope)
        colors.append(slope_color(slope))

    gain, loss = calculate_elevation_changes(elevations)
    profile = TrackProfile(
        elevations=elevations,
        cumulative_distances=cum_dist,
        slopes=slopes,
        segment_colors=colors,
        min_elevation=min(elevations),
        max_elevation=max(elevations),
        total_distance=cum_dist[-1],
        total_gain=gain,
        total_loss=loss,
        route_shape=route_shape(points),
    )
    logger.debug(
        "Built profile: %d points, %.2f km, %.0f m gain",
        len(points), profile.total_distance, gain,
    )
    return profile


class ProfileCache:
    """Remembers the profile of the last track it was given.

    Tracks are immutable once loaded, so a profile is reused for as long
    as the caller keeps passing the same sequence object.
    """

    def __init__(self):
        self._source: Sequence[TrackPoint] | None = None
        self._profile: TrackProfile | None = None
        self.hits = 0
        self.misses = 0

    def get(self, points: Sequence[TrackPoint]) -> TrackProfile | None:
        if self._source is not None and points is self._source:
            self.hits += 1
            return self._profile
        self.misses += 1
        self._source = points
        self._profile = build_profile(points)
        return self._profile

    def clear(self) -> None:
        self._source = None
        self._profile = None
