"""Pointer probing of the elevation profile chart.

Maps a horizontal pointer position over the chart to a track sample and an
elevation interpolated at the exact distance under the pointer. The same
highlighted index can also be driven from the map; see HighlightState.
"""

from bisect import bisect_left
from dataclasses import dataclass
from typing import Callable, Sequence

from trail_engine.config import DEFAULTS
from trail_engine.models import ProbeResult, TrackProfile, Waypoint


@dataclass(frozen=True)
class ChartLayout:
    """Pixel geometry of the profile chart (SVG viewBox units)."""
    width: float = DEFAULTS["chart_width"]
    height: float = DEFAULTS["chart_height"]
    padding_top: float = DEFAULTS["chart_padding_top"]
    padding_right: float = DEFAULTS["chart_padding_right"]
    padding_bottom: float = DEFAULTS["chart_padding_bottom"]
    padding_left: float = DEFAULTS["chart_padding_left"]

    def __post_init__(self):
        if self.chart_width <= 0 or self.chart_height <= 0:
            raise ValueError(
                f"Padding leaves no drawable area in a {self.width}x{self.height} chart"
            )

    @classmethod
    def from_config(cls, config: dict) -> "ChartLayout":
        def get(key: str) -> float:
            return config.get(key, DEFAULTS[key])

        return cls(
            width=get("chart_width"),
            height=get("chart_height"),
            padding_top=get("chart_padding_top"),
            padding_right=get("chart_padding_right"),
            padding_bottom=get("chart_padding_bottom"),
            padding_left=get("chart_padding_left"),
        )

    @property
    def chart_width(self) -> float:
        return self.width - self.padding_left - self.padding_right

    @property
    def chart_height(self) -> float:
        return self.height - self.padding_top - self.padding_bottom


class ProfileScale:
    """Linear distance/elevation to pixel mapping for one profile."""

    def __init__(self, profile: TrackProfile, layout: ChartLayout):
        self.profile = profile
        self.layout = layout
        # A zero-length track collapses onto the left axis
        if profile.total_distance > 0:
            self.scale_x = layout.chart_width / profile.total_distance
        else:
            self.scale_x = 0.0
        self.scale_y = layout.chart_height / profile.elevation_range

    def x(self, distance_km: float) -> float:
        return self.layout.padding_left + distance_km * self.scale_x

    def y(self, elevation: float) -> float:
        return (
            self.layout.padding_top
            + self.layout.chart_height
            - (elevation - self.profile.min_elevation) * self.scale_y
        )

    def distance_at(self, chart_x: float) -> float:
        """Inverse of x() for a position measured from the chart's left edge."""
        if self.scale_x == 0:
            return 0.0
        return chart_x / self.scale_x

    def contains(self, chart_x: float) -> bool:
        return 0 <= chart_x <= self.layout.chart_width


def pointer_to_svg_x(client_x: float, rect_left: float, rect_width: float, view_width: float) -> float:
    """Convert a client-space pointer x into viewBox units of a scaled SVG."""
    if rect_width <= 0:
        return 0.0
    return (client_x - rect_left) / rect_width * view_width


def nearest_index(cumulative_distances: Sequence[float], distance: float) -> int:
    """Index of the sample closest to ``distance``; earliest index wins ties.

    Bisection keeps pointer handling O(log N).
    """
    cd = cumulative_distances
    hi = bisect_left(cd, distance)
    if hi == 0:
        return 0
    if hi == len(cd):
        return bisect_left(cd, cd[-1])
    lo = bisect_left(cd, cd[hi - 1])
    if distance - cd[hi - 1] <= cd[hi] - distance:
        return lo
    return hi


def interpolate_at_distance(profile: TrackProfile, distance: float) -> float | None:
    """Elevation at ``distance`` km by linear interpolation between samples.

    A distance that lands exactly on a sample returns that sample's
    elevation unchanged. Returns None when no pair of samples brackets
    the distance.
    """
    cd = profile.cumulative_distances
    j = bisect_left(cd, distance)
    if j == len(cd):
        return None
    if cd[j] == distance:
        return profile.elevations[j]
    if j == 0:
        return None
    d0, d1 = cd[j - 1], cd[j]
    e0, e1 = profile.elevations[j - 1], profile.elevations[j]
    ratio = (distance - d0) / (d1 - d0)
    return e0 + ratio * (e1 - e0)


def probe_at_distance(profile: TrackProfile, distance: float) -> ProbeResult:
    idx = nearest_index(profile.cumulative_distances, distance)
    elevation = interpolate_at_distance(profile, distance)
    if elevation is None:
        elevation = profile.elevations[idx]
    return ProbeResult(
        nearest_index=idx,
        interpolated_distance=distance,
        interpolated_elevation=elevation,
    )


def probe(profile: TrackProfile, layout: ChartLayout, svg_x: float) -> ProbeResult | None:
    """Resolve a pointer x (viewBox units) to a track sample.

    Returns None when the pointer is outside the plotted rectangle.
    """
    scale = ProfileScale(profile, layout)
    chart_x = svg_x - layout.padding_left
    if not scale.contains(chart_x):
        return None
    return probe_at_distance(profile, scale.distance_at(chart_x))


@dataclass(frozen=True)
class PlacedWaypoint:
    waypoint: Waypoint
    elevation: float
    x: float
    y: float


def place_waypoints(
    profile: TrackProfile, waypoints: Sequence[Waypoint], layout: ChartLayout
) -> list[PlacedWaypoint]:
    """Position waypoints on the chart by their distance along the track.

    Waypoints need not sit on a sample; elevation is interpolated the same
    way the pointer probe does it.
    """
    scale = ProfileScale(profile, layout)
    placed = []
    for wp in waypoints:
        result = probe_at_distance(profile, wp.distance_along_track)
        placed.append(PlacedWaypoint(
            waypoint=wp,
            elevation=result.interpolated_elevation,
            x=scale.x(wp.distance_along_track),
            y=scale.y(result.interpolated_elevation),
        ))
    return placed


def resolve_highlight(pointer_index: int | None, external_index: int | None) -> int | None:
    """The chart's own hover wins; the map's index shows when it is idle."""
    if pointer_index is not None:
        return pointer_index
    return external_index


class HighlightState:
    """Highlighted track index shared between the profile chart and the map.

    The chart writes its pointer hover here and the map writes its own via
    set_external(). Listeners are told about every pointer-driven change,
    including clears, so a bound map view can follow along.
    """

    def __init__(self, on_pointer_change: Callable[[int | None], None] | None = None):
        self.pointer_index: int | None = None
        self.external_index: int | None = None
        self._listeners: list[Callable[[int | None], None]] = []
        if on_pointer_change is not None:
            self._listeners.append(on_pointer_change)

    def subscribe(self, listener: Callable[[int | None], None]) -> None:
        self._listeners.append(listener)

    @property
    def index(self) -> int | None:
        return resolve_highlight(self.pointer_index, self.external_index)

    @property
    def hovering(self) -> bool:
        return self.pointer_index is not None

    def set_pointer(self, index: int | None) -> None:
        self.pointer_index = index
        for listener in self._listeners:
            listener(index)

    def clear_pointer(self) -> None:
        self.set_pointer(None)

    def set_external(self, index: int | None) -> None:
        self.external_index = index


class ProfileProbe:
    """Pointer handling for one rendered profile chart."""

    def __init__(self, profile: TrackProfile, layout: ChartLayout | None = None,
                 highlight: HighlightState | None = None):
        self.profile = profile
        self.layout = layout or ChartLayout()
        self.highlight = highlight or HighlightState()
        self.last_result: ProbeResult | None = None

    def move(self, svg_x: float) -> ProbeResult | None:
        """Handle a pointer move; out-of-chart positions clear the highlight."""
        result = probe(self.profile, self.layout, svg_x)
        self.last_result = result
        self.highlight.set_pointer(result.nearest_index if result else None)
        return result

    def move_client(self, client_x: float, rect_left: float, rect_width: float) -> ProbeResult | None:
        return self.move(pointer_to_svg_x(client_x, rect_left, rect_width, self.layout.width))

    def leave(self) -> None:
        self.last_result = None
        self.highlight.clear_pointer()

    def waypoints(self, waypoints: Sequence[Waypoint]) -> list[PlacedWaypoint]:
        return place_waypoints(self.profile, waypoints, self.layout)
