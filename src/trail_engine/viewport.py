"""Approximate viewport membership for keeping the route list in sync with the map.

No real projection math is done here: the visible rectangle is estimated
from the zoom level alone, then padded by a margin so markers near the
edge still count as visible.
"""

import math
import time
from typing import Callable, Protocol, Sequence, TypeVar

from trail_engine.clustering import ScreenPoint
from trail_engine.config import DEFAULTS
from trail_engine.models import ViewportState

T = TypeVar("T")

VIEWPORT_MARGIN = DEFAULTS["viewport_margin"]
VIEWPORT_ASPECT = DEFAULTS["viewport_aspect"]

# Zoom used when fitting a track to the detail map
FIT_PADDING = 1.2
FIT_MIN_ZOOM = 8
FIT_MAX_ZOOM = 16

# Popup placement thresholds, as fractions of the visible ranges
POPUP_LAT_FRACTION = 0.08
POPUP_LNG_FRACTION = 0.35

MERCATOR_MAX_LAT = 85.051129
TILE_SIZE = 512


class HasLatLng(Protocol):
    lat: float
    lng: float


def visible_ranges(
    zoom: float, margin: float = VIEWPORT_MARGIN, aspect: float = VIEWPORT_ASPECT
) -> tuple[float, float]:
    """Approximate (lat_range, lng_range) in degrees shown at ``zoom``."""
    lat_range = 180 / 2 ** zoom * margin
    lng_range = 360 / 2 ** zoom * aspect * margin
    return lat_range, lng_range


def is_visible(
    point: HasLatLng,
    viewport: ViewportState,
    margin: float = VIEWPORT_MARGIN,
    aspect: float = VIEWPORT_ASPECT,
) -> bool:
    """Whether a point falls inside the estimated visible rectangle (inclusive)."""
    lat_range, lng_range = visible_ranges(viewport.zoom, margin, aspect)
    return (
        abs(point.lat - viewport.center_lat) <= lat_range / 2
        and abs(point.lng - viewport.center_lng) <= lng_range / 2
    )


def visible_markers(
    markers: Sequence[T],
    viewport: ViewportState | None,
    margin: float = VIEWPORT_MARGIN,
    aspect: float = VIEWPORT_ASPECT,
) -> list[T]:
    """Markers inside the viewport, in input order. No viewport yet means all of them."""
    if viewport is None:
        return list(markers)
    return [m for m in markers if is_visible(m, viewport, margin, aspect)]


class Debouncer:
    """Run a callback once events stop arriving for ``delay`` seconds.

    Only one call is ever pending: each new call() replaces the pending
    arguments and restarts the wait. The host event loop calls poll() on
    each tick; nothing fires on its own.
    """

    def __init__(self, delay: float, callback: Callable[..., None],
                 clock: Callable[[], float] = time.monotonic):
        if delay <= 0:
            raise ValueError(f"Debounce delay must be positive, got {delay}")
        self.delay = delay
        self.callback = callback
        self.clock = clock
        self._pending: tuple[tuple, dict] | None = None
        self._deadline: float | None = None

    @property
    def pending(self) -> bool:
        return self._pending is not None

    def call(self, *args, **kwargs) -> None:
        self._pending = (args, kwargs)
        self._deadline = self.clock() + self.delay

    def poll(self) -> bool:
        """Fire the pending call if its delay has elapsed. Returns True if it fired."""
        if self._pending is None or self.clock() < self._deadline:
            return False
        self.flush()
        return True

    def flush(self) -> None:
        """Fire the pending call now, if any."""
        if self._pending is None:
            return
        args, kwargs = self._pending
        self.cancel()
        self.callback(*args, **kwargs)

    def cancel(self) -> None:
        self._pending = None
        self._deadline = None


def fit_view(points: Sequence[HasLatLng]) -> ViewportState | None:
    """Center and zoom so that all points fit the detail map.

    The bounding box is padded by FIT_PADDING and the zoom clamped to
    [FIT_MIN_ZOOM, FIT_MAX_ZOOM]. A box with no extent uses the max zoom.
    """
    if not points:
        return None
    lats = [p.lat for p in points]
    lngs = [p.lng for p in points]
    min_lat, max_lat = min(lats), max(lats)
    min_lng, max_lng = min(lngs), max(lngs)

    zooms = []
    for diff in (max_lat - min_lat, max_lng - min_lng):
        if diff > 0:
            zooms.append(math.log2(360 / (diff * FIT_PADDING)))
    zoom = math.floor(min(zooms)) if zooms else FIT_MAX_ZOOM
    zoom = max(FIT_MIN_ZOOM, min(FIT_MAX_ZOOM, zoom))

    return ViewportState(
        center_lat=(min_lat + max_lat) / 2,
        center_lng=(min_lng + max_lng) / 2,
        zoom=zoom,
    )


def popup_anchor(point: HasLatLng, viewport: ViewportState) -> str:
    """Which side of the marker a popup attaches to so it stays on screen.

    Mapbox semantics: "top" means the popup hangs below the marker.
    """
    lat_range = 180 / 2 ** viewport.zoom
    lat_offset = point.lat - viewport.center_lat
    threshold = lat_range * POPUP_LAT_FRACTION

    if lat_offset > threshold:
        return "top"
    if lat_offset < -threshold:
        return "bottom"

    lng_range = 360 / 2 ** viewport.zoom
    lng_offset = point.lng - viewport.center_lng
    if abs(lng_offset) > lng_range * POPUP_LNG_FRACTION:
        return "left" if lng_offset < 0 else "right"
    return "bottom"


def _mercator_world(lat: float, lng: float, world_size: float) -> tuple[float, float]:
    lat = max(-MERCATOR_MAX_LAT, min(MERCATOR_MAX_LAT, lat))
    x = (lng + 180) / 360 * world_size
    lat_rad = math.radians(lat)
    y = (1 - math.log(math.tan(lat_rad) + 1 / math.cos(lat_rad)) / math.pi) / 2 * world_size
    return x, y


def web_mercator_projection(
    viewport: ViewportState, width_px: float, height_px: float, tile_size: float = TILE_SIZE
) -> Callable[[float, float], ScreenPoint]:
    """Build a (lat, lng) -> screen pixel function for a Web Mercator map.

    Stands in for the map surface's own project() when clustering outside
    a browser.
    """
    world_size = tile_size * 2 ** viewport.zoom
    cx, cy = _mercator_world(viewport.center_lat, viewport.center_lng, world_size)

    def project(lat: float, lng: float) -> ScreenPoint:
        x, y = _mercator_world(lat, lng, world_size)
        return ScreenPoint(x - cx + width_px / 2, y - cy + height_px / 2)

    return project
