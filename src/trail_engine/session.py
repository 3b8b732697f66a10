"""Event-loop wiring for the map and profile views.

The host UI feeds events (viewport changes, pointer moves, hover) into
these objects and reads back what to draw. Everything runs on the UI
thread; no locking is needed.
"""

import logging
import time
from typing import Callable, Generic, Sequence, TypeVar

from trail_engine.clustering import ClusterResult, Projection, RenderPlan, cluster_markers, render_markers, usable_markers
from trail_engine.config import get_setting, load_config
from trail_engine.distance import closest_track_point
from trail_engine.models import Cluster, ProbeResult, RouteMarker, TrackPoint, TrackProfile, Waypoint, ViewportState
from trail_engine.probe import ChartLayout, HighlightState, PlacedWaypoint, ProfileProbe
from trail_engine.profile import ProfileCache
from trail_engine.viewport import Debouncer, visible_markers

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MapSession(Generic[T]):
    """Overview map state: markers, clusters and the viewport-filtered list.

    Clustering is recomputed immediately on every marker or viewport change
    because it feeds the frame being drawn. The list filter is debounced so
    continuous panning does not churn the list.
    """

    def __init__(
        self,
        markers: Sequence[RouteMarker[T]] = (),
        project: Projection | None = None,
        cluster_radius: float | None = None,
        debounce_s: float | None = None,
        margin: float | None = None,
        aspect: float | None = None,
        on_visible_change: Callable[[list[RouteMarker[T]]], None] | None = None,
        clock: Callable[[], float] = time.monotonic,
        config: dict | None = None,
    ):
        if config is None:
            config = load_config()
        self.cluster_radius = cluster_radius if cluster_radius is not None else get_setting("cluster_radius_px", config)
        self.margin = margin if margin is not None else get_setting("viewport_margin", config)
        self.aspect = aspect if aspect is not None else get_setting("viewport_aspect", config)
        if debounce_s is None:
            debounce_s = get_setting("debounce_ms", config) / 1000
        self.on_visible_change = on_visible_change

        self.markers: list[RouteMarker[T]] = usable_markers(markers)
        self.project = project
        self.viewport: ViewportState | None = None
        self.clusters: ClusterResult[T] = ClusterResult()
        self.visible: list[RouteMarker[T]] = list(self.markers)
        self.hovered_id: str | None = None
        self.selected: Cluster[T] | RouteMarker[T] | None = None
        self._debouncer = Debouncer(debounce_s, self._apply_visible, clock=clock)

        self.recompute()

    def recompute(self) -> ClusterResult[T]:
        self.clusters = cluster_markers(self.markers, self.project, self.cluster_radius)
        return self.clusters

    def set_markers(self, markers: Sequence[RouteMarker[T]]) -> ClusterResult[T]:
        self.markers = usable_markers(markers)
        self._debouncer.call(self.viewport)
        return self.recompute()

    def set_projection(self, project: Projection | None) -> ClusterResult[T]:
        self.project = project
        return self.recompute()

    def update_viewport(self, viewport: ViewportState, project: Projection | None = None) -> ClusterResult[T]:
        """Handle a pan/zoom tick."""
        self.viewport = viewport
        if project is not None:
            self.project = project
        self._debouncer.call(viewport)
        return self.recompute()

    def tick(self) -> bool:
        """Give the pending list update a chance to run."""
        return self._debouncer.poll()

    def flush(self) -> None:
        self._debouncer.flush()

    def _apply_visible(self, viewport: ViewportState | None) -> None:
        self.visible = visible_markers(self.markers, viewport, self.margin, self.aspect)
        logger.debug("Visible list updated: %d of %d routes", len(self.visible), len(self.markers))
        if self.on_visible_change is not None:
            self.on_visible_change(self.visible)

    def hover(self, marker_id: str | None) -> None:
        self.hovered_id = marker_id

    def render(self) -> RenderPlan[T]:
        return render_markers(self.clusters, self.hovered_id)

    def select(self, item: Cluster[T] | RouteMarker[T] | None) -> None:
        self.selected = item

    def clear_selection(self) -> None:
        self.selected = None


class TrackSession:
    """Route detail state: the track's profile and the shared highlight."""

    def __init__(
        self,
        points: Sequence[TrackPoint],
        waypoints: Sequence[Waypoint] = (),
        layout: ChartLayout | None = None,
        config: dict | None = None,
    ):
        if layout is None:
            layout = ChartLayout.from_config(load_config() if config is None else config)
        self._cache = ProfileCache()
        self.layout = layout
        self.highlight = HighlightState()
        self.waypoints = list(waypoints)
        self.points = points
        self.probe: ProfileProbe | None = None
        self.set_track(points)

    @property
    def profile(self) -> TrackProfile | None:
        return self._cache.get(self.points)

    def set_track(self, points: Sequence[TrackPoint]) -> None:
        self.points = points
        profile = self.profile
        self.probe = ProfileProbe(profile, self.layout, self.highlight) if profile else None
        self.highlight.set_pointer(None)
        self.highlight.set_external(None)

    def pointer_move(self, svg_x: float) -> ProbeResult | None:
        if self.probe is None:
            return None
        return self.probe.move(svg_x)

    def pointer_leave(self) -> None:
        if self.probe is not None:
            self.probe.leave()

    def map_hover(self, lat: float | None, lng: float | None, zoom: float | None = None) -> int | None:
        """Cursor moved on the map; None coordinates mean it left the track."""
        if lat is None or lng is None:
            index = None
        else:
            index = closest_track_point(self.points, lat, lng, zoom)
        self.highlight.set_external(index)
        return index

    @property
    def highlighted_index(self) -> int | None:
        return self.highlight.index

    def placed_waypoints(self) -> list[PlacedWaypoint]:
        if self.probe is None:
            return []
        return self.probe.waypoints(self.waypoints)
