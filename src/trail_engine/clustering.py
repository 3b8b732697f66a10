"""Screen-space clustering of route markers on the overview map.

Clustering is a presentation refinement: it is recomputed from scratch on
every viewport change and never hides a marker. Markers closer than a pixel
radius on screen are grouped greedily in input order. The grouping is
order-dependent; a grid or quadtree would split differently at
threshold boundaries.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Generic, NamedTuple, Sequence, TypeVar

from trail_engine.config import DEFAULTS
from trail_engine.models import Cluster, RouteMarker

logger = logging.getLogger(__name__)

T = TypeVar("T")

CLUSTER_RADIUS_PX = DEFAULTS["cluster_radius_px"]


class ScreenPoint(NamedTuple):
    x: float
    y: float


# (lat, lng) -> screen pixel; any (x, y) pair is accepted
Projection = Callable[[float, float], tuple[float, float]]


@dataclass
class ClusterResult(Generic[T]):
    clusters: list[Cluster[T]] = field(default_factory=list)
    singles: list[RouteMarker[T]] = field(default_factory=list)


def usable_markers(markers: Sequence[RouteMarker[T]]) -> list[RouteMarker[T]]:
    """Drop markers without real coordinates (missing or 0 lat/lng)."""
    return [m for m in markers if m.lat and m.lng]


def _pixel_distance(a: tuple[float, float], b: tuple[float, float]) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def cluster_markers(
    markers: Sequence[RouteMarker[T]],
    project: Projection | None,
    pixel_radius: float = CLUSTER_RADIUS_PX,
) -> ClusterResult[T]:
    """Group markers whose projected positions are within ``pixel_radius``.

    Algorithm:
    1. Walk markers in input order, skipping ones already clustered
    2. Collect every later unclustered marker within the radius of the
       current one (distance measured to the current marker only)
    3. Two or more members form a Cluster centered on the mean raw lat/lng
    4. A marker that never joins a group is returned in ``singles``

    Each marker ends up in exactly one of ``clusters[*].routes`` or
    ``singles``. Without a projection (map not ready) every marker is a
    single.
    """
    if project is None:
        if markers:
            logger.warning("No map projection available; showing %d markers unclustered", len(markers))
        return ClusterResult(clusters=[], singles=list(markers))

    screen = [ScreenPoint(*project(m.lat, m.lng)) for m in markers]
    processed: set[int] = set()
    clusters: list[Cluster[T]] = []

    for i, marker in enumerate(markers):
        if i in processed:
            continue
        group = [i]
        for j in range(i + 1, len(markers)):
            if j in processed:
                continue
            if _pixel_distance(screen[i], screen[j]) < pixel_radius:
                group.append(j)

        if len(group) > 1:
            processed.update(group)
            members = [markers[k] for k in group]
            clusters.append(Cluster(
                lat=sum(m.lat for m in members) / len(members),
                lng=sum(m.lng for m in members) / len(members),
                routes=members,
            ))

    singles = [m for i, m in enumerate(markers) if i not in processed]
    logger.debug(
        "Clustered %d markers into %d clusters and %d singles",
        len(markers), len(clusters), len(singles),
    )
    return ClusterResult(clusters=clusters, singles=singles)


@dataclass
class RenderedMarker(Generic[T]):
    marker: RouteMarker[T]
    enlarged: bool = False


@dataclass
class RenderPlan(Generic[T]):
    """What the marker layer actually draws for one frame."""
    clusters: list[Cluster[T]] = field(default_factory=list)
    markers: list[RenderedMarker[T]] = field(default_factory=list)


def render_markers(result: ClusterResult[T], hovered_id: str | None = None) -> RenderPlan[T]:
    """Apply the hover override on top of a clustering result.

    A hovered marker that sits inside a cluster is pulled out and drawn on
    its own, enlarged, so the pointer target is always visible. The cluster
    keeps its computed center; if only one member is left it is drawn as a
    plain marker. The clustering result itself is not modified.
    """
    plan: RenderPlan[T] = RenderPlan()
    for cluster in result.clusters:
        remaining = [m for m in cluster.routes if m.id != hovered_id]
        if len(remaining) == len(cluster.routes):
            plan.clusters.append(cluster)
            continue
        for m in cluster.routes:
            if m.id == hovered_id:
                plan.markers.append(RenderedMarker(marker=m, enlarged=True))
        if len(remaining) > 1:
            plan.clusters.append(Cluster(lat=cluster.lat, lng=cluster.lng, routes=remaining))
        else:
            plan.markers.extend(RenderedMarker(marker=m) for m in remaining)

    for m in result.singles:
        plan.markers.append(RenderedMarker(marker=m, enlarged=m.id == hovered_id))
    return plan
