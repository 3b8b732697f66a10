from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class TrackPoint:
    lat: float
    lng: float
    elevation: float = 0.0  # meters


@dataclass(frozen=True)
class Waypoint:
    """A named point of interest placed along the track."""
    name: str
    type: str
    distance_along_track: float  # km from track start
    elevation: float | None = None  # meters, if surveyed


@dataclass
class RouteMarker(Generic[T]):
    """A route pin on the overview map. Only lat/lng are used for grouping."""
    id: str
    lat: float
    lng: float
    payload: T | None = None


@dataclass
class Cluster(Generic[T]):
    lat: float  # mean latitude of members
    lng: float  # mean longitude of members
    routes: list[RouteMarker[T]] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.routes)


@dataclass(frozen=True)
class ViewportState:
    center_lat: float
    center_lng: float
    zoom: float


@dataclass
class TrackProfile:
    elevations: list[float]
    cumulative_distances: list[float]  # km, starts at 0
    slopes: list[float]  # percent, slopes[0] == 0
    segment_colors: list[str]  # one per segment
    min_elevation: float
    max_elevation: float
    total_distance: float  # km
    total_gain: float = 0.0  # meters
    total_loss: float = 0.0  # meters, positive number
    route_shape: str = "point-to-point"  # "circular" or "point-to-point"

    @property
    def point_count(self) -> int:
        return len(self.elevations)

    @property
    def elevation_difference(self) -> float:
        return self.max_elevation - self.min_elevation

    @property
    def elevation_range(self) -> float:
        """Vertical extent used for chart scaling; 1 for a perfectly flat track."""
        return self.elevation_difference or 1.0


@dataclass(frozen=True)
class ProbeResult:
    nearest_index: int
    interpolated_distance: float  # km
    interpolated_elevation: float  # meters
