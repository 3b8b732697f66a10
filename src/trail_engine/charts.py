"""Elevation profile chart geometry and image generation."""

import io

import matplotlib
matplotlib.use('Agg')  # Non-interactive backend for server
import matplotlib.pyplot as plt
from matplotlib.collections import LineCollection

from trail_engine.colors import GREEN
from trail_engine.models import TrackProfile, Waypoint
from trail_engine.probe import ChartLayout, ProfileScale, place_waypoints

NUM_TICKS = 5
HIGHLIGHT_COLOR = '#ef4444'


def segment_paths(profile: TrackProfile, layout: ChartLayout) -> list[dict]:
    """SVG path data for each slope-colored segment of the profile line."""
    scale = ProfileScale(profile, layout)
    d, e = profile.cumulative_distances, profile.elevations
    segments = []
    for i in range(1, profile.point_count):
        x1, y1 = scale.x(d[i - 1]), scale.y(e[i - 1])
        x2, y2 = scale.x(d[i]), scale.y(e[i])
        segments.append({
            "path": f"M {x1} {y1} L {x2} {y2}",
            "color": profile.segment_colors[i - 1] or GREEN,
        })
    return segments


def area_path(profile: TrackProfile, layout: ChartLayout) -> str:
    """SVG path closing the area between the profile line and the x axis."""
    scale = ProfileScale(profile, layout)
    baseline = layout.padding_top + layout.chart_height
    parts = [f"M {layout.padding_left} {baseline}"]
    for dist, elev in zip(profile.cumulative_distances, profile.elevations):
        parts.append(f"L {scale.x(dist)} {scale.y(elev)}")
    parts.append(f"L {scale.x(profile.total_distance)} {baseline}")
    parts.append("Z")
    return " ".join(parts)


def x_ticks(profile: TrackProfile, layout: ChartLayout, num_ticks: int = NUM_TICKS) -> list[tuple[float, str]]:
    """(x, label) pairs for the distance axis, labels in km to one decimal."""
    scale = ProfileScale(profile, layout)
    ticks = []
    for i in range(num_ticks + 1):
        distance = profile.total_distance / num_ticks * i
        ticks.append((scale.x(distance), f"{distance:.1f}"))
    return ticks


def y_ticks(profile: TrackProfile, layout: ChartLayout, num_ticks: int = NUM_TICKS) -> list[tuple[float, int]]:
    """(y, elevation) pairs for the elevation axis."""
    scale = ProfileScale(profile, layout)
    ticks = []
    for i in range(num_ticks + 1):
        elevation = profile.min_elevation + profile.elevation_range / num_ticks * i
        ticks.append((scale.y(elevation), round(elevation)))
    return ticks


def generate_profile_image(
    profile: TrackProfile,
    highlight_index: int | None = None,
    waypoints: list[Waypoint] | None = None,
    aspect_ratio: float = 4.0,
) -> bytes:
    """Render the profile as a PNG with slope-colored segments.

    Args:
        profile: Profile from build_profile
        highlight_index: Optional track index to mark with a vertical line
        waypoints: Optional waypoints to annotate along the profile
        aspect_ratio: Width/height ratio of the figure

    Returns PNG image as bytes.
    """
    d, e = profile.cumulative_distances, profile.elevations

    fig_height = 2.5
    fig_width = fig_height * aspect_ratio
    fig, ax = plt.subplots(figsize=(fig_width, fig_height), facecolor='white')

    lines = [[(d[i], e[i]), (d[i + 1], e[i + 1])] for i in range(profile.point_count - 1)]
    if lines:
        ax.add_collection(LineCollection(lines, colors=profile.segment_colors, linewidths=2.5))
    ax.fill_between(d, profile.min_elevation, e, color=GREEN, alpha=0.1, linewidth=0)

    if highlight_index is not None and 0 <= highlight_index < profile.point_count:
        ax.axvline(d[highlight_index], color=HIGHLIGHT_COLOR, linestyle='--', linewidth=1.5, alpha=0.7)
        ax.plot([d[highlight_index]], [e[highlight_index]], 'o', color=HIGHLIGHT_COLOR,
                markeredgecolor='white', markersize=7)

    # Waypoint positions use the same interpolation as the pointer probe
    for placed in place_waypoints(profile, waypoints or [], ChartLayout()):
        wp = placed.waypoint
        ax.plot([wp.distance_along_track], [placed.elevation], 'v', color='#333333', markersize=6)
        ax.annotate(wp.name, (wp.distance_along_track, placed.elevation),
                    textcoords='offset points', xytext=(0, 8), ha='center', fontsize=8)

    ax.set_xlim(0, profile.total_distance or 1)
    ax.set_ylim(profile.min_elevation, profile.min_elevation + profile.elevation_range)
    ax.set_xlabel('Distance (km)', fontsize=10)
    ax.set_ylabel('Elevation (m)', fontsize=10)
    ax.spines['top'].set_visible(False)
    ax.spines['right'].set_visible(False)
    ax.grid(axis='y', alpha=0.3, linestyle='-', linewidth=0.5)

    fig.tight_layout()

    buf = io.BytesIO()
    fig.savefig(buf, format='png', dpi=100, facecolor='white', edgecolor='none')
    plt.close(fig)
    buf.seek(0)
    return buf.getvalue()
