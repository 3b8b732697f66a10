import pytest

from trail_engine.charts import area_path, generate_profile_image, segment_paths, x_ticks, y_ticks
from trail_engine.models import TrackPoint, Waypoint
from trail_engine.probe import ChartLayout
from trail_engine.profile import build_profile


@pytest.fixture
def profile(equator_track):
    return build_profile(equator_track)


class TestSvgGeometry:
    def test_segment_paths(self, profile):
        segments = segment_paths(profile, ChartLayout())
        assert len(segments) == 2
        assert segments[0]["path"].startswith("M 60.0 160.0 L ")
        assert [s["color"] for s in segments] == profile.segment_colors

    def test_area_path_closed(self, profile):
        path = area_path(profile, ChartLayout())
        assert path.startswith("M 60 160")
        assert path.endswith("Z")
        assert path.count("L ") == profile.point_count + 1

    def test_x_ticks(self, profile):
        ticks = x_ticks(profile, ChartLayout())
        assert len(ticks) == 6
        assert ticks[0] == (60, "0.0")
        assert ticks[-1][1] == "2.2"

    def test_y_ticks(self, profile):
        ticks = y_ticks(profile, ChartLayout())
        assert [elev for _, elev in ticks] == [100, 110, 120, 130, 140, 150]
        assert ticks[0][0] == 160


class TestGenerateProfileImage:
    def test_returns_png(self, profile):
        img = generate_profile_image(profile)
        assert img.startswith(b"\x89PNG")

    def test_with_highlight_and_waypoints(self, profile):
        img = generate_profile_image(
            profile,
            highlight_index=1,
            waypoints=[Waypoint(name="Summit", type="peak", distance_along_track=1.1)],
        )
        assert img.startswith(b"\x89PNG")

    def test_single_point_track(self):
        profile = build_profile([TrackPoint(lat=0.0, lng=0.0, elevation=50.0)])
        assert generate_profile_image(profile).startswith(b"\x89PNG")
