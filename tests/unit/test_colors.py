from trail_engine.colors import (
    DARK_RED,
    DEFAULT_TRACK_COLOR,
    GREEN,
    ORANGE,
    RED,
    YELLOW,
    interpolate_color,
    segment_features,
    slope_color,
)
from trail_engine.distance import slope_percent


class TestInterpolateColor:
    def test_endpoints(self):
        assert interpolate_color(GREEN, YELLOW, 0.0) == GREEN
        assert interpolate_color(GREEN, YELLOW, 1.0) == YELLOW

    def test_midpoint(self):
        # (34,197,94) -> (234,179,8)
        assert interpolate_color(GREEN, YELLOW, 0.5) == '#86bc33'

    def test_rounds_half_up(self):
        # 0 + 255 * 0.5 = 127.5 rounds to 128 (0x80)
        assert interpolate_color('#000000', '#ff0000', 0.5) == '#800000'

    def test_zero_padded(self):
        assert interpolate_color('#000000', '#000010', 0.0) == '#000000'


class TestSlopeColor:
    def test_band_breakpoints(self):
        assert slope_color(0) == GREEN
        assert slope_color(5) == YELLOW
        assert slope_color(10) == ORANGE
        assert slope_color(20) == RED
        assert slope_color(30) == DARK_RED

    def test_extreme_slope_solid_dark_red(self):
        assert slope_color(45) == DARK_RED
        assert slope_color(300) == DARK_RED

    def test_sign_ignored(self):
        assert slope_color(-7.5) == slope_color(7.5)
        assert slope_color(-25) == slope_color(25)

    def test_interpolates_within_band(self):
        assert slope_color(2.5) == '#86bc33'
        # (239,68,68) -> (220,38,38) halfway
        assert slope_color(25) == '#e63535'

    def test_just_below_breakpoint_stays_in_lower_band(self):
        assert slope_color(4.999999) == interpolate_color(GREEN, YELLOW, 4.999999 / 5)


class TestSegmentFeatures:
    def test_one_feature_per_segment(self, equator_track):
        features = segment_features(equator_track)
        assert len(features) == 2
        assert features[0]["geometry"]["coordinates"] == [[0.0, 0.0], [0.01, 0.0]]

    def test_colored_by_slope(self, equator_track):
        features = segment_features(equator_track)
        p0, p1 = equator_track[0], equator_track[1]
        expected = slope_color(slope_percent(p0.lat, p0.lng, p0.elevation, p1.lat, p1.lng, p1.elevation))
        assert features[0]["properties"]["color"] == expected

    def test_uniform_color(self, equator_track):
        features = segment_features(equator_track, color_by_slope=False)
        assert all(f["properties"]["color"] == DEFAULT_TRACK_COLOR for f in features)

    def test_short_tracks_have_no_segments(self, equator_track):
        assert segment_features([]) == []
        assert segment_features(equator_track[:1]) == []
