import os

import pytest

from trail_engine.models import RouteMarker, TrackPoint

SAMPLE_GPX_PATH = os.path.join(
    os.path.dirname(__file__), "functional", "data", "sample_hike.gpx"
)


@pytest.fixture
def equator_track():
    """Three points along the equator, ~1.11 km apart: up 50 m then down 50 m."""
    return [
        TrackPoint(lat=0.0, lng=0.0, elevation=100.0),
        TrackPoint(lat=0.0, lng=0.01, elevation=150.0),
        TrackPoint(lat=0.0, lng=0.02, elevation=100.0),
    ]


@pytest.fixture
def uphill_track():
    """Track points climbing steadily northwards, ~100m apart."""
    return [
        TrackPoint(lat=42.6400 + i * 0.0009, lng=0.0300, elevation=1800.0 + i * 12.0)
        for i in range(10)
    ]


@pytest.fixture
def screen_projection():
    """Projection that maps (lat, lng) straight onto (y, x) pixels."""
    return lambda lat, lng: (lng, lat)


@pytest.fixture
def five_markers():
    """Three markers within a few pixels of each other plus two far away."""
    return [
        RouteMarker(id="a", lat=10.0, lng=10.0, payload={"title": "Pica d'Estats"}),
        RouteMarker(id="b", lat=20.0, lng=10.0),
        RouteMarker(id="far1", lat=200.0, lng=200.0),
        RouteMarker(id="c", lat=10.0, lng=20.0),
        RouteMarker(id="far2", lat=400.0, lng=400.0),
    ]
