"""JSON API over the track engine for the site's front end."""

import io
import logging
from dataclasses import asdict

from flask import Flask, jsonify, request, send_file

from trail_engine import __version__
from trail_engine.charts import area_path, generate_profile_image, segment_paths, x_ticks, y_ticks
from trail_engine.clustering import cluster_markers, render_markers, usable_markers
from trail_engine.colors import SLOPE_LEGEND, segment_features
from trail_engine.config import get_setting, load_config
from trail_engine.models import RouteMarker, TrackPoint, ViewportState, Waypoint
from trail_engine.parser import parse_gpx_string
from trail_engine.probe import ChartLayout, place_waypoints, probe, resolve_highlight
from trail_engine.profile import build_profile
from trail_engine.viewport import fit_view, popup_anchor, visible_markers, web_mercator_projection

logger = logging.getLogger(__name__)

app = Flask(__name__)

# Errors raised while reading a malformed request body
REQUEST_ERRORS = (KeyError, TypeError, ValueError)


def _read_points(data: dict) -> list[TrackPoint]:
    return [
        TrackPoint(lat=float(p["lat"]), lng=float(p["lng"]), elevation=float(p.get("elevation") or 0.0))
        for p in data.get("points", [])
    ]


def _read_waypoints(data: dict) -> list[Waypoint]:
    return [
        Waypoint(
            name=w["name"],
            type=w.get("type", ""),
            distance_along_track=float(w["distance_along_track"]),
            elevation=w.get("elevation"),
        )
        for w in data.get("waypoints", [])
    ]


def _read_markers(data: dict) -> list[RouteMarker]:
    return [
        RouteMarker(id=str(m["id"]), lat=float(m["lat"]), lng=float(m["lng"]), payload=m.get("payload"))
        for m in data.get("markers", [])
    ]


def _read_viewport(data: dict) -> ViewportState | None:
    vp = data.get("viewport")
    if vp is None:
        return None
    return ViewportState(
        center_lat=float(vp["center_lat"]),
        center_lng=float(vp["center_lng"]),
        zoom=float(vp["zoom"]),
    )


def _read_index(data: dict, key: str, count: int) -> int | None:
    """Optional sample index from the body; must address one of `count` samples."""
    index = data.get(key)
    if index is None:
        return None
    if isinstance(index, bool) or not isinstance(index, int):
        raise ValueError(f"{key} must be an integer")
    if not 0 <= index < count:
        raise ValueError(f"{key} {index} is out of range for {count} points")
    return index


def _marker_json(marker: RouteMarker) -> dict:
    return {"id": marker.id, "lat": marker.lat, "lng": marker.lng, "payload": marker.payload}


def _json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValueError("Request body must be a JSON object")
    return data


def _profile_json(points: list[TrackPoint], layout: ChartLayout, waypoints: list[Waypoint]) -> dict:
    profile = build_profile(points)
    if profile is None:
        return {"profile": None, "message": "No track data available"}
    return {
        "profile": asdict(profile),
        "chart": {
            "segments": segment_paths(profile, layout),
            "area": area_path(profile, layout),
            "x_ticks": x_ticks(profile, layout),
            "y_ticks": y_ticks(profile, layout),
            "waypoints": [
                {"name": p.waypoint.name, "type": p.waypoint.type, "x": p.x, "y": p.y, "elevation": p.elevation}
                for p in place_waypoints(profile, waypoints, layout)
            ],
        },
        "legend": SLOPE_LEGEND,
        "view": asdict(fit_view(points)),
        "track": segment_features(points),
    }


@app.route("/api/version")
def api_version():
    return jsonify({"version": __version__})


@app.route("/api/profile", methods=["POST"])
def api_profile():
    """Elevation profile, chart geometry and map track features for a track."""
    try:
        data = _json_body()
        points = _read_points(data)
        waypoints = _read_waypoints(data)
        layout = ChartLayout.from_config(load_config())
    except REQUEST_ERRORS as e:
        return jsonify({"error": str(e)}), 400
    return jsonify(_profile_json(points, layout, waypoints))


@app.route("/api/probe", methods=["POST"])
def api_probe():
    """Resolve a pointer x over the chart to a track sample.

    Body: points, x (viewBox units), optional external_index from the map.
    """
    try:
        data = _json_body()
        points = _read_points(data)
        svg_x = float(data["x"])
        external_index = _read_index(data, "external_index", len(points))
        layout = ChartLayout.from_config(load_config())
    except REQUEST_ERRORS as e:
        return jsonify({"error": str(e)}), 400

    profile = build_profile(points)
    result = probe(profile, layout, svg_x) if profile else None
    pointer_index = result.nearest_index if result else None
    return jsonify({
        "result": asdict(result) if result else None,
        "highlight_index": resolve_highlight(pointer_index, external_index),
    })


@app.route("/api/clusters", methods=["POST"])
def api_clusters():
    """Cluster route markers for a viewport.

    Body: markers, viewport, width/height of the map in pixels, optional
    radius and hovered_id. Without a viewport every marker is a single.
    """
    try:
        data = _json_body()
        markers = usable_markers(_read_markers(data))
        viewport = _read_viewport(data)
        radius = float(data.get("radius") or get_setting("cluster_radius_px"))
        project = None
        if viewport is not None:
            project = web_mercator_projection(viewport, float(data["width"]), float(data["height"]))
        # marker ids are read as strings
        hovered_id = data.get("hovered_id")
        if hovered_id is not None:
            hovered_id = str(hovered_id)
    except REQUEST_ERRORS as e:
        return jsonify({"error": str(e)}), 400

    result = cluster_markers(markers, project, radius)
    plan = render_markers(result, hovered_id)
    return jsonify({
        "clusters": [
            {"lat": c.lat, "lng": c.lng, "routes": [_marker_json(m) for m in c.routes]}
            for c in result.clusters
        ],
        "singles": [_marker_json(m) for m in result.singles],
        "render": {
            "clusters": [
                {"lat": c.lat, "lng": c.lng, "count": c.count, "ids": [m.id for m in c.routes]}
                for c in plan.clusters
            ],
            "markers": [
                {"id": r.marker.id, "lat": r.marker.lat, "lng": r.marker.lng, "enlarged": r.enlarged}
                for r in plan.markers
            ],
        },
    })


@app.route("/api/visible", methods=["POST"])
def api_visible():
    """Ids of markers inside the approximate viewport, with popup anchors."""
    try:
        data = _json_body()
        markers = usable_markers(_read_markers(data))
        viewport = _read_viewport(data)
        config = load_config()
    except REQUEST_ERRORS as e:
        return jsonify({"error": str(e)}), 400

    visible = visible_markers(
        markers, viewport,
        margin=get_setting("viewport_margin", config),
        aspect=get_setting("viewport_aspect", config),
    )
    anchors = {}
    if viewport is not None:
        anchors = {m.id: popup_anchor(m, viewport) for m in visible}
    return jsonify({"visible": [m.id for m in visible], "popup_anchors": anchors})


@app.route("/api/profile.png", methods=["POST"])
def api_profile_image():
    try:
        data = _json_body()
        points = _read_points(data)
        waypoints = _read_waypoints(data)
        highlight_index = _read_index(data, "highlight_index", len(points))
    except REQUEST_ERRORS as e:
        return jsonify({"error": str(e)}), 400

    profile = build_profile(points)
    if profile is None:
        return jsonify({"error": "No track data available"}), 404
    img = generate_profile_image(profile, highlight_index=highlight_index, waypoints=waypoints)
    return send_file(io.BytesIO(img), mimetype="image/png")


@app.route("/api/upload-gpx", methods=["POST"])
def api_upload_gpx():
    """Extract the track from an uploaded GPX file and return its profile."""
    upload = request.files.get("file")
    if upload is None:
        return jsonify({"error": "No file uploaded"}), 400
    try:
        name, points = parse_gpx_string(upload.read().decode("utf-8"))
    except Exception as e:
        logger.warning("Failed to parse uploaded GPX %s: %s", upload.filename, e)
        return jsonify({"error": f"Could not parse GPX file: {e}"}), 400

    body = _profile_json(points, ChartLayout.from_config(load_config()), [])
    body["name"] = name
    return jsonify(body)
