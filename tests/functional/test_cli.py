import os
import subprocess
import sys

SAMPLE_GPX_PATH = os.path.join(
    os.path.dirname(__file__), "data", "sample_hike.gpx"
)


def _run(*args):
    return subprocess.run(
        [sys.executable, "-m", "trail_engine", *args],
        capture_output=True,
        text=True,
    )


class TestCli:
    def test_run_with_sample_file(self):
        result = _run(SAMPLE_GPX_PATH)
        assert result.returncode == 0
        output = result.stdout
        assert "Track Profile" in output
        assert "Points:         6" in output
        assert "Distance:" in output
        assert "Min Elevation:  1800 m" in output
        assert "Max Elevation:  1930 m" in output
        assert "Elevation Gain: 145 m" in output
        assert "Elevation Loss: 15 m" in output
        assert "Steepest Grade:" in output

    def test_probe(self):
        result = _run("--probe-x", "410", SAMPLE_GPX_PATH)
        assert result.returncode == 0
        assert "Probe:          #" in result.stdout

    def test_probe_outside_chart(self):
        result = _run("--probe-x", "5", SAMPLE_GPX_PATH)
        assert "outside chart" in result.stdout

    def test_png_output(self, tmp_path):
        out = tmp_path / "profile.png"
        result = _run("--png", str(out), SAMPLE_GPX_PATH)
        assert result.returncode == 0
        assert out.read_bytes().startswith(b"\x89PNG")

    def test_missing_file(self):
        result = _run("/nonexistent/file.gpx")
        assert result.returncode == 1
        assert "File not found" in result.stderr

    def test_invalid_gpx(self, tmp_path):
        bad = tmp_path / "bad.gpx"
        bad.write_text("this is not gpx <")
        result = _run(str(bad))
        assert result.returncode == 1
        assert "Error parsing GPX file" in result.stderr
