"""
Pytest configuration and shared fixtures.
"""

import io
import shutil
import subprocess
import time
from collections.abc import Callable
from pathlib import Path

import pytest
import requests
from gpxpy.gpx import GPX, GPXTrack, GPXTrackPoint, GPXTrackSegment


@pytest.fixture(scope="session")
def streamlit_app():
    """
    Start the Streamlit application for e2e tests.

    This fixture starts the app on port 8080 and waits for it to be ready.
    After all tests complete, it shuts down the server.

    Yields:
        str: URL of the running application
    """
    # Start Streamlit app
    uv_path = shutil.which("uv")
    if not uv_path:
        msg = "uv executable not found in PATH"
        raise RuntimeError(msg)

    process = subprocess.Popen(  # noqa: S603
        [uv_path, "run", "streamlit", "run", "app.py", "--server.port=8080", "--server.headless=true"],
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
    )

    # Wait for app to be ready (max 30 seconds)
    app_url = "http://localhost:8080"
    max_retries = 60
    retry_delay = 0.5

    for _ in range(max_retries):
        try:
            response = requests.get(app_url, timeout=1)
            if response.status_code == 200:
                break
        except (requests.ConnectionError, requests.Timeout):
            time.sleep(retry_delay)
    else:
        process.terminate()
        process.wait()
        msg = "Streamlit app failed to start within timeout period"
        raise RuntimeError(msg)

    yield app_url

    # Cleanup: terminate the process
    process.terminate()
    try:
        process.wait(timeout=5)
    except subprocess.TimeoutExpired:
        process.kill()
        process.wait()


@pytest.fixture(autouse=True)
def setup_e2e_tests(request):
    """
    Automatically ensure the Streamlit app is running for e2e tests.

    This fixture runs automatically for all tests and starts the app
    only when the test is marked with 'e2e'.

    Args:
        request: Pytest request object
    """
    # Only apply to e2e tests
    if "e2e" in [marker.name for marker in request.node.iter_markers()]:
        # Request the streamlit_app fixture to ensure it starts
        request.getfixturevalue("streamlit_app")


def build_gpx(
    points: list[tuple[str | None, str | None, str | None]],
    name: str | None = None,
    desc: str | None = None,
    links: list[str] | None = None,
    extra: str = "",
) -> bytes:
    """
    Build a GPX document by hand, allowing malformed track points.

    Args:
        points: (lat, lon, ele) text per track point; None leaves the attribute or element out
        name: Track-level name
        desc: Track-level description
        links: href values of track-level link elements, in document order
        extra: Raw markup inserted before the track (e.g. metadata or waypoints)

    Returns:
        GPX document as UTF-8 bytes
    """
    trkpts = []
    for lat, lon, ele in points:
        attributes = ""
        if lat is not None:
            attributes += f' lat="{lat}"'
        if lon is not None:
            attributes += f' lon="{lon}"'
        elevation = f"<ele>{ele}</ele>" if ele is not None else ""
        trkpts.append(f"<trkpt{attributes}>{elevation}</trkpt>")

    track_name = f"<name>{name}</name>" if name is not None else ""
    track_desc = f"<desc>{desc}</desc>" if desc is not None else ""
    track_links = "".join(f'<link href="{href}"><text>link</text></link>' for href in links or [])

    return (
        '<?xml version="1.0" encoding="UTF-8"?>'
        '<gpx version="1.1" creator="tests" xmlns="http://www.topografix.com/GPX/1/1">'
        f"{extra}"
        f"<trk>{track_name}{track_desc}{track_links}<trkseg>{''.join(trkpts)}</trkseg></trk>"
        "</gpx>"
    ).encode("utf-8")


@pytest.fixture
def gpx_builder() -> Callable[..., bytes]:
    """
    Provide the GPX document builder.

    Returns:
        The build_gpx function
    """
    return build_gpx


@pytest.fixture
def ridge_loop_gpx() -> bytes:
    """
    Create the Ridge Loop document: three points about 100 m apart, +50 m then -30 m.

    Returns:
        GPX document bytes
    """
    return build_gpx(
        [
            ("45.0000", "-75.0000", "100"),
            ("45.0009", "-75.0000", "150"),
            ("45.0018", "-75.0000", "120"),
        ],
        name="Ridge Loop",
        desc="Nice view",
    )


@pytest.fixture
def sample_gpx() -> GPX:
    """
    Create a sample GPX object for testing.

    Returns:
        GPX object with a simple named track
    """
    gpx = GPX()

    # Create track
    track = GPXTrack(name="Lake Agnes")
    gpx.tracks.append(track)

    # Create segment
    segment = GPXTrackSegment()
    track.segments.append(segment)

    # Simulating a trail from start to finish with elevation changes
    points_data = [
        (51.4170, -116.2160, 1730.0),  # Start
        (51.4160, -116.2180, 1760.0),  # +30m
        (51.4150, -116.2200, 1800.0),  # +40m
        (51.4140, -116.2220, 1850.0),  # +50m
        (51.4130, -116.2240, 1880.0),  # +30m
        (51.4120, -116.2260, 1870.0),  # -10m
    ]

    for lat, lon, ele in points_data:
        point = GPXTrackPoint(latitude=lat, longitude=lon, elevation=ele)
        segment.points.append(point)

    return gpx


@pytest.fixture
def sample_gpx_bytes(sample_gpx: GPX) -> io.BytesIO:
    """
    Convert sample GPX to bytes for file upload simulation.

    Args:
        sample_gpx: Sample GPX fixture

    Returns:
        BytesIO object containing GPX data
    """
    gpx_string = sample_gpx.to_xml()
    return io.BytesIO(gpx_string.encode("utf-8"))


@pytest.fixture
def sample_gpx_file(tmp_path: Path, sample_gpx: GPX) -> Path:
    """
    Create a temporary GPX file for testing.

    Args:
        tmp_path: Pytest temporary directory fixture
        sample_gpx: Sample GPX fixture

    Returns:
        Path to the temporary GPX file
    """
    gpx_file = tmp_path / "lake_agnes.gpx"
    with gpx_file.open("w", encoding="utf-8") as f:
        f.write(sample_gpx.to_xml())
    return gpx_file


@pytest.fixture
def sample_gear_csv() -> io.BytesIO:
    """
    Create a gear list CSV as exported from a spreadsheet.

    Returns:
        BytesIO object containing CSV data
    """
    content = (
        "Item,Category,Weight (oz),Qty,Consumable,Notes\n"
        "Tent,Shelter,32,1,false,Two person\n"
        "Trail Mix,Food,8,2,true,\n"
        "Headlamp,Gadgets,3,1,0,Spare batteries\n"
        "Sleeping Pad,,12,1,,\n"
        ",Shelter,5,1,,Row without a name\n"
    )
    return io.BytesIO(content.encode("utf-8"))
