"""
Unit tests for GPX loader module.
"""

import io
from pathlib import Path

import pytest
import requests

from trail_planner.data_accessors import gpx_loader
from trail_planner.data_accessors.gpx_loader import (
    DEFAULT_TRACK_NAME,
    GPXLoader,
    GPXLoadError,
    fallback_name_for,
)


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, content: bytes, status_code: int = 200) -> None:
        self.content = content
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            msg = f"{self.status_code} Client Error"
            raise requests.exceptions.HTTPError(msg)


class TestFallbackName:
    """Test cases for fallback_name_for function."""

    @pytest.mark.parametrize(
        ("source_name", "expected"),
        [
            ("ridge_loop.gpx", "ridge_loop"),
            ("/tracks/2024/ridge_loop.gpx", "ridge_loop"),
            ("C:\\Users\\me\\ridge_loop.gpx", "ridge_loop"),
            ("no_extension", "no_extension"),
            ("", DEFAULT_TRACK_NAME),
            (None, DEFAULT_TRACK_NAME),
            ("/", DEFAULT_TRACK_NAME),
        ],
    )
    def test_fallback_name(self, source_name: str | None, expected: str) -> None:
        """Test deriving a name from file names and paths."""
        assert fallback_name_for(source_name) == expected


class TestGPXLoader:
    """Test cases for GPXLoader class."""

    def test_load_from_file(self, sample_gpx_bytes: io.BytesIO) -> None:
        """Test loading GPX from file object."""
        summary = GPXLoader.load_from_file(sample_gpx_bytes)

        assert summary.name == "Lake Agnes"
        assert summary.sample_count == 6

    def test_load_from_file_uses_file_name(self, gpx_builder) -> None:
        """Test that the uploaded file name is the fallback name."""
        file = io.BytesIO(gpx_builder([("45.0", "-75.0", "100")]))
        file.name = "sunday_hike.gpx"

        summary = GPXLoader.load_from_file(file)

        assert summary.name == "sunday_hike"

    def test_load_from_file_explicit_fallback(self, gpx_builder) -> None:
        """Test that an explicit fallback name is used for unnamed tracks."""
        file = io.BytesIO(gpx_builder([]))

        summary = GPXLoader.load_from_file(file, fallback_name="Given")

        assert summary.name == "Given"

    def test_load_from_path(self, sample_gpx_file: Path) -> None:
        """Test loading GPX from file path."""
        summary = GPXLoader.load_from_path(sample_gpx_file)

        assert summary.name == "Lake Agnes"

    def test_load_from_path_fallback_is_stem(self, tmp_path: Path, gpx_builder) -> None:
        """Test that the file stem is used for unnamed tracks."""
        gpx_file = tmp_path / "morning_walk.gpx"
        gpx_file.write_bytes(gpx_builder([], name="Trail Planner Map"))

        summary = GPXLoader.load_from_path(gpx_file)

        assert summary.name == "morning_walk"

    def test_load_from_nonexistent_path(self) -> None:
        """Test loading from non-existent path raises error."""
        with pytest.raises(GPXLoadError, match="File not found"):
            GPXLoader.load_from_path(Path("/nonexistent/file.gpx"))

    def test_load_invalid_gpx(self) -> None:
        """Test loading invalid GPX data raises error."""
        invalid_data = io.BytesIO(b"This is not a valid GPX file")

        with pytest.raises(GPXLoadError, match="Invalid GPX file format"):
            GPXLoader.load_from_file(invalid_data)

    def test_file_size_limit(self, monkeypatch: pytest.MonkeyPatch, gpx_builder) -> None:
        """Test that files above the size limit are rejected."""
        monkeypatch.setattr(gpx_loader.settings, "max_gpx_file_size_mb", 0)
        file = io.BytesIO(gpx_builder([("45.0", "-75.0", "100")]))

        with pytest.raises(GPXLoadError, match="exceeds maximum allowed size"):
            GPXLoader.load_from_file(file)

    def test_load_from_url(self, monkeypatch: pytest.MonkeyPatch, gpx_builder) -> None:
        """Test loading GPX from a URL."""
        calls = []

        def fake_get(url: str, timeout: float) -> FakeResponse:
            calls.append((url, timeout))
            return FakeResponse(gpx_builder([("45.0", "-75.0", "100"), ("45.0009", "-75.0", "130")]))

        monkeypatch.setattr(gpx_loader.requests, "get", fake_get)

        summary = GPXLoader.load_from_url("https://example.com/tracks/Lake%20Loop.gpx", timeout=3)

        assert calls == [("https://example.com/tracks/Lake%20Loop.gpx", 3)]
        assert summary.name == "Lake Loop"
        assert summary.elevation_gain_m == pytest.approx(30.0)

    def test_load_from_url_http_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that HTTP errors are reported as GPXLoadError."""
        monkeypatch.setattr(gpx_loader.requests, "get", lambda url, timeout: FakeResponse(b"", 404))

        with pytest.raises(GPXLoadError, match="Error fetching GPX from URL"):
            GPXLoader.load_from_url("https://example.com/missing.gpx")

    def test_load_from_url_connection_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that connection errors are reported as GPXLoadError."""

        def fake_get(url: str, timeout: float) -> FakeResponse:
            msg = "no route to host"
            raise requests.exceptions.ConnectionError(msg)

        monkeypatch.setattr(gpx_loader.requests, "get", fake_get)

        with pytest.raises(GPXLoadError, match="no route to host"):
            GPXLoader.load_from_url("https://example.com/track.gpx")
