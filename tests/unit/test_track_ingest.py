"""
Unit tests for track ingest module.
"""

import io
from collections.abc import Callable

import pytest

from trail_planner.data_accessors.track_ingest import (
    TrackIngestState,
    TrackParseError,
    TrackSample,
    elevation_gain_m,
    ingest,
    track_distance_m,
)

FALLBACK = "my_track"


def _ingest(content: bytes, fallback_name: str = FALLBACK, chunk_size: int | None = None):
    return ingest(io.BytesIO(content), fallback_name, chunk_size=chunk_size)


class TestIngest:
    """Test cases for the ingest function."""

    def test_ridge_loop(self, ridge_loop_gpx: bytes) -> None:
        """Test the three point Ridge Loop track."""
        summary = _ingest(ridge_loop_gpx)

        assert summary.name == "Ridge Loop"
        assert summary.notes == "Nice view"
        assert summary.elevation_gain_m == pytest.approx(50.0)
        assert summary.distance_km == pytest.approx(0.2, abs=0.005)
        assert summary.link is None
        assert summary.sample_count == 3

    def test_small_chunks_give_same_summary(self, ridge_loop_gpx: bytes) -> None:
        """Test that reading the document in tiny chunks does not change the result."""
        assert _ingest(ridge_loop_gpx, chunk_size=7) == _ingest(ridge_loop_gpx)

    @pytest.mark.parametrize(
        "points",
        [
            [],
            [("45.0", "-75.0", "100")],
        ],
    )
    def test_zero_or_one_sample(self, gpx_builder: Callable[..., bytes], points: list) -> None:
        """Test that fewer than two samples give zero distance and gain."""
        summary = _ingest(gpx_builder(points, name="Short"))

        assert summary.distance_km == 0
        assert summary.elevation_gain_m == 0
        assert summary.sample_count == len(points)

    def test_descent_ignored(self, gpx_builder: Callable[..., bytes]) -> None:
        """Test that a strictly descending track has no elevation gain."""
        summary = _ingest(gpx_builder([("45.0", "-75.0", "500"), ("45.1", "-75.0", "200")]))

        assert summary.elevation_gain_m == 0
        assert summary.distance_km > 10

    def test_gain_never_decreases_when_appending(self, gpx_builder: Callable[..., bytes]) -> None:
        """Test that appending samples never lowers the elevation gain."""
        elevations = ["100", "180", "90", "95", "300", "10", "10"]
        previous_gain = 0.0

        for count in range(1, len(elevations) + 1):
            points = [("45.0", f"-75.{i:04d}", ele) for i, ele in enumerate(elevations[:count])]
            gain = _ingest(gpx_builder(points)).elevation_gain_m

            assert gain >= previous_gain
            previous_gain = gain

        assert previous_gain == pytest.approx(80 + 5 + 205)

    @pytest.mark.parametrize("sentinel", ["Trail Planner Map", "trail planner map", "TRAIL PLANNER MAP"])
    def test_placeholder_name_replaced(self, gpx_builder: Callable[..., bytes], sentinel: str) -> None:
        """Test that the placeholder track name falls back to the supplied name."""
        summary = _ingest(gpx_builder([("45.0", "-75.0", "100")], name=sentinel))

        assert summary.name == FALLBACK

    def test_missing_name_uses_fallback(self, gpx_builder: Callable[..., bytes]) -> None:
        """Test that a document without name uses the fallback name."""
        assert _ingest(gpx_builder([])).name == FALLBACK

    def test_empty_name_uses_fallback(self, gpx_builder: Callable[..., bytes]) -> None:
        """Test that a blank name uses the fallback name."""
        assert _ingest(gpx_builder([], name="   ")).name == FALLBACK

    def test_malformed_sample_dropped(self, gpx_builder: Callable[..., bytes]) -> None:
        """Test that a track point without longitude is skipped without failing."""
        good = ("45.0", "-75.0", "100")
        with_malformed = _ingest(gpx_builder([good, ("45.001", None, "150")], name="Hill"))
        without_malformed = _ingest(gpx_builder([good], name="Hill"))

        assert with_malformed == without_malformed

    @pytest.mark.parametrize(
        "bad_point",
        [
            ("north", "-75.0", "120"),
            ("45.0", "-75.0", "high"),
            ("45.0", "-75.0", "NaN"),
            ("45.0", "-75.0", None),
            (None, None, "120"),
        ],
    )
    def test_invalid_points_skipped(self, gpx_builder: Callable[..., bytes], bad_point: tuple) -> None:
        """Test that points with unparseable or missing values are skipped."""
        points = [("45.0", "-75.0", "100"), bad_point, ("45.0009", "-75.0", "150")]
        summary = _ingest(gpx_builder(points))

        assert summary.sample_count == 2
        assert summary.elevation_gain_m == pytest.approx(50.0)

    def test_first_link_wins(self, gpx_builder: Callable[..., bytes]) -> None:
        """Test that the first link encountered is kept."""
        summary = _ingest(
            gpx_builder([], links=["https://example.com/first", "https://example.com/second"]),
        )

        assert summary.link == "https://example.com/first"

    def test_metadata_link_before_track_link(self, gpx_builder: Callable[..., bytes]) -> None:
        """Test that a metadata link declared before the track wins."""
        extra = '<metadata><link href="https://example.com/meta"/></metadata>'
        summary = _ingest(gpx_builder([], links=["https://example.com/track"], extra=extra))

        assert summary.link == "https://example.com/meta"

    def test_empty_href_ignored(self, gpx_builder: Callable[..., bytes]) -> None:
        """Test that a link with an empty href does not block a later link."""
        summary = _ingest(gpx_builder([], links=["", "https://example.com/real"]))

        assert summary.link == "https://example.com/real"

    def test_track_name_overrides_waypoint_name(self, gpx_builder: Callable[..., bytes]) -> None:
        """Test that the track-level name wins over an earlier waypoint name."""
        extra = '<wpt lat="45.0" lon="-75.0"><ele>99</ele><name>Trailhead</name></wpt>'
        summary = _ingest(gpx_builder([("45.0", "-75.0", "100")], name="Ridge Loop", extra=extra))

        assert summary.name == "Ridge Loop"
        # Waypoint elevation is not a track sample
        assert summary.sample_count == 1

    def test_first_name_wins_outside_track(self, gpx_builder: Callable[..., bytes]) -> None:
        """Test that later non-track names do not replace the first one."""
        extra = (
            "<metadata><name>Summer trip</name></metadata>"
            '<wpt lat="45.0" lon="-75.0"><name>Trailhead</name></wpt>'
        )
        summary = _ingest(gpx_builder([], extra=extra))

        assert summary.name == "Summer trip"

    def test_last_description_wins(self, gpx_builder: Callable[..., bytes]) -> None:
        """Test that the last description becomes the notes."""
        extra = "<metadata><desc>Old notes</desc></metadata>"
        summary = _ingest(gpx_builder([], desc="Fresh notes", extra=extra))

        assert summary.notes == "Fresh notes"

    def test_gpxpy_document(self, sample_gpx_bytes: io.BytesIO) -> None:
        """Test ingesting a document written by gpxpy."""
        summary = ingest(sample_gpx_bytes, FALLBACK)

        assert summary.name == "Lake Agnes"
        assert summary.sample_count == 6
        assert summary.elevation_gain_m == pytest.approx(150.0)
        assert summary.distance_km > 0

    @pytest.mark.parametrize(
        "content",
        [
            b"",
            b"not xml at all",
            b"<gpx><trk><name>Broken</trk></gpx>",
            b"<gpx><trk>",
        ],
    )
    def test_invalid_document_raises(self, content: bytes) -> None:
        """Test that documents that are not well-formed XML raise TrackParseError."""
        with pytest.raises(TrackParseError, match="Invalid GPX document"):
            _ingest(content)

    def test_read_error_raises(self) -> None:
        """Test that a failing stream raises TrackParseError."""

        class BrokenStream(io.RawIOBase):
            def read(self, size: int = -1) -> bytes:
                msg = "disk went away"
                raise OSError(msg)

        with pytest.raises(TrackParseError, match="Error reading GPX document"):
            ingest(BrokenStream(), FALLBACK)


class TestTrackIngestState:
    """Test cases for TrackIngestState class."""

    def test_parent_tag(self) -> None:
        """Test tracking of the enclosing tag."""
        state = TrackIngestState()
        assert state.parent_tag is None

        state.start_element("trk", {})
        state.start_element("name", {})
        assert state.parent_tag == "trk"

        state.end_element("name", "Loop")
        assert state.open_tags == ["trk"]
        assert state.name == "Loop"

    def test_elevation_outside_track_point_ignored(self) -> None:
        """Test that elevations without a pending track point are ignored."""
        state = TrackIngestState()
        state.start_element("ele", {})
        state.end_element("ele", "100")

        assert state.samples == []
        assert state.skipped_samples == 0

    def test_pending_attributes_cleared(self) -> None:
        """Test that closing a track point clears its attributes."""
        state = TrackIngestState()
        state.start_element("trkpt", {"lat": "45.0", "lon": "-75.0"})
        state.end_element("trkpt", None)

        assert state.pending_attributes is None

    def test_skipped_sample_counted(self) -> None:
        """Test that malformed samples are counted."""
        state = TrackIngestState()
        state.start_element("trkpt", {"lat": "45.0"})
        state.start_element("ele", {})
        state.end_element("ele", "100")

        assert state.samples == []
        assert state.skipped_samples == 1


class TestAggregation:
    """Test cases for distance and elevation aggregation."""

    def test_distance_empty(self) -> None:
        """Test distance of an empty track."""
        assert track_distance_m([]) == 0.0

    def test_distance_one_degree_latitude(self) -> None:
        """Test that one degree of latitude is about 111 km."""
        samples = [TrackSample(0.0, 0.0, 0.0), TrackSample(1.0, 0.0, 0.0)]

        assert track_distance_m(samples) == pytest.approx(111_320, rel=0.01)

    def test_elevation_gain(self) -> None:
        """Test summing positive elevation changes only."""
        samples = [TrackSample(0.0, 0.0, ele) for ele in (100.0, 120.0, 110.0, 140.0)]

        assert elevation_gain_m(samples) == pytest.approx(50.0)
