"""
Track ingest module for summarizing GPX track files.

This module turns a GPX document into a hike summary (name, distance, elevation gain,
notes and link) in a single streaming pass. Tokens from an XML pull parser are fed
into a small state machine; malformed track points and missing metadata are absorbed
locally, and only a document that cannot be tokenized at all is reported as an error.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from itertools import pairwise
from typing import TYPE_CHECKING
from xml.etree import ElementTree as ET

from gpxpy.geo import haversine_distance

from trail_planner.settings import settings

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence
    from typing import BinaryIO

logger = logging.getLogger(__name__)

PARSE_EVENTS = ("start", "end")


class TrackParseError(Exception):
    """Exception raised when a track document cannot be read or tokenized as XML."""


@dataclass(frozen=True)
class TrackSample:
    """A single geo-tagged elevation sample along a recorded track."""

    latitude: float
    longitude: float
    elevation: float  # Meters


@dataclass(frozen=True)
class TrackSummary:
    """Summary of a track file, ready to be merged into a wishlist hike."""

    name: str
    distance_km: float  # Great-circle distance along the track in kilometers
    elevation_gain_m: float  # Sum of positive elevation changes in meters
    notes: str = ""
    link: str | None = None
    sample_count: int = 0  # Number of valid samples the totals were built from


def _local_name(tag: str) -> str:
    """Strip an ElementTree namespace prefix ("{uri}tag" -> "tag")."""
    return tag.rsplit("}", 1)[-1]


def _parse_float(value: str | None) -> float | None:
    """Parse a finite float, returning None for missing, malformed, NaN or infinite values."""
    if value is None:
        return None
    try:
        number = float(value.strip())
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def track_distance_m(samples: Sequence[TrackSample]) -> float:
    """
    Sum the great-circle distance between consecutive samples.

    Args:
        samples: Samples in file order

    Returns:
        Distance in meters (0.0 for fewer than two samples)

    """
    return sum(
        (
            haversine_distance(previous.latitude, previous.longitude, current.latitude, current.longitude)
            for previous, current in pairwise(samples)
        ),
        0.0,
    )


def elevation_gain_m(samples: Sequence[TrackSample]) -> float:
    """
    Sum the positive elevation changes between consecutive samples.

    Descents are ignored rather than subtracted, so the total never decreases
    as samples are appended.

    Args:
        samples: Samples in file order

    Returns:
        Elevation gain in meters (0.0 for fewer than two samples)

    """
    gain = 0.0
    for previous, current in pairwise(samples):
        delta = current.elevation - previous.elevation
        if delta > 0:
            gain += delta
    return gain


class TrackIngestState:
    """
    Mutable parse context for one track document.

    The state only sees local tag names, attributes and element text, so any
    event-based tokenizer can drive it.
    """

    def __init__(self) -> None:
        self.open_tags: list[str] = []
        self.pending_attributes: dict[str, str] | None = None
        self.name: str | None = None
        self.notes: str | None = None
        self.link: str | None = None
        self.samples: list[TrackSample] = []
        self.skipped_samples = 0

    @property
    def parent_tag(self) -> str | None:
        """Tag enclosing the element currently open, if any."""
        if len(self.open_tags) < 2:
            return None
        return self.open_tags[-2]

    def start_element(self, tag: str, attributes: Mapping[str, str]) -> None:
        """Handle an opening tag."""
        self.open_tags.append(tag)

        if tag == "trkpt":
            self.pending_attributes = dict(attributes)
        elif tag == "link":
            href = (attributes.get("href") or "").strip()
            # The earliest declared link wins
            if href and self.link is None:
                self.link = href

    def end_element(self, tag: str, text: str | None) -> None:
        """Handle a closing tag along with the text collected for it."""
        value = (text or "").strip()

        if tag == "ele":
            self._close_elevation(value)
        elif tag == "name":
            # A track-level name overrides anything recorded before it
            if self.name is None or self.parent_tag == "trk":
                self.name = value
        elif tag == "desc":
            self.notes = value
        elif tag == "trkpt":
            self.pending_attributes = None

        if self.open_tags:
            self.open_tags.pop()

    def _close_elevation(self, value: str) -> None:
        if self.pending_attributes is None:
            # Waypoint or route point elevation, not part of the track
            return

        latitude = _parse_float(self.pending_attributes.get("lat"))
        longitude = _parse_float(self.pending_attributes.get("lon"))
        elevation = _parse_float(value)

        if latitude is None or longitude is None or elevation is None:
            self.skipped_samples += 1
            logger.debug("Skipping malformed track point %s (ele=%r)", self.pending_attributes, value)
            return

        self.samples.append(TrackSample(latitude=latitude, longitude=longitude, elevation=elevation))

    def summarize(self, fallback_name: str) -> TrackSummary:
        """
        Build the summary for everything seen so far.

        Args:
            fallback_name: Name used when no usable name metadata was found

        Returns:
            TrackSummary for the document

        """
        name = self.name or ""
        if not name or name.lower() == settings.placeholder_track_name.lower():
            name = fallback_name

        return TrackSummary(
            name=name,
            distance_km=track_distance_m(self.samples) / 1000.0,
            elevation_gain_m=elevation_gain_m(self.samples),
            notes=self.notes or "",
            link=self.link,
            sample_count=len(self.samples),
        )


def _dispatch_events(parser: ET.XMLPullParser, state: TrackIngestState) -> None:
    for event, element in parser.read_events():
        tag = _local_name(element.tag)
        if event == "start":
            state.start_element(tag, element.attrib)
        else:
            state.end_element(tag, element.text)
            # Drop consumed content so long tracks do not pile up in memory
            element.clear()


def ingest(source: BinaryIO, fallback_name: str, chunk_size: int | None = None) -> TrackSummary:
    """
    Summarize a GPX track document in a single streaming pass.

    Args:
        source: Binary stream containing the GPX document
        fallback_name: Name to use when the document has no usable name
        chunk_size: Bytes read from the stream per step (default: settings.read_chunk_size)

    Returns:
        TrackSummary for the document

    Raises:
        TrackParseError: If the stream cannot be read or is not well-formed XML

    """
    chunk_size = chunk_size or settings.read_chunk_size
    parser = ET.XMLPullParser(events=PARSE_EVENTS)
    state = TrackIngestState()

    try:
        while chunk := source.read(chunk_size):
            parser.feed(chunk)
            _dispatch_events(parser, state)
        parser.close()
        _dispatch_events(parser, state)
    except ET.ParseError as e:
        msg = f"Invalid GPX document: {e!s}"
        raise TrackParseError(msg) from e
    except OSError as e:
        msg = f"Error reading GPX document: {e!s}"
        raise TrackParseError(msg) from e

    summary = state.summarize(fallback_name)
    logger.debug(
        "Ingested track %r: %d samples kept, %d skipped, %.2f km, %.0f m gain",
        summary.name,
        summary.sample_count,
        state.skipped_samples,
        summary.distance_km,
        summary.elevation_gain_m,
    )
    return summary
