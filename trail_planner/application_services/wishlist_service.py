"""
Wishlist service module for managing hikes the user wants to do.

Imported GPX tracks are summarized by the track ingest pipeline and merged into
wishlist hikes, which the user can then complete with region, priority and tags.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from trail_planner.data_accessors.gpx_loader import GPXLoader, fallback_name_for

if TYPE_CHECKING:
    from typing import BinaryIO

    from trail_planner.data_accessors.track_ingest import TrackSummary

logger = logging.getLogger(__name__)

PRIORITY_LABELS = {
    1: "Low",
    2: "Medium",
    3: "High",
    4: "Very High",
    5: "Must Do!",
}


@dataclass
class WishlistHike:
    """A hike on the wishlist."""

    name: str
    region: str = ""
    distance_km: float = 0.0
    elevation_gain_m: float = 0.0
    estimated_duration_hours: float = 0.0
    priority: int = 1  # 1 (Low) to 5 (Must Do!)
    tags: list[str] = field(default_factory=list)
    link: str | None = None
    notes: str = ""
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def priority_label(self) -> str:
        return PRIORITY_LABELS.get(self.priority, str(self.priority))


def parse_tags(text: str) -> list[str]:
    """
    Split a comma-separated tag string.

    Args:
        text: Tags as typed by the user, e.g. "alpine, lakes"

    Returns:
        List of trimmed, non-empty tags
    """
    return [tag.strip() for tag in text.split(",") if tag.strip()]


def merge_summary(hike: WishlistHike, summary: TrackSummary) -> WishlistHike:
    """
    Copy the track statistics and metadata of a summary onto a hike.

    Region, priority, tags and duration are left alone. The link is only replaced
    when the track declared one.

    Args:
        hike: Existing wishlist hike
        summary: Summary produced from a GPX track

    Returns:
        A new WishlistHike with the merged values
    """
    return replace(
        hike,
        name=summary.name,
        distance_km=summary.distance_km,
        elevation_gain_m=summary.elevation_gain_m,
        notes=summary.notes,
        link=summary.link if summary.link is not None else hike.link,
    )


def draft_from_summary(summary: TrackSummary) -> WishlistHike:
    """Create an unsaved wishlist hike from a track summary."""
    return merge_summary(WishlistHike(name=summary.name), summary)


class WishlistService:
    """Service class for wishlist hike operations."""

    def __init__(self) -> None:
        """Initialize the wishlist service."""
        self._hikes: dict[str, WishlistHike] = {}

    @staticmethod
    def _validate(hike: WishlistHike) -> None:
        if not hike.name.strip():
            msg = "Hike name must not be empty"
            raise ValueError(msg)
        if hike.priority not in PRIORITY_LABELS:
            msg = f"Priority must be between 1 and 5, got {hike.priority}"
            raise ValueError(msg)

    def import_gpx(self, file: BinaryIO, filename: str | None = None) -> WishlistHike:
        """
        Build an unsaved wishlist hike from an uploaded GPX file.

        Args:
            file: Binary file object containing GPX data
            filename: Original file name, used as fallback hike name

        Returns:
            Draft WishlistHike (not yet added to the wishlist)

        Raises:
            GPXLoadError: If the file cannot be loaded or parsed
        """
        fallback_name = fallback_name_for(filename) if filename is not None else None
        summary = GPXLoader.load_from_file(file, fallback_name=fallback_name)
        return draft_from_summary(summary)

    def add(self, hike: WishlistHike) -> WishlistHike:
        """
        Add a hike to the wishlist.

        Raises:
            ValueError: If the name is empty or the priority is out of range
        """
        self._validate(hike)
        self._hikes[hike.id] = hike
        logger.info("Added wishlist hike %r", hike.name)
        return hike

    def update(self, hike: WishlistHike) -> WishlistHike:
        """
        Replace a stored hike with new values.

        Raises:
            ValueError: If the hike is unknown or invalid
        """
        if hike.id not in self._hikes:
            msg = f"Unknown wishlist hike: {hike.id}"
            raise ValueError(msg)
        self._validate(hike)
        self._hikes[hike.id] = hike
        return hike

    def delete(self, hike_id: str) -> None:
        """Remove a hike from the wishlist (no-op if unknown)."""
        self._hikes.pop(hike_id, None)

    def get(self, hike_id: str) -> WishlistHike | None:
        return self._hikes.get(hike_id)

    def list_hikes(self) -> list[WishlistHike]:
        """
        Get all hikes, highest priority first.

        Returns:
            Hikes sorted by priority (descending) then name
        """
        return sorted(self._hikes.values(), key=lambda hike: (-hike.priority, hike.name.lower()))
