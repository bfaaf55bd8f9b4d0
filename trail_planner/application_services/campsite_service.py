"""
Campsite service module for managing known and prospective campsites.

Coordinates can be typed in directly or recovered from a shared map link.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum

from trail_planner.application_services.map_links import parse_map_link

logger = logging.getLogger(__name__)


class CampsiteType(str, Enum):
    """Primary campsite type used for map colouring."""

    BACKCOUNTRY = "Backcountry"
    ESTABLISHED = "Established"
    CROWN_LAND = "Crown Land"
    PRIVATE_PAID = "Private / Paid"
    DISPERSED = "Dispersed"
    OTHER = "Other"

    @property
    def color(self) -> str:
        """Folium marker colour for this type."""
        return CAMPSITE_TYPE_COLORS[self]


CAMPSITE_TYPE_COLORS = {
    CampsiteType.BACKCOUNTRY: "purple",
    CampsiteType.ESTABLISHED: "blue",
    CampsiteType.CROWN_LAND: "green",
    CampsiteType.PRIVATE_PAID: "orange",
    CampsiteType.DISPERSED: "beige",
    CampsiteType.OTHER: "gray",
}

# Checked in order, first matching tag set wins
CAMPSITE_TYPE_TAGS = [
    (CampsiteType.BACKCOUNTRY, {"backcountry"}),
    (CampsiteType.ESTABLISHED, {"established campground", "provincial park", "national park"}),
    (CampsiteType.CROWN_LAND, {"crown land"}),
    (CampsiteType.PRIVATE_PAID, {"private campground", "paid campground"}),
    (CampsiteType.DISPERSED, {"dispersed"}),
]


@dataclass
class Campsite:
    """A campsite, optionally located on the map."""

    name: str = "New Campsite"
    latitude: float | None = None
    longitude: float | None = None
    permit_required: bool = False
    visited: bool = False
    needs_investigation: bool = False
    access_notes: str = ""
    linked_hike_name: str = ""
    map_link: str = ""
    tags: list[str] = field(default_factory=list)
    id: str = field(default_factory=lambda: uuid.uuid4().hex)

    @property
    def has_valid_coordinates(self) -> bool:
        if self.latitude is None or self.longitude is None:
            return False
        return -90 <= self.latitude <= 90 and -180 <= self.longitude <= 180

    @property
    def primary_type(self) -> CampsiteType:
        """Determine the primary type from the campsite's tags."""
        lowered = {tag.lower() for tag in self.tags}
        for campsite_type, type_tags in CAMPSITE_TYPE_TAGS:
            if lowered & type_tags:
                return campsite_type
        return CampsiteType.OTHER


class CampsiteService:
    """Service class for campsite operations."""

    def __init__(self) -> None:
        """Initialize the campsite service."""
        self._campsites: dict[str, Campsite] = {}

    def add(self, campsite: Campsite) -> Campsite:
        """Add a campsite."""
        self._campsites[campsite.id] = campsite
        logger.info("Added campsite %r", campsite.name)
        return campsite

    def update(self, campsite: Campsite) -> Campsite:
        """
        Replace a stored campsite with new values.

        Raises:
            ValueError: If the campsite is unknown
        """
        if campsite.id not in self._campsites:
            msg = f"Unknown campsite: {campsite.id}"
            raise ValueError(msg)
        self._campsites[campsite.id] = campsite
        return campsite

    def delete(self, campsite_id: str) -> None:
        """Remove a campsite (no-op if unknown)."""
        self._campsites.pop(campsite_id, None)

    def get(self, campsite_id: str) -> Campsite | None:
        return self._campsites.get(campsite_id)

    def list_campsites(self) -> list[Campsite]:
        return sorted(self._campsites.values(), key=lambda campsite: campsite.name.lower())

    def located(self) -> list[Campsite]:
        """Get the campsites that can be placed on a map."""
        return [campsite for campsite in self.list_campsites() if campsite.has_valid_coordinates]

    @staticmethod
    def apply_map_link(campsite: Campsite, url: str, timeout: float | None = None) -> bool:
        """
        Store a map link on a campsite and take its coordinates from it.

        The coordinates are only changed when the link could be parsed; otherwise
        the existing values are kept.

        Args:
            campsite: Campsite to update in place
            url: Map share link pasted by the user
            timeout: Request timeout used when resolving a shortened link

        Returns:
            True if coordinates were updated, False otherwise
        """
        campsite.map_link = url.strip()
        coordinates = parse_map_link(campsite.map_link, timeout=timeout)
        if coordinates is None:
            return False

        campsite.latitude, campsite.longitude = coordinates
        return True
