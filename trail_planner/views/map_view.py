"""
Map visualization module for displaying campsites.

This module provides functionality to render an interactive map of campsites and to
pick coordinates by clicking on it.
"""

import folium
import streamlit as st
from streamlit_folium import st_folium

from trail_planner.application_services.campsite_service import Campsite
from trail_planner.settings import settings


class MapView:
    """Class for rendering interactive campsite maps."""

    @staticmethod
    def build_campsite_map(
        campsites: list[Campsite],
        pending_coordinates: tuple[float, float] | None = None,
    ) -> folium.Map | None:
        """
        Build a folium map with a marker per located campsite.

        Args:
            campsites: Campsites to show (ones without valid coordinates are skipped)
            pending_coordinates: Optional (latitude, longitude) of a location being picked

        Returns:
            The map, or None if there is nothing to show
        """
        located = [campsite for campsite in campsites if campsite.has_valid_coordinates]
        points = [(campsite.latitude, campsite.longitude) for campsite in located]
        if pending_coordinates is not None:
            points.append(pending_coordinates)

        if not points:
            return None

        center_lat = sum(point[0] for point in points) / len(points)
        center_lon = sum(point[1] for point in points) / len(points)

        m = folium.Map(
            location=[center_lat, center_lon],
            zoom_start=settings.default_map_zoom,
            tiles="OpenStreetMap",
        )

        for campsite in located:
            campsite_type = campsite.primary_type
            popup_text = f"<b>{campsite.name}</b><br>{campsite_type.value}"
            if campsite.linked_hike_name:
                popup_text += f"<br>Hike: {campsite.linked_hike_name}"
            if campsite.permit_required:
                popup_text += "<br>Permit required"

            folium.Marker(
                location=[campsite.latitude, campsite.longitude],
                popup=popup_text,
                tooltip=campsite.name,
                icon=folium.Icon(
                    color=campsite_type.color,
                    icon="ok-sign" if campsite.visited else "tree",
                    prefix="glyphicon" if campsite.visited else "fa",
                ),
            ).add_to(m)

        if pending_coordinates is not None:
            lat, lon = pending_coordinates
            folium.Marker(
                location=[lat, lon],
                popup="Selected location",
                tooltip="Selected",
                icon=folium.Icon(color="red", icon="star", prefix="fa"),
            ).add_to(m)

        if len(points) > 1:
            lats = [point[0] for point in points]
            lons = [point[1] for point in points]
            m.fit_bounds([[min(lats), min(lons)], [max(lats), max(lons)]])

        return m

    @staticmethod
    def render_map(
        campsites: list[Campsite],
        pending_coordinates: tuple[float, float] | None = None,
    ) -> dict | None:
        """
        Render the campsite map.

        Args:
            campsites: Campsites to show
            pending_coordinates: Optional (latitude, longitude) of a location being picked

        Returns:
            Dictionary containing map interaction data (clicked coordinates, etc.)
        """
        m = MapView.build_campsite_map(campsites, pending_coordinates)
        if m is None:
            st.info("No campsites with coordinates yet")
            return None

        return st_folium(
            m,
            width=None,
            height=settings.map_height,
            returned_objects=["last_clicked"],
        )

    @staticmethod
    def get_clicked_coordinates(map_data: dict | None) -> tuple[float, float] | None:
        """
        Extract clicked coordinates from map interaction data.

        Args:
            map_data: Dictionary returned from st_folium

        Returns:
            Tuple of (latitude, longitude) or None if no click detected
        """
        if map_data is None:
            return None

        last_clicked = map_data.get("last_clicked")
        if last_clicked is None:
            return None

        lat = last_clicked.get("lat")
        lng = last_clicked.get("lng")

        if lat is not None and lng is not None:
            return (float(lat), float(lng))

        return None
