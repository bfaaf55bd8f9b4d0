"""
GPX file loader module for loading GPX tracks from local files or URLs.

This module reads GPX data from various sources, guards the file size and hands the
content to the track ingest pipeline to produce a hike summary.
"""

from __future__ import annotations

import io
import logging
from pathlib import PurePosixPath
from typing import TYPE_CHECKING
from urllib.parse import unquote, urlparse

import requests

from trail_planner.data_accessors.track_ingest import TrackParseError, ingest
from trail_planner.settings import settings

if TYPE_CHECKING:
    from pathlib import Path
    from typing import BinaryIO

    from trail_planner.data_accessors.track_ingest import TrackSummary

logger = logging.getLogger(__name__)

DEFAULT_TRACK_NAME = "Imported Track"


class GPXLoadError(Exception):
    """Exception raised when GPX file cannot be loaded or parsed."""


def _check_size(content: bytes) -> None:
    file_size_mb = len(content) / (1024 * 1024)
    max_size = settings.max_gpx_file_size_mb
    if file_size_mb > max_size:
        msg = f"File size ({file_size_mb:.1f}MB) exceeds maximum allowed size ({max_size}MB)"
        raise GPXLoadError(msg)


def fallback_name_for(source_name: str | None) -> str:
    """
    Derive a hike name from a file name or path, dropping directories and extension.

    Args:
        source_name: File name, path or URL path of the track

    Returns:
        The base name without extension, or a generic name when nothing is left
    """
    if not source_name:
        return DEFAULT_TRACK_NAME
    stem = PurePosixPath(source_name.replace("\\", "/")).stem
    return stem or DEFAULT_TRACK_NAME


class GPXLoader:
    """Class responsible for loading GPX tracks from various sources."""

    @staticmethod
    def load_from_file(file: BinaryIO, fallback_name: str | None = None) -> TrackSummary:
        """
        Load a track summary from an uploaded file object.

        Args:
            file: Binary file object containing GPX data
            fallback_name: Name used when the track has no usable name
                (default: derived from the file object's name)

        Returns:
            Summary of the track

        Raises:
            GPXLoadError: If the file is too large or cannot be parsed as GPX

        """
        if fallback_name is None:
            fallback_name = fallback_name_for(getattr(file, "name", None))

        try:
            content = file.read()
        except OSError as e:
            msg = f"Error loading GPX file: {e!s}"
            raise GPXLoadError(msg) from e

        _check_size(content)

        try:
            return ingest(io.BytesIO(content), fallback_name)
        except TrackParseError as e:
            msg = f"Invalid GPX file format: {e!s}"
            raise GPXLoadError(msg) from e

    @staticmethod
    def load_from_url(url: str, timeout: float | None = None) -> TrackSummary:
        """
        Load a track summary from a URL.

        Args:
            url: URL pointing to a GPX file
            timeout: Request timeout in seconds (default: settings.request_timeout_seconds)

        Returns:
            Summary of the track

        Raises:
            GPXLoadError: If the URL cannot be accessed or parsed as valid GPX

        """
        logger.info("Fetching GPX from %s", url)
        try:
            # Fetch GPX file from URL
            response = requests.get(url, timeout=timeout or settings.request_timeout_seconds)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            msg = f"Error fetching GPX from URL: {e!s}"
            raise GPXLoadError(msg) from e

        _check_size(response.content)

        fallback_name = fallback_name_for(unquote(urlparse(url).path))
        try:
            return ingest(io.BytesIO(response.content), fallback_name)
        except TrackParseError as e:
            msg = f"Invalid GPX file format: {e!s}"
            raise GPXLoadError(msg) from e

    @staticmethod
    def load_from_path(file_path: Path) -> TrackSummary:
        """
        Load a track summary from a local file path.

        Args:
            file_path: Path to the GPX file

        Returns:
            Summary of the track

        Raises:
            GPXLoadError: If the file cannot be found or parsed as valid GPX

        """
        try:
            with file_path.open("rb") as f:
                return GPXLoader.load_from_file(f, fallback_name=fallback_name_for(file_path.name))
        except FileNotFoundError as e:
            msg = f"File not found: {file_path}"
            raise GPXLoadError(msg) from e
        except OSError as e:
            msg = f"Error loading GPX file: {e!s}"
            raise GPXLoadError(msg) from e
