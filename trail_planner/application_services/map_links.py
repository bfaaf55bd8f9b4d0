"""
Map link module for recovering coordinates from shared map URLs.

Links pasted from a map application's share feature encode the location in a few
different ways. Extraction tries each known encoding in a fixed order and stops at
the first one that yields a valid coordinate pair. Shortened links are resolved to
their final destination first. Every failure is logged and reported as None.
"""

from __future__ import annotations

import logging
import math
import re
from urllib.parse import parse_qs, urlparse

import requests

from trail_planner.settings import settings

logger = logging.getLogger(__name__)

LL_QUERY_PARAMETER = "ll"
AT_PATTERN = re.compile(r"@([\d.-]+),([\d.-]+)")
DATA_MARKER_PATTERN = re.compile(r"!3d(-?\d+\.\d+)!4d(-?\d+\.\d+)")

Coordinates = tuple[float, float]


def _to_coordinates(latitude: str, longitude: str) -> Coordinates | None:
    try:
        lat = float(latitude)
        lon = float(longitude)
    except ValueError:
        return None

    if not (math.isfinite(lat) and math.isfinite(lon)):
        return None
    if not (-90 <= lat <= 90) or not (-180 <= lon <= 180):
        return None
    return lat, lon


def _with_scheme(url: str) -> str:
    url = url.strip()
    if "://" not in url:
        return f"https://{url}"
    return url


def _from_query(url: str) -> Coordinates | None:
    query = parse_qs(urlparse(url).query)
    for value in query.get(LL_QUERY_PARAMETER, []):
        parts = value.split(",")
        if len(parts) == 2:
            coordinates = _to_coordinates(parts[0], parts[1])
            if coordinates is not None:
                return coordinates
    return None


def _from_pattern(pattern: re.Pattern[str], url: str) -> Coordinates | None:
    match = pattern.search(url)
    if match is None:
        return None
    return _to_coordinates(match.group(1), match.group(2))


def extract_coordinates(url: str) -> Coordinates | None:
    """
    Extract a (latitude, longitude) pair from a map URL without any network access.

    The encodings are tried in this order:
    1. an ``ll=lat,lon`` query parameter
    2. an ``@lat,lon`` path segment
    3. ``!3d<lat>!4d<lon>`` data markers

    Args:
        url: URL string, typically pasted from a map application

    Returns:
        Tuple of (latitude, longitude), or None if no encoding matched
    """
    if not url or not url.strip():
        return None

    url = _with_scheme(url)
    return _from_query(url) or _from_pattern(AT_PATTERN, url) or _from_pattern(DATA_MARKER_PATTERN, url)


def is_shortened_link(url: str) -> bool:
    """Check whether the URL points at a known link-shortener domain."""
    host = (urlparse(_with_scheme(url)).hostname or "").lower()
    return any(host == domain or host.endswith(f".{domain}") for domain in settings.short_link_domains)


def resolve_shortened_link(url: str, timeout: float | None = None) -> str | None:
    """
    Follow redirects from a shortened link to its final destination.

    Args:
        url: Shortened URL
        timeout: Request timeout in seconds (default: settings.request_timeout_seconds)

    Returns:
        The final URL, or None if the request failed
    """
    try:
        with requests.get(
            _with_scheme(url),
            allow_redirects=True,
            stream=True,
            timeout=timeout or settings.request_timeout_seconds,
        ) as response:
            return response.url
    except requests.exceptions.RequestException as e:
        logger.warning("Could not resolve shortened link %s: %s", url, e)
        return None


def parse_map_link(url: str, timeout: float | None = None) -> Coordinates | None:
    """
    Recover coordinates from a shared map link, resolving shortened links if needed.

    Args:
        url: URL string pasted by the user
        timeout: Request timeout in seconds used when resolving a shortened link

    Returns:
        Tuple of (latitude, longitude), or None if the link could not be parsed
    """
    coordinates = extract_coordinates(url)
    if coordinates is not None:
        return coordinates

    if url and is_shortened_link(url):
        resolved = resolve_shortened_link(url, timeout=timeout)
        if resolved is not None:
            coordinates = extract_coordinates(resolved)
            if coordinates is not None:
                logger.info("Resolved shortened link %s to %s", url, resolved)
                return coordinates

    logger.info("Could not parse coordinates from link: %s", url)
    return None
