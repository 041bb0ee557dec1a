from __future__ import annotations

import math
from typing import List, Sequence, Tuple

import numpy as np

# mean earth radius in meters used by the spherical model
EARTH_RADIUS_METERS = 6371e3

LatLng = Tuple[float, float]


def distance(a: LatLng, b: LatLng) -> float:
    """
    Calculate the great-circle distance between two geographic points.

    Uses the haversine formula on a sphere of radius 6,371,000 m. This is not
    ellipsoid-accurate but is well within tolerance at site and parcel scale.

    Args:
        a: The first point as (latitude, longitude) in decimal degrees
        b: The second point as (latitude, longitude) in decimal degrees

    Returns:
        The distance in meters

    Examples:
        >>> # one minute of arc along a meridian is about a nautical mile
        >>> round(distance((41.0, 29.0), (41.0 + 1 / 60, 29.0)))
        1853
    """
    lat1, lon1 = a
    lat2, lon2 = b
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_phi = math.radians(lat2 - lat1)
    d_lambda = math.radians(lon2 - lon1)

    h = (
        math.sin(d_phi / 2) ** 2
        + math.cos(phi1) * math.cos(phi2) * math.sin(d_lambda / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))
    return EARTH_RADIUS_METERS * c


def bearing(a: LatLng, b: LatLng) -> float:
    """
    Calculate the initial bearing (forward azimuth) from one point towards another.

    Args:
        a: The start point as (latitude, longitude) in decimal degrees
        b: The end point as (latitude, longitude) in decimal degrees

    Returns:
        The bearing in degrees clockwise from true north, in [0, 360)

    Examples:
        >>> round(bearing((41.0, 29.0), (41.0, 29.1)))
        90
    """
    lat1, lon1 = a
    lat2, lon2 = b
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    d_lambda = math.radians(lon2 - lon1)

    y = math.sin(d_lambda) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(
        d_lambda
    )
    theta = math.degrees(math.atan2(y, x))
    result = (theta + 360.0) % 360.0
    # (-tiny + 360) % 360 can round up to exactly 360.0
    return 0.0 if result >= 360.0 else result


def distance_array(
    lats1: np.ndarray, lngs1: np.ndarray, lats2: np.ndarray, lngs2: np.ndarray
) -> np.ndarray:
    """Vectorised haversine distance in meters between paired point arrays."""
    phi1 = np.radians(lats1)
    phi2 = np.radians(lats2)
    d_phi = phi2 - phi1
    d_lambda = np.radians(np.asarray(lngs2) - np.asarray(lngs1))

    h = np.sin(d_phi / 2) ** 2 + np.cos(phi1) * np.cos(phi2) * np.sin(d_lambda / 2) ** 2
    return EARTH_RADIUS_METERS * 2 * np.arctan2(np.sqrt(h), np.sqrt(1 - h))


def path_lengths(points: Sequence[LatLng]) -> List[float]:
    """
    The length of each segment along an ordered path.

    Args:
        points: The path vertices as (latitude, longitude) pairs

    Returns:
        len(points) - 1 segment lengths in meters; empty for fewer than two points
    """
    return [distance(points[i], points[i + 1]) for i in range(len(points) - 1)]


def path_length(points: Sequence[LatLng]) -> float:
    return float(sum(path_lengths(points)))
