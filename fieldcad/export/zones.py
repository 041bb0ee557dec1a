from __future__ import annotations

import logging
import math
from typing import Iterable, List, Optional

from shapely.geometry import MultiPolygon, Polygon

from fieldcad.constructs.crs_definition import CrsDefinition, transverse_mercator
from fieldcad.constructs.geo_feature import GeoFeature
from fieldcad.crs.registry import CrsRegistry, resolve_registry

log = logging.getLogger(__name__)

ZONE_WIDTH_DEGREES = 3

# used when a feature set has no polygon to take a longitude from
DEFAULT_ZONE_MERIDIAN = 33


def first_vertex_longitude(feature: GeoFeature) -> Optional[float]:
    """The longitude of the first vertex of a polygon's first ring, or None."""
    geom = feature.geometry
    if isinstance(geom, MultiPolygon):
        if geom.is_empty:
            return None
        geom = geom.geoms[0]
    if not isinstance(geom, Polygon) or geom.is_empty:
        return None
    return float(geom.exterior.coords[0][0])


def zone_meridian(features: Iterable[GeoFeature]) -> int:
    """
    Pick the 3-degree zone meridian for a feature set.

    The centroid is approximated by the mean of each polygon's first vertex longitude,
    then rounded half-up to the nearest multiple of 3.

    Args:
        features: The features to be exported

    Returns:
        The central meridian in degrees east; 33 if no feature is a polygon

    Examples:
        >>> zone_meridian(parcels_near_eskisehir)  # first vertex at 31.4E
        30
    """
    longitudes: List[float] = [
        lon for lon in (first_vertex_longitude(f) for f in features) if lon is not None
    ]
    if not longitudes:
        return DEFAULT_ZONE_MERIDIAN
    mean = sum(longitudes) / len(longitudes)
    return int(math.floor(mean / ZONE_WIDTH_DEGREES + 0.5)) * ZONE_WIDTH_DEGREES


def select_zone(
    features: Iterable[GeoFeature],
    registry: Optional[CrsRegistry] = None,
) -> CrsDefinition:
    """
    Choose the transverse-Mercator CRS a parcel set should be exported in.

    The registry's GRS80 transverse-Mercator frame on the chosen meridian is returned
    when there is one; otherwise a "TM<zone>" definition is constructed.

    Args:
        features: The parcel features, in WGS84
        registry: The CRS catalog; defaults to the process-wide registry

    Returns:
        The projected CrsDefinition for the zone
    """
    zone = zone_meridian(features)
    found = resolve_registry(registry).find_transverse_mercator(zone)
    if found is not None:
        return found
    log.info(f"no registered frame on meridian {zone}; constructing TM{zone}")
    return transverse_mercator(zone)
