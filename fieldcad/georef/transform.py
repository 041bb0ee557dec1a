"""Georeferencing of CAD drawing coordinates.

Drawing coordinates reach the earth in two stages: an affine stage (offset, uniform
scale, counter-clockwise rotation) in drawing units, then either a flat-earth
placement for the local pseudo-CRS or an inverse projection from the config's CRS
into WGS84. `from_geographic` runs the same stages backwards.
"""

from __future__ import annotations

import logging
import math
from functools import lru_cache
from typing import NamedTuple, Optional, Tuple

import numpy as np
from pyproj import CRS, Transformer
from pyproj.exceptions import ProjError
from shapely.geometry.base import BaseGeometry
from shapely.ops import transform

from fieldcad.constructs.geo_config import AffineGeoConfig
from fieldcad.crs.registry import CrsRegistry, resolve_registry
from fieldcad.utils.crs import (
    LATLON_CRS,
    METERS_PER_DEGREE_LAT,
    METERS_PER_DEGREE_LNG,
    WGS84_ID,
)

log = logging.getLogger(__name__)


class GeographicResult(NamedTuple):
    """
    The outcome of placing a drawing coordinate on the earth.

    When the inverse projection fails the result is flagged as degenerate and carries
    the post-affine, unprojected coordinates in place of (lng, lat) so that the caller
    can still draw something.

    Attributes:
        lat: Latitude in degrees, or the unprojected y when degenerate
        lng: Longitude in degrees, or the unprojected x when degenerate
        degenerate: True if the projection failed and the fallback was used
    """

    lat: float
    lng: float
    degenerate: bool = False

    def lng_lat(self) -> Tuple[float, float]:
        return self.lng, self.lat


class PlanarResult(NamedTuple):
    """
    The outcome of moving a geographic coordinate back into drawing units.

    Attributes:
        x: Drawing x, or the untransformed longitude when degenerate
        y: Drawing y, or the untransformed latitude when degenerate
        degenerate: True if the forward projection failed
    """

    x: float
    y: float
    degenerate: bool = False


@lru_cache(maxsize=64)
def _to_latlon_transformer(projection_parameters: str) -> Transformer:
    return Transformer.from_crs(
        CRS.from_proj4(projection_parameters), LATLON_CRS, always_xy=True
    )


@lru_cache(maxsize=64)
def _from_latlon_transformer(projection_parameters: str) -> Transformer:
    return Transformer.from_crs(
        LATLON_CRS, CRS.from_proj4(projection_parameters), always_xy=True
    )


def apply_affine(x: float, y: float, config: AffineGeoConfig) -> Tuple[float, float]:
    """
    Offset, scale, then rotate a drawing coordinate counter-clockwise about the origin.

    Args:
        x: Drawing x
        y: Drawing y
        config: The placement to apply

    Returns:
        The transformed (x, y) in the config's projected plane
    """
    sx = (x + config.offset_x) * config.scale
    sy = (y + config.offset_y) * config.scale
    if config.rotation_degrees == 0:
        return sx, sy
    rad = math.radians(config.rotation_degrees)
    cos_r, sin_r = math.cos(rad), math.sin(rad)
    return sx * cos_r - sy * sin_r, sx * sin_r + sy * cos_r


def invert_affine(x: float, y: float, config: AffineGeoConfig) -> Tuple[float, float]:
    """Undo `apply_affine`: rotate clockwise, divide by scale, subtract the offset."""
    if config.rotation_degrees != 0:
        rad = math.radians(config.rotation_degrees)
        cos_r, sin_r = math.cos(rad), math.sin(rad)
        x, y = x * cos_r + y * sin_r, -x * sin_r + y * cos_r
    return x / config.scale - config.offset_x, y / config.scale - config.offset_y


def _finite(*values: float) -> bool:
    return all(math.isfinite(v) for v in values)


def to_geographic(
    x: float,
    y: float,
    config: AffineGeoConfig,
    registry: Optional[CrsRegistry] = None,
) -> GeographicResult:
    """
    Place a drawing coordinate on the earth.

    Args:
        x: Drawing x
        y: Drawing y
        config: The drawing's placement
        registry: The CRS catalog; defaults to the process-wide registry

    Returns:
        A GeographicResult in WGS84. A failed inverse projection is logged and returned
        with degenerate=True and the unprojected coordinates instead of raising.

    Raises:
        CrsNotFoundError: If the config names a CRS the registry does not know

    Examples:
        >>> config = AffineGeoConfig.create("local", origin_lat=41.0, origin_lng=29.0)
        >>> round(to_geographic(111.32, 0.0, config).lng, 6)
        29.001
    """
    crs = resolve_registry(registry).lookup(config.crs_id)
    px, py = apply_affine(x, y, config)

    if crs.is_local:
        return GeographicResult(
            lat=config.origin_lat + py / METERS_PER_DEGREE_LAT,
            lng=config.origin_lng + px / METERS_PER_DEGREE_LNG,
        )
    if crs.id == WGS84_ID:
        return GeographicResult(lat=py, lng=px)

    try:
        transformer = _to_latlon_transformer(crs.projection_parameters)
        lng, lat = transformer.transform(px, py, errcheck=True)
    except ProjError as e:
        log.warning(
            f"inverse projection from {crs.id} failed for ({px}, {py}); "
            f"using unprojected coordinates: {e}"
        )
        return GeographicResult(lat=py, lng=px, degenerate=True)

    if not _finite(lng, lat):
        log.warning(
            f"inverse projection from {crs.id} produced ({lng}, {lat}) for ({px}, {py}); "
            "using unprojected coordinates"
        )
        return GeographicResult(lat=py, lng=px, degenerate=True)

    return GeographicResult(lat=lat, lng=lng)


def from_geographic(
    lat: float,
    lng: float,
    config: AffineGeoConfig,
    registry: Optional[CrsRegistry] = None,
) -> PlanarResult:
    """
    Move a WGS84 coordinate back into drawing units for the given placement.

    This is the exact inverse of `to_geographic`: forward projection into the config's
    CRS (or the inverse flat-earth conversion), inverse rotation, inverse scale and
    inverse offset. Exporters call it with an identity config to express geographic
    points in a target CRS.

    Args:
        lat: Latitude in degrees
        lng: Longitude in degrees
        config: The placement to undo
        registry: The CRS catalog; defaults to the process-wide registry

    Returns:
        A PlanarResult. A failed forward projection is logged and returned with
        degenerate=True carrying the untransformed (lng, lat).

    Raises:
        CrsNotFoundError: If the config names a CRS the registry does not know
    """
    crs = resolve_registry(registry).lookup(config.crs_id)

    if crs.is_local:
        px = (lng - config.origin_lng) * METERS_PER_DEGREE_LNG
        py = (lat - config.origin_lat) * METERS_PER_DEGREE_LAT
    elif crs.id == WGS84_ID:
        px, py = lng, lat
    else:
        try:
            transformer = _from_latlon_transformer(crs.projection_parameters)
            px, py = transformer.transform(lng, lat, errcheck=True)
        except ProjError as e:
            log.warning(f"forward projection into {crs.id} failed for ({lng}, {lat}): {e}")
            return PlanarResult(x=lng, y=lat, degenerate=True)
        if not _finite(px, py):
            log.warning(
                f"forward projection into {crs.id} produced ({px}, {py}) for ({lng}, {lat})"
            )
            return PlanarResult(x=lng, y=lat, degenerate=True)

    x, y = invert_affine(px, py, config)
    return PlanarResult(x=x, y=y)


def transform_geometry(
    geometry: BaseGeometry,
    config: AffineGeoConfig,
    registry: Optional[CrsRegistry] = None,
) -> BaseGeometry:
    """
    Place every vertex of a drawing-space shapely geometry on the earth.

    Args:
        geometry: A geometry in drawing units
        config: The drawing's placement
        registry: The CRS catalog; defaults to the process-wide registry

    Returns:
        The same kind of geometry with (lng, lat) vertices
    """
    registry = resolve_registry(registry)

    def _place(xs, ys, zs=None):
        placed = [
            to_geographic(float(x), float(y), config, registry)
            for x, y in zip(np.atleast_1d(xs), np.atleast_1d(ys))
        ]
        return [p.lng for p in placed], [p.lat for p in placed]

    return transform(_place, geometry)


def project_geometry(
    geometry: BaseGeometry,
    config: AffineGeoConfig,
    registry: Optional[CrsRegistry] = None,
) -> BaseGeometry:
    """
    Move every (lng, lat) vertex of a geographic shapely geometry into drawing units.

    Args:
        geometry: A geometry with (lng, lat) vertices
        config: The placement to undo; an identity config expresses the geometry in its CRS
        registry: The CRS catalog; defaults to the process-wide registry

    Returns:
        The same kind of geometry in the config's planar coordinates
    """
    registry = resolve_registry(registry)

    def _project(xs, ys, zs=None):
        projected = [
            from_geographic(float(lat), float(lng), config, registry)
            for lng, lat in zip(np.atleast_1d(xs), np.atleast_1d(ys))
        ]
        return [p.x for p in projected], [p.y for p in projected]

    return transform(_project, geometry)
