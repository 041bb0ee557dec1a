from __future__ import annotations

from typing import Iterable, List, NamedTuple, Optional

from fieldcad.constructs.crs_definition import CrsDefinition
from fieldcad.constructs.geo_config import AffineGeoConfig
from fieldcad.constructs.recorded_point import RecordedPoint
from fieldcad.crs.registry import CrsRegistry, resolve_registry
from fieldcad.georef.transform import PlanarResult, from_geographic

PROJECTED_DECIMALS = 3
GEOGRAPHIC_DECIMALS = 6


class CoordinateRow(NamedTuple):
    """
    One exported point.

    Attributes:
        name: The point name
        x: Easting (or longitude), formatted
        y: Northing (or latitude), formatted
        degenerate: True if the projection failed and x, y are the unprojected lng, lat
    """

    name: str
    x: str
    y: str
    degenerate: bool = False

    def to_line(self) -> str:
        return f"{self.name} {self.x} {self.y}"


def export_crs(crs_id: str, registry: Optional[CrsRegistry] = None) -> CrsDefinition:
    """
    Resolve an export target, refusing the local pseudo-CRS.

    Raises:
        CrsNotFoundError: If the id is not in the registry
        ValueError: If the id names the local pseudo-CRS, which has no fixed frame to export in
    """
    crs = resolve_registry(registry).lookup(crs_id)
    if crs.is_local:
        raise ValueError(f"cannot export coordinates in the {crs.id} pseudo-CRS")
    return crs


def project_point(
    lat: float, lng: float, crs_id: str, registry: Optional[CrsRegistry] = None
) -> PlanarResult:
    """Express a WGS84 point in a target CRS (x = easting or longitude)."""
    return from_geographic(lat, lng, AffineGeoConfig.identity(crs_id), registry)


def decimals_for(crs: CrsDefinition) -> int:
    return GEOGRAPHIC_DECIMALS if crs.is_geographic else PROJECTED_DECIMALS


def to_coordinate_list(
    points: Iterable[RecordedPoint],
    crs_id: str,
    registry: Optional[CrsRegistry] = None,
) -> List[CoordinateRow]:
    """
    Express recorded points in a target CRS as formatted (name, x, y) rows.

    Projected coordinates are written with 3 decimals (millimetres); geographic ones
    with 6 decimals, x being the longitude and y the latitude.

    Args:
        points: The points to export, in output order
        crs_id: The registry id of the target CRS
        registry: The CRS catalog; defaults to the process-wide registry

    Returns:
        One CoordinateRow per point; empty if there are no points. Rows whose projection
        failed carry degenerate=True

    Raises:
        CrsNotFoundError: If the target CRS is not in the registry
        ValueError: If the target is the local pseudo-CRS

    Examples:
        >>> rows = to_coordinate_list(book, "EPSG:5255")
        >>> rows[0]
        CoordinateRow(name='P-1', x='412345.678', y='4543210.123')
    """
    registry = resolve_registry(registry)
    crs = export_crs(crs_id, registry)
    decimals = decimals_for(crs)

    rows = []
    for p in points:
        projected = project_point(p.lat, p.lng, crs.id, registry)
        rows.append(
            CoordinateRow(
                name=p.name,
                x=f"{projected.x:.{decimals}f}",
                y=f"{projected.y:.{decimals}f}",
                degenerate=projected.degenerate,
            )
        )
    return rows


def format_coordinate_list(rows: Iterable[CoordinateRow]) -> str:
    """Render rows as '<name> <x> <y>' lines, each newline-terminated, with no header."""
    return "".join(f"{row.to_line()}\n" for row in rows)
