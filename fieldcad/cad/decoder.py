from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
from shapely.geometry import LineString, Point

from fieldcad.cad.colors import resolve_color
from fieldcad.constructs.cad_entity import (
    XY,
    CadArc,
    CadDrawing,
    CadEntity,
    CadLine,
    CadPoint,
    CadPolyline,
)
from fieldcad.constructs.geo_config import AffineGeoConfig
from fieldcad.constructs.geo_feature import GeoFeature
from fieldcad.crs.registry import CrsRegistry, resolve_registry
from fieldcad.georef.transform import to_geographic
from fieldcad.utils.keys import COLOR_KEY, HANDLE_KEY, KIND_KEY, LAYER_KEY

log = logging.getLogger(__name__)

# 32 segments, 33 vertices per arc or circle
ARC_SEGMENTS = 32


def tessellate_arc(arc: CadArc, segments: int = ARC_SEGMENTS) -> List[XY]:
    """
    Approximate an arc with evenly spaced vertices in drawing units.

    Args:
        arc: The arc or circle to tessellate
        segments: The number of straight segments. Default is 32.

    Returns:
        segments + 1 (x, y) vertices from the start angle to the end angle; for a full
        circle the first and last vertex coincide

    Examples:
        >>> ring = tessellate_arc(CadArc((0.0, 0.0), 1.0))
        >>> len(ring)
        33
    """
    start = np.radians(arc.start_angle)
    angles = start + np.linspace(0.0, np.radians(arc.sweep), segments + 1)
    cx, cy = arc.center
    xs = cx + arc.radius * np.cos(angles)
    ys = cy + arc.radius * np.sin(angles)
    return [(float(x), float(y)) for x, y in zip(xs, ys)]


def entity_vertices(entity: CadEntity) -> Optional[List[XY]]:
    """
    The drawing-space vertices of an entity, or None for a degenerate entity.

    Points yield a single vertex; polylines with fewer than two vertices are degenerate.
    A closed polyline ends on its first vertex.
    """
    if isinstance(entity, CadPoint):
        return [entity.position]
    elif isinstance(entity, CadLine):
        return [entity.start, entity.end]
    elif isinstance(entity, CadPolyline):
        if len(entity.vertices) < 2:
            return None
        vertices = list(entity.vertices)
        if entity.closed and vertices[0] != vertices[-1]:
            vertices.append(vertices[0])
        return vertices
    elif isinstance(entity, CadArc):
        return tessellate_arc(entity)
    return None


def entity_properties(entity: CadEntity, drawing: CadDrawing) -> Dict[str, object]:
    return {
        LAYER_KEY: entity.layer_name,
        HANDLE_KEY: entity.handle,
        COLOR_KEY: resolve_color(entity.color_index, drawing.layer_color(entity.layer_name)),
        KIND_KEY: entity.kind,
    }


def georeference(
    drawing: CadDrawing,
    config: AffineGeoConfig,
    registry: Optional[CrsRegistry] = None,
) -> List[GeoFeature]:
    """
    Place every entity of a parsed drawing on the earth.

    This is the repeatable half of decoding: the drawing is parsed once and this
    function is re-run whenever the placement changes. It never filters by layer
    visibility.

    Entity handling:
    - points become Point features
    - lines and polylines with at least two vertices become LineString features;
      closed polylines become closed rings
    - arcs and circles become 33-vertex LineString features
    - polylines with fewer than two vertices are dropped

    Args:
        drawing: The parsed drawing
        config: The drawing's placement
        registry: The CRS catalog; defaults to the process-wide registry

    Returns:
        One GeoFeature per supported entity, in drawing order, with 'layer', 'handle',
        'color' and 'kind' properties

    Raises:
        CrsNotFoundError: If the config names a CRS the registry does not know

    Examples:
        >>> drawing = read_drawing(open("site_plan.dxf").read())
        >>> features = georeference(drawing, AffineGeoConfig.default_local())
        >>> moved = georeference(drawing, AffineGeoConfig.default_local().replace(rotation_degrees=15))
    """
    registry = resolve_registry(registry)
    # fail on an unknown crs before doing any work
    registry.lookup(config.crs_id)

    features: List[GeoFeature] = []
    degenerate = 0

    for entity in drawing.entities:
        vertices = entity_vertices(entity)
        if vertices is None:
            continue

        placed = [to_geographic(x, y, config, registry) for x, y in vertices]
        degenerate += sum(1 for p in placed if p.degenerate)
        coords: Sequence[Tuple[float, float]] = [p.lng_lat() for p in placed]

        if isinstance(entity, CadPoint):
            geometry = Point(coords[0])
        else:
            geometry = LineString(coords)

        features.append(GeoFeature(geometry, entity_properties(entity, drawing)))

    if degenerate:
        log.warning(
            f"{degenerate} vertices could not be projected from {config.crs_id}; "
            "check the layer's coordinate system and placement"
        )

    return features


def sublayer_table(drawing: CadDrawing) -> Dict[str, bool]:
    """Every layer of the drawing, visible by default."""
    return {name: True for name in drawing.layers}
