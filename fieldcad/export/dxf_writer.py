"""Minimal DXF document writer for exports.

The output contains a HEADER section with the version marker, an ENTITIES section and
the EOF marker, and nothing else: no handles, timestamps or GUIDs, so the same input
always produces the same text. Tags are emitted with ezdxf's `TagWriter`; a full
`ezdxf.new()` document is not used because it stamps creation times and fresh GUIDs
into every file.
"""

from __future__ import annotations

import io
import logging
from typing import Iterable, List, NamedTuple, Optional, Sequence, Tuple, Union

from ezdxf.lldxf.const import DXF2000
from ezdxf.lldxf.encoding import encode
from ezdxf.lldxf.tagwriter import TagWriter
from shapely.geometry import LineString, MultiPolygon, Point, Polygon

from fieldcad.constructs.crs_definition import CrsDefinition
from fieldcad.constructs.geo_feature import GeoFeature
from fieldcad.constructs.recorded_point import RecordedPoint
from fieldcad.crs.registry import CrsRegistry, resolve_registry
from fieldcad.export.coordinate_list import export_crs, project_point
from fieldcad.export.zones import select_zone
from fieldcad.utils.keys import LAYER_KEY

log = logging.getLogger(__name__)

DXF_VERSION = "AC1015"
DXF_MIME_TYPE = "application/dxf"
DXF_ENCODING = "cp1252"

POINT_LAYER = "RECORDED_POINTS"
LABEL_LAYER = "POINT_NAMES"
PARCEL_LAYER = "PARSEL"
LINE_LAYER = "0"

LABEL_OFFSET = 0.5
LABEL_HEIGHT = 1.0
PARCEL_DECIMALS = 3

Exportable = Union[RecordedPoint, GeoFeature]
Tag = Tuple[int, str]


class CadExport(NamedTuple):
    """
    A written DXF document.

    Attributes:
        document: The DXF text, empty if there was nothing to export
        degenerate: How many points or vertices could not be projected and were written in lng, lat
    """

    document: str
    degenerate: int = 0


class ParcelExport(NamedTuple):
    crs: CrsDefinition
    document: str
    degenerate: int = 0


class _Projector:
    """Projects WGS84 coordinates into the export CRS and counts the failures."""

    def __init__(self, crs: CrsDefinition, registry: CrsRegistry):
        self.crs = crs
        self.registry = registry
        self.degenerate = 0

    def __call__(self, lat: float, lng: float) -> Tuple[float, float]:
        p = project_point(lat, lng, self.crs.id, self.registry)
        if p.degenerate:
            self.degenerate += 1
        return p.x, p.y


def _num(value: float, decimals: Optional[int] = None) -> str:
    if decimals is not None:
        return f"{value:.{decimals}f}"
    return repr(float(value))


def point_entity(x: float, y: float, layer: str = POINT_LAYER) -> List[Tag]:
    return [(0, "POINT"), (8, layer), (10, _num(x)), (20, _num(y)), (30, "0.0")]


def text_entity(
    x: float, y: float, text: str, height: float = LABEL_HEIGHT, layer: str = LABEL_LAYER
) -> List[Tag]:
    return [
        (0, "TEXT"),
        (8, layer),
        (10, _num(x)),
        (20, _num(y)),
        (30, "0.0"),
        (40, _num(height)),
        (1, text),
    ]


def lwpolyline_entity(
    vertices: Sequence[Tuple[float, float]],
    closed: bool,
    layer: str,
    decimals: Optional[int] = PARCEL_DECIMALS,
) -> List[Tag]:
    tags = [
        (0, "LWPOLYLINE"),
        (8, layer),
        (90, str(len(vertices))),
        (70, "1" if closed else "0"),
    ]
    for x, y in vertices:
        tags += [(10, _num(x, decimals)), (20, _num(y, decimals))]
    return tags


def document(entities: Iterable[List[Tag]]) -> str:
    """
    Wrap entity tags into a complete DXF document.

    Args:
        entities: Tags per entity, as produced by the *_entity helpers

    Returns:
        The DXF text, newline-terminated
    """
    stream = io.StringIO()
    writer = TagWriter(stream, write_handles=False, dxfversion=DXF2000)

    for code, value in ((0, "SECTION"), (2, "HEADER"), (9, "$ACADVER"), (1, DXF_VERSION)):
        writer.write_tag2(code, value)
    for code, value in ((0, "ENDSEC"), (0, "SECTION"), (2, "ENTITIES")):
        writer.write_tag2(code, value)
    for entity in entities:
        for code, value in entity:
            writer.write_tag2(code, value)
    writer.write_tag2(0, "ENDSEC")
    writer.write_tag2(0, "EOF")
    return stream.getvalue()


def encode_document(text: str, encoding: str = DXF_ENCODING) -> bytes:
    """
    Encode DXF text for saving to disk.

    R2000 files are not unicode; characters the codepage cannot represent (Turkish
    letters such as Ş or ğ in point names, for instance) are written as \\U+XXXX escapes,
    which CAD applications decode back.

    Args:
        text: The DXF text from to_cad_document
        encoding: The codepage of the file

    Returns:
        The encoded bytes
    """
    return encode(text, encoding)


def _ring_vertices(ring, project: _Projector) -> List[Tuple[float, float]]:
    coords = list(ring.coords)
    # LWPOLYLINE closes through its flag, so the repeated GeoJSON closing vertex is not written
    if len(coords) > 1 and coords[0] == coords[-1]:
        coords = coords[:-1]
    return [project(lat, lng) for lng, lat in coords]


def _labelled_point(lat: float, lng: float, label: Optional[str], project: _Projector) -> List[Tag]:
    x, y = project(lat, lng)
    tags = point_entity(x, y)
    if label:
        tags += text_entity(x + LABEL_OFFSET, y + LABEL_OFFSET, label)
    return tags


def _feature_entities(feature: GeoFeature, project: _Projector) -> List[List[Tag]]:
    geom = feature.geometry
    if isinstance(geom, Point):
        label = feature.properties.get("name")
        return [_labelled_point(geom.y, geom.x, label, project)]
    elif isinstance(geom, Polygon):
        return [lwpolyline_entity(_ring_vertices(geom.exterior, project), True, PARCEL_LAYER)]
    elif isinstance(geom, MultiPolygon):
        return [
            lwpolyline_entity(_ring_vertices(part.exterior, project), True, PARCEL_LAYER)
            for part in geom.geoms
        ]
    elif isinstance(geom, LineString):
        layer = feature.properties.get(LAYER_KEY) or LINE_LAYER
        vertices = [project(lat, lng) for lng, lat in geom.coords]
        return [lwpolyline_entity(vertices, False, layer)]
    log.debug(f"skipping unsupported geometry type {geom.geom_type} in DXF export")
    return []


def build_cad_export(
    items: Iterable[Exportable],
    crs_id: str,
    registry: Optional[CrsRegistry] = None,
) -> CadExport:
    """
    Write recorded points and geographic features to a DXF document in a target CRS.

    Each recorded point becomes a POINT on layer RECORDED_POINTS and a TEXT label of
    height 1.0 on layer POINT_NAMES, offset by +0.5 in x and y. Each polygon feature
    becomes a closed LWPOLYLINE of its exterior ring on layer PARSEL, with coordinates
    rounded to 3 decimals.

    Points or vertices that fail to project are written with their lng, lat and
    counted in CadExport.degenerate.

    Args:
        items: RecordedPoints and/or GeoFeatures in WGS84
        crs_id: The registry id of the target CRS
        registry: The CRS catalog; defaults to the process-wide registry

    Returns:
        The DXF text and the number of degenerate coordinates

    Raises:
        CrsNotFoundError: If the target CRS is not in the registry
        ValueError: If the target is the local pseudo-CRS
    """
    items = list(items)
    if not items:
        return CadExport(document="")

    registry = resolve_registry(registry)
    project = _Projector(export_crs(crs_id, registry), registry)

    entities: List[List[Tag]] = []
    for item in items:
        if isinstance(item, RecordedPoint):
            entities.append(_labelled_point(item.lat, item.lng, item.name, project))
        else:
            entities += _feature_entities(item, project)

    if project.degenerate:
        log.warning(f"{project.degenerate} coordinates could not be projected to {crs_id}")
    return CadExport(document=document(entities), degenerate=project.degenerate)


def to_cad_document(
    items: Iterable[Exportable],
    crs_id: str,
    registry: Optional[CrsRegistry] = None,
) -> str:
    """
    Same as build_cad_export, returning only the DXF text.

    Examples:
        >>> dxf = to_cad_document(book, "EPSG:5255")
        >>> with open("points_EPSG_5255.dxf", "wb") as f:
        ...     f.write(encode_document(dxf))
    """
    return build_cad_export(items, crs_id, registry).document


def export_parcels(
    features: Iterable[GeoFeature],
    registry: Optional[CrsRegistry] = None,
) -> Optional[ParcelExport]:
    """
    Export parcel polygons to DXF in an automatically selected transverse-Mercator zone.

    Args:
        features: The parcel features, in WGS84
        registry: The CRS catalog; defaults to the process-wide registry

    Returns:
        The chosen CRS, the DXF text and the degenerate vertex count, or None if there
        are no polygon features
    """
    polygons = [f for f in features if isinstance(f.geometry, (Polygon, MultiPolygon))]
    if not polygons:
        return None

    registry = resolve_registry(registry)
    crs = select_zone(polygons, registry)
    if crs.id not in registry:
        registry = registry.with_definitions(crs)

    log.info(f"exporting {len(polygons)} parcels in {crs.display_name}")
    result = build_cad_export(polygons, crs.id, registry)
    return ParcelExport(crs=crs, document=result.document, degenerate=result.degenerate)
