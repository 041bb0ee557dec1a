"""Read DXF documents into the CadDrawing entity model.

This is a best-effort interop layer. POINT, LINE, LWPOLYLINE, 2D/3D POLYLINE, CIRCLE
and ARC entities in model space are converted; every other entity kind is skipped
without complaint.
"""

from __future__ import annotations

import io
import logging
from collections import Counter
from pathlib import Path
from typing import Dict, List, Optional, Union

import ezdxf
from ezdxf import recover
from ezdxf.document import Drawing
from ezdxf.entities import DXFGraphic
from ezdxf.lldxf.const import DXFError

from fieldcad.constructs.cad_entity import (
    CadArc,
    CadDrawing,
    CadEntity,
    CadLayerInfo,
    CadLine,
    CadPoint,
    CadPolyline,
)
from fieldcad.utils.keys import DEFAULT_LAYER_NAME

log = logging.getLogger(__name__)


def _xy(v) -> tuple:
    return float(v[0]), float(v[1])


def _convert(entity: DXFGraphic) -> Optional[CadEntity]:
    dxftype = entity.dxftype()
    layer = entity.dxf.get("layer", DEFAULT_LAYER_NAME) or DEFAULT_LAYER_NAME
    color = entity.dxf.get("color")
    handle = entity.dxf.get("handle")
    meta = dict(layer_name=layer, color_index=color, handle=handle)

    if dxftype == "POINT":
        return CadPoint(_xy(entity.dxf.location), **meta)
    elif dxftype == "LINE":
        return CadLine(_xy(entity.dxf.start), _xy(entity.dxf.end), **meta)
    elif dxftype == "LWPOLYLINE":
        vertices = tuple(_xy(p) for p in entity.get_points(format="xy"))
        return CadPolyline(vertices, closed=bool(entity.closed), **meta)
    elif dxftype == "POLYLINE":
        if entity.is_poly_face_mesh or entity.is_polygon_mesh:
            return None
        vertices = tuple(_xy(v.dxf.location) for v in entity.vertices)
        return CadPolyline(vertices, closed=bool(entity.is_closed), **meta)
    elif dxftype == "CIRCLE":
        return CadArc(_xy(entity.dxf.center), float(entity.dxf.radius), 0.0, 360.0, **meta)
    elif dxftype == "ARC":
        return CadArc(
            _xy(entity.dxf.center),
            float(entity.dxf.radius),
            float(entity.dxf.start_angle),
            float(entity.dxf.end_angle),
            **meta,
        )
    return None


def drawing_from_document(doc: Drawing) -> CadDrawing:
    """
    Convert an open ezdxf document into a CadDrawing.

    Args:
        doc: The ezdxf document

    Returns:
        The model-space entities in file order and the layer table, extended with any
        layer name an entity references but the table lacks
    """
    layers: Dict[str, CadLayerInfo] = {}
    for layer in doc.layers:
        name = layer.dxf.name
        layers[name] = CadLayerInfo(name=name, color_index=layer.color)

    entities: List[CadEntity] = []
    skipped: Counter = Counter()
    for e in doc.modelspace():
        converted = _convert(e)
        if converted is None:
            skipped[e.dxftype()] += 1
            continue
        entities.append(converted)
        if converted.layer_name not in layers:
            layers[converted.layer_name] = CadLayerInfo(name=converted.layer_name)

    if skipped:
        log.debug(f"skipped unsupported entities: {dict(skipped)}")

    return CadDrawing(entities=tuple(entities), layers=layers)


def read_drawing(content: Union[str, bytes]) -> CadDrawing:
    """
    Parse DXF content that has already been read into memory.

    Args:
        content: The DXF document as text, or raw bytes as stored on disk. Bytes are
            decoded with the codepage the document declares in its header.

    Returns:
        A new CadDrawing

    Raises:
        ValueError: If the content is not a readable DXF document

    Examples:
        >>> with open("site_plan.dxf") as f:
        ...     drawing = read_drawing(f.read())
        >>> len(drawing.entities)
        412
    """
    try:
        if isinstance(content, bytes):
            doc, _ = recover.read(io.BytesIO(content))
        else:
            doc = ezdxf.read(io.StringIO(content))
    except DXFError as e:
        raise ValueError(f"could not parse DXF content: {e}") from e
    return drawing_from_document(doc)


def read_drawing_file(file: Union[str, Path]) -> CadDrawing:
    """
    Read a DXF file from disk.

    Args:
        file: Path to the .dxf file (as string or Path object)

    Returns:
        A new CadDrawing

    Raises:
        FileNotFoundError: If the specified file does not exist
        TypeError: If the file does not have a .dxf extension
        ValueError: If the file is not a readable DXF document
    """
    filepath = Path(file)
    if not filepath.is_file():
        raise FileNotFoundError(file)
    elif not filepath.suffix.lower() == ".dxf":
        raise TypeError(
            f"file of type {filepath.suffix} does not appear to be a dxf file"
        )
    try:
        doc = ezdxf.readfile(filepath)
    except DXFError as e:
        raise ValueError(f"could not parse DXF file {filepath}: {e}") from e
    return drawing_from_document(doc)
