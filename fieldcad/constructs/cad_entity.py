from __future__ import annotations

from typing import Dict, NamedTuple, Optional, Tuple, Union

XY = Tuple[float, float]


class CadPoint(NamedTuple):
    position: XY
    layer_name: str = "0"
    color_index: Optional[int] = None
    handle: Optional[str] = None

    @property
    def kind(self) -> str:
        return "POINT"


class CadLine(NamedTuple):
    start: XY
    end: XY
    layer_name: str = "0"
    color_index: Optional[int] = None
    handle: Optional[str] = None

    @property
    def kind(self) -> str:
        return "LINE"


class CadPolyline(NamedTuple):
    vertices: Tuple[XY, ...]
    closed: bool = False
    layer_name: str = "0"
    color_index: Optional[int] = None
    handle: Optional[str] = None

    @property
    def kind(self) -> str:
        return "POLYLINE"


class CadArc(NamedTuple):
    """
    A circular arc in drawing units; a full circle is an arc from 0 to 360 degrees.

    Attributes:
        center: The arc centre (x, y)
        radius: The arc radius
        start_angle: Start angle in degrees, counter-clockwise from the +x axis
        end_angle: End angle in degrees; an end at or before the start wraps past 360
    """

    center: XY
    radius: float
    start_angle: float = 0.0
    end_angle: float = 360.0
    layer_name: str = "0"
    color_index: Optional[int] = None
    handle: Optional[str] = None

    @property
    def kind(self) -> str:
        return "ARC"

    @property
    def sweep(self) -> float:
        """The counter-clockwise angular span in degrees, in (0, 360]."""
        if self.end_angle <= self.start_angle:
            return self.end_angle + 360.0 - self.start_angle
        return self.end_angle - self.start_angle


# the closed set of drawing primitives the decoder understands
CadEntity = Union[CadPoint, CadLine, CadPolyline, CadArc]


class CadLayerInfo(NamedTuple):
    name: str
    color_index: Optional[int] = None


class CadDrawing(NamedTuple):
    """
    A parsed drawing: its entities in file order and its layer table.

    A CadDrawing is produced once per source document and never mutated; changing
    the placement of a drawing re-runs georeferencing over the same entities.

    Attributes:
        entities: The supported entities, in the order they appear in the document
        layers: Layer metadata keyed by layer name, covering the layer table and every
            layer name referenced by an entity
    """

    entities: Tuple[CadEntity, ...]
    layers: Dict[str, CadLayerInfo]

    def __len__(self):
        return len(self.entities)

    def layer_color(self, layer_name: str) -> Optional[int]:
        info = self.layers.get(layer_name)
        return info.color_index if info is not None else None
