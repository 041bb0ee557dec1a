from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Dict, List, NamedTuple, Optional, Tuple, Union

from fieldcad.cad.drawing_layer import DrawingLayer
from fieldcad.cad.reader import read_drawing
from fieldcad.constructs.feature_collection import FeatureCollection
from fieldcad.constructs.geo_config import AffineGeoConfig
from fieldcad.constructs.measurement import MeasurementPath
from fieldcad.constructs.recorded_point import PointBook, RecordedPoint
from fieldcad.constructs.stakeout import StakeoutReading, StakeoutSession
from fieldcad.crs.registry import CrsRegistry, resolve_registry
from fieldcad.export.coordinate_list import format_coordinate_list, to_coordinate_list
from fieldcad.export.dxf_writer import DXF_MIME_TYPE, build_cad_export, export_parcels
from fieldcad.export.naming import export_filename
from fieldcad.snapping.point_snap import PointSnapper

log = logging.getLogger(__name__)

LatLng = Tuple[float, float]
ProjectFn = Callable[[LatLng], Tuple[float, float]]

DEFAULT_EXPORT_CRS = "EPSG:5255"


class ClickMode(Enum):
    NONE = "none"
    RECORD = "record"
    MEASURE = "measure"


class ExportFile(NamedTuple):
    """
    A file ready to be saved.

    Attributes:
        filename: The suggested file name
        content: The file text
        mime_type: The MIME type to save it with
        degenerate: How many coordinates could not be projected and were written in lng, lat
    """

    filename: str
    content: str
    mime_type: str
    degenerate: int = 0


class FieldSurvey:
    """
    The state of one field session: drawing layers, parcels, recorded points, the
    measurement path and the active stakeout.

    FieldSurvey routes map clicks to the active tool and wires the core operations
    together the way the field application uses them. It holds no rendering state;
    the map collaborator reads `layers`, `parcels`, `points` and `measurement` to draw.

    Args:
        registry: The CRS catalog shared by every layer; defaults to the process-wide registry
        export_crs_id: The CRS recorded points are exported in. Default is ITRF96 / TM33.

    Examples:
        >>> survey = FieldSurvey()
        >>> survey.open_drawing("site.dxf", open("site.dxf").read())
        >>> survey.mode = ClickMode.RECORD
        >>> survey.click(41.0082, 28.9784, map_view.project)
        >>> survey.start_stakeout(survey.points.points[0].id)
        >>> survey.update_position(41.0081, 28.9783)
        >>> survey.stakeout_reading()
    """

    def __init__(
        self,
        registry: Optional[CrsRegistry] = None,
        export_crs_id: str = DEFAULT_EXPORT_CRS,
    ):
        self.registry = resolve_registry(registry)
        self.registry.lookup(export_crs_id)
        self.export_crs_id = export_crs_id

        self.layers: Dict[str, DrawingLayer] = {}
        self.parcels: Dict[str, FeatureCollection] = {}
        self.points = PointBook()
        self.measurement = MeasurementPath()
        self.snapper = PointSnapper()
        self.stakeout: Optional[StakeoutSession] = None
        self.mode = ClickMode.NONE
        self.position: Optional[LatLng] = None

    def open_drawing(
        self,
        name: str,
        content: Union[str, bytes],
        config: Optional[AffineGeoConfig] = None,
    ) -> DrawingLayer:
        """
        Parse a DXF document and add it as a drawing layer.

        Raises:
            ValueError: If the content is not a readable DXF document
        """
        layer = DrawingLayer(name, read_drawing(content), config, self.registry)
        self.layers[name] = layer
        log.info(f"opened drawing {name} with {len(layer.features)} features")
        return layer

    def add_parcels(self, name: str, geojson) -> FeatureCollection:
        collection = FeatureCollection.from_geojson(geojson)
        self.parcels[name] = collection
        return collection

    def set_export_crs(self, crs_id: str):
        self.registry.lookup(crs_id)
        self.export_crs_id = crs_id

    def click(self, lat: float, lng: float, project_fn: ProjectFn) -> Optional[LatLng]:
        """
        Handle a map click according to the active tool.

        In RECORD mode the click is snapped to a nearby recorded point (when snapping is
        on) and a new point is recorded there. In MEASURE mode the click is appended to
        the measurement path as-is.

        Args:
            lat: Clicked latitude
            lng: Clicked longitude
            project_fn: The map's (lat, lng) to screen-pixel projection

        Returns:
            The location that was used, or None if no tool is active
        """
        if self.mode is ClickMode.MEASURE:
            self.measurement.append(lat, lng)
            return lat, lng
        if self.mode is ClickMode.RECORD:
            lat, lng = self.snapper.snap((lat, lng), self.points.points, project_fn)
            self.points.record(lat, lng)
            return lat, lng
        return None

    def remove_point(self, point_id: str) -> Optional[RecordedPoint]:
        if self.stakeout is not None and self.stakeout.target_point_id == point_id:
            self.stop_stakeout()
        return self.points.remove(point_id)

    def clear_points(self):
        self.points.clear()
        self.stop_stakeout()

    def start_stakeout(self, point_id: str) -> StakeoutSession:
        """
        Start navigating to a recorded point.

        Raises:
            KeyError: If no point with that id is recorded
        """
        if point_id not in self.points:
            raise KeyError(point_id)
        self.stakeout = StakeoutSession(point_id, self.position)
        return self.stakeout

    def stop_stakeout(self):
        self.stakeout = None

    def update_position(self, lat: float, lng: float):
        self.position = (lat, lng)
        if self.stakeout is not None:
            self.stakeout.update_position(lat, lng)

    def stakeout_reading(self) -> Optional[StakeoutReading]:
        if self.stakeout is None:
            return None
        return self.stakeout.reading(self.points)

    def export_points_text(self) -> Optional[ExportFile]:
        if len(self.points) == 0:
            return None
        rows = to_coordinate_list(self.points, self.export_crs_id, self.registry)
        return ExportFile(
            filename=export_filename("points", self.export_crs_id, ".txt"),
            content=format_coordinate_list(rows),
            mime_type="text/plain",
            degenerate=sum(row.degenerate for row in rows),
        )

    def export_points_dxf(self) -> Optional[ExportFile]:
        if len(self.points) == 0:
            return None
        result = build_cad_export(self.points, self.export_crs_id, self.registry)
        return ExportFile(
            filename=export_filename("points", self.export_crs_id, ".dxf"),
            content=result.document,
            mime_type=DXF_MIME_TYPE,
            degenerate=result.degenerate,
        )

    def export_parcel_layer(self, name: str) -> Optional[ExportFile]:
        """
        Export a parcel layer to DXF in its automatically selected zone.

        Raises:
            KeyError: If there is no parcel layer with that name
        """
        result = export_parcels(self.parcels[name], self.registry)
        if result is None:
            return None
        zone = int(result.crs.central_meridian or 0)
        return ExportFile(
            filename=export_filename(name, f"TM{zone}", ".dxf"),
            content=result.document,
            mime_type=DXF_MIME_TYPE,
            degenerate=result.degenerate,
        )

    def visible_features(self) -> List:
        features = []
        for layer in self.layers.values():
            features += layer.visible_features()
        return features
