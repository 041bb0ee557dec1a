from __future__ import annotations

import logging
from typing import Any, Dict, List, NamedTuple, Optional

from fieldcad.cad.decoder import georeference, sublayer_table
from fieldcad.constructs.cad_entity import CadDrawing
from fieldcad.constructs.feature_collection import FeatureCollection
from fieldcad.constructs.geo_config import AffineGeoConfig
from fieldcad.constructs.geo_feature import GeoFeature
from fieldcad.crs.registry import CrsRegistry, resolve_registry

log = logging.getLogger(__name__)


class _Placement(NamedTuple):
    config: AffineGeoConfig
    features: List[GeoFeature]


class DrawingLayer:
    """
    A CAD drawing placed on the map.

    A DrawingLayer owns one parsed drawing, its placement config and the features
    derived from them. The config and the features are stored together and replaced
    together, so the layer is never seen with features that belong to another config.
    Sub-layer visibility is a plain table keyed by CAD layer name; it is consulted when
    rendering and never causes features to be recomputed.

    Args:
        name: A display name for the layer, usually the file name
        drawing: The parsed drawing
        config: The initial placement. Default is the local placement at the default origin.
        registry: The CRS catalog; defaults to the process-wide registry

    Attributes:
        name: The display name
        drawing: The parsed drawing
        sublayers: Visibility flags keyed by CAD layer name

    Examples:
        >>> drawing = read_drawing_file("site_plan.dxf")
        >>> layer = DrawingLayer("site_plan.dxf", drawing)
        >>> layer.reconfigure(crs_id="EPSG:5254", offset_x=412000, offset_y=4430000)
        >>> layer.toggle_sublayer("DIMENSIONS")
        >>> shown = layer.visible_features()
    """

    def __init__(
        self,
        name: str,
        drawing: CadDrawing,
        config: Optional[AffineGeoConfig] = None,
        registry: Optional[CrsRegistry] = None,
    ):
        self.name = name
        self.drawing = drawing
        self._registry = resolve_registry(registry)
        self.sublayers: Dict[str, bool] = sublayer_table(drawing)

        if config is None:
            config = AffineGeoConfig.default_local()
        self._placement = self._place(config)

    def __repr__(self):
        return (
            f"DrawingLayer(name={self.name!r}, entities={len(self.drawing)}, "
            f"crs={self.config.crs_id})"
        )

    @property
    def config(self) -> AffineGeoConfig:
        return self._placement.config

    @property
    def features(self) -> List[GeoFeature]:
        return self._placement.features

    def _place(self, config: AffineGeoConfig) -> _Placement:
        config.validate()
        self._registry.lookup(config.crs_id)
        return _Placement(config, georeference(self.drawing, config, self._registry))

    def reconfigure(self, **changes: Any) -> AffineGeoConfig:
        """
        Change the placement and recompute every feature from the parsed entities.

        The new config is validated before anything is recomputed; a rejected change
        leaves the layer exactly as it was.

        Args:
            **changes: AffineGeoConfig fields to change, e.g. scale=2.0 or crs_id="EPSG:5255"

        Returns:
            The new config

        Raises:
            ValueError: If the resulting scale is not positive or a field name is unknown
            CrsNotFoundError: If the new crs id is not in the registry
        """
        new_config = self.config.replace(**changes)
        self._placement = self._place(new_config)
        log.debug(f"re-georeferenced {self.name} with {new_config}")
        return new_config

    def set_config(self, config: AffineGeoConfig) -> AffineGeoConfig:
        self._placement = self._place(config)
        return config

    def set_sublayer_visible(self, layer_name: str, visible: bool):
        if layer_name not in self.sublayers:
            raise KeyError(layer_name)
        self.sublayers[layer_name] = visible

    def toggle_sublayer(self, layer_name: str) -> bool:
        """
        Flip the visibility of one CAD layer.

        Returns:
            The new visibility flag

        Raises:
            KeyError: If the drawing has no such layer
        """
        visible = not self.sublayers[layer_name]
        self.sublayers[layer_name] = visible
        return visible

    def is_visible(self, feature: GeoFeature) -> bool:
        # features from layers missing in the table are shown
        return self.sublayers.get(feature.layer, True)

    def visible_features(self) -> List[GeoFeature]:
        return [f for f in self.features if self.is_visible(f)]

    def to_feature_collection(self, visible_only: bool = False) -> FeatureCollection:
        return FeatureCollection(self.visible_features() if visible_only else self.features)
