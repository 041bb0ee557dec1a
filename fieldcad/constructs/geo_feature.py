from __future__ import annotations

from typing import Any, Dict, NamedTuple, Optional

from shapely.errors import GeometryTypeError
from shapely.geometry import LineString, Point, Polygon, mapping, shape
from shapely.geometry.base import BaseGeometry

from fieldcad.utils.keys import LAYER_KEY


class GeoFeature(NamedTuple):
    """
    A geographic feature ready for display or export.

    GeoFeatures are derived data: a CAD drawing layer recomputes its full set of
    features whenever its placement changes, and parcel lookups deliver them already
    in geographic form. Geometry vertices are (longitude, latitude) in WGS84, matching
    the GeoJSON axis order.

    Attributes:
        geometry: A Shapely Point, LineString or Polygon with (lng, lat) vertices
        properties: Arbitrary feature attributes; CAD features carry 'layer', 'color',
            'handle' and 'kind'

    Examples:
        >>> from shapely.geometry import Point
        >>> f = GeoFeature(Point(28.97, 41.01), {"layer": "WALLS"})
        >>> f.to_geojson()["geometry"]["type"]
        'Point'
    """

    geometry: BaseGeometry
    properties: Dict[str, Any]

    @property
    def layer(self) -> Optional[str]:
        return self.properties.get(LAYER_KEY)

    @property
    def is_polygon(self) -> bool:
        return isinstance(self.geometry, Polygon)

    @property
    def is_line(self) -> bool:
        return isinstance(self.geometry, LineString)

    @property
    def is_point(self) -> bool:
        return isinstance(self.geometry, Point)

    def to_geojson(self) -> Dict[str, Any]:
        """
        Convert the feature to a GeoJSON Feature mapping.

        Returns:
            A dict with 'type', 'geometry' and 'properties' keys
        """
        return {
            "type": "Feature",
            "geometry": mapping(self.geometry),
            "properties": dict(self.properties),
        }

    @classmethod
    def from_geojson(cls, feature: Dict[str, Any]) -> GeoFeature:
        """
        Create a feature from a GeoJSON Feature mapping, or a bare GeoJSON geometry.

        Args:
            feature: A GeoJSON-shaped dict with a 'geometry' member, or a geometry dict

        Returns:
            A new GeoFeature; missing properties become an empty dict

        Raises:
            TypeError: If the mapping has no geometry or the geometry cannot be parsed
        """
        if feature.get("type") == "Feature":
            geometry = feature.get("geometry")
            properties = feature.get("properties") or {}
        else:
            geometry = feature
            properties = feature.get("properties") or {}

        if not geometry:
            raise TypeError("GeoJSON feature has no geometry")

        try:
            geom = shape(geometry)
        except (GeometryTypeError, KeyError, ValueError) as e:
            raise TypeError(f"could not parse GeoJSON geometry: {geometry}") from e

        return cls(geometry=geom, properties=dict(properties))
