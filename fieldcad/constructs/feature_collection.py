from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Union

from geopandas import GeoDataFrame, read_file

from fieldcad.constructs.geo_feature import GeoFeature
from fieldcad.utils.crs import LATLON_CRS


class FeatureCollection:
    """
    An ordered set of geographic features, such as a parcel lookup result or a
    georeferenced drawing.

    A FeatureCollection is the shape in which geometry is handed to the map-rendering
    collaborator and to the exporters. It can be built from GeoJSON mappings, GeoJSON
    files or GeoDataFrames; anything not in WGS84 is reprojected on the way in.

    Args:
        features: The features, in display order

    Examples:
        >>> parcel = {
        ...     "type": "FeatureCollection",
        ...     "features": [{
        ...         "type": "Feature",
        ...         "geometry": {"type": "Polygon", "coordinates": [[[31.4, 39.0], [31.5, 39.0], [31.5, 39.1], [31.4, 39.0]]]},
        ...         "properties": {"ada": 101, "parsel": 7},
        ...     }],
        ... }
        >>> fc = FeatureCollection.from_geojson(parcel)
        >>> len(fc)
        1
    """

    def __init__(self, features: Iterable[GeoFeature]):
        self.features: List[GeoFeature] = list(features)

    def __len__(self):
        return len(self.features)

    def __iter__(self) -> Iterator[GeoFeature]:
        return iter(self.features)

    def __getitem__(self, i: int) -> GeoFeature:
        return self.features[i]

    def __repr__(self):
        return f"FeatureCollection(features={len(self.features)})"

    @classmethod
    def from_geojson(cls, data: Union[Dict[str, Any], str]) -> FeatureCollection:
        """
        Create a collection from a GeoJSON FeatureCollection, Feature or geometry.

        Args:
            data: A GeoJSON mapping or its JSON text, in WGS84

        Returns:
            A new FeatureCollection

        Raises:
            TypeError: If the input is not GeoJSON-shaped
        """
        if isinstance(data, str):
            try:
                data = json.loads(data)
            except json.JSONDecodeError as e:
                raise TypeError("input is not valid GeoJSON text") from e

        if not isinstance(data, dict):
            raise TypeError(f"expected a GeoJSON mapping but got {type(data).__name__}")

        if data.get("type") == "FeatureCollection":
            raw = data.get("features") or []
        else:
            raw = [data]

        return cls(GeoFeature.from_geojson(f) for f in raw)

    @classmethod
    def from_geo_dataframe(cls, frame: GeoDataFrame) -> FeatureCollection:
        """
        Create a collection from a GeoDataFrame.

        Frames with a CRS other than WGS84 are reprojected first; a frame with no CRS is
        assumed to already be in WGS84. Every non-geometry column becomes a property.

        Args:
            frame: The source GeoDataFrame

        Returns:
            A new FeatureCollection
        """
        if frame.crs is not None and frame.crs != LATLON_CRS:
            frame = frame.to_crs(LATLON_CRS)

        gname = frame.geometry.name
        columns = [c for c in frame.columns if c != gname]
        features = [
            GeoFeature(geometry=row[gname], properties={c: row[c] for c in columns})
            for _, row in frame.iterrows()
            if row[gname] is not None
        ]
        return cls(features)

    @classmethod
    def from_file(cls, file: Union[str, Path]) -> FeatureCollection:
        """
        Read a collection from any vector file geopandas can open (GeoJSON, GeoPackage, ...).

        Args:
            file: Path to the file

        Returns:
            A new FeatureCollection in WGS84

        Raises:
            FileNotFoundError: If the file does not exist
        """
        filepath = Path(file)
        if not filepath.is_file():
            raise FileNotFoundError(file)
        frame = read_file(filepath)
        return cls.from_geo_dataframe(frame)

    def to_geojson(self) -> Dict[str, Any]:
        return {
            "type": "FeatureCollection",
            "features": [f.to_geojson() for f in self.features],
        }

    def to_geo_dataframe(self) -> GeoDataFrame:
        """
        Convert the collection to a GeoDataFrame in WGS84, one row per feature.

        Returns:
            A GeoDataFrame with a 'geometry' column plus one column per property key
        """
        records = [f.properties for f in self.features]
        geometries = [f.geometry for f in self.features]
        return GeoDataFrame(records, geometry=geometries, crs=LATLON_CRS)

    def polygons(self) -> List[GeoFeature]:
        return [f for f in self.features if f.is_polygon]
