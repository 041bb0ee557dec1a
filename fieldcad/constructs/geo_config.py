from __future__ import annotations

import math
from typing import Any, NamedTuple

from fieldcad.utils.crs import LOCAL_ID

DEFAULT_ORIGIN_LAT = 41.0082
DEFAULT_ORIGIN_LNG = 28.9784


class AffineGeoConfig(NamedTuple):
    """
    The placement of a CAD drawing on the earth.

    Drawing coordinates are shifted by the offset, multiplied by the uniform scale and
    rotated counter-clockwise about the drawing origin before they are handed to the
    CRS named by `crs_id`. For the local pseudo-CRS the origin anchors the flat-earth
    placement; for every other CRS the origin is unused.

    Use `create` or `replace` rather than the bare constructor so that the scale is
    validated; a NamedTuple constructor cannot refuse bad input.

    Attributes:
        crs_id: The registry id of the CRS the transformed coordinates are expressed in
        origin_lat: Latitude anchor for the local pseudo-CRS, in degrees
        origin_lng: Longitude anchor for the local pseudo-CRS, in degrees
        offset_x: Added to drawing x before scaling
        offset_y: Added to drawing y before scaling
        scale: Uniform scale factor; must be strictly positive
        rotation_degrees: Counter-clockwise rotation applied after scaling

    Examples:
        >>> config = AffineGeoConfig.create("EPSG:5255", scale=1.0)
        >>> rotated = config.replace(rotation_degrees=90)
        >>> AffineGeoConfig.create("local", scale=0)
        Traceback (most recent call last):
        ...
        ValueError: scale must be a positive number but got 0
    """

    crs_id: str
    origin_lat: float
    origin_lng: float
    offset_x: float
    offset_y: float
    scale: float
    rotation_degrees: float

    @classmethod
    def create(
        cls,
        crs_id: str,
        origin_lat: float = 0.0,
        origin_lng: float = 0.0,
        offset_x: float = 0.0,
        offset_y: float = 0.0,
        scale: float = 1.0,
        rotation_degrees: float = 0.0,
    ) -> AffineGeoConfig:
        config = cls(
            crs_id=crs_id,
            origin_lat=float(origin_lat),
            origin_lng=float(origin_lng),
            offset_x=float(offset_x),
            offset_y=float(offset_y),
            scale=float(scale),
            rotation_degrees=float(rotation_degrees),
        )
        config.validate()
        return config

    @classmethod
    def identity(cls, crs_id: str = LOCAL_ID) -> AffineGeoConfig:
        return cls.create(crs_id)

    @classmethod
    def default_local(cls) -> AffineGeoConfig:
        """The placement given to a freshly opened drawing."""
        return cls.create(
            LOCAL_ID, origin_lat=DEFAULT_ORIGIN_LAT, origin_lng=DEFAULT_ORIGIN_LNG
        )

    def validate(self):
        """
        Check the config for values no transform can use.

        Raises:
            ValueError: If the scale is zero, negative or not a number, or the crs id is empty
        """
        if not self.crs_id:
            raise ValueError("crs_id must be a non-empty registry id")
        if math.isnan(self.scale) or self.scale <= 0:
            raise ValueError(f"scale must be a positive number but got {self.scale:g}")

    def replace(self, **changes: Any) -> AffineGeoConfig:
        """
        Create a new config with some fields changed, validating the result.

        Args:
            **changes: Field names and their new values

        Returns:
            A new validated AffineGeoConfig

        Raises:
            ValueError: If the resulting config is invalid or a field name is unknown
        """
        unknown = set(changes) - set(self._fields)
        if unknown:
            raise ValueError(f"unknown config fields: {sorted(unknown)}")
        merged = {**self._asdict(), **changes}
        return AffineGeoConfig.create(**merged)
