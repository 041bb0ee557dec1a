from __future__ import annotations

import re
from enum import Enum
from typing import NamedTuple, Optional

from pyproj import CRS
from pyproj.exceptions import CRSError

_LON_0_PATTERN = re.compile(r"\+lon_0=(-?[0-9.]+)")


class CrsKind(Enum):
    GEOGRAPHIC = "geographic"
    PROJECTED = "projected"
    LOCAL = "local"


class CrsDefinition(NamedTuple):
    """
    A named coordinate reference system known to the registry.

    A CrsDefinition is an immutable catalog entry pairing a stable identifier with a
    PROJ-style parameter string. The parameter string is what gets handed to pyproj
    when coordinates need to cross into or out of this frame. The local pseudo-CRS
    has no parameter string because it is resolved with a flat-earth approximation
    instead of a projection.

    Attributes:
        id: The unique registry identifier (e.g. "WGS84", "EPSG:5254")
        display_name: A human readable name (e.g. "ITRF96 / TM30")
        kind: Whether the frame is geographic, projected or the local pseudo-CRS
        projection_parameters: The PROJ parameter string; empty for the local pseudo-CRS

    Examples:
        >>> tm30 = CrsDefinition(
        ...     "EPSG:5254",
        ...     "ITRF96 / TM30",
        ...     CrsKind.PROJECTED,
        ...     "+proj=tmerc +lat_0=0 +lon_0=30 +k=1 +x_0=500000 +y_0=0 +ellps=GRS80 +units=m +no_defs",
        ... )
        >>> tm30.central_meridian
        30.0
    """

    id: str
    display_name: str
    kind: CrsKind
    projection_parameters: str

    @property
    def is_geographic(self) -> bool:
        return self.kind is CrsKind.GEOGRAPHIC

    @property
    def is_projected(self) -> bool:
        return self.kind is CrsKind.PROJECTED

    @property
    def is_local(self) -> bool:
        return self.kind is CrsKind.LOCAL

    @property
    def central_meridian(self) -> Optional[float]:
        """
        The central meridian of a transverse-Mercator definition, parsed from `+lon_0`.

        Returns:
            The meridian in degrees, or None if this is not a transverse-Mercator frame
        """
        if "+proj=tmerc" not in self.projection_parameters:
            return None
        m = _LON_0_PATTERN.search(self.projection_parameters)
        if m is None:
            return 0.0
        return float(m.group(1))

    def to_pyproj(self) -> CRS:
        """
        Build a pyproj CRS from the PROJ parameter string.

        Returns:
            The pyproj CRS for this definition

        Raises:
            ValueError: If this is the local pseudo-CRS or the parameters cannot be parsed
        """
        if self.is_local:
            raise ValueError(f"{self.id} is a flat-earth placement and has no pyproj CRS")
        try:
            return CRS.from_proj4(self.projection_parameters)
        except CRSError as e:
            raise ValueError(
                f"Could not parse projection parameters for {self.id}: {self.projection_parameters}"
            ) from e


def transverse_mercator(
    zone: int,
    crs_id: Optional[str] = None,
    display_name: Optional[str] = None,
) -> CrsDefinition:
    """
    Construct a 3-degree transverse-Mercator definition on the GRS80 ellipsoid.

    Args:
        zone: The central meridian in degrees east
        crs_id: Optional registry id; defaults to "TM<zone>"
        display_name: Optional display name; defaults to "ITRF96 / TM<zone>"

    Returns:
        A projected CrsDefinition with false easting 500000 and unit scale factor
    """
    params = (
        f"+proj=tmerc +lat_0=0 +lon_0={zone} +k=1 +x_0=500000 +y_0=0 "
        "+ellps=GRS80 +units=m +no_defs"
    )
    return CrsDefinition(
        id=crs_id or f"TM{zone}",
        display_name=display_name or f"ITRF96 / TM{zone}",
        kind=CrsKind.PROJECTED,
        projection_parameters=params,
    )
