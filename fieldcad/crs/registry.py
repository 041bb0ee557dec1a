"""The catalog of coordinate reference systems known to fieldcad.

The registry is built once and never mutated. Components receive it as an argument
and fall back to `default_registry()` when none is given. Adding a frame is a catalog
edit in `DEFAULT_DEFINITIONS`; nothing else in the package needs to change.
"""

from __future__ import annotations

from functools import lru_cache
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Optional

from fieldcad.constructs.crs_definition import (
    CrsDefinition,
    CrsKind,
    transverse_mercator,
)
from fieldcad.utils.crs import LOCAL_ID, WGS84_ID

ED50_TOWGS84 = "+towgs84=-84,-107,-120,0,0,0,0"

DEFAULT_DEFINITIONS = (
    CrsDefinition(
        WGS84_ID,
        "WGS84 (Lat/Lng)",
        CrsKind.GEOGRAPHIC,
        "+proj=longlat +datum=WGS84 +no_defs",
    ),
    CrsDefinition(LOCAL_ID, "Local (Manual Placing)", CrsKind.LOCAL, ""),
    CrsDefinition(
        "EPSG:3857",
        "Web Mercator",
        CrsKind.PROJECTED,
        "+proj=merc +a=6378137 +b=6378137 +lat_ts=0.0 +lon_0=0.0 +x_0=0.0 +y_0=0 "
        "+k=1.0 +units=m +nadgrids=@null +wktext +no_defs",
    ),
    transverse_mercator(27, "EPSG:5253", "ITRF96 / TM27"),
    transverse_mercator(30, "EPSG:5254", "ITRF96 / TM30"),
    transverse_mercator(33, "EPSG:5255", "ITRF96 / TM33"),
    CrsDefinition(
        "ED50_30",
        "ED50 / TM30",
        CrsKind.PROJECTED,
        "+proj=tmerc +lat_0=0 +lon_0=30 +k=1 +x_0=500000 +y_0=0 +ellps=intl "
        f"{ED50_TOWGS84} +units=m +no_defs",
    ),
    CrsDefinition(
        "ED50_33",
        "ED50 / TM33",
        CrsKind.PROJECTED,
        "+proj=tmerc +lat_0=0 +lon_0=33 +k=1 +x_0=500000 +y_0=0 +ellps=intl "
        f"{ED50_TOWGS84} +units=m +no_defs",
    ),
)


class CrsNotFoundError(KeyError):
    """Raised when a CRS id is not in the registry."""

    def __init__(self, crs_id: str):
        super().__init__(crs_id)
        self.crs_id = crs_id

    def __str__(self):
        return f"unknown coordinate reference system: {self.crs_id!r}"


class CrsRegistry:
    """
    An immutable catalog of named coordinate reference systems.

    The registry maps CRS ids to CrsDefinition entries. It is read-only after
    construction so a single instance can be shared by every drawing layer and
    exporter without locking.

    Args:
        definitions: The catalog entries; ids must be unique

    Raises:
        ValueError: If two definitions share an id

    Examples:
        >>> registry = default_registry()
        >>> registry.lookup("EPSG:5254").display_name
        'ITRF96 / TM30'
        >>> "WGS84" in registry
        True
    """

    def __init__(self, definitions: Iterable[CrsDefinition]):
        catalog: Dict[str, CrsDefinition] = {}
        for d in definitions:
            if d.id in catalog:
                raise ValueError(f"duplicate crs id in registry: {d.id}")
            catalog[d.id] = d
        self._catalog = MappingProxyType(catalog)

    def __contains__(self, crs_id: object) -> bool:
        return crs_id in self._catalog

    def __iter__(self) -> Iterator[CrsDefinition]:
        return iter(self._catalog.values())

    def __len__(self):
        return len(self._catalog)

    def __repr__(self):
        return f"CrsRegistry({list(self._catalog)})"

    def ids(self) -> List[str]:
        return list(self._catalog)

    def lookup(self, crs_id: str) -> CrsDefinition:
        """
        Look up a CRS definition by id.

        Args:
            crs_id: The registry id, e.g. "WGS84", "local" or "EPSG:5255"

        Returns:
            The matching CrsDefinition

        Raises:
            CrsNotFoundError: If no definition has that id
        """
        try:
            return self._catalog[crs_id]
        except KeyError:
            raise CrsNotFoundError(crs_id) from None

    def projected(self) -> List[CrsDefinition]:
        return [d for d in self._catalog.values() if d.is_projected]

    def find_transverse_mercator(self, meridian: float) -> Optional[CrsDefinition]:
        """
        Find the first GRS80 transverse-Mercator definition on the given central meridian.

        Args:
            meridian: The central meridian in degrees east

        Returns:
            The matching definition, or None if the catalog has no such frame
        """
        for d in self._catalog.values():
            if d.central_meridian == meridian and "+ellps=GRS80" in d.projection_parameters:
                return d
        return None

    def with_definitions(self, *definitions: CrsDefinition) -> CrsRegistry:
        """Return a new registry extended with extra definitions."""
        return CrsRegistry([*self._catalog.values(), *definitions])


@lru_cache(maxsize=1)
def default_registry() -> CrsRegistry:
    """The process-wide default catalog, built on first use."""
    return CrsRegistry(DEFAULT_DEFINITIONS)


def resolve_registry(registry: Optional[CrsRegistry]) -> CrsRegistry:
    return registry if registry is not None else default_registry()
