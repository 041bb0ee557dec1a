"""Coordinate Reference System (CRS) constants used throughout fieldcad.

This module defines the identifiers and pyproj objects shared by the registry,
the georeferencing transform and the exporters:
- LATLON_CRS: WGS84 geographic coordinates (EPSG:4326)
- WGS84_ID / LOCAL_ID: the two sentinel registry ids
"""

from pyproj import CRS

# WGS84 latitude/longitude coordinate system (EPSG:4326)
# Every GeoFeature produced by fieldcad is expressed in this frame
LATLON_CRS = CRS(4326)

# Registry id of the geographic reference frame
WGS84_ID = "WGS84"

# Registry id of the flat-earth pseudo-CRS used for un-surveyed placements
LOCAL_ID = "local"

# Flat-earth approximation used by the local pseudo-CRS (meters per degree)
METERS_PER_DEGREE_LNG = 111320.0
METERS_PER_DEGREE_LAT = 110540.0
