"""Standard property key names used on GeoFeature properties.

These constants define the dictionary keys written by the CAD decoder and read by
the rendering collaborator and the exporters. Using consistent keys keeps sub-layer
filtering and colour styling working across readers.
"""

# Key for the CAD layer name a feature came from; sub-layer visibility matches on it
LAYER_KEY = "layer"

# Key for the resolved display colour (hex string)
COLOR_KEY = "color"

# Key for the DXF entity handle
HANDLE_KEY = "handle"

# Key for the source CAD entity kind (POINT, LINE, POLYLINE, ARC)
KIND_KEY = "kind"

# Default CAD layer name when an entity carries none
DEFAULT_LAYER_NAME = "0"
