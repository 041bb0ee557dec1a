"""AutoCAD Color Index (ACI) resolution.

Only the first ten indices and the BYLAYER sentinel are mapped; anything else gets
DEFAULT_COLOR. The mapping is fixed so that drawings look the same as in other CAD
viewers using the same short palette.
"""

from typing import Optional

BYBLOCK = 0
BYLAYER = 256

# layers without an explicit colour draw in white/black (index 7)
DEFAULT_LAYER_COLOR_INDEX = 7

DEFAULT_COLOR = "#3b82f6"

ACI_TO_HEX = {
    BYBLOCK: "#ffffff",
    1: "#ff0000",
    2: "#ffff00",
    3: "#00ff00",
    4: "#00ffff",
    5: "#0000ff",
    6: "#ff00ff",
    7: "#ffffff",
    8: "#808080",
    9: "#c0c0c0",
    BYLAYER: "#ffffff",
}


def resolve_color(
    color_index: Optional[int],
    layer_color_index: Optional[int] = DEFAULT_LAYER_COLOR_INDEX,
) -> str:
    """
    Resolve an entity colour index to a hex colour string.

    An entity without an index, or with the BYLAYER sentinel, takes its layer's index.
    Indices outside the palette fall back to DEFAULT_COLOR.

    Args:
        color_index: The entity's ACI value, or None if the entity has none
        layer_color_index: The ACI value of the entity's layer; None means index 7

    Returns:
        A '#rrggbb' colour string

    Examples:
        >>> resolve_color(1)
        '#ff0000'
        >>> resolve_color(None, 3)
        '#00ff00'
        >>> resolve_color(42)
        '#3b82f6'
    """
    if layer_color_index is None:
        layer_color_index = DEFAULT_LAYER_COLOR_INDEX
    index = layer_color_index if color_index is None or color_index == BYLAYER else color_index
    return ACI_TO_HEX.get(index, DEFAULT_COLOR)
