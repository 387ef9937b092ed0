"""
KML style model and colour conversion.

KML writes colours as ``aabbggrr`` hex; map renderers want ``#rrggbb`` plus
a separate opacity.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

# Colour used when a KML colour value is too short to read
DEFAULT_COLOR = "#3388ff"

_HEX_DIGITS = frozenset("0123456789abcdef")


@dataclass(frozen=True)
class FeatureStyle:
    """
    Rendering style of a placemark.

    Colours are None when the document does not set them, leaving the choice
    to the map renderer.

    Attributes:
        fill_color: Polygon or icon fill as ``#rrggbb``
        stroke_color: Outline or line colour as ``#rrggbb``
        stroke_width: Line width in pixels
        fill_opacity: Fill opacity from 0 to 1
        stroke_opacity: Stroke opacity from 0 to 1
    """

    fill_color: Optional[str] = None
    stroke_color: Optional[str] = None
    stroke_width: float = 2.0
    fill_opacity: float = 0.3
    stroke_opacity: float = 1.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fill_color": self.fill_color,
            "stroke_color": self.stroke_color,
            "stroke_width": self.stroke_width,
            "fill_opacity": self.fill_opacity,
            "stroke_opacity": self.stroke_opacity,
        }


def _pad(kml_color: str) -> str:
    # Short values are padded on the left, as if alpha and blue were ff
    return kml_color.strip().lower().rjust(8, "f")


def kml_color_to_hex(kml_color: Optional[str]) -> str:
    """
    Convert a KML ``aabbggrr`` colour to ``#rrggbb``.

    Args:
        kml_color: KML colour text

    Returns:
        Hex colour, or DEFAULT_COLOR for values shorter than six digits or
        containing non-hex characters
    """
    if not kml_color or len(kml_color.strip()) < 6:
        return DEFAULT_COLOR

    color = _pad(kml_color)[:8]
    if any(c not in _HEX_DIGITS for c in color):
        return DEFAULT_COLOR
    return f"#{color[6:8]}{color[4:6]}{color[2:4]}"


def kml_color_to_opacity(kml_color: Optional[str]) -> float:
    """
    Read the alpha byte of a KML colour as an opacity between 0 and 1.

    Values without an alpha byte, or with an unreadable one, are opaque.
    """
    if not kml_color or len(kml_color.strip()) < 2:
        return 1.0

    alpha = _pad(kml_color)[0:2]
    if any(c not in _HEX_DIGITS for c in alpha):
        return 1.0
    return int(alpha, 16) / 255
