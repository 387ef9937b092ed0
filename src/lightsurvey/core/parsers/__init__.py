"""
KMZ/KML parsing module for Lightsurvey.

Turns survey map archives into points, polygons and lines ready for map
rendering.
"""

from .geometry import (
    Coordinate,
    LineFeature,
    ParseResult,
    PolygonFeature,
    parse_coordinate_list,
    parse_coordinate_tuple,
    parse_point_text,
)
from .kml_parser import KMLParser, extract_style, parse_kml_text
from .kmz_parser import KMZParser, extract_kml_text, parse_kmz_bytes
from .styles import FeatureStyle, kml_color_to_hex, kml_color_to_opacity

__all__ = [
    # Geometry
    "Coordinate",
    "LineFeature",
    "PolygonFeature",
    "ParseResult",
    "parse_coordinate_list",
    "parse_coordinate_tuple",
    "parse_point_text",
    # Styles
    "FeatureStyle",
    "kml_color_to_hex",
    "kml_color_to_opacity",
    # KML
    "KMLParser",
    "extract_style",
    "parse_kml_text",
    # KMZ
    "KMZParser",
    "extract_kml_text",
    "parse_kmz_bytes",
]
