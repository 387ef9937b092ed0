"""
Geometry model and coordinate parsing utilities for KML/KMZ files.

KML writes coordinates longitude-first (``lon,lat[,alt]``); everything in
this module exposes them as latitude/longitude pairs for map rendering.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple, Union

from shapely.geometry import MultiPoint

from lightsurvey.core.errors import CoordinateParseError

from .styles import FeatureStyle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Coordinate:
    """
    A single geographic point.

    Attributes:
        lat: Latitude in degrees
        lng: Longitude in degrees
        alt: Altitude in meters (0 when absent)
        name: Label inherited from the enclosing placemark
    """

    lat: float
    lng: float
    alt: float = 0.0
    name: Optional[str] = None

    def to_dict(self, include_name: bool = False) -> Dict[str, Any]:
        """Convert coordinate to its JSON representation."""
        data: Dict[str, Any] = {"lat": self.lat, "lng": self.lng, "alt": self.alt}
        if include_name:
            data["name"] = self.name
        return data


@dataclass
class LineFeature:
    """A named path made of ordered coordinates."""

    name: str
    coordinates: List[Coordinate] = field(default_factory=list)
    description: str = ""
    style: FeatureStyle = field(default_factory=FeatureStyle)

    def to_dict(self, include_style: bool = False) -> Dict[str, Any]:
        return _feature_dict(self, include_style)


@dataclass
class PolygonFeature:
    """
    A named outer boundary ring.

    Ring closure is not enforced; the vertices are kept as supplied.
    """

    name: str
    coordinates: List[Coordinate] = field(default_factory=list)
    description: str = ""
    style: FeatureStyle = field(default_factory=FeatureStyle)

    def to_dict(self, include_style: bool = False) -> Dict[str, Any]:
        return _feature_dict(self, include_style)


def _feature_dict(
    feature: Union[LineFeature, PolygonFeature], include_style: bool
) -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "name": feature.name,
        "coordinates": [c.to_dict() for c in feature.coordinates],
    }
    if include_style:
        data["description"] = feature.description
        data["style"] = feature.style.to_dict()
    return data


@dataclass
class ParseResult:
    """
    Geometry extracted from one KML document.

    Attributes:
        coordinates: Points, in document order
        polygons: Polygon outer rings, in document order
        lines: Line strings, in document order
    """

    coordinates: List[Coordinate] = field(default_factory=list)
    polygons: List[PolygonFeature] = field(default_factory=list)
    lines: List[LineFeature] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """Whether no geometry was extracted."""
        return not (self.coordinates or self.polygons or self.lines)

    def all_coordinates(self) -> List[Coordinate]:
        """Every coordinate in the result: points, then polygons, then lines."""
        coords = list(self.coordinates)
        for polygon in self.polygons:
            coords.extend(polygon.coordinates)
        for line in self.lines:
            coords.extend(line.coordinates)
        return coords

    def bounds(self) -> Optional[Tuple[float, float, float, float]]:
        """
        Bounding box of all geometry.

        Returns:
            (min_lat, min_lng, max_lat, max_lng), or None when empty
        """
        coords = self.all_coordinates()
        if not coords:
            return None

        min_x, min_y, max_x, max_y = MultiPoint([(c.lng, c.lat) for c in coords]).bounds
        return (min_y, min_x, max_y, max_x)

    def center(self) -> Optional[Tuple[float, float]]:
        """
        Mean position of all coordinates, used to center the map.

        Returns:
            (lat, lng), or None when empty
        """
        coords = self.all_coordinates()
        if not coords:
            return None

        lat = sum(c.lat for c in coords) / len(coords)
        lng = sum(c.lng for c in coords) / len(coords)
        return (lat, lng)

    def to_dict(self, include_styles: bool = False) -> Dict[str, Any]:
        """
        Convert to the JSON shape returned by the parse endpoint.

        Args:
            include_styles: Add description and style to polygons and lines
        """
        return {
            "coordinates": [c.to_dict(include_name=True) for c in self.coordinates],
            "polygons": [p.to_dict(include_style=include_styles) for p in self.polygons],
            "lines": [line.to_dict(include_style=include_styles) for line in self.lines],
        }


def _parse_float(value: str, raw: str, label: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise CoordinateParseError(raw, f"{label} is not a number")
    if not math.isfinite(number):
        raise CoordinateParseError(raw, f"{label} is not finite")
    return number


def parse_coordinate_tuple(raw: str) -> Tuple[float, float, float]:
    """
    Parse one KML coordinate tuple.

    Args:
        raw: Text of the form ``lon,lat`` or ``lon,lat,alt``

    Returns:
        (lat, lng, alt) with alt 0.0 when missing or unreadable

    Raises:
        CoordinateParseError: If longitude or latitude is not a finite number
    """
    parts = [p.strip() for p in raw.split(",")]
    if len(parts) < 2:
        raise CoordinateParseError(raw, "expected at least longitude and latitude")

    lng = _parse_float(parts[0], raw, "longitude")
    lat = _parse_float(parts[1], raw, "latitude")

    alt = 0.0
    if len(parts) > 2 and parts[2]:
        try:
            alt = _parse_float(parts[2], raw, "altitude")
        except CoordinateParseError:
            alt = 0.0

    return lat, lng, alt


def parse_point_text(text: str, name: Optional[str] = None) -> Optional[Coordinate]:
    """
    Parse the coordinates text of a Point.

    Only the first tuple is read. Whitespace around the commas is tolerated
    since hand-written survey points often contain it.

    Args:
        text: Content of the Point's coordinates element
        name: Placemark name to attach

    Returns:
        Coordinate, or None if the tuple is invalid
    """
    fields = text.strip().split(",")[:3]
    first_tuple = ",".join(f.split()[0] if f.split() else "" for f in fields)

    try:
        lat, lng, alt = parse_coordinate_tuple(first_tuple)
    except CoordinateParseError as e:
        logger.debug(f"Dropping point: {e}")
        return None

    return Coordinate(lat=lat, lng=lng, alt=alt, name=name)


def parse_coordinate_list(text: str) -> Tuple[List[Coordinate], int]:
    """
    Parse a whitespace-separated list of coordinate tuples.

    Invalid tuples are skipped individually; the rest keep document order.

    Args:
        text: Content of a LineString or LinearRing coordinates element

    Returns:
        Tuple of (valid coordinates, number of dropped tuples)
    """
    coordinates: List[Coordinate] = []
    dropped = 0

    for token in text.split():
        try:
            lat, lng, alt = parse_coordinate_tuple(token)
        except CoordinateParseError as e:
            logger.debug(f"Dropping coordinate: {e}")
            dropped += 1
            continue
        coordinates.append(Coordinate(lat=lat, lng=lng, alt=alt))

    return coordinates, dropped
