"""
KML parsing module.

Walks every Placemark in a KML document and extracts Point, LineString and
Polygon geometry, with each feature's description and resolved style, into
a ParseResult.
"""

import logging
import math
import xml.etree.ElementTree as ET
from dataclasses import replace
from typing import Any, Dict, Iterator, List, Optional, Union
from xml.parsers import expat

from lightsurvey.core.errors import MalformedDocumentError

from .geometry import (
    Coordinate,
    LineFeature,
    ParseResult,
    PolygonFeature,
    parse_coordinate_list,
    parse_point_text,
)
from .styles import FeatureStyle, kml_color_to_hex, kml_color_to_opacity

logger = logging.getLogger(__name__)

# Wrapper used when the text is a bare list of elements instead of a document
FRAGMENT_ROOT = "kml"

_JUNK_AFTER_ROOT = expat.errors.codes[expat.errors.XML_ERROR_JUNK_AFTER_DOC_ELEMENT]

# Maximum StyleMap -> styleUrl hops followed when resolving a style
_MAX_STYLE_DEPTH = 4


def local_name(tag: object) -> str:
    """Strip any ``{namespace}`` prefix from an element tag."""
    if not isinstance(tag, str):
        # Comments and processing instructions
        return ""
    return tag.rsplit("}", 1)[-1]


def iter_named(element: ET.Element, name: str) -> Iterator[ET.Element]:
    """Yield descendants of element with the given local name, in document order."""
    for child in element.iter():
        if child is not element and local_name(child.tag) == name:
            yield child


def find_named(element: ET.Element, name: str) -> Optional[ET.Element]:
    """Return the first descendant with the given local name, or None."""
    return next(iter_named(element, name), None)


def find_child(element: ET.Element, name: str) -> Optional[ET.Element]:
    """Return the first direct child with the given local name, or None."""
    for child in element:
        if local_name(child.tag) == name:
            return child
    return None


def element_text(element: Optional[ET.Element]) -> str:
    """Full text content of an element, stripped."""
    if element is None:
        return ""
    return "".join(element.itertext()).strip()


def index_styles(root: ET.Element) -> Dict[str, ET.Element]:
    """Map the id of every shared Style and StyleMap to its element."""
    styles: Dict[str, ET.Element] = {}
    for element in root.iter():
        if local_name(element.tag) in ("Style", "StyleMap"):
            style_id = element.get("id")
            if style_id and style_id not in styles:
                styles[style_id] = element
    return styles


def resolve_style_url(
    style_url: str, styles: Dict[str, ET.Element], depth: int = 0
) -> Optional[ET.Element]:
    """
    Find the Style element a ``styleUrl`` points at.

    Only references into the same document (``#id``) are resolved. A
    StyleMap resolves to the style of its ``normal`` pair.
    """
    if not style_url.startswith("#") or depth > _MAX_STYLE_DEPTH:
        return None

    element = styles.get(style_url[1:])
    if element is None or local_name(element.tag) == "Style":
        return element

    for pair in iter_named(element, "Pair"):
        if element_text(find_child(pair, "key")) != "normal":
            continue
        inline = find_child(pair, "Style")
        if inline is not None:
            return inline
        return resolve_style_url(element_text(find_child(pair, "styleUrl")), styles, depth + 1)
    return None


def apply_style_element(element: ET.Element, style: FeatureStyle) -> FeatureStyle:
    """
    Overlay the PolyStyle, LineStyle and IconStyle of a Style element.

    IconStyle colours are read as fill, so they win over PolyStyle.
    """
    updates: Dict[str, Any] = {}

    poly_style = find_named(element, "PolyStyle")
    if poly_style is not None:
        color = element_text(find_named(poly_style, "color"))
        if color:
            updates["fill_color"] = kml_color_to_hex(color)
            updates["fill_opacity"] = kml_color_to_opacity(color)

    line_style = find_named(element, "LineStyle")
    if line_style is not None:
        color = element_text(find_named(line_style, "color"))
        if color:
            updates["stroke_color"] = kml_color_to_hex(color)
            updates["stroke_opacity"] = kml_color_to_opacity(color)
        width = element_text(find_named(line_style, "width"))
        if width:
            try:
                stroke_width = float(width)
            except ValueError:
                logger.debug(f"Ignoring unreadable line width {width!r}")
            else:
                if math.isfinite(stroke_width) and stroke_width >= 0:
                    updates["stroke_width"] = stroke_width

    icon_style = find_named(element, "IconStyle")
    if icon_style is not None:
        color = element_text(find_named(icon_style, "color"))
        if color:
            updates["fill_color"] = kml_color_to_hex(color)
            updates["fill_opacity"] = kml_color_to_opacity(color)

    return replace(style, **updates)


def extract_style(placemark: ET.Element, styles: Dict[str, ET.Element]) -> FeatureStyle:
    """
    Resolve the style of a placemark.

    The shared style named by ``styleUrl`` is applied first, then any
    inline Style on top of it.
    """
    style = FeatureStyle()

    style_url = element_text(find_child(placemark, "styleUrl"))
    if style_url:
        shared = resolve_style_url(style_url, styles)
        if shared is not None:
            style = apply_style_element(shared, style)

    inline = find_child(placemark, "Style")
    if inline is not None:
        style = apply_style_element(inline, style)

    return style


class KMLParser:
    """
    Parse KML text into a ParseResult.

    Tag names are matched without regard to namespace so both KML 2.1/2.2
    documents and un-namespaced exports are read the same way.
    """

    def __init__(self) -> None:
        self.dropped_coordinates = 0

    def parse(self, kml_content: Union[str, bytes]) -> ParseResult:
        """
        Parse KML content.

        Args:
            kml_content: KML document text (bytes are decoded as UTF-8)

        Returns:
            ParseResult with points, polygons and lines in document order

        Raises:
            MalformedDocumentError: If the content is not well-formed XML
        """
        root = self._load(kml_content)
        result = ParseResult()
        self.dropped_coordinates = 0

        placemarks = [root] if local_name(root.tag) == "Placemark" else []
        placemarks.extend(iter_named(root, "Placemark"))
        styles = index_styles(root)

        for index, placemark in enumerate(placemarks, start=1):
            self._parse_placemark(placemark, index, result, styles)

        if self.dropped_coordinates:
            logger.debug(f"Dropped {self.dropped_coordinates} invalid coordinate(s)")

        logger.info(
            f"KML parsed: {len(placemarks)} placemarks, "
            f"{len(result.coordinates)} points, "
            f"{len(result.polygons)} polygons, "
            f"{len(result.lines)} lines"
        )
        return result

    def _load(self, kml_content: Union[str, bytes]) -> ET.Element:
        if isinstance(kml_content, bytes):
            kml_content = kml_content.decode("utf-8", errors="replace")

        text = kml_content.lstrip("\ufeff").strip()
        if not text:
            raise MalformedDocumentError("KML document is empty")

        try:
            return ET.fromstring(text)
        except ET.ParseError as e:
            error = e

        # A bare sequence of placemarks has several roots; read it as a fragment
        if error.code == _JUNK_AFTER_ROOT and not text.startswith("<?xml"):
            try:
                return ET.fromstring(f"<{FRAGMENT_ROOT}>{text}</{FRAGMENT_ROOT}>")
            except ET.ParseError:
                pass

        line_number = error.position[0] if getattr(error, "position", None) else None
        logger.error(f"Failed to parse KML: {error}")
        raise MalformedDocumentError(
            f"KML is not well-formed XML: {error}",
            line_number=line_number,
        ) from error

    def _parse_placemark(
        self,
        placemark: ET.Element,
        index: int,
        result: ParseResult,
        styles: Optional[Dict[str, ET.Element]] = None,
    ) -> None:
        name = element_text(find_child(placemark, "name")) or f"Feature {index}"
        description = element_text(find_child(placemark, "description"))
        style = extract_style(placemark, styles or {})

        for point in iter_named(placemark, "Point"):
            coordinate = self._parse_point(point, name)
            if coordinate is not None:
                result.coordinates.append(coordinate)

        for polygon in iter_named(placemark, "Polygon"):
            ring = self._parse_outer_ring(polygon)
            if ring:
                result.polygons.append(
                    PolygonFeature(
                        name=name, coordinates=ring, description=description, style=style
                    )
                )

        for line_string in iter_named(placemark, "LineString"):
            coords = self._parse_coordinates(find_named(line_string, "coordinates"))
            if coords:
                result.lines.append(
                    LineFeature(
                        name=name, coordinates=coords, description=description, style=style
                    )
                )

    def _parse_point(self, point: ET.Element, name: str) -> Optional[Coordinate]:
        coords_elem = find_named(point, "coordinates")
        if coords_elem is None:
            return None

        coordinate = parse_point_text(element_text(coords_elem), name=name)
        if coordinate is None:
            self.dropped_coordinates += 1
        return coordinate

    def _parse_outer_ring(self, polygon: ET.Element) -> List[Coordinate]:
        outer = find_named(polygon, "outerBoundaryIs")
        if outer is None:
            return []

        ring = find_named(outer, "LinearRing")
        if ring is None:
            return []

        return self._parse_coordinates(find_named(ring, "coordinates"))

    def _parse_coordinates(self, coords_elem: Optional[ET.Element]) -> List[Coordinate]:
        if coords_elem is None:
            return []

        coordinates, dropped = parse_coordinate_list(element_text(coords_elem))
        self.dropped_coordinates += dropped
        return coordinates


def parse_kml_text(kml_content: Union[str, bytes]) -> ParseResult:
    """
    Convenience function to parse KML text.

    Args:
        kml_content: KML document text

    Returns:
        ParseResult
    """
    return KMLParser().parse(kml_content)
