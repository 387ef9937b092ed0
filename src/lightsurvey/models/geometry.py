"""
Pydantic models for KMZ parse responses.
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CoordinateModel(BaseModel):
    """A vertex of a polygon or line."""

    lat: float = Field(..., description="Latitude in degrees")
    lng: float = Field(..., description="Longitude in degrees")
    alt: float = Field(0.0, description="Altitude in meters")


class PointModel(CoordinateModel):
    """A Point geometry with the name of its placemark."""

    name: str = Field(..., description="Placemark name")


class FeatureModel(BaseModel):
    """A named polygon outer ring or line."""

    name: str = Field(..., description="Placemark name")
    coordinates: List[CoordinateModel] = Field(default_factory=list)


class ParseResultResponse(BaseModel):
    """
    Geometry extracted from a KMZ file.

    Collections keep document order.
    """

    coordinates: List[PointModel] = Field(default_factory=list)
    polygons: List[FeatureModel] = Field(default_factory=list)
    lines: List[FeatureModel] = Field(default_factory=list)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "coordinates": [
                    {"lat": -6.2088, "lng": 106.8456, "alt": 10.0, "name": "Tiang 01"}
                ],
                "polygons": [
                    {
                        "name": "Blok A",
                        "coordinates": [
                            {"lat": -6.2, "lng": 106.8, "alt": 0.0},
                            {"lat": -6.2, "lng": 106.81, "alt": 0.0},
                            {"lat": -6.21, "lng": 106.81, "alt": 0.0},
                        ],
                    }
                ],
                "lines": [],
            }
        }
    )


class StyleModel(BaseModel):
    """Rendering style resolved from the KML Style of a placemark."""

    fill_color: Optional[str] = Field(None, description="Fill colour as #rrggbb")
    stroke_color: Optional[str] = Field(None, description="Stroke colour as #rrggbb")
    stroke_width: float = 2.0
    fill_opacity: float = Field(0.3, ge=0, le=1)
    stroke_opacity: float = Field(1.0, ge=0, le=1)


class StyledFeatureModel(FeatureModel):
    """A polygon or line with its description and style."""

    description: str = ""
    style: StyleModel = Field(default_factory=StyleModel)


class StyledParseResultResponse(BaseModel):
    """Geometry extracted from a KMZ file, with styles for map rendering."""

    coordinates: List[PointModel] = Field(default_factory=list)
    polygons: List[StyledFeatureModel] = Field(default_factory=list)
    lines: List[StyledFeatureModel] = Field(default_factory=list)


class BoundsModel(BaseModel):
    """Bounding box of all extracted geometry."""

    min_lat: float
    min_lng: float
    max_lat: float
    max_lng: float


class CenterModel(BaseModel):
    """Mean position of all extracted geometry."""

    lat: float
    lng: float


class KMZSummaryResponse(BaseModel):
    """Counts, extent and archive contents of a KMZ file."""

    point_count: int
    polygon_count: int
    line_count: int
    bounds: Optional[BoundsModel] = None
    center: Optional[CenterModel] = None
    kml_files: List[str] = Field(default_factory=list)
    image_files: List[str] = Field(default_factory=list)
    archive: Dict[str, int] = Field(
        default_factory=dict, description="Total file count and uncompressed size"
    )
