"""
Data models for Lightsurvey.
"""

from lightsurvey.models.errors import ErrorResponse
from lightsurvey.models.geometry import (
    BoundsModel,
    CenterModel,
    CoordinateModel,
    FeatureModel,
    KMZSummaryResponse,
    ParseResultResponse,
    PointModel,
    StyledFeatureModel,
    StyledParseResultResponse,
    StyleModel,
)
from lightsurvey.models.route import (
    RouteRecording,
    RouteRecordingCreate,
    RouteRecordingResponse,
)

__all__ = [
    "ErrorResponse",
    "BoundsModel",
    "CenterModel",
    "CoordinateModel",
    "FeatureModel",
    "KMZSummaryResponse",
    "ParseResultResponse",
    "PointModel",
    "StyledFeatureModel",
    "StyledParseResultResponse",
    "StyleModel",
    "RouteRecording",
    "RouteRecordingCreate",
    "RouteRecordingResponse",
]
