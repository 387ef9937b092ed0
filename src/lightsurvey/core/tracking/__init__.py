"""
Live position tracking and route recording.
"""

from .state import (
    PositionError,
    PositionErrorCode,
    PositionUpdate,
    RecordingEvent,
    RecordingState,
    TrackedRoute,
    accepts_positions,
    haversine_km,
    transition,
)
from .submitter import (
    HttpRouteSubmitter,
    RouteSubmitter,
    StoreRouteSubmitter,
    SubmissionResult,
    build_route_submitter,
)
from .tracker import LivePositionTracker

__all__ = [
    "LivePositionTracker",
    "PositionError",
    "PositionErrorCode",
    "PositionUpdate",
    "RecordingEvent",
    "RecordingState",
    "TrackedRoute",
    "accepts_positions",
    "haversine_km",
    "transition",
    "HttpRouteSubmitter",
    "RouteSubmitter",
    "StoreRouteSubmitter",
    "SubmissionResult",
    "build_route_submitter",
]
