"""
Recording state machine and route buffer for the live position tracker.

The transition functions are pure so the rule "only a recording tracker
buffers positions" can be checked without a device stream.
"""

import math
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import List, Optional, Tuple

# Mean Earth radius used for route length
EARTH_RADIUS_KM = 6371.0

LatLng = Tuple[float, float]


class RecordingState(str, Enum):
    """Whether position updates are being appended to the route."""

    IDLE = "idle"
    RECORDING = "recording"


class RecordingEvent(str, Enum):
    """User actions that drive the recording state."""

    START = "start"
    STOP = "stop"


class PositionErrorCode(IntEnum):
    """Error codes reported by device geolocation."""

    PERMISSION_DENIED = 1
    POSITION_UNAVAILABLE = 2
    TIMEOUT = 3


@dataclass(frozen=True)
class PositionUpdate:
    """
    A position reported by the device.

    Attributes:
        lat: Latitude in degrees
        lng: Longitude in degrees
        accuracy: Reported accuracy radius in meters
        timestamp: Device timestamp in milliseconds
    """

    lat: float
    lng: float
    accuracy: Optional[float] = None
    timestamp: Optional[float] = None

    def as_pair(self) -> LatLng:
        return (self.lat, self.lng)


@dataclass(frozen=True)
class PositionError:
    """A geolocation failure reported by the device."""

    code: PositionErrorCode
    message: str = ""


def transition(state: RecordingState, event: RecordingEvent) -> RecordingState:
    """
    Next recording state after a user action.

    Starting while recording and stopping while idle leave the state as is.
    """
    if event is RecordingEvent.START:
        return RecordingState.RECORDING
    return RecordingState.IDLE


def accepts_positions(state: RecordingState) -> bool:
    """Whether a position update in this state is appended to the route."""
    return state is RecordingState.RECORDING


def haversine_km(a: LatLng, b: LatLng) -> float:
    """Great-circle distance between two [lat, lng] pairs in kilometres."""
    lat1, lng1 = math.radians(a[0]), math.radians(a[1])
    lat2, lng2 = math.radians(b[0]), math.radians(b[1])
    d_lat = lat2 - lat1
    d_lng = lng2 - lng1

    h = math.sin(d_lat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(d_lng / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(h))


class TrackedRoute:
    """
    Ordered [lat, lng] pairs recorded during one session.

    Points keep arrival order; nothing is sorted or de-duplicated.
    """

    def __init__(self) -> None:
        self._points: List[LatLng] = []

    def append(self, point: LatLng) -> None:
        self._points.append(point)

    def clear(self) -> None:
        self._points.clear()

    def snapshot(self) -> List[LatLng]:
        """Copy of the points, safe to hand to other components."""
        return list(self._points)

    def distance_km(self) -> float:
        """Total length of the route in kilometres."""
        return sum(
            haversine_km(self._points[i - 1], self._points[i])
            for i in range(1, len(self._points))
        )

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self):
        return iter(self._points)
