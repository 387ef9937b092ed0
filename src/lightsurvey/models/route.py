"""
Pydantic models for surveyor route recordings.
"""

from datetime import datetime
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

LatLng = Tuple[float, float]


class RouteRecordingCreate(BaseModel):
    """
    A recorded route as submitted by the position tracker.

    Attributes:
        points: Ordered [lat, lng] pairs in arrival order
        task_id: Survey task the route belongs to
        user_id: Surveyor who recorded the route
    """

    points: List[LatLng] = Field(..., min_length=1, description="Ordered [lat, lng] pairs")
    task_id: Optional[str] = Field(None, alias="taskId")
    user_id: Optional[str] = Field(None, alias="userId")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "points": [[-6.2088, 106.8456], [-6.2090, 106.8460]],
                "taskId": "task-42",
                "userId": "surveyor-7",
            }
        },
    )

    @field_validator("points")
    @classmethod
    def validate_points(cls, v: List[LatLng]) -> List[LatLng]:
        """Reject positions outside the valid latitude/longitude range."""
        for index, (lat, lng) in enumerate(v):
            if not -90 <= lat <= 90:
                raise ValueError(f"Point {index}: latitude {lat} out of range")
            if not -180 <= lng <= 180:
                raise ValueError(f"Point {index}: longitude {lng} out of range")
        return v


class RouteRecording(RouteRecordingCreate):
    """A stored route recording."""

    id: str
    created_at: datetime

    @property
    def point_count(self) -> int:
        return len(self.points)


class RouteRecordingResponse(BaseModel):
    """Identifier of a newly stored route recording."""

    id: str
