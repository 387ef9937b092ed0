"""
Route recording API endpoints.
"""

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Request, status

from lightsurvey.core.config import settings
from lightsurvey.core.errors import NotFoundError
from lightsurvey.core.route_store import FileRouteStore
from lightsurvey.models.errors import ErrorResponse
from lightsurvey.models.route import RouteRecordingCreate, RouteRecordingResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/route-recordings", tags=["route-recordings"])


def get_route_store(request: Request) -> FileRouteStore:
    """Return the application's FileRouteStore, creating it on first use."""
    store = getattr(request.app.state, "route_store", None)
    if store is None:
        store = FileRouteStore(settings.recordings_dir)
        request.app.state.route_store = store
    return store


@router.post(
    "",
    response_model=RouteRecordingResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid route"},
        500: {"model": ErrorResponse, "description": "Recording could not be stored"},
    },
    summary="Store a route recording",
)
async def create_route_recording(
    recording: RouteRecordingCreate,
    store: FileRouteStore = Depends(get_route_store),
) -> RouteRecordingResponse:
    """
    Store a route recorded by a surveyor.

    Returns:
        The ID assigned to the recording
    """
    stored = await store.save(recording)
    return RouteRecordingResponse(id=stored.id)


@router.get("", response_model=List[str], summary="List route recording IDs")
async def list_route_recordings(
    store: FileRouteStore = Depends(get_route_store),
) -> List[str]:
    return await store.list_ids()


@router.get(
    "/{recording_id}",
    responses={404: {"model": ErrorResponse, "description": "Recording not found"}},
    summary="Get a route recording",
)
async def get_route_recording(
    recording_id: str,
    store: FileRouteStore = Depends(get_route_store),
) -> Dict[str, Any]:
    recording = await store.get(recording_id)
    if recording is None:
        raise NotFoundError(
            f"Route recording {recording_id} not found", resource="route_recording"
        )
    return recording.model_dump(mode="json", by_alias=True)
