"""
Route submission for finished recordings.

A submitter hands a recorded route to the persistence endpoint and reports
whether it was accepted. Failures are returned, not raised, and are never
retried automatically.
"""

import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol

import httpx

from lightsurvey.core.config import Settings, settings
from lightsurvey.core.errors import StorageError
from lightsurvey.core.route_store import FileRouteStore
from lightsurvey.models.route import RouteRecordingCreate

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubmissionResult:
    """
    Outcome of a route submission.

    Attributes:
        success: Whether the route was stored
        recording_id: ID assigned by the persistence endpoint
        error: Failure description when unsuccessful
    """

    success: bool
    recording_id: Optional[str] = None
    error: Optional[str] = None


class RouteSubmitter(Protocol):
    """Anything that can persist a recorded route."""

    async def submit(self, payload: RouteRecordingCreate) -> SubmissionResult:
        ...


class HttpRouteSubmitter:
    """
    Submit routes to the route-recordings endpoint over HTTP.

    The JSON body is ``{points, taskId, userId}``.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        """
        Initialize the submitter.

        Args:
            url: Full URL of the route-recordings endpoint
            timeout: Request timeout in seconds
            client: Pre-built httpx client (owned by the caller)
        """
        self.url = url
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=httpx.Timeout(timeout))

    async def __aenter__(self) -> "HttpRouteSubmitter":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def submit(self, payload: RouteRecordingCreate) -> SubmissionResult:
        try:
            response = await self.client.post(
                self.url, json=payload.model_dump(mode="json", by_alias=True)
            )
        except httpx.HTTPError as e:
            logger.error(f"Route submission to {self.url} failed: {e}")
            return SubmissionResult(success=False, error=str(e) or type(e).__name__)

        if not response.is_success:
            logger.error(f"Route submission rejected: HTTP {response.status_code}")
            return SubmissionResult(success=False, error=f"HTTP {response.status_code}")

        # Any 2xx is accepted; the id is only read from a JSON object body
        try:
            body = response.json()
        except ValueError:
            body = None

        recording_id = body.get("id") if isinstance(body, dict) else None
        if recording_id is not None:
            recording_id = str(recording_id)

        return SubmissionResult(success=True, recording_id=recording_id)


class StoreRouteSubmitter:
    """Submit routes straight into a FileRouteStore in the same process."""

    def __init__(self, store: FileRouteStore) -> None:
        self.store = store

    async def submit(self, payload: RouteRecordingCreate) -> SubmissionResult:
        try:
            stored = await self.store.save(payload)
        except StorageError as e:
            return SubmissionResult(success=False, error=e.message)
        return SubmissionResult(success=True, recording_id=stored.id)


def build_route_submitter(config: Optional[Settings] = None) -> RouteSubmitter:
    """
    Build the submitter configured for this deployment.

    Routes go to ``route_recordings_url`` when it is set, otherwise straight
    into the local recordings directory.
    """
    config = config or settings
    if config.route_recordings_url:
        return HttpRouteSubmitter(config.route_recordings_url)
    return StoreRouteSubmitter(FileRouteStore(config.recordings_dir))
