"""
Live position tracker.

Keeps the latest device position and, while recording, buffers the route
a surveyor walks. Finished routes are handed to a RouteSubmitter.
"""

import asyncio
import contextlib
import logging
from typing import AsyncIterable, AsyncIterator, Optional, Union

from pydantic import ValidationError

from lightsurvey.core.logging_config import LogContext
from lightsurvey.models.route import RouteRecordingCreate

from .state import (
    PositionError,
    PositionErrorCode,
    PositionUpdate,
    RecordingEvent,
    RecordingState,
    TrackedRoute,
    accepts_positions,
    transition,
)
from .submitter import RouteSubmitter, SubmissionResult

logger = logging.getLogger(__name__)

PositionEvent = Union[PositionUpdate, PositionError]

_ERROR_MESSAGES = {
    PositionErrorCode.PERMISSION_DENIED: "location permission denied",
    PositionErrorCode.POSITION_UNAVAILABLE: "position unavailable",
    PositionErrorCode.TIMEOUT: "position request timed out",
}


class LivePositionTracker:
    """
    Track the device position and record routes on demand.

    Position tracking and recording are independent: every update moves
    ``current_position``, but only updates received while recording are
    appended to ``route``.

    Attributes:
        submitter: Destination for finished routes
        task_id: Survey task the routes belong to
        user_id: Surveyor recording the routes
    """

    def __init__(
        self,
        submitter: Optional[RouteSubmitter] = None,
        task_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> None:
        self.submitter = submitter
        self.task_id = task_id
        self.user_id = user_id
        self.current_position: Optional[PositionUpdate] = None
        self.route = TrackedRoute()
        self._state = RecordingState.IDLE

    @property
    def state(self) -> RecordingState:
        return self._state

    @property
    def is_recording(self) -> bool:
        return self._state is RecordingState.RECORDING

    def on_position(self, update: PositionUpdate) -> None:
        """Handle a position update from the device stream."""
        self.current_position = update
        if accepts_positions(self._state):
            self.route.append(update.as_pair())

    def on_error(self, error: PositionError) -> None:
        """Log a geolocation error; the subscription keeps running."""
        reason = _ERROR_MESSAGES.get(error.code, "geolocation error")
        logger.warning(f"Geolocation error ({reason}): {error.message}")

    def start(self) -> bool:
        """
        Start a new recording.

        Returns:
            False if a recording was already active, True otherwise
        """
        if self.is_recording:
            logger.debug("Recording already active, ignoring start")
            return False

        self.route.clear()
        self._state = transition(self._state, RecordingEvent.START)
        logger.info("Route recording started")
        return True

    async def stop(self, submit: bool = True) -> Optional[SubmissionResult]:
        """
        Stop recording and optionally submit the route.

        The route stays readable after stopping and is only cleared when the
        next recording starts, whether or not the submission succeeded.

        Args:
            submit: Whether to hand the route to the submitter

        Returns:
            SubmissionResult when a submission was attempted, None otherwise
        """
        if not self.is_recording:
            return None

        self._state = transition(self._state, RecordingEvent.STOP)
        logger.info(f"Route recording stopped with {len(self.route)} points")

        if not submit or self.submitter is None:
            return None

        points = self.route.snapshot()
        if not points:
            return SubmissionResult(success=False, error="No points recorded")

        with LogContext(task_id=self.task_id, user_id=self.user_id):
            try:
                payload = RouteRecordingCreate(
                    points=points, task_id=self.task_id, user_id=self.user_id
                )
            except ValidationError as e:
                # A device fix outside the valid range; the route stays in the buffer
                reason = e.errors()[0]["msg"]
                logger.error(f"Recorded route is not submittable: {reason}")
                return SubmissionResult(success=False, error=f"Invalid route: {reason}")

            result = await self.submitter.submit(payload)

            if result.success:
                logger.info(f"Route submitted as {result.recording_id}")
            else:
                logger.error(f"Route submission failed: {result.error}")
        return result

    async def consume(self, source: AsyncIterable[PositionEvent]) -> None:
        """
        Feed position events from a device stream into the tracker.

        Runs until the stream ends or the task is cancelled.
        """
        async for event in source:
            if isinstance(event, PositionError):
                self.on_error(event)
            else:
                self.on_position(event)

    @contextlib.asynccontextmanager
    async def watch(self, source: AsyncIterable[PositionEvent]) -> AsyncIterator["LivePositionTracker"]:
        """
        Subscribe to a position stream for the duration of the block.

        The subscription is cancelled on every exit path.

        Usage:
            async with tracker.watch(device.positions()):
                tracker.start()
                ...
                await tracker.stop()
        """
        task = asyncio.create_task(self.consume(source))
        try:
            yield self
        finally:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
