"""
Tests for the live position tracker.

Tests cover:
- Recording start/stop and route submission
- Position updates while idle
- Geolocation errors
- Subscription lifetime of watch()
"""

import asyncio
import logging
from typing import List

import pytest

from lightsurvey.core.logging_config import current_log_context
from lightsurvey.core.tracking import (
    LivePositionTracker,
    PositionError,
    PositionErrorCode,
    PositionUpdate,
    RecordingState,
    SubmissionResult,
)
from lightsurvey.models.route import RouteRecordingCreate


class RecordingSubmitter:
    """Submitter that keeps every payload it receives."""

    def __init__(self, result: SubmissionResult = SubmissionResult(success=True, recording_id="r-1")):
        self.result = result
        self.payloads: List[RouteRecordingCreate] = []

    async def submit(self, payload: RouteRecordingCreate) -> SubmissionResult:
        self.payloads.append(payload)
        return self.result


async def queue_stream(queue: asyncio.Queue):
    """Position stream fed from a queue; join() waits until events are handled."""
    while True:
        event = await queue.get()
        yield event
        queue.task_done()


def update(lat: float, lng: float) -> PositionUpdate:
    return PositionUpdate(lat=lat, lng=lng)


@pytest.fixture
def submitter() -> RecordingSubmitter:
    return RecordingSubmitter()


@pytest.fixture
def tracker(submitter) -> LivePositionTracker:
    return LivePositionTracker(submitter=submitter, task_id="task-42", user_id="surveyor-7")


class TestRecording:
    """Tests for start/stop and submission."""

    async def test_three_updates_submitted_in_order(self, tracker, submitter):
        tracker.start()
        tracker.on_position(update(-6.1, 106.1))
        tracker.on_position(update(-6.3, 106.3))
        tracker.on_position(update(-6.2, 106.2))

        result = await tracker.stop()

        assert result == SubmissionResult(success=True, recording_id="r-1")
        assert len(submitter.payloads) == 1
        payload = submitter.payloads[0]
        assert payload.points == [(-6.1, 106.1), (-6.3, 106.3), (-6.2, 106.2)]
        assert payload.task_id == "task-42"
        assert payload.user_id == "surveyor-7"

    async def test_second_recording_starts_empty(self, tracker, submitter):
        tracker.start()
        tracker.on_position(update(-6.1, 106.1))
        tracker.on_position(update(-6.2, 106.2))
        await tracker.stop()

        assert tracker.start() is True
        assert len(tracker.route) == 0

        tracker.on_position(update(-7.0, 107.0))
        await tracker.stop()

        assert submitter.payloads[1].points == [(-7.0, 107.0)]

    async def test_idle_updates_not_recorded(self, tracker, submitter):
        tracker.on_position(update(-5.0, 105.0))
        tracker.on_position(update(-5.1, 105.1))

        assert tracker.current_position == update(-5.1, 105.1)
        assert len(tracker.route) == 0

        tracker.start()
        assert tracker.route.snapshot() == []

        tracker.on_position(update(-6.0, 106.0))
        await tracker.stop()

        assert submitter.payloads[0].points == [(-6.0, 106.0)]

    async def test_updates_after_stop_not_recorded(self, tracker):
        tracker.start()
        tracker.on_position(update(-6.0, 106.0))
        await tracker.stop()

        tracker.on_position(update(-6.5, 106.5))

        assert tracker.route.snapshot() == [(-6.0, 106.0)]
        assert tracker.current_position == update(-6.5, 106.5)

    async def test_start_while_recording_is_noop(self, tracker):
        assert tracker.start() is True
        tracker.on_position(update(-6.0, 106.0))

        assert tracker.start() is False
        assert len(tracker.route) == 1
        assert tracker.state is RecordingState.RECORDING

    async def test_stop_while_idle(self, tracker, submitter):
        assert await tracker.stop() is None
        assert submitter.payloads == []

    async def test_stop_without_submit(self, tracker, submitter):
        tracker.start()
        tracker.on_position(update(-6.0, 106.0))

        assert await tracker.stop(submit=False) is None
        assert submitter.payloads == []
        assert not tracker.is_recording
        assert len(tracker.route) == 1

    async def test_stop_without_points(self, tracker, submitter):
        tracker.start()

        result = await tracker.stop()

        assert result.success is False
        assert result.error == "No points recorded"
        assert submitter.payloads == []

    async def test_failed_submission_keeps_route(self):
        failing = RecordingSubmitter(SubmissionResult(success=False, error="HTTP 503"))
        tracker = LivePositionTracker(submitter=failing)
        tracker.start()
        tracker.on_position(update(-6.0, 106.0))
        tracker.on_position(update(-6.1, 106.1))

        result = await tracker.stop()

        assert result.success is False
        assert result.error == "HTTP 503"
        assert tracker.route.snapshot() == [(-6.0, 106.0), (-6.1, 106.1)]
        assert tracker.state is RecordingState.IDLE

    async def test_without_submitter(self):
        tracker = LivePositionTracker()
        tracker.start()
        tracker.on_position(update(-6.0, 106.0))

        assert await tracker.stop() is None
        assert len(tracker.route) == 1


class SlowSubmitter:
    """Submitter that waits before answering and notes its log context."""

    def __init__(self, delay: float):
        self.delay = delay
        self.context = None

    async def submit(self, payload: RouteRecordingCreate) -> SubmissionResult:
        await asyncio.sleep(self.delay)
        self.context = current_log_context()
        return SubmissionResult(success=True, recording_id=payload.task_id)


class TestSubmissionFailures:
    """Tests for routes that cannot be submitted."""

    async def test_out_of_range_fix_reported(self, tracker, submitter):
        tracker.start()
        tracker.on_position(update(-6.0, 106.0))
        tracker.on_position(update(91.0, 2.0))

        result = await tracker.stop()

        assert result.success is False
        assert "latitude 91.0 out of range" in result.error
        assert submitter.payloads == []
        assert tracker.state is RecordingState.IDLE
        assert tracker.route.snapshot() == [(-6.0, 106.0), (91.0, 2.0)]

    async def test_concurrent_stops_keep_log_context_separate(self):
        slow, fast = SlowSubmitter(0.05), SlowSubmitter(0.01)
        trackers = [
            LivePositionTracker(submitter=slow, task_id="A", user_id="u-a"),
            LivePositionTracker(submitter=fast, task_id="B", user_id="u-b"),
        ]
        for item in trackers:
            item.start()
            item.on_position(update(-6.0, 106.0))

        results = await asyncio.gather(*(item.stop() for item in trackers))

        assert [r.recording_id for r in results] == ["A", "B"]
        assert slow.context == {"task_id": "A", "user_id": "u-a"}
        assert fast.context == {"task_id": "B", "user_id": "u-b"}
        assert current_log_context() == {}


class TestPositionErrors:
    """Tests for geolocation error handling."""

    def test_error_logged(self, tracker, caplog):
        with caplog.at_level(logging.WARNING):
            tracker.on_error(PositionError(PositionErrorCode.PERMISSION_DENIED, "User denied"))

        assert "location permission denied" in caplog.text
        assert "User denied" in caplog.text

    def test_error_keeps_recording(self, tracker):
        tracker.start()
        tracker.on_position(update(-6.0, 106.0))
        tracker.on_error(PositionError(PositionErrorCode.TIMEOUT))
        tracker.on_position(update(-6.1, 106.1))

        assert tracker.is_recording
        assert len(tracker.route) == 2


class TestWatch:
    """Tests for the position subscription."""

    async def test_consume_finite_stream(self, tracker):
        async def stream():
            yield update(-6.0, 106.0)
            yield PositionError(PositionErrorCode.POSITION_UNAVAILABLE, "no fix")
            yield update(-6.1, 106.1)

        tracker.start()
        await tracker.consume(stream())

        assert tracker.route.snapshot() == [(-6.0, 106.0), (-6.1, 106.1)]

    async def test_watch_feeds_tracker(self, tracker, submitter):
        queue: asyncio.Queue = asyncio.Queue()

        async with tracker.watch(queue_stream(queue)):
            queue.put_nowait(update(-5.0, 105.0))
            await queue.join()
            assert tracker.current_position == update(-5.0, 105.0)

            tracker.start()
            for lat in (-6.0, -6.1, -6.2):
                queue.put_nowait(update(lat, 106.0))
            queue.put_nowait(PositionError(PositionErrorCode.TIMEOUT))
            await queue.join()

            await tracker.stop()

        assert submitter.payloads[0].points == [(-6.0, 106.0), (-6.1, 106.0), (-6.2, 106.0)]

    async def test_watch_cancels_subscription_on_exit(self, tracker):
        closed = asyncio.Event()

        async def endless():
            try:
                await asyncio.Event().wait()
                yield update(0.0, 0.0)
            finally:
                closed.set()

        async with tracker.watch(endless()):
            await asyncio.sleep(0)

        assert closed.is_set()

    async def test_watch_cancels_subscription_on_error(self, tracker):
        closed = asyncio.Event()

        async def endless():
            try:
                await asyncio.Event().wait()
                yield update(0.0, 0.0)
            finally:
                closed.set()

        with pytest.raises(RuntimeError):
            async with tracker.watch(endless()):
                await asyncio.sleep(0)
                raise RuntimeError("screen closed")

        assert closed.is_set()
