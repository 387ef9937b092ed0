"""
Storage for surveyor route recordings.

Each recording is written as one JSON document named after its ID.
"""

import json
import logging
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional
from uuid import UUID, uuid4

from lightsurvey.core.errors import StorageError
from lightsurvey.models.route import RouteRecording, RouteRecordingCreate

logger = logging.getLogger(__name__)


class FileRouteStore:
    """
    Route recording store backed by JSON files.

    Writes go to a temporary file first and are then moved into place so a
    reader never sees a half-written recording.
    """

    def __init__(self, base_dir: Path) -> None:
        """
        Initialize the store.

        Args:
            base_dir: Directory holding the recordings
        """
        self.base_dir = base_dir
        self.base_dir.mkdir(parents=True, exist_ok=True)
        logger.info(f"FileRouteStore initialized with base_dir: {self.base_dir}")

    def _get_path(self, recording_id: str) -> Path:
        return self.base_dir / f"{recording_id}.json"

    async def save(self, recording: RouteRecordingCreate) -> RouteRecording:
        """
        Persist a route recording.

        Args:
            recording: Submitted route

        Returns:
            Stored recording with its ID and creation time

        Raises:
            StorageError: If the recording cannot be written
        """
        stored = RouteRecording(
            id=str(uuid4()),
            created_at=datetime.now(timezone.utc),
            points=recording.points,
            task_id=recording.task_id,
            user_id=recording.user_id,
        )
        path = self._get_path(stored.id)
        temp_path = path.with_suffix(".tmp")

        try:
            temp_path.write_text(json.dumps(stored.model_dump(mode="json", by_alias=True)))
            shutil.move(str(temp_path), str(path))
        except OSError as e:
            logger.error(f"Failed to save route recording {stored.id}: {e}")
            if temp_path.exists():
                temp_path.unlink()
            raise StorageError(f"Failed to save route recording: {e}", operation="save") from e

        logger.info(
            f"Saved route recording {stored.id}: {len(stored.points)} points, "
            f"task={stored.task_id}, user={stored.user_id}"
        )
        return stored

    async def get(self, recording_id: str) -> Optional[RouteRecording]:
        """
        Load a route recording.

        Args:
            recording_id: Recording ID

        Returns:
            RouteRecording, or None if it does not exist
        """
        try:
            UUID(recording_id)
        except ValueError:
            return None

        path = self._get_path(recording_id)
        if not path.exists():
            return None

        try:
            return RouteRecording.model_validate_json(path.read_text())
        except (OSError, ValueError) as e:
            logger.error(f"Failed to read route recording {recording_id}: {e}")
            raise StorageError(
                f"Failed to read route recording: {e}", operation="read"
            ) from e

    async def list_ids(self) -> List[str]:
        """List the IDs of all stored recordings."""
        if not self.base_dir.exists():
            return []
        return sorted(path.stem for path in self.base_dir.glob("*.json"))
