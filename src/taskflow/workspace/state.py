"""Workspace state and its on-disk store.

The workspace is the full domain snapshot the host works on: topics, live
tasks, milestones and the archival records of stale and done tasks. It is
stored in <data_dir>/workspace.json. The undo/redo history is never part of
it.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import List, Optional

import structlog
from pydantic import BaseModel, Field

from taskflow.models.domain import DoneTaskRecord, Milestone, StaleTaskRecord, Task, Topic

logger = structlog.get_logger(__name__)


class WorkspaceState(BaseModel):
    """Root state object: every entity the tracker knows about."""

    version: str = Field("1.0", description="State file format version")
    topics: List[Topic] = Field(default_factory=list, description="Topics in display order")
    tasks: List[Task] = Field(default_factory=list, description="Live tasks")
    milestones: List[Milestone] = Field(default_factory=list, description="Milestones")
    stale_records: List[StaleTaskRecord] = Field(default_factory=list, description="Archived stale tasks")
    done_records: List[DoneTaskRecord] = Field(default_factory=list, description="Archived done tasks")

    def find_topic(self, topic_id: str) -> Optional[Topic]:
        return next((t for t in self.topics if t.id == topic_id), None)

    def find_task(self, task_id: str) -> Optional[Task]:
        return next((t for t in self.tasks if t.id == task_id), None)

    def find_milestone(self, milestone_id: str) -> Optional[Milestone]:
        return next((m for m in self.milestones if m.id == milestone_id), None)

    def tasks_for_topic(self, topic_id: str) -> List[Task]:
        return [t for t in self.tasks if t.topic_id == topic_id]

    def milestones_for_topic(self, topic_id: str) -> List[Milestone]:
        return [m for m in self.milestones if m.topic_id == topic_id]


class WorkspaceStore:
    """Loads and saves the workspace as JSON.

    Saving goes through a temporary file and a rename so a crash never
    leaves a half-written workspace behind.
    """

    def __init__(self, data_dir: Optional[Path] = None):
        """Initialize the store.

        Args:
            data_dir: Directory holding workspace.json. Defaults to ./.taskflow
        """
        if data_dir is None:
            data_dir = Path("./.taskflow")

        self.data_dir = Path(data_dir)
        self.state_file = self.data_dir / "workspace.json"
        self._state: Optional[WorkspaceState] = None

    def _ensure_data_dir(self) -> None:
        """Ensure the data directory exists."""
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def load_or_create(self) -> WorkspaceState:
        """Load the existing workspace or create an empty one.

        Returns:
            WorkspaceState object
        """
        if self._state is not None:
            return self._state

        if self.state_file.exists():
            try:
                with open(self.state_file, "r", encoding="utf-8") as f:
                    data = json.load(f)
                self._state = WorkspaceState(**data)
            except (json.JSONDecodeError, ValueError) as e:
                # Corrupted file: start over rather than refuse to run
                logger.warning(
                    "workspace_load_failed", path=str(self.state_file), error=str(e)
                )
                self._state = WorkspaceState()
        else:
            self._state = WorkspaceState()

        return self._state

    def save(self) -> None:
        """Write the current workspace to disk atomically."""
        if self._state is None:
            return

        self._ensure_data_dir()

        fd, temp_path = tempfile.mkstemp(
            dir=self.data_dir, prefix=".workspace_", suffix=".json.tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(self._state.model_dump_json(indent=2))

            os.replace(temp_path, self.state_file)
        except Exception:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise

        logger.debug(
            "workspace_saved",
            path=str(self.state_file),
            topics=len(self._state.topics),
            tasks=len(self._state.tasks),
        )
