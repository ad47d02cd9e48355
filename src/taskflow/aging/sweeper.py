"""Archive sweeper: moves stale and old tasks out of the live workspace."""

import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional

import structlog

from taskflow.aging.classifier import AgingClassifier, AgingState
from taskflow.models.domain import DoneTaskRecord, StaleTaskRecord
from taskflow.workspace.state import WorkspaceState

logger = structlog.get_logger(__name__)

UNKNOWN_TOPIC_NAME = "Unknown Topic"
DEFAULT_SWEEP_INTERVAL_SECONDS = 60.0


@dataclass
class SweepResult:
    """Records created by one sweep."""
    stale_records: List[StaleTaskRecord] = field(default_factory=list)
    done_records: List[DoneTaskRecord] = field(default_factory=list)

    @property
    def archived(self) -> int:
        return len(self.stale_records) + len(self.done_records)


class ArchiveSweeper:
    """Archives tasks that crossed the stale or done threshold.

    A sweep turns every stale open task into a StaleTaskRecord and every old
    completed task into a DoneTaskRecord, then drops those tasks from the
    workspace. Topic names are copied into the records so renaming or
    deleting the topic later leaves the archive intact. Sweeps are not
    undoable and never touch the action log.
    """

    def __init__(
        self,
        classifier: Optional[AgingClassifier] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize the sweeper.

        Args:
            classifier: Aging classifier to use. Defaults to the 3/7 day thresholds
            clock: Source of the current time
        """
        self.classifier = classifier or AgingClassifier()
        self.clock = clock

    def sweep(self, state: WorkspaceState, now: Optional[datetime] = None) -> SweepResult:
        """Archive stale and old tasks in ``state``.

        Args:
            state: Workspace to sweep, modified in place
            now: Reference time, defaults to the sweeper clock

        Returns:
            SweepResult with the newly created records
        """
        if now is None:
            now = self.clock()

        report = self.classifier.classify(state.tasks, now)
        result = SweepResult()

        for task in report.stale:
            result.stale_records.append(
                StaleTaskRecord(
                    id=uuid.uuid4().hex,
                    original_task_id=task.id,
                    title=task.title,
                    topic_id=task.topic_id,
                    topic_name=self._topic_name(state, task.topic_id),
                    created_at=task.created_at,
                    stale_date=now,
                )
            )

        for task in report.old:
            result.done_records.append(
                DoneTaskRecord(
                    id=uuid.uuid4().hex,
                    original_task_id=task.id,
                    title=task.title,
                    topic_id=task.topic_id,
                    topic_name=self._topic_name(state, task.topic_id),
                    completed_at=task.completed_at,
                    archived_date=now,
                )
            )

        if not result.archived:
            return result

        archived_ids = {task.id for task in report.stale + report.old}
        state.tasks = [task for task in state.tasks if task.id not in archived_ids]
        state.stale_records = state.stale_records + result.stale_records
        state.done_records = state.done_records + result.done_records

        if result.stale_records:
            logger.info(
                "tasks_archived",
                state=AgingState.ARCHIVED_STALE.value,
                count=len(result.stale_records),
            )
        if result.done_records:
            logger.info(
                "tasks_archived",
                state=AgingState.ARCHIVED_DONE.value,
                count=len(result.done_records),
            )

        return result

    async def run(
        self,
        state: WorkspaceState,
        interval_seconds: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
        max_ticks: Optional[int] = None,
        on_sweep: Optional[Callable[[SweepResult], None]] = None,
    ) -> int:
        """Sweep ``state`` periodically until cancelled.

        Args:
            state: Workspace to sweep
            interval_seconds: Pause between sweeps
            max_ticks: Stop after this many sweeps (runs forever if None)
            on_sweep: Called with each SweepResult, e.g. to persist the workspace

        Returns:
            Number of sweeps performed
        """
        ticks = 0
        logger.info("sweeper_started", interval_seconds=interval_seconds, max_ticks=max_ticks)

        while max_ticks is None or ticks < max_ticks:
            try:
                result = self.sweep(state)
                if on_sweep is not None:
                    on_sweep(result)
            except Exception as e:
                # Keep sweeping; the next tick retries whatever is still due
                logger.error("sweep_failed", error=str(e), tick=ticks)
            ticks += 1

            if max_ticks is not None and ticks >= max_ticks:
                break
            await asyncio.sleep(interval_seconds)

        logger.info("sweeper_stopped", ticks=ticks)
        return ticks

    @staticmethod
    def _topic_name(state: WorkspaceState, topic_id: str) -> str:
        topic = state.find_topic(topic_id)
        return topic.name if topic is not None else UNKNOWN_TOPIC_NAME
