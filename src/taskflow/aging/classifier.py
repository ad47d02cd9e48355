"""Task aging: classify tasks by how long they have been open or done.

Ages are counted in calendar days, not elapsed hours: a task created late
yesterday evening is one day old this morning. Open tasks go stale once
their age reaches ``stale_days``; completed tasks become old once the age
of their completion reaches ``done_days``. Both boundaries are inclusive.

The classifier never mutates its inputs and keeps no state between calls.
Moving stale and old tasks into archival records is done by
:class:`taskflow.aging.sweeper.ArchiveSweeper`.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional

from taskflow.models.domain import Task
from taskflow.timeline.position import calendar_days_between

STALE_TASK_DAYS = 3
DONE_TASK_DAYS = 7


class AgingState(str, Enum):
    """Lifecycle bucket of a task."""

    FRESH = "fresh"
    STALE = "stale"
    COMPLETED_RECENT = "completed_recent"
    COMPLETED_OLD = "completed_old"
    ARCHIVED_STALE = "archived_stale"
    ARCHIVED_DONE = "archived_done"


@dataclass
class PendingBuckets:
    """Open tasks split by staleness."""
    fresh: List[Task] = field(default_factory=list)
    stale: List[Task] = field(default_factory=list)


@dataclass
class CompletedBuckets:
    """Completed tasks split by age of completion."""
    recent: List[Task] = field(default_factory=list)
    old: List[Task] = field(default_factory=list)


@dataclass
class AgingReport:
    """Every task of a collection in exactly one live bucket."""
    fresh: List[Task] = field(default_factory=list)
    stale: List[Task] = field(default_factory=list)
    recent: List[Task] = field(default_factory=list)
    old: List[Task] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.fresh) + len(self.stale) + len(self.recent) + len(self.old)


def age_in_days(task: Task, now: datetime) -> int:
    """Calendar days since the task was created.

    Negative if ``created_at`` lies in the future.
    """
    return calendar_days_between(task.created_at, now)


def completed_age_in_days(task: Task, now: datetime) -> Optional[int]:
    """Calendar days since the task was completed, or None if it never was."""
    if task.completed_at is None:
        return None
    return calendar_days_between(task.completed_at, now)


def format_age(days: int) -> str:
    """Human readable age label."""
    if days == 0:
        return "Today"
    if days == 1:
        return "1 day ago"
    return f"{days} days ago"


class AgingClassifier:
    """Classifies tasks against the stale and done thresholds."""

    def __init__(self, stale_days: int = STALE_TASK_DAYS, done_days: int = DONE_TASK_DAYS) -> None:
        """Initialize the classifier.

        Args:
            stale_days: Calendar-day age at which an open task is stale
            done_days: Calendar days after completion at which a task is old
        """
        self.stale_days = stale_days
        self.done_days = done_days

    def is_stale(self, task: Task, now: datetime) -> bool:
        """Whether an open task has reached the stale threshold."""
        if task.completed:
            return False
        return age_in_days(task, now) >= self.stale_days

    def is_old_completed(self, task: Task, now: datetime) -> bool:
        """Whether a completed task has reached the done threshold."""
        if not task.completed:
            return False
        age = completed_age_in_days(task, now)
        return age is not None and age >= self.done_days

    def aging_state(self, task: Task, now: datetime) -> AgingState:
        """Current live bucket of a task."""
        if task.completed:
            if self.is_old_completed(task, now):
                return AgingState.COMPLETED_OLD
            return AgingState.COMPLETED_RECENT
        if self.is_stale(task, now):
            return AgingState.STALE
        return AgingState.FRESH

    def classify_pending(self, tasks: Iterable[Task], now: datetime) -> PendingBuckets:
        """Split tasks into fresh and stale.

        Completed tasks are never stale, so any that are passed in land in
        ``fresh``.
        """
        buckets = PendingBuckets()
        for task in tasks:
            if self.is_stale(task, now):
                buckets.stale.append(task)
            else:
                buckets.fresh.append(task)
        return buckets

    def classify_completed(self, tasks: Iterable[Task], now: datetime) -> CompletedBuckets:
        """Split completed tasks into recent and old.

        Open tasks are skipped. A completed task without a completion
        timestamp counts as recent.
        """
        buckets = CompletedBuckets()
        for task in tasks:
            if not task.completed:
                continue
            if self.is_old_completed(task, now):
                buckets.old.append(task)
            else:
                buckets.recent.append(task)
        return buckets

    def classify(self, tasks: Iterable[Task], now: datetime) -> AgingReport:
        """Place every task into exactly one of the four live buckets."""
        report = AgingReport()
        targets = {
            AgingState.FRESH: report.fresh,
            AgingState.STALE: report.stale,
            AgingState.COMPLETED_RECENT: report.recent,
            AgingState.COMPLETED_OLD: report.old,
        }
        for task in tasks:
            targets[self.aging_state(task, now)].append(task)
        return report
