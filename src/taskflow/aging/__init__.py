"""Task aging: classification by age and archival of stale and done tasks."""

from taskflow.aging.classifier import (
    DONE_TASK_DAYS,
    STALE_TASK_DAYS,
    AgingClassifier,
    AgingReport,
    AgingState,
    CompletedBuckets,
    PendingBuckets,
    age_in_days,
    completed_age_in_days,
    format_age,
)
from taskflow.aging.sweeper import ArchiveSweeper, SweepResult

__all__ = [
    "AgingClassifier",
    "AgingState",
    "AgingReport",
    "PendingBuckets",
    "CompletedBuckets",
    "age_in_days",
    "completed_age_in_days",
    "format_age",
    "STALE_TASK_DAYS",
    "DONE_TASK_DAYS",
    "ArchiveSweeper",
    "SweepResult",
]
