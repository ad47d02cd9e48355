"""Data models for the task tracker."""

from taskflow.models.config import Settings
from taskflow.models.domain import (
    DoneTaskRecord,
    Milestone,
    MilestoneType,
    StaleTaskRecord,
    Task,
    Topic,
)

__all__ = [
    "Topic",
    "Task",
    "Milestone",
    "MilestoneType",
    "StaleTaskRecord",
    "DoneTaskRecord",
    "Settings",
]
