"""Data models for topics, tasks, milestones and archival records."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class Topic(BaseModel):
    """A user-defined goal grouping tasks and milestones."""

    id: str = Field(..., description="Unique topic identifier")
    name: str = Field(..., description="Display name")
    color: str = Field("0", description="Palette index, stored as a string")
    icon: str = Field("Target", description="Icon name")
    created_at: datetime = Field(..., description="Creation timestamp, anchor of the topic calendar")
    completed_tasks: int = Field(0, ge=0, description="Number of completed tasks in this topic")
    bio: Optional[str] = Field(None, description="Free-form topic description")

    class Config:
        """Pydantic config."""
        json_schema_extra = {
            "example": {
                "id": "3f2a9c1e",
                "name": "Health",
                "color": "2",
                "icon": "Heart",
                "created_at": "2024-01-01T00:00:00",
                "completed_tasks": 4,
                "bio": "Move every day",
            }
        }


class Task(BaseModel):
    """A unit of work inside a topic."""

    id: str = Field(..., description="Unique task identifier")
    title: str = Field(..., description="Task title")
    description: str = Field("", description="Task description")
    topic_id: str = Field(..., description="Owning topic")
    milestone_id: Optional[str] = Field(None, description="Milestone this task contributes to")
    completed: bool = Field(False, description="Whether the task is done")
    created_at: datetime = Field(..., description="Creation timestamp")
    completed_at: Optional[datetime] = Field(None, description="Completion timestamp")

    # Time position of the completion against the topic anchor
    completion_month: Optional[int] = Field(None, description="Month of completion")
    completion_week: Optional[int] = Field(None, description="Week of completion (1-4)")
    completion_day: Optional[int] = Field(None, description="Day of completion (1-7)")

    class Config:
        """Pydantic config."""
        json_schema_extra = {
            "example": {
                "id": "a81bc3d0",
                "title": "Run 5k",
                "description": "",
                "topic_id": "3f2a9c1e",
                "completed": True,
                "created_at": "2024-01-03T08:15:00",
                "completed_at": "2024-01-03T18:40:00",
                "completion_month": 1,
                "completion_week": 1,
                "completion_day": 3,
            }
        }


class MilestoneType(str, Enum):
    """Granularity of a milestone."""

    MONTHLY = "monthly"
    WEEKLY = "weekly"


class Milestone(BaseModel):
    """A monthly or weekly goal marker attached to a topic."""

    id: str = Field(..., description="Unique milestone identifier")
    title: str = Field(..., description="Milestone title")
    topic_id: str = Field(..., description="Owning topic")
    created_at: datetime = Field(..., description="Creation timestamp")
    order: int = Field(0, ge=0, description="Position among milestones in the same slot")
    type: MilestoneType = Field(MilestoneType.MONTHLY, description="monthly or weekly")
    month: int = Field(..., description="Topic month the milestone belongs to")
    week: Optional[int] = Field(None, description="Topic week, weekly milestones only")


class StaleTaskRecord(BaseModel):
    """Immutable archival record of a task that went stale."""

    id: str = Field(..., description="Record identifier")
    original_task_id: Optional[str] = Field(None, description="Id of the archived live task")
    title: str = Field(..., description="Task title at archive time")
    topic_id: str = Field(..., description="Topic the task belonged to")
    topic_name: str = Field(..., description="Topic name captured at archive time")
    created_at: datetime = Field(..., description="When the task was created")
    stale_date: datetime = Field(..., description="When the task was archived")

    class Config:
        """Pydantic config."""
        frozen = True


class DoneTaskRecord(BaseModel):
    """Immutable archival record of a task completed long ago."""

    id: str = Field(..., description="Record identifier")
    original_task_id: Optional[str] = Field(None, description="Id of the archived live task")
    title: str = Field(..., description="Task title at archive time")
    topic_id: str = Field(..., description="Topic the task belonged to")
    topic_name: str = Field(..., description="Topic name captured at archive time")
    completed_at: datetime = Field(..., description="When the task was completed")
    archived_date: datetime = Field(..., description="When the task was archived")

    class Config:
        """Pydantic config."""
        frozen = True
