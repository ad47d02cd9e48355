"""Action records for undo/redo.

An action is a snapshot of one committed edit: ``forward`` holds what is
needed to redo it, ``reverse`` what is needed to undo it. Creation actions
carry no reverse payload because undoing a creation only removes the entity
by id. Each kind is its own model so payloads stay strongly typed; the
``Action`` union is discriminated on ``kind``.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Annotated, List, Literal, Union

from pydantic import BaseModel, Field

from taskflow.models.domain import Milestone, Task, Topic


class UnknownActionError(RuntimeError):
    """Raised when an action of an unrecognized kind reaches the reversal table."""


class ActionKind(str, Enum):
    """Closed set of reversible edits."""

    CREATE_TOPIC = "CREATE_TOPIC"
    DELETE_TOPIC = "DELETE_TOPIC"
    EDIT_TOPIC = "EDIT_TOPIC"
    REORDER_TOPICS = "REORDER_TOPICS"
    CREATE_TASK = "CREATE_TASK"
    DELETE_TASK = "DELETE_TASK"
    EDIT_TASK = "EDIT_TASK"
    TOGGLE_TASK = "TOGGLE_TASK"
    CREATE_MILESTONE = "CREATE_MILESTONE"
    DELETE_MILESTONE = "DELETE_MILESTONE"
    EDIT_MILESTONE = "EDIT_MILESTONE"
    UPDATE_BIO = "UPDATE_BIO"


# ============================================================================
# Payloads
# ============================================================================


class TopicRef(BaseModel):
    """Reference to a topic by id."""
    topic_id: str


class TaskRef(BaseModel):
    """Reference to a task by id."""
    task_id: str


class MilestoneRef(BaseModel):
    """Reference to a milestone by id."""
    id: str


class DeletedTopic(BaseModel):
    """A deleted topic together with everything cascaded with it."""

    topic: Topic
    tasks: List[Task] = Field(default_factory=list)
    milestones: List[Milestone] = Field(default_factory=list)


class BioChange(BaseModel):
    """Bio text of a topic."""

    topic_id: str
    bio: str = ""


# ============================================================================
# Actions
# ============================================================================


class BaseAction(BaseModel):
    """Fields shared by every action."""

    id: str = Field(default_factory=lambda: uuid.uuid4().hex, description="Unique action token")
    timestamp: datetime = Field(default_factory=datetime.now, description="When the edit was committed")

    class Config:
        """Pydantic config."""
        frozen = True


class CreateTopicAction(BaseAction):
    kind: Literal[ActionKind.CREATE_TOPIC] = ActionKind.CREATE_TOPIC
    forward: Topic
    reverse: None = None


class DeleteTopicAction(BaseAction):
    kind: Literal[ActionKind.DELETE_TOPIC] = ActionKind.DELETE_TOPIC
    forward: TopicRef
    reverse: DeletedTopic


class EditTopicAction(BaseAction):
    kind: Literal[ActionKind.EDIT_TOPIC] = ActionKind.EDIT_TOPIC
    forward: Topic
    reverse: Topic


class ReorderTopicsAction(BaseAction):
    kind: Literal[ActionKind.REORDER_TOPICS] = ActionKind.REORDER_TOPICS
    forward: List[Topic]
    reverse: List[Topic]


class CreateTaskAction(BaseAction):
    kind: Literal[ActionKind.CREATE_TASK] = ActionKind.CREATE_TASK
    forward: Task
    reverse: None = None


class DeleteTaskAction(BaseAction):
    kind: Literal[ActionKind.DELETE_TASK] = ActionKind.DELETE_TASK
    forward: TaskRef
    reverse: Task


class EditTaskAction(BaseAction):
    kind: Literal[ActionKind.EDIT_TASK] = ActionKind.EDIT_TASK
    forward: Task
    reverse: Task


class ToggleTaskAction(BaseAction):
    kind: Literal[ActionKind.TOGGLE_TASK] = ActionKind.TOGGLE_TASK
    forward: Task
    reverse: Task


class CreateMilestoneAction(BaseAction):
    kind: Literal[ActionKind.CREATE_MILESTONE] = ActionKind.CREATE_MILESTONE
    forward: Milestone
    reverse: None = None


class DeleteMilestoneAction(BaseAction):
    kind: Literal[ActionKind.DELETE_MILESTONE] = ActionKind.DELETE_MILESTONE
    forward: MilestoneRef
    reverse: Milestone


class EditMilestoneAction(BaseAction):
    kind: Literal[ActionKind.EDIT_MILESTONE] = ActionKind.EDIT_MILESTONE
    forward: Milestone
    reverse: Milestone


class UpdateBioAction(BaseAction):
    kind: Literal[ActionKind.UPDATE_BIO] = ActionKind.UPDATE_BIO
    forward: BioChange
    reverse: BioChange


Action = Annotated[
    Union[
        CreateTopicAction,
        DeleteTopicAction,
        EditTopicAction,
        ReorderTopicsAction,
        CreateTaskAction,
        DeleteTaskAction,
        EditTaskAction,
        ToggleTaskAction,
        CreateMilestoneAction,
        DeleteMilestoneAction,
        EditMilestoneAction,
        UpdateBioAction,
    ],
    Field(discriminator="kind"),
]


_DESCRIPTIONS = {
    ActionKind.CREATE_TOPIC: lambda a: f'Create topic "{a.forward.name}"',
    ActionKind.DELETE_TOPIC: lambda a: f'Delete topic "{a.reverse.topic.name}"',
    ActionKind.EDIT_TOPIC: lambda a: f'Edit topic "{a.forward.name}"',
    ActionKind.REORDER_TOPICS: lambda a: "Reorder topics",
    ActionKind.CREATE_TASK: lambda a: f'Create task "{a.forward.title}"',
    ActionKind.DELETE_TASK: lambda a: f'Delete task "{a.reverse.title}"',
    ActionKind.EDIT_TASK: lambda a: f'Edit task "{a.forward.title}"',
    ActionKind.TOGGLE_TASK: lambda a: f"{'Complete' if a.forward.completed else 'Uncomplete'} task",
    ActionKind.CREATE_MILESTONE: lambda a: f'Create milestone "{a.forward.title}"',
    ActionKind.DELETE_MILESTONE: lambda a: f'Delete milestone "{a.reverse.title}"',
    ActionKind.EDIT_MILESTONE: lambda a: f'Edit milestone "{a.forward.title}"',
    ActionKind.UPDATE_BIO: lambda a: "Update topic bio",
}


def describe_action(action: BaseAction) -> str:
    """One-line label for an action, e.g. ``Create topic "Health"``."""
    describe = _DESCRIPTIONS.get(getattr(action, "kind", None))
    if describe is None:
        return "Unknown action"
    return describe(action)
