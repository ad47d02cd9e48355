"""Workspace controller - performs edits and keeps the undo history."""

import uuid
from datetime import datetime
from typing import Callable, Optional

import structlog

from taskflow.aging.classifier import AgingClassifier
from taskflow.aging.sweeper import ArchiveSweeper, SweepResult
from taskflow.history.actions import (
    BaseAction,
    BioChange,
    CreateMilestoneAction,
    CreateTaskAction,
    CreateTopicAction,
    DeletedTopic,
    DeleteMilestoneAction,
    DeleteTaskAction,
    DeleteTopicAction,
    EditMilestoneAction,
    EditTaskAction,
    EditTopicAction,
    MilestoneRef,
    ReorderTopicsAction,
    TaskRef,
    TopicRef,
    ToggleTaskAction,
    UpdateBioAction,
)
from taskflow.history.log import ActionLog
from taskflow.history.reversal import apply_redo, apply_undo
from taskflow.models.config import Settings
from taskflow.models.domain import Milestone, MilestoneType, Task, Topic
from taskflow.timeline.position import current_time_context, time_context_for_date
from taskflow.workspace.state import WorkspaceState

logger = structlog.get_logger(__name__)


def _new_id() -> str:
    return uuid.uuid4().hex


class WorkspaceController:
    """Applies user edits to a workspace and records them for undo/redo.

    Every mutation first commits its change to the workspace and then pushes
    the matching action onto the log. ``undo`` and ``redo`` pop an action
    from the log and run it through the reversal table.
    """

    def __init__(
        self,
        state: Optional[WorkspaceState] = None,
        log: Optional[ActionLog] = None,
        sweeper: Optional[ArchiveSweeper] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """Initialize the controller.

        Args:
            state: Workspace to edit. Defaults to an empty one
            log: Undo/redo history. Defaults to a log of 50 actions
            sweeper: Archive sweeper. Defaults to the 3/7 day thresholds
            clock: Source of the current time
        """
        self.state = state if state is not None else WorkspaceState()
        self.log = log or ActionLog()
        self.clock = clock
        self.sweeper = sweeper or ArchiveSweeper(clock=clock)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        state: Optional[WorkspaceState] = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> "WorkspaceController":
        """Build a controller with history size and thresholds from settings."""
        classifier = AgingClassifier(
            stale_days=settings.stale_task_days, done_days=settings.done_task_days
        )
        return cls(
            state=state,
            log=ActionLog(max_size=settings.max_history_size),
            sweeper=ArchiveSweeper(classifier=classifier, clock=clock),
            clock=clock,
        )

    # ============================================================================
    # Lookups
    # ============================================================================

    def _require_topic(self, topic_id: str) -> Topic:
        topic = self.state.find_topic(topic_id)
        if topic is None:
            raise ValueError(f"Topic {topic_id} not found")
        return topic

    def _require_task(self, task_id: str) -> Task:
        task = self.state.find_task(task_id)
        if task is None:
            raise ValueError(f"Task {task_id} not found")
        return task

    def _require_milestone(self, milestone_id: str) -> Milestone:
        milestone = self.state.find_milestone(milestone_id)
        if milestone is None:
            raise ValueError(f"Milestone {milestone_id} not found")
        return milestone

    def _replace_topic(self, topic: Topic) -> None:
        self.state.topics = [topic if t.id == topic.id else t for t in self.state.topics]

    def _replace_task(self, task: Task) -> None:
        self.state.tasks = [task if t.id == task.id else t for t in self.state.tasks]

    # ============================================================================
    # Topics
    # ============================================================================

    def create_topic(self, name: str, icon: str = "Target", color: int = 0) -> Topic:
        """Create a topic; its creation time anchors the topic calendar."""
        topic = Topic(
            id=_new_id(),
            name=name,
            icon=icon,
            color=str(color),
            created_at=self.clock(),
            completed_tasks=0,
        )
        self.state.topics = self.state.topics + [topic]
        self.log.add_action(CreateTopicAction(forward=topic))
        return topic

    def edit_topic(
        self,
        topic_id: str,
        name: Optional[str] = None,
        icon: Optional[str] = None,
        color: Optional[int] = None,
    ) -> Topic:
        """Change a topic's name, icon or colour."""
        old = self._require_topic(topic_id)
        update = {}
        if name is not None:
            update["name"] = name
        if icon is not None:
            update["icon"] = icon
        if color is not None:
            update["color"] = str(color)

        updated = old.model_copy(update=update)
        self._replace_topic(updated)
        self.log.add_action(EditTopicAction(forward=updated, reverse=old))
        return updated

    def delete_topic(self, topic_id: str) -> None:
        """Delete a topic together with its tasks and milestones."""
        topic = self._require_topic(topic_id)
        snapshot = DeletedTopic(
            topic=topic,
            tasks=self.state.tasks_for_topic(topic_id),
            milestones=self.state.milestones_for_topic(topic_id),
        )

        self.state.topics = [t for t in self.state.topics if t.id != topic_id]
        self.state.tasks = [t for t in self.state.tasks if t.topic_id != topic_id]
        self.state.milestones = [m for m in self.state.milestones if m.topic_id != topic_id]

        self.log.add_action(
            DeleteTopicAction(forward=TopicRef(topic_id=topic_id), reverse=snapshot)
        )

    def reorder_topics(self, dragged_id: str, target_id: str) -> bool:
        """Move the dragged topic to the target topic's position.

        Returns:
            True if the order changed, False if either id is unknown or both
            are the same topic
        """
        ids = [t.id for t in self.state.topics]
        if dragged_id not in ids or target_id not in ids or dragged_id == target_id:
            return False

        old_order = list(self.state.topics)
        new_order = list(self.state.topics)
        dragged = new_order.pop(ids.index(dragged_id))
        new_order.insert(ids.index(target_id), dragged)

        self.state.topics = new_order
        self.log.add_action(ReorderTopicsAction(forward=new_order, reverse=old_order))
        return True

    def update_bio(self, topic_id: str, bio: str) -> Topic:
        """Replace a topic's bio."""
        old = self._require_topic(topic_id)
        updated = old.model_copy(update={"bio": bio})
        self._replace_topic(updated)
        self.log.add_action(
            UpdateBioAction(
                forward=BioChange(topic_id=topic_id, bio=bio),
                reverse=BioChange(topic_id=topic_id, bio=old.bio or ""),
            )
        )
        return updated

    # ============================================================================
    # Tasks
    # ============================================================================

    def create_task(self, topic_id: str, title: str, description: str = "") -> Task:
        """Create an open task in a topic."""
        self._require_topic(topic_id)
        task = Task(
            id=_new_id(),
            title=title,
            description=description,
            topic_id=topic_id,
            completed=False,
            created_at=self.clock(),
        )
        self.state.tasks = self.state.tasks + [task]
        self.log.add_action(CreateTaskAction(forward=task))
        return task

    def edit_task(
        self, task_id: str, title: Optional[str] = None, description: Optional[str] = None
    ) -> Task:
        """Change a task's title or description."""
        old = self._require_task(task_id)
        update = {}
        if title is not None:
            update["title"] = title
        if description is not None:
            update["description"] = description

        updated = old.model_copy(update=update)
        self._replace_task(updated)
        self.log.add_action(EditTaskAction(forward=updated, reverse=old))
        return updated

    def delete_task(self, task_id: str) -> None:
        """Delete a live task."""
        task = self._require_task(task_id)
        self.state.tasks = [t for t in self.state.tasks if t.id != task_id]
        self.log.add_action(DeleteTaskAction(forward=TaskRef(task_id=task_id), reverse=task))

    def toggle_task(self, task_id: str) -> Task:
        """Flip a task between open and completed.

        Completing stamps ``completed_at`` and the completion's position in
        the topic calendar; reopening clears them. The topic's completed
        count follows, never dropping below zero.
        """
        old = self._require_task(task_id)
        topic = self.state.find_topic(old.topic_id)

        if not old.completed:
            now = self.clock()
            update = {
                "completed": True,
                "completed_at": now,
                "completion_month": None,
                "completion_week": None,
                "completion_day": None,
            }
            if topic is not None:
                context = time_context_for_date(now, topic.created_at)
                update["completion_month"] = context.current_month
                update["completion_week"] = context.current_week
                update["completion_day"] = context.current_day
        else:
            update = {
                "completed": False,
                "completed_at": None,
                "completion_month": None,
                "completion_week": None,
                "completion_day": None,
            }

        updated = old.model_copy(update=update)
        self._replace_task(updated)

        if topic is not None:
            diff = 1 if updated.completed else -1
            self._replace_topic(
                topic.model_copy(
                    update={"completed_tasks": max(0, topic.completed_tasks + diff)}
                )
            )

        self.log.add_action(ToggleTaskAction(forward=updated, reverse=old))
        return updated

    # ============================================================================
    # Milestones
    # ============================================================================

    def create_milestone(
        self, topic_id: str, title: str, type: MilestoneType = MilestoneType.MONTHLY
    ) -> Milestone:
        """Create a milestone in the topic's current month (and week, if weekly)."""
        topic = self._require_topic(topic_id)
        now = self.clock()
        context = current_time_context(topic.created_at, now)
        weekly = type == MilestoneType.WEEKLY

        order = len(
            [
                m
                for m in self.state.milestones
                if m.topic_id == topic_id
                and m.type == type
                and m.month == context.current_month
                and (not weekly or m.week == context.current_week)
            ]
        )

        milestone = Milestone(
            id=_new_id(),
            title=title,
            topic_id=topic_id,
            created_at=now,
            order=order,
            type=type,
            month=context.current_month,
            week=context.current_week if weekly else None,
        )
        self.state.milestones = self.state.milestones + [milestone]
        self.log.add_action(CreateMilestoneAction(forward=milestone))
        return milestone

    def edit_milestone(self, milestone_id: str, title: str) -> Milestone:
        """Rename a milestone."""
        old = self._require_milestone(milestone_id)
        updated = old.model_copy(update={"title": title})
        self.state.milestones = [
            updated if m.id == milestone_id else m for m in self.state.milestones
        ]
        self.log.add_action(EditMilestoneAction(forward=updated, reverse=old))
        return updated

    def delete_milestone(self, milestone_id: str) -> None:
        """Delete a milestone."""
        milestone = self._require_milestone(milestone_id)
        self.state.milestones = [m for m in self.state.milestones if m.id != milestone_id]
        self.log.add_action(
            DeleteMilestoneAction(forward=MilestoneRef(id=milestone_id), reverse=milestone)
        )

    # ============================================================================
    # History and archival
    # ============================================================================

    def undo(self) -> Optional[BaseAction]:
        """Undo the most recent action.

        Returns:
            The undone action, or None if there was nothing to undo
        """
        action = self.log.undo()
        if action is None:
            logger.debug("undo_skipped", reason="empty_history")
            return None
        apply_undo(action, self.state)
        return action

    def redo(self) -> Optional[BaseAction]:
        """Redo the most recently undone action.

        Returns:
            The redone action, or None if there was nothing to redo
        """
        action = self.log.redo()
        if action is None:
            logger.debug("redo_skipped", reason="empty_history")
            return None
        apply_redo(action, self.state)
        return action

    def sweep(self, now: Optional[datetime] = None) -> SweepResult:
        """Archive stale and old tasks. Not recorded in the history."""
        return self.sweeper.sweep(self.state, now)
