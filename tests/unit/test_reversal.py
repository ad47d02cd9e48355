"""Tests for the undo/redo reversal table."""

from datetime import datetime

import pytest

from taskflow.history import UnknownActionError, apply_redo, apply_undo
from taskflow.history.actions import (
    ActionKind,
    BaseAction,
    CreateTaskAction,
    CreateTopicAction,
    DeletedTopic,
    DeleteTaskAction,
    DeleteTopicAction,
    EditTaskAction,
    TaskRef,
    ToggleTaskAction,
    TopicRef,
)
from taskflow.history.reversal import REDO_HANDLERS, UNDO_HANDLERS
from taskflow.models.domain import Milestone, StaleTaskRecord, Task, Topic
from taskflow.workspace.state import WorkspaceState

CREATED = datetime(2024, 1, 1)


class BogusAction(BaseAction):
    """Action of a kind the reversal table does not know."""
    kind: str = "BOGUS"


def make_topic(topic_id="health", name="Health", completed_tasks=0):
    return Topic(id=topic_id, name=name, created_at=CREATED, completed_tasks=completed_tasks)


def make_task(task_id="run", completed=False, title="Run 5k"):
    return Task(
        id=task_id,
        title=title,
        topic_id="health",
        created_at=CREATED,
        completed=completed,
        completed_at=CREATED if completed else None,
    )


class TestReversalTable:
    """Test the reversal table itself."""

    def test_every_kind_has_handlers(self):
        """Test both tables cover the closed set of kinds."""
        assert set(UNDO_HANDLERS) == set(ActionKind)
        assert set(REDO_HANDLERS) == set(ActionKind)

    def test_unknown_kind_raises(self):
        """Test unknown kinds fail loudly instead of being skipped."""
        state = WorkspaceState()

        with pytest.raises(UnknownActionError):
            apply_undo(BogusAction(), state)
        with pytest.raises(UnknownActionError):
            apply_redo(BogusAction(), state)

    def test_unknown_action_error_is_runtime_error(self):
        assert issubclass(UnknownActionError, RuntimeError)


class TestTopicReversal:
    """Test topic reversals applied directly to a state."""

    def test_create_topic(self):
        """Test undoing a creation removes the topic and redo restores it."""
        topic = make_topic()
        state = WorkspaceState(topics=[topic])
        action = CreateTopicAction(forward=topic)

        apply_undo(action, state)
        assert state.topics == []

        apply_redo(action, state)
        assert state.topics == [topic]

    def test_redo_inserts_a_copy(self):
        """Test later edits to the state do not reach the recorded action."""
        topic = make_topic()
        state = WorkspaceState()
        action = CreateTopicAction(forward=topic)

        apply_redo(action, state)
        state.topics[0].name = "Changed"

        assert action.forward.name == "Health"

    def test_delete_topic_restores_cascade(self):
        """Test undoing a topic delete restores its tasks and milestones."""
        topic = make_topic()
        task = make_task()
        milestone = Milestone(
            id="m1", title="First race", topic_id="health", created_at=CREATED, month=1
        )
        other = make_task(task_id="other").model_copy(update={"topic_id": "work"})
        state = WorkspaceState(tasks=[other])
        action = DeleteTopicAction(
            forward=TopicRef(topic_id="health"),
            reverse=DeletedTopic(topic=topic, tasks=[task], milestones=[milestone]),
        )

        apply_undo(action, state)

        assert state.topics == [topic]
        assert [t.id for t in state.tasks] == ["other", "run"]
        assert state.milestones == [milestone]

        apply_redo(action, state)

        assert state.topics == []
        assert [t.id for t in state.tasks] == ["other"]
        assert state.milestones == []


class TestTaskReversal:
    """Test task reversals applied directly to a state."""

    def test_toggle_adjusts_completed_count(self):
        """Test undoing a completion decrements the topic count."""
        before, after = make_task(completed=False), make_task(completed=True)
        state = WorkspaceState(topics=[make_topic(completed_tasks=1)], tasks=[after])
        action = ToggleTaskAction(forward=after, reverse=before)

        apply_undo(action, state)
        assert state.tasks[0].completed is False
        assert state.topics[0].completed_tasks == 0

        apply_redo(action, state)
        assert state.tasks[0].completed is True
        assert state.topics[0].completed_tasks == 1

    def test_completed_count_never_negative(self):
        """Test the count is clamped at zero."""
        before, after = make_task(completed=False), make_task(completed=True)
        state = WorkspaceState(topics=[make_topic(completed_tasks=0)], tasks=[after])

        apply_undo(ToggleTaskAction(forward=after, reverse=before), state)

        assert state.topics[0].completed_tasks == 0

    def test_toggle_of_missing_task_keeps_count(self):
        """Test the count only moves when the toggled task is still live."""
        before, after = make_task(completed=False), make_task(completed=True)
        state = WorkspaceState(topics=[make_topic(completed_tasks=1)])
        action = ToggleTaskAction(forward=after, reverse=before)

        apply_undo(action, state)
        assert state.topics[0].completed_tasks == 1

        apply_redo(action, state)
        assert state.topics[0].completed_tasks == 1
        assert state.tasks == []

    def test_archived_task_is_not_reinserted(self):
        """Test re-insert handlers skip tasks that already have an archival record."""
        task = make_task()
        record = StaleTaskRecord(
            id="r1",
            original_task_id=task.id,
            title=task.title,
            topic_id="health",
            topic_name="Health",
            created_at=CREATED,
            stale_date=CREATED,
        )
        state = WorkspaceState(stale_records=[record])

        apply_redo(CreateTaskAction(forward=task), state)
        apply_undo(DeleteTaskAction(forward=TaskRef(task_id=task.id), reverse=task), state)
        apply_undo(
            DeleteTopicAction(
                forward=TopicRef(topic_id="health"),
                reverse=DeletedTopic(topic=make_topic(), tasks=[task]),
            ),
            state,
        )

        assert state.tasks == []
        assert [t.id for t in state.topics] == ["health"]

    def test_missing_target_is_left_alone(self):
        """Test replacing an entity that no longer exists changes nothing."""
        state = WorkspaceState(tasks=[make_task(task_id="keep")])
        action = EditTaskAction(
            forward=make_task(title="New"), reverse=make_task(title="Old")
        )

        apply_undo(action, state)

        assert [t.id for t in state.tasks] == ["keep"]
        assert state.tasks[0].title == "Run 5k"
