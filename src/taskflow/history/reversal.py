"""Reversal table: what undoing and redoing each kind of action does.

This is the one place that defines undo/redo semantics. Each action kind
has an undo handler and a redo handler, looked up by ``kind``:

    kind              undo                             redo
    CREATE_TOPIC      remove topic                     re-insert topic
    DELETE_TOPIC      re-insert topic, tasks, miles.   remove topic and cascade
    EDIT_TOPIC        restore prior topic              restore updated topic
    REORDER_TOPICS    restore prior order              restore new order
    CREATE_TASK       remove task                      re-insert task
    DELETE_TASK       re-insert task                   remove task
    EDIT_TASK         restore prior task               restore updated task
    TOGGLE_TASK       restore prior task, count -/+1   restore updated task, count +/-1
    CREATE_MILESTONE  remove milestone                 re-insert milestone
    DELETE_MILESTONE  re-insert milestone              remove milestone
    EDIT_MILESTONE    restore prior milestone          restore updated milestone
    UPDATE_BIO        restore prior bio                restore new bio

Handlers mutate the given WorkspaceState in place. Entities are copied on
the way in so later edits to the workspace never reach back into the log.
Tasks that have since been archived are never re-inserted, and a toggle
whose task is gone leaves the topic count alone.
"""

from typing import Callable, Dict, List, Set, Tuple, TypeVar

import structlog
from pydantic import BaseModel

from taskflow.history.actions import ActionKind, BaseAction, UnknownActionError
from taskflow.models.domain import Task
from taskflow.workspace.state import WorkspaceState

logger = structlog.get_logger(__name__)

M = TypeVar("M", bound=BaseModel)
Handler = Callable[[BaseAction, WorkspaceState], None]


def _clone(model: M) -> M:
    return model.model_copy(deep=True)


def _without(items: List[M], item_id: str) -> List[M]:
    return [item for item in items if item.id != item_id]


def _replaced(items: List[M], replacement: M, kind: ActionKind) -> Tuple[List[M], bool]:
    """Swap in ``replacement`` by id.

    Returns the new list and whether the target was found. A missing target
    (e.g. a task archived since the action was recorded) leaves the list as is.
    """
    if not any(item.id == replacement.id for item in items):
        logger.warning("reversal_target_missing", kind=kind.value, entity_id=replacement.id)
        return items, False
    return [_clone(replacement) if item.id == replacement.id else item for item in items], True


def _archived_task_ids(state: WorkspaceState) -> Set[str]:
    records = list(state.stale_records) + list(state.done_records)
    return {r.original_task_id for r in records if r.original_task_id is not None}


def _restorable_tasks(state: WorkspaceState, tasks: List[Task], kind: ActionKind) -> List[Task]:
    # Archived tasks stay archived; history never brings them back to life
    archived = _archived_task_ids(state)
    kept = []
    for task in tasks:
        if task.id in archived:
            logger.info("reversal_skipped_archived", kind=kind.value, task_id=task.id)
            continue
        kept.append(_clone(task))
    return kept


def _adjust_completed_count(state: WorkspaceState, topic_id: str, diff: int) -> None:
    state.topics = [
        topic.model_copy(update={"completed_tasks": max(0, topic.completed_tasks + diff)})
        if topic.id == topic_id
        else topic
        for topic in state.topics
    ]


def _set_bio(state: WorkspaceState, topic_id: str, bio: str) -> None:
    state.topics = [
        topic.model_copy(update={"bio": bio}) if topic.id == topic_id else topic
        for topic in state.topics
    ]


# ============================================================================
# Topics
# ============================================================================


def _undo_create_topic(action, state):
    state.topics = _without(state.topics, action.forward.id)


def _redo_create_topic(action, state):
    state.topics = state.topics + [_clone(action.forward)]


def _undo_delete_topic(action, state):
    snapshot = action.reverse
    state.topics = state.topics + [_clone(snapshot.topic)]
    state.tasks = state.tasks + _restorable_tasks(state, snapshot.tasks, action.kind)
    state.milestones = state.milestones + [_clone(m) for m in snapshot.milestones]


def _redo_delete_topic(action, state):
    topic_id = action.forward.topic_id
    state.topics = _without(state.topics, topic_id)
    state.tasks = [t for t in state.tasks if t.topic_id != topic_id]
    state.milestones = [m for m in state.milestones if m.topic_id != topic_id]


def _undo_edit_topic(action, state):
    state.topics, _ = _replaced(state.topics, action.reverse, action.kind)


def _redo_edit_topic(action, state):
    state.topics, _ = _replaced(state.topics, action.forward, action.kind)


def _undo_reorder_topics(action, state):
    state.topics = [_clone(t) for t in action.reverse]


def _redo_reorder_topics(action, state):
    state.topics = [_clone(t) for t in action.forward]


def _undo_update_bio(action, state):
    _set_bio(state, action.reverse.topic_id, action.reverse.bio)


def _redo_update_bio(action, state):
    _set_bio(state, action.forward.topic_id, action.forward.bio)


# ============================================================================
# Tasks
# ============================================================================


def _undo_create_task(action, state):
    state.tasks = _without(state.tasks, action.forward.id)


def _redo_create_task(action, state):
    state.tasks = state.tasks + _restorable_tasks(state, [action.forward], action.kind)


def _undo_delete_task(action, state):
    state.tasks = state.tasks + _restorable_tasks(state, [action.reverse], action.kind)


def _redo_delete_task(action, state):
    state.tasks = _without(state.tasks, action.forward.task_id)


def _undo_edit_task(action, state):
    state.tasks, _ = _replaced(state.tasks, action.reverse, action.kind)


def _redo_edit_task(action, state):
    state.tasks, _ = _replaced(state.tasks, action.forward, action.kind)


def _undo_toggle_task(action, state):
    prior = action.reverse
    state.tasks, found = _replaced(state.tasks, prior, action.kind)
    if found:
        _adjust_completed_count(state, prior.topic_id, 1 if prior.completed else -1)


def _redo_toggle_task(action, state):
    updated = action.forward
    state.tasks, found = _replaced(state.tasks, updated, action.kind)
    if found:
        _adjust_completed_count(state, updated.topic_id, 1 if updated.completed else -1)


# ============================================================================
# Milestones
# ============================================================================


def _undo_create_milestone(action, state):
    state.milestones = _without(state.milestones, action.forward.id)


def _redo_create_milestone(action, state):
    state.milestones = state.milestones + [_clone(action.forward)]


def _undo_delete_milestone(action, state):
    state.milestones = state.milestones + [_clone(action.reverse)]


def _redo_delete_milestone(action, state):
    state.milestones = _without(state.milestones, action.forward.id)


def _undo_edit_milestone(action, state):
    state.milestones, _ = _replaced(state.milestones, action.reverse, action.kind)


def _redo_edit_milestone(action, state):
    state.milestones, _ = _replaced(state.milestones, action.forward, action.kind)


UNDO_HANDLERS: Dict[ActionKind, Handler] = {
    ActionKind.CREATE_TOPIC: _undo_create_topic,
    ActionKind.DELETE_TOPIC: _undo_delete_topic,
    ActionKind.EDIT_TOPIC: _undo_edit_topic,
    ActionKind.REORDER_TOPICS: _undo_reorder_topics,
    ActionKind.CREATE_TASK: _undo_create_task,
    ActionKind.DELETE_TASK: _undo_delete_task,
    ActionKind.EDIT_TASK: _undo_edit_task,
    ActionKind.TOGGLE_TASK: _undo_toggle_task,
    ActionKind.CREATE_MILESTONE: _undo_create_milestone,
    ActionKind.DELETE_MILESTONE: _undo_delete_milestone,
    ActionKind.EDIT_MILESTONE: _undo_edit_milestone,
    ActionKind.UPDATE_BIO: _undo_update_bio,
}

REDO_HANDLERS: Dict[ActionKind, Handler] = {
    ActionKind.CREATE_TOPIC: _redo_create_topic,
    ActionKind.DELETE_TOPIC: _redo_delete_topic,
    ActionKind.EDIT_TOPIC: _redo_edit_topic,
    ActionKind.REORDER_TOPICS: _redo_reorder_topics,
    ActionKind.CREATE_TASK: _redo_create_task,
    ActionKind.DELETE_TASK: _redo_delete_task,
    ActionKind.EDIT_TASK: _redo_edit_task,
    ActionKind.TOGGLE_TASK: _redo_toggle_task,
    ActionKind.CREATE_MILESTONE: _redo_create_milestone,
    ActionKind.DELETE_MILESTONE: _redo_delete_milestone,
    ActionKind.EDIT_MILESTONE: _redo_edit_milestone,
    ActionKind.UPDATE_BIO: _redo_update_bio,
}


def _lookup(table: Dict[ActionKind, Handler], action: BaseAction) -> Handler:
    handler = table.get(getattr(action, "kind", None))
    if handler is None:
        raise UnknownActionError(
            f"No reversal defined for action {action.id} of kind {getattr(action, 'kind', None)!r}"
        )
    return handler


def apply_undo(action: BaseAction, state: WorkspaceState) -> None:
    """Reverse the effect of ``action`` on ``state``.

    Raises:
        UnknownActionError: If the action kind is not in the table
    """
    _lookup(UNDO_HANDLERS, action)(action, state)
    logger.info("undo_applied", kind=action.kind.value, action_id=action.id)


def apply_redo(action: BaseAction, state: WorkspaceState) -> None:
    """Re-apply the effect of ``action`` on ``state``.

    Raises:
        UnknownActionError: If the action kind is not in the table
    """
    _lookup(REDO_HANDLERS, action)(action, state)
    logger.info("redo_applied", kind=action.kind.value, action_id=action.id)
