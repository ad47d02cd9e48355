"""TaskFlow: topics, tasks and milestones with undo/redo and task aging."""

__version__ = "0.1.0"
