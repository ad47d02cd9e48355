"""Command-line interface for TaskFlow."""

import asyncio
import shlex
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

import typer
from rich.console import Console
from rich.table import Table

from taskflow.aging import SweepResult, age_in_days, completed_age_in_days, format_age
from taskflow.history import describe_action
from taskflow.logging_config import configure_logging
from taskflow.models import MilestoneType, Settings
from taskflow.timeline import (
    current_time_context,
    format_date,
    get_week_dates,
    time_to_position,
)
from taskflow.workspace import WorkspaceStore
from taskflow.workspace.controller import WorkspaceController

app = typer.Typer(
    name="taskflow",
    help="TaskFlow - topics, tasks and milestones that age gracefully",
    add_completion=False,
)
console = Console()

E = TypeVar("E")

DATA_DIR_HELP = "Directory holding workspace.json (defaults to TASKFLOW_DATA_DIR or ./.taskflow)"


def _open(data_dir: Optional[Path]) -> Tuple[Settings, WorkspaceStore, WorkspaceController]:
    """Load settings and the workspace, and build a controller over it."""
    settings = Settings()
    if data_dir is not None:
        settings.data_dir = data_dir
    configure_logging(settings.log_level)

    store = WorkspaceStore(settings.data_dir)
    controller = WorkspaceController.from_settings(settings, state=store.load_or_create())
    return settings, store, controller


def _resolve(items: Sequence[E], prefix: str, label: str) -> E:
    """Find the single entity whose id starts with ``prefix``."""
    matches = [item for item in items if item.id.startswith(prefix)]
    if not matches:
        raise ValueError(f"No {label} matches id '{prefix}'")
    if len(matches) > 1:
        raise ValueError(f"Id '{prefix}' is ambiguous ({len(matches)} {label}s match)")
    return matches[0]


def _parse_date(value: Optional[str]) -> datetime:
    if value is None:
        return datetime.now()
    return datetime.fromisoformat(value)


def _print_sweep(result: SweepResult) -> None:
    console.print(
        f"[bold green]✓[/bold green] Archived {len(result.stale_records)} stale "
        f"and {len(result.done_records)} done tasks"
    )


@app.command()
def topics(
    data_dir: Optional[Path] = typer.Option(None, "--data-dir", "-d", help=DATA_DIR_HELP),
) -> None:
    """List topics with their current calendar position."""
    try:
        _, _, controller = _open(data_dir)
        now = datetime.now()

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Id", style="cyan", width=10)
        table.add_column("Name", style="green")
        table.add_column("Icon")
        table.add_column("Done", justify="right", style="yellow")
        table.add_column("Created", style="blue")
        table.add_column("Position", style="white")

        for topic in controller.state.topics:
            context = current_time_context(topic.created_at, now)
            table.add_row(
                topic.id[:8],
                topic.name,
                topic.icon,
                str(topic.completed_tasks),
                topic.created_at.strftime("%Y-%m-%d"),
                f"M{context.current_month} W{context.current_week} D{context.current_day}",
            )

        console.print(table)

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def add_topic(
    name: str = typer.Argument(..., help="Topic name"),
    icon: str = typer.Option("Target", "--icon", "-i", help="Icon name"),
    color: int = typer.Option(0, "--color", "-c", help="Palette index"),
    data_dir: Optional[Path] = typer.Option(None, "--data-dir", "-d", help=DATA_DIR_HELP),
) -> None:
    """Create a topic."""
    try:
        _, store, controller = _open(data_dir)
        topic = controller.create_topic(name, icon=icon, color=color)
        store.save()
        console.print(f"[bold green]✓[/bold green] Created topic [cyan]{topic.id[:8]}[/cyan] {topic.name}")

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def add_task(
    topic_id: str = typer.Argument(..., help="Topic id (or unique prefix)"),
    title: str = typer.Argument(..., help="Task title"),
    description: str = typer.Option("", "--description", help="Task description"),
    data_dir: Optional[Path] = typer.Option(None, "--data-dir", "-d", help=DATA_DIR_HELP),
) -> None:
    """Create a task in a topic."""
    try:
        _, store, controller = _open(data_dir)
        topic = _resolve(controller.state.topics, topic_id, "topic")
        task = controller.create_task(topic.id, title, description)
        store.save()
        console.print(f"[bold green]✓[/bold green] Created task [cyan]{task.id[:8]}[/cyan] {task.title}")

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def toggle(
    task_id: str = typer.Argument(..., help="Task id (or unique prefix)"),
    data_dir: Optional[Path] = typer.Option(None, "--data-dir", "-d", help=DATA_DIR_HELP),
) -> None:
    """Mark a task complete, or reopen it."""
    try:
        _, store, controller = _open(data_dir)
        task = _resolve(controller.state.tasks, task_id, "task")
        updated = controller.toggle_task(task.id)
        store.save()
        state = "completed" if updated.completed else "reopened"
        console.print(f"[bold green]✓[/bold green] Task {updated.title} {state}")

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def tasks(
    topic_id: Optional[str] = typer.Option(None, "--topic", "-t", help="Only show one topic"),
    data_dir: Optional[Path] = typer.Option(None, "--data-dir", "-d", help=DATA_DIR_HELP),
) -> None:
    """List live tasks grouped by age."""
    try:
        _, _, controller = _open(data_dir)
        state = controller.state
        now = datetime.now()
        classifier = controller.sweeper.classifier

        live = state.tasks
        if topic_id:
            topic = _resolve(state.topics, topic_id, "topic")
            live = state.tasks_for_topic(topic.id)

        pending = classifier.classify_pending([t for t in live if not t.completed], now)
        completed = classifier.classify_completed(live, now)

        table = Table(show_header=True, header_style="bold magenta")
        table.add_column("Id", style="cyan", width=10)
        table.add_column("Title", style="white")
        table.add_column("Topic", style="green")
        table.add_column("Age", style="blue")
        table.add_column("Status", style="yellow")

        def topic_name(task_topic_id: str) -> str:
            topic = state.find_topic(task_topic_id)
            return topic.name if topic else "-"

        for label, bucket in (("fresh", pending.fresh), ("stale", pending.stale)):
            for task in bucket:
                table.add_row(
                    task.id[:8],
                    task.title,
                    topic_name(task.topic_id),
                    format_age(age_in_days(task, now)),
                    label,
                )

        for label, bucket in (("done", completed.recent), ("done (old)", completed.old)):
            for task in bucket:
                age = completed_age_in_days(task, now)
                table.add_row(
                    task.id[:8],
                    task.title,
                    topic_name(task.topic_id),
                    format_age(age) if age is not None else "-",
                    label,
                )

        console.print(table)

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def sweep(
    data_dir: Optional[Path] = typer.Option(None, "--data-dir", "-d", help=DATA_DIR_HELP),
) -> None:
    """Archive stale and old completed tasks now."""
    try:
        _, store, controller = _open(data_dir)
        result = controller.sweep()
        store.save()
        _print_sweep(result)

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def watch(
    interval: Optional[float] = typer.Option(None, "--interval", help="Seconds between sweeps (defaults to settings)"),
    ticks: Optional[int] = typer.Option(None, "--ticks", "-n", help="Stop after this many sweeps"),
    data_dir: Optional[Path] = typer.Option(None, "--data-dir", "-d", help=DATA_DIR_HELP),
) -> None:
    """Keep sweeping the workspace on a fixed interval."""
    try:
        settings, store, controller = _open(data_dir)
        interval_seconds = interval if interval is not None else settings.sweep_interval_seconds

        def on_sweep(result: SweepResult) -> None:
            if result.archived:
                store.save()
                _print_sweep(result)

        console.print(f"[bold blue]Sweeping every {interval_seconds:g}s[/bold blue] (Ctrl+C to stop)")
        asyncio.run(
            controller.sweeper.run(
                controller.state,
                interval_seconds=interval_seconds,
                max_ticks=ticks,
                on_sweep=on_sweep,
            )
        )

    except KeyboardInterrupt:
        console.print("[yellow]Stopped[/yellow]")
    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def archive(
    data_dir: Optional[Path] = typer.Option(None, "--data-dir", "-d", help=DATA_DIR_HELP),
) -> None:
    """Show archived stale and done tasks."""
    try:
        _, _, controller = _open(data_dir)
        state = controller.state

        stale_table = Table(title="Stale Tasks", show_header=True, header_style="bold magenta")
        stale_table.add_column("Title", style="white")
        stale_table.add_column("Topic", style="green")
        stale_table.add_column("Created", style="blue")
        stale_table.add_column("Went stale", style="yellow")
        for record in state.stale_records:
            stale_table.add_row(
                record.title,
                record.topic_name,
                record.created_at.strftime("%Y-%m-%d"),
                record.stale_date.strftime("%Y-%m-%d"),
            )

        done_table = Table(title="Done Tasks", show_header=True, header_style="bold magenta")
        done_table.add_column("Title", style="white")
        done_table.add_column("Topic", style="green")
        done_table.add_column("Completed", style="blue")
        done_table.add_column("Archived", style="yellow")
        for record in state.done_records:
            done_table.add_row(
                record.title,
                record.topic_name,
                record.completed_at.strftime("%Y-%m-%d"),
                record.archived_date.strftime("%Y-%m-%d"),
            )

        console.print(stale_table)
        console.print(done_table)

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def position(
    topic_id: str = typer.Argument(..., help="Topic id (or unique prefix)"),
    date: Optional[str] = typer.Option(None, "--date", help="ISO date to locate (defaults to now)"),
    data_dir: Optional[Path] = typer.Option(None, "--data-dir", "-d", help=DATA_DIR_HELP),
) -> None:
    """Show where a date falls in a topic's calendar."""
    try:
        _, _, controller = _open(data_dir)
        topic = _resolve(controller.state.topics, topic_id, "topic")
        moment = _parse_date(date)
        pos = time_to_position(moment, topic.created_at)

        console.print(f"[bold]{topic.name}[/bold] on {moment.strftime('%Y-%m-%d')}")
        console.print(f"[cyan]Month:[/cyan] {pos.month}")
        console.print(f"[cyan]Week:[/cyan] {pos.week}")
        console.print(f"[cyan]Day:[/cyan] {pos.day}")

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def calendar(
    topic_id: str = typer.Argument(..., help="Topic id (or unique prefix)"),
    month: Optional[int] = typer.Option(None, "--month", "-m", help="Topic month (defaults to current)"),
    week: Optional[int] = typer.Option(None, "--week", "-w", help="Topic week 1-4 (defaults to current)"),
    data_dir: Optional[Path] = typer.Option(None, "--data-dir", "-d", help=DATA_DIR_HELP),
) -> None:
    """Show one week of a topic's calendar with completions per day."""
    try:
        _, _, controller = _open(data_dir)
        state = controller.state
        topic = _resolve(state.topics, topic_id, "topic")

        context = current_time_context(topic.created_at)
        month = month if month is not None else context.current_month
        week = week if week is not None else context.current_week
        dates = get_week_dates(month, week, topic.created_at)

        table = Table(
            title=f"{topic.name} - Month {month}, Week {week}",
            show_header=True,
            header_style="bold magenta",
        )
        table.add_column("Day", justify="right", style="cyan")
        table.add_column("Date", style="blue")
        table.add_column("Completed", style="green")

        completions = [
            t for t in state.tasks_for_topic(topic.id)
            if t.completed and t.completion_month == month and t.completion_week == week
        ]
        for day, day_date in enumerate(dates, start=1):
            titles = [t.title for t in completions if t.completion_day == day]
            table.add_row(str(day), format_date(day_date), ", ".join(titles) or "-")

        console.print(table)

        milestones = [
            m for m in state.milestones_for_topic(topic.id)
            if m.month == month and (m.type == MilestoneType.MONTHLY or m.week == week)
        ]
        if milestones:
            console.print("\n[bold]Milestones:[/bold]")
            for milestone in sorted(milestones, key=lambda m: (m.type.value, m.order)):
                console.print(f"  • {milestone.title} [dim]({milestone.type.value})[/dim]")

    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


# ============================================================================
# Interactive shell
# ============================================================================

SHELL_HELP = """Commands:
  topic NAME                  create a topic
  task TOPIC TITLE            create a task
  edit-task TASK TITLE        rename a task
  delete-task TASK            delete a task
  toggle TASK                 complete or reopen a task
  rename TOPIC NAME           rename a topic
  delete-topic TOPIC          delete a topic with its tasks and milestones
  move TOPIC TARGET           move a topic to the target's position
  bio TOPIC TEXT              set a topic bio
  milestone TOPIC TITLE [weekly]
  rename-milestone MILESTONE TITLE
  delete-milestone MILESTONE
  undo | redo | history | list | sweep | help | quit"""


def _shell_commands(controller: WorkspaceController) -> Dict[str, Callable[[List[str]], str]]:
    state = controller.state

    def topic(args: List[str]) -> str:
        return _resolve(state.topics, args[0], "topic").id

    def task(args: List[str]) -> str:
        return _resolve(state.tasks, args[0], "task").id

    def milestone(args: List[str]) -> str:
        return _resolve(state.milestones, args[0], "milestone").id

    def create_milestone(args: List[str]) -> str:
        kind = MilestoneType.WEEKLY if args[2:3] == ["weekly"] else MilestoneType.MONTHLY
        created = controller.create_milestone(topic(args), args[1], kind)
        return f"Created {kind.value} milestone {created.id[:8]}"

    def move(args: List[str]) -> str:
        dragged = topic(args)
        target = topic(args[1:])
        return "Moved" if controller.reorder_topics(dragged, target) else "Nothing to move"

    def undo(args: List[str]) -> str:
        action = controller.undo()
        return f"Undid: {describe_action(action)}" if action else "Nothing to undo"

    def redo(args: List[str]) -> str:
        action = controller.redo()
        return f"Redid: {describe_action(action)}" if action else "Nothing to redo"

    def history(args: List[str]) -> str:
        lines = [f"  {describe_action(a)}" for a in reversed(controller.log.undo_actions)]
        lines.append(f"Next undo: {controller.log.describe_last_undo() or '-'}")
        lines.append(f"Next redo: {controller.log.describe_next_redo() or '-'}")
        return "\n".join(lines)

    def listing(args: List[str]) -> str:
        lines = []
        for t in state.topics:
            lines.append(f"{t.id[:8]} {t.name} ({t.completed_tasks} done)")
            for item in state.tasks_for_topic(t.id):
                mark = "x" if item.completed else " "
                lines.append(f"  [{mark}] {item.id[:8]} {item.title}")
        return "\n".join(lines) or "No topics"

    def delete_task(args: List[str]) -> str:
        controller.delete_task(task(args))
        return "Deleted task"

    def delete_topic(args: List[str]) -> str:
        controller.delete_topic(topic(args))
        return "Deleted topic"

    def delete_milestone(args: List[str]) -> str:
        controller.delete_milestone(milestone(args))
        return "Deleted milestone"

    def bio(args: List[str]) -> str:
        controller.update_bio(topic(args), " ".join(args[1:]))
        return "Bio updated"

    def sweep_now(args: List[str]) -> str:
        result = controller.sweep()
        return f"Archived {len(result.stale_records)} stale and {len(result.done_records)} done tasks"

    return {
        "topic": lambda a: f"Created topic {controller.create_topic(' '.join(a)).id[:8]}",
        "task": lambda a: f"Created task {controller.create_task(topic(a), ' '.join(a[1:])).id[:8]}",
        "edit-task": lambda a: f"Renamed to {controller.edit_task(task(a), title=' '.join(a[1:])).title}",
        "delete-task": delete_task,
        "toggle": lambda a: "Completed" if controller.toggle_task(task(a)).completed else "Reopened",
        "rename": lambda a: f"Renamed to {controller.edit_topic(topic(a), name=' '.join(a[1:])).name}",
        "delete-topic": delete_topic,
        "move": move,
        "bio": bio,
        "milestone": create_milestone,
        "rename-milestone": lambda a: f"Renamed to {controller.edit_milestone(milestone(a), ' '.join(a[1:])).title}",
        "delete-milestone": delete_milestone,
        "undo": undo,
        "redo": redo,
        "history": history,
        "list": listing,
        "sweep": sweep_now,
        "help": lambda a: SHELL_HELP,
    }


@app.command()
def shell(
    data_dir: Optional[Path] = typer.Option(None, "--data-dir", "-d", help=DATA_DIR_HELP),
) -> None:
    """Interactive session with undo and redo.

    The undo history lives only as long as the session; the workspace is
    saved after every command.
    """
    try:
        _, store, controller = _open(data_dir)
    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    commands = _shell_commands(controller)
    console.print("[bold]TaskFlow shell[/bold] - type 'help' for commands")

    while True:
        try:
            line = console.input("taskflow> ")
        except EOFError:
            break

        try:
            words = shlex.split(line)
        except ValueError as e:
            console.print(f"[bold red]Error:[/bold red] {e}")
            continue
        if not words:
            continue

        name, args = words[0], words[1:]
        if name in ("quit", "exit"):
            break

        handler = commands.get(name)
        if handler is None:
            console.print(f"[yellow]Unknown command:[/yellow] {name}")
            continue

        try:
            # Output may contain user text and "[x]" markers, not markup
            console.print(handler(args), markup=False, highlight=False)
        except IndexError:
            console.print(f"[yellow]Missing arguments for {name}[/yellow]")
            continue
        except ValueError as e:
            console.print(f"[bold red]Error:[/bold red] {e}")
            continue

        store.save()


@app.command()
def version() -> None:
    """Show version information."""
    from taskflow import __version__

    console.print(f"[bold]TaskFlow[/bold] version {__version__}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
