"""Taskbook CLI - personal task tracker."""

import json
import logging
import sys
from datetime import datetime, time

import click

from .config import load_config
from .core.tasks import (
    Task,
    filter_active,
    filter_by_category,
    filter_completed,
    format_day_label,
    group_by_due_day,
    sort_by_due_date,
)
from .workflows import TaskBook, open_task_book


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
@click.version_option()
def main(debug: bool):
    """Taskbook - personal task tracker."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.DEBUG if debug else logging.WARNING,
    )


def _open() -> TaskBook:
    return open_task_book(load_config())


def _fail(message: str) -> None:
    click.echo(f"Error: {message}", err=True)
    sys.exit(1)


def _warn_on_write_errors(book: TaskBook) -> None:
    """Write failures leave memory intact; tell the user the disk copy is stale."""
    for message in book.write_errors():
        click.echo(f"Warning: changes not saved ({message})", err=True)


def _parse_due(value: str) -> datetime:
    """Accept YYYY-MM-DD (end of day) or YYYY-MM-DD[T ]HH:MM."""
    try:
        if len(value.strip()) == 10:
            return datetime.combine(datetime.fromisoformat(value).date(), time(23, 59))
        return datetime.fromisoformat(value)
    except ValueError:
        raise click.BadParameter(f"invalid date {value!r}, expected YYYY-MM-DD or YYYY-MM-DDTHH:MM")


def _resolve_task(book: TaskBook, task_id: str) -> Task:
    """Find a task by full id or unique prefix."""
    exact = book.tasks.get(task_id)
    if exact:
        return exact
    matches = [t for t in book.tasks.list() if t.id.startswith(task_id)]
    if not matches:
        _fail(f"No task with id {task_id}")
    if len(matches) > 1:
        _fail(f"Task id {task_id} is ambiguous ({len(matches)} matches)")
    return matches[0]


def _resolve_category(book: TaskBook, name: str | None):
    if name is None:
        return None
    category = book.categories.find(name)
    if category is None:
        _fail(f"No category named {name!r}. Run 'taskbook categories add {name}' first.")
    return category


def _task_line(task: Task, book: TaskBook, now: datetime) -> str:
    marker = "x" if task.is_completed else " "
    due = task.due_date.astimezone()
    flag = ""
    if task.is_overdue(now):
        flag = "  OVERDUE"
    elif task.is_due_soon(now, book.due_soon_window):
        flag = "  due soon"
    return (
        f"[{marker}] {task.id[:8]}  {task.title}  ({task.category.name}, "
        f"due {format_day_label(due.date())} {due:%H:%M}){flag}"
    )


def _task_json(task: Task, book: TaskBook, now: datetime) -> dict:
    record = task.to_record()
    record["isOverdue"] = task.is_overdue(now)
    record["isDueSoon"] = task.is_due_soon(now, book.due_soon_window)
    return record


@main.command("list")
@click.option("--completed", is_flag=True, help="Show completed tasks only")
@click.option("--all", "show_all", is_flag=True, help="Show active and completed tasks")
@click.option("--category", default=None, help="Only tasks in this category")
@click.option("--group", is_flag=True, help="Group by due day")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def list_tasks(completed: bool, show_all: bool, category: str | None, group: bool, as_json: bool):
    """List tasks (active by default)."""
    book = _open()
    tasks = list(book.tasks.list())
    if not show_all:
        tasks = filter_completed(tasks) if completed else filter_active(tasks)
    if category:
        tasks = filter_by_category(tasks, category)
    tasks = sort_by_due_date(tasks)
    now = datetime.now().astimezone()

    if as_json:
        if group:
            payload = {
                day: [_task_json(t, book, now) for t in day_tasks]
                for day, day_tasks in group_by_due_day(tasks).items()
            }
        else:
            payload = [_task_json(t, book, now) for t in tasks]
        click.echo(json.dumps(payload, indent=2))
        _warn_on_write_errors(book)
        return

    if not tasks:
        click.echo("No tasks.")
    elif group:
        for i, (day, day_tasks) in enumerate(group_by_due_day(tasks).items()):
            if i:
                click.echo()
            click.echo(f"### {day}")
            for task in day_tasks:
                click.echo(f"  {_task_line(task, book, now)}")
    else:
        for task in tasks:
            click.echo(_task_line(task, book, now))
    _warn_on_write_errors(book)


@main.command()
@click.argument("title")
@click.option("--due", "due", required=True, help="Due date: YYYY-MM-DD or YYYY-MM-DDTHH:MM")
@click.option("--category", "-c", default=None, help="Category name")
def add(title: str, due: str, category: str | None):
    """Add a task."""
    due_date = _parse_due(due)
    book = _open()
    try:
        task = book.tasks.add(title, due_date, _resolve_category(book, category))
    except ValueError as e:
        _fail(str(e))
    click.echo(f"Added {task.id[:8]}: {task.title}")
    _warn_on_write_errors(book)


@main.command()
@click.argument("task_id")
@click.option("--title", default=None, help="New title")
@click.option("--due", "due", default=None, help="New due date")
@click.option("--category", "-c", default=None, help="New category name")
def edit(task_id: str, title: str | None, due: str | None, category: str | None):
    """Edit a task's title, due date or category."""
    due_date = _parse_due(due) if due else None
    book = _open()
    task = _resolve_task(book, task_id)
    new_category = _resolve_category(book, category) or task.category
    try:
        book.tasks.update(task.id, title or task.title, due_date or task.due_date, new_category)
    except ValueError as e:
        _fail(str(e))
    click.echo(f"Updated {task.id[:8]}")
    _warn_on_write_errors(book)


@main.command()
@click.argument("task_id")
def done(task_id: str):
    """Toggle a task's completion."""
    book = _open()
    task = _resolve_task(book, task_id)
    book.tasks.toggle_completion(task.id)
    state = "open" if task.is_completed else "done"
    click.echo(f"Marked {task.id[:8]} {state}")
    _warn_on_write_errors(book)


@main.command("rm")
@click.argument("task_id")
def remove(task_id: str):
    """Delete a task."""
    book = _open()
    task = _resolve_task(book, task_id)
    book.tasks.delete(task.id)
    click.echo(f"Deleted {task.id[:8]}: {task.title}")
    _warn_on_write_errors(book)


@main.group(invoke_without_command=True)
@click.pass_context
def categories(ctx):
    """Show or add categories."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(categories_list)


@categories.command("list")
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def categories_list(as_json: bool = False):
    """List categories."""
    book = _open()
    items = book.categories.list()
    if as_json:
        click.echo(json.dumps([c.to_record() for c in items], indent=2))
    else:
        for category in items:
            click.echo(f"• {category.name}")
    _warn_on_write_errors(book)


@categories.command("add")
@click.argument("name")
def categories_add(name: str):
    """Add a category."""
    book = _open()
    try:
        category = book.categories.add(name)
    except ValueError as e:
        _fail(str(e))
    click.echo(f"Added category {category.name}")
    _warn_on_write_errors(book)
